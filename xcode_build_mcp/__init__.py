"""Xcode build and test output interpretation, served over MCP"""

__version__ = "1.0.0"
