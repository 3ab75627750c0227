"""MCP tools - importing this package registers them with the server"""

from xcode_build_mcp.tools import classify_build_failure, parse_build_output, parse_test_results  # noqa: F401
