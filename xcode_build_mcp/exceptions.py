#!/usr/bin/env python3
"""Exception types shared by the server and its tools"""


class XCodeMCPError(Exception):
    def __init__(self, message, code=None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class AccessDeniedError(XCodeMCPError):
    pass


class InvalidParameterError(XCodeMCPError):
    pass


class XcresultQueryError(XCodeMCPError):
    """xcresulttool could not be run, exited non-zero, or timed out."""
    pass
