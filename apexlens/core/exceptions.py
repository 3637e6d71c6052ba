"""Exceptions for the trace analysis engine."""


class TraceAnalysisError(Exception):
    """Base error for trace analysis."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LogReadError(TraceAnalysisError):
    """A log source could not be read.

    The parser itself never raises this; it belongs to the boundary where a
    file path is turned into text. Folder scans catch it and fall back to
    partial metadata.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")
