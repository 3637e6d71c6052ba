"""
Fast metadata scanner package.

Summarizes debug logs from bounded head/tail windows, without building an
execution tree, and classifies their execution context.

Module structure:
- scanner.py: Text, file and folder entry points
- context.py: Execution context detection
- constants.py: Patterns, windows, record id prefixes, context keywords
- types.py: TraceMetadata and ExecutionContext
"""

from apexlens.services.metadata.context import detect_execution_context
from apexlens.services.metadata.scanner import (
    extract_metadata,
    extract_metadata_from_file,
    is_valid_record_id,
    looks_like_salesforce_log,
    read_log_text,
    scan_directory,
)
from apexlens.services.metadata.types import ExecutionContext, TraceMetadata

__all__ = [
    # Entry points
    "extract_metadata",
    "extract_metadata_from_file",
    "read_log_text",
    "scan_directory",
    "looks_like_salesforce_log",
    "is_valid_record_id",
    "detect_execution_context",
    # Types
    "ExecutionContext",
    "TraceMetadata",
]
