# Services package

from apexlens.services.grouping import TransactionGrouper, group_related_logs
from apexlens.services.metadata import extract_metadata, extract_metadata_from_file, scan_directory
from apexlens.services.parser import LogParserService, parse_log

__all__ = [
    # Single-trace analysis
    "LogParserService",
    "parse_log",
    # Folder scan
    "extract_metadata",
    "extract_metadata_from_file",
    "scan_directory",
    # Correlation
    "TransactionGrouper",
    "group_related_logs",
]
