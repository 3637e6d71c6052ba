"""
Fast metadata scanner.

Pulls a lightweight summary out of a debug log without building an execution
tree. Only a head window and a tail window of the file are examined, so a
folder-wide scan stays far cheaper than full parsing; the scanner is the gate
used to decide which logs deserve a full parse.
"""

import logging
from datetime import date, datetime, timedelta
from pathlib import Path

from apexlens.config import settings
from apexlens.core.exceptions import LogReadError
from apexlens.services.metadata.constants import (
    CODE_UNIT_PATTERN,
    CODE_UNIT_WINDOW,
    ERROR_PATTERN,
    EXECUTION_FINISHED_PATTERN,
    EXECUTION_STARTED_PATTERN,
    EXECUTION_STARTED_WINDOW,
    FIRST_EVENT_TIME_PATTERN,
    HEADER_MARKERS,
    LIMIT_BLOCK_LINES,
    LIMIT_COUNTER_RULES,
    LIMIT_MARKER,
    LIMIT_USED_PATTERN,
    LOG_EXTENSIONS,
    LOG_ID_FILE_PREFIX,
    LOG_ID_STRIP_PREFIX,
    RECORD_ID_PATTERN,
    RECORD_ID_PREFIXES,
    RECORD_ID_SOURCE_EVENTS,
    RECORD_ID_WINDOW,
    SNIFF_LINES,
    USER_INFO_PATTERN,
    USER_WINDOW,
)
from apexlens.services.metadata.context import detect_execution_context
from apexlens.services.metadata.types import TraceMetadata
from apexlens.services.parser.constants import DEFAULT_NAMESPACE, LOG_LINE_PATTERN
from apexlens.services.parser.names import clean_code_unit_name, method_name_from_code_unit
from apexlens.services.parser.tokenizer import parse_timestamp

logger = logging.getLogger(__name__)

_ONE_DAY_MS = 24 * 60 * 60 * 1000.0


def is_valid_record_id(candidate: str) -> bool:
    """15/18 characters starting with a known object key prefix (case-insensitive)."""
    if len(candidate) not in (15, 18):
        return False
    lowered = candidate.lower()
    return any(lowered.startswith(prefix.lower()) for prefix in RECORD_ID_PREFIXES)


def log_id_from_path(file_path: str) -> str:
    """File name without extension or the "apex-" download prefix."""
    if not file_path:
        return ""
    return Path(file_path).stem.replace(LOG_ID_STRIP_PREFIX, "")


def _find_time(lines: list[str], pattern) -> timedelta | None:
    for line in lines:
        match = pattern.search(line)
        if match:
            return parse_timestamp(match.group(1))
    return None


def _extract_user(metadata: TraceMetadata, head: list[str]) -> None:
    for line in head[:USER_WINDOW]:
        match = USER_INFO_PATTERN.search(line)
        if match:
            metadata.user_id = match.group(1)
            metadata.user_name = match.group(2)
            return


def _extract_code_unit(metadata: TraceMetadata, head: list[str]) -> None:
    for line in head[:CODE_UNIT_WINDOW]:
        match = CODE_UNIT_PATTERN.search(line)
        if match:
            metadata.code_unit_name = clean_code_unit_name(match.group(1).split("|"))
            metadata.method_name = method_name_from_code_unit(metadata.code_unit_name)
            return


def _extract_limits(metadata: TraceMetadata, tail: list[str]) -> None:
    """Read used counts from the first (default) limit block in the tail window.

    The block ends at the next event line, so a managed package block that
    follows it never overwrites the default counters.
    """
    for index, line in enumerate(tail):
        if LIMIT_MARKER not in line or DEFAULT_NAMESPACE not in line:
            continue
        for limit_line in tail[index + 1 : index + 1 + LIMIT_BLOCK_LINES]:
            if LOG_LINE_PATTERN.match(limit_line.strip()):
                break
            for substring, attr in LIMIT_COUNTER_RULES:
                if substring in limit_line:
                    match = LIMIT_USED_PATTERN.search(limit_line)
                    if match:
                        setattr(metadata, attr, int(match.group(1)))
                    break
        return


def _extract_record_id(head: list[str]) -> str:
    for line in head[:RECORD_ID_WINDOW]:
        if not any(event in line for event in RECORD_ID_SOURCE_EVENTS):
            continue
        for match in RECORD_ID_PATTERN.finditer(line):
            if is_valid_record_id(match.group(1)):
                return match.group(1)
    return ""


def extract_metadata(
    text: str,
    file_path: str = "",
    log_date: date | None = None,
    fallback_timestamp: datetime | None = None,
) -> TraceMetadata:
    """
    Summarize a debug log from its head and tail windows.

    Args:
        text: Raw log text
        file_path: Source path, used for the log id
        log_date: Calendar date to attach to the log's time of day (defaults to today)
        fallback_timestamp: Timestamp used when the log carries no event time
            (defaults to midnight of `log_date`)

    Returns:
        TraceMetadata; fields that could not be found keep their defaults
    """
    day = log_date or date.today()
    midnight = datetime.combine(day, datetime.min.time())
    metadata = TraceMetadata(file_path=file_path, log_id=log_id_from_path(file_path))

    lines = text.splitlines()
    head = lines[: settings.metadata_head_lines]
    tail = lines[max(0, len(lines) - settings.metadata_tail_lines) :]

    _extract_user(metadata, head)

    started = _find_time(head[:EXECUTION_STARTED_WINDOW], EXECUTION_STARTED_PATTERN)
    finished = _find_time(tail, EXECUTION_FINISHED_PATTERN)
    if started is not None and finished is not None:
        duration = (finished - started) / timedelta(milliseconds=1)
        if duration < 0:
            duration += _ONE_DAY_MS
        metadata.duration_ms = duration

    time_of_day = started if started is not None else _find_time(head, FIRST_EVENT_TIME_PATTERN)
    if time_of_day is not None:
        metadata.timestamp = midnight + time_of_day
    else:
        metadata.timestamp = fallback_timestamp or midnight

    _extract_code_unit(metadata, head)
    _extract_limits(metadata, tail)
    metadata.has_errors = any(ERROR_PATTERN.search(line) for line in head + tail)
    metadata.record_id = _extract_record_id(head)
    metadata.context = detect_execution_context(head, metadata.code_unit_name, metadata.method_name)

    return metadata


def read_log_text(path: str | Path) -> str:
    """
    Read a log file as text.

    Raises:
        LogReadError: If the file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise LogReadError(str(path), e.strerror or str(e)) from e


def extract_metadata_from_file(path: str | Path) -> TraceMetadata:
    """
    Summarize a log file. Never raises.

    The file modification time supplies the calendar date. An unreadable file
    yields partial metadata whose method name carries the reason.
    """
    file_path = str(path)
    try:
        modified = datetime.fromtimestamp(Path(path).stat().st_mtime)
    except OSError:
        modified = None

    try:
        text = read_log_text(path)
    except LogReadError as e:
        logger.warning(e.message)
        return TraceMetadata(
            file_path=file_path,
            log_id=log_id_from_path(file_path),
            timestamp=modified or datetime.min,
            method_name=f"Error reading log: {e.reason}",
        )

    return extract_metadata(
        text,
        file_path=file_path,
        log_date=modified.date() if modified else None,
        fallback_timestamp=modified,
    )


def looks_like_salesforce_log(path: str | Path) -> bool:
    """Peek at the first lines of an extensionless file for debug log markers."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for _ in range(SNIFF_LINES):
                line = f.readline()
                if not line:
                    break
                if any(marker in line for marker in HEADER_MARKERS):
                    return True
    except OSError as e:
        logger.debug(f"Could not sniff {path}: {e}")
    return False


def is_log_file(path: Path) -> bool:
    """Accept .log/.txt files, and extensionless files that look like debug logs."""
    suffix = path.suffix.lower()
    if suffix in LOG_EXTENSIONS:
        return True
    if suffix:
        return False
    return path.stem.upper().startswith(LOG_ID_FILE_PREFIX) or looks_like_salesforce_log(path)


def scan_directory(directory: str | Path) -> list[TraceMetadata]:
    """
    Scan a folder tree for debug logs and summarize each one.

    Args:
        directory: Folder to scan recursively

    Returns:
        TraceMetadata per accepted file, sorted by timestamp; empty when the
        folder does not exist
    """
    root = Path(directory)
    if not root.is_dir():
        logger.info(f"Log folder not found: {root}")
        return []

    candidates = sorted(p for p in root.rglob("*") if p.is_file())
    log_files = [p for p in candidates if is_log_file(p)]
    logger.info(f"Scanning {root}: {len(log_files)} of {len(candidates)} file(s) look like debug logs")

    results = [extract_metadata_from_file(p) for p in log_files]
    results.sort(key=lambda m: m.timestamp)
    return results
