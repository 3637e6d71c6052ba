"""
Debug log tokenizer.

Splits raw log text into LogLine records. Lines that do not match the event
grammar are skipped (they stay available through TokenizedLog.raw_lines for
continuation lookahead, e.g. governor limit blocks).
"""

import logging
from datetime import timedelta

from apexlens.services.parser.constants import LOG_LINE_PATTERN
from apexlens.services.parser.types import LogLine, TokenizedLog

logger = logging.getLogger(__name__)


def parse_timestamp(text: str) -> timedelta | None:
    """Parse an "HH:MM:SS.fff..." time of day into an offset from midnight."""
    try:
        clock, _, fraction = text.partition(".")
        hours, minutes, seconds = (int(part) for part in clock.split(":"))
    except ValueError:
        return None
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    # Fraction may carry more than microsecond precision
    micros = int((fraction + "000000")[:6]) if fraction else 0
    return timedelta(hours=hours, minutes=minutes, seconds=seconds, microseconds=micros)


def tokenize_line(raw: str, line_number: int) -> LogLine | None:
    """Tokenize one source line, or return None when it is not an event line."""
    line = raw.strip()
    if not line:
        return None
    match = LOG_LINE_PATTERN.match(line)
    if not match:
        return None
    timestamp = parse_timestamp(match.group("time"))
    if timestamp is None:
        return None
    rest = match.group("rest")
    return LogLine(
        timestamp=timestamp,
        timestamp_text=match.group("time"),
        ticks=int(match.group("ticks")),
        event_type=match.group("event"),
        details=tuple(rest.split("|")) if rest is not None else (),
        line_number=line_number,
    )


def tokenize(content: str) -> TokenizedLog:
    """
    Tokenize a complete debug log.

    Args:
        content: Raw log text

    Returns:
        TokenizedLog; `is_empty` is True when no line matched the grammar
    """
    raw_lines = tuple(content.splitlines()) if content else ()
    lines: list[LogLine] = []
    header: list[str] = []

    for index, raw in enumerate(raw_lines):
        log_line = tokenize_line(raw, index + 1)
        if log_line is not None:
            lines.append(log_line)
        elif not lines and raw.strip():
            header.append(raw.strip())

    logger.debug(f"Tokenized {len(lines)} of {len(raw_lines)} lines")
    return TokenizedLog(lines=tuple(lines), header_lines=tuple(header), raw_lines=raw_lines)
