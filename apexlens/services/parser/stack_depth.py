"""
Stack depth risk estimation.

Runs its own pass over the tokenized lines, independent of the execution
tree, and estimates how close the transaction came to the platform's call
stack ceiling. Frames-per-call and debug overhead are heuristic proxies; the
log never records real frame counts.
"""

from collections import Counter

from apexlens.config import settings
from apexlens.services.parser.constants import (
    CODE_UNIT_STARTED,
    DEBUG_OVERHEAD_DIVISOR,
    DEFAULT_FRAMES_PER_CALL,
    DEPTH_ENTRY_EVENTS,
    DEPTH_EXIT_EVENTS,
    FRAMES_PER_CALL_RULES,
    MAX_VERBOSITY_PATTERN,
    METHOD_ENTRY,
    RISK_CRITICAL_FRAMES,
    RISK_MODERATE_FRAMES,
    RISK_WARNING_FRAMES,
)
from apexlens.services.parser.names import clean_code_unit_name, method_entry_name
from apexlens.services.parser.types import (
    LogLine,
    LoopMethodPattern,
    RiskLevel,
    StackDepthAnalysis,
)


def estimate_frames_per_call(method_name: str) -> int:
    """Look up the frames-per-call estimate for a method name."""
    lowered = method_name.lower()
    for substring, frames in FRAMES_PER_CALL_RULES:
        if substring in lowered:
            return frames
    return DEFAULT_FRAMES_PER_CALL


def risk_level_for(total_frames: int) -> RiskLevel:
    """Map an estimated frame count to a risk tier."""
    if total_frames > RISK_CRITICAL_FRAMES:
        return RiskLevel.CRITICAL
    if total_frames > RISK_WARNING_FRAMES:
        return RiskLevel.WARNING
    if total_frames > RISK_MODERATE_FRAMES:
        return RiskLevel.MODERATE
    return RiskLevel.SAFE


def has_max_verbosity(header_lines: tuple[str, ...] | list[str]) -> bool:
    """True when the log header requests APEX_CODE at FINEST."""
    return any(MAX_VERBOSITY_PATTERN.search(line) for line in header_lines)


def _entry_name(line: LogLine) -> str:
    if line.event_type == CODE_UNIT_STARTED:
        return clean_code_unit_name(line.details)
    return method_entry_name(line.details)


def analyze_stack_depth(
    lines: tuple[LogLine, ...] | list[LogLine],
    header_lines: tuple[str, ...] | list[str] = (),
    loop_threshold: int | None = None,
) -> StackDepthAnalysis:
    """
    Estimate call stack usage for one log.

    Args:
        lines: Tokenized log lines
        header_lines: Non-event lines preceding the first event
        loop_threshold: Calls above which a method counts as a loop pattern

    Returns:
        StackDepthAnalysis with max depth, loop patterns and a risk tier
    """
    threshold = loop_threshold if loop_threshold is not None else settings.loop_call_threshold

    depth = 0
    max_depth = 0
    method_at_max = ""
    entry_count = 0
    call_counts: Counter[str] = Counter()

    for line in lines:
        event = line.event_type
        if event in DEPTH_ENTRY_EVENTS:
            depth += 1
            entry_count += 1
            name = _entry_name(line)
            if event == METHOD_ENTRY:
                call_counts[name] += 1
            if depth > max_depth:
                max_depth = depth
                method_at_max = name
        elif event in DEPTH_EXIT_EVENTS:
            depth = max(0, depth - 1)

    loop_patterns = [
        LoopMethodPattern(
            method_name=name,
            call_count=count,
            frames_per_call=estimate_frames_per_call(name),
        )
        for name, count in call_counts.most_common()
        if count > threshold
    ]

    debug_overhead = entry_count // DEBUG_OVERHEAD_DIVISOR if has_max_verbosity(header_lines) else 0
    total = max_depth + sum(p.total_frames for p in loop_patterns) + debug_overhead

    return StackDepthAnalysis(
        max_depth=max_depth,
        method_at_max_depth=method_at_max,
        loop_patterns=loop_patterns,
        debug_overhead_frames=debug_overhead,
        estimated_total_frames=total,
        risk_level=risk_level_for(total),
    )
