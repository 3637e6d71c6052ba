"""
Tests for stack depth risk estimation.

Tests cover:
- Risk tiers at the documented thresholds
- Loop pattern detection and frames-per-call rules
- Debug overhead at FINEST verbosity
- Depth never going negative
"""

from apexlens.services.parser.stack_depth import (
    analyze_stack_depth,
    estimate_frames_per_call,
    risk_level_for,
)
from apexlens.services.parser.tokenizer import tokenize
from apexlens.services.parser.types import RiskLevel
from tests.helpers.log_builder import LogBuilder


def _nested(depth: int, header: str | None = None) -> LogBuilder:
    builder = LogBuilder(header=header) if header else LogBuilder()
    for i in range(depth):
        builder.method_entry(f"Deep.level{i}()")
    for i in reversed(range(depth)):
        builder.method_exit(f"Deep.level{i}()")
    return builder


def _analyze(builder: LogBuilder):
    log = tokenize(builder.build())
    return analyze_stack_depth(log.lines, log.header_lines)


class TestRiskLevels:
    """Tests for risk_level_for() and end-to-end tiers."""

    def test_depth_850_is_critical(self) -> None:
        """Max depth 850, no loops, no debug overhead: Critical."""
        result = _analyze(_nested(850))

        assert result.max_depth == 850
        assert result.loop_patterns == []
        assert result.debug_overhead_frames == 0
        assert result.estimated_total_frames == 850
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.method_at_max_depth == "Deep.level849()"

    def test_depth_300_is_safe(self) -> None:
        """Max depth 300 sits on the Moderate boundary and stays Safe."""
        result = _analyze(_nested(300))

        assert result.estimated_total_frames == 300
        assert result.risk_level == RiskLevel.SAFE

    def test_thresholds(self) -> None:
        """Tiers are strictly greater-than comparisons."""
        assert risk_level_for(301) == RiskLevel.MODERATE
        assert risk_level_for(600) == RiskLevel.MODERATE
        assert risk_level_for(601) == RiskLevel.WARNING
        assert risk_level_for(800) == RiskLevel.WARNING
        assert risk_level_for(801) == RiskLevel.CRITICAL


class TestLoopPatterns:
    """Tests for loop pattern detection."""

    def test_frequent_methods_become_loop_patterns(self) -> None:
        """Methods entered more than ten times add call_count x frames_per_call."""
        builder = LogBuilder().code_unit_started("Outer")
        for _ in range(12):
            builder.method_entry("AccountTriggerHandler.handle()").method_exit("AccountTriggerHandler.handle()")
        for _ in range(10):
            builder.method_entry("Util.format()").method_exit("Util.format()")
        builder.code_unit_finished("Outer")

        result = _analyze(builder)

        (pattern,) = result.loop_patterns
        assert pattern.method_name == "AccountTriggerHandler.handle()"
        assert pattern.call_count == 12
        assert pattern.frames_per_call == 4
        assert pattern.total_frames == 48
        assert result.max_depth == 2
        assert result.estimated_total_frames == 50

    def test_frames_per_call_rules_are_ordered(self) -> None:
        """The first matching substring wins, case-insensitively."""
        assert estimate_frames_per_call("OrderTriggerHandler.run()") == 4
        assert estimate_frames_per_call("EventDispatch.send()") == 3
        assert estimate_frames_per_call("AccountSelector.byId()") == 2
        assert estimate_frames_per_call("Util.format()") == 1


class TestDebugOverhead:
    """Tests for FINEST debug overhead."""

    def test_finest_header_adds_overhead(self) -> None:
        """Overhead is entry count // 10 when APEX_CODE is at FINEST."""
        result = _analyze(_nested(25, header="64.0 APEX_CODE,FINEST;DB,INFO"))

        assert result.debug_overhead_frames == 2
        assert result.estimated_total_frames == 27

    def test_exit_without_entry_does_not_go_negative(self) -> None:
        """Depth is floored at zero."""
        builder = LogBuilder().method_exit("Orphan.exit()").method_exit("Orphan.exit()").method_entry("A.b()")

        result = _analyze(builder)

        assert result.max_depth == 1
