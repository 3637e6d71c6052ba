"""
Tests for method statistics and trace diagnostics.

Tests cover:
- Query normalization and duplicate grouping
- Method statistics over closed nodes
- Summary wording
- Limit, trigger recursion and stack depth issues
- Stack depth recommendations by risk tier
"""

from apexlens.services.parser.diagnostics import (
    detect_issues,
    find_duplicate_queries,
    generate_recommendations,
    generate_summary,
    normalize_query,
)
from apexlens.services.parser.statistics import calculate_method_statistics
from apexlens.services.parser.tokenizer import tokenize
from apexlens.services.parser.tree_builder import build_execution_tree
from apexlens.services.parser.types import (
    DatabaseOperation,
    GovernorLimitSnapshot,
    LoopMethodPattern,
    OperationKind,
    RiskLevel,
    StackDepthAnalysis,
    TraceAnalysis,
)
from tests.helpers.log_builder import LogBuilder


def _soql(query: str, rows: int = 1) -> DatabaseOperation:
    return DatabaseOperation(kind=OperationKind.SOQL, line_number=1, query=query, rows_affected=rows)


class TestQueryShapes:
    """Tests for normalize_query() and find_duplicate_queries()."""

    def test_normalizes_literals(self) -> None:
        """String and numeric literals collapse to placeholders."""
        query = "SELECT Id FROM Case WHERE Subject = 'Help' AND Priority__c > 3 LIMIT 10"

        assert normalize_query(query) == "SELECT Id FROM Case WHERE Subject = '?' AND Priority__c > ? LIMIT ?"

    def test_groups_by_shape(self) -> None:
        """Only shapes executed more than once are reported, most frequent first."""
        ops = [
            _soql("SELECT Id FROM Account WHERE Id = '001A'", rows=1),
            _soql("SELECT Name FROM User"),
            _soql("SELECT Id FROM Account WHERE Id = '001B'", rows=2),
            _soql("SELECT Id FROM Contact LIMIT 5"),
            _soql("SELECT Id FROM Contact LIMIT 50"),
            _soql("SELECT Id FROM Account WHERE Id = '001C'", rows=3),
        ]

        duplicates = find_duplicate_queries(ops)

        assert [d.execution_count for d in duplicates] == [3, 2]
        assert duplicates[0].total_rows == 6
        assert duplicates[0].example_query == "SELECT Id FROM Account WHERE Id = '001A'"


class TestMethodStatistics:
    """Tests for calculate_method_statistics()."""

    def test_aggregates_closed_methods(self) -> None:
        """Call counts and min/max/average cover closed nodes only."""
        builder = (
            LogBuilder()
            .code_unit_started("Outer")
            .method_entry("A.run()")
            .advance(10)
            .method_exit("A.run()")
            .method_entry("A.run()")
            .advance(30)
            .method_exit("A.run()")
            .method_entry("B.open()")
        )
        root = build_execution_tree(tokenize(builder.build()).lines).root

        stats = calculate_method_statistics(root)

        assert list(stats) == ["A.run()"]
        run = stats["A.run()"]
        assert run.call_count == 2
        assert run.min_duration_ms == 10
        assert run.max_duration_ms == 30
        assert run.average_duration_ms == 20


class TestSummaryAndIssues:
    """Tests for generate_summary() and detect_issues()."""

    def test_summary_wording(self) -> None:
        """The summary lists duration, methods, SOQL/DML and errors."""
        analysis = TraceAnalysis(
            log_id="x",
            duration_ms=1234.4,
            database_operations=[
                _soql("SELECT Id FROM Account"),
                DatabaseOperation(kind=OperationKind.DML, line_number=2, dml_operation="Insert"),
            ],
        )

        assert generate_summary(analysis) == (
            "Execution completed in 1234ms. Performed 1 SOQL query(ies) and 1 DML operation(s). No errors detected."
        )

    def test_limit_issues(self) -> None:
        """Counters above 80 percent are reported."""
        analysis = TraceAnalysis(
            log_id="x",
            limit_snapshots=[GovernorLimitSnapshot(line_number=1, soql_queries=85, cpu_time=9000, heap_size=100)],
        )

        issues = detect_issues(analysis)

        assert "SOQL queries near limit: 85/100 (85%)" in issues
        assert "CPU time near limit: 9000/10000ms (90%)" in issues
        assert not any(i.startswith("Heap size") for i in issues)

    def test_stack_depth_issue(self) -> None:
        """Warning and Critical stack depth risk are reported."""
        analysis = TraceAnalysis(
            log_id="x",
            stack_depth=StackDepthAnalysis(estimated_total_frames=700, risk_level=RiskLevel.WARNING),
        )

        assert any(i.startswith("Stack depth risk Warning") for i in detect_issues(analysis))

    def test_limit_issue_at_high_tier_boundary(self) -> None:
        """A counter at exactly 80 percent is High tier and raises an issue."""
        analysis = TraceAnalysis(
            log_id="x",
            limit_snapshots=[GovernorLimitSnapshot(line_number=1, soql_queries=80, cpu_time=7900)],
        )

        issues = detect_issues(analysis)

        assert "SOQL queries near limit: 80/100 (80%)" in issues
        assert not any(i.startswith("CPU time") for i in issues)


class TestStackDepthRecommendations:
    """Stack depth advice in generate_recommendations()."""

    def test_critical_depth_without_loops(self) -> None:
        """Deep nesting alone still gets a recommendation."""
        analysis = TraceAnalysis(
            log_id="x",
            stack_depth=StackDepthAnalysis(
                max_depth=850,
                method_at_max_depth="Tree.walk()",
                estimated_total_frames=850,
                risk_level=RiskLevel.CRITICAL,
            ),
        )

        recs = generate_recommendations(analysis)

        assert any(r.startswith("Call stack reached depth 850 at 'Tree.walk()'") for r in recs)

    def test_warning_with_loops_names_the_loop(self) -> None:
        """Loop patterns drive the advice when present."""
        analysis = TraceAnalysis(
            log_id="x",
            stack_depth=StackDepthAnalysis(
                loop_patterns=[LoopMethodPattern(method_name="Line.recalc()", call_count=40, frames_per_call=15)],
                estimated_total_frames=700,
                risk_level=RiskLevel.WARNING,
            ),
        )

        recs = generate_recommendations(analysis)

        assert any(r.startswith("'Line.recalc()' ran 40 times") for r in recs)

    def test_moderate_risk_gets_no_advice(self) -> None:
        """Moderate risk is below the recommendation threshold."""
        analysis = TraceAnalysis(
            log_id="x",
            stack_depth=StackDepthAnalysis(
                loop_patterns=[LoopMethodPattern(method_name="Line.recalc()", call_count=20, frames_per_call=15)],
                estimated_total_frames=400,
                risk_level=RiskLevel.MODERATE,
            ),
        )

        recs = generate_recommendations(analysis)

        assert not any("ran 20 times" in r or r.startswith("Call stack") for r in recs)
