"""
Single-trace parser package.

Turns one debug log into a TraceAnalysis: call tree, database operations,
governor limit snapshots, classified exceptions and stack depth risk.

Module structure:
- analyzer.py: LogParserService, the orchestrating entry point
- tokenizer.py: Raw text to LogLine records
- tree_builder.py: Stack-based execution tree reconstruction
- resources.py: SOQL/DML/callout state machines and governor limits
- exception_classifier.py: Lookahead severity classification
- stack_depth.py: Stack depth risk estimation
- statistics.py: Per-method timing statistics
- diagnostics.py: Summary, issues, recommendations, N+1 detection
- names.py: Code unit / method name helpers
- constants.py: Patterns, event names, heuristic tables
- types.py: Data types
"""

from apexlens.services.parser.analyzer import LogParserService, parse_log
from apexlens.services.parser.exception_classifier import classify_exceptions
from apexlens.services.parser.resources import extract_resources
from apexlens.services.parser.stack_depth import analyze_stack_depth
from apexlens.services.parser.tokenizer import tokenize
from apexlens.services.parser.tree_builder import build_execution_tree
from apexlens.services.parser.types import (
    DatabaseOperation,
    ExceptionRecord,
    ExceptionSeverity,
    ExecutionNode,
    GovernorLimitSnapshot,
    LimitTier,
    LogLine,
    NodeType,
    RiskLevel,
    StackDepthAnalysis,
    TraceAnalysis,
    limit_tier,
)

__all__ = [
    # Main class
    "LogParserService",
    "parse_log",
    # Passes
    "tokenize",
    "build_execution_tree",
    "extract_resources",
    "classify_exceptions",
    "analyze_stack_depth",
    # Types
    "DatabaseOperation",
    "ExceptionRecord",
    "ExceptionSeverity",
    "ExecutionNode",
    "GovernorLimitSnapshot",
    "LimitTier",
    "LogLine",
    "NodeType",
    "RiskLevel",
    "StackDepthAnalysis",
    "TraceAnalysis",
    "limit_tier",
]
