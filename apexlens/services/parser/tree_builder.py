"""
Execution tree reconstruction.

Rebuilds the call hierarchy from entry/exit events with an explicit stack.
Debug logs are routinely truncated or contain exits without a matching
entry, so every pop is guarded: an exit only closes the top of the stack when
the stack holds more than the root and the top has the matching node type.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from apexlens.services.parser.constants import (
    CODE_UNIT_FINISHED,
    CODE_UNIT_STARTED,
    EXCEPTION_THROWN,
    FATAL_ERROR,
    METHOD_ENTRY,
    METHOD_EXIT,
    SYSTEM_METHOD_ENTRY,
    SYSTEM_METHOD_EXIT,
    USER_DEBUG,
)
from apexlens.services.parser.names import clean_code_unit_name, method_entry_name
from apexlens.services.parser.types import ExecutionNode, LogLine, NodeType

logger = logging.getLogger(__name__)

ROOT_NAME = "Execution Root"

# Exit event -> node type it closes
_EXIT_EVENTS: dict[str, NodeType] = {
    CODE_UNIT_FINISHED: NodeType.CODE_UNIT,
    METHOD_EXIT: NodeType.METHOD,
    SYSTEM_METHOD_EXIT: NodeType.SYSTEM_METHOD,
}


@dataclass
class TreeBuildResult:
    root: ExecutionNode
    final_stack_depth: int  # Always 1 once the builder has unwound
    skipped_lines: int = 0
    unclosed_nodes: int = 0  # Entries still open when the log ended


class ExecutionTreeBuilder:
    """Builds an ExecutionNode tree from a tokenized log. One instance per call."""

    def __init__(self) -> None:
        self._stack: list[ExecutionNode] = []

    def build(self, lines: tuple[LogLine, ...] | list[LogLine]) -> TreeBuildResult:
        """
        Build the execution tree.

        Args:
            lines: Tokenized log lines in source order

        Returns:
            TreeBuildResult whose root owns the whole tree
        """
        start = lines[0].timestamp if lines else timedelta(0)
        root = ExecutionNode(name=ROOT_NAME, type=NodeType.ROOT, start_time=start)
        self._stack = [root]
        skipped = 0

        for line in lines:
            try:
                self._process(line)
            except Exception as e:
                skipped += 1
                logger.debug(f"Skipping line {line.line_number} ({line.event_type}): {e}")

        # Entries never closed (truncated logs) stay open; unwind to the root
        unclosed = len(self._stack) - 1
        del self._stack[1:]

        if lines:
            root.end_time = lines[-1].timestamp
            root.end_line_number = lines[-1].line_number
            root.start_line_number = lines[0].line_number

        return TreeBuildResult(
            root=root,
            final_stack_depth=len(self._stack),
            skipped_lines=skipped,
            unclosed_nodes=unclosed,
        )

    def _process(self, line: LogLine) -> None:
        event = line.event_type

        if event == CODE_UNIT_STARTED:
            self._push(clean_code_unit_name(line.details), NodeType.CODE_UNIT, line)
        elif event == METHOD_ENTRY:
            self._push(method_entry_name(line.details), NodeType.METHOD, line)
        elif event == SYSTEM_METHOD_ENTRY:
            self._push(line.detail(1, "System Method"), NodeType.SYSTEM_METHOD, line)
        elif event in _EXIT_EVENTS:
            self._pop(_EXIT_EVENTS[event], line)
        elif event == USER_DEBUG:
            message = line.detail(2)
            node = self._leaf(f"Debug: {message}" if message else "Debug Statement", NodeType.USER_DEBUG, line)
            if message:
                node.metadata["message"] = message
                node.metadata["level"] = line.detail(1)
        elif event == EXCEPTION_THROWN:
            exception_text = line.detail(1)
            node = self._leaf(
                f"Exception: {exception_text}" if exception_text else "Exception",
                NodeType.EXCEPTION,
                line,
            )
            exception_type, _, message = exception_text.partition(":")
            node.metadata["exception_type"] = exception_type.strip()
            node.metadata["message"] = message.strip() or line.detail(2) or exception_text
            if "[" in line.detail(0):
                node.metadata["source_line"] = line.detail(0)
        elif event == FATAL_ERROR:
            text = "|".join(line.details)
            node = self._leaf(f"Fatal Error: {line.detail(0, 'Unknown')}", NodeType.EXCEPTION, line)
            node.metadata["fatal"] = True
            node.metadata["message"] = text
            exception_type, _, _ = line.detail(0).partition(":")
            node.metadata["exception_type"] = exception_type.strip()

    def _push(self, name: str, node_type: NodeType, line: LogLine) -> None:
        node = ExecutionNode(
            name=name,
            type=node_type,
            start_time=line.timestamp,
            start_line_number=line.line_number,
        )
        self._stack[-1].children.append(node)
        self._stack.append(node)

    def _pop(self, node_type: NodeType, line: LogLine) -> None:
        if len(self._stack) > 1 and self._stack[-1].type == node_type:
            node = self._stack.pop()
            node.end_time = line.timestamp
            node.end_line_number = line.line_number

    def _leaf(self, name: str, node_type: NodeType, line: LogLine) -> ExecutionNode:
        node = ExecutionNode(
            name=name,
            type=node_type,
            start_time=line.timestamp,
            start_line_number=line.line_number,
            end_time=line.timestamp,
            end_line_number=line.line_number,
        )
        self._stack[-1].children.append(node)
        return node


def build_execution_tree(lines: tuple[LogLine, ...] | list[LogLine]) -> TreeBuildResult:
    """Build an execution tree with a fresh builder."""
    return ExecutionTreeBuilder().build(lines)
