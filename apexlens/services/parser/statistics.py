"""Per-method timing statistics over the execution tree."""

from apexlens.services.parser.types import ExecutionNode, MethodStatistics, NodeType

_TIMED_TYPES = (NodeType.METHOD, NodeType.CODE_UNIT)


def calculate_method_statistics(root: ExecutionNode) -> dict[str, MethodStatistics]:
    """
    Aggregate call counts and durations for closed methods and code units.

    Args:
        root: Root of the execution tree

    Returns:
        Statistics keyed by method / code unit name, in first-seen order
    """
    stats: dict[str, MethodStatistics] = {}

    for node in root.walk():
        if node.type not in _TIMED_TYPES or not node.is_closed:
            continue

        duration = node.duration_ms
        stat = stats.get(node.name)
        if stat is None:
            stats[node.name] = MethodStatistics(
                method_name=node.name,
                call_count=1,
                total_duration_ms=duration,
                min_duration_ms=duration,
                max_duration_ms=duration,
            )
            continue

        stat.call_count += 1
        stat.total_duration_ms += duration
        stat.min_duration_ms = min(stat.min_duration_ms, duration)
        stat.max_duration_ms = max(stat.max_duration_ms, duration)

    return stats
