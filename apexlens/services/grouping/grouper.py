"""
Transaction grouping.

Correlates per-file metadata into groups that look like one end-to-end user
action: same user, within a trailing time window of the earliest ungrouped
log, narrowed to a shared record id when that still leaves more than one log.
"""

import logging
from datetime import timedelta

from apexlens.config import settings
from apexlens.services.grouping.constants import TEXT_RECORD_ID_PREFIXES
from apexlens.services.grouping.patterns import detect_mixed_contexts, detect_reentry
from apexlens.services.grouping.phases import detect_phases
from apexlens.services.grouping.recommendations import generate_group_recommendations
from apexlens.services.grouping.types import TransactionGroup
from apexlens.services.metadata.constants import RECORD_ID_PATTERN
from apexlens.services.metadata.types import TraceMetadata

logger = logging.getLogger(__name__)


def extract_record_id(text: str) -> str:
    """First 15/18-character id in free text with a common standard prefix, else ""."""
    if not text or not text.strip():
        return ""
    match = RECORD_ID_PATTERN.search(text)
    if match and match.group(1).startswith(TEXT_RECORD_ID_PREFIXES):
        return match.group(1)
    return ""


class TransactionGrouper:
    """Groups TraceMetadata records into TransactionGroups."""

    def __init__(self, window_seconds: float | None = None):
        seconds = window_seconds if window_seconds is not None else settings.grouping_window_seconds
        self.window = timedelta(seconds=seconds)

    def group(self, logs: list[TraceMetadata]) -> list[TransactionGroup]:
        """
        Group related logs.

        Args:
            logs: Metadata records in any order

        Returns:
            Groups in order of their earliest member
        """
        pool = sorted(logs, key=lambda log: log.timestamp)
        groups: list[TransactionGroup] = []

        while pool:
            seed = pool[0]
            members = self._select_members(seed, pool)
            groups.append(self._build_group(seed, members))
            taken = {id(log) for log in members}
            pool = [log for log in pool if id(log) not in taken]

        standalone = sum(1 for g in groups if g.is_standalone)
        logger.info(f"Grouped {len(logs)} log(s) into {len(groups)} transaction(s) ({standalone} standalone)")
        return groups

    def _select_members(self, seed: TraceMetadata, pool: list[TraceMetadata]) -> list[TraceMetadata]:
        related = [
            log
            for log in pool
            if log.user_id == seed.user_id and log.timestamp - seed.timestamp <= self.window
        ]
        if seed.record_id:
            same_record = [log for log in related if log.record_id == seed.record_id]
            # Narrow only when the record id still ties several logs together
            if len(same_record) > 1:
                related = same_record
        return related

    def _build_group(self, seed: TraceMetadata, members: list[TraceMetadata]) -> TransactionGroup:
        end_time = max(log.end_time for log in members)
        group = TransactionGroup(
            start_time=seed.timestamp,
            end_time=end_time,
            user_id=seed.user_id,
            user_name=seed.user_name,
            record_id=seed.record_id,
            logs=members,
            is_standalone=len(members) == 1,
            total_duration_ms=(end_time - seed.timestamp) / timedelta(milliseconds=1),
        )

        group.phases = detect_phases(members)
        group.reentry_patterns, group.total_reentry_count = detect_reentry(members)
        group.has_mixed_contexts, group.primary_context = detect_mixed_contexts(members)
        _aggregate_metrics(group)
        group.recommendations = generate_group_recommendations(group)
        return group


def _aggregate_metrics(group: TransactionGroup) -> None:
    logs = group.logs
    group.total_soql_queries = sum(log.soql_queries for log in logs)
    group.total_query_rows = sum(log.query_rows for log in logs)
    group.total_dml_statements = sum(log.dml_statements for log in logs)
    group.total_dml_rows = sum(log.dml_rows for log in logs)
    group.total_cpu_time = sum(log.cpu_time for log in logs)
    group.max_heap_size = max(log.heap_size for log in logs)
    group.error_count = sum(1 for log in logs if log.has_errors)
    slowest = max(logs, key=lambda log: log.duration_ms)
    group.slowest_operation = slowest.method_name or "Unknown"


def group_related_logs(
    logs: list[TraceMetadata],
    window_seconds: float | None = None,
) -> list[TransactionGroup]:
    """Group logs with a fresh TransactionGrouper."""
    return TransactionGrouper(window_seconds).group(logs)
