"""Scan a folder of debug logs and print correlated transactions.

Usage:
    python -m scripts.analyze_logs <folder> [--parse-errors]

This script:
1. Scans the folder (recursively) for debug logs
2. Groups them into transactions by user, time window and record id
3. Prints each group with its phases and recommendations
4. With --parse-errors, fully parses every log that reported an error
"""

import logging
import sys

from apexlens.core.exceptions import LogReadError
from apexlens.core.log_setup import setup_logging
from apexlens.services.grouping import TransactionGroup, group_related_logs
from apexlens.services.metadata import read_log_text, scan_directory
from apexlens.services.parser import LogParserService

logger = logging.getLogger(__name__)


def print_group(index: int, group: TransactionGroup) -> None:
    kind = "standalone" if group.is_standalone else f"{group.size} logs"
    user = group.user_name or group.user_id or "(unknown user)"
    print(f"\n#{index} {group.start_time:%Y-%m-%d %H:%M:%S} {user} [{kind}] {group.total_duration_ms:,.0f}ms")
    if group.record_id:
        print(f"  record: {group.record_id}")
    print(
        f"  SOQL {group.total_soql_queries} | DML {group.total_dml_statements} | "
        f"CPU {group.total_cpu_time}ms | errors {group.error_count} | slowest {group.slowest_operation}"
    )
    for phase in group.phases:
        print(f"  phase {phase.name}: {len(phase.logs)} log(s), {phase.duration_ms:,.0f}ms")
    for line in group.recommendations:
        print(f"  > {line}")


def parse_failed_logs(groups: list[TransactionGroup]) -> None:
    parser = LogParserService()
    for group in groups:
        for log in group.logs:
            if not log.has_errors or not log.file_path:
                continue
            try:
                text = read_log_text(log.file_path)
            except LogReadError as e:
                logger.warning(e.message)
                continue
            analysis = parser.parse(text, log.log_id)
            print(f"\n{log.log_id}: {analysis.summary}")
            for issue in analysis.issues:
                print(f"  ! {issue}")


def main() -> int:
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    if not args:
        print(__doc__)
        return 2

    setup_logging()
    logs = scan_directory(args[0])
    if not logs:
        logger.info("No debug logs found.")
        return 0

    groups = group_related_logs(logs)
    for index, group in enumerate(groups, start=1):
        print_group(index, group)

    if "--parse-errors" in sys.argv:
        parse_failed_logs(groups)
    return 0


if __name__ == "__main__":
    sys.exit(main())
