"""
Transaction grouping package.

Correlates per-file TraceMetadata into TransactionGroups and annotates each
group with phases, trigger re-entry, mixed-context flags and recommendations.

Module structure:
- grouper.py: TransactionGrouper and group_related_logs
- phases.py: Backend/Frontend phase detection, sequential loading
- patterns.py: Re-entry and mixed-context detection
- recommendations.py: Group recommendation rules
- constants.py: Signatures and thresholds
- types.py: TransactionGroup, LogPhase, PhaseType
"""

from apexlens.services.grouping.grouper import (
    TransactionGrouper,
    extract_record_id,
    group_related_logs,
)
from apexlens.services.grouping.patterns import detect_mixed_contexts, detect_reentry
from apexlens.services.grouping.phases import detect_phases
from apexlens.services.grouping.recommendations import generate_group_recommendations
from apexlens.services.grouping.types import LogPhase, PhaseType, TransactionGroup

__all__ = [
    # Main class
    "TransactionGrouper",
    "group_related_logs",
    "extract_record_id",
    # Detectors
    "detect_phases",
    "detect_reentry",
    "detect_mixed_contexts",
    "generate_group_recommendations",
    # Types
    "LogPhase",
    "PhaseType",
    "TransactionGroup",
]
