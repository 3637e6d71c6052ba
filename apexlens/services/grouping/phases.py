"""
Phase detection for a transaction group.

Members are bucketed into a Backend phase (automation) and a Frontend phase
(component controllers). The buckets are not exclusive: a log matching both
signatures contributes to both phases.
"""

from datetime import timedelta

from apexlens.services.grouping.constants import (
    ASYNC_METHOD_SIGNATURES,
    AURA_ENABLED_SIGNATURE,
    BACKEND_CODE_UNIT_SIGNATURES,
    BACKEND_PHASE_NAME,
    FRONTEND_CODE_UNIT_SIGNATURES,
    FRONTEND_NAME_SIGNATURES,
    FRONTEND_PHASE_NAME,
    PHASE_GAP_MS,
    SEQUENTIAL_GAP_MS,
    SEQUENTIAL_SPREAD_MS,
)
from apexlens.services.grouping.types import LogPhase, PhaseType
from apexlens.services.metadata.types import TraceMetadata

_ONE_MS = timedelta(milliseconds=1)


def is_async_log(log: TraceMetadata) -> bool:
    return any(signature in log.method_name for signature in ASYNC_METHOD_SIGNATURES)


def is_backend_log(log: TraceMetadata) -> bool:
    code_unit = log.code_unit_name.lower()
    return any(signature in code_unit for signature in BACKEND_CODE_UNIT_SIGNATURES) or is_async_log(log)


def is_frontend_log(log: TraceMetadata) -> bool:
    code_unit = log.code_unit_name.lower()
    method = log.method_name.lower()
    if any(s in code_unit or s in method for s in FRONTEND_NAME_SIGNATURES):
        return True
    if AURA_ENABLED_SIGNATURE in log.method_name:
        return True
    if any(s in code_unit for s in FRONTEND_CODE_UNIT_SIGNATURES):
        return True
    return "get" in log.method_name and "()" in log.method_name


def detect_sequential_loading(logs: list[TraceMetadata]) -> bool:
    """
    True when members load one after another rather than together.

    Sequential when any member starts more than 50ms after the previous
    member ended, or when first-to-last start spread exceeds 100ms.
    """
    if len(logs) < 2:
        return False

    ordered = sorted(logs, key=lambda log: log.timestamp)
    for previous, current in zip(ordered, ordered[1:]):
        if (current.timestamp - previous.end_time) / _ONE_MS > SEQUENTIAL_GAP_MS:
            return True

    return (ordered[-1].timestamp - ordered[0].timestamp) / _ONE_MS > SEQUENTIAL_SPREAD_MS


def calculate_parallel_savings(logs: list[TraceMetadata]) -> float:
    """Time saved if every member ran concurrently: sum - max."""
    if len(logs) < 2:
        return 0.0
    durations = [log.duration_ms for log in logs]
    return max(0.0, sum(durations) - max(durations))


def _build_phase(name: str, phase_type: PhaseType, logs: list[TraceMetadata]) -> LogPhase:
    return LogPhase(
        name=name,
        type=phase_type,
        logs=logs,
        start_time=min(log.timestamp for log in logs),
        end_time=max(log.end_time for log in logs),
        duration_ms=sum(log.duration_ms for log in logs),
    )


def detect_phases(logs: list[TraceMetadata]) -> list[LogPhase]:
    """
    Split a group's members into Backend and Frontend phases.

    Args:
        logs: Group members

    Returns:
        Zero, one or two phases (Backend first), with inter-phase gaps
        above 100ms recorded on the earlier phase
    """
    phases: list[LogPhase] = []

    backend = [log for log in logs if is_backend_log(log)]
    if backend:
        phase = _build_phase(BACKEND_PHASE_NAME, PhaseType.BACKEND, backend)
        phase.has_async_operations = any(is_async_log(log) for log in backend)
        phases.append(phase)

    frontend = [log for log in logs if is_frontend_log(log)]
    if frontend:
        phase = _build_phase(FRONTEND_PHASE_NAME, PhaseType.FRONTEND, frontend)
        phase.is_sequential_loading = detect_sequential_loading(frontend)
        if phase.is_sequential_loading:
            phase.parallel_savings_ms = calculate_parallel_savings(frontend)
        phases.append(phase)

    for earlier, later in zip(phases, phases[1:]):
        gap = (later.start_time - earlier.end_time) / _ONE_MS
        if gap > PHASE_GAP_MS:
            earlier.gap_to_next_phase_ms = gap

    return phases
