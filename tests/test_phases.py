"""
Tests for phase detection.

Tests cover:
- Backend/Frontend bucketing (trigger + Aura controller scenario)
- Async flag
- Sequential vs parallel component loading and savings
- Inter-phase gaps and the recommendations they drive
"""

import pytest

from apexlens.services.grouping import PhaseType, detect_phases, group_related_logs
from apexlens.services.grouping.phases import (
    calculate_parallel_savings,
    detect_sequential_loading,
    is_backend_log,
    is_frontend_log,
)
from tests.helpers.log_builder import make_metadata


class TestTriggerAndControllerGroup:
    """Two trigger logs and one Aura controller log within four seconds."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.logs = [
            make_metadata(offset_s=0, duration_ms=120, code_unit_name="CaseTrigger on Case trigger event BeforeInsert",
                          method_name="CaseTrigger on Case trigger event BeforeInsert"),
            make_metadata(offset_s=1, duration_ms=80, code_unit_name="CaseTrigger on Case trigger event AfterInsert",
                          method_name="CaseTrigger on Case trigger event AfterInsert"),
            make_metadata(offset_s=4, duration_ms=300, code_unit_name="CaseViewController.getCase",
                          method_name="getCase"),
        ]
        (self.group,) = group_related_logs(self.logs)

    def test_two_phases(self) -> None:
        """Exactly one Backend and one Frontend phase."""
        assert [p.type for p in self.group.phases] == [PhaseType.BACKEND, PhaseType.FRONTEND]

    def test_backend_duration_is_sum_of_triggers(self) -> None:
        """Phase duration sums member durations."""
        backend = self.group.phase(PhaseType.BACKEND)

        assert backend is not None
        assert backend.name == "Backend Processing"
        assert backend.duration_ms == 200
        assert len(backend.logs) == 2
        assert backend.has_async_operations is False

    def test_frontend_duration_is_controller(self) -> None:
        """The controller log alone makes up the Frontend phase."""
        frontend = self.group.phase(PhaseType.FRONTEND)

        assert frontend is not None
        assert frontend.name == "Component Rehydration"
        assert frontend.duration_ms == 300
        assert frontend.is_sequential_loading is False

    def test_gap_recorded_on_earlier_phase(self) -> None:
        """Backend ends at 1.08s, Frontend starts at 4s."""
        backend = self.group.phase(PhaseType.BACKEND)

        assert backend.gap_to_next_phase_ms == pytest.approx(2920)
        assert any("gap between Backend Processing and next phase" in r for r in self.group.recommendations)


class TestBuckets:
    """Tests for backend/frontend signatures."""

    def test_backend_signatures(self) -> None:
        """Automation code units and async methods are backend."""
        assert is_backend_log(make_metadata(code_unit_name="Flow:Account_Update"))
        assert is_backend_log(make_metadata(code_unit_name="Validation:Account:Rule1"))
        assert is_backend_log(make_metadata(method_name="sendEmail @future"))
        assert not is_backend_log(make_metadata(code_unit_name="AnonymousBlock"))

    def test_frontend_signatures(self) -> None:
        """Controllers, Aura/LWC and getters are frontend."""
        assert is_frontend_log(make_metadata(code_unit_name="aura://ApexActionController"))
        assert is_frontend_log(make_metadata(method_name="load @AuraEnabled"))
        assert is_frontend_log(make_metadata(code_unit_name="c:myLwc"))
        assert is_frontend_log(make_metadata(method_name="getRecords()"))
        assert not is_frontend_log(make_metadata(method_name="getRecords"))

    def test_buckets_are_not_exclusive(self) -> None:
        """A log can belong to both phases."""
        log = make_metadata(code_unit_name="FlowController.run", method_name="run")

        phases = detect_phases([log])

        assert [p.type for p in phases] == [PhaseType.BACKEND, PhaseType.FRONTEND]

    def test_async_flag(self) -> None:
        """Queueable work marks the backend phase async."""
        (phase,) = detect_phases([make_metadata(method_name="RecalcQueueable")])

        assert phase.has_async_operations is True


class TestSequentialLoading:
    """Tests for detect_sequential_loading() and savings."""

    def test_waterfall_is_sequential(self) -> None:
        """A member starting well after the previous one ended is sequential."""
        logs = [
            make_metadata(offset_s=0, duration_ms=200, method_name="getA()"),
            make_metadata(offset_s=0.3, duration_ms=300, method_name="getB()"),
        ]

        assert detect_sequential_loading(logs) is True
        assert calculate_parallel_savings(logs) == 200

    def test_parallel_is_not_sequential(self) -> None:
        """Overlapping members starting together are parallel."""
        logs = [
            make_metadata(offset_s=0, duration_ms=200, method_name="getA()"),
            make_metadata(offset_s=0.02, duration_ms=300, method_name="getB()"),
        ]

        assert detect_sequential_loading(logs) is False

    def test_start_spread_is_sequential(self) -> None:
        """Overlapping members whose starts spread over 100ms are sequential."""
        logs = [
            make_metadata(offset_s=0, duration_ms=500, method_name="getA()"),
            make_metadata(offset_s=0.15, duration_ms=500, method_name="getB()"),
        ]

        assert detect_sequential_loading(logs) is True

    def test_single_log_is_not_sequential(self) -> None:
        """At least two members are needed."""
        assert detect_sequential_loading([make_metadata()]) is False
        assert calculate_parallel_savings([make_metadata()]) == 0

    def test_sequential_recommendation(self) -> None:
        """Sequential frontend loading is reported with its savings."""
        logs = [
            make_metadata(offset_s=0, duration_ms=400, code_unit_name="AccountController.getA", method_name="getA"),
            make_metadata(offset_s=1, duration_ms=600, code_unit_name="AccountController.getB", method_name="getB"),
        ]

        (group,) = group_related_logs(logs)

        assert "Components loading sequentially - optimize for parallel loading to save 400ms" in group.recommendations
