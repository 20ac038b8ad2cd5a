"""Tests for the coordinator state machine definition."""

from __future__ import annotations

import pytest

from modman.domain.lifecycle import (
    PHASE_TRANSITIONS,
    TERMINAL_PHASES,
    Phase,
    is_terminal,
    is_valid_transition,
    status_for,
)
from modman.domain.types import ReportStatus


class TestTransitions:
    def test_every_phase_has_an_entry(self) -> None:
        assert set(PHASE_TRANSITIONS) == {str(p) for p in Phase}

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (Phase.IDLE, Phase.VALIDATING),
            (Phase.VALIDATING, Phase.ABORTED),
            (Phase.VALIDATING, Phase.LINKING),
            (Phase.LINKING, Phase.LINK_FAILED),
            (Phase.LINKING, Phase.LINKED_NO_SCRIPT),
            (Phase.LINKING, Phase.SCRIPT_RUNNING),
            (Phase.SCRIPT_RUNNING, Phase.DONE),
            (Phase.SCRIPT_RUNNING, Phase.SCRIPT_FAILED),
        ],
    )
    def test_allowed(self, current: Phase, target: Phase) -> None:
        assert is_valid_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (Phase.IDLE, Phase.LINKING),
            (Phase.VALIDATING, Phase.SCRIPT_RUNNING),
            (Phase.LINK_FAILED, Phase.SCRIPT_RUNNING),
            (Phase.DONE, Phase.IDLE),
            (Phase.SCRIPT_RUNNING, Phase.LINKING),
        ],
    )
    def test_forbidden(self, current: Phase, target: Phase) -> None:
        assert not is_valid_transition(current, target)

    def test_terminal_phases(self) -> None:
        assert TERMINAL_PHASES == {
            "aborted",
            "link_failed",
            "script_failed",
            "linked_no_script",
            "done",
        }
        assert is_terminal(Phase.DONE)
        assert not is_terminal(Phase.LINKING)


class TestStatusFor:
    def test_mapping(self) -> None:
        assert status_for(Phase.ABORTED) is ReportStatus.ABORTED
        assert status_for(Phase.LINK_FAILED) is ReportStatus.PARTIAL_FAILURE
        assert status_for(Phase.SCRIPT_FAILED) is ReportStatus.PARTIAL_FAILURE
        assert status_for(Phase.LINKED_NO_SCRIPT) is ReportStatus.SUCCESS
        assert status_for(Phase.DONE) is ReportStatus.SUCCESS

    def test_non_terminal_rejected(self) -> None:
        with pytest.raises(ValueError, match="Not a terminal phase"):
            status_for(Phase.LINKING)
