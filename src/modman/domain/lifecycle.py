"""Coordinator state machine for a single install or uninstall call.

The machine is linear: every call starts at ``idle`` and walks forward to
exactly one terminal state, never back.
"""

from __future__ import annotations

from enum import StrEnum

from modman.domain.types import ReportStatus


class Phase(StrEnum):
    """Coordinator states (intermediate and terminal)."""

    IDLE = "idle"
    VALIDATING = "validating"
    LINKING = "linking"
    SCRIPT_RUNNING = "script_running"
    # --- terminal ---
    ABORTED = "aborted"
    LINK_FAILED = "link_failed"
    SCRIPT_FAILED = "script_failed"
    LINKED_NO_SCRIPT = "linked_no_script"
    DONE = "done"


PHASE_TRANSITIONS: dict[str, list[str]] = {
    "idle": ["validating"],
    "validating": ["linking", "aborted"],
    "linking": ["script_running", "linked_no_script", "link_failed"],
    "script_running": ["done", "script_failed"],
    "aborted": [],
    "link_failed": [],
    "script_failed": [],
    "linked_no_script": [],
    "done": [],
}

TERMINAL_PHASES = frozenset(name for name, nxt in PHASE_TRANSITIONS.items() if not nxt)

# Terminal state -> overall report status
TERMINAL_STATUS: dict[str, ReportStatus] = {
    "aborted": ReportStatus.ABORTED,
    "link_failed": ReportStatus.PARTIAL_FAILURE,
    "script_failed": ReportStatus.PARTIAL_FAILURE,
    "linked_no_script": ReportStatus.SUCCESS,
    "done": ReportStatus.SUCCESS,
}


def is_valid_transition(current: str, target: str) -> bool:
    """Check if moving from *current* to *target* is allowed."""
    return target in PHASE_TRANSITIONS.get(current, [])


def is_terminal(phase: str) -> bool:
    return phase in TERMINAL_PHASES


def status_for(phase: str) -> ReportStatus:
    """Overall report status for a terminal *phase*."""
    try:
        return TERMINAL_STATUS[phase]
    except KeyError:
        msg = f"Not a terminal phase: {phase!r}"
        raise ValueError(msg) from None
