"""Classification enums shared by the engine, services and renderers."""

from __future__ import annotations

from enum import StrEnum


class Operation(StrEnum):
    """The two directions the engine can drive a module in."""

    INSTALL = "install"
    UNINSTALL = "uninstall"


class PlanAction(StrEnum):
    """What the link engine will do with one validated mapping."""

    LINK = "link"
    UNLINK = "unlink"
    SKIP = "skip"


class OutcomeKind(StrEnum):
    """Per-mapping result of one install or uninstall call."""

    CREATED = "created"
    REMOVED = "removed"
    SKIPPED_ALREADY_CORRECT = "skipped_already_correct"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"
    NOT_ATTEMPTED = "not_attempted"


class ReportStatus(StrEnum):
    """Overall status of a module-level report."""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    ABORTED = "aborted"


class ModuleHealth(StrEnum):
    """Dry-run verification verdict shown by ``modman list --verify``."""

    INSTALLED = "installed"
    INSTALLABLE = "installable"
    CONFLICT = "conflict"
    BROKEN = "broken"
