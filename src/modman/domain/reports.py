"""Plans and reports exchanged between engine components and callers.

Plans are ephemeral: built fresh by the validator for one coordinator call
and never persisted.  Reports are the only thing the engine hands back to
its caller; it never prints or logs.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from pydantic import BaseModel, Field

from modman.domain.errors import Failure
from modman.domain.lifecycle import Phase
from modman.domain.module import FileMapping
from modman.domain.types import Operation, OutcomeKind, PlanAction, ReportStatus

# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


class PlanEntry(BaseModel):
    """A validated mapping together with the action the engine will take."""

    model_config = {"frozen": True}

    index: int
    mapping: FileMapping
    target: Path  # resolved, symlink-unambiguous target path
    action: PlanAction


class _Plan(BaseModel):
    model_config = {"frozen": True}

    module: str
    entries: tuple[PlanEntry, ...] = ()


class InstallPlan(_Plan):
    """Mappings certified safe to link, in manifest order."""


class UninstallPlan(_Plan):
    """Mappings certified as owned symlinks, in manifest order."""


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class LinkOutcome(BaseModel):
    """Per-mapping result."""

    model_config = {"frozen": True}

    index: int
    source: str
    target: str
    kind: OutcomeKind
    reason: str | None = None

    @classmethod
    def of(
        cls, index: int, mapping: FileMapping, kind: OutcomeKind, reason: str | None = None
    ) -> LinkOutcome:
        return cls(
            index=index,
            source=str(mapping.source),
            target=str(mapping.target),
            kind=kind,
            reason=reason,
        )


class ScriptResult(BaseModel):
    """Exit status (or spawn error) of a lifecycle script."""

    model_config = {"frozen": True}

    script: str
    exit_code: int | None = None
    spawn_error: str | None = None
    output: str | None = None

    @property
    def ok(self) -> bool:
        return self.spawn_error is None and self.exit_code == 0


class LinkResult(BaseModel):
    """What the link engine did with one plan."""

    model_config = {"frozen": True}

    outcomes: list[LinkOutcome] = Field(default_factory=list)
    error: Failure | None = None
    rollback_errors: list[Failure] = Field(default_factory=list)
    rolled_back: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Module-level reports
# ---------------------------------------------------------------------------


class ModuleReport(BaseModel):
    """Result of one coordinator call for one module.

    Attributes:
        status: ``success``, ``partial_failure`` or ``aborted``.
        state: Terminal coordinator state (see :class:`Phase`).
        trace: Every state the call passed through, starting at ``idle``.
        outcomes: One entry per mapping, in manifest order. Empty when
            validation aborted the call.
        script: Script result when a script phase ran.
        error: Primary error; None on success.
        errors: All validation failures (aborted calls only).
        rollback_errors: Failures hit while undoing a partial install.
    """

    model_config = {"frozen": True}

    module: str
    operation: Operation
    status: ReportStatus
    state: Phase
    trace: list[Phase] = Field(default_factory=list)
    outcomes: list[LinkOutcome] = Field(default_factory=list)
    script: ScriptResult | None = None
    error: Failure | None = None
    errors: list[Failure] = Field(default_factory=list)
    rollback_errors: list[Failure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is ReportStatus.SUCCESS

    def counts(self) -> dict[str, int]:
        """Outcome kind -> number of mappings."""
        return dict(Counter(str(o.kind) for o in self.outcomes))

    def outcome_kinds(self) -> list[OutcomeKind]:
        return [o.kind for o in self.outcomes]


class InstallReport(ModuleReport):
    operation: Operation = Operation.INSTALL


class UninstallReport(ModuleReport):
    operation: Operation = Operation.UNINSTALL


class BatchReport(BaseModel):
    """Sequential application of the single-module machine to many modules."""

    model_config = {"frozen": True}

    operation: Operation
    reports: list[ModuleReport] = Field(default_factory=list)
    cancelled: bool = False
    not_processed: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.cancelled and all(r.ok for r in self.reports)

    @property
    def failed(self) -> list[ModuleReport]:
        return [r for r in self.reports if not r.ok]
