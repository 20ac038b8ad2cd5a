"""TransactionCoordinator — the only entry point into the engine.

Per call the coordinator walks a linear state machine::

    idle -> validating -> linking -> script_running -> done
                 |            |            |
              aborted    link_failed  script_failed
                              |
                       linked_no_script

It never links before every mapping validated, and never runs a script
unless linking fully succeeded.  A failed script leaves the links in place:
"linked, script failed" is a resumable state, and re-running the same
operation only repeats the script phase.

Atomicity is per module.  Batches run modules one after another and check
a cancellation event between modules, never inside one.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any

from modman.domain.errors import Failure, ScriptFailed
from modman.domain.lifecycle import Phase, is_terminal, is_valid_transition, status_for
from modman.domain.module import Module
from modman.domain.reports import (
    BatchReport,
    InstallReport,
    LinkOutcome,
    ModuleReport,
    ScriptResult,
    UninstallReport,
)
from modman.domain.types import Operation
from modman.infrastructure.linker import LinkEngine
from modman.infrastructure.scripts import ScriptRunner
from modman.services.telemetry import trace_span
from modman.services.validator import PlanRejected, Validator

ReportCallback = Callable[[ModuleReport], None]


class _Machine:
    """Tracks the current phase and refuses illegal transitions."""

    def __init__(self) -> None:
        self.phase = Phase.IDLE
        self.trace: list[Phase] = [Phase.IDLE]

    def advance(self, target: Phase) -> None:
        if not is_valid_transition(self.phase, target):
            msg = f"illegal transition {self.phase} -> {target}"
            raise RuntimeError(msg)
        self.phase = target
        self.trace.append(target)


class TransactionCoordinator:
    """Sequences Validator -> LinkEngine -> ScriptRunner for one module.

    Args:
        validator: Builds plans; defaults to a plain :class:`Validator`.
        linker: Applies plans; defaults to a plain :class:`LinkEngine`.
        runner: Runs lifecycle scripts; defaults to :class:`ScriptRunner`.
        run_scripts: When False, configured scripts are ignored and a
            successful link phase ends in ``linked_no_script``.
    """

    def __init__(
        self,
        validator: Validator | None = None,
        linker: LinkEngine | None = None,
        runner: ScriptRunner | None = None,
        *,
        run_scripts: bool = True,
    ) -> None:
        self._validator = validator or Validator()
        self._linker = linker or LinkEngine()
        self._runner = runner or ScriptRunner()
        self._run_scripts = run_scripts

    # ------------------------------------------------------------------
    # Single module
    # ------------------------------------------------------------------

    def install(self, module: Module) -> InstallReport:
        report = self._run(module, Operation.INSTALL)
        return InstallReport(**report)

    def uninstall(self, module: Module) -> UninstallReport:
        report = self._run(module, Operation.UNINSTALL)
        return UninstallReport(**report)

    def _run(self, module: Module, operation: Operation) -> dict[str, Any]:
        machine = _Machine()

        def finish(
            phase: Phase,
            *,
            outcomes: list[LinkOutcome] | None = None,
            script: ScriptResult | None = None,
            error: Failure | None = None,
            errors: list[Failure] | None = None,
            rollback_errors: list[Failure] | None = None,
        ) -> dict[str, Any]:
            machine.advance(phase)
            assert is_terminal(machine.phase)
            return {
                "module": module.name,
                "operation": operation,
                "status": status_for(machine.phase),
                "state": machine.phase,
                "trace": machine.trace,
                "outcomes": outcomes or [],
                "script": script,
                "error": error,
                "errors": errors or [],
                "rollback_errors": rollback_errors or [],
            }

        machine.advance(Phase.VALIDATING)
        with trace_span("validate"):
            try:
                if operation is Operation.INSTALL:
                    plan = self._validator.plan_install(module)
                else:
                    plan = self._validator.plan_uninstall(module)
            except PlanRejected as exc:
                failures = [e.to_failure() for e in exc.errors]
                return finish(Phase.ABORTED, error=failures[0], errors=failures)

        machine.advance(Phase.LINKING)
        with trace_span("link"):
            if operation is Operation.INSTALL:
                linked = self._linker.apply_install(plan)
            else:
                linked = self._linker.apply_uninstall(plan)
        if not linked.ok:
            return finish(
                Phase.LINK_FAILED,
                outcomes=linked.outcomes,
                error=linked.error,
                rollback_errors=linked.rollback_errors,
            )

        script = module.script_for(operation) if self._run_scripts else None
        if script is None:
            return finish(Phase.LINKED_NO_SCRIPT, outcomes=linked.outcomes)

        machine.advance(Phase.SCRIPT_RUNNING)
        with trace_span("script"):
            result = self._runner.run(
                script,
                module.directory,
                env={
                    "MODMAN_MODULE": module.name,
                    "MODMAN_MODULE_DIR": str(module.directory),
                    "MODMAN_OPERATION": str(operation),
                },
            )
        if result.ok:
            return finish(Phase.DONE, outcomes=linked.outcomes, script=result)

        reason = result.spawn_error or f"exited with status {result.exit_code}"
        failure = ScriptFailed(
            f"{script.name} {reason}",
            module=module.name,
            target=script,
            detail={"exit_code": result.exit_code, "spawn_error": result.spawn_error},
        ).to_failure()
        return finish(Phase.SCRIPT_FAILED, outcomes=linked.outcomes, script=result, error=failure)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def install_all(
        self,
        modules: Iterable[Module],
        *,
        cancel: threading.Event | None = None,
        on_report: ReportCallback | None = None,
    ) -> BatchReport:
        """Install *modules* in order; see :meth:`run_batch`."""
        return self.run_batch(Operation.INSTALL, modules, cancel=cancel, on_report=on_report)

    def uninstall_all(
        self,
        modules: Iterable[Module],
        *,
        cancel: threading.Event | None = None,
        on_report: ReportCallback | None = None,
    ) -> BatchReport:
        """Uninstall *modules* in order; see :meth:`run_batch`."""
        return self.run_batch(Operation.UNINSTALL, modules, cancel=cancel, on_report=on_report)

    def run_batch(
        self,
        operation: Operation,
        modules: Iterable[Module],
        *,
        cancel: threading.Event | None = None,
        on_report: ReportCallback | None = None,
    ) -> BatchReport:
        """Apply the single-module machine to each module in turn.

        *cancel* is checked before each module starts; a module already
        in flight always runs to its terminal state.  *on_report* sees
        each report as soon as its module finishes, so it may set *cancel*.
        Failed modules are not rolled back when a later module fails.
        """
        pending = list(modules)
        reports: list[ModuleReport] = []
        step = self.install if operation is Operation.INSTALL else self.uninstall

        for position, module in enumerate(pending):
            if cancel is not None and cancel.is_set():
                return BatchReport(
                    operation=operation,
                    reports=reports,
                    cancelled=True,
                    not_processed=[m.name for m in pending[position:]],
                )
            with trace_span(f"{operation}:{module.name}"):
                report = step(module)
            reports.append(report)
            if on_report is not None:
                on_report(report)

        return BatchReport(operation=operation, reports=reports)
