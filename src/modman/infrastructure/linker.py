"""LinkEngine — creates and removes a module's symlinks.

Install applies a validated plan in manifest order and, if mapping *k*
fails, removes everything this call created for mappings ``1..k-1``
(reverse order) before returning.  Uninstall stops at the first failure
and never recreates removed links: the module definition is the record
of what the link should be, so a retry simply re-validates.
"""

from __future__ import annotations

import os
from pathlib import Path

from modman.domain.errors import Failure, ModmanError, TargetConflict, from_os_error
from modman.domain.reports import InstallPlan, LinkOutcome, LinkResult, PlanEntry, UninstallPlan
from modman.domain.types import OutcomeKind, PlanAction
from modman.infrastructure.oracle import PathOracle


class _Created:
    """Undo record for one mapping created during the current call."""

    __slots__ = ("dirs", "entry", "linked")

    def __init__(self, entry: PlanEntry) -> None:
        self.entry = entry
        self.dirs: list[Path] = []
        self.linked = False


class LinkEngine:
    """Applies install and uninstall plans to the filesystem.

    Args:
        oracle: Path inspector used to re-check ownership during rollback.
        create_parents: Create missing parent directories of targets.
            Directories created this way are removed again on rollback.
    """

    def __init__(self, oracle: PathOracle | None = None, *, create_parents: bool = False) -> None:
        self._oracle = oracle or PathOracle()
        self._create_parents = create_parents

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def apply_install(self, plan: InstallPlan) -> LinkResult:
        """Create every planned symlink or leave the module as it was."""
        outcomes: list[LinkOutcome] = []
        done: list[_Created] = []

        for position, entry in enumerate(plan.entries):
            if entry.action is PlanAction.SKIP:
                outcomes.append(
                    LinkOutcome.of(entry.index, entry.mapping, OutcomeKind.SKIPPED_ALREADY_CORRECT)
                )
                continue

            record = _Created(entry)
            try:
                if self._create_parents:
                    self._make_parents(entry.target, record.dirs)
                self._symlink(entry)
                record.linked = True
            except ModmanError as exc:
                exc.with_context(module=plan.module, index=entry.index)
                outcomes.append(
                    LinkOutcome.of(entry.index, entry.mapping, OutcomeKind.FAILED, exc.message)
                )
                # directories made for the failing mapping are undone too
                rollback_errors, unlinked = self._rollback(plan.module, [*done, record])
                outcomes = [_rolled_back(o) if o.index in unlinked else o for o in outcomes]
                outcomes.extend(
                    LinkOutcome.of(rest.index, rest.mapping, OutcomeKind.NOT_ATTEMPTED)
                    for rest in plan.entries[position + 1 :]
                )
                return LinkResult(
                    outcomes=outcomes,
                    error=exc.to_failure(),
                    rollback_errors=rollback_errors,
                    rolled_back=True,
                )

            done.append(record)
            outcomes.append(LinkOutcome.of(entry.index, entry.mapping, OutcomeKind.CREATED))

        return LinkResult(outcomes=outcomes)

    def _make_parents(self, target: Path, made: list[Path]) -> None:
        missing: list[Path] = []
        current = target.parent
        while not os.path.lexists(current):
            missing.append(current)
            current = current.parent
        for directory in reversed(missing):
            try:
                os.mkdir(directory)
            except OSError as exc:
                msg = f"cannot create directory {directory}"
                raise from_os_error(exc, msg, target=target) from exc
            made.append(directory)

    def _symlink(self, entry: PlanEntry) -> None:
        source = self._oracle.absolute(entry.mapping.source)
        try:
            os.symlink(source, entry.target, target_is_directory=source.is_dir())
        except FileExistsError as exc:
            msg = f"{entry.target} appeared after validation"
            raise TargetConflict(msg, target=entry.target) from exc
        except OSError as exc:
            raise from_os_error(
                exc, f"cannot create symlink {entry.target}", target=entry.target
            ) from exc

    def _rollback(self, module: str, records: list[_Created]) -> tuple[list[Failure], set[int]]:
        """Undo *records* in reverse order, never raising.

        Returns the failures hit and the indices whose link was removed.
        """
        errors: list[Failure] = []
        unlinked: set[int] = set()
        for record in reversed(records):
            entry = record.entry
            if record.linked:
                try:
                    self._unlink_owned(entry)
                except ModmanError as exc:
                    errors.append(exc.with_context(module=module, index=entry.index).to_failure())
                    # keep the directories holding a link we could not remove
                    continue
                unlinked.add(entry.index)
            for directory in reversed(record.dirs):
                try:
                    os.rmdir(directory)
                except OSError as exc:
                    err = from_os_error(
                        exc, f"cannot remove directory {directory}", target=entry.target
                    )
                    errors.append(err.with_context(module=module, index=entry.index).to_failure())
                    break
        return errors, unlinked

    def _unlink_owned(self, entry: PlanEntry) -> None:
        state = self._oracle.resolve(entry.target)
        if not state.exists:
            return
        if not self._oracle.points_at(state, entry.mapping.source):
            msg = f"{entry.target} changed after it was linked; left in place"
            raise TargetConflict(msg, target=entry.target)
        try:
            os.unlink(entry.target)
        except FileNotFoundError:
            return
        except OSError as exc:
            msg = f"cannot remove symlink {entry.target}"
            raise from_os_error(exc, msg, target=entry.target) from exc

    # ------------------------------------------------------------------
    # Uninstall
    # ------------------------------------------------------------------

    def apply_uninstall(self, plan: UninstallPlan) -> LinkResult:
        """Remove every planned symlink, stopping at the first failure."""
        outcomes: list[LinkOutcome] = []

        for position, entry in enumerate(plan.entries):
            if entry.action is PlanAction.SKIP:
                outcomes.append(
                    LinkOutcome.of(
                        entry.index,
                        entry.mapping,
                        OutcomeKind.SKIPPED_ALREADY_CORRECT,
                        "already removed",
                    )
                )
                continue

            try:
                os.unlink(entry.target)
            except FileNotFoundError:
                outcomes.append(
                    LinkOutcome.of(
                        entry.index,
                        entry.mapping,
                        OutcomeKind.SKIPPED_ALREADY_CORRECT,
                        "removed by another process",
                    )
                )
                continue
            except OSError as exc:
                msg = f"cannot remove symlink {entry.target}"
                err = from_os_error(exc, msg, target=entry.target)
                err.with_context(module=plan.module, index=entry.index)
                outcomes.append(
                    LinkOutcome.of(entry.index, entry.mapping, OutcomeKind.FAILED, err.message)
                )
                outcomes.extend(
                    LinkOutcome.of(rest.index, rest.mapping, OutcomeKind.NOT_ATTEMPTED)
                    for rest in plan.entries[position + 1 :]
                )
                return LinkResult(outcomes=outcomes, error=err.to_failure())

            outcomes.append(LinkOutcome.of(entry.index, entry.mapping, OutcomeKind.REMOVED))

        return LinkResult(outcomes=outcomes)


def _rolled_back(outcome: LinkOutcome) -> LinkOutcome:
    return outcome.model_copy(
        update={"kind": OutcomeKind.ROLLED_BACK, "reason": "removed by rollback"}
    )
