"""Validator — proves a module can be installed or uninstalled.

INVARIANT: Validation never mutates the filesystem.
INVARIANT: Every mapping is checked; any failure means no plan at all.

Install, per mapping:
  1. the source exists inside the module directory   -> InvalidModule
  2. the target is absent, or already our symlink     -> TargetConflict
  3. the target's parent is a writable directory      -> PermissionDenied

Uninstall, per mapping:
  1. an absent target is already uninstalled (skip)
  2. the target must be a symlink                     -> NotManaged
  3. the symlink must point at this mapping's source  -> NotManaged
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from modman.domain.errors import (
    InvalidModule,
    InvalidReason,
    ModmanError,
    NotManaged,
    PermissionDenied,
    TargetConflict,
)
from modman.domain.module import FileMapping, Module
from modman.domain.reports import InstallPlan, PlanEntry, UninstallPlan
from modman.domain.types import PlanAction
from modman.infrastructure.oracle import PathOracle, PathState


class PlanRejected(Exception):
    """Validation failed for at least one mapping.

    Attributes:
        module: Module name.
        errors: Every failure found, in mapping order.
    """

    def __init__(self, module: str, errors: list[ModmanError]) -> None:
        self.module = module
        self.errors = errors
        super().__init__(str(errors[0]))

    @property
    def primary(self) -> ModmanError:
        """The first failure in mapping order."""
        return self.errors[0]


class Validator:
    """Builds install and uninstall plans from the current filesystem state.

    Args:
        oracle: Path inspector.
        create_parents: Accept targets whose parent directory is missing,
            provided the nearest existing ancestor is a writable directory.
    """

    def __init__(self, oracle: PathOracle | None = None, *, create_parents: bool = False) -> None:
        self._oracle = oracle or PathOracle()
        self._create_parents = create_parents

    def plan_install(self, module: Module) -> InstallPlan:
        """Return a complete install plan or raise :class:`PlanRejected`."""
        entries = self._check_all(module, self._check_install)
        return InstallPlan(module=module.name, entries=tuple(entries))

    def plan_uninstall(self, module: Module) -> UninstallPlan:
        """Return a complete uninstall plan or raise :class:`PlanRejected`."""
        entries = self._check_all(module, self._check_uninstall)
        return UninstallPlan(module=module.name, entries=tuple(entries))

    # ------------------------------------------------------------------
    # Shared driver
    # ------------------------------------------------------------------

    def _check_all(
        self,
        module: Module,
        check: Callable[[Module, int, FileMapping, PathState], PlanEntry],
    ) -> list[PlanEntry]:
        entries: list[PlanEntry] = []
        errors: list[ModmanError] = []
        seen: dict[Path, int] = {}

        for index, mapping in enumerate(module.mappings):
            try:
                state = self._oracle.resolve(mapping.target)
                if state.path in seen:
                    msg = f"target {state.path} is also used by mapping #{seen[state.path]}"
                    raise InvalidModule(
                        msg, reason=InvalidReason.DUPLICATE_TARGET, target=mapping.target
                    )
                seen[state.path] = index
                entries.append(check(module, index, mapping, state))
            except ModmanError as exc:
                errors.append(exc.with_context(module=module.name, index=index))

        if errors:
            raise PlanRejected(module.name, errors)
        return entries

    # ------------------------------------------------------------------
    # Install checks
    # ------------------------------------------------------------------

    def _check_install(
        self, module: Module, index: int, mapping: FileMapping, state: PathState
    ) -> PlanEntry:
        source = self._checked_source(module, mapping)

        if state.exists:
            if self._oracle.points_at(state, source):
                return PlanEntry(
                    index=index, mapping=mapping, target=state.path, action=PlanAction.SKIP
                )
            if state.is_symlink:
                msg = f"{state.path} is a symlink to {state.symlink_target} (not this module)"
            elif state.is_dir:
                msg = f"existing directory {state.path} found"
            else:
                msg = f"existing file {state.path} found"
            raise TargetConflict(msg, target=state.path)

        self._check_parent(state)
        return PlanEntry(index=index, mapping=mapping, target=state.path, action=PlanAction.LINK)

    def _checked_source(self, module: Module, mapping: FileMapping) -> Path:
        module_dir = self._oracle.absolute(module.directory)
        source = self._oracle.absolute(mapping.source)
        if not source.is_relative_to(module_dir):
            msg = f"source {source} lies outside module directory {module_dir}"
            raise InvalidModule(
                msg, reason=InvalidReason.SOURCE_OUTSIDE_MODULE, target=mapping.target
            )
        src = self._oracle.resolve(source, follow=True)
        if not (src.is_file or src.is_dir):
            msg = f"resource {source} not found"
            raise InvalidModule(msg, reason=InvalidReason.MISSING_SOURCE, target=mapping.target)
        return source

    def _check_parent(self, state: PathState) -> None:
        parent = state.path.parent
        if state.parent_is_dir:
            if not state.is_writable_parent:
                raise PermissionDenied(f"directory {parent} is not writable", target=state.path)
            return

        ancestor = self._oracle.nearest_existing_ancestor(state.path)
        if not self._oracle.is_dir(ancestor):
            msg = f"{ancestor} is not a directory"
            raise TargetConflict(msg, target=state.path, detail={"blocking_path": str(ancestor)})
        if not self._create_parents:
            raise PermissionDenied(f"directory {parent} does not exist", target=state.path)
        if not self._oracle.is_writable_dir(ancestor):
            raise PermissionDenied(f"directory {ancestor} is not writable", target=state.path)

    # ------------------------------------------------------------------
    # Uninstall checks
    # ------------------------------------------------------------------

    def _check_uninstall(
        self, module: Module, index: int, mapping: FileMapping, state: PathState
    ) -> PlanEntry:
        if not state.exists:
            return PlanEntry(
                index=index, mapping=mapping, target=state.path, action=PlanAction.SKIP
            )
        if not state.is_symlink:
            msg = f"{state.path} is not a symlink"
            raise NotManaged(msg, target=state.path)
        if not self._oracle.points_at(state, mapping.source):
            msg = f"{state.path} points to {state.symlink_target}, not {mapping.source}"
            raise NotManaged(msg, target=state.path)
        return PlanEntry(index=index, mapping=mapping, target=state.path, action=PlanAction.UNLINK)
