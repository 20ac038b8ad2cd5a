"""ModuleService — list, verify, install and uninstall modules for the CLI.

Resolves module names through the manifest loader, drives the
TransactionCoordinator, logs each module's outcome and announces it to
plugins, and packs everything into a ServiceResult.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import structlog

from modman.domain.errors import ErrorCode, ModmanError
from modman.domain.reports import BatchReport, ModuleReport
from modman.domain.types import ModuleHealth, Operation, PlanAction
from modman.infrastructure.linker import LinkEngine
from modman.infrastructure.manifest import ManifestLoader
from modman.infrastructure.oracle import PathOracle
from modman.infrastructure.scripts import ScriptRunner
from modman.services.base import BaseService
from modman.services.coordinator import TransactionCoordinator
from modman.services.result import ServiceError, ServiceResult
from modman.services.telemetry import get_current_span, traced
from modman.services.validator import PlanRejected, Validator

if TYPE_CHECKING:
    from modman.config.settings import ModmanSettings
    from modman.domain.module import Module
    from modman.plugins.manager import PluginManager

log = structlog.get_logger(__name__)


class ModuleService(BaseService):
    """CLI-facing operations over the modules directory."""

    def __init__(
        self,
        settings: ModmanSettings,
        plugins: PluginManager | None = None,
        *,
        loader: ManifestLoader | None = None,
        coordinator: TransactionCoordinator | None = None,
    ) -> None:
        super().__init__(settings, plugins)
        self._loader = loader or ManifestLoader(
            settings.target_root,
            manifest=settings.modules.manifest,
            init_script=settings.modules.init_script,
            cleanup_script=settings.modules.cleanup_script,
        )
        oracle = PathOracle()
        create_parents = settings.install.create_parents
        self._validator = Validator(oracle, create_parents=create_parents)
        self._coordinator = coordinator or TransactionCoordinator(
            self._validator,
            LinkEngine(oracle, create_parents=create_parents),
            ScriptRunner(
                timeout=settings.scripts.timeout,
                capture_output=settings.scripts.capture_output,
            ),
            run_scripts=settings.scripts.enabled,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def list_modules(self, *, verify: bool = False) -> ServiceResult:
        """List modules; with *verify*, also dry-run install validation.

        Without *verify*, modules whose manifest fails to load are left
        out. With it, they are listed as ``broken`` with their error.
        """
        root = self._settings.module_root
        try:
            found = self._loader.discover(root)
        except ModmanError as exc:
            return _error_result("list", exc)

        items: list[dict[str, Any]] = []
        for entry in found:
            if isinstance(entry, ModmanError):
                if verify:
                    items.append(
                        {
                            "name": entry.module,
                            "status": str(ModuleHealth.BROKEN),
                            "error": entry.message,
                        }
                    )
                continue
            item: dict[str, Any] = {
                "name": entry.name,
                "description": entry.description,
                "mappings": len(entry.mappings),
            }
            if verify:
                item.update(self._assess(entry))
            items.append(item)

        return ServiceResult(
            ok=True,
            op="list",
            data={"modules_dir": str(root), "items": items, "count": len(items)},
        )

    @traced
    def install(
        self,
        names: list[str] | tuple[str, ...] = (),
        *,
        all_modules: bool = False,
        exclude: list[str] | tuple[str, ...] = (),
        fail_fast: bool = False,
    ) -> ServiceResult:
        """Install the named modules (or all but *exclude*) one by one."""
        return self._run(Operation.INSTALL, names, all_modules, exclude, fail_fast)

    @traced
    def uninstall(
        self,
        names: list[str] | tuple[str, ...] = (),
        *,
        all_modules: bool = False,
        exclude: list[str] | tuple[str, ...] = (),
        fail_fast: bool = False,
    ) -> ServiceResult:
        """Uninstall the named modules (or all but *exclude*) one by one."""
        return self._run(Operation.UNINSTALL, names, all_modules, exclude, fail_fast)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _assess(self, module: Module) -> dict[str, Any]:
        try:
            plan = self._validator.plan_install(module)
        except PlanRejected as exc:
            broken = any(e.code is ErrorCode.INVALID_MODULE for e in exc.errors)
            health = ModuleHealth.BROKEN if broken else ModuleHealth.CONFLICT
            return {"status": str(health), "error": str(exc.primary)}
        if all(e.action is PlanAction.SKIP for e in plan.entries):
            return {"status": str(ModuleHealth.INSTALLED)}
        return {"status": str(ModuleHealth.INSTALLABLE)}

    def _select(
        self,
        names: list[str] | tuple[str, ...],
        all_modules: bool,
        exclude: list[str] | tuple[str, ...],
    ) -> list[Module]:
        root = self._settings.module_root
        if not all_modules:
            return self._loader.select(root, list(names))
        excluded = set(exclude)
        selected: list[Module] = []
        for entry in self._loader.discover(root):
            if isinstance(entry, ModmanError):
                log.warning("module.skipped", module=entry.module, reason=entry.message)
                continue
            if entry.name not in excluded:
                selected.append(entry)
        return selected

    def _run(
        self,
        operation: Operation,
        names: list[str] | tuple[str, ...],
        all_modules: bool,
        exclude: list[str] | tuple[str, ...],
        fail_fast: bool,
    ) -> ServiceResult:
        op = str(operation)
        try:
            modules = self._select(names, all_modules, exclude)
        except ModmanError as exc:
            return _error_result(op, exc)

        warnings: list[str] = []
        cancel = threading.Event()

        def on_report(report: ModuleReport) -> None:
            self._record(report, warnings)
            if fail_fast and not report.ok:
                cancel.set()

        batch = self._coordinator.run_batch(operation, modules, cancel=cancel, on_report=on_report)

        span = get_current_span()
        if span is not None:
            span.annotate("modules", len(batch.reports))

        data = _batch_data(batch)
        if batch.ok:
            return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

        failed = [r.module for r in batch.failed]
        if failed:
            message = f"{len(failed)} of {len(batch.reports)} module(s) failed: {', '.join(failed)}"
        else:
            message = "cancelled before all modules were processed"
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            warnings=warnings,
            error=ServiceError(
                code="MODULE_FAILED" if failed else "CANCELLED",
                message=message,
                detail={"failed": failed, "not_processed": batch.not_processed},
            ),
        )

    def _record(self, report: ModuleReport, warnings: list[str]) -> None:
        """Log one module's outcome and dispatch the matching plugin hook."""
        fields: dict[str, Any] = {
            "module": report.module,
            "status": str(report.status),
            "state": str(report.state),
            **report.counts(),
        }
        if report.ok:
            log.info(f"{report.operation}.done", **fields)
        else:
            error = report.error.message if report.error else None
            log.warning(f"{report.operation}.failed", error=error, **fields)
        for failure in report.rollback_errors:
            log.error("rollback.failed", module=report.module, error=failure.message)

        self._dispatch_event(
            f"post_{report.operation}",
            {
                "module_name": report.module,
                "status": str(report.status),
                "targets": [o.target for o in report.outcomes],
            },
            warnings,
        )


def _batch_data(batch: BatchReport) -> dict[str, Any]:
    return {
        "modules": [r.model_dump(mode="json") for r in batch.reports],
        "count": len(batch.reports),
        "succeeded": sum(1 for r in batch.reports if r.ok),
        "failed": [r.module for r in batch.failed],
        "cancelled": batch.cancelled,
        "not_processed": batch.not_processed,
    }


def _error_result(op: str, exc: ModmanError) -> ServiceResult:
    detail = {"module": exc.module, "target": exc.target, **exc.detail}
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code=str(exc.code).upper(),
            message=str(exc),
            detail={k: v for k, v in detail.items() if v is not None},
        ),
    )
