"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: Every ModuleService method returns ServiceResult.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"install"``, ``"uninstall"``, ``"list"``).
        data: Operation payload. Install/uninstall keep their per-module
            reports here even when ``ok`` is False.
        warnings: Non-fatal issues (e.g. a plugin hook raised).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry span tree under ``--verbose``).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
