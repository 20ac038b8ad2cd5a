"""Error taxonomy for the module engine.

Every error carries enough identity (module name, mapping index, target
path) for a caller to act without re-deriving filesystem state.  Errors
are raised inside the engine and converted to frozen :class:`Failure`
payloads at the report boundary.
"""

from __future__ import annotations

import errno
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Stable machine-readable error codes."""

    INVALID_MODULE = "invalid_module"
    TARGET_CONFLICT = "target_conflict"
    NOT_MANAGED = "not_managed"
    PERMISSION_DENIED = "permission_denied"
    IO_ERROR = "io_error"
    SCRIPT_FAILED = "script_failed"


class InvalidReason(StrEnum):
    """Sub-classification for :class:`InvalidModule`."""

    MISSING_SOURCE = "missing_source"
    SOURCE_OUTSIDE_MODULE = "source_outside_module"
    DUPLICATE_TARGET = "duplicate_target"
    MANIFEST = "manifest"
    SCRIPT = "script"


class Failure(BaseModel):
    """Structured error payload carried inside reports."""

    model_config = {"frozen": True}

    code: ErrorCode
    message: str
    module: str | None = None
    index: int | None = None
    target: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)


class ModmanError(Exception):
    """Base class for all engine errors."""

    code: ClassVar[ErrorCode] = ErrorCode.IO_ERROR

    def __init__(
        self,
        message: str,
        *,
        module: str | None = None,
        index: int | None = None,
        target: Path | str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.module = module
        self.index = index
        self.target = str(target) if target is not None else None
        self.detail = dict(detail or {})

    def __str__(self) -> str:
        parts: list[str] = []
        if self.module:
            parts.append(f"Module {self.module}")
        if self.index is not None:
            parts.append(f"mapping #{self.index}")
        prefix = ", ".join(parts)
        return f"{prefix}: {self.message}" if prefix else self.message

    def with_context(self, *, module: str | None = None, index: int | None = None) -> Self:
        """Fill in module/index identity if not already set. Returns self."""
        if self.module is None:
            self.module = module
        if self.index is None:
            self.index = index
        return self

    def to_failure(self) -> Failure:
        return Failure(
            code=self.code,
            message=self.message,
            module=self.module,
            index=self.index,
            target=self.target,
            detail=self.detail,
        )


class InvalidModule(ModmanError):
    """Structural problem with the module definition itself."""

    code = ErrorCode.INVALID_MODULE

    def __init__(self, message: str, *, reason: InvalidReason, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.reason = reason
        self.detail.setdefault("reason", str(reason))


class TargetConflict(ModmanError):
    """Install would overwrite content this module does not own."""

    code = ErrorCode.TARGET_CONFLICT


class NotManaged(ModmanError):
    """Uninstall target is not a symlink owned by this module."""

    code = ErrorCode.NOT_MANAGED


class PermissionDenied(ModmanError):
    code = ErrorCode.PERMISSION_DENIED


class IoError(ModmanError):
    """Unexpected OS-level failure."""

    code = ErrorCode.IO_ERROR


class ScriptFailed(ModmanError):
    """Lifecycle script exited non-zero or could not be spawned."""

    code = ErrorCode.SCRIPT_FAILED


def from_os_error(exc: OSError, action: str, **kwargs: Any) -> ModmanError:
    """Map an OSError raised while performing *action* onto the taxonomy."""
    message = f"{action}: {exc.strerror or exc}"
    detail = {"errno": exc.errno} if exc.errno is not None else {}
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM, errno.EROFS):
        return PermissionDenied(message, detail=detail, **kwargs)
    if isinstance(exc, FileExistsError):
        return TargetConflict(message, detail=detail, **kwargs)
    return IoError(message, detail=detail, **kwargs)
