"""ScriptRunner — runs a module's init/cleanup script.

A non-zero exit, a spawn failure or a timeout all become a failed
:class:`ScriptResult`; nothing here raises for script problems.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from modman.domain.reports import ScriptResult

# Lines of captured output kept in the result
OUTPUT_TAIL_LINES = 20


def _tail(*chunks: bytes | None) -> str | None:
    # output is arbitrary bytes; undecodable ones become U+FFFD
    text = "".join(c.decode(errors="replace") for c in chunks if c)
    if not text:
        return None
    return "\n".join(text.splitlines()[-OUTPUT_TAIL_LINES:])


class ScriptRunner:
    """Spawns lifecycle scripts with the module directory as working directory.

    Args:
        timeout: Seconds before the script is killed; None waits forever.
        capture_output: Capture stdout/stderr and keep their tail in the
            result. When False the script shares the caller's terminal,
            so interactive scripts keep working.
    """

    def __init__(self, *, timeout: float | None = None, capture_output: bool = False) -> None:
        self._timeout = timeout
        self._capture = capture_output

    def run(
        self,
        script: Path,
        cwd: Path,
        *,
        env: dict[str, str] | None = None,
    ) -> ScriptResult:
        """Run *script* in *cwd*; *env* entries are added to the inherited environment."""
        full_env = {**os.environ, **(env or {})}
        try:
            completed = subprocess.run(
                [str(script)],
                cwd=cwd,
                env=full_env,
                capture_output=self._capture,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return ScriptResult(
                script=str(script),
                spawn_error=f"timed out after {self._timeout}s",
                output=_tail(exc.stdout, exc.stderr),
            )
        except OSError as exc:
            return ScriptResult(
                script=str(script),
                spawn_error=f"cannot execute {script}: {exc.strerror or exc}",
            )

        output = _tail(completed.stdout, completed.stderr) if self._capture else None
        return ScriptResult(script=str(script), exit_code=completed.returncode, output=output)
