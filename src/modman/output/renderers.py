"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Install and uninstall results are rendered in full even when ``ok`` is
False, since the per-mapping outcomes are what the user needs to act on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from modman.output.console import (
    create_console,
    get_output,
    style_for_health,
    style_for_outcome,
)

if TYPE_CHECKING:
    from rich.console import Console

    from modman.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    renderer = _OP_RENDERERS.get(result.op)
    if renderer is not None and (result.ok or "modules" in result.data):
        renderer(result, console, verbose=verbose)
    if not result.ok:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: one line per module."""
    lines: list[str] = []
    if result.op == "list":
        for item in result.data.get("items", []):
            status = item.get("status")
            lines.append(f"{item['name']} {status}" if status else str(item["name"]))
    for report in result.data.get("modules", []):
        lines.append(f"{report['module']} {report['status']}")

    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        lines.append(f"ERROR: {result.op} — {msg}")
    elif not lines:
        lines.append(f"OK: {result.op}")
    return "\n".join(lines)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="mm.ok")
    op = Text(f"  {result.op}", style="mm.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="mm.key")
    style = "mm.path" if key.endswith(("dir", "path")) else ""
    console.print(k, Text(str(value), style=style), end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_span(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_span(console: Console, span: dict[str, Any], indent: int) -> None:
    duration = span.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"
    line = Text(" " * indent)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {span.get('name', '?')}")
    extras = [f"{k}={v}" for k, v in span.get("annotations", {}).items()]
    if extras:
        line.append(f"  ({', '.join(extras)})")
    console.print(line)
    for child in span.get("children", []):
        _render_span(console, child, indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="mm.error"),
        Text(f"  {result.op}", style="mm.op"),
        Text(" — "),
        Text(msg),
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Module renderers ──────────────────────────────────────────────────


def _render_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    verify = any("status" in item for item in items)

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Module", style="mm.module", no_wrap=True)
    table.add_column("Description")
    if verify:
        table.add_column("Status")
    if verbose:
        table.add_column("Mappings", justify="right")

    for item in items:
        row: list[Any] = [str(item.get("name", "")), str(item.get("description") or "")]
        if verify:
            status = str(item.get("status", ""))
            cell = Text(status, style=style_for_health(status))
            if item.get("error"):
                cell.append(f"  {item['error']}", style="dim")
            row.append(cell)
        if verbose:
            row.append(str(item.get("mappings", "")))
        table.add_row(*row)

    console.print(table)
    count = result.data.get("count", len(items))
    console.print(Text(f"\n{count} modules in {result.data.get('modules_dir')}"))
    if verbose:
        _render_meta(console, result)


def _render_reports(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render install/uninstall batch results, one block per module."""
    for report in result.data.get("modules", []):
        _render_report(console, report, verbose=verbose)

    for name in result.data.get("not_processed", []):
        console.print(
            Text("SKIP", style="mm.warning"),
            Text(f"  {name}", style="mm.module"),
            Text("  not processed", style="dim"),
        )

    if result.ok:
        console.print()
        _status_line(console, result)
        _field(console, "modules", result.data.get("count", 0))
    if verbose:
        _render_meta(console, result)


def _render_report(console: Console, report: dict[str, Any], *, verbose: bool) -> None:
    ok = report.get("status") == "success"
    label = Text("OK  " if ok else "FAIL", style="mm.ok" if ok else "mm.error")
    console.print(
        label,
        Text(f"  {report['module']}", style="mm.module"),
        Text(f"  {report['operation']} {report['state']}", style="dim"),
    )

    outcomes = report.get("outcomes", [])
    if outcomes:
        table = Table(show_header=verbose, box=None, pad_edge=False, expand=False)
        table.add_column("Outcome", no_wrap=True)
        table.add_column("Target", style="mm.path")
        if verbose:
            table.add_column("Source", style="mm.path")
        table.add_column("Reason")
        for outcome in outcomes:
            kind = str(outcome["kind"])
            row: list[Any] = [
                Text(f"    {kind}", style=style_for_outcome(kind)),
                Text(outcome["target"]),
            ]
            if verbose:
                row.append(Text(outcome["source"]))
            row.append(Text(outcome.get("reason") or ""))
            table.add_row(*row)
        console.print(table)

    script = report.get("script")
    if script:
        if script.get("spawn_error"):
            status = script["spawn_error"]
        else:
            status = f"exit {script.get('exit_code')}"
        console.print(Text(f"    script {script['script']}: {status}"))
        if verbose and script.get("output"):
            console.print(Text(script["output"], style="dim"))

    errors = report.get("errors") or ([report["error"]] if report.get("error") else [])
    for failure in errors:
        where = f"#{failure['index']} " if failure.get("index") is not None else ""
        console.print(
            Text(f"    {failure['code']}", style="mm.error"),
            Text(f"{where}{failure['message']}"),
        )
    for failure in report.get("rollback_errors", []):
        console.print(Text("    rollback", style="mm.warning"), Text(failure["message"]))


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "list": _render_list,
    "install": _render_reports,
    "uninstall": _render_reports,
}
