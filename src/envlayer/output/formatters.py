"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich tables and colors) or
machines (--json). The formatter layer adapts ServiceResult to the
requested output mode.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table

from envlayer.output.console import create_console, get_output, style_for_layer

if TYPE_CHECKING:
    from rich.console import Console

    from envlayer.services.result import ServiceResult


def _scalar(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return _json.dumps(value, separators=(",", ":"))
    if value is None:
        return "-"
    return str(value)


def _render_settings(console: Console, data: dict[str, Any]) -> None:
    sources: dict[str, str] = data.get("sources") or {}
    table = Table(title=f"environment: {data.get('environment', '?')}", title_justify="left")
    table.add_column("option", style="env.key")
    table.add_column("value")
    if sources:
        table.add_column("source")
    for key, value in data.get("settings", {}).items():
        row = [escape(key), escape(_scalar(value))]
        if sources:
            layer = sources.get(key, "")
            style = style_for_layer(layer)
            row.append(f"[{style}]{escape(layer)}[/]" if style else escape(layer))
        table.add_row(*row)
    console.print(table)
    for path in data.get("files", []):
        console.print(f"  [env.path]read {escape(path)}[/]")


def _render_environments(console: Console, report: dict[str, dict[str, Any]]) -> None:
    for name, entry in report.items():
        if entry.get("ok"):
            console.print(f"  [env.ok]PASS[/] {escape(name)}")
        else:
            console.print(
                f"  [env.error]FAIL[/] {escape(name)}  "
                f"[env.key]{escape(entry.get('code', ''))}[/] {escape(entry.get('message', ''))}"
            )


def _render_data(console: Console, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
            console.print(f"  [env.key]{escape(key)}:[/]")
            for item in value:
                console.print(f"    {escape(item)}")
        else:
            console.print(f"  [env.key]{escape(key)}:[/] {escape(_scalar(value))}")


def format_result(
    result: ServiceResult,
    *,
    json_output: bool = False,
    no_color: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return human-readable text.
        no_color: Disable ANSI escape codes in human output.
    """
    if json_output:
        return result.model_dump_json(indent=2)

    console = create_console(no_color=no_color)
    if result.ok:
        console.print(f"[env.ok]OK:[/] [env.op]{escape(result.op)}[/]")
        if result.op == "show":
            _render_settings(console, result.data)
        elif result.op == "check":
            _render_environments(console, result.data.get("environments", {}))
        elif result.data:
            _render_data(console, result.data)
    else:
        message = result.error.message if result.error else "Unknown error"
        console.print(f"[env.error]ERROR:[/] [env.op]{escape(result.op)}[/] - {escape(message)}")
        report = result.error.detail.get("environments") if result.error else None
        if report:
            _render_environments(console, report)
    return get_output(console).rstrip("\n")
