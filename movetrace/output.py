"""Report formatting for trace results: JSON, rich tables and ASCII trees."""

from __future__ import annotations

import json
from typing import Union

from rich.console import Console
from rich.table import Table

from .graph_export import render_ascii_tree
from .models import CombinedTrace, TraceResult

Result = Union[TraceResult, CombinedTrace]

_DUPLICATE_LISTS = ("dependencyList", "moduleList")


def format_json(result: Result, dedupe: bool = False) -> str:
    """Serialize a trace as indented JSON.

    With ``dedupe`` the lists that keep duplicates are left out, so only the
    unique dependency and module lists remain.
    """
    payload = result.to_dict()
    if dedupe:
        entries = payload["perPackage"] if isinstance(result, CombinedTrace) else [payload]
        for entry in entries:
            for key in _DUPLICATE_LISTS:
                entry.pop(key, None)
    return json.dumps(payload, indent=2)


def _summary_table(results) -> Table:
    table = Table(title="Dependency summary")
    table.add_column("Package", style="cyan", overflow="fold")
    table.add_column("Direct Deps", justify="right")
    table.add_column("All Deps", justify="right")
    table.add_column("Deduped Deps", justify="right")
    table.add_column("Modules", justify="right")
    table.add_column("Deduped Modules", justify="right")
    for r in results:
        table.add_row(
            r.package_id,
            str(r.direct_dependency_count),
            str(r.all_dependency_count),
            str(r.deduped_dependency_count),
            str(r.all_module_count),
            str(r.deduped_module_count),
        )
    return table


def format_table(result: Result, width: int = 120) -> str:
    """Render the per-package counts (and combined totals) as plain text."""
    console = Console(width=width, color_system=None, force_terminal=False, markup=False)
    with console.capture() as capture:
        if isinstance(result, CombinedTrace):
            console.print(_summary_table(result.per_package))
            combined = result.combined
            console.print("Combined (all packages):", style="bold")
            console.print(f"All Deps (with duplicates): {combined.dependency_count}")
            console.print(f"Deduped Dependency Count: {combined.deduped_dependency_count}")
            console.print(f"Deduped Dependencies: {', '.join(combined.dependencies)}", soft_wrap=True)
            console.print(f"All Modules (with duplicates): {combined.module_count}")
            console.print(f"Deduped Module Count: {combined.deduped_module_count}")
            console.print(f"Deduped Modules: {', '.join(combined.modules)}", soft_wrap=True)
        else:
            console.print(_summary_table([result]))
    return capture.get()


def format_tree(result: TraceResult, modules: bool = False) -> str:
    return render_ascii_tree(result.module_tree if modules else result.dependency_tree)
