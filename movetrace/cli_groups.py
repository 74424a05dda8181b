"""Command groups for the movetrace CLI.

  movetrace cache   - Local package metadata cache
  movetrace config  - Network and API key settings
"""

from __future__ import annotations

import typer

# ── Cache group ──────────────────────────────────────────────
cache_grp = typer.Typer(
    help="🗄️  Cache - inspect or clear cached package metadata.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Configuration group ──────────────────────────────────────
config_grp = typer.Typer(
    help="⚙️  Configuration - default network and API key.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
