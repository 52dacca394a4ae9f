"""Subcommand modules for envlayer.

Provides register_commands() which uses deferred imports to keep
``envlayer --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from envlayer.commands.check import check
    from envlayer.commands.init_cmd import init_cmd
    from envlayer.commands.show import show

    cli.add_command(show)
    cli.add_command(check)
    cli.add_command(init_cmd)
