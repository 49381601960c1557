"""
The `Rocks` subcommand set.

`build_registry(ctx, catalog)` returns the registry the shell dispatches
against. Handlers print their output directly and report progress through
``ctx.notify``; installs and updates run as deferred tasks on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from .cli_commands import CommandOpts, SubcommandRegistry, SubcommandSpec, substring_matches
from .constants import DEFAULT_VERSION
from .context import AppContext
from .errors import HandlerFailure

logger = logging.getLogger(__name__)


async def install_rock(ctx: AppContext, rock: str, version: str) -> None:
    # Yield once so the prompt is back before the tree changes.
    await asyncio.sleep(0)
    previous = ctx.installed.get(rock)
    ctx.installed[rock] = version
    if previous is None:
        ctx.notify(f"✔️ Installed {rock} ({version}).", logging.INFO)
    else:
        ctx.notify(f"✔️ Reinstalled {rock} ({previous} -> {version}).", logging.INFO)


async def update_rocks(ctx: AppContext, rocks: Sequence[str]) -> None:
    await asyncio.sleep(0)
    updated = 0
    for rock in rocks:
        if rock in ctx.installed:
            ctx.installed[rock] = DEFAULT_VERSION
            updated += 1
    ctx.notify(f"✔️ Updated {updated} rock(s).", logging.INFO)


def build_registry(ctx: AppContext, catalog: Sequence[str]) -> SubcommandRegistry:
    """Create the read-only subcommand registry bound to *ctx*."""
    catalog = list(catalog)

    def install(args: List[str], opts: CommandOpts) -> None:
        if not args:
            raise HandlerFailure(f"Usage: {opts.name} install <rock> [version]")
        if len(args) > 2:
            raise HandlerFailure(f"Too many arguments. Usage: {opts.name} install <rock> [version]")
        rock = args[0]
        version = args[1] if len(args) > 1 else DEFAULT_VERSION
        if rock not in catalog:
            ctx.notify(f"'{rock}' is not in the catalog, installing anyway.", logging.WARNING)
        ctx.notify(f"Installing {rock}...", logging.INFO)
        ctx.schedule(install_rock(ctx, rock, version), name=f"install {rock}", subcommand="install", args=args)

    def complete_install(arg_lead: str) -> List[str]:
        return substring_matches(arg_lead, catalog)

    def prune(args: List[str], opts: CommandOpts) -> None:
        if len(args) != 1:
            raise HandlerFailure(f"Usage: {opts.name} prune <rock>")
        rock = args[0]
        if rock not in ctx.installed:
            ctx.record_action(subcommand="prune", args=args, ok=False)
            raise HandlerFailure(f"Rock '{rock}' is not installed.")
        del ctx.installed[rock]
        ctx.record_action(subcommand="prune", args=args, ok=True)
        ctx.notify(f"✔️ Pruned {rock}.", logging.INFO)

    def complete_prune(arg_lead: str) -> List[str]:
        return substring_matches(arg_lead, sorted(ctx.installed))

    def update(args: List[str], opts: CommandOpts) -> None:
        targets = args or list(ctx.installed)
        missing = [r for r in targets if r not in ctx.installed]
        if missing:
            raise HandlerFailure(f"Not installed: {', '.join(missing)}")
        if not targets:
            ctx.notify("Nothing to update.", logging.WARNING)
            return
        ctx.notify(f"Updating {len(targets)} rock(s)...", logging.INFO)
        ctx.schedule(update_rocks(ctx, targets), name="update", subcommand="update", args=args)

    def sync(args: List[str], opts: CommandOpts) -> None:
        if args:
            raise HandlerFailure(f"Usage: {opts.name}[!] sync")
        strays = [rock for rock in ctx.installed if rock not in catalog]
        if not strays:
            ctx.notify("✔️ Rock tree is in sync.", logging.INFO)
        elif opts.bang:
            for rock in strays:
                del ctx.installed[rock]
            ctx.notify(f"✔️ Pruned {len(strays)} rock(s) not in the catalog: {', '.join(strays)}", logging.INFO)
        else:
            ctx.notify(
                f"{len(strays)} rock(s) not in the catalog: {', '.join(strays)}. Use '{opts.name}! sync' to prune them.",
                logging.WARNING,
            )
        ctx.record_action(subcommand="sync", args=args, ok=True)

    def list_rocks(args: List[str], opts: CommandOpts) -> None:
        if args:
            raise HandlerFailure(f"Usage: {opts.name} list")
        if not ctx.installed:
            print("\033[93mNo rocks installed.\033[0m")
            return
        print(f"\033[94m{len(ctx.installed)} rock(s) installed:\033[0m")
        for rock, version in sorted(ctx.installed.items()):
            print(f"  - {rock} ({version})")

    def show_help(args: List[str], opts: CommandOpts) -> None:
        if args:
            raise HandlerFailure(f"Usage: {opts.name} help")
        print("\n\033[96mAvailable subcommands:\033[0m")
        max_len = max(len(name) for name in registry)
        for name, spec in registry.items():
            pad = " " * (max_len - len(name) + 2)
            print(f"  \033[1m\033[94m{opts.name} {name}\033[0m{pad}\033[90m{spec.description}\033[0m")

    registry = SubcommandRegistry([
        ("install", SubcommandSpec(install, complete_install, "Install a rock: install <rock> [version]")),
        ("prune", SubcommandSpec(prune, complete_prune, "Remove an installed rock")),
        ("update", SubcommandSpec(update, None, "Update installed rocks (all, or the ones named)")),
        ("sync", SubcommandSpec(sync, None, "Report rocks not in the catalog; with ! prune them")),
        ("list", SubcommandSpec(list_rocks, None, "List installed rocks")),
        ("help", SubcommandSpec(show_help, None, "Show this help message")),
    ])
    logger.debug("Built subcommand registry: %s", list(registry))
    return registry
