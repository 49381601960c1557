#!/usr/bin/env python
"""
Interactive shell hosting the `Rocks` user command.
Type `Rocks <subcommand> [args]`; press Tab to complete subcommand names and,
once a subcommand is typed, its arguments.
"""

import argparse
import asyncio
import logging
import sys
from typing import Iterable

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style

from .config import (
    get_catalog,
    get_command_name,
    get_history_file,
    get_log_settings,
    get_state_dump_path,
    load_env,
)
from .constants import EXIT_WORDS, SHUTDOWN_TIMEOUT
from .context import AppContext
from .dispatcher import Dispatcher
from .errors import HandlerFailure
from .rocks import build_registry
from .user_command import UserCommand, notify

logger = logging.getLogger(__name__)

console_handler = logging.StreamHandler(sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    settings = get_log_settings()

    # Clear existing handlers to avoid duplication in repeated runs
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)

    file_handler = logging.FileHandler(settings["file"], mode="a", encoding="utf-8")
    file_handler.setLevel(settings["level"])
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    # Only warnings+ to console unless --verbose
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logging.basicConfig(level=min(settings["level"], console_handler.level), handlers=[file_handler, console_handler])
    if verbose:
        logger.info("Verbose console logging enabled.")


cli_style = Style.from_dict({
    "prompt": "bold cyan",
    "completion-menu.completion": "bg:#1e1e1e #bcbcbc",
    "completion-menu.completion.current": "bg:#005f5f #ffffff bold",
    "completion-menu.meta.completion": "#6c6c6c italic",
    "scrollbar.background": "bg:#262626",
    "scrollbar.button": "bg:#3a3a3a",
})


class SubcommandCompleter(Completer):
    """Feeds prompt_toolkit completions from a `UserCommand`."""

    def __init__(self, user_command: UserCommand):
        self.user_command = user_command

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        text = document.text_before_cursor
        if not text or text[-1].isspace():
            arg_lead = ""
        else:
            arg_lead = text.split()[-1]
        registry = self.user_command.dispatcher.registry
        naming = _completing_subcommand(text)
        for candidate in self.user_command.complete(arg_lead, text):
            spec = registry.get_spec(candidate) if naming else None
            meta = spec.description if spec is not None else ""
            yield Completion(text=candidate, start_position=-len(arg_lead), display_meta=meta)


def _completing_subcommand(text: str) -> bool:
    """True while the cursor is still on the subcommand name."""
    tokens = text.split()
    if text and text[-1].isspace():
        return len(tokens) == 1
    return len(tokens) == 2


def build_user_command(ctx: AppContext, command_name: str) -> UserCommand:
    registry = build_registry(ctx, get_catalog())
    return UserCommand(Dispatcher(command_name, registry), notifier=ctx.notify)


async def main(argv=None):
    load_env()

    parser = argparse.ArgumentParser(description="Rocks command shell")
    parser.add_argument("--command", default=None, help="Top-level command name (default: $ROCKSHELL_COMMAND or Rocks).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Increase console log level to DEBUG.")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    command_name = get_command_name(args.command)
    app_context = AppContext(notify=notify)
    user_command = build_user_command(app_context, command_name)

    print(f"\n\033[1m\033[96m🪨 {command_name} shell\033[0m")
    print(f"\033[90mType '{command_name} help' for subcommands, Tab to complete, 'exit' to quit.\033[0m")

    session = PromptSession(
        history=FileHistory(get_history_file()),
        auto_suggest=AutoSuggestFromHistory(),
        completer=SubcommandCompleter(user_command),
        complete_while_typing=True,
        style=cli_style,
    )

    # Deferred tasks notify while the prompt is on screen; keep their output above it.
    with patch_stdout():
        while True:
            try:
                line = await session.prompt_async(f"{command_name}> ")
                line = line.strip()
                if not line:
                    continue

                if line.lower() in EXIT_WORDS:
                    break

                if user_command.matches(line):
                    user_command.execute(line)
                else:
                    print(f"\033[93mNot a {command_name} command. Try '{command_name} help'.\033[0m")

            except EOFError:
                print("\n\033[94mEOF reached, exiting.\033[0m")
                break
            except KeyboardInterrupt:
                print("\n\033[93mCancelled.\033[0m")
                continue
            except HandlerFailure as e:
                print(f"\033[91m❌ {e}\033[0m")
                logger.info(f"Handler failure: {e}")
            except Exception as e:
                print(f"\n\033[91mUnexpected error: {e}\033[0m")
                logger.error("Shell loop error", exc_info=True)

    if app_context.pending:
        print(f"\033[94mWaiting for {app_context.pending} pending task(s)...\033[0m")
    await app_context.drain(SHUTDOWN_TIMEOUT)

    dump_path = get_state_dump_path()
    if dump_path:
        app_context.dump_state_to_json(dump_path)

    print("\033[96mGoodbye!\033[0m")


def run():
    """Console-script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\033[93mExiting by Ctrl+C.\033[0m")
        sys.exit(0)
    except Exception as e:
        logger.critical(f"Startup error: {e}", exc_info=True)
        print(f"\033[91mCritical error: {e}\033[0m", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
