"""
Subcommand dispatcher for a single top-level user command.

`dispatch()` routes ``[subcommand, *args]`` to the registered handler.
`complete()` answers tab-completion for either the subcommand name or, once
a known subcommand has been typed, that subcommand's arguments.
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

from .cli_commands import CommandOpts, SubcommandRegistry
from .errors import UnknownCommand

logger = logging.getLogger(__name__)

# Range prefix the host may put in front of a command, e.g. "'<,'>" or "%".
RANGE_PREFIX = r"[\s'<>,.%$\d]*"


class Dispatcher:
    """Resolves argument tokens against a `SubcommandRegistry`."""

    def __init__(self, command_name: str, registry: SubcommandRegistry) -> None:
        self.command_name = command_name
        self.registry = registry
        head = rf"^{RANGE_PREFIX}{re.escape(command_name)}!*"
        # "<Name> <key> <partial args...>": completing a subcommand's arguments
        self._args_shape = re.compile(head + r"\s+(\S+)\s+(.*)$", re.DOTALL)
        # "<Name> <partial key>": still typing the subcommand itself
        self._subcommand_shape = re.compile(head + r"\s+\S*$")

    # ------------------------------------------------------------------
    #  Execution
    # ------------------------------------------------------------------
    def dispatch(self, raw_args: Sequence[str], opts: CommandOpts) -> None:
        """
        Invoke the handler named by ``raw_args[0]`` with the remaining tokens.

        Raises `UnknownCommand` when *raw_args* is empty or names no
        registered subcommand. Anything the handler raises propagates.
        """
        if not raw_args:
            raise UnknownCommand("")
        key = raw_args[0]
        spec = self.registry.get_spec(key)
        if spec is None:
            raise UnknownCommand(key)
        logger.debug("Dispatching %s %s with %d argument(s)", self.command_name, key, len(raw_args) - 1)
        spec.invoke(list(raw_args[1:]), opts)

    # ------------------------------------------------------------------
    #  Completion
    # ------------------------------------------------------------------
    def complete(self, arg_lead: str, cmd_line: str) -> List[str]:
        """
        Completion candidates for *arg_lead* given everything typed so far.

        Never raises; an unmatched or malformed line yields ``[]``.
        """
        match = self._args_shape.match(cmd_line)
        if match:
            spec = self.registry.get_spec(match.group(1))
            if spec is not None and spec.complete_args is not None:
                try:
                    return list(spec.complete_args(arg_lead))
                except Exception as exc:
                    logger.warning("Argument completion for '%s' failed: %s", match.group(1), exc)
                    return []

        if self._subcommand_shape.match(cmd_line):
            return [key for key in self.registry if arg_lead in key]

        return []
