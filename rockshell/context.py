"""
Shared runtime context handed to every subcommand handler.

• Keeps the session's rock tree (installed rock -> version).
• Owns the deferred tasks handlers schedule for long-running work, so the
  shell can wait for them before it exits.
"""

from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

Notifier = Callable[[str, int], None]


# ---------------------------------------------------------------------------
#  Safe JSON encoder for arbitrary objects in the state dump
# ---------------------------------------------------------------------------
class _SafeEncoder(json.JSONEncoder):
    def default(self, obj):  # noqa: D401, N802
        try:
            return super().default(obj)
        except TypeError:
            return str(obj)


class AppContext:
    """
    Aggregates run-time data used by the subcommand handlers.
    The shell creates one instance per session.
    """

    def __init__(
        self,
        *,
        notify: Optional[Notifier] = None,
        installed: Optional[Dict[str, str]] = None,
        max_actions: int = 200,
    ) -> None:
        self.notify: Notifier = notify or _log_only
        self.installed: Dict[str, str] = dict(installed or {})
        self.actions: List[Dict[str, Any]] = []
        self.max_actions = max_actions
        self._tasks: Set[asyncio.Task] = set()

    # ---------------------------------------------------------------------
    #  Action history
    # ---------------------------------------------------------------------
    def record_action(self, *, subcommand: str, args: List[str], ok: bool) -> None:
        if len(self.actions) >= self.max_actions:
            self.actions.pop(0)
        self.actions.append({"subcommand": subcommand, "args": list(args), "ok": ok})

    # ---------------------------------------------------------------------
    #  Deferred work
    # ---------------------------------------------------------------------
    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(
        self,
        coro: Awaitable[Any],
        *,
        name: str,
        subcommand: Optional[str] = None,
        args: Optional[List[str]] = None,
    ) -> asyncio.Task:
        """
        Run *coro* as a task on the running loop and keep track of it.
        Failures are reported through ``notify`` when the task finishes.
        When *subcommand* is given, the action is recorded once the task
        settles, with ``ok`` reflecting its outcome.

        Raises RuntimeError when no event loop is running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if asyncio.iscoroutine(coro):
                coro.close()
            raise
        task = loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(partial(self._task_done, subcommand=subcommand, args=args or []))
        logger.debug("Scheduled deferred task '%s' (%d pending)", name, len(self._tasks))
        return task

    def _task_done(self, task: asyncio.Task, *, subcommand: Optional[str], args: List[str]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info("Deferred task '%s' cancelled", task.get_name())
            ok = False
        else:
            exc = task.exception()
            ok = exc is None
            if exc is not None:
                logger.error("Deferred task '%s' failed", task.get_name(), exc_info=exc)
                self.notify(f"{task.get_name()} failed: {exc}", logging.ERROR)
        if subcommand is not None:
            self.record_action(subcommand=subcommand, args=args, ok=ok)

    async def drain(self, timeout: float = 10.0) -> None:
        """Wait up to *timeout* seconds for pending tasks, then cancel the rest."""
        if not self._tasks:
            return
        tasks = list(self._tasks)
        logger.debug("Waiting for %d deferred task(s)", len(tasks))
        _, still_running = await asyncio.wait(tasks, timeout=timeout)
        for task in still_running:
            logger.warning("Cancelling deferred task '%s' at shutdown", task.get_name())
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)

    # ---------------------------------------------------------------------
    #  Persist session state for debugging
    # ---------------------------------------------------------------------
    def dump_state_to_json(self, file_path: str = "rockshell_state.json") -> None:
        try:
            with open(file_path, "w", encoding="utf-8") as fp:
                json.dump(
                    {
                        "installed": self.installed,
                        "actions": self.actions,
                    },
                    fp,
                    cls=_SafeEncoder,
                    indent=2,
                )
            logger.debug("State dumped to %s", file_path)
        except OSError as exc:
            logger.warning("Failed to dump state to %s: %s", file_path, exc)


def _log_only(message: str, level: int = logging.INFO) -> None:
    logger.log(level, message)
