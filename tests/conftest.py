import logging

import pytest

from rockshell.cli_commands import CommandOpts, SubcommandRegistry, SubcommandSpec, substring_matches
from rockshell.context import AppContext
from rockshell.dispatcher import Dispatcher

INSTALLABLE = ["neorg", "neotest", "nvim-treesitter", "plenary.nvim"]


class Recorder:
    """Collects (subcommand, args, opts) for every handler call."""

    def __init__(self):
        self.calls = []

    def handler(self, name):
        def _invoke(args, opts):
            self.calls.append((name, args, opts))
        return _invoke


class Notifications:
    def __init__(self):
        self.messages = []

    def __call__(self, message, level=logging.INFO):
        self.messages.append((level, message))

    def at(self, level):
        return [m for lvl, m in self.messages if lvl == level]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def registry(recorder):
    return SubcommandRegistry([
        ("install", SubcommandSpec(recorder.handler("install"), lambda lead: substring_matches(lead, INSTALLABLE))),
        ("update", SubcommandSpec(recorder.handler("update"))),
        ("sync", SubcommandSpec(recorder.handler("sync"))),
    ])


@pytest.fixture
def dispatcher(registry):
    return Dispatcher("Rocks", registry)


@pytest.fixture
def opts():
    return CommandOpts(name="Rocks")


@pytest.fixture
def notifications():
    return Notifications()


@pytest.fixture
def app_context(notifications):
    return AppContext(notify=notifications)
