import pytest
from hypothesis import given, strategies as st

from rockshell.cli_commands import CommandOpts, SubcommandRegistry, SubcommandSpec
from rockshell.dispatcher import Dispatcher
from rockshell.errors import HandlerFailure, UnknownCommand


class TestDispatch:
    def test_routes_to_named_handler_only(self, dispatcher, recorder, opts):
        dispatcher.dispatch(["install", "neorg", "2.0.0"], opts)

        assert recorder.calls == [("install", ["neorg", "2.0.0"], opts)]

    def test_no_remaining_args(self, dispatcher, recorder, opts):
        dispatcher.dispatch(["sync"], opts)

        assert recorder.calls == [("sync", [], opts)]

    def test_accepts_tuple_args(self, dispatcher, recorder, opts):
        dispatcher.dispatch(("update", "neorg"), opts)

        assert recorder.calls == [("update", ["neorg"], opts)]

    def test_unknown_subcommand_raises(self, dispatcher, recorder, opts):
        with pytest.raises(UnknownCommand) as excinfo:
            dispatcher.dispatch(["frobnicate"], opts)

        assert excinfo.value.token == "frobnicate"
        assert recorder.calls == []

    def test_empty_args_raise(self, dispatcher, recorder, opts):
        with pytest.raises(UnknownCommand) as excinfo:
            dispatcher.dispatch([], opts)

        assert excinfo.value.token == ""
        assert recorder.calls == []

    def test_lookup_is_case_sensitive(self, dispatcher, recorder, opts):
        with pytest.raises(UnknownCommand):
            dispatcher.dispatch(["Install"], opts)
        assert recorder.calls == []

    def test_handler_errors_propagate(self, opts):
        def boom(args, opts):
            raise HandlerFailure("broken")

        def crash(args, opts):
            raise KeyError("missing")

        d = Dispatcher("Rocks", SubcommandRegistry({
            "boom": SubcommandSpec(boom),
            "crash": SubcommandSpec(crash),
        }))

        with pytest.raises(HandlerFailure, match="broken"):
            d.dispatch(["boom"], opts)
        with pytest.raises(KeyError):
            d.dispatch(["crash"], opts)

    def test_repeated_dispatch_is_identical(self, dispatcher, recorder, opts):
        dispatcher.dispatch(["install", "neorg"], opts)
        dispatcher.dispatch(["install", "neorg"], opts)

        assert recorder.calls[0] == recorder.calls[1]
        assert len(recorder.calls) == 2


class TestComplete:
    def test_argument_completion_uses_subcommand_completer(self, dispatcher):
        result = dispatcher.complete("ne", "Rocks install ne")

        assert "neorg" in result
        assert "neotest" in result
        assert "plenary.nvim" not in result

    def test_argument_completion_keeps_handler_order(self, dispatcher):
        assert dispatcher.complete("", "Rocks install ") == ["neorg", "neotest", "nvim-treesitter", "plenary.nvim"]

    def test_argument_completion_matches_substring(self, dispatcher):
        assert dispatcher.complete("vim", "Rocks install vim") == ["nvim-treesitter", "plenary.nvim"]

    def test_lists_all_subcommands_in_registry_order(self, dispatcher):
        assert dispatcher.complete("", "Rocks ") == ["install", "update", "sync"]

    def test_filters_subcommands_by_substring(self, dispatcher):
        assert dispatcher.complete("n", "Rocks n") == ["install", "sync"]
        assert dispatcher.complete("date", "Rocks date") == ["update"]

    def test_no_subcommand_match(self, dispatcher):
        assert dispatcher.complete("z", "Rocks z") == []

    def test_subcommand_filter_is_case_sensitive(self, dispatcher):
        assert dispatcher.complete("I", "Rocks I") == []

    def test_fully_typed_subcommand_without_space_still_completes_name(self, dispatcher):
        assert dispatcher.complete("install", "Rocks install") == ["install"]

    def test_subcommand_without_completer_yields_nothing(self, dispatcher):
        assert dispatcher.complete("ne", "Rocks update ne") == []

    def test_unknown_subcommand_yields_nothing(self, dispatcher):
        assert dispatcher.complete("ne", "Rocks nope ne") == []

    def test_other_command_yields_nothing(self, dispatcher):
        assert dispatcher.complete("", "Other ") == []
        assert dispatcher.complete("ne", "Other install ne") == []
        assert dispatcher.complete("", "Rocksy ") == []

    def test_bare_command_name_yields_nothing(self, dispatcher):
        assert dispatcher.complete("Rocks", "Rocks") == []

    def test_bang_and_range_prefix(self, dispatcher):
        assert dispatcher.complete("", "Rocks! ") == ["install", "update", "sync"]
        assert dispatcher.complete("", "'<,'>Rocks ") == ["install", "update", "sync"]
        assert "neorg" in dispatcher.complete("ne", "%Rocks! install ne")

    def test_irregular_whitespace(self, dispatcher):
        assert dispatcher.complete("ne", "  Rocks   install    ne") == ["neorg", "neotest"]
        assert dispatcher.complete("", "Rocks\t") == ["install", "update", "sync"]

    def test_completer_exception_is_swallowed(self):
        def broken(lead):
            raise RuntimeError("nope")

        d = Dispatcher("Rocks", SubcommandRegistry({"install": SubcommandSpec(lambda a, o: None, broken)}))

        assert d.complete("x", "Rocks install x") == []

    def test_completer_generator_is_materialized(self):
        d = Dispatcher("Rocks", SubcommandRegistry({
            "install": SubcommandSpec(lambda a, o: None, lambda lead: (c for c in ["a", "b"])),
        }))

        assert d.complete("", "Rocks install ") == ["a", "b"]

    def test_command_name_is_escaped(self):
        d = Dispatcher("R.cks", SubcommandRegistry({"sync": SubcommandSpec(lambda a, o: None)}))

        assert d.complete("", "R.cks ") == ["sync"]
        assert d.complete("", "Rocks ") == []

    def test_repeated_completion_is_identical(self, dispatcher):
        first = dispatcher.complete("ne", "Rocks install ne")
        assert dispatcher.complete("ne", "Rocks install ne") == first

    @given(st.text(), st.text())
    def test_never_raises(self, arg_lead, cmd_line):
        d = Dispatcher("Rocks", SubcommandRegistry({
            "install": SubcommandSpec(lambda a, o: None, lambda lead: [c for c in ["neorg"] if lead in c]),
            "sync": SubcommandSpec(lambda a, o: None),
        }))

        result = d.complete(arg_lead, cmd_line)

        assert isinstance(result, list)
        assert all(isinstance(c, str) for c in result)

    @given(st.text(alphabet=" \t\nRocksinal!'<,>", max_size=30))
    def test_never_raises_on_near_miss_lines(self, cmd_line):
        d = Dispatcher("Rocks", SubcommandRegistry({"install": SubcommandSpec(lambda a, o: None)}))

        assert isinstance(d.complete("", cmd_line), list)


def test_opts_are_passed_through(dispatcher, recorder):
    opts = CommandOpts(name="Rocks", args="install neorg", fargs=["install", "neorg"], bang=True)

    dispatcher.dispatch(opts.fargs, opts)

    assert recorder.calls[0][2].bang is True
