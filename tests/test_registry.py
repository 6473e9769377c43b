#!/usr/bin/env python3
"""
Tests for the command registry: registration, aliases, execution,
suggestions and history.
"""

import asyncio

import pytest

from hmr_shell.core import BUILTIN_MODULE, CommandRegistry, CommandResult
from hmr_shell.core.helpers import increment_version, tokenize


# ============================================================================
# Helper Tests
# ============================================================================

class TestHelpers:
    """Tests for parsing and versioning helpers."""

    def test_tokenize_collapses_whitespace(self):
        assert tokenize("  echo   hello\tworld ") == ["echo", "hello", "world"]

    def test_tokenize_blank(self):
        assert tokenize("   ") == []
        assert tokenize("") == []

    @pytest.mark.parametrize("version,expected", [
        ("1.0.0", "1.0.1"),
        ("1.2.9", "1.2.10"),
        ("2", "2.0.1"),
        ("3.1", "3.1.1"),
        ("1.0.beta", "1.0.1"),
    ])
    def test_increment_version(self, version, expected):
        assert increment_version(version) == expected


# ============================================================================
# Registration Tests
# ============================================================================

class TestRegistration:
    """Tests for register/unregister."""

    def test_register_defaults(self, commands):
        entry = commands.register("ping", lambda args, raw: "pong")
        assert entry.description == ""
        assert entry.usage == ""
        assert entry.aliases == []
        assert entry.owning_module == BUILTIN_MODULE
        assert "ping" in commands
        assert len(commands) == 1

    def test_last_write_wins(self, commands):
        """Test that re-registering a name replaces the previous entry."""
        commands.register("x", lambda args, raw: 1)
        commands.register("x", lambda args, raw: 2)
        assert len(commands) == 1
        assert commands.get("x").handler([], "x") == 2

    def test_overwrite_drops_stale_aliases(self, commands):
        commands.register("ls", lambda args, raw: None, aliases=["dir", "l"])
        commands.register("ls", lambda args, raw: None, aliases=["l"])
        assert commands.get("dir") is None
        assert commands.get("l").name == "ls"

    def test_alias_last_write_wins(self, commands):
        commands.register("a", lambda args, raw: "a", aliases=["x"])
        commands.register("b", lambda args, raw: "b", aliases=["x"])
        assert commands.resolve("x") == "b"
        assert commands.get("a").aliases == []

    def test_owned_by(self, commands):
        with commands.owned_by("music"):
            commands.register("play", lambda args, raw: None)
        commands.register("stop", lambda args, raw: None)
        assert commands.get("play").owning_module == "music"
        assert commands.get("stop").owning_module == BUILTIN_MODULE

    def test_explicit_owner_beats_context(self, commands):
        with commands.owned_by("music"):
            commands.register("hmr", lambda args, raw: None, owning_module="hmr")
        assert commands.get("hmr").owning_module == "hmr"

    @pytest.mark.asyncio
    async def test_owned_by_is_per_task(self, commands):
        """Test that interleaved registrars each keep their own owner."""

        async def registrar(module_name, command):
            with commands.owned_by(module_name):
                await asyncio.sleep(0)
                commands.register(command, lambda args, raw: None)

        await asyncio.gather(registrar("a", "cmd_a"), registrar("b", "cmd_b"))
        assert commands.get("cmd_a").owning_module == "a"
        assert commands.get("cmd_b").owning_module == "b"
        assert commands.commands_by_module("a") == ["cmd_a"]

    @pytest.mark.asyncio
    async def test_name_replaces_alias_of_same_spelling(self, commands):
        commands.register("bar", lambda args, raw: "bar", aliases=["foo"])
        commands.register("foo", lambda args, raw: "foo")

        assert (await commands.execute("foo")).result == "foo"
        assert commands.resolve("foo") == "foo"
        assert commands.get("bar").aliases == []
        assert (await commands.execute("bar")).result == "bar"

    def test_decorator(self, commands):
        @commands.command("greet", "Say hello", usage="greet <name>")
        def cmd_greet(args, raw):
            return f"hi {args[0]}"

        entry = commands.get("greet")
        assert entry.handler is cmd_greet
        assert entry.usage == "greet <name>"

    def test_unregister_removes_aliases(self, commands):
        commands.register("exit", lambda args, raw: None, aliases=["quit", "q"])
        assert commands.unregister("exit") is True
        assert commands.get("quit") is None
        assert commands.resolve("q") == "q"
        assert commands.unregister("exit") is False

    def test_unregister_all_for_module(self, commands):
        commands.register("a", lambda args, raw: None, owning_module="m1")
        commands.register("b", lambda args, raw: None, owning_module="m1")
        commands.register("c", lambda args, raw: None, owning_module="m2")
        removed = commands.unregister_all_for_module("m1")
        assert removed == ["a", "b"]
        assert [e.name for e in commands.all_commands()] == ["c"]

    def test_get_commands(self, commands):
        commands.register("echo", lambda args, raw: None, "Print", aliases=["say"])
        assert commands.get_commands() == [{
            "name": "echo",
            "description": "Print",
            "usage": "",
            "aliases": ["say"],
            "module": BUILTIN_MODULE,
        }]


# ============================================================================
# Execution Tests
# ============================================================================

class TestExecute:
    """Tests for CommandRegistry.execute()."""

    @pytest.mark.asyncio
    async def test_blank_input_returns_none(self, commands):
        assert await commands.execute("") is None
        assert await commands.execute("   ") is None
        assert commands.history == []

    @pytest.mark.asyncio
    async def test_handler_receives_args_and_raw(self, commands):
        seen = {}

        def handler(args, raw):
            seen["args"], seen["raw"] = args, raw
            return "done"

        commands.register("run", handler)
        result = await commands.execute("run  a   b")
        assert result == CommandResult(success=True, result="done")
        assert seen == {"args": ["a", "b"], "raw": "run  a   b"}

    @pytest.mark.asyncio
    async def test_alias_passes_args(self, commands):
        commands.register("echo", lambda args, raw: " ".join(args), aliases=["say"])
        result = await commands.execute("say hello world")
        assert result.success
        assert result.result == "hello world"

    @pytest.mark.asyncio
    async def test_command_name_case_insensitive(self, commands):
        commands.register("echo", lambda args, raw: "ok")
        result = await commands.execute("ECHO")
        assert result.result == "ok"

    @pytest.mark.asyncio
    async def test_async_handler(self, commands):
        async def handler(args, raw):
            return len(args)

        commands.register("count", handler)
        result = await commands.execute("count 1 2 3")
        assert result.result == 3

    @pytest.mark.asyncio
    async def test_unknown_command(self, commands):
        result = await commands.execute("nope arg")
        assert not result.success
        assert result.error == "Unknown command: nope. Type 'help' for available commands."
        assert result.reloading is False

    @pytest.mark.asyncio
    async def test_handler_error_becomes_failure(self, commands):
        def boom(args, raw):
            raise RuntimeError("boom")

        commands.register("boom", boom)
        result = await commands.execute("boom")
        assert not result.success
        assert result.error == "Error executing command: boom"

    @pytest.mark.asyncio
    async def test_reloading_command_reports_reloading(self, commands):
        entry = commands.register("play", lambda args, raw: None, aliases=["p"], owning_module="music")
        commands.mark_reloading("music", [entry])
        commands.unregister_all_for_module("music")

        result = await commands.execute("p")
        assert not result.success
        assert result.reloading is True
        assert "being reloaded" in result.error

        commands.clear_reloading("music")
        result = await commands.execute("p")
        assert result.reloading is False
        assert result.error.startswith("Unknown command")

    @pytest.mark.asyncio
    async def test_execute_records_history(self, commands):
        await commands.execute("first")
        await commands.execute("second")
        await commands.execute("second")
        assert commands.history == ["second", "first"]


# ============================================================================
# Suggestion and History Tests
# ============================================================================

class TestSuggestions:
    """Tests for get_suggestions()."""

    @pytest.fixture
    def populated(self, commands):
        commands.register("help", lambda args, raw: None, "Show help", aliases=["h", "?"])
        commands.register("history", lambda args, raw: None, "Show history")
        commands.register("hmr", lambda args, raw: None, "Hot reload", aliases=["hot"])
        return commands

    def test_prefix_match_sorted(self, populated):
        names = [s.command for s in populated.get_suggestions("h")]
        assert names == ["h", "help", "history", "hmr", "hot"]

    def test_alias_description(self, populated):
        (hot,) = populated.get_suggestions("ho")
        assert hot.is_alias
        assert hot.description == "Alias for hmr"

    def test_case_insensitive(self, populated):
        assert [s.command for s in populated.get_suggestions("HE")] == ["help"]

    def test_empty_prefix_lists_everything(self, populated):
        assert len(populated.get_suggestions("")) == 6

    def test_name_wins_over_alias(self, commands):
        commands.register("ls", lambda args, raw: None, "List")
        commands.register("dir", lambda args, raw: None, "Dir", aliases=["ls"])
        (ls,) = [s for s in commands.get_suggestions("ls")]
        assert ls.is_alias is False
        assert ls.description == "List"


class TestRegistryHistory:
    """Tests for the registry's history wrappers."""

    def test_navigate(self):
        commands = CommandRegistry(max_history=2)
        for cmd in ["a", "b", "c"]:
            commands.add_to_history(cmd)
        assert commands.history == ["c", "b"]
        assert commands.navigate_history("up") == "c"
        assert commands.history_index == 0
        commands.reset_history_cursor()
        assert commands.history_index == -1

    def test_clear(self, commands):
        commands.add_to_history("a")
        commands.clear_history()
        assert commands.history == []
