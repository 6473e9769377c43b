#!/usr/bin/env python3
"""
Tests for the hmr/reload control commands and the tooling handle.
"""

import pytest

from hmr_shell.modules import (
    CONTROL_MODULE,
    HotReloadAPI,
    get_hot_reload_api,
    install_hot_reload_api,
    register_hot_reload_commands,
)
from hmr_shell.modules.api import uninstall_hot_reload_api
from hmr_shell.modules.control import format_report
from hmr_shell.modules.datamodels import ReloadOutcome, ReloadReport


@pytest.fixture
def controlled(manager, commands, memory_loader, echo_module, load_into):
    """Manager with the control commands and one loaded module."""
    register_hot_reload_commands(manager, commands)
    memory_loader.factories["music"] = echo_module("play", "playing")

    async def _setup():
        await load_into(manager, "music")
        return manager

    return _setup


class TestHmrCommand:
    """Tests for the 'hmr' command."""

    @pytest.mark.asyncio
    async def test_default_is_status(self, controlled, commands):
        await controlled()
        result = await commands.execute("hmr")
        assert result.success
        assert "Hot reload status:" in result.result
        assert "Modules:        1" in result.result

    @pytest.mark.asyncio
    async def test_alias(self, controlled, commands):
        await controlled()
        result = await commands.execute("hot status")
        assert "Enabled:        yes" in result.result

    @pytest.mark.asyncio
    async def test_reload_one(self, controlled, commands):
        manager = await controlled()
        result = await commands.execute("hmr reload music")
        assert result.result == "Reloaded module: music (v1.0.1)"
        assert manager.get_module_info("music").reload_count == 1

    @pytest.mark.asyncio
    async def test_reload_all(self, controlled, commands):
        await controlled()
        result = await commands.execute("hmr reload")
        assert result.result.startswith("Reloaded 1/1 modules in ")

    @pytest.mark.asyncio
    async def test_reload_unknown_module(self, controlled, commands):
        await controlled()
        result = await commands.execute("hmr reload ghost")
        assert not result.success
        assert result.error == "Error executing command: Module 'ghost' not found in registry"

    @pytest.mark.asyncio
    async def test_disable_then_reload(self, controlled, commands):
        manager = await controlled()
        assert (await commands.execute("hmr disable")).result == "Hot reload disabled"
        assert manager.enabled is False

        result = await commands.execute("reload music")
        assert not result.success
        assert "disabled" in result.error

        assert (await commands.execute("hmr enable")).result == "Hot reload enabled"
        assert (await commands.execute("reload music")).success

    @pytest.mark.asyncio
    async def test_modules(self, controlled, commands):
        await controlled()
        result = await commands.execute("hmr modules")
        assert "Loaded modules:" in result.result
        assert "music" in result.result

    @pytest.mark.asyncio
    async def test_modules_empty(self, manager, commands):
        register_hot_reload_commands(manager, commands)
        assert (await commands.execute("hmr modules")).result == "No modules registered"

    @pytest.mark.asyncio
    async def test_info(self, controlled, commands):
        await controlled()
        result = await commands.execute("hmr info music")
        assert "Module: music" in result.result
        assert "Commands:     play" in result.result

    @pytest.mark.asyncio
    async def test_info_missing(self, controlled, commands):
        await controlled()
        assert (await commands.execute("hmr info")).result == "Usage: hmr info <module>"
        assert (await commands.execute("hmr info ghost")).result == "Module 'ghost' not found"

    @pytest.mark.asyncio
    async def test_unknown_action_shows_help(self, controlled, commands):
        await controlled()
        result = await commands.execute("hmr frobnicate")
        assert result.result.startswith("Hot reload commands:")

    @pytest.mark.asyncio
    async def test_control_commands_survive_reload_all(self, controlled, commands):
        await controlled()
        await commands.execute("reload")
        assert commands.get("hmr").owning_module == CONTROL_MODULE
        assert "reload" in commands


class TestFormatReport:
    """Tests for format_report()."""

    def test_in_progress(self):
        assert format_report(ReloadReport(already_in_progress=True)) == "Reload already in progress"

    def test_failures_listed(self):
        report = ReloadReport(
            results=[
                ReloadOutcome(name="a", success=True, version="1.0.1"),
                ReloadOutcome(name="b", success=False, error="broken"),
            ],
            duration_ms=12.4,
        )
        text = format_report(report)
        assert text.splitlines()[0] == "Reloaded 1/2 modules in 12ms"
        assert "  b: broken" in text


class TestHotReloadAPI:
    """Tests for the process-wide tooling handle."""

    @pytest.fixture(autouse=True)
    def clean_handle(self):
        uninstall_hot_reload_api()
        yield
        uninstall_hot_reload_api()

    def test_not_installed(self):
        assert get_hot_reload_api() is None

    @pytest.mark.asyncio
    async def test_facade(self, manager, memory_loader, echo_module, load_into):
        memory_loader.factories["music"] = echo_module("play", "playing")
        await load_into(manager, "music")

        api = install_hot_reload_api(manager)
        assert isinstance(api, HotReloadAPI)
        assert get_hot_reload_api() is api
        assert api.modules() == ["music"]
        assert api.info("music").name == "music"

        record = await api.reload("music")
        assert record.version == "1.0.1"
        report = await api.reload_all()
        assert report.succeeded == 1

        api.disable()
        assert api.status().enabled is False
        api.enable()
        assert api.status().enabled is True

    def test_uninstall_only_own_manager(self, manager, commands, memory_loader):
        from hmr_shell.modules import ModuleRegistry

        install_hot_reload_api(manager)
        other = ModuleRegistry(commands, loader=memory_loader)
        uninstall_hot_reload_api(other)
        assert get_hot_reload_api() is not None
        uninstall_hot_reload_api(manager)
        assert get_hot_reload_api() is None
