#!/usr/bin/env python3
"""
Tests for module registration entry points.
"""

from types import SimpleNamespace

import pytest

from hmr_shell.core import RegistrarError
from hmr_shell.modules import REGISTRAR_VOCABULARY, RegistrarKind, invoke_registrar
from hmr_shell.modules.registrar import declared_kind, find_registrar


class TestRegistrarKind:
    """Tests for the tagged registrar kinds."""

    def test_entry_points(self):
        assert RegistrarKind.CORE.entry_point == "register_core_commands"
        assert RegistrarKind.VOICE.entry_point == "register_voice_commands"
        assert RegistrarKind.GENERIC.entry_point == "register_commands"

    def test_vocabulary_order(self):
        assert REGISTRAR_VOCABULARY[0] == "register_core_commands"
        assert REGISTRAR_VOCABULARY[-1] == "register_commands"
        assert len(REGISTRAR_VOCABULARY) == len(RegistrarKind)

    def test_declared_kind_accepts_string(self):
        assert declared_kind(SimpleNamespace(REGISTRAR_KIND="music")) is RegistrarKind.MUSIC

    def test_declared_kind_missing(self):
        assert declared_kind(SimpleNamespace()) is None

    def test_declared_kind_invalid(self):
        with pytest.raises(RegistrarError, match="Unknown REGISTRAR_KIND"):
            declared_kind(SimpleNamespace(REGISTRAR_KIND="jukebox"))


class TestFindRegistrar:
    """Tests for find_registrar()."""

    def test_tagged_module(self):
        def register_music_commands(host):
            pass

        exports = SimpleNamespace(
            REGISTRAR_KIND=RegistrarKind.MUSIC,
            register_music_commands=register_music_commands,
            register_core_commands=lambda host: None,
        )
        assert find_registrar(exports) == ("register_music_commands", register_music_commands)

    def test_tagged_module_missing_function(self):
        exports = SimpleNamespace(REGISTRAR_KIND="ai", register_commands=lambda host: None)
        with pytest.raises(RegistrarError, match="register_ai_commands"):
            find_registrar(exports)

    def test_probe_order(self):
        """Test that untagged modules use the first function in vocabulary order."""
        exports = SimpleNamespace(
            register_commands=lambda host: None,
            register_system_commands=lambda host: None,
        )
        name, _ = find_registrar(exports)
        assert name == "register_system_commands"

    def test_no_registrar(self):
        assert find_registrar(SimpleNamespace(helper=lambda: None)) is None

    def test_non_callable_ignored(self):
        exports = SimpleNamespace(register_core_commands="nope", register_commands=lambda host: None)
        name, _ = find_registrar(exports)
        assert name == "register_commands"


class TestInvokeRegistrar:
    """Tests for invoke_registrar()."""

    @pytest.mark.asyncio
    async def test_sync_registrar(self):
        host = SimpleNamespace(calls=[])
        exports = SimpleNamespace(register_commands=lambda h: h.calls.append("sync"))
        assert await invoke_registrar(exports, host) == "register_commands"
        assert host.calls == ["sync"]

    @pytest.mark.asyncio
    async def test_async_registrar(self):
        host = SimpleNamespace(calls=[])

        async def register_github_commands(h):
            h.calls.append("async")

        exports = SimpleNamespace(register_github_commands=register_github_commands)
        assert await invoke_registrar(exports, host) == "register_github_commands"
        assert host.calls == ["async"]

    @pytest.mark.asyncio
    async def test_module_without_registrar(self):
        assert await invoke_registrar(SimpleNamespace(), SimpleNamespace()) is None
