"""
Shared fixtures for hmr-shell tests.
"""

import textwrap
from types import SimpleNamespace

import pytest

from hmr_shell.core import CommandRegistry
from hmr_shell.modules import ModuleRegistry, ModuleState, invoke_registrar


class MemoryLoader:
    """Loader that builds module exports from factories instead of files.

    ``factories[name]`` is called with the version being loaded and returns
    the exports object. Setting ``fail[name]`` makes the next loads raise,
    and ``gate`` (an asyncio.Event) holds loads until it is set.
    """

    def __init__(self):
        self.factories = {}
        self.fail = {}
        self.gate = None
        self.calls = []

    async def load(self, name, source, version):
        self.calls.append((name, version))
        if self.gate is not None:
            await self.gate.wait()
        if name in self.fail:
            raise RuntimeError(self.fail[name])
        return self.factories[name](version)


def make_echo_module(command, reply):
    """Factory for a module registering one command that returns ``reply``."""

    def factory(version):
        def register_commands(host):
            host.commands.register(command, lambda args, raw: reply, f"Reply {reply}")

        return SimpleNamespace(register_commands=register_commands, version=version)

    return factory


@pytest.fixture
def echo_module():
    return make_echo_module


@pytest.fixture
def commands():
    """Empty command registry."""
    return CommandRegistry()


@pytest.fixture
def memory_loader():
    return MemoryLoader()


@pytest.fixture
def manager(commands, memory_loader):
    """Module registry with hot reload enabled and an in-memory loader."""
    return ModuleRegistry(commands, loader=memory_loader, enabled=True)


@pytest.fixture
def load_into():
    """Fetch a module, record it and run its registrar, like the host does."""

    async def _load(manager, name, version="1.0.0", dependencies=None):
        exports = await manager.fetch(name, f"memory://{name}", version)
        record = manager.register_module(name, f"memory://{name}", exports, version, dependencies)
        with manager.commands.owned_by(name):
            await invoke_registrar(exports, manager.host)
        assert record.state == ModuleState.LOADED
        return record

    return _load


@pytest.fixture
def write_module(tmp_path):
    """Write a module source file under tmp_path/modules and return its path."""
    modules_dir = tmp_path / "modules"
    modules_dir.mkdir(exist_ok=True)

    def _write(name, body, package=False):
        source = textwrap.dedent(body)
        if package:
            path = modules_dir / name / "__init__.py"
            path.parent.mkdir(exist_ok=True)
        else:
            path = modules_dir / f"{name}.py"
        path.write_text(source)
        return path

    _write.dir = modules_dir
    return _write
