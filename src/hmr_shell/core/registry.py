"""
Command registry for the shell.

Commands are registered with a name, handler function, and metadata. A
handler is called as ``handler(args, raw)`` and may be a coroutine function.
"""

from __future__ import annotations

import inspect
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator

from hmr_shell.core.datamodels import BUILTIN_MODULE, CommandEntry, CommandResult, Suggestion
from hmr_shell.core.helpers import tokenize
from hmr_shell.core.history import DEFAULT_MAX_HISTORY, CommandHistory

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Registry for shell commands."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        self._commands: dict[str, CommandEntry] = {}
        self._aliases: dict[str, str] = {}
        self._history = CommandHistory(max_history)
        # Per-task, so overlapping async registrars keep their own owner
        self._owner: ContextVar[str | None] = ContextVar(f"command_owner_{id(self)}", default=None)
        # lower-cased name/alias -> module, for commands of a module mid-reload
        self._reloading: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        handler: Callable[..., Any],
        description: str | None = None,
        usage: str | None = None,
        aliases: list[str] | None = None,
        owning_module: str | None = None,
    ) -> CommandEntry:
        """Register a command, replacing any existing one with that name.

        Args:
            name: Command name (looked up lower-cased at execute time)
            handler: Callable taking (args, raw)
            description: Short description for help
            usage: Usage string (e.g., "echo <text>")
            aliases: Alternative names for the command
            owning_module: Module that owns the command; defaults to the
                module whose registrar is running, else BUILTIN_MODULE

        Returns:
            The stored CommandEntry
        """
        if owning_module is None:
            owning_module = self._owner.get() or BUILTIN_MODULE

        entry = CommandEntry(
            name=name,
            handler=handler,
            description=description or "",
            usage=usage or "",
            aliases=list(aliases or []),
            owning_module=owning_module,
        )

        # Names beat aliases: the new command takes over an alias spelled like it
        shadowing = self._aliases.pop(name, None)
        if shadowing is not None and shadowing in self._commands:
            target = self._commands[shadowing]
            target.aliases = [a for a in target.aliases if a != name]

        previous = self._commands.get(name)
        if previous is not None:
            for alias in previous.aliases:
                if alias not in entry.aliases and self._aliases.get(alias) == name:
                    del self._aliases[alias]

        self._commands[name] = entry

        for alias in entry.aliases:
            old_target = self._aliases.get(alias)
            if old_target is not None and old_target != name and old_target in self._commands:
                # Last write wins; keep the loser's alias list truthful
                loser = self._commands[old_target]
                loser.aliases = [a for a in loser.aliases if a != alias]
            self._aliases[alias] = name

        return entry

    def command(
        self,
        name: str,
        description: str | None = None,
        usage: str | None = None,
        aliases: list[str] | None = None,
        owning_module: str | None = None,
    ) -> Callable:
        """Decorator form of register().

        Example:
            @commands.command("echo", "Print arguments", usage="echo <text>")
            def cmd_echo(args, raw):
                return " ".join(args)
        """
        def decorator(func: Callable) -> Callable:
            self.register(name, func, description, usage, aliases, owning_module)
            return func
        return decorator

    @contextmanager
    def owned_by(self, module_name: str) -> Iterator[None]:
        """Attribute registrations made inside the block to module_name."""
        token = self._owner.set(module_name)
        try:
            yield
        finally:
            self._owner.reset(token)

    def unregister(self, name: str) -> bool:
        """Remove a command and every alias pointing to it."""
        entry = self._commands.pop(name, None)
        stale = [alias for alias, target in self._aliases.items() if target == name]
        for alias in stale:
            del self._aliases[alias]
        return entry is not None

    def unregister_all_for_module(self, module_name: str) -> list[str]:
        """Remove every command owned by a module.

        Returns:
            Names of the removed commands.
        """
        names = self.commands_by_module(module_name)
        for name in names:
            self.unregister(name)
        if names:
            logger.debug(f"Unregistered {len(names)} commands from module '{module_name}'")
        return names

    # ------------------------------------------------------------------
    # Reload bookkeeping
    # ------------------------------------------------------------------

    def mark_reloading(self, module_name: str, entries: list[CommandEntry]) -> None:
        """Remember names/aliases of a module's commands while it reloads."""
        for entry in entries:
            self._reloading[entry.name.lower()] = module_name
            for alias in entry.aliases:
                self._reloading[alias.lower()] = module_name

    def clear_reloading(self, module_name: str) -> None:
        self._reloading = {k: m for k, m in self._reloading.items() if m != module_name}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> str:
        """Map an alias to its canonical command name (identity otherwise)."""
        return self._aliases.get(name, name)

    def get(self, name: str) -> CommandEntry | None:
        """Get a command by name or alias."""
        return self._commands.get(self.resolve(name))

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._commands)

    def all_commands(self) -> list[CommandEntry]:
        """Get all registered commands sorted by name."""
        return sorted(self._commands.values(), key=lambda e: e.name)

    def commands_by_module(self, module_name: str) -> list[str]:
        """Names of the commands owned by a module, in registration order."""
        return [name for name, e in self._commands.items() if e.owning_module == module_name]

    def get_commands(self) -> list[dict[str, Any]]:
        """Get every command as a display dict."""
        return [entry.to_dict() for entry in self._commands.values()]

    def get_suggestions(self, partial: str) -> list[Suggestion]:
        """Autocomplete candidates for a partially typed command name."""
        prefix = (partial or "").lower()
        found: dict[str, Suggestion] = {}

        for name, entry in self._commands.items():
            if name.lower().startswith(prefix):
                found[name] = Suggestion(command=name, description=entry.description)

        for alias, target in self._aliases.items():
            if alias.lower().startswith(prefix) and alias not in found:
                found[alias] = Suggestion(
                    command=alias,
                    description=f"Alias for {target}",
                    is_alias=True,
                )

        return sorted(found.values(), key=lambda s: s.command)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, command_string: str) -> CommandResult | None:
        """Parse and run a command string.

        Returns None for blank input. Never raises for handler failures;
        errors come back as a failed CommandResult.
        """
        if not command_string or not command_string.strip():
            return None

        self._history.add(command_string)

        command, *args = tokenize(command_string)
        lowered = command.lower()
        entry = self._commands.get(self.resolve(lowered))

        if entry is None:
            module_name = self._reloading.get(lowered)
            if module_name is not None:
                return CommandResult.fail(
                    f"Command '{command}' is being reloaded (module '{module_name}'). "
                    "Try again shortly.",
                    reloading=True,
                )
            return CommandResult.fail(
                f"Unknown command: {command}. Type 'help' for available commands."
            )

        try:
            result = entry.handler(args, command_string)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Command execution error in '{entry.name}'", exc_info=True)
            return CommandResult.fail(f"Error executing command: {e}")

        return CommandResult.ok(result)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @property
    def history(self) -> list[str]:
        """Entered commands, most recent first."""
        return self._history.entries()

    @property
    def history_index(self) -> int:
        return self._history.index

    def add_to_history(self, command: str) -> None:
        self._history.add(command)

    def reset_history_cursor(self) -> None:
        self._history.reset_cursor()

    def navigate_history(self, direction: str) -> str | None:
        """Walk history like a shell: "up" for older, "down" for newer."""
        return self._history.navigate(direction)

    def clear_history(self) -> None:
        self._history.clear()
