"""
Feature-rich shell REPL implementation using prompt_toolkit.

Provides registry-backed completion, shell-style history recall, and a
status toolbar, while hot reload keeps running on the same event loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion, merge_completers
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style

if TYPE_CHECKING:
    from hmr_shell.host import Host


class CommandCompleter(Completer):
    """Completer for command names and aliases."""

    def __init__(self, host: "Host"):
        self.host = host

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor.lstrip()

        # Only complete the command word
        if " " in text:
            return

        for suggestion in self.host.commands.get_suggestions(text):
            yield Completion(
                suggestion.command,
                start_position=-len(text),
                display_meta=suggestion.description,
            )


class ModuleNameCompleter(Completer):
    """Completer for module names after 'reload' and 'hmr reload|info'."""

    def __init__(self, host: "Host"):
        self.host = host

    def get_completions(self, document, complete_event):
        words = document.text_before_cursor.split(" ")
        head = [w.lower() for w in words[:-1] if w]
        prefix = words[-1]

        if head == ["reload"] or head in (["hmr", "reload"], ["hmr", "info"]):
            for name in self.host.modules.module_names():
                if name.startswith(prefix):
                    record = self.host.modules.get_module_info(name)
                    yield Completion(
                        name,
                        start_position=-len(prefix),
                        display_meta=f"v{record.version}" if record else "",
                    )


def get_style() -> Style:
    """Get the prompt style."""
    return Style.from_dict({
        "prompt": "ansicyan bold",
        "bottom-toolbar": "noreverse",
    })


def _history_bindings(host: "Host") -> KeyBindings:
    """Up/Down walk the registry's command history."""
    bindings = KeyBindings()

    @bindings.add("up")
    def _(event):
        command = host.commands.navigate_history("up")
        if command is not None:
            event.app.current_buffer.text = command
            event.app.current_buffer.cursor_position = len(command)

    @bindings.add("down")
    def _(event):
        command = host.commands.navigate_history("down")
        if command is not None:
            event.app.current_buffer.text = command
            event.app.current_buffer.cursor_position = len(command)

    @bindings.add("c-c")
    def _(event):
        """Handle Ctrl+C - cancel current input."""
        event.app.current_buffer.reset()
        host.commands.reset_history_cursor()

    return bindings


async def repl(host: "Host") -> None:
    """Run the interactive shell until 'exit' or Ctrl+D.

    Args:
        host: A started Host.
    """

    def get_bottom_toolbar():
        """Hot reload status line."""
        status = host.modules.status()
        state = "<ansigreen>on</ansigreen>" if status.enabled else "<ansired>off</ansired>"
        watch = " | <b>Watching</b>" if status.watchers_active else ""
        busy = " | <ansiyellow>reloading...</ansiyellow>" if status.is_reloading else ""
        return HTML(
            f" <b>Hot reload:</b> {state} | <b>Modules:</b> {status.module_count} "
            f"| <b>Commands:</b> {len(host.commands)}{watch}{busy}"
        )

    session: PromptSession = PromptSession(
        completer=merge_completers([CommandCompleter(host), ModuleNameCompleter(host)]),
        style=get_style(),
        key_bindings=_history_bindings(host),
        complete_while_typing=True,
        bottom_toolbar=get_bottom_toolbar,
    )

    print("=" * 50)
    print("hmr-shell")
    print("=" * 50)
    print("Tab: completion | Up/Down: history")
    print("Ctrl+C: cancel | Ctrl+D: exit")
    print("'help' for commands, 'hmr' for hot reload")
    print("=" * 50)
    print()

    while host.running:
        try:
            with patch_stdout():
                user_input = await session.prompt_async(HTML("<prompt>hmr&gt; </prompt>"))
        except EOFError:
            print("Goodbye!")
            break
        except KeyboardInterrupt:
            continue

        await host.handle_input(user_input)
