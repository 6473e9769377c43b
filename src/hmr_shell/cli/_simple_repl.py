"""
Plain REPL for terminals without prompt_toolkit support.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hmr_shell.host import Host

PROMPT = "hmr> "


async def repl(host: "Host") -> None:
    """Read lines with input() and run them until 'exit' or EOF.

    input() runs in the default executor so the watcher keeps polling.
    """
    loop = asyncio.get_running_loop()

    print("hmr-shell (simple mode) - 'help' for commands, Ctrl+D to exit")

    while host.running:
        try:
            user_input = await loop.run_in_executor(None, input, PROMPT)
        except EOFError:
            print("\nGoodbye!")
            break
        except KeyboardInterrupt:
            print()
            continue

        await host.handle_input(user_input)
