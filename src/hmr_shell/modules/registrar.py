"""
Registration entry points for command modules.

A module declares which kind of registrar it implements with a module-level
``REGISTRAR_KIND`` and provides the matching function, e.g.:

    REGISTRAR_KIND = RegistrarKind.MUSIC

    def register_music_commands(host):
        host.commands.register("play", cmd_play, "Play a track")

Untagged modules are probed for the well-known function names in
REGISTRAR_VOCABULARY order and the first one found is called.
"""

from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Optional

from hmr_shell.core.exceptions import RegistrarError

logger = logging.getLogger(__name__)


class RegistrarKind(str, Enum):
    """Kinds of command modules, each with its own entry point."""
    CORE = "core"
    AI = "ai"
    GITHUB = "github"
    MUSIC = "music"
    SYSTEM = "system"
    EFFECTS = "effects"
    SCRIPT = "script"
    VOICE = "voice"
    GENERIC = "generic"

    @property
    def entry_point(self) -> str:
        return _ENTRY_POINTS[self]


_ENTRY_POINTS = {
    RegistrarKind.CORE: "register_core_commands",
    RegistrarKind.AI: "register_ai_commands",
    RegistrarKind.GITHUB: "register_github_commands",
    RegistrarKind.MUSIC: "register_music_commands",
    RegistrarKind.SYSTEM: "register_system_commands",
    RegistrarKind.EFFECTS: "register_effects_commands",
    RegistrarKind.SCRIPT: "register_script_commands",
    RegistrarKind.VOICE: "register_voice_commands",
    RegistrarKind.GENERIC: "register_commands",
}

# Probe order for modules that do not declare REGISTRAR_KIND
REGISTRAR_VOCABULARY: tuple[str, ...] = tuple(kind.entry_point for kind in RegistrarKind)


def declared_kind(exports: Any) -> Optional[RegistrarKind]:
    """Read a module's REGISTRAR_KIND tag, if any."""
    tag = getattr(exports, "REGISTRAR_KIND", None)
    if tag is None:
        return None
    try:
        return RegistrarKind(tag)
    except ValueError as e:
        raise RegistrarError(f"Unknown REGISTRAR_KIND: {tag!r}") from e


def find_registrar(exports: Any) -> Optional[tuple[str, Callable]]:
    """
    Find the registration function of a loaded module.

    Args:
        exports: Loaded module object

    Returns:
        Tuple of (entry point name, function), or None if the module
        contributes no commands.

    Raises:
        RegistrarError: If the declared kind's function is missing.
    """
    kind = declared_kind(exports)
    if kind is not None:
        fn = getattr(exports, kind.entry_point, None)
        if not callable(fn):
            raise RegistrarError(
                f"Module declares REGISTRAR_KIND={kind.value!r} "
                f"but has no callable {kind.entry_point}()"
            )
        return kind.entry_point, fn

    for entry_point in REGISTRAR_VOCABULARY:
        fn = getattr(exports, entry_point, None)
        if callable(fn):
            return entry_point, fn

    return None


async def invoke_registrar(exports: Any, host: Any) -> Optional[str]:
    """Call a module's registration function with the host.

    Returns:
        The entry point used, or None if the module has none.
    """
    found = find_registrar(exports)
    if found is None:
        return None

    entry_point, fn = found
    result = fn(host)
    if inspect.isawaitable(result):
        await result
    logger.debug(f"Registered commands using {entry_point}")
    return entry_point
