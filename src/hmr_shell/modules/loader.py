"""
Module loader - discovers and (re)loads command modules from disk.

User modules live in ~/.hmr_shell/modules/. Each module is either a single
``.py`` file or its own subdirectory with an __init__.py file, and registers
its commands from an entry point such as:

    # ~/.hmr_shell/modules/greet/__init__.py
    from hmr_shell.modules import RegistrarKind

    REGISTRAR_KIND = RegistrarKind.GENERIC

    def register_commands(host):
        host.commands.register("greet", lambda args, raw: f"Hello, {' '.join(args) or 'world'}!")

Every load compiles the current source text, so an edited module is never
served from the bytecode cache or a previous import.
"""

from __future__ import annotations

import logging
import sys
from importlib.machinery import SourceFileLoader
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from hmr_shell.core.exceptions import ModuleLoadError

logger = logging.getLogger(__name__)

# Default user modules directory
USER_MODULES_DIR = Path.home() / ".hmr_shell" / "modules"

# Package builtins directory
PACKAGE_BUILTINS_DIR = Path(__file__).resolve().parent.parent / "builtins"

# sys.modules prefix for loaded modules
MODULE_PREFIX = "hmr_module"


@runtime_checkable
class Loader(Protocol):
    """Capability that produces fresh module exports for a version."""

    def load(self, name: str, source: str, version: str) -> Any:
        """Load ``source`` as module ``name`` stamped with ``version``.

        May return the exports directly or an awaitable of them.
        """
        ...


class FreshSourceLoader(SourceFileLoader):
    """SourceFileLoader that never reads or writes the bytecode cache.

    Edits made within the same second as the cached .pyc (same size too)
    would otherwise be served stale.
    """

    def get_code(self, fullname):
        path = self.get_filename(fullname)
        return self.source_to_code(self.get_data(path), path)


def resolve_source(source: str | Path) -> Path:
    """Resolve a module source to the file that holds its code."""
    path = Path(source).expanduser()
    if path.is_dir():
        path = path / "__init__.py"
    return path


def discover_modules(modules_dir: Path) -> list[Path]:
    """
    Discover module sources in the given directory.

    Accepts subdirectories with an __init__.py and top-level .py files.

    Args:
        modules_dir: Directory to search

    Returns:
        Sorted list of module source paths.
    """
    if not modules_dir.exists():
        return []

    if not modules_dir.is_dir():
        logger.warning(f"Modules path is not a directory: {modules_dir}")
        return []

    found = []
    for entry in sorted(modules_dir.iterdir()):
        # Skip hidden and private entries
        if entry.name.startswith((".", "_")):
            continue
        if entry.is_dir():
            if (entry / "__init__.py").exists():
                found.append(entry)
            else:
                logger.debug(f"Skipping {entry.name}: no __init__.py")
        elif entry.suffix == ".py":
            found.append(entry)

    return found


def module_name_for(source: Path) -> str:
    """Derive a module name from its source path."""
    source = Path(source)
    if source.name == "__init__.py":
        return source.parent.name
    return source.stem if source.suffix == ".py" else source.name


class ModuleLoader:
    """Loads module source files into fresh module objects.

    Each load registers the module in sys.modules under
    ``<prefix>.<name>`` and records the version on the module as
    ``__hmr_version__``.
    """

    def __init__(self, prefix: str = MODULE_PREFIX):
        self.prefix = prefix

    def module_key(self, name: str) -> str:
        return f"{self.prefix}.{name}"

    def load(self, name: str, source: str, version: str) -> ModuleType:
        """
        Load a module from its source path.

        Args:
            name: Module name
            source: Path to a .py file or a package directory
            version: Version stamp for this load

        Returns:
            The executed module object.

        Raises:
            ModuleLoadError: If the source is missing or fails to execute.
        """
        path = resolve_source(source)
        if not path.is_file():
            raise ModuleLoadError(f"Module source not found: {path}")

        module_key = self.module_key(name)
        is_package = path.name == "__init__.py"
        spec = spec_from_file_location(
            module_key,
            path,
            loader=FreshSourceLoader(module_key, str(path)),
            submodule_search_locations=[str(path.parent)] if is_package else None,
        )
        if spec is None:
            raise ModuleLoadError(f"Could not create module spec for {path}")

        module = module_from_spec(spec)
        module.__hmr_version__ = version

        # Submodules of a package are re-imported with the package
        for key in [k for k in sys.modules if k.startswith(module_key + ".")]:
            del sys.modules[key]

        previous = sys.modules.get(module_key)
        sys.modules[module_key] = module
        try:
            spec.loader.exec_module(module)
        except SyntaxError as e:
            self._restore(module_key, previous)
            raise ModuleLoadError(f"Syntax error: {e}") from e
        except ImportError as e:
            self._restore(module_key, previous)
            raise ModuleLoadError(f"Import error: {e}") from e
        except OSError as e:
            self._restore(module_key, previous)
            raise ModuleLoadError(f"Could not read {path}: {e}") from e
        except Exception as e:
            self._restore(module_key, previous)
            raise ModuleLoadError(f"Error: {e}") from e

        logger.debug(f"Loaded module '{name}' v{version} from {path}")
        return module

    def source_mtime(self, source: str) -> float | None:
        """Modification time of a module's source, or None if unavailable."""
        try:
            return resolve_source(source).stat().st_mtime
        except OSError:
            return None

    def unload(self, name: str) -> None:
        """Drop a module (and its submodules) from sys.modules."""
        module_key = self.module_key(name)
        for key in [k for k in sys.modules if k == module_key or k.startswith(module_key + ".")]:
            del sys.modules[key]

    @staticmethod
    def _restore(module_key: str, previous: ModuleType | None) -> None:
        if previous is None:
            sys.modules.pop(module_key, None)
        else:
            sys.modules[module_key] = previous
