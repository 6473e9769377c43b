"""
CLI module for the hmr_shell package.

Provides the interactive shell and its command-line entry point.
"""

from hmr_shell.cli._simple_repl import repl as simple_repl

# Try to import feature-rich REPL, fallback to simple
try:
    from hmr_shell.cli._repl import repl
except ImportError:
    repl = simple_repl

__all__ = [
    "repl",
    "simple_repl",
]
