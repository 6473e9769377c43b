#!/usr/bin/env python3
"""
CLI entry point for the shell (hmr-shell command).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from hmr_shell.config import DEFAULTS, Config, get_config_manager
from hmr_shell.host import Host
from hmr_shell.logging import close_file_logging, configure_file_logging, configure_logging

logger = logging.getLogger(__name__)


def print_config():
    """Print current configuration."""
    cfg_mgr = get_config_manager()
    settings = cfg_mgr.list_settings()

    print(f"Config file: {cfg_mgr.CONFIG_FILE}")

    if settings:
        print("\nCustom settings:")
        for key, value in settings.items():
            print(f"  {key}: {value}")

    print("\nDefaults (used when not set):")
    for key, value in DEFAULTS.items():
        if key not in settings:
            print(f"  {key}: {value}")

    print("\nSet with: hmr-shell --config-set key=value")
    print(f"Available keys: {', '.join(Config.model_fields)}")
    print()


def build_parser(cfg: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hmr-shell",
        description="Command shell with hot module reloading",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
User modules are loaded from {cfg.get('modules_dir')} by default.
Config file: {get_config_manager().CONFIG_FILE}

Examples:
    hmr-shell                          # Start the shell
    hmr-shell --dev --watch            # Hot reload with source watching
    hmr-shell -c "hmr modules"         # Run one command and exit
    hmr-shell --config-set dev_mode=true
        """,
    )
    dev = parser.add_mutually_exclusive_group()
    dev.add_argument("--dev", dest="dev_mode", action="store_true", default=None,
                     help="Enable hot reload")
    dev.add_argument("--no-dev", dest="dev_mode", action="store_false",
                     help="Disable hot reload")
    parser.add_argument("--modules-dir", type=Path, default=None,
                        help=f"User modules directory (default: {cfg.get('modules_dir')})")
    parser.add_argument("--watch", action="store_true", default=cfg.get("watch"),
                        help="Poll module sources for changes")
    parser.add_argument("--auto-reload", action="store_true", default=cfg.get("auto_reload"),
                        help="Reload changed modules automatically (with --watch)")
    parser.add_argument("--simple", action="store_true", default=cfg.get("simple"),
                        help="Use simple REPL (no prompt_toolkit features)")
    parser.add_argument("-c", "--command", metavar="CMD", action="append",
                        help="Run a command and exit (repeatable)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log INFO messages to stderr")
    parser.add_argument("--log-file", nargs="?", const="", default=None,
                        help="Write a debug log (default: ~/.hmr_shell/logs/shell.log)")

    # Config management
    parser.add_argument("--config", action="store_true",
                        help="Show current configuration")
    parser.add_argument("--config-set", metavar="KEY=VALUE",
                        help="Set a config value")
    parser.add_argument("--config-del", metavar="KEY",
                        help="Unset a config value (reset to default)")
    return parser


async def run(host: Host, commands: list[str] | None, simple: bool) -> int:
    """Start the host and either run one-shot commands or the REPL."""
    summary = await host.start()
    for name, error in summary.failed.items():
        print(f"Warning: module '{name}' failed to load: {error}", file=sys.stderr)

    try:
        if commands:
            exit_code = 0
            for line in commands:
                result = await host.handle_input(line)
                if result is not None and not result.success:
                    exit_code = 1
            return exit_code

        if simple:
            from hmr_shell.cli._simple_repl import repl
        else:
            from hmr_shell.cli._repl import repl
        await repl(host)
        return 0
    finally:
        host.shutdown()


def main():
    """Main entry point for the hmr-shell CLI."""
    cfg_mgr = get_config_manager()
    cfg = cfg_mgr.config

    parser = build_parser(cfg)
    args = parser.parse_args()

    # Handle --config
    if args.config:
        print_config()
        return

    # Handle --config-set
    if args.config_set:
        try:
            key, value = args.config_set.split("=", 1)
            cfg_mgr.set(key.strip(), value.strip())
            print(f"Set {key.strip()} = {value.strip()}")
            print(f"Saved to {cfg_mgr.CONFIG_FILE}")
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)
        return

    # Handle --config-del
    if args.config_del:
        try:
            cfg_mgr.unset(args.config_del)
            print(f"Unset {args.config_del}")
            print(f"Saved to {cfg_mgr.CONFIG_FILE}")
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)
        return

    # Logging
    configure_logging(logging.INFO if args.verbose else cfg.get("log_level"))
    log_file = args.log_file if args.log_file is not None else cfg.get("log_file")
    if log_file is not None:
        path = configure_file_logging(Path(log_file) if log_file else None)
        logger.info(f"Logging to {path}")

    # CLI flags override the config file for this run
    overrides = {"watch": args.watch, "auto_reload": args.auto_reload}
    if args.modules_dir is not None:
        overrides["modules_dir"] = str(args.modules_dir)
    run_cfg = cfg.model_copy(update=overrides)

    host = Host(run_cfg, dev_mode=args.dev_mode)
    try:
        exit_code = asyncio.run(run(host, args.command, args.simple))
    except KeyboardInterrupt:
        exit_code = 130
    finally:
        close_file_logging()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
