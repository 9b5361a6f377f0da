"""Command-line entry point for stew."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional, Sequence

from .commands.browse import browse
from .commands.configure import configure
from .commands.install import install
from .commands.listing import list_binaries
from .commands.rename import rename
from .commands.search import search
from .commands.uninstall import uninstall
from .commands.upgrade import upgrade

VERSION = "v0.6.0"


def _first(args: Sequence[str]) -> str:
    return args[0] if args else ""


def _add_command(
    subparsers: "argparse._SubParsersAction[argparse.ArgumentParser]",
    name: str,
    aliases: list[str],
    help_text: str,
    handler: Callable[[argparse.Namespace], None],
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, aliases=aliases, help=help_text, description=help_text)
    parser.add_argument("args", nargs="*", metavar="ARG")
    parser.set_defaults(handler=handler)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every stew subcommand."""
    parser = argparse.ArgumentParser(prog="stew")
    parser.add_argument("--version", "-v", action="version", version=f"stew version {VERSION}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    _add_command(
        subparsers,
        "install",
        ["i"],
        "Install a binary. The input can be a GitHub repo or a URL. "
        "[Ex: stew install marwanhawari/ppath]",
        lambda ns: install(_first(ns.args)),
    )
    _add_command(
        subparsers,
        "search",
        ["s"],
        "Search for a GitHub repo then browse the selected repo's releases and assets. "
        "[Ex: stew search ripgrep]",
        lambda ns: search(ns.args),
    )
    _add_command(
        subparsers,
        "browse",
        ["b"],
        "Browse the releases and assets from a GitHub repo. [Ex: stew browse marwanhawari/ppath]",
        lambda ns: browse(_first(ns.args)),
    )
    upgrade_parser = _add_command(
        subparsers,
        "upgrade",
        ["up"],
        "Upgrade a binary to the latest available in the GitHub repo. "
        "Use the name of the installed binary. [Ex: stew upgrade fzf]",
        lambda ns: upgrade(ns.all, _first(ns.args)),
    )
    upgrade_parser.add_argument("--all", action="store_true", help="Upgrade all binaries")
    uninstall_parser = _add_command(
        subparsers,
        "uninstall",
        ["un"],
        "Uninstall a binary. Use the name of the installed binary. [Ex: stew uninstall fzf]",
        lambda ns: uninstall(ns.all, _first(ns.args)),
    )
    uninstall_parser.add_argument("--all", action="store_true", help="Uninstall all binaries")
    _add_command(
        subparsers,
        "rename",
        ["re"],
        "Rename an installed binary using an interactive UI. [Ex: stew rename fzf]",
        lambda ns: rename(_first(ns.args)),
    )
    list_parser = _add_command(
        subparsers,
        "list",
        ["ls"],
        "List installed binaries [Ex: stew list]",
        lambda ns: list_binaries(ns.tags),
    )
    list_parser.add_argument("--tags", action="store_true", help="include the version tags")
    _add_command(
        subparsers,
        "config",
        [],
        "Configure stew using an interactive UI. [Ex: stew config]",
        lambda ns: configure(),
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run stew; return the process exit status."""
    parser = build_parser()
    namespace = parser.parse_args(argv)
    handler = getattr(namespace, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        handler(namespace)
    except Exception as err:  # every failure is reported to the user, then stew exits
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())