#!/usr/bin/env python3
"""
reactive-config CLI

Command-line tools for JSONC configuration files: check, format, read and
edit values without losing comments, and watch a file through a store.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

from .config.store import ConfigStore
from .errors import ConfigError, JsoncSyntaxError
from .jsonc.editor import set_value
from .jsonc.formatter import format_text
from .jsonc.parser import AccessPath, parse
from .models import FormattingOptions


def parse_dotted_path(dotted: str, document: Any) -> AccessPath:
    """
    Split ``a.b.0`` into path segments.

    A numeric segment is an index when the document holds an array at that
    point and a key otherwise.
    """
    if not dotted:
        return ()
    path: List[Any] = []
    node = document
    for part in dotted.split("."):
        if isinstance(node, list) and (part.isdigit() or part == "-1"):
            segment = int(part)
            node = node[segment] if -len(node) <= segment < len(node) else None
        else:
            segment = part
            node = node.get(part) if isinstance(node, dict) else None
        path.append(segment)
    return tuple(path)


class ReactiveConfigCLI:
    """CLI for JSONC configuration files."""

    def _read(self, file: str) -> str:
        return Path(file).read_text(encoding="utf-8")

    def _print_diagnostics(self, file: str, error: JsoncSyntaxError) -> None:
        for diagnostic in error.diagnostics:
            print(f"{file}:{diagnostic.line}:{diagnostic.column}: {diagnostic.code.label}")

    async def cmd_check(self, args) -> int:
        """Parse a file and report diagnostics."""
        try:
            parse(self._read(args.file), file_path=args.file)
        except JsoncSyntaxError as e:
            self._print_diagnostics(args.file, e)
            return 1
        print(f"✅ {args.file} is valid")
        return 0

    async def cmd_format(self, args) -> int:
        """Re-indent a file in place, or report whether it needs it."""
        text = self._read(args.file)
        try:
            parse(text, file_path=args.file)
        except JsoncSyntaxError as e:
            self._print_diagnostics(args.file, e)
            return 1

        formatted = format_text(text, FormattingOptions(tab_size=args.indent))
        if formatted == text:
            print(f"✅ {args.file} already formatted")
            return 0
        if args.check:
            print(f"⚠️  {args.file} needs formatting")
            return 1
        Path(args.file).write_text(formatted, encoding="utf-8")
        print(f"✅ Formatted {args.file}")
        return 0

    async def cmd_get(self, args) -> int:
        """Print the value at a dotted path as JSON."""
        document = parse(self._read(args.file), file_path=args.file)
        value = document
        for segment in parse_dotted_path(args.path or "", document):
            try:
                value = value[segment]
            except (KeyError, IndexError, TypeError):
                print(f"❌ Path not found: {args.path}")
                return 1
        print(json.dumps(value, indent=2, ensure_ascii=False))
        return 0

    async def cmd_set(self, args) -> int:
        """Set a value at a dotted path, keeping comments and layout."""
        file = Path(args.file)
        text = file.read_text(encoding="utf-8") if file.exists() else ""
        document = parse(text, allow_empty_content=True, file_path=args.file)

        if args.raw:
            value = args.value
        else:
            value = parse(args.value)

        path = parse_dotted_path(args.path, document)
        updated = set_value(text, path, value)
        if updated == text:
            print(f"✅ {args.path} unchanged")
            return 0
        file.write_text(updated, encoding="utf-8")
        print(f"✅ Set {args.path} in {args.file}")
        return 0

    async def cmd_watch(self, args) -> int:
        """Keep a watching store open and log reloads until interrupted."""
        file = Path(args.file)
        default: Any = {}
        if file.exists():
            try:
                if isinstance(parse(self._read(args.file), allow_empty_content=True), list):
                    default = []
            except JsoncSyntaxError:
                pass

        async with ConfigStore(file, default, watch_file=True):
            print(f"👀 Watching {args.file} (Ctrl+C to stop)")
            await asyncio.Event().wait()
        return 0

    def run(self, argv=None) -> int:
        """Run CLI."""
        parser = argparse.ArgumentParser(
            prog="reactive-config",
            description="Check, format and edit JSONC configuration files"
        )
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

        subparsers = parser.add_subparsers(dest="command", help="Command to run")

        # check command
        check_parser = subparsers.add_parser("check", help="Report syntax errors")
        check_parser.add_argument("file", help="JSONC file")

        # format command
        format_parser = subparsers.add_parser("format", help="Re-indent a file")
        format_parser.add_argument("file", help="JSONC file")
        format_parser.add_argument("--indent", type=int, default=4, help="Spaces per level (default: 4)")
        format_parser.add_argument("--check", action="store_true", help="Only report whether formatting is needed")

        # get command
        get_parser = subparsers.add_parser("get", help="Print a value")
        get_parser.add_argument("file", help="JSONC file")
        get_parser.add_argument("path", nargs="?", help="Dotted path, e.g. server.ports.0")

        # set command
        set_parser = subparsers.add_parser("set", help="Set a value, keeping comments")
        set_parser.add_argument("file", help="JSONC file")
        set_parser.add_argument("path", help="Dotted path, e.g. server.port")
        set_parser.add_argument("value", help="JSON value")
        set_parser.add_argument("--raw", action="store_true", help="Store VALUE as a string without parsing")

        # watch command
        watch_parser = subparsers.add_parser("watch", help="Watch a file and log reloads")
        watch_parser.add_argument("file", help="JSONC file")

        args = parser.parse_args(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

        if not args.command:
            parser.print_help()
            return 1

        # Route to command handler
        cmd_map = {
            "check": self.cmd_check,
            "format": self.cmd_format,
            "get": self.cmd_get,
            "set": self.cmd_set,
            "watch": self.cmd_watch,
        }

        handler = cmd_map[args.command]

        try:
            return asyncio.run(handler(args))
        except KeyboardInterrupt:
            print("\nInterrupted")
            return 130
        except JsoncSyntaxError as e:
            print(f"❌ {e.message}")
            return 1
        except ConfigError as e:
            print(f"❌ Error: {e.message}")
            if e.suggestion:
                print(f"  → {e.suggestion}")
            return 1
        except (OSError, UnicodeDecodeError) as e:
            print(f"❌ Error: {e}")
            return 1


def main():
    """Main entry point."""
    cli = ReactiveConfigCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
