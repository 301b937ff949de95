"""Command-line interface that shows hardware information."""

from __future__ import annotations

import argparse
import platform
import sys
import tarfile
from importlib import metadata
from typing import Callable, Iterable, Iterator, Optional, Sequence

from . import baseboard as _baseboard
from . import bios as _bios
from . import chassis as _chassis
from . import host as _host

HUMAN = "human"
JSON = "json"
YAML = "yaml"
FORMATS = (HUMAN, JSON, YAML)

_CAPS_PER_ROW = 6
_CAPS_CONTINUATION = "                 "

_VERSION_HEADER = """
Date: %s
Build: %s
Version: %s
Git Hash: %s
"""

_LOAD_ERRORS = (OSError, RuntimeError, ValueError, tarfile.TarError)


class _CommandError(Exception):
    """A discovery step failed while running a command."""


def format_capabilities(capabilities: Sequence[str]) -> list[str]:
    """Return the capability listing lines printed under a processor."""
    caps = list(capabilities)
    count = len(caps)
    rows = -(-count // _CAPS_PER_ROW)
    lines = []
    for row in range(1, rows):
        start = row * _CAPS_PER_ROW - 1
        end = min(start + _CAPS_PER_ROW, count)
        text = " ".join(caps[start:end])
        if row == 1:
            lines.append(f"  capabilities: [{text}")
        elif end < count:
            lines.append(f"{_CAPS_CONTINUATION}{text}")
        else:
            lines.append(f"{_CAPS_CONTINUATION}{text}]")
    return lines


def _cpu_details(info) -> Iterator[str]:
    for proc in info.processors:
        yield f" {proc}"
        for core in proc.cores:
            yield f"  {core}"
        yield from format_capabilities(proc.capabilities)


def _block_details(info) -> Iterator[str]:
    for disk in info.disks:
        yield f" {disk}"
        for part in disk.partitions:
            yield f"  {part}"


def _no_details(info) -> Iterable[str]:
    return ()


# name -> (help text, loader, label used in error messages, extra human lines)
_COMMANDS: dict[str, tuple[str, Callable[[], object], str, Callable[[object], Iterable[str]]]] = {
    "baseboard": (
        "Show baseboard information for the host system",
        lambda: _baseboard.info(),
        "baseboard",
        _no_details,
    ),
    "bios": (
        "Show BIOS information for the host system",
        lambda: _bios.info(),
        "BIOS",
        _no_details,
    ),
    "block": (
        "Show block storage information for the host system",
        lambda: _host.block(),
        "block device",
        _block_details,
    ),
    "chassis": (
        "Show chassis information for the host system",
        lambda: _chassis.info(),
        "chassis",
        _no_details,
    ),
    "cpu": (
        "Show CPU information for the host system",
        lambda: _host.cpu(),
        "CPU",
        _cpu_details,
    ),
}

_HUMAN_ALL_ORDER = ("block", "cpu", "chassis", "bios", "baseboard")


def _load(loader: Callable[[], object], label: str):
    try:
        return loader()
    except _LOAD_ERRORS as exc:
        raise _CommandError(f"error getting {label} info: {exc}") from exc


def _emit(info, fmt: str, pretty: bool, details: Callable[[object], Iterable[str]]) -> None:
    if fmt == HUMAN:
        print(info)
        for line in details(info):
            print(line)
    elif fmt == JSON:
        print(info.json_string(pretty))
    elif fmt == YAML:
        sys.stdout.write(info.yaml_string())


def _show(name: str, fmt: str, pretty: bool) -> None:
    _, loader, label, details = _COMMANDS[name]
    _emit(_load(loader, label), fmt, pretty, details)


def _show_all(fmt: str, pretty: bool) -> None:
    if fmt == HUMAN:
        for name in _HUMAN_ALL_ORDER:
            _show(name, fmt, pretty)
        return
    _emit(_load(lambda: _host.host(), "host"), fmt, pretty, _no_details)


def _package_version() -> str:
    try:
        return metadata.version("hwprobe")
    except metadata.PackageNotFoundError:
        return "(Unknown Version)"


def _show_version() -> None:
    build = f"Python {platform.python_version()} {sys.platform}/{platform.machine()}"
    sys.stdout.write(
        _VERSION_HEADER
        % ("No Build Date Provided.", build, _package_version(), "No Git-hash Provided.")
    )


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--debug",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable or disable debug mode",
    )
    common.add_argument(
        "-f",
        "--format",
        default=argparse.SUPPRESS,
        help="Output format. Choices are 'json','yaml', and 'human'.",
    )
    common.add_argument(
        "--pretty",
        action="store_true",
        default=argparse.SUPPRESS,
        help="When outputting JSON, use indentation",
    )
    parser = argparse.ArgumentParser(
        prog="hwprobe",
        description="Discover hardware information.",
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command")
    for name, (help_text, _, _, _) in _COMMANDS.items():
        subparsers.add_parser(name, help=help_text, parents=[common])
    subparsers.add_parser("version", help="Display the version", parents=[common])
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line and return the exit status."""
    args = _build_parser().parse_args(argv)
    fmt = getattr(args, "format", HUMAN)
    pretty = getattr(args, "pretty", False)
    command = getattr(args, "command", None)

    if command == "version":
        _show_version()
        return 0
    if fmt not in FORMATS:
        print(f"Error: invalid output format {fmt!r}", file=sys.stderr)
        return 1
    try:
        if command is None:
            _show_all(fmt, pretty)
        else:
            _show(command, fmt, pretty)
    except _CommandError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())