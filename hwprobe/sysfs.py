"""Small helpers for reading pseudo-files such as DMI entries."""

from __future__ import annotations

import os
import re

from .linuxpath import paths_for

UNKNOWN = "unknown"

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def dmi_item(ctx, value: str) -> str:
    """Return the trimmed contents of a DMI id entry, or UNKNOWN."""
    path = os.path.join(paths_for(ctx).sys_class_dmi, "id", value)
    try:
        contents = _read_text(path)
    except OSError as exc:
        ctx.warn("Unable to read %s: %s\n", value, exc)
        return UNKNOWN
    return contents.strip()


def safe_int_from_file(ctx, path: str) -> int:
    """Return the integer held in a file, or -1 with a warning."""
    try:
        contents = _read_text(path)
    except OSError as exc:
        ctx.warn("failed to read int from file: %s\n", exc)
        return -1
    text = contents.strip()
    if not _INT_RE.fullmatch(text):
        ctx.warn("failed to parse int from file: %s: %r\n", path, text)
        return -1
    return int(text)


def concat_strings(*args: str) -> str:
    """Concatenate the given strings."""
    return "".join(args)