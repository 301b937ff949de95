"""Execution context shared by every discovery routine."""

from __future__ import annotations

import os
import shutil
import sys
import tarfile
import tempfile
from typing import Callable, Mapping, Optional, TypeVar

DEFAULT_CHROOT = "/"

Alerter = Callable[[str], None]

_T = TypeVar("_T")


def _stderr_alerter(message: str) -> None:
    if not message.endswith("\n"):
        message += "\n"
    sys.stderr.write(message)


def _null_alerter(message: str) -> None:
    return None


def _default_alerter() -> Alerter:
    if "GHW_DISABLE_WARNINGS" in os.environ:
        return _null_alerter
    return _stderr_alerter


def _is_nonempty_dir(path: str) -> bool:
    with os.scandir(path) as entries:
        return any(True for _ in entries)


def _extract(archive: str, target: str) -> None:
    with tarfile.open(archive, "r:*") as tar:
        if hasattr(tarfile, "tar_filter"):
            tar.extractall(target, filter="tar")
        else:
            tar.extractall(target)


def _unpack_into(archive: str, target: str, exclusive: bool) -> bool:
    """Unpack a snapshot into ``target``; return whether anything was unpacked."""
    os.makedirs(target, exist_ok=True)
    if exclusive and _is_nonempty_dir(target):
        return False
    _extract(archive, target)
    return True


def _unpack(archive: str) -> str:
    target = tempfile.mkdtemp(prefix="hwprobe-snapshot-")
    try:
        _extract(archive, target)
    except BaseException:
        shutil.rmtree(target, ignore_errors=True)
        raise
    return target


class Context:
    """Merged configuration switches used while discovering hardware."""

    def __init__(
        self,
        chroot: Optional[str] = None,
        *,
        enable_tools: Optional[bool] = None,
        snapshot_path: Optional[str] = None,
        snapshot_root: Optional[str] = None,
        snapshot_exclusive: Optional[bool] = None,
        path_overrides: Optional[Mapping[str, str]] = None,
        alerter: Optional[Alerter] = None,
    ) -> None:
        env = os.environ
        self.chroot = chroot if chroot is not None else env.get("GHW_CHROOT", DEFAULT_CHROOT)
        self.enable_tools = (
            enable_tools if enable_tools is not None else "GHW_DISABLE_TOOLS" not in env
        )
        self.snapshot_path = (
            snapshot_path if snapshot_path is not None else env.get("GHW_SNAPSHOT_PATH", "")
        )
        self.snapshot_root = (
            snapshot_root if snapshot_root is not None else env.get("GHW_SNAPSHOT_ROOT", "")
        )
        self.snapshot_exclusive = (
            snapshot_exclusive
            if snapshot_exclusive is not None
            else "GHW_SNAPSHOT_EXCLUSIVE" in env
        )
        self.path_overrides: dict[str, str] = dict(path_overrides or {})
        self.alerter: Alerter = alerter if alerter is not None else _default_alerter()
        self._unpacked_path = ""
        self._error: Optional[Exception] = None
        if self.snapshot_path and self.chroot != DEFAULT_CHROOT:
            self._error = ValueError(
                f"Conflicting options: chroot {self.chroot!r} "
                f"and snapshot path {self.snapshot_path!r}"
            )

    def __repr__(self) -> str:
        return (
            f"Context(chroot={self.chroot!r}, enable_tools={self.enable_tools!r}, "
            f"snapshot_path={self.snapshot_path!r})"
        )

    def __enter__(self) -> "Context":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._safe_teardown()

    def do(self, fn: Callable[[], _T]) -> _T:
        """Run ``fn`` between setup and teardown and return its result."""
        self.setup()
        try:
            return fn()
        finally:
            self._safe_teardown()

    def setup(self) -> None:
        """Prepare optional resources such as an unpacked snapshot."""
        if self._error is not None:
            raise self._error
        if not self.snapshot_path:
            return
        if not self.snapshot_root:
            root = _unpack(self.snapshot_path)
            self._unpacked_path = root
        else:
            _unpack_into(self.snapshot_path, self.snapshot_root, self.snapshot_exclusive)
            root = self.snapshot_root
        self.chroot = root

    def teardown(self) -> None:
        """Release what setup acquired; caller-supplied roots are left alone."""
        if not self._unpacked_path:
            return
        path, self._unpacked_path = self._unpacked_path, ""
        shutil.rmtree(path)

    def _safe_teardown(self) -> None:
        try:
            self.teardown()
        except OSError as exc:
            self.warn("teardown error: %s", exc)

    def warn(self, msg: str, *args: object) -> None:
        """Report a non-fatal problem through the alerter."""
        text = msg % args if args else msg
        self.alerter("WARNING: " + text)


def from_env() -> Context:
    """Return a Context populated from environment variables and defaults."""
    return Context()