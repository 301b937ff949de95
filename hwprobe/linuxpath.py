"""Filesystem locations that discovery reads, relative to a context."""

from __future__ import annotations

import dataclasses
import posixpath
import re
from dataclasses import dataclass

_ROOT_FIELDS = {"/etc": "etc", "/proc": "proc", "/run": "run", "/sys": "sys", "/var": "var"}


def _join(*parts: str) -> str:
    """Join path parts with a single separator and clean the result."""
    joined = "/".join(part for part in parts if part)
    if not joined:
        return ""
    return posixpath.normpath(re.sub(r"/{2,}", "/", joined))


@dataclass(frozen=True)
class PathRoots:
    """Roots of the filesystem subtrees that are read."""

    etc: str = "/etc"
    proc: str = "/proc"
    run: str = "/run"
    sys: str = "/sys"
    var: str = "/var"


def default_path_roots() -> PathRoots:
    """Return the canonical roots."""
    return PathRoots()


def path_roots_from_context(ctx) -> PathRoots:
    """Return the roots with the context's overrides applied."""
    changes = {
        field: ctx.path_overrides[key]
        for key, field in _ROOT_FIELDS.items()
        if key in ctx.path_overrides
    }
    return dataclasses.replace(default_path_roots(), **changes)


@dataclass(frozen=True)
class Paths:
    """Concrete file and directory paths used by discovery."""

    var_log: str
    proc_meminfo: str
    proc_cpuinfo: str
    proc_mounts: str
    sys_kernel_mm_hugepages: str
    sys_block: str
    sys_devices_system_node: str
    sys_devices_system_memory: str
    sys_devices_system_cpu: str
    sys_bus_pci_devices: str
    sys_class_drm: str
    sys_class_dmi: str
    sys_class_net: str
    run_udev_data: str

    def node_cpu(self, node_id: int, lp_id: int) -> str:
        return _join(self.sys_devices_system_node, f"node{node_id}", f"cpu{lp_id}")

    def node_cpu_cache(self, node_id: int, lp_id: int) -> str:
        return _join(self.node_cpu(node_id, lp_id), "cache")

    def node_cpu_cache_index(self, node_id: int, lp_id: int, cache_index: int) -> str:
        return _join(self.node_cpu_cache(node_id, lp_id), f"index{cache_index}")


def paths_for(ctx) -> Paths:
    """Return the paths for the given context's chroot and overrides."""
    roots = path_roots_from_context(ctx)
    chroot = ctx.chroot
    return Paths(
        var_log=_join(chroot, roots.var, "log"),
        proc_meminfo=_join(chroot, roots.proc, "meminfo"),
        proc_cpuinfo=_join(chroot, roots.proc, "cpuinfo"),
        proc_mounts=_join(chroot, roots.proc, "self", "mounts"),
        sys_kernel_mm_hugepages=_join(chroot, roots.sys, "kernel", "mm", "hugepages"),
        sys_block=_join(chroot, roots.sys, "block"),
        sys_devices_system_node=_join(chroot, roots.sys, "devices", "system", "node"),
        sys_devices_system_memory=_join(chroot, roots.sys, "devices", "system", "memory"),
        sys_devices_system_cpu=_join(chroot, roots.sys, "devices", "system", "cpu"),
        sys_bus_pci_devices=_join(chroot, roots.sys, "bus", "pci", "devices"),
        sys_class_drm=_join(chroot, roots.sys, "class", "drm"),
        sys_class_dmi=_join(chroot, roots.sys, "class", "dmi"),
        sys_class_net=_join(chroot, roots.sys, "class", "net"),
        run_udev_data=_join(chroot, roots.run, "udev", "data"),
    )