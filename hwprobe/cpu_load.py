"""Processor discovery from sysfs and /proc/cpuinfo, or from sysctl on macOS."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from typing import Mapping

from .cpu import CPUInfo, Processor, ProcessorCore
from .linuxpath import paths_for
from .sysfs import safe_int_from_file

_CPU_DIR_RE = re.compile(r"^cpu([0-9]+)$")
_ONLINE_FILE = "online"
_ARM_CAP_PREFIX = "hw.optional.arm."
_ARM_EXTRA_CAPS = {
    "hw.optional.AdvSIMD_HPFPCvt": "AdvSIMD_HPFPCvt",
    "hw.optional.armv8_crc32": "armv8_crc32",
}
_UINT64_MAX = 2**64 - 1


def load(ctx) -> CPUInfo:
    """Discover processors for the given (already set up) context."""
    if sys.platform.startswith("linux"):
        return load_linux(ctx)
    if sys.platform == "darwin":
        return load_darwin(ctx)
    raise RuntimeError(f"cpu information is not available on {sys.platform}")


def _with_totals(ctx, processors: list[Processor]) -> CPUInfo:
    return CPUInfo(
        total_cores=sum(proc.num_cores for proc in processors),
        total_threads=sum(proc.num_threads for proc in processors),
        processors=processors,
        ctx=ctx,
    )


def _is_offline(ctx, cpu_dir: str) -> bool:
    return safe_int_from_file(ctx, os.path.join(cpu_dir, _ONLINE_FILE)) == 0


def _new_processor(proc_id: int, attrs: Mapping[str, str]) -> Processor:
    proc = Processor(id=proc_id)
    if attrs.get("flags"):  # x86
        proc.capabilities = attrs["flags"].split(" ")
    elif attrs.get("Features"):  # ARM64
        proc.capabilities = attrs["Features"].split(" ")
    if attrs.get("model name"):
        proc.model = attrs["model name"]
    elif attrs.get("uarch"):  # SiFive
        proc.model = attrs["uarch"]
    if attrs.get("vendor_id"):
        proc.vendor = attrs["vendor_id"]
    elif attrs.get("isa"):  # RISC-V
        proc.vendor = attrs["isa"]
    return proc


def load_linux(ctx) -> CPUInfo:
    """Discover processors from sysfs topology and /proc/cpuinfo."""
    paths = paths_for(ctx)
    cpu_root = paths.sys_devices_system_cpu
    lps = logical_processors_from_cpuinfo(ctx)
    procs: dict[int, Processor] = {}

    try:
        names = sorted(os.listdir(cpu_root))
    except OSError as exc:
        ctx.warn("failed to read /sys/devices/system/cpu: %s", exc)
        return _with_totals(ctx, [])

    for name in names:
        match = _CPU_DIR_RE.match(name)
        if match is None:
            continue
        lp_id = int(match.group(1))
        cpu_dir = os.path.join(cpu_root, f"cpu{lp_id}")
        if _is_offline(ctx, cpu_dir):
            continue
        topology = os.path.join(cpu_dir, "topology")
        proc_id = safe_int_from_file(ctx, os.path.join(topology, "physical_package_id"))
        proc = procs.get(proc_id)
        if proc is None:
            attrs = lps.get(lp_id)
            if attrs is None:
                ctx.warn("failed to find attributes for logical processor %d", lp_id)
                continue
            proc = _new_processor(proc_id, attrs)
            procs[proc_id] = proc

        core_id = safe_int_from_file(ctx, os.path.join(topology, "core_id"))
        core = proc.core_by_id(core_id)
        if core is None:
            core = ProcessorCore(id=core_id, num_threads=1)
            proc.cores.append(core)
            proc.num_cores += 1
        else:
            core.num_threads += 1
        proc.num_threads += 1
        core.logical_processors.append(lp_id)

    result = [procs[key] for key in sorted(procs)]
    for proc in result:
        for core in proc.cores:
            core.logical_processors.sort()
    return _with_totals(ctx, result)


def logical_processors_from_cpuinfo(ctx) -> dict[int, dict[str, str]]:
    """Return the attribute blocks of /proc/cpuinfo keyed by logical processor ID.

    A block is recorded when the blank line that ends it is read.
    """
    path = paths_for(ctx).proc_cpuinfo
    try:
        handle = open(path, encoding="utf-8", errors="replace")
    except OSError:
        return {}
    result: dict[int, dict[str, str]] = {}
    attrs: dict[str, str] = {}
    with handle:
        for raw in handle:
            line = raw.strip()
            if not line:
                if "processor" not in attrs:
                    ctx.warn("expected to find 'processor' key in /proc/cpuinfo attributes")
                    continue
                try:
                    lp_id = int(attrs["processor"])
                except ValueError:
                    lp_id = 0
                result[lp_id] = attrs
                attrs = {}
                continue
            parts = line.split(":")
            value = parts[1].strip() if len(parts) > 1 else ""
            attrs[parts[0].strip()] = value
    return result


def cores_for_node(ctx, node_id: int) -> list[ProcessorCore]:
    """Return the cores whose logical processors belong to a NUMA node.

    Raises OSError when the node directory cannot be read.
    """
    node_dir = os.path.join(paths_for(ctx).sys_devices_system_node, f"node{node_id}")
    cores: list[ProcessorCore] = []

    def core_for(core_id: int) -> ProcessorCore:
        for core in cores:
            if core.id == core_id:
                return core
        core = ProcessorCore(id=core_id)
        cores.append(core)
        return core

    for name in sorted(os.listdir(node_dir)):
        if not name.startswith("cpu") or name in ("cpumap", "cpulist"):
            continue
        try:
            lp_id = int(name[3:])
        except ValueError:
            ctx.warn(
                "failed to determine procID from %s. Expected integer after 3rd char.",
                name,
            )
            continue
        cpu_dir = os.path.join(node_dir, name)
        if _is_offline(ctx, cpu_dir):
            continue
        core_id = safe_int_from_file(ctx, os.path.join(cpu_dir, "topology", "core_id"))
        core_for(core_id).logical_processors.append(lp_id)

    for core in cores:
        core.num_threads = len(core.logical_processors)
    return cores


def parse_sysctl(text: str) -> dict[str, str]:
    """Parse ``sysctl -a`` output into a mapping of keys to values."""
    values: dict[str, str] = {}
    for line in text.split("\n"):
        if not line:
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        values[key.strip()] = value.strip()
    return values


def _to_uint32(text: str) -> int:
    if not text.isdigit():
        return 0
    return min(int(text), _UINT64_MAX) & 0xFFFFFFFF


def _perf_level_count(values: Mapping[str, str]) -> int:
    count = values.get("hw.nperflevels")
    if count is None:
        # No performance/efficiency split, most likely an Intel machine.
        return 1
    try:
        return int(count)
    except ValueError:
        return 0


def _capabilities(values: Mapping[str, str]) -> list[str]:
    if values.get("hw.optional.arm64") != "1":
        return []
    caps = []
    for key in sorted(values):
        if values[key] != "1":
            continue
        if key.startswith(_ARM_CAP_PREFIX):
            caps.append(key[len(_ARM_CAP_PREFIX):])
        if key in _ARM_EXTRA_CAPS:
            caps.append(_ARM_EXTRA_CAPS[key])
    # These two are always present on ARM.
    caps.extend(["AdvSIMD", "floatingpoint"])
    return caps


def processors_from_sysctl(values: Mapping[str, str]) -> list[Processor]:
    """Build one processor per performance level from parsed sysctl values."""
    total_cores = _to_uint32(values.get("hw.physicalcpu_max", ""))
    brand = values.get("machdep.cpu.brand_string", "")
    processors = []
    for level in range(_perf_level_count(values)):
        processors.append(
            Processor(
                vendor=values.get(f"hw.perflevel{level}.name", ""),
                model=brand,
                num_cores=_to_uint32(values.get(f"hw.perflevel{level}.physicalcpu_max", "")),
                capabilities=_capabilities(values),
                cores=[ProcessorCore() for _ in range(total_cores)],
            )
        )
    return processors


def load_darwin(ctx) -> CPUInfo:
    """Discover processors from the output of ``sysctl -a``."""
    try:
        completed = subprocess.run(
            ["sysctl", "-a"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"unable to populate sysctl map: {exc}") from exc
    values = parse_sysctl(completed.stdout)
    return CPUInfo(
        total_cores=_to_uint32(values.get("hw.physicalcpu_max", "")),
        total_threads=_to_uint32(values.get("machdep.cpu.thread_count", "")),
        processors=processors_from_sysctl(values),
        ctx=ctx,
    )