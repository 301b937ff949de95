import pytest

from hwprobe.context import Context, from_env
from hwprobe.linuxpath import (
    PathRoots,
    default_path_roots,
    path_roots_from_context,
    paths_for,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GHW_CHROOT", "GHW_SNAPSHOT_PATH", "GHW_SNAPSHOT_ROOT"):
        monkeypatch.delenv(name, raising=False)


def test_path_root(monkeypatch):
    paths = paths_for(from_env())
    assert paths.proc_cpuinfo == "/proc/cpuinfo"

    monkeypatch.setenv("GHW_CHROOT", "/host")
    paths = paths_for(from_env())
    assert paths.proc_cpuinfo == "/host/proc/cpuinfo"


def test_path_specific_roots():
    ctx = Context(path_overrides={"/proc": "/host-proc", "/sys": "/host-sys"})
    paths = paths_for(ctx)
    assert paths.proc_cpuinfo == "/host-proc/cpuinfo"
    assert paths.sys_bus_pci_devices == "/host-sys/bus/pci/devices"


def test_path_chroot_and_specifics():
    ctx = Context(
        "/redirect",
        path_overrides={"/proc": "/host2-proc", "/sys": "/host2-sys"},
    )
    paths = paths_for(ctx)
    assert paths.proc_cpuinfo == "/redirect/host2-proc/cpuinfo"
    assert paths.sys_bus_pci_devices == "/redirect/host2-sys/bus/pci/devices"


def test_default_roots():
    assert default_path_roots() == PathRoots("/etc", "/proc", "/run", "/sys", "/var")


def test_roots_from_context_overrides_only_given():
    ctx = Context(path_overrides={"/run": "/alt-run"})
    roots = path_roots_from_context(ctx)
    assert roots.run == "/alt-run"
    assert roots.sys == "/sys"
    assert roots.etc == "/etc"


def test_default_paths():
    paths = paths_for(Context())
    assert paths.proc_mounts == "/proc/self/mounts"
    assert paths.sys_block == "/sys/block"
    assert paths.run_udev_data == "/run/udev/data"
    assert paths.var_log == "/var/log"
    assert paths.sys_class_dmi == "/sys/class/dmi"


def test_node_cpu_paths():
    paths = paths_for(Context("/host"))
    assert paths.node_cpu(1, 3) == "/host/sys/devices/system/node/node1/cpu3"
    assert paths.node_cpu_cache(1, 3) == "/host/sys/devices/system/node/node1/cpu3/cache"
    assert (
        paths.node_cpu_cache_index(1, 3, 2)
        == "/host/sys/devices/system/node/node1/cpu3/cache/index2"
    )


def test_chroot_trailing_slash_is_cleaned(tmp_path):
    paths = paths_for(Context(str(tmp_path) + "/"))
    assert paths.sys_block == str(tmp_path) + "/sys/block"