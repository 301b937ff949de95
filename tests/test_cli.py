import json
import sys

import pytest
import yaml

from hwprobe import bios, chassis
from hwprobe.cli import format_capabilities, main
from hwprobe.context import Context
from hwprobe.host import block, cpu

CPUINFO = (
    "processor\t: 0\n"
    "vendor_id\t: FakeVendor\n"
    "model name\t: Fake CPU\n"
    "flags\t\t: fpu vme sse\n"
    "\n"
    "processor\t: 1\n"
    "vendor_id\t: FakeVendor\n"
    "model name\t: Fake CPU\n"
    "flags\t\t: fpu vme sse\n"
    "\n"
)


def _write(root, rel, text):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def _make_tree(root):
    dmi = "sys/class/dmi/id/"
    _write(root, dmi + "bios_vendor", "FakeVendor\n")
    _write(root, dmi + "bios_version", "1.2.3\n")
    _write(root, dmi + "bios_date", "01/01/2020\n")
    _write(root, dmi + "board_vendor", "BoardCo\n")
    _write(root, dmi + "board_name", "Board1\n")
    _write(root, dmi + "chassis_type", "3\n")
    _write(root, dmi + "chassis_vendor", "CaseCo\n")
    for lp in (0, 1):
        base = f"sys/devices/system/cpu/cpu{lp}/"
        _write(root, base + "online", "1\n")
        _write(root, base + "topology/physical_package_id", "0\n")
        _write(root, base + "topology/core_id", "0\n")
    _write(root, "proc/cpuinfo", CPUINFO)
    _write(root, "sys/block/sda/size", "2048\n")
    _write(root, "sys/block/sda/queue/rotational", "1\n")
    _write(root, "sys/block/sda/sda1/size", "1024\n")
    _write(root, "proc/self/mounts", "/dev/sda1 /boot ext4 rw,relatime 0 0\n")


@pytest.fixture(autouse=True)
def tree(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    for name in ("GHW_SNAPSHOT_PATH", "GHW_SNAPSHOT_ROOT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GHW_DISABLE_WARNINGS", "1")
    monkeypatch.setenv("GHW_CHROOT", str(tmp_path))
    _make_tree(tmp_path)
    return tmp_path


def test_format_capabilities_short_list_prints_nothing():
    assert format_capabilities(["fpu", "vme", "sse"]) == []
    assert format_capabilities([f"c{n}" for n in range(6)]) == []


def test_format_capabilities_two_rows():
    caps = ["a", "b", "c", "d", "e", "f", "g"]
    assert format_capabilities(caps) == ["  capabilities: [f g"]


def test_format_capabilities_closes_last_row():
    caps = [f"cap{n}" for n in range(20)]
    lines = format_capabilities(caps)
    assert lines[0].startswith("  capabilities: [")
    assert lines[-1].endswith("]")
    assert all(not line.endswith("]") for line in lines[:-1])
    assert lines[-1].split()[-1] == caps[-1] + "]"


def test_bios_human(capsys):
    assert main(["bios"]) == 0
    out = capsys.readouterr().out
    assert out == f"{bios.info(Context())}\n"


def test_bios_json_flag_after_command(capsys):
    assert main(["bios", "-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"bios": bios.info(Context()).to_dict()}
    assert data["bios"]["vendor"] == "FakeVendor"


def test_chassis_yaml(capsys):
    assert main(["--format", "yaml", "chassis"]) == 0
    data = yaml.safe_load(capsys.readouterr().out)
    assert data["chassis"]["type_description"] == chassis.type_description("3")
    assert data["chassis"]["vendor"] == "CaseCo"


def test_cpu_human_lists_processors_and_cores(capsys):
    assert main(["cpu"]) == 0
    lines = capsys.readouterr().out.splitlines()
    info = cpu(Context())
    proc = info.processors[0]
    assert lines == [str(info), f" {proc}", f"  {proc.cores[0]}"]


def test_cpu_pretty_json(capsys):
    assert main(["-f", "json", "--pretty", "cpu"]) == 0
    out = capsys.readouterr().out
    assert "\n  " in out
    assert json.loads(out)["cpu"] == cpu(Context()).to_dict()


def test_block_human_lists_disks_and_partitions(capsys):
    assert main(["block"]) == 0
    lines = capsys.readouterr().out.splitlines()
    info = block(Context())
    disk = info.disks[0]
    assert lines == [str(info), f" {disk}", f"  {disk.partitions[0]}"]


def test_all_human_starts_with_block(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out.startswith(f"{block(Context())}\n")
    assert f"{bios.info(Context())}\n" in out
    assert out.splitlines()[-1].startswith("baseboard")


def test_all_json_is_host(capsys):
    assert main(["-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert set(data) == {"block", "cpu", "chassis", "bios", "baseboard"}


def test_all_yaml_matches_json(capsys):
    assert main(["-f", "json"]) == 0
    as_json = json.loads(capsys.readouterr().out)
    assert main(["-f", "yaml"]) == 0
    assert yaml.safe_load(capsys.readouterr().out) == as_json


def test_invalid_format_fails(capsys):
    assert main(["-f", "xml"]) == 1
    captured = capsys.readouterr()
    assert "invalid output format" in captured.err
    assert captured.out == ""


def test_version_prints_header(capsys):
    assert main(["version"]) == 0
    out = capsys.readouterr().out
    assert "Git Hash: No Git-hash Provided." in out
    assert "Date: No Build Date Provided." in out


def test_load_error_reported(capsys, monkeypatch, tree):
    monkeypatch.setenv("GHW_SNAPSHOT_PATH", str(tree / "snap.tar.gz"))
    assert main(["bios"]) == 1
    err = capsys.readouterr().err
    assert "error getting BIOS info" in err
    assert "Conflicting options" in err