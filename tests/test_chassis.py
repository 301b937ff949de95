import json
import sys

import pytest
import yaml

from hwprobe import chassis
from hwprobe.chassis import ChassisInfo, type_description
from hwprobe.context import Context
from hwprobe.sysfs import UNKNOWN


def _write_dmi(root, **items):
    target = root / "sys" / "class" / "dmi" / "id"
    target.mkdir(parents=True, exist_ok=True)
    for name, value in items.items():
        (target / name).write_text(value + "\n")


def _ctx(root, messages):
    return Context(chroot=str(root), snapshot_path="", alerter=messages.append)


@pytest.mark.parametrize(
    "code, expected",
    [("1", "Other"), ("3", "Desktop"), ("23", "Rack mount chassis"), ("36", "Stick PC")],
)
def test_type_description_known(code, expected):
    assert type_description(code) == expected


@pytest.mark.parametrize("code", ["0", "37", "", UNKNOWN])
def test_type_description_unknown(code):
    assert type_description(code) == UNKNOWN


def test_info_reads_dmi_entries(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    _write_dmi(
        tmp_path,
        chassis_asset_tag="TAG",
        chassis_serial="EXAMPLE-SERIAL",
        chassis_type="9",
        chassis_vendor="Acme",
        chassis_version="v1",
    )
    messages = []
    result = chassis.info(_ctx(tmp_path, messages))
    assert result.type == "9"
    assert result.type_description == "Laptop"
    assert result.vendor == "Acme"
    assert result.serial_number == "EXAMPLE-SERIAL"
    assert messages == []


def test_missing_type_gives_unknown_description(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    messages = []
    result = chassis.info(_ctx(tmp_path, messages))
    assert result.type == UNKNOWN
    assert result.type_description == UNKNOWN
    assert len(messages) == 5


def test_other_platform_raises(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    with pytest.raises(RuntimeError, match="win32"):
        chassis.info(_ctx(tmp_path, []))


def test_string_form():
    item = ChassisInfo(type_description="Desktop", vendor="Acme", serial_number="S", version="2")
    assert str(item) == "chassis type=Desktop vendor=Acme serial=S version=2"


def test_string_hides_unknown_serial():
    item = ChassisInfo(type_description="Desktop", serial_number=UNKNOWN)
    assert "serial=" not in str(item)


def test_json_and_yaml_round_trip():
    item = ChassisInfo(asset_tag="A", serial_number="S", type="3", type_description="Desktop")
    assert json.loads(item.json_string(False)) == {"chassis": item.to_dict()}
    assert json.loads(item.json_string(True)) == {"chassis": item.to_dict()}
    assert yaml.safe_load(item.yaml_string()) == {"chassis": item.to_dict()}