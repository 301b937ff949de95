import json

import yaml

from hwprobe.cpu import CPUInfo, Processor, ProcessorCore


def _sample():
    cores = [
        ProcessorCore(id=0, num_threads=2, logical_processors=[0, 4]),
        ProcessorCore(id=8, num_threads=2, logical_processors=[1, 5]),
    ]
    proc = Processor(
        id=0,
        num_cores=2,
        num_threads=4,
        vendor="GenuineIntel",
        model="Example CPU",
        capabilities=["fpu", "vmx", "sse4_2"],
        cores=cores,
    )
    return CPUInfo(total_cores=2, total_threads=4, processors=[proc])


def test_core_by_id():
    proc = _sample().processors[0]
    assert proc.core_by_id(8) is proc.cores[1]
    assert proc.core_by_id(3) is None


def test_has_capability():
    proc = _sample().processors[0]
    assert proc.has_capability("vmx")
    assert proc.has_capability(proc.capabilities[0])
    assert not proc.has_capability("avx512f")


def test_core_string():
    core = ProcessorCore(id=3, num_threads=2, logical_processors=[3, 7])
    assert str(core) == "processor core #3 (2 threads), logical processors [3 7]"


def test_processor_string_pluralisation():
    single = Processor(id=1, num_cores=1, num_threads=1)
    assert str(single) == "physical package #1 (1 core, 1 hardware thread)"
    many = _sample().processors[0]
    assert "cores" in str(many)
    assert "threads" in str(many)


def test_info_string():
    assert str(_sample()) == "cpu (1 physical package, 2 cores, 4 hardware threads)"


def test_to_dict_keys():
    data = _sample().to_dict()
    assert list(data) == ["total_cores", "total_threads", "processors"]
    proc = data["processors"][0]
    assert list(proc) == [
        "id",
        "total_cores",
        "total_threads",
        "vendor",
        "model",
        "capabilities",
        "cores",
    ]
    assert list(proc["cores"][0]) == ["id", "total_threads", "logical_processors"]


def test_json_round_trip():
    info = _sample()
    data = json.loads(info.json_string(False))
    assert data == {"cpu": info.to_dict()}
    assert data["cpu"]["processors"][0]["cores"][1]["logical_processors"] == [1, 5]
    assert json.loads(info.json_string(True)) == data


def test_yaml_round_trip():
    info = _sample()
    assert yaml.safe_load(info.yaml_string()) == {"cpu": info.to_dict()}


def test_empty_info_serialises():
    info = CPUInfo()
    data = json.loads(info.json_string(False))
    assert data["cpu"]["processors"] == []
    assert data["cpu"]["total_cores"] == 0