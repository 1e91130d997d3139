"""Tests for block device inspection and safety checks."""

import json
from unittest.mock import patch

import pytest

from autoinstall_usb.errors import InstallerError
from autoinstall_usb.lib.block import (
    BlockDevice,
    check_device,
    device_path,
    inspect_device,
    list_disks,
    parse_lsblk_json,
    partition_path,
)
from autoinstall_usb.lib.command import CmdResult
from autoinstall_usb.lib.env import GIB

LSBLK = {
    "blockdevices": [
        {
            "path": "/dev/sdc",
            "size": 16 * GIB,
            "type": "disk",
            "mountpoint": None,
            "children": [
                {"path": "/dev/sdc1", "size": 8 * GIB, "type": "part", "mountpoint": "/media/usb"},
                {"path": "/dev/sdc2", "size": 8 * GIB, "type": "part", "mountpoint": None},
            ],
        }
    ]
}


def _dev(size_gib=16, mountpoints=()):
    return BlockDevice(path="/dev/sdc", size_bytes=size_gib * GIB, partitions=["/dev/sdc1"], mountpoints=list(mountpoints))


def test_device_path():
    assert device_path("sdc") == "/dev/sdc"
    assert device_path(" sdc\n") == "/dev/sdc"
    assert device_path("/dev/nvme0n1") == "/dev/nvme0n1"


def test_partition_path_prefers_plain_suffix():
    nodes = {"/dev/sdc1", "/dev/sdcp1"}

    assert partition_path("/dev/sdc", 1, exists=nodes.__contains__) == "/dev/sdc1"


def test_partition_path_falls_back_to_p_suffix():
    nodes = {"/dev/nvme0n1p1"}

    assert partition_path("/dev/nvme0n1", 1, exists=nodes.__contains__) == "/dev/nvme0n1p1"


def test_partition_path_missing():
    assert partition_path("/dev/sdc", 1, exists=lambda p: False) is None


def test_parse_lsblk_json():
    dev = parse_lsblk_json(json.dumps(LSBLK))

    assert dev.path == "/dev/sdc"
    assert dev.size_gib == 16
    assert dev.partitions == ["/dev/sdc1", "/dev/sdc2"]
    assert dev.mountpoints == ["/media/usb"]


def test_parse_lsblk_json_mountpoints_list():
    """Newer lsblk reports a MOUNTPOINTS list."""
    data = {"blockdevices": [{"path": "/dev/sda", "size": "1000", "mountpoints": [None], "children": [
        {"path": "/dev/sda1", "size": "500", "mountpoints": ["/boot/efi", "/boot"]},
    ]}]}

    dev = parse_lsblk_json(json.dumps(data))

    assert dev.size_bytes == 1000
    assert dev.mountpoints == ["/boot", "/boot/efi"]


def test_parse_lsblk_json_empty():
    with pytest.raises(InstallerError):
        parse_lsblk_json('{"blockdevices": []}')


@patch("autoinstall_usb.lib.block.run_cmd")
def test_inspect_device(mock_run):
    mock_run.return_value = CmdResult(argv=[], returncode=0, stdout=json.dumps(LSBLK), stderr="")

    dev = inspect_device("/dev/sdc")

    assert dev.partitions == ["/dev/sdc1", "/dev/sdc2"]
    argv = mock_run.call_args[0][0]
    assert argv[0] == "lsblk"
    assert argv[-1] == "/dev/sdc"


@patch("autoinstall_usb.lib.block.run_cmd")
def test_list_disks_keeps_header_and_disks(mock_run):
    out = (
        "NAME   SIZE TYPE VENDOR MODEL MOUNTPOINT\n"
        "sda    500G disk ATA    SSD   \n"
        "sda1   500G part              /\n"
        "sdc     16G disk Kingston DT  \n"
    )
    mock_run.return_value = CmdResult(argv=[], returncode=0, stdout=out, stderr="")

    lines = list_disks().splitlines()

    assert lines[0].startswith("NAME")
    assert [ln.split()[0] for ln in lines[1:]] == ["sda", "sdc"]


@pytest.mark.parametrize("mountpoint", ["/", "/boot", "/home"])
def test_system_disk_is_rejected(mountpoint):
    with pytest.raises(InstallerError, match="system disk"):
        check_device(_dev(mountpoints=[mountpoint]), min_gib=4, recommended_gib=8)


def test_other_mountpoints_are_allowed():
    assert check_device(_dev(mountpoints=["/media/usb", "/boot/efi"]), min_gib=4, recommended_gib=8) == []


@pytest.mark.parametrize("size", [0, 1, 3])
def test_too_small_is_rejected(size):
    with pytest.raises(InstallerError, match="too small"):
        check_device(_dev(size_gib=size), min_gib=4, recommended_gib=8)


@pytest.mark.parametrize("size", [4, 7])
def test_small_device_warns(size):
    warnings = check_device(_dev(size_gib=size), min_gib=4, recommended_gib=8)

    assert len(warnings) == 1
    assert f"({size}GB)" in warnings[0]


def test_large_device_passes():
    assert check_device(_dev(size_gib=32), min_gib=4, recommended_gib=8) == []


def test_size_floors_to_whole_gib():
    dev = BlockDevice(path="/dev/sdc", size_bytes=4 * GIB - 1)

    with pytest.raises(InstallerError):
        check_device(dev, min_gib=4, recommended_gib=8)
