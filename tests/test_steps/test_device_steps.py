"""Tests for device selection, validation and the confirmation gate."""

from unittest.mock import MagicMock, patch

import pytest

from autoinstall_usb.context import RunConfig, RunContext
from autoinstall_usb.errors import Cancelled, InstallerError
from autoinstall_usb.lib.block import BlockDevice
from autoinstall_usb.lib.env import GIB
from autoinstall_usb.steps import ConfirmStep, SelectDeviceStep, ValidateDeviceStep


def _ctx(tmp_path, ops=None, answer="", **cfg):
    return RunContext(
        config=RunConfig(base_dir=tmp_path, **cfg),
        ops=ops or MagicMock(),
        prompt=MagicMock(return_value=answer),
    )


def test_device_from_flag(tmp_path):
    ctx = SelectDeviceStep().run(_ctx(tmp_path, device="sdc"))

    assert ctx.device_path == "/dev/sdc"
    ctx.prompt.assert_not_called()


@patch("autoinstall_usb.steps.step_40_select_device.list_disks", return_value="NAME SIZE TYPE")
def test_device_prompted(mock_list, tmp_path):
    ctx = SelectDeviceStep().run(_ctx(tmp_path, answer="sdd\n"))

    assert ctx.device_path == "/dev/sdd"
    mock_list.assert_called_once()


@patch("autoinstall_usb.steps.step_40_select_device.list_disks", return_value="")
def test_empty_device_name_aborts(mock_list, tmp_path):
    with pytest.raises(InstallerError, match="No device name"):
        SelectDeviceStep().run(_ctx(tmp_path, answer="  "))


def test_nonexistent_device(tmp_path):
    ctx = _ctx(tmp_path)
    ctx.device_path = "/dev/autoinstall-usb-missing"

    with pytest.raises(InstallerError, match="Device not found"):
        ValidateDeviceStep().run(ctx)


@pytest.fixture
def existing_device():
    with patch("autoinstall_usb.steps.step_45_validate_device.is_block_device", return_value=True), patch(
        "autoinstall_usb.steps.step_45_validate_device.inspect_device"
    ) as mock_inspect:
        yield mock_inspect


@pytest.mark.parametrize("mountpoint", ["/", "/boot", "/home"])
def test_system_disk_aborts_before_any_disk_operation(existing_device, tmp_path, mountpoint):
    existing_device.return_value = BlockDevice("/dev/sda", 500 * GIB, ["/dev/sda1"], [mountpoint])
    ops = MagicMock()
    ctx = _ctx(tmp_path, ops=ops)
    ctx.device_path = "/dev/sda"

    with pytest.raises(InstallerError, match="system disk"):
        ValidateDeviceStep().run(ctx)

    assert ops.method_calls == []
    assert ctx.device is None


def test_small_device_warns_and_continues(existing_device, tmp_path):
    existing_device.return_value = BlockDevice("/dev/sdc", 6 * GIB)
    ctx = _ctx(tmp_path)
    ctx.device_path = "/dev/sdc"

    ctx = ValidateDeviceStep().run(ctx)

    assert ctx.device.size_gib == 6


def test_tiny_device_aborts(existing_device, tmp_path):
    existing_device.return_value = BlockDevice("/dev/sdc", 2 * GIB)
    ctx = _ctx(tmp_path)
    ctx.device_path = "/dev/sdc"

    with pytest.raises(InstallerError, match="too small"):
        ValidateDeviceStep().run(ctx)


@pytest.fixture
def no_lsblk():
    with patch("autoinstall_usb.steps.step_50_confirm.describe_device", return_value="sdc 16G disk") as m:
        yield m


@pytest.mark.parametrize("answer", ["", "yes", "Yes", "Y", "YESS", "no"])
def test_anything_but_yes_cancels(no_lsblk, tmp_path, answer):
    ops = MagicMock()
    ctx = _ctx(tmp_path, ops=ops, answer=answer)
    ctx.device_path = "/dev/sdc"

    with pytest.raises(Cancelled):
        ConfirmStep().run(ctx)

    assert ops.method_calls == []


def test_yes_confirms(no_lsblk, tmp_path):
    ctx = _ctx(tmp_path, answer="YES")
    ctx.device_path = "/dev/sdc"

    assert ConfirmStep().run(ctx) is ctx
    no_lsblk.assert_called_once_with("/dev/sdc")


def test_auto_yes_skips_prompt(no_lsblk, tmp_path):
    ctx = _ctx(tmp_path, auto_yes=True)

    ConfirmStep().run(ctx)

    ctx.prompt.assert_not_called()
    no_lsblk.assert_not_called()
