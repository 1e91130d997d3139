"""Shared fixtures: a sample configuration pair and a fake disk backend."""

import logging
import os
import shutil
from pathlib import Path

import pytest

VALID_USER_DATA = """\
#cloud-config
autoinstall:
  version: 1
  identity:
    hostname: lab-server
    username: ops
    password: "$6$rounds=4096$saltsalt$3MEaFIkIrLcKPrlY8wIybBXI.Zf0jbXSq.TMCBgkr5mXTFXoUqjPU.GH7FE9WoJXZYiPgKWzAkBH3P4ARKJ2k/"
  ssh:
    install-server: true
  storage:
    layout:
      name: lvm
"""

VALID_META_DATA = """\
instance-id: lab-server-001
local-hostname: lab-server
"""


@pytest.fixture(autouse=True)
def reset_root_logger():
    """configure_logging() is process-global; undo it after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    for attr in ("_autoinstall_configured", "_autoinstall_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)


@pytest.fixture
def work_dir(tmp_path):
    """Invocation directory with a valid config pair and a (tiny) server image."""
    d = tmp_path / "work"
    d.mkdir()
    (d / "user-data").write_text(VALID_USER_DATA)
    (d / "meta-data").write_text(VALID_META_DATA)
    (d / "ubuntu-24.04.1-live-server-amd64.iso").write_bytes(b"\0" * 2048)
    return d


@pytest.fixture
def image_tree(tmp_path):
    """Contents of a mounted installer image."""
    root = tmp_path / "iso"
    (root / "casper").mkdir(parents=True)
    (root / "casper/vmlinuz").write_bytes(b"kernel")
    (root / "casper/initrd").write_bytes(b"initrd")
    (root / "boot/grub").mkdir(parents=True)
    (root / "boot/grub/grub.cfg").write_text("menuentry 'Try or Install Ubuntu Server' {}\n")
    (root / ".disk").mkdir()
    (root / ".disk/info").write_text("Ubuntu-Server 24.04.1 LTS")
    (root / "md5sum.txt").write_text("deadbeef  ./casper/vmlinuz\n")
    (root / "ubuntu").write_text("stands in for the ubuntu -> . symlink")
    (root / "pool/main").mkdir(parents=True)
    (root / "pool/main/pkg.deb").write_bytes(b"deb")
    return root


class FakeDiskOps:
    """DiskOps that simulates the device with a directory.

    Mounting replaces the (empty) mount point with a symlink to the backing
    directory; unmounting puts the empty directory back.
    """

    def __init__(self, image_tree, storage, *, failing=(), copy_ok=True, drop_files=(), nvme=False):
        self.image_tree = Path(image_tree)
        self.storage = Path(storage)
        self.storage.mkdir(parents=True, exist_ok=True)
        self.failing = set(failing)
        self.copy_ok = copy_ok
        self.drop_files = set(drop_files)
        self.nvme = nvme
        self.calls = []
        self.nodes = set()
        self.table = None
        self.label = None

    def _call(self, name, *args):
        self.calls.append((name,) + args)

    def call_names(self):
        return [c[0] for c in self.calls]

    def unmount(self, target, *, best_effort=False):
        self._call("unmount", target)
        if os.path.islink(target):
            os.unlink(target)
            os.mkdir(target)
        return "unmount" not in self.failing

    def wipe(self, device, *, mib):
        self._call("wipe", device, mib)
        self.table = None
        return "wipe" not in self.failing

    def create_partition_table(self, device, *, label):
        self._call("create_partition_table", device, label)
        self.table = ("gpt", "1:0:0", "ef00", label)
        self.nodes.add(f"{device}p1" if self.nvme else f"{device}1")

    def rescan(self, device):
        self._call("rescan", device)
        return "rescan" not in self.failing

    def is_block_device(self, path):
        return path in self.nodes

    def format_volume(self, partition, *, label):
        self._call("format_volume", partition, label)
        shutil.rmtree(self.storage)
        self.storage.mkdir()
        self.label = label

    def mount_volume(self, source, target, *, image=False):
        self._call("mount_volume", source, target, image)
        os.rmdir(target)
        os.symlink(self.image_tree if image else self.storage, target)

    def copy_tree(self, src, dst, *, excludes):
        self._call("copy_tree", src, dst, tuple(excludes))
        src = Path(src)
        for item in sorted(src.rglob("*")):
            rel = item.relative_to(src).as_posix()
            if any(rel == e or rel.startswith(e + "/") for e in excludes):
                continue
            if rel in self.drop_files:
                continue
            out = Path(dst) / rel
            if item.is_dir():
                out.mkdir(parents=True, exist_ok=True)
            else:
                out.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(item, out)
        return self.copy_ok

    def install_file(self, src, dst, *, mode=0o644):
        self._call("install_file", src, dst, mode)
        shutil.copyfile(src, dst)
        os.chmod(dst, mode)

    def write_text(self, dst, content, *, backup_suffix=None):
        self._call("write_text", dst)
        p = Path(dst)
        if backup_suffix and p.exists():
            shutil.copy2(p, p.with_name(p.name + backup_suffix))
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content)

    def sync(self):
        self._call("sync")

    def snapshot(self):
        """Partition layout, label and every file with its content."""
        files = {
            p.relative_to(self.storage).as_posix(): p.read_bytes()
            for p in sorted(self.storage.rglob("*"))
            if p.is_file()
        }
        return self.table, self.label, files


@pytest.fixture
def fake_ops(tmp_path, image_tree):
    def _make(**kwargs):
        return FakeDiskOps(image_tree, tmp_path / "device", **kwargs)

    return _make
