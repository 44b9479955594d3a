# SPDX-License-Identifier: MIT
"""Shared fixtures: a fake Java locator, a recording toolchain and a
vendored source tree on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from hdfs_build.core.context import OSClass
from hdfs_build.core.errors import JavaNotFoundError
from hdfs_build.sources import build_source_set
from hdfs_build.toolchains.gcc import GccToolchain
from hdfs_build.toolchains.msvc import MsvcToolchain
from hdfs_build.versions import VersionTag


class FakeLocator:
    """Locator answering from fixed values; None means "not installed"."""

    def __init__(
        self,
        java_home: str | None = "/opt/jdk",
        jvm_dir: str | None = "/opt/jdk/lib/server",
        files: dict[str, str] | None = None,
    ) -> None:
        self.java_home = java_home
        self.jvm_dir = jvm_dir
        self.files = files or {}
        self.calls: list[str] = []

    def locate_java_home(self) -> str:
        self.calls.append("java_home")
        if self.java_home is None:
            raise JavaNotFoundError("java home", "not installed")
        return self.java_home

    def locate_jvm_dyn_library(self) -> str:
        self.calls.append("jvm")
        if self.jvm_dir is None:
            raise JavaNotFoundError("libjvm", "not installed")
        return self.jvm_dir

    def locate_file(self, name: str) -> str:
        self.calls.append(f"file:{name}")
        if name not in self.files:
            raise JavaNotFoundError(name, "no such file in java home")
        return self.files[name]


class RecordingMixin:
    """Records commands instead of running them; archives become empty files."""

    def __init__(self, *args, supported_flags=None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.commands: list[list[str]] = []
        self.supported_flags = set(supported_flags or [])

    def is_flag_supported(self, flag: str) -> bool:
        return flag in self.supported_flags

    def run(self, cmd: list[str], cwd: Path | None = None) -> str:
        self.commands.append(cmd)
        if cmd[0] == self.ar:
            for part in cmd[1:]:
                if part.startswith("/OUT:"):
                    Path(part[len("/OUT:") :]).write_bytes(b"")
                    break
                if part.endswith(".a"):
                    Path(part).write_bytes(b"")
                    break
        return ""


class RecordingGcc(RecordingMixin, GccToolchain):
    pass


class RecordingMsvc(RecordingMixin, MsvcToolchain):
    pass


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator()


@pytest.fixture
def gcc() -> RecordingGcc:
    return RecordingGcc(cc="cc", ar="ar", env={}, supported_flags={"-w"})


@pytest.fixture
def msvc() -> RecordingMsvc:
    return RecordingMsvc(env={}, supported_flags={"-w"})


def make_vendored_tree(root: Path) -> Path:
    """Create every file any (version, OS) pair can ask for under ``root``."""
    for version in VersionTag:
        for os_class in OSClass:
            for rel in build_source_set(version, os_class).files:
                path = root / rel
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text("/* vendored */\n")
    (root / "libdirent" / "include").mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def vendored_tree(tmp_path: Path) -> Path:
    return make_vendored_tree(tmp_path / "src")
