# SPDX-License-Identifier: MIT
"""How the vendored libhdfs sources are compiled.

ToolchainConfig holds flags only; what is compiled comes from a SourceSet.
CompileJob combines the two with the Java include directories and the
output location, and is what a toolchain driver consumes.

The flag matrix follows the upstream Hadoop native-client CMake setup.
The vendored code predates current compiler defaults, so warnings are
silenced and ``-fcommon`` restores the GCC < 10 behaviour for tentative
definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from hdfs_build.core.context import OSClass
from hdfs_build.core.flags import merge_flags
from hdfs_build.sources import SourceSet

JAVA_INCLUDE_SUBDIRS: dict[OSClass, str] = {
    OSClass.POSIX: "linux",
    OSClass.MACOS: "darwin",
    OSClass.WINDOWS: "win32",
}


@dataclass
class ToolchainConfig:
    """Compiler settings for one target OS class.

    Attributes:
        flags: Flags passed to every compile.
        optional_flags: Flags kept only if the compiler accepts them.
        defines: Preprocessor definitions (without -D prefix).
        warnings: Whether the driver may add its own warning flags.
        static_runtime: Request static linkage of the C runtime.
    """

    flags: list[str] = field(default_factory=list)
    optional_flags: list[str] = field(default_factory=list)
    defines: list[str] = field(default_factory=list)
    warnings: bool = True
    static_runtime: bool = False

    def add_flags(self, *flags: str) -> None:
        merge_flags(self.flags, list(flags))

    def add_optional_flags(self, *flags: str) -> None:
        merge_flags(self.optional_flags, list(flags))

    def add_defines(self, *defines: str) -> None:
        merge_flags(self.defines, list(defines))


def toolchain_config(os_class: OSClass) -> ToolchainConfig:
    """Return the compiler settings for building libhdfs on ``os_class``."""
    config = ToolchainConfig(warnings=False, static_runtime=True)

    # Nobody here maintains the Hadoop C code; keep its warnings quiet.
    config.add_optional_flags("-w", "-std=c++17")

    if os_class.is_windows:
        config.add_flags(
            "-O2",
            "/W4",
            # unreferenced formal parameter
            "/wd4100",
            # conditional expression is constant
            "/wd4127",
        )
        config.add_defines(
            # deprecated POSIX function names
            "_CRT_NONSTDC_NO_DEPRECATE",
            # strerror, getenv and ctime have no secure CRT replacements yet
            "_CRT_SECURE_NO_WARNINGS",
            "WIN32_LEAN_AND_MEAN",
        )
    else:
        config.add_flags("-fvisibility=hidden", "-fcommon")

    return config


def java_includes(java_home: Path | str, os_class: OSClass) -> list[Path]:
    """JNI include directories: ``include`` and its one platform subdirectory."""
    include = Path(java_home) / "include"
    return [include, include / JAVA_INCLUDE_SUBDIRS[os_class]]


@dataclass
class CompileJob:
    """Everything needed to produce one static library.

    Attributes:
        name: Library name without prefix or suffix (``hdfs``).
        config: Compiler settings.
        source_set: Files and includes, relative to ``source_root``.
        source_root: Root of the vendored tree.
        out_dir: Directory receiving objects and the library.
        system_includes: Include directories outside the vendored tree
            (the JNI headers), searched before the vendored ones.
    """

    name: str
    config: ToolchainConfig
    source_set: SourceSet
    source_root: Path
    out_dir: Path
    system_includes: list[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Commands run with cwd set to these directories, so paths built
        # from them must not be relative.
        self.source_root = Path(self.source_root).absolute()
        self.out_dir = Path(self.out_dir).absolute()

    @property
    def sources(self) -> list[Path]:
        return [self.source_root / PurePosixPath(f) for f in self.source_set.files]

    @property
    def includes(self) -> list[Path]:
        """All include directories in search order."""
        vendored = [
            self.source_root / PurePosixPath(inc) for inc in self.source_set.includes
        ]
        return list(self.system_includes) + vendored

    def object_path(self, source: str, suffix: str) -> Path:
        """Object file for a vendored source, mirroring its relative path."""
        rel = PurePosixPath(source).with_suffix(suffix)
        return self.out_dir / f"{self.name}-objs" / rel
