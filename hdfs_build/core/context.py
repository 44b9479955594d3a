# SPDX-License-Identifier: MIT
"""Build context: the external inputs available to one resolution.

A BuildContext is created once per invocation, usually from the
environment variables Cargo sets for a build script, and is not modified
afterwards.
"""

from __future__ import annotations

import enum
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

# Environment signals read by the resolver.
DOCS_ENV = "DOCS_RS"
LIB_DIR_ENV = "HDFS_LIB_DIR"
HADOOP_HOME_ENV = "HADOOP_HOME"
STATIC_ENV = "HDFS_STATIC"

# Cargo build-script inputs.
FEATURE_ENV_PREFIX = "CARGO_FEATURE_"
TARGET_OS_ENV = "CARGO_CFG_TARGET_OS"
OUT_DIR_ENV = "OUT_DIR"
MANIFEST_DIR_ENV = "CARGO_MANIFEST_DIR"

# Packaging mode: compile the bundled sources, never look for a prebuilt.
VENDORED_FEATURE = "vendored"


class OSClass(enum.Enum):
    """Target operating system class."""

    POSIX = "posix"
    MACOS = "macos"
    WINDOWS = "windows"

    @property
    def is_windows(self) -> bool:
        return self is OSClass.WINDOWS

    @property
    def is_macos(self) -> bool:
        return self is OSClass.MACOS

    @property
    def is_posix(self) -> bool:
        """True for every non-windows target, macOS included."""
        return self is not OSClass.WINDOWS

    @classmethod
    def from_target_os(cls, target_os: str) -> OSClass:
        """Map a Rust ``target_os`` (or ``sys.platform``) value to a class.

        Examples:
            >>> OSClass.from_target_os("windows")
            <OSClass.WINDOWS: 'windows'>
            >>> OSClass.from_target_os("macos")
            <OSClass.MACOS: 'macos'>
            >>> OSClass.from_target_os("freebsd")
            <OSClass.POSIX: 'posix'>
        """
        name = target_os.strip().lower()
        if name in ("windows", "win32", "cygwin"):
            return cls.WINDOWS
        if name in ("macos", "darwin"):
            return cls.MACOS
        return cls.POSIX

    @classmethod
    def host(cls) -> OSClass:
        return cls.from_target_os(sys.platform)


def parse_features(env: Mapping[str, str]) -> frozenset[str]:
    """Collect enabled Cargo features from ``CARGO_FEATURE_*`` variables.

    Cargo upper-cases feature names and replaces ``-`` with ``_``; the
    returned names are lower-cased again (``CARGO_FEATURE_HDFS_2_7`` ->
    ``hdfs_2_7``).
    """
    features = set()
    for key in env:
        if key.startswith(FEATURE_ENV_PREFIX) and len(key) > len(FEATURE_ENV_PREFIX):
            features.add(key[len(FEATURE_ENV_PREFIX) :].lower())
    return frozenset(features)


@dataclass(frozen=True)
class BuildContext:
    """Inputs for a single resolution.

    Attributes:
        os_class: Target OS class.
        features: Enabled feature names (version selectors and ``vendored``).
        env: Environment variable overrides (read-only).
        out_dir: Directory the compiled static library is written to
            (made absolute).
        source_root: Root of the vendored source tree (made absolute).
    """

    os_class: OSClass = OSClass.POSIX
    features: frozenset[str] = frozenset()
    env: Mapping[str, str] = field(default_factory=dict)
    out_dir: Path = Path("build")
    source_root: Path = Path(".")

    def __post_init__(self) -> None:
        # Freeze the inputs so nothing downstream can mutate them.
        object.__setattr__(self, "features", frozenset(self.features))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))
        # Relative directories are resolved against the current directory
        # now; the toolchain runs its commands from other directories.
        object.__setattr__(self, "out_dir", Path(self.out_dir).absolute())
        object.__setattr__(self, "source_root", Path(self.source_root).absolute())

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        features: frozenset[str] | set[str] | None = None,
        os_class: OSClass | None = None,
    ) -> BuildContext:
        """Create a context from (Cargo) environment variables.

        Args:
            environ: Variables to read; defaults to ``os.environ``.
            features: Extra features to enable on top of ``CARGO_FEATURE_*``.
            os_class: Override for the target OS class.

        Returns:
            A frozen BuildContext.
        """
        if environ is None:
            environ = os.environ
        env = dict(environ)

        enabled = set(parse_features(env))
        if features:
            enabled.update(features)

        if os_class is None:
            target_os = env.get(TARGET_OS_ENV)
            os_class = (
                OSClass.from_target_os(target_os) if target_os else OSClass.host()
            )

        return cls(
            os_class=os_class,
            features=frozenset(enabled),
            env=env,
            out_dir=Path(env.get(OUT_DIR_ENV) or "build"),
            source_root=Path(env.get(MANIFEST_DIR_ENV) or "."),
        )

    @property
    def is_vendored(self) -> bool:
        """True when the ``vendored`` packaging mode is enabled."""
        return VENDORED_FEATURE in self.features

    def has_env(self, name: str) -> bool:
        return name in self.env

    def get_env(self, name: str) -> str | None:
        return self.env.get(name)
