# SPDX-License-Identifier: MIT
"""Toolchain drivers (GCC-style, MSVC) and toolchain selection."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import PureWindowsPath

from hdfs_build.core.context import OSClass
from hdfs_build.toolchains.base import BaseToolchain, Toolchain, find_program
from hdfs_build.toolchains.config import (
    CompileJob,
    ToolchainConfig,
    java_includes,
    toolchain_config,
)
from hdfs_build.toolchains.gcc import GccToolchain, default_commands
from hdfs_build.toolchains.msvc import MsvcToolchain

logger = logging.getLogger(__name__)


def find_c_toolchain(
    os_class: OSClass, env: Mapping[str, str] | None = None
) -> BaseToolchain:
    """Pick and verify a toolchain for ``os_class``.

    Windows uses MSVC unless ``CC`` names a GCC-style compiler (e.g. a
    MinGW cross build); everything else uses the GCC-style driver.

    Raises:
        ToolNotFoundError: If the compiler or archiver is not installed.
    """
    if env is None:
        env = os.environ
    cc, ar = default_commands(env)

    msvc_like = PureWindowsPath(cc).stem.lower() in ("cl", "clang-cl")

    toolchain: BaseToolchain
    if os_class.is_windows and (not env.get("CC") or msvc_like):
        toolchain = MsvcToolchain(
            cc=env.get("CC") or None, ar=env.get("AR") or None, env=env
        )
    else:
        toolchain = GccToolchain(cc=cc, ar=ar, env=env)

    toolchain.cc = str(find_program(toolchain.cc, env))
    toolchain.ar = str(find_program(toolchain.ar, env))
    logger.debug("Using %r", toolchain)
    return toolchain


__all__ = [
    "BaseToolchain",
    "CompileJob",
    "GccToolchain",
    "MsvcToolchain",
    "Toolchain",
    "ToolchainConfig",
    "find_c_toolchain",
    "java_includes",
    "toolchain_config",
]
