# SPDX-License-Identifier: MIT
"""GCC-style toolchain driver (gcc, clang, Apple clang).

Uses the C compiler for objects and ``ar`` for the static library.
``CC`` and ``AR`` override the default commands.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from hdfs_build.toolchains.base import BaseToolchain

if TYPE_CHECKING:
    from hdfs_build.toolchains.config import CompileJob


class GccToolchain(BaseToolchain):
    """GCC/Clang toolchain.

    Command lines:
        compile: ``$CC <flags> -I<dir>... -D<def>... -c <src> -o <obj>``
        archive: ``$AR crs lib<name>.a <obj>...``
    """

    OBJECT_SUFFIX = ".o"

    def __init__(
        self,
        *,
        cc: str | None = None,
        ar: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Create a driver.

        ``cc`` and ``ar`` may carry arguments (``CC="gcc -m32"``); they are
        split shell-style and the extra words kept in front of every
        command.
        """
        cc_exe, *cc_args = split_command(cc or "cc")
        ar_exe, *ar_args = split_command(ar or "ar")
        super().__init__(
            "gcc", cc=cc_exe, ar=ar_exe, cc_args=cc_args, ar_args=ar_args, env=env
        )

    def _base_flags(self, job: CompileJob) -> list[str]:
        flags: list[str] = []
        if job.config.warnings:
            flags.extend(["-Wall", "-Wextra"])
        if job.config.static_runtime:
            flags.append("-static")
        return flags

    def compile_command(self, job: CompileJob, source: Path, obj: Path) -> list[str]:
        cmd = [self.cc, *self.cc_args]
        cmd.extend(self._base_flags(job))
        cmd.extend(self.effective_flags(job))
        cmd.extend(f"-I{inc}" for inc in job.includes)
        cmd.extend(f"-D{define}" for define in job.config.defines)
        cmd.extend(["-c", str(source), "-o", str(obj)])
        return cmd

    def archive_command(self, objects: list[Path], output: Path) -> list[str]:
        return [
            self.ar,
            *self.ar_args,
            "crs",
            str(output),
            *(str(obj) for obj in objects),
        ]

    def flag_check_command(self, flag: str, source: Path, obj: Path) -> list[str]:
        return [self.cc, *self.cc_args, flag, "-c", str(source), "-o", str(obj)]

    def static_library_name(self, name: str) -> str:
        return f"lib{name}.a"


def split_command(command: str) -> list[str]:
    """Split a command shell-style, keeping backslashes on Windows hosts."""
    if os.name == "nt":
        return [word.strip('"') for word in shlex.split(command, posix=False)]
    return shlex.split(command)


def default_commands(env: Mapping[str, str]) -> tuple[str, str]:
    """Return the (compiler, archiver) commands honouring ``CC`` and ``AR``."""
    return env.get("CC") or "cc", env.get("AR") or "ar"

