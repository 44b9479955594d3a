# SPDX-License-Identifier: MIT
"""MSVC toolchain driver (Windows only).

Expects ``cl.exe`` and ``lib.exe`` to be reachable, i.e. the build runs
from a Visual Studio developer prompt or the caller passes full paths.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from hdfs_build.toolchains.base import BaseToolchain

if TYPE_CHECKING:
    from hdfs_build.toolchains.config import CompileJob

# "ignoring unknown option" / "invalid value for option"
_REJECTED_OPTION_CODES = ("D9002", "D9014", "D9025")


class MsvcToolchain(BaseToolchain):
    """MSVC toolchain.

    Command lines:
        compile: ``cl.exe /nologo <flags> /I<dir>... /D<def>... /c <src> /Fo<obj>``
        archive: ``lib.exe /nologo /OUT:<name>.lib <obj>...``
    """

    OBJECT_SUFFIX = ".obj"

    def __init__(
        self,
        *,
        cc: str | None = None,
        ar: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__("msvc", cc=cc or "cl.exe", ar=ar or "lib.exe", env=env)

    def _base_flags(self, job: CompileJob) -> list[str]:
        flags = ["/nologo"]
        if job.config.warnings:
            flags.append("/W3")
        if job.config.static_runtime:
            flags.append("/MT")
        return flags

    def compile_command(self, job: CompileJob, source: Path, obj: Path) -> list[str]:
        cmd = [self.cc]
        cmd.extend(self._base_flags(job))
        cmd.extend(self.effective_flags(job))
        cmd.extend(f"/I{inc}" for inc in job.includes)
        cmd.extend(f"/D{define}" for define in job.config.defines)
        cmd.extend(["/c", str(source), f"/Fo{obj}"])
        return cmd

    def archive_command(self, objects: list[Path], output: Path) -> list[str]:
        return [self.ar, "/nologo", f"/OUT:{output}", *(str(obj) for obj in objects)]

    def flag_check_command(self, flag: str, source: Path, obj: Path) -> list[str]:
        return [self.cc, "/nologo", flag, "/c", str(source), f"/Fo{obj}"]

    def flag_rejected(self, result: subprocess.CompletedProcess[str]) -> bool:
        # cl.exe echoes the file name on stdout, so only look for the
        # command-line diagnostics.
        if result.returncode != 0:
            return True
        output = (result.stdout or "") + (result.stderr or "")
        return any(code in output for code in _REJECTED_OPTION_CODES)

    def static_library_name(self, name: str) -> str:
        return f"{name}.lib"
