# SPDX-License-Identifier: MIT
"""Toolchain protocol and base implementation.

A toolchain drives a C compiler and an archiver to turn a CompileJob into
a static library. Subclasses supply the command lines; the base class
runs them, one at a time, and turns failures into CompileError.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from hdfs_build.core.errors import CompileError, ToolNotFoundError
from hdfs_build.core.flags import deduplicate_flags

if TYPE_CHECKING:
    from hdfs_build.toolchains.config import CompileJob

logger = logging.getLogger(__name__)


@runtime_checkable
class Toolchain(Protocol):
    """What the resolver needs to compile the vendored sources."""

    @property
    def name(self) -> str:
        """Toolchain name (e.g., 'gcc', 'msvc')."""
        ...

    def compile(self, job: CompileJob) -> Path:
        """Compile a job into a static library and return its path.

        Raises:
            CompileError: If any command fails.
        """
        ...


def find_program(name: str, env: Mapping[str, str] | None = None) -> Path:
    """Find a program by name or path.

    Args:
        name: Program name (e.g., 'cc') or a path to it.
        env: Environment whose PATH is searched (default: os.environ).

    Raises:
        ToolNotFoundError: If the program cannot be found.
    """
    candidate = Path(name)
    if candidate.parent != Path(".") and candidate.is_file():
        return candidate
    search_path = None if env is None else env.get("PATH")
    found = shutil.which(name, path=search_path)
    if found is None:
        raise ToolNotFoundError(name)
    return Path(found)


class BaseToolchain(ABC):
    """Abstract base class for toolchain drivers.

    Subclasses provide the compile and archive command lines and the
    naming conventions of their platform.
    """

    OBJECT_SUFFIX = ".o"

    def __init__(
        self,
        name: str,
        *,
        cc: str,
        ar: str,
        cc_args: list[str] | None = None,
        ar_args: list[str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize a toolchain.

        Args:
            name: Toolchain name.
            cc: Compiler executable.
            ar: Archiver executable.
            cc_args: Arguments always passed right after the compiler.
            ar_args: Arguments always passed right after the archiver.
            env: Environment for the spawned commands (default: os.environ).
        """
        self._name = name
        self.cc = cc
        self.ar = ar
        self.cc_args = list(cc_args or [])
        self.ar_args = list(ar_args or [])
        self._env = dict(os.environ if env is None else env)
        self._flag_cache: dict[str, bool] = {}

    @property
    def name(self) -> str:
        return self._name

    # =========================================================================
    # Command lines
    # =========================================================================

    @abstractmethod
    def compile_command(self, job: CompileJob, source: Path, obj: Path) -> list[str]:
        """Return the command compiling one source file to an object."""
        ...

    @abstractmethod
    def archive_command(self, objects: list[Path], output: Path) -> list[str]:
        """Return the command packing objects into a static library."""
        ...

    @abstractmethod
    def flag_check_command(self, flag: str, source: Path, obj: Path) -> list[str]:
        """Return the command used to test whether ``flag`` is accepted."""
        ...

    @abstractmethod
    def static_library_name(self, name: str) -> str:
        """Return the filename of a static library called ``name``."""
        ...

    def flag_rejected(self, result: subprocess.CompletedProcess[str]) -> bool:
        """Decide from a check compile's output whether the flag was rejected.

        A flag that only produces a warning (e.g. a C++ standard passed to
        a C compile) still counts as rejected.
        """
        return result.returncode != 0 or bool(result.stderr.strip())

    # =========================================================================
    # Execution
    # =========================================================================

    def is_flag_supported(self, flag: str) -> bool:
        """Check whether the compiler accepts ``flag`` on a C file."""
        if flag in self._flag_cache:
            return self._flag_cache[flag]

        with tempfile.TemporaryDirectory(prefix="hdfs-build-") as tmp:
            source = Path(tmp) / "flag_check.c"
            source.write_text("int main(void) { return 0; }\n")
            obj = Path(tmp) / f"flag_check{self.OBJECT_SUFFIX}"
            cmd = self.flag_check_command(flag, source, obj)
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    cwd=tmp,
                    env=self._env,
                )
                supported = not self.flag_rejected(result)
            except OSError as e:
                logger.debug("Flag check for %s failed to run: %s", flag, e)
                supported = False

        logger.debug("Flag %s supported: %s", flag, supported)
        self._flag_cache[flag] = supported
        return supported

    def effective_flags(self, job: CompileJob) -> list[str]:
        """Required flags followed by the optional ones the compiler accepts."""
        flags = list(job.config.flags)
        flags.extend(f for f in job.config.optional_flags if self.is_flag_supported(f))
        return deduplicate_flags(flags)

    def run(self, cmd: list[str], cwd: Path | None = None) -> str:
        """Run a command and return its output.

        Raises:
            ToolNotFoundError: If the executable does not exist.
            CompileError: If the command exits non-zero.
        """
        logger.info("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=cwd,
                env=self._env,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(cmd[0]) from e
        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            raise CompileError(cmd, result.returncode, output)
        return output

    def compile(self, job: CompileJob) -> Path:
        """Compile every source of ``job`` and archive the objects."""
        objects: list[Path] = []
        for rel, source in zip(job.source_set.files, job.sources):
            obj = job.object_path(rel, self.OBJECT_SUFFIX)
            obj.parent.mkdir(parents=True, exist_ok=True)
            self.run(self.compile_command(job, source, obj), cwd=job.source_root)
            objects.append(obj)

        output = job.out_dir / self.static_library_name(job.name)
        output.parent.mkdir(parents=True, exist_ok=True)
        if output.exists():
            # Archivers append to existing archives.
            output.unlink()
        self.run(self.archive_command(objects, output), cwd=job.out_dir)
        logger.info("Built %s from %d sources", output, len(objects))
        return output

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, cc={self.cc!r}, ar={self.ar!r})"
