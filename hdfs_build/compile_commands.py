# SPDX-License-Identifier: MIT
"""compile_commands.json for the vendored libhdfs build.

Lets clangd, clang-tidy and IDEs understand the vendored sources with the
exact flags and include paths used by the build.

Format:
    [
        {
            "directory": "/path/to/source-root",
            "file": "libhdfs/hdfs_3_3/hdfs.c",
            "command": "cc -fvisibility=hidden ... -c libhdfs/... -o ...",
            "output": "/path/to/out/hdfs-objs/libhdfs/hdfs_3_3/hdfs.o"
        },
        ...
    ]
"""

from __future__ import annotations

import json
import logging
import shlex
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hdfs_build.toolchains.base import BaseToolchain
    from hdfs_build.toolchains.config import CompileJob

logger = logging.getLogger(__name__)

COMPILE_COMMANDS_FILE = "compile_commands.json"


def collect_compile_commands(
    job: CompileJob, toolchain: BaseToolchain
) -> list[dict[str, Any]]:
    """Return one compilation database entry per source of ``job``."""
    directory = str(job.source_root.absolute())
    commands: list[dict[str, Any]] = []
    for rel, source in zip(job.source_set.files, job.sources):
        obj = job.object_path(rel, toolchain.OBJECT_SUFFIX)
        cmd = toolchain.compile_command(job, source, obj)
        commands.append(
            {
                "directory": directory,
                "file": rel,
                "command": " ".join(shlex.quote(part) for part in cmd),
                "output": str(obj),
            }
        )
    return commands


def write_compile_commands(
    job: CompileJob, toolchain: BaseToolchain, output_dir: Path | None = None
) -> Path:
    """Write ``compile_commands.json`` for ``job`` and return its path.

    Args:
        job: The compile job.
        toolchain: Toolchain whose command lines are recorded.
        output_dir: Where to write the file (default: ``job.out_dir``).
    """
    output_dir = output_dir or job.out_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / COMPILE_COMMANDS_FILE

    commands = collect_compile_commands(job, toolchain)
    with open(output_file, "w") as f:
        json.dump(commands, f, indent=2)
        f.write("\n")

    logger.info("Wrote %s (%d entries)", output_file, len(commands))
    return output_file
