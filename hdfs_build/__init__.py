# SPDX-License-Identifier: MIT
"""
hdfs-build: link or build libhdfs for a native binding at build time.

hdfs-build runs as (or from) a Cargo build script. It links the JVM,
then uses a prebuilt libhdfs if the environment points at one, and
otherwise compiles the vendored libhdfs sources matching the enabled
``hdfs_X_Y`` feature into a static library.
"""

from __future__ import annotations

__version__ = "0.1.0"

from hdfs_build.core.context import BuildContext, OSClass  # noqa: E402
from hdfs_build.core.directives import LinkKind, Resolution  # noqa: E402
from hdfs_build.core.errors import HdfsBuildError  # noqa: E402
from hdfs_build.resolver import BuildPlan, plan_build, resolve, run_build  # noqa: E402
from hdfs_build.sources import SourceSet, build_source_set  # noqa: E402
from hdfs_build.versions import VersionTag, resolve_version, select_version  # noqa: E402

# Public API exports
__all__ = [
    # Version
    "__version__",
    # Inputs and outputs
    "BuildContext",
    "OSClass",
    "LinkKind",
    "Resolution",
    "HdfsBuildError",
    # Resolution
    "BuildPlan",
    "plan_build",
    "run_build",
    "resolve",
    # Versions and sources
    "VersionTag",
    "select_version",
    "resolve_version",
    "SourceSet",
    "build_source_set",
]
