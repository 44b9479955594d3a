# SPDX-License-Identifier: MIT
"""Resolve how libhdfs and the JVM get linked.

Resolution runs in two phases:

1. plan_build() decides everything: JVM link directives, whether a
   prebuilt libhdfs is used, and, if not, the CompileJob for the vendored
   sources. Apart from the injected Java locator it has no side effects.
2. run_build() executes the CompileJob (if any) with a toolchain and adds
   the directives for the produced static library.

The steps always run in the same order:

    docs gate -> JVM -> prebuilt libhdfs -> vendored sources

Any error stops the whole run. There is no fallback for a missing JVM;
the compiled code needs the JNI symbols at link time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from hdfs_build.core.context import (
    DOCS_ENV,
    HADOOP_HOME_ENV,
    LIB_DIR_ENV,
    STATIC_ENV,
    BuildContext,
)
from hdfs_build.core.directives import (
    LinkArg,
    LinkKind,
    LinkLib,
    LinkSearch,
    Metadata,
    Resolution,
)
from hdfs_build.core.errors import JavaNotFoundError
from hdfs_build.java.locator import JavaLocator, Locator
from hdfs_build.sources import build_source_set, check_source_set
from hdfs_build.toolchains import (
    CompileJob,
    Toolchain,
    find_c_toolchain,
    java_includes,
    toolchain_config,
)
from hdfs_build.versions import VersionTag, resolve_version, select_version

logger = logging.getLogger(__name__)

LIBRARY_NAME = "hdfs"
JVM_LIBRARY_NAME = "jvm"
JVM_IMPORT_LIBRARY = "jvm.lib"
JVM_PATH_KEY = "JVM_PATH"
HADOOP_NATIVE_SUBDIR = "lib/native"

FALLBACK_NOTICE = (
    "Building libhdfs from source as a fallback, "
    "if you are encountering issues with missing headers on JDK8, "
    "consider enabling the `vendored` feature."
)


@dataclass
class BuildPlan:
    """Outcome of plan_build().

    Attributes:
        resolution: Directives decided so far.
        compile_job: Vendored build to run, or None if nothing is compiled.
        prebuilt_found: Whether a prebuilt libhdfs was configured.
        version: Source tag of the vendored build (None if not compiling).
        abi_version: ABI tag of the vendored build (None if not compiling).
        skipped: True if the docs gate short-circuited everything.
        context: The inputs the plan was made for.
    """

    resolution: Resolution = field(default_factory=Resolution)
    compile_job: CompileJob | None = None
    prebuilt_found: bool = False
    version: VersionTag | None = None
    abi_version: VersionTag | None = None
    skipped: bool = False
    context: BuildContext = field(default_factory=BuildContext)

    @property
    def needs_compile(self) -> bool:
        return self.compile_job is not None


def is_docs_build(ctx: BuildContext) -> bool:
    """True while building documentation, where nothing has to link."""
    return ctx.has_env(DOCS_ENV)


def resolve_jvm(ctx: BuildContext, locator: Locator, resolution: Resolution) -> str:
    """Add the directives linking the JVM and return its library directory.

    Raises:
        JavaNotFoundError: If the JVM library cannot be located.
    """
    jvm_path = locator.locate_jvm_dyn_library()
    logger.info("Found JVM library in %s", jvm_path)

    resolution.add(LinkLib(JVM_LIBRARY_NAME, LinkKind.DYLIB))
    resolution.add(LinkSearch(jvm_path))
    # Embed the directory so the loader finds libjvm without LD_LIBRARY_PATH.
    resolution.add(LinkArg(f"-Wl,-rpath,{jvm_path}"))
    # Dependent crates may need the same path to link.
    resolution.add(Metadata(JVM_PATH_KEY, jvm_path))

    if ctx.os_class.is_windows:
        try:
            lib_path = locator.locate_file(JVM_IMPORT_LIBRARY)
        except JavaNotFoundError as e:
            # Some JDK distributions do not ship the import library.
            logger.debug("%s not found, skipping: %s", JVM_IMPORT_LIBRARY, e)
        else:
            resolution.add(LinkSearch(lib_path))

    return jvm_path


def prebuilt_lib_dir(ctx: BuildContext) -> str | None:
    """Directory holding a prebuilt libhdfs, from the environment only."""
    lib_dir = ctx.get_env(LIB_DIR_ENV)
    if lib_dir is not None:
        return lib_dir
    hadoop_home = ctx.get_env(HADOOP_HOME_ENV)
    if hadoop_home is not None:
        return f"{hadoop_home}/{HADOOP_NATIVE_SUBDIR}"
    return None


def find_prebuilt(ctx: BuildContext, resolution: Resolution) -> bool:
    """Link a prebuilt libhdfs if the environment points at one.

    ``HDFS_LIB_DIR`` wins over ``HADOOP_HOME``. ``HDFS_STATIC`` (any value)
    selects static linking. The directory is not checked; a wrong one
    fails at link time.

    Returns:
        True if a prebuilt library was configured, False otherwise.
    """
    resolution.rerun_if_env_changed(LIB_DIR_ENV, STATIC_ENV, HADOOP_HOME_ENV)

    lib_dir = prebuilt_lib_dir(ctx)
    if lib_dir is None:
        logger.debug("Neither %s nor %s is set", LIB_DIR_ENV, HADOOP_HOME_ENV)
        return False

    kind = LinkKind.STATIC if ctx.has_env(STATIC_ENV) else LinkKind.DYLIB
    resolution.link_library(LIBRARY_NAME, kind, lib_dir)
    logger.info("Using prebuilt libhdfs from %s (%s)", lib_dir, kind.value)
    return True


def plan_vendored(ctx: BuildContext, locator: Locator) -> CompileJob:
    """Plan the compile of the bundled libhdfs sources.

    Raises:
        JavaNotFoundError: If no Java home can be located.
    """
    java_home = locator.locate_java_home()

    abi_version = select_version(ctx.features)
    source_set = build_source_set(abi_version, ctx.os_class)
    logger.info(
        "Compiling libhdfs %s sources (ABI %s) for %s",
        source_set.version,
        abi_version,
        ctx.os_class.value,
    )

    return CompileJob(
        name=LIBRARY_NAME,
        config=toolchain_config(ctx.os_class),
        source_set=source_set,
        source_root=ctx.source_root,
        out_dir=ctx.out_dir,
        system_includes=java_includes(java_home, ctx.os_class),
    )


def plan_build(ctx: BuildContext, locator: Locator | None = None) -> BuildPlan:
    """Decide how libhdfs and the JVM are linked for ``ctx``.

    Args:
        ctx: Build inputs.
        locator: Java discovery; defaults to a JavaLocator reading ``ctx.env``.

    Returns:
        The BuildPlan. Its compile_job is set when the vendored sources
        must be compiled.

    Raises:
        JavaNotFoundError: If the JVM or Java home cannot be located.
    """
    plan = BuildPlan(context=ctx)
    if is_docs_build(ctx):
        logger.info("%s is set, skipping link resolution", DOCS_ENV)
        plan.skipped = True
        return plan

    if locator is None:
        locator = JavaLocator(env=ctx.env)

    resolve_jvm(ctx, locator, plan.resolution)

    if ctx.is_vendored:
        logger.info("vendored feature enabled, not looking for a prebuilt libhdfs")
    else:
        plan.prebuilt_found = find_prebuilt(ctx, plan.resolution)

    if plan.prebuilt_found:
        return plan

    plan.compile_job = plan_vendored(ctx, locator)
    plan.abi_version = select_version(ctx.features)
    plan.version = resolve_version(ctx.features, ctx.os_class)
    if not ctx.is_vendored:
        plan.resolution.warn(FALLBACK_NOTICE)
    return plan


def run_build(
    plan: BuildPlan,
    toolchain: Toolchain | None = None,
    *,
    check_sources: bool = True,
) -> Resolution:
    """Execute a plan's compile job and return the complete resolution.

    Args:
        plan: Result of plan_build().
        toolchain: Toolchain driver; found with find_c_toolchain() if None.
        check_sources: Verify the vendored files exist before compiling.

    Raises:
        MissingSourceError: If a vendored source file is missing.
        ToolNotFoundError: If no compiler is available.
        CompileError: If the toolchain rejects the job.
    """
    job = plan.compile_job
    if job is None:
        return plan.resolution

    if check_sources:
        check_source_set(job.source_set, job.source_root)

    if toolchain is None:
        ctx = plan.context
        toolchain = find_c_toolchain(ctx.os_class, env=ctx.env)

    library = toolchain.compile(job)
    logger.info("Compiled %s", library)
    plan.resolution.link_library(LIBRARY_NAME, LinkKind.STATIC, job.out_dir)
    return plan.resolution


def resolve(
    ctx: BuildContext,
    locator: Locator | None = None,
    toolchain: Toolchain | None = None,
) -> Resolution:
    """Plan and run a complete resolution for ``ctx``."""
    return run_build(plan_build(ctx, locator), toolchain)
