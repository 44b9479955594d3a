# SPDX-License-Identifier: MIT
"""Source selection for the vendored libhdfs tree.

The vendored tree is laid out as::

    libhdfs/
        hdfs_2_2/ ... hdfs_3_3/     one directory per release
    libdirent/include/              dirent.h shim for windows

build_source_set() turns a (version, OS) pair into the files and include
directories to compile. It evaluates a fixed chain of rules. Each rule
has a predicate and a contribution, and contributions are only ever
added, so the result for a newer version contains everything an older
one had on the same OS.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from hdfs_build.core.context import OSClass
from hdfs_build.core.errors import MissingSourceError
from hdfs_build.versions import VersionTag, resolve_version

LIBHDFS_DIR = "libhdfs"
DIRENT_INCLUDE_DIR = "libdirent/include"

# Versions at which the vendored sources change shape.
THREADING_SINCE = VersionTag.HDFS_2_6
HTABLE_SINCE = VersionTag.HDFS_2_6
HTABLE_REMOVED = VersionTag.HDFS_3_3
HEADER_RELOCATED_SINCE = VersionTag.HDFS_2_8
JCLASSES_SINCE = VersionTag.HDFS_3_3


@dataclass
class SourceSet:
    """Files and include directories to compile, relative to the source root.

    Both lists keep insertion order and ignore duplicates.

    Attributes:
        files: C files to compile.
        includes: Include directories.
        version: Tag of the vendored directory the paths point into.
    """

    files: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    version: VersionTag | None = None

    def add_file(self, path: str) -> None:
        if path not in self.files:
            self.files.append(path)

    def add_include(self, path: str) -> None:
        if path not in self.includes:
            self.includes.append(path)

    def shape(self) -> tuple[frozenset[str], frozenset[str]]:
        """Files and includes with the version directory replaced by ``{v}``.

        Sets built for different versions are comparable through their
        shapes.
        """
        if self.version is None:
            return frozenset(self.files), frozenset(self.includes)
        root = f"{LIBHDFS_DIR}/{self.version.feature}"
        placeholder = f"{LIBHDFS_DIR}/{{v}}"

        def strip(path: str) -> str:
            if path == root or path.startswith(root + "/"):
                return placeholder + path[len(root) :]
            return path

        return (
            frozenset(strip(p) for p in self.files),
            frozenset(strip(p) for p in self.includes),
        )

    def issuperset(self, other: SourceSet) -> bool:
        files, includes = self.shape()
        other_files, other_includes = other.shape()
        return other_files <= files and other_includes <= includes

    def __bool__(self) -> bool:
        return bool(self.files)


@dataclass(frozen=True)
class RuleInput:
    """What every rule sees.

    Attributes:
        version: The ABI tag; rule predicates test this one.
        source_version: The tag whose directory paths are built from.
        os_class: Target OS class.
    """

    version: VersionTag
    source_version: VersionTag
    os_class: OSClass

    @property
    def root(self) -> str:
        return f"{LIBHDFS_DIR}/{self.source_version.feature}"


@dataclass(frozen=True)
class SourceRule:
    """A named, version/OS-gated contribution to a SourceSet."""

    name: str
    applies: Callable[[RuleInput], bool]
    contribute: Callable[[RuleInput, SourceSet], None]


# Predicates


def has_threading(ri: RuleInput) -> bool:
    """Mutexes and threads since 2.6, and on windows always."""
    return ri.version >= THREADING_SINCE or ri.os_class.is_windows


def has_htable(ri: RuleInput) -> bool:
    return HTABLE_SINCE <= ri.version < HTABLE_REMOVED


def has_relocated_header(ri: RuleInput) -> bool:
    """``hdfs.h`` lives in ``include/hdfs/`` since 2.8."""
    return ri.version >= HEADER_RELOCATED_SINCE


def has_jclasses(ri: RuleInput) -> bool:
    return ri.version >= JCLASSES_SINCE


# Contributions


def _add_base(ri: RuleInput, ss: SourceSet) -> None:
    ss.add_include(LIBHDFS_DIR)
    ss.add_include(ri.root)
    for name in ("exception.c", "jni_helper.c", "hdfs.c"):
        ss.add_file(f"{ri.root}/{name}")


def _add_threading(ri: RuleInput, ss: SourceSet) -> None:
    os_dir = f"{ri.root}/os/{'windows' if ri.os_class.is_windows else 'posix'}"
    ss.add_include(f"{ri.root}/os")
    ss.add_include(os_dir)
    for name in ("mutexes.c", "thread.c", "thread_local_storage.c"):
        ss.add_file(f"{os_dir}/{name}")


def _add_htable(ri: RuleInput, ss: SourceSet) -> None:
    ss.add_include(f"{ri.root}/common")
    ss.add_file(f"{ri.root}/common/htable.c")


def _add_relocated_header(ri: RuleInput, ss: SourceSet) -> None:
    ss.add_include(f"{ri.root}/include")


def _add_jclasses(ri: RuleInput, ss: SourceSet) -> None:
    ss.add_file(f"{ri.root}/jclasses.c")
    # jclasses.c lists class directories with opendir(), which windows lacks.
    if ri.os_class.is_windows:
        ss.add_include(DIRENT_INCLUDE_DIR)


SOURCE_RULES: tuple[SourceRule, ...] = (
    SourceRule("base", lambda ri: True, _add_base),
    SourceRule("threading", has_threading, _add_threading),
    SourceRule("htable", has_htable, _add_htable),
    SourceRule("relocated-header", has_relocated_header, _add_relocated_header),
    SourceRule("jclasses", has_jclasses, _add_jclasses),
)


def source_version_for(version: VersionTag, os_class: OSClass) -> VersionTag:
    """Return the tag whose directory the sources for ``version`` come from."""
    return resolve_version([version.feature], os_class)


def applicable_rules(version: VersionTag, os_class: OSClass) -> list[str]:
    """Names of the rules that apply to a (version, OS) pair, in order."""
    ri = RuleInput(version, source_version_for(version, os_class), os_class)
    return [rule.name for rule in SOURCE_RULES if rule.applies(ri)]


def build_source_set(version: VersionTag, os_class: OSClass) -> SourceSet:
    """Compute the SourceSet for an ABI version on a target OS.

    Args:
        version: ABI tag (see hdfs_build.versions.select_version).
        os_class: Target OS class.

    Returns:
        A new, non-empty SourceSet. The result depends only on the
        arguments.

    Example:
        >>> ss = build_source_set(VersionTag.HDFS_2_2, OSClass.POSIX)
        >>> ss.files
        ['libhdfs/hdfs_2_2/exception.c', 'libhdfs/hdfs_2_2/jni_helper.c', 'libhdfs/hdfs_2_2/hdfs.c']
    """
    ri = RuleInput(version, source_version_for(version, os_class), os_class)
    ss = SourceSet(version=ri.source_version)
    for rule in SOURCE_RULES:
        if rule.applies(ri):
            rule.contribute(ri, ss)
    return ss


def check_source_set(source_set: SourceSet, source_root: Path | str) -> None:
    """Verify every file of a SourceSet exists under ``source_root``.

    Raises:
        MissingSourceError: For the first missing file.
    """
    root = Path(source_root)
    for rel in source_set.files:
        path = root / PurePosixPath(rel)
        if not path.is_file():
            raise MissingSourceError(rel, location=root)
