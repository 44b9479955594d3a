# SPDX-License-Identifier: MIT
"""libhdfs version tags and version selection.

Every supported Hadoop release has a feature named after it (``hdfs_2_2``
... ``hdfs_3_3``). Features are additive: enabling a newer one never
turns an older one off, so the active version is the newest enabled tag.

Two tags are derived for a build:

- the ABI tag, which decides which optional sources are compiled, and
- the source tag, which decides which vendored directory they are read
  from. It equals the ABI tag except on windows, where libhdfs only
  exists from 2.6 on. Windows builds read the 2.6 sources while still
  exposing the older ABI that was asked for.
"""

from __future__ import annotations

import enum
import functools
from collections.abc import Iterable

from hdfs_build.core.context import OSClass


@functools.total_ordering
class VersionTag(enum.Enum):
    """Hadoop/libhdfs ABI generation, oldest to newest."""

    HDFS_2_2 = (2, 2)
    HDFS_2_3 = (2, 3)
    HDFS_2_4 = (2, 4)
    HDFS_2_5 = (2, 5)
    HDFS_2_6 = (2, 6)
    HDFS_2_7 = (2, 7)
    HDFS_2_8 = (2, 8)
    HDFS_2_9 = (2, 9)
    HDFS_2_10 = (2, 10)
    HDFS_3_0 = (3, 0)
    HDFS_3_1 = (3, 1)
    HDFS_3_2 = (3, 2)
    HDFS_3_3 = (3, 3)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionTag):
            return NotImplemented
        return self.value < other.value

    @property
    def feature(self) -> str:
        """Feature / directory name, e.g. ``hdfs_2_10``."""
        major, minor = self.value
        return f"hdfs_{major}_{minor}"

    def __str__(self) -> str:
        major, minor = self.value
        return f"{major}.{minor}"

    @classmethod
    def oldest(cls) -> VersionTag:
        return min(cls)

    @classmethod
    def newest(cls) -> VersionTag:
        return max(cls)

    @classmethod
    def parse(cls, text: str) -> VersionTag:
        """Parse ``2.7``, ``2_7`` or ``hdfs_2_7``.

        Raises:
            ValueError: If the text names no known version.
        """
        name = text.strip().lower()
        if name.startswith("hdfs_"):
            name = name[len("hdfs_") :]
        name = name.replace("_", ".")
        for tag in cls:
            if str(tag) == name:
                return tag
        known = ", ".join(str(tag) for tag in cls)
        raise ValueError(f"unknown hdfs version {text!r} (known: {known})")

    @classmethod
    def from_feature(cls, feature: str) -> VersionTag | None:
        for tag in cls:
            if tag.feature == feature:
                return tag
        return None


# Oldest release with windows support.
WINDOWS_MIN_VERSION = VersionTag.HDFS_2_6


def select_version(features: Iterable[str]) -> VersionTag:
    """Return the newest tag whose feature is enabled (the ABI tag).

    Unknown features are ignored. With no version feature enabled the
    oldest tag is returned.

    Examples:
        >>> select_version({"hdfs_2_3", "hdfs_2_7"})
        <VersionTag.HDFS_2_7: (2, 7)>
        >>> select_version(set())
        <VersionTag.HDFS_2_2: (2, 2)>
    """
    enabled = [VersionTag.from_feature(f) for f in features]
    tags = [tag for tag in enabled if tag is not None]
    return max(tags, default=VersionTag.oldest())


def resolve_version(features: Iterable[str], os_class: OSClass) -> VersionTag:
    """Return the tag whose vendored sources are compiled (the source tag).

    Same as select_version(), raised to WINDOWS_MIN_VERSION on windows.
    """
    version = select_version(features)
    if os_class.is_windows:
        return max(version, WINDOWS_MIN_VERSION)
    return version
