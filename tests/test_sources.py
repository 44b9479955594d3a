# SPDX-License-Identifier: MIT
"""Tests for hdfs_build.sources."""

import itertools

import pytest

from hdfs_build.core.context import OSClass
from hdfs_build.core.errors import MissingSourceError
from hdfs_build.sources import (
    DIRENT_INCLUDE_DIR,
    SourceSet,
    applicable_rules,
    build_source_set,
    check_source_set,
)
from hdfs_build.versions import VersionTag

ALL_PAIRS = list(itertools.product(VersionTag, OSClass))


def has_file(ss: SourceSet, suffix: str) -> bool:
    return any(f.endswith(suffix) for f in ss.files)


def has_include(ss: SourceSet, suffix: str) -> bool:
    return any(inc.endswith(suffix) for inc in ss.includes)


class TestSourceSet:
    def test_add_ignores_duplicates(self):
        ss = SourceSet()
        ss.add_file("a.c")
        ss.add_file("a.c")
        ss.add_include("inc")
        ss.add_include("inc")
        assert ss.files == ["a.c"]
        assert ss.includes == ["inc"]

    def test_empty_is_falsy(self):
        assert not SourceSet()

    def test_shape_strips_version_directory(self):
        ss = build_source_set(VersionTag.HDFS_2_7, OSClass.POSIX)
        files, includes = ss.shape()
        assert "libhdfs/{v}/hdfs.c" in files
        assert "libhdfs/{v}/common/htable.c" in files
        assert "libhdfs" in includes
        assert "libhdfs/{v}" in includes


class TestBuildSourceSet:
    @pytest.mark.parametrize("version,os_class", ALL_PAIRS)
    def test_deterministic_and_non_empty(self, version, os_class):
        first = build_source_set(version, os_class)
        second = build_source_set(version, os_class)
        assert first
        assert first.includes
        assert first == second

    @pytest.mark.parametrize("os_class", list(OSClass))
    def test_monotonic_in_version(self, os_class):
        tags = list(VersionTag)
        for older, newer in itertools.combinations(tags, 2):
            if newer is VersionTag.HDFS_3_3 and "htable" in applicable_rules(
                older, os_class
            ):
                # htable.c is removed in 3.3.
                continue
            assert build_source_set(newer, os_class).issuperset(
                build_source_set(older, os_class)
            ), f"{newer} should contain {older} on {os_class}"

    @pytest.mark.parametrize("os_class", list(OSClass))
    def test_monotonic_apart_from_htable(self, os_class):
        tags = list(VersionTag)
        for older, newer in itertools.combinations(tags, 2):
            old_files, old_includes = build_source_set(older, os_class).shape()
            new_files, new_includes = build_source_set(newer, os_class).shape()
            old_files -= {"libhdfs/{v}/common/htable.c"}
            old_includes -= {"libhdfs/{v}/common"}
            assert old_files <= new_files
            assert old_includes <= new_includes

    def test_files_point_into_one_version_directory(self):
        ss = build_source_set(VersionTag.HDFS_3_1, OSClass.POSIX)
        assert all(f.startswith("libhdfs/hdfs_3_1/") for f in ss.files)

    def test_scenario_a_oldest_posix(self):
        ss = build_source_set(VersionTag.HDFS_2_2, OSClass.POSIX)
        assert ss.files == [
            "libhdfs/hdfs_2_2/exception.c",
            "libhdfs/hdfs_2_2/jni_helper.c",
            "libhdfs/hdfs_2_2/hdfs.c",
        ]
        assert ss.includes == ["libhdfs", "libhdfs/hdfs_2_2"]

    def test_threading_posix_since_2_6(self):
        ss = build_source_set(VersionTag.HDFS_2_6, OSClass.POSIX)
        assert "libhdfs/hdfs_2_6/os" in ss.includes
        assert "libhdfs/hdfs_2_6/os/posix" in ss.includes
        for name in ("mutexes.c", "thread.c", "thread_local_storage.c"):
            assert f"libhdfs/hdfs_2_6/os/posix/{name}" in ss.files
        assert not has_include(ss, "os/windows")

    def test_no_threading_before_2_6_on_posix(self):
        for os_class in (OSClass.POSIX, OSClass.MACOS):
            ss = build_source_set(VersionTag.HDFS_2_5, os_class)
            assert not has_include(ss, "/os")
            assert not has_file(ss, "mutexes.c")

    @pytest.mark.parametrize("version", list(VersionTag))
    def test_windows_always_has_windows_threading(self, version):
        ss = build_source_set(version, OSClass.WINDOWS)
        assert has_include(ss, "/os/windows")
        assert has_file(ss, "os/windows/mutexes.c")
        assert has_file(ss, "os/windows/thread.c")
        assert has_file(ss, "os/windows/thread_local_storage.c")
        assert not has_include(ss, "/os/posix")

    @pytest.mark.parametrize("version,os_class", ALL_PAIRS)
    def test_htable_half_open_range(self, version, os_class):
        ss = build_source_set(version, os_class)
        expected = VersionTag.HDFS_2_6 <= version < VersionTag.HDFS_3_3
        assert has_file(ss, "common/htable.c") is expected
        assert has_include(ss, "/common") is expected

    @pytest.mark.parametrize("version,os_class", ALL_PAIRS)
    def test_relocated_header_since_2_8(self, version, os_class):
        ss = build_source_set(version, os_class)
        assert has_include(ss, f"/{ss.version.feature}/include") is (
            version >= VersionTag.HDFS_2_8
        )

    @pytest.mark.parametrize("version,os_class", ALL_PAIRS)
    def test_jclasses_since_3_3(self, version, os_class):
        ss = build_source_set(version, os_class)
        expected = version >= VersionTag.HDFS_3_3
        assert has_file(ss, "jclasses.c") is expected
        assert (DIRENT_INCLUDE_DIR in ss.includes) is (expected and os_class.is_windows)

    def test_scenario_c_windows_without_flags(self):
        # Windows has no libhdfs before 2.6: build the 2.6 sources but keep
        # the default ABI, so no hash table and no class registry.
        ss = build_source_set(VersionTag.HDFS_2_2, OSClass.WINDOWS)
        assert ss.version is VersionTag.HDFS_2_6
        assert "libhdfs/hdfs_2_6/hdfs.c" in ss.files
        assert "libhdfs/hdfs_2_6/os/windows/thread.c" in ss.files
        assert not has_file(ss, "htable.c")
        assert not has_file(ss, "jclasses.c")

    def test_scenario_d_newest_posix(self):
        ss = build_source_set(VersionTag.HDFS_3_3, OSClass.POSIX)
        assert "libhdfs/hdfs_3_3/jclasses.c" in ss.files
        assert not has_file(ss, "htable.c")
        assert "libhdfs/hdfs_3_3/include" in ss.includes
        assert DIRENT_INCLUDE_DIR not in ss.includes

    def test_newest_windows_all_rules(self):
        ss = build_source_set(VersionTag.HDFS_3_3, OSClass.WINDOWS)
        assert ss.includes == [
            "libhdfs",
            "libhdfs/hdfs_3_3",
            "libhdfs/hdfs_3_3/os",
            "libhdfs/hdfs_3_3/os/windows",
            "libhdfs/hdfs_3_3/include",
            DIRENT_INCLUDE_DIR,
        ]
        assert ss.files[-1] == "libhdfs/hdfs_3_3/jclasses.c"


class TestApplicableRules:
    def test_oldest(self):
        assert applicable_rules(VersionTag.HDFS_2_2, OSClass.POSIX) == ["base"]

    def test_windows_oldest(self):
        assert applicable_rules(VersionTag.HDFS_2_2, OSClass.WINDOWS) == [
            "base",
            "threading",
        ]

    def test_2_8(self):
        assert applicable_rules(VersionTag.HDFS_2_8, OSClass.MACOS) == [
            "base",
            "threading",
            "htable",
            "relocated-header",
        ]

    def test_newest(self):
        assert applicable_rules(VersionTag.HDFS_3_3, OSClass.POSIX) == [
            "base",
            "threading",
            "relocated-header",
            "jclasses",
        ]


class TestCheckSourceSet:
    @pytest.mark.parametrize("version,os_class", ALL_PAIRS)
    def test_complete_tree_passes(self, vendored_tree, version, os_class):
        check_source_set(build_source_set(version, os_class), vendored_tree)

    def test_missing_file(self, vendored_tree):
        (vendored_tree / "libhdfs" / "hdfs_3_3" / "jclasses.c").unlink()
        ss = build_source_set(VersionTag.HDFS_3_3, OSClass.POSIX)
        with pytest.raises(MissingSourceError) as excinfo:
            check_source_set(ss, vendored_tree)
        assert excinfo.value.path == "libhdfs/hdfs_3_3/jclasses.c"

    def test_empty_root(self, tmp_path):
        ss = build_source_set(VersionTag.HDFS_2_2, OSClass.POSIX)
        with pytest.raises(MissingSourceError):
            check_source_set(ss, tmp_path)
