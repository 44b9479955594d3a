# SPDX-License-Identifier: MIT
"""Tests for hdfs_build.versions."""

import pytest

from hdfs_build.core.context import OSClass
from hdfs_build.versions import (
    WINDOWS_MIN_VERSION,
    VersionTag,
    resolve_version,
    select_version,
)


class TestVersionTag:
    def test_total_order(self):
        tags = list(VersionTag)
        assert tags == sorted(tags)
        assert VersionTag.HDFS_2_9 < VersionTag.HDFS_2_10 < VersionTag.HDFS_3_0
        assert VersionTag.HDFS_3_3 >= VersionTag.HDFS_3_3

    def test_oldest_newest(self):
        assert VersionTag.oldest() is VersionTag.HDFS_2_2
        assert VersionTag.newest() is VersionTag.HDFS_3_3

    def test_feature_names(self):
        assert VersionTag.HDFS_2_10.feature == "hdfs_2_10"
        assert str(VersionTag.HDFS_2_10) == "2.10"

    @pytest.mark.parametrize("text", ["2.7", "2_7", "hdfs_2_7", "HDFS_2_7", " 2.7 "])
    def test_parse(self, text):
        assert VersionTag.parse(text) is VersionTag.HDFS_2_7

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="unknown hdfs version"):
            VersionTag.parse("4.0")

    def test_from_feature(self):
        assert VersionTag.from_feature("hdfs_3_1") is VersionTag.HDFS_3_1
        assert VersionTag.from_feature("vendored") is None

    def test_comparison_with_other_types(self):
        with pytest.raises(TypeError):
            VersionTag.HDFS_2_2 < (2, 3)  # noqa: B015


class TestSelectVersion:
    def test_latest_enabled_wins(self):
        assert select_version({"hdfs_2_3", "hdfs_2_7"}) is VersionTag.HDFS_2_7

    def test_default_oldest(self):
        assert select_version(set()) is VersionTag.HDFS_2_2

    def test_ignores_other_features(self):
        assert select_version({"vendored", "hdfs_3_0"}) is VersionTag.HDFS_3_0

    def test_cargo_style_cumulative_features(self):
        # Enabling hdfs_3_3 in Cargo also enables every older feature.
        features = {tag.feature for tag in VersionTag}
        assert select_version(features) is VersionTag.HDFS_3_3

    def test_single_flag_each(self):
        for tag in VersionTag:
            assert select_version({tag.feature}) is tag


class TestResolveVersion:
    def test_posix_same_as_select(self):
        assert resolve_version({"hdfs_2_3"}, OSClass.POSIX) is VersionTag.HDFS_2_3
        assert resolve_version(set(), OSClass.MACOS) is VersionTag.HDFS_2_2

    def test_windows_floor(self):
        assert WINDOWS_MIN_VERSION is VersionTag.HDFS_2_6
        assert resolve_version(set(), OSClass.WINDOWS) is VersionTag.HDFS_2_6
        assert resolve_version({"hdfs_2_4"}, OSClass.WINDOWS) is VersionTag.HDFS_2_6

    def test_windows_newer_than_floor(self):
        assert resolve_version({"hdfs_3_2"}, OSClass.WINDOWS) is VersionTag.HDFS_3_2
