# SPDX-License-Identifier: MIT
"""Java installation discovery."""

from hdfs_build.java.locator import JavaLocator, Locator

__all__ = ["JavaLocator", "Locator"]
