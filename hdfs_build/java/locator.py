# SPDX-License-Identifier: MIT
"""Locate a Java installation and the JVM dynamic library.

Search order for the Java home:

1. ``JAVA_HOME`` if it is set and non-empty.
2. ``/usr/libexec/java_home`` on macOS.
3. The ``java`` executable on PATH, with symlinks resolved
   (``<home>/bin/java`` -> ``<home>``).

Files inside the Java home (``libjvm.so``, ``jvm.lib``, ...) are found by
walking the tree; the directory containing the first match is returned.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from hdfs_build.core.context import OSClass
from hdfs_build.core.errors import JavaNotFoundError

logger = logging.getLogger(__name__)

JAVA_HOME_ENV = "JAVA_HOME"
MACOS_JAVA_HOME = "/usr/libexec/java_home"

JVM_LIBRARY_NAMES: dict[OSClass, str] = {
    OSClass.POSIX: "libjvm.so",
    OSClass.MACOS: "libjvm.dylib",
    OSClass.WINDOWS: "jvm.dll",
}


@runtime_checkable
class Locator(Protocol):
    """What the resolver needs from JVM discovery.

    Each method returns a directory path as a string or raises
    JavaNotFoundError.
    """

    def locate_java_home(self) -> str: ...

    def locate_jvm_dyn_library(self) -> str: ...

    def locate_file(self, name: str) -> str: ...


class JavaLocator:
    """Default Locator working on the local machine.

    Example:
        locator = JavaLocator()
        home = locator.locate_java_home()
        jvm_dir = locator.locate_jvm_dyn_library()
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        os_class: OSClass | None = None,
    ) -> None:
        """Create a locator.

        Args:
            env: Environment to read JAVA_HOME from (default: os.environ).
            os_class: Host OS class (default: detected).
        """
        self._env = os.environ if env is None else env
        self._os_class = os_class or OSClass.host()
        self._java_home: str | None = None

    def locate_java_home(self) -> str:
        """Return the Java home directory.

        Raises:
            JavaNotFoundError: If no Java installation can be found.
        """
        if self._java_home is None:
            self._java_home = self._find_java_home()
            logger.debug("Java home: %s", self._java_home)
        return self._java_home

    def _find_java_home(self) -> str:
        java_home = self._env.get(JAVA_HOME_ENV)
        if java_home:
            return java_home

        if self._os_class.is_macos:
            home = _run_macos_java_home()
            if home:
                return home

        java = shutil.which("java")
        if java is None:
            raise JavaNotFoundError(
                "java home",
                f"{JAVA_HOME_ENV} is not set and no 'java' executable is on PATH",
            )

        # <home>/bin/java, or <home>/jre/bin/java on Java 8
        home_path = Path(java).resolve().parent.parent
        if home_path.name == "jre":
            home_path = home_path.parent
        return str(home_path)

    def locate_jvm_dyn_library(self) -> str:
        """Return the directory containing the JVM dynamic library.

        Raises:
            JavaNotFoundError: If Java or the library cannot be found.
        """
        return self.locate_file(JVM_LIBRARY_NAMES[self._os_class])

    def locate_file(self, name: str) -> str:
        """Return the directory of the first file called ``name`` in the Java home.

        Raises:
            JavaNotFoundError: If Java or the file cannot be found.
        """
        java_home = Path(self.locate_java_home())
        if not java_home.is_dir():
            raise JavaNotFoundError(name, "java home is not a directory", java_home)

        matches = sorted(p for p in java_home.rglob(name) if p.is_file())
        if not matches:
            raise JavaNotFoundError(name, "no such file in java home", java_home)

        # Prefer the server VM when several are installed (server/, client/).
        for match in matches:
            if match.parent.name == "server":
                return str(match.parent)
        return str(matches[0].parent)


def _run_macos_java_home() -> str | None:
    if not Path(MACOS_JAVA_HOME).exists():
        return None
    try:
        result = subprocess.run(
            [MACOS_JAVA_HOME],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug("%s failed: %s", MACOS_JAVA_HOME, e)
        return None
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None
