# SPDX-License-Identifier: MIT
"""Custom exceptions for hdfs-build.

All hdfs-build exceptions inherit from HdfsBuildError, which includes
an optional location (a file or directory) for better error messages.

Every error raised here is fatal: the resolver stops at the first one and
the build fails. A missing prebuilt library is not an error and has no
exception class.
"""

from __future__ import annotations

from pathlib import Path


class HdfsBuildError(Exception):
    """Base class for all hdfs-build exceptions.

    Attributes:
        message: The error message.
        location: Optional path the error relates to.
    """

    def __init__(
        self,
        message: str,
        location: Path | str | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class DiscoveryError(HdfsBuildError):
    """Error while discovering an installed component.

    Raised when something the build cannot do without (a JVM, a Java
    home) is not present on the machine.
    """


class JavaNotFoundError(DiscoveryError):
    """No usable Java installation was found.

    Attributes:
        what: What was being looked for (e.g. 'java home', 'jvm.lib').
    """

    def __init__(
        self,
        what: str,
        reason: str = "",
        location: Path | str | None = None,
    ) -> None:
        self.what = what
        message = f"failed to locate {what}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, location)


class ToolNotFoundError(DiscoveryError):
    """Required tool was not found.

    Attributes:
        tool: The name of the tool that was not found.
    """

    def __init__(
        self,
        tool: str,
        location: Path | str | None = None,
    ) -> None:
        self.tool = tool
        super().__init__(f"tool not found: {tool}", location)


class MissingSourceError(HdfsBuildError):
    """Vendored source file does not exist.

    Attributes:
        path: The path to the missing source file.
    """

    def __init__(
        self,
        path: Path | str,
        location: Path | str | None = None,
    ) -> None:
        self.path = path
        super().__init__(f"source file not found: {path}", location)


class CompileError(HdfsBuildError):
    """The toolchain rejected a command.

    Attributes:
        command: The command line that failed.
        returncode: Exit status of the command.
        output: Combined stdout/stderr of the command.
    """

    def __init__(
        self,
        command: list[str],
        returncode: int,
        output: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"command failed with exit code {returncode}: {' '.join(command)}"
        if output:
            message = f"{message}\n{output.rstrip()}"
        super().__init__(message)
