# SPDX-License-Identifier: MIT
"""Typed build directives and the Resolution that collects them.

The resolver never prints anything. It appends directives to a
Resolution, and an emitter (see hdfs_build.emit) renders them for the
host build orchestrator afterwards.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path


class LinkKind(enum.Enum):
    """How a library is linked."""

    DYLIB = "dylib"
    STATIC = "static"


@dataclass(frozen=True)
class LinkLib:
    """Link against a library by name (no ``lib`` prefix or suffix)."""

    name: str
    kind: LinkKind = LinkKind.DYLIB


@dataclass(frozen=True)
class LinkSearch:
    """Add a directory to the library search path."""

    path: str
    kind: str = "native"


@dataclass(frozen=True)
class LinkArg:
    """Pass a raw argument to the linker."""

    arg: str


@dataclass(frozen=True)
class Metadata:
    """Key/value pair exported to dependent packages."""

    key: str
    value: str


@dataclass(frozen=True)
class Notice:
    """Non-fatal notice shown to whoever runs the build."""

    message: str


@dataclass(frozen=True)
class RerunIfEnvChanged:
    """Ask the orchestrator to re-run resolution when a variable changes."""

    var: str


Directive = LinkLib | LinkSearch | LinkArg | Metadata | Notice | RerunIfEnvChanged


@dataclass
class Resolution:
    """Append-only, ordered collection of directives.

    Example:
        res = Resolution()
        res.link_library("hdfs", LinkKind.STATIC, "/opt/lib")
        # -> [LinkSearch('/opt/lib'), LinkLib('hdfs', STATIC)]
    """

    directives: list[Directive] = field(default_factory=list)

    def add(self, directive: Directive) -> None:
        self.directives.append(directive)

    def link_library(
        self, name: str, kind: LinkKind, search_path: Path | str
    ) -> None:
        """Add a library together with the directory it is found in.

        The search path is always appended before the library.
        """
        self.add(LinkSearch(str(search_path)))
        self.add(LinkLib(name, kind))

    def rerun_if_env_changed(self, *names: str) -> None:
        for name in names:
            self.add(RerunIfEnvChanged(name))

    def warn(self, message: str) -> None:
        self.add(Notice(message))

    def of_type(self, kind: type) -> list:
        """Return the directives of one type, in order."""
        return [d for d in self.directives if isinstance(d, kind)]

    @property
    def libraries(self) -> list[LinkLib]:
        return self.of_type(LinkLib)

    @property
    def search_paths(self) -> list[str]:
        return [d.path for d in self.of_type(LinkSearch)]

    @property
    def metadata(self) -> dict[str, str]:
        return {d.key: d.value for d in self.of_type(Metadata)}

    @property
    def notices(self) -> list[str]:
        return [d.message for d in self.of_type(Notice)]

    @property
    def rerun_env_vars(self) -> list[str]:
        return [d.var for d in self.of_type(RerunIfEnvChanged)]

    def __iter__(self) -> Iterator[Directive]:
        return iter(self.directives)

    def __len__(self) -> int:
        return len(self.directives)
