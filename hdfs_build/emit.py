# SPDX-License-Identifier: MIT
"""Render directives for the host build orchestrator.

CargoEmitter writes the ``cargo:`` lines a Cargo build script prints on
stdout. JsonEmitter writes the same information as a JSON array, for
tools that prefer structured input.
"""

from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import IO, Any

from hdfs_build.core.directives import (
    Directive,
    LinkArg,
    LinkLib,
    LinkSearch,
    Metadata,
    Notice,
    RerunIfEnvChanged,
)


class BaseEmitter(ABC):
    """Base class for directive emitters."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def render(self, directives: Iterable[Directive]) -> str:
        """Return the text for ``directives``."""
        ...

    def emit(self, directives: Iterable[Directive], stream: IO[str] | None = None) -> None:
        """Write the rendered directives to ``stream`` (default: stdout)."""
        text = self.render(directives)
        if not text:
            return
        out = stream if stream is not None else sys.stdout
        out.write(text)
        out.flush()


class CargoEmitter(BaseEmitter):
    """Cargo build-script protocol.

    Example:
        >>> CargoEmitter().render([LinkSearch("/opt/lib")])
        'cargo:rustc-link-search=native=/opt/lib\\n'
    """

    def __init__(self) -> None:
        super().__init__("cargo")

    def format(self, directive: Directive) -> str:
        if isinstance(directive, LinkLib):
            return f"cargo:rustc-link-lib={directive.kind.value}={directive.name}"
        if isinstance(directive, LinkSearch):
            return f"cargo:rustc-link-search={directive.kind}={directive.path}"
        if isinstance(directive, LinkArg):
            return f"cargo:rustc-link-arg={directive.arg}"
        if isinstance(directive, Metadata):
            return f"cargo:metadata={directive.key}={directive.value}"
        if isinstance(directive, Notice):
            # Cargo reads one directive per line.
            return "cargo:warning=" + " ".join(directive.message.splitlines())
        if isinstance(directive, RerunIfEnvChanged):
            return f"cargo:rerun-if-env-changed={directive.var}"
        raise TypeError(f"unknown directive: {directive!r}")

    def render(self, directives: Iterable[Directive]) -> str:
        return "".join(f"{self.format(d)}\n" for d in directives)


class JsonEmitter(BaseEmitter):
    """JSON array of ``{"type": ..., ...}`` objects, one per directive.

    Format:
        [
            {"type": "link-lib", "name": "jvm", "kind": "dylib"},
            {"type": "link-search", "path": "/usr/lib/jvm/...", "kind": "native"},
            {"type": "metadata", "key": "JVM_PATH", "value": "/usr/lib/jvm/..."},
            ...
        ]
    """

    def __init__(self, indent: int | None = 2) -> None:
        super().__init__("json")
        self.indent = indent

    @staticmethod
    def to_dict(directive: Directive) -> dict[str, Any]:
        if isinstance(directive, LinkLib):
            return {"type": "link-lib", "name": directive.name, "kind": directive.kind.value}
        if isinstance(directive, LinkSearch):
            return {"type": "link-search", "path": directive.path, "kind": directive.kind}
        if isinstance(directive, LinkArg):
            return {"type": "link-arg", "arg": directive.arg}
        if isinstance(directive, Metadata):
            return {"type": "metadata", "key": directive.key, "value": directive.value}
        if isinstance(directive, Notice):
            return {"type": "warning", "message": directive.message}
        if isinstance(directive, RerunIfEnvChanged):
            return {"type": "rerun-if-env-changed", "var": directive.var}
        raise TypeError(f"unknown directive: {directive!r}")

    def render(self, directives: Iterable[Directive]) -> str:
        data = [self.to_dict(d) for d in directives]
        return json.dumps(data, indent=self.indent) + "\n"


EMITTERS: dict[str, type[BaseEmitter]] = {
    "cargo": CargoEmitter,
    "json": JsonEmitter,
}


def get_emitter(name: str) -> BaseEmitter:
    """Create an emitter by name.

    Raises:
        ValueError: If no emitter has that name.
    """
    try:
        return EMITTERS[name]()
    except KeyError:
        known = ", ".join(sorted(EMITTERS))
        raise ValueError(f"unknown output format {name!r} (known: {known})") from None
