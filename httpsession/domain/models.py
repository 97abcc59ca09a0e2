"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HeaderField:
    """One request header; several fields may share a name."""

    name: str
    value: str

    def as_line(self) -> str:
        return f"{self.name}: {self.value}"


@dataclass(frozen=True)
class HTTPResponse:
    """Normalized result of one perform (value object)."""

    status_code: int
    body: bytes

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")
