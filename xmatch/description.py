"""Text accumulator for matcher descriptions and mismatch diagnostics."""

from __future__ import annotations

from typing import Any


class Description:
    """Collects the pieces of a human-readable description."""

    def __init__(self):
        self._parts: list[str] = []

    def append_text(self, text: str) -> "Description":
        self._parts.append(text)
        return self

    def append_description_of(self, value: Any) -> "Description":
        """Append ``value`` via its ``describe_to`` when it has one, else ``str``."""
        describe_to = getattr(value, "describe_to", None)
        if callable(describe_to):
            describe_to(self)
        else:
            self._parts.append(str(value))
        return self

    def __str__(self) -> str:
        return "".join(self._parts)
