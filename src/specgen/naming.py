"""Derive identifiers from free-text summaries and schema names.

The type-graph core never invents names itself; it asks a :class:`Namer`.
:class:`DefaultNamer` produces PascalCase type names and camelCase variable
names suitable for most C-family target languages::

    >>> namer = DefaultNamer()
    >>> namer.type_name("List organization members")
    'ListOrganizationMembers'
    >>> namer.variable_name("List organization members")
    'listOrganizationMembers'
    >>> namer.type_name("actions-client")
    'ActionsClient'
"""

from __future__ import annotations

import re
from typing import Protocol

# Matches runs of characters that cannot appear inside an identifier.
_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")

# Reserved words of the common target languages (Java, Kotlin, TypeScript, Python).
_RESERVED = frozenset(
    {
        "abstract", "and", "as", "assert", "async", "await", "boolean", "break",
        "byte", "case", "catch", "char", "class", "const", "continue", "def",
        "default", "del", "delete", "do", "double", "elif", "else", "enum",
        "except", "export", "extends", "false", "final", "finally", "float",
        "for", "from", "function", "global", "goto", "if", "implements",
        "import", "in", "instanceof", "int", "interface", "is", "lambda",
        "long", "native", "new", "none", "nonlocal", "not", "null", "object",
        "or", "package", "pass", "private", "protected", "public", "raise",
        "return", "short", "static", "super", "switch", "synchronized", "this",
        "throw", "throws", "true", "try", "typeof", "var", "void", "volatile",
        "while", "with", "yield",
    }
)


class Namer(Protocol):
    """Capability that turns free text into identifiers."""

    def type_name(self, text: str) -> str: ...

    def variable_name(self, text: str) -> str: ...


def _words(text: str) -> list[str]:
    """Split *text* into words on separators and camelCase boundaries."""
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", text)
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", text)
    return [w for w in _SEPARATOR_RE.split(text) if w]


class DefaultNamer:
    """PascalCase types, camelCase variables, reserved words escaped."""

    def type_name(self, text: str) -> str:
        """Convert *text* to a PascalCase type identifier.

        Empty input yields ``"Unnamed"``; a leading digit gets an underscore
        prefix (``"2fa settings"`` becomes ``"_2faSettings"``).
        """
        words = _words(text)
        if not words:
            return "Unnamed"
        result = "".join(w[:1].upper() + w[1:] for w in words)
        if result[0].isdigit():
            result = f"_{result}"
        return result

    def variable_name(self, text: str) -> str:
        """Convert *text* to a camelCase variable identifier."""
        words = _words(text)
        if not words:
            return "unnamed"
        first, rest = words[0], words[1:]
        head = first.lower() if first.isupper() else first[:1].lower() + first[1:]
        result = head + "".join(w[:1].upper() + w[1:] for w in rest)
        if result[0].isdigit():
            result = f"_{result}"
        if result.lower() in _RESERVED:
            result = f"{result}_"
        return result
