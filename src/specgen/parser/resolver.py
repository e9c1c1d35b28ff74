"""Follow ``$ref`` JSON Reference pointers inside an OpenAPI document.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~specgen.exceptions.SpecParseError`; a pointer into a part of the
document that does not exist raises :class:`~specgen.exceptions.SchemaError`.

Unlike a full inlining pass, nothing here copies or rewrites the document.
Schema references stay references (the type registry builds each pointer
once), and only parameter and response objects are inlined by the
extractor through :func:`resolve_pointer`.
"""

from __future__ import annotations

from typing import Any

from specgen.exceptions import SchemaError, SpecParseError


def is_internal(ref: str) -> bool:
    """Return True if *ref* points into the same document."""
    return ref == "#" or ref.startswith("#/")


def split_pointer(ref: str) -> list[str]:
    """Split ``#/a/b~1c`` into unescaped segments (``["a", "b/c"]``).

    Raises:
        SpecParseError: If the reference is external.
    """
    if not is_internal(ref):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )
    if ref == "#":
        return []
    # RFC 6901: ``~1`` must be decoded before ``~0``.
    return [s.replace("~1", "/").replace("~0", "~") for s in ref[2:].split("/")]


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Return the value *ref* points to within *root*.

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).
        root: The raw spec dictionary.

    Returns:
        The referenced value, unmodified (not a copy).

    Raises:
        SpecParseError: If the reference is external.
        SchemaError: If any segment of the pointer does not exist.
    """
    current: Any = root
    for segment in split_pointer(ref):
        if isinstance(current, dict):
            if segment not in current:
                raise SchemaError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SchemaError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SchemaError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )
    return current


def deref(obj: Any, root: dict[str, Any], limit: int = 32) -> Any:
    """Follow a chain of ``$ref`` objects until a non-reference is reached.

    Used for parameter and response objects, which are inlined rather than
    built as classes.

    Raises:
        SchemaError: If a pointer is missing or the chain does not end
            within *limit* hops.
    """
    seen: list[str] = []
    while isinstance(obj, dict) and isinstance(obj.get("$ref"), str):
        ref = obj["$ref"]
        if ref in seen or len(seen) >= limit:
            raise SchemaError(f"Circular $ref chain: {' -> '.join(seen + [ref])}")
        seen.append(ref)
        obj = resolve_pointer(ref, root)
    return obj
