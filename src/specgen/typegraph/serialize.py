"""Render a resolved class graph as JSON-ready data.

The resolved graph may be cyclic, so classes are emitted once each and every
type reference is written by name: a class's qualified name, a primitive
tag, or ``list[...]`` around either. The output is the hand-off document for
code emitters that run out of process.
"""

from __future__ import annotations

from typing import Any, Optional

from specgen.typegraph.model import (
    ClassModel,
    ClassReference,
    CollectionType,
    EndpointMethodModel,
    EndpointModel,
    FieldModel,
    GenerationResult,
    TypeRef,
)


def type_name(ref: Optional[TypeRef]) -> Optional[str]:
    """Return the serialised name of a type reference (``None`` for void)."""
    if ref is None:
        return None
    if isinstance(ref, ClassModel):
        return ref.qualified_name
    if isinstance(ref, CollectionType):
        return f"list[{type_name(ref.item)}]"
    if isinstance(ref, ClassReference):
        # Only reachable when dumping a graph that was never resolved.
        return f"ref[{ref.pointer}]"
    return ref.value


def dump_field(f: FieldModel) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": f.name,
        "type": type_name(f.type),
        "location": f.location.value,
        "nullable": f.nullable,
        "collection": f.is_collection,
    }
    if f.description:
        data["description"] = f.description
    return data


def dump_class(cls: ClassModel) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": cls.qualified_name,
        "kind": cls.kind.value,
        "request": cls.is_request,
        "fields": [dump_field(f) for f in cls.fields],
    }
    if cls.pointer:
        data["pointer"] = cls.pointer
    if cls.description:
        data["description"] = cls.description
    return data


def dump_method(method: EndpointMethodModel) -> dict[str, Any]:
    return {
        "name": method.name,
        "http_method": method.http_method,
        "path": method.path,
        "request": method.request_class.qualified_name,
        "response": type_name(method.response_type),
        "summary": method.summary,
        "operation_id": method.operation_id,
        "docs_url": method.docs_url,
        "category": method.category,
        "subcategory": method.subcategory,
        "deprecated": method.deprecated,
        "deprecation_date": method.deprecation_date,
        "removal_date": method.removal_date,
        "previews": list(method.previews),
        "enabled_for_apps": method.enabled_for_apps,
        "cloud_only": method.cloud_only,
    }


def dump_endpoint(endpoint: EndpointModel) -> dict[str, Any]:
    return {
        "name": endpoint.class_name,
        "category": endpoint.category,
        "methods": [dump_method(m) for m in endpoint.methods],
    }


def dump_result(result: GenerationResult) -> dict[str, Any]:
    """Serialise a :class:`~specgen.typegraph.model.GenerationResult`.

    Returns:
        A dict with ``endpoints`` and ``classes`` lists, in the same
        (deterministic) order as the result.
    """
    return {
        "endpoints": [dump_endpoint(e) for e in result.endpoints],
        "classes": [dump_class(c) for c in result.classes],
    }
