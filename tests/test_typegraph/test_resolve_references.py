"""Tests for specgen.typegraph.resolver."""

from __future__ import annotations

from typing import Optional

import pytest

from specgen.exceptions import ResolutionError, SchemaError
from specgen.models import SchemaKind, SchemaNode
from specgen.typegraph.model import (
    ClassKind,
    ClassModel,
    ClassReference,
    CollectionType,
    EndpointMethodModel,
    EndpointModel,
    FieldLocation,
    FieldModel,
    PrimitiveType,
    TypeRef,
)
from specgen.typegraph.resolver import _deduplicate, resolve_references


def _obj(**properties: SchemaNode) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.OBJECT, properties=properties)


def _ref(name: str) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.REFERENCE, reference=f"#/components/schemas/{name}")


def _str() -> SchemaNode:
    return SchemaNode(kind=SchemaKind.PRIMITIVE, primitive="string")


def _int() -> SchemaNode:
    return SchemaNode(kind=SchemaKind.PRIMITIVE, primitive="integer")


def _ptr(name: str) -> str:
    return f"#/components/schemas/{name}"


def _request(name: str = "Req", *fields: FieldModel) -> ClassModel:
    return ClassModel(qualified_name=name, is_request=True, fields=list(fields))


def _endpoint(*methods: tuple[ClassModel, Optional[TypeRef]]) -> EndpointModel:
    return EndpointModel(
        class_name="ThingsClient",
        category="things",
        methods=[
            EndpointMethodModel(
                http_method="get",
                path=f"/things/{index}",
                name=f"getThing{index}",
                request_class=request,
                response_type=response,
            )
            for index, (request, response) in enumerate(methods)
        ],
    )


def _names(classes: list[ClassModel]) -> list[str]:
    return [c.qualified_name for c in classes]


# ---------------------------------------------------------------------------
# Placeholder substitution
# ---------------------------------------------------------------------------


class TestPlaceholders:
    def test_composite_reentry_placeholder_replaced(self, builder, make_registry) -> None:
        registry = make_registry(
            {
                _ptr("Base"): _obj(id=_str()),
                _ptr("Special"): SchemaNode(
                    kind=SchemaKind.COMPOSITE,
                    composition="allOf",
                    members=[_ref("Base"), _obj(parent=_ref("Special"))],
                ),
            }
        )
        special = registry.resolve(_ptr("Special"))
        builder.finish(registry)
        assert isinstance(special.get_field("parent").type, ClassReference)

        request = _request()
        survivors = resolve_references(
            registry.all_classes() + [request], registry, [_endpoint((request, special))]
        )

        assert special.get_field("parent").type is special
        assert registry.placeholders() == []
        assert _names(survivors) == ["Special", "Req"]

    def test_response_placeholder_replaced(self, make_registry) -> None:
        target = ClassModel(qualified_name="Pet")
        request = _request()
        endpoint = _endpoint(
            (request, CollectionType(item=ClassReference(pointer=_ptr("Pet"), target=target)))
        )

        resolve_references([target, request], make_registry(), [endpoint])

        response = endpoint.methods[0].response_type
        assert isinstance(response, CollectionType)
        assert response.item is target

    def test_orphan_placeholder_raises(self, make_registry) -> None:
        holder = ClassModel(
            qualified_name="Holder",
            fields=[FieldModel(name="x", type=ClassReference(pointer=_ptr("Ghost")))],
        )
        with pytest.raises(ResolutionError, match="never resolved"):
            resolve_references([holder], make_registry(), [])

    def test_self_referring_placeholder_raises(self, make_registry) -> None:
        loop = ClassReference(pointer=_ptr("Loop"))
        loop.target = loop
        holder = ClassModel(qualified_name="Holder", fields=[FieldModel(name="x", type=loop)])
        with pytest.raises(ResolutionError, match="only refers to itself"):
            resolve_references([holder], make_registry(), [])

    def test_unresolved_registry_placeholder_raises(self, make_registry) -> None:
        registry = make_registry(
            {
                _ptr("C"): SchemaNode(
                    kind=SchemaKind.COMPOSITE,
                    composition="allOf",
                    members=[_ref("Missing"), _obj(x=_str())],
                )
            }
        )
        with pytest.raises(SchemaError):
            registry.resolve(_ptr("C"))

        with pytest.raises(ResolutionError, match="#/components/schemas/C"):
            resolve_references(registry.all_classes(), registry, [])


# ---------------------------------------------------------------------------
# Structural deduplication
# ---------------------------------------------------------------------------


class TestDeduplication:
    def test_identical_classes_merge_into_first(self, make_registry) -> None:
        registry = make_registry(
            {
                _ptr("event"): _obj(actor=_ref("actor"), user=_ref("simple-user")),
                _ptr("actor"): _obj(login=_str(), id=_int()),
                _ptr("simple-user"): _obj(login=_str(), id=_int()),
            }
        )
        event = registry.resolve(_ptr("event"))
        actor = registry.get(_ptr("actor"))
        request = _request()

        survivors = resolve_references(
            registry.all_classes() + [request], registry, [_endpoint((request, event))]
        )

        assert _names(survivors) == ["Event", "Actor", "Req"]
        assert event.get_field("user").type is actor
        assert registry.get(_ptr("simple-user")) is actor

    def test_cyclic_lookalikes_merge(self, make_registry) -> None:
        registry = make_registry(
            {
                _ptr("Holder"): _obj(one=_ref("A1"), two=_ref("A2")),
                _ptr("A1"): _obj(b=_ref("B1"), n=_str()),
                _ptr("B1"): _obj(a=_ref("A1")),
                _ptr("A2"): _obj(b=_ref("B2"), n=_str()),
                _ptr("B2"): _obj(a=_ref("A2")),
            }
        )
        holder = registry.resolve(_ptr("Holder"))
        a1, b1 = registry.get(_ptr("A1")), registry.get(_ptr("B1"))
        request = _request()

        survivors = resolve_references(
            registry.all_classes() + [request], registry, [_endpoint((request, holder))]
        )

        assert _names(survivors) == ["Holder", "A1", "B1", "Req"]
        assert holder.get_field("two").type is a1
        assert b1.get_field("a").type is a1
        assert a1.get_field("b").type is b1

    def test_nested_difference_prevents_merge(self, make_registry) -> None:
        registry = make_registry(
            {
                _ptr("Holder"): _obj(one=_ref("A1"), two=_ref("A2")),
                _ptr("A1"): _obj(b=_ref("B1")),
                _ptr("B1"): _obj(x=_str()),
                _ptr("A2"): _obj(b=_ref("B2")),
                _ptr("B2"): _obj(x=_int()),
            }
        )
        holder = registry.resolve(_ptr("Holder"))
        request = _request()

        survivors = resolve_references(
            registry.all_classes() + [request], registry, [_endpoint((request, holder))]
        )

        assert _names(survivors) == ["Holder", "A1", "B1", "A2", "B2", "Req"]

    @pytest.mark.parametrize(
        "other",
        [
            FieldModel(name="x", type=PrimitiveType.STRING, nullable=True),
            FieldModel(name="x", type=PrimitiveType.STRING, is_collection=True),
            FieldModel(name="x", type=PrimitiveType.STRING, location=FieldLocation.QUERY),
            FieldModel(name="y", type=PrimitiveType.STRING),
            FieldModel(name="x", type=PrimitiveType.DATE),
        ],
    )
    def test_any_field_difference_prevents_merge(
        self, make_registry, other: FieldModel
    ) -> None:
        first = ClassModel(
            qualified_name="First", fields=[FieldModel(name="x", type=PrimitiveType.STRING)]
        )
        second = ClassModel(qualified_name="Second", fields=[other])
        assert _deduplicate([first, second]) == {}

    def test_kind_difference_prevents_merge(self) -> None:
        fields = [FieldModel(name="open", type=PrimitiveType.STRING)]
        obj = ClassModel(qualified_name="State", fields=list(fields))
        enum_cls = ClassModel(qualified_name="StateEnum", kind=ClassKind.ENUM, fields=list(fields))
        assert _deduplicate([obj, enum_cls]) == {}

    def test_field_order_matters(self) -> None:
        a = FieldModel(name="a", type=PrimitiveType.STRING)
        b = FieldModel(name="b", type=PrimitiveType.STRING)
        first = ClassModel(qualified_name="First", fields=[a, b])
        second = ClassModel(qualified_name="Second", fields=[b, a])
        assert _deduplicate([first, second]) == {}

    def test_request_classes_never_merge(self, make_registry) -> None:
        page = FieldModel(name="page", type=PrimitiveType.INTEGER, location=FieldLocation.QUERY)
        first = _request("ListThings", page)
        second = _request("ListOtherThings", page)

        survivors = resolve_references(
            [first, second],
            make_registry(),
            [_endpoint((first, None), (second, None))],
        )

        assert survivors == [first, second]

    def test_dedupe_disabled_keeps_duplicates(self, make_registry) -> None:
        one = ClassModel(qualified_name="One", fields=[FieldModel(name="x", type=PrimitiveType.STRING)])
        two = ClassModel(qualified_name="Two", fields=[FieldModel(name="x", type=PrimitiveType.STRING)])
        request = _request()

        survivors = resolve_references(
            [one, two, request],
            make_registry(),
            [_endpoint((request, one), (request, two))],
            dedupe=False,
        )

        assert _names(survivors) == ["One", "Two", "Req"]

    def test_second_pass_finds_nothing(self, make_registry) -> None:
        registry = make_registry(
            {
                _ptr("Holder"): _obj(one=_ref("A1"), two=_ref("A2"), three=_ref("A3")),
                _ptr("A1"): _obj(x=_str()),
                _ptr("A2"): _obj(x=_str()),
                _ptr("A3"): _obj(x=_str(), y=_str()),
            }
        )
        holder = registry.resolve(_ptr("Holder"))
        request = _request()

        survivors = resolve_references(
            registry.all_classes() + [request], registry, [_endpoint((request, holder))]
        )

        assert _names(survivors) == ["Holder", "A1", "A3", "Req"]
        assert _deduplicate(survivors) == {}


# ---------------------------------------------------------------------------
# Pruning
# ---------------------------------------------------------------------------


class TestPruning:
    def test_unreferenced_class_dropped(self, make_registry) -> None:
        kept = ClassModel(qualified_name="Kept")
        orphan = ClassModel(qualified_name="Orphan", fields=[FieldModel(name="k", type=kept)])
        request = _request()

        survivors = resolve_references(
            [kept, orphan, request], make_registry(), [_endpoint((request, kept))]
        )

        assert survivors == [kept, request]

    def test_self_reference_does_not_keep_class_alive(self, make_registry) -> None:
        node = ClassModel(qualified_name="Node")
        node.fields.append(FieldModel(name="next", type=node))
        request = _request()

        survivors = resolve_references([node, request], make_registry(), [_endpoint((request, None))])

        assert survivors == [request]

    def test_chains_pruned_until_stable(self, make_registry) -> None:
        leaf = ClassModel(qualified_name="Leaf")
        mid = ClassModel(qualified_name="Mid", fields=[FieldModel(name="leaf", type=leaf)])
        top = ClassModel(qualified_name="Top", fields=[FieldModel(name="mid", type=mid)])
        request = _request()

        survivors = resolve_references(
            [top, mid, leaf, request], make_registry(), [_endpoint((request, None))]
        )

        assert survivors == [request]

    def test_classes_reachable_from_request_kept(self, make_registry) -> None:
        filter_cls = ClassModel(qualified_name="Filter")
        request = _request(
            "Search",
            FieldModel(
                name="filters", type=filter_cls, is_collection=True, location=FieldLocation.BODY
            ),
        )

        survivors = resolve_references(
            [filter_cls, request], make_registry(), [_endpoint((request, None))]
        )

        assert survivors == [filter_cls, request]

    def test_collection_response_is_a_root(self, make_registry) -> None:
        item = ClassModel(qualified_name="Item")
        request = _request()

        survivors = resolve_references(
            [item, request],
            make_registry(),
            [_endpoint((request, CollectionType(item=item)))],
        )

        assert survivors == [item, request]

    def test_registry_class_set_replaced(self, make_registry) -> None:
        registry = make_registry({_ptr("Pet"): _obj(), _ptr("Unused"): _obj(x=_str())})
        pet = registry.resolve(_ptr("Pet"))
        registry.resolve(_ptr("Unused"))
        request = _request()

        resolve_references(registry.all_classes() + [request], registry, [_endpoint((request, pet))])

        assert registry.all_classes() == [pet, request]
