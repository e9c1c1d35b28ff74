"""Tests for specgen.typegraph.serialize."""

from __future__ import annotations

import json

from specgen.typegraph.model import (
    ClassKind,
    ClassModel,
    ClassReference,
    CollectionType,
    EndpointMethodModel,
    EndpointModel,
    FieldLocation,
    FieldModel,
    GenerationResult,
    PrimitiveType,
)
from specgen.typegraph.serialize import dump_class, dump_result, type_name


class TestTypeName:
    def test_void(self) -> None:
        assert type_name(None) is None

    def test_primitive(self) -> None:
        assert type_name(PrimitiveType.DATE_TIME) == "date-time"

    def test_class_uses_qualified_name(self) -> None:
        assert type_name(ClassModel(qualified_name="m.Pet")) == "m.Pet"

    def test_nested_collection(self) -> None:
        ref = CollectionType(item=CollectionType(item=ClassModel(qualified_name="m.Pet")))
        assert type_name(ref) == "list[list[m.Pet]]"

    def test_unresolved_placeholder(self) -> None:
        assert type_name(ClassReference(pointer="#/components/schemas/Pet")) == (
            "ref[#/components/schemas/Pet]"
        )


class TestDump:
    def test_cyclic_class_dumps_by_name(self) -> None:
        node = ClassModel(qualified_name="m.Node", pointer="#/components/schemas/node")
        node.fields.append(FieldModel(name="children", type=node, is_collection=True))

        data = dump_class(node)

        assert data == {
            "name": "m.Node",
            "kind": "object",
            "request": False,
            "fields": [
                {
                    "name": "children",
                    "type": "m.Node",
                    "location": "none",
                    "nullable": False,
                    "collection": True,
                }
            ],
            "pointer": "#/components/schemas/node",
        }

    def test_description_included_when_present(self) -> None:
        cls = ClassModel(
            qualified_name="m.Color",
            kind=ClassKind.ENUM,
            description="A color",
            fields=[FieldModel(name="red", type=PrimitiveType.STRING, description="Warm")],
        )
        data = dump_class(cls)
        assert data["kind"] == "enum"
        assert data["description"] == "A color"
        assert data["fields"][0]["description"] == "Warm"
        assert "pointer" not in data

    def test_result_is_json_serialisable(self) -> None:
        pet = ClassModel(qualified_name="m.Pet", fields=[FieldModel(name="id", type=PrimitiveType.INTEGER)])
        request = ClassModel(
            qualified_name="m.GetAPet",
            is_request=True,
            fields=[
                FieldModel(name="pet_id", type=PrimitiveType.INTEGER, location=FieldLocation.PATH)
            ],
        )
        method = EndpointMethodModel(
            http_method="get",
            path="/pets/{pet_id}",
            name="getAPet",
            request_class=request,
            response_type=pet,
            category="pets",
            previews=["nebula"],
        )
        result = GenerationResult(
            endpoints=[EndpointModel(class_name="c.PetsClient", category="pets", methods=[method])],
            classes=[request, pet],
        )

        data = json.loads(json.dumps(dump_result(result)))

        assert [c["name"] for c in data["classes"]] == ["m.GetAPet", "m.Pet"]
        endpoint = data["endpoints"][0]
        assert endpoint["name"] == "c.PetsClient"
        dumped = endpoint["methods"][0]
        assert dumped["request"] == "m.GetAPet"
        assert dumped["response"] == "m.Pet"
        assert dumped["previews"] == ["nebula"]
        assert data["classes"][0]["fields"][0]["location"] == "path"

    def test_void_response(self) -> None:
        request = ClassModel(qualified_name="m.Ping", is_request=True)
        method = EndpointMethodModel(
            http_method="delete", path="/ping", name="ping", request_class=request
        )
        result = GenerationResult(
            endpoints=[EndpointModel(class_name="c.PingClient", category="ping", methods=[method])],
            classes=[request],
        )
        assert dump_result(result)["endpoints"][0]["methods"][0]["response"] is None
