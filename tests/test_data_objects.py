import pytest

from yang_swagger.config import GeneratorConfig
from yang_swagger.data_objects import (
    DataObjectBuilder,
    OptimizingDataObjectBuilder,
    Strategy,
    UnpackingDataObjectBuilder,
    create_builder,
)
from yang_swagger.document import SwaggerDocument
from yang_swagger.exceptions import SchemaError
from yang_swagger.generator import SwaggerGenerator
from yang_swagger.schema_loader import schema_from_dict
from yang_swagger.type_converter import AnnotatingTypeConverter


def _leaf(name, yang_type="string"):
    return {"kind": "leaf", "name": name, "type": yang_type}


def _container(name, children=(), uses=()):
    return {"kind": "container", "name": name, "children": list(children), "uses": list(uses)}


def _schema(data, groupings=()):
    return schema_from_dict({"modules": [{"name": "m", "groupings": list(groupings), "data": list(data)}]})


def _builder(ctx, strategy="unpacking"):
    document = SwaggerDocument()
    builder = create_builder(Strategy(strategy), ctx, document, AnnotatingTypeConverter(ctx))
    for module in ctx.modules:
        builder.process_module(module)
    return builder, document


def _generate(ctx, strategy, **options):
    config = GeneratorConfig(strategy=strategy, **options)
    return SwaggerGenerator(ctx, [m.name for m in ctx.modules], config).generate().to_dict()


NESTED_GROUPINGS = [
    {"name": "base", "children": [_leaf("id")]},
    {"name": "extended", "uses": ["base"], "children": [_leaf("extra")]},
]


def test_create_builder_picks_strategy():
    ctx = _schema([])
    assert isinstance(_builder(ctx, "optimizing")[0], OptimizingDataObjectBuilder)
    assert isinstance(_builder(ctx, "unpacking")[0], UnpackingDataObjectBuilder)


def test_base_builder_is_abstract():
    ctx = _schema([])
    with pytest.raises(TypeError):
        DataObjectBuilder(ctx, SwaggerDocument(), AnnotatingTypeConverter(ctx))


def test_definition_names_fall_back_to_parent_then_module():
    ctx = _schema(
        [
            _container("a", [_container("settings", [_leaf("x")])]),
            _container("p", [_container("q", [_container("settings", [_leaf("y")])])]),
            _container("r", [_container("q", [_container("settings", [_leaf("z")])])]),
            _container("s", [_container("q", [_container("settings", [_leaf("w")])])]),
        ]
    )
    builder, document = _builder(ctx)
    paths = ["/m:a/m:settings", "/m:p/m:q/m:settings", "/m:r/m:q/m:settings", "/m:s/m:q/m:settings"]
    names = [builder.add_model(ctx.find_node(path)) for path in paths]

    assert names == ["settings", "q.settings", "m.settings", "m.settings1"]
    assert list(document.definitions) == names


def test_structurally_equal_definitions_are_reused():
    ctx = _schema(
        [
            _container("a", [_container("settings", [_leaf("x")])]),
            _container("b", [_container("settings", [_leaf("x")])]),
        ]
    )
    builder, document = _builder(ctx)
    first = builder.add_model(ctx.find_node("/m:a/m:settings"))
    second = builder.add_model(ctx.find_node("/m:b/m:settings"))

    assert first == second == "settings"
    assert list(document.definitions) == ["settings"]


def test_reference_is_completed_by_add_model():
    ctx = _schema([_container("top", [_leaf("x")])])
    builder, _ = _builder(ctx)
    node = ctx.find_node("/m:top")

    prop = builder.reference(node)
    assert prop.ref is None
    assert builder.add_model(node) == "top"
    assert prop.ref == "top"
    assert builder.reference(node).ref == "top"


def test_unvisited_children_become_untyped_objects():
    ctx = _schema([_container("top", [_container("inner", [_leaf("x")])])])
    builder, document = _builder(ctx)
    builder.add_model(ctx.find_node("/m:top"))

    assert document.definitions["top"].to_dict()["properties"] == {"inner": {"type": "object"}}
    assert "inner" not in document.definitions


def test_usage_counts_cover_groupings_and_data():
    ctx = _schema(
        [_container("x", uses=["extended"]), _container("y", uses=["extended"]), _container("z", uses=["base"])],
        groupings=NESTED_GROUPINGS,
    )
    builder, _ = _builder(ctx, "optimizing")
    assert builder.usage_count("m:extended") == 2
    assert builder.usage_count("m:base") == 2
    assert builder.is_shared("m:base")


def test_shared_groupings_become_definitions():
    ctx = _schema(
        [
            _container("x", uses=["extended"]),
            _container("y", uses=["extended"]),
            _container("z", uses=["base"]),
            _container("w", uses=["base"]),
        ],
        groupings=NESTED_GROUPINGS,
    )
    document = _generate(ctx, Strategy.OPTIMIZING)

    assert set(document["definitions"]) == {"base", "extended"}
    assert document["definitions"]["extended"] == {
        "allOf": [
            {"$ref": "#/definitions/base"},
            {"type": "object", "properties": {"extra": {"type": "string"}}},
        ]
    }
    get_x = document["paths"]["/data/m:x"]["get"]
    assert get_x["responses"]["200"]["schema"] == {"$ref": "#/definitions/extended"}
    get_z = document["paths"]["/data/m:z"]["get"]
    assert get_z["responses"]["200"]["schema"] == {"$ref": "#/definitions/base"}


def test_unpacking_inlines_grouping_fields():
    ctx = _schema(
        [
            _container("x", uses=["extended"]),
            _container("y", uses=["extended"]),
            _container("z", uses=["base"]),
            _container("w", uses=["base"]),
        ],
        groupings=NESTED_GROUPINGS,
    )
    document = _generate(ctx, Strategy.UNPACKING)

    assert set(document["definitions"]) == {"w", "x", "y", "z"}
    assert document["definitions"]["x"]["properties"] == {
        "extra": {"type": "string"},
        "id": {"type": "string"},
    }


def test_nodes_inside_shared_groupings_share_one_definition():
    ctx = _schema(
        [_container("src", uses=["endpoint"]), _container("dst", uses=["endpoint"])],
        groupings=[{"name": "endpoint", "children": [_container("address", [_leaf("host")])]}],
    )
    document = _generate(ctx, Strategy.OPTIMIZING)

    assert set(document["definitions"]) == {"address", "endpoint"}
    assert document["definitions"]["endpoint"]["properties"] == {"address": {"$ref": "#/definitions/address"}}
    for path in ("/data/m:src/address", "/data/m:dst/address"):
        schema = document["paths"][path]["get"]["responses"]["200"]["schema"]
        assert schema == {"$ref": "#/definitions/address"}


@pytest.mark.parametrize("max_depth", [None, 1, 2])
def test_strategies_agree_without_shared_groupings(max_depth):
    ctx = _schema(
        [
            _container(
                "top",
                [
                    {"kind": "list", "name": "entry", "key": "id", "children": [_leaf("id")], "uses": ["details"]},
                    {
                        "kind": "choice",
                        "name": "flavour",
                        "children": [_container("sweet", [_leaf("sugar", "uint8")]), _leaf("salt", "boolean")],
                    },
                ],
            )
        ],
        groupings=[{"name": "details", "children": [_leaf("note"), _container("extra", [_leaf("flag", "boolean")])]}],
    )
    optimizing = _generate(ctx, Strategy.OPTIMIZING, max_depth=max_depth)
    unpacking = _generate(ctx, Strategy.UNPACKING, max_depth=max_depth)
    assert optimizing == unpacking


def test_missing_shared_grouping_is_a_schema_error():
    ctx = _schema([_container("x", uses=["base"]), _container("y", uses=["base"])], groupings=NESTED_GROUPINGS[:1])
    builder, _ = _builder(ctx, "optimizing")
    ctx.modules[0].groupings.clear()

    with pytest.raises(SchemaError, match="m:base"):
        builder.add_model(ctx.find_node("/m:x"))
