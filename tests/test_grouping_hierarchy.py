import logging

from yang_swagger.grouping_hierarchy import GroupingHierarchy
from yang_swagger.models import Module, NodeKind, SchemaContext, SchemaNode
from yang_swagger.schema_loader import schema_from_dict


def _grouping(name, module, uses=()):
    return SchemaNode(NodeKind.GROUPING, name, module, uses=list(uses))


def test_unique_names_stay_local():
    ctx = SchemaContext([Module("a", groupings=[_grouping("common", "a"), _grouping("only-a", "a")])])
    hierarchy = GroupingHierarchy(ctx)
    assert hierarchy.display_name("a:common") == "common"
    assert hierarchy.display_name("a:only-a") == "only-a"


def test_colliding_names_are_qualified():
    ctx = SchemaContext(
        [
            Module("a", groupings=[_grouping("common", "a"), _grouping("only-a", "a")]),
            Module("b", groupings=[_grouping("common", "b")]),
        ]
    )
    hierarchy = GroupingHierarchy(ctx)
    assert hierarchy.display_name("a:common") == "a:common"
    assert hierarchy.display_name("b:common") == "b:common"
    assert hierarchy.display_name("a:only-a") == "only-a"
    assert hierarchy.grouping_name(ctx.modules[1].groupings[0]) == "b:common"


def test_ancestry_follows_uses_transitively():
    ctx = schema_from_dict(
        {
            "modules": [
                {
                    "name": "g",
                    "groupings": [
                        {"name": "base", "children": [{"kind": "leaf", "name": "id", "type": "string"}]},
                        {"name": "middle", "uses": ["base"]},
                        {"name": "top", "uses": ["middle"]},
                        {"name": "unrelated"},
                    ],
                }
            ]
        }
    )
    hierarchy = GroupingHierarchy(ctx)

    assert hierarchy.parents_of("g:top") == ["g:middle"]
    assert hierarchy.is_ancestor_of("g:base", "g:top")
    assert hierarchy.is_ancestor_of("g:middle", "g:top")
    assert not hierarchy.is_ancestor_of("g:top", "g:base")
    assert not hierarchy.is_ancestor_of("g:unrelated", "g:top")


def test_circular_hierarchy_terminates():
    ctx = SchemaContext(
        [
            Module(
                "m",
                groupings=[
                    _grouping("a", "m", uses=["b"]),
                    _grouping("b", "m", uses=["a"]),
                    _grouping("c", "m"),
                ],
            )
        ]
    )
    hierarchy = GroupingHierarchy(ctx)
    assert hierarchy.is_ancestor_of("m:b", "m:a")
    assert hierarchy.is_ancestor_of("m:a", "m:a")
    assert not hierarchy.is_ancestor_of("m:c", "m:a")


def test_unknown_names_are_reported(caplog):
    ctx = SchemaContext([Module("m", groupings=[_grouping("a", "m", uses=["ghost"])])])
    with caplog.at_level(logging.WARNING):
        hierarchy = GroupingHierarchy(ctx)
        assert not hierarchy.is_ancestor_of("m:a", "m:nowhere")

    assert "No grouping with name ghost found" in caplog.text
    assert "Node not found for name m:nowhere" in caplog.text
    assert hierarchy.parents_of("m:a") == []
