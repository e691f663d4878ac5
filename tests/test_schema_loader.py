import logging
from pathlib import Path

import pytest

from yang_swagger.exceptions import SchemaError
from yang_swagger.models import NodeKind
from yang_swagger.schema_loader import load_schema, schema_from_dict

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


def _module(**body):
    return {"modules": [{"name": "m", **body}]}


def test_loads_device_fixture():
    ctx = load_schema(FIXTURES / "device.json")

    device = ctx.find_module("device")
    assert device is not None
    assert device.prefix == "dev"
    assert device.revision == "2024-01-15"
    assert [n.name for n in device.data] == ["interfaces", "routing", "state"]
    assert [r.name for r in device.rpcs] == ["reset", "get-counters"]
    assert ctx.find_module_by_prefix("dev") is device

    interface = ctx.find_node("/dev:interfaces/dev:interface")
    assert interface.kind == NodeKind.LIST
    assert interface.keys == ["name"]
    assert interface.find_child("vlan").name == "vlan"


def test_uses_expansion_records_provenance():
    ctx = load_schema(FIXTURES / "device.json")
    statistics = ctx.find_node("/dev:interfaces/dev:interface/dev:statistics")

    names = [child.name for child in statistics.children]
    assert names == ["in-octets", "out-octets"]
    copy = statistics.children[0]
    grouping = ctx.find_grouping("counters", "device")
    assert copy.added_by == "device:counters"
    assert copy.source == "device:counters"
    assert copy.original is grouping.children[0]
    assert copy.parent is statistics
    assert copy.module == "device"


def test_config_is_inherited():
    ctx = load_schema(FIXTURES / "device.json")

    assert ctx.find_node("/dev:interfaces").config is True
    statistics = ctx.find_node("/dev:interfaces/dev:interface/dev:statistics")
    assert statistics.config is False
    assert all(child.config is False for child in statistics.children)
    assert ctx.find_node("/dev:state/dev:uptime").config is False


def test_config_true_under_state_is_read_only(caplog):
    data = _module(
        data=[
            {
                "kind": "container",
                "name": "state",
                "config": False,
                "children": [{"kind": "container", "name": "inner", "config": True}],
            }
        ]
    )
    with caplog.at_level(logging.WARNING):
        ctx = schema_from_dict(data)
    assert ctx.find_node("/m:state/m:inner").config is False
    assert "operational state" in caplog.text


def test_rpc_payloads_are_writable():
    data = _module(
        rpcs=[{"name": "run", "config": False, "input": [{"kind": "leaf", "name": "x", "type": "string"}]}]
    )
    ctx = schema_from_dict(data)
    rpc = ctx.find_module("m").rpcs[0]
    assert all(node.config for node in rpc.iter_nodes())
    assert [child.kind for child in rpc.children] == [NodeKind.INPUT]


def test_choice_shorthand_gets_implicit_case():
    data = _module(
        data=[
            {
                "kind": "container",
                "name": "top",
                "children": [
                    {
                        "kind": "choice",
                        "name": "transport",
                        "children": [{"kind": "leaf", "name": "tcp", "type": "empty"}],
                    }
                ],
            }
        ]
    )
    ctx = schema_from_dict(data)
    choice = ctx.find_node("/m:top").children[0]
    assert choice.children[0].kind == NodeKind.CASE
    assert choice.children[0].name == "tcp"
    assert [c.name for c in ctx.find_node("/m:top").data_children()] == ["tcp"]


def test_unknown_grouping_is_skipped(caplog):
    data = _module(data=[{"kind": "container", "name": "top", "uses": ["missing"]}])
    with caplog.at_level(logging.WARNING):
        ctx = schema_from_dict(data)
    top = ctx.find_node("/m:top")
    assert top.children == []
    assert top.uses == ["missing"]
    assert "No grouping named missing" in caplog.text


def test_circular_grouping_usage_raises():
    data = _module(
        groupings=[
            {"name": "a", "uses": ["b"]},
            {"name": "b", "uses": ["a"]},
        ]
    )
    with pytest.raises(SchemaError, match="Circular grouping usage"):
        schema_from_dict(data)


def test_nested_grouping_expansion():
    data = _module(
        groupings=[
            {"name": "base", "children": [{"kind": "leaf", "name": "id", "type": "string"}]},
            {"name": "extended", "uses": ["base"], "children": [{"kind": "leaf", "name": "extra", "type": "string"}]},
        ],
        data=[{"kind": "container", "name": "top", "uses": ["extended"]}],
    )
    ctx = schema_from_dict(data)
    top = ctx.find_node("/m:top")
    assert [c.name for c in top.children] == ["extra", "id"]
    identifier = top.find_child("id")
    assert identifier.supplier_chain() == ["m:extended", "m:base"]


def test_augment_adds_foreign_nodes():
    ctx = load_schema(FIXTURES / "augment.yaml")
    ntp = ctx.find_node("/sys:system/ntp:ntp")
    assert ntp is not None
    assert ntp.module == "ntp"
    assert ntp.parent is ctx.find_node("/sys:system")
    assert ntp.find_child("server").keys == ["address"]


def test_augment_with_unknown_target_raises():
    data = _module(augments=[{"target": "/other:top", "children": []}])
    with pytest.raises(SchemaError, match="augment target"):
        schema_from_dict(data)


@pytest.mark.parametrize(
    "data, message",
    [
        ({}, "no modules"),
        ({"modules": []}, "no modules"),
        (_module(data=[{"kind": "widget", "name": "x"}]), "Unknown statement kind"),
        (_module(data=[{"kind": "container"}]), "anonymous"),
        (_module(data=[{"kind": "leaf", "name": "x"}]), "has no type"),
        (_module(data=[{"kind": "leaf", "name": "x", "type": "leafref"}]), "has no path"),
    ],
)
def test_malformed_documents_raise(data, message):
    with pytest.raises(SchemaError, match=message):
        schema_from_dict(data)


def test_undecodable_file_raises(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(SchemaError, match="Cannot decode"):
        load_schema(broken)
