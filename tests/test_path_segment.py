from yang_swagger.path_segment import PathSegment


def test_container_and_list_rendering():
    root = PathSegment.root("device")
    interfaces = root.push("interfaces")
    interface = interfaces.push("interface", list_keys=("name",))

    assert interfaces.path() == "/device:interfaces"
    assert interface.path() == "/device:interfaces/interface={name}"
    assert [p.name for p in interface.parameters()] == ["name"]
    assert interface.parameters()[0].segment is interface


def test_composite_keys():
    root = PathSegment.root("routing")
    route = root.push("route", list_keys=("prefix", "next-hop"))
    assert route.path() == "/routing:route={prefix},{next-hop}"


def test_repeated_key_names_are_disambiguated():
    root = PathSegment.root("m")
    outer = root.push("outer", list_keys=("name",))
    inner = outer.push("inner", list_keys=("name",))
    deepest = inner.push("deepest", list_keys=("name",))

    assert inner.path() == "/m:outer={name}/inner={inner-name}"
    assert deepest.path() == "/m:outer={name}/inner={inner-name}/deepest={deepest-name}"
    assert [(p.name, p.key) for p in deepest.parameters()] == [
        ("name", "name"),
        ("inner-name", "name"),
        ("deepest-name", "name"),
    ]


def test_module_prefix_changes_with_owner():
    root = PathSegment.root("system")
    system = root.push("system")
    ntp = system.push("ntp", module="ntp")
    server = ntp.push("server", module="ntp", list_keys=("address",))
    assert server.path() == "/system:system/ntp:ntp/server={address}"


def test_push_leaves_parent_untouched():
    root = PathSegment.root("device")
    interfaces = root.push("interfaces")
    first = interfaces.push("a")
    second = interfaces.push("b")

    assert first.drop() is interfaces
    assert second.path() == "/device:interfaces/b"
    assert interfaces.path() == "/device:interfaces"
    assert root.is_root
    assert root.chain() == []
    assert second.depth == 2


def test_read_only_is_inherited():
    root = PathSegment.root("device")
    state = root.push("state", read_only=True)
    counters = state.push("counters")

    assert not root.is_read_only
    assert state.is_read_only
    assert counters.is_read_only
    assert not counters.read_only
    assert not root.push("config").is_read_only
