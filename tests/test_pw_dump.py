import pytest

from conftest import node_obj, port_obj
from errors import IntrospectionError
from pw_dump import load_topology, value_to_int


def test_value_to_int_accepts_ints_and_numeric_strings():
    assert value_to_int(42) == 42
    assert value_to_int(" 7 ") == 7
    assert value_to_int("x7") is None
    assert value_to_int(True) is None
    assert value_to_int(None) is None


def test_load_topology_builds_nodes_and_ordered_ports(runner):
    runner.add_json(["pw-dump", "Node"], [
        node_obj(30, "mic"),
        node_obj("31", "vban-send-a", media_class="Audio/Sink"),
        {"id": 32, "info": {"props": {"node.name": "   "}}},
        {"id": 33, "info": {"props": {}}},
        {"info": {"props": {"node.name": "no-id"}}},
    ])
    runner.add_json(["pw-dump", "Port"], [
        port_obj(100, 30, "capture_FL", "output", "FL"),
        port_obj(101, 30, "capture_FR", "output", "FR"),
        port_obj(102, "31", "playback_FL", "input", "FL"),
        port_obj(103, 31, "playback_AUX", "input"),
        port_obj(104, 31, "weird", "sideways", "FL"),
        port_obj(105, 31, "", "input"),
        {"id": 106, "info": {"direction": "input", "props": {"port.name": "orphan"}}},
    ])

    topo = load_topology(runner)

    assert topo.nodes_by_name == {"mic": 30, "vban-send-a": 31}
    assert [p.port_name for p in topo.output_ports(30)] == ["capture_FL", "capture_FR"]
    assert [p.port_name for p in topo.input_ports(31)] == ["playback_FL", "playback_AUX"]
    assert topo.input_ports(31)[1].channel is None
    assert topo.output_ports(31) == []


def test_load_topology_fails_on_nonzero_exit(runner):
    runner.add(["pw-dump", "Node"], returncode=1, stderr="connection refused")
    with pytest.raises(IntrospectionError) as ei:
        load_topology(runner)
    assert "pw-dump Node" in str(ei.value)
    assert "connection refused" in str(ei.value)


def test_load_topology_fails_when_command_missing(runner):
    with pytest.raises(IntrospectionError, match="Could not execute `pw-dump Node`"):
        load_topology(runner)


def test_load_topology_fails_on_bad_port_json(runner):
    runner.add_json(["pw-dump", "Node"], [node_obj(1, "mic")])
    runner.add(["pw-dump", "Port"], stdout="{not json")
    with pytest.raises(IntrospectionError, match="Could not parse JSON output from `pw-dump Port`"):
        load_topology(runner)


def test_load_topology_rejects_non_list_json(runner):
    runner.add_json(["pw-dump", "Node"], {"id": 1})
    with pytest.raises(IntrospectionError, match="not a list"):
        load_topology(runner)
