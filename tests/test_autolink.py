import pytest

from autolink import autolink_sources
from conftest import node_obj, port_obj
from errors import LinkError
from models import AppConfig, VbanSend
from pw_cli import ensure_link
from pw_types import LinkOutcome


class LinkGraph:
    """Fake pw-link that remembers links and refuses duplicates like PipeWire does."""

    def __init__(self):
        self.links = set()

    def __call__(self, cmd):
        pair = (cmd[1], cmd[2])
        if pair in self.links:
            return (1, "", "failed to link ports: File exists")
        self.links.add(pair)
        return (0, "", "")


def add_stereo_topology(runner, source_ports):
    runner.add_json(["pw-dump", "Node"], [
        node_obj(10, "mic"),
        node_obj(20, "vban-send-a", media_class="Audio/Sink"),
    ])
    ports = [port_obj(100 + i, 10, name, "output", ch) for i, (name, ch) in enumerate(source_ports)]
    ports += [
        port_obj(200, 20, "playback_FL", "input", "FL"),
        port_obj(201, 20, "playback_FR", "input", "FR"),
        port_obj(202, 20, "monitor_FL", "output", "FL"),
    ]
    runner.add_json(["pw-dump", "Port"], ports)


def test_ensure_link_is_idempotent(runner):
    graph = LinkGraph()
    runner.responses[("pw-link", "mic:capture_FL", "send:playback_FL")] = graph

    assert ensure_link("mic", "capture_FL", "send", "playback_FL", runner) is LinkOutcome.CREATED
    assert ensure_link("mic", "capture_FL", "send", "playback_FL", runner) is LinkOutcome.ALREADY_EXISTS


@pytest.mark.parametrize("stderr", ["Already Linked", "link already exists", "File exists"])
def test_ensure_link_recognises_existing_link_phrases(runner, stderr):
    runner.add(["pw-link", "a:o", "b:i"], returncode=255, stderr=stderr)
    assert ensure_link("a", "o", "b", "i", runner) is LinkOutcome.ALREADY_EXISTS


def test_ensure_link_other_failures_raise(runner):
    runner.add(["pw-link", "a:o", "b:i"], returncode=1, stderr="No such port")
    with pytest.raises(LinkError, match="No such port"):
        ensure_link("a", "o", "b", "i", runner)


def test_ensure_link_missing_binary_raises(runner):
    with pytest.raises(LinkError, match="Could not execute `pw-link a:o b:i`"):
        ensure_link("a", "o", "b", "i", runner)


def test_no_targets_means_no_introspection(runner):
    cfg = AppConfig(sends=[VbanSend(target_object="  "), VbanSend(enabled=False, target_object="mic")])
    summary = autolink_sources(cfg, runner)
    assert summary.links_created == 0
    assert summary.issues == []
    assert runner.calls == []


def test_autolink_stereo_source_links_by_channel(runner):
    add_stereo_topology(runner, [("capture_FL", "FL"), ("capture_FR", "FR")])
    runner.add(["pw-link", "mic:capture_FL", "vban-send-a:playback_FL"])
    runner.add(["pw-link", "mic:capture_FR", "vban-send-a:playback_FR"])

    cfg = AppConfig(sends=[VbanSend(id="a", node_name="vban-send-a", target_object="mic")])
    summary = autolink_sources(cfg, runner)

    assert summary.links_created == 2
    assert summary.issues == []
    assert ["pw-link", "mic:capture_FR", "vban-send-a:playback_FL"] not in runner.calls


def test_autolink_second_pass_is_silent(runner):
    add_stereo_topology(runner, [("capture_MONO", "MONO")])
    graph = LinkGraph()
    runner.responses[("pw-link", "mic:capture_MONO", "vban-send-a:playback_FL")] = graph
    runner.responses[("pw-link", "mic:capture_MONO", "vban-send-a:playback_FR")] = graph

    cfg = AppConfig(sends=[VbanSend(id="a", node_name="vban-send-a", target_object="mic")])
    first = autolink_sources(cfg, runner)
    second = autolink_sources(cfg, runner)

    assert (first.links_created, first.issues) == (2, [])
    assert (second.links_created, second.issues) == (0, [])


def test_autolink_collects_issues_without_aborting(runner):
    runner.add_json(["pw-dump", "Node"], [
        node_obj(10, "mic"),
        node_obj(11, "silent-source"),
        node_obj(20, "vban-send-a", media_class="Audio/Sink"),
        node_obj(21, "vban-send-b", media_class="Audio/Sink"),
    ])
    runner.add_json(["pw-dump", "Port"], [
        port_obj(100, 10, "capture_FL", "output", "FL"),
        port_obj(101, 10, "capture_FR", "output", "FR"),
        port_obj(200, 20, "playback_FL", "input", "FL"),
        port_obj(201, 20, "playback_FR", "input", "FR"),
        port_obj(210, 21, "playback_MONO", "input", "MONO"),
    ])
    runner.add(["pw-link", "mic:capture_FL", "vban-send-a:playback_FL"], returncode=1, stderr="permission denied")
    runner.add(["pw-link", "mic:capture_FR", "vban-send-a:playback_FR"])

    cfg = AppConfig(sends=[
        VbanSend(id="a", node_name="vban-send-a", target_object="mic"),
        VbanSend(id="b", node_name="vban-send-b", target_object="gone"),
        VbanSend(id="c", node_name="vban-send-missing", target_object="mic"),
        VbanSend(id="d", node_name="vban-send-b", target_object="silent-source"),
        VbanSend(id="e", node_name="mic", target_object="mic"),
    ])
    summary = autolink_sources(cfg, runner)

    assert summary.links_created == 1
    assert summary.issues == [
        "mic:capture_FL -> vban-send-a:playback_FL: `pw-link` failed: permission denied",
        "Source `gone` not found in PipeWire.",
        "Send node `vban-send-missing` not found (try `apply --restart`).",
        "Source `silent-source` has no output audio ports.",
        "Send `mic` has no input audio ports.",
    ]
