import json
import subprocess
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


class FakeRunner:
    """Stands in for subprocess.run: answers by argv tuple and records calls."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def add(self, cmd, returncode=0, stdout="", stderr=""):
        self.responses[tuple(cmd)] = (returncode, stdout, stderr)

    def add_json(self, cmd, data):
        self.add(cmd, stdout=json.dumps(data))

    def __call__(self, cmd):
        cmd = list(cmd)
        self.calls.append(cmd)
        resp = self.responses.get(tuple(cmd))
        if resp is None:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])
        if callable(resp):
            resp = resp(cmd)
        returncode, stdout, stderr = resp
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)


def node_obj(nid, name, media_class="Audio/Source", description=None):
    props = {"node.name": name, "media.class": media_class}
    if description is not None:
        props["node.description"] = description
    return {"id": nid, "type": "PipeWire:Interface:Node", "info": {"props": props}}


def port_obj(pid, node_id, name, direction, channel=None):
    props = {"node.id": node_id, "port.name": name}
    if channel is not None:
        props["audio.channel"] = channel
    return {"id": pid, "type": "PipeWire:Interface:Port", "info": {"direction": direction, "props": props}}


@pytest.fixture
def runner():
    return FakeRunner()
