# pw_dump.py
from __future__ import annotations

from typing import Any, Dict, Optional

from log import get_logger
from pw_cli import Runner, _run, pw_dump_json
from pw_types import PwPort, PwTopology


log = get_logger("pw_dump")


def info_props(obj: Dict[str, Any]) -> Dict[str, Any]:
    info = obj.get("info")
    if not isinstance(info, dict):
        return {}
    props = info.get("props")
    return props if isinstance(props, dict) else {}


def value_to_int(v: Any) -> Optional[int]:
    """pw-dump ids are usually ints; some props carry them as strings."""
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v if v >= 0 else None
    if isinstance(v, str):
        s = v.strip()
        if s.isdigit():
            return int(s)
    return None


def prop_str(props: Dict[str, Any], key: str) -> str:
    v = props.get(key)
    if not isinstance(v, str):
        return ""
    return v.strip()


def port_is_input(info: Dict[str, Any]) -> Optional[bool]:
    d = info.get("direction")
    if not isinstance(d, str):
        return None
    d = d.strip()
    if d == "input":
        return True
    if d == "output":
        return False
    return None


def load_topology(run: Runner = _run) -> PwTopology:
    topo = PwTopology()

    for obj in pw_dump_json("Node", run):
        if not isinstance(obj, dict):
            continue
        nid = value_to_int(obj.get("id"))
        if nid is None:
            continue
        name = prop_str(info_props(obj), "node.name")
        if not name:
            continue
        topo.nodes_by_name[name] = nid

    for obj in pw_dump_json("Port", run):
        if not isinstance(obj, dict):
            continue
        info = obj.get("info")
        if not isinstance(info, dict):
            continue
        pr = info_props(obj)

        nid = value_to_int(pr.get("node.id"))
        if nid is None:
            continue
        pname = prop_str(pr, "port.name")
        if not pname:
            continue
        is_input = port_is_input(info)
        if is_input is None:
            continue

        topo.ports_by_node.setdefault(nid, []).append(
            PwPort(
                port_name=pname,
                is_input=is_input,
                channel=prop_str(pr, "audio.channel") or None,
            )
        )

    log.debug(
        "topology: %d nodes, %d ports",
        len(topo.nodes_by_name),
        sum(len(ps) for ps in topo.ports_by_node.values()),
    )
    return topo
