# pw_conf.py
from __future__ import annotations

import json
from typing import List, Tuple

from models import HostInfoEmulation, VbanRecv, VbanSend


SEND_PREFIX = "99-vbanwire-send-"
RECV_PREFIX = "99-vbanwire-recv-"
SUFFIX = ".conf"

HEADER = "# Generated by vbanwire. Edits are overwritten on the next apply.\n"


def filename_send(entity_id: str) -> str:
    return f"{SEND_PREFIX}{entity_id}{SUFFIX}"


def filename_recv(entity_id: str) -> str:
    return f"{RECV_PREFIX}{entity_id}{SUFFIX}"


def is_vbanwire_fragment(name: str) -> bool:
    return name.startswith((SEND_PREFIX, RECV_PREFIX)) and name.endswith(SUFFIX)


def _q(s: str) -> str:
    # SPA-JSON accepts JSON string literals as-is.
    return json.dumps(s, ensure_ascii=False)


def _b(v: bool) -> str:
    return "true" if v else "false"


def _stream_props(
    node_name: str,
    node_description: str,
    always_process: bool,
    host: HostInfoEmulation,
) -> List[Tuple[str, str]]:
    props = [
        ("node.name", _q(node_name)),
        ("node.description", _q(node_description)),
        ("node.always-process", _b(always_process)),
    ]
    if host.enabled:
        props += [
            ("application.name", _q(host.app_name)),
            ("application.process.host", _q(host.host_name)),
            ("application.process.user", _q(host.user_name)),
            ("node.nick", _q(host.client_name)),
        ]
    return props


def _module_block(module: str, args: List[Tuple[str, str]], stream_props: List[Tuple[str, str]]) -> str:
    lines = [HEADER, "context.modules = [", "{   name = " + module, "    args = {"]
    for k, v in args:
        lines.append(f"        {k} = {v}")
    lines.append("        stream.props = {")
    for k, v in stream_props:
        lines.append(f"            {k} = {v}")
    lines += ["        }", "    }", "}", "]", ""]
    return "\n".join(lines)


def render_send(send: VbanSend, host: HostInfoEmulation) -> str:
    args = [
        ("destination.ip", _q(send.destination_ip)),
        ("destination.port", str(int(send.destination_port))),
        ("sess.name", _q(send.sess_name)),
        ("sess.media", _q(send.sess_media)),
        ("audio.format", _q(send.audio_format)),
        ("audio.rate", str(int(send.audio_rate))),
        ("audio.channels", str(int(send.audio_channels))),
    ]
    sp = _stream_props(send.node_name, send.node_description, send.always_process, host)
    sp.append(("media.class", _q("Audio/Sink")))
    return _module_block("libpipewire-module-vban-send", args, sp)


def render_recv(recv: VbanRecv, host: HostInfoEmulation) -> str:
    args = [
        ("source.ip", _q(recv.source_ip)),
        ("source.port", str(int(recv.source_port))),
        ("sess.latency.msec", str(int(recv.latency_msec))),
    ]
    if recv.stream_name.strip():
        args.append(("sess.name", _q(recv.stream_name.strip())))
    sp = _stream_props(recv.node_name, recv.node_description, recv.always_process, host)
    return _module_block("libpipewire-module-vban-recv", args, sp)
