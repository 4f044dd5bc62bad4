# models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Union


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class HostInfoEmulation:
    enabled: bool = False
    app_name: str = "VBAN"
    host_name: str = "vban-host"
    user_name: str = "vban"
    client_name: str = "VBAN Remote"


@dataclass
class VbanSend:
    id: str = field(default_factory=new_id)
    enabled: bool = True
    always_process: bool = False
    destination_ip: str = "127.0.0.1"
    destination_port: int = 6980
    sess_name: str = "PipeWire VBAN stream"
    sess_media: str = "audio"
    audio_format: str = "S16LE"
    audio_rate: int = 48000
    audio_channels: int = 2
    node_name: str = ""
    node_description: str = "VBAN Send"
    target_object: str = ""  # node.name of the capture source to patch in

    def __post_init__(self) -> None:
        if not self.node_name:
            self.node_name = f"vban-send-{self.id}"


@dataclass
class VbanRecv:
    id: str = field(default_factory=new_id)
    enabled: bool = True
    source_ip: str = "127.0.0.1"
    source_port: int = 6980
    latency_msec: int = 100
    always_process: bool = False
    stream_name: str = ""
    node_name: str = ""
    node_description: str = "VBAN Recv"

    def __post_init__(self) -> None:
        if not self.node_name:
            self.node_name = f"vban-recv-{self.id}"


Endpoint = Union[VbanSend, VbanRecv]


@dataclass
class AppConfig:
    sends: List[VbanSend] = field(default_factory=list)
    recvs: List[VbanRecv] = field(default_factory=list)
    host_info_emulation: HostInfoEmulation = field(default_factory=HostInfoEmulation)

    def find(self, entity_id: str) -> Optional[Endpoint]:
        """Lookup by full id or by a unique id prefix."""
        key = (entity_id or "").strip().lower()
        if not key:
            return None
        hits = [e for e in (*self.sends, *self.recvs) if e.id == key or e.id.startswith(key)]
        exact = [e for e in hits if e.id == key]
        if exact:
            return exact[0]
        return hits[0] if len(hits) == 1 else None

    def remove(self, entity_id: str) -> bool:
        e = self.find(entity_id)
        if e is None:
            return False
        if isinstance(e, VbanSend):
            self.sends.remove(e)
        else:
            self.recvs.remove(e)
        return True
