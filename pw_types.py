# pw_types.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


LinkPairs = List[Tuple[str, str]]


@dataclass(frozen=True)
class PwPort:
    port_name: str
    is_input: bool
    channel: Optional[str]  # "FL","FR","MONO",... or None


@dataclass
class PwTopology:
    """One pw-dump snapshot. Node ids mean nothing outside of it."""

    nodes_by_name: Dict[str, int] = field(default_factory=dict)
    ports_by_node: Dict[int, List[PwPort]] = field(default_factory=dict)

    def node_id(self, name: str) -> Optional[int]:
        return self.nodes_by_name.get(name)

    def output_ports(self, node_id: int) -> List[PwPort]:
        return [p for p in self.ports_by_node.get(node_id, []) if not p.is_input]

    def input_ports(self, node_id: int) -> List[PwPort]:
        return [p for p in self.ports_by_node.get(node_id, []) if p.is_input]


@dataclass(frozen=True)
class AudioSource:
    node_name: str
    description: str


@dataclass
class AutolinkSummary:
    links_created: int = 0
    issues: List[str] = field(default_factory=list)


class LinkOutcome(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already-exists"
