# pw_graph.py
from __future__ import annotations

from typing import List, Optional

from pw_channels import MONO, channels_match, is_stereo_position
from pw_types import LinkPairs, PwPort


def pick_source_port(src: List[PwPort], dst_port: PwPort) -> Optional[PwPort]:
    """
    Exact channel first, then MONO duplicated onto FL/FR, then the first
    source port in pw-dump order.
    """
    if not src:
        return None

    ch = dst_port.channel
    if ch:
        for p in src:
            if channels_match(p.channel, ch):
                return p

        if is_stereo_position(ch):
            for p in src:
                if channels_match(p.channel, MONO):
                    return p

    return src[0]


def plan_links(src: List[PwPort], dst: List[PwPort]) -> LinkPairs:
    pairs = set()
    for d in dst:
        s = pick_source_port(src, d)
        if s is None:
            continue
        pairs.add((s.port_name, d.port_name))
    return sorted(pairs)
