# autolink.py
from __future__ import annotations

from typing import Optional

from errors import LinkError
from log import get_logger
from models import AppConfig, VbanSend
from pw_cli import Runner, _run, ensure_link
from pw_dump import load_topology
from pw_graph import plan_links
from pw_types import AutolinkSummary, LinkOutcome, PwTopology


log = get_logger("autolink")


def _link_send(topo: PwTopology, send: VbanSend, summary: AutolinkSummary, run: Runner) -> None:
    src_name = send.target_object.strip()
    dst_name = send.node_name.strip()

    src_id = topo.node_id(src_name)
    if src_id is None:
        summary.issues.append(f"Source `{src_name}` not found in PipeWire.")
        return
    dst_id = topo.node_id(dst_name)
    if dst_id is None:
        summary.issues.append(f"Send node `{dst_name}` not found (try `apply --restart`).")
        return

    src_ports = topo.output_ports(src_id)
    dst_ports = topo.input_ports(dst_id)
    if not src_ports:
        summary.issues.append(f"Source `{src_name}` has no output audio ports.")
        return
    if not dst_ports:
        summary.issues.append(f"Send `{dst_name}` has no input audio ports.")
        return

    pairs = plan_links(src_ports, dst_ports)
    if not pairs:
        summary.issues.append(f"No compatible ports found for `{dst_name}`.")
        return

    for src_port, dst_port in pairs:
        try:
            outcome = ensure_link(src_name, src_port, dst_name, dst_port, run)
        except LinkError as e:
            summary.issues.append(f"{src_name}:{src_port} -> {dst_name}:{dst_port}: {e}")
            continue
        if outcome is LinkOutcome.CREATED:
            summary.links_created += 1


def autolink_sources(cfg: AppConfig, run: Runner = _run, topo: Optional[PwTopology] = None) -> AutolinkSummary:
    """
    Patch each enabled send's target_object into the send node.

    Sends without a target are left for manual patching. Per-send problems
    end up in ``issues``; only a failed topology load raises.
    """
    summary = AutolinkSummary()
    sends = [s for s in cfg.sends if s.enabled and s.target_object.strip()]
    if not sends:
        return summary

    if topo is None:
        topo = load_topology(run)

    for send in sends:
        _link_send(topo, send, summary, run)

    for issue in summary.issues:
        log.warning("autolink: %s", issue)
    log.info("autolink: %d link(s) created", summary.links_created)
    return summary
