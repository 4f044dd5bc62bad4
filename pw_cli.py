# pw_cli.py
from __future__ import annotations

import json
import subprocess
from typing import Any, Callable, List, Sequence

from errors import IntrospectionError, LinkError
from log import get_logger
from pw_types import LinkOutcome


Runner = Callable[[Sequence[str]], "subprocess.CompletedProcess[str]"]

ALREADY_LINKED_PHRASES = ("file exists", "already linked", "already exists")

RESTART_CANDIDATES = (
    ["systemctl", "--user", "restart", "pipewire.service", "pipewire-pulse.service"],
    ["systemctl", "--user", "restart", "pipewire.service"],
    ["systemctl", "--user", "restart", "pipewire"],
)

log = get_logger("pw_cli")


def _run(cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(cmd), capture_output=True, text=True)


def _diagnostic(p: subprocess.CompletedProcess[str]) -> str:
    return ((p.stderr or "").strip() or (p.stdout or "").strip())


def pw_dump_json(kind: str, run: Runner = _run) -> List[Any]:
    cmd = ["pw-dump", kind]
    label = " ".join(cmd)
    log.debug("running `%s`", label)
    try:
        p = run(cmd)
    except OSError as e:
        raise IntrospectionError(f"Could not execute `{label}`: {e}") from e

    if p.returncode != 0:
        msg = _diagnostic(p)
        detail = f": {msg}" if msg else ""
        raise IntrospectionError(f"`{label}` exited with status {p.returncode}{detail}")

    try:
        data = json.loads(p.stdout or "")
    except ValueError as e:
        raise IntrospectionError(f"Could not parse JSON output from `{label}`: {e}") from e

    if not isinstance(data, list):
        raise IntrospectionError(f"`{label}` output JSON is not a list")

    return data


def ensure_link(
    source_node: str,
    source_port: str,
    target_node: str,
    target_port: str,
    run: Runner = _run,
) -> LinkOutcome:
    """
    Connect ``source_node:source_port`` to ``target_node:target_port``.

    pw-link refuses to duplicate a link; that refusal is reported as
    ALREADY_EXISTS so repeated passes stay silent.
    """
    out_full = f"{source_node}:{source_port}"
    in_full = f"{target_node}:{target_port}"
    if not source_node or not source_port or not target_node or not target_port:
        raise LinkError(f"Invalid port names for link creation ({out_full} -> {in_full}).")

    try:
        p = run(["pw-link", out_full, in_full])
    except OSError as e:
        raise LinkError(f"Could not execute `pw-link {out_full} {in_full}`: {e}") from e

    if p.returncode == 0:
        log.info("linked %s -> %s", out_full, in_full)
        return LinkOutcome.CREATED

    msg = _diagnostic(p)
    low = msg.lower()
    if any(phrase in low for phrase in ALREADY_LINKED_PHRASES):
        log.debug("link %s -> %s already present", out_full, in_full)
        return LinkOutcome.ALREADY_EXISTS

    raise LinkError(f"`pw-link` failed: {msg or f'exit status {p.returncode}'}")


def restart_pipewire_services(run: Runner = _run) -> None:
    for cmd in RESTART_CANDIDATES:
        try:
            p = run(cmd)
        except OSError as e:
            log.debug("`%s` could not run: %s", " ".join(cmd), e)
            continue
        if p.returncode == 0:
            log.info("restarted PipeWire with `%s`", " ".join(cmd))
            return
        log.debug("`%s` exited with status %s", " ".join(cmd), p.returncode)

    raise IntrospectionError("Could not restart pipewire via systemctl --user")
