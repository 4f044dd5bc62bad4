# sources.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from errors import IntrospectionError
from log import get_logger
from pw_cli import Runner, _run, pw_dump_json
from pw_dump import info_props
from pw_types import AudioSource


ORIGIN_PW_DUMP = "pw-dump"
ORIGIN_PULSE = "pulse"

# Ordered fallback chains; the first populated key wins.
NAME_KEYS = ("node.name", "source_name", "name")
DESC_KEYS = ("node.description", "device.description", "description")

MONITOR_MARK = ".monitor"

LegacyQuery = Callable[[], List[Dict[str, Any]]]

log = get_logger("sources")


@dataclass(frozen=True)
class SourceEntry:
    origin: str
    props: Dict[str, Any] = field(default_factory=dict)
    name: str = ""
    description: str = ""


def _str(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def decode_pw_dump_entry(obj: Any) -> Optional[SourceEntry]:
    if not isinstance(obj, dict) or not isinstance(obj.get("info"), dict):
        return None
    return SourceEntry(origin=ORIGIN_PW_DUMP, props=info_props(obj))


def decode_pulse_entry(obj: Any) -> Optional[SourceEntry]:
    """Pulse-protocol sources: name/description at the top, proplist under "properties"."""
    if not isinstance(obj, dict):
        return None
    props = obj.get("properties")
    return SourceEntry(
        origin=ORIGIN_PULSE,
        props=props if isinstance(props, dict) else {},
        name=_str(obj.get("name")),
        description=_str(obj.get("description")),
    )


def is_audio_source_media_class(mc: str) -> bool:
    low = (mc or "").strip().lower()
    return low == "audio/source" or low.startswith("audio/source/")


def is_monitor_source(name: str) -> bool:
    return MONITOR_MARK in name


def is_monitor_entry(e: SourceEntry) -> bool:
    # pulse monitors carry the sink proplist; only the top-level name and device.class give them away
    if is_monitor_source(e.name):
        return True
    return _str(e.props.get("device.class")).lower() == "monitor"


def _first_populated(props: Dict[str, Any], keys: Iterable[str], fallback: str) -> str:
    for k in keys:
        v = _str(props.get(k))
        if v:
            return v
    return fallback


def _sorted(devices: List[AudioSource]) -> List[AudioSource]:
    return sorted(devices, key=lambda d: (d.description.lower(), d.node_name))


def extract_audio_sources(entries: Iterable[Optional[SourceEntry]]) -> List[AudioSource]:
    seen = set()
    out: List[AudioSource] = []

    for e in entries:
        if e is None:
            continue
        if e.origin == ORIGIN_PW_DUMP and not is_audio_source_media_class(_str(e.props.get("media.class"))):
            continue
        if is_monitor_entry(e):
            continue

        name = _first_populated(e.props, NAME_KEYS, e.name)
        if not name or is_monitor_source(name):
            continue

        desc = _first_populated(e.props, DESC_KEYS, e.description) or name

        if name in seen:
            continue
        seen.add(name)
        out.append(AudioSource(node_name=name, description=desc))

    return _sorted(out)


def merge_audio_sources(first: List[AudioSource], second: List[AudioSource]) -> List[AudioSource]:
    seen = set()
    merged: List[AudioSource] = []
    for d in list(first) + list(second):
        if d.node_name in seen:
            continue
        seen.add(d.node_name)
        merged.append(d)
    return _sorted(merged)


def list_sources_pw_dump(run: Runner = _run) -> List[AudioSource]:
    return extract_audio_sources(decode_pw_dump_entry(o) for o in pw_dump_json("Node", run))


def query_pulse_sources(client_name: str = "vbanwire") -> List[Dict[str, Any]]:
    """
    List sources over the Pulse protocol (pipewire-pulse).

    pulsectl loads libpulse on import, so it is imported here and a missing
    library counts as this backend failing.
    """
    try:
        import pulsectl
    except (ImportError, OSError) as e:
        raise IntrospectionError(f"Could not load pulsectl: {e}") from e

    try:
        with pulsectl.Pulse(client_name) as pulse:
            infos = pulse.source_list()
    except (pulsectl.PulseError, OSError) as e:
        raise IntrospectionError(f"Could not list sources via pipewire-pulse: {e}") from e

    return [
        {
            "name": s.name,
            "description": s.description,
            "properties": dict(s.proplist or {}),
        }
        for s in infos
    ]


def list_sources_pulse(legacy: LegacyQuery = query_pulse_sources) -> List[AudioSource]:
    return extract_audio_sources(decode_pulse_entry(o) for o in legacy())


def list_audio_sources(run: Runner = _run, legacy: LegacyQuery = query_pulse_sources) -> List[AudioSource]:
    pw_err: Optional[IntrospectionError] = None
    pulse_err: Optional[IntrospectionError] = None
    pw_devices: List[AudioSource] = []
    pulse_devices: List[AudioSource] = []

    try:
        pw_devices = list_sources_pw_dump(run)
    except IntrospectionError as e:
        pw_err = e

    try:
        pulse_devices = list_sources_pulse(legacy)
    except IntrospectionError as e:
        pulse_err = e

    if pw_err is not None and pulse_err is not None:
        raise IntrospectionError(
            f"Could not list PipeWire sources. pw-dump: {pw_err} | pactl: {pulse_err}"
        )
    if pw_err is not None:
        log.warning("pw-dump source listing failed, using pipewire-pulse only: %s", pw_err)
        return pulse_devices
    if pulse_err is not None:
        log.warning("pipewire-pulse source listing failed, using pw-dump only: %s", pulse_err)
        return pw_devices

    return merge_audio_sources(pw_devices, pulse_devices)


def default_source(sources: List[AudioSource]) -> Optional[AudioSource]:
    return sources[0] if sources else None
