# cli.py
"""
vbanwire - VBAN send/receive endpoints for PipeWire.

Declarations live in ~/.config/vbanwire/vbanwire.cfg. ``apply`` turns them
into pipewire.conf.d fragments and patches each send's capture source into
the send node with pw-link. Links created by anything else are left alone.

    vbanwire sources
    vbanwire add-send --ip 192.168.1.20 --target default
    vbanwire apply --restart
"""
from __future__ import annotations

import argparse
import configparser
import sys
from pathlib import Path
from typing import List, Optional

from autolink import autolink_sources
from errors import FilesystemError, IntrospectionError
from fragments import apply_fragments
from log import configure, get_logger
from models import AppConfig, VbanRecv, VbanSend
from pw_cli import restart_pipewire_services
from pw_types import AutolinkSummary
from sources import default_source, list_audio_sources, query_pulse_sources
from store_config import ConfigStore


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ISSUES = 2

log = get_logger("cli")


def _list_sources(store: ConfigStore):
    client = store.pulse_client_name()
    return list_audio_sources(legacy=lambda: query_pulse_sources(client))


def _print_summary(summary: AutolinkSummary) -> int:
    print(f"Links created: {summary.links_created}")
    for issue in summary.issues:
        print(f"  ! {issue}")
    return EXIT_ISSUES if summary.issues else EXIT_OK


def cmd_sources(args: argparse.Namespace, store: ConfigStore) -> int:
    for s in _list_sources(store):
        print(f"{s.node_name}\t{s.description}")
    return EXIT_OK


def cmd_list(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    for s in app.sends:
        state = "on " if s.enabled else "off"
        target = s.target_object or "(manual)"
        print(f"send {s.id} {state} {s.node_name} -> {s.destination_ip}:{s.destination_port}  source={target}")
    for r in app.recvs:
        state = "on " if r.enabled else "off"
        print(f"recv {r.id} {state} {r.node_name} <- {r.source_ip}:{r.source_port}")
    return EXIT_OK


def cmd_add_send(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    send = VbanSend(
        destination_ip=args.ip,
        destination_port=args.port,
        audio_rate=args.rate,
        audio_channels=args.channels,
    )
    if args.name:
        send.node_name = args.name
    if args.description:
        send.node_description = args.description
    if args.stream:
        send.sess_name = args.stream

    target = (args.target or "").strip()
    if target == "default":
        src = default_source(_list_sources(store))
        if src is None:
            print("No capture source available; leaving the send unpatched.", file=sys.stderr)
            target = ""
        else:
            target = src.node_name
    send.target_object = target

    app.sends.append(send)
    store.save_app_config(app)
    print(send.id)
    return EXIT_OK


def cmd_add_recv(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    recv = VbanRecv(source_ip=args.ip, source_port=args.port, latency_msec=args.latency)
    if args.name:
        recv.node_name = args.name
    if args.description:
        recv.node_description = args.description
    if args.stream:
        recv.stream_name = args.stream
    app.recvs.append(recv)
    store.save_app_config(app)
    print(recv.id)
    return EXIT_OK


def _lookup(app: AppConfig, entity_id: str):
    e = app.find(entity_id)
    if e is None:
        print(f"No send/recv matches id `{entity_id}`.", file=sys.stderr)
    return e


def cmd_remove(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    if _lookup(app, args.id) is None:
        return EXIT_ERROR
    app.remove(args.id)
    store.save_app_config(app)
    return EXIT_OK


def cmd_set_enabled(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    e = _lookup(app, args.id)
    if e is None:
        return EXIT_ERROR
    e.enabled = args.command == "enable"
    store.save_app_config(app)
    return EXIT_OK


def cmd_set_target(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    e = _lookup(app, args.id)
    if e is None:
        return EXIT_ERROR
    if not isinstance(e, VbanSend):
        print("Only sends have a capture source.", file=sys.stderr)
        return EXIT_ERROR
    e.target_object = args.source.strip()
    store.save_app_config(app)
    return EXIT_OK


def cmd_apply(args: argparse.Namespace, store: ConfigStore) -> int:
    app = store.load_app_config()
    apply_fragments(app, store.dropin_dir())
    print("Fragments written.")

    if args.restart:
        restart_pipewire_services()
        print("PipeWire restarted.")

    if args.no_autolink:
        return EXIT_OK
    return _print_summary(autolink_sources(app))


def cmd_autolink(args: argparse.Namespace, store: ConfigStore) -> int:
    return _print_summary(autolink_sources(store.load_app_config()))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vbanwire",
        description="Manage VBAN endpoints for PipeWire.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug).")
    parser.add_argument("--config-dir", default=None, help="Directory holding vbanwire.cfg.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("sources", help="List capture sources usable as send targets.")
    p.set_defaults(func=cmd_sources)

    p = sub.add_parser("list", help="Show declared sends and receives.")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("add-send", help="Declare a VBAN send.")
    p.add_argument("--ip", default="127.0.0.1")
    p.add_argument("--port", type=int, default=6980)
    p.add_argument("--rate", type=int, default=48000)
    p.add_argument("--channels", type=int, default=2)
    p.add_argument("--name", default="", help="node.name of the send (default vban-send-<id>).")
    p.add_argument("--description", default="")
    p.add_argument("--stream", default="", help="VBAN stream name.")
    p.add_argument("--target", default="", help="Capture source node.name, or `default`.")
    p.set_defaults(func=cmd_add_send)

    p = sub.add_parser("add-recv", help="Declare a VBAN receive.")
    p.add_argument("--ip", default="127.0.0.1")
    p.add_argument("--port", type=int, default=6980)
    p.add_argument("--latency", type=int, default=100, help="Latency in ms.")
    p.add_argument("--name", default="", help="node.name of the receive (default vban-recv-<id>).")
    p.add_argument("--description", default="")
    p.add_argument("--stream", default="", help="Only accept this VBAN stream name.")
    p.set_defaults(func=cmd_add_recv)

    p = sub.add_parser("remove", help="Delete a declaration.")
    p.add_argument("id")
    p.set_defaults(func=cmd_remove)

    for name in ("enable", "disable"):
        p = sub.add_parser(name, help=f"{name.capitalize()} a declaration.")
        p.add_argument("id")
        p.set_defaults(func=cmd_set_enabled)

    p = sub.add_parser("set-target", help="Change the capture source a send is patched from.")
    p.add_argument("id")
    p.add_argument("source", help="Capture source node.name; empty string for manual patching.")
    p.set_defaults(func=cmd_set_target)

    p = sub.add_parser("apply", help="Write fragments and patch sources.")
    p.add_argument("--restart", action="store_true", help="Restart PipeWire so new fragments load.")
    p.add_argument("--no-autolink", action="store_true")
    p.set_defaults(func=cmd_apply)

    p = sub.add_parser("autolink", help="Patch sources into sends without touching fragments.")
    p.set_defaults(func=cmd_autolink)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure(args.verbose)

    store = ConfigStore(base_dir=Path(args.config_dir).expanduser() if args.config_dir else None)
    try:
        return args.func(args, store)
    except (IntrospectionError, FilesystemError, OSError, configparser.Error) as e:
        log.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
