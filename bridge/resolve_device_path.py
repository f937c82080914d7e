#!/usr/bin/env python3
"""Parse, resolve and extract compact device paths (t0/d1/c0/pC1) in a Live set.

Resolves against the running set through the UDP bridge, or against a JSON
tree snapshot with --snapshot. Prints one JSON object on stdout.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Literal

from device_paths.builder import build_chain_path, build_drum_chain_path, extract_device_path
from device_paths.grammar import (
    ChainSegment,
    DeviceSegment,
    DrumPadSegment,
    PathSegment,
    ReturnChainSegment,
    TrackSegment,
    format_path,
    parse_path,
    translate_legacy_path,
)
from device_paths.host import CHAINS, TreeHost
from device_paths.insertion import MAX_AUTO_CREATE_CHAINS, resolve_for_insertion
from device_paths.memory_host import MemoryTreeHost
from device_paths.note_groups import extract_node_path, is_drum_rack, list_note_groups
from device_paths.pitch import CATCH_ALL_NOTE, midi_to_note_name
from device_paths.resolver import resolve_path
from live_tree_host import (
    DEFAULT_ACK_PORT,
    DEFAULT_ACK_TIMEOUT_S,
    DEFAULT_HOST,
    DEFAULT_PORT,
    LiveApiClient,
    LiveTreeHost,
)


Action = Literal["parse", "resolve", "insert", "extract", "drum_pads"]

ACTIONS: tuple[Action, ...] = ("parse", "resolve", "insert", "extract", "drum_pads")

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class ResolveConfig:
    action: Action
    target: str
    legacy: bool
    snapshot: Path | None
    host: str
    port: int
    ack_port: int
    ack_timeout_s: float


def _positive_float(value: str) -> float:
    parsed = float(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def parse_args(argv: Iterable[str]) -> ResolveConfig:
    parser = argparse.ArgumentParser(description=__doc__)
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--parse", metavar="PATH", help="Parse a compact path and print its segments")
    actions.add_argument("--resolve", metavar="PATH", help="Resolve a compact path to a LiveAPI path")
    actions.add_argument(
        "--insert",
        metavar="PATH",
        help=f"Resolve an insertion target, creating up to {MAX_AUTO_CREATE_CHAINS} missing chains",
    )
    actions.add_argument("--extract", metavar="LIVE_PATH", help="Convert a LiveAPI path to a compact path")
    actions.add_argument("--drum-pads", metavar="PATH", help="List the note groups of the drum rack at PATH")
    parser.add_argument(
        "--legacy",
        action="store_true",
        help="Translate a positional path (0/0/1, 0/0/pC1/0) before use",
    )
    parser.add_argument("--snapshot", default=None, help="Resolve against a JSON tree snapshot instead of Live")
    parser.add_argument("--host", default=DEFAULT_HOST, help="Bridge host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Bridge command port")
    parser.add_argument("--ack-port", type=int, default=DEFAULT_ACK_PORT, help="Bridge ack port")
    parser.add_argument(
        "--ack-timeout",
        type=_positive_float,
        default=DEFAULT_ACK_TIMEOUT_S,
        help=f"Ack wait timeout in seconds (default: {DEFAULT_ACK_TIMEOUT_S})",
    )
    ns = parser.parse_args(list(argv))

    action = next(name for name in ACTIONS if getattr(ns, name) is not None)
    return ResolveConfig(
        action=action,
        target=str(getattr(ns, action)).strip(),
        legacy=bool(ns.legacy),
        snapshot=None if ns.snapshot is None else Path(str(ns.snapshot)),
        host=str(ns.host),
        port=int(ns.port),
        ack_port=int(ns.ack_port),
        ack_timeout_s=float(ns.ack_timeout),
    )


def _segment_payload(segment: PathSegment) -> Dict[str, Any]:
    if isinstance(segment, TrackSegment):
        return {"type": "track", "kind": segment.kind, "index": segment.index}
    if isinstance(segment, DeviceSegment):
        return {"type": "device", "index": segment.index}
    if isinstance(segment, ChainSegment):
        return {"type": "chain", "index": segment.index}
    if isinstance(segment, ReturnChainSegment):
        return {"type": "return_chain", "index": segment.index}
    if isinstance(segment, DrumPadSegment):
        return {
            "type": "drum_pad",
            "note": segment.note,
            "remaining_segments": list(segment.remaining_segments),
        }
    raise ValueError(f"unknown segment: {segment!r}")


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=True))


def _compact_path(cfg: ResolveConfig) -> str:
    if not cfg.legacy:
        return cfg.target
    translated = translate_legacy_path(cfg.target)
    print(f"info: legacy path {cfg.target!r} -> {translated!r}", file=sys.stderr)
    return translated


def _run_parse(path: str) -> int:
    segments = parse_path(path)
    _emit(
        {
            "path": path,
            "normalized": format_path(segments),
            "segments": [_segment_payload(segment) for segment in segments],
        }
    )
    return EXIT_OK


def _run_extract(live_path: str) -> int:
    compact = extract_device_path(live_path)
    _emit({"live_path": live_path, "path": compact})
    if compact is None:
        print(f"error: not a device, chain or track path: {live_path!r}", file=sys.stderr)
        return EXIT_NOT_FOUND
    return EXIT_OK


def _run_resolve(host: TreeHost, path: str) -> int:
    target = resolve_path(host, path)
    payload: Dict[str, Any] = {"path": path, "kind": target.kind, "found": target.ok}
    if not target.ok:
        _emit(payload)
        print(f"error: no {target.kind} at {path!r}", file=sys.stderr)
        return EXIT_NOT_FOUND
    payload["live_path"] = host.native_path(target.node)
    payload["compact_path"] = extract_node_path(host, target.node)
    _emit(payload)
    return EXIT_OK


def _run_insert(host: TreeHost, path: str) -> int:
    target = resolve_for_insertion(host, path)
    payload: Dict[str, Any] = {
        "path": path,
        "container": None if target.container is None else host.native_path(target.container),
        "position": target.position,
    }
    _emit(payload)
    if target.container is None:
        print(f"error: no insertion container at {path!r}", file=sys.stderr)
        return EXIT_NOT_FOUND
    return EXIT_OK


def _run_drum_pads(host: TreeHost, path: str) -> int:
    target = resolve_path(host, path)
    if not target.ok or target.kind != "device" or not is_drum_rack(host, target.node):
        _emit({"path": path, "found": False, "pads": []})
        print(f"error: no drum rack at {path!r}", file=sys.stderr)
        return EXIT_NOT_FOUND

    all_chains = host.get_children(target.node, CHAINS)
    pads = []
    for in_note, chains in list_note_groups(host, target.node):
        name = "*" if in_note == CATCH_ALL_NOTE else midi_to_note_name(in_note)
        if name is None:
            # No p<note> form reaches these; list them by rack position.
            paths = [build_chain_path(path, all_chains.index(chain)) for chain in chains]
        else:
            paths = [build_drum_chain_path(path, in_note, index) for index in range(len(chains))]
        pads.append({"note": name, "in_note": in_note, "chains": paths})
    _emit({"path": path, "found": True, "pads": pads})
    return EXIT_OK


def _open_host(cfg: ResolveConfig) -> tuple[TreeHost, LiveApiClient | None]:
    if cfg.snapshot is not None:
        print(f"info: using tree snapshot {cfg.snapshot}", file=sys.stderr)
        return MemoryTreeHost.load(cfg.snapshot), None
    client = LiveApiClient(cfg.host, cfg.port, cfg.ack_port, cfg.ack_timeout_s)
    return LiveTreeHost(client), client


def run(cfg: ResolveConfig) -> int:
    if cfg.action == "extract":
        return _run_extract(cfg.target)

    path = _compact_path(cfg)
    if cfg.action == "parse":
        return _run_parse(path)

    # Malformed paths fail before any bridge traffic.
    path = format_path(parse_path(path))
    host, client = _open_host(cfg)
    try:
        if cfg.action == "resolve":
            return _run_resolve(host, path)
        if cfg.action == "insert":
            return _run_insert(host, path)
        return _run_drum_pads(host, path)
    finally:
        if client is not None:
            client.close()


def main(argv: Iterable[str]) -> int:
    cfg = parse_args(argv)
    try:
        return run(cfg)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
