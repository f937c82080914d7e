"""Read-only resolution of compact device paths against a tree host."""

from __future__ import annotations

from typing import Sequence

from device_paths.grammar import (
    ChainSegment,
    DeviceSegment,
    DrumPadSegment,
    PathSegment,
    ReturnChainSegment,
    TrackSegment,
    parse_path,
)
from device_paths.host import CHAINS, DEVICES, RETURN_CHAINS, TreeHost, child_at
from device_paths.note_groups import navigate_tail
from device_paths.targets import MissingChain, ResolvedTarget, Walk, found, not_found


def walk(host: TreeHost, segments: Sequence[PathSegment]) -> Walk:
    if not segments or not isinstance(segments[0], TrackSegment):
        raise ValueError("segments must start with a track segment")

    track = segments[0]
    node = host.get_track(track.kind, track.index)
    if node is None or not host.exists(node):
        return not_found("device")

    # A bare track resolves to itself as the container of devices.
    kind = "device"
    for pos, segment in enumerate(segments[1:], start=1):
        is_last = pos == len(segments) - 1
        if isinstance(segment, DeviceSegment):
            child = child_at(host, node, DEVICES, segment.index)
            if child is None:
                return not_found("device")
            node, kind = child, "device"
        elif isinstance(segment, (ChainSegment, ReturnChainSegment)):
            if isinstance(segment, ChainSegment):
                collection, chain_kind = CHAINS, "chain"
            else:
                collection, chain_kind = RETURN_CHAINS, "return-chain"
            chains = host.get_children(node, collection)
            if segment.index >= len(chains):
                missing = MissingChain(
                    device=node,
                    kind=chain_kind,
                    index=segment.index,
                    available=len(chains),
                    is_last=is_last,
                )
                return not_found(chain_kind, missing)
            node, kind = chains[segment.index], chain_kind
        elif isinstance(segment, DrumPadSegment):
            return navigate_tail(host, node, segment.note, segment.remaining_segments)
        else:
            raise ValueError(f"unexpected segment after the track: {segment!r}")

    return found(node, kind)


def resolve(host: TreeHost, segments: Sequence[PathSegment]) -> ResolvedTarget:
    return walk(host, segments).target


def resolve_path(host: TreeHost, path: str) -> ResolvedTarget:
    return resolve(host, parse_path(path))
