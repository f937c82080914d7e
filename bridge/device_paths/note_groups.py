"""Drum rack note groups.

A drum pad is not a node of its own: it is the set of a rack's chains whose
``in_note`` matches a MIDI note (or -1 for the catch-all pad). Groups are
recomputed on every call, in the rack's chain order.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from device_paths.builder import build_drum_chain_path, extract_device_path
from device_paths.grammar import (
    CATCH_ALL,
    SEPARATOR,
    ChainSegment,
    DeviceSegment,
    DrumPadSegment,
    ReturnChainSegment,
    parse_path,
    parse_uint,
)
from device_paths.host import (
    CAN_HAVE_DRUM_PADS,
    CHAINS,
    DEVICES,
    IN_NOTE,
    RETURN_CHAINS,
    NodeRef,
    TreeHost,
    child_at,
    flag_property,
    int_property,
)
from device_paths.pitch import CATCH_ALL_NOTE, midi_to_note_name, note_name_to_midi
from device_paths.targets import MissingChain, ResolvedTarget, Walk, found, not_found


def note_value(note: str) -> int | None:
    if note == CATCH_ALL:
        return CATCH_ALL_NOTE
    return note_name_to_midi(note)


def is_drum_rack(host: TreeHost, device: NodeRef) -> bool:
    return flag_property(host, device, CAN_HAVE_DRUM_PADS)


def note_group(host: TreeHost, device: NodeRef, value: int) -> List[NodeRef]:
    return [
        chain
        for chain in host.get_children(device, CHAINS)
        if int_property(host, chain, IN_NOTE) == value
    ]


def list_note_groups(host: TreeHost, device: NodeRef) -> List[Tuple[int, List[NodeRef]]]:
    """Every note group of a rack, ordered by the first chain of each group."""
    groups: Dict[int, List[NodeRef]] = {}
    for chain in host.get_children(device, CHAINS):
        in_note = int_property(host, chain, IN_NOTE)
        if in_note is None:
            continue
        groups.setdefault(in_note, []).append(chain)
    return list(groups.items())


def navigate_tail(host: TreeHost, device: NodeRef | None, note: str, tail: Sequence[str]) -> Walk:
    """Walk ``p<note>/<tail...>`` starting at ``device``.

    The first ``c`` token indexes into the note group; later ``c``/``rc``
    tokens index ordinary chains and a ``p`` token after a device opens
    another note group. Nested pads loop here instead of recursing.
    """
    tokens = list(tail)
    pos = 0
    current_device = device
    pending_note = note

    while True:
        if current_device is None or not host.exists(current_device):
            return not_found("chain")
        value = note_value(pending_note)
        if value is None:
            return not_found("chain")

        group = note_group(host, current_device, value)
        index = 0
        if pos < len(tokens) and tokens[pos].startswith("c"):
            parsed = parse_uint(tokens[pos], "c")
            if parsed is None:
                return not_found("chain")
            index = parsed
            pos += 1
        if index >= len(group):
            missing = MissingChain(
                device=current_device,
                kind="drum-pad",
                index=index,
                available=len(group),
                is_last=pos >= len(tokens),
                note=value,
            )
            return not_found("chain", missing)

        node = group[index]
        kind = "chain"
        expect = "device"
        opened_pad = False

        while pos < len(tokens):
            token = tokens[pos]
            if expect == "device":
                device_index = parse_uint(token, "d")
                if device_index is None:
                    return not_found(kind)
                child = child_at(host, node, DEVICES, device_index)
                if child is None:
                    return not_found("device")
                node, kind, expect = child, "device", "chain"
            elif token.startswith("p") and len(token) > 1:
                current_device = node
                pending_note = token[1:]
                pos += 1
                opened_pad = True
                break
            elif token.startswith("rc") or token.startswith("c"):
                prefix, collection, chain_kind = (
                    ("rc", RETURN_CHAINS, "return-chain")
                    if token.startswith("rc")
                    else ("c", CHAINS, "chain")
                )
                chain_index = parse_uint(token, prefix)
                if chain_index is None:
                    return not_found(chain_kind)
                chains = host.get_children(node, collection)
                if chain_index >= len(chains):
                    missing = MissingChain(
                        device=node,
                        kind=chain_kind,
                        index=chain_index,
                        available=len(chains),
                        is_last=pos + 1 >= len(tokens),
                    )
                    return not_found(chain_kind, missing)
                node, kind, expect = chains[chain_index], chain_kind, "device"
            else:
                return not_found(kind)
            pos += 1

        if not opened_pad:
            return found(node, kind)


def resolve_drum_pad(host: TreeHost, device: NodeRef | None, note: str, tail: Sequence[str]) -> ResolvedTarget:
    return navigate_tail(host, device, note, tail).target


def extract_node_path(host: TreeHost, node: NodeRef) -> str | None:
    """Compact path of ``node``, naming drum rack chains by their note group.

    ``live_set tracks 0 devices 0 chains 3`` becomes ``t0/d0/pC1/c1`` when
    chain 3 is the second chain with ``in_note`` 36.
    """
    compact = extract_device_path(host.native_path(node))
    if compact is None:
        return None
    segments = parse_path(compact)
    if any(isinstance(segment, DrumPadSegment) for segment in segments):
        return compact

    track = segments[0]
    current = host.get_track(track.kind, track.index)
    if current is None:
        return compact

    path = str(track)
    for segment in segments[1:]:
        if isinstance(segment, ChainSegment) and is_drum_rack(host, current):
            chains = host.get_children(current, CHAINS)
            if segment.index >= len(chains):
                return compact
            chain = chains[segment.index]
            in_note = int_property(host, chain, IN_NOTE)
            if in_note is None or (in_note != CATCH_ALL_NOTE and midi_to_note_name(in_note) is None):
                path = f"{path}{SEPARATOR}{segment}"
            else:
                within = sum(
                    1 for other in chains[: segment.index] if int_property(host, other, IN_NOTE) == in_note
                )
                path = build_drum_chain_path(path, in_note, within)
            current = chain
            continue

        if isinstance(segment, DeviceSegment):
            collection = DEVICES
        elif isinstance(segment, ReturnChainSegment):
            collection = RETURN_CHAINS
        else:
            collection = CHAINS
        child = child_at(host, current, collection, segment.index)
        if child is None:
            return compact
        current = child
        path = f"{path}{SEPARATOR}{segment}"

    return path
