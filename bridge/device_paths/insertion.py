"""Resolve insertion targets, creating missing chains within a fixed bound."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from device_paths.errors import (
    AutoCreateLimitExceeded,
    ChainCreationFailed,
    ChainCreationUnsupported,
)
from device_paths.grammar import DeviceSegment, DrumPadSegment, PathSegment, parse_path, parse_uint
from device_paths.host import (
    CAN_HAVE_CHAINS,
    CHAINS,
    IN_NOTE,
    INSERT_CHAIN,
    NodeRef,
    TreeHost,
    flag_property,
)
from device_paths.note_groups import is_drum_rack, note_group
from device_paths.resolver import walk
from device_paths.targets import MissingChain


MAX_AUTO_CREATE_CHAINS = 16


@dataclass(frozen=True)
class InsertionTarget:
    container: NodeRef | None
    # None means append after the container's last device.
    position: int | None


def ensure_chain_count(
    desired_index: int,
    count: Callable[[], int],
    create: Callable[[], object],
    bound: int = MAX_AUTO_CREATE_CHAINS,
    what: str = "chains",
) -> int:
    """Create chains until ``desired_index`` exists and return how many were made.

    Nothing is created when the index already exists or when reaching it would
    take more than ``bound`` chains. The count is re-read after every step.
    """
    required = desired_index + 1 - count()
    if required <= 0:
        return 0
    if required > bound:
        raise AutoCreateLimitExceeded(required, bound, what=what)

    for attempt in range(1, required + 1):
        before = count()
        if before > desired_index:
            return attempt - 1
        create()
        if count() <= before:
            raise ChainCreationFailed(attempt, required)
    return required


def _insert_chain(host: TreeHost, device: NodeRef, in_note: int | None) -> NodeRef | None:
    before = len(host.get_children(device, CHAINS))
    host.invoke(device, INSERT_CHAIN)
    if in_note is None:
        return None
    # New chains land at the end of the rack with the catch-all note.
    chains = host.get_children(device, CHAINS)
    if len(chains) <= before:
        return None
    host.set_property(chains[-1], IN_NOTE, in_note)
    return chains[-1]


def _describe(host: TreeHost, device: NodeRef) -> str:
    return host.native_path(device) or repr(device)


def _create_missing(host: TreeHost, missing: MissingChain) -> int:
    device = missing.device
    if missing.kind == "drum-pad":
        note = missing.note
        return ensure_chain_count(
            missing.index,
            lambda: len(note_group(host, device, note)),
            lambda: _insert_chain(host, device, note),
            what="drum pad chains",
        )

    if not flag_property(host, device, CAN_HAVE_CHAINS):
        raise ChainCreationUnsupported(f"device at '{_describe(host, device)}' does not support chains")
    if is_drum_rack(host, device):
        raise ChainCreationUnsupported(
            f"auto-creating chains in drum racks is not supported ('{_describe(host, device)}'); "
            "address drum pad chains with p<note>"
        )
    return ensure_chain_count(
        missing.index,
        lambda: len(host.get_children(device, CHAINS)),
        lambda: _insert_chain(host, device, None),
    )


def resolve_container(host: TreeHost, segments: List[PathSegment]) -> NodeRef | None:
    attempt = walk(host, segments)
    if attempt.target.ok:
        return attempt.target.node

    missing = attempt.missing
    if missing is None or not missing.is_last or missing.kind == "return-chain":
        return None
    if missing.kind == "drum-pad" and not is_drum_rack(host, missing.device):
        return None

    _create_missing(host, missing)
    return walk(host, segments).target.node


def _split_position(segments: List[PathSegment]) -> tuple[List[PathSegment], int | None, bool]:
    last = segments[-1]
    if isinstance(last, DeviceSegment):
        return segments[:-1], last.index, True
    if isinstance(last, DrumPadSegment) and last.remaining_segments:
        tail = last.remaining_segments
        if tail[-1].startswith("d"):
            index = parse_uint(tail[-1], "d")
            if index is None:
                return segments, None, False
            return segments[:-1] + [DrumPadSegment(last.note, tail[:-1])], index, True
    return segments, None, True


def resolve_for_insertion(host: TreeHost, path: str) -> InsertionTarget:
    """Container and device position for inserting at ``path``.

    ``t0/d0/c1/d2`` inserts at position 2 of chain 1; ``t0/d0/pC1`` appends
    to the first C1 chain, creating it when the pad is empty.
    """
    segments, position, valid = _split_position(parse_path(path))
    if not valid:
        return InsertionTarget(None, None)
    return InsertionTarget(resolve_container(host, segments), position)
