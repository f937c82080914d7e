"""Derive compact device paths from LiveAPI paths and parent paths."""

from __future__ import annotations

from typing import List

from device_paths.grammar import CATCH_ALL, SEPARATOR
from device_paths.pitch import CATCH_ALL_NOTE, midi_to_note_name


LIVE_SET = "live_set"

_TRACK_PREFIXES = {
    "tracks": "t",
    "return_tracks": "rt",
}

_CHAIN_PREFIXES = {
    "chains": "c",
    "return_chains": "rc",
}


def _as_index(token: str) -> int | None:
    if not (token.isascii() and token.isdigit()):
        return None
    return int(token)


def extract_device_path(live_path: object) -> str | None:
    """Convert ``live_set tracks 1 devices 0 chains 2`` into ``t1/d0/c2``.

    Returns None for anything that is not a track-rooted device/chain path.
    ``drum_pads <note>`` hops are rewritten as ``p<note>`` with the chain index
    that follows taken relative to that pad.
    """
    if not isinstance(live_path, str):
        return None
    tokens = live_path.split()
    if len(tokens) < 2 or tokens[0] != LIVE_SET:
        return None

    parts: List[str] = []
    head = tokens[1]
    if head == "master_track":
        parts.append("mt")
        idx = 2
    elif head in _TRACK_PREFIXES:
        if len(tokens) < 3:
            return None
        track_index = _as_index(tokens[2])
        if track_index is None:
            return None
        parts.append(f"{_TRACK_PREFIXES[head]}{track_index}")
        idx = 3
    else:
        return None

    expect = "devices"
    while idx < len(tokens):
        if idx + 1 >= len(tokens):
            return None
        collection, value = tokens[idx], tokens[idx + 1]
        index = _as_index(value)
        if index is None:
            return None

        if expect == "devices":
            if collection != "devices":
                return None
            parts.append(f"d{index}")
            expect = "chains"
        elif expect == "pad_chains":
            # A pad's chains keep their pad-relative index.
            if collection != "chains":
                return None
            parts.append(f"c{index}")
            expect = "devices"
        elif collection in _CHAIN_PREFIXES:
            parts.append(f"{_CHAIN_PREFIXES[collection]}{index}")
            expect = "devices"
        elif collection == "drum_pads":
            note = midi_to_note_name(index)
            if note is None:
                return None
            parts.append(f"p{note}")
            expect = "pad_chains"
        else:
            return None
        idx += 2

    return SEPARATOR.join(parts)


def build_chain_path(device_path: str, chain_index: int) -> str:
    return f"{device_path}{SEPARATOR}c{int(chain_index)}"


def build_return_chain_path(device_path: str, chain_index: int) -> str:
    return f"{device_path}{SEPARATOR}rc{int(chain_index)}"


def build_drum_pad_path(device_path: str, note: str, chain_index: int | None = None) -> str:
    path = f"{device_path}{SEPARATOR}p{note}"
    if chain_index is None:
        return path
    return f"{path}{SEPARATOR}c{int(chain_index)}"


def build_drum_chain_path(device_path: str, in_note: int, index_within_note: int) -> str:
    """Path of the Nth chain in the note group for ``in_note``.

    Catch-all chains and notes without a name fall back to ``p*``.
    """
    note = None if in_note == CATCH_ALL_NOTE else midi_to_note_name(in_note)
    return build_drum_pad_path(device_path, note or CATCH_ALL, index_within_note)
