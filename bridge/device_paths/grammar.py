"""Compact device path grammar.

    path     := track ("/" segment)*
    track    := "t" <uint> | "rt" <uint> | "mt"
    segment  := "d" <uint> | "c" <uint> | "rc" <uint> | "p" (<noteName> | "*")

Devices and chains alternate. A drum pad segment takes the place of a chain
and captures every later token verbatim, because those tokens are indexed
against the note group found at resolution time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Literal, Sequence, Tuple, Union

from device_paths.errors import MalformedPath


TrackKind = Literal["regular", "return", "master"]

SEPARATOR = "/"
CATCH_ALL = "*"

_UINT_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class TrackSegment:
    kind: TrackKind
    index: int | None = None

    def __str__(self) -> str:
        if self.kind == "master":
            return "mt"
        prefix = "rt" if self.kind == "return" else "t"
        return f"{prefix}{self.index}"


@dataclass(frozen=True)
class DeviceSegment:
    index: int

    def __str__(self) -> str:
        return f"d{self.index}"


@dataclass(frozen=True)
class ChainSegment:
    index: int

    def __str__(self) -> str:
        return f"c{self.index}"


@dataclass(frozen=True)
class ReturnChainSegment:
    index: int

    def __str__(self) -> str:
        return f"rc{self.index}"


@dataclass(frozen=True)
class DrumPadSegment:
    note: str
    remaining_segments: Tuple[str, ...] = ()

    @property
    def is_catch_all(self) -> bool:
        return self.note == CATCH_ALL

    def __str__(self) -> str:
        return SEPARATOR.join((f"p{self.note}",) + tuple(self.remaining_segments))


PathSegment = Union[TrackSegment, DeviceSegment, ChainSegment, ReturnChainSegment, DrumPadSegment]


def parse_uint(token: str, prefix: str) -> int | None:
    """Return the non-negative integer after ``prefix`` or None."""
    if not token.startswith(prefix):
        return None
    digits = token[len(prefix) :]
    if not _UINT_RE.fullmatch(digits):
        return None
    return int(digits)


def _index(path: str, token: str, prefix: str, label: str) -> int:
    value = parse_uint(token, prefix)
    if value is None:
        raise MalformedPath(path, f"invalid {label} index in segment '{token}'")
    return value


def _parse_track(path: str, token: str) -> TrackSegment:
    if token == "mt":
        return TrackSegment("master")
    if token.startswith("rt"):
        return TrackSegment("return", _index(path, token, "rt", "return track"))
    if token.startswith("t"):
        return TrackSegment("regular", _index(path, token, "t", "track"))
    raise MalformedPath(path, f"invalid track segment '{token}'")


def parse_path(path: object) -> List[PathSegment]:
    if not isinstance(path, str) or not path.strip():
        raise MalformedPath(path, "path must be a non-empty string")

    text = path.strip()
    tokens = text.split(SEPARATOR)
    if any(token == "" for token in tokens):
        raise MalformedPath(text, "empty segment")

    segments: List[PathSegment] = [_parse_track(text, tokens[0])]
    expect = "device"

    for pos, token in enumerate(tokens[1:], start=1):
        if token.startswith("rt") or token.startswith("t") or token == "mt":
            raise MalformedPath(text, f"track segment '{token}' must come first")

        if token.startswith("d"):
            if expect != "device":
                raise MalformedPath(text, f"expected a chain or drum pad before '{token}'")
            segments.append(DeviceSegment(_index(text, token, "d", "device")))
            expect = "chain"
        elif token.startswith("rc"):
            if expect != "chain":
                raise MalformedPath(text, f"expected a device before '{token}'")
            segments.append(ReturnChainSegment(_index(text, token, "rc", "return chain")))
            expect = "device"
        elif token.startswith("c"):
            if expect != "chain":
                raise MalformedPath(text, f"expected a device before '{token}'")
            segments.append(ChainSegment(_index(text, token, "c", "chain")))
            expect = "device"
        elif token.startswith("p"):
            if expect != "chain":
                raise MalformedPath(text, f"expected a device before '{token}'")
            note = token[1:]
            if not note:
                raise MalformedPath(text, "invalid drum pad note: note is empty")
            segments.append(DrumPadSegment(note, tuple(tokens[pos + 1 :])))
            break
        else:
            raise MalformedPath(text, f"unknown segment '{token}'")

    return segments


def format_path(segments: Sequence[PathSegment]) -> str:
    return SEPARATOR.join(str(segment) for segment in segments)


def is_legacy_path(path: str) -> bool:
    head = path.strip().split(SEPARATOR, 1)[0]
    return bool(_UINT_RE.fullmatch(head))


def translate_legacy_path(path: str) -> str:
    """Rewrite a positional path (``0/0/1/2``, ``0/0/pC1/0``) to prefixed form.

    Positional tokens alternate device/chain by depth; inside a drum pad they
    alternate chain/device. Paths that are already prefixed are returned as-is.
    """
    text = str(path).strip()
    if not is_legacy_path(text):
        return text

    tokens = text.split(SEPARATOR)
    out = [f"t{int(tokens[0])}"]
    expect = "device"
    for token in tokens[1:]:
        if expect == "chain" and token.startswith("p") and len(token) > 1:
            out.append(token)
            continue
        if not _UINT_RE.fullmatch(token):
            raise MalformedPath(text, f"invalid positional segment '{token}'")
        if expect == "device":
            out.append(f"d{int(token)}")
            expect = "chain"
        else:
            out.append(f"c{int(token)}")
            expect = "device"
    return SEPARATOR.join(out)
