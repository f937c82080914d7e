from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from device_paths.host import NodeRef


TargetKind = Literal["device", "chain", "return-chain", "drum-pad-chain"]
MissingKind = Literal["chain", "return-chain", "drum-pad"]


@dataclass(frozen=True)
class ResolvedTarget:
    node: NodeRef | None
    kind: TargetKind

    @property
    def ok(self) -> bool:
        return self.node is not None


@dataclass(frozen=True)
class MissingChain:
    """First chain a walk could not find, with what is needed to create it."""

    device: NodeRef
    kind: MissingKind
    index: int
    available: int
    is_last: bool
    note: int | None = None


@dataclass(frozen=True)
class Walk:
    target: ResolvedTarget
    missing: MissingChain | None = None


def not_found(kind: TargetKind, missing: MissingChain | None = None) -> Walk:
    return Walk(ResolvedTarget(None, kind), missing)


def found(node: NodeRef, kind: TargetKind) -> Walk:
    return Walk(ResolvedTarget(node, kind))
