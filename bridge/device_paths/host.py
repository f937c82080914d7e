"""The tree host a device path is resolved against.

Node references are opaque to the resolver; only the host knows what they are
(LiveAPI paths for the bridge host, in-memory nodes for snapshots).
"""

from __future__ import annotations

from typing import Any, List, Protocol

from device_paths.grammar import TrackKind


DEVICES = "devices"
CHAINS = "chains"
RETURN_CHAINS = "return_chains"

IN_NOTE = "in_note"
CAN_HAVE_CHAINS = "can_have_chains"
CAN_HAVE_DRUM_PADS = "can_have_drum_pads"

INSERT_CHAIN = "insert_chain"

NodeRef = Any


class TreeHost(Protocol):
    def get_track(self, kind: TrackKind, index: int | None) -> NodeRef | None: ...

    def get_children(self, node: NodeRef, collection: str) -> List[NodeRef]: ...

    def get_property(self, node: NodeRef, name: str) -> Any: ...

    def set_property(self, node: NodeRef, name: str, value: Any) -> None: ...

    def invoke(self, node: NodeRef, method: str) -> Any: ...

    def exists(self, node: NodeRef) -> bool: ...

    def native_path(self, node: NodeRef) -> str | None: ...


def child_at(host: TreeHost, node: NodeRef, collection: str, index: int) -> NodeRef | None:
    if index < 0:
        return None
    children = host.get_children(node, collection)
    if index >= len(children):
        return None
    return children[index]


def int_property(host: TreeHost, node: NodeRef, name: str) -> int | None:
    value = host.get_property(node, name)
    if isinstance(value, (list, tuple)):
        value = value[-1] if value else None
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def flag_property(host: TreeHost, node: NodeRef, name: str) -> bool:
    return bool(int_property(host, node, name) or 0)
