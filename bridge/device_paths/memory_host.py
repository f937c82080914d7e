"""In-memory tree host, loadable from a JSON snapshot of a Live set."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from device_paths.grammar import TrackKind
from device_paths.host import (
    CAN_HAVE_CHAINS,
    CAN_HAVE_DRUM_PADS,
    CHAINS,
    DEVICES,
    IN_NOTE,
    INSERT_CHAIN,
    RETURN_CHAINS,
)
from device_paths.pitch import CATCH_ALL_NOTE


NODE_COLLECTIONS = (DEVICES, CHAINS, RETURN_CHAINS)


class MemoryNode:
    def __init__(
        self,
        name: str = "",
        type: str = "",
        properties: Mapping[str, Any] | None = None,
    ):
        self.name = name
        self.type = type
        self.properties: Dict[str, Any] = dict(properties or {})
        self.children: Dict[str, List[MemoryNode]] = {}
        self.parent: MemoryNode | None = None
        self.parent_collection: str | None = None
        self.root_path: str | None = None

    def add(self, collection: str, node: "MemoryNode") -> "MemoryNode":
        node.parent = self
        node.parent_collection = collection
        self.children.setdefault(collection, []).append(node)
        return node

    def device(self, name: str = "", type: str = "", **properties: Any) -> "MemoryNode":
        return self.add(DEVICES, MemoryNode(name, type, properties))

    def chain(self, name: str = "", **properties: Any) -> "MemoryNode":
        return self.add(CHAINS, MemoryNode(name, "Chain", properties))

    def return_chain(self, name: str = "", **properties: Any) -> "MemoryNode":
        return self.add(RETURN_CHAINS, MemoryNode(name, "Chain", properties))

    def live_path(self) -> str | None:
        if self.root_path is not None:
            return self.root_path
        if self.parent is None or self.parent_collection is None:
            return None
        parent_path = self.parent.live_path()
        if parent_path is None:
            return None
        index = self.parent.children[self.parent_collection].index(self)
        return f"{parent_path} {self.parent_collection} {index}"

    def __repr__(self) -> str:
        return f"MemoryNode({self.name!r}, path={self.live_path()!r})"


def rack(name: str = "Rack", *, drum: bool = False) -> MemoryNode:
    properties = {CAN_HAVE_CHAINS: 1, CAN_HAVE_DRUM_PADS: 1 if drum else 0}
    return MemoryNode(name, "DrumGroupDevice" if drum else "InstrumentGroupDevice", properties)


class MemoryTreeHost:
    def __init__(
        self,
        tracks: Sequence[MemoryNode] = (),
        return_tracks: Sequence[MemoryNode] = (),
        master_track: MemoryNode | None = None,
    ):
        self.tracks: List[MemoryNode] = []
        self.return_tracks: List[MemoryNode] = []
        self.master_track = master_track or MemoryNode("Master", "MasterTrack")
        self.master_track.root_path = "live_set master_track"
        for track in tracks:
            self.add_track(track)
        for track in return_tracks:
            self.add_track(track, kind="return")

    def add_track(self, track: MemoryNode | None = None, *, kind: TrackKind = "regular") -> MemoryNode:
        node = track or MemoryNode(type="Track")
        if kind == "master":
            node.root_path = "live_set master_track"
            self.master_track = node
            return node
        target = self.return_tracks if kind == "return" else self.tracks
        collection = "return_tracks" if kind == "return" else "tracks"
        node.root_path = f"live_set {collection} {len(target)}"
        target.append(node)
        return node

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "MemoryTreeHost":
        tracks = [_node_from_mapping(item) for item in payload.get("tracks", []) or []]
        returns = [_node_from_mapping(item) for item in payload.get("return_tracks", []) or []]
        master_payload = payload.get("master_track")
        master = _node_from_mapping(master_payload) if isinstance(master_payload, Mapping) else None
        return cls(tracks=tracks, return_tracks=returns, master_track=master)

    @classmethod
    def load(cls, path: Path) -> "MemoryTreeHost":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, Mapping):
            raise ValueError(f"invalid tree snapshot (expected an object): {path}")
        return cls.from_mapping(payload)

    def get_track(self, kind: TrackKind, index: int | None) -> MemoryNode | None:
        if kind == "master":
            return self.master_track
        target = self.return_tracks if kind == "return" else self.tracks
        if index is None or not 0 <= index < len(target):
            return None
        return target[index]

    def get_children(self, node: MemoryNode, collection: str) -> List[MemoryNode]:
        return list(node.children.get(collection, []))

    def get_property(self, node: MemoryNode, name: str) -> Any:
        return node.properties.get(name)

    def set_property(self, node: MemoryNode, name: str, value: Any) -> None:
        node.properties[name] = value

    def invoke(self, node: MemoryNode, method: str) -> MemoryNode:
        if method != INSERT_CHAIN:
            raise RuntimeError(f"unsupported method '{method}' on {node!r}")
        chain = MemoryNode(type="Chain")
        if node.properties.get(CAN_HAVE_DRUM_PADS):
            chain.type = "DrumChain"
            chain.properties[IN_NOTE] = CATCH_ALL_NOTE
        return node.add(CHAINS, chain)

    def exists(self, node: object) -> bool:
        return isinstance(node, MemoryNode)

    def native_path(self, node: MemoryNode) -> str | None:
        return node.live_path()


def _node_from_mapping(payload: Mapping[str, Any]) -> MemoryNode:
    if not isinstance(payload, Mapping):
        raise ValueError(f"invalid tree snapshot node: {payload!r}")
    properties = payload.get("properties") or {}
    if not isinstance(properties, Mapping):
        raise ValueError(f"invalid properties for node {payload.get('name')!r}")
    node = MemoryNode(str(payload.get("name", "")), str(payload.get("type", "")), properties)
    for collection in NODE_COLLECTIONS:
        for child in payload.get(collection, []) or []:
            node.add(collection, _node_from_mapping(child))
    return node
