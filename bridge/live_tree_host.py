#!/usr/bin/env python3
"""Tree host backed by the LiveAPI through the Max for Live UDP bridge.

Node references are LiveAPI path strings such as
``live_set tracks 0 devices 1 chains 0``; every host call is one
``/api/*`` request and one ack.
"""

from __future__ import annotations

import json
import secrets
import socket
from typing import Any, List, Mapping, Sequence

import ableton_udp_bridge as bridge
from device_paths.grammar import TrackKind


DEFAULT_HOST = bridge.DEFAULT_HOST
DEFAULT_PORT = bridge.DEFAULT_PORT
DEFAULT_ACK_PORT = bridge.DEFAULT_ACK_PORT
DEFAULT_ACK_TIMEOUT_S = 1.0

LIVE_SET = "live_set"


def _request_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(3)}"


def _decode_jsonish(value: object) -> object:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return value
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return value
    if isinstance(parsed, str):
        inner = parsed.strip()
        if inner.startswith("{") or inner.startswith("["):
            try:
                return json.loads(inner)
            except json.JSONDecodeError:
                return parsed
    return parsed


def _scalar(value: object | None) -> object | None:
    if isinstance(value, list):
        if not value:
            return None
        return value[-1]
    return value


def _as_int(value: object | None, fallback: int | None = None) -> int | None:
    target = _scalar(value)
    if target is None:
        return fallback
    try:
        return int(float(target))
    except (TypeError, ValueError):
        return fallback


class LiveApiClient:
    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        ack_port: int = DEFAULT_ACK_PORT,
        ack_timeout_s: float = DEFAULT_ACK_TIMEOUT_S,
    ):
        self._target = (host, port)
        self._ack_timeout_s = ack_timeout_s
        ack_sock = bridge.open_ack_socket(host, ack_port)
        if ack_sock is None:
            raise RuntimeError(f"ack port {ack_port} is unavailable; is another bridge client running?")
        self._ack_sock = ack_sock
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def close(self) -> None:
        try:
            self._ack_sock.close()
        finally:
            self._sock.close()

    def _send(self, command: bridge.OscCommand) -> List[bridge.OscAck]:
        # Late acks from an earlier timed-out request must not be matched here.
        bridge.drain_acks(self._ack_sock)
        payload = bridge.encode_osc_message(command.address, command.args)
        self._sock.sendto(payload, self._target)
        return bridge.wait_for_acks(self._ack_sock, self._ack_timeout_s)

    def _extract_event_args(
        self,
        *,
        acks: Sequence[bridge.OscAck],
        event_name: str,
        request_id: str,
    ) -> List[bridge.OscArg]:
        for address, args in acks:
            if address != "/ack" or not args:
                continue
            head = str(args[0])
            if head == "error" and len(args) >= 2 and str(args[-1]) == request_id:
                detail = " ".join(str(a) for a in args[1:-1])
                raise RuntimeError(f"bridge error for {request_id}: {detail}")
            if head == event_name and str(args[-1]) == request_id:
                return list(args)
        raise RuntimeError(f"missing ack event '{event_name}' for request_id={request_id}")

    def _request(self, event_name: str, address: str, *args: bridge.OscArg) -> List[bridge.OscArg]:
        request_id = _request_id(event_name.split("_", 1)[-1])
        command = bridge.OscCommand(address, (*args, request_id))
        acks = self._send(command)
        try:
            return self._extract_event_args(acks=acks, event_name=event_name, request_id=request_id)
        except RuntimeError as exc:
            raise RuntimeError(f"{exc} (sent: {bridge.describe_command(command)})") from exc

    def api_get(self, path: str, prop: str) -> object:
        args = self._request("api_get", "/api/get", path, prop)
        return _decode_jsonish(args[3]) if len(args) >= 5 else None

    def api_set(self, path: str, prop: str, value: object) -> object:
        args = self._request("api_set", "/api/set", path, prop, json.dumps(value))
        return _decode_jsonish(args[3]) if len(args) >= 5 else None

    def api_call(self, path: str, method: str, args_payload: object) -> object:
        args = self._request("api_call", "/api/call", path, method, json.dumps(args_payload))
        return _decode_jsonish(args[3]) if len(args) >= 5 else None

    def api_children(self, path: str, child_name: str) -> List[dict[str, Any]]:
        args = self._request("api_children", "/api/children", path, child_name)
        if len(args) < 5:
            return []
        payload = _decode_jsonish(args[3])
        if not isinstance(payload, list):
            return []
        return [dict(item) for item in payload if isinstance(item, Mapping)]

    def api_describe(self, path: str) -> dict[str, Any]:
        args = self._request("api_describe", "/api/describe", path)
        if len(args) < 4:
            return {}
        payload = _decode_jsonish(args[2])
        return dict(payload) if isinstance(payload, Mapping) else {}


class LiveTreeHost:
    """Tree host whose node references are LiveAPI paths."""

    def __init__(self, client: LiveApiClient):
        self._client = client

    def get_track(self, kind: TrackKind, index: int | None) -> str | None:
        if kind == "master":
            return f"{LIVE_SET} master_track"
        if index is None:
            return None
        collection = "tracks" if kind == "regular" else "return_tracks"
        return f"{LIVE_SET} {collection} {index}"

    def get_children(self, node: str, collection: str) -> List[str]:
        children: List[str] = []
        for position, item in enumerate(self._client.api_children(node, collection)):
            path = str(item.get("path") or "").strip()
            if not path:
                index = _as_int(item.get("index"), fallback=position)
                path = f"{node} {collection} {index}"
            children.append(path)
        return children

    def get_property(self, node: str, name: str) -> Any:
        return _scalar(self._client.api_get(node, name))

    def set_property(self, node: str, name: str, value: Any) -> None:
        self._client.api_set(node, name, value)

    def invoke(self, node: str, method: str) -> Any:
        return self._client.api_call(node, method, [])

    def exists(self, node: str) -> bool:
        # LiveAPI reports id 0 for paths that do not point at an object.
        describe = self._client.api_describe(node)
        return (_as_int(describe.get("id"), 0) or 0) != 0

    def native_path(self, node: str) -> str | None:
        return node or None
