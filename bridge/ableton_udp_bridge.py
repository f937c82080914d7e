#!/usr/bin/env python3
"""
OSC over UDP transport for the Ableton Live bridge.

The Max for Live bridge device listens with `udpreceive 9000` and answers on
port 9001 with `/ack <event> ... <request_id>` messages. OSC encoding is
implemented using only the Python standard library.
"""

from __future__ import annotations

import select
import socket
import struct
import sys
import time
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9000
DEFAULT_ACK_PORT = 9001

OscArg = Union[int, float, str]
OscAck = Tuple[str, List[OscArg]]


@dataclass(frozen=True)
class OscCommand:
    address: str
    args: Tuple[OscArg, ...] = ()


def _pad4(length: int) -> int:
    remainder = length % 4
    return 0 if remainder == 0 else 4 - remainder


def _encode_osc_string(value: str) -> bytes:
    raw = value.encode("utf-8") + b"\x00"
    return raw + b"\x00" * _pad4(len(raw))


def _decode_osc_string(data: bytes, start: int) -> Tuple[str, int]:
    end = data.find(b"\x00", start)
    if end == -1:
        # Some senders omit the trailing NUL on the final string.
        return data[start:].decode("utf-8", errors="replace"), len(data)
    text = data[start:end].decode("utf-8", errors="replace")
    idx = end + 1
    return text, idx + _pad4(idx)


def encode_osc_message(address: str, args: Sequence[OscArg]) -> bytes:
    if not address.startswith("/"):
        raise ValueError(f"OSC address must start with '/': {address}")

    type_tags: List[str] = []
    payload = bytearray()
    for arg in args:
        if isinstance(arg, (bool, int)):
            type_tags.append("i")
            payload.extend(struct.pack(">i", int(arg)))
        elif isinstance(arg, float):
            type_tags.append("f")
            payload.extend(struct.pack(">f", arg))
        elif isinstance(arg, str):
            type_tags.append("s")
            payload.extend(_encode_osc_string(arg))
        else:
            raise TypeError(f"Unsupported OSC argument type: {type(arg)}")

    return _encode_osc_string(address) + _encode_osc_string("," + "".join(type_tags)) + bytes(payload)


def decode_osc_message(data: bytes) -> OscAck:
    if data.startswith(b"#bundle"):
        raise ValueError("OSC bundles are not supported by this minimal decoder")

    address, idx = _decode_osc_string(data, 0)
    type_tags, idx = _decode_osc_string(data, idx)
    if not type_tags.startswith(","):
        raise ValueError(f"OSC type tags must start with ',': {type_tags}")

    args: List[OscArg] = []
    for tag in type_tags[1:]:
        if tag in ("i", "f"):
            if idx + 4 > len(data):
                raise ValueError(f"OSC {'int' if tag == 'i' else 'float'} argument truncated")
            args.append(struct.unpack(">" + tag, data[idx : idx + 4])[0])
            idx += 4
        elif tag == "s":
            value, idx = _decode_osc_string(data, idx)
            args.append(value)
        else:
            raise ValueError(f"Unsupported OSC type tag: {tag}")
    return address, args


def describe_command(cmd: OscCommand) -> str:
    if not cmd.args:
        return cmd.address
    parts = [f"{arg:g}" if isinstance(arg, float) else str(arg) for arg in cmd.args]
    return cmd.address + " " + " ".join(parts)


def open_ack_socket(host: str, ack_port: int) -> socket.socket | None:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((host, ack_port))
    except OSError as exc:
        print(f"warning: could not bind ack socket on {host}:{ack_port}: {exc}", file=sys.stderr)
        sock.close()
        return None
    sock.setblocking(False)
    return sock


def _read_packets(sock: socket.socket) -> Tuple[List[OscAck], bool]:
    received: List[OscAck] = []
    while True:
        try:
            packet, _addr = sock.recvfrom(65535)
        except BlockingIOError:
            return received, True
        except OSError:
            return received, False
        try:
            received.append(decode_osc_message(packet))
        except (ValueError, struct.error) as exc:
            received.append(("<unparsed>", [f"{exc}: {packet!r}"]))


def drain_acks(sock: socket.socket) -> List[OscAck]:
    drained, _ok = _read_packets(sock)
    return drained


def wait_for_acks(
    sock: socket.socket,
    timeout_s: float,
    quiet_window_s: float = 0.05,
) -> List[OscAck]:
    if timeout_s <= 0:
        return []

    deadline = time.monotonic() + timeout_s
    received: List[OscAck] = []
    quiet_window = max(0.0, float(quiet_window_s))

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        # Wait the full timeout for the first packet, then only a short
        # quiet window for follow-on packets.
        wait_timeout = remaining
        if received and quiet_window > 0.0:
            wait_timeout = min(wait_timeout, quiet_window)

        readable, _, _ = select.select([sock], [], [], wait_timeout)
        if not readable:
            break

        packets, ok = _read_packets(sock)
        received.extend(packets)
        if not ok:
            break

    return received
