#!/usr/bin/env python3
"""Unit tests for read-only device path resolution."""

from __future__ import annotations

import pathlib
import sys
import unittest

sys.path.append(str(pathlib.Path(__file__).resolve().parent))

from device_paths.builder import extract_device_path
from device_paths.grammar import parse_path
from device_paths.memory_host import MemoryNode, MemoryTreeHost, rack
from device_paths.resolver import resolve, resolve_path, walk


def _build_tree() -> MemoryTreeHost:
    host = MemoryTreeHost()
    host.add_track(MemoryNode("Audio"))
    keys = host.add_track(MemoryNode("Keys"))
    keys.device("Operator")
    instrument = keys.add("devices", rack("Instrument Rack"))
    layer = instrument.chain("Layer")
    layer.device("Wavetable")
    layer.device("Chorus")
    nested = layer.add("devices", rack("Nested"))
    nested.chain("Inner").device("Saturator")
    instrument.chain("Second")
    instrument.return_chain("Send").device("Delay")

    reverb = host.add_track(MemoryNode("A-Reverb"), kind="return")
    reverb.device("Reverb")
    host.master_track.device("Limiter")
    return host


class ResolverTests(unittest.TestCase):
    def setUp(self) -> None:
        self.host = _build_tree()

    def test_resolves_device(self) -> None:
        target = resolve_path(self.host, "t1/d0")
        self.assertTrue(target.ok)
        self.assertEqual(target.kind, "device")
        self.assertEqual(target.node.name, "Operator")

    def test_resolves_chain_and_nested_device(self) -> None:
        chain = resolve_path(self.host, "t1/d1/c0")
        self.assertEqual((chain.kind, chain.node.name), ("chain", "Layer"))
        inner = resolve_path(self.host, "t1/d1/c0/d2/c0/d0")
        self.assertEqual((inner.kind, inner.node.name), ("device", "Saturator"))

    def test_resolves_return_chain(self) -> None:
        target = resolve_path(self.host, "t1/d1/rc0")
        self.assertEqual((target.kind, target.node.name), ("return-chain", "Send"))
        self.assertEqual(resolve_path(self.host, "t1/d1/rc0/d0").node.name, "Delay")

    def test_return_and_master_tracks(self) -> None:
        self.assertEqual(resolve_path(self.host, "rt0/d0").node.name, "Reverb")
        self.assertEqual(resolve_path(self.host, "mt/d0").node.name, "Limiter")

    def test_track_only_path_resolves_to_track(self) -> None:
        target = resolve_path(self.host, "t1")
        self.assertEqual((target.kind, target.node.name), ("device", "Keys"))

    def test_missing_nodes_are_typed_nulls(self) -> None:
        cases = {
            "t9/d0": "device",
            "rt3": "device",
            "t1/d7": "device",
            "t0/d0": "device",
            "t1/d1/c5": "chain",
            "t1/d1/rc2": "return-chain",
            "t1/d0/c0": "chain",
        }
        for path, kind in cases.items():
            with self.subTest(path=path):
                target = resolve_path(self.host, path)
                self.assertFalse(target.ok)
                self.assertIsNone(target.node)
                self.assertEqual(target.kind, kind)

    def test_walk_reports_first_missing_chain(self) -> None:
        last = walk(self.host, parse_path("t1/d1/c4"))
        self.assertEqual(last.missing.index, 4)
        self.assertEqual(last.missing.available, 2)
        self.assertTrue(last.missing.is_last)
        self.assertEqual(last.missing.device.name, "Instrument Rack")

        deeper = walk(self.host, parse_path("t1/d1/c4/d0"))
        self.assertFalse(deeper.missing.is_last)

        self.assertIsNone(walk(self.host, parse_path("t1/d9")).missing)

    def test_walk_requires_track_first(self) -> None:
        with self.assertRaises(ValueError):
            walk(self.host, [])
        with self.assertRaises(ValueError):
            resolve(self.host, parse_path("t0/d0")[1:])

    def test_round_trip_through_extraction(self) -> None:
        for path in (
            "t1",
            "t1/d0",
            "t1/d1/c0",
            "t1/d1/c0/d1",
            "t1/d1/c0/d2/c0/d0",
            "t1/d1/c1",
            "t1/d1/rc0/d0",
            "rt0/d0",
            "mt/d0",
        ):
            with self.subTest(path=path):
                node = resolve(self.host, parse_path(path)).node
                self.assertEqual(extract_device_path(self.host.native_path(node)), path)


if __name__ == "__main__":
    unittest.main()
