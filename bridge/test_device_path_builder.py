#!/usr/bin/env python3
"""Unit tests for LiveAPI path extraction and path builders."""

from __future__ import annotations

import pathlib
import sys
import unittest

sys.path.append(str(pathlib.Path(__file__).resolve().parent))

from device_paths.builder import (
    build_chain_path,
    build_drum_chain_path,
    build_drum_pad_path,
    build_return_chain_path,
    extract_device_path,
)


class ExtractDevicePathTests(unittest.TestCase):
    def test_extracts_nested_paths(self) -> None:
        self.assertEqual(extract_device_path("live_set tracks 1 devices 0 chains 2 devices 1"), "t1/d0/c2/d1")
        self.assertEqual(extract_device_path("live_set return_tracks 0 devices 3"), "rt0/d3")
        self.assertEqual(extract_device_path("live_set master_track devices 0 return_chains 1"), "mt/d0/rc1")

    def test_extracts_track_only_paths(self) -> None:
        self.assertEqual(extract_device_path("live_set tracks 4"), "t4")
        self.assertEqual(extract_device_path("live_set master_track"), "mt")

    def test_drum_pad_hops_become_note_segments(self) -> None:
        self.assertEqual(
            extract_device_path("live_set tracks 0 devices 0 drum_pads 36 chains 1 devices 0"),
            "t0/d0/pC1/c1/d0",
        )

    def test_rejects_foreign_paths(self) -> None:
        for live_path in (
            "",
            "live_set",
            "live_set tracks",
            "live_set tracks x",
            "live_set scenes 0",
            "live_set tracks 0 clip_slots 0",
            "live_set tracks 0 devices",
            "live_set tracks 0 devices 0 devices 1",
            "live_set tracks 0 devices 0 drum_pads 200",
            "live_set tracks 0 devices 0 drum_pads 36 return_chains 0",
            "song tracks 0",
            None,
        ):
            with self.subTest(live_path=live_path):
                self.assertIsNone(extract_device_path(live_path))


class BuilderTests(unittest.TestCase):
    def test_chain_builders(self) -> None:
        self.assertEqual(build_chain_path("t0/d1", 2), "t0/d1/c2")
        self.assertEqual(build_return_chain_path("t0/d1", 0), "t0/d1/rc0")

    def test_drum_pad_builders(self) -> None:
        self.assertEqual(build_drum_pad_path("t0/d0", "C1"), "t0/d0/pC1")
        self.assertEqual(build_drum_pad_path("t0/d0", "C1", 1), "t0/d0/pC1/c1")

    def test_drum_chain_path_names_the_note_group(self) -> None:
        self.assertEqual(build_drum_chain_path("t0/d0", 36, 0), "t0/d0/pC1/c0")
        self.assertEqual(build_drum_chain_path("t0/d0", 38, 2), "t0/d0/pD1/c2")

    def test_drum_chain_path_catch_all(self) -> None:
        self.assertEqual(build_drum_chain_path("t0/d0", -1, 0), "t0/d0/p*/c0")
        self.assertEqual(build_drum_chain_path("t0/d0", 300, 1), "t0/d0/p*/c1")


if __name__ == "__main__":
    unittest.main()
