#!/usr/bin/env python3
"""Unit tests for compact device path parsing."""

from __future__ import annotations

import pathlib
import sys
import unittest

sys.path.append(str(pathlib.Path(__file__).resolve().parent))

from device_paths.errors import DevicePathError, MalformedPath
from device_paths.grammar import (
    ChainSegment,
    DeviceSegment,
    DrumPadSegment,
    ReturnChainSegment,
    TrackSegment,
    format_path,
    is_legacy_path,
    parse_path,
    translate_legacy_path,
)


class ParsePathTests(unittest.TestCase):
    def test_parses_nested_device_chain_path(self) -> None:
        self.assertEqual(
            parse_path("t1/d0/c2/d1"),
            [TrackSegment("regular", 1), DeviceSegment(0), ChainSegment(2), DeviceSegment(1)],
        )

    def test_parses_return_and_master_tracks(self) -> None:
        self.assertEqual(parse_path("rt0/d2"), [TrackSegment("return", 0), DeviceSegment(2)])
        self.assertEqual(parse_path("mt/d0/rc1"), [TrackSegment("master"), DeviceSegment(0), ReturnChainSegment(1)])
        self.assertEqual(parse_path("mt"), [TrackSegment("master")])

    def test_drum_pad_captures_remaining_tokens(self) -> None:
        segments = parse_path("t0/d0/pC1/c1/d0/c0")
        self.assertEqual(segments[-1], DrumPadSegment("C1", ("c1", "d0", "c0")))
        self.assertEqual(len(segments), 3)

    def test_catch_all_drum_pad(self) -> None:
        pad = parse_path("t0/d0/p*")[-1]
        self.assertIsInstance(pad, DrumPadSegment)
        self.assertTrue(pad.is_catch_all)
        self.assertEqual(pad.remaining_segments, ())

    def test_drum_pad_note_is_not_validated_by_parser(self) -> None:
        self.assertEqual(parse_path("t0/d0/pX9")[-1], DrumPadSegment("X9"))

    def test_rejects_malformed_paths(self) -> None:
        for path in ("", "   ", "t0/x1", "t0/d-1", "t0/d0/p", "d0", "t0//d0", "t0/d0/", "t/d0", "t0/da"):
            with self.subTest(path=path):
                with self.assertRaises(MalformedPath):
                    parse_path(path)

    def test_rejects_broken_alternation(self) -> None:
        for path in ("t0/c0", "t0/d0/d1", "t0/d0/c0/c1", "t0/pC1", "t0/d0/t1"):
            with self.subTest(path=path):
                with self.assertRaises(MalformedPath):
                    parse_path(path)

    def test_malformed_path_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            parse_path("t0/x1")
        self.assertIsInstance(ctx.exception, DevicePathError)
        self.assertIn("unknown segment 'x1'", str(ctx.exception))

    def test_empty_note_message(self) -> None:
        with self.assertRaises(MalformedPath) as ctx:
            parse_path("t0/d0/p")
        self.assertIn("note is empty", ctx.exception.reason)

    def test_rejects_non_string(self) -> None:
        with self.assertRaises(MalformedPath):
            parse_path(None)

    def test_format_path_round_trips(self) -> None:
        for path in ("t0", "rt2/d1/c0/d3", "mt/d0/rc1/d0", "t0/d0/pC1/c1/d0/pD1/c0"):
            with self.subTest(path=path):
                self.assertEqual(format_path(parse_path(path)), path)


class LegacyPathTests(unittest.TestCase):
    def test_detects_positional_paths(self) -> None:
        self.assertTrue(is_legacy_path("0/0/1"))
        self.assertFalse(is_legacy_path("t0/d0"))

    def test_translates_device_chain_alternation(self) -> None:
        self.assertEqual(translate_legacy_path("0/0/1/2"), "t0/d0/c1/d2")
        self.assertEqual(translate_legacy_path("3"), "t3")

    def test_translates_drum_pad_paths(self) -> None:
        self.assertEqual(translate_legacy_path("0/0/pC1/0"), "t0/d0/pC1/c0")
        self.assertEqual(translate_legacy_path("1/0/pC1/0/0"), "t1/d0/pC1/c0/d0")
        self.assertEqual(translate_legacy_path("0/0/p*/1"), "t0/d0/p*/c1")

    def test_prefixed_paths_pass_through(self) -> None:
        self.assertEqual(translate_legacy_path("t0/d1"), "t0/d1")

    def test_rejects_unknown_positional_tokens(self) -> None:
        with self.assertRaises(MalformedPath):
            translate_legacy_path("0/x/1")


if __name__ == "__main__":
    unittest.main()
