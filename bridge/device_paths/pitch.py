"""Note name <-> MIDI conversion using Live's octave numbering (C3 = 60)."""

from __future__ import annotations

import re


CATCH_ALL_NOTE = -1

PITCH_CLASS_NAMES = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

NOTE_TO_PITCH_CLASS = {
    "C": 0,
    "C#": 1,
    "DB": 1,
    "D": 2,
    "D#": 3,
    "EB": 3,
    "E": 4,
    "F": 5,
    "F#": 6,
    "GB": 6,
    "G": 7,
    "G#": 8,
    "AB": 8,
    "A": 9,
    "A#": 10,
    "BB": 10,
    "B": 11,
}

_NOTE_NAME_RE = re.compile(r"^([A-Ga-g][#Bb]?)(-?\d+)$")


def is_valid_midi(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 127


def note_name_to_midi(name: object) -> int | None:
    if not isinstance(name, str):
        return None
    match = _NOTE_NAME_RE.match(name.strip())
    if match is None:
        return None
    pitch_class = NOTE_TO_PITCH_CLASS.get(match.group(1).upper())
    if pitch_class is None:
        return None
    midi = (int(match.group(2)) + 2) * 12 + pitch_class
    if not is_valid_midi(midi):
        return None
    return midi


def midi_to_note_name(midi: object) -> str | None:
    if not is_valid_midi(midi):
        return None
    octave = int(midi) // 12 - 2
    return f"{PITCH_CLASS_NAMES[int(midi) % 12]}{octave}"
