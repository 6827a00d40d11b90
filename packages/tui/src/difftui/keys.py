"""
Keyboard input handling for legacy (xterm/VT) terminal sequences.

API:
- matches_key(data, key_id) — check if input matches a key identifier
- parse_key(data) — parse input and return the key identifier string
- parse_mouse(data) — decode an SGR (1006) mouse report
- split_sequences(data) — split a raw input chunk into single key sequences

Key identifiers are strings such as "up", "pageDown", "enter", "ctrl+c"
or a single printable character ("j", "q").
"""
from __future__ import annotations

import re
from dataclasses import dataclass

ESC = "\x1b"

KeyId = str

# ─────────────────────────────────────────────────────────────────────────────
# Legacy sequences
# ─────────────────────────────────────────────────────────────────────────────

_LEGACY_KEY_SEQS: dict[str, list[str]] = {
    "up":       ["\x1b[A", "\x1bOA"],
    "down":     ["\x1b[B", "\x1bOB"],
    "right":    ["\x1b[C", "\x1bOC"],
    "left":     ["\x1b[D", "\x1bOD"],
    "home":     ["\x1b[H", "\x1bOH", "\x1b[1~", "\x1b[7~"],
    "end":      ["\x1b[F", "\x1bOF", "\x1b[4~", "\x1b[8~"],
    "delete":   ["\x1b[3~"],
    "pageUp":   ["\x1b[5~", "\x1b[[5~"],
    "pageDown": ["\x1b[6~", "\x1b[[6~"],
}

_LEGACY_SEQ_KEY_IDS: dict[str, str] = {
    seq: key for key, seqs in _LEGACY_KEY_SEQS.items() for seq in seqs
}

_SIMPLE_KEYS: dict[str, list[str]] = {
    "escape":    [ESC],
    "enter":     ["\r", "\n", "\x1bOM"],
    "tab":       ["\t"],
    "space":     [" "],
    "backspace": ["\x7f", "\x08"],
}


def _raw_ctrl_char(key: str) -> str | None:
    """Get control character for key (ctrl+a → chr(1), etc.)."""
    if len(key) != 1:
        return None
    code = ord(key.lower())
    if 97 <= code <= 122 or key in ("[", "\\", "]", "_"):
        return chr(code & 0x1f)
    return None


def matches_key(data: str, key_id: KeyId) -> bool:
    """Check if *data* (raw terminal input) matches the given key identifier."""
    if not key_id:
        return False

    # Single printable characters are matched literally ("j", "C", "?")
    if len(key_id) == 1:
        return data == key_id

    parts = key_id.split("+")
    key = parts[-1]
    mods = {p.lower() for p in parts[:-1]}

    if mods == {"ctrl"}:
        raw = _raw_ctrl_char(key)
        return raw is not None and data == raw
    if mods:
        return False

    if key in ("esc", "escape"):
        return data in _SIMPLE_KEYS["escape"]
    if key == "return":
        key = "enter"
    if key in _SIMPLE_KEYS:
        return data in _SIMPLE_KEYS[key]
    return data in _LEGACY_KEY_SEQS.get(key, ())


def parse_key(data: str) -> str | None:
    """Parse raw terminal input and return a key identifier string, or None."""
    seq_id = _LEGACY_SEQ_KEY_IDS.get(data)
    if seq_id:
        return seq_id
    for key, seqs in _SIMPLE_KEYS.items():
        if data in seqs:
            return key
    if len(data) == 1:
        code = ord(data)
        if 1 <= code <= 26:
            return f"ctrl+{chr(code + 96)}"
        if code >= 32 and code != 127:
            return data
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Mouse
# ─────────────────────────────────────────────────────────────────────────────

_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")

_MOUSE_BUTTONS = ("left", "middle", "right", "left")


@dataclass(frozen=True)
class MouseEvent:
    """
    A decoded mouse report.

    button is "left", "middle", "right", "wheelUp" or "wheelDown"; action is
    "press", "release" or "drag". x and y are 0-based screen cells.
    """

    button: str
    action: str
    x: int
    y: int


def parse_mouse(data: str) -> MouseEvent | None:
    """Decode ``ESC [ < code ; x ; y (M|m)``; None for anything else."""
    m = _SGR_MOUSE_RE.match(data)
    if not m:
        return None
    code = int(m.group(1))
    if code & 64:
        button = "wheelUp" if code & 1 == 0 else "wheelDown"
    else:
        button = _MOUSE_BUTTONS[code & 3]
    if code & 32:
        action = "drag"
    elif m.group(4) == "M":
        action = "press"
    else:
        action = "release"
    return MouseEvent(button, action, int(m.group(2)) - 1, int(m.group(3)) - 1)


# ─────────────────────────────────────────────────────────────────────────────
# Input splitting
# ─────────────────────────────────────────────────────────────────────────────

def _sequence_length(buffer: str, pos: int) -> int:
    """Length of the escape sequence starting at *pos* (1 for a bare ESC)."""
    if pos + 1 >= len(buffer):
        return 1
    nxt = buffer[pos + 1]
    if nxt == "O":
        return min(3, len(buffer) - pos)
    if nxt != "[":
        # Alt+key or a lone escape followed by ordinary input
        return 1 if nxt == ESC else 2
    j = pos + 2
    # "\x1b[[5~" style (rxvt)
    if j < len(buffer) and buffer[j] == "[":
        j += 1
    while j < len(buffer):
        if 0x40 <= ord(buffer[j]) <= 0x7e:
            return j + 1 - pos
        j += 1
    return len(buffer) - pos


def split_sequences(data: str) -> list[str]:
    """
    Split a chunk read from the terminal into individual key sequences.

    Holding a key down or pasting delivers several keys in one read, e.g.
    ``"jj\\x1b[B"`` → ``["j", "j", "\\x1b[B"]``.
    """
    sequences: list[str] = []
    pos = 0
    while pos < len(data):
        if data[pos] == ESC:
            length = _sequence_length(data, pos)
            sequences.append(data[pos:pos + length])
            pos += length
        else:
            sequences.append(data[pos])
            pos += 1
    return sequences
