"""Input-layer public API: chord decoding, binding table, edit field."""

from .bindings import ActionBinding, KeyChord, default_bindings
from .edit_field import EditField
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_chord

__all__ = [
    "ActionBinding",
    "EditField",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyChord",
    "default_bindings",
    "read_chord",
]
