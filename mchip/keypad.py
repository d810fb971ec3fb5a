#!/usr/bin/env python3

"""
Hex Keypad

Holds the held/released state of the 16 keypad symbols.  Host input plugins
push press and release events in here, and the CPU only ever reads it.

Programs sometimes look up a register value above 0xF as a key.  Such keys are
simply reported as not held.
"""

__copyright__ = "Copyright (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from .constants import KEY_COUNT


class KeypadError(Exception):
    pass


class Keypad:
    def __init__(self):
        self.key_down = [False] * KEY_COUNT

    def _check_key(self, key):
        if not 0 <= key < KEY_COUNT:
            raise KeypadError("Keypad symbol 0x{:x} is out of range".format(key))

    def set_key(self, key, down):
        self._check_key(key)
        self.key_down[key] = bool(down)

    def press(self, key):
        self.set_key(key, True)

    def release(self, key):
        self.set_key(key, False)

    def release_all(self):
        self.key_down = [False] * KEY_COUNT

    def is_key_down(self, key):
        if 0 <= key < KEY_COUNT:
            return self.key_down[key]

        return False

    def first_pressed(self):
        # Lowest symbol wins when several keys are held, and 0xF is included in the scan
        for key, down in enumerate(self.key_down):
            if down:
                return key

        return None

    def get_keys(self):
        return list(self.key_down)
