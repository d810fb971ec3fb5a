#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading ROM binaries and the base system font for later writing into
RAM.  Any failure to read from the host is reported as a RomUnreadable error,
so the caller never has to deal with raw OS errors.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from os import path


class LoadError(Exception):
    pass


class RomTooLarge(LoadError):
    def __init__(self, rom_size, max_size):
        self.rom_size = rom_size
        self.max_size = max_size
        super().__init__("ROM is too big!  ROM size: {}, maximum size allowed: {}".format(rom_size, max_size))


class RomUnreadable(LoadError):
    def __init__(self, filename, reason):
        self.filename = filename
        self.reason = reason
        super().__init__("ROM file {} is invalid or could not be read ({})".format(filename, reason))


class Loader:
    def load_binary(self, filename):
        try:
            with open(filename, "rb") as f:
                return f.read()
        except OSError as e:
            raise RomUnreadable(filename, e.strerror or str(e)) from None

    def load_system_font(self, filename="small"):
        return self.load_binary(path.join(path.abspath(path.dirname(__file__)), "systemfonts", filename))
