#!/usr/bin/env python3

__author__ = "MonoChip contributors"
__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"
__version__ = "0.3.0"

import sys
from argparse import ArgumentParser
from mchip import main
from mchip.constants import DEFAULT_CLOCK_SPEED, DEFAULT_KEYMAP, DEFAULT_FG_COLOUR, DEFAULT_BG_COLOUR, DEFAULT_SCALE


def parse_args(argv=None):
    parser = ArgumentParser()
    parser.add_argument("filename", help="ROM to execute (normally ending in .ch8 or .c8)")
    parser.add_argument(
        "-c", "--clock_speed", type=int,
        help="set the CPU speed in instructions/second (default {})".format(DEFAULT_CLOCK_SPEED)
    )
    parser.add_argument(
        "-r", "--renderer", choices=["pygame", "null"],
        help="set the rendering, input, and audio systems (pygame by default if available, otherwise null)"
    )
    parser.add_argument(
        "-s", "--scale", type=int,
        help="set the size of each emulated pixel in window pixels (default {})".format(DEFAULT_SCALE)
    )
    parser.add_argument(
        "-m", "--mute", type=int, choices=[0, 1], default=0,
        help="mute the emulated audio.  0 = unmuted (default), 1 = muted"
    )
    parser.add_argument(
        "-k", "--keymap", default=DEFAULT_KEYMAP,
        help="redefine the 16 keyscan codes for keypad symbols 0-F.  Separate each decimal with a comma"
    )
    parser.add_argument(
        "--fg_colour",
        help="set the lit pixel colour as 6 hex digits (default {})".format(DEFAULT_FG_COLOUR)
    )
    parser.add_argument(
        "--bg_colour",
        help="set the unlit pixel colour as 6 hex digits (default {})".format(DEFAULT_BG_COLOUR)
    )
    parser.add_argument(
        "--pixel_outlines", type=int, choices=[0, 1], default=1,
        help="draw outlines around each pixel.  0 = off, 1 = on (default)"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False,
        help="enable live debug output of every instruction executed.  Slows CPU execution"
    )
    return parser.parse_args(argv)  # Can call sys.exit(2) if args are incorrect


def cli():
    # It is possible to start the emulator from a GUI by calling main with a dictionary
    return main(vars(parse_args()))


if __name__ == "__main__":
    sys.exit(cli())
