#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "MonoChip Emulator"
APP_VERSION = "0.3.0"
APP_COPYRIGHT = "Copyright (C) 2024 MonoChip contributors, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory layout.  Programs conventionally start at 0x200, and the glyph font sits at the very bottom of RAM.
MEM_SIZE = 0x1000
ENTRY_POINT = 0x200
FONT_LOC = 0x000
FONT_GLYPH_SIZE = 5
ADDR_MASK = 0xFFF

# 12 levels of subroutine nesting, as on the COSMAC VIP interpreter
STACK_DEPTH = 12

# Display
VID_WIDTH = 64
VID_HEIGHT = 32

# Hex keypad, symbols 0x0 - 0xF
KEY_COUNT = 0x10

# Timing
TIMER_FREQ = 60.0          # 60Hz delay/sound timers and frame ticks
FRAME_INTERVAL = 1.0 / TIMER_FREQ
DEFAULT_CLOCK_SPEED = 700  # Instructions per second

# Run states
STATE_RUNNING = 0
STATE_PAUSED = 1
STATE_HALTED = 2

STATE_NAMES = {
    STATE_RUNNING: "running",
    STATE_PAUSED:  "paused",
    STATE_HALTED:  "halted"
}

# Control events reported by input plugins
EVENT_NONE = 0
EVENT_QUIT = 1
EVENT_PAUSE = 2

# Default mappings for keys 0-F.  This is the common layout below, given as PyGame key codes (which match ASCII):
#
#   1 2 3 C      1 2 3 4
#   4 5 6 D  =>  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"

# Default colours (RRGGBB) and window scale
DEFAULT_FG_COLOUR = "FFFFFF"
DEFAULT_BG_COLOUR = "000000"
DEFAULT_SCALE = 20
