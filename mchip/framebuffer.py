#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are only drawn to the actual display (the host
rendering system) once per frame.  Programs cannot write directly into video
RAM.  Instead, sprites are drawn to the screen using an XOR method, and the
only other operation is a full clear.

The display is a single monochrome plane, stored one byte per pixel (0x00 or
0xFF) in a RAM bank.

Sprites are 8 pixels wide, one byte per row, most-significant bit leftmost.
The starting position of a sprite wraps around the screen, but the body does
not: anything hanging off the right or bottom edges is clipped.

Collisions (where any pixel was set, but was unset by an XOR) are reported to
the caller.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_NAME, VID_WIDTH, VID_HEIGHT
from .ram import RAM

SPRITE_WIDTH = 8


class FramebufferError(Exception):
    pass


class Framebuffer():
    def __init__(self, renderer, vid_width=VID_WIDTH, vid_height=VID_HEIGHT):
        if vid_width <= 0 or vid_height <= 0:
            raise FramebufferError("Display dimensions must be positive")

        self.renderer = renderer
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.plane = RAM(self.vid_size)
        self.renderer.set_resolution(vid_width, vid_height)
        self.report_perf()

    def clear(self):
        self.plane.clear()
        self.renderer.clear()

    def xor_pixel(self, x, y):
        # Returns True on collision, or None if the pixel is off-screen and was clipped
        if x >= self.vid_width or y >= self.vid_height:
            return None

        vram_loc = y * self.vid_width + x
        pixel = self.plane.read(vram_loc)
        new_pixel = pixel ^ 0xFF
        self.plane.write(vram_loc, new_pixel)
        self.renderer.set_pixel(x, y, int(new_pixel != 0))

        return pixel != 0

    def draw_sprite(self, x, y, rows):
        # Returns whether any set pixel was switched off
        x %= self.vid_width
        y %= self.vid_height
        collided = False

        for row_num, spr_data in enumerate(rows):
            scr_y = y + row_num

            if scr_y >= self.vid_height:
                break

            for col in range(SPRITE_WIDTH):
                if spr_data & (0x80 >> col) and self.xor_pixel(x + col, scr_y):
                    # Don't stop drawing.  Set the flag, and never unset it for this sprite.
                    collided = True

        return collided

    def get_pixel(self, x, y):
        return self.plane.read(y * self.vid_width + x) != 0

    def get_pixels(self):
        # Snapshot for the host, as rows of booleans
        width = self.vid_width
        mem = self.plane.mem
        return [[mem[row + x] != 0 for x in range(width)] for row in range(0, self.vid_size, width)]

    def refresh_display(self):
        self.renderer.refresh_display()

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def report_perf(self, fps=0, ops=0):
        title = "{} - {} FPS, {} OPS".format(APP_NAME, fps, ops)
        self.renderer.set_title(title)
