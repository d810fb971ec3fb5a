#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Used by a Framebuffer object to draw the screen.  This draws graphics onto an
SDL window surface via PyGame.  Pixels are collected in an offscreen RGB
buffer at the native 64x32 resolution, and the contents are stretched (using
'Nearest Neighbour' translation) to fit the window itself, so we don't have to
draw the same pixel multiple times.

Lit pixels are drawn in the foreground colour, unlit ones in the background
colour.  If pixel outlines are enabled, a grid is drawn over the scaled image
in the background colour, so each lit pixel appears as a separate block.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import RendererError, Renderer as RendererBase
from ..constants import APP_NAME, DEFAULT_FG_COLOUR, DEFAULT_BG_COLOUR, DEFAULT_SCALE


def parse_colour(colour):
    if len(colour) != 6:
        raise RendererError("Colours must all be 6 hex digits long.")

    try:
        rgb = int(colour, 16)
    except ValueError:
        raise RendererError("Invalid colour defined.") from None

    return rgb >> 16, (rgb >> 8) & 0xFF, rgb & 0xFF


class Renderer(RendererBase):
    def __init__(self, scale=None, fg_colour=None, bg_colour=None, pixel_outlines=False, **kwargs):
        if scale is None:
            scale = DEFAULT_SCALE  # Pixel size in window pixels if not supplied

        if scale <= 0:
            raise RendererError("Scale must be a positive number.")

        self.fg_rgb = parse_colour(DEFAULT_FG_COLOUR if fg_colour is None else fg_colour)
        self.bg_rgb = parse_colour(DEFAULT_BG_COLOUR if bg_colour is None else bg_colour)
        self.pixel_outlines = pixel_outlines
        self.rgb_map = [memoryview(bytearray(self.bg_rgb)), memoryview(bytearray(self.fg_rgb))]
        self.rgb_buffer = None
        self.display_surface = None
        self.content_changed = False

        pygame.display.init()
        super().__init__(scale)
        self.set_title(APP_NAME)

    def set_resolution(self, width, height):
        super().set_resolution(width, height)

        if not width or not height:
            return

        total_pixels = width * height
        self.rgb_buffer = memoryview(bytearray(self.bg_rgb * total_pixels))  # 24-bit
        self.scaled_size = (width * self.scale, height * self.scale)
        self.display_surface = pygame.display.set_mode(self.scaled_size, pygame.NOFRAME)
        self.content_changed = True

        # Force a refresh now, in case nothing else is drawn afterwards
        self.refresh_display()

    def set_pixel(self, x, y, colour):
        # Update RGB buffer in-place to minimise allocations and PyGame calls
        rgb_location = (y * self.width + x) * 3
        self.rgb_buffer[rgb_location:rgb_location + 3] = self.rgb_map[colour]
        self.content_changed = True

    def clear(self):
        # Refill the whole buffer in one go, rather than a pixel at a time
        if self.rgb_buffer is not None:
            self.rgb_buffer[:] = bytes(self.bg_rgb) * (self.width * self.height)
            self.content_changed = True

    def refresh_display(self):
        if not self.content_changed or self.rgb_buffer is None:
            return

        # Blit the bytearray straight to the surface.  This is far quicker than very frequent PixelArray updates
        render_surface = pygame.image.frombuffer(self.rgb_buffer, (self.width, self.height), "RGB")
        scaled_win = pygame.transform.scale(render_surface, self.scaled_size)
        self.display_surface.blit(scaled_win, (0, 0))

        if self.pixel_outlines:
            self._draw_outlines()

        pygame.display.flip()
        self.content_changed = False

    def _draw_outlines(self):
        scaled_width, scaled_height = self.scaled_size
        scale = self.scale

        for x in range(0, scaled_width, scale):
            pygame.draw.line(self.display_surface, self.bg_rgb, (x, 0), (x, scaled_height - 1))

        for y in range(0, scaled_height, scale):
            pygame.draw.line(self.display_surface, self.bg_rgb, (0, y), (scaled_width - 1, y))

    def set_title(self, title):
        super().set_title(title)
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame can segfault if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
