#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins.

This module can be used on its own as a Renderer plugin if you only want to see
debug output, or to run the machine headless (such as in tests).
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"


class RendererError(Exception):
    pass


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.title = ""
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    def set_pixel(self, x, y, colour):  # pylint: disable=unused-argument
        pass

    def clear(self):
        # Every pixel goes back to the background colour
        pass

    def refresh_display(self):
        pass

    def set_title(self, title):
        self.title = title

    def shutdown(self):
        pass
