#!/usr/bin/env python3

"""
PyGame Input Plugin

Scans the PyGame event queue and properly detects key 'press' and 'release'
events, pushing them into the machine's keypad.  Note that the check should
not be called more often than 60Hz, as constantly checking the queue is time
consuming.

Closing the window or pressing Escape asks the host to quit, and Space toggles
pause.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .i_null import Inputs as InputsBase
from ..constants import EVENT_NONE, EVENT_QUIT, EVENT_PAUSE


class Inputs(InputsBase):
    def __init__(self, keymap, keypad):
        self.pygame_methods = {
            pygame.QUIT:    self._pygame_quit,
            pygame.KEYDOWN: self._pygame_keydown,
            pygame.KEYUP:   self._pygame_keyup
        }

        super().__init__(keymap, keypad)

    def process_messages(self):
        # Call PyGame method based on fast dictionary lookup of event.  Quit takes priority over pause.
        control_event = EVENT_NONE

        for event in pygame.event.get():
            pygame_method = self.pygame_methods.get(event.type)

            if pygame_method is None:
                continue

            result = pygame_method(event)

            if result == EVENT_QUIT or (result == EVENT_PAUSE and control_event == EVENT_NONE):
                control_event = result

        return control_event

    def _pygame_quit(self, _):
        return EVENT_QUIT

    def _pygame_keydown(self, event):
        if event.key == pygame.K_ESCAPE:
            return EVENT_QUIT

        if event.key == pygame.K_SPACE:
            return EVENT_PAUSE

        self.host_key_down(event.key)
        return EVENT_NONE

    def _pygame_keyup(self, event):
        self.host_key_up(event.key)
        return EVENT_NONE
