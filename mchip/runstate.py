#!/usr/bin/env python3

"""
Run State

Decides whether the host loop should execute instructions and tick the timers
for a frame.  Transitions come from host events (quit, pause toggle), or from
a fatal CPU error, which halts the machine.  Halting is permanent.
"""

__copyright__ = "Copyright (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from .constants import STATE_RUNNING, STATE_PAUSED, STATE_HALTED, STATE_NAMES, EVENT_QUIT, EVENT_PAUSE


class RunState:
    def __init__(self, state=STATE_RUNNING):
        self.state = state
        self.reason = None

    def __str__(self):
        return STATE_NAMES[self.state]

    def is_running(self):
        return self.state == STATE_RUNNING

    def is_paused(self):
        return self.state == STATE_PAUSED

    def is_halted(self):
        return self.state == STATE_HALTED

    def pause(self):
        if self.state == STATE_RUNNING:
            self.state = STATE_PAUSED

    def resume(self):
        if self.state == STATE_PAUSED:
            self.state = STATE_RUNNING

    def toggle_pause(self):
        if self.state == STATE_RUNNING:
            self.state = STATE_PAUSED
        elif self.state == STATE_PAUSED:
            self.state = STATE_RUNNING

    def quit(self):
        self.halt()

    def halt(self, reason=None):
        if self.state != STATE_HALTED:
            self.state = STATE_HALTED
            self.reason = reason

    def handle_event(self, event):
        if event == EVENT_QUIT:
            self.quit()
        elif event == EVENT_PAUSE:
            self.toggle_pause()
