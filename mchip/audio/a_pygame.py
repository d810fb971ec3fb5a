#!/usr/bin/env python3

"""
PyGame Audio Plugin

Plays a square-wave tone within PyGame / SDL while the buzzer is enabled.  The
host enables the buzzer whenever the machine's sound timer is non-zero.

One cycle of the wave is built into an unsigned 8-bit sample buffer, which is
then looped for as long as the buzzer stays on.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .a_null import Audio as AudioBase

PLAYBACK_FREQUENCY = 44100
DEFAULT_TONE = 440.0
DEFAULT_VOLUME = 0.1


class Audio(AudioBase):
    def __init__(self):
        self.sound = None
        self.frequency = None
        pygame.mixer.pre_init(PLAYBACK_FREQUENCY, size=8, channels=1, buffer=512, allowedchanges=0)
        pygame.mixer.init()
        super().__init__()
        self.set_frequency(DEFAULT_TONE)

    def set_frequency(self, frequency):
        if frequency == self.frequency:
            return

        self.frequency = frequency
        samples_per_cycle = max(2, int(PLAYBACK_FREQUENCY / frequency))
        half_cycle = samples_per_cycle // 2
        buffer = bytearray(b"\xFF" * half_cycle + b"\x00" * (samples_per_cycle - half_cycle))
        was_playing = self.buzzer_enabled

        if self.sound is not None and was_playing:
            self.sound.stop()

        self.sound = pygame.mixer.Sound(buffer=buffer)
        self.sound.set_volume(DEFAULT_VOLUME)

        if was_playing:
            # If the tone was replaced while sounding, play the new one now
            self.sound.play(-1)

    def enable_buzzer(self, enabled):
        # If the tone is already playing, it won't be restarted
        if enabled:
            if not self.buzzer_enabled:
                self.sound.play(-1)
                self.buzzer_enabled = True
        else:
            if self.buzzer_enabled:
                self.sound.stop()
                self.buzzer_enabled = False

    def is_null(self):
        return False

    def shutdown(self):
        if self.sound:
            self.sound.stop()

        pygame.mixer.quit()
        super().shutdown()
