#!/usr/bin/env python3

"""
Null Audio Plugin

Serves as a base class for other Audio plugins.  Can be used on its own if no
sound is required.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"


class Audio:
    def __init__(self):
        # Buzzer should be disabled (not playing sounds) by default
        self.buzzer_enabled = False

    def set_frequency(self, frequency):
        # Set tone pitch in Hz
        pass

    def enable_buzzer(self, enabled):
        # The buzzer should play a tone while the sound timer is >0
        self.buzzer_enabled = enabled

    def is_null(self):
        # Only the null audio device should return True
        return True

    def shutdown(self):
        pass
