#!/usr/bin/env python3

"""
Machine

Bundles RAM, the call stack, CPU, framebuffer, keypad and run state into one
object.  This is the only thing a host needs to hold on to.  Each Machine owns
all of its parts, so any number of them can exist side by side.

A host drives the machine once per frame:

    machine.press_key(...) / machine.release_key(...)
    machine.tick()              # Instruction batch, then one timer decrement
    machine.get_display()       # Or let the renderer plugin draw it
    machine.sound_active()

Loading is all-or-nothing.  The new memory image is prepared off to the side,
and only swapped in once the ROM is known to fit.
"""

__copyright__ = "Copyright (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from .constants import DEFAULT_CLOCK_SPEED, ENTRY_POINT, FONT_LOC, MEM_SIZE, STACK_DEPTH, TIMER_FREQ, STATE_HALTED
from .cpu import CPU, CPUError
from .debugger import Debugger
from .framebuffer import Framebuffer
from .hostio import Loader, LoadError, RomTooLarge
from .keypad import Keypad
from .ram import RAM
from .renderers.r_null import Renderer
from .runstate import RunState
from .stack import Stack


class Machine:
    def __init__(self, renderer=None, debugger=None, clock_speed=DEFAULT_CLOCK_SPEED, rng=None):
        self.renderer = Renderer() if renderer is None else renderer
        self.debugger = Debugger() if debugger is None else debugger
        self.loader = Loader()
        self.ram = RAM(MEM_SIZE)
        self.stack = Stack(STACK_DEPTH)
        self.keypad = Keypad()
        self.framebuffer = Framebuffer(self.renderer)
        self.cpu = CPU(self.ram, self.stack, self.framebuffer, self.keypad, self.debugger, rng=rng)
        self.ops_per_tick = max(1, int(round(clock_speed / TIMER_FREQ)))

        # Nothing runs until a ROM has been loaded
        self.run_state = RunState(STATE_HALTED)

    def load(self, rom, entry_point=ENTRY_POINT):
        if not 0 <= entry_point <= MEM_SIZE:
            raise LoadError("Entry point 0x{:x} is outside of RAM".format(entry_point))

        max_size = MEM_SIZE - entry_point

        if len(rom) > max_size:
            raise RomTooLarge(len(rom), max_size)

        # Write the system font first, then the program
        ram = RAM(MEM_SIZE)
        ram.write_block(FONT_LOC, self.loader.load_system_font())
        ram.write_block(entry_point, rom)

        self.ram.mem[:] = ram.mem
        self.stack.clear()
        self.keypad.release_all()
        self.framebuffer.clear()
        self.cpu.reset(entry_point)
        self.run_state = RunState()

    def load_file(self, filename, entry_point=ENTRY_POINT):
        self.load(self.loader.load_binary(filename), entry_point)

    def step(self):
        # Executes one instruction.  Returns False if the machine is paused or has halted.
        if not self.run_state.is_running():
            return False

        try:
            self.cpu.step()
        except CPUError as e:
            self.run_state.halt(str(e))
            return False

        return True

    def tick_timers(self):
        self.cpu.tick_timers()

    def tick(self):
        # Returns the number of instructions executed.  Paused or halted machines don't execute or count down.
        if not self.run_state.is_running():
            return 0

        ops = 0

        for _ in range(self.ops_per_tick):
            if not self.step():
                return ops

            ops += 1

        self.tick_timers()
        return ops

    def press_key(self, key):
        self.keypad.press(key)

    def release_key(self, key):
        self.keypad.release(key)

    def pause(self):
        self.run_state.pause()

    def resume(self):
        self.run_state.resume()

    def toggle_pause(self):
        self.run_state.toggle_pause()

    def quit(self):
        self.run_state.quit()

    def handle_event(self, event):
        self.run_state.handle_event(event)

    def get_display(self):
        return self.framebuffer.get_pixels()

    def sound_active(self):
        return self.cpu.sound_active()

    def get_state(self):
        return self.run_state.state

    def is_halted(self):
        return self.run_state.is_halted()

    def get_halt_reason(self):
        return self.run_state.reason
