#!/usr/bin/env python3

"""
CPU Emulator

Like a real computer, this is where most of the processing happens.  Each call
to step() fetches one opcode at the program counter, moves the program counter
on to the next instruction, and then executes the opcode.  Moving the program
counter before execution means jumps, calls and skips simply overwrite or
adjust it.

Dispatch is done through a dictionary of handlers, first keyed on the top
nibble of the opcode, then for some families on a masked version of the whole
opcode.  Opcodes missing from the table do nothing at all: this matches the
permissive behaviour of the original interpreters, and some programs contain
stray data words that get executed.

The flag register (Vf) is overwritten by ADD, SUB, SUBN, SHR, SHL and DRW.  In
every case the flag is written after the result, so that a flag-setting
instruction targeting Vf itself leaves the flag behind.

The CPU never touches a host device.  Timers are ticked by the caller once per
frame, and the sound timer is only read back by the host to drive a tone.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import APP_INTRO, ADDR_MASK, ENTRY_POINT, FONT_LOC, FONT_GLYPH_SIZE
from .decoder import decode, decode_word
from .stack import StackError


class CPUError(Exception):
    pass


class CPU:
    def __init__(self, ram, stack, framebuffer, keypad, debugger, rng=None):
        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.debugger = debugger
        self.rng = Random() if rng is None else rng

        # Define instruction pointers.
        # n = Nibble
        # nn = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xnn,
            0x4: self._4xnn,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xnn,
            0x7: self._7xnn,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxnn,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        self.reset()

    def reset(self, start_location=ENTRY_POINT):
        # Initialise registers
        self.v = memoryview(bytearray(16))  # Bytearrays are mutable, so this should be fast when a register is updated
        self.i = 0  # Index register

        # Initialise timers
        self.dt = 0  # Delay timer integer (byte)
        self.ds = 0  # Sound timer integer (byte)

        # Initialise program counter and current instruction
        self.pc = start_location
        self.debug_pc = start_location
        self.inst = decode_word(0)

    @property
    def opcode(self):
        return self.inst.opcode

    def step(self):
        # Keep track of the program counter before altering it in any way for debugging purposes
        self.debug_pc = self.pc
        self.inst = decode(self.ram, self.pc)
        self.inc_pc()  # Program counter updates after fetch, but before execute

        if self.debugger.is_live():
            self.debugger.output(self)

        self.decode_exec()

    def tick_timers(self):
        # Called once per frame.  Neither timer goes below zero.
        if self.dt > 0:
            self.dt -= 1

        if self.ds > 0:
            self.ds -= 1

    def sound_active(self):
        return self.ds > 0

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is not None:
            instruction()

    def decode_exec(self):
        self._call_masked_instruction(self.inst.opcode >> 12)

    def inc_pc(self):
        self.pc = (self.pc + 2) & ADDR_MASK

    def dec_pc(self):
        # Only used to re-run instructions (i.e. keypress wait)
        self.pc = (self.pc - 2) & ADDR_MASK

    def _stack_failure(self, error):
        raise CPUError(
            (
                "Emulation halted.\n\n" +
                "{}Debug info:\n" +
                "{}\n\n{} at address 0x{:03x}."
            ).format(
                APP_INTRO, self.debugger.debug(self, verbose=True), error, self.debug_pc
            )
        ) from None

    def _0nnn(self):
        opcode = self.inst.opcode

        if opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing, so they must never match as 0nnn words
            return

        # 0nnn (call RCA 1802 machine code) is not emulated, and falls through as a no-op
        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.inst.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.inst.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        self.framebuffer.clear()

    def _00EE(self):  # RET
        try:
            self.pc = self.stack.pop()
        except StackError as e:
            self._stack_failure(e)

    def _1nnn(self):  # JP addr
        self.pc = self.inst.nnn

    def _2nnn(self):  # CALL addr
        try:
            self.stack.push(self.pc)
        except StackError as e:
            self._stack_failure(e)

        self.pc = self.inst.nnn

    def _3xnn(self):  # SE Vx, byte
        if self.v[self.inst.x] == self.inst.nn:
            self.inc_pc()

    def _4xnn(self):  # SNE Vx, byte
        if self.v[self.inst.x] != self.inst.nn:
            self.inc_pc()

    def _5xy0(self):  # SE Vx, Vy
        if self.v[self.inst.x] == self.v[self.inst.y]:
            self.inc_pc()

    def _6xnn(self):  # LD Vx, byte
        self.v[self.inst.x] = self.inst.nn

    def _7xnn(self):  # ADD Vx, byte
        # Vf is untouched, even on overflow
        vx = self.inst.x
        self.v[vx] = (self.v[vx] + self.inst.nn) & 0xFF

    def _8xy0(self):  # LD Vx, Vy
        self.v[self.inst.x] = self.v[self.inst.y]

    def _8xy1(self):  # OR Vx, Vy
        self.v[self.inst.x] |= self.v[self.inst.y]

    def _8xy2(self):  # AND Vx, Vy
        self.v[self.inst.x] &= self.v[self.inst.y]

    def _8xy3(self):  # XOR Vx, Vy
        self.v[self.inst.x] ^= self.v[self.inst.y]

    def _8xy4(self):  # ADD Vx, Vy
        vx = self.inst.x
        val = self.v[vx] + self.v[self.inst.y]
        self.v[vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying

    def _post_8xy5_8xy7(self, val):  # Post-SUB/SUBN
        self.v[self.inst.x] = val & 0xFF
        # Vf is set when NOT borrowing, and this should happen AFTER Vx is set, as sometimes Vf is specified in the
        # parameters
        self.v[0xF] = int(val >= 0)

    def _8xy5(self):  # SUB Vx, Vy
        # Compares register values, not register numbers
        self._post_8xy5_8xy7(self.v[self.inst.x] - self.v[self.inst.y])

    def _8xy6(self):  # SHR Vx, Vy
        val = self.v[self.inst.y]
        self.v[self.inst.x] = val >> 1
        self.v[0xF] = val & 1

    def _8xy7(self):  # SUBN Vx, Vy
        vx = self.inst.x
        vy = self.inst.y
        # Vy == Vx counts as a borrow here, unlike SUB
        val = self.v[vy] - self.v[vx]
        self.v[vx] = val & 0xFF
        self.v[0xF] = int(val > 0)

    def _8xyE(self):  # SHL Vx, Vy
        val = self.v[self.inst.y]
        self.v[self.inst.x] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7

    def _9xy0(self):  # SNE Vx, Vy
        if self.v[self.inst.x] != self.v[self.inst.y]:
            self.inc_pc()

    def _Annn(self):  # LD I, addr
        self.i = self.inst.nnn

    def _Bnnn(self):  # JP V0, addr
        self.pc = (self.v[0x0] + self.inst.nnn) & ADDR_MASK

    def _Cxnn(self):  # RND Vx, byte
        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[self.inst.x] = self.rng.randint(0, 0xFF) & self.inst.nn

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        inst = self.inst
        i = self.i
        rows = [self.ram.read((i + row) & ADDR_MASK) for row in range(inst.n)]
        # Coordinates are read before Vf is overwritten with the collision flag
        self.v[0xF] = int(self.framebuffer.draw_sprite(self.v[inst.x], self.v[inst.y], rows))

    def _Ex9E(self):  # SKP Vx
        if self.keypad.is_key_down(self.v[self.inst.x]):
            self.inc_pc()

    def _ExA1(self):  # SKNP Vx
        if not self.keypad.is_key_down(self.v[self.inst.x]):
            self.inc_pc()

    def _Fx07(self):  # LD Vx, DT
        self.v[self.inst.x] = self.dt

    def _Fx0A(self):  # LD Vx, K
        # This opcode waits for a keypress, but since the timers still need to expire correctly and the display still
        # needs updating, we return control to the host and simply decrement the incremented program counter.  The
        # same instruction then polls the keypad again on the next cycle.
        key = self.keypad.first_pressed()

        if key is None:
            self.dec_pc()
        else:
            self.v[self.inst.x] = key

    def _Fx15(self):  # LD DT, Vx
        self.dt = self.v[self.inst.x]

    def _Fx18(self):  # LD ST, Vx
        self.ds = self.v[self.inst.x]

    def _Fx1E(self):  # ADD I, Vx
        # Vf is deliberately left alone
        self.i = (self.i + self.v[self.inst.x]) & ADDR_MASK

    def _Fx29(self):  # LD F, Vx
        self.i = (FONT_LOC + FONT_GLYPH_SIZE * self.v[self.inst.x]) & ADDR_MASK

    def _Fx33(self):  # LD B, Vx
        val = self.v[self.inst.x]
        i = self.i

        for offset in (2, 1, 0):
            self.ram.write((i + offset) & ADDR_MASK, val % 10)
            val //= 10

    def _Fx55(self):  # LD [I], Vx
        # I is left unchanged afterwards
        i = self.i

        for reg in range(self.inst.x + 1):
            self.ram.write((i + reg) & ADDR_MASK, self.v[reg])

    def _Fx65(self):  # LD Vx, [I]
        i = self.i

        for reg in range(self.inst.x + 1):
            self.v[reg] = self.ram.read((i + reg) & ADDR_MASK)
