#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from random import Random
from mchip.constants import MEM_SIZE
from mchip.cpu import CPU, CPUError
from mchip.debugger import Debugger
from mchip.framebuffer import Framebuffer
from mchip.keypad import Keypad
from mchip.ram import RAM
from mchip.renderers.r_null import Renderer
from mchip.stack import Stack


class TestCPU(unittest.TestCase):
    def setUp(self):
        self.ram = RAM(MEM_SIZE)
        self.stack = Stack(12)
        self.framebuffer = Framebuffer(Renderer())
        self.keypad = Keypad()
        self.cpu = CPU(self.ram, self.stack, self.framebuffer, self.keypad, Debugger(), rng=Random(1))

    def _check_opcode(self, opcode):
        # Mirror a real cycle: fetch from 0x200 upwards, with PC already moved on
        self.ram.write_block(self.cpu.pc, opcode.to_bytes(2, "big"))
        self.cpu.step()

    def _snapshot(self):
        cpu = self.cpu
        return bytes(cpu.v), cpu.i, cpu.dt, cpu.ds, list(self.stack.get_items()), bytes(self.framebuffer.plane.mem)

    def test_cpu_reset(self):
        self.assertEqual(0x200, self.cpu.pc)
        self.assertEqual(0, self.cpu.i)
        self.assertEqual(b"\x00" * 16, bytes(self.cpu.v))
        self.assertEqual((0, 0), (self.cpu.dt, self.cpu.ds))

    def test_cpu_step_fetch(self):
        self.ram.write_block(0x200, bytearray(b"\x6A\x42"))
        self.cpu.step()
        self.assertEqual(0x6A42, self.cpu.opcode)
        self.assertEqual(0x200, self.cpu.debug_pc)
        self.assertEqual(0x202, self.cpu.pc)
        self.assertEqual(0x42, self.cpu.v[0xA])

    def test_cpu_inc_pc_wrap(self):
        self.cpu.pc = 0xFFE
        self.cpu.inc_pc()
        self.assertEqual(0x000, self.cpu.pc)

    def test_cpu_dec_pc_wrap(self):
        self.cpu.pc = 0x000
        self.cpu.dec_pc()
        self.assertEqual(0xFFE, self.cpu.pc)

    def test_cpu_unknown_opcodes(self):
        # Unknown opcodes are a no-op.  Only the program counter moves on.
        self.cpu.v[0x3] = 0x7
        self.cpu.i = 0x123
        self.cpu.dt = 5

        for opcode in 0x0000, 0x0001, 0x0123, 0x5001, 0x8008, 0x800F, 0x9001, 0xE09F, 0xE0A2, 0xF100, 0xFFFF:
            before = self._snapshot()
            pc = self.cpu.pc
            self._check_opcode(opcode)
            self.assertEqual(before, self._snapshot())
            self.assertEqual(pc + 2, self.cpu.pc)

    def test_cpu_00e0(self):  # CLS
        self.framebuffer.draw_sprite(0, 0, [0xFF])
        self._check_opcode(0x00E0)
        self.assertTrue(all(not lit for row in self.framebuffer.get_pixels() for lit in row))

    def test_cpu_00ee(self):  # RET
        self.stack.push(0xFFE)
        self._check_opcode(0x00EE)
        self.assertEqual(0xFFE, self.cpu.pc)
        self.assertEqual(0, self.stack.sp)

    def test_cpu_00ee_underflow(self):  # RET (empty stack)
        with self.assertRaises(CPUError) as context:
            self._check_opcode(0x00EE)

        self.assertIn("Stack underflow", str(context.exception))
        self.assertIn("0x200", str(context.exception))
        self.assertEqual(0, self.stack.sp)

    def test_cpu_1nnn(self):  # JP addr
        self._check_opcode(0x1FFD)
        self.assertEqual(0xFFD, self.cpu.pc)

    def test_cpu_2nnn(self):  # CALL addr
        self._check_opcode(0x2FFC)
        self.assertEqual(0xFFC, self.cpu.pc)
        self.assertEqual(1, self.stack.sp)
        self.assertEqual(0x202, self.stack.pop())

    def test_cpu_2nnn_overflow(self):  # CALL addr (full stack)
        for _ in range(12):
            self.stack.push(0x300)

        self.assertRaises(CPUError, self._check_opcode, 0x2400)
        self.assertEqual(12, self.stack.sp)

    def test_cpu_call_return(self):
        self._check_opcode(0x2400)
        self._check_opcode(0x00EE)
        self.assertEqual(0x202, self.cpu.pc)

    def test_cpu_3xnn(self):  # SE Vx, byte
        self.cpu.v[0x2] = 0x11
        self._check_opcode(0x3212)
        self.assertEqual(0x202, self.cpu.pc)
        self.cpu.v[0x2] = 0x12
        self._check_opcode(0x3212)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_4xnn(self):  # SNE Vx, byte
        self.cpu.v[0x2] = 0x11
        self._check_opcode(0x4212)
        self.assertEqual(0x204, self.cpu.pc)
        self.cpu.v[0x2] = 0x12
        self._check_opcode(0x4212)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_5xy0(self):  # SE Vx, Vy
        self.cpu.v[0x2] = 0x11
        self.cpu.v[0x3] = 0x12
        self._check_opcode(0x5230)
        self.assertEqual(0x202, self.cpu.pc)
        self.cpu.v[0x3] = 0x11
        self._check_opcode(0x5230)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_6xnn(self):  # LD Vx, byte
        self._check_opcode(0x62FE)
        self.assertEqual(0xFE, self.cpu.v[0x2])

    def test_cpu_7xnn(self):  # ADD Vx, byte
        self._check_opcode(0x72FE)
        self.assertEqual(0xFE, self.cpu.v[0x2])
        self._check_opcode(0x7201)
        self.assertEqual(0xFF, self.cpu.v[0x2])
        self._check_opcode(0x7201)
        self.assertEqual(0x00, self.cpu.v[0x2])
        # No carry flag
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xy0(self):  # LD Vx, Vy
        self.cpu.v[0x1] = 0x1
        self.cpu.v[0x2] = 0x2
        self._check_opcode(0x8120)
        self.assertEqual(0x2, self.cpu.v[0x1])

    def _prepare_alu(self):
        self.cpu.v[0x1] = 0b10111000
        self.cpu.v[0x2] = 0b10001110
        self.cpu.v[0xF] = 0x2

    def test_cpu_8xy1(self):  # OR Vx, Vy
        self._prepare_alu()
        self._check_opcode(0x8121)
        self.assertEqual(0b10111110, self.cpu.v[0x1])
        self.assertEqual(0x2, self.cpu.v[0xF])

    def test_cpu_8xy2(self):  # AND Vx, Vy
        self._prepare_alu()
        self._check_opcode(0x8122)
        self.assertEqual(0b10001000, self.cpu.v[0x1])
        self.assertEqual(0x2, self.cpu.v[0xF])

    def test_cpu_8xy3(self):  # XOR Vx, Vy
        self._prepare_alu()
        self._check_opcode(0x8123)
        self.assertEqual(0b00110110, self.cpu.v[0x1])
        self.assertEqual(0x2, self.cpu.v[0xF])

    def test_cpu_8xy4_carry(self):  # ADD Vx, Vy (carry)
        self.cpu.v[0x1] = 250
        self.cpu.v[0x2] = 10
        self._check_opcode(0x8124)
        self.assertEqual(4, self.cpu.v[0x1])
        self.assertEqual(0x1, self.cpu.v[0xF])

    def test_cpu_8xy4_no_carry(self):  # ADD Vx, Vy (no carry)
        self.cpu.v[0x1] = 0x1
        self.cpu.v[0x2] = 0x1
        self.cpu.v[0xF] = 0x1
        self._check_opcode(0x8124)
        self.assertEqual(0x2, self.cpu.v[0x1])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xy4_flag_target(self):  # ADD Vf, Vy (flag wins over result)
        self.cpu.v[0xF] = 0xFF
        self.cpu.v[0x2] = 0x2
        self._check_opcode(0x8F24)
        self.assertEqual(0x1, self.cpu.v[0xF])

    def test_cpu_8xy5_no_borrow(self):  # SUB Vx, Vy
        self.cpu.v[0x1] = 5
        self.cpu.v[0x2] = 3
        self._check_opcode(0x8125)
        self.assertEqual(2, self.cpu.v[0x1])
        self.assertEqual(0x1, self.cpu.v[0xF])

    def test_cpu_8xy5_borrow(self):  # SUB Vx, Vy
        self.cpu.v[0x1] = 3
        self.cpu.v[0x2] = 5
        self._check_opcode(0x8125)
        self.assertEqual(254, self.cpu.v[0x1])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xy5_equal(self):  # SUB Vx, Vy (equal values count as no borrow)
        self.cpu.v[0x4] = 7
        self.cpu.v[0x2] = 7
        self._check_opcode(0x8425)
        self.assertEqual(0, self.cpu.v[0x4])
        self.assertEqual(0x1, self.cpu.v[0xF])

    def test_cpu_8xy5_compares_values(self):  # SUB Vx, Vy (register numbers must not matter)
        # x > y as register numbers, but Vx < Vy as values
        self.cpu.v[0x9] = 1
        self.cpu.v[0x2] = 2
        self._check_opcode(0x8925)
        self.assertEqual(0xFF, self.cpu.v[0x9])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xy6(self):  # SHR Vx, Vy
        self.cpu.v[0x1] = 0x4
        self.cpu.v[0x2] = 0x5
        self._check_opcode(0x8126)
        self.assertEqual(0x2, self.cpu.v[0x1])
        self.assertEqual(0x5, self.cpu.v[0x2])
        self.assertEqual(0x1, self.cpu.v[0xF])
        self.cpu.v[0x2] = 0x4
        self._check_opcode(0x8126)
        self.assertEqual(0x2, self.cpu.v[0x1])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xy7_no_borrow(self):  # SUBN Vx, Vy
        self.cpu.v[0x1] = 0x2
        self.cpu.v[0x2] = 0x4
        self._check_opcode(0x8127)
        self.assertEqual(0x2, self.cpu.v[0x1])
        self.assertEqual(0x1, self.cpu.v[0xF])

    def test_cpu_8xy7_borrow(self):  # SUBN Vx, Vy
        self.cpu.v[0x1] = 0x4
        self.cpu.v[0x2] = 0x2
        self._check_opcode(0x8127)
        self.assertEqual(0xFE, self.cpu.v[0x1])
        self.assertEqual(0x2, self.cpu.v[0x2])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xy7_equal(self):  # SUBN Vx, Vy (equal values count as a borrow)
        self.cpu.v[0x1] = 0x3
        self.cpu.v[0x2] = 0x3
        self._check_opcode(0x8127)
        self.assertEqual(0x0, self.cpu.v[0x1])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_8xye(self):  # SHL Vx, Vy
        self.cpu.v[0x1] = 0x4
        self.cpu.v[0x2] = 0x81
        self._check_opcode(0x812E)
        self.assertEqual(0x2, self.cpu.v[0x1])
        self.assertEqual(0x81, self.cpu.v[0x2])
        self.assertEqual(0x1, self.cpu.v[0xF])
        self.cpu.v[0x2] = 0x41
        self._check_opcode(0x812E)
        self.assertEqual(0x82, self.cpu.v[0x1])
        self.assertEqual(0x0, self.cpu.v[0xF])

    def test_cpu_9xy0(self):  # SNE Vx, Vy
        self.cpu.v[0x2] = 0x15
        self.cpu.v[0x3] = 0x16
        self._check_opcode(0x9230)
        self.assertEqual(0x204, self.cpu.pc)
        self.cpu.v[0x3] = 0x15
        self._check_opcode(0x9230)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_annn(self):  # LD I, addr
        self._check_opcode(0xAFF1)
        self.assertEqual(0xFF1, self.cpu.i)

    def test_cpu_bnnn(self):  # JP V0, addr
        self._check_opcode(0xB302)
        self.assertEqual(0x302, self.cpu.pc)
        self.cpu.v[0x0] = 0x1
        self.cpu.v[0x1] = 0x50  # Only V0 is ever used
        self._check_opcode(0xB102)
        self.assertEqual(0x103, self.cpu.pc)

    def test_cpu_cxnn(self):  # RND Vx, byte
        for _ in range(50):
            self._check_opcode(0xC10F)
            self.assertEqual(0, self.cpu.v[0x1] & 0xF0)

        self._check_opcode(0xC100)
        self.assertEqual(0, self.cpu.v[0x1])

    def test_cpu_cxnn_seeded(self):  # RND Vx, byte
        expected = Random(7).randint(0, 0xFF)
        self.cpu.rng = Random(7)
        self._check_opcode(0xC3FF)
        self.assertEqual(expected, self.cpu.v[0x3])

    def test_cpu_dxyn(self):  # DRW Vx, Vy, nibble
        self.ram.write_block(0x300, bytearray(b"\xFF"))
        self.cpu.i = 0x300
        self.cpu.v[0x1] = 60
        self.cpu.v[0x2] = 0
        self.cpu.v[0xF] = 0x7
        self._check_opcode(0xD121)
        self.assertEqual(0x0, self.cpu.v[0xF])
        self.assertEqual([False] * 60 + [True] * 4, self.framebuffer.get_pixels()[0])
        self.assertEqual(0x300, self.cpu.i)
        self._check_opcode(0xD121)
        self.assertEqual(0x1, self.cpu.v[0xF])
        self.assertEqual([False] * 64, self.framebuffer.get_pixels()[0])

    def test_cpu_dxyn_font_glyph(self):  # DRW Vx, Vy, nibble
        self.ram.write_block(0x000, bytearray(b"\xF0\x90\x90\x90\xF0"))  # Glyph '0'
        self._check_opcode(0xD005)
        pixels = self.framebuffer.get_pixels()
        self.assertEqual([True, True, True, True, False], pixels[0][:5])
        self.assertEqual([True, False, False, True, False], pixels[2][:5])
        self.assertFalse(pixels[5][0])

    def test_cpu_dxyn_flag_coordinates(self):  # DRW Vf, Vy, nibble
        # Coordinates must be read from Vf before it is overwritten with the collision flag
        self.ram.write_block(0x300, bytearray(b"\x80"))
        self.cpu.i = 0x300
        self.cpu.v[0xF] = 10
        self._check_opcode(0xDF01)
        self.assertTrue(self.framebuffer.get_pixel(10, 0))

    def test_cpu_ex9e(self):  # SKP Vx
        self.cpu.v[0x1] = 0x5
        self._check_opcode(0xE19E)
        self.assertEqual(0x202, self.cpu.pc)
        self.keypad.press(0x5)
        self._check_opcode(0xE19E)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_exa1(self):  # SKNP Vx
        self.cpu.v[0x1] = 0x5
        self._check_opcode(0xE1A1)
        self.assertEqual(0x204, self.cpu.pc)
        self.keypad.press(0x5)
        self._check_opcode(0xE1A1)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_ex9e_exa1_out_of_range(self):
        # Keys above 0xF are never held
        self.cpu.v[0x1] = 0x20
        self._check_opcode(0xE19E)
        self.assertEqual(0x202, self.cpu.pc)
        self._check_opcode(0xE1A1)
        self.assertEqual(0x206, self.cpu.pc)

    def test_cpu_fx07(self):  # LD Vx, DT
        self.cpu.dt = 0x2
        self._check_opcode(0xF207)
        self.assertEqual(0x2, self.cpu.v[0x2])

    def test_cpu_fx0a_waiting(self):  # LD Vx, K
        self.cpu.v[0x3] = 0x9
        self.ram.write_block(0x200, bytearray(b"\xF3\x0A"))

        for _ in range(3):
            self.cpu.step()
            self.assertEqual(0x200, self.cpu.pc)

        self.assertEqual(0x9, self.cpu.v[0x3])

    def test_cpu_fx0a_pressed(self):  # LD Vx, K
        self.ram.write_block(0x200, bytearray(b"\xF3\x0A"))
        self.cpu.step()
        self.assertEqual(0x200, self.cpu.pc)
        self.keypad.press(0xF)
        self.keypad.press(0x7)
        self.cpu.step()
        self.assertEqual(0x202, self.cpu.pc)
        # Lowest held key wins
        self.assertEqual(0x7, self.cpu.v[0x3])

    def test_cpu_fx0a_highest_key(self):  # LD Vx, K
        self.keypad.press(0xF)
        self._check_opcode(0xF40A)
        self.assertEqual(0xF, self.cpu.v[0x4])

    def test_cpu_fx15(self):  # LD DT, Vx
        self.cpu.v[0x2] = 0x3
        self._check_opcode(0xF215)
        self.assertEqual(0x3, self.cpu.dt)

    def test_cpu_fx18(self):  # LD ST, Vx
        self.cpu.v[0x3] = 0x4
        self._check_opcode(0xF318)
        self.assertEqual(0x4, self.cpu.ds)
        self.assertTrue(self.cpu.sound_active())

    def test_cpu_fx1e(self):  # ADD I, Vx
        self.cpu.v[0x1] = 0x2
        self.cpu.i = 0x3
        self.cpu.v[0xF] = 0x9
        self._check_opcode(0xF11E)
        self.assertEqual(0x5, self.cpu.i)
        self.assertEqual(0x9, self.cpu.v[0xF])

    def test_cpu_fx29(self):  # LD F, Vx
        self.cpu.v[0x1] = 0x9
        self._check_opcode(0xF129)
        self.assertEqual(45, self.cpu.i)
        self.cpu.v[0x1] = 0xF
        self._check_opcode(0xF129)
        self.assertEqual(75, self.cpu.i)

    def test_cpu_fx33(self):  # LD B, Vx
        self.cpu.i = 0x300
        self.cpu.v[0x1] = 0xFE
        self._check_opcode(0xF133)
        # Ensure 254 (base 10 of 0xFE) is calculated
        self.assertEqual("020504", self.ram.read_block(0x300, 3).hex())
        self.cpu.v[0x1] = 7
        self._check_opcode(0xF133)
        self.assertEqual("000007", self.ram.read_block(0x300, 3).hex())
        self.assertEqual(0x300, self.cpu.i)

    def test_cpu_fx55(self):  # LD [I], Vx
        self.cpu.v[0x0] = 3
        self.cpu.v[0x1] = 2
        self.cpu.v[0x2] = 1  # Shouldn't be written into RAM
        self.cpu.i = 0x400
        self._check_opcode(0xF155)
        self.assertEqual("030200", self.ram.read_block(0x400, 3).hex())
        self.assertEqual(0x400, self.cpu.i)

    def test_cpu_fx65(self):  # LD Vx, [I]
        self.cpu.i = 0x400
        self.ram.write_block(0x400, bytearray(b"\x06\x05\x04"))  # 0x04 shouldn't be copied to register V2
        self._check_opcode(0xF165)
        self.assertEqual(0x6, self.cpu.v[0])
        self.assertEqual(0x5, self.cpu.v[1])
        self.assertEqual(0x0, self.cpu.v[2])
        self.assertEqual(0x400, self.cpu.i)

    def test_cpu_fx55_fx65_all_registers(self):
        for reg in range(16):
            self.cpu.v[reg] = reg * 3

        self.cpu.i = 0x500
        self._check_opcode(0xFF55)
        self.cpu.v[:] = bytes(16)
        self._check_opcode(0xFF65)
        self.assertEqual([reg * 3 for reg in range(16)], list(self.cpu.v))

    def test_cpu_tick_timers(self):
        self.cpu.dt = 3
        self.cpu.ds = 1
        seen = []

        for _ in range(5):
            seen.append((self.cpu.dt, self.cpu.ds))
            self.cpu.tick_timers()

        self.assertEqual([(3, 1), (2, 0), (1, 0), (0, 0), (0, 0)], seen)
        self.assertFalse(self.cpu.sound_active())

    def test_cpu_live_debug(self):
        output = []

        class CapturingDebugger(Debugger):
            def output(self, cpu):
                output.append(self.debug(cpu))

        self.cpu.debugger = CapturingDebugger()
        self.cpu.debugger.set_live(True)
        self._check_opcode(0x6A42)
        self.assertEqual(1, len(output))
        self.assertTrue(output[0].endswith("PC: 0x200 OP: 0x6a42 IN: LD Va, 0x42"))
