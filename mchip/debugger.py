#!/usr/bin/env python3

"""
CPU Debugger

If enabled, this will output information before each instruction executed:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter of the instruction
    * OP - OpCode number
    * IN - The instruction, disassembled

If the machine halts, the same line is reported, followed by the stack
contents from the bottom up.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from .decoder import disassemble


class Debugger:
    def __init__(self):
        self.live = False

    def debug(self, cpu, verbose=False):
        inst = cpu.inst
        debug_str = (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} OP: 0x{:04x} IN: {}"
        ).format(
            *[cpu.v[reg_num] for reg_num in range(15, -1, -1)] +
            [cpu.i, cpu.dt, cpu.ds, cpu.debug_pc, inst.opcode, disassemble(inst)]
        )

        if verbose:
            debug_str += "\n" + self.dump_stack(cpu.stack)

        return debug_str

    def dump_stack(self, stack):
        stack_items = stack.get_items()

        if not stack_items:
            return "Stack: (Empty)"

        return "Stack ({}/{}):{}".format(
            len(stack_items), stack.size, (" 0x{:03x}" * len(stack_items)).format(*stack_items)
        )

    def set_live(self, enabled):
        self.live = enabled

    def is_live(self):
        return self.live

    def output(self, cpu):
        print(self.debug(cpu))
