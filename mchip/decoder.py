#!/usr/bin/env python3

"""
Instruction Decoder

Every opcode is two bytes, stored big-endian.  All operand fields sit in the
same place in every instruction, so they're always extracted up front:

    nnn = 12-bit address
    nn  = 8-bit byte
    n   = 4-bit nibble
    x/y = register (0-15)

The disassembler is only used for debug output.
"""

__copyright__ = "Copyright (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"

from collections import namedtuple

CPU_ENDIAN = "big"

Instruction = namedtuple("Instruction", ["opcode", "nnn", "nn", "n", "x", "y"])


def decode_word(opcode):
    return Instruction(
        opcode,
        opcode & 0xFFF,
        opcode & 0xFF,
        opcode & 0xF,
        (opcode >> 8) & 0xF,
        (opcode >> 4) & 0xF
    )


def decode(ram, pc):
    return decode_word(int.from_bytes(ram.read_block(pc, 2), CPU_ENDIAN, signed=False))


# Mnemonic templates, keyed in the same way the CPU dispatches
_EXACT = {
    0x00E0: "CLS",
    0x00EE: "RET"
}

_BY_NIBBLE = {
    0x1: "JP 0x{nnn:03x}",
    0x2: "CALL 0x{nnn:03x}",
    0x3: "SE V{x:01x}, 0x{nn:02x}",
    0x4: "SNE V{x:01x}, 0x{nn:02x}",
    0x6: "LD V{x:01x}, 0x{nn:02x}",
    0x7: "ADD V{x:01x}, 0x{nn:02x}",
    0xA: "LD I, 0x{nnn:03x}",
    0xB: "JP V0, 0x{nnn:03x}",
    0xC: "RND V{x:01x}, 0x{nn:02x}",
    0xD: "DRW V{x:01x}, V{y:01x}, 0x{n:01x}"
}

_BY_MASK_F00F = {
    0x5000: "SE V{x:01x}, V{y:01x}",
    0x8000: "LD V{x:01x}, V{y:01x}",
    0x8001: "OR V{x:01x}, V{y:01x}",
    0x8002: "AND V{x:01x}, V{y:01x}",
    0x8003: "XOR V{x:01x}, V{y:01x}",
    0x8004: "ADD V{x:01x}, V{y:01x}",
    0x8005: "SUB V{x:01x}, V{y:01x}",
    0x8006: "SHR V{x:01x}, V{y:01x}",
    0x8007: "SUBN V{x:01x}, V{y:01x}",
    0x800E: "SHL V{x:01x}, V{y:01x}",
    0x9000: "SNE V{x:01x}, V{y:01x}"
}

_BY_MASK_F0FF = {
    0xE09E: "SKP V{x:01x}",
    0xE0A1: "SKNP V{x:01x}",
    0xF007: "LD V{x:01x}, DT",
    0xF00A: "LD V{x:01x}, K",
    0xF015: "LD DT, V{x:01x}",
    0xF018: "LD ST, V{x:01x}",
    0xF01E: "ADD I, V{x:01x}",
    0xF029: "LD F, V{x:01x}",
    0xF033: "LD B, V{x:01x}",
    0xF055: "LD [I], V{x:01x}",
    0xF065: "LD V{x:01x}, [I]"
}


def disassemble(inst):
    opcode = inst.opcode
    top = opcode >> 12

    if top == 0x0:
        template = _EXACT.get(opcode, "SYS 0x{nnn:03x}")
    elif top in (0x5, 0x8, 0x9):
        template = _BY_MASK_F00F.get(opcode & 0xF00F)
    elif top in (0xE, 0xF):
        template = _BY_MASK_F0FF.get(opcode & 0xF0FF)
    else:
        template = _BY_NIBBLE.get(top)

    if template is None:
        return "???"

    return template.format(**inst._asdict())
