#!/usr/bin/env python3

"""
Stack Emulator

The call stack holds return addresses only, and there is no specified location
for it in RAM.  Programs cannot see the stack pointer either, so a capped
Python list is a complete model of it.

Pushing onto a full stack or popping an empty one raises a StackError, and the
stack is left exactly as it was.  The CPU turns this into a machine halt.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare, (C) 2024 MonoChip contributors"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class Stack:
    def __init__(self, size):
        self.items = []
        self.size = size

    @property
    def sp(self):
        return len(self.items)

    def push(self, item):
        if len(self.items) >= self.size:
            raise StackError("Stack overflow")

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackError("Stack underflow") from None

    def clear(self):
        self.items = []

    def get_items(self):
        # For debugging
        return self.items
