import unittest

from chip8.constants import C8_FONTS, FONT_START_ADDRESS, ROM_START_ADDRESS
from chip8.errors import AddressError, LoadError, StackError
from chip8.memory import Memory, Stack


class TestMemory(unittest.TestCase):
    def setUp(self):
        self.mem = Memory()

    def test_fonts_loaded(self):
        self.assertEqual(list(self.mem[FONT_START_ADDRESS:FONT_START_ADDRESS+80]),
                         C8_FONTS)

    def test_zero_filled(self):
        self.assertEqual(self.mem[0x000], 0)
        self.assertEqual(self.mem[ROM_START_ADDRESS], 0)
        self.assertEqual(self.mem[0xFFF], 0)

    def test_read_out_of_range(self):
        with self.assertRaises(AddressError):
            self.mem[0x1000]
        with self.assertRaises(AddressError):
            self.mem[-1]

    def test_write_out_of_range(self):
        with self.assertRaises(AddressError):
            self.mem[0x1000] = 1

    def test_slice_past_the_end(self):
        with self.assertRaises(AddressError):
            self.mem[0xFFE:0x1001]
        with self.assertRaises(AddressError):
            self.mem[0xFFE:0x1001] = b"\x01\x02\x03"
        self.assertEqual(self.mem[0xFFE], 0)

    def test_slice_write_keeps_size(self):
        with self.assertRaises(AddressError):
            self.mem[0x300:0x302] = b"\x01"
        self.assertEqual(len(self.mem), 4096)

    def test_read_word(self):
        self.mem[0x300:0x302] = b"\x12\x34"
        self.assertEqual(self.mem.read_word(0x300), 0x1234)
        with self.assertRaises(AddressError):
            self.mem.read_word(0xFFF)

    def test_load_rom(self):
        self.mem.load_rom(b"\x00\xE0\x12\x00")
        self.assertEqual(bytes(self.mem[0x200:0x204]), b"\x00\xE0\x12\x00")

    def test_load_largest_rom(self):
        self.mem.load_rom(b"\xAA" * 0xE00)
        self.assertEqual(self.mem[0xFFF], 0xAA)

    def test_load_rom_too_large(self):
        with self.assertRaises(LoadError):
            self.mem.load_rom(b"\xAA" * 0xE01)
        self.assertEqual(self.mem[0x200], 0)


class TestStack(unittest.TestCase):
    def test_push_pop(self):
        stack = Stack()
        stack.append(0x202)
        stack.append(0x304)
        self.assertEqual(stack.pop(), 0x304)
        self.assertEqual(stack.pop(), 0x202)

    def test_overflow(self):
        stack = Stack()
        for i in range(16):
            stack.append(0x200 + 2 * i)
        with self.assertRaises(StackError):
            stack.append(0x400)
        self.assertEqual(len(stack), 16)

    def test_underflow(self):
        with self.assertRaises(StackError):
            Stack().pop()


if __name__ == "__main__":
    unittest.main()
