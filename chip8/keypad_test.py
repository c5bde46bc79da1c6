import unittest

from chip8.keypad import Keypad


class TestKeypad(unittest.TestCase):
    def setUp(self):
        self.keypad = Keypad()

    def test_key_state(self):
        self.keypad.set_key_state(0xA, True)
        self.assertTrue(self.keypad[0xA])
        self.keypad.set_key_state(0xA, False)
        self.assertFalse(self.keypad.is_pressed(0xA))

    def test_out_of_range_key(self):
        with self.assertRaises(ValueError):
            self.keypad.set_key_state(16, True)

    def test_presses_are_queued_in_order(self):
        self.keypad.set_key_state(0x3, True)
        self.keypad.set_key_state(0x1, True)
        self.assertEqual(self.keypad.first(), 0x3)
        self.assertEqual(self.keypad.first(), 0x1)
        self.assertIsNone(self.keypad.first())

    def test_holding_a_key_is_a_single_press(self):
        self.keypad.set_key_state(0x5, True)
        self.keypad.set_key_state(0x5, True)
        self.assertEqual(self.keypad.pressed_keys, [0x5])

    def test_release_is_not_a_press(self):
        self.keypad.set_key_state(0x5, False)
        self.assertTrue(self.keypad.untouched())

    def test_flush(self):
        self.keypad.set_key_state(0x2, True)
        self.keypad.flush()
        self.assertTrue(self.keypad.untouched())
        self.assertTrue(self.keypad[0x2])


if __name__ == "__main__":
    unittest.main()
