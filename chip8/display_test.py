import unittest

from chip8.display import Display


class TestDisplay(unittest.TestCase):
    def setUp(self):
        self.display = Display()

    def lit(self):
        return sum(self.display.buffer)

    def test_draw_sets_pixels(self):
        collision = self.display.draw_sprite(0, 0, [0b10100000])
        self.assertFalse(collision)
        self.assertEqual(self.display.read_pixel(0, 0), 1)
        self.assertEqual(self.display.read_pixel(1, 0), 0)
        self.assertEqual(self.display.read_pixel(2, 0), 1)

    def test_draw_twice_restores_and_collides(self):
        self.display.draw_sprite(3, 3, [0x0F])
        before = self.display.snapshot()
        sprite = [0xF0, 0x90, 0xF0]
        self.assertFalse(self.display.draw_sprite(1, 2, sprite))
        self.assertTrue(self.display.draw_sprite(1, 2, sprite))
        self.assertEqual(self.display.snapshot(), before)

    def test_clear(self):
        self.display.draw_sprite(10, 10, [0xFF] * 15)
        self.display.clear()
        self.assertEqual(self.lit(), 0)

    def test_clip_at_right_and_bottom_edges(self):
        self.display.draw_sprite(60, 30, [0xFF, 0xFF, 0xFF])
        self.assertEqual(self.lit(), 4 * 2)
        self.assertEqual(self.display.read_pixel(0, 0), 0)
        self.assertEqual(self.display.read_pixel(63, 31), 1)

    def test_wrap_at_edges(self):
        self.display.draw_sprite(60, 31, [0xFF, 0xFF], wrap=True)
        self.assertEqual(self.lit(), 16)
        self.assertEqual(self.display.read_pixel(0, 31), 1)
        self.assertEqual(self.display.read_pixel(3, 0), 1)
        self.assertEqual(self.display.read_pixel(4, 0), 0)

    def test_start_coordinates_wrap(self):
        self.display.draw_sprite(64 + 5, 32 + 2, [0x80])
        self.assertEqual(self.display.read_pixel(5, 2), 1)

    def test_snapshot_shape(self):
        frame = self.display.snapshot()
        self.assertEqual(len(frame), 32)
        self.assertTrue(all(len(row) == 64 for row in frame))


if __name__ == "__main__":
    unittest.main()
