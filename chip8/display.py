from .constants import SCREEN_HEIGHT, SCREEN_WIDTH, SPRITE_WIDTH


class Display:
    """monochrome framebuffer, pixels are stored row after row as 0 (OFF) or 1 (ON)"""

    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [0] * h * w

    def read_pixel(self, x, y):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        return self.buffer[y * self.w + x]

    def clear(self):
        self.buffer = [0] * self.h * self.w

    def draw_sprite(self, x, y, rows, wrap=False):
        """
        XOR the sprite rows onto the buffer with its top left corner at (x, y)
        the starting coordinates always wrap around the screen, while the pixels that
        go past the right or bottom edge are discarded unless wrap is True
        return True if any pixel was turned OFF (collision)
        """
        x, y = x % self.w, y % self.h
        collision = False
        for i, sprite_byte in enumerate(rows):
            y_coordinate = y + i
            if y_coordinate >= self.h:
                if not wrap:
                    break
                y_coordinate %= self.h
            for j in range(SPRITE_WIDTH):
                if not (sprite_byte >> (SPRITE_WIDTH - 1 - j)) & 0x1:
                    continue
                x_coordinate = x + j
                if x_coordinate >= self.w:
                    if not wrap:
                        break
                    x_coordinate %= self.w
                # the only case when a pixel gets erased is when it was ON and is turned ON again
                offset = y_coordinate * self.w + x_coordinate
                if self.buffer[offset]:
                    collision = True
                self.buffer[offset] ^= 1
        return collision

    def snapshot(self):
        """read-only copy of the buffer, one tuple per row"""
        return tuple(tuple(self.buffer[row * self.w:(row + 1) * self.w]) for row in range(self.h))

    def __str__(self):
        return "\n".join("".join("#" if p else "." for p in row) for row in self.snapshot())
