import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame

from .constants import SCREEN_HEIGHT, SCREEN_WIDTH

# The hex keypad layout
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
# is mapped on the left side of a QWERTY keyboard
#   1 2 3 4
#   Q W E R
#   A S D F
#   Z X C V
KEY_MAPPINGS = {
    pygame.K_x: 0x0,
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_z: 0xA,
    pygame.K_c: 0xB,
    pygame.K_4: 0xC,
    pygame.K_r: 0xD,
    pygame.K_f: 0xE,
    pygame.K_v: 0xF,
}

SCALE = 15
BLUE = pygame.Color(80, 69, 155, 255)
LIGHT_BLUE = pygame.Color(136, 126, 203, 255)


class Screen:
    """pygame window drawing the framebuffer snapshots handed over by the machine"""

    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def write_pixel(self, x, y, color):
        """paint the scaled square of pixel (x, y) in the foreground colour if color is set, background otherwise"""
        pygame.draw.rect(
            self.surface,
            self.background if color == 0 else self.foreground,
            (x * self.scale, y * self.scale, self.scale, self.scale)
        )

    def render(self, frame):
        """full redraw of a framebuffer snapshot, one tuple of pixels per row"""
        self.surface.fill(self.background)
        for y, row in enumerate(frame):
            for x, pixel in enumerate(row):
                if pixel:
                    self.write_pixel(x, y, pixel)
        self.refresh()

    @staticmethod
    def refresh():
        pygame.display.flip()
