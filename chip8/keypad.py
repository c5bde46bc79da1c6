from .constants import KEY_COUNT


class Keypad:
    """
    state of the 16 keys of the hex keypad
    keys holds which keys are down right now, pressed_keys queues every key that went from up to down
    so that a wait for keypress instruction can pick presses in the order they happened
    """
    def __init__(self):
        self.keys = [False] * KEY_COUNT
        self.pressed_keys = []

    def __getitem__(self, key):
        return self.is_pressed(key)

    def __str__(self):
        down = [f"{k:X}" for k, pressed in enumerate(self.keys) if pressed]
        return "[" + ",".join(down) + "]"

    def set_key_state(self, index, pressed):
        if not 0 <= index < KEY_COUNT:
            raise ValueError(f"CHIP-8 keys go from 0x0 to 0xF, got {index}")
        if pressed and not self.keys[index]:
            self.pressed_keys.append(index)
        self.keys[index] = bool(pressed)

    def is_pressed(self, key):
        return self.keys[key & 0xF]

    def untouched(self):
        return len(self.pressed_keys) == 0

    def first(self):
        """get first button pressed present in the queue, None if there isn't any"""
        if self.untouched():
            return None
        return self.pressed_keys.pop(0)

    def flush(self):
        self.pressed_keys.clear()
