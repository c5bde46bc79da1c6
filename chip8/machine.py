import enum
import logging
from fractions import Fraction

from .constants import INSTRUCTIONS_PER_SECOND, TIMER_HZ
from .cpu import Chip8
from .display import Display
from .errors import Chip8Error
from .keypad import Keypad
from .quirks import Quirks

logger = logging.getLogger(__name__)


class State(enum.Enum):
    RUNNING = "running"
    WAITING_FOR_KEY = "waiting for key"
    HALTED = "halted"


class Machine:
    """
    Execution loop around a Chip8 cpu.

    The host calls run_for() with the wall-clock time elapsed since the previous call:
    cpu cycles are executed at `speed` instructions per second and the delay/sound timers
    tick at 60Hz on their own schedule, so timer countdowns don't depend on the cpu speed.
    A wait for keypress parks the machine in WAITING_FOR_KEY, which is polled against the
    keypad at every cycle boundary and on every run_for() call instead of blocking the host loop.
    """

    def __init__(self, rom=b"", quirks=None, speed=INSTRUCTIONS_PER_SECOND, rng=None):
        if speed <= 0:
            raise ValueError(f"speed must be a positive number of instructions per second, got {speed}")
        self.display = Display()
        self.keypad = Keypad()
        self.quirks = quirks if quirks is not None else Quirks()
        self.cpu = Chip8(self.display, self.keypad, self.quirks, rng)
        self.cpu.mem.load_rom(rom)
        self.speed = Fraction(speed)
        self.state = State.RUNNING
        self.fault = None
        self.cycles = 0
        self._stop_requested = False
        self._elapsed = Fraction(0)    # emulated wall-clock seconds, kept exact so no tick is lost to rounding
        self._cycle_slots = 0
        self._timer_ticks = 0
        if self.quirks.enabled():
            logger.info("Quirks enabled: %s", ", ".join(self.quirks.enabled()))

    def __str__(self):
        return f"STATE:{self.state.value} | CYCLES:{self.cycles}\n{self.cpu}"

    @property
    def halted(self):
        return self.state is State.HALTED

    @property
    def delay_timer(self):
        return self.cpu.dt

    @property
    def sound_timer(self):
        return self.cpu.st

    @property
    def sound_active(self):
        return self.cpu.st > 0

    def set_key_state(self, index, pressed):
        self.keypad.set_key_state(index, pressed)

    def framebuffer(self):
        return self.display.snapshot()

    def stop(self):
        """ask the machine to halt at the next cycle boundary"""
        self._stop_requested = True

    def _halt(self, reason):
        self.state = State.HALTED
        logger.info("Machine halted: %s", reason)

    def step(self):
        """move the machine past one cycle boundary"""
        if self.state is State.HALTED:
            return
        if self._stop_requested:
            self._halt("stop requested")
            return
        if self.state is State.WAITING_FOR_KEY:
            key = self.keypad.first()
            if key is None:
                return
            self.cpu.resume_with_key(key)
            self.state = State.RUNNING
            return
        try:
            self.cpu.cycle()
        except Chip8Error as err:
            self.fault = err
            logger.error("The emulator crashed with the following state\n%s", err)
            self._halt(type(err).__name__)
            raise
        self.cycles += 1
        if self.cpu.waiting:
            self.state = State.WAITING_FOR_KEY

    def tick_timers(self):
        if self.state is not State.HALTED:
            self.cpu.tick_timers()

    def run_for(self, seconds):
        """
        emulate `seconds` of wall-clock time
        return True if the display changed during this batch
        """
        # host frame times are short decimals or simple fractions (1/60, 1/144), recover them exactly
        self._elapsed += Fraction(seconds).limit_denominator(1_000_000)
        cycles_due = int(self._elapsed * self.speed) - self._cycle_slots
        ticks_due = int(self._elapsed * TIMER_HZ) - self._timer_ticks
        redraw = False
        try:
            for _ in range(cycles_due):
                self._cycle_slots += 1
                if self.state is State.HALTED:
                    break
                self.step()
                redraw = redraw or self.cpu.draw
            # a waiting machine looks at the keypad on every host tick, even when no cycle is due
            if self.state is State.WAITING_FOR_KEY:
                self.step()
            for _ in range(ticks_due):
                self._timer_ticks += 1
                self.tick_timers()
        finally:
            # presses only count for the batch they happened in, unless the machine is still waiting for one
            if self.state is not State.WAITING_FOR_KEY:
                self.keypad.flush()
        return redraw
