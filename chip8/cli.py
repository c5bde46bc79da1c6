import argparse
import logging
import os
import sys

from .constants import INSTRUCTIONS_PER_SECOND
from .errors import Chip8Error, LoadError
from .machine import Machine
from .quirks import Quirks

logger = logging.getLogger(__name__)

FRAMES_PER_SECOND = 60


def build_parser():
    parser = argparse.ArgumentParser(prog="chip8", description="CHIP-8 virtual machine")
    parser.add_argument("filename", help="path to the CHIP-8 ROM")
    quirks = parser.add_argument_group("quirks", "behaviour of historical interpreters")
    for name in Quirks.names():
        quirks.add_argument("--" + name.replace("_", "-"), dest=name, action="store_true")
    parser.add_argument("--speed", type=int, default=INSTRUCTIONS_PER_SECOND,
                        help=f"instructions executed per second (default {INSTRUCTIONS_PER_SECOND})")
    parser.add_argument("--debug", action="store_true", help="log every executed instruction")
    return parser


def parse_args(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.speed <= 0:
        parser.error("--speed must be a positive number")
    return args


def quirks_from_args(args):
    return Quirks(**{name: getattr(args, name) for name in Quirks.names()})


def read_rom(path):
    """read the ROM file at path, raise LoadError if it can't be read"""
    try:
        with open(path, mode='rb') as f:
            return f.read()
    except OSError as e:
        raise LoadError(f"Couldn't read ROM file {path}: {e.strerror}") from e


def configure_logging(debug=False):
    debug = debug or int(os.getenv('DEBUG', 0)) >= 1
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.debug)
    try:
        machine = Machine(read_rom(args.filename), quirks=quirks_from_args(args), speed=args.speed)
    except LoadError as e:
        sys.exit(f"********** COULDN'T LOAD THE ROM\n{e}")

    logger.info("Running %s at %d instructions per second", args.filename, args.speed)

    # the renderer pulls pygame in, keep it out of the way of argument parsing
    from .screen import KEY_MAPPINGS, Screen
    import pygame

    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_caption(os.path.basename(args.filename))
    screen = Screen()
    screen.render(machine.framebuffer())
    # emulation loop
    try:
        while not machine.halted:
            # frames per second, each frame runs the cycles matching the time elapsed since the previous one
            elapsed = clock.tick(FRAMES_PER_SECOND) / 1000
            # process user input
            # loop throught the event queue
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    machine.stop()
                elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                    if event.key == pygame.K_ESCAPE:
                        machine.stop()
                    elif event.key in KEY_MAPPINGS:
                        machine.set_key_state(KEY_MAPPINGS[event.key], event.type == pygame.KEYDOWN)
            if machine.run_for(elapsed):
                screen.render(machine.framebuffer())
    except Chip8Error:
        sys.exit(f"********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n{machine.fault}")
    finally:
        pygame.quit()
