import os
import tempfile
import unittest
from unittest import mock

from chip8.cli import build_parser, parse_args, quirks_from_args, read_rom
from chip8.errors import LoadError
from chip8.quirks import Quirks


class TestArguments(unittest.TestCase):
    def test_defaults(self):
        args = parse_args(["game.ch8"])
        self.assertEqual(args.filename, "game.ch8")
        self.assertEqual(args.speed, 700)
        self.assertFalse(args.debug)
        self.assertEqual(quirks_from_args(args), Quirks())

    def test_quirk_flags(self):
        args = parse_args(["game.ch8", "--bitshift-ignores-vy", "--store-and-load-increment-index"])
        self.assertEqual(quirks_from_args(args),
                         Quirks(bitshift_ignores_vy=True, store_and_load_increment_index=True))

    def test_every_quirk_has_a_flag(self):
        flags = ["--" + name.replace("_", "-") for name in Quirks.names()]
        quirks = quirks_from_args(parse_args(["game.ch8"] + flags))
        self.assertEqual(quirks.enabled(), Quirks.names())

    def test_filename_required(self):
        with self.assertRaises(SystemExit):
            parse_args([])

    def test_bad_speed(self):
        with self.assertRaises(SystemExit):
            parse_args(["game.ch8", "--speed", "0"])

    def test_bad_speed_reported_by_the_parser(self):
        with mock.patch("chip8.cli.build_parser", wraps=build_parser) as factory:
            with mock.patch("argparse.ArgumentParser.error", side_effect=SystemExit(2)) as error:
                with self.assertRaises(SystemExit):
                    parse_args(["game.ch8", "--speed", "-5"])
        self.assertEqual(factory.call_count, 1)
        error.assert_called_once_with("--speed must be a positive number")


class TestReadRom(unittest.TestCase):
    def test_read(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "rom.ch8")
            with open(path, "wb") as f:
                f.write(b"\x00\xE0\x12\x02")
            self.assertEqual(read_rom(path), b"\x00\xE0\x12\x02")

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(LoadError):
                read_rom(os.path.join(tmp, "missing.ch8"))


if __name__ == "__main__":
    unittest.main()
