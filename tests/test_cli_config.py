import contextlib
import io
import logging
import tempfile
import unittest
from pathlib import Path

from iso2ova.cli.argument_parser import parse_args_with_config
from iso2ova.core.exceptions import UsageError


class TestCLIConfigTwoPhaseParse(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger("iso2ova.test")

    def test_defaults(self):
        args, conf, _logger = parse_args_with_config(argv=["vm.iso"], logger=self.logger)
        self.assertEqual((args.network, args.cpus, args.mem), ("", "1", "1024"))
        self.assertEqual(conf, {})

    def test_single_dash_flags(self):
        args, _conf, _logger = parse_args_with_config(
            argv=["-network", "corp", "-cpus", "2", "-mem", "4096", "path/to/vm.iso"], logger=self.logger
        )
        self.assertEqual((args.network, args.cpus, args.mem, args.path), ("corp", "2", "4096", "path/to/vm.iso"))

    def test_config_supplies_defaults_and_flags_override(self):
        with tempfile.TemporaryDirectory() as td:
            td = Path(td)
            cfg = td / "cfg.yaml"
            cfg.write_text(f"network: lab\ncpus: 4\nmem: 2048\npath: {td / 'vm.iso'}\n", encoding="utf-8")

            args, conf, _logger = parse_args_with_config(argv=["--config", str(cfg), "-mem", "8192"], logger=self.logger)

            self.assertEqual(args.network, "lab")
            self.assertEqual(args.cpus, "4")
            self.assertEqual(args.mem, "8192")
            self.assertEqual(Path(args.path), td / "vm.iso")
            self.assertIn("network", conf)

    def test_later_config_overrides_earlier(self):
        with tempfile.TemporaryDirectory() as td:
            td = Path(td)
            (td / "base.yaml").write_text("network: base\noutput-dir: /tmp/base\n", encoding="utf-8")
            (td / "over.json").write_text('{"network": "over"}', encoding="utf-8")
            args, _conf, _logger = parse_args_with_config(
                argv=["--config", str(td / "base.yaml"), "--config", str(td / "over.json"), "vm.iso"],
                logger=self.logger,
            )
            self.assertEqual(args.network, "over")
            self.assertEqual(args.output_dir, "/tmp/base")

    def test_missing_path_is_usage_error(self):
        with contextlib.redirect_stderr(io.StringIO()) as err:
            with self.assertRaises(UsageError) as ctx:
                parse_args_with_config(argv=["-cpus", "2"], logger=self.logger)
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Please specify the path", err.getvalue())
        self.assertIn("usage:", err.getvalue())

    def test_non_iso_is_usage_error(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(UsageError):
                parse_args_with_config(argv=["disk.img"], logger=self.logger)

    def test_bare_suffix_is_usage_error(self):
        with contextlib.redirect_stderr(io.StringIO()) as err:
            with self.assertRaises(UsageError) as ctx:
                parse_args_with_config(argv=["path/.iso"], logger=self.logger)
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Cannot derive a VM name", str(ctx.exception))
        self.assertIn("usage:", err.getvalue())

    def test_config_verbose_raises_log_level(self):
        with tempfile.TemporaryDirectory() as td:
            cfg = Path(td) / "cfg.yaml"
            cfg.write_text("verbose: 2\n", encoding="utf-8")
            with contextlib.redirect_stderr(io.StringIO()):
                args, _conf, logger = parse_args_with_config(argv=["--config", str(cfg), "vm.iso"])
        self.assertEqual(args.verbose, 2)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_verbose_flag_counts_on_top_of_config(self):
        with tempfile.TemporaryDirectory() as td:
            cfg = Path(td) / "cfg.yaml"
            cfg.write_text("verbose: 1\n", encoding="utf-8")
            args, _conf, _logger = parse_args_with_config(argv=["--config", str(cfg), "-v", "vm.iso"], logger=self.logger)
        self.assertEqual(args.verbose, 2)

    def test_non_numeric_cpus_rejected(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                parse_args_with_config(argv=["-cpus", "two", "vm.iso"], logger=self.logger)
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
