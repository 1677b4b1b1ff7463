from __future__ import annotations
import argparse
import os
import sys

from ..core.exceptions import UsageError
from ..core.logger import c
from ..config.config_loader import Config
from .. import __version__

YAML_EXAMPLE = r"""# iso2ova config
# Run:
# ./iso2ova.py --config config.yaml images/photon.iso
# or merge configs:
# ./iso2ova.py --config base.yaml --config overrides.yaml images/photon.iso
#
# What it will do:
# - Describe one VM (CPUs, memory, E1000 NIC, IDE CD-ROM) in an OVF descriptor
# - Attach the ISO to the CD-ROM via the OVF References section
# - Bundle <name>.ovf and the ISO into an uncompressed <name>.ova tar
network: VM Network
cpus: 2
mem: 4096
output_dir: ./out
build_id: linuxkitOVF
dry_run: false
verbose: 1
"""

USAGE_HINT = "Please specify the path to the image to push"
ISO_HINT = 'Please pass an ".iso" file as the path'


def _decimal(value: str) -> str:
    """argparse type: a positive decimal integer, kept as its string form."""
    s = str(value).strip()
    if not s.isdigit() or int(s) <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return str(int(s))


class CLI:
    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        epilog = (
            c("YAML example:\n", "cyan", ["bold"]) +
            c(YAML_EXAMPLE, "cyan") +
            "\n" +
            c("Output:\n", "cyan", ["bold"]) +
            c(" • <output-dir>/<name>.ovf  OVF 1.0 descriptor (vmx-11 hardware family)\n", "cyan") +
            c(" • <output-dir>/<name>.ova  tar of the descriptor followed by the ISO\n", "cyan")
        )
        p = argparse.ArgumentParser(
            prog="iso2ova",
            description=c("iso2ova: package a bootable ISO as an OVF/OVA appliance", "green", ["bold"]),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=epilog,
        )
        p.add_argument("--config", action="append", default=[], help="YAML/JSON config file (repeatable; later overrides earlier).")
        p.add_argument("--version", action="version", version=__version__)
        p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv")
        p.add_argument("--log-file", default=None, help="Write logs to file.")
        p.add_argument("--output-dir", default=".", help="Where <name>.ovf and <name>.ova are written.")
        p.add_argument("--dry-run", action="store_true", help="Print the OVF descriptor and write nothing.")
        p.add_argument("--build-id", default="linuxkitOVF", help="Value of the envelope's vmw:buildId attribute.")
        p.add_argument("-network", "--network", default="", help="The network label the VM will use")
        p.add_argument("-cpus", "--cpus", type=_decimal, default="1", help="Number of CPUs")
        p.add_argument("-mem", "--mem", type=_decimal, default="1024", help="Amount of memory in MB")
        p.add_argument("path", nargs="?", default=None, help="Path of the .iso image to package")
        return p

    @staticmethod
    def validate(parser: argparse.ArgumentParser, args: argparse.Namespace, logger) -> None:
        if not args.path:
            print(USAGE_HINT, file=sys.stderr)
            parser.print_usage(sys.stderr)
            logger.debug("No image path given")
            raise UsageError(1, USAGE_HINT)
        if not str(args.path).endswith(".iso"):
            logger.error(ISO_HINT)
            parser.print_usage(sys.stderr)
            raise UsageError(1, ISO_HINT, context={"path": str(args.path)})
        if os.path.basename(str(args.path)) == ".iso":
            msg = f"Cannot derive a VM name from {args.path}"
            logger.error(msg)
            parser.print_usage(sys.stderr)
            raise UsageError(1, msg, context={"path": str(args.path)})


def parse_args_with_config(argv=None, logger=None):
    """Two-phase parse.

    Phase 0: parse ONLY global flags needed to find config/logging
    Phase 1: load+merge config files and apply as argparse defaults
    Phase 2: full parse_args with defaults applied (so the image path can come from config)

    Returns: (args, merged_config_dict, logger)
    """
    parser = CLI.build_parser()

    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", action="append", default=[])
    pre.add_argument("-v", "--verbose", action="count", default=0)
    pre.add_argument("--log-file", dest="log_file", default=None)
    args0, _rest = pre.parse_known_args(argv)

    from ..core.logger import Log  # local import to avoid cycles
    own_logger = logger is None
    if own_logger:
        logger = Log.setup(getattr(args0, "verbose", 0), getattr(args0, "log_file", None))

    conf = {}
    cfgs = getattr(args0, "config", None) or []
    if cfgs:
        cfgs = Config.expand_configs(logger, list(cfgs))
        conf = Config.load_many(logger, cfgs)
        Config.apply_as_defaults(logger, parser, conf)
        # -v counts on top of the config value, as argparse does for args.verbose
        if own_logger and ("verbose" in conf or "log_file" in conf):
            verbose = args0.verbose + int(conf.get("verbose") or 0)
            logger = Log.setup(verbose, args0.log_file or conf.get("log_file"))

    args = parser.parse_args(argv)
    CLI.validate(parser, args, logger)
    return args, conf, logger
