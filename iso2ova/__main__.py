from __future__ import annotations
import sys
from .cli.argument_parser import parse_args_with_config
from .orchestrator.orchestrator import Orchestrator
from .core.exceptions import Fatal, UsageError, format_exception_for_cli
def main(argv=None) -> int:
    logger = None
    try:
        args, _conf, logger = parse_args_with_config(argv)
    except UsageError as e:
        # usage text was already printed by the parser
        return e.code
    except Fatal as e:
        # Config loader already logged via U.die(logger, ...).
        return e.code
    try:
        return Orchestrator(logger, args).run()
    except Fatal as e:
        # Raised where it happened and logged there; keep the detail for -vv.
        logger.debug(f"Aborted: {format_exception_for_cli(e, verbose=2)}")
        return e.code
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (Ctrl+C).")
        return 130
def run() -> None:
    sys.exit(int(main()))
if __name__ == "__main__":
    run()
