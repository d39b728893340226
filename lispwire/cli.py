"""
lispwire-eval: evaluate expressions on a peer from the command line.

    lispwire-eval --host 127.0.0.1 --port 4005 "(+ 40 2)"
    lispwire-eval --config config.yaml "(list 1 2)" "(car nil)"
"""

import argparse
import dataclasses
import logging
import sys
from typing import Optional

from .config import WireConfig, load_config
from .exceptions import WireError
from .interface import LispSession
from .io import WireConst
from .utils import run_with_keyboard_interrupt


def build_config(args: argparse.Namespace) -> WireConfig:
    config = load_config(args.config) if args.config else WireConfig(host="127.0.0.1")
    # Command line flags override the file; replace() validates them again
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.print_traffic:
        overrides["print_traffic"] = True
    return dataclasses.replace(config, **overrides)


async def evaluate_all(config: WireConfig, expressions: list[str], logger: logging.Logger) -> int:
    status = 0
    async with LispSession(config, logger=logger) as session:
        for expression in expressions:
            reply = await session.evaluate(expression)
            if reply.ok:
                print(reply.result)
            else:
                print(f"{expression}: status {reply.status}: {reply.condition}", file=sys.stderr)
                status = 1
    return status


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="lispwire-eval", description="Evaluate expressions on a Lisp evaluation server")
    ap.add_argument("expressions", nargs="+", metavar="EXPR", help="Expression text to evaluate")
    ap.add_argument("--config", help="YAML configuration file with a 'lispwire' section")
    ap.add_argument("--host", help="Peer host (default: 127.0.0.1)")
    ap.add_argument("--port", type=int, help=f"Peer port (default: {WireConst.DEFAULT_PORT})")
    ap.add_argument("--timeout", type=float, help="Seconds to wait for reply bytes (default: wait forever)")
    ap.add_argument("--print-traffic", action="store_true", help="Hexdump requests and replies")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger("lispwire")

    try:
        config = build_config(args)
    except WireError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    async def _main() -> int:
        try:
            return await evaluate_all(config, args.expressions, logger)
        except WireError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return run_with_keyboard_interrupt(_main)


if __name__ == "__main__":
    raise SystemExit(main())
