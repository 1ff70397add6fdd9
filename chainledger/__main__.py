"""
Run ledger commands from a script file or the command line.

    python -m chainledger ledger.script
    python -m chainledger create-ledger test description "a ledger" seed harvard
"""

import argparse
from pathlib import Path
import shlex
import sys

from .commands import CommandProcessor, CommandProcessorError
from .core import TRANSACTIONS_PER_BLOCK, MIN_TRANSACTION_FEE
from .service import LedgerService


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="chainledger", description="Process block ledger commands.")
    parser.add_argument("input", nargs="+", help="Path to a command script, or a single command")
    parser.add_argument("--block-size", type=int, default=TRANSACTIONS_PER_BLOCK,
                        help="Transactions per committed block")
    parser.add_argument("--min-fee", type=int, default=MIN_TRANSACTION_FEE,
                        help="Minimum transaction fee")
    parser.add_argument("--verbose", action="store_true", help="Print ledger status lines")
    args = parser.parse_args(argv)

    service = LedgerService(block_size=args.block_size, min_fee=args.min_fee, verbose=args.verbose)
    processor = CommandProcessor(service)

    if len(args.input) == 1 and Path(args.input[0]).is_file():
        processor.process_command_file(args.input[0])
        return 0

    try:
        processor.process_command(shlex.join(args.input))
    except CommandProcessorError as e:
        print(f"***ERROR*** {e.command}\n{e.reason}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
