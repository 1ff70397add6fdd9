"""
commands.py - Text command front end

Parses human-readable commands, calls the ledger through a LedgerService and
prints the results. Commands come one per line, either interactively or from
a script file:

    create-ledger <name> description <description> seed <seed>
    create-account <address>
    process-transaction <id> amount <n> fee <n> note <note> payer <addr> receiver <addr>
    get-account-balance <address>
    get-account-balances
    get-transaction <id>
    get-block <number>
    get-blocks
    validate

Values containing spaces may be quoted. Ledger errors are reported and
processing continues; malformed commands raise CommandProcessorError.
"""

from __future__ import annotations
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO, Union
import shlex
import sys

from .core import LedgerError
from .service import LedgerService, BlockSummary, TransactionSummary, GENESIS


class CommandProcessorError(Exception):
    """Raised for commands that cannot be parsed or executed."""

    def __init__(self, command: str, reason: str, line_number: int = 0):
        super().__init__(f"{command} - {reason} (line {line_number})")
        self.command = command
        self.reason = reason
        self.line_number = line_number


CREATE_LEDGER_KEYWORDS = ("create-ledger", "description", "seed")
PROCESS_TRANSACTION_KEYWORDS = ("process-transaction", "amount", "fee", "note", "payer", "receiver")


class CommandProcessor:
    """
    Executes ledger commands against a single LedgerService.

    Args:
        service: Service to drive (default: a fresh LedgerService)
        out: Stream for results (default: sys.stdout at print time)
    """

    def __init__(self, service: Optional[LedgerService] = None, out: Optional[TextIO] = None):
        self.service = service if service is not None else LedgerService()
        self.out = out
        self._handlers: Dict[str, Callable[[List[str], int], Optional[int]]] = {
            "create-ledger": self._create_ledger,
            "create-account": self._create_account,
            "process-transaction": self._process_transaction,
            "get-account-balance": self._get_account_balance,
            "get-account-balances": self._get_account_balances,
            "get-transaction": self._get_transaction,
            "get-block": self._get_block,
            "get-blocks": self._get_blocks,
            "validate": self._validate,
        }

    def _emit(self, text: str = "") -> None:
        print(text, file=self.out if self.out is not None else sys.stdout)

    def _report(self, action: str, error: LedgerError) -> None:
        self._emit(f"***ERROR*** {action}")
        self._emit(f"{error}\n***********")

    # ========================================================================
    # ENTRY POINTS
    # ========================================================================

    def process_command(self, command: str, line_number: int = 0) -> Optional[int]:
        """
        Execute one command line.

        Args:
            command: The command text
            line_number: Line in the script file, 0 when not read from a file

        Returns:
            The balance for get-account-balance, otherwise None

        Raises:
            CommandProcessorError: Unknown command, missing arguments, bad numbers,
                                   or a LedgerError the handler does not report
                                   itself (e.g. a second create-ledger)
        """
        try:
            tokens = shlex.split(command)
        except ValueError as e:
            raise CommandProcessorError(command, str(e), line_number)
        if not tokens:
            return None

        self._emit(f"processing command: {command}")
        handler = self._handlers.get(tokens[0])
        if handler is None:
            raise CommandProcessorError(tokens[0], "invalid command", line_number)
        try:
            return handler(tokens, line_number)
        except LedgerError as e:
            raise CommandProcessorError(tokens[0], str(e), line_number)

    def process_command_file(self, path: Union[str, Path]) -> None:
        """
        Execute every command in a script file.

        Blank lines are skipped, lines starting with '#' are echoed as comments.
        A CommandProcessorError is reported with its line number and the
        remaining lines still run.
        """
        with open(path, encoding="utf-8") as script:
            for line_number, line in enumerate(script, start=1):
                line = line.rstrip("\n")
                if not line.strip():
                    continue
                if line.startswith("#"):
                    self._emit(line)
                    continue
                try:
                    self.process_command(line, line_number)
                except CommandProcessorError as e:
                    self._emit(f"***ERROR*** {e.command}")
                    self._emit(e.reason)
                    self._emit(f"Line number: {e.line_number}\n***********")

    # ========================================================================
    # PARSING
    # ========================================================================

    @staticmethod
    def _keyword_values(tokens: List[str], keywords, line_number: int) -> Dict[str, str]:
        """
        Split tokens into the values following each keyword.

        Keywords must appear in the given order; the first keyword is the
        command itself. Unquoted multi-word values are joined with spaces.
        """
        values: Dict[str, str] = {}
        current = keywords[0]
        parts: List[str] = []
        index = 1
        for token in tokens[1:]:
            if index < len(keywords) and token == keywords[index]:
                values[current] = " ".join(parts)
                current = keywords[index]
                index += 1
                parts = []
            else:
                parts.append(token)
        values[current] = " ".join(parts)
        if index != len(keywords):
            raise CommandProcessorError(keywords[0], f"missing keyword '{keywords[index]}'", line_number)
        return values

    @staticmethod
    def _argument(tokens: List[str], line_number: int) -> str:
        if len(tokens) < 2:
            raise CommandProcessorError(tokens[0], "missing argument", line_number)
        return " ".join(tokens[1:])

    @staticmethod
    def _integer(command: str, label: str, text: str, line_number: int) -> int:
        try:
            return int(text)
        except ValueError:
            raise CommandProcessorError(command, f"{label} must be an integer, got {text!r}", line_number)

    # ========================================================================
    # HANDLERS
    # ========================================================================

    def _create_ledger(self, tokens: List[str], line_number: int) -> None:
        values = self._keyword_values(tokens, CREATE_LEDGER_KEYWORDS, line_number)
        self.service.create_ledger(values["create-ledger"], values["description"], values["seed"])
        self._emit(f"Created ledger {values['create-ledger']}")

    def _create_account(self, tokens: List[str], line_number: int) -> None:
        address = self._argument(tokens, line_number)
        try:
            self.service.create_account(address)
        except LedgerError as e:
            self._report("create account", e)
            return
        self._emit(f"Created account {address}")

    def _process_transaction(self, tokens: List[str], line_number: int) -> None:
        values = self._keyword_values(tokens, PROCESS_TRANSACTION_KEYWORDS, line_number)
        command = "process-transaction"
        amount = self._integer(command, "amount", values["amount"], line_number)
        fee = self._integer(command, "fee", values["fee"], line_number)
        try:
            transaction_id = self.service.process_transaction(
                values["process-transaction"], amount, fee, values["note"],
                values["payer"], values["receiver"],
            )
        except LedgerError as e:
            self._report("process transaction", e)
            return
        self._emit(f"Transaction {transaction_id} successful")

    def _get_account_balance(self, tokens: List[str], line_number: int) -> Optional[int]:
        address = self._argument(tokens, line_number)
        try:
            balance = self.service.get_account_balance(address)
        except LedgerError as e:
            self._report("get account balance", e)
            return None
        self._emit(f"{address}: balance = {balance}")
        return balance

    def _get_account_balances(self, tokens: List[str], line_number: int) -> None:
        try:
            balances = self.service.get_account_balances()
        except LedgerError as e:
            self._report("get account balances", e)
            return
        self._emit("Account Balances:")
        for address, balance in balances:
            self._emit(f"Account Address: {address}, Balance: {balance}")

    def _print_transaction(self, tx: TransactionSummary, indent: str = "\t") -> None:
        self._emit(f"{indent}Amount: {tx.amount}")
        self._emit(f"{indent}Fee: {tx.fee}")
        self._emit(f"{indent}Note: {tx.note}")
        self._emit(f"{indent}Payer: {tx.payer}")
        self._emit(f"{indent}Receiver: {tx.receiver}")

    def _get_transaction(self, tokens: List[str], line_number: int) -> None:
        tx = self.service.get_transaction(self._argument(tokens, line_number))
        if tx is None:
            self._emit("Transaction not found.")
            return
        self._emit(f"Transaction ID: {tx.transaction_id}")
        self._print_transaction(tx)

    def _get_block(self, tokens: List[str], line_number: int) -> None:
        text = self._argument(tokens, line_number)
        block: Optional[BlockSummary] = self.service.get_block(
            self._integer("get-block", "block number", text, line_number)
        )
        if block is None:
            self._emit(f"Block {text} does not exist")
            return
        self._emit(f"Block Number: {block.number}")
        self._emit(f"Previous Hash: {block.previous_hash}")
        self._emit(f"Hash: {block.hash}")
        self._emit("Transactions:")
        for tx in block.transactions:
            self._emit(f"\tTransaction ID: {tx.transaction_id}")
            self._print_transaction(tx)
            self._emit()
        self._emit("Account Balances:")
        for address, balance in block.balances:
            self._emit(f"\tAccount Address: {address}, Balance: {balance}")
        previous = "Genesis Block" if block.previous_block == GENESIS else block.previous_block
        self._emit(f"Previous Block: {previous}")

    def _get_blocks(self, tokens: List[str], line_number: int) -> None:
        self._emit(str(self.service.get_blocks()))

    def _validate(self, tokens: List[str], line_number: int) -> None:
        try:
            self.service.validate()
        except LedgerError as e:
            self._report("validate", e)
            return
        self._emit("Ledger is valid")
