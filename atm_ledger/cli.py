"""Interactive ATM menu over a card store."""

import argparse
import logging
import sys
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Callable

from atm_ledger.config import LedgerConfig, parse_pin_budget
from atm_ledger.exceptions import ConfigurationError, SinkError
from atm_ledger.logging import setup_logging
from atm_ledger.models.card import is_valid_card_number
from atm_ledger.models.enums import ErrorKind
from atm_ledger.models.results import OperationResult, SessionAuthBudget
from atm_ledger.store.card_store import CardStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

MENU = (
    "Select an action:\n"
    "1 - Add a card\n"
    "2 - Check balance\n"
    "3 - Withdraw funds\n"
    "4 - Deposit funds\n"
    "5 - Show all cards\n"
    "Type 'exit' to quit"
)

INVALID_NUMBER_MESSAGE = "Invalid card number format. It should be in the format XXXX-XXXX-XXXX-XXXX."
INVALID_INPUT_MESSAGE = "Invalid input. Please enter a valid number."

MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_CARD_NUMBER_FORMAT: INVALID_NUMBER_MESSAGE,
    ErrorKind.INVALID_PIN_FORMAT: "PIN Code must be exactly 4 digits.",
    ErrorKind.DUPLICATE_CARD_NUMBER: "Card with this number already exists.",
    ErrorKind.CARD_NOT_FOUND: "Card not found.",
    ErrorKind.CARD_BLOCKED: "Card {number} is blocked. Contact customer support.",
    ErrorKind.INCORRECT_PIN: "Invalid PIN Code.",
    ErrorKind.INVALID_AMOUNT: "Invalid amount. Please enter a positive number up to 1,000,000.",
    ErrorKind.INSUFFICIENT_FUNDS: "Insufficient funds.",
    ErrorKind.PERSISTENCE_WRITE_FAILURE: "Warning: changes could not be saved to the cards file.",
}


def parse_amount(raw: str) -> Decimal | None:
    """Parse an amount typed by the operator, rounded to cents.

    Returns None for anything that is not a finite decimal number.
    """
    try:
        amount = Decimal(raw.strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # too many digits for the decimal context
        return None


class LedgerCli:
    """Menu loop: reads operator input, calls the store, renders results."""

    def __init__(
        self,
        store: CardStore,
        budget: SessionAuthBudget | None = None,
        input_fn: Callable[[], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self.store = store
        self.budget = budget or SessionAuthBudget()
        self._input = input_fn
        self._output = output
        self._actions: dict[str, Callable[[], None]] = {
            "1": self.add_card,
            "2": self.check_balance,
            "3": self.withdraw,
            "4": self.deposit,
            "5": self.show_cards,
        }

    def run(self) -> None:
        """Run the menu until ``exit`` or end of input.

        The auto-unlock sweep runs after every menu choice.
        """
        self._output("Welcome to the ATM App!")
        while True:
            self._output(MENU)
            try:
                choice = self._input().strip()
                if choice == "exit":
                    break
                action = self._actions.get(choice)
                if action is None:
                    self._output("Invalid choice. Please enter a number (1-5) or 'exit' to quit.")
                else:
                    action()
            except EOFError:
                break
            self.sweep()
        self._output("Exiting the program.")

    def sweep(self) -> None:
        for number in self.store.unlock_if_possible():
            self._output(f"Card {number} has been automatically unlocked.")

    # Actions
    def add_card(self) -> None:
        number = self._ask("Enter card number (format XXXX-XXXX-XXXX-XXXX):")
        if not is_valid_card_number(number):
            self._output(INVALID_NUMBER_MESSAGE)
            return
        pin = self._ask("Enter PIN Code (4 digits):")
        balance = parse_amount(self._ask("Enter balance:"))
        if balance is None:
            self._output(INVALID_INPUT_MESSAGE)
            return

        result = self.store.add_card(number, pin, balance)
        if result.ok:
            self._output(f"Card {number} added.")
        self._render(result, number)

    def check_balance(self) -> None:
        credentials = self._ask_credentials()
        if credentials is None:
            return
        number, pin = credentials

        result = self._track(self.store.get_balance(number, pin, self.budget, self._retry_pin))
        if result.ok:
            self._output(f"Card balance: {result.balance}")
        self._render(result, number)

    def withdraw(self) -> None:
        credentials = self._ask_credentials()
        if credentials is None:
            return
        number, pin = credentials
        amount = parse_amount(self._ask("Enter amount to withdraw:"))
        if amount is None:
            self._output(INVALID_INPUT_MESSAGE)
            return

        result = self._track(
            self.store.withdraw(number, pin, amount, self.budget, self._retry_pin)
        )
        if result.ok:
            self._output(f"Withdrawal successful. New balance: {result.balance}")
        self._render(result, number)

    def deposit(self) -> None:
        credentials = self._ask_credentials()
        if credentials is None:
            return
        number, pin = credentials
        amount = parse_amount(self._ask("Enter amount to deposit (up to 1,000,000):"))
        if amount is None:
            self._output(INVALID_INPUT_MESSAGE)
            return

        result = self._track(
            self.store.deposit(number, pin, amount, self.budget, self._retry_pin)
        )
        if result.ok:
            self._output(f"Deposit successful. New balance: {result.balance}")
        self._render(result, number)

    def show_cards(self) -> None:
        lines = self.store.list_cards()
        if not lines:
            self._output("No cards on file.")
        for line in lines:
            self._output(line)

    # Helpers
    def _ask(self, prompt: str) -> str:
        self._output(prompt)
        return self._input().strip()

    def _ask_credentials(self) -> tuple[str, str] | None:
        number = self._ask("Enter card number:")
        if not is_valid_card_number(number):
            self._output(INVALID_NUMBER_MESSAGE)
            return None
        return number, self._ask("Enter PIN Code:")

    def _retry_pin(self, remaining: int | None) -> str | None:
        if remaining is None:
            self._output("Invalid PIN Code. Try again:")
        else:
            self._output(f"Invalid PIN Code. Attempts left: {remaining}")
        try:
            return self._input().strip()
        except EOFError:
            return None

    def _track(self, result: OperationResult) -> OperationResult:
        if result.budget is not None:
            self.budget = result.budget
        return result

    def _render(self, result: OperationResult, number: str) -> None:
        if result.just_blocked:
            self._output(f"Card {number} has been blocked due to 3 incorrect PIN attempts.")
        elif result.error is not None:
            self._output(MESSAGES[result.error].format(number=number))
        if result.write_failure is not None:
            self._output(MESSAGES[result.write_failure])


def _budget_arg(raw: str) -> int | None:
    try:
        return parse_pin_budget(raw)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Interactive ATM card ledger")
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Cards file (default: $CARDS_FILE or cards.txt)",
    )
    parser.add_argument(
        "--session-budget",
        type=_budget_arg,
        default=argparse.SUPPRESS,
        help="Incorrect PINs allowed per session before a card is blocked, or 'none' (default: 3)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: $LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["standard", "json"],
        help="Log format (default: $LOG_FORMAT or standard)",
    )
    args = parser.parse_args(argv)

    try:
        config = LedgerConfig.from_env()
    except ConfigurationError as e:
        parser.error(str(e))

    if args.store:
        config.storage.path = Path(args.store)
    if "session_budget" in args:
        config.session.pin_budget = args.session_budget
    if args.log_level:
        config.log_level = args.log_level
    if args.log_format:
        config.log_format = args.log_format

    setup_logging(level=config.log_level, format_type=config.log_format)

    try:
        store = CardStore.open(config.storage.path)
    except SinkError as e:
        logger.error("Cannot open card store: %s", e)
        print(f"Cannot open card store: {e}", file=sys.stderr)
        return 1

    LedgerCli(store, SessionAuthBudget(limit=config.session.pin_budget)).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
