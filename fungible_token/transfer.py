"""
Transfer Protocol Module

Moves value between two registered accounts as a single indivisible unit.
All checks run before the first write, and checks and writes share one
storage transaction, so a failed transfer leaves no trace.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import (
    InsufficientBalance, InvalidAmount, ReceiverNotRegistered, SenderNotRegistered,
)
from .ledger import Ledger
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class TransferReceipt:
    """Outcome of a committed transfer"""
    sender_id: str
    receiver_id: str
    amount: int
    memo: Optional[str]
    sender_balance: int
    receiver_balance: int


class TransferProtocol:
    """Orchestrates one atomic value movement using the ledger as its only state"""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger
        self.logger = get_logger("fungible_token.transfer")

    def validate(self, sender_id: str, receiver_id: str, amount: int) -> None:
        """
        Check every precondition of a transfer without touching state

        Raises:
            InvalidAmount: If amount is not a non-negative int
            SenderNotRegistered: If the sender holds no balance entry
            ReceiverNotRegistered: If the receiver never registered
            InsufficientBalance: If the sender's balance is below amount
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidAmount(f"Transfer amount must be a non-negative integer, got {amount!r}")
        if not self.ledger.has_account(sender_id):
            raise SenderNotRegistered(f"The account {sender_id} is not registered")
        if not self.ledger.has_account(receiver_id):
            raise ReceiverNotRegistered(f"The account {receiver_id} is not registered")

        sender_balance = self.ledger.get_balance(sender_id)
        if sender_balance < amount:
            raise InsufficientBalance(
                f"The account {sender_id} has insufficient balance: "
                f"balance {sender_balance}, requested {amount}"
            )

    def transfer(
        self,
        sender_id: str,
        receiver_id: str,
        amount: int,
        memo: Optional[str] = None
    ) -> TransferReceipt:
        """
        Debit the sender and credit the receiver by amount

        Self-transfers are permitted and leave the balance unchanged. Total
        supply is never touched.

        Args:
            sender_id: Authenticated caller
            receiver_id: Registered receiving account
            amount: Amount in the token's smallest unit
            memo: Optional free-form note carried into the event

        Returns:
            TransferReceipt with the post-transfer balances
        """
        with self.ledger.atomic():
            # Checks read the same snapshot the writes apply to
            self.validate(sender_id, receiver_id, amount)
            # Read-after-write so a self-transfer nets to zero
            self.ledger.set_balance(sender_id, self.ledger.get_balance(sender_id) - amount)
            self.ledger.set_balance(receiver_id, self.ledger.get_balance(receiver_id) + amount)

        receipt = TransferReceipt(
            sender_id=sender_id,
            receiver_id=receiver_id,
            amount=amount,
            memo=memo,
            sender_balance=self.ledger.get_balance(sender_id),
            receiver_balance=self.ledger.get_balance(receiver_id),
        )

        log_action(
            self.logger, "info", f"Transfer committed: {sender_id} -> {receiver_id}",
            account_id=sender_id, action="transfer", resource=f"account:{receiver_id}",
            extra={"amount": str(amount), "memo": memo}
        )
        return receipt
