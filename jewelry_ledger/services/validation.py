"""
Double-entry checks for transaction drafts.

check_draft is pure: it looks only at the amounts, never at the
database, and reports the first rule the draft breaks. The
ledger service raises the reported error; API clients and
tests can also call it directly to validate a draft up front.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from jewelry_ledger.config import MONEY_PLACES
from jewelry_ledger.exceptions import (
    DoubleEntryError,
    InsufficientEntriesError,
    InvalidEntryError,
    UnbalancedEntriesError,
)

ZERO = Decimal("0.00")


def money(value) -> Decimal:
    """Quantize any numeric value to two decimal places."""
    return Decimal(str(value)).quantize(MONEY_PLACES)


@dataclass(frozen=True)
class DraftCheck:
    ok: bool
    total_debit: Decimal
    total_credit: Decimal
    error: DoubleEntryError | None = None


def check_draft(
    entries: Sequence, total_amount: Decimal | None = None
) -> DraftCheck:
    """
    Check the double-entry rules on a set of entries.

    Rules, in order:
    - at least two entries
    - every entry has exactly one strictly positive side
    - total debits == total credits
    - total debits == total_amount, when one is given
    """
    debits = [money(e.debit_amount) for e in entries]
    credits = [money(e.credit_amount) for e in entries]
    total_debit = sum(debits, ZERO)
    total_credit = sum(credits, ZERO)

    def failed(error: DoubleEntryError) -> DraftCheck:
        return DraftCheck(False, total_debit, total_credit, error)

    if len(entries) < 2:
        return failed(InsufficientEntriesError(
            f"A transaction needs at least 2 entries, got {len(entries)}"
        ))

    for position, (debit, credit) in enumerate(zip(debits, credits), start=1):
        if debit < 0 or credit < 0:
            return failed(InvalidEntryError(
                f"Entry {position} has a negative amount"
            ))
        if (debit > 0) == (credit > 0):
            return failed(InvalidEntryError(
                f"Entry {position} must have either a debit or a credit "
                f"amount, not both or neither"
            ))

    if total_debit != total_credit:
        return failed(UnbalancedEntriesError(
            f"Transaction does not balance: "
            f"debits={total_debit}, credits={total_credit}"
        ))

    if total_amount is not None and money(total_amount) != total_debit:
        return failed(UnbalancedEntriesError(
            f"Entries total {total_debit} but the transaction "
            f"amount is {money(total_amount)}"
        ))

    return DraftCheck(True, total_debit, total_credit)
