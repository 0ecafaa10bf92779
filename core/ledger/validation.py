"""
Journal entry validation

Checks entry data against the chart of accounts before anything is written.
The first violated rule is raised as ValidationError; line numbers are 1-based.

Output is normalized (integer minor units) and ready to insert.
"""

from collections.abc import Mapping, Sequence

from core.constants import Money
from core.ledger.errors import ValidationError
from core.ledger.models import (
    Account,
    JournalEntryCreate,
    JournalLineInput,
    NormalizedEntry,
    NormalizedLine,
)
from core.ledger.types import EntryType
from core.utils.dates import to_date
from core.utils.money import format_amount, from_minor, to_minor

MIN_LINES = 2


def validate_entry(
    data: JournalEntryCreate,
    accounts: Mapping[int, Account],
) -> NormalizedEntry:
    """Validate a new entry

    Order: date, description, line count, each line, balance.

    Args:
        data: entry data
        accounts: accounts referenced by the lines, keyed by id

    Returns:
        NormalizedEntry

    Raises:
        ValidationError: first violated rule
    """
    entry_date = normalize_date(data.date)
    description = normalize_description(data.description)
    lines = validate_lines(data.lines, accounts)

    try:
        entry_type = EntryType(data.entry_type)
    except ValueError as e:
        raise ValidationError(f"Invalid entry type: {data.entry_type!r}") from e

    return NormalizedEntry(
        date=entry_date,
        description=description,
        reference=normalize_reference(data.reference),
        entry_type=entry_type,
        lines=lines,
        reversal_of=data.reversal_of,
    )


def validate_lines(
    lines: Sequence[JournalLineInput] | None,
    accounts: Mapping[int, Account],
) -> list[NormalizedLine]:
    """Validate a full line set (count, each line, balance)

    Raises:
        ValidationError: first violated rule
    """
    if not lines:
        raise ValidationError("At least one journal line is required")

    if len(lines) < MIN_LINES:
        raise ValidationError(
            "Journal entry must have at least 2 lines (double-entry bookkeeping)"
        )

    normalized = [
        _validate_line(number, line, accounts)
        for number, line in enumerate(lines, start=1)
    ]

    total_debits = sum(line.debit for line in normalized)
    total_credits = sum(line.credit for line in normalized)

    # Exact in minor units: inputs were rounded to the cent already
    if total_debits != total_credits:
        raise ValidationError(
            "Journal entry is not balanced. "
            f"Debits: {format_amount(from_minor(total_debits))}, "
            f"Credits: {format_amount(from_minor(total_credits))}"
        )

    return normalized


def _validate_line(
    number: int,
    line: JournalLineInput,
    accounts: Mapping[int, Account],
) -> NormalizedLine:
    """Validate one line"""
    if line.account_id is None:
        raise ValidationError(f"Line {number}: Account is required")

    account = accounts.get(line.account_id)
    if account is None:
        raise ValidationError(f"Line {number}: Account does not exist")
    if not account.is_active:
        raise ValidationError(f"Line {number}: Account is inactive")

    try:
        debit = to_minor(line.debit)
        credit = to_minor(line.credit)
    except ValueError as e:
        raise ValidationError(f"Line {number}: {e}") from e

    if debit > 0 and credit > 0:
        raise ValidationError(f"Line {number}: Cannot have both debit and credit")
    if debit == 0 and credit == 0:
        raise ValidationError(f"Line {number}: Must have either debit or credit amount")
    if debit < 0 or credit < 0:
        raise ValidationError(f"Line {number}: Amounts cannot be negative")
    if debit > Money.MAX_MINOR or credit > Money.MAX_MINOR:
        raise ValidationError(f"Line {number}: Amount too large")

    return NormalizedLine(
        account_id=account.id,
        debit=debit,
        credit=credit,
        description=_clean(line.description),
        flow_category=_clean(line.flow_category),
    )


def normalize_date(value):
    """Entry date (required)"""
    try:
        entry_date = to_date(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    if entry_date is None:
        raise ValidationError("Date is required")
    return entry_date


def normalize_description(value: str | None) -> str:
    """Entry description (required, stripped)"""
    description = _clean(value)
    if description is None:
        raise ValidationError("Description is required")
    return description


def normalize_reference(value: str | None) -> str | None:
    """Optional reference (blank becomes None)"""
    return _clean(value)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
