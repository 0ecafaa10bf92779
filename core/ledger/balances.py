"""
Balance calculation

Account balances, trial balance and general ledger.
Sums run on integer minor units; results are returned as Decimal.
Every balance is derived through normal_balance().
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.ledger.accounts import AccountDirectory, row_to_account
from core.ledger.errors import NotFoundError
from core.ledger.models import Account
from core.ledger.types import AccountType, normal_balance
from core.utils.dates import to_date, to_iso
from core.utils.money import from_minor, to_minor

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass
class AccountActivity:
    """Debit/credit totals of one account over a date window (minor units)"""

    account: Account
    debits: int = 0
    credits: int = 0

    @property
    def balance(self) -> int:
        """Normal-balance amount (minor units)"""
        return normal_balance(self.account.type, self.debits, self.credits)

    @property
    def has_activity(self) -> bool:
        return self.debits != 0 or self.credits != 0


@dataclass
class TrialBalanceRow:
    """Trial balance line (balance in its natural column when positive)"""

    account_id: int
    code: str
    name: str
    type: AccountType
    debit: Decimal
    credit: Decimal


@dataclass
class TrialBalanceCheck:
    """Trial balance verification (difference = debits - credits)"""

    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool


@dataclass
class LedgerPosting:
    """General ledger line with running balance"""

    entry_id: int
    line_id: int
    date: dt.date
    description: str
    reference: str | None
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass
class GeneralLedger:
    """Posting history of one account"""

    account: Account
    opening_balance: Decimal
    postings: list[LedgerPosting] = field(default_factory=list)

    @property
    def closing_balance(self) -> Decimal:
        if self.postings:
            return self.postings[-1].balance
        return self.opening_balance


class BalanceCalculator:
    """Balance calculator (read only)

    Args:
        db: SQLite adapter
        accounts: account directory (created from db when omitted)
    """

    def __init__(self, db: SQLiteAdapter, accounts: AccountDirectory | None = None):
        self.db = db
        self.accounts = accounts or AccountDirectory(db)

    async def account_activity(
        self,
        from_date: dt.date | str | None = None,
        through: dt.date | str | None = None,
        before: dt.date | str | None = None,
        active_only: bool = False,
    ) -> list[AccountActivity]:
        """Debit/credit totals per account, ordered by code

        Every account is returned, with zero totals when it has no postings
        in the window.

        Args:
            from_date: entries dated on or after (inclusive)
            through: entries dated on or before (inclusive)
            before: entries dated strictly before
            active_only: only active accounts

        Returns:
            AccountActivity list
        """
        conditions: list[str] = []
        params: list[Any] = []

        if from_date is not None:
            conditions.append("je.date >= ?")
            params.append(to_iso(from_date))
        if through is not None:
            conditions.append("je.date <= ?")
            params.append(to_iso(through))
        if before is not None:
            conditions.append("je.date < ?")
            params.append(to_iso(before))

        window = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        active = "WHERE a.is_active = 1" if active_only else ""

        rows = await self.db.fetchall(
            f"""
            SELECT
                a.id, a.code, a.name, a.type, a.role, a.parent_id,
                a.description, a.is_active, a.created_at,
                COALESCE(t.debits, 0) AS debits,
                COALESCE(t.credits, 0) AS credits
            FROM accounts a
            LEFT JOIN (
                SELECT jl.account_id,
                       SUM(jl.debit) AS debits,
                       SUM(jl.credit) AS credits
                FROM journal_lines jl
                JOIN journal_entries je ON je.id = jl.entry_id
                {window}
                GROUP BY jl.account_id
            ) t ON t.account_id = a.id
            {active}
            ORDER BY a.code
            """,
            tuple(params),
        )

        return [
            AccountActivity(
                account=row_to_account(row),
                debits=row["debits"],
                credits=row["credits"],
            )
            for row in rows
        ]

    async def account_balance(
        self,
        account_id: int,
        as_of: dt.date | str | None = None,
    ) -> Decimal:
        """Normal-balance amount of one account

        Args:
            account_id: account id
            as_of: include entries dated on or before (None: all)

        Raises:
            NotFoundError: unknown account
        """
        account = await self.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")

        params: list[Any] = [account_id]
        date_filter = ""
        if as_of is not None:
            date_filter = "AND je.date <= ?"
            params.append(to_iso(as_of))

        row = await self.db.fetchone(
            f"""
            SELECT
                COALESCE(SUM(jl.debit), 0) AS debits,
                COALESCE(SUM(jl.credit), 0) AS credits
            FROM journal_lines jl
            JOIN journal_entries je ON je.id = jl.entry_id
            WHERE jl.account_id = ? {date_filter}
            """,
            tuple(params),
        )
        return from_minor(normal_balance(account.type, row["debits"], row["credits"]))

    async def account_balances(
        self,
        account_ids: Iterable[int] | None = None,
        as_of: dt.date | str | None = None,
    ) -> dict[int, Decimal]:
        """Balances of many accounts in one query

        Args:
            account_ids: accounts to return (None: all accounts)
            as_of: include entries dated on or before

        Returns:
            account id -> balance (zero when no activity)

        Raises:
            NotFoundError: an unknown id was requested
        """
        activity = {a.account.id: a for a in await self.account_activity(through=as_of)}

        if account_ids is None:
            ids = list(activity)
        else:
            ids = list(account_ids)
            missing = [i for i in ids if i not in activity]
            if missing:
                raise NotFoundError(f"Account not found: {missing[0]}")

        return {i: from_minor(activity[i].balance) for i in ids}

    async def trial_balance(self, as_of: dt.date | str | None = None) -> list[TrialBalanceRow]:
        """Trial balance of active accounts with postings

        A positive balance goes into the account's natural column; a negative
        one goes, as an absolute value, into the other column.
        """
        rows: list[TrialBalanceRow] = []

        for activity in await self.account_activity(through=as_of, active_only=True):
            if not activity.has_activity:
                continue

            account = activity.account
            balance = activity.balance
            natural, other = (balance, 0) if balance > 0 else (0, -balance)
            debit, credit = (natural, other) if account.type.is_debit_normal else (other, natural)

            rows.append(
                TrialBalanceRow(
                    account_id=account.id,
                    code=account.code,
                    name=account.name,
                    type=account.type,
                    debit=from_minor(debit),
                    credit=from_minor(credit),
                )
            )

        return rows

    async def verify_trial_balance(
        self, as_of: dt.date | str | None = None
    ) -> TrialBalanceCheck:
        """Check that the trial balance columns agree"""
        rows = await self.trial_balance(as_of)

        total_debits = sum((row.debit for row in rows), Decimal("0.00"))
        total_credits = sum((row.credit for row in rows), Decimal("0.00"))
        difference = total_debits - total_credits

        check = TrialBalanceCheck(
            total_debits=total_debits,
            total_credits=total_credits,
            difference=difference,
            is_balanced=difference == 0,
        )
        if not check.is_balanced:
            logger.error(
                "Trial balance out of balance",
                extra={"as_of": to_iso(as_of), "difference": str(difference)},
            )
        return check

    async def general_ledger(
        self,
        account_id: int,
        start_date: dt.date | str | None = None,
        end_date: dt.date | str | None = None,
        limit: int | None = Defaults.GENERAL_LEDGER_LIMIT,
        include_opening_balance: bool = False,
    ) -> GeneralLedger:
        """Posting history of one account with a running balance

        By default the running balance starts at zero on the first posting in
        the window. include_opening_balance starts it from the balance as of
        the day before start_date.

        Args:
            account_id: account id
            start_date: first date (inclusive)
            end_date: last date (inclusive)
            limit: max postings (None: all)
            include_opening_balance: seed the running balance

        Raises:
            NotFoundError: unknown account
        """
        account = await self.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")

        start = to_date(start_date)
        opening = 0
        if include_opening_balance and start is not None:
            previous_day = start - dt.timedelta(days=1)
            opening = to_minor(await self.account_balance(account_id, previous_day))

        conditions = ["jl.account_id = ?"]
        params: list[Any] = [account_id]
        if start is not None:
            conditions.append("je.date >= ?")
            params.append(start.isoformat())
        if end_date is not None:
            conditions.append("je.date <= ?")
            params.append(to_iso(end_date))

        limit_clause = ""
        if limit is not None:
            limit_clause = "LIMIT ?"
            params.append(limit)

        rows = await self.db.fetchall(
            f"""
            SELECT
                je.id AS entry_id, je.date, je.description AS entry_description,
                je.reference, jl.id AS line_id, jl.debit, jl.credit,
                jl.description AS line_description
            FROM journal_lines jl
            JOIN journal_entries je ON je.id = jl.entry_id
            WHERE {' AND '.join(conditions)}
            ORDER BY je.date ASC, je.id ASC, jl.id ASC
            {limit_clause}
            """,
            tuple(params),
        )

        running = opening
        postings: list[LedgerPosting] = []
        for row in rows:
            running += normal_balance(account.type, row["debit"], row["credit"])
            postings.append(
                LedgerPosting(
                    entry_id=row["entry_id"],
                    line_id=row["line_id"],
                    date=to_date(row["date"]),
                    description=row["line_description"] or row["entry_description"],
                    reference=row["reference"],
                    debit=from_minor(row["debit"]),
                    credit=from_minor(row["credit"]),
                    balance=from_minor(running),
                )
            )

        return GeneralLedger(
            account=account,
            opening_balance=from_minor(opening),
            postings=postings,
        )
