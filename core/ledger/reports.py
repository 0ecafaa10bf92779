"""
Financial statements

Balance sheet, profit & loss, cash flow, receivables aging and expenses by
category, all derived from journal lines (read only).

Cash, receivable and payable accounts are identified by account role.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from core.constants import AgingBuckets
from core.ledger.balances import AccountActivity, BalanceCalculator
from core.ledger.errors import ValidationError
from core.ledger.types import AGING_EXCLUDED_STATUSES, AccountRole, AccountType
from core.utils import dates
from core.utils.money import from_minor

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

RETAINED_EARNINGS_CODE = "RE"
RETAINED_EARNINGS_NAME = "Retained Earnings"
UNLABELLED_FLOW = "Other"


# -------------------------------------------------------------------------
# Report structures
# -------------------------------------------------------------------------


@dataclass
class ReportItem:
    """Account line of a statement"""

    code: str
    name: str
    amount: Decimal


@dataclass
class AssetSection:
    cash: Decimal
    receivables: Decimal
    other: Decimal
    total: Decimal
    items: list[ReportItem] = field(default_factory=list)


@dataclass
class LiabilitySection:
    payables: Decimal
    other: Decimal
    total: Decimal
    items: list[ReportItem] = field(default_factory=list)


@dataclass
class EquitySection:
    retained_earnings: Decimal
    other: Decimal
    total: Decimal
    items: list[ReportItem] = field(default_factory=list)


@dataclass
class BalanceSheet:
    """Balance sheet as of a date"""

    date: dt.date
    assets: AssetSection
    liabilities: LiabilitySection
    equity: EquitySection
    is_balanced: bool


@dataclass
class StatementSection:
    items: list[ReportItem]
    total: Decimal


@dataclass
class ProfitLoss:
    """Profit & loss for an inclusive date range"""

    from_date: dt.date
    to_date: dt.date
    revenue: StatementSection
    expenses: StatementSection
    net_income: Decimal


@dataclass
class CashFlowItem:
    description: str
    amount: Decimal


@dataclass
class CashFlowSection:
    items: list[CashFlowItem]
    total: Decimal


@dataclass
class CashFlow:
    """Cash movements for an inclusive date range"""

    from_date: dt.date
    to_date: dt.date
    opening_balance: Decimal
    inflows: CashFlowSection
    outflows: CashFlowSection
    net_change: Decimal
    closing_balance: Decimal


@dataclass
class AgingItem:
    customer: str
    invoice: str
    amount: Decimal
    due_date: dt.date
    days_overdue: int


@dataclass
class AgingTotals:
    current: Decimal
    days_1_30: Decimal
    days_31_60: Decimal
    days_61_90: Decimal
    days_90_plus: Decimal
    total: Decimal


@dataclass
class ReceivablesAging:
    """Open invoices bucketed by days overdue"""

    as_of: dt.date
    current: list[AgingItem]
    days_1_30: list[AgingItem]
    days_31_60: list[AgingItem]
    days_61_90: list[AgingItem]
    days_90_plus: list[AgingItem]
    totals: AgingTotals


@dataclass
class ExpenseCategory:
    category: str
    amount: Decimal
    percentage: int


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------


def _require_date(value: dt.date | str | None, name: str) -> dt.date:
    try:
        parsed = dates.to_date(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if parsed is None:
        raise ValidationError(f"{name} is required")
    return parsed


def _total(activities: list[AccountActivity]) -> int:
    return sum(a.balance for a in activities)


def _items(activities: list[AccountActivity]) -> list[ReportItem]:
    return [
        ReportItem(code=a.account.code, name=a.account.name, amount=from_minor(a.balance))
        for a in activities
    ]


def allocate(amount: int, weights: list[int]) -> list[int]:
    """Split amount across weights pro rata (largest remainder)

    Shares are whole minor units and always add up to amount.

    Example:
        >>> allocate(100, [1, 1, 1])
        [34, 33, 33]
    """
    total_weight = sum(weights)
    if total_weight <= 0:
        raise ValueError("weights must have a positive total")

    shares = [amount * w // total_weight for w in weights]
    remainders = [amount * w % total_weight for w in weights]

    # Leftover units go to the largest remainders, earliest first on ties
    leftover = amount - sum(shares)
    order = sorted(range(len(weights)), key=lambda i: (-remainders[i], i))
    for i in order[:leftover]:
        shares[i] += 1
    return shares


def _sorted_flows(flows: dict[str, int]) -> list[CashFlowItem]:
    ordered = sorted(flows.items(), key=lambda kv: (-kv[1], kv[0]))
    return [CashFlowItem(description=label, amount=from_minor(amount)) for label, amount in ordered]


class ReportAggregator:
    """Financial statement builder (read only)

    Args:
        db: SQLite adapter
        balances: balance calculator (created from db when omitted)
        today: clock for default as-of dates
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        balances: BalanceCalculator | None = None,
        today: Callable[[], dt.date] = dates.today_utc,
    ):
        self.db = db
        self.balances = balances or BalanceCalculator(db)
        self._today = today

    async def balance_sheet(self, as_of: dt.date | str | None = None) -> BalanceSheet:
        """Balance sheet as of a date (default: today)

        Retained earnings (income - expenses over all history up to as_of)
        are added to equity as a pseudo account "RE".
        """
        as_of_date = _require_date(as_of, "as_of") if as_of is not None else self._today()
        activity = await self.balances.account_activity(through=as_of_date, active_only=True)

        def nonzero(account_type: AccountType) -> list[AccountActivity]:
            return [a for a in activity if a.account.type == account_type and a.balance != 0]

        def with_role(items: list[AccountActivity], role: AccountRole) -> list[AccountActivity]:
            return [a for a in items if a.account.role == role]

        assets = nonzero(AccountType.ASSET)
        liabilities = nonzero(AccountType.LIABILITY)
        equity = nonzero(AccountType.EQUITY)

        income = _total([a for a in activity if a.account.type == AccountType.INCOME])
        expenses = _total([a for a in activity if a.account.type == AccountType.EXPENSE])
        retained_earnings = income - expenses

        cash = _total(with_role(assets, AccountRole.CASH))
        receivables = _total(with_role(assets, AccountRole.RECEIVABLE))
        total_assets = _total(assets)

        payables = _total(with_role(liabilities, AccountRole.PAYABLE))
        total_liabilities = _total(liabilities)

        equity_accounts = _total(equity)
        total_equity = equity_accounts + retained_earnings

        equity_items = _items(equity)
        equity_items.append(
            ReportItem(
                code=RETAINED_EARNINGS_CODE,
                name=RETAINED_EARNINGS_NAME,
                amount=from_minor(retained_earnings),
            )
        )

        is_balanced = total_assets == total_liabilities + total_equity
        if not is_balanced:
            logger.error(
                "Balance sheet does not balance",
                extra={
                    "as_of": as_of_date.isoformat(),
                    "assets": str(from_minor(total_assets)),
                    "liabilities_equity": str(from_minor(total_liabilities + total_equity)),
                },
            )

        return BalanceSheet(
            date=as_of_date,
            assets=AssetSection(
                cash=from_minor(cash),
                receivables=from_minor(receivables),
                other=from_minor(total_assets - cash - receivables),
                total=from_minor(total_assets),
                items=_items(assets),
            ),
            liabilities=LiabilitySection(
                payables=from_minor(payables),
                other=from_minor(total_liabilities - payables),
                total=from_minor(total_liabilities),
                items=_items(liabilities),
            ),
            equity=EquitySection(
                retained_earnings=from_minor(retained_earnings),
                other=from_minor(equity_accounts),
                total=from_minor(total_equity),
                items=equity_items,
            ),
            is_balanced=is_balanced,
        )

    async def profit_loss(
        self,
        from_date: dt.date | str,
        to_date: dt.date | str,
    ) -> ProfitLoss:
        """Income and expense per account within an inclusive date range

        Accounts with a zero amount are left out; items are sorted by amount,
        largest first.
        """
        start = _require_date(from_date, "from_date")
        end = _require_date(to_date, "to_date")
        activity = await self.balances.account_activity(
            from_date=start, through=end, active_only=True
        )

        def section(account_type: AccountType) -> StatementSection:
            rows = [a for a in activity if a.account.type == account_type and a.balance != 0]
            rows.sort(key=lambda a: (-a.balance, a.account.code))
            return StatementSection(items=_items(rows), total=from_minor(_total(rows)))

        revenue = section(AccountType.INCOME)
        expenses = section(AccountType.EXPENSE)

        return ProfitLoss(
            from_date=start,
            to_date=end,
            revenue=revenue,
            expenses=expenses,
            net_income=revenue.total - expenses.total,
        )

    async def cash_flow(
        self,
        from_date: dt.date | str,
        to_date: dt.date | str,
    ) -> CashFlow:
        """Cash inflows and outflows within an inclusive date range

        Each cash posting is labelled by its flow_category when set. Otherwise
        its amount is shared pro rata among the contra lines of the same entry
        (other account, opposite side), each share labelled with the contra
        account's name. Without contra lines the entry description is used.
        """
        start = _require_date(from_date, "from_date")
        end = _require_date(to_date, "to_date")

        cash_rows = await self.db.fetchall(
            """
            SELECT id FROM accounts
            WHERE role = ? AND type = ? AND is_active = 1
            """,
            (AccountRole.CASH.value, AccountType.ASSET.value),
        )
        cash_ids = [row["id"] for row in cash_rows]

        if not cash_ids:
            zero = from_minor(0)
            return CashFlow(
                from_date=start,
                to_date=end,
                opening_balance=zero,
                inflows=CashFlowSection(items=[], total=zero),
                outflows=CashFlowSection(items=[], total=zero),
                net_change=zero,
                closing_balance=zero,
            )

        placeholders = ",".join("?" * len(cash_ids))

        opening_row = await self.db.fetchone(
            f"""
            SELECT COALESCE(SUM(jl.debit), 0) - COALESCE(SUM(jl.credit), 0) AS balance
            FROM journal_lines jl
            JOIN journal_entries je ON je.id = jl.entry_id
            WHERE jl.account_id IN ({placeholders}) AND je.date < ?
            """,
            (*cash_ids, start.isoformat()),
        )
        opening = opening_row["balance"]

        rows = await self.db.fetchall(
            f"""
            SELECT
                jl.entry_id, jl.account_id, jl.debit, jl.credit, jl.flow_category,
                a.name AS account_name, je.description AS entry_description
            FROM journal_lines jl
            JOIN journal_entries je ON je.id = jl.entry_id
            JOIN accounts a ON a.id = jl.account_id
            WHERE je.date >= ? AND je.date <= ?
              AND jl.entry_id IN (
                  SELECT entry_id FROM journal_lines WHERE account_id IN ({placeholders})
              )
            ORDER BY jl.entry_id, jl.line_order, jl.id
            """,
            (start.isoformat(), end.isoformat(), *cash_ids),
        )

        lines_by_entry: dict[int, list[Any]] = defaultdict(list)
        for row in rows:
            lines_by_entry[row["entry_id"]].append(row)

        inflows: dict[str, int] = defaultdict(int)
        outflows: dict[str, int] = defaultdict(int)
        cash_set = set(cash_ids)

        for entry_lines in lines_by_entry.values():
            for line in entry_lines:
                if line["account_id"] not in cash_set:
                    continue

                is_inflow = line["debit"] > 0
                amount = line["debit"] if is_inflow else line["credit"]
                target = inflows if is_inflow else outflows

                for label, share in self._label_cash_line(line, entry_lines, is_inflow, amount):
                    target[label] += share

        total_in = sum(inflows.values())
        total_out = sum(outflows.values())
        net_change = total_in - total_out

        return CashFlow(
            from_date=start,
            to_date=end,
            opening_balance=from_minor(opening),
            inflows=CashFlowSection(items=_sorted_flows(inflows), total=from_minor(total_in)),
            outflows=CashFlowSection(items=_sorted_flows(outflows), total=from_minor(total_out)),
            net_change=from_minor(net_change),
            closing_balance=from_minor(opening + net_change),
        )

    @staticmethod
    def _label_cash_line(
        line: Any,
        entry_lines: list[Any],
        is_inflow: bool,
        amount: int,
    ) -> list[tuple[str, int]]:
        """Labelled shares of one cash posting"""
        if line["flow_category"]:
            return [(line["flow_category"], amount)]

        # Contra side: credits for an inflow, debits for an outflow
        side = "credit" if is_inflow else "debit"
        contras = [
            other
            for other in entry_lines
            if other["account_id"] != line["account_id"] and other[side] > 0
        ]
        if not contras:
            return [(line["entry_description"] or UNLABELLED_FLOW, amount)]

        shares = allocate(amount, [contra[side] for contra in contras])
        return [
            (contra["account_name"], share)
            for contra, share in zip(contras, shares)
            if share
        ]

    async def receivables_aging(self, as_of: dt.date | str | None = None) -> ReceivablesAging:
        """Unpaid invoice balances bucketed by days past due

        Buckets: current (not yet due), 1-30, 31-60, 61-90, over 90 days.
        """
        as_of_date = _require_date(as_of, "as_of") if as_of is not None else self._today()
        excluded = ",".join("?" * len(AGING_EXCLUDED_STATUSES))

        rows = await self.db.fetchall(
            f"""
            SELECT
                i.number AS invoice,
                c.name AS customer,
                (i.total - i.amount_paid) AS amount,
                i.due_date
            FROM invoices i
            JOIN customers c ON c.id = i.customer_id
            WHERE i.status NOT IN ({excluded})
              AND (i.total - i.amount_paid) > 0
            ORDER BY i.due_date, i.id
            """,
            AGING_EXCLUDED_STATUSES,
        )

        buckets: dict[str, list[AgingItem]] = {
            "current": [],
            "days_1_30": [],
            "days_31_60": [],
            "days_61_90": [],
            "days_90_plus": [],
        }
        bucket_totals: dict[str, int] = defaultdict(int)

        for row in rows:
            due = dates.to_date(row["due_date"])
            days_overdue = dates.days_between(due, as_of_date)

            if days_overdue <= AgingBuckets.CURRENT:
                bucket = "current"
            elif days_overdue <= AgingBuckets.DAYS_30:
                bucket = "days_1_30"
            elif days_overdue <= AgingBuckets.DAYS_60:
                bucket = "days_31_60"
            elif days_overdue <= AgingBuckets.DAYS_90:
                bucket = "days_61_90"
            else:
                bucket = "days_90_plus"

            buckets[bucket].append(
                AgingItem(
                    customer=row["customer"],
                    invoice=row["invoice"],
                    amount=from_minor(row["amount"]),
                    due_date=due,
                    days_overdue=days_overdue,
                )
            )
            bucket_totals[bucket] += row["amount"]

        totals = AgingTotals(
            **{name: from_minor(bucket_totals[name]) for name in buckets},
            total=from_minor(sum(bucket_totals.values())),
        )
        return ReceivablesAging(as_of=as_of_date, totals=totals, **buckets)

    async def expenses_by_category(
        self,
        from_date: dt.date | str,
        to_date: dt.date | str,
    ) -> list[ExpenseCategory]:
        """Expense accounts with a positive amount in range, largest first

        percentage is the share of the period total, rounded half-up to a
        whole number.
        """
        start = _require_date(from_date, "from_date")
        end = _require_date(to_date, "to_date")
        activity = await self.balances.account_activity(
            from_date=start, through=end, active_only=True
        )

        rows = [
            a for a in activity
            if a.account.type == AccountType.EXPENSE and a.balance > 0
        ]
        rows.sort(key=lambda a: (-a.balance, a.account.code))
        total = _total(rows)

        return [
            ExpenseCategory(
                category=a.account.name,
                amount=from_minor(a.balance),
                percentage=int(
                    (Decimal(a.balance * 100) / Decimal(total)).quantize(
                        Decimal("1"), rounding=ROUND_HALF_UP
                    )
                ),
            )
            for a in rows
        ]
