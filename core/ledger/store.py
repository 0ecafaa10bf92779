"""
Journal entry store

Creates, reads, edits, locks and reverses journal entries.
Validation completes before a transaction opens; header, lines and the
audit row commit together.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter, like_contains
from core.ledger import audit
from core.ledger.accounts import AccountDirectory
from core.ledger.errors import AuthorizationError, NotFoundError, StateError, ValidationError
from core.ledger.models import (
    AccountRef,
    JournalEntry,
    JournalEntryCreate,
    JournalEntryFilters,
    JournalEntryUpdate,
    JournalLine,
    JournalLineInput,
    NormalizedEntry,
    NormalizedLine,
)
from core.ledger.types import ENTRY_REFERENCE_TABLES, AccountType, AuditAction, EntryType
from core.ledger.validation import (
    normalize_date,
    normalize_description,
    normalize_reference,
    validate_entry,
)
from core.utils.dates import now_utc, to_date, to_iso, today_utc
from core.utils.money import from_minor

logger = logging.getLogger(__name__)

# Max ids per IN (...) query
_IN_CHUNK = 500

_ENTRY_COLUMNS = """
    id, date, description, reference, entry_type, is_locked,
    reversal_of, created_at, updated_at
"""

LOCKED_UPDATE_MESSAGE = "Cannot update locked journal entry (period is closed)"
LOCKED_DELETE_MESSAGE = "Cannot delete locked journal entry (period is closed)"
REFERENCED_DELETE_MESSAGE = (
    "Cannot delete journal entry that is linked to invoices, expenses, or payments. "
    "Delete those transactions first or reverse the entry instead."
)


def _timestamp() -> str:
    return now_utc().isoformat(timespec="seconds")


class JournalEntryStore:
    """Journal entry store

    Args:
        db: SQLite adapter
        accounts: account directory (created from db when omitted)
        privileged_actors: users allowed to unlock entries
            (None allows any named user)
        today: clock for default reversal dates
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        accounts: AccountDirectory | None = None,
        privileged_actors: Iterable[str] | None = None,
        today: Callable[[], dt.date] = today_utc,
    ):
        self.db = db
        self.accounts = accounts or AccountDirectory(db)
        self.privileged_actors = (
            frozenset(privileged_actors) if privileged_actors is not None else None
        )
        self._today = today

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(
        self,
        data: JournalEntryCreate,
        actor: str | None = None,
    ) -> JournalEntry:
        """Create a journal entry

        Args:
            data: entry data
            actor: acting user (audit)

        Returns:
            The stored entry with lines

        Raises:
            ValidationError: invalid or unbalanced data (nothing written)
        """
        normalized = await self._validate(data)

        async with self.db.transaction():
            entry_id = await self._insert_entry(normalized)
            created = await self._load(entry_id)
            await audit.record(
                self.db, AuditAction.CREATE, entry_id, new_value=created, user=actor
            )

        logger.info(
            "Journal entry created",
            extra={
                "entry_id": entry_id,
                "entry_type": normalized.entry_type.value,
                "lines": len(normalized.lines),
                "actor": actor,
            },
        )
        assert created is not None
        return created

    async def update(
        self,
        entry_id: int,
        data: JournalEntryUpdate,
        actor: str | None = None,
    ) -> JournalEntry:
        """Update an unlocked entry

        Fields left as None keep their value. Supplied lines replace the whole
        line set after the merged entry validates.

        Raises:
            NotFoundError: unknown entry
            StateError: entry is locked
            ValidationError: invalid merged entry (nothing written)
        """
        existing = await self._require(entry_id)
        if existing.is_locked:
            logger.warning("Update of locked entry rejected", extra={"entry_id": entry_id})
            raise StateError(LOCKED_UPDATE_MESSAGE)

        try:
            entry_date = normalize_date(data.date) if data.date is not None else existing.date
            description = (
                normalize_description(data.description)
                if data.description is not None
                else existing.description
            )
        except ValidationError as e:
            logger.warning(
                "Journal entry update rejected",
                extra={"entry_id": entry_id, "reason": str(e)},
            )
            raise

        reference = (
            normalize_reference(data.reference)
            if data.reference is not None
            else existing.reference
        )

        lines: list[NormalizedLine] | None = None
        if data.lines is not None:
            merged = await self._validate(
                JournalEntryCreate(
                    date=entry_date,
                    description=description,
                    reference=reference,
                    entry_type=existing.entry_type,
                    reversal_of=existing.reversal_of,
                    lines=list(data.lines),
                )
            )
            lines = merged.lines

        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                UPDATE journal_entries
                SET date = ?, description = ?, reference = ?, updated_at = ?
                WHERE id = ? AND is_locked = 0
                """,
                (entry_date.isoformat(), description, reference, _timestamp(), entry_id),
            )
            if cursor.rowcount == 0:
                raise StateError(LOCKED_UPDATE_MESSAGE)

            if lines is not None:
                await self.db.execute(
                    "DELETE FROM journal_lines WHERE entry_id = ?", (entry_id,)
                )
                await self._insert_lines(entry_id, lines)

            updated = await self._load(entry_id)
            await audit.record(
                self.db,
                AuditAction.UPDATE,
                entry_id,
                old_value=existing,
                new_value=updated,
                user=actor,
            )

        logger.info(
            "Journal entry updated",
            extra={"entry_id": entry_id, "lines_replaced": lines is not None, "actor": actor},
        )
        assert updated is not None
        return updated

    async def delete(self, entry_id: int, actor: str | None = None) -> None:
        """Delete an unlocked, unreferenced entry

        Raises:
            NotFoundError: unknown entry
            StateError: entry is locked or referenced by an invoice,
                expense or payment
        """
        existing = await self._require(entry_id)
        if existing.is_locked:
            logger.warning("Delete of locked entry rejected", extra={"entry_id": entry_id})
            raise StateError(LOCKED_DELETE_MESSAGE)

        if await self._is_referenced(entry_id):
            logger.warning(
                "Delete of referenced entry rejected", extra={"entry_id": entry_id}
            )
            raise StateError(REFERENCED_DELETE_MESSAGE)

        async with self.db.transaction():
            await self.db.execute(
                """
                DELETE FROM journal_lines
                WHERE entry_id = ?
                  AND EXISTS (
                      SELECT 1 FROM journal_entries WHERE id = ? AND is_locked = 0
                  )
                """,
                (entry_id, entry_id),
            )
            cursor = await self.db.execute(
                "DELETE FROM journal_entries WHERE id = ? AND is_locked = 0",
                (entry_id,),
            )
            if cursor.rowcount == 0:
                raise StateError(LOCKED_DELETE_MESSAGE)

            await audit.record(
                self.db, AuditAction.DELETE, entry_id, old_value=existing, user=actor
            )

        logger.info("Journal entry deleted", extra={"entry_id": entry_id, "actor": actor})

    async def lock(self, entry_id: int, actor: str | None = None) -> JournalEntry:
        """Lock an entry against edits (no-op when already locked)

        Raises:
            NotFoundError: unknown entry
        """
        existing = await self._require(entry_id)
        if existing.is_locked:
            return existing

        locked = await self._set_locked(existing, True, AuditAction.LOCK, actor)
        logger.info("Journal entry locked", extra={"entry_id": entry_id, "actor": actor})
        return locked

    async def unlock(self, entry_id: int, actor: str | None) -> JournalEntry:
        """Unlock an entry (privileged users only; no-op when unlocked)

        Raises:
            AuthorizationError: actor is not privileged
            NotFoundError: unknown entry
        """
        if not self.is_privileged(actor):
            logger.warning(
                "Unlock rejected: not privileged",
                extra={"entry_id": entry_id, "actor": actor},
            )
            raise AuthorizationError("Unlocking a journal entry requires a privileged user")

        existing = await self._require(entry_id)
        if not existing.is_locked:
            return existing

        unlocked = await self._set_locked(existing, False, AuditAction.UNLOCK, actor)
        logger.info("Journal entry unlocked", extra={"entry_id": entry_id, "actor": actor})
        return unlocked

    async def reverse(
        self,
        entry_id: int,
        date: dt.date | str | None = None,
        description: str | None = None,
        actor: str | None = None,
    ) -> JournalEntry:
        """Create the reversing entry of an existing entry

        Every line's debit and credit are swapped. The source entry is left
        untouched and may be locked or unlocked.

        Args:
            entry_id: entry to reverse
            date: reversal date (default: today, UTC)
            description: default "Reversal of: <original description>"
            actor: acting user (audit)

        Returns:
            The new reversing entry

        Raises:
            NotFoundError: unknown entry
            ValidationError: reversal cannot be posted (e.g. inactive account)
        """
        source = await self._require(entry_id)

        data = JournalEntryCreate(
            date=date if date is not None else self._today(),
            description=description or f"Reversal of: {source.description}",
            reference=f"REV-{source.reference}" if source.reference else None,
            entry_type=EntryType.REVERSING,
            reversal_of=source.id,
            lines=[
                JournalLineInput(
                    account_id=line.account_id,
                    debit=line.credit,
                    credit=line.debit,
                    description=line.description,
                    flow_category=line.flow_category,
                )
                for line in source.lines
            ],
        )

        reversal = await self.create(data, actor=actor)
        logger.info(
            "Journal entry reversed",
            extra={"entry_id": entry_id, "reversal_id": reversal.id},
        )
        return reversal

    def is_privileged(self, actor: str | None) -> bool:
        """Whether actor may unlock entries"""
        if not actor or not actor.strip():
            return False
        if self.privileged_actors is None:
            return True
        return actor in self.privileged_actors

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get(self, entry_id: int) -> JournalEntry | None:
        """Entry with lines (None when unknown or inconsistent)"""
        entry = await self._load(entry_id)
        if entry is None or not self._is_consistent(entry):
            return None
        return entry

    async def list(self, filters: JournalEntryFilters | None = None) -> list[JournalEntry]:
        """List entries, newest first (date desc, id desc)

        Args:
            filters: optional filters (combined with AND)

        Returns:
            Entries with lines

        Raises:
            ValidationError: unknown entry type
        """
        filters = filters or JournalEntryFilters()
        conditions: list[str] = []
        params: list[Any] = []

        if filters.start_date is not None:
            conditions.append("je.date >= ?")
            params.append(to_iso(filters.start_date))
        if filters.end_date is not None:
            conditions.append("je.date <= ?")
            params.append(to_iso(filters.end_date))
        if filters.entry_type is not None:
            try:
                entry_type = EntryType(filters.entry_type)
            except ValueError as e:
                raise ValidationError(f"Invalid entry type: {filters.entry_type!r}") from e
            conditions.append("je.entry_type = ?")
            params.append(entry_type.value)
        if filters.is_locked is not None:
            conditions.append("je.is_locked = ?")
            params.append(1 if filters.is_locked else 0)
        if filters.reference:
            conditions.append("je.reference LIKE ? ESCAPE '\\'")
            params.append(like_contains(filters.reference))
        if filters.search:
            conditions.append(
                "(je.description LIKE ? ESCAPE '\\' OR je.reference LIKE ? ESCAPE '\\')"
            )
            params.extend([like_contains(filters.search)] * 2)
        if filters.account_id is not None:
            conditions.append(
                "EXISTS (SELECT 1 FROM journal_lines jl "
                "WHERE jl.entry_id = je.id AND jl.account_id = ?)"
            )
            params.append(filters.account_id)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        # SQLite needs a LIMIT for OFFSET (-1 = no limit)
        limit_clause = ""
        if filters.limit is not None or filters.offset:
            limit_clause = "LIMIT ? OFFSET ?"
            params.extend([filters.limit if filters.limit is not None else -1, filters.offset])

        rows = await self.db.fetchall(
            f"""
            SELECT {_ENTRY_COLUMNS}
            FROM journal_entries je
            {where}
            ORDER BY je.date DESC, je.id DESC
            {limit_clause}
            """,
            tuple(params),
        )

        lines_by_entry = await self._fetch_lines([row["id"] for row in rows])
        entries = [self._row_to_entry(row, lines_by_entry.get(row["id"], [])) for row in rows]
        return [entry for entry in entries if self._is_consistent(entry)]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _validate(self, data: JournalEntryCreate) -> NormalizedEntry:
        """Validate against the accounts the lines reference"""
        accounts = await self.accounts.get_many(
            line.account_id for line in (data.lines or [])
        )
        try:
            return validate_entry(data, accounts)
        except ValidationError as e:
            logger.warning("Journal entry rejected", extra={"reason": str(e)})
            raise

    async def _insert_entry(self, entry: NormalizedEntry) -> int:
        """Insert header and lines (transaction open)"""
        cursor = await self.db.execute(
            """
            INSERT INTO journal_entries (
                date, description, reference, entry_type, is_locked,
                reversal_of, created_at
            ) VALUES (?, ?, ?, ?, 0, ?, ?)
            """,
            (
                entry.date.isoformat(),
                entry.description,
                entry.reference,
                entry.entry_type.value,
                entry.reversal_of,
                _timestamp(),
            ),
        )
        entry_id = cursor.lastrowid
        await self._insert_lines(entry_id, entry.lines)
        return entry_id

    async def _insert_lines(self, entry_id: int, lines: Sequence[NormalizedLine]) -> None:
        await self.db.executemany(
            """
            INSERT INTO journal_lines (
                entry_id, account_id, debit, credit,
                description, flow_category, line_order
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    entry_id,
                    line.account_id,
                    line.debit,
                    line.credit,
                    line.description,
                    line.flow_category,
                    order,
                )
                for order, line in enumerate(lines)
            ],
        )

    async def _set_locked(
        self,
        existing: JournalEntry,
        is_locked: bool,
        action: AuditAction,
        actor: str | None,
    ) -> JournalEntry:
        async with self.db.transaction():
            await self.db.execute(
                "UPDATE journal_entries SET is_locked = ? WHERE id = ?",
                (1 if is_locked else 0, existing.id),
            )
            changed = await self._load(existing.id)
            await audit.record(
                self.db,
                action,
                existing.id,
                old_value={"is_locked": existing.is_locked},
                new_value={"is_locked": is_locked},
                user=actor,
            )
        assert changed is not None
        return changed

    async def _require(self, entry_id: int) -> JournalEntry:
        entry = await self._load(entry_id)
        if entry is None:
            raise NotFoundError(f"Journal entry not found: {entry_id}")
        return entry

    async def _is_referenced(self, entry_id: int) -> bool:
        """Whether an invoice, expense or payment points at the entry"""
        for table in ENTRY_REFERENCE_TABLES:
            row = await self.db.fetchone(
                f"SELECT 1 FROM {table} WHERE journal_entry_id = ? LIMIT 1",
                (entry_id,),
            )
            if row is not None:
                return True
        return False

    async def _load(self, entry_id: int) -> JournalEntry | None:
        """Entry as stored (no consistency check)"""
        row = await self.db.fetchone(
            f"SELECT {_ENTRY_COLUMNS} FROM journal_entries je WHERE id = ?",
            (entry_id,),
        )
        if not row:
            return None

        lines_by_entry = await self._fetch_lines([entry_id])
        return self._row_to_entry(row, lines_by_entry.get(entry_id, []))

    async def _fetch_lines(self, entry_ids: Sequence[int]) -> dict[int, list[JournalLine]]:
        """Lines of many entries, in chunks of _IN_CHUNK ids"""
        lines_by_entry: dict[int, list[JournalLine]] = {}

        for start in range(0, len(entry_ids), _IN_CHUNK):
            chunk = entry_ids[start:start + _IN_CHUNK]
            placeholders = ",".join("?" * len(chunk))
            rows = await self.db.fetchall(
                f"""
                SELECT
                    jl.id, jl.entry_id, jl.account_id, jl.debit, jl.credit,
                    jl.description, jl.flow_category,
                    a.code AS account_code, a.name AS account_name,
                    a.type AS account_type
                FROM journal_lines jl
                JOIN accounts a ON a.id = jl.account_id
                WHERE jl.entry_id IN ({placeholders})
                ORDER BY jl.entry_id, jl.line_order, jl.id
                """,
                tuple(chunk),
            )

            for row in rows:
                lines_by_entry.setdefault(row["entry_id"], []).append(
                    JournalLine(
                        id=row["id"],
                        entry_id=row["entry_id"],
                        account_id=row["account_id"],
                        debit=from_minor(row["debit"]),
                        credit=from_minor(row["credit"]),
                        description=row["description"],
                        flow_category=row["flow_category"],
                        account=AccountRef(
                            id=row["account_id"],
                            code=row["account_code"],
                            name=row["account_name"],
                            type=AccountType(row["account_type"]),
                        ),
                    )
                )

        return lines_by_entry

    @staticmethod
    def _row_to_entry(row: Any, lines: list[JournalLine]) -> JournalEntry:
        entry_date = to_date(row["date"])
        assert entry_date is not None
        return JournalEntry(
            id=row["id"],
            date=entry_date,
            description=row["description"],
            reference=row["reference"],
            entry_type=EntryType(row["entry_type"]),
            is_locked=bool(row["is_locked"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            reversal_of=row["reversal_of"],
            lines=lines,
            total_debits=sum((line.debit for line in lines), from_minor(0)),
            total_credits=sum((line.credit for line in lines), from_minor(0)),
        )

    @staticmethod
    def _is_consistent(entry: JournalEntry) -> bool:
        """Stored entry still satisfies the double-entry invariants"""
        if len(entry.lines) >= 2 and entry.total_debits == entry.total_credits:
            return True

        logger.error(
            "Inconsistent journal entry in storage",
            extra={
                "entry_id": entry.id,
                "lines": len(entry.lines),
                "total_debits": str(entry.total_debits),
                "total_credits": str(entry.total_credits),
            },
        )
        return False
