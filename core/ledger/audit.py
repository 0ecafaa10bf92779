"""
Audit trail

Every ledger mutation appends one audit_log row inside the mutation's own
transaction. Rows are never updated or deleted.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.ledger.types import AuditAction
from core.utils.dates import now_utc

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

ENTITY_JOURNAL_ENTRY = "journal_entry"


@dataclass
class AuditRecord:
    """audit_log row"""

    id: int
    timestamp: str
    action: AuditAction
    entity_type: str
    entity_id: int | None
    old_value: dict[str, Any] | None
    new_value: dict[str, Any] | None
    user: str


def _json_default(value: Any) -> Any:
    """json.dumps fallback for ledger values"""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def snapshot(value: Any) -> dict[str, Any] | None:
    """Convert a dataclass (or dict) to a JSON-safe dict"""
    if value is None:
        return None
    data = asdict(value) if is_dataclass(value) else dict(value)
    return json.loads(json.dumps(data, default=_json_default))


async def record(
    db: SQLiteAdapter,
    action: AuditAction,
    entity_id: int | None,
    old_value: Any = None,
    new_value: Any = None,
    user: str | None = None,
    entity_type: str = ENTITY_JOURNAL_ENTRY,
) -> None:
    """Append an audit row

    Call inside the mutation's transaction so both commit together.

    Args:
        db: SQLite adapter (transaction open)
        action: mutation kind
        entity_id: mutated entity id
        old_value: state before (dataclass/dict, None for create)
        new_value: state after (None for delete)
        user: acting user (defaults to "system")
        entity_type: entity kind
    """
    old_snapshot = snapshot(old_value)
    new_snapshot = snapshot(new_value)

    await db.execute(
        """
        INSERT INTO audit_log (
            timestamp, action, entity_type, entity_id, old_value, new_value, user
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            now_utc().isoformat(timespec="seconds"),
            AuditAction(action).value,
            entity_type,
            entity_id,
            json.dumps(old_snapshot) if old_snapshot is not None else None,
            json.dumps(new_snapshot) if new_snapshot is not None else None,
            user or Defaults.ACTOR,
        ),
    )


class AuditTrail:
    """Read access to the audit log

    Args:
        db: SQLite adapter
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def list(
        self,
        entity_type: str | None = ENTITY_JOURNAL_ENTRY,
        entity_id: int | None = None,
        action: AuditAction | str | None = None,
        limit: int = Defaults.AUDIT_LIMIT,
    ) -> list[AuditRecord]:
        """Audit rows, newest first

        Args:
            entity_type: entity kind (None for all)
            entity_id: one entity only
            action: one action only
            limit: max rows

        Returns:
            AuditRecord list
        """
        conditions: list[str] = []
        params: list[Any] = []

        if entity_type is not None:
            conditions.append("entity_type = ?")
            params.append(entity_type)
        if entity_id is not None:
            conditions.append("entity_id = ?")
            params.append(entity_id)
        if action is not None:
            conditions.append("action = ?")
            params.append(AuditAction(action).value)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.append(limit)

        rows = await self.db.fetchall(
            f"""
            SELECT id, timestamp, action, entity_type, entity_id,
                   old_value, new_value, user
            FROM audit_log
            {where}
            ORDER BY id DESC
            LIMIT ?
            """,
            tuple(params),
        )

        return [
            AuditRecord(
                id=row["id"],
                timestamp=row["timestamp"],
                action=AuditAction(row["action"]),
                entity_type=row["entity_type"],
                entity_id=row["entity_id"],
                old_value=json.loads(row["old_value"]) if row["old_value"] else None,
                new_value=json.loads(row["new_value"]) if row["new_value"] else None,
                user=row["user"],
            )
            for row in rows
        ]
