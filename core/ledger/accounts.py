"""
Account directory

Chart-of-accounts lookups and maintenance.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter, like_contains
from core.ledger.errors import NotFoundError, ValidationError
from core.ledger.models import Account
from core.ledger.types import ROLE_ACCOUNT_TYPES, AccountRole, AccountType, legacy_role

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    id, code, name, type, role, parent_id, description, is_active, created_at
"""


def row_to_account(row: Any) -> Account:
    """DB row -> Account"""
    return Account(
        id=row["id"],
        code=row["code"],
        name=row["name"],
        type=AccountType(row["type"]),
        role=AccountRole(row["role"]) if row["role"] else None,
        parent_id=row["parent_id"],
        description=row["description"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
    )


class AccountDirectory:
    """Chart of accounts

    Args:
        db: SQLite adapter
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get(self, account_id: int) -> Account | None:
        """Account by id (None when unknown)"""
        row = await self.db.fetchone(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id = ?",
            (account_id,),
        )
        return row_to_account(row) if row else None

    async def get_by_code(self, code: str) -> Account | None:
        """Account by code (None when unknown)"""
        row = await self.db.fetchone(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE code = ?",
            (code,),
        )
        return row_to_account(row) if row else None

    async def get_many(self, account_ids: Iterable[int]) -> dict[int, Account]:
        """Accounts for the given ids, keyed by id (unknown ids are absent)"""
        ids = sorted({i for i in account_ids if isinstance(i, int)})
        if not ids:
            return {}

        placeholders = ",".join("?" * len(ids))
        rows = await self.db.fetchall(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE id IN ({placeholders})",
            tuple(ids),
        )
        return {row["id"]: row_to_account(row) for row in rows}

    async def list(
        self,
        account_type: AccountType | str | None = None,
        is_active: bool | None = None,
        role: AccountRole | str | None = None,
        search: str | None = None,
    ) -> list[Account]:
        """List accounts ordered by code

        Args:
            account_type: only this type
            is_active: only active (True) or inactive (False) accounts
            role: only this role
            search: substring of code or name

        Returns:
            Accounts

        Raises:
            ValidationError: unknown account type or role
        """
        conditions: list[str] = []
        params: list[Any] = []

        if account_type is not None:
            try:
                account_type = AccountType(account_type)
            except ValueError as e:
                raise ValidationError(f"Invalid account type: {account_type!r}") from e
            conditions.append("type = ?")
            params.append(account_type.value)
        if is_active is not None:
            conditions.append("is_active = ?")
            params.append(1 if is_active else 0)
        if role is not None:
            try:
                role = AccountRole(role)
            except ValueError as e:
                raise ValidationError(f"Invalid account role: {role!r}") from e
            conditions.append("role = ?")
            params.append(role.value)
        if search:
            conditions.append("(code LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\')")
            params.extend([like_contains(search)] * 2)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = await self.db.fetchall(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts {where} ORDER BY code",
            tuple(params),
        )
        return [row_to_account(row) for row in rows]

    async def create(
        self,
        code: str,
        name: str,
        account_type: AccountType | str,
        role: AccountRole | str | None = None,
        parent_id: int | None = None,
        description: str | None = None,
    ) -> Account:
        """Create an account

        Raises:
            ValidationError: empty code/name, duplicate code, unknown type,
                role that does not fit the type, unknown parent
        """
        code = (code or "").strip()
        name = (name or "").strip()
        if not code:
            raise ValidationError("Account code is required")
        if not name:
            raise ValidationError("Account name is required")

        try:
            account_type = AccountType(account_type)
        except ValueError as e:
            raise ValidationError(f"Invalid account type: {account_type!r}") from e

        if role is not None:
            try:
                role = AccountRole(role)
            except ValueError as e:
                raise ValidationError(f"Invalid account role: {role!r}") from e
            if ROLE_ACCOUNT_TYPES[role] != account_type:
                raise ValidationError(
                    f"Role '{role.value}' requires account type '{ROLE_ACCOUNT_TYPES[role].value}'"
                )

        if await self.get_by_code(code) is not None:
            raise ValidationError(f"Account code already exists: {code}")
        if parent_id is not None and await self.get(parent_id) is None:
            raise ValidationError("Parent account does not exist")

        async with self.db.transaction():
            cursor = await self.db.execute(
                """
                INSERT INTO accounts (code, name, type, role, parent_id, description)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    code,
                    name,
                    account_type.value,
                    role.value if role else None,
                    parent_id,
                    description,
                ),
            )
            account_id = cursor.lastrowid

        logger.info(
            "Account created",
            extra={"account_id": account_id, "code": code, "type": account_type.value},
        )
        account = await self.get(account_id)
        assert account is not None
        return account

    async def set_active(self, account_id: int, is_active: bool) -> Account:
        """Activate or deactivate an account

        Inactive accounts keep their history but reject new postings.

        Raises:
            NotFoundError: unknown account
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                "UPDATE accounts SET is_active = ? WHERE id = ?",
                (1 if is_active else 0, account_id),
            )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Account not found: {account_id}")

        logger.info(
            "Account active flag changed",
            extra={"account_id": account_id, "is_active": is_active},
        )
        account = await self.get(account_id)
        assert account is not None
        return account

    async def backfill_roles(self) -> int:
        """Tag untagged accounts with the legacy code-prefix role

        asset "11.." -> cash, asset "12.." -> receivable,
        liability "21.." -> payable. Accounts that already carry a role
        are left alone.

        Returns:
            Number of accounts tagged
        """
        rows = await self.db.fetchall(
            "SELECT id, code, type FROM accounts WHERE role IS NULL"
        )
        updates = [
            (role.value, row["id"])
            for row in rows
            if (role := legacy_role(row["code"], row["type"])) is not None
        ]

        if updates:
            async with self.db.transaction():
                await self.db.executemany(
                    "UPDATE accounts SET role = ? WHERE id = ? AND role IS NULL",
                    updates,
                )

        logger.info("Account roles backfilled", extra={"tagged": len(updates)})
        return len(updates)
