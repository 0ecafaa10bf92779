"""
Request schemas (Pydantic)

Shape checks only; accounting rules are enforced by the ledger, which
answers with 400 and the violated rule.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from core.ledger.models import (
    JournalEntryCreate,
    JournalEntryUpdate,
    JournalLineInput,
)
from core.ledger.types import AccountRole, AccountType, EntryType


class JournalLineRequest(BaseModel):
    """Journal line"""

    account_id: int | None = Field(default=None, description="Account ID")
    debit: Decimal = Field(default=Decimal("0"), description="Debit amount")
    credit: Decimal = Field(default=Decimal("0"), description="Credit amount")
    description: str | None = Field(default=None, description="Line memo")
    flow_category: str | None = Field(
        default=None, description="Cash flow label for cash postings"
    )

    def to_input(self) -> JournalLineInput:
        return JournalLineInput(
            account_id=self.account_id,
            debit=self.debit,
            credit=self.credit,
            description=self.description,
            flow_category=self.flow_category,
        )


class JournalEntryCreateRequest(BaseModel):
    """Journal entry creation"""

    date: dt.date | None = Field(default=None, description="Entry date (YYYY-MM-DD)")
    description: str | None = Field(default=None, description="Entry description")
    reference: str | None = Field(default=None, description="External reference")
    entry_type: EntryType = Field(default=EntryType.STANDARD, description="Entry type")
    lines: list[JournalLineRequest] = Field(default_factory=list, description="Lines")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "date": "2024-01-15",
                    "description": "Office rent",
                    "reference": "RENT-2024-01",
                    "lines": [
                        {"account_id": 18, "debit": "1500.00"},
                        {"account_id": 2, "credit": "1500.00"},
                    ],
                }
            ]
        }
    }

    def to_create(self) -> JournalEntryCreate:
        return JournalEntryCreate(
            date=self.date,
            description=self.description,
            reference=self.reference,
            entry_type=self.entry_type,
            lines=[line.to_input() for line in self.lines],
        )


class JournalEntryUpdateRequest(BaseModel):
    """Journal entry update (omitted fields are kept; lines replace all lines)"""

    date: dt.date | None = Field(default=None, description="Entry date")
    description: str | None = Field(default=None, description="Entry description")
    reference: str | None = Field(default=None, description="External reference")
    lines: list[JournalLineRequest] | None = Field(default=None, description="Replacement lines")

    def to_update(self) -> JournalEntryUpdate:
        return JournalEntryUpdate(
            date=self.date,
            description=self.description,
            reference=self.reference,
            lines=[line.to_input() for line in self.lines] if self.lines is not None else None,
        )


class ReverseRequest(BaseModel):
    """Reversal options"""

    date: dt.date | None = Field(default=None, description="Reversal date (default: today)")
    description: str | None = Field(default=None, description="Reversal description")


class AccountCreateRequest(BaseModel):
    """Account creation"""

    code: str = Field(..., description="Account code (unique)")
    name: str = Field(..., description="Account name")
    type: AccountType = Field(..., description="Account type")
    role: AccountRole | None = Field(default=None, description="Statement role")
    parent_id: int | None = Field(default=None, description="Parent account ID")
    description: str | None = Field(default=None, description="Description")
