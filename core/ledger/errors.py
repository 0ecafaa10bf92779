"""
Ledger errors

All validation runs before any write, so none of these leave partial state.
"""


class LedgerError(Exception):
    """Base class for ledger errors"""

    pass


class ValidationError(LedgerError):
    """Malformed or unbalanced entry data"""

    pass


class StateError(LedgerError):
    """Operation not allowed in the entry's current state

    Raised for edits/deletes of locked entries and deletes of entries still
    referenced by invoices, expenses or payments.
    """

    pass


class NotFoundError(LedgerError):
    """Unknown entry or account on a mutating path"""

    pass


class AuthorizationError(LedgerError):
    """Caller is not allowed to perform a privileged operation (unlock)"""

    pass
