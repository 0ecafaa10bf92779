"""
API route package

Router modules:
- health: health check
- accounts: chart of accounts
- journal: journal entries (create/edit/lock/reverse)
- reports: trial balance, general ledger and statements
"""
