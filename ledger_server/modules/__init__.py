"""Domain modules: accounts, ledger, withdrawals, transfers, settings and rates."""
