"""
Pocket Ledger

An in-memory personal banking model: savings, current and fixed deposit
accounts with a transaction history, pluggable interest strategies,
transaction observers and undoable commands. All amounts use Decimal.
"""

__version__ = "1.0.0"
