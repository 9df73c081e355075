"""
bugledger - Bug tracker client for a smart-contract ledger.

The ledger is the source of truth for bug records. This package keeps a
locally cached projection of it and issues add/resolve/delete commands,
reconciling the projection after every accepted write.
"""

__version__ = "1.0.0"
