"""cookgov — contribution ledger governance service.

Invariants:
    - Package root contains no executable code beyond the version string
"""

__version__ = "0.1.0"
