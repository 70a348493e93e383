"""
goodluck.utils
--------------

Light helpers shared across the beacon, settlement and ledger components
(hashing wrappers, packed encodings, hex/bytes guards).

This package file deliberately avoids eager imports to keep dependency order
simple.
"""

__all__: list[str] = []
