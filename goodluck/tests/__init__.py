"""
goodluck.tests
--------------
Test package for the beacon, the settlement game and the reward ledger.

Notes:
- Every test runs against an in-process `Chain` with a fixed seed, so block
  values and therefore delayed draws are reproducible.
- Tests that need a specific bet outcome pin the beacon value instead of
  searching for a lucky seed.
"""
