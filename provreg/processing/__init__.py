"""Processing — turning rounds of declarations into registry updates.

- Declarations: the host's normalized view of a class
- Validation policies: which declarations qualify, and under which names
- The reconciliation driver: stale removal, registration and final flush
"""
