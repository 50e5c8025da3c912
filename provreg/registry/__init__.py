"""Registry — the incremental reconciliation core.

The registry provides:
- Entries: one service name and the set of classes that provide it
- The collector: session-scoped, lazily loaded from persisted resources
- Pending removals: providers stripped before their entry was loaded
- Modification detection: a one-time snapshot compared at the end of a session
"""
