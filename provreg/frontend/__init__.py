"""Python source frontend — declarations from a source tree, without importing it.

The frontend plays the host's part for ``provreg generate``: it scans a
source root, parses every module with ``ast`` and reports
- the top-level classes visible in the round (for stale removal)
- every class or function carrying a provreg marker (for registration)
together with the facts validation policies need.
"""
