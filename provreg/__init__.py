"""provreg — incremental provider-registry generator.

Scans a source tree for classes marked with ``provider_for``,
``type_provider_for`` or ``index_for`` and keeps flat provider-list
resource files in sync with them, rewriting a resource only when its
content actually changed.
"""

__version__ = "0.3.0"

TOOL_NAME = f"provreg ({__version__})"
