"""Persistence — durable storage of per-name provider-list resources.

The driver and the collector only depend on the ``PersistencePort``
protocol. Two adapters are provided:
- ``FilePersistence``: resources are files under an output root
- ``MemoryPersistence``: resources live in a dict (embedding and tests)
"""
