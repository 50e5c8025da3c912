"""Marker decorators that opt a class into a provider registry.

    from provreg.markers import provider_for

    @provider_for(Codec)
    class GzipCodec(Codec):
        ...

At runtime the decorators only record their targets on the class; the
registry files are produced by ``provreg generate``, which recognizes the
decorators in source without importing it.
"""

from __future__ import annotations

PROVIDER_FOR = "provider_for"
TYPE_PROVIDER_FOR = "type_provider_for"
INDEX_FOR = "index_for"

MARKER_NAMES = (PROVIDER_FOR, TYPE_PROVIDER_FOR, INDEX_FOR)

# Attribute the decorators store their targets under
TARGETS_ATTRIBUTE = "__provreg_targets__"


def _marker(marker: str, targets: tuple):
    if not targets:
        raise TypeError(f"@{marker} needs at least one target class")

    def decorate(cls):
        # Only this class's own markers; subclasses do not inherit registration
        recorded = dict(cls.__dict__.get(TARGETS_ATTRIBUTE, {}))
        recorded[marker] = recorded.get(marker, ()) + tuple(targets)
        setattr(cls, TARGETS_ATTRIBUTE, recorded)
        return cls

    return decorate


def provider_for(*services):
    """Register the decorated class as a provider of each service."""
    return _marker(PROVIDER_FOR, services)


def type_provider_for(*types):
    return _marker(TYPE_PROVIDER_FOR, types)


def index_for(indexed_type):
    """Register the decorated class in the index of ``indexed_type``."""
    return _marker(INDEX_FOR, (indexed_type,))


def targets_of(cls, marker: str) -> tuple:
    """Targets recorded on ``cls`` by ``marker``, in declaration order."""
    return cls.__dict__.get(TARGETS_ATTRIBUTE, {}).get(marker, ())
