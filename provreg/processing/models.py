"""Declaration models — the host's normalized view of a candidate class.

Declarations are built by a frontend (see ``provreg.frontend``) and fed to
the driver once per round. They carry just enough facts for a validation
policy to decide whether the class may be registered as a provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Visibility(Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class DeclarationKind(Enum):
    CLASS = "class"
    PROTOCOL = "protocol"  # typing.Protocol subclasses
    FUNCTION = "function"


@dataclass
class Declaration:
    """A declaration visible in a round."""

    name: str  # Canonical identifier, e.g. "pkg.mod.Outer.Inner"
    kind: DeclarationKind = DeclarationKind.CLASS
    visibility: Visibility = Visibility.PUBLIC
    is_abstract: bool = False
    is_nested: bool = False  # Defined inside another class
    is_static: bool = True  # False for classes defined inside a function
    has_noarg_constructor: bool = True
    defines_init: bool = False  # __init__ written in the class body itself

    # Qualified names of every (transitive) base class
    supertypes: tuple[str, ...] = ()

    # Marker name -> target names given to that marker
    markers: dict[str, tuple[str, ...]] = field(default_factory=dict)

    source_file: str = ""
    line: int = 0

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC

    def has_marker(self, marker: str) -> bool:
        return marker in self.markers

    def is_assignable_to(self, target: str) -> bool:
        return target == self.name or target in self.supertypes
