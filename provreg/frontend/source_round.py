"""Source rounds — everything the driver needs from one scan of a source tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from provreg.frontend.file_scanner import scan_source_files
from provreg.frontend.python_parser import ParsedModule, parse_python_file
from provreg.processing.models import Declaration


@dataclass
class SourceRound:
    """Declarations gathered from a source tree for one processing round."""

    modules: list[ParsedModule] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)  # Top-level classes
    annotated: list[Declaration] = field(default_factory=list)  # Anything marked

    @property
    def syntax_errors(self) -> list[str]:
        return [m.syntax_error for m in self.modules if m.syntax_error]


def scan_source_tree(source_root: str | Path) -> SourceRound:
    """Parse every module under ``source_root`` and resolve supertypes."""
    source_root = Path(source_root)
    modules = [parse_python_file(path, source_root) for path in scan_source_files(source_root)]
    return build_round(modules)


def build_round(modules: list[ParsedModule]) -> SourceRound:
    result = SourceRound(modules=modules)
    for module in modules:
        result.declarations.extend(module.top_level)
        result.annotated.extend(module.marked)

    index = {d.name: d for d in result.declarations + result.annotated}
    for declaration in index.values():
        declaration.supertypes = _all_supertypes(declaration, index)
    for declaration in index.values():
        if not declaration.defines_init:
            declaration.has_noarg_constructor = _inherited_noarg(declaration, index)
    return result


def _inherited_noarg(declaration: Declaration, index: dict[str, Declaration]) -> bool:
    """Constructor arity of the nearest base in the tree that writes ``__init__``."""
    for name in declaration.supertypes:
        base = index.get(name)
        if base is not None and base.defines_init:
            return base.has_noarg_constructor
    return True


def _all_supertypes(declaration: Declaration, index: dict[str, Declaration]) -> tuple[str, ...]:
    """Direct bases plus, for bases defined in the tree, their bases, and so on."""
    seen: list[str] = []
    stack = list(reversed(declaration.supertypes))
    while stack:
        name = stack.pop()
        if name in seen or name == declaration.name:
            continue
        seen.append(name)
        base = index.get(name)
        if base is not None:
            stack.extend(reversed(base.supertypes))
    return tuple(seen)
