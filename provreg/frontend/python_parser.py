"""Python declaration parser — builds declarations from source files using AST.

Names are resolved statically: a base class or marker target is looked up in
the module's import table, then among the module's own top-level classes;
anything else is kept verbatim (builtins, unresolvable expressions).
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from provreg.frontend.file_scanner import is_package_module, module_name_for
from provreg.markers import MARKER_NAMES
from provreg.processing.models import Declaration, DeclarationKind, Visibility

ABSTRACT_BASES = {"abc.ABC", "ABC"}
ABSTRACT_METACLASSES = {"abc.ABCMeta", "ABCMeta"}
PROTOCOL_BASES = {"typing.Protocol", "typing_extensions.Protocol", "Protocol"}
ABSTRACT_METHOD_DECORATORS = {"abstractmethod", "abc.abstractmethod"}


@dataclass
class ParsedModule:
    """Declarations found in one source file."""

    name: str  # Dotted module name
    path: str  # File path relative to the source root
    top_level: list[Declaration] = field(default_factory=list)
    marked: list[Declaration] = field(default_factory=list)
    syntax_error: str = ""


def parse_python_file(file_path: str | Path, source_root: str | Path = "") -> ParsedModule:
    """Parse a Python file into its declarations.

    Args:
        file_path: Absolute or relative path to the .py file.
        source_root: Root the module name is computed from (default: the
            file's directory).
    """
    file_path = Path(file_path)
    source_root = Path(source_root) if source_root else file_path.parent

    module_name = module_name_for(file_path, source_root)
    relative_path = str(file_path.relative_to(source_root))
    module = ParsedModule(name=module_name, path=relative_path)

    source = file_path.read_text(errors="replace")
    try:
        tree = ast.parse(source, filename=str(file_path))
    except SyntaxError as e:
        module.syntax_error = f"{relative_path}:{e.lineno}: {e.msg}"
        return module

    scope = _Scope(
        module=module_name,
        package=module_name if is_package_module(file_path) else module_name.rpartition(".")[0],
        source_file=relative_path,
    )
    scope.collect(tree)

    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            declaration = _parse_class(node, scope, prefix=module_name)
            module.top_level.append(declaration)
            if _has_marker(declaration):
                module.marked.append(declaration)
            module.marked.extend(_nested_marked(node, scope, prefix=declaration.name))
        elif isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef):
            markers = _parse_markers(node, scope)
            if markers:
                module.marked.append(
                    Declaration(
                        name=f"{module_name}.{node.name}",
                        kind=DeclarationKind.FUNCTION,
                        visibility=_visibility(node.name),
                        markers=markers,
                        source_file=relative_path,
                        line=node.lineno,
                    )
                )
            module.marked.extend(
                _nested_marked(node, scope, prefix=f"{module_name}.{node.name}.<locals>", local=True)
            )

    return module


class _Scope:
    """Import table and local class names of one module."""

    def __init__(self, module: str, package: str, source_file: str):
        self.module = module
        self.package = package
        self.source_file = source_file
        self.imports: dict[str, str] = {}
        self.local_classes: set[str] = set()

    def collect(self, tree: ast.Module) -> None:
        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                self.local_classes.add(node.name)
            elif isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        self.imports[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".")[0]
                        self.imports[head] = head
            elif isinstance(node, ast.ImportFrom):
                base = self._absolute_module(node)
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    target = f"{base}.{alias.name}" if base else alias.name
                    self.imports[alias.asname or alias.name] = target

    def _absolute_module(self, node: ast.ImportFrom) -> str:
        if not node.level:
            return node.module or ""
        parts = self.package.split(".") if self.package else []
        if node.level > 1:
            parts = parts[: len(parts) - (node.level - 1)]
        if node.module:
            parts.append(node.module)
        return ".".join(parts)

    def resolve(self, dotted: str) -> str:
        head, _, rest = dotted.partition(".")
        if head in self.imports:
            base = self.imports[head]
        elif head in self.local_classes:
            base = f"{self.module}.{head}"
        else:
            base = head
        return f"{base}.{rest}" if rest else base


def _parse_class(
    node: ast.ClassDef,
    scope: _Scope,
    prefix: str,
    nested: bool = False,
    local: bool = False,
    private_parent: bool = False,
) -> Declaration:
    """Parse a class definition into a declaration.

    Supertypes hold the directly declared bases only; the round builder
    expands them transitively once every module is parsed.
    """
    bases = [scope.resolve(_dotted_name(base)) for base in node.bases if _dotted_name(base)]
    metaclass = next(
        (scope.resolve(_dotted_name(k.value)) for k in node.keywords if k.arg == "metaclass"),
        "",
    )

    is_protocol = any(base in PROTOCOL_BASES for base in bases)
    is_abstract = (
        is_protocol
        or any(base in ABSTRACT_BASES for base in bases)
        or metaclass in ABSTRACT_METACLASSES
        or _has_abstract_methods(node)
    )

    own_noarg = _own_constructor(node)

    visibility = _visibility(node.name)
    if private_parent:
        visibility = Visibility.PRIVATE

    return Declaration(
        name=f"{prefix}.{node.name}",
        kind=DeclarationKind.PROTOCOL if is_protocol else DeclarationKind.CLASS,
        visibility=visibility,
        is_abstract=is_abstract,
        is_nested=nested,
        is_static=not local,
        has_noarg_constructor=own_noarg is not False,
        defines_init=own_noarg is not None,
        supertypes=tuple(bases),
        markers=_parse_markers(node, scope),
        source_file=scope.source_file,
        line=node.lineno,
    )


def _nested_marked(
    node: ast.AST,
    scope: _Scope,
    prefix: str,
    local: bool = False,
    private_parent: bool = False,
) -> list[Declaration]:
    """Marked classes defined inside a class or function body.

    A class is private when any enclosing class is.
    """
    found = []
    private = private_parent or (isinstance(node, ast.ClassDef) and node.name.startswith("_"))
    for child in getattr(node, "body", []):
        if isinstance(child, ast.ClassDef):
            declaration = _parse_class(
                child,
                scope,
                prefix=prefix,
                nested=isinstance(node, ast.ClassDef),
                local=local,
                private_parent=private,
            )
            if _has_marker(declaration):
                found.append(declaration)
            found.extend(
                _nested_marked(
                    child, scope, prefix=declaration.name, local=local, private_parent=private
                )
            )
        elif isinstance(child, ast.FunctionDef | ast.AsyncFunctionDef):
            found.extend(
                _nested_marked(
                    child,
                    scope,
                    prefix=f"{prefix}.{child.name}.<locals>",
                    local=True,
                    private_parent=private,
                )
            )
    return found


def _parse_markers(
    node: ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef, scope: _Scope
) -> dict[str, tuple[str, ...]]:
    markers: dict[str, tuple[str, ...]] = {}
    for decorator in node.decorator_list:
        if not isinstance(decorator, ast.Call):
            continue
        name = scope.resolve(_dotted_name(decorator.func)).rsplit(".", 1)[-1]
        if name not in MARKER_NAMES:
            continue
        targets = tuple(
            scope.resolve(_dotted_name(arg)) for arg in decorator.args if _dotted_name(arg)
        )
        markers[name] = markers.get(name, ()) + targets
    return markers


def _has_marker(declaration: Declaration) -> bool:
    return bool(declaration.markers)


def _has_abstract_methods(node: ast.ClassDef) -> bool:
    for item in node.body:
        if isinstance(item, ast.FunctionDef | ast.AsyncFunctionDef):
            for decorator in item.decorator_list:
                if _dotted_name(decorator) in ABSTRACT_METHOD_DECORATORS:
                    return True
    return False


def _own_constructor(node: ast.ClassDef) -> Optional[bool]:
    """Whether the ``__init__`` written in this class body takes no arguments.

    None when the class body defines no ``__init__``; the round builder then
    takes the answer from the nearest base that does.
    """
    for item in node.body:
        if isinstance(item, ast.FunctionDef) and item.name == "__init__":
            args = item.args
            positional = args.posonlyargs + args.args
            required = len(positional) - len(args.defaults)
            if required > 1:  # self
                return False
            return all(default is not None for default in args.kw_defaults)
    return None


def _visibility(name: str) -> Visibility:
    return Visibility.PRIVATE if name.startswith("_") else Visibility.PUBLIC


def _dotted_name(node: ast.AST) -> str:
    """Render a Name/Attribute chain as a dotted string ('' for anything else)."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        parts = []
        current = node
        while isinstance(current, ast.Attribute):
            parts.append(current.attr)
            current = current.value
        if isinstance(current, ast.Name):
            parts.append(current.id)
            return ".".join(reversed(parts))
        return ""
    if isinstance(node, ast.Subscript):  # Generic[T] -> Generic
        return _dotted_name(node.value)
    return ""
