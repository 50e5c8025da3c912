"""Tests for the Python source frontend."""

import tempfile
import textwrap
from pathlib import Path

from provreg.frontend.file_scanner import module_name_for, scan_source_files
from provreg.frontend.python_parser import parse_python_file
from provreg.frontend.source_round import scan_source_tree
from provreg.markers import PROVIDER_FOR
from provreg.processing.models import DeclarationKind, Visibility
from provreg.processing.policy import OK, STRICT_SERVICE

API = """
from abc import ABC, abstractmethod


class Codec(ABC):
    @abstractmethod
    def encode(self, data):
        ...
"""

IMPL = """
from provreg.markers import provider_for

from .api import Codec


@provider_for(Codec)
class GzipCodec(Codec):
    def encode(self, data):
        return data


@provider_for(Codec)
class NeedsArgs(Codec):
    def __init__(self, level):
        self.level = level


class Outer:
    @provider_for(Codec)
    class Inner(Codec):
        pass


class _Private:
    @provider_for(Codec)
    class Hidden(Codec):
        pass

    class Public:
        @provider_for(Codec)
        class Leaf(Codec):
            pass


def factory():
    @provider_for(Codec)
    class Local(Codec):
        pass

    return Local
"""

DEEP = """
from provreg import markers

from ..api import Codec
from ..impl import GzipCodec


@markers.provider_for(Codec)
class FastGzip(GzipCodec):
    def __init__(self, level=9, *, fast=True):
        self.level = level
"""

SHAPES = """
from typing import Protocol

from provreg.markers import type_provider_for


@type_provider_for(Protocol)
class Drawable(Protocol):
    def draw(self) -> None:
        ...
"""


def _write_tree(root: Path) -> None:
    files = {
        "pkg/__init__.py": "",
        "pkg/api.py": API,
        "pkg/impl.py": IMPL,
        "pkg/shapes.py": SHAPES,
        "pkg/sub/__init__.py": "",
        "pkg/sub/deep.py": DEEP,
    }
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))


def _by_name(declarations):
    return {d.name: d for d in declarations}


# --- File Scanner Tests ---


def test_scan_skips_hidden_and_cache_dirs():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        (root / ".venv").mkdir()
        (root / ".venv" / "site.py").write_text("")
        (root / "pkg" / "__pycache__").mkdir()
        (root / "pkg" / "__pycache__" / "api.py").write_text("")

        files = [str(p.relative_to(root)) for p in scan_source_files(root)]

    assert files == [
        "pkg/__init__.py",
        "pkg/api.py",
        "pkg/impl.py",
        "pkg/shapes.py",
        "pkg/sub/__init__.py",
        "pkg/sub/deep.py",
    ]


def test_module_names():
    root = Path("/src")
    assert module_name_for(root / "pkg" / "__init__.py", root) == "pkg"
    assert module_name_for(root / "pkg" / "sub" / "deep.py", root) == "pkg.sub.deep"
    assert module_name_for(root / "top.py", root) == "top"


# --- Parser Tests ---


def test_parse_abstract_base():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        module = parse_python_file(root / "pkg" / "api.py", root)

    assert module.name == "pkg.api"
    assert module.path == "pkg/api.py"
    assert module.marked == []
    codec = module.top_level[0]
    assert codec.name == "pkg.api.Codec"
    assert codec.is_abstract
    assert codec.supertypes == ("abc.ABC",)
    assert codec.line == 5


def test_parse_markers_and_constructors():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        module = parse_python_file(root / "pkg" / "impl.py", root)

    top = _by_name(module.top_level)
    assert list(top) == ["pkg.impl.GzipCodec", "pkg.impl.NeedsArgs", "pkg.impl.Outer", "pkg.impl._Private"]

    gzip = top["pkg.impl.GzipCodec"]
    assert gzip.markers == {PROVIDER_FOR: ("pkg.api.Codec",)}
    assert gzip.supertypes == ("pkg.api.Codec",)
    assert not gzip.is_abstract
    assert gzip.has_noarg_constructor
    assert not gzip.defines_init
    assert gzip.source_file == "pkg/impl.py"

    assert not top["pkg.impl.NeedsArgs"].has_noarg_constructor
    assert top["pkg.impl.NeedsArgs"].defines_init
    assert top["pkg.impl.Outer"].markers == {}


def test_parse_nested_and_local_classes():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        module = parse_python_file(root / "pkg" / "impl.py", root)

    marked = _by_name(module.marked)
    assert set(marked) == {
        "pkg.impl.GzipCodec",
        "pkg.impl.NeedsArgs",
        "pkg.impl.Outer.Inner",
        "pkg.impl._Private.Hidden",
        "pkg.impl._Private.Public.Leaf",
        "pkg.impl.factory.<locals>.Local",
    }

    inner = marked["pkg.impl.Outer.Inner"]
    assert inner.is_nested and inner.is_static and inner.is_public

    hidden = marked["pkg.impl._Private.Hidden"]
    assert hidden.visibility == Visibility.PRIVATE
    assert marked["pkg.impl._Private.Public.Leaf"].visibility == Visibility.PRIVATE

    local = marked["pkg.impl.factory.<locals>.Local"]
    assert not local.is_static
    assert not local.is_nested


def test_parse_relative_imports_and_module_markers():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        module = parse_python_file(root / "pkg" / "sub" / "deep.py", root)

    fast = module.marked[0]
    assert fast.name == "pkg.sub.deep.FastGzip"
    assert fast.markers == {PROVIDER_FOR: ("pkg.api.Codec",)}
    assert fast.supertypes == ("pkg.impl.GzipCodec",)
    assert fast.has_noarg_constructor


def test_parse_protocol():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        module = parse_python_file(root / "pkg" / "shapes.py", root)

    drawable = module.marked[0]
    assert drawable.kind == DeclarationKind.PROTOCOL
    assert drawable.is_abstract


def test_parse_syntax_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "broken.py").write_text("def broken(:\n    pass\n")
        module = parse_python_file(root / "broken.py", root)

    assert module.syntax_error.startswith("broken.py:1:")
    assert module.top_level == []


# --- Source Round Tests ---


def test_source_round_expands_supertypes():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_tree(root)
        (root / "pkg" / "bad.py").write_text("class (:\n")
        source = scan_source_tree(root)

    declarations = _by_name(source.declarations)
    annotated = _by_name(source.annotated)

    fast = declarations["pkg.sub.deep.FastGzip"]
    assert fast.supertypes[0] == "pkg.impl.GzipCodec"
    assert fast.is_assignable_to("pkg.api.Codec")
    assert "abc.ABC" in fast.supertypes

    # Nested classes are marked but not top-level
    assert "pkg.impl.Outer.Inner" in annotated
    assert "pkg.impl.Outer.Inner" not in declarations
    assert annotated["pkg.impl.Outer.Inner"].is_assignable_to("pkg.api.Codec")

    assert len(source.syntax_errors) == 1
    assert source.syntax_errors[0].startswith("pkg/bad.py:1:")


BASES = """
class Service:
    pass


class NeedsConfig(Service):
    def __init__(self, config):
        self.config = config


class Defaulted(NeedsConfig):
    def __init__(self):
        super().__init__({})
"""

CHILDREN = """
from provreg.markers import provider_for

from .bases import Defaulted, NeedsConfig, Service


@provider_for(Service)
class Inherits(NeedsConfig):
    pass


@provider_for(Service)
class InheritsDefaulted(Defaulted):
    pass


@provider_for(Service)
class Plain(Service):
    pass
"""


def test_source_round_inherits_constructors():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "app").mkdir()
        (root / "app" / "__init__.py").write_text("")
        (root / "app" / "bases.py").write_text(textwrap.dedent(BASES))
        (root / "app" / "children.py").write_text(textwrap.dedent(CHILDREN))
        source = scan_source_tree(root)

    annotated = _by_name(source.annotated)
    inherits = annotated["app.children.Inherits"]
    assert not inherits.defines_init
    assert not inherits.has_noarg_constructor
    assert STRICT_SERVICE.check_candidate(inherits).message == "has no public no-args constructor"

    # The nearest base writing __init__ wins
    assert annotated["app.children.InheritsDefaulted"].has_noarg_constructor
    assert STRICT_SERVICE.check_candidate(annotated["app.children.InheritsDefaulted"]) == OK
    assert annotated["app.children.Plain"].has_noarg_constructor
