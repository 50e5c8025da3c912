"""Validation policies — which declarations qualify as providers, and for what.

A policy is a plain value bundling three functions:
- ``check_candidate``: may this declaration be registered at all?
- ``extract_target_names``: under which names should it be registered?
- ``check_target``: may it be registered under this particular name?

Three policies cover the known registry flavors:
- ``STRICT_SERVICE``: service registries. The class must be concrete,
  public, not local, constructible without arguments, and must subclass
  every service it names.
- ``LENIENT_TYPE``: type registries. The class (or protocol) only has to
  be public.
- ``SINGLE_INDEX``: index registries. Exactly one target per class, no
  subclass check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from provreg.errors import ValidationRejected
from provreg.markers import INDEX_FOR, PROVIDER_FOR, TYPE_PROVIDER_FOR
from provreg.processing.models import Declaration, DeclarationKind


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a check; ``message`` is None when the check passed."""

    message: Optional[str] = None

    @classmethod
    def error(cls, message: str) -> CheckResult:
        if message is None:
            raise TypeError("message must not be None")
        return cls(message)

    @property
    def is_error(self) -> bool:
        return self.message is not None

    def raise_for_error(self, declaration: Declaration) -> None:
        if self.message is not None:
            raise ValidationRejected(declaration.simple_name, self.message)


OK = CheckResult()


def _always_ok(declaration: Declaration, target: str) -> CheckResult:
    return OK


@dataclass(frozen=True)
class ValidationPolicy:
    """Strategy value parameterizing the reconciliation driver."""

    name: str
    marker: str  # Decorator name that opts a class in
    check_candidate: Callable[[Declaration], CheckResult]
    extract_target_names: Callable[[Declaration], list[str]]
    check_target: Callable[[Declaration, str], CheckResult] = _always_ok
    default_dir: str = ""  # Resource directory used when options give none


# --- Strict service registry ---


def _check_service_candidate(declaration: Declaration) -> CheckResult:
    if declaration.kind != DeclarationKind.CLASS:
        return CheckResult.error("is not a class")
    if not declaration.is_public:
        return CheckResult.error("is not a public class")
    if not declaration.is_static:
        return CheckResult.error("is not a static class")
    if declaration.is_abstract:
        return CheckResult.error("is an abstract class")
    if not declaration.has_noarg_constructor:
        return CheckResult.error("has no public no-args constructor")
    return OK


def _check_implements(declaration: Declaration, target: str) -> CheckResult:
    if declaration.is_assignable_to(target):
        return OK
    return CheckResult.error(f"does not implement {target}")


def _all_targets(marker: str) -> Callable[[Declaration], list[str]]:
    def extract(declaration: Declaration) -> list[str]:
        return list(declaration.markers.get(marker, ()))

    return extract


STRICT_SERVICE = ValidationPolicy(
    name="service",
    marker=PROVIDER_FOR,
    check_candidate=_check_service_candidate,
    extract_target_names=_all_targets(PROVIDER_FOR),
    check_target=_check_implements,
    default_dir="providers/services/",
)


# --- Lenient type registry ---


def _check_type_candidate(declaration: Declaration) -> CheckResult:
    if declaration.kind not in (DeclarationKind.CLASS, DeclarationKind.PROTOCOL):
        return CheckResult.error("is not a class nor a protocol")
    if not declaration.is_public:
        return CheckResult.error("is not public")
    return OK


LENIENT_TYPE = ValidationPolicy(
    name="type",
    marker=TYPE_PROVIDER_FOR,
    check_candidate=_check_type_candidate,
    extract_target_names=_all_targets(TYPE_PROVIDER_FOR),
    default_dir="providers/types/",
)


# --- Single-valued index registry ---


def _check_index_candidate(declaration: Declaration) -> CheckResult:
    if declaration.kind != DeclarationKind.CLASS:
        return CheckResult.error("is not a class")
    if not declaration.is_public:
        return CheckResult.error("is not public")
    if declaration.is_nested:
        return CheckResult.error("is a nested class")
    if len(declaration.markers.get(INDEX_FOR, ())) != 1:
        return CheckResult.error("must name exactly one indexed type")
    return OK


def _single_target(declaration: Declaration) -> list[str]:
    return list(declaration.markers.get(INDEX_FOR, ())[:1])


SINGLE_INDEX = ValidationPolicy(
    name="index",
    marker=INDEX_FOR,
    check_candidate=_check_index_candidate,
    extract_target_names=_single_target,
    default_dir="providers/index/",
)


POLICIES = {policy.name: policy for policy in (STRICT_SERVICE, LENIENT_TYPE, SINGLE_INDEX)}


def get_policy(name: str) -> ValidationPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown registry flavor '{name}'. Known: {', '.join(POLICIES)}"
        ) from None
