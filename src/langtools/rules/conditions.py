"""Entrypoint conditions: compilation from config and evaluation.

A profile's ``rules`` entries are compiled into the frozen condition
classes below. Every condition is evaluated in one place,
:func:`matches_condition`. An :class:`Entrypoint` holds when all of its
conditions hold; the :class:`ResolvedRules` of a run holds when any of its
entrypoints does.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Union

from langtools.analysis.declarations import Declaration


class ProfileError(ValueError):
    """A profile or entrypoint definition cannot be interpreted."""


# ---------------------------------------------------------------------------
# Condition kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnnotatedBy:
    """Carries one of the annotations in ``fqns``, imported by the file."""

    fqns: tuple[str, ...]


@dataclass(frozen=True)
class ImplementsFromPackage:
    glob: str
    regex: re.Pattern = field(compare=False)


@dataclass(frozen=True)
class ImplementsType:
    fqn: str


@dataclass(frozen=True)
class ExtendsFromPackage:
    glob: str
    regex: re.Pattern = field(compare=False)


@dataclass(frozen=True)
class ExtendsType:
    fqn: str


@dataclass(frozen=True)
class OverridesFromPackage:
    glob: str
    regex: re.Pattern = field(compare=False)


@dataclass(frozen=True)
class NameMatches:
    glob: str
    regex: re.Pattern = field(compare=False)


@dataclass(frozen=True)
class PackageMatches:
    glob: str
    regex: re.Pattern = field(compare=False)


@dataclass(frozen=True)
class ServiceRegistered:
    """Declared in a ``META-INF/services`` registry file."""


Condition = Union[
    AnnotatedBy,
    ImplementsFromPackage,
    ImplementsType,
    ExtendsFromPackage,
    ExtendsType,
    OverridesFromPackage,
    NameMatches,
    PackageMatches,
    ServiceRegistered,
]


@dataclass(frozen=True)
class Entrypoint:
    name: str
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class ResolvedRules:
    entrypoints: tuple[Entrypoint, ...] = ()
    trust_external_overrides: bool = True

    @property
    def uses_service_registry(self) -> bool:
        return any(
            isinstance(cond, ServiceRegistered)
            for ep in self.entrypoints
            for cond in ep.conditions
        )


# ---------------------------------------------------------------------------
# Glob and import helpers
# ---------------------------------------------------------------------------


def glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a glob where ``*`` also crosses ``.`` separators.

    ``?`` matches exactly one character; everything else is literal. The
    result is anchored at both ends.
    """
    parts = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + "$")


def simple_name(fqn: str) -> str:
    return fqn.rsplit(".", 1)[-1]


def annotation_matches_import(fqn: str, imported: str) -> bool:
    """True when the import *imported* brings *fqn* into scope.

    Wildcards cover sub-packages too: ``org.example.*`` covers
    ``org.example.web.Route``, while ``org.other.*`` does not.
    """
    if "." not in fqn:
        return False
    package = fqn.rsplit(".", 1)[0]
    if imported.endswith(".*"):
        wildcard = imported[:-2]
        return package == wildcard or package.startswith(wildcard + ".")
    return imported == fqn


def supertype_from_package(name: str, regex: re.Pattern, imports: list[str]) -> bool:
    """True when supertype *name* resolves, via *imports*, into a package matching *regex*."""
    for imported in imports:
        if imported.endswith(".*"):
            if regex.match(imported[:-2] + "." + name):
                return True
        elif "." in imported and simple_name(imported) == name:
            if regex.match(imported):
                return True
    return False


def resolve_supertype(name: str, imports: list[str], package: str) -> set[str]:
    """Candidate fully-qualified names for supertype *name*."""
    candidates = set()
    for imported in imports:
        if imported.endswith(".*"):
            candidates.add(imported[:-2] + "." + name)
        elif simple_name(imported) == name:
            candidates.add(imported)
    if package:
        candidates.add(package + "." + name)
    return candidates


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

_PATTERN_KEYS = {
    "implementsInterfaceFromPackage": ImplementsFromPackage,
    "extendsClassFromPackage": ExtendsFromPackage,
    "overridesMethodFromInterface": OverridesFromPackage,
    "namePattern": NameMatches,
    "packagePattern": PackageMatches,
}

_TYPE_KEYS = {
    "implementsInterface": ImplementsType,
    "extendsClass": ExtendsType,
}

CONDITION_KEYS = frozenset({"annotatedBy", "serviceDiscovery"} | set(_PATTERN_KEYS) | set(_TYPE_KEYS))


def compile_condition(entry, profile_name: str, entrypoint_name: str) -> Condition:
    """Compile one ``rules`` entry such as ``{"annotatedBy": "x.y.Z"}``."""
    where = f'Profile "{profile_name}", entrypoint "{entrypoint_name}"'
    if not isinstance(entry, dict) or len(entry) != 1:
        raise ProfileError(f"{where} has a rule that is not a single-key mapping: {entry!r}")
    key, value = next(iter(entry.items()))

    if key not in CONDITION_KEYS:
        known = ", ".join(sorted(CONDITION_KEYS))
        raise ProfileError(f'{where} has an unknown rule "{key}". Known rules: {known}.')

    if key == "annotatedBy":
        fqns = (value,) if isinstance(value, str) else tuple(value or ())
        fqns = tuple(f.strip() for f in fqns if isinstance(f, str) and f.strip())
        if not fqns:
            raise ProfileError(f"{where} has an empty annotatedBy rule.")
        return AnnotatedBy(fqns=fqns)

    if key == "serviceDiscovery":
        if value is not True:
            raise ProfileError(f"{where}: serviceDiscovery must be true.")
        return ServiceRegistered()

    if not isinstance(value, str) or not value:
        raise ProfileError(f'{where} has an empty "{key}" rule.')
    if key in _TYPE_KEYS:
        return _TYPE_KEYS[key](fqn=value)
    return _PATTERN_KEYS[key](glob=value, regex=glob_to_regex(value))


def compile_entrypoint(entry, profile_name: str) -> Entrypoint:
    if not isinstance(entry, dict):
        raise ProfileError(f'Profile "{profile_name}" has an entrypoint that is not a mapping.')
    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ProfileError(f'Profile "{profile_name}" has an entrypoint with missing or empty name.')
    rules = entry.get("rules") or []
    if not rules:
        raise ProfileError(
            f'Profile "{profile_name}", entrypoint "{name}" has an empty rules array. '
            "An entrypoint must have at least one condition."
        )
    return Entrypoint(
        name=name,
        conditions=tuple(compile_condition(rule, profile_name, name) for rule in rules),
    )


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _annotated_by(decl: Declaration, fqn: str) -> bool:
    if simple_name(fqn) not in decl.annotation_names:
        return False
    return any(annotation_matches_import(fqn, imp) for imp in decl.file_imports)


def _resolves_to(decl: Declaration, fqn: str) -> bool:
    return any(
        fqn in resolve_supertype(name, decl.file_imports, decl.file_package)
        for name in decl.supertypes
    )


def _from_package(decl: Declaration, regex: re.Pattern) -> bool:
    return any(supertype_from_package(name, regex, decl.file_imports) for name in decl.supertypes)


def matches_condition(decl: Declaration, cond: Condition, service_names: frozenset[str] | set[str] = frozenset()) -> bool:
    if isinstance(cond, AnnotatedBy):
        return any(_annotated_by(decl, fqn) for fqn in cond.fqns)
    if isinstance(cond, (ImplementsFromPackage, ExtendsFromPackage)):
        # Supertype lists do not tell interfaces from classes.
        return _from_package(decl, cond.regex)
    if isinstance(cond, (ImplementsType, ExtendsType)):
        return _resolves_to(decl, cond.fqn)
    if isinstance(cond, OverridesFromPackage):
        return decl.is_override and _from_package(decl, cond.regex)
    if isinstance(cond, NameMatches):
        return bool(cond.regex.match(decl.name))
    if isinstance(cond, PackageMatches):
        return bool(cond.regex.match(decl.file_package))
    if isinstance(cond, ServiceRegistered):
        return decl.name in service_names or decl.enclosing_class in service_names
    raise TypeError(f"Unknown condition kind: {type(cond).__name__}")


def matches_entrypoint(decl: Declaration, entrypoint: Entrypoint, service_names=frozenset()) -> bool:
    return all(matches_condition(decl, cond, service_names) for cond in entrypoint.conditions)


def matches_any_entrypoint(decl: Declaration, rules: ResolvedRules, service_names=frozenset()) -> bool:
    return any(matches_entrypoint(decl, ep, service_names) for ep in rules.entrypoints)
