"""Feature and package name syntax.

Feature names are kebab-case (``async-runtime``, ``v2-api``).  The literal
``default`` is reserved and always valid as a declaration.

Activation lists may also hold external references::

    dep:tokio             # optional dependency trigger
    serde:derive          # feature "derive" of package "serde"
    @scope/pkg:feature    # same, for a scoped package

References split on the first ``:``.  They are never valid as declaration
names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ft_flags.constants import DEFAULT_FEATURE, DEP_PREFIX, REF_SEPARATOR

_KEBAB_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")

_CONSTRUCT = object()


class FeatureName(str):
    """A validated feature name.

    Build one with :meth:`parse` (validating) or :meth:`unchecked`
    (trusted callers only).  Direct construction is refused.
    """

    __slots__ = ()

    def __new__(cls, value: str, _token: object = None) -> FeatureName:
        if _token is not _CONSTRUCT:
            raise TypeError(
                "FeatureName cannot be constructed directly; "
                "use FeatureName.parse() or FeatureName.unchecked()"
            )
        return super().__new__(cls, value)

    @classmethod
    def parse(cls, value: str) -> NameParseResult:
        """Validate *value* and return a result holding the name or an error."""
        if not isinstance(value, str) or not value:
            return NameParseResult(error="Feature name cannot be empty")
        if value == DEFAULT_FEATURE or is_valid_feature_name(value):
            return NameParseResult(name=cls(value, _CONSTRUCT))
        return NameParseResult(
            error=f"Invalid feature name \"{value}\": must be kebab-case (e.g., 'async-runtime')"
        )

    @classmethod
    def unchecked(cls, value: str) -> FeatureName:
        return cls(value, _CONSTRUCT)

    def __reduce__(self):
        return (FeatureName.unchecked, (str(self),))

    def __repr__(self) -> str:
        return f"FeatureName({str.__repr__(self)})"


@dataclass(frozen=True)
class NameParseResult:
    """Outcome of :meth:`FeatureName.parse`: exactly one of *name* / *error* is set."""

    name: Optional[FeatureName] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.name is not None


# ── Local names ──────────────────────────────────────────────────────────


def is_valid_feature_name(name: str) -> bool:
    """Return ``True`` if *name* is a kebab-case feature name."""
    if not isinstance(name, str) or not name:
        return False
    return _KEBAB_RE.match(name) is not None


def is_valid_feature_declaration(name: str) -> bool:
    """Return ``True`` if *name* may be declared as a feature.

    ``default`` is always accepted; ``dep:`` and ``pkg:feature`` shapes are
    references and are rejected here.
    """
    if name == DEFAULT_FEATURE:
        return True
    if is_external_ref(name):
        return False
    return is_valid_feature_name(name)


def is_valid_package_name(name: str) -> bool:
    """Return ``True`` for ``kebab-name`` or ``@scope/kebab-name``."""
    if not isinstance(name, str) or not name:
        return False
    if name.startswith("@"):
        parts = name[1:].split("/")
        if len(parts) != 2:
            return False
        return all(_KEBAB_RE.match(p) for p in parts)
    return _KEBAB_RE.match(name) is not None


# ── External references ──────────────────────────────────────────────────


def is_dep_ref(ref: str) -> bool:
    return ref.startswith(DEP_PREFIX)


def is_dep_feature_ref(ref: str) -> bool:
    """``pkg:feature`` shape (anything with ``:`` that is not ``dep:``)."""
    return not ref.startswith(DEP_PREFIX) and REF_SEPARATOR in ref


def is_external_ref(ref: str) -> bool:
    return is_dep_ref(ref) or is_dep_feature_ref(ref)


def get_ref_package(ref: str) -> Optional[str]:
    """Package part of an external reference, ``None`` for local names."""
    if is_dep_ref(ref):
        return ref[len(DEP_PREFIX):]
    if is_dep_feature_ref(ref):
        return ref.split(REF_SEPARATOR, 1)[0]
    return None


def get_ref_feature(ref: str) -> Optional[str]:
    """Feature part of a ``pkg:feature`` reference, ``None`` otherwise."""
    if is_dep_feature_ref(ref):
        return ref.split(REF_SEPARATOR, 1)[1]
    return None


def is_valid_feature_reference(ref: str) -> bool:
    """Syntax check for any activation target.

    Does not check that the referenced feature or package exists.
    """
    if not isinstance(ref, str) or not ref:
        return False

    if is_dep_ref(ref):
        return is_valid_package_name(ref[len(DEP_PREFIX):])

    if is_dep_feature_ref(ref):
        pkg = get_ref_package(ref)
        feature = get_ref_feature(ref)
        if not pkg or not feature:
            return False
        return is_valid_package_name(pkg) and is_valid_feature_name(feature)

    return ref == DEFAULT_FEATURE or is_valid_feature_name(ref)
