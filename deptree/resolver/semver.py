"""Semantic versioning utilities.

Versions are parsed and ordered with the ``semver`` library. Constraints use
the npm range grammar and are desugared into comparator sets:

- Union: "1.x || >=2.5.0"
- Hyphen: "1.2.3 - 2.3.4" (>=1.2.3 <=2.3.4)
- Comparators: ">=1.0.0 <2.0.0", "=1.2.3", "1.2.3"
- Caret: "^1.2.3" (>=1.2.3 <2.0.0-0), "^0.2.3" (>=0.2.3 <0.3.0-0)
- Tilde: "~1.2.3" (>=1.2.3 <1.3.0-0), "~1" (>=1.0.0 <2.0.0-0)
- X-ranges and partials: "*", "", "1", "1.x", "1.2.*"

Upper bounds end in "-0" so that pre-releases of the excluded version never
slip in. A pre-release version only satisfies a comparator set when one of
the set's comparators carries a pre-release on the same major.minor.patch.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from semver import Version

from deptree.exceptions import InvalidConstraintError, NoCompatibleVersionError

_WILDCARDS = frozenset({"x", "X", "*"})

_PARTIAL_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*|[xX*])"
    r"(?:\.(?P<minor>0|[1-9]\d*|[xX*])"
    r"(?:\.(?P<patch>0|[1-9]\d*|[xX*])"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r")?)?$"
)
_TOKEN_RE = re.compile(r"^(?P<op><=|>=|<|>|=|~>|~|\^)?(?P<version>.*)$")
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_OPERATOR_GAP_RE = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")


@dataclass(frozen=True)
class Comparator:
    """A single bound such as ">=1.2.0" or "<2.0.0-0"."""

    operator: str
    version: Version

    def test(self, version: Version) -> bool:
        cmp = version.compare(self.version)
        if self.operator == "<":
            return cmp < 0
        if self.operator == "<=":
            return cmp <= 0
        if self.operator == ">":
            return cmp > 0
        if self.operator == ">=":
            return cmp >= 0
        return cmp == 0

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


@dataclass(frozen=True)
class ComparatorSet:
    """Comparators that must all hold (an empty set matches everything)."""

    comparators: tuple[Comparator, ...] = ()

    def test(self, version: Version) -> bool:
        if not all(c.test(version) for c in self.comparators):
            return False
        if version.prerelease is None:
            return True
        # Pre-releases need an explicit opt-in on the same release tuple
        release = (version.major, version.minor, version.patch)
        return any(
            c.version.prerelease is not None
            and (c.version.major, c.version.minor, c.version.patch) == release
            for c in self.comparators
        )

    def __str__(self) -> str:
        return " ".join(str(c) for c in self.comparators) or "*"


@dataclass(frozen=True)
class Constraint:
    """Parsed version constraint: a union of comparator sets.

    Attributes:
        raw: The constraint string as given.
        alternatives: Comparator sets joined by "||".
    """

    raw: str
    alternatives: tuple[ComparatorSet, ...]

    def __contains__(self, version: Version) -> bool:
        return any(alt.test(version) for alt in self.alternatives)

    def __str__(self) -> str:
        return " || ".join(str(alt) for alt in self.alternatives)


@dataclass(frozen=True)
class _Partial:
    """A possibly incomplete version such as "1", "1.2" or "1.2.x"."""

    major: Optional[int]
    minor: Optional[int]
    patch: Optional[int]
    prerelease: Optional[str] = None

    @property
    def floor(self) -> Version:
        return Version(
            self.major or 0,
            self.minor or 0,
            self.patch or 0,
            prerelease=self.prerelease,
        )


def _bump(major: int, minor: int = 0, patch: int = 0) -> Version:
    """Exclusive upper bound that also shuts out that version's pre-releases."""
    return Version(major, minor, patch, prerelease="0")


_NOTHING = (Comparator("<", _bump(0)),)


def parse_version(version_str: str) -> Version:
    """Parse a version string into a Version object.

    Args:
        version_str: Version string (e.g., "1.0.0", "2.1.0-beta.1").

    Returns:
        Parsed Version object.

    Raises:
        ValueError: If version string is not a valid semantic version.
    """
    if not isinstance(version_str, str):
        raise ValueError(f"Version must be a string, got {type(version_str).__name__}")
    return Version.parse(version_str.strip())


def _parse_partial(text: str, constraint: str) -> _Partial:
    match = _PARTIAL_RE.match(text)
    if not match:
        raise InvalidConstraintError(constraint, f"unexpected token '{text}'")

    parts: list[Optional[int]] = []
    wildcard_seen = False
    for name in ("major", "minor", "patch"):
        value = match.group(name)
        if value is None or value in _WILDCARDS or wildcard_seen:
            wildcard_seen = True
            parts.append(None)
        else:
            parts.append(int(value))

    prerelease = match.group("prerelease") if parts[2] is not None else None
    return _Partial(parts[0], parts[1], parts[2], prerelease)


def _desugar(operator: str, p: _Partial) -> tuple[Comparator, ...]:
    """Translate one operator/partial pair into plain comparators."""
    if operator in ("", "="):
        if p.major is None:
            return ()
        if p.minor is None:
            return (Comparator(">=", p.floor), Comparator("<", _bump(p.major + 1)))
        if p.patch is None:
            return (
                Comparator(">=", p.floor),
                Comparator("<", _bump(p.major, p.minor + 1)),
            )
        return (Comparator("=", p.floor),)

    if operator == "^":
        if p.major is None:
            return ()
        if p.minor is None:
            return (Comparator(">=", p.floor), Comparator("<", _bump(p.major + 1)))
        if p.patch is None:
            upper = _bump(p.major + 1) if p.major else _bump(0, p.minor + 1)
            return (Comparator(">=", p.floor), Comparator("<", upper))
        if p.major:
            upper = _bump(p.major + 1)
        elif p.minor:
            upper = _bump(0, p.minor + 1)
        else:
            upper = _bump(0, 0, p.patch + 1)
        return (Comparator(">=", p.floor), Comparator("<", upper))

    if operator in ("~", "~>"):
        if p.major is None:
            return ()
        if p.minor is None:
            return (Comparator(">=", p.floor), Comparator("<", _bump(p.major + 1)))
        return (
            Comparator(">=", p.floor),
            Comparator("<", _bump(p.major, p.minor + 1)),
        )

    if operator == ">":
        if p.major is None:
            return _NOTHING
        if p.minor is None:
            return (Comparator(">=", Version(p.major + 1, 0, 0)),)
        if p.patch is None:
            return (Comparator(">=", Version(p.major, p.minor + 1, 0)),)
        return (Comparator(">", p.floor),)

    if operator == ">=":
        if p.major is None:
            return ()
        return (Comparator(">=", p.floor),)

    if operator == "<":
        if p.major is None:
            return _NOTHING
        if p.patch is None:
            return (Comparator("<", _bump(p.major, p.minor or 0)),)
        return (Comparator("<", p.floor),)

    # "<="
    if p.major is None:
        return ()
    if p.minor is None:
        return (Comparator("<", _bump(p.major + 1)),)
    if p.patch is None:
        return (Comparator("<", _bump(p.major, p.minor + 1)),)
    return (Comparator("<=", p.floor),)


def _parse_range(text: str, constraint: str) -> ComparatorSet:
    text = text.strip()
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        low = _parse_partial(hyphen.group("low"), constraint)
        high = _parse_partial(hyphen.group("high"), constraint)
        return ComparatorSet(_desugar(">=", low) + _desugar("<=", high))

    comparators: list[Comparator] = []
    for token in _OPERATOR_GAP_RE.sub(r"\1", text).split():
        match = _TOKEN_RE.match(token)
        operator = match.group("op") or ""
        if not match.group("version"):
            raise InvalidConstraintError(constraint, f"operator '{operator}' without a version")
        comparators.extend(_desugar(operator, _parse_partial(match.group("version"), constraint)))
    return ComparatorSet(tuple(comparators))


def parse_constraint(constraint_str: str) -> Constraint:
    """Parse a version constraint string.

    Args:
        constraint_str: npm-style range (e.g., "^1.2.0", ">=1.0.0 <2.0.0 || 3.x").

    Returns:
        Constraint usable with ``version in constraint``.

    Raises:
        InvalidConstraintError: If the constraint is malformed.
    """
    if not isinstance(constraint_str, str):
        raise InvalidConstraintError(str(constraint_str), "constraint must be a string")

    alternatives = tuple(
        _parse_range(part, constraint_str) for part in constraint_str.split("||")
    )
    return Constraint(raw=constraint_str, alternatives=alternatives)


def find_best_match(
    versions: Iterable[Version],
    constraint: Constraint,
) -> Optional[Version]:
    """Find the best (newest) matching version.

    Args:
        versions: Available versions.
        constraint: Constraint to match against.

    Returns:
        Best matching version or None if no match.
    """
    matching = [v for v in versions if v in constraint]
    if not matching:
        return None
    return max(matching)


def resolve_version(
    constraint_str: str,
    available_versions: Iterable[str],
    package_name: str = "",
) -> str:
    """Pick the highest available version satisfying a constraint.

    Version strings that are not valid semantic versions are skipped.

    Args:
        constraint_str: Constraint as requested by the dependent.
        available_versions: Version strings published in the registry.
        package_name: Package name, used in error messages.

    Returns:
        The chosen version, exactly as the registry spelled it.

    Raises:
        InvalidConstraintError: If the constraint is malformed.
        NoCompatibleVersionError: If no available version satisfies it.
    """
    constraint = parse_constraint(constraint_str)

    parsed: dict[Version, str] = {}
    for raw in available_versions:
        try:
            parsed[parse_version(raw)] = raw
        except (TypeError, ValueError):
            continue

    best = find_best_match(parsed, constraint)
    if best is None:
        raise NoCompatibleVersionError(package_name, constraint_str)
    return parsed[best]
