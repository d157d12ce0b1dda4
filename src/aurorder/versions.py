"""pacman version comparison and version-constraint specs."""

from __future__ import annotations

import operator
import re
from typing import TYPE_CHECKING

import pyalpm
from semantic_version import SimpleSpec
from semantic_version.base import Always, BaseSpec, Range

if TYPE_CHECKING:
    from collections.abc import Callable

# Order matters: two-character operators must be tried before their prefixes.
_DEPSTRING_OPERATORS = ("<=", ">=")
_SINGLE_OPERATORS = "<>="

_CONSTRAINT = re.compile(r"^(?P<op><=|>=|<|>|=)(?P<version>.*)$")

_RANGE_OPERATORS = {
    "=": Range.OP_EQ,
    "<": Range.OP_LT,
    "<=": Range.OP_LTE,
    ">": Range.OP_GT,
    ">=": Range.OP_GTE,
}

_COMPARATORS: dict[str, Callable[[int, int], bool]] = {
    Range.OP_EQ: operator.eq,
    Range.OP_LT: operator.lt,
    Range.OP_LTE: operator.le,
    Range.OP_GT: operator.gt,
    Range.OP_GTE: operator.ge,
}


class InvalidConstraintError(ValueError):
    """Raised when a dependency string or version constraint is malformed."""


def vercmp(a: str, b: str) -> int:
    """Compare two package versions with libalpm.

    Returns:
        -1 if ``a`` is older than ``b``, 0 if they are equal and 1 if ``a`` is newer.

    """
    result = pyalpm.vercmp(a, b)
    return (result > 0) - (result < 0)


class AlpmVersion:
    """A package version as pacman understands it."""

    def __init__(self, version_string: str) -> None:
        """Initialize the version from its string representation."""
        self.version_string: str = version_string.strip()
        self.build: bool = False  # This is to appease semantic_version.base.Range

    def __lt__(self, other: object) -> bool:
        """Compare versions for sorting."""
        return vercmp(self.version_string, str(other)) < 0

    def __gt__(self, other: object) -> bool:
        """Compare versions for sorting."""
        return vercmp(self.version_string, str(other)) > 0

    def __eq__(self, other: object) -> bool:
        """Check equality with another version."""
        return isinstance(other, AlpmVersion) and self.version_string == other.version_string

    def __hash__(self) -> int:
        """Compute hash for the version."""
        return hash(self.version_string)

    def __str__(self) -> str:
        """Return the version string."""
        return self.version_string

    def __repr__(self) -> str:
        """Return the representation of the version."""
        return f"{self.__class__.__name__}({self.version_string!r})"


@BaseSpec.register_syntax
class AlpmSpec(SimpleSpec):
    """A single pacman version constraint such as ``>=1.2-1``, or no constraint at all."""

    SYNTAX = "alpm"

    class Parser(SimpleSpec.Parser):
        """Parser for pacman version constraints."""

        @classmethod
        def parse(cls, expression: str) -> Range | Always:
            """Parse a constraint expression into a clause."""
            expression = expression.strip()
            if expression in ("", "*"):
                return Always()
            m = _CONSTRAINT.match(expression)
            if m is None:
                msg = f"Invalid version constraint: {expression!r}"
                raise InvalidConstraintError(msg)
            version = m.group("version")
            if not version or version[0] in "<>=" or any(c.isspace() for c in version):
                msg = f"Invalid version constraint: {expression!r}"
                raise InvalidConstraintError(msg)
            return Range(operator=_RANGE_OPERATORS[m.group("op")], target=AlpmVersion(version))

    @property
    def is_versioned(self) -> bool:
        """Whether this spec constrains the version at all."""
        return not isinstance(self.clause, Always)

    @property
    def operator(self) -> str | None:
        """The constraint operator as written in a depstring, or None when unversioned."""
        if not self.is_versioned:
            return None
        return next(op for op, range_op in _RANGE_OPERATORS.items() if range_op == self.clause.operator)

    @property
    def version(self) -> AlpmVersion | None:
        """The version bound, or None when unversioned."""
        if not self.is_versioned:
            return None
        return self.clause.target

    def match(self, version: object) -> bool:
        """Check whether a version satisfies this constraint."""
        if not self.is_versioned:
            return True
        cmp = vercmp(str(version), self.clause.target.version_string)
        return _COMPARATORS[self.clause.operator](cmp, 0)

    def __contains__(self, item: object) -> bool:
        """Check if a version is contained in this spec."""
        return self.match(item)


ANY_VERSION = AlpmSpec("")


def split_depstring(depstring: str) -> tuple[str, str]:
    """Split a depstring such as ``foo>=1.0`` into its name and constraint expression."""
    for op in _DEPSTRING_OPERATORS:
        pos = depstring.find(op)
        if pos != -1:
            return depstring[:pos], depstring[pos:]
    positions = [pos for pos in (depstring.find(c) for c in _SINGLE_OPERATORS) if pos != -1]
    if positions:
        pos = min(positions)
        return depstring[:pos], depstring[pos:]
    return depstring, ""


def parse_depstring(depstring: str) -> tuple[str, AlpmSpec]:
    """Parse a depstring into a package name and its version constraint.

    Raises:
        InvalidConstraintError: if the name is empty or the constraint is malformed.

    """
    name, expression = split_depstring(depstring.strip())
    if not name or any(c.isspace() for c in name):
        msg = f"Invalid dependency: {depstring!r}"
        raise InvalidConstraintError(msg)
    return name, AlpmSpec(expression) if expression else ANY_VERSION
