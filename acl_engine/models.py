"""
Identity and rule data models for the ACL decision engine.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable
from dataclasses import dataclass
from enum import Enum

from acl_shared.errors import InvalidInputError


class _Wildcard:
    """Sentinel slot key meaning "applies to every value of this dimension"."""

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "WILDCARD"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


WILDCARD = _Wildcard()


class RuleType(str, Enum):
    """Rule types."""
    ALLOW = "allow"
    DENY = "deny"


class RuleOperation(str, Enum):
    """Rule table operations."""
    ADD = "add"
    REMOVE = "remove"


Assertion = Callable[[Any, Any, Optional[str]], bool]


@runtime_checkable
class RoleLike(Protocol):
    """Anything that can yield a stable role identifier."""

    @property
    def role_id(self) -> str:
        ...


@runtime_checkable
class ResourceLike(Protocol):
    """Anything that can yield a stable resource identifier."""

    @property
    def resource_id(self) -> str:
        ...


@dataclass(frozen=True)
class GenericRole:
    """Role carrying nothing but its identifier."""
    role_id: str

    def __str__(self) -> str:
        return self.role_id


@dataclass(frozen=True)
class GenericResource:
    """Resource carrying nothing but its identifier."""
    resource_id: str

    def __str__(self) -> str:
        return self.resource_id


@dataclass
class Rule:
    """An allow/deny directive, optionally guarded by an assertion."""
    type: RuleType
    assertion: Optional[Assertion] = None

    @property
    def conditional(self) -> bool:
        return self.assertion is not None

    def passes(self, role: Any, resource: Any, privilege: Optional[str]) -> bool:
        """Whether the rule applies to this query; a failing assertion makes it transparent."""
        if self.assertion is None:
            return True
        return bool(self.assertion(role, resource, privilege))


@dataclass
class Decision:
    """Result of a resolution walk."""
    allowed: bool
    reason: str
    rule_type: Optional[RuleType] = None
    role_slot: Any = None
    resource_slot: Any = None
    privilege: Optional[str] = None
    evaluation_time_ms: float = 0.0

    @property
    def matched(self) -> bool:
        return self.rule_type is not None


def _valid_id(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def role_id_of(role: Any) -> str:
    """Normalize a role (bare ID or identifiable object) to its ID."""
    if isinstance(role, str):
        if role:
            return role
    elif isinstance(role, RoleLike) and _valid_id(role.role_id):
        return role.role_id

    raise InvalidInputError(
        "Expected a role ID or an object exposing role_id",
        details={"value": repr(role)}
    )


def resource_id_of(resource: Any) -> str:
    """Normalize a resource (bare ID or identifiable object) to its ID."""
    if isinstance(resource, str):
        if resource:
            return resource
    elif isinstance(resource, ResourceLike) and _valid_id(resource.resource_id):
        return resource.resource_id

    raise InvalidInputError(
        "Expected a resource ID or an object exposing resource_id",
        details={"value": repr(resource)}
    )


def validate_privilege(privilege: Any) -> str:
    """Check that a privilege is a non-empty name."""
    if not _valid_id(privilege):
        raise InvalidInputError(
            "Expected a privilege name",
            details={"value": repr(privilege)}
        )
    return privilege


def validate_assertion(assertion: Any) -> Optional[Assertion]:
    """Check that an assertion, when given, is callable."""
    if assertion is not None and not callable(assertion):
        raise InvalidInputError(
            "Expected a callable assertion",
            details={"value": repr(assertion)}
        )
    return assertion
