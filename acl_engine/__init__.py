"""
ACL decision engine package.

Decides whether a role may exercise a privilege on a resource, combining a
role hierarchy with multiple inheritance, a single-inheritance resource tree
and a rule table of allow/deny entries with optional runtime assertions.

Modules of interest:
- models: Identity capabilities, the WILDCARD sentinel, Rule and Decision.
- roles / resources: The two inheritance structures.
- rules: The rule table and its removal cascades.
- engine: The specificity-ordered resolution walk.
- acl: The Acl façade embedders talk to.

The engine is in-memory and synchronous; embedders rebuild it from their own
storage and serialize concurrent access themselves.
"""

from .acl import Acl, create_acl
from .models import (
    WILDCARD, Decision, GenericResource, GenericRole, ResourceLike, RoleLike,
    Rule, RuleOperation, RuleType
)
from acl_shared.errors import AclException, DuplicateError, InvalidInputError, NotFoundError

__all__ = [
    "Acl",
    "create_acl",
    "WILDCARD",
    "Decision",
    "GenericResource",
    "GenericRole",
    "ResourceLike",
    "RoleLike",
    "Rule",
    "RuleOperation",
    "RuleType",
    "AclException",
    "DuplicateError",
    "InvalidInputError",
    "NotFoundError",
]
