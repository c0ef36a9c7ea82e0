"""
Public registry façade for the ACL decision engine.
"""

import time
from typing import Any, Dict, List, Optional

from acl_shared.config import AclSettings, get_settings
from acl_shared.errors import InvalidInputError
from acl_shared.logging import configure_logging, get_logger
from acl_shared.metrics import AclMetrics
from .engine import Query, ResolutionEngine
from .models import (
    Assertion, Decision, ResourceLike, RoleLike, RuleOperation, RuleType,
    validate_assertion, validate_privilege
)
from .resources import ResourceTree
from .roles import RoleGraph
from .rules import RuleTable


class Acl:
    """
    Access control list: roles, resources and the rules between them.

    Mutations validate every argument before touching any structure, so a
    failed call leaves the ACL unchanged. The ACL does no locking; embedders
    sharing one instance across threads must serialize mutations against
    each other and against queries.
    """

    def __init__(self, settings: Optional[AclSettings] = None, metrics: Optional[AclMetrics] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger("acl")
        self.roles = RoleGraph()
        self.resources = ResourceTree()
        self.rules = RuleTable()
        self.engine = ResolutionEngine(
            self.roles, self.resources, self.rules,
            log_decisions=self.settings.log_decisions
        )
        self.metrics = metrics
        if self.metrics is None and self.settings.metrics_enabled:
            self.metrics = AclMetrics()

    # Roles

    def add_role(self, role: Any, parents: Any = None) -> "Acl":
        """Register a role, optionally inheriting from one or more existing roles."""
        self.roles.add(role, parents)
        self._record_mutation("add_role")
        return self

    def get_role(self, role: Any) -> Any:
        return self.roles.get(role)

    def has_role(self, role: Any) -> bool:
        return self.roles.has(role)

    def get_role_parents(self, role: Any) -> List[Any]:
        return self.roles.get_parents(role)

    def inherits_role(self, role: Any, inherit: Any, only_parents: bool = False) -> bool:
        return self.roles.inherits(role, inherit, only_parents)

    def remove_role(self, role: Any) -> "Acl":
        """Unregister a role and drop every rule naming it."""
        role_id = self.roles.remove(role)
        removed = self.rules.remove_role(role_id)
        self.logger.info("Role rules removed", role_id=role_id, rules_removed=removed)
        self._record_mutation("remove_role")
        return self

    def remove_all_roles(self) -> "Acl":
        self.roles.remove_all()
        removed = self.rules.remove_all_roles()
        self.logger.info("All role rules removed", rules_removed=removed)
        self._record_mutation("remove_all_roles")
        return self

    def get_roles(self) -> List[str]:
        return self.roles.ids()

    # Resources

    def add_resource(self, resource: Any, parent: Any = None) -> "Acl":
        """Register a resource, optionally under an existing parent resource."""
        self.resources.add(resource, parent)
        self._record_mutation("add_resource")
        return self

    def get_resource(self, resource: Any) -> Any:
        return self.resources.get(resource)

    def has_resource(self, resource: Any) -> bool:
        return self.resources.has(resource)

    def get_resource_parent(self, resource: Any) -> Optional[Any]:
        return self.resources.get_parent(resource)

    def get_resource_children(self, resource: Any) -> List[Any]:
        return self.resources.get_children(resource)

    def inherits_resource(self, resource: Any, inherit: Any, only_parent: bool = False) -> bool:
        return self.resources.inherits(resource, inherit, only_parent)

    def remove_resource(self, resource: Any) -> "Acl":
        """Unregister a resource and its descendants, dropping every rule naming any of them."""
        removed_ids = self.resources.remove(resource)
        removed = self.rules.remove_resources(removed_ids)
        self.logger.info("Resource rules removed", resources=removed_ids, rules_removed=removed)
        self._record_mutation("remove_resource")
        return self

    def remove_all_resources(self) -> "Acl":
        removed_ids = self.resources.remove_all()
        removed = self.rules.remove_resources(removed_ids)
        self.logger.info("All resource rules removed", rules_removed=removed)
        self._record_mutation("remove_all_resources")
        return self

    def get_resources(self) -> List[str]:
        return self.resources.ids()

    # Rules

    def allow(self, roles: Any = None, resources: Any = None, privileges: Any = None,
              assertion: Optional[Assertion] = None) -> "Acl":
        """Add ALLOW rules; an omitted dimension applies to all of its values."""
        return self.set_rule(RuleOperation.ADD, RuleType.ALLOW, roles, resources, privileges, assertion)

    def deny(self, roles: Any = None, resources: Any = None, privileges: Any = None,
             assertion: Optional[Assertion] = None) -> "Acl":
        """Add DENY rules; an omitted dimension applies to all of its values."""
        return self.set_rule(RuleOperation.ADD, RuleType.DENY, roles, resources, privileges, assertion)

    def remove_allow(self, roles: Any = None, resources: Any = None, privileges: Any = None) -> "Acl":
        """Remove ALLOW rules; omitting resources removes them at every resource."""
        return self.set_rule(RuleOperation.REMOVE, RuleType.ALLOW, roles, resources, privileges)

    def remove_deny(self, roles: Any = None, resources: Any = None, privileges: Any = None) -> "Acl":
        """Remove DENY rules; omitting resources removes them at every resource."""
        return self.set_rule(RuleOperation.REMOVE, RuleType.DENY, roles, resources, privileges)

    def set_rule(self, operation: RuleOperation, rule_type: RuleType, roles: Any = None,
                 resources: Any = None, privileges: Any = None,
                 assertion: Optional[Assertion] = None) -> "Acl":
        """Low-level rule mutation behind allow/deny/remove_allow/remove_deny."""
        operation = self._enum(RuleOperation, operation, "operation")
        rule_type = self._enum(RuleType, rule_type, "rule_type")

        role_ids = self._normalize(roles, (str, RoleLike), self.roles.require)
        resource_ids = self._normalize(resources, (str, ResourceLike), self.resources.require)
        privilege_names = self._normalize(privileges, (str,), validate_privilege)
        assertion = validate_assertion(assertion)

        count = self.rules.set_rule(
            operation, rule_type,
            roles=role_ids,
            resources=resource_ids,
            privileges=privilege_names,
            assertion=assertion
        )

        self.logger.info(
            "Rules updated",
            operation=operation.value,
            rule_type=rule_type.value,
            roles=role_ids,
            resources=resource_ids,
            privileges=privilege_names,
            conditional=assertion is not None,
            count=count
        )
        self._record_mutation(f"{operation.value}_{rule_type.value}")
        return self

    # Queries

    def is_allowed(self, role: Any = None, resource: Any = None, privilege: Optional[str] = None) -> bool:
        """Whether `role` may exercise `privilege` on `resource`; omitted arguments query the wildcard."""
        return self.explain(role, resource, privilege).allowed

    def explain(self, role: Any = None, resource: Any = None, privilege: Optional[str] = None) -> Decision:
        """Decide and report which rule, if any, produced the verdict."""
        start_time = time.time()

        query = Query(
            role=role,
            role_id=None if role is None else self.roles.require(role),
            resource=resource,
            resource_id=None if resource is None else self.resources.require(resource),
            privilege=None if privilege is None else validate_privilege(privilege)
        )
        decision = self.engine.evaluate(query)

        if self.metrics is not None:
            self.metrics.record_decision(decision.allowed, time.time() - start_time)
        return decision

    def stats(self) -> Dict[str, Any]:
        """Get ACL statistics."""
        return {
            "roles": len(self.roles),
            "resources": len(self.resources),
            **self.rules.stats()
        }

    def _record_mutation(self, operation: str):
        if self.metrics is not None:
            self.metrics.record_mutation(operation, len(self.rules))

    @staticmethod
    def _normalize(values: Any, single_types: tuple, validate) -> Optional[List[Any]]:
        """None or an empty collection means WILDCARD; otherwise validate each value."""
        if values is None:
            return None
        if isinstance(values, single_types):
            values = [values]
        else:
            try:
                values = list(values)
            except TypeError:
                raise InvalidInputError(
                    "Expected a single value or an iterable of values",
                    details={"value": repr(values)}
                )
        if not values:
            return None

        normalized: List[Any] = []
        for value in values:
            value = validate(value)
            if value not in normalized:
                normalized.append(value)
        return normalized

    @staticmethod
    def _enum(enum_cls, value: Any, name: str):
        try:
            return enum_cls(value)
        except ValueError:
            raise InvalidInputError(f"Invalid {name}", details={name: repr(value)})


def create_acl(settings: Optional[AclSettings] = None) -> Acl:
    """Create an ACL, configuring structured logging from the settings."""
    settings = settings or get_settings()
    configure_logging(settings.service_name, settings.log_level)
    return Acl(settings=settings)
