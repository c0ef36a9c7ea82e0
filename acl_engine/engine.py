"""
Resolution engine for the ACL decision engine.
"""

import time
from typing import Any, List, Optional
from dataclasses import dataclass

from acl_shared.logging import get_logger
from .models import WILDCARD, Decision, RuleType
from .roles import RoleGraph
from .resources import ResourceTree
from .rules import RuleTable


@dataclass
class Query:
    """A validated decision request."""
    role: Any = None
    role_id: Optional[str] = None
    resource: Any = None
    resource_id: Optional[str] = None
    privilege: Optional[str] = None


class ResolutionEngine:
    """Specificity-ordered search over the resource tree and the role DAG."""

    def __init__(self, roles: RoleGraph, resources: ResourceTree, rules: RuleTable, log_decisions: bool = False):
        self.logger = get_logger("acl.engine")
        self.roles = roles
        self.resources = resources
        self.rules = rules
        self.log_decisions = log_decisions

    def is_allowed(self, query: Query) -> bool:
        return self.evaluate(query).allowed

    def evaluate(self, query: Query) -> Decision:
        """
        Walk resource slots (most specific first, WILDCARD last) and, inside
        each, role slots (DFS ancestor order, WILDCARD last). At every role
        slot the named-privilege rule is tried before the ALL-PRIVILEGES rule.
        The first rule whose assertion passes decides; rules whose assertion
        fails are skipped. An exhausted search denies.
        """
        start_time = time.time()

        role_chain = self._role_chain(query)
        for resource_slot in self._resource_chain(query):
            for role_slot in role_chain:
                decision = self._visit(query, role_slot, resource_slot)
                if decision is not None:
                    decision.evaluation_time_ms = (time.time() - start_time) * 1000
                    self._log(query, decision)
                    return decision

        decision = Decision(
            allowed=False,
            reason="No applicable rules matched",
            evaluation_time_ms=(time.time() - start_time) * 1000
        )
        self._log(query, decision)
        return decision

    def _visit(self, query: Query, role_slot: Any, resource_slot: Any) -> Optional[Decision]:
        privilege_slots: List[Optional[str]] = [None]
        if query.privilege is not None:
            privilege_slots.insert(0, query.privilege)

        for privilege in privilege_slots:
            rule = self.rules.get_rule(role_slot, resource_slot, privilege)
            if rule is None:
                continue
            if not rule.passes(query.role, query.resource, query.privilege):
                continue
            return Decision(
                allowed=(rule.type == RuleType.ALLOW),
                reason=f"{rule.type.value} rule matched",
                rule_type=rule.type,
                role_slot=role_slot,
                resource_slot=resource_slot,
                privilege=privilege
            )

        return None

    def _role_chain(self, query: Query) -> List[Any]:
        if query.role_id is None:
            return [WILDCARD]
        return self.roles.ancestors(query.role_id) + [WILDCARD]

    def _resource_chain(self, query: Query) -> List[Any]:
        if query.resource_id is None:
            return [WILDCARD]
        return self.resources.chain(query.resource_id) + [WILDCARD]

    def _log(self, query: Query, decision: Decision):
        if not self.log_decisions:
            return
        self.logger.debug(
            "Access decision",
            role_id=query.role_id,
            resource_id=query.resource_id,
            privilege=query.privilege,
            allowed=decision.allowed,
            reason=decision.reason,
            role_slot=repr(decision.role_slot) if decision.role_slot is WILDCARD else decision.role_slot,
            resource_slot=repr(decision.resource_slot) if decision.resource_slot is WILDCARD else decision.resource_slot,
            evaluation_time_ms=decision.evaluation_time_ms
        )
