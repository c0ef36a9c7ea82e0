"""
Rule table for the ACL decision engine.

Rules are indexed resource-slot -> role-slot -> privilege-slot. Every slot is
either a concrete ID or WILDCARD; the privilege dimension is split into the
ALL-PRIVILEGES bucket and a mapping of named privileges.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from acl_shared.logging import get_logger
from .models import WILDCARD, Assertion, Rule, RuleOperation, RuleType


@dataclass
class RuleSet:
    """Rules held for one (resource-slot, role-slot) pair."""
    all_privileges: Optional[Rule] = None
    by_privilege: Dict[str, Rule] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.all_privileges is not None or bool(self.by_privilege)

    def get(self, privilege: Optional[str]) -> Optional[Rule]:
        if privilege is None:
            return self.all_privileges
        return self.by_privilege.get(privilege)

    def put(self, privilege: Optional[str], rule: Rule) -> bool:
        """Store `rule` at `privilege`; returns whether the coordinate was empty."""
        created = self.get(privilege) is None
        if privilege is None:
            self.all_privileges = rule
        else:
            self.by_privilege[privilege] = rule
        return created

    def discard(self, privilege: Optional[str], rule_type: RuleType) -> bool:
        """Drop the rule at `privilege` if it is of `rule_type`."""
        rule = self.get(privilege)
        if rule is None or rule.type != rule_type:
            return False
        if privilege is None:
            self.all_privileges = None
        else:
            del self.by_privilege[privilege]
        return True


class RuleTable:
    """Allow/deny rules keyed by (resource-slot, role-slot, privilege-slot)."""

    def __init__(self):
        self.logger = get_logger("acl.rules")
        self._rules: Dict[Any, Dict[Any, RuleSet]] = {}
        self._size = 0

    def set_rule(
        self,
        operation: RuleOperation,
        rule_type: RuleType,
        roles: Optional[Sequence[str]] = None,
        resources: Optional[Sequence[str]] = None,
        privileges: Optional[Sequence[str]] = None,
        assertion: Optional[Assertion] = None,
    ) -> int:
        """
        Add or remove rules over the cross product of the given dimensions.

        None in a dimension means WILDCARD. Removing with ``resources=None``
        clears the matching rules at every resource slot held in the table as
        well as the WILDCARD slot; removing with ``roles=None`` only touches
        the WILDCARD role slot.

        Returns the number of coordinates written or removed.
        """
        role_slots: List[Any] = [WILDCARD] if roles is None else list(roles)
        privilege_slots: List[Optional[str]] = [None] if privileges is None else list(privileges)

        if operation == RuleOperation.ADD:
            resource_slots: List[Any] = [WILDCARD] if resources is None else list(resources)
            count = 0
            for resource_slot in resource_slots:
                for role_slot in role_slots:
                    rule_set = self._rules.setdefault(resource_slot, {}).setdefault(role_slot, RuleSet())
                    for privilege in privilege_slots:
                        if rule_set.put(privilege, Rule(type=rule_type, assertion=assertion)):
                            self._size += 1
                        count += 1
        else:
            if resources is None:
                resource_slots = list(self._rules)
                if WILDCARD not in self._rules:
                    resource_slots.append(WILDCARD)
            else:
                resource_slots = list(resources)
            count = 0
            for resource_slot in resource_slots:
                for role_slot in role_slots:
                    for privilege in privilege_slots:
                        if self._discard(resource_slot, role_slot, privilege, rule_type):
                            count += 1

            if resources is None:
                self.logger.debug(
                    "Removal cascaded across resources",
                    rule_type=rule_type.value,
                    resource_slots=len(resource_slots),
                    removed=count
                )

        return count

    def get_rule(self, role_slot: Any, resource_slot: Any, privilege: Optional[str] = None) -> Optional[Rule]:
        """Exact-coordinate lookup; `privilege=None` reads the ALL-PRIVILEGES bucket."""
        rule_set = self._rules.get(resource_slot, {}).get(role_slot)
        if rule_set is None:
            return None
        return rule_set.get(privilege)

    def remove_role(self, role_id: str) -> int:
        """Drop every rule whose role slot is `role_id`."""
        removed = 0
        for resource_slot in list(self._rules):
            rule_set = self._rules[resource_slot].pop(role_id, None)
            if rule_set is not None:
                removed += self._count(rule_set)
                self._prune(resource_slot)
        self._size -= removed
        return removed

    def remove_all_roles(self) -> int:
        """Drop every rule with a concrete role slot."""
        removed = 0
        for resource_slot in list(self._rules):
            by_role = self._rules[resource_slot]
            for role_slot in [slot for slot in by_role if slot is not WILDCARD]:
                removed += self._count(by_role.pop(role_slot))
            self._prune(resource_slot)
        self._size -= removed
        return removed

    def remove_resources(self, resource_ids: Sequence[str]) -> int:
        """Drop every rule whose resource slot is one of `resource_ids`."""
        removed = 0
        for resource_id in resource_ids:
            by_role = self._rules.pop(resource_id, None)
            if by_role is not None:
                removed += sum(self._count(rule_set) for rule_set in by_role.values())
        self._size -= removed
        return removed

    def remove_all_resources(self) -> int:
        """Drop every rule with a concrete resource slot."""
        return self.remove_resources([slot for slot in self._rules if slot is not WILDCARD])

    def entries(self) -> Iterator[Tuple[Any, Any, Optional[str], Rule]]:
        """Iterate (resource_slot, role_slot, privilege, rule); privilege None is ALL-PRIVILEGES."""
        for resource_slot, by_role in self._rules.items():
            for role_slot, rule_set in by_role.items():
                if rule_set.all_privileges is not None:
                    yield resource_slot, role_slot, None, rule_set.all_privileges
                for privilege, rule in rule_set.by_privilege.items():
                    yield resource_slot, role_slot, privilege, rule

    def stats(self) -> Dict[str, int]:
        """Get rule table statistics."""
        rules = [rule for _, _, _, rule in self.entries()]
        return {
            "total_rules": len(rules),
            "allow_rules": len([r for r in rules if r.type == RuleType.ALLOW]),
            "deny_rules": len([r for r in rules if r.type == RuleType.DENY]),
            "conditional_rules": len([r for r in rules if r.conditional]),
        }

    def __len__(self) -> int:
        return self._size

    def _discard(self, resource_slot: Any, role_slot: Any, privilege: Optional[str], rule_type: RuleType) -> bool:
        rule_set = self._rules.get(resource_slot, {}).get(role_slot)
        if rule_set is None or not rule_set.discard(privilege, rule_type):
            return False
        self._size -= 1
        if not rule_set:
            del self._rules[resource_slot][role_slot]
            self._prune(resource_slot)
        return True

    def _prune(self, resource_slot: Any):
        if not self._rules.get(resource_slot, True):
            del self._rules[resource_slot]

    @staticmethod
    def _count(rule_set: RuleSet) -> int:
        return len(rule_set.by_privilege) + (rule_set.all_privileges is not None)
