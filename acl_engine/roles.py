"""
Role registry with multiple inheritance.
"""

from typing import Any, Dict, List

from acl_shared.logging import get_logger
from acl_shared.errors import DuplicateError, InvalidInputError, NotFoundError
from .models import GenericRole, RoleLike, role_id_of


class RoleGraph:
    """Roles and their ordered parent edges, forming a DAG."""

    def __init__(self):
        self.logger = get_logger("acl.roles")
        self._roles: Dict[str, Any] = {}
        self._parents: Dict[str, List[str]] = {}
        self._children: Dict[str, List[str]] = {}

    def add(self, role: Any, parents: Any = None) -> str:
        """Register a role under zero, one or many existing parents."""
        role_id = role_id_of(role)
        if role_id in self._roles:
            raise DuplicateError(
                f"Role id '{role_id}' already exists in the registry",
                details={"role_id": role_id}
            )

        parent_ids: List[str] = []
        for parent in self._as_list(parents):
            parent_id = self.require(parent)
            if parent_id not in parent_ids:
                parent_ids.append(parent_id)

        self._roles[role_id] = role if isinstance(role, RoleLike) else GenericRole(role_id)
        self._parents[role_id] = parent_ids
        self._children[role_id] = []
        for parent_id in parent_ids:
            self._children[parent_id].append(role_id)

        self.logger.info("Role added", role_id=role_id, parents=parent_ids)
        return role_id

    def get(self, role: Any) -> Any:
        """Get the registered role object."""
        return self._roles[self.require(role)]

    def has(self, role: Any) -> bool:
        try:
            return role_id_of(role) in self._roles
        except InvalidInputError:
            return False

    def remove(self, role: Any) -> str:
        """Remove a role and every edge that names it."""
        role_id = self.require(role)

        for child_id in self._children.pop(role_id):
            self._parents[child_id].remove(role_id)
        for parent_id in self._parents.pop(role_id):
            self._children[parent_id].remove(role_id)
        del self._roles[role_id]

        self.logger.info("Role removed", role_id=role_id)
        return role_id

    def remove_all(self):
        """Remove every role."""
        self._roles.clear()
        self._parents.clear()
        self._children.clear()
        self.logger.info("All roles removed")

    def get_parents(self, role: Any) -> List[Any]:
        """Direct parents, in declared order."""
        return [self._roles[parent_id] for parent_id in self._parents[self.require(role)]]

    def inherits(self, role: Any, ancestor: Any, only_parents: bool = False) -> bool:
        """Whether `role` inherits from `ancestor`, directly or through the DAG."""
        role_id = self.require(role)
        ancestor_id = self.require(ancestor)

        if only_parents:
            return ancestor_id in self._parents[role_id]

        return ancestor_id in self.ancestors(role_id)[1:]

    def ancestors(self, role: Any) -> List[str]:
        """
        Depth-first, preorder ancestor enumeration starting at the role itself.

        Each declared parent's subtree is exhausted before the next parent is
        visited; a role reachable along several paths appears once, at its
        first encounter.
        """
        start = self.require(role)
        visited = set()
        order: List[str] = []
        stack = [start]

        while stack:
            role_id = stack.pop()
            if role_id in visited:
                continue
            visited.add(role_id)
            order.append(role_id)
            # Reversed so the first declared parent is popped first
            stack.extend(reversed(self._parents[role_id]))

        return order

    def ids(self) -> List[str]:
        """Role IDs in registration order."""
        return list(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def require(self, role: Any) -> str:
        role_id = role_id_of(role)
        if role_id not in self._roles:
            raise NotFoundError(f"Role '{role_id}' not found", details={"role_id": role_id})
        return role_id

    @staticmethod
    def _as_list(parents: Any) -> List[Any]:
        if parents is None:
            return []
        if isinstance(parents, (str, RoleLike)):
            return [parents]
        try:
            return list(parents)
        except TypeError:
            raise InvalidInputError(
                "Expected parents to be a role or an iterable of roles",
                details={"value": repr(parents)}
            )
