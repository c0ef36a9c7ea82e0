"""
Resource registry with single inheritance.
"""

from typing import Any, Dict, List, Optional

from acl_shared.logging import get_logger
from acl_shared.errors import DuplicateError, InvalidInputError, NotFoundError
from .models import GenericResource, ResourceLike, resource_id_of


class ResourceTree:
    """Resources and their parent pointers, forming a forest."""

    def __init__(self):
        self.logger = get_logger("acl.resources")
        self._resources: Dict[str, Any] = {}
        self._parent: Dict[str, Optional[str]] = {}
        self._children: Dict[str, List[str]] = {}

    def add(self, resource: Any, parent: Any = None) -> str:
        """Register a resource, optionally under an existing parent."""
        resource_id = resource_id_of(resource)
        if resource_id in self._resources:
            raise DuplicateError(
                f"Resource id '{resource_id}' already exists in the ACL",
                details={"resource_id": resource_id}
            )

        parent_id = None
        if parent is not None:
            parent_id = resource_id_of(parent)
            if parent_id not in self._resources:
                raise NotFoundError(
                    f"Parent resource id '{parent_id}' does not exist (not found)",
                    details={"resource_id": parent_id}
                )

        self._resources[resource_id] = (
            resource if isinstance(resource, ResourceLike) else GenericResource(resource_id)
        )
        self._parent[resource_id] = parent_id
        self._children[resource_id] = []
        if parent_id is not None:
            self._children[parent_id].append(resource_id)

        self.logger.info("Resource added", resource_id=resource_id, parent=parent_id)
        return resource_id

    def get(self, resource: Any) -> Any:
        """Get the registered resource object."""
        return self._resources[self.require(resource)]

    def has(self, resource: Any) -> bool:
        try:
            return resource_id_of(resource) in self._resources
        except InvalidInputError:
            return False

    def remove(self, resource: Any) -> List[str]:
        """Remove a resource and all of its descendants; returns the removed IDs."""
        resource_id = self.require(resource)

        removed = self._subtree(resource_id)
        parent_id = self._parent[resource_id]
        if parent_id is not None:
            self._children[parent_id].remove(resource_id)

        for removed_id in removed:
            del self._resources[removed_id]
            del self._parent[removed_id]
            del self._children[removed_id]

        self.logger.info("Resource removed", resource_id=resource_id, removed=removed)
        return removed

    def remove_all(self) -> List[str]:
        """Remove every resource; returns the removed IDs."""
        removed = list(self._resources)
        self._resources.clear()
        self._parent.clear()
        self._children.clear()
        self.logger.info("All resources removed", count=len(removed))
        return removed

    def get_parent(self, resource: Any) -> Optional[Any]:
        parent_id = self._parent[self.require(resource)]
        return None if parent_id is None else self._resources[parent_id]

    def get_children(self, resource: Any) -> List[Any]:
        return [self._resources[child_id] for child_id in self._children[self.require(resource)]]

    def inherits(self, resource: Any, ancestor: Any, only_parent: bool = False) -> bool:
        """Whether `resource` sits below `ancestor` in the tree."""
        resource_id = self.require(resource)
        ancestor_id = self.require(ancestor)

        if only_parent:
            return self._parent[resource_id] == ancestor_id

        return ancestor_id in self.chain(resource_id)[1:]

    def chain(self, resource: Any) -> List[str]:
        """The resource followed by its parent, grandparent and so on up to the root."""
        resource_id = self.require(resource)
        chain = []
        while resource_id is not None:
            chain.append(resource_id)
            resource_id = self._parent[resource_id]
        return chain

    def ids(self) -> List[str]:
        """Resource IDs in registration order."""
        return list(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def _subtree(self, resource_id: str) -> List[str]:
        # Reversed preorder: descendants first, the root of the subtree last
        order: List[str] = []
        stack = [resource_id]
        while stack:
            current = stack.pop()
            order.append(current)
            stack.extend(self._children[current])
        order.reverse()
        return order

    def require(self, resource: Any) -> str:
        resource_id = resource_id_of(resource)
        if resource_id not in self._resources:
            raise NotFoundError(
                f"Resource '{resource_id}' not found",
                details={"resource_id": resource_id}
            )
        return resource_id
