"""Permission resolution over a built menu tree.

``PermissionResolver.effective_permission`` is the one place that decides
what an identity holds on a node. Everything else in this module (the
visible tree, the delegatable set, direct access checks, grant checks) is
derived from it.

Resolution order, first match wins:
    1. root level: every capability on every node
    2. node outside the identity's company scope: nothing
    3. user-level row for (node, user): used verbatim
    4. role-level row for (node, role): used verbatim
    5. open node: read only
    6. nothing
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from menugate.core.logging import get_logger
from menugate.domain.entities.identity import Identity
from menugate.domain.entities.menu_node import MenuNode
from menugate.domain.entities.permission import (
    Capabilities,
    Capability,
    RolePermission,
    UserPermission,
)
from menugate.domain.entities.role import RoleLevel
from menugate.domain.exceptions import (
    DelegationDeniedError,
    NotFoundError,
    ScopeViolationError,
)
from menugate.domain.services.tree_builder import MenuTree

logger = get_logger(__name__)


@dataclass
class PermissionSnapshot:
    """Permission rows read at the start of a request, indexed by key."""

    role_rows: dict[tuple[int, RoleLevel], Capabilities] = field(default_factory=dict)
    user_rows: dict[tuple[int, str], Capabilities] = field(default_factory=dict)

    @classmethod
    def from_rows(
        cls,
        role_permissions: Iterable[RolePermission] = (),
        user_permissions: Iterable[UserPermission] = (),
    ) -> "PermissionSnapshot":
        return cls(
            role_rows={(p.menu_id, p.role): p.capabilities for p in role_permissions},
            user_rows={(p.menu_id, p.user_id): p.capabilities for p in user_permissions},
        )


@dataclass
class ResolvedMenu:
    """Everything one identity gets out of a resolution pass.

    Attributes:
        tree: Visible tree (readable nodes plus their navigational ancestors).
        permissions: Effective capabilities for every node of ``tree``.
        delegatable: ``(node_id, capability)`` pairs the identity may grant.
    """

    tree: MenuTree
    permissions: dict[int, Capabilities]
    delegatable: list[tuple[int, Capability]]

    @classmethod
    def empty(cls) -> "ResolvedMenu":
        return cls(tree=MenuTree({}, {}), permissions={}, delegatable=[])


class PermissionResolver:
    """Resolves capabilities for identities against one tree snapshot."""

    def __init__(self, tree: MenuTree, snapshot: PermissionSnapshot) -> None:
        self.tree = tree
        self.snapshot = snapshot

    def effective_permission(self, node: MenuNode, identity: Identity) -> Capabilities:
        """Return the capabilities ``identity`` holds on ``node``."""
        if identity.is_root:
            return Capabilities.full()

        if not identity.in_scope(node.company_id):
            return Capabilities.none()

        user_row = self.snapshot.user_rows.get((node.id, identity.user_id))
        if user_row is not None:
            return user_row

        if identity.role is not RoleLevel.NONE:
            role_row = self.snapshot.role_rows.get((node.id, identity.role))
            if role_row is not None:
                return role_row

        if node.is_open:
            return Capabilities.read_only()

        return Capabilities.none()

    def _require_node(self, identity: Identity, node_id: int) -> MenuNode:
        node = self.tree.get(node_id)
        if node is None:
            raise NotFoundError(f"Menu {node_id} not found")
        if not identity.in_scope(node.company_id):
            logger.info(
                "Cross-company menu access rejected",
                user_id=identity.user_id,
                menu_id=node_id,
                menu_company_id=node.company_id,
                user_company_id=identity.company_id,
            )
            raise ScopeViolationError(f"Menu {node_id} belongs to another company")
        return node

    def check(self, identity: Identity, node_id: int) -> Capabilities:
        """Direct access check for one node.

        Raises:
            NotFoundError: If the node is not in the tree.
            ScopeViolationError: If the node belongs to a company outside the identity's scope.
        """
        node = self._require_node(identity, node_id)
        return self.effective_permission(node, identity)

    def has_capability(self, identity: Identity, node_id: int, capability: Capability) -> bool:
        return self.check(identity, node_id).has(capability)

    def _readable(self, node: MenuNode, identity: Identity) -> bool:
        return identity.in_scope(node.company_id) and self.effective_permission(node, identity).read

    def is_visible(self, identity: Identity, node_id: int) -> bool:
        """Decide node-by-node whether ``node_id`` belongs in the visible tree.

        A node is visible when it and all its ancestors are in scope and it
        is readable itself or has a readable descendant reachable through
        in-scope nodes.
        """
        node = self.tree.get(node_id)
        if node is None:
            return False
        for ancestor_id in [node_id] + self.tree.ancestor_ids(node_id):
            if not identity.in_scope(self.tree.get(ancestor_id).company_id):
                return False
        if self._readable(node, identity):
            return True

        stack = self.tree.children_of(node_id)
        while stack:
            current = stack.pop()
            if not identity.in_scope(current.company_id):
                continue
            if self._readable(current, identity):
                return True
            stack.extend(self.tree.children_of(current.id))
        return False

    def visible_tree(self, identity: Identity) -> MenuTree:
        """Prune the tree to what ``identity`` may navigate to or through."""
        keep: set[int] = set()
        # reversed pre-order visits children before their parent
        for _, node in reversed(list(self.tree.iter_preorder())):
            if not identity.in_scope(node.company_id):
                continue
            if self._readable(node, identity) or any(
                child_id in keep for child_id in self.tree.child_ids(node.id)
            ):
                keep.add(node.id)
        return self.tree.restrict(keep)

    def delegatable(self, identity: Identity) -> list[tuple[int, Capability]]:
        """``(node_id, capability)`` pairs ``identity`` may grant to others."""
        if not identity.role.can_delegate:
            return []
        pairs = []
        for _, node in self.tree.iter_preorder():
            if not identity.in_scope(node.company_id):
                continue
            for capability in self.effective_permission(node, identity).granted():
                pairs.append((node.id, capability))
        return pairs

    def resolve(self, identity: Identity) -> ResolvedMenu:
        """Compute the visible tree, its permissions and the delegatable set."""
        if self.tree.is_empty:
            logger.warning("Resolving against an empty menu tree", user_id=identity.user_id)
            return ResolvedMenu.empty()

        visible = self.visible_tree(identity)
        permissions = {
            node.id: self.effective_permission(node, identity) for node in visible.nodes()
        }
        delegatable = self.delegatable(identity)
        logger.debug(
            "Menu resolved",
            user_id=identity.user_id,
            role=identity.role.value,
            visible_count=len(visible),
            delegatable_count=len(delegatable),
        )
        return ResolvedMenu(tree=visible, permissions=permissions, delegatable=delegatable)

    def ensure_can_grant(
        self, actor: Identity, node_id: int, capabilities: Capabilities
    ) -> None:
        """Reject a grant unless ``actor`` holds every capability it sets.

        Capabilities left false narrow the target's access and need no
        backing.

        Raises:
            NotFoundError: If the node does not exist.
            ScopeViolationError: If the node is outside the actor's scope.
            DelegationDeniedError: If the actor may not delegate or lacks a capability.
        """
        node = self._require_node(actor, node_id)
        if not actor.role.can_delegate:
            logger.info(
                "Delegation denied: role may not delegate",
                actor_id=actor.user_id,
                role=actor.role.value,
                menu_id=node_id,
            )
            raise DelegationDeniedError(
                f"Role '{actor.role.value}' may not grant permissions"
            )

        missing = capabilities.missing_from(self.effective_permission(node, actor))
        if missing:
            names = ", ".join(capability.value for capability in missing)
            logger.info(
                "Delegation denied: capability not held",
                actor_id=actor.user_id,
                menu_id=node_id,
                missing=names,
            )
            raise DelegationDeniedError(
                f"Cannot grant {names} on menu {node_id}: you do not hold it yourself"
            )

    def ensure_can_revoke(self, actor: Identity, node_id: int) -> None:
        """Reject a revoke outside the actor's scope or below delegation level."""
        self._require_node(actor, node_id)
        if not actor.role.can_delegate:
            raise DelegationDeniedError(
                f"Role '{actor.role.value}' may not revoke permissions"
            )
