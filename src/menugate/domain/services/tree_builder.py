"""Build an ordered menu forest from flat menu records.

Nodes are kept arena-style: one table of nodes indexed by id, plus an ordered
list of child ids per parent. Removal and cycle checks are then lookups in
those tables instead of walks over nested objects.

Building is fail-soft. A node whose parent is missing is promoted to a root,
and nodes caught in a parent cycle (plus everything hanging below them) are
left out. Both are recorded on ``MenuTree.report`` and logged.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from menugate.core.logging import get_logger
from menugate.domain.entities.menu_node import MenuNode
from menugate.domain.exceptions import ValidationError

logger = get_logger(__name__)


@dataclass
class BuildReport:
    """Structural anomalies found while building a tree.

    Attributes:
        orphan_ids: Nodes whose parent was absent; promoted to roots.
        cyclic_ids: Nodes that are their own ancestor; excluded.
        detached_ids: Descendants of cyclic nodes; excluded with them.
    """

    orphan_ids: list[int] = field(default_factory=list)
    cyclic_ids: list[int] = field(default_factory=list)
    detached_ids: list[int] = field(default_factory=list)

    @property
    def has_anomalies(self) -> bool:
        return bool(self.orphan_ids or self.cyclic_ids or self.detached_ids)

    @property
    def excluded_ids(self) -> list[int]:
        return sorted(self.cyclic_ids + self.detached_ids)


class MenuTree:
    """Ordered forest of menu nodes.

    ``children[None]`` holds the root ids. Every child list is sorted by
    ``(order, id)``.
    """

    def __init__(
        self,
        nodes: dict[int, MenuNode],
        children: dict[int | None, list[int]],
        report: BuildReport | None = None,
    ) -> None:
        self._nodes = nodes
        self._children = children
        self._parents: dict[int, int | None] = {}
        for parent_id, child_ids in children.items():
            for child_id in child_ids:
                self._parents[child_id] = parent_id
        self.report = report or BuildReport()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MenuTree):
            return NotImplemented
        return self._nodes == other._nodes and self._child_lists() == other._child_lists()

    def __repr__(self) -> str:
        return f"<MenuTree(nodes={len(self._nodes)}, roots={len(self.root_ids)})>"

    def _child_lists(self) -> dict[int | None, list[int]]:
        return {parent: ids for parent, ids in self._children.items() if ids}

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    @property
    def root_ids(self) -> list[int]:
        return list(self._children.get(None, []))

    @property
    def roots(self) -> list[MenuNode]:
        return [self._nodes[node_id] for node_id in self._children.get(None, [])]

    def get(self, node_id: int) -> MenuNode | None:
        return self._nodes.get(node_id)

    def nodes(self) -> list[MenuNode]:
        """All nodes, in no particular order."""
        return list(self._nodes.values())

    def child_ids(self, node_id: int | None) -> list[int]:
        return list(self._children.get(node_id, []))

    def children_of(self, node_id: int | None) -> list[MenuNode]:
        return [self._nodes[child_id] for child_id in self._children.get(node_id, [])]

    def parent_id_of(self, node_id: int) -> int | None:
        """Parent as linked in this tree (None for roots and promoted orphans)."""
        return self._parents.get(node_id)

    def ancestor_ids(self, node_id: int) -> list[int]:
        """Ancestors from the direct parent up to the root."""
        ancestors = []
        current = self._parents.get(node_id)
        while current is not None:
            ancestors.append(current)
            current = self._parents.get(current)
        return ancestors

    def descendant_ids(self, node_id: int) -> list[int]:
        """All descendants of ``node_id`` in pre-order, excluding the node."""
        result: list[int] = []
        stack = list(reversed(self._children.get(node_id, [])))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self._children.get(current, [])))
        return result

    def subtree_ids(self, node_id: int) -> list[int]:
        """``node_id`` followed by all its descendants in pre-order."""
        if node_id not in self._nodes:
            return []
        return [node_id] + self.descendant_ids(node_id)

    def would_create_cycle(self, node_id: int, new_parent_id: int | None) -> bool:
        """Return True if re-parenting ``node_id`` under ``new_parent_id`` makes a loop."""
        if new_parent_id is None:
            return False
        if new_parent_id == node_id:
            return True
        return node_id in self.ancestor_ids(new_parent_id)

    def restrict(self, keep_ids: set[int]) -> "MenuTree":
        """Return a new tree holding only ``keep_ids``.

        A node whose ancestor is dropped is dropped with it, so the result is
        always a proper subtree of this one.
        """
        nodes: dict[int, MenuNode] = {}
        children: dict[int | None, list[int]] = {}
        stack: list[tuple[int | None, int]] = [
            (None, root_id) for root_id in reversed(self._children.get(None, []))
        ]
        while stack:
            parent_id, node_id = stack.pop()
            if node_id not in keep_ids:
                continue
            nodes[node_id] = self._nodes[node_id]
            children.setdefault(parent_id, []).append(node_id)
            stack.extend((node_id, child_id) for child_id in reversed(self._children.get(node_id, [])))
        return MenuTree(nodes, children)

    def iter_preorder(self) -> Iterator[tuple[int, MenuNode]]:
        """Yield ``(depth, node)`` pairs depth-first, siblings in order."""
        stack: list[tuple[int, int]] = [(0, root_id) for root_id in reversed(self._children.get(None, []))]
        while stack:
            depth, node_id = stack.pop()
            yield depth, self._nodes[node_id]
            stack.extend((depth + 1, child_id) for child_id in reversed(self._children.get(node_id, [])))

    def to_forest(
        self, decorate: Callable[[MenuNode], dict[str, Any]] | None = None
    ) -> list[dict[str, Any]]:
        """Render the nested structure as plain dicts.

        Args:
            decorate: Optional callback returning extra keys for each node.
        """
        forest: list[dict[str, Any]] = []
        stack: list[tuple[int, list[dict[str, Any]]]] = [
            (root_id, forest) for root_id in reversed(self._children.get(None, []))
        ]
        while stack:
            node_id, siblings = stack.pop()
            node = self._nodes[node_id]
            item: dict[str, Any] = {
                "id": node.id,
                "name": node.name,
                "name_localized": node.name_localized,
                "icon": node.icon,
                "url": node.url,
                "order": node.order,
                "parent_id": node.parent_id,
                "company_id": node.company_id,
                "is_open": node.is_open,
            }
            if decorate is not None:
                item.update(decorate(node))
            item["children"] = []
            siblings.append(item)
            stack.extend(
                (child_id, item["children"])
                for child_id in reversed(self._children.get(node_id, []))
            )
        return forest


def build_tree(records: Iterable[MenuNode]) -> MenuTree:
    """Build an ordered forest from flat menu records.

    Args:
        records: Menu nodes for one scope, in any order.

    Returns:
        The built tree; anomalies are listed on ``tree.report``.

    Raises:
        ValidationError: If two records share an id.
    """
    index: dict[int, MenuNode] = {}
    for node in records:
        if node.id in index:
            raise ValidationError(f"Duplicate menu ID {node.id}")
        index[node.id] = node

    report = BuildReport()
    children: dict[int | None, list[int]] = {None: []}
    for node in index.values():
        parent_id = node.parent_id
        if parent_id is not None and parent_id not in index:
            logger.warning(
                "Orphaned menu node promoted to root",
                menu_id=node.id,
                missing_parent_id=parent_id,
            )
            report.orphan_ids.append(node.id)
            parent_id = None
        children.setdefault(parent_id, []).append(node.id)

    for child_ids in children.values():
        child_ids.sort(key=lambda child_id: index[child_id].sort_key)

    # Anything not reachable from a root hangs off a parent cycle
    reachable: set[int] = set()
    stack = list(children[None])
    while stack:
        current = stack.pop()
        reachable.add(current)
        stack.extend(children.get(current, []))

    unreachable = [node_id for node_id in index if node_id not in reachable]
    if unreachable:
        cyclic = _find_cycle_members(index, unreachable)
        report.cyclic_ids = sorted(cyclic)
        report.detached_ids = sorted(set(unreachable) - cyclic)
        logger.warning(
            "Menu nodes excluded from tree: parent cycle",
            cyclic_ids=report.cyclic_ids,
            detached_ids=report.detached_ids,
        )
        excluded = set(unreachable)
        for node_id in excluded:
            children.pop(node_id, None)
        for parent_id in list(children):
            children[parent_id] = [c for c in children[parent_id] if c not in excluded]
        for node_id in excluded:
            del index[node_id]

    report.orphan_ids.sort()
    return MenuTree(index, children, report)


def _find_cycle_members(index: dict[int, MenuNode], candidates: list[int]) -> set[int]:
    """Return the ids that lie on a parent cycle.

    Every candidate's parent chain stays within existing nodes and never
    reaches a root, so following it always ends in a loop.
    """
    members: set[int] = set()
    settled: set[int] = set()
    for start in candidates:
        path: list[int] = []
        position: dict[int, int] = {}
        current: int | None = start
        while current is not None and current not in settled and current not in position:
            position[current] = len(path)
            path.append(current)
            current = index[current].parent_id
        if current is not None and current in position:
            members.update(path[position[current]:])
        settled.update(path)
    return members
