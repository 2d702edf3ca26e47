"""Project a menu tree back to an ordered flat sequence."""

from collections.abc import Callable
from typing import Any

from menugate.domain.entities.menu_node import MenuNode
from menugate.domain.services.tree_builder import MenuTree


def flatten(tree: MenuTree, root_id: int | None = None) -> list[MenuNode]:
    """Return the nodes of ``tree`` in depth-first pre-order.

    Siblings keep their ``(order, id)`` order. The tree is only read, so
    repeated calls return equal lists.

    Args:
        tree: Tree to flatten.
        root_id: Flatten only the subtree rooted here.
    """
    if root_id is None:
        return [node for _, node in tree.iter_preorder()]
    return [tree.get(node_id) for node_id in tree.subtree_ids(root_id)]


def flatten_with(
    tree: MenuTree, decorate: Callable[[MenuNode], dict[str, Any]]
) -> list[dict[str, Any]]:
    """Flatten to dicts, attaching per-node context such as resolved permissions.

    Each item carries its ``depth`` in the tree.
    """
    items = []
    for depth, node in tree.iter_preorder():
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
            "depth": depth,
        }
        item.update(decorate(node))
        items.append(item)
    return items
