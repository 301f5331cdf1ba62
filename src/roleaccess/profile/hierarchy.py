"""Role containment expansion.

A role may contain other roles (``sys_user_role_contains``); a user holding
the parent holds every contained role transitively.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from ..store import RecordStore
from .constants import Tables

logger = logging.getLogger(__name__)


class HierarchyWalker:
    """Depth-first expansion of the role containment graph.

    Uses an explicit stack of child iterators so deep hierarchies do not
    hit the recursion limit. Each role's children are fetched from the
    store at most once per ``visited`` set.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def children_of(self, role_id: str) -> list[str]:
        """Ids of roles directly contained by ``role_id``, in store order."""
        rows = self.store.query(Tables.ROLE_CONTAINS, {"role": role_id})
        return [child for child in (row.get_field("contains") for row in rows) if child]

    def expand(self, root_id: str, visited: Optional[set[str]] = None) -> list[str]:
        """Return every role id reachable from ``root_id``, excluding the root.

        Args:
            root_id: Role to expand.
            visited: Ids already expanded. Shared and updated in place; an id
                already present is never queried again.

        Returns:
            Deduplicated ids in first-discovery (pre-order) order.

        Example::

            # A contains B, B contains A
            walker.expand("A")  # ["B"]
        """
        if visited is None:
            visited = set()
        if root_id in visited:
            return []
        visited.add(root_id)

        discovered: list[str] = []
        seen = {root_id}
        stack: list[Iterator[str]] = [iter(self.children_of(root_id))]

        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue
            if child not in seen:
                seen.add(child)
                discovered.append(child)
            if child not in visited:
                visited.add(child)
                stack.append(iter(self.children_of(child)))

        logger.debug("Role %s contains %d roles transitively", root_id, len(discovered))
        return discovered


__all__ = ["HierarchyWalker"]
