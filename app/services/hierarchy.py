"""
Reporting hierarchy index.

Built once per employee set: employee ids are placed in a flat arena and a
children adjacency list is filled in a single pass. Traversals are iterative
and keep a visited set, so a malformed (cyclic) manager chain terminates.
"""
from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from app.schemas.records import Employee


class HierarchyIndex:
    def __init__(self, employees: Iterable[Employee]):
        self._ids: List[str] = []
        self._position: Dict[str, int] = {}
        self._manager: Dict[str, Optional[str]] = {}
        self._children: List[List[int]] = []

        for employee in employees:
            if employee.id in self._position:
                continue  # first record wins on duplicate ids
            self._position[employee.id] = len(self._ids)
            self._ids.append(employee.id)
            self._children.append([])
            self._manager[employee.id] = employee.manager_id

        for employee_id, manager_id in self._manager.items():
            parent = self._position.get(manager_id) if manager_id else None
            # Dangling manager references leave the employee parentless
            if parent is not None:
                self._children[parent].append(self._position[employee_id])

    def __len__(self) -> int:
        return len(self._ids)

    def contains(self, employee_id: str) -> bool:
        return employee_id in self._position

    @property
    def employee_ids(self) -> Set[str]:
        return set(self._ids)

    def manager_of(self, employee_id: str) -> Optional[str]:
        return self._manager.get(employee_id)

    def direct_reports(self, manager_id: Optional[str]) -> Set[str]:
        """Employees whose manager_id equals manager_id. Unknown ids yield an empty set."""
        position = self._position.get(manager_id) if manager_id else None
        if position is None:
            return set()
        return {self._ids[child] for child in self._children[position]}

    def all_descendants(self, manager_id: Optional[str]) -> Set[str]:
        """
        Transitive closure of direct reports (breadth-first).
        The manager's own id is never part of the result, even on cyclic input.
        """
        start = self._position.get(manager_id) if manager_id else None
        if start is None:
            return set()

        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for child in self._children[current]:
                if child not in visited:
                    visited.add(child)
                    queue.append(child)

        visited.discard(start)
        return {self._ids[position] for position in visited}
