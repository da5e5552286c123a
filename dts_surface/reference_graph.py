"""Graph of which declarations mention which type names."""

from collections import deque

TOP_LEVEL = ""  # container key for mentions outside any declaration


class ReferenceGraph:
    """Adjacency list from a container declaration to the names it mentions."""

    def __init__(self) -> None:
        """Initialize an empty graph."""
        self.mentions: dict[str, list[str]] = {}
        self._mentioned_by: dict[str, list[str]] = {}

    def add(self, container: str, name: str) -> None:
        """Record that container mentions name (duplicates are ignored)."""
        names = self.mentions.setdefault(container, [])
        if name in names:
            return
        names.append(name)
        self._mentioned_by.setdefault(name, []).append(container)

    def containing_types(self, name: str) -> list[str]:
        """Containers that mention name directly or transitively.

        Breadth-first over the reversed edges; each container is visited once,
        so cycles terminate.
        """
        seen: set[str] = set()
        result: list[str] = []
        queue = deque([name])
        while queue:
            current = queue.popleft()
            for container in self._mentioned_by.get(current, []):
                if container not in seen:
                    seen.add(container)
                    result.append(container)
                    queue.append(container)
        return result

    def is_reachable_from(self, name: str, roots: set[str]) -> bool:
        """Check if name is one of roots or is mentioned, transitively, by one."""
        if name in roots:
            return True
        return any(container in roots for container in self.containing_types(name))
