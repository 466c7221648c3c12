"""
Per-level active node sets.

Level 0 is the coarsest detail level (whole world in one 256 px tile) and
level NUMBER_OF_LEVELS - 1 the finest. Each level keeps the ids of the nodes
that currently represent the clustered state at that zoom.
"""

from typing import Dict, List

NUMBER_OF_LEVELS = 20
FINEST_LEVEL = NUMBER_OF_LEVELS - 1


class LevelTable:
    """Fixed number of independent, id-keyed active node sets."""

    def __init__(self, number_of_levels: int = NUMBER_OF_LEVELS):
        self.number_of_levels = number_of_levels
        # dict keys give O(1) removal by id; values are unused
        self._levels: List[Dict[int, None]] = [{} for _ in range(number_of_levels)]

    def _level(self, level: int) -> Dict[int, None]:
        if level < 0 or level >= self.number_of_levels:
            raise IndexError(f"Level {level} outside [0, {self.number_of_levels - 1}]")
        return self._levels[level]

    def add(self, level: int, node_id: int) -> None:
        self._level(level)[node_id] = None

    def discard(self, level: int, node_id: int) -> bool:
        """Remove a node id from a level. Returns False if it was not present."""
        nodes = self._level(level)
        if node_id not in nodes:
            return False
        del nodes[node_id]
        return True

    def contains(self, level: int, node_id: int) -> bool:
        return node_id in self._level(level)

    def node_ids(self, level: int) -> List[int]:
        """Snapshot of the ids active at a level."""
        return list(self._level(level))

    def count(self, level: int) -> int:
        return len(self._level(level))

    def clear(self) -> None:
        for nodes in self._levels:
            nodes.clear()

    def __len__(self) -> int:
        return self.number_of_levels
