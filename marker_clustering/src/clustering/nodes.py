"""
Clustering node records and the arena that owns them.

Every node in the cluster tree lives in a single NodeArena and is addressed
by its integer id. Parent and child links are stored as ids, so a node that
has been merged away can be tombstoned without leaving dangling references
in the level table or in other nodes.
"""

from typing import Dict, Iterator, List, Optional, Tuple

# marker_id value for nodes that aggregate more than one marker
NO_MARKER = -1


class ClusteringNode:
    """
    One node of the cluster tree.

    A node represents either a single marker (marker_count == 1, marker_id set)
    or an aggregate of markers at one detail level (marker_count > 1,
    marker_id == NO_MARKER). Positions are in projected coordinates:
    x = longitude, y = Mercator latitude, both in degrees.
    """

    __slots__ = ["node_id", "level", "x", "y", "marker_count", "marker_id", "parent", "children"]

    def __init__(self, node_id: int, level: int, x: float, y: float,
                 marker_count: int = 1, marker_id: int = NO_MARKER):
        self.node_id = node_id
        self.level = level
        self.x = x
        self.y = y
        self.marker_count = marker_count
        self.marker_id = marker_id
        self.parent: Optional[int] = None
        # Insertion-ordered set of child node ids
        self.children: Dict[int, None] = {}

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def is_cluster(self) -> bool:
        return self.marker_count > 1

    def add_child(self, child_id: int) -> None:
        self.children[child_id] = None

    def remove_child(self, child_id: int) -> bool:
        """Detach a child id, returning False if it was not a child."""
        if child_id not in self.children:
            return False
        del self.children[child_id]
        return True

    def __repr__(self):
        return (
            f"<ClusteringNode {self.node_id}: level {self.level}, "
            f"{self.marker_count} marker(s), center ({self.x:.5f}, {self.y:.5f})>"
        )


class NodeArena:
    """
    Owns every ClusteringNode and issues node ids.

    Ids increase strictly in creation order and are never reused. Deleting a
    node tombstones its slot: the id stops resolving but is not handed out
    again until the arena is cleared.
    """

    def __init__(self):
        self._slots: List[Optional[ClusteringNode]] = []
        self._live = 0

    def create(self, level: int, x: float, y: float,
               marker_count: int = 1, marker_id: int = NO_MARKER) -> ClusteringNode:
        node = ClusteringNode(len(self._slots), level, x, y, marker_count, marker_id)
        self._slots.append(node)
        self._live += 1
        return node

    def get(self, node_id: Optional[int]) -> Optional[ClusteringNode]:
        """Return the live node for an id, or None if unknown or tombstoned."""
        if node_id is None or node_id < 0 or node_id >= len(self._slots):
            return None
        return self._slots[node_id]

    def __getitem__(self, node_id: int) -> ClusteringNode:
        node = self.get(node_id)
        if node is None:
            raise KeyError(f"Node {node_id} does not exist or has been deleted")
        return node

    def is_alive(self, node_id: int) -> bool:
        return self.get(node_id) is not None

    def tombstone(self, node_id: int) -> bool:
        """Mark a node deleted. Returns False if it was already gone."""
        if self.get(node_id) is None:
            return False
        self._slots[node_id] = None
        self._live -= 1
        return True

    def clear(self) -> None:
        """Drop every node and restart id issuance at 0."""
        self._slots = []
        self._live = 0

    @property
    def next_id(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return self._live

    def __iter__(self) -> Iterator[ClusteringNode]:
        return (node for node in self._slots if node is not None)
