"""
Incremental multi-resolution marker clustering.

The engine keeps one cluster tree spanning NUMBER_OF_LEVELS detail levels.
Each new marker enters as a leaf at the finest level and climbs towards
level 0, copying itself one level coarser until it lands within the cluster
distance of an existing node. It is absorbed there, and a refinement pass
then walks the remaining coarser ancestors, recomputing their aggregates and
merging any nodes whose subtrees now have to be combined.

When clustering is disabled every marker is stored as a single node at
level 0 and materialization always draws level 0.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from marker_clustering.utils.mercator import lat2y

from .levels import FINEST_LEVEL, NUMBER_OF_LEVELS, LevelTable
from .materialize import DEFAULT_MAX_CLUSTER_SCALE_FACTOR, MaterializedMarkers
from .nodes import NO_MARKER, ClusteringNode, NodeArena
from .picking import PickResult, resolve_pick
from .proximity import DEFAULT_DISTANCE_THRESHOLD, find_closest_node

# Relative tolerance used by check_consistency for centroid comparisons
CENTROID_TOLERANCE = 1e-9


class MarkerClusterEngine:
    """
    Owns the node arena and level table and exposes the four public operations:
    add_marker, materialize, resolve_pick and reset.

    Not thread safe: callers must not run operations concurrently on one engine.

    Example:
        >>> engine = MarkerClusterEngine()
        >>> engine.add_marker(0.0, 0.0)
        0
        >>> engine.add_marker(0.0001, 0.0001)
        1
        >>> len(engine.materialize(0))
        1
    """

    def __init__(
        self,
        clustering: bool = True,
        distance_threshold: float = DEFAULT_DISTANCE_THRESHOLD,
        max_cluster_scale_factor: float = DEFAULT_MAX_CLUSTER_SCALE_FACTOR,
        debug: bool = False,
    ):
        """
        Args:
            clustering: Build the multi-level cluster tree (True) or store flat markers
            distance_threshold: Cluster radius in screen pixels
            max_cluster_scale_factor: Asymptotic render scale of large clusters (>= 1)
            debug: Print per-insertion tracing
        """
        self.arena = NodeArena()
        self.levels = LevelTable(NUMBER_OF_LEVELS)
        self.debug = debug

        self._clustering = bool(clustering)
        self._distance_threshold = DEFAULT_DISTANCE_THRESHOLD
        self._max_cluster_scale_factor = DEFAULT_MAX_CLUSTER_SCALE_FACTOR
        self.distance_threshold = distance_threshold
        self.max_cluster_scale_factor = max_cluster_scale_factor

        self._number_of_markers = 0
        self._markers_changed = False
        self._zoom_level = -1
        self._current: Optional[MaterializedMarkers] = None

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def clustering(self) -> bool:
        return self._clustering

    @clustering.setter
    def clustering(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled != self._clustering and self._number_of_markers > 0:
            print(
                f"⚠️  Warning: Clustering switched {'on' if enabled else 'off'} with "
                f"{self._number_of_markers} marker(s) already added; existing markers are not "
                "restructured. Call reset() and add them again."
            )
        self._clustering = enabled
        self._markers_changed = True

    @property
    def distance_threshold(self) -> float:
        return self._distance_threshold

    @distance_threshold.setter
    def distance_threshold(self, value: float) -> None:
        value = float(value)
        if not value > 0.0:
            raise ValueError(f"Cluster distance must be positive, got {value}")
        self._distance_threshold = value

    @property
    def max_cluster_scale_factor(self) -> float:
        return self._max_cluster_scale_factor

    @max_cluster_scale_factor.setter
    def max_cluster_scale_factor(self, value: float) -> None:
        value = float(value)
        if value < 1.0:
            raise ValueError(f"Max cluster scale factor must be >= 1.0, got {value}")
        if value != self._max_cluster_scale_factor:
            self._markers_changed = True
        self._max_cluster_scale_factor = value

    @property
    def number_of_markers(self) -> int:
        return self._number_of_markers

    @property
    def number_of_nodes(self) -> int:
        return len(self.arena)

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add_marker(self, latitude: float, longitude: float) -> int:
        """
        Add one marker and update every detail level.

        Args:
            latitude: Latitude in degrees, [-90, 90]
            longitude: Longitude in degrees, [-180, 180]

        Returns:
            Marker id; ids start at 0 and follow call order
        """
        marker_id = self._number_of_markers
        self._number_of_markers += 1
        self._debug(f"Adding marker {marker_id}")

        x = float(longitude)
        y = lat2y(latitude)

        if self._clustering:
            self._insert_clustered(x, y, marker_id)
        else:
            node = self.arena.create(0, x, y, 1, marker_id)
            self.levels.add(0, node.node_id)

        self._markers_changed = True
        return marker_id

    def add_markers(self, latitudes: Sequence[float], longitudes: Sequence[float]) -> np.ndarray:
        """Add markers in order; equivalent to calling add_marker for each pair."""
        latitudes = np.asarray(latitudes, dtype=np.float64).ravel()
        longitudes = np.asarray(longitudes, dtype=np.float64).ravel()
        if latitudes.shape != longitudes.shape:
            raise ValueError(
                f"Got {latitudes.size} latitudes but {longitudes.size} longitudes"
            )
        return np.array(
            [self.add_marker(lat, lon) for lat, lon in zip(latitudes, longitudes)],
            dtype=np.int64,
        )

    def _insert_clustered(self, x: float, y: float, marker_id: int) -> None:
        level = FINEST_LEVEL
        node = self.arena.create(level, x, y, 1, marker_id)
        self.levels.add(level, node.node_id)
        self._debug(f"Inserted node {node.node_id} into level {level}")

        threshold = self._distance_threshold

        # Climb: copy the node one level coarser until a clustering partner is found
        level -= 1
        while level >= 0:
            closest = self.find_closest_node(node, level, threshold)
            if closest is not None:
                self._debug(f"Found closest node to {node.node_id} at {closest.node_id}")
                self._absorb(closest, node)
                node = closest
                break

            copy = self.arena.create(level, node.x, node.y, node.marker_count, node.marker_id)
            copy.add_child(node.node_id)
            node.parent = copy.node_id
            self.levels.add(level, copy.node_id)
            self._debug(f"Level {level} add node {node.node_id} --> {copy.node_id}")
            node = copy
            level -= 1

        node = self.arena.get(node.parent)
        level -= 1

        # Refinement: walk the remaining ancestors, folding in queued nodes,
        # recomputing aggregates and merging with any new close neighbour
        nodes_to_merge: List[int] = []
        while level >= 0:
            if node is None:
                print(f"⚠️  Warning: Refinement lost its ancestor chain at level {level}")
                break

            parents_to_merge: Dict[int, None] = {}
            for merging_id in nodes_to_merge:
                merging_node = self.arena.get(merging_id)
                if merging_node is None:
                    print(f"⚠️  Warning: Queued node {merging_id} no longer exists")
                    continue
                if merging_node is node:
                    print(f"⚠️  Warning: Node & merging node the same {node.node_id}")
                    continue
                self._debug(f"At level {level} merging node {merging_id} into {node.node_id}")
                self.merge_nodes(node, merging_node, level, parents_to_merge)

            self._recompute_from_children(node)

            closest = self.find_closest_node(node, level, threshold)
            if closest is not None:
                self.merge_nodes(node, closest, level, parents_to_merge)

            nodes_to_merge = list(parents_to_merge)
            node = self.arena.get(node.parent)
            level -= 1

    def _absorb(self, node: ClusteringNode, child: ClusteringNode) -> None:
        """Attach a climbing node one level finer as a new child of ``node``."""
        total = node.marker_count + child.marker_count
        node.x = (node.x * node.marker_count + child.x * child.marker_count) / total
        node.y = (node.y * node.marker_count + child.y * child.marker_count) / total
        node.marker_count = total
        node.marker_id = NO_MARKER
        node.add_child(child.node_id)
        child.parent = node.node_id

    def _recompute_from_children(self, node: ClusteringNode) -> None:
        """Reset a node's count and centroid from its direct children."""
        count = 0
        sum_x = 0.0
        sum_y = 0.0
        for child_id in node.children:
            child = self.arena.get(child_id)
            if child is None:
                print(f"⚠️  Warning: Node {node.node_id} references deleted child {child_id}")
                continue
            count += child.marker_count
            sum_x += child.marker_count * child.x
            sum_y += child.marker_count * child.y

        if count == 0:
            return
        node.marker_count = count
        if count > 1:
            node.marker_id = NO_MARKER
        node.x = sum_x / count
        node.y = sum_y / count

    # ------------------------------------------------------------------
    # Proximity search and merging
    # ------------------------------------------------------------------

    def find_closest_node(self, node: ClusteringNode, level: int,
                          threshold: Optional[float] = None) -> Optional[ClusteringNode]:
        """Nearest other active node at ``level`` within ``threshold`` pixels, or None."""
        if threshold is None:
            threshold = self._distance_threshold
        return find_closest_node(self.arena, self.levels, node, level, threshold)

    def merge_nodes(self, node: ClusteringNode, merging_node: ClusteringNode, level: int,
                    parents_to_merge: Dict[int, None]) -> None:
        """
        Merge ``merging_node`` into ``node`` and delete it.

        Args:
            node: Surviving node
            merging_node: Node folded into ``node``, then tombstoned
            level: Level both nodes are active at
            parents_to_merge: Ordered set collecting former parents of merged
                nodes that must themselves be merged one level coarser
        """
        self._debug(f"Merging {merging_node.node_id} into {node.node_id}")
        if node.level != merging_node.level:
            print(
                f"⚠️  Warning: Node {node.node_id} and node {merging_node.node_id} "
                f"not at the same level ({node.level} vs {merging_node.level})"
            )

        n = merging_node.marker_count
        total = node.marker_count + n
        if total > 0:
            node.x = (node.x * node.marker_count + merging_node.x * n) / total
            node.y = (node.y * node.marker_count + merging_node.y * n) / total
        node.marker_count = total
        node.marker_id = NO_MARKER

        for child_id in list(merging_node.children):
            child = self.arena.get(child_id)
            if child is None:
                print(f"⚠️  Warning: Node {merging_node.node_id} references deleted child {child_id}")
                continue
            node.add_child(child_id)
            child.parent = node.node_id
        merging_node.children.clear()

        # Local fix-up of ancestor counts; refinement recomputes them exactly
        parent = self.arena.get(node.parent)
        if parent is not None:
            parent.marker_count += n

        old_parent = self.arena.get(merging_node.parent)
        if old_parent is not None:
            old_parent.marker_count -= n
            old_parent.remove_child(merging_node.node_id)
            if old_parent.node_id != node.parent:
                parents_to_merge[old_parent.node_id] = None

        if not self.levels.discard(level, merging_node.node_id):
            print(f"⚠️  Warning: Node {merging_node.node_id} not found at level {level}")
        self.arena.tombstone(merging_node.node_id)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def materialize(self, zoom_level: int) -> MaterializedMarkers:
        """
        Render-ready arrays for the active nodes at a zoom level.

        The zoom is clamped to [0, NUMBER_OF_LEVELS - 1]. With clustering off the
        markers always come from level 0. If no markers were added (and, with
        clustering on, the level is unchanged) since the previous call, the
        previous result is returned as is.
        """
        zoom_level = max(0, min(FINEST_LEVEL, int(zoom_level)))

        if self._current is not None and not self._markers_changed:
            if not self._clustering or zoom_level == self._zoom_level:
                return self._current

        if not self._clustering:
            zoom_level = 0

        nodes = []
        for node_id in self.levels.node_ids(zoom_level):
            node = self.arena.get(node_id)
            if node is None:
                print(f"⚠️  Warning: Level {zoom_level} references deleted node {node_id}")
                continue
            nodes.append(node)

        self._current = MaterializedMarkers.from_nodes(
            nodes, zoom_level, self._max_cluster_scale_factor
        )
        self._markers_changed = False
        self._zoom_level = zoom_level
        self._debug(f"Materialized {len(self._current)} point(s) at level {zoom_level}")
        return self._current

    @property
    def current_markers(self) -> Optional[MaterializedMarkers]:
        """Result of the most recent materialize call, if any."""
        return self._current

    def resolve_pick(self, cell_ids, cell_to_point) -> PickResult:
        """
        Map selected rendered cells to marker ids and cluster node ids.

        Only meaningful against the most recent materialization.
        """
        return resolve_pick(cell_ids, cell_to_point, self._current)

    def cluster_marker_ids(self, node_id: int) -> List[int]:
        """Original marker ids underneath a node, in tree order."""
        root = self.arena.get(node_id)
        if root is None:
            return []

        marker_ids = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.marker_count == 1 and node.marker_id != NO_MARKER:
                marker_ids.append(node.marker_id)
                continue
            children = [self.arena.get(child_id) for child_id in node.children]
            stack.extend(child for child in reversed(children) if child is not None)
        return marker_ids

    # ------------------------------------------------------------------
    # Inspection and reset
    # ------------------------------------------------------------------

    def get_node(self, node_id: int) -> Optional[ClusteringNode]:
        return self.arena.get(node_id)

    def nodes_at_level(self, level: int) -> List[ClusteringNode]:
        return [node for node in map(self.arena.get, self.levels.node_ids(level)) if node is not None]

    def check_consistency(self) -> List[str]:
        """
        Describe every violation of the tree invariants.

        Returns:
            List of problem descriptions; empty when the tree is consistent
        """
        problems = []
        for node in self.arena:
            if not self.levels.contains(node.level, node.node_id):
                problems.append(f"Node {node.node_id} missing from level {node.level}")

            if node.marker_count > 1 and node.marker_id != NO_MARKER:
                problems.append(f"Cluster node {node.node_id} carries marker id {node.marker_id}")

            if self._clustering and node.level > 0:
                parent = self.arena.get(node.parent)
                if parent is None:
                    problems.append(f"Node {node.node_id} at level {node.level} has no parent")
                elif node.node_id not in parent.children:
                    problems.append(f"Node {node.node_id} not listed by its parent {parent.node_id}")

            if not node.children:
                continue

            count = 0
            sum_x = 0.0
            sum_y = 0.0
            for child_id in node.children:
                child = self.arena.get(child_id)
                if child is None:
                    problems.append(f"Node {node.node_id} references deleted child {child_id}")
                    continue
                if child.parent != node.node_id:
                    problems.append(f"Child {child_id} of node {node.node_id} points to {child.parent}")
                if child.level != node.level + 1:
                    problems.append(f"Child {child_id} of node {node.node_id} is at level {child.level}")
                count += child.marker_count
                sum_x += child.marker_count * child.x
                sum_y += child.marker_count * child.y

            if count != node.marker_count:
                problems.append(
                    f"Node {node.node_id} counts {node.marker_count} markers, children hold {count}"
                )
            elif count > 0:
                cx = sum_x / count
                cy = sum_y / count
                tol = CENTROID_TOLERANCE * max(1.0, abs(cx), abs(cy))
                if abs(cx - node.x) > tol or abs(cy - node.y) > tol:
                    problems.append(
                        f"Node {node.node_id} center ({node.x}, {node.y}) differs from "
                        f"children centroid ({cx}, {cy})"
                    )
        return problems

    def reset(self) -> None:
        """Delete every node on every level and restart marker and node ids at 0."""
        self.levels.clear()
        self.arena.clear()
        self._number_of_markers = 0
        self._current = None
        self._zoom_level = -1
        self._markers_changed = True

    def _debug(self, message: str) -> None:
        if self.debug:
            print(f"Debug: {message}")

    def __repr__(self):
        return (
            f"<MarkerClusterEngine: {self._number_of_markers} marker(s), "
            f"{len(self.arena)} node(s), clustering {'on' if self._clustering else 'off'}>"
        )
