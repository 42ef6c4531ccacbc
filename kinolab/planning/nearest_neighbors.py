# kinolab/planning/nearest_neighbors.py
from typing import TYPE_CHECKING, List, Optional, Set

import numpy as np
from scipy.spatial import cKDTree

from kinolab.types import State
from kinolab.planning.space import StateSpace
if TYPE_CHECKING:
    from kinolab.planning.graphs.graph import Vertex


class NearestNeighborsIndex:
    """
    顶点的最近邻索引
    [优化] cKDTree 只在积累足够多的新点后才重建，
    尚未进入树的新点 (tail) 用 numpy 暴力计算，两部分结果合并。
    """
    def __init__(self, space: StateSpace, min_rebuild: int = 64):
        self.space = space
        self.min_rebuild = min_rebuild
        self._ids: List[int] = []
        self._points: List[np.ndarray] = []
        self._tree: Optional[cKDTree] = None
        self._tree_size = 0

    @property
    def size(self) -> int:
        return len(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def insert(self, vertex: "Vertex"):
        self._ids.append(vertex.id)
        self._points.append(self.space.embed(vertex.state))
        self._maybe_rebuild()

    def clear(self):
        self._ids.clear()
        self._points.clear()
        self._tree = None
        self._tree_size = 0

    def _maybe_rebuild(self):
        tail = len(self._points) - self._tree_size
        if tail >= max(self.min_rebuild, self._tree_size // 4):
            self._tree = cKDTree(np.vstack(self._points))
            self._tree_size = len(self._points)

    def _tail_distances(self, query: np.ndarray) -> np.ndarray:
        if self._tree_size == len(self._points):
            return np.empty(0)
        tail = np.vstack(self._points[self._tree_size:])
        return np.linalg.norm(tail - query, axis=1)

    def k_nearest(self, state: State, k: int) -> List[int]:
        """按距离从近到远返回至多 k 个顶点 id (距离相同时按插入顺序)"""
        if k <= 0 or not self._ids:
            return []
        query = self.space.embed(state)

        dists: List[float] = []
        indices: List[int] = []
        if self._tree is not None:
            kk = min(k, self._tree_size)
            d, idx = self._tree.query(query, k=kk)
            dists.extend(np.atleast_1d(d).tolist())
            indices.extend(np.atleast_1d(idx).tolist())

        tail_d = self._tail_distances(query)
        if tail_d.size:
            dists.extend(tail_d.tolist())
            indices.extend(range(self._tree_size, len(self._points)))

        order = sorted(zip(dists, indices))[:k]
        return [self._ids[i] for _, i in order]

    def nearest(self, state: State) -> Optional[int]:
        result = self.k_nearest(state, 1)
        return result[0] if result else None

    def in_radius(self, state: State, radius: float) -> Set[int]:
        if not self._ids:
            return set()
        if not np.isfinite(radius):
            return set(self._ids)
        query = self.space.embed(state)

        result: Set[int] = set()
        if self._tree is not None:
            for i in self._tree.query_ball_point(query, radius):
                result.add(self._ids[i])

        tail_d = self._tail_distances(query)
        for offset in np.nonzero(tail_d <= radius)[0]:
            result.add(self._ids[self._tree_size + int(offset)])
        return result
