# kinolab/collision/geometry.py
import numpy as np

def check_sat_polygon_collision(poly1: np.ndarray, poly2: np.ndarray) -> bool:
    """
    使用分离轴定理 (SAT) 检测两个凸多边形是否相交
    :param poly1: (N, 2) 顶点数组
    :param poly2: (M, 2) 顶点数组
    :return: True if collision
    """
    for polygon in (poly1, poly2):
        for i in range(len(polygon)):
            # 1. 分离轴 = 边的法向量 (-y, x)
            edge = polygon[(i + 1) % len(polygon)] - polygon[i]
            axis = np.array([-edge[1], edge[0]])
            norm = np.linalg.norm(axis)
            if norm < 1e-6:
                continue  # 闭合多边形的重复顶点
            axis /= norm

            # 2. 投影
            min1, max1 = _project_polygon(axis, poly1)
            min2, max2 = _project_polygon(axis, poly2)

            # 3. 找到分离轴，一定不相交
            if max1 < min2 or max2 < min1:
                return False
    return True

def _project_polygon(axis, poly):
    """辅助函数：将多边形投影到轴上"""
    dots = np.dot(poly, axis)
    return np.min(dots), np.max(dots)

def get_grid_aabb_polygon(x_idx: int, y_idx: int, resolution: float, origin=(0.0, 0.0)) -> np.ndarray:
    """
    将网格单元转换为矩形多边形顶点 (用于 SAT 检测)
    """
    x0 = origin[0] + x_idx * resolution
    y0 = origin[1] + y_idx * resolution
    x1 = x0 + resolution
    y1 = y0 + resolution
    return np.array([
        [x0, y0], [x1, y0], [x1, y1], [x0, y1]
    ])

def circle_overlaps_cells(cx: float, cy: float, radius: float,
                          cell_cx: np.ndarray, cell_cy: np.ndarray, half_size: float) -> bool:
    """
    圆与一组轴对齐正方形格子是否有重叠 (最近点法，向量化)
    cell_cx, cell_cy: 格子中心坐标
    """
    dx = np.maximum(np.abs(cell_cx - cx) - half_size, 0.0)
    dy = np.maximum(np.abs(cell_cy - cy) - half_size, 0.0)
    return bool(np.any(dx * dx + dy * dy <= radius * radius))
