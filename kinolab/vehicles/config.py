# [配置] 该模块独有的配置数据类
from dataclasses import dataclass, field
import numpy as np
import math

@dataclass
class VehicleConfig:
    """所有车辆通用的配置"""
    safe_margin: float = 0.1  # 碰撞检测的安全余量
    max_velocity: float = 2.0
    min_velocity: float = 0.0  # 允许倒车时设为负值


@dataclass
class AckermannConfig(VehicleConfig):
    """
    阿克曼车辆物理参数配置
    几何参数与碰撞参数分离，但在初始化时预计算
    """
    # --- 1. 基础几何参数 (核心) ---
    wheelbase: float = 2.5       # [m] 轴距
    width: float = 2.0           # [m] 车宽
    front_hang: float = 0.9      # [m] 前悬 (前轴中心到车头)
    rear_hang: float = 0.9       # [m] 后悬 (后轴中心到车尾)

    # --- 2. 动力学限制 (控制空间边界) ---
    max_steer_deg: float = 35.0     # [deg] 最大转向角
    max_acceleration: float = 1.0   # [m/s^2] 加速度上下限 (对称)

    # --- 3. 派生属性 (自动计算，外部只读) ---
    max_steer: float = field(init=False)
    collision_radius: float = field(init=False)      # 单个小圆的半径
    collision_offsets: np.ndarray = field(init=False)# 小圆圆心相对于后轴中心的距离列表
    outline_coords: np.ndarray = field(init=False)   # 车身矩形框坐标(5x2, 闭合)
    bounding_radius: float = field(init=False)      # 最小外接圆半径 (不含安全余量)
    bounding_offset: np.ndarray = field(init=False) # 最小外接圆圆心相对于后轴的坐标 [x, y]

    def __post_init__(self):
        if self.wheelbase <= 0:
            raise ValueError(f"wheelbase must be positive, got {self.wheelbase}")
        if not 0.0 < self.max_steer_deg < 90.0:
            raise ValueError(f"max_steer_deg must be in (0, 90), got {self.max_steer_deg}")
        if self.max_acceleration < 0:
            raise ValueError("max_acceleration must be non-negative")
        if self.min_velocity > self.max_velocity:
            raise ValueError("min_velocity must not exceed max_velocity")

        # A. 角度转弧度
        self.max_steer = math.radians(self.max_steer_deg)

        # B. 预计算多圆覆盖参数：沿车身纵轴分布多个圆
        total_length = self.wheelbase + self.front_hang + self.rear_hang

        # 半径 = 车宽的一半(稍放大以覆盖车角) + 安全余量
        self.collision_radius = (self.width / 2.0) * 1.1 + self.safe_margin

        # 每隔 0.8 * radius 放一个圆，至少 3 个
        num_circles = int(np.ceil(total_length / (self.collision_radius * 0.8)))
        num_circles = max(num_circles, 3)

        # 后轴中心 x=0，车尾是 -rear_hang，车头是 +wheelbase + front_hang
        start_x = -self.rear_hang + self.collision_radius * 0.5
        end_x = (self.wheelbase + self.front_hang) - self.collision_radius * 0.5
        self.collision_offsets = np.linspace(start_x, end_x, num_circles)

        # C. 预计算轮廓 (相对于后轴中心)，x轴向前，y轴向左
        front_x = self.wheelbase + self.front_hang
        rear_x = -self.rear_hang
        left_y = self.width / 2.0
        right_y = -self.width / 2.0

        self.outline_coords = np.array([
            [front_x, right_y],
            [rear_x,  right_y],
            [rear_x,  left_y],
            [front_x, left_y],
            [front_x, right_y] # 闭合
        ])

        # D. 最小外接圆 (AABB 中心 + 覆盖所有顶点的半径)
        min_xy = np.min(self.outline_coords, axis=0)
        max_xy = np.max(self.outline_coords, axis=0)
        center_local = (min_xy + max_xy) / 2.0
        dists = np.linalg.norm(self.outline_coords - center_local, axis=1)

        self.bounding_offset = center_local
        self.bounding_radius = float(np.max(dists))


@dataclass
class PointMassConfig(VehicleConfig):
    """
    质点/全向小车模型配置
    控制量为 (vx, vy)，每个分量限制在 [-max_velocity, max_velocity]
    """
    # --- 1. 几何参数 ---
    width: float = 1.0           # [m] 车宽 (用于碰撞矩形)
    length: float = 1.0          # [m] 车长

    # --- 2. 派生属性 (自动计算) ---
    bounding_radius: float = field(init=False)      # 外接圆半径
    bounding_offset: np.ndarray = field(init=False) # 外接圆偏移 (通常为 0,0)
    outline_coords: np.ndarray = field(init=False)  # 矩形轮廓

    def __post_init__(self):
        if self.max_velocity <= 0:
            raise ValueError("PointMass max_velocity must be positive")

        # A. 预计算轮廓 (以中心为原点的矩形)
        dx = self.length / 2.0
        dy = self.width / 2.0

        self.outline_coords = np.array([
            [dx, -dy],
            [-dx, -dy],
            [-dx, dy],
            [dx, dy],
            [dx, -dy] # 闭合
        ])

        # B. 外接圆：半径为矩形对角线的一半，不含安全余量
        self.bounding_offset = np.array([0.0, 0.0])
        self.bounding_radius = math.hypot(dx, dy)
