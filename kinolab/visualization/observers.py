import logging
import os
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from kinolab.planning.interfaces import IPlannerObserver


class EfficientObserver(IPlannerObserver):
    """
    高效运行模式
    除了必要的流程不额外进行信息记录。
    相当于 NoOp。
    """
    def record_open_set_node(self, node: Any, f: float = 0.0, h: float = 0.0): pass
    def record_current_expansion(self, node: Any): pass
    def record_edge(self, start_node: Any, end_node: Any): pass
    def record_solution(self, kind: str, cost: float, path: Any): pass
    def set_map_info(self, map_info: Any): pass
    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        # 仅在 ERROR 级别打印
        if level == 'ERROR':
            print(f"[ERROR] {message}")


class ExperimentObserver(IPlannerObserver):
    """
    实验模式
    记录开集、拓展节点、图的边以及每次解的改进。
    这些信息主要用于算法的比较、anytime 曲线和可视化 (Replay)。
    多个 worker 线程可能同时写入，所有列表追加都在锁内完成。
    """
    def __init__(self):
        # 存储格式: List[Tuple[x, y, f, h]]
        self.open_set_history: List[Tuple[float, float, float, float]] = []
        # 存储格式: List[Any] (通常是 State)
        self.expanded_nodes: List[Any] = []
        # 存储格式: List[Tuple[start, end]]
        self.edges: List[Tuple[Any, Any]] = []
        # 存储格式: List[Tuple[elapsed_sec, kind, cost]]
        self.solutions: List[Tuple[float, str, float]] = []
        self.messages: List[Tuple[str, str]] = []
        self.map_info = None
        self._t0 = time.perf_counter()
        self._lock = threading.Lock()

    def record_open_set_node(self, node: Any, f: float = 0.0, h: float = 0.0):
        # 尝试提取 x, y
        x = getattr(node, 'x', node[0] if isinstance(node, (list, tuple)) else 0)
        y = getattr(node, 'y', node[1] if isinstance(node, (list, tuple)) else 0)
        with self._lock:
            self.open_set_history.append((x, y, f, h))

    def record_current_expansion(self, node: Any):
        with self._lock:
            self.expanded_nodes.append(node)

    def record_edge(self, start_node: Any, end_node: Any):
        with self._lock:
            self.edges.append((start_node, end_node))

    def record_solution(self, kind: str, cost: float, path: Any):
        with self._lock:
            self.solutions.append((time.perf_counter() - self._t0, kind, cost))

    def set_map_info(self, map_info: Any):
        self.map_info = map_info

    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        # 实验模式只保留 WARN 以上的消息，便于事后统计失败原因
        if level in ('WARN', 'ERROR'):
            with self._lock:
                self.messages.append((level, message))

    def best_costs(self, kind: str = 'control') -> List[float]:
        """按时间顺序返回某类解的代价序列"""
        return [cost for _, k, cost in self.solutions if k == kind]


class DebugObserver(IPlannerObserver):
    """
    Debug 模式
    用于详细分析一次实验为什么效果不好甚至失败。
    将详细日志写入文件，同时保留可视化数据以便对照。
    """
    def __init__(self, log_dir: str = "logs/planning_debug"):
        # 复用 ExperimentObserver 的存储，以便 Debug 时也能画图
        self.viz_observer = ExperimentObserver()

        self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)

        # 配置 Logger
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        self.log_file = os.path.join(self.log_dir, f"plan_debug_{timestamp}.log")

        self.logger = logging.getLogger(f"PlannerDebug_{timestamp}_{id(self)}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # 避免添加重复 Handler
        if not self.logger.handlers:
            fh = logging.FileHandler(self.log_file, encoding='utf-8')
            fh.setLevel(logging.DEBUG)
            formatter = logging.Formatter('%(asctime)s - %(threadName)s - %(levelname)s - %(message)s')
            fh.setFormatter(formatter)
            self.logger.addHandler(fh)

        self.logger.info("=== Debug Session Started ===")

    def record_open_set_node(self, node: Any, f: float = 0.0, h: float = 0.0):
        self.viz_observer.record_open_set_node(node, f, h)

    def record_current_expansion(self, node: Any):
        self.viz_observer.record_current_expansion(node)
        self.logger.debug(f"Expanding: {node}")

    def record_edge(self, start_node: Any, end_node: Any):
        self.viz_observer.record_edge(start_node, end_node)

    def record_solution(self, kind: str, cost: float, path: Any):
        self.viz_observer.record_solution(kind, cost, path)
        self.logger.info(f"New {kind} solution: cost={cost:.4f}")

    def set_map_info(self, map_info: Any):
        self.viz_observer.set_map_info(map_info)
        self.logger.info(f"Map Info set: {map_info}")

    def log(self, message: str, level: str = 'INFO', payload: Optional[Dict] = None):
        if payload:
            message = f"{message} | Payload: {payload}"

        if level == 'DEBUG':
            self.logger.debug(message)
        elif level == 'WARN':
            self.logger.warning(message)
        elif level == 'ERROR':
            self.logger.error(message)
        else:
            self.logger.info(message)

    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    # Proxy properties for ExperimentObserver compatibility
    @property
    def expanded_nodes(self): return self.viz_observer.expanded_nodes
    @property
    def open_set_history(self): return self.viz_observer.open_set_history
    @property
    def edges(self): return self.viz_observer.edges
    @property
    def solutions(self): return self.viz_observer.solutions
