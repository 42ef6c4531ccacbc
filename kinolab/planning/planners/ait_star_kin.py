# kinolab/planning/planners/ait_star_kin.py
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Union

import numpy as np

from kinolab.types import State
from kinolab.vehicles.base import VehicleBase
from kinolab.planning.config import AITStarKinConfig
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.costs.distance_cost import DistanceCost
from kinolab.planning.interfaces import IPlannerObserver
from kinolab.planning.path import SolutionPath
from kinolab.planning.planner_data import PlannerData, WorkerSnapshot, graph_to_networkx
from kinolab.planning.space import StateSpace
from kinolab.planning.termination import TerminationCondition, as_termination
from kinolab.planning.planners.base import (PlannerBase, PlannerConfigurationError,
                                            PlannerPhase, PlannerStatus)
from kinolab.planning.planners.worker import PlannerWorker, RoundResult, SharedBestCost
from kinolab.visualization.observers import EfficientObserver


class AITStarKinPlanner(PlannerBase):
    """
    AIT*-Kinodynamic: anytime、渐近最优的动力学采样规划器

    每个 worker 同时维护两张图:
    - 几何图 (RGG)：忽略动力学，从目标反向预计算 cost-to-go，给出几何解与启发式
    - 控制图：通过前向传播生长，只包含满足动力学且有效的轨迹
    几何 cost-to-go 引导控制图上的搜索；控制解的代价再收紧 informed 采样区域。
    """
    def __init__(self,
                 vehicle_model: VehicleBase,
                 validity_checker: Callable[[State], bool],
                 space: StateSpace,
                 objective: Optional[CostFunction] = None,
                 config: Optional[AITStarKinConfig] = None):
        self.vehicle = vehicle_model
        self.validity_checker = validity_checker
        self.space = space
        self.objective = objective if objective is not None else DistanceCost()
        self.config = config if config is not None else AITStarKinConfig()

        self.start: Optional[State] = None
        self.goal: Optional[State] = None
        self.goal_tolerance = self.config.goal_tolerance

        self.phase = PlannerPhase.INITIALIZED
        self.num_rounds = 0
        self._workers: List[PlannerWorker] = []
        self._shared_best = SharedBestCost()
        self._best_geometric: Optional[SolutionPath] = None
        self._best_control: Optional[SolutionPath] = None
        self._is_setup = False
        self._seed_sequence = np.random.SeedSequence(self.config.seed)
        self._solve_lock = threading.Lock()

    # ------------------------------------------------------------------
    # 问题定义
    # ------------------------------------------------------------------
    def set_problem(self, start: State, goal: State, goal_tolerance: Optional[float] = None):
        """设置新的起终点，之前的图与解全部丢弃"""
        if goal_tolerance is not None and goal_tolerance < 0:
            raise PlannerConfigurationError("goal_tolerance must be non-negative")
        self.clear()
        self.start = start
        self.goal = goal
        self.goal_tolerance = self.config.goal_tolerance if goal_tolerance is None else goal_tolerance

    def set_space(self, space: StateSpace):
        """更换状态空间边界 (需要重新 setup)"""
        self.clear()
        self.space = space

    def setup(self):
        """检查问题定义并为每个线程创建 worker"""
        if self.start is None or self.goal is None:
            raise PlannerConfigurationError("No problem definition: call set_problem(start, goal) first")
        if not self.space.satisfies_bounds(self.start):
            raise PlannerConfigurationError(f"Start state {self.start} is outside the state space bounds")
        if not self.space.satisfies_bounds(self.goal):
            raise PlannerConfigurationError(f"Goal state {self.goal} is outside the state space bounds")
        if not self.validity_checker(self.start):
            raise PlannerConfigurationError(f"Start state {self.start} is invalid")

        children = self._seed_sequence.spawn(self.config.num_threads)
        self._workers = [
            PlannerWorker(worker_id=i,
                          vehicle=self.vehicle,
                          is_valid=self.validity_checker,
                          space=self.space,
                          objective=self.objective,
                          config=self.config,
                          start=self.start,
                          goal=self.goal,
                          goal_tolerance=self.goal_tolerance,
                          rng=np.random.default_rng(child),
                          phase_callback=self._set_phase)
            for i, child in enumerate(children)
        ]
        self.phase = PlannerPhase.INITIALIZED
        self._is_setup = True

    def _set_phase(self, phase: PlannerPhase):
        self.phase = phase

    # ------------------------------------------------------------------
    # 求解
    # ------------------------------------------------------------------
    def solve(self,
              termination: Union[TerminationCondition, float],
              observer: Optional[IPlannerObserver] = None) -> PlannerStatus:
        """
        运行若干轮直到终止条件成立 (只在两轮之间轮询)
        可以重复调用：图与最优解会保留，代价只会单调不增
        """
        observer = observer if observer is not None else EfficientObserver()
        done = as_termination(termination)
        if not self._solve_lock.acquire(blocking=False):
            raise RuntimeError("solve() is already running on this planner")
        try:
            if not self._is_setup:
                self.setup()
            if self.goal is not None and not self.validity_checker(self.goal):
                observer.log("Goal state is invalid, no exact solution can exist", level='WARN',
                             payload={'goal': self.goal})
            for worker in self._workers:
                worker.set_observer(observer)

            observer.log("AIT*-Kin solve started", level='INFO',
                         payload={'threads': self.config.num_threads,
                                  'batch_size': self.config.batch_size,
                                  'best_cost': self._shared_best.cost})
            t0 = time.perf_counter()
            with ThreadPoolExecutor(max_workers=self.config.num_threads,
                                    thread_name_prefix="ait_kin_worker") as executor:
                while not done():
                    best = self._shared_best.cost
                    results = list(executor.map(lambda w: w.run_round(best), self._workers))
                    improved = self._merge(results, observer)
                    self.num_rounds += 1
                    self.phase = PlannerPhase.IMPROVED if improved else PlannerPhase.NO_IMPROVEMENT
                    observer.log(f"Round {self.num_rounds} finished", level='INFO',
                                 payload={'improved': improved,
                                          'best_geometric_cost': self.best_geometric_cost,
                                          'best_control_cost': self.best_control_cost,
                                          'elapsed': round(time.perf_counter() - t0, 3)})
        finally:
            self.phase = PlannerPhase.TERMINATED
            self._solve_lock.release()

        status = self.status
        observer.log(f"AIT*-Kin solve finished: {status.value}", level='INFO',
                     payload={'rounds': self.num_rounds, 'cost': self.best_control_cost})
        return status

    def _merge(self, results: List[RoundResult], observer: IPlannerObserver) -> bool:
        """把各 worker 的结果合并到全局最优解，返回本轮是否有改进"""
        improved = False
        for result in results:
            geo = result.geometric_path
            if geo is not None and (self._best_geometric is None or geo.cost < self._best_geometric.cost):
                self._best_geometric = geo
                improved = True
                observer.record_solution('geometric', geo.cost, geo)

            ctrl = result.control_path
            if ctrl is not None and self._shared_best.offer(ctrl.cost):
                self._best_control = ctrl
                improved = True
                observer.record_solution('control', ctrl.cost, ctrl)
                observer.log("Improved control solution", level='INFO',
                             payload={'worker': result.worker_id, 'cost': ctrl.cost,
                                      'waypoints': len(ctrl)})
        return improved

    @property
    def status(self) -> PlannerStatus:
        if self._best_control is not None:
            return PlannerStatus.FOUND
        if self._best_geometric is not None:
            return PlannerStatus.APPROXIMATE
        if self.num_rounds == 0:
            return PlannerStatus.TIMEOUT
        return PlannerStatus.NOT_FOUND

    @property
    def best_geometric_cost(self) -> float:
        return self._best_geometric.cost if self._best_geometric is not None else math.inf

    @property
    def best_control_cost(self) -> float:
        return self._best_control.cost if self._best_control is not None else math.inf

    def get_solution_path(self) -> Optional[SolutionPath]:
        """优先返回控制路径，没有时退回几何路径"""
        if self._best_control is not None:
            return self._best_control
        return self._best_geometric

    def get_geometric_path(self) -> Optional[SolutionPath]:
        return self._best_geometric

    def get_control_path(self) -> Optional[SolutionPath]:
        return self._best_control

    def get_planner_data(self) -> PlannerData:
        snapshots = [
            WorkerSnapshot(worker_id=w.worker_id,
                           geometric=graph_to_networkx(w.geometric_graph),
                           control=graph_to_networkx(w.control_graph),
                           start_id=w.geo_start,
                           goal_id=w.geo_goal)
            for w in self._workers
        ]
        return PlannerData(workers=snapshots,
                           best_geometric_cost=self.best_geometric_cost,
                           best_control_cost=self.best_control_cost,
                           num_rounds=self.num_rounds)

    # ------------------------------------------------------------------
    # 复用 / 释放
    # ------------------------------------------------------------------
    def free_memory(self):
        """释放图与索引，保留已找到的解 (之后 solve 会在新图上继续收紧)"""
        for worker in self._workers:
            worker.free()
        self._workers = []
        self._is_setup = False

    def clear(self):
        """丢弃所有图与解，回到 INITIALIZED；solve 运行期间不允许调用"""
        if not self._solve_lock.acquire(blocking=False):
            raise RuntimeError("clear() cannot run while solve() is in progress")
        try:
            self.free_memory()
            self._shared_best.reset()
            self._best_geometric = None
            self._best_control = None
            self.num_rounds = 0
            self.phase = PlannerPhase.INITIALIZED
        finally:
            self._solve_lock.release()

    # ------------------------------------------------------------------
    # 与其它规划器一致的便捷接口
    # ------------------------------------------------------------------
    def plan(self,
             start: State,
             goal: State,
             time_budget: float = 1.0,
             debugger: Optional[IPlannerObserver] = None) -> List[State]:
        print(f"  [AIT*-Kin] Start planning... Budget: {time_budget}s, Threads: {self.config.num_threads}")
        self.set_problem(start, goal)
        status = self.solve(time_budget, debugger)
        path = self.get_solution_path()
        print(f"  [AIT*-Kin] {status.value}, rounds: {self.num_rounds}, cost: {self.best_control_cost:.3f}")
        return path.states if path is not None else []
