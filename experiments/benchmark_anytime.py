import sys
import os
import time
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

# --- 路径设置 ---
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kinolab.map.grid_map import GridMap
from kinolab.vehicles.ackermann import AckermannVehicle
from kinolab.collision import CollisionChecker, StateValidityChecker
from kinolab.planning.planners import AITStarKinPlanner, PlannerStatus
from kinolab.planning.space import StateSpace, StateSpaceBounds
from kinolab.visualization.observers import ExperimentObserver
from benchmark_config import BenchmarkConfig as Cfg


def build_problem(obstacles):
    """按场景构造地图、车辆、状态空间和有效性检查"""
    grid_map = GridMap.from_bounds(Cfg.X_MIN, Cfg.X_MAX, Cfg.Y_MIN, Cfg.Y_MAX, Cfg.RESOLUTION)
    for rect in obstacles:
        grid_map.add_rectangle_obstacle(*rect)

    vehicle = AckermannVehicle(Cfg.VEHICLE_CONFIG)
    space = StateSpace(StateSpaceBounds(Cfg.X_MIN, Cfg.X_MAX, Cfg.Y_MIN, Cfg.Y_MAX,
                                        v_min=Cfg.VEHICLE_CONFIG.min_velocity,
                                        v_max=Cfg.VEHICLE_CONFIG.max_velocity))
    validity = StateValidityChecker(vehicle, grid_map, CollisionChecker(Cfg.COLLISION_CONFIG), space=space)
    return vehicle, space, validity


def run_experiment():
    results = []
    curves = []

    print(f"{'Scenario':<12} | {'Budget(s)':<10} | {'Found%':<8} | {'Approx%':<8} | {'Cost':<8} | {'Rounds':<8}")
    print("-" * 70)

    for name, obstacles in Cfg.SCENARIOS.items():
        vehicle, space, validity = build_problem(obstacles)

        for budget in Cfg.TIME_BUDGETS:
            stats = {'found': 0, 'approx': 0, 'cost': [], 'rounds': [], 'time': []}

            for trial in range(Cfg.NUM_TRIALS):
                seed = Cfg.RANDOM_SEED_BASE + trial
                planner = AITStarKinPlanner(vehicle, validity, space, config=Cfg.planner_config(seed))
                planner.set_problem(Cfg.START_STATE, Cfg.GOAL_STATE, Cfg.GOAL_TOLERANCE)
                observer = ExperimentObserver()

                t0 = time.perf_counter()
                status = planner.solve(budget, observer=observer)
                t1 = time.perf_counter()

                stats['rounds'].append(planner.num_rounds)
                stats['time'].append(t1 - t0)
                if status is PlannerStatus.FOUND:
                    stats['found'] += 1
                    stats['cost'].append(planner.best_control_cost)
                elif status is PlannerStatus.APPROXIMATE:
                    stats['approx'] += 1

                # anytime 曲线只取最长预算
                if budget == max(Cfg.TIME_BUDGETS):
                    for elapsed, kind, cost in observer.solutions:
                        curves.append({'Scenario': name, 'Trial': trial, 'Kind': kind,
                                       'Elapsed': elapsed, 'Cost': cost})

            found_rate = stats['found'] / Cfg.NUM_TRIALS * 100
            approx_rate = stats['approx'] / Cfg.NUM_TRIALS * 100
            mean_cost = np.mean(stats['cost']) if stats['cost'] else float('nan')
            mean_rounds = np.mean(stats['rounds'])
            print(f"{name:<12} | {budget:<10.1f} | {found_rate:<8.1f} | {approx_rate:<8.1f} | "
                  f"{mean_cost:<8.2f} | {mean_rounds:<8.1f}")

            results.append({
                'Scenario': name,
                'Budget': budget,
                'FoundRate': found_rate,
                'ApproxRate': approx_rate,
                'CostMean': mean_cost,
                'RoundsMean': mean_rounds,
                'TimeMean': np.mean(stats['time']),
            })

    return pd.DataFrame(results), pd.DataFrame(curves)


def plot_results(df, df_curves):
    """成功率 / 代价随预算变化 + anytime 代价曲线"""
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))

    for name, group in df.groupby('Scenario'):
        axes[0].plot(group['Budget'], group['FoundRate'], 'o-', label=name)
        axes[1].plot(group['Budget'], group['CostMean'], 's-', label=name)

    axes[0].set_xlabel('Time Budget (s)')
    axes[0].set_ylabel('Found (%)')
    axes[0].set_title('Reliability')
    axes[1].set_xlabel('Time Budget (s)')
    axes[1].set_ylabel('Control Path Cost (m)')
    axes[1].set_title('Optimality')

    if not df_curves.empty:
        control = df_curves[df_curves['Kind'] == 'control']
        for (name, trial), group in control.groupby(['Scenario', 'Trial']):
            axes[2].step(group['Elapsed'], group['Cost'], where='post', alpha=0.6,
                         label=name if trial == 0 else None)
    axes[2].set_xlabel('Elapsed (s)')
    axes[2].set_ylabel('Best Cost (m)')
    axes[2].set_title('Anytime Improvement')

    for ax in axes:
        ax.grid(True, linestyle=':', alpha=0.6)
    axes[0].legend()

    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    print("=== 开始 AIT*-Kinodynamic anytime 实验 ===")
    df_results, df_curves = run_experiment()

    os.makedirs(Cfg.LOG_DIR, exist_ok=True)
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    df_results.to_csv(os.path.join(Cfg.LOG_DIR, f"anytime_summary_{timestamp}.csv"), index=False)
    df_curves.to_csv(os.path.join(Cfg.LOG_DIR, f"anytime_curves_{timestamp}.csv"), index=False)

    print("\n实验结束，正在绘图...")
    plot_results(df_results, df_curves)
