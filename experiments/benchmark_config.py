import sys
import os

# Ensure kinolab can be imported when the script is run without installing the package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kinolab.vehicles.config import AckermannConfig
from kinolab.types import State
from kinolab.collision import CollisionConfig, CollisionMethod
from kinolab.planning.config import AITStarKinConfig, ConnectionStrategy

class BenchmarkConfig:
    # --- Experiment Settings ---
    TIME_BUDGETS = [0.5, 1.0, 2.0, 4.0]     # Wall-clock budgets to test [s]
    NUM_TRIALS = 5                          # Number of trials per budget / scenario
    RANDOM_SEED_BASE = 1000                 # Base seed for reproducibility

    # --- Output Paths ---
    _BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    _PROJECT_DIR = os.path.dirname(_BASE_DIR)
    LOG_DIR = os.path.join(_PROJECT_DIR, "logs", "experiments_anytime")

    # --- Map Parameters ---
    X_MIN, X_MAX = -20.0, 20.0      # meters
    Y_MIN, Y_MAX = -20.0, 20.0      # meters
    RESOLUTION = 0.1                # meters/cell

    # Obstacles: (x_min, y_min, x_max, y_max) per scenario
    SCENARIOS = {
        'open_field': [],
        'slalom': [
            (3.0, -20.0, 4.0, 2.0),
            (7.0, -2.0, 8.0, 20.0),
        ],
        'wall': [
            (4.0, -20.0, 6.0, 20.0),
        ],
    }

    # --- Start & Goal ---
    START_STATE = State(0.0, 0.0, 0.0, 0.0)
    GOAL_STATE = State(10.0, 0.0, 0.0, 0.0)
    GOAL_TOLERANCE = 0.05

    # --- Vehicle Configuration ---
    VEHICLE_CONFIG = AckermannConfig(
        wheelbase=1.0,
        max_steer_deg=35.0,
        width=0.8,
        front_hang=0.3,
        rear_hang=0.2,
        safe_margin=0.1,
        max_velocity=2.0,
        min_velocity=0.0,
        max_acceleration=1.0
    )

    # --- Collision Checking ---
    COLLISION_CONFIG = CollisionConfig(method=CollisionMethod.MULTI_CIRCLE)

    # --- Algorithm Parameters ---
    @staticmethod
    def planner_config(seed: int) -> AITStarKinConfig:
        return AITStarKinConfig(
            num_threads=1,
            seed=seed,
            batch_size=200,
            goal_bias=0.1,
            connection_strategy=ConnectionStrategy.RADIUS,
            max_dist_between_vertices=3.0,
            min_dist_between_vertices=0.1,
            propagation_step_size=0.1,
            max_control_duration=30,
            goal_tolerance=BenchmarkConfig.GOAL_TOLERANCE,
            max_search_retries=16,
        )
