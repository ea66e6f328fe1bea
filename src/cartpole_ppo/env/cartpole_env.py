# src/cartpole_ppo/env/cartpole_env.py
"""Gymnasium-compatible swing-up environment around `CartPoleModel`.

Key ideas:
- Observation is a 5-feature vector: scaled position/velocities plus sin/cos of the angle,
  so the policy never sees the angle discontinuity at +-pi.
- Actions: 0 = push left, 1 = push right, 2 = no force.
- Reward is shaped towards an upright pole with the cart near the centre and clamped.
- Episodes are truncated after `max_steps`; they terminate early only if the pole
  leaves the allowed angle range.
"""

import math
from typing import Dict, Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from ..config import PHYSICS_DEFAULTS, REWARD_DEFAULTS, TRAIN_DEFAULTS
from ..sim.cartpole import CartPoleModel, SimState


def build_state_vector(state: SimState, x_threshold: float = PHYSICS_DEFAULTS["x_threshold"]) -> np.ndarray:
    return np.array([
        state.x / x_threshold,
        state.x_dot / 2.0,
        math.sin(state.theta),
        math.cos(state.theta),
        state.theta_dot / 4.0,
    ], dtype=float)


def shaped_reward(
    state: SimState,
    step_index: int,
    max_steps: int = TRAIN_DEFAULTS["max_steps"],
    tipped_over: bool = False,
    x_threshold: float = PHYSICS_DEFAULTS["x_threshold"],
    params: Optional[Dict] = None,
) -> float:
    """Reward for arriving in `state` at episode step `step_index`."""
    p = {**REWARD_DEFAULTS, **(params or {})}
    upright_alignment = math.cos(state.theta)  # -1 hanging, +1 upright
    pos_frac = min(max(abs(state.x) / x_threshold, 0.0), 1.0)

    upright_term = p["upright_weight"] * upright_alignment
    center_penalty = p["center_weight"] * pos_frac ** 2
    edge_proximity = min(max(pos_frac - p["wall_hug_start"], 0.0), 1.0)
    wall_hug_penalty = p["wall_hug_weight"] * edge_proximity ** 3
    centered_balance_bonus = 0.0
    if abs(state.theta) < p["centered_balance_angle"]:
        centered_balance_bonus = p["centered_balance_weight"] * (1.0 - pos_frac)
    vel_penalty = p["velocity_weight"] * (state.x_dot / p["velocity_scale"]) ** 2
    ang_vel_penalty = p["velocity_weight"] * (state.theta_dot / p["ang_velocity_scale"]) ** 2

    balanced = (
        abs(state.theta) < p["balance_angle"]
        and abs(state.x) < p["balance_x"]
        and abs(state.theta_dot) < p["balance_speed"]
        and abs(state.x_dot) < p["balance_speed"]
    )
    balance_bonus = p["balance_bonus"] if balanced else 0.0
    quick_balance_bonus = 0.0
    if balanced:
        # earlier stable balance earns more
        speed_factor = min(max((max_steps - step_index) / max_steps, 0.0), 1.0)
        quick_balance_bonus = p["quick_balance_weight"] * speed_factor

    reward = (upright_term - center_penalty - wall_hug_penalty - vel_penalty - ang_vel_penalty
              + centered_balance_bonus + balance_bonus + quick_balance_bonus)
    if tipped_over:
        reward -= p["tip_over_penalty"]
    return float(min(max(reward, -p["clip"]), p["clip"]))


class CartPoleSwingUpEnv(gym.Env):
    metadata = {"render_modes": ["human"], "render_fps": 50}

    def __init__(
        self,
        physics_params: Optional[Dict] = None,
        reward_params: Optional[Dict] = None,
        max_steps: int = TRAIN_DEFAULTS["max_steps"],
        start_upright: bool = False,
    ):
        super().__init__()
        self.model = CartPoleModel(physics_params)
        self.reward_params = {**REWARD_DEFAULTS, **(reward_params or {})}
        self.max_steps = max_steps
        self.start_upright = start_upright

        self.observation_space = spaces.Box(low=-np.inf, high=np.inf, shape=(5,), dtype=np.float64)
        self.action_space = spaces.Discrete(3)

        self.state = SimState()
        self.steps = 0

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        options = options or {}
        upright = bool(options.get("start_upright", self.start_upright))
        noise = float(options.get("noise", 1.0))
        self.state = self.model.reset(start_upright=upright, rng=self.np_random, noise=noise)
        self.steps = 0
        return self._get_obs(), {"state": self.state}

    def _get_obs(self) -> np.ndarray:
        return build_state_vector(self.state, self.model.x_threshold)

    def tipped_over(self, state: SimState) -> bool:
        return abs(state.theta) > self.model.theta_threshold

    def step(self, action):
        next_state = self.model.step(self.state, int(action))
        step_index = self.steps
        tipped = self.tipped_over(next_state)
        reward = shaped_reward(
            next_state,
            step_index,
            self.max_steps,
            tipped_over=tipped,
            x_threshold=self.model.x_threshold,
            params=self.reward_params,
        )
        self.steps += 1
        self.state = next_state
        truncated = self.steps >= self.max_steps
        return self._get_obs(), reward, tipped, truncated, {"state": next_state, "steps": self.steps}

    def render(self):
        s = self.state
        print(f"step={self.steps} x={s.x:+.3f} x_dot={s.x_dot:+.3f} theta={s.theta:+.3f} theta_dot={s.theta_dot:+.3f}")
