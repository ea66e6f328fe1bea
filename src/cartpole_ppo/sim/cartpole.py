# src/cartpole_ppo/sim/cartpole.py
"""Cart-pole dynamics.

Key ideas:
- State is an immutable `SimState` snapshot; `step` maps (state, action) -> next state.
- Classic point-mass cart-pole equations, semi-implicit Euler with a fixed time step.
- Both velocities are damped every step, the pole angle is wrapped into (-pi, pi],
  and the cart stops dead at the walls.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from ..config import PHYSICS_DEFAULTS

PUSH_LEFT = 0
PUSH_RIGHT = 1
NO_FORCE = 2

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class SimState:
    x: float = 0.0          # cart position
    x_dot: float = 0.0      # cart velocity
    theta: float = 0.0      # pole angle (radians, 0 = upright)
    theta_dot: float = 0.0  # pole angular velocity


def wrap_angle(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    a = (angle + math.pi) % TWO_PI - math.pi
    if a <= -math.pi:
        a += TWO_PI
    return a


class CartPoleModel:
    def __init__(self, params: Optional[Dict] = None, rng: Optional[np.random.Generator] = None):
        p = {**PHYSICS_DEFAULTS, **(params or {})}
        self.gravity = float(p["gravity"])
        self.mass_cart = float(p["mass_cart"])
        self.mass_pole = float(p["mass_pole"])
        self.total_mass = self.mass_cart + self.mass_pole
        self.length = float(p["half_length"])
        self.pole_mass_length = self.mass_pole * self.length
        self.force_mag = float(p["force_mag"])
        self.tau = float(p["tau"])
        self.friction = float(p["friction"])
        self.x_max = float(p["x_max"])
        self.x_threshold = float(p["x_threshold"])
        self.theta_threshold = float(p["theta_threshold"])
        self.rng = rng if rng is not None else np.random.default_rng()

    def force_for(self, action: int) -> float:
        if action == PUSH_RIGHT:
            return self.force_mag
        if action == PUSH_LEFT:
            return -self.force_mag
        return 0.0

    def step(self, state: SimState, action: int) -> SimState:
        """Advance one time step. action: 0 = left, 1 = right, anything else = no force."""
        force = self.force_for(action)
        costheta = math.cos(state.theta)
        sintheta = math.sin(state.theta)

        temp = (force + self.pole_mass_length * state.theta_dot ** 2 * sintheta) / self.total_mass
        theta_acc = (self.gravity * sintheta - costheta * temp) / (
            self.length * (4.0 / 3.0 - self.mass_pole * costheta ** 2 / self.total_mass)
        )
        x_acc = temp - self.pole_mass_length * theta_acc * costheta / self.total_mass

        # semi-implicit Euler: velocities first, then positions from the new velocities
        x_dot = (state.x_dot + self.tau * x_acc) * self.friction
        theta_dot = (state.theta_dot + self.tau * theta_acc) * self.friction
        x = state.x + self.tau * x_dot
        theta = wrap_angle(state.theta + self.tau * theta_dot)

        # inelastic wall collision
        if x < -self.x_max:
            x = -self.x_max
            x_dot = 0.0
        elif x > self.x_max:
            x = self.x_max
            x_dot = 0.0

        return SimState(x=x, x_dot=x_dot, theta=theta, theta_dot=theta_dot)

    def reset(self, start_upright: bool = False, rng: Optional[np.random.Generator] = None,
              noise: float = 1.0) -> SimState:
        """New state with small uniform noise; pole near 0 if start_upright else hanging near pi.

        noise scales every perturbation (0.0 gives an exact rest state).
        """
        rng = rng if rng is not None else self.rng
        theta_noise = (rng.random() * 0.2 - 0.1) * noise
        base_theta = theta_noise if start_upright else math.pi + theta_noise
        x_noise = (rng.random() * 0.1 - 0.05) * noise
        x_dot_noise = (rng.random() * 0.1 - 0.05) * noise
        theta_dot_noise = (rng.random() * 0.1 - 0.05) * noise
        return SimState(
            x=x_noise,
            x_dot=x_dot_noise,
            theta=wrap_angle(base_theta),
            theta_dot=theta_dot_noise,
        )
