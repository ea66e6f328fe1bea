# src/cartpole_ppo/config.py
"""Global configuration and defaults used across the project."""

import math
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML

# Cart-pole physics (half_length is half the pole's length)
PHYSICS_DEFAULTS = {
    "gravity": 9.8,
    "mass_cart": 1.0,
    "mass_pole": 0.1,
    "half_length": 0.5,
    "force_mag": 7.0,
    "tau": 0.02,            # seconds between state updates
    "friction": 0.99,       # multiplicative damping on both velocities
    "x_max": 2.5,           # wall position
    "x_threshold": 2.4,     # reference track half-width for scaling
    "theta_threshold": math.pi,  # full swing range allowed
}

# Actor / critic network shapes
NETWORK_DEFAULTS = {
    "input_size": 5,
    "hidden_size": 64,
    "action_size": 2,
}

# PPO defaults
PPO_DEFAULTS = {
    "gamma": 0.99,
    "gae_lambda": 0.95,
    "clip_eps": 0.2,
    "k_epochs": 4,
    "value_coef": 0.5,
    "entropy_coef": 0.015,
    "batch_size": 160,
    "actor_lr": 0.003,
    "critic_lr": 0.0045,
}

ADAM_DEFAULTS = {
    "beta1": 0.9,
    "beta2": 0.999,
    "eps": 1e-8,
}

# Shaped reward used by the training environment
REWARD_DEFAULTS = {
    "upright_weight": 2.0,
    "center_weight": 2.0,
    "wall_hug_weight": 6.0,
    "wall_hug_start": 0.8,   # fraction of x_threshold
    "velocity_weight": 0.15,
    "velocity_scale": 3.0,
    "ang_velocity_scale": 6.0,
    "centered_balance_angle": 0.12,
    "centered_balance_weight": 4.0,
    "balance_angle": 0.08,
    "balance_x": 0.2,
    "balance_speed": 0.3,
    "balance_bonus": 3.0,
    "quick_balance_weight": 5.0,
    "tip_over_penalty": 3.0,
    "clip": 10.0,
}

# Episode / session defaults
TRAIN_DEFAULTS = {
    "max_steps": 700,
    "log_every": 10,
    "seed": 0,
}

# Small numeric epsilons
EPS = 1e-8
LOG_EPS = 1e-7

SECTIONS = {
    "physics": PHYSICS_DEFAULTS,
    "network": NETWORK_DEFAULTS,
    "ppo": PPO_DEFAULTS,
    "adam": ADAM_DEFAULTS,
    "reward": REWARD_DEFAULTS,
    "train": TRAIN_DEFAULTS,
}


def merge_config(overrides: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Dict[str, Any]]:
    """Merge per-section overrides on top of the defaults.

    Unknown sections or keys raise ValueError so typos in experiment files
    do not silently fall back to defaults.
    """
    overrides = overrides or {}
    merged = {}
    for name, defaults in SECTIONS.items():
        section = overrides.get(name) or {}
        unknown = set(section) - set(defaults)
        if unknown:
            raise ValueError(f"Unknown keys in [{name}]: {sorted(unknown)}")
        merged[name] = {**defaults, **section}
    extra = set(overrides) - set(SECTIONS)
    if extra:
        raise ValueError(f"Unknown config sections: {sorted(extra)}")
    return merged


def load_config(path) -> Dict[str, Dict[str, Any]]:
    """Load a YAML experiment file, e.g.

        ppo:
          batch_size: 256
        train:
          seed: 3
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{path} not found")
    yaml = YAML(typ="safe")
    with path.open("r") as fh:
        data = yaml.load(fh)
    return merge_config(dict(data or {}))
