# src/cartpole_ppo/eval/metrics.py
"""Episode-reward summaries and evaluation rollouts."""

import math
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

def rolling_mean(history: Sequence[float], window: int = 10) -> pd.Series:
    """Trailing mean of per-episode rewards (shorter windows at the start)."""
    return pd.Series(list(history), dtype=float).rolling(window, min_periods=1).mean()

def summarize_rewards(history: Sequence[float], window: int = 10) -> Dict[str, Any]:
    r = np.array(history, dtype=float)
    if r.size == 0:
        return {"episodes": 0, "mean": 0.0, "best": 0.0, "last": 0.0, "rolling_mean": 0.0}
    trailing = rolling_mean(r, window)
    return {
        "episodes": int(r.size),
        "mean": float(r.mean()),
        "best": float(r.max()),
        "last": float(r[-1]),
        "rolling_mean": float(trailing.iloc[-1]),
    }

def run_episode(
    env,
    policy,
    max_steps: Optional[int] = None,
    start_upright: bool = False,
    upright_cos: float = 0.95,
) -> Dict[str, Any]:
    """
    Roll one episode with `policy.propose(obs)`.
    env must follow the gymnasium API and expose the raw state in info["state"].
    """
    obs, info = env.reset(options={"start_upright": start_upright})
    rewards = []
    upright = 0
    step = 0
    done = False
    while not done:
        action = policy.propose(obs)
        obs, reward, terminated, truncated, info = env.step(action)
        done = terminated or truncated
        rewards.append(reward)
        if math.cos(info["state"].theta) > upright_cos:
            upright += 1
        step += 1
        if max_steps and step >= max_steps:
            break
    rewards = np.array(rewards)
    return {
        "rewards": rewards,
        "total_reward": float(rewards.sum()) if rewards.size else 0.0,
        "steps": step,
        "upright_fraction": upright / step if step else 0.0,
    }
