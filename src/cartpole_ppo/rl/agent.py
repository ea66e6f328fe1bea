# src/cartpole_ppo/rl/agent.py
"""
Simple policy wrappers. Expose propose(obs) used by evaluation rollouts and the training session.
"""
from typing import Optional

import numpy as np

from .ppo import PPOAgent

class RandomPolicy:
    def __init__(self, n_actions: int = 2, seed: Optional[int] = 0):
        self.n_actions = n_actions
        self.rng = np.random.default_rng(seed)

    def propose(self, obs):
        return int(self.rng.integers(0, self.n_actions))

class GreedyPolicy:
    """Most likely action under the agent's actor (ties go to the right push)."""

    def __init__(self, agent: PPOAgent):
        self.agent = agent

    def propose(self, obs):
        probs = self.agent.actor.forward(np.asarray(obs, dtype=float))
        return 0 if probs[0] > probs[1] else 1
