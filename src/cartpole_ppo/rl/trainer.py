# src/cartpole_ppo/rl/trainer.py
"""
Training session: the control loop that drives the environment and the PPO agent.

A session is constructed explicitly and owns its environment, agent and episode
bookkeeping. Callers step it one control tick at a time (`train_step`,
`eval_step`, `manual_step`) or run whole episodes with `train`. The first
training tick after eval or manual ticks starts a fresh episode (same as `reset`),
so steps taken outside training never count towards a training episode.
"""
from typing import Dict, Optional, Tuple

import numpy as np
from tqdm import tqdm

from ..config import merge_config
from ..env.cartpole_env import CartPoleSwingUpEnv
from ..sim.cartpole import NO_FORCE, SimState
from ..utils.logging import get_logger
from .agent import GreedyPolicy
from .ppo import Experience, PPOAgent

log = get_logger(__name__)

class TrainingSession:
    def __init__(self, config: Optional[Dict] = None, seed: Optional[int] = None):
        cfg = merge_config(config)
        self.config = cfg
        seed = cfg["train"]["seed"] if seed is None else seed
        self.env = CartPoleSwingUpEnv(
            physics_params=cfg["physics"],
            reward_params=cfg["reward"],
            max_steps=int(cfg["train"]["max_steps"]),
        )
        net = cfg["network"]
        self.agent = PPOAgent(
            input_size=int(net["input_size"]),
            hidden_size=int(net["hidden_size"]),
            action_size=int(net["action_size"]),
            params=cfg["ppo"],
            adam_params=cfg["adam"],
            rng=np.random.default_rng(seed),
        )
        self.greedy = GreedyPolicy(self.agent)
        self.log_every = int(cfg["train"]["log_every"])

        self._obs, _ = self.env.reset(seed=seed)
        self._episode_count = 0
        self._reward_history = []
        self._episode_reward = 0.0
        self._mode = "train"

    # read-only views for a display layer
    @property
    def state(self) -> SimState:
        return self.env.state

    @property
    def episode_count(self) -> int:
        return self._episode_count

    @property
    def reward_history(self) -> Tuple[float, ...]:
        return tuple(self._reward_history)

    @property
    def steps_in_episode(self) -> int:
        return self.env.steps

    def train_step(self) -> bool:
        """One on-policy control tick. Returns True when it finished an episode."""
        if self._mode != "train":
            self.reset()
            self._mode = "train"
        obs = self._obs
        choice = self.agent.get_action(obs)
        next_obs, reward, terminated, truncated, _ = self.env.step(choice.action)
        done = terminated or truncated

        self.agent.store(Experience(
            state=obs,
            action=choice.action,
            reward=reward,
            next_state=next_obs,
            done=done,
            prob=choice.prob,
            value=choice.value,
        ))
        self._episode_reward += reward
        self._obs = next_obs

        if done:
            self._finish_episode()
        return done

    def _finish_episode(self):
        self._episode_count += 1
        self._reward_history.append(self._episode_reward)
        if self._episode_count % self.log_every == 0:
            log.info("Episode %d finished. Reward: %.2f Steps: %d",
                     self._episode_count, self._episode_reward, self.env.steps)
        self._obs, _ = self.env.reset()
        self._episode_reward = 0.0

    def eval_step(self, override: Optional[int] = None) -> SimState:
        """Greedy tick; `override` (0/1) replaces the policy's choice, e.g. for a held key."""
        self._mode = "eval"
        action = self.greedy.propose(self._obs)
        if override in (0, 1):
            action = override
        self._obs, _, terminated, _, _ = self.env.step(action)
        if terminated:
            self._obs, _ = self.env.reset(options={"start_upright": False})
        return self.env.state

    def manual_step(self, action: int = NO_FORCE) -> SimState:
        self._mode = "manual"
        self._obs, _, _, _, _ = self.env.step(action)
        return self.env.state

    def reset(self):
        """Hanging-down restart; drops any partially collected batch."""
        self._obs, _ = self.env.reset(options={"start_upright": False})
        self.agent.clear_buffer()
        self._episode_reward = 0.0

    def train(self, episodes: int, progress: bool = True) -> Tuple[float, ...]:
        target = self._episode_count + episodes
        with tqdm(total=episodes, desc="train", disable=not progress) as bar:
            while self._episode_count < target:
                if self.train_step():
                    bar.update(1)
                    bar.set_postfix(reward=f"{self._reward_history[-1]:.1f}", updates=self.agent.update_count)
        return self.reward_history
