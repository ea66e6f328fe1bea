# src/cartpole_ppo/rl/ppo.py
"""
On-policy PPO agent with hand-written backpropagation.

Key ideas:
- Actor (softmax over actions) and critic (linear scalar) share the same two-layer shape.
- `store` appends to an ordered trajectory buffer and runs `update` synchronously
  once the buffer reaches `batch_size`.
- `update` = GAE over cached values -> advantage normalization -> K full-batch epochs
  of clipped-surrogate + entropy (actor) and MSE (critic) gradients -> Adam -> clear buffer.

Note: the probability stored at sampling time is used as-is in the ratio. There is no
floor on it, so a very unlikely sampled action can produce a very large ratio.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config import ADAM_DEFAULTS, EPS, LOG_EPS, NETWORK_DEFAULTS, PPO_DEFAULTS
from ..nn.adam import AdamOptimizer
from ..nn.layers import Network, relu, softmax
from ..utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Experience:
    state: np.ndarray
    action: int
    reward: float
    next_state: np.ndarray
    done: bool
    prob: float   # probability of `action` under the policy when it was sampled
    value: float  # critic estimate of `state` when it was sampled


@dataclass(frozen=True)
class ActionResult:
    action: int
    prob: float
    value: float


@dataclass(frozen=True)
class UpdateStats:
    samples: int
    epochs: int
    value_loss: float
    mean_ratio: float
    clip_fraction: float
    entropy: float


def compute_gae(
    rewards: Sequence[float],
    values: Sequence[float],
    dones: Sequence[bool],
    last_value: float,
    gamma: float = PPO_DEFAULTS["gamma"],
    lam: float = PPO_DEFAULTS["gae_lambda"],
) -> Tuple[np.ndarray, np.ndarray]:
    """GAE(lambda) backward pass over an ordered trajectory.

    values are the critic estimates cached at sampling time; V(next) for step i is
    values[i+1], except for the final step where `last_value` is used.
    Returns (advantages, returns) with returns = advantages + values.
    """
    rewards = np.asarray(rewards, dtype=float)
    values = np.asarray(values, dtype=float)
    n = len(rewards)
    advantages = np.zeros(n)
    gae = 0.0
    for i in reversed(range(n)):
        next_value = last_value if i == n - 1 else values[i + 1]
        mask = 0.0 if dones[i] else 1.0
        delta = rewards[i] + gamma * next_value * mask - values[i]
        gae = delta + gamma * lam * mask * gae
        advantages[i] = gae
    return advantages, advantages + values


def normalize_advantages(advantages: np.ndarray, eps: float = EPS) -> np.ndarray:
    adv = np.asarray(advantages, dtype=float)
    return (adv - adv.mean()) / (adv.std() + eps)


def surrogate_scale(ratio: float, advantage: float, old_prob: float,
                    clip_eps: float = PPO_DEFAULTS["clip_eps"]) -> float:
    """d(objective)/d(new_prob) for the clipped surrogate.

    Zero once the ratio has moved past the clip range in the direction the
    advantage favours, otherwise advantage / old_prob.
    """
    saturated = (advantage > 0 and ratio > 1 + clip_eps) or (advantage < 0 and ratio < 1 - clip_eps)
    if saturated:
        return 0.0
    return advantage / old_prob


def entropy_and_grad(probs: np.ndarray, log_eps: float = LOG_EPS) -> Tuple[float, np.ndarray]:
    """Categorical entropy H = -sum p ln p and dH/dlogits = -p (ln p + H)."""
    log_p = np.where(probs > log_eps, np.log(np.maximum(probs, log_eps)), 0.0)
    h = float(-np.sum(probs * log_p))
    return h, -probs * (log_p + h)


class PPOAgent:
    def __init__(
        self,
        input_size: int = NETWORK_DEFAULTS["input_size"],
        hidden_size: int = NETWORK_DEFAULTS["hidden_size"],
        action_size: int = NETWORK_DEFAULTS["action_size"],
        params: Optional[Dict] = None,
        adam_params: Optional[Dict] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        p = {**PPO_DEFAULTS, **(params or {})}
        if int(p["batch_size"]) <= 0:
            raise ValueError("batch_size must be positive")
        if int(p["k_epochs"]) < 1:
            raise ValueError("k_epochs must be at least 1")
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.input_size = input_size
        self.action_size = action_size

        self.actor = Network(input_size, hidden_size, action_size, "softmax", rng=self.rng)
        self.critic = Network(input_size, hidden_size, 1, "linear", rng=self.rng)
        adam = {**ADAM_DEFAULTS, **(adam_params or {})}
        self.actor_opt = AdamOptimizer(lr=float(p["actor_lr"]), **adam)
        self.critic_opt = AdamOptimizer(lr=float(p["critic_lr"]), **adam)

        self.gamma = float(p["gamma"])
        self.lam = float(p["gae_lambda"])
        self.clip_eps = float(p["clip_eps"])
        self.k_epochs = int(p["k_epochs"])
        self.value_coef = float(p["value_coef"])
        self.batch_size = int(p["batch_size"])
        self._entropy_coef = 0.0
        self.set_entropy_coefficient(float(p["entropy_coef"]))

        self._buffer: List[Experience] = []
        self.update_count = 0
        self.last_update_stats: Optional[UpdateStats] = None

    @property
    def entropy_coef(self) -> float:
        return self._entropy_coef

    def set_entropy_coefficient(self, weight: float):
        self._entropy_coef = max(0.0, float(weight))

    @property
    def buffer(self) -> Tuple[Experience, ...]:
        return tuple(self._buffer)

    def clear_buffer(self):
        self._buffer.clear()

    def get_action(self, state: np.ndarray) -> ActionResult:
        """Sample an action from the current policy by inverse-CDF sampling."""
        probs = self.actor.forward(state)
        value = float(self.critic.forward(state)[0])

        r = self.rng.random()
        cum = 0.0
        action = len(probs) - 1
        for i, p in enumerate(probs):
            cum += p
            if r < cum:
                action = i
                break
        return ActionResult(action=action, prob=float(probs[action]), value=value)

    def store(self, experience: Experience):
        if not 0 <= experience.action < self.action_size:
            raise ValueError(f"action {experience.action} outside [0, {self.action_size})")
        self._buffer.append(experience)
        if len(self._buffer) >= self.batch_size:
            self.update()

    def update(self) -> Optional[UpdateStats]:
        if not self._buffer:
            return None
        memory = self._buffer
        n = len(memory)

        last = memory[-1]
        last_value = 0.0 if last.done else float(self.critic.forward(last.next_state)[0])
        advantages, returns = compute_gae(
            [e.reward for e in memory],
            [e.value for e in memory],
            [e.done for e in memory],
            last_value,
            self.gamma,
            self.lam,
        )
        advantages = normalize_advantages(advantages)

        # gradients must start from zero for the first epoch
        self.actor.zero_grad()
        self.critic.zero_grad()

        stats = None
        for _ in range(self.k_epochs):
            value_loss = 0.0
            ratio_sum = 0.0
            clipped = 0
            entropy_sum = 0.0
            for i, item in enumerate(memory):
                state = np.asarray(item.state, dtype=float)
                value = self._accumulate_critic(state, returns[i])
                value_loss += (value - returns[i]) ** 2

                ratio, was_clipped, h = self._accumulate_actor(state, item.action, item.prob, advantages[i])
                ratio_sum += ratio
                clipped += int(was_clipped)
                entropy_sum += h

            scale = 1.0 / n
            self.actor.scale_gradients(scale)
            self.critic.scale_gradients(scale)
            self.actor_opt.step(self.actor.layers)
            self.critic_opt.step(self.critic.layers)

            stats = UpdateStats(
                samples=n,
                epochs=self.k_epochs,
                value_loss=value_loss / n,
                mean_ratio=ratio_sum / n,
                clip_fraction=clipped / n,
                entropy=entropy_sum / n,
            )

        self._buffer.clear()
        self.update_count += 1
        self.last_update_stats = stats
        log.debug(
            "PPO update %d: samples=%d value_loss=%.5f ratio=%.4f clip_frac=%.3f entropy=%.4f",
            self.update_count, stats.samples, stats.value_loss, stats.mean_ratio,
            stats.clip_fraction, stats.entropy,
        )
        return stats

    def _accumulate_critic(self, state: np.ndarray, target: float) -> float:
        """MSE gradient for one sample, backpropagated into the critic's gradient buffers."""
        hidden, out = self.critic.hidden, self.critic.output
        z1 = hidden.pre_activation(state)
        a1 = relu(z1)
        value = float(out.pre_activation(a1)[0])

        d_out = self.value_coef * 2.0 * (value - target)
        out.weight_grads[0] += d_out * a1
        out.bias_grads[0] += d_out

        d_hidden = d_out * out.weights[0] * (z1 > 0)
        hidden.weight_grads += np.outer(d_hidden, state)
        hidden.bias_grads += d_hidden
        return value

    def _accumulate_actor(self, state: np.ndarray, action: int, old_prob: float,
                          advantage: float) -> Tuple[float, bool, float]:
        """Clipped-surrogate + entropy gradient for one sample.

        Returns (ratio, clipped, entropy).
        """
        hidden, out = self.actor.hidden, self.actor.output
        z1 = hidden.pre_activation(state)
        a1 = relu(z1)
        probs = softmax(out.pre_activation(a1))
        new_prob = probs[action]

        ratio = new_prob / old_prob
        d_obj_d_prob = surrogate_scale(ratio, advantage, old_prob, self.clip_eps)

        # d new_prob / d z_j = new_prob * (1[j == action] - p_j)
        one_hot = np.zeros_like(probs)
        one_hot[action] = 1.0
        pg_term = d_obj_d_prob * new_prob * (one_hot - probs)
        h, entropy_grad = entropy_and_grad(probs)
        d_obj = pg_term + self._entropy_coef * entropy_grad

        # maximize objective == minimize its negation
        d_loss = -d_obj
        out.weight_grads += np.outer(d_loss, a1)
        out.bias_grads += d_loss

        d_hidden = (out.weights.T @ d_loss) * (z1 > 0)
        hidden.weight_grads += np.outer(d_hidden, state)
        hidden.bias_grads += d_hidden
        return float(ratio), d_obj_d_prob == 0.0 and advantage != 0.0, h
