# src/cartpole_ppo/nn/adam.py
"""Adam update over the gradient buffers accumulated on dense layers."""

from typing import Iterable

import numpy as np

from ..config import ADAM_DEFAULTS
from .layers import DenseLayer


class AdamOptimizer:
    def __init__(self, lr: float = 0.001, beta1: float = ADAM_DEFAULTS["beta1"],
                 beta2: float = ADAM_DEFAULTS["beta2"], eps: float = ADAM_DEFAULTS["eps"]):
        self.lr = lr
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps

    def step(self, layers: Iterable[DenseLayer]):
        """Apply one update per layer from its (already averaged) gradients, then zero them."""
        for layer in layers:
            layer.t += 1
            bc1 = 1.0 - self.beta1 ** layer.t
            bc2 = 1.0 - self.beta2 ** layer.t

            g = layer.weight_grads
            layer.m_w[:] = self.beta1 * layer.m_w + (1.0 - self.beta1) * g
            layer.v_w[:] = self.beta2 * layer.v_w + (1.0 - self.beta2) * g * g
            layer.weights -= self.lr * (layer.m_w / bc1) / (np.sqrt(layer.v_w / bc2) + self.eps)

            g = layer.bias_grads
            layer.m_b[:] = self.beta1 * layer.m_b + (1.0 - self.beta1) * g
            layer.v_b[:] = self.beta2 * layer.v_b + (1.0 - self.beta2) * g * g
            layer.biases -= self.lr * (layer.m_b / bc1) / (np.sqrt(layer.v_b / bc2) + self.eps)

            layer.zero_grad()
