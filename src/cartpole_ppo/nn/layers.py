# src/cartpole_ppo/nn/layers.py
"""
Dense layers and a fixed two-layer network built on plain numpy arrays.

The network is a pure evaluator: `forward` only. Gradient and Adam moment
buffers live on each layer so the agent can accumulate into them and the
optimizer can consume them; no backprop logic lives here.
"""
from typing import List, Optional

import numpy as np

ACTIVATIONS = ("relu", "softmax", "tanh", "linear")


def relu(z: np.ndarray) -> np.ndarray:
    return np.maximum(z, 0.0)


def softmax(z: np.ndarray) -> np.ndarray:
    """Numerically shifted softmax."""
    e = np.exp(z - np.max(z))
    return e / e.sum()


def activate(z: np.ndarray, activation: str) -> np.ndarray:
    if activation == "relu":
        return relu(z)
    if activation == "softmax":
        return softmax(z)
    if activation == "tanh":
        return np.tanh(z)
    if activation == "linear":
        return z
    raise ValueError(f"Unknown activation '{activation}'")


class DenseLayer:
    def __init__(self, input_size: int, output_size: int, activation: str = "relu",
                 rng: Optional[np.random.Generator] = None):
        if activation not in ACTIVATIONS:
            raise ValueError(f"Unknown activation '{activation}', expected one of {ACTIVATIONS}")
        rng = rng if rng is not None else np.random.default_rng()
        self.input_size = input_size
        self.output_size = output_size
        self.activation = activation

        # weights: [output_size, input_size], Glorot-uniform
        limit = np.sqrt(6.0 / (input_size + output_size))
        self.weights = rng.random((output_size, input_size)) * 2 * limit - limit
        self.biases = np.zeros(output_size)

        self.weight_grads = np.zeros_like(self.weights)
        self.bias_grads = np.zeros_like(self.biases)

        # Adam state
        self.m_w = np.zeros_like(self.weights)
        self.v_w = np.zeros_like(self.weights)
        self.m_b = np.zeros_like(self.biases)
        self.v_b = np.zeros_like(self.biases)
        self.t = 0

    def pre_activation(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.input_size,):
            raise ValueError(f"Expected input of shape ({self.input_size},), got {x.shape}")
        return self.weights @ x + self.biases

    def forward(self, x: np.ndarray) -> np.ndarray:
        return activate(self.pre_activation(x), self.activation)

    def zero_grad(self):
        self.weight_grads.fill(0.0)
        self.bias_grads.fill(0.0)


class Network:
    """Hidden ReLU layer followed by an output layer with a selectable activation."""

    def __init__(self, input_size: int, hidden_size: int, output_size: int,
                 output_activation: str = "linear", rng: Optional[np.random.Generator] = None):
        rng = rng if rng is not None else np.random.default_rng()
        self.input_size = input_size
        self.hidden_size = hidden_size
        self.output_size = output_size
        self.output_activation = output_activation
        self.hidden = DenseLayer(input_size, hidden_size, "relu", rng=rng)
        self.output = DenseLayer(hidden_size, output_size, output_activation, rng=rng)

    def forward(self, x: np.ndarray) -> np.ndarray:
        return self.output.forward(self.hidden.forward(x))

    @property
    def layers(self) -> List[DenseLayer]:
        return [self.hidden, self.output]

    def zero_grad(self):
        for layer in self.layers:
            layer.zero_grad()

    def scale_gradients(self, scale: float):
        for layer in self.layers:
            layer.weight_grads *= scale
            layer.bias_grads *= scale
