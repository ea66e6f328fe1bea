import numpy as np
import pytest

from cartpole_ppo.nn.layers import DenseLayer, Network, activate, relu, softmax


def test_softmax_is_distribution():
    rng = np.random.default_rng(0)
    for z in [rng.normal(size=2), rng.normal(scale=50, size=5), np.array([1000.0, -1000.0])]:
        p = softmax(z)
        assert (p >= 0).all()
        assert abs(p.sum() - 1.0) < 1e-5


def test_activations():
    z = np.array([-2.0, 0.0, 3.0])
    assert np.array_equal(relu(z), np.array([0.0, 0.0, 3.0]))
    assert np.array_equal(activate(z, "linear"), z)
    assert np.allclose(activate(z, "tanh"), np.tanh(z))
    with pytest.raises(ValueError):
        activate(z, "sigmoid")


def test_dense_layer_init():
    layer = DenseLayer(5, 64, "relu", rng=np.random.default_rng(1))
    limit = np.sqrt(6.0 / (5 + 64))
    assert layer.weights.shape == (64, 5)
    assert (np.abs(layer.weights) <= limit).all()
    assert (layer.biases == 0).all()
    assert (layer.weight_grads == 0).all() and (layer.bias_grads == 0).all()
    assert layer.t == 0


def test_unknown_activation_rejected():
    with pytest.raises(ValueError):
        DenseLayer(2, 2, "gelu")


def test_input_shape_checked():
    layer = DenseLayer(3, 2, rng=np.random.default_rng(0))
    with pytest.raises(ValueError):
        layer.forward(np.ones(4))


def test_network_forward():
    rng = np.random.default_rng(2)
    actor = Network(5, 16, 2, "softmax", rng=rng)
    critic = Network(5, 16, 1, "linear", rng=rng)
    x = rng.normal(size=5)
    p = actor.forward(x)
    assert p.shape == (2,)
    assert abs(p.sum() - 1.0) < 1e-5
    v = critic.forward(x)
    assert v.shape == (1,)
    expected = critic.output.weights @ np.maximum(critic.hidden.weights @ x + critic.hidden.biases, 0) + critic.output.biases
    assert np.allclose(v, expected)


def test_same_seed_same_weights():
    a = Network(5, 8, 2, "softmax", rng=np.random.default_rng(7))
    b = Network(5, 8, 2, "softmax", rng=np.random.default_rng(7))
    for la, lb in zip(a.layers, b.layers):
        assert np.array_equal(la.weights, lb.weights)


def test_scale_and_zero_gradients():
    net = Network(3, 4, 1, rng=np.random.default_rng(0))
    for layer in net.layers:
        layer.weight_grads += 2.0
        layer.bias_grads += 4.0
    net.scale_gradients(0.5)
    assert (net.hidden.weight_grads == 1.0).all()
    assert (net.output.bias_grads == 2.0).all()
    net.zero_grad()
    assert all((l.weight_grads == 0).all() and (l.bias_grads == 0).all() for l in net.layers)
