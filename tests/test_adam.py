import numpy as np

from cartpole_ppo.nn.adam import AdamOptimizer
from cartpole_ppo.nn.layers import Network


def _network_with_grads(seed=0):
    rng = np.random.default_rng(seed)
    net = Network(4, 6, 2, "softmax", rng=rng)
    for layer in net.layers:
        # magnitudes away from zero so eps does not matter
        for g in (layer.weight_grads, layer.bias_grads):
            g[:] = rng.uniform(0.1, 1.0, size=g.shape) * rng.choice([-1.0, 1.0], size=g.shape)
    return net


def test_gradients_zero_after_step():
    net = _network_with_grads()
    AdamOptimizer(lr=0.01).step(net.layers)
    for layer in net.layers:
        assert (layer.weight_grads == 0).all()
        assert (layer.bias_grads == 0).all()
        assert layer.t == 1


def test_first_step_moves_by_lr_against_gradient():
    net = _network_with_grads(1)
    lr = 0.003
    before = [(l.weights.copy(), l.biases.copy(), np.sign(l.weight_grads), np.sign(l.bias_grads)) for l in net.layers]
    AdamOptimizer(lr=lr).step(net.layers)
    for layer, (w, b, gw, gb) in zip(net.layers, before):
        assert np.allclose(layer.weights, w - lr * gw, rtol=0, atol=1e-9)
        assert np.allclose(layer.biases, b - lr * gb, rtol=0, atol=1e-9)


def test_zero_gradient_leaves_parameters():
    net = Network(4, 6, 1, rng=np.random.default_rng(3))
    before = [l.weights.copy() for l in net.layers]
    AdamOptimizer(lr=0.1).step(net.layers)
    for layer, w in zip(net.layers, before):
        assert np.array_equal(layer.weights, w)


def test_moments_follow_update_rule():
    net = _network_with_grads(4)
    layer = net.output
    g = layer.weight_grads.copy()
    opt = AdamOptimizer(lr=0.01, beta1=0.9, beta2=0.999)
    opt.step([layer])
    assert np.allclose(layer.m_w, 0.1 * g)
    assert np.allclose(layer.v_w, 0.001 * g * g)
    layer.weight_grads[:] = g
    opt.step([layer])
    assert layer.t == 2
    assert np.allclose(layer.m_w, 0.9 * 0.1 * g + 0.1 * g)
