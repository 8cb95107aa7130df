import numpy as np
import pytest

from neurodemos.core import activations
from neurodemos.core.activations import ActivationKind, get_activation


def test_sigmoid_bounds_and_midpoint():
    xs = np.linspace(-30.0, 30.0, 121)
    values = activations.sigmoid(xs)
    assert np.all(values > 0.0)
    assert np.all(values < 1.0)
    assert activations.sigmoid(0.0) == 0.5


def test_sigmoid_clamps_extreme_inputs():
    assert activations.sigmoid(1000.0) == pytest.approx(1.0)
    assert activations.sigmoid(-1000.0) > 0.0
    assert np.isfinite(activations.sigmoid_derivative(-1000.0))


def test_sigmoid_derivative_identity():
    for x in np.linspace(-6.0, 6.0, 25):
        s = activations.sigmoid(x)
        assert abs(activations.sigmoid_derivative(x) - s * (1.0 - s)) < 1e-9


def test_relu_and_derivative():
    for x in (-2.0, -0.0, 0.0, 0.5, 3.0):
        assert activations.relu(x) == max(0.0, x)
        assert activations.relu_derivative(x) == float(x > 0)


def test_leaky_relu_and_elu_negative_branch():
    assert activations.leaky_relu(-2.0) == pytest.approx(-0.02)
    assert activations.leaky_relu_derivative(-2.0) == pytest.approx(0.01)
    assert activations.elu(-1.0) == pytest.approx(np.exp(-1.0) - 1.0)
    assert activations.elu_derivative(2.0) == 1.0
    # the positive branch must not overflow for large inputs
    assert activations.elu(1000.0) == 1000.0


def test_tanh_derivative_matches_definition():
    x = np.array([-1.0, 0.0, 0.7])
    assert np.allclose(activations.tanh_derivative(x), 1.0 - np.tanh(x) ** 2)


def test_scalar_in_scalar_out():
    assert isinstance(activations.relu(1.5), float)
    assert isinstance(activations.sigmoid(np.float64(0.2)), float)
    assert activations.relu(np.array([-1.0, 2.0])).shape == (2,)


def test_softmax_sums_to_one_and_is_shift_invariant():
    v = np.array([1.0, 2.0, 3.0, -4.0])
    out = activations.softmax(v)
    assert abs(out.sum() - 1.0) < 1e-9
    assert np.allclose(out, activations.softmax(v + 100.0), atol=1e-12)
    huge = activations.softmax([1000.0, 1000.0])
    assert np.allclose(huge, [0.5, 0.5])


@pytest.mark.parametrize("bad", [[], [[1.0, 2.0]]])
def test_softmax_rejects_non_vectors(bad):
    with pytest.raises(ValueError):
        activations.softmax(bad)


@pytest.mark.parametrize("kind", list(ActivationKind))
def test_catalog_entries_are_consistent(kind):
    fn = get_activation(kind)
    assert fn.kind is kind
    assert fn.label
    lo, hi = fn.output_range
    assert lo < hi
    assert fn(0.5) == fn.apply(0.5)
    assert np.isfinite(fn.derivative(0.5))
    assert activations.ACTIVATIONS[kind].label == fn.label
