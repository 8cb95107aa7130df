import math

import numpy as np
import pytest

from neurodemos.core import losses
from neurodemos.core.losses import LOSSES, LossKind, get_loss
from neurodemos.core.types import DimensionMismatchError


def test_mse_scalar_and_vector_forms():
    assert losses.mean_squared_error(0.8, 1.0) == pytest.approx(0.02)
    assert losses.mean_squared_error([1.0, 3.0], [0.0, 1.0]) == pytest.approx(2.5)
    assert losses.mse_gradient(0.8, 1.0) == pytest.approx(-0.2)


def test_mae_gradient_sign_convention():
    assert losses.mean_absolute_error(0.2, 1.0) == pytest.approx(0.8)
    assert losses.mae_gradient(2.0, 1.0) == 1.0
    assert losses.mae_gradient(0.0, 1.0) == -1.0
    assert losses.mae_gradient(1.0, 1.0) == -1.0


def test_binary_cross_entropy_is_finite_at_extremes():
    assert math.isfinite(losses.binary_cross_entropy(0.0, 1.0))
    assert math.isfinite(losses.binary_cross_entropy(1.0, 0.0))
    assert math.isfinite(losses.binary_cross_entropy_gradient(0.0, 1.0))
    assert losses.binary_cross_entropy(0.5, 1.0) == pytest.approx(math.log(2.0))


def test_binary_cross_entropy_gradient_matches_closed_form():
    p, a = 0.3, 1.0
    expected = (p - a) / (p * (1.0 - p))
    assert losses.binary_cross_entropy_gradient(p, a) == pytest.approx(expected)


def test_categorical_cross_entropy_one_hot():
    p = np.array([0.7, 0.2, 0.1])
    a = np.array([1.0, 0.0, 0.0])
    assert losses.categorical_cross_entropy(p, a) == pytest.approx(-math.log(0.7))
    grad = losses.categorical_cross_entropy_gradient(p, a)
    assert grad[0] == pytest.approx(-1.0 / 0.7)
    assert grad[1] == 0.0


def test_huber_switches_to_linear_branch():
    assert losses.huber_loss(0.5, 0.0) == pytest.approx(0.125)
    assert losses.huber_loss(3.0, 0.0) == pytest.approx(2.5)
    assert losses.huber_gradient(3.0, 0.0) == pytest.approx(1.0)
    assert losses.huber_gradient(-0.4, 0.0) == pytest.approx(-0.4)


def test_shape_mismatch_raises():
    with pytest.raises(DimensionMismatchError):
        losses.mean_squared_error([1.0, 2.0], [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        losses.categorical_cross_entropy([0.5, 0.5], [1.0])


@pytest.mark.parametrize("kind", list(LossKind))
def test_catalog_round_trip(kind):
    fn = get_loss(kind)
    assert fn.kind is kind
    assert LOSSES[kind].label == fn.label
    value = fn(np.array([0.4, 0.6]), np.array([0.0, 1.0]))
    assert math.isfinite(value)
    assert value >= 0.0
