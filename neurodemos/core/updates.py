"""Pure adaptive update rules.

Both rules work elementwise on Python floats or numpy arrays and return the
new accumulators together with the unscaled parameter update; the caller
multiplies by its learning rate and subtracts.
"""

from __future__ import annotations

import numpy as np


def rmsprop_update(square_avg, gradient, alpha: float = 0.9, eps: float = 1e-8):
    """Return ``(square_avg, update)`` for one RMSprop step."""

    g = np.asarray(gradient, dtype=np.float64)
    s = alpha * np.asarray(square_avg, dtype=np.float64) + (1.0 - alpha) * g * g
    update = g / (np.sqrt(s) + eps)
    return s, update


def adam_update(
    m,
    v,
    t: int,
    gradient,
    beta1: float = 0.9,
    beta2: float = 0.999,
    eps: float = 1e-8,
):
    """Return ``(m, v, t, update)`` for one bias-corrected Adam step."""

    g = np.asarray(gradient, dtype=np.float64)
    t = int(t) + 1
    m = beta1 * np.asarray(m, dtype=np.float64) + (1.0 - beta1) * g
    v = beta2 * np.asarray(v, dtype=np.float64) + (1.0 - beta2) * g * g
    m_hat = m / (1.0 - beta1**t)
    v_hat = v / (1.0 - beta2**t)
    update = m_hat / (np.sqrt(v_hat) + eps)
    return m, v, t, update


__all__ = ["adam_update", "rmsprop_update"]
