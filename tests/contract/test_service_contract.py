import threading

import numpy as np
import pytest

from neurodemos import service
from neurodemos.core.activations import ActivationKind
from neurodemos.core.types import StepStatus
from neurodemos.demos.kmeans import Cluster, DataPoint
from neurodemos.optim.engine import OptimizerRun
from neurodemos.optim.optimizers import AdamState, OptimizerKind
from neurodemos.som.datasets import get_dataset
from neurodemos.som.engine import SOMGrid


def test_kinds_accept_enum_or_string():
    assert service.compute_activation("relu", -1.0) == 0.0
    assert service.compute_activation(ActivationKind.SIGMOID, 0.0) == 0.5
    assert service.compute_activation_derivative("LEAKY_RELU", -3.0) == pytest.approx(0.01)
    assert service.compute_loss("mse", 0.5, 1.0) == pytest.approx(0.125)
    assert service.compute_loss_gradient("huber", 3.0, 0.0) == pytest.approx(1.0)


def test_unknown_kind_lists_valid_values():
    with pytest.raises(ValueError) as excinfo:
        service.compute_activation("swish", 1.0)
    message = str(excinfo.value)
    assert "swish" in message
    assert "leaky_relu" in message


def test_optimizer_step_accepts_surface_names():
    result = service.optimizer_step("adam", (-2.0, 0.0), "quadratic", 0.1, AdamState())
    assert isinstance(result.state, AdamState)
    assert result.state.t == 1
    assert result.point[0] > -2.0
    with pytest.raises(ValueError):
        service.optimizer_step("adam", (-2.0, 0.0), "saddle", 0.1, AdamState())


def test_som_and_kmeans_steps_are_exposed():
    rng = np.random.default_rng(0)
    dataset = get_dataset("clusters2d", rng=rng)
    grid = SOMGrid.random(3, 3, 2, rng)
    result = service.som_training_step(grid, dataset, 0, 0.5, 1.5, 100, rng)
    assert result.status is StepStatus.OK
    kmeans = service.kmeans_step([DataPoint(0.0, 0.0)], [Cluster(1.0, 1.0, "hsl(0, 70%, 60%)")])
    assert kmeans.centroids[0].x == 0.0


def test_serialized_engine_single_writer():
    run = OptimizerRun(optimizer=OptimizerKind.SGD, learning_rate=0.001, max_iterations=5000)
    shared = service.SerializedEngine(run)

    def worker():
        for _ in range(50):
            shared.tick()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert shared.iteration == 200
    assert len(shared.path) == shared.iteration + 1
    shared.reset()
    assert shared.engine.iteration == 0


def test_serialized_engine_locks_forwarded_methods():
    run = OptimizerRun(optimizer=OptimizerKind.SGD, learning_rate=0.01)
    shared = service.SerializedEngine(run)

    def mutate():
        shared.run_to_completion(max_ticks=5)
        shared.set_surface("beale")

    with shared._lock:
        thread = threading.Thread(target=mutate)
        thread.start()
        thread.join(timeout=0.2)
        assert thread.is_alive()
        assert run.iteration == 0
        assert run.surface.kind.value == "quadratic"
    thread.join(timeout=5.0)
    assert not thread.is_alive()
    assert shared.surface.kind.value == "beale"
    assert shared.set_surface.__name__ == "set_surface"


def test_som_step_rejects_negative_learning_rate():
    rng = np.random.default_rng(0)
    dataset = get_dataset("clusters2d", rng=rng)
    grid = SOMGrid(np.array([[[0.0, 0.0], [1.0, 1.0]]]))
    with pytest.raises(ValueError, match="learning_rate"):
        service.som_training_step(grid, dataset, 0, -0.5, 1.0, 1000, rng)
