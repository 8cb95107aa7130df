import numpy as np
import pytest

from neurodemos.core.activations import ActivationKind, sigmoid
from neurodemos.core.types import DimensionMismatchError, StepStatus
from neurodemos.demos.kmeans import (
    BLOB_CENTERS,
    Cluster,
    DataPoint,
    KMeansDemo,
    cluster_color,
    generate_blobs,
    initial_centroids,
    kmeans_step,
)
from neurodemos.demos.network import FeedForwardNetwork
from neurodemos.demos.perceptron import VALUE_LIMIT, Perceptron
from neurodemos.demos.training_curve import TrainingCurveSimulator, expected_loss


def _two_groups():
    points = [
        DataPoint(0.0, 0.0),
        DataPoint(0.2, 0.0),
        DataPoint(5.0, 5.0),
        DataPoint(5.2, 5.0),
    ]
    centroids = [Cluster(1.0, 1.0, cluster_color(0)), Cluster(4.0, 4.0, cluster_color(1))]
    return points, centroids


def test_kmeans_step_assigns_and_moves_centroids():
    points, centroids = _two_groups()
    result = kmeans_step(points, centroids)
    assert result.status is StepStatus.OK
    assert [p.cluster for p in result.points] == [0, 0, 1, 1]
    assert result.changed
    assert result.centroids[0].x == pytest.approx(0.1)
    assert result.centroids[1].y == pytest.approx(5.0)
    assert result.centroids[0].color == "hsl(0, 70%, 60%)"
    assert points[0].cluster == -1


def test_kmeans_step_is_deterministic():
    rng = np.random.default_rng(4)
    points = generate_blobs(rng)
    centroids = initial_centroids(rng)
    first = kmeans_step(points, centroids)
    second = kmeans_step(points, centroids)
    assert first.points == second.points
    assert first.centroids == second.centroids


def test_empty_cluster_keeps_its_position():
    points, centroids = _two_groups()
    far = Cluster(-50.0, -50.0, cluster_color(2))
    result = kmeans_step(points, centroids + [far])
    assert result.centroids[2] == far


def test_kmeans_without_points_reports_no_data():
    result = kmeans_step([], [Cluster(0.0, 0.0, cluster_color(0))])
    assert result.status is StepStatus.NO_DATA


def test_blob_generator_layout():
    points = generate_blobs(np.random.default_rng(0), per_center=25)
    assert len(points) == 25 * len(BLOB_CENTERS)
    for p in points:
        cx, cy = BLOB_CENTERS[p.origin]
        assert abs(p.x - cx) <= 1.0 and abs(p.y - cy) <= 1.0
        assert p.cluster == -1


def test_kmeans_demo_stops_within_cap():
    demo = KMeansDemo(k=4, max_iterations=20, seed=2)
    while not demo.finished:
        demo.tick()
    assert 1 <= demo.iteration <= 20
    assert demo.tick().status is StepStatus.FINISHED

    capped = KMeansDemo(k=4, max_iterations=20, stop_when_stable=False, seed=2)
    while not capped.finished:
        capped.tick()
    assert capped.iteration == 20
    assert capped.inertia() <= demo.inertia() + 1e-9


def test_perceptron_forward_pass():
    neuron = Perceptron()
    z = 0.5 * 0.7 + 0.3 * 0.4 + 0.2
    assert neuron.weighted_sum() == pytest.approx(z)
    assert neuron.forward() == pytest.approx(sigmoid(z))
    relu_neuron = Perceptron(activation=ActivationKind.RELU, bias=-5.0)
    assert relu_neuron.forward() == 0.0


def test_perceptron_controls_are_clamped_and_immutable():
    neuron = Perceptron()
    nudged = neuron.nudge_weight(0, 10.0).nudge_bias(-10.0).nudge_input(1, 0.1)
    assert nudged.weights[0] == VALUE_LIMIT
    assert nudged.bias == -VALUE_LIMIT
    assert nudged.inputs[1] == pytest.approx(0.4)
    assert neuron.weights[0] == 0.7
    randomized = neuron.randomized(np.random.default_rng(0))
    assert all(-1.0 <= v <= 1.0 for v in randomized.inputs + randomized.weights)
    with pytest.raises(DimensionMismatchError):
        Perceptron(inputs=(1.0,), weights=(1.0, 2.0))


def test_network_forward_shapes_and_output_range():
    net = FeedForwardNetwork(layer_sizes=(4, 6, 4, 2), seed=0)
    layers = net.forward(np.ones(4))
    assert [layer.shape[0] for layer in layers] == [4, 6, 4, 2]
    assert np.all(layers[1] >= 0.0)
    assert np.all((layers[-1] > 0.0) & (layers[-1] < 1.0))
    assert net.parameter_count() == 4 * 6 + 6 + 6 * 4 + 4 + 4 * 2 + 2
    with pytest.raises(DimensionMismatchError):
        net.forward(np.ones(3))


def test_network_architecture_editing_bounds():
    net = FeedForwardNetwork(layer_sizes=(3, 2), activation=ActivationKind.TANH, seed=1)
    net.remove_layer()
    assert net.layer_sizes == [3, 2]
    for _ in range(10):
        net.add_layer()
    assert len(net.layer_sizes) == 6
    assert net.layer_sizes[0] == 3 and net.layer_sizes[-1] == 2
    net.resize_layer(0, 50)
    assert net.layer_sizes[0] == 10
    assert len(net.random_forward()) == 6
    with pytest.raises(ValueError):
        FeedForwardNetwork(layer_sizes=(3,))


def test_network_is_reproducible_for_a_seed():
    a = FeedForwardNetwork(seed=5).forward(np.linspace(0, 1, 4))
    b = FeedForwardNetwork(seed=5).forward(np.linspace(0, 1, 4))
    for left, right in zip(a, b):
        assert np.array_equal(left, right)


def test_training_curve_trends_and_window():
    sim = TrainingCurveSimulator(learning_rate=0.05, max_epochs=60, window=50, seed=0)
    records = [sim.tick() for _ in range(60)]
    assert sim.finished
    assert sim.tick().status is StepStatus.FINISHED
    assert records[-1].loss < records[0].loss
    assert records[-1].accuracy > records[0].accuracy
    assert all(0.1 <= r.accuracy <= 0.98 for r in records)
    assert all(r.loss >= 0.01 for r in records)
    history = sim.history()
    assert len(history) == 50
    assert history[-1].epoch == 60
    assert abs(records[0].loss - expected_loss(1, 0.05)) <= 0.05
