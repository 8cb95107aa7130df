"""Small closed-form demonstrators: K-means, perceptron, network, training curves."""

from .kmeans import Cluster, DataPoint, KMeansDemo, kmeans_step
from .network import FeedForwardNetwork
from .perceptron import Perceptron
from .training_curve import TrainingCurveSimulator

__all__ = [
    "Cluster",
    "DataPoint",
    "FeedForwardNetwork",
    "KMeansDemo",
    "Perceptron",
    "TrainingCurveSimulator",
    "kmeans_step",
]
