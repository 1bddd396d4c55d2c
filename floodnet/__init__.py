"""Multi-layer perceptrons with momentum backpropagation, k-fold cross-validation and grid search."""

__version__ = "0.1.0"