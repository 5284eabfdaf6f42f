"""
dsci-ml: regression and k-nearest-neighbour models for an introductory
data-science course.

Each chapter follows the same sequence: load a dataset, fit a model,
predict, score, plot. Modules map onto those steps: data, regression,
neighbors, model_selection, evaluation, viz, with workflows chaining them.
"""

__version__ = "0.1.0"
