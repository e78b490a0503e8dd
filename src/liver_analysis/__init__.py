"""
Liver Patient Classification
============================
Comparison of off-the-shelf classifiers on the Indian Liver Patient dataset,
with prevalence-adjusted predictive values.
"""

__version__ = "1.0.0"
