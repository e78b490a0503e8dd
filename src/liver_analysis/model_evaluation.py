"""
Model Evaluation Module
=======================

This module evaluates fitted liver patient classifiers on the held-out test
set and collects the results for comparison:

1. Confusion Matrix (positive class = Care)
2. Accuracy, Sensitivity, Specificity
3. Prevalence-adjusted Predictive Values
   - PPV/NPV recomputed with Bayes' rule for an assumed disease prevalence
     instead of the sampled dataset's class balance
4. Results Table
   - One row per model, sortable by any metric

A metric whose denominator is zero (for example specificity of a model that
never predicts Control) is reported as NaN, shown as N/A, and flagged with a
DegenerateMetricWarning. One degenerate model never stops the report.

Author: Healthcare AI Team
"""

import math
import warnings
from dataclasses import asdict, dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from .data_ingestion import NEGATIVE_CLASS, POSITIVE_CLASS
from .model_training import FittedModel


# =============================================================================
# Configuration
# =============================================================================

# Assumed prevalence of liver disease in the general population
ASSUMED_PREVALENCE = 0.06

METRIC_COLUMNS = [
    'accuracy',
    'sensitivity',
    'specificity',
    'balanced_accuracy',
    'ppv',
    'npv',
]

REPORT_COLUMNS = ['model', 'accuracy', 'sensitivity', 'specificity', 'ppv', 'npv']

NOT_APPLICABLE = 'N/A'


class DegenerateMetricWarning(UserWarning):
    """A metric was undefined (zero denominator) and reported as NaN."""


# =============================================================================
# Metrics Row
# =============================================================================

@dataclass(frozen=True)
class MetricsRow:
    """Confusion-matrix counts and derived metrics for one model."""
    model: str
    tp: int
    fn: int
    fp: int
    tn: int
    accuracy: float
    sensitivity: float
    specificity: float
    balanced_accuracy: float
    ppv: float
    npv: float
    prevalence: float

    @property
    def n(self) -> int:
        return self.tp + self.fn + self.fp + self.tn

    def to_dict(self) -> dict:
        return asdict(self)


# =============================================================================
# Metric Calculations
# =============================================================================

def safe_divide(numerator: float, denominator: float) -> float:
    """numerator / denominator, or NaN when the denominator is zero."""
    if denominator == 0:
        return float('nan')
    return float(numerator) / float(denominator)


def build_confusion_matrix(y_true: pd.Series, y_pred: pd.Series) -> np.ndarray:
    """
    2x2 confusion matrix with the positive class first.

    Layout:
        [[TP, FN],
         [FP, TN]]

    Args:
        y_true: True outcome labels
        y_pred: Predicted outcome labels

    Returns:
        Confusion matrix array
    """
    return confusion_matrix(
        np.asarray(y_true, dtype=object),
        np.asarray(y_pred, dtype=object),
        labels=[POSITIVE_CLASS, NEGATIVE_CLASS]
    )


def adjust_predictive_values(
    sensitivity: float,
    specificity: float,
    prevalence: float
) -> Tuple[float, float]:
    """
    Positive and negative predictive values at an assumed prevalence.

    Bayes' rule:
        PPV = sens*p / (sens*p + (1-spec)*(1-p))
        NPV = spec*(1-p) / (spec*(1-p) + (1-sens)*p)

    With p equal to the test set's own Care proportion these reduce to
    TP/(TP+FP) and TN/(TN+FN).

    Args:
        sensitivity: True positive rate
        specificity: True negative rate
        prevalence: Assumed proportion of the positive class

    Returns:
        Tuple of (ppv, npv); either is NaN when undefined
    """
    true_positive_mass = sensitivity * prevalence
    false_positive_mass = (1 - specificity) * (1 - prevalence)
    true_negative_mass = specificity * (1 - prevalence)
    false_negative_mass = (1 - sensitivity) * prevalence

    ppv = safe_divide(true_positive_mass, true_positive_mass + false_positive_mass)
    npv = safe_divide(true_negative_mass, true_negative_mass + false_negative_mass)

    return ppv, npv


def compute_metrics(
    model_name: str,
    y_true: pd.Series,
    y_pred: pd.Series,
    prevalence: Optional[float] = None
) -> MetricsRow:
    """
    Compute the metrics row for one model's test-set predictions.

    Args:
        model_name: Display name of the model
        y_true: True outcome labels
        y_pred: Predicted outcome labels
        prevalence: Assumed prevalence for PPV/NPV. None uses the
            test set's own Care proportion.

    Returns:
        MetricsRow

    Raises:
        ValueError: If prevalence lies outside [0, 1]
    """
    cm = build_confusion_matrix(y_true, y_pred)
    tp, fn, fp, tn = (int(count) for count in cm.ravel())
    n = tp + fn + fp + tn

    if prevalence is None:
        prevalence = safe_divide(tp + fn, n)
    elif not 0 <= prevalence <= 1:
        raise ValueError(f"prevalence must be in [0, 1], got {prevalence}")

    accuracy = safe_divide(tp + tn, n)
    sensitivity = safe_divide(tp, tp + fn)
    specificity = safe_divide(tn, tn + fp)
    balanced_accuracy = (sensitivity + specificity) / 2
    ppv, npv = adjust_predictive_values(sensitivity, specificity, prevalence)

    row = MetricsRow(
        model=model_name,
        tp=tp,
        fn=fn,
        fp=fp,
        tn=tn,
        accuracy=accuracy,
        sensitivity=sensitivity,
        specificity=specificity,
        balanced_accuracy=balanced_accuracy,
        ppv=ppv,
        npv=npv,
        prevalence=float(prevalence)
    )

    undefined = [name for name in METRIC_COLUMNS if math.isnan(getattr(row, name))]
    if undefined:
        warnings.warn(
            f"{model_name}: {', '.join(undefined)} undefined (zero denominator), "
            f"reported as {NOT_APPLICABLE}",
            DegenerateMetricWarning,
            stacklevel=2
        )

    return row


def _fmt(value: float) -> str:
    return NOT_APPLICABLE if math.isnan(value) else f"{value:.4f}"


def evaluate_model(
    fitted: FittedModel,
    X_test: pd.DataFrame,
    y_test: pd.Series,
    prevalence: Optional[float] = None,
    verbose: int = 1
) -> MetricsRow:
    """
    Predict the test set with a fitted model and compute its metrics.

    Args:
        fitted: FittedModel from the trainer
        X_test: Test predictors (same reduced schema as training)
        y_test: Test outcome labels
        prevalence: Assumed prevalence (None = test set proportion)
        verbose: Verbosity level (0=silent, 1=summary)

    Returns:
        MetricsRow
    """
    y_pred = fitted.predict(X_test)
    row = compute_metrics(fitted.name, y_test, y_pred, prevalence)

    if verbose:
        print(f"\n{fitted.name} - test set")
        print(f"  Confusion Matrix ({POSITIVE_CLASS} positive):")
        print(f"    TP={row.tp:4d}  FN={row.fn:4d}")
        print(f"    FP={row.fp:4d}  TN={row.tn:4d}")
        print(f"  Accuracy:     {_fmt(row.accuracy)}")
        print(f"  Sensitivity:  {_fmt(row.sensitivity)}")
        print(f"  Specificity:  {_fmt(row.specificity)}")
        print(f"  PPV (p={row.prevalence:.3f}): {_fmt(row.ppv)}")
        print(f"  NPV (p={row.prevalence:.3f}): {_fmt(row.npv)}")

    return row


# =============================================================================
# Results Table
# =============================================================================

class ResultsTable:
    """
    Append-only table of MetricsRows, one per model, in evaluation order.

    Owned by the report run that creates it; nothing is persisted between
    runs.
    """

    def __init__(self) -> None:
        self._rows: List[MetricsRow] = []

    def append(self, row: MetricsRow) -> None:
        self._rows.append(row)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[MetricsRow]:
        return iter(tuple(self._rows))

    @property
    def rows(self) -> Tuple[MetricsRow, ...]:
        return tuple(self._rows)

    def to_frame(self) -> pd.DataFrame:
        columns = ['model'] + METRIC_COLUMNS + ['prevalence', 'tp', 'fn', 'fp', 'tn']
        return pd.DataFrame([row.to_dict() for row in self._rows], columns=columns)

    def sorted_by(self, metric: str = 'accuracy', ascending: bool = False) -> pd.DataFrame:
        """
        Rows sorted by a metric column; undefined values sort last.

        Raises:
            KeyError: If metric is not a column of the table
        """
        frame = self.to_frame()
        if metric not in frame.columns:
            raise KeyError(f"Unknown metric '{metric}'. Available: {list(frame.columns)}")
        return frame.sort_values(
            metric,
            ascending=ascending,
            na_position='last',
            kind='stable'
        ).reset_index(drop=True)

    def format(self, metric: str = 'accuracy') -> str:
        """Comparison table as text, sorted by metric, N/A for undefined values."""
        frame = self.sorted_by(metric)[REPORT_COLUMNS]
        return frame.to_string(
            index=False,
            float_format=lambda value: f"{value:.4f}",
            na_rep=NOT_APPLICABLE
        )
