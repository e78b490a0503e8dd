"""
Exploratory Data Analysis Report
================================

Console exploration of the liver patient dataset, covering:

1. Target Variable Analysis (Care/Control balance)
2. Per-column Distribution Analysis
3. Correlation Analysis (redundant predictor pairs)
4. Outcome Group Comparisons (see statistical_analysis)

Author: Healthcare AI Team
"""

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from scipy import stats

from .data_ingestion import TARGET
from .statistical_analysis import compare_outcome_groups


# =============================================================================
# Configuration
# =============================================================================

# Pairs above this absolute correlation are flagged as redundant
CORRELATION_CUTOFF = 0.7

# Minimum sample size for D'Agostino's normality test
MIN_NORMALTEST_SAMPLES = 8


# =============================================================================
# 1. Target Variable Analysis
# =============================================================================

def analyze_target_balance(df: pd.DataFrame, target_col: str = TARGET) -> Dict[str, Any]:
    """
    Count and proportion of each outcome level.

    Returns:
        Dict with 'counts', 'proportions' and 'imbalance_ratio'
    """
    counts = df[target_col].value_counts()
    proportions = counts / counts.sum()

    imbalance_ratio = (
        counts.max() / counts.min() if counts.min() > 0 else float('inf')
    )

    return {
        'counts': counts.to_dict(),
        'proportions': proportions.to_dict(),
        'imbalance_ratio': float(imbalance_ratio)
    }


# =============================================================================
# 2. Distribution Analysis
# =============================================================================

def summarize_distributions(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-column distribution summary for every numeric column.

    Columns of the result: mean, std, median, iqr, min, max, skewness and
    normality_p (D'Agostino-Pearson; NaN for very small samples).

    Args:
        df: Patient records

    Returns:
        DataFrame indexed by column name
    """
    numeric_df = df.select_dtypes(include=[np.number])
    rows = {}

    for col in numeric_df.columns:
        values = numeric_df[col].dropna()

        if len(values) >= MIN_NORMALTEST_SAMPLES and values.nunique() > 1:
            _, normality_p = stats.normaltest(values)
        else:
            normality_p = np.nan

        rows[col] = {
            'mean': values.mean(),
            'std': values.std(),
            'median': values.median(),
            'iqr': values.quantile(0.75) - values.quantile(0.25),
            'min': values.min(),
            'max': values.max(),
            'skewness': stats.skew(values) if len(values) > 2 else np.nan,
            'normality_p': normality_p
        }

    return pd.DataFrame.from_dict(rows, orient='index')


# =============================================================================
# 3. Correlation Analysis
# =============================================================================

def compute_correlation_matrix(
    df: pd.DataFrame,
    columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Pearson correlation matrix of numeric predictors.

    Args:
        df: Patient records
        columns: Columns to include (default: every numeric column)

    Returns:
        Square correlation DataFrame
    """
    if columns is None:
        columns = df.select_dtypes(include=[np.number]).columns.tolist()
    return df[columns].corr()


def find_high_correlation_pairs(
    corr_matrix: pd.DataFrame,
    threshold: float = CORRELATION_CUTOFF
) -> List[Dict[str, Any]]:
    """
    Identify feature pairs whose absolute correlation exceeds threshold.

    Returns:
        List of {'Feature_1', 'Feature_2', 'Correlation'} dicts sorted by
        absolute correlation, strongest first
    """
    high_corr_pairs = []

    for i in range(len(corr_matrix.columns)):
        for j in range(i + 1, len(corr_matrix.columns)):
            value = corr_matrix.iloc[i, j]
            if abs(value) > threshold:
                high_corr_pairs.append({
                    'Feature_1': corr_matrix.columns[i],
                    'Feature_2': corr_matrix.columns[j],
                    'Correlation': float(value)
                })

    high_corr_pairs.sort(key=lambda pair: abs(pair['Correlation']), reverse=True)
    return high_corr_pairs


# =============================================================================
# Full Report
# =============================================================================

def run_exploration(
    df: pd.DataFrame,
    threshold: float = CORRELATION_CUTOFF,
    target_col: str = TARGET,
    verbose: int = 1
) -> Dict[str, Any]:
    """
    Run the complete exploration and print a console report.

    Args:
        df: Patient records
        threshold: Correlation cutoff used to flag redundant pairs
        target_col: Outcome column
        verbose: Verbosity level (0=silent, 1=print the report)

    Returns:
        Dict with 'target_balance', 'distributions', 'correlation_matrix',
        'high_corr_pairs' and 'group_comparison'
    """
    balance = analyze_target_balance(df, target_col)
    distributions = summarize_distributions(df)
    corr_matrix = compute_correlation_matrix(df)
    high_corr_pairs = find_high_correlation_pairs(corr_matrix, threshold)
    comparison = compare_outcome_groups(df, target_col)

    if verbose:
        print("\n" + "=" * 70)
        print("1. TARGET VARIABLE ANALYSIS")
        print("=" * 70)

        for level, count in balance['counts'].items():
            print(f"  • {level:10s}: {count:5d} ({balance['proportions'][level]:.2%})")
        print(f"  Imbalance ratio: {balance['imbalance_ratio']:.2f}:1")

        print("\n" + "=" * 70)
        print("2. DISTRIBUTION ANALYSIS")
        print("=" * 70)

        print(distributions.round(3).to_string())

        skewed = distributions.index[distributions['skewness'].abs() > 1].tolist()
        if skewed:
            print(f"\n⚠️  Strongly skewed columns (|skew| > 1): {', '.join(skewed)}")

        print("\n" + "=" * 70)
        print("3. CORRELATION ANALYSIS")
        print("=" * 70)

        if high_corr_pairs:
            print(f"\n⚠️  Highly Correlated Pairs (|r| > {threshold}):")
            for pair in high_corr_pairs:
                print(f"  • {pair['Feature_1']} <-> {pair['Feature_2']}: {pair['Correlation']:.4f}")
        else:
            print(f"\n✓ No multicollinearity detected (all |r| <= {threshold})")

        print("\n" + "=" * 70)
        print("4. OUTCOME GROUP COMPARISON")
        print("=" * 70)

        print(comparison['numeric'].round(4).to_string())
        sex_test = comparison['sex']
        if sex_test is not None:
            print(f"\nSex vs outcome: chi2 = {sex_test['chi2_statistic']:.3f}, "
                  f"p = {sex_test['p_value']:.4f}")

    return {
        'target_balance': balance,
        'distributions': distributions,
        'correlation_matrix': corr_matrix,
        'high_corr_pairs': high_corr_pairs,
        'group_comparison': comparison
    }
