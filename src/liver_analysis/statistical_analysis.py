"""
Liver Patient Classification - Statistical Analysis Module
===========================================================
Outcome group comparisons for the exploratory report:
- Mann-Whitney U test per numeric column (Care vs Control)
- Chi-Square test of independence between sex and outcome

Author: Healthcare AI Team
Project: Healthcare AI - Liver Patient Classification
"""

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats

from .data_ingestion import NEGATIVE_CLASS, POSITIVE_CLASS, TARGET


def mann_whitney_by_outcome(
    df: pd.DataFrame,
    column: str,
    target_col: str = TARGET
) -> Dict[str, Any]:
    """
    Compare one numeric column between the Care and Control groups.

    The clinical values are heavily right-skewed, so a rank test is used
    rather than a t-test.

    Returns:
        Dict with group medians, U statistic, p-value and significance flag
    """
    care = df.loc[df[target_col] == POSITIVE_CLASS, column].dropna()
    control = df.loc[df[target_col] == NEGATIVE_CLASS, column].dropna()

    if len(care) == 0 or len(control) == 0:
        u_stat, p_value = np.nan, np.nan
    else:
        u_stat, p_value = stats.mannwhitneyu(care, control, alternative='two-sided')

    return {
        'median_care': care.median(),
        'median_control': control.median(),
        'u_statistic': u_stat,
        'p_value': p_value,
        'is_significant': bool(p_value < 0.05) if not np.isnan(p_value) else False
    }


def chi_square_sex_vs_outcome(
    df: pd.DataFrame,
    target_col: str = TARGET
) -> Optional[Dict[str, Any]]:
    """
    Chi-Square test of independence between sex and outcome.

    Returns:
        Dict with contingency table, statistic, p-value and degrees of
        freedom, or None when either variable has a single level
    """
    observed = pd.crosstab(df['sex'], df[target_col])
    if observed.shape[0] < 2 or observed.shape[1] < 2:
        return None

    chi2_stat, p_value, dof, _ = stats.chi2_contingency(observed)

    return {
        'contingency_table': observed,
        'chi2_statistic': chi2_stat,
        'p_value': p_value,
        'degrees_of_freedom': dof,
        'is_significant': p_value < 0.05
    }


def compare_outcome_groups(df: pd.DataFrame, target_col: str = TARGET) -> Dict[str, Any]:
    """
    Run the group comparison for every numeric column plus sex.

    Returns:
        Dict with 'numeric' (DataFrame indexed by column) and 'sex'
    """
    numeric_cols = df.select_dtypes(include=[np.number]).columns
    numeric = pd.DataFrame.from_dict(
        {col: mann_whitney_by_outcome(df, col, target_col) for col in numeric_cols},
        orient='index'
    )

    return {
        'numeric': numeric,
        'sex': chi_square_sex_vs_outcome(df, target_col)
    }
