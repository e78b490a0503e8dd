"""
Integration Tests for the Report Pipeline
=========================================
End-to-end runs on synthetic data, plus an opt-in run against the real
UCI dataset (set LIVER_NETWORK_TESTS=1).

Author: Healthcare AI Team
"""

import json
import math
import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from liver_analysis.data_ingestion import DataUnavailableError
from liver_analysis.feature_selection import PREFERRED_DROPS
from liver_analysis.model_evaluation import ResultsTable
from liver_analysis.report_pipeline import run_report


class TestRunReport:

    def test_report_on_synthetic_data(self, raw_csv, tmp_path):
        output_dir = tmp_path / "report"

        results = run_report(
            data_source=raw_csv,
            methods=['naive-bayes', 'bayesian-logistic'],
            cv=3,
            output_dir=output_dir,
            explore=False
        )

        table = results['results']
        assert isinstance(table, ResultsTable)
        assert [row.model for row in table] == ['Naive Bayes', 'Bayesian Logistic Regression']
        assert set(PREFERRED_DROPS) <= set(results['dropped_features'])

        info = results['data_info']
        assert info['n_train'] + info['n_test'] == info['n_samples'] == 300

        for row in table:
            assert row.prevalence == 0.06
            assert row.n == info['n_test']

        assert (output_dir / "model_comparison.csv").exists()
        metadata = json.loads((output_dir / "report_metadata.json").read_text())
        assert metadata['config']['random_state'] == 1
        assert set(metadata['best_params']) == {'naive-bayes', 'bayesian-logistic'}

    def test_every_model_uses_same_split(self, raw_csv):
        results = run_report(
            data_source=raw_csv,
            methods=['naive-bayes', 'k-nearest-neighbours'],
            cv=3,
            explore=False,
            verbose=0
        )

        positives = {row.tp + row.fn for row in results['results']}
        assert len(positives) == 1

    def test_empirical_prevalence(self, raw_csv):
        results = run_report(
            data_source=raw_csv,
            prevalence=None,
            methods=['naive-bayes'],
            cv=3,
            explore=False,
            verbose=0
        )

        row = results['results'].rows[0]
        assert row.prevalence == pytest.approx((row.tp + row.fn) / row.n)

    def test_exploration_included(self, raw_csv):
        results = run_report(
            data_source=raw_csv,
            methods=['naive-bayes'],
            cv=3,
            verbose=0
        )
        assert results['exploration'] is not None

    def test_quiet_run_prints_nothing(self, raw_csv, capsys):
        run_report(
            data_source=raw_csv,
            methods=['naive-bayes'],
            cv=3,
            verbose=0
        )

        assert capsys.readouterr().out == ""

    def test_unknown_method_rejected_before_loading(self):
        with pytest.raises(ValueError):
            run_report(data_source="does_not_exist.csv", methods=['svm'])

    def test_missing_data_aborts(self, tmp_path):
        with pytest.raises(DataUnavailableError):
            run_report(data_source=tmp_path / "missing.csv", verbose=0)


@pytest.mark.network
@pytest.mark.skipif(
    os.environ.get("LIVER_NETWORK_TESTS") != "1",
    reason="set LIVER_NETWORK_TESTS=1 to fetch the UCI dataset"
)
class TestRealDataset:

    def test_naive_bayes_reference_values(self):
        """Seed 1, 70/30 split, prevalence 0.06: accuracy ~0.60, PPV ~0.10."""
        results = run_report(
            methods=['naive-bayes'],
            explore=False,
            verbose=0
        )

        row = results['results'].rows[0]
        assert results['data_info']['n_samples'] == 579
        assert row.accuracy == pytest.approx(0.60, abs=0.1)
        assert not math.isnan(row.ppv)
        assert row.ppv == pytest.approx(0.10, abs=0.05)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
