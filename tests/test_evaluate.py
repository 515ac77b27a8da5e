"""
Tests for holdout scoring and report artifacts.
"""
import os

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pytest
import pandas as pd

from titanic_survival.evaluate import (evaluate_holdout, generate_shap_explanations,
                                       plot_confusion_matrix, plot_tuning_profile, save_cv_results)


class FixedModel:
    """Stands in for a fitted model with predetermined outputs."""

    def __init__(self, outputs):
        self.outputs = outputs

    def predict(self, table):
        return pd.Series(self.outputs, index=table.index)


def _holdout(labels):
    return pd.DataFrame({
        'Survived': pd.Categorical(labels, categories=[0, 1]),
        'Fare': np.arange(len(labels), dtype=float),
    })


def test_confusion_matrix_counts():
    holdout = _holdout([0, 0, 0, 1, 1, 1, 1])
    report = evaluate_holdout(FixedModel([0, 0, 1, 1, 1, 0, 1]), holdout)

    assert (report.tn, report.fp, report.fn, report.tp) == (2, 1, 1, 3)
    assert report.accuracy == pytest.approx(5 / 7)
    assert int(report.confusion.to_numpy().sum()) == len(holdout)


def test_report_artifacts_written(tmp_path):
    report = evaluate_holdout(FixedModel([1, 0, 1]), _holdout([1, 0, 0]))
    cv_results = pd.DataFrame({
        'n_neighbors': [5, 7, 9],
        'mean_accuracy': [0.80, 0.82, 0.81],
        'std_accuracy': [0.05, 0.04, 0.05],
    })
    grid_results = pd.DataFrame({
        'learning_rate': [0.1, 0.1, 0.3, 0.3],
        'max_depth': [1, 2, 1, 2],
        'gamma': [0, 0, 0, 0],
        'mean_accuracy': [0.81, 0.83, 0.82, 0.80],
        'std_accuracy': [0.03, 0.03, 0.03, 0.03],
    })

    paths = [
        plot_confusion_matrix(report, 'knn', str(tmp_path)),
        plot_tuning_profile(cv_results, 'knn', str(tmp_path)),
        plot_tuning_profile(grid_results, 'xgboost', str(tmp_path)),
        save_cv_results(cv_results, 'knn', str(tmp_path)),
    ]

    for path in paths:
        assert os.path.getsize(path) > 0
    assert pd.read_csv(paths[-1])['n_neighbors'].tolist() == [7, 9, 5]


def test_shap_summary_written(tmp_path):
    from titanic_survival.model import XGBoostTrainer

    rng = np.random.RandomState(0)
    sex = rng.choice(['female', 'male'], size=40)
    table = pd.DataFrame({
        'Survived': pd.Categorical((sex == 'female').astype(int), categories=[0, 1]),
        'Sex': pd.Categorical(sex, categories=['female', 'male']),
        'Fare': rng.uniform(5, 100, size=40),
    })
    trainer = XGBoostTrainer({'n_estimators': [10], 'max_depth': [2]}, cv_folds=2, cv_repeats=1, seed=0)
    model = trainer.refit(table, {'n_estimators': 10, 'max_depth': 2})

    path = generate_shap_explanations(model, table, 'xgboost', str(tmp_path))

    assert path.endswith('shap_summary_xgboost.png')
    assert os.path.getsize(path) > 0
