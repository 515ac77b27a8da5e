"""
Model evaluation and reporting module.
Computes holdout metrics and renders tuning, confusion-matrix and SHAP artifacts.
"""
import os
import logging
from dataclasses import dataclass

import matplotlib.pyplot as plt
import pandas as pd
from sklearn.metrics import accuracy_score, confusion_matrix

from .config import TARGET
from .model import FittedModel

logger = logging.getLogger(__name__)


@dataclass
class HoldoutReport:
    accuracy: float
    confusion: pd.DataFrame

    @property
    def tn(self) -> int:
        return int(self.confusion.loc[0, 0])

    @property
    def fp(self) -> int:
        return int(self.confusion.loc[0, 1])

    @property
    def fn(self) -> int:
        return int(self.confusion.loc[1, 0])

    @property
    def tp(self) -> int:
        return int(self.confusion.loc[1, 1])


def evaluate_holdout(model: FittedModel, holdout: pd.DataFrame, label: str = TARGET) -> HoldoutReport:
    """
    Scores a fitted model against the holdout labels.

    Args:
        model (FittedModel): Model fitted on the training part.
        holdout (pd.DataFrame): Labeled rows withheld from training.
        label (str): Outcome column.

    Returns:
        HoldoutReport: Accuracy and the 2x2 confusion matrix (rows actual, columns predicted).
    """
    actual = holdout[label].astype(int)
    predicted = model.predict(holdout)

    matrix = confusion_matrix(actual, predicted, labels=[0, 1])
    confusion = pd.DataFrame(matrix, index=pd.Index([0, 1], name='actual'),
                             columns=pd.Index([0, 1], name='predicted'))
    report = HoldoutReport(accuracy=float(accuracy_score(actual, predicted)), confusion=confusion)

    logger.info("Holdout accuracy: %.4f (TN=%d FP=%d FN=%d TP=%d)",
                report.accuracy, report.tn, report.fp, report.fn, report.tp)
    return report


def save_cv_results(cv_results: pd.DataFrame, name: str, output_dir: str = "results") -> str:
    """Writes per-configuration cross-validation accuracy, best first."""
    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, f"cv_results_{name}.csv")
    ranked = cv_results.sort_values('mean_accuracy', ascending=False, kind='stable')
    ranked.to_csv(out_path, index=False)
    return out_path


def plot_confusion_matrix(report: HoldoutReport, name: str, output_dir: str = "results") -> str:
    """Renders the holdout confusion matrix as an annotated heatmap."""
    fig, ax = plt.subplots(figsize=(5, 4))
    ax.imshow(report.confusion.to_numpy(), cmap='Blues')

    for i in range(2):
        for j in range(2):
            ax.text(j, i, int(report.confusion.iloc[i, j]), ha='center', va='center')

    ax.set_xticks([0, 1])
    ax.set_yticks([0, 1])
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")
    ax.set_title(f"{name}: holdout accuracy {report.accuracy:.3f}")

    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, f"confusion_{name}.png")
    fig.savefig(out_path, bbox_inches='tight', dpi=150)
    plt.close(fig)

    logger.info(f"Confusion matrix serialized to {out_path}")
    return out_path


def plot_tuning_profile(cv_results: pd.DataFrame, name: str, output_dir: str = "results",
                        top_n: int = 20) -> str:
    """
    Plots mean CV accuracy against the tuned hyperparameter, or the best
    configurations when several hyperparameters vary.
    """
    params = [col for col in cv_results.columns if col not in ('mean_accuracy', 'std_accuracy')]
    varying = [col for col in params if cv_results[col].nunique() > 1]

    fig, ax = plt.subplots(figsize=(10, 6))
    if len(varying) == 1:
        param = varying[0]
        ordered = cv_results.sort_values(param)
        ax.errorbar(ordered[param], ordered['mean_accuracy'], yerr=ordered['std_accuracy'],
                    marker='o', capsize=3)
        ax.set_xlabel(param)
        ax.set_ylabel("Mean CV accuracy")
    else:
        best = cv_results.sort_values('mean_accuracy', ascending=False, kind='stable').head(top_n)
        labels = [", ".join(f"{p}={row[p]}" for p in varying) for _, row in best.iterrows()]
        ax.barh(range(len(best)), best['mean_accuracy'])
        ax.set_yticks(range(len(best)))
        ax.set_yticklabels(labels, fontsize=7)
        ax.invert_yaxis()
        ax.set_xlabel("Mean CV accuracy")
    ax.set_title(f"{name}: tuning profile")
    ax.grid(True, linestyle='--', alpha=0.7)

    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, f"tuning_{name}.png")
    fig.savefig(out_path, bbox_inches='tight', dpi=150)
    plt.close(fig)

    logger.info(f"Tuning profile serialized to {out_path}")
    return out_path


def generate_shap_explanations(model: FittedModel, table: pd.DataFrame, name: str,
                               output_dir: str = "results") -> str:
    """
    Calculates SHAP values for a tree-based model and exports a summary plot.

    Args:
        model (FittedModel): Fitted pipeline whose final step is a tree ensemble.
        table (pd.DataFrame): Rows to explain.
        name (str): Model family, used in the artifact name.
        output_dir (str): Destination directory for generated artifacts.

    Returns:
        str: Path to the saved SHAP summary plot.
    """
    import shap

    logger.info("Initiating exact SHAP value calculation via TreeExplainer.")
    preprocess = model.pipeline[:-1]
    encoded = pd.DataFrame(
        preprocess.transform(table[model.feature_columns]),
        columns=preprocess.get_feature_names_out(),
        index=table.index,
    )

    explainer = shap.TreeExplainer(model.pipeline.named_steps['model'])
    shap_values = explainer.shap_values(encoded)

    plt.figure(figsize=(10, 8))
    shap.summary_plot(shap_values, encoded, show=False)

    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, f"shap_summary_{name}.png")
    plt.savefig(out_path, bbox_inches='tight', dpi=300)
    plt.close()

    logger.info(f"SHAP summary plot serialized to {out_path}")
    return out_path
