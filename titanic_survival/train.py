"""
Primary execution script: ingestion, feature engineering, imputation, tuning,
holdout evaluation, refitting and submission for every configured model family.
"""
import os
import sys
import logging
from dataclasses import dataclass

import joblib
import pandas as pd

from .config import DEFAULT_CONFIG_PATH, TARGET, load_config
from .data_loader import build_working_table, load_raw_data
from .errors import PipelineError
from .evaluate import (HoldoutReport, evaluate_holdout, generate_shap_explanations,
                       plot_confusion_matrix, plot_tuning_profile, save_cv_results)
from .features import apply_feature_engineering
from .imputation import build_imputer, impute_missing
from .model import build_trainer
from .split import split_by_label, stratified_split
from .submission import write_submission

logger = logging.getLogger(__name__)


@dataclass
class ModelRun:
    name: str
    best_params: dict
    cv_accuracy: float
    holdout: HoldoutReport
    predictions: pd.Series
    submission_path: str


def run_training_pipeline(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """
    Orchestrates the full run and returns a ``ModelRun`` per model family.
    """
    config = load_config(config_path)
    seed = config['random_seed']
    output_dir = config['output_dir']
    reporting = config['reporting']

    train_raw, test_raw = load_raw_data(config['data']['train_path'], config['data']['test_path'])
    table = build_working_table(train_raw, test_raw)
    table = apply_feature_engineering(table)
    table = impute_missing(table, build_imputer(config['imputer'], seed))

    labeled, unlabeled = split_by_label(table)
    train, holdout = stratified_split(labeled, train_fraction=config['train_fraction'], seed=seed)
    unlabeled = unlabeled.drop(columns=[TARGET])

    os.makedirs(output_dir, exist_ok=True)
    runs = {}

    for name, settings in config['models'].items():
        logger.info("Initiating %s phase.", name)
        trainer = build_trainer(name, settings, seed=seed, n_jobs=config['n_jobs'])

        result = trainer.fit(train)
        report = evaluate_holdout(result.model, holdout)
        save_cv_results(result.cv_results, name, output_dir)
        if reporting.get('plots', True):
            plot_tuning_profile(result.cv_results, name, output_dir)
            plot_confusion_matrix(report, name, output_dir)

        # Best configuration refit on train and holdout combined
        final_model = trainer.refit(labeled, result.best_params)
        predictions = final_model.predict(unlabeled)

        if reporting.get('shap', False) and name == 'xgboost':
            generate_shap_explanations(final_model, labeled, name, output_dir)

        model_path = os.path.join(output_dir, f"model_{name}.joblib")
        joblib.dump(final_model, model_path)

        submission_path = os.path.join(output_dir, f"submission_{name}.csv")
        write_submission(predictions, submission_path)

        runs[name] = ModelRun(
            name=name,
            best_params=result.best_params,
            cv_accuracy=result.best_score,
            holdout=report,
            predictions=predictions,
            submission_path=submission_path,
        )

    logger.info(f"Inference finalized. Artifacts stored in {output_dir}.")
    return runs


def main(argv: list = None) -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else DEFAULT_CONFIG_PATH

    try:
        run_training_pipeline(config_path)
    except (PipelineError, FileNotFoundError) as exc:
        logger.error("Pipeline aborted: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
