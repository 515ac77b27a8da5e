"""
Core modeling module.
Implements the KNN and XGBoost families behind a common trainer interface, with
repeated stratified K-fold grid search, deterministic model selection and refitting.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.model_selection import GridSearchCV, RepeatedStratifiedKFold
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler
from xgboost import XGBClassifier

from .config import RANDOM_SEED, TARGET
from .errors import ConfigurationError, ModelFitError, SchemaMismatchError

logger = logging.getLogger(__name__)

PARAM_PREFIX = 'model__'


@dataclass
class FittedModel:
    """A fitted estimator pipeline bound to the feature columns it was trained on."""
    pipeline: Pipeline
    feature_columns: list
    label: str = TARGET

    def predict(self, table: pd.DataFrame) -> pd.Series:
        columns = [col for col in table.columns if col != self.label]
        if sorted(columns) != sorted(self.feature_columns):
            raise SchemaMismatchError(
                f"Prediction table columns {columns} differ from training columns {self.feature_columns}"
            )
        predictions = self.pipeline.predict(table[self.feature_columns])
        return pd.Series(np.asarray(predictions).astype(int), index=table.index, name=self.label)


@dataclass
class TrainingResult:
    model: FittedModel
    cv_results: pd.DataFrame
    best_params: dict
    best_score: float


class ModelTrainer(ABC):
    """
    Tunes one model family over a hyperparameter grid with repeated stratified K-fold CV.

    Ties in mean accuracy go to the first configuration in ``ParameterGrid`` order
    (parameter names sorted, values in the order listed).
    """
    name = 'base'

    def __init__(self, grid: dict, cv_folds: int, cv_repeats: int,
                 seed: int = RANDOM_SEED, n_jobs: int = 1):
        if not grid:
            raise ConfigurationError(f"Empty hyperparameter grid for '{self.name}'")
        self.grid = {key: list(values) if isinstance(values, (list, tuple, range)) else [values]
                     for key, values in grid.items()}
        self.cv_folds = cv_folds
        self.cv_repeats = cv_repeats
        self.seed = seed
        self.n_jobs = n_jobs

    @abstractmethod
    def build_estimator(self, preprocessor: ColumnTransformer) -> Pipeline:
        """Returns an unfitted pipeline whose final step is named ``model``."""

    @staticmethod
    def _split_xy(table: pd.DataFrame, label: str) -> tuple[pd.DataFrame, pd.Series]:
        if label not in table.columns:
            raise SchemaMismatchError(f"Training table lacks the label column '{label}'")
        X = table.drop(columns=[label])
        y = table[label].astype(int)
        return X, y

    @staticmethod
    def _build_preprocessor(X: pd.DataFrame) -> ColumnTransformer:
        # Categories come from the dtype so every fit sees the same indicator layout
        nominal = [col for col in X.columns if isinstance(X[col].dtype, pd.CategoricalDtype)]
        categories = [list(X[col].cat.categories) for col in nominal]
        encoder = OneHotEncoder(categories=categories, handle_unknown='ignore', sparse_output=False)
        return ColumnTransformer([('nominal', encoder, nominal)], remainder='passthrough')

    def _pipeline_for(self, X: pd.DataFrame) -> Pipeline:
        return self.build_estimator(self._build_preprocessor(X))

    def fit(self, table: pd.DataFrame, label: str = TARGET) -> TrainingResult:
        """
        Grid-searches the family's hyperparameters and fits the winning configuration.

        Args:
            table (pd.DataFrame): Labeled training rows.
            label (str): Outcome column; every other column is a feature.

        Returns:
            TrainingResult: Fitted model, per-configuration CV accuracy and the selected parameters.
        """
        X, y = self._split_xy(table, label)
        cv = RepeatedStratifiedKFold(n_splits=self.cv_folds, n_repeats=self.cv_repeats,
                                     random_state=self.seed)
        search = GridSearchCV(
            self._pipeline_for(X),
            {PARAM_PREFIX + key: values for key, values in self.grid.items()},
            scoring='accuracy',
            cv=cv,
            n_jobs=self.n_jobs,
            refit=False,
            error_score='raise',
        )

        n_configs = int(np.prod([len(values) for values in self.grid.values()]))
        logger.info("Tuning %s: %d configurations x %d folds x %d repeats",
                    self.name, n_configs, self.cv_folds, self.cv_repeats)
        try:
            search.fit(X, y)
        except Exception as exc:
            raise ModelFitError(f"{self.name} grid search failed: {exc}") from exc

        cv_results = pd.DataFrame(
            [{key[len(PARAM_PREFIX):]: value for key, value in params.items()}
             for params in search.cv_results_['params']]
        )
        cv_results['mean_accuracy'] = search.cv_results_['mean_test_score']
        cv_results['std_accuracy'] = search.cv_results_['std_test_score']

        # np.argmax returns the first maximum, i.e. the earliest configuration in grid order
        best_index = int(np.argmax(cv_results['mean_accuracy'].to_numpy()))
        best_params = {key[len(PARAM_PREFIX):]: _to_builtin(value)
                       for key, value in search.cv_results_['params'][best_index].items()}
        best_score = float(cv_results['mean_accuracy'].iloc[best_index])
        logger.info("%s selected %s with mean CV accuracy %.4f", self.name, best_params, best_score)

        model = self.refit(table, best_params, label)
        return TrainingResult(model=model, cv_results=cv_results,
                              best_params=best_params, best_score=best_score)

    def refit(self, table: pd.DataFrame, params: dict, label: str = TARGET) -> FittedModel:
        """Fits a single configuration on the whole of ``table``."""
        X, y = self._split_xy(table, label)
        pipeline = self._pipeline_for(X)
        pipeline.set_params(**{PARAM_PREFIX + key: value for key, value in params.items()})
        try:
            pipeline.fit(X, y)
        except Exception as exc:
            raise ModelFitError(f"{self.name} refit with {params} failed: {exc}") from exc
        logger.info("%s fitted on %d rows", self.name, len(X))
        return FittedModel(pipeline=pipeline, feature_columns=list(X.columns), label=label)


class KNNTrainer(ModelTrainer):
    """Distance-based classifier on standardised features."""
    name = 'knn'

    def build_estimator(self, preprocessor: ColumnTransformer) -> Pipeline:
        return Pipeline([
            ('preprocessor', preprocessor),
            ('scaler', StandardScaler()),
            ('model', KNeighborsClassifier()),
        ])


class XGBoostTrainer(ModelTrainer):
    """Gradient-boosted trees."""
    name = 'xgboost'

    def build_estimator(self, preprocessor: ColumnTransformer) -> Pipeline:
        return Pipeline([
            ('preprocessor', preprocessor),
            ('model', XGBClassifier(
                objective='binary:logistic',
                eval_metric='logloss',
                random_state=self.seed,
                n_jobs=1,
                verbosity=0,
            )),
        ])


TRAINERS = {
    KNNTrainer.name: KNNTrainer,
    XGBoostTrainer.name: XGBoostTrainer,
}


def build_trainer(name: str, settings: dict, seed: int = RANDOM_SEED, n_jobs: int = 1) -> ModelTrainer:
    """Instantiates the trainer for a configured model family."""
    if name not in TRAINERS:
        raise ConfigurationError(f"Unknown model family '{name}', expected one of {sorted(TRAINERS)}")
    return TRAINERS[name](
        grid=settings.get('grid', {}),
        cv_folds=settings.get('cv_folds', 10),
        cv_repeats=settings.get('cv_repeats', 3),
        seed=seed,
        n_jobs=n_jobs,
    )


def _to_builtin(value):
    return value.item() if isinstance(value, np.generic) else value
