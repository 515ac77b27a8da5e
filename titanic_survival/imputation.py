"""
Missing-value imputation module.
Encodes the working table into a dense numeric matrix, fills it with a pluggable
imputation strategy and copies the repaired numeric columns back by name.
"""
import logging
from abc import ABC, abstractmethod

import pandas as pd
from sklearn.ensemble import BaggingRegressor
from sklearn.experimental import enable_iterative_imputer  # noqa
from sklearn.impute import IterativeImputer, KNNImputer
from sklearn.tree import DecisionTreeRegressor

from .config import IMPUTE_TARGETS, TARGET
from .errors import ConfigurationError, ImputationPostconditionError

logger = logging.getLogger(__name__)


class Imputer(ABC):
    """Fills every missing cell of a numeric matrix."""

    @abstractmethod
    def impute(self, matrix: pd.DataFrame) -> pd.DataFrame:
        """Returns a dense matrix with the same shape, index and columns as ``matrix``."""


class BaggedTreeImputer(Imputer):
    """
    Round-robin regression of each incomplete column on all others, using an
    ensemble of decision trees fit on bootstrap resamples.
    """

    def __init__(self, n_estimators: int = 25, max_iter: int = 10, random_state: int = 42):
        self.n_estimators = n_estimators
        self.max_iter = max_iter
        self.random_state = random_state

    def impute(self, matrix: pd.DataFrame) -> pd.DataFrame:
        estimator = BaggingRegressor(
            DecisionTreeRegressor(),
            n_estimators=self.n_estimators,
            random_state=self.random_state,
        )
        imputer = IterativeImputer(
            estimator=estimator,
            max_iter=self.max_iter,
            random_state=self.random_state,
            keep_empty_features=True,
        )
        return pd.DataFrame(imputer.fit_transform(matrix), index=matrix.index, columns=matrix.columns)


class KNNMatrixImputer(Imputer):
    """Averages the nearest complete neighbours of each row."""

    def __init__(self, n_neighbors: int = 5):
        self.n_neighbors = n_neighbors

    def impute(self, matrix: pd.DataFrame) -> pd.DataFrame:
        imputer = KNNImputer(n_neighbors=self.n_neighbors, keep_empty_features=True)
        return pd.DataFrame(imputer.fit_transform(matrix), index=matrix.index, columns=matrix.columns)


def build_imputer(settings: dict, seed: int) -> Imputer:
    """Instantiates the imputation strategy named in the configuration."""
    name = settings.get('name', 'bagged_tree')
    if name == 'bagged_tree':
        return BaggedTreeImputer(
            n_estimators=settings.get('n_estimators', 25),
            max_iter=settings.get('max_iter', 10),
            random_state=seed,
        )
    if name == 'knn':
        return KNNMatrixImputer(n_neighbors=settings.get('n_neighbors', 5))
    raise ConfigurationError(f"Unknown imputer '{name}'")


def encode_matrix(table: pd.DataFrame, label: str = TARGET) -> pd.DataFrame:
    """Expands every nominal column except the label into 0/1 indicator columns."""
    features = table.drop(columns=[label], errors='ignore')
    return pd.get_dummies(features, dtype=float).astype(float)


def impute_missing(table: pd.DataFrame, imputer: Imputer, label: str = TARGET,
                   targets: tuple = IMPUTE_TARGETS) -> pd.DataFrame:
    """
    Imputes the target numeric columns of the working table.

    Args:
        table (pd.DataFrame): Feature-engineered working table.
        imputer (Imputer): Strategy used to fill the encoded matrix.
        label (str): Label column, excluded from the encoded matrix.
        targets (tuple): Numeric columns whose missing cells are overwritten.

    Returns:
        pd.DataFrame: A copy of the table where only previously missing target cells changed.
    """
    encoded = encode_matrix(table, label)

    absent = [col for col in targets if col not in encoded.columns]
    if absent:
        raise ImputationPostconditionError(f"Encoded matrix lacks target columns: {absent}")

    logger.info(
        "Imputing %s over a %d x %d encoded matrix with %s",
        ", ".join(f"{col} ({int(encoded[col].isna().sum())} missing)" for col in targets),
        encoded.shape[0], encoded.shape[1], type(imputer).__name__,
    )
    dense = imputer.impute(encoded)

    if dense.shape != encoded.shape or list(dense.columns) != list(encoded.columns):
        raise ImputationPostconditionError(
            f"Imputer returned shape {dense.shape}, expected {encoded.shape} with identical columns"
        )

    result = table.copy()
    for col in targets:
        missing = result[col].isna()
        result.loc[missing, col] = dense.loc[missing, col]

    remaining = {col: int(result[col].isna().sum()) for col in targets}
    if any(remaining.values()):
        raise ImputationPostconditionError(f"Missing values remain after imputation: {remaining}")

    return result
