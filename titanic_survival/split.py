"""
Partitioning of the imputed working table.
"""
import logging

import pandas as pd
from sklearn.model_selection import train_test_split

from .config import RANDOM_SEED, TARGET
from .errors import DataFormatError

logger = logging.getLogger(__name__)


def split_by_label(table: pd.DataFrame, label: str = TARGET) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Separates rows with a known label from rows awaiting prediction."""
    has_label = table[label].notna()
    labeled = table.loc[has_label].copy()
    unlabeled = table.loc[~has_label].copy()
    logger.info("Label split: %d labeled, %d unlabeled rows", len(labeled), len(unlabeled))
    return labeled, unlabeled


def stratified_split(labeled: pd.DataFrame, label: str = TARGET, train_fraction: float = 0.7,
                     seed: int = RANDOM_SEED) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Draws a seeded train/holdout partition preserving the label's class proportions.

    Args:
        labeled (pd.DataFrame): Rows with a known label.
        label (str): Column to stratify on.
        train_fraction (float): Share of rows assigned to the training part.
        seed (int): Random state for the partition.

    Returns:
        tuple[pd.DataFrame, pd.DataFrame]: The training and holdout tables.
    """
    counts = labeled[label].value_counts()
    if (counts < 2).any():
        raise DataFormatError(f"Every class needs at least two rows to stratify, got {counts.to_dict()}")

    try:
        train, holdout = train_test_split(
            labeled,
            train_size=train_fraction,
            stratify=labeled[label],
            random_state=seed,
        )
    except ValueError as exc:
        raise DataFormatError(f"Cannot split {len(labeled)} rows at train_fraction={train_fraction}: {exc}") from exc
    logger.info("Stratified split: %d training rows, %d holdout rows", len(train), len(holdout))
    return train, holdout
