"""
Data ingestion module.
Reads the labeled and unlabeled passenger files, validates their schema and
unions them into a single working table indexed by passenger identifier.
"""
import logging
from pathlib import Path

import pandas as pd

from .config import DROP_COLUMNS, FEATURE_COLUMNS, ID_COLUMN, NUMERIC_COLUMNS, TARGET
from .errors import DataFormatError, SchemaMismatchError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [ID_COLUMN] + FEATURE_COLUMNS + DROP_COLUMNS


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        logger.error(f"Data file missing at {path.resolve()}")
        raise FileNotFoundError(f"Data file missing at specified path: {path}")

    try:
        frame = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataFormatError(f"Could not parse {path}: {exc}") from exc

    if frame.empty:
        raise DataFormatError(f"{path} contains no passenger rows")
    return frame


def _check_schema(frame: pd.DataFrame, name: str, labeled: bool) -> None:
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if labeled and TARGET not in frame.columns:
        missing.append(TARGET)
    if missing:
        raise SchemaMismatchError(f"{name} is missing required columns: {', '.join(missing)}")
    if not labeled and TARGET in frame.columns:
        raise SchemaMismatchError(f"{name} must not carry the '{TARGET}' column")

    for col in NUMERIC_COLUMNS:
        if not pd.api.types.is_numeric_dtype(frame[col]):
            raise DataFormatError(f"Column '{col}' in {name} must be numeric")

    if labeled:
        labels = frame[TARGET]
        if labels.isna().any() or not labels.isin([0, 1]).all():
            raise DataFormatError(f"'{TARGET}' in {name} must contain only 0/1 values")


def load_raw_data(train_path: str, test_path: str) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Loads and validates the labeled and unlabeled passenger files.

    Args:
        train_path (str): CSV with the survival label.
        test_path (str): CSV without the survival label.

    Returns:
        tuple[pd.DataFrame, pd.DataFrame]: The raw labeled and unlabeled frames.
    """
    train_path, test_path = Path(train_path), Path(test_path)

    logger.info(f"Ingesting training matrix from {train_path.name}")
    train_df = _read_csv(train_path)
    _check_schema(train_df, train_path.name, labeled=True)

    logger.info(f"Ingesting testing matrix from {test_path.name}")
    test_df = _read_csv(test_path)
    _check_schema(test_df, test_path.name, labeled=False)

    return train_df, test_df


def build_working_table(train: pd.DataFrame, test: pd.DataFrame) -> pd.DataFrame:
    """
    Unions labeled and unlabeled rows, keeping the identifier as the index and
    dropping free-text columns.
    """
    df = pd.concat([train, test], axis=0, ignore_index=True)

    if df[ID_COLUMN].isna().any():
        raise DataFormatError(f"'{ID_COLUMN}' contains blank identifiers")
    duplicated = df[ID_COLUMN].duplicated()
    if duplicated.any():
        ids = df.loc[duplicated, ID_COLUMN].head(5).tolist()
        raise DataFormatError(f"Duplicate passenger identifiers: {ids}")

    df = df.set_index(ID_COLUMN).drop(columns=DROP_COLUMNS)
    logger.info("Working table assembled: %d rows, %d columns", *df.shape)
    return df
