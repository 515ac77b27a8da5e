"""
Serialization of final predictions.
"""
import logging
from pathlib import Path

import pandas as pd

from .config import ID_COLUMN, TARGET

logger = logging.getLogger(__name__)


def write_submission(predictions: pd.Series, output_path: str) -> pd.DataFrame:
    """
    Writes a two-column ``PassengerId,Survived`` CSV, one line per prediction.

    Args:
        predictions (pd.Series): Predicted 0/1 labels indexed by passenger identifier.
        output_path (str): Destination CSV path; parent directories are created.

    Returns:
        pd.DataFrame: The frame that was written.
    """
    submission = pd.DataFrame({
        ID_COLUMN: predictions.index.to_numpy(),
        TARGET: predictions.to_numpy().astype(int),
    })

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    submission.to_csv(output_path, index=False)

    logger.info("Submission with %d rows saved to %s", len(submission), output_path)
    logger.info("Predicted survival rate: %.3f", submission[TARGET].mean() if len(submission) else 0.0)
    return submission
