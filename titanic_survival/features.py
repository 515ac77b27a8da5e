"""
Feature engineering module.
"""
import logging

import pandas as pd

from .config import EMBARKED_FILL, NOMINAL_COLUMNS, TARGET

logger = logging.getLogger(__name__)


def apply_feature_engineering(df: pd.DataFrame) -> pd.DataFrame:
    """
    Derives the missing-age flag and family size, fills blank ports and casts
    nominal columns to unordered categoricals. Rows are neither dropped nor reordered.
    """
    df = df.copy()

    embarked = df['Embarked'].replace('', pd.NA)
    filled = int(embarked.isna().sum())
    df['Embarked'] = embarked.fillna(EMBARKED_FILL)
    if filled:
        logger.info("Filled %d blank embarkation ports with '%s'", filled, EMBARKED_FILL)

    # Flag is taken before imputation so it records the raw absence
    df['MissingAge'] = df['Age'].isna().map({True: 'Y', False: 'N'})
    df['FamilySize'] = (df['SibSp'] + df['Parch'] + 1).astype(int)

    for col in NOMINAL_COLUMNS:
        if col == TARGET:
            df[col] = pd.Categorical(df[col].astype('Int64'), categories=[0, 1])
        else:
            df[col] = pd.Categorical(df[col])

    logger.info("Feature engineering complete: %d missing ages flagged", int((df['MissingAge'] == 'Y').sum()))
    return df
