"""
Global configuration, column definitions and hyperparameter grids for the Titanic pipeline.
"""
import copy
import logging
from pathlib import Path

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'configs/base.yaml'
RANDOM_SEED = 42

ID_COLUMN = 'PassengerId'
TARGET = 'Survived'
DROP_COLUMNS = ['Name', 'Ticket', 'Cabin']
FEATURE_COLUMNS = ['Pclass', 'Sex', 'Age', 'SibSp', 'Parch', 'Fare', 'Embarked']
NUMERIC_COLUMNS = ['Pclass', 'Age', 'SibSp', 'Parch', 'Fare']
NOMINAL_COLUMNS = ['Pclass', 'Sex', 'Embarked', 'MissingAge', TARGET]
IMPUTE_TARGETS = ('Age', 'Fare')

# Mode of the training set's embarkation port
EMBARKED_FILL = 'S'

DEFAULTS = {
    'data': {
        'train_path': 'data/train.csv',
        'test_path': 'data/test.csv',
    },
    'output_dir': 'results',
    'random_seed': RANDOM_SEED,
    'train_fraction': 0.7,
    'n_jobs': 1,
    'imputer': {
        'name': 'bagged_tree',
        'n_estimators': 25,
        'max_iter': 10,
        'n_neighbors': 5,
    },
    'models': {
        'knn': {
            'cv_folds': 100,
            'cv_repeats': 3,
            'grid': {
                'n_neighbors': list(range(5, 55, 2)),
            },
        },
        'xgboost': {
            'cv_folds': 10,
            'cv_repeats': 3,
            'grid': {
                'learning_rate': [0.05, 0.1, 0.3],
                'n_estimators': [50, 100, 150],
                'max_depth': [1, 2, 3],
                'min_child_weight': [1],
                'colsample_bytree': [0.6, 0.8],
                'gamma': [0],
                'subsample': [1],
            },
        },
    },
    'reporting': {
        'plots': True,
        'shap': False,
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """
    Loads a YAML configuration profile and layers it over the built-in defaults.

    Args:
        config_path (str): Path to the YAML configuration profile.

    Returns:
        dict: The effective configuration.
    """
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Configuration file not found at {path}")
        raise FileNotFoundError(f"Configuration file not found at {path}")

    with open(path, 'r') as file:
        try:
            profile = yaml.safe_load(file) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(profile, dict):
        raise ConfigurationError(f"Configuration root in {path} must be a mapping")

    unknown = set(profile) - set(DEFAULTS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    config = _merge(DEFAULTS, profile)

    fraction = config['train_fraction']
    if not 0.0 < fraction < 1.0:
        raise ConfigurationError(f"train_fraction must lie in (0, 1), got {fraction}")

    logger.info("Configuration loaded from %s", path)
    return config
