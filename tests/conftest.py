"""
Shared synthetic fixtures mimicking the Kaggle Titanic file structure.
"""
import numpy as np
import pandas as pd
import pytest


def make_passengers(n: int, seed: int = 0, labeled: bool = True, start_id: int = 1) -> pd.DataFrame:
    """Builds ``n`` raw passenger rows with the Kaggle column layout."""
    rng = np.random.RandomState(seed)
    sex = rng.choice(['male', 'female'], size=n, p=[0.6, 0.4])
    pclass = rng.choice([1, 2, 3], size=n, p=[0.25, 0.25, 0.5])
    age = rng.uniform(1, 70, size=n).round(1)
    age[rng.rand(n) < 0.2] = np.nan
    fare = rng.uniform(5, 120, size=n).round(2)
    embarked = rng.choice(['S', 'C', 'Q'], size=n).astype(object)

    frame = pd.DataFrame({
        'PassengerId': np.arange(start_id, start_id + n),
        'Pclass': pclass,
        'Name': [f"Passenger, Mr. Number{i}" for i in range(n)],
        'Sex': sex,
        'Age': age,
        'SibSp': rng.randint(0, 4, size=n),
        'Parch': rng.randint(0, 3, size=n),
        'Ticket': [f"T{i}" for i in range(n)],
        'Fare': fare,
        'Cabin': [np.nan] * n,
        'Embarked': embarked,
    })
    if labeled:
        # Survival driven mostly by sex so the models have signal to find
        survived = np.where(sex == 'female', rng.rand(n) < 0.85, rng.rand(n) < 0.15).astype(int)
        frame.insert(1, 'Survived', survived)
    return frame


@pytest.fixture
def raw_frames():
    train = make_passengers(60, seed=1, labeled=True, start_id=1)
    test = make_passengers(20, seed=2, labeled=False, start_id=61)
    train.loc[3, 'Embarked'] = np.nan
    test.loc[0, 'Fare'] = np.nan
    return train, test


@pytest.fixture
def csv_paths(tmp_path, raw_frames):
    train, test = raw_frames
    train_path = tmp_path / 'train.csv'
    test_path = tmp_path / 'test.csv'
    train.to_csv(train_path, index=False)
    test.to_csv(test_path, index=False)
    return train_path, test_path
