"""
Unit tests for the feature engineering stage.
"""
import unittest

import numpy as np
import pandas as pd

from titanic_survival.features import apply_feature_engineering


class TestFeatureEngineering(unittest.TestCase):
    def setUp(self):
        """
        Creates a minimal working table: two labeled rows, one unlabeled row.
        """
        self.table = pd.DataFrame({
            'Survived': [1.0, 0.0, np.nan],
            'Pclass': [1, 3, 2],
            'Sex': ['female', 'male', 'male'],
            'Age': [38.0, None, 4.0],
            'SibSp': [1, 0, 3],
            'Parch': [0, 0, 2],
            'Fare': [71.28, 7.25, None],
            'Embarked': ['C', None, ''],  # Intentionally leaving two blank
        }, index=pd.Index([1, 2, 3], name='PassengerId'))

    def test_family_size(self):
        result = apply_feature_engineering(self.table)
        expected = self.table['SibSp'] + self.table['Parch'] + 1
        self.assertListEqual(result['FamilySize'].tolist(), expected.tolist())

    def test_missing_age_flag(self):
        result = apply_feature_engineering(self.table)
        self.assertListEqual(result['MissingAge'].tolist(), ['N', 'Y', 'N'])

    def test_blank_embarked_filled_with_mode(self):
        result = apply_feature_engineering(self.table)
        self.assertListEqual(result['Embarked'].tolist(), ['C', 'S', 'S'])

    def test_nominal_columns_are_unordered_categoricals(self):
        result = apply_feature_engineering(self.table)
        for col in ['Pclass', 'Sex', 'Embarked', 'MissingAge', 'Survived']:
            self.assertIsInstance(result[col].dtype, pd.CategoricalDtype, col)
            self.assertFalse(result[col].cat.ordered, col)
        self.assertListEqual(list(result['Survived'].cat.categories), [0, 1])
        self.assertTrue(pd.isna(result.loc[3, 'Survived']))

    def test_schema_superset_and_row_order(self):
        result = apply_feature_engineering(self.table)
        self.assertTrue(set(self.table.columns) < set(result.columns))
        self.assertListEqual(result.index.tolist(), [1, 2, 3])
        # Numeric columns, missing values included, are left for the imputer
        self.assertTrue(pd.isna(result.loc[2, 'Age']))
        self.assertTrue(pd.isna(result.loc[3, 'Fare']))

    def test_input_not_mutated(self):
        apply_feature_engineering(self.table)
        self.assertNotIn('FamilySize', self.table.columns)


if __name__ == '__main__':
    unittest.main()
