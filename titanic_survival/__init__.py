"""
Titanic survival pipeline: feature engineering, bagged-tree imputation and
competing KNN / XGBoost classifiers tuned by repeated cross-validation.
"""
