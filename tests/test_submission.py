"""
Tests for the submission writer.
"""
import pandas as pd

from titanic_survival.submission import write_submission


def test_one_line_per_prediction_plus_header(tmp_path):
    ids = [892, 893, 894, 895, 896]
    predictions = pd.Series([0, 1, 0, 0, 1], index=pd.Index(ids, name='PassengerId'), name='Survived')
    out_path = tmp_path / 'nested' / 'submission_knn.csv'

    write_submission(predictions, str(out_path))

    lines = out_path.read_text().strip().splitlines()
    assert len(lines) == len(ids) + 1
    assert lines[0] == 'PassengerId,Survived'

    written = pd.read_csv(out_path)
    assert written['PassengerId'].tolist() == ids
    assert written['Survived'].tolist() == [0, 1, 0, 0, 1]
