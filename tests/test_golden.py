import os

import pandas as pd
import pytest

GOLDEN_CSV = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "golden.csv")


# =========================
# Dataset
# =========================
def load_dataset():
    if not os.path.exists(GOLDEN_CSV):
        return []
    # 빈 칸은 빈 문자열로 읽는다. (NaN은 truthy라 expected_action 비교가 깨진다)
    df = pd.read_csv(GOLDEN_CSV, keep_default_na=False)
    return df.to_dict(orient="records")


@pytest.mark.parametrize("case", load_dataset(), ids=lambda c: c["phrase"])
def test_golden(resolver, case):
    result = resolver.resolve(case["phrase"])

    assert result.found == (str(case["expected_found"]) == "True"), result.brief()
    assert result.source.value == case["expected_source"]
    if case["expected_action"]:
        assert result.action == case["expected_action"]
    if result.found:
        assert 0.0 < result.confidence <= 1.0
    else:
        assert result.error_kind is not None
