import json
import sys

import pandas as pd
import pytest

import testcase_mapper

TESTCASE = """Summary: 로그인 기능 확인
Steps:
1. 아이디 입력
2. 로그인 버튼 클릭
Expected Result:
1. 메인 페이지 노출
"""


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["testcase_mapper.py", *args])
    testcase_mapper.main()


def _jsonl(path):
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def test_testcase_mode(tmp_path, monkeypatch):
    src = tmp_path / "tc.txt"
    src.write_text(TESTCASE, encoding="utf-8")
    out = tmp_path / "out"

    _run(monkeypatch, "--input", str(src), "--out", str(out))

    script = (out / "script.groovy").read_text(encoding="utf-8")
    assert "def testCase()" in script
    rows = _jsonl(out / "mapping_log.jsonl")
    assert [r["section"] for r in rows] == ["summary", "step", "step", "expected"]
    assert set(rows[0]) == {"ts", "phase", "section", "text", "found", "action", "source", "confidence"}

    analysis = json.loads((out / "analysis.json").read_text(encoding="utf-8"))
    assert analysis["outputs"][0]["mapping_rate"] == 75
    assert analysis["statistics"]["total_queries"] == 4
    assert "<table>" in (out / "index.html").read_text(encoding="utf-8")


def test_phrase_and_batch_mode(tmp_path, monkeypatch):
    csv_path = tmp_path / "phrases.csv"
    pd.DataFrame({"phrase": ["클릭", "qzxv wptk", "드래그로 업로드"]}).to_csv(csv_path, index=False)
    out = tmp_path / "out"

    _run(monkeypatch, "--phrase", "총 개수 확인", "--batch_csv", str(csv_path), "--out", str(out))

    results = pd.read_csv(out / "results.csv")
    assert results["found"].tolist() == [True, False, True]
    assert results["action"].tolist()[0] == "Click"
    rows = _jsonl(out / "mapping_log.jsonl")
    assert [r["phase"] for r in rows] == ["phrase", "batch", "batch", "batch"]


def test_missing_arguments_exit(tmp_path, monkeypatch):
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "--out", str(tmp_path / "out"))
    assert exc.value.code == 1


def test_unreadable_input_exit(tmp_path, monkeypatch):
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "--input", str(tmp_path / "missing.txt"), "--out", str(tmp_path / "out"))
    assert exc.value.code == 1


def test_missing_tables_exit(tmp_path, monkeypatch):
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "--phrase", "클릭", "--data_dir", str(tmp_path), "--out", str(tmp_path / "out"))
    assert exc.value.code == 1


def test_batch_csv_skips_blank_cells(tmp_path):
    csv_path = tmp_path / "phrases.csv"
    csv_path.write_text("phrase,note\n클릭,a\n,b\n   ,c\n확인,d\n", encoding="utf-8")

    assert testcase_mapper.read_batch_csv(str(csv_path)) == ["클릭", "확인"]


def test_batch_csv_without_phrase_column_uses_first(tmp_path):
    csv_path = tmp_path / "phrases.csv"
    csv_path.write_text("text\n드래그\n\nnan\n", encoding="utf-8")

    # "nan"이라는 글자는 결측값이 아니라 구문 그대로다.
    assert testcase_mapper.read_batch_csv(str(csv_path)) == ["드래그", "nan"]
