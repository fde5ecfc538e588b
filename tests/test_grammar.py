import pytest

from keyword_mapping.classifier import LexicalClassifier
from keyword_mapping.grammar import KEY_ACTION_BONUS, NEGATIVE_PRIORITY, ParticleAnalyzer


@pytest.fixture(scope="module")
def analyzer(config):
    return ParticleAnalyzer(config, LexicalClassifier(config))


def test_method_particle_is_key_action(analyzer):
    p = analyzer.analyze_particles("드래그로 업로드")
    assert [w.word for w in p.method] == ["드래그"]
    item = p.key_actions()[0]
    assert item.is_key_action
    assert item.particle == "로"
    assert item.priority == 10 + KEY_ACTION_BONUS
    assert [w.word for w in p.general] == ["업로드"]


def test_particle_must_end_token(analyzer):
    # "로그인"의 "로"는 조사가 아니다.
    p = analyzer.analyze_particles("로그인 버튼을 클릭한다")
    assert p.method == []
    assert [w.word for w in p.object] == ["버튼"]
    assert "로그인" in [w.word for w in p.general]


def test_negative_upload(analyzer):
    n = analyzer.analyze_negative("업로드되지 않아야 한다")
    assert n.is_negative
    assert n.negative_type == "되지 않아야"
    assert n.base_action == "업로드"
    assert n.converted_action == "verifyUploadNotPresent"
    assert n.action == "Verify Element Not Present"


def test_negative_display(analyzer):
    n = analyzer.analyze_negative("노출되지 않아야 한다")
    assert n.converted_action == "verifyElementNotVisible"
    assert n.action == "Verify Element Not Visible"


def test_negative_falls_back_to_default(analyzer):
    n = analyzer.analyze_negative("배너가 없어야 한다")
    assert n.is_negative
    assert n.converted_action == "verifyElementNotPresent"


def test_convert_negative_by_stem_and_containment(analyzer):
    assert analyzer.convert_negative("클릭한다") == "verifyElementNotClickable"
    assert analyzer.convert_negative("파일업로드") == "verifyUploadNotPresent"


def test_not_negative(analyzer):
    assert not analyzer.analyze_negative("파일 업로드").is_negative


def test_state_endings(analyzer):
    s = analyzer.analyze_state("데이터 로딩 중")
    assert s.is_state
    assert s.state_type == "로딩 중"
    assert s.state_word == "로딩"
    assert s.base_word == "데이터"

    # "비활성화 중"을 "활성화 중"으로 잘못 읽지 않는다.
    assert analyzer.analyze_state("버튼 비활성화 중").state_word == "비활성화"
    assert not analyzer.analyze_state("버튼 클릭").is_state


def test_analyze_text_priorities(analyzer):
    a = analyzer.analyze_text("드래그로 업로드")
    assert a.recommended["word"] == "드래그"
    assert a.recommended["source"] == "method"

    a = analyzer.analyze_text("업로드되지 않아야 한다")
    assert a.recommended["priority"] == NEGATIVE_PRIORITY
    assert a.recommended["word"] == "verifyUploadNotPresent"


def test_extract_keywords(analyzer):
    assert analyzer.extract_keywords("업로드되지 않아야 한다")[0] == "verifyUploadNotPresent"
    assert analyzer.extract_keywords("데이터 로딩 중")[0] == "로딩 중"
    keywords = analyzer.extract_keywords("드래그로 업로드")
    assert keywords == ["드래그", "업로드"]
    assert analyzer.extract_keywords("") == []
