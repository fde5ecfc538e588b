import threading

import pytest

from keyword_mapping.models import ErrorKind, Source
from keyword_mapping.renderers.registry import RendererRegistry
from keyword_mapping.resolver import UnifiedResolver, coverage, create_resolver

NONSENSE = "qzxv wptk"


# -----------------------------------------------------------------------------
# 테이블 단계
# -----------------------------------------------------------------------------
def test_exact_observer_hit(resolver):
    r = resolver.resolve("클릭")
    assert r.found
    assert r.action == "Click"
    assert r.source == Source.EXACT_TABLE
    assert r.table == "observer"
    assert r.confidence == 1.0
    assert r.error_kind is None


def test_observer_precedes_complete(resolver):
    assert resolver.resolve("노출").action == "Verify Element Visible"
    assert resolver.resolve("확인").action == "Verify Element Present"


def test_exact_in_complete(resolver):
    r = resolver.resolve("더블클릭")
    assert r.source == Source.EXACT_TABLE
    assert r.table == "complete"
    assert r.action == "Double Click"


def test_substring_hit_with_enough_coverage(resolver):
    r = resolver.resolve("버튼클릭")
    assert r.source == Source.SUBSTRING_TABLE
    assert r.action == "Click"
    assert r.confidence == 0.8
    assert r.details["matched_keyword"] == "클릭"


def test_substring_hit_at_exact_coverage_threshold(resolver):
    # "로딩 중"이 "데이터 로딩 중"의 절반을 덮으므로 상태 어미보다 테이블이 먼저다.
    r = resolver.resolve("데이터 로딩 중")
    assert r.source == Source.SUBSTRING_TABLE
    assert r.table == "observer"
    assert r.action == "Wait For Element Not Present"
    assert r.details["matched_keyword"] == "로딩 중"


@pytest.mark.parametrize("phrase, action, matched", [
    ("오른쪽으로 이동 한다", "Swipe", "오른쪽으로 이동"),
    ("위쪽으로 스크롤 한다", "Scroll To Element", "위쪽으로 스크롤"),
])
def test_method_word_without_action_keeps_substring_stage(resolver, phrase, action, matched):
    # "오른쪽", "위쪽"은 "으로"가 붙었지만 액션으로 해석되지 않는다.
    assert resolver.analyze_text(phrase).particles.method
    r = resolver.resolve(phrase)
    assert r.found, r.brief()
    assert r.source == Source.SUBSTRING_TABLE
    assert r.table == "complete"
    assert r.action == action
    assert r.details["matched_keyword"] == matched


def test_low_coverage_hit_with_content_remainder_is_skipped(resolver):
    # "개수 확인"도 포함되지만 나머지 "총"이 내용어라 조합으로 간다.
    r = resolver.resolve("총 개수 확인")
    assert r.source == Source.COMBINATION
    assert r.details["substring_skipped"].startswith("low coverage substring hit '확인'")


def test_coverage():
    assert coverage("확인", "총 개수 확인") == pytest.approx(2 / 7)
    assert coverage("클릭", "버튼클릭") == 0.5
    assert coverage("", "") == 0.0


# -----------------------------------------------------------------------------
# 조합 단계
# -----------------------------------------------------------------------------
def test_multi_word_phrase_goes_to_combination(resolver):
    r = resolver.resolve("총 개수 확인")
    assert r.found
    assert r.source == Source.COMBINATION
    assert r.pattern == "modifier_noun_verb"
    assert r.action == "Verify Element Present"
    # 0.4 * 1.0 + 0.3 * 0.75 + 0.3 * 0.9
    assert r.confidence == pytest.approx(0.895)
    assert r.groovy_code == "WebUI.verifyElementPresent(findTestObject('Object Repository/개수Element'), 10)"
    assert "substring_skipped" in r.details


def test_negative_phrase(resolver):
    r = resolver.resolve("업로드되지 않아야 한다")
    assert r.found
    assert r.source == Source.COMBINATION
    assert r.pattern == "negative"
    assert r.action == "Verify Element Not Present"
    assert r.confidence == 0.95
    assert r.details["negative"]["converted_action"] == "verifyUploadNotPresent"


@pytest.mark.parametrize("phrase", [
    "업로드되지 않아야 한다",
    "노출되지 않아야 한다",
    "팝업이 노출되면 안된다",
    "버튼이 없어야 한다",
])
def test_negated_phrase_never_yields_positive_action(resolver, phrase):
    r = resolver.resolve(phrase)
    assert r.found
    assert "Not" in r.action or "Read Only" in r.action


def test_method_particle_wins(resolver):
    r = resolver.resolve("드래그로 업로드")
    assert r.pattern == "key_action"
    assert r.action == "Drag And Drop"
    assert r.confidence == 0.9
    assert r.details["key_action"]["word"] == "드래그"


def test_state_ending(resolver):
    r = resolver.resolve("업무 진행 중")
    assert r.source == Source.COMBINATION
    assert r.pattern == "state"
    assert r.action == "Verify Element Present"
    assert r.confidence == 0.7
    assert r.details["state"]["state_type"] == "진행 중"


def test_flexible_pattern_with_stems(resolver):
    r = resolver.resolve("로그인 버튼을 클릭한다")
    assert r.source == Source.COMBINATION
    assert r.pattern == "flexible"
    assert r.action == "Click"
    assert r.groovy_code.startswith("WebUI.click(")


# -----------------------------------------------------------------------------
# 실패 / 입력 오류
# -----------------------------------------------------------------------------
def test_not_found_has_suggestions_and_alternatives(resolver):
    r = resolver.resolve(NONSENSE)
    assert not r.found
    assert r.source == Source.NONE
    assert r.error_kind == ErrorKind.NOT_FOUND
    assert r.reason.startswith("decomposition failed")
    assert len(r.suggestions) <= 10
    assert 0 < len(r.alternatives) <= 8


def test_pattern_unmatched_reason(resolver):
    r = resolver.resolve("로그인 기능 확인")
    assert not r.found
    assert r.reason.startswith("pattern unmatched")


@pytest.mark.parametrize("value", ["", "   ", None, 42])
def test_invalid_input(resolver, value):
    r = resolver.resolve(value)
    assert not r.found
    assert r.error_kind == ErrorKind.INVALID_INPUT


def test_not_initialized():
    r = UnifiedResolver(missing_tables=["observer_mappings.json"])
    got = r.resolve("클릭")
    assert not got.found
    assert got.error_kind == ErrorKind.NOT_INITIALIZED
    assert "observer_mappings.json" in got.reason
    stats = r.get_statistics()
    assert stats["not_initialized"] == 1
    assert stats["total_queries"] == 1


def test_create_resolver_with_missing_data(tmp_path):
    r = create_resolver(str(tmp_path))
    assert not r.is_initialized
    assert "lexicon.json" in r.missing_tables
    assert r.resolve("클릭").error_kind == ErrorKind.NOT_INITIALIZED


def test_create_resolver_bundled():
    r = create_resolver()
    assert r.is_initialized
    assert r.resolve("클릭").action == "Click"


# -----------------------------------------------------------------------------
# 캐시 / 통계
# -----------------------------------------------------------------------------
def test_cache_returns_copy_with_cache_source(resolver):
    first = resolver.resolve("클릭")
    second = resolver.resolve("클릭")
    assert first.source == Source.EXACT_TABLE
    assert second.source == Source.CACHE
    assert second.action == first.action
    assert second.table == "observer"
    assert first.source == Source.EXACT_TABLE


def test_cached_details_are_not_shared(resolver):
    resolver.resolve("클릭")
    hit = resolver.resolve("클릭")
    hit.details["record"]["metadata"]["touched"] = True
    hit.details["record"]["keywords"].append("변경")

    again = resolver.resolve("클릭")
    assert again.source == Source.CACHE
    assert "touched" not in again.details["record"]["metadata"]
    assert "변경" not in again.details["record"]["keywords"]


def test_idempotent(resolver):
    a = resolver.resolve("총 개수 확인")
    b = resolver.resolve("총 개수 확인")
    assert (a.found, a.action, a.confidence) == (b.found, b.action, b.confidence)


def test_failures_are_not_cached(resolver):
    resolver.resolve(NONSENSE)
    again = resolver.resolve(NONSENSE)
    assert again.source == Source.NONE
    assert resolver.get_statistics()["cache_size"] == 0


def test_cache_capacity_evicts_oldest(config):
    r = UnifiedResolver(config=config, cache_capacity=2)
    for phrase in ("클릭", "입력", "선택"):
        r.resolve(phrase)
    assert r.get_statistics()["cache_size"] == 2
    # 가장 먼저 들어온 "클릭"이 밀려났다.
    assert r.resolve("클릭").source == Source.EXACT_TABLE
    assert r.resolve("선택").source == Source.CACHE


def test_clear_cache(resolver):
    resolver.resolve("클릭")
    resolver.clear_cache()
    assert resolver.get_statistics()["cache_size"] == 0
    assert resolver.resolve("클릭").source == Source.EXACT_TABLE


def test_statistics(resolver):
    for phrase in ("클릭", "클릭", "버튼클릭", "총 개수 확인", NONSENSE, ""):
        resolver.resolve(phrase)
    stats = resolver.get_statistics()
    assert stats["total_queries"] == 6
    assert stats["hits_by_source"] == {
        "cache": 1,
        "exact-table": 1,
        "substring-table": 1,
        "combination": 1,
    }
    assert stats["hits_by_table"] == {"observer": 2, "complete": 0}
    assert stats["failures"] == 2
    assert stats["cache_hit_rate"] == pytest.approx(1 / 6)
    assert stats["table_sizes"]["observer"] > 0


def test_concurrent_resolves_are_counted(config):
    r = UnifiedResolver(config=config)
    phrases = ["클릭", "총 개수 확인", "드래그로 업로드", NONSENSE] * 10

    def work():
        for p in phrases:
            r.resolve(p)

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert r.get_statistics()["total_queries"] == len(phrases) * 4


# -----------------------------------------------------------------------------
# 부가 API
# -----------------------------------------------------------------------------
def test_batch_and_alias(resolver):
    results = resolver.resolve_batch(["클릭", NONSENSE])
    assert [x.found for x in results] == [True, False]
    assert resolver.find_mapping("클릭").action == "Click"


def test_render_table_hit(resolver):
    r = resolver.resolve("파일 업로드")
    assert r.groovy_code is None
    assert resolver.render(r) == "WebUI.uploadFile(findTestObject('Object Repository/파일업로드Element'), '/path/to/file')"


def test_render_without_renderer(config):
    r = UnifiedResolver(config=config, renderer=None)
    got = r.resolve("총 개수 확인")
    assert got.found
    assert got.groovy_code is None
    assert r.render(got) is None


def test_text_helpers(resolver):
    assert resolver.extract_keywords("업로드되지 않아야 한다")[0] == "verifyUploadNotPresent"
    assert resolver.analyze_text("드래그로 업로드").recommended["word"] == "드래그"
    assert resolver.get_suggestions("확인하다")


def test_result_to_dict_is_plain(resolver):
    d = resolver.resolve("총 개수 확인").to_dict()
    assert d["source"] == "combination"
    assert d["error_kind"] is None
    assert d["details"]["decomposition"]["separation_method"] == "whitespace"


def test_explicit_renderer_instance(config):
    r = UnifiedResolver(config=config, renderer=RendererRegistry.get_instance("katalon"))
    assert r.resolve("드래그로 업로드").groovy_code.startswith("WebUI.dragAndDropToObject(")
