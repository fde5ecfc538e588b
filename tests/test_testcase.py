from keyword_mapping import testcase as tc
from keyword_mapping.report import build_html_report

SAMPLE = """
Summary: 로그인 기능 확인
Precondition:
1. 로그인 페이지 노출
Steps:
1. 아이디 입력
2. 로그인 버튼 클릭
Expected Result:
1. 메인 페이지 노출
"""


def test_parse_sections():
    doc = tc.parse_testcase(SAMPLE)
    assert doc.summary == "로그인 기능 확인"
    assert doc.preconditions == ["로그인 페이지 노출"]
    assert doc.steps == ["아이디 입력", "로그인 버튼 클릭"]
    assert doc.expected_results == ["메인 페이지 노출"]


def test_parse_numbered_items_on_one_line():
    doc = tc.parse_testcase("steps: 1. 아이디 입력 2. 비밀번호 입력\nexpected results: 1) 로그인 성공")
    assert doc.steps == ["아이디 입력", "비밀번호 입력"]
    assert doc.expected_results == ["로그인 성공"]


def test_parse_keeps_decimal_numbers():
    assert tc.split_numbered("1. 1.5초 대기") == ["1.5초 대기"]


def test_parse_empty():
    doc = tc.parse_testcase("")
    assert doc.items() == []


def test_analyze_testcase(resolver):
    analysis = tc.analyze_testcase(resolver, SAMPLE)
    assert len(analysis.items) == 5
    assert [i.mapped for i in analysis.items] == [False, True, True, True, True]
    assert analysis.overall_mapping_rate == 80
    assert analysis.total_mappings > 0

    recs = analysis.recommendations
    assert [r["type"] for r in recs] == ["suggestion"]
    assert recs[0]["message"] == '"로그인 기능 확인" 매핑 실패'
    assert recs[0]["suggestions"] == list(tc.IMPROVEMENT_TIPS)

    step = analysis.items_of(tc.SECTION_STEP)[1]
    assert step.groovy_code.startswith("// Step: 로그인 버튼 클릭\nWebUI.click(")
    summary = analysis.items_of(tc.SECTION_SUMMARY)[0]
    assert summary.groovy_code == '// TODO: "로그인 기능 확인" 매핑 필요'


def test_low_mapping_rate_is_critical(resolver):
    analysis = tc.analyze_testcase(resolver, "Steps:\n1. qzxv wptk\n2. 클릭")
    assert analysis.overall_mapping_rate == 50
    assert analysis.recommendations[0]["type"] == "critical"
    assert len(analysis.recommendations) == 2


def test_mapping_rate_rounds_half_up(resolver):
    items = tc.analyze_testcase(resolver, "Steps:\n1. 클릭\n2. 입력\n3. 선택\n4. 노출\n5. 확인\n6. 로그아웃\n7. qzxv wptk\n8. 탭 전환").items
    # 7/8 = 87.5
    assert tc.mapping_rate(items) == 88
    assert tc.mapping_rate([]) == 0


def test_assemble_script(resolver):
    analysis = tc.analyze_testcase(resolver, SAMPLE)
    script = tc.assemble_script(analysis, generated_at="2026-01-01T00:00:00")
    assert "// Generated at: 2026-01-01T00:00:00" in script
    assert f"// Total Mappings: {analysis.total_mappings}" in script
    assert "@Test\ndef testCase() {\n    try {\n" in script
    assert "        // === Step Scripts ===" in script
    assert "        // Step: 아이디 입력" in script
    assert '        // TODO: "로그인 기능 확인" 매핑 필요' in script
    assert 'WebUI.comment("Test failed: " + e.getMessage())' in script
    assert script.rstrip().endswith("WebUI.closeBrowser()\n    }\n}")


def test_assemble_script_empty_section(resolver):
    analysis = tc.analyze_testcase(resolver, "Steps:\n1. 클릭")
    script = tc.assemble_script(analysis)
    assert "// No content found for Precondition" in script


def test_analysis_to_dict(resolver):
    d = tc.analyze_testcase(resolver, SAMPLE).to_dict()
    assert d["overall_mapping_rate"] == 80
    assert d["document"]["steps"] == ["아이디 입력", "로그인 버튼 클릭"]
    assert d["items"][0]["mapping"]["error_kind"] == "not_found"


def test_html_report_escapes():
    html = build_html_report(
        [{"section": "step", "text": "<b>클릭</b>", "found": True, "action": "Click",
          "source": "exact-table", "confidence": 1.0}],
        stats={"total_queries": 1, "failures": 0, "hits_by_source": {"exact-table": 1}},
        mapping_rate=100,
    )
    assert "&lt;b&gt;클릭&lt;/b&gt;" in html
    assert "MAPPED" in html
    assert "Mapping rate: <b>100%</b>" in html


def test_html_report_escapes_quotes():
    html = build_html_report(
        [{"section": "step", "text": "\"로그인\" 'OK' 클릭", "found": False, "action": None,
          "source": "none", "confidence": None}],
    )
    assert "&quot;로그인&quot; &#x27;OK&#x27; 클릭" in html
    assert "UNMAPPED" in html
