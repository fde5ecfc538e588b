# -*- coding: utf-8 -*-
# =============================================================================
# 테스트케이스 문서 처리
#
# 입력 형식 (줄 단위, 섹션 헤더 대소문자 무시)
#   Summary: 로그인 기능 확인
#   Precondition:
#   1. 로그인 페이지 노출
#   Steps:
#   1. 아이디 입력 2. 로그인 버튼 클릭
#   Expected Result:
#   1. 메인 페이지 노출
#
# 흐름
# 1) parse_testcase: 섹션 분리 + 번호 항목 분리
# 2) analyze_testcase: 항목별 resolve -> Groovy 코드 + 매핑률 + 권장사항
# 3) assemble_script: @Test testCase() 본문으로 조립
# =============================================================================

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import MappingResult
from .settings import now_iso

SECTION_SUMMARY = "summary"
SECTION_PRECONDITION = "precondition"
SECTION_STEP = "step"
SECTION_EXPECTED = "expected"

SECTION_ORDER = (SECTION_SUMMARY, SECTION_PRECONDITION, SECTION_STEP, SECTION_EXPECTED)
SECTION_LABELS = {
    SECTION_SUMMARY: "Summary",
    SECTION_PRECONDITION: "Precondition",
    SECTION_STEP: "Step",
    SECTION_EXPECTED: "Expected Result",
}

CRITICAL_MAPPING_RATE = 70

IMPROVEMENT_TIPS = (
    "키워드를 더 구체적으로 작성해보세요",
    "동의어를 사용해보세요 (예: 확인 → 검증)",
    "문장을 단순화해보세요",
    "기존 매핑된 키워드와 조합해보세요",
)

# 섹션 헤더는 줄 맨 앞만 본다.
_HEADER_RE = re.compile(
    r"^\s*(summary|preconditions?|steps?|expected\s+results?)\s*:?\s*(.*)$",
    re.IGNORECASE,
)
_NUMBERED_RE = re.compile(r"(?:^|\s)\d+[.)](?!\d)\s*")

# -----------------------------------------------------------------------------
# [Model]
# -----------------------------------------------------------------------------
@dataclass
class TestCaseDocument:
    __test__ = False  # pytest 수집 대상 아님

    summary: str = ""
    preconditions: List[str] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)
    expected_results: List[str] = field(default_factory=list)

    def items(self):
        """(section, text) 순서쌍. Summary가 있으면 맨 앞."""
        out = []
        if self.summary:
            out.append((SECTION_SUMMARY, self.summary))
        out += [(SECTION_PRECONDITION, t) for t in self.preconditions]
        out += [(SECTION_STEP, t) for t in self.steps]
        out += [(SECTION_EXPECTED, t) for t in self.expected_results]
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "preconditions": list(self.preconditions),
            "steps": list(self.steps),
            "expected_results": list(self.expected_results),
        }


@dataclass
class TestItemAnalysis:
    __test__ = False

    section: str
    text: str
    result: MappingResult
    groovy_code: str
    improvements: List[str] = field(default_factory=list)

    @property
    def mapped(self) -> bool:
        return self.result.found

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section": self.section,
            "text": self.text,
            "mapped": self.mapped,
            "confidence": self.result.confidence or 0,
            "mapping": self.result.to_dict(),
            "groovy_code": self.groovy_code,
            "improvements": list(self.improvements),
        }


@dataclass
class TestCaseAnalysis:
    __test__ = False

    document: TestCaseDocument
    items: List[TestItemAnalysis] = field(default_factory=list)
    overall_mapping_rate: int = 0
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    total_mappings: int = 0
    analyzed_at: str = ""

    def items_of(self, section: str) -> List[TestItemAnalysis]:
        return [i for i in self.items if i.section == section]

    def failed_items(self) -> List[TestItemAnalysis]:
        return [i for i in self.items if not i.mapped]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyzed_at": self.analyzed_at,
            "document": self.document.to_dict(),
            "items": [i.to_dict() for i in self.items],
            "overall_mapping_rate": self.overall_mapping_rate,
            "recommendations": list(self.recommendations),
            "total_mappings": self.total_mappings,
        }

# -----------------------------------------------------------------------------
# [Parse]
# -----------------------------------------------------------------------------
def _section_of(header: str) -> str:
    h = header.lower()
    if h.startswith("summary"):
        return SECTION_SUMMARY
    if h.startswith("precondition"):
        return SECTION_PRECONDITION
    if h.startswith("step"):
        return SECTION_STEP
    return SECTION_EXPECTED


def split_numbered(line: str) -> List[str]:
    """'1. 아이디 입력 2. 로그인 클릭' -> ['아이디 입력', '로그인 클릭']"""
    parts = _NUMBERED_RE.split(line)
    return [p.strip() for p in parts if p.strip()]


def parse_testcase(text: str) -> TestCaseDocument:
    doc = TestCaseDocument()
    if not text:
        return doc

    summary_lines: List[str] = []
    buckets = {
        SECTION_PRECONDITION: doc.preconditions,
        SECTION_STEP: doc.steps,
        SECTION_EXPECTED: doc.expected_results,
    }
    current: Optional[str] = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        m = _HEADER_RE.match(line)
        if m:
            current = _section_of(m.group(1))
            rest = m.group(2).strip()
        else:
            rest = line
        if current is None or not rest:
            continue

        if current == SECTION_SUMMARY:
            summary_lines.append(rest)
        else:
            buckets[current].extend(split_numbered(rest))

    doc.summary = " ".join(summary_lines)
    return doc

# -----------------------------------------------------------------------------
# [Analyze]
# -----------------------------------------------------------------------------
def item_groovy(resolver, result: MappingResult, section: str) -> str:
    """항목 1개의 Groovy 코드. 매핑 실패는 TODO 주석."""
    if not result.found:
        return f'// TODO: "{result.keyword}" 매핑 필요'
    code = resolver.render(result) or f'WebUI.comment("{result.keyword} - 매핑 필요")'
    return f"// {SECTION_LABELS[section]}: {result.keyword}\n{code}"


def mapping_rate(items: List[TestItemAnalysis]) -> int:
    if not items:
        return 0
    mapped = sum(1 for i in items if i.mapped)
    # 반올림 (0.5는 올림)
    return int(mapped * 100 / len(items) + 0.5)


def build_recommendations(analysis: TestCaseAnalysis) -> List[Dict[str, Any]]:
    recs: List[Dict[str, Any]] = []
    if analysis.overall_mapping_rate < CRITICAL_MAPPING_RATE:
        recs.append({
            "type": "critical",
            "message": f"매핑률이 {CRITICAL_MAPPING_RATE}% 미만입니다. 키워드 추가 또는 조합 활용을 권장합니다.",
            "action": "add_keywords",
        })
    for item in analysis.failed_items():
        recs.append({
            "type": "suggestion",
            "message": f'"{item.text}" 매핑 실패',
            "section": item.section,
            "suggestions": list(item.improvements),
            "action": "review_keyword",
        })
    return recs


def analyze_testcase(resolver, text: str) -> TestCaseAnalysis:
    """테스트케이스 전체 분석. resolver는 UnifiedResolver."""
    doc = parse_testcase(text)
    analysis = TestCaseAnalysis(document=doc, analyzed_at=now_iso())

    for section, item_text in doc.items():
        result = resolver.resolve(item_text)
        analysis.items.append(TestItemAnalysis(
            section=section,
            text=item_text,
            result=result,
            groovy_code=item_groovy(resolver, result, section),
            improvements=[] if result.found else list(IMPROVEMENT_TIPS),
        ))

    analysis.overall_mapping_rate = mapping_rate(analysis.items)
    analysis.recommendations = build_recommendations(analysis)
    sizes = resolver.get_statistics().get("table_sizes", {})
    analysis.total_mappings = sizes.get("observer", 0) + sizes.get("complete", 0)
    return analysis

# -----------------------------------------------------------------------------
# [Assemble]
# -----------------------------------------------------------------------------
INDENT = " " * 8


def indent_script(script: str, indent: str = INDENT) -> str:
    return "\n".join(indent + line if line.strip() else line for line in script.split("\n"))


def section_script(analysis: TestCaseAnalysis, section: str) -> str:
    label = SECTION_LABELS[section]
    items = analysis.items_of(section)
    if not items:
        return f"// === {label} Scripts ===\n// No content found for {label}\n"
    lines = [f"// === {label} Scripts ==="]
    for item in items:
        lines.append(item.groovy_code)
        lines.append("")
    return "\n".join(lines)


def assemble_script(analysis: TestCaseAnalysis, generated_at: Optional[str] = None) -> str:
    header = (
        "// ========================================\n"
        "// Katalon Mapping Script Generated\n"
        f"// Generated at: {generated_at or now_iso()}\n"
        f"// Total Mappings: {analysis.total_mappings}\n"
        f"// Mapping Rate: {analysis.overall_mapping_rate}%\n"
        "// ========================================\n\n"
    )
    body = "\n".join(indent_script(section_script(analysis, s)) for s in SECTION_ORDER)
    return (
        header
        + "@Test\n"
        + "def testCase() {\n"
        + "    try {\n"
        + body
        + "\n    } catch (Exception e) {\n"
        + '        WebUI.comment("Test failed: " + e.getMessage())\n'
        + "        throw e\n"
        + "    } finally {\n"
        + "        WebUI.closeBrowser()\n"
        + "    }\n"
        + "}\n"
    )
