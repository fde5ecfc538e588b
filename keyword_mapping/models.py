# -*- coding: utf-8 -*-
# =============================================================================
# keyword_mapping 데이터 모델
#
# - 매핑 레코드 / 분류 단어 / 분해 결과 / 문법 패턴 / 매핑 결과를 정의한다.
# - 모든 결과는 to_dict()로 JSON 직렬화가 가능해야 한다. (analysis.json, JSONL 로그)
# =============================================================================

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# -----------------------------------------------------------------------------
# [Enum] 문법 역할 / 결과 출처 / 오류 종류
# -----------------------------------------------------------------------------
class Role(str, Enum):
    NOUN = "noun"
    VERB = "verb"
    MODIFIER = "modifier"
    STATE = "state"
    PARTICLE = "particle"
    UNKNOWN = "unknown"


class Source(str, Enum):
    CACHE = "cache"
    EXACT_TABLE = "exact-table"
    SUBSTRING_TABLE = "substring-table"
    COMBINATION = "combination"
    NONE = "none"


class ErrorKind(str, Enum):
    NOT_INITIALIZED = "not_initialized"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"


# 분해 방식
SEPARATION_WHITESPACE = "whitespace"
SEPARATION_GREEDY = "greedy-segment"

# -----------------------------------------------------------------------------
# [Model] 매핑 테이블 레코드
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class MappingRecord:
    """
    키워드 → 카탈론 액션 매핑 1건.
    - keywords: 대소문자 무시 비교 대상 키워드 목록 (1개 이상)
    - action: 정규화된 액션 식별자 (예: "Click", "Set Text")
    - table: 레코드가 속한 데이터 세트 ("observer" | "complete")
    - metadata: type/status 이외의 부가 필드 (렌더러로만 전달, 해석하지 않는다)
    """
    keywords: Tuple[str, ...]
    action: str
    type: str = "unknown"
    status: str = "mapped"
    table: str = "complete"
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @staticmethod
    def from_dict(d: Dict[str, Any], table: str) -> "MappingRecord":
        extra = {k: v for k, v in d.items() if k not in ("keywords", "action", "type", "status")}
        return MappingRecord(
            keywords=tuple(str(k) for k in d["keywords"]),
            action=str(d["action"]),
            type=str(d.get("type") or "unknown"),
            status=str(d.get("status") or "mapped"),
            table=table,
            metadata=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "keywords": list(self.keywords),
            "action": self.action,
            "type": self.type,
            "status": self.status,
            "table": self.table,
        }
        d.update(self.metadata)
        return d

    def brief(self) -> str:
        return f"{self.keywords[0]} -> {self.action} ({self.table})"


@dataclass(frozen=True)
class TableMatch:
    """테이블 검색 결과. exact=False면 부분 일치 히트다."""
    record: MappingRecord
    matched_keyword: str
    exact: bool

# -----------------------------------------------------------------------------
# [Model] 분류 단어 / 분해 결과
# -----------------------------------------------------------------------------
@dataclass
class ClassifiedWord:
    word: str
    role: Role
    exists_in_table: bool = False
    priority: int = 0
    # 조사/어미를 떼어내고 분류에 성공한 경우의 어간 (예: "버튼을" -> "버튼")
    stem: Optional[str] = None

    @property
    def base(self) -> str:
        return self.stem or self.word

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "role": self.role.value,
            "exists_in_table": self.exists_in_table,
            "priority": self.priority,
            "stem": self.stem,
        }


@dataclass
class DecomposedPhrase:
    original_text: str
    words: List[ClassifiedWord] = field(default_factory=list)
    separation_method: str = SEPARATION_WHITESPACE

    @property
    def success(self) -> bool:
        # 테이블에 존재하는 단어가 1개 이상일 때만 조합 생성에 쓸 수 있다.
        return any(w.exists_in_table for w in self.words)

    @property
    def roles(self) -> List[Role]:
        return [w.role for w in self.words]

    def words_of(self, role: Role) -> List[ClassifiedWord]:
        return [w for w in self.words if w.role == role]

    def known_ratio(self) -> float:
        if not self.words:
            return 0.0
        return sum(1 for w in self.words if w.exists_in_table) / len(self.words)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_text": self.original_text,
            "words": [w.to_dict() for w in self.words],
            "separation_method": self.separation_method,
            "success": self.success,
        }

# -----------------------------------------------------------------------------
# [Model] 문법 패턴
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class GrammarPattern:
    """
    역할 시퀀스 기반 문법 패턴.
    frequency_weight는 신뢰도 계산에만 쓰며 패턴 선택 기준이 아니다.
    """
    id: str
    roles: Tuple[Role, ...]
    frequency_weight: float
    template: str = ""
    action_rule: str = ""
    examples: Tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.roles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "roles": [r.value for r in self.roles],
            "frequency_weight": self.frequency_weight,
            "template": self.template,
            "action_rule": self.action_rule,
        }


# 고정 패턴이 모두 실패했을 때의 완화 패턴 (명사 + 동사/상태)
FLEXIBLE_PATTERN = GrammarPattern(
    id="flexible",
    roles=(),
    frequency_weight=0.5,
    action_rule="명사와 동사/상태가 함께 있으면 유연하게 허용",
)

# -----------------------------------------------------------------------------
# [Model] 제안 / 매핑 결과
# -----------------------------------------------------------------------------
@dataclass
class Suggestion:
    keyword: str
    action: Optional[str]
    similarity: float
    kind: str = "similar"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "action": self.action,
            "similarity": round(self.similarity, 4),
            "kind": self.kind,
        }


@dataclass
class MappingResult:
    """
    resolve()의 단일 결과 형식.
    - 실패도 예외가 아니라 found=False + error_kind로 표현한다.
    """
    found: bool
    keyword: str
    source: Source = Source.NONE
    action: Optional[str] = None
    confidence: Optional[float] = None
    table: Optional[str] = None
    groovy_code: Optional[str] = None
    pattern: Optional[str] = None
    suggestions: List[Suggestion] = field(default_factory=list)
    alternatives: List[Suggestion] = field(default_factory=list)
    reason: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def copy_with(self, **changes) -> "MappingResult":
        # 리스트/딕셔너리는 캐시 원본과 공유하지 않는다.
        base = replace(
            self,
            suggestions=list(self.suggestions),
            alternatives=list(self.alternatives),
            details=copy.deepcopy(self.details),
        )
        return replace(base, **changes)

    def brief(self) -> str:
        if not self.found:
            return f"{self.keyword!r}: NOT FOUND ({self.reason})"
        return f"{self.keyword!r}: {self.action} [{self.source.value}, conf={self.confidence}]"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "found": self.found,
            "keyword": self.keyword,
            "source": self.source.value,
            "action": self.action,
            "confidence": self.confidence,
            "table": self.table,
            "groovy_code": self.groovy_code,
            "pattern": self.pattern,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "alternatives": [s.to_dict() for s in self.alternatives],
            "reason": self.reason,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "details": self.details,
        }
