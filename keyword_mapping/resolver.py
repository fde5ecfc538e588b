# -*- coding: utf-8 -*-
# =============================================================================
# 통합 매핑 Resolver
#
# 목적
# - 한글 키워드/구문 1개를 카탈론 액션 1개로 해석한다.
#
# 해석 순서 (Sequential Fast-Fail)
# 1) 캐시
# 2) 완전 일치 (observer -> complete)
# 3) 부분 포함 (observer -> complete)
#    - 부정 어미가 있거나, 방법 조사 단어가 액션으로 해석되면 건너뛴다.
#    - 포함 비율이 낮은 히트는 버린다. 단, 나머지가 조사/어미뿐인 히트는 채택한다.
# 4) 조합 생성: 부정 -> 핵심 액션 -> 상태 어미 -> 분해/문법 패턴/추론
# 5) 실패: 유사도 제안 + 대안 키워드
#
# 주의
# - 어떤 입력에도 예외를 올리지 않는다. 실패는 MappingResult로 표현한다.
# - 캐시/통계는 Lock으로 보호한다. (서비스 형태로 여러 스레드에서 호출 가능)
# =============================================================================

import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from .classifier import LexicalClassifier
from .config_loader import ConfigurationError, MappingConfig, load_config
from .decomposer import PhraseDecomposer
from .grammar import NegativeAnalysis, ParticleAnalysis, ParticleAnalyzer, TextAnalysis
from .inference import ActionInferenceEngine
from .mapping_table import TABLE_ORDER, MappingTable
from .models import (
    DecomposedPhrase,
    ErrorKind,
    MappingResult,
    Role,
    Source,
    Suggestion,
    TableMatch,
)
from .patterns import GrammarPatternMatcher
from .renderers.base import BaseRenderer, RenderContext
from .renderers.registry import RendererRegistry
from .settings import CACHE_CAPACITY, SUBSTRING_MIN_COVERAGE, log, normalize
from .similarity import SuggestionEngine

EXACT_CONFIDENCE = 1.0
SUBSTRING_CONFIDENCE = 0.8
NEGATIVE_CONFIDENCE = 0.95
KEY_ACTION_CONFIDENCE = 0.9
STATE_CONFIDENCE = 0.7

# 조합 신뢰도 가중치: 테이블 인지 비율 / 패턴 빈도 가중치 / 추론 신뢰도
W_KNOWN, W_PATTERN, W_INFERENCE = 0.4, 0.3, 0.3

HIT_SOURCES = (Source.CACHE, Source.EXACT_TABLE, Source.SUBSTRING_TABLE, Source.COMBINATION)


def coverage(matched: str, text: str) -> float:
    """부분 포함 히트의 포함 비율 min(len)/max(len)."""
    a, b = len(normalize(matched)), len(normalize(text))
    if max(a, b) == 0:
        return 0.0
    return min(a, b) / max(a, b)


class UnifiedResolver:
    def __init__(
        self,
        config: Optional[MappingConfig] = None,
        renderer: Optional[BaseRenderer] = None,
        cache_capacity: int = CACHE_CAPACITY,
        substring_min_coverage: float = SUBSTRING_MIN_COVERAGE,
        suggestion_threshold: Optional[float] = None,
        missing_tables: Optional[List[str]] = None,
    ):
        self.renderer = renderer
        self.cache_capacity = cache_capacity
        self.substring_min_coverage = substring_min_coverage
        self.suggestion_threshold = suggestion_threshold
        self.missing_tables = list(missing_tables or [])

        self._lock = threading.Lock()
        self._cache: "OrderedDict[str, MappingResult]" = OrderedDict()
        self._stats = self._empty_stats()

        self.config: Optional[MappingConfig] = None
        self.is_initialized = False
        if config is not None:
            self.initialize(config)

    # -------------------------------------------------------------------------
    # 초기화
    # -------------------------------------------------------------------------
    def initialize(self, config: MappingConfig) -> None:
        self.config = config
        self.table = MappingTable.from_config(config)
        self.classifier = LexicalClassifier(config)
        self.decomposer = PhraseDecomposer(self.classifier, self.table)
        self.analyzer = ParticleAnalyzer(config, self.classifier)
        self.matcher = GrammarPatternMatcher(config)
        self.inference = ActionInferenceEngine(config)
        self.suggestions = SuggestionEngine(config, self.table, self.suggestion_threshold)
        self.missing_tables = []
        self.is_initialized = True
        log(f"resolver initialized: tables={self.table.sizes()} cache_capacity={self.cache_capacity}")

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "total_queries": 0,
            "hits_by_source": {s.value: 0 for s in HIT_SOURCES},
            "hits_by_table": {name: 0 for name in TABLE_ORDER},
            "failures": 0,
            "not_initialized": 0,
        }

    # -------------------------------------------------------------------------
    # 공개 API
    # -------------------------------------------------------------------------
    def resolve(self, keyword: Any) -> MappingResult:
        with self._lock:
            self._stats["total_queries"] += 1

        if not self.is_initialized:
            with self._lock:
                self._stats["not_initialized"] += 1
            missing = ", ".join(self.missing_tables) or "configuration not loaded"
            return MappingResult(
                found=False,
                keyword=keyword if isinstance(keyword, str) else repr(keyword),
                error_kind=ErrorKind.NOT_INITIALIZED,
                reason=f"system not initialized: {missing}",
            )

        if not isinstance(keyword, str) or not keyword.strip():
            with self._lock:
                self._stats["failures"] += 1
            return MappingResult(
                found=False,
                keyword=keyword if isinstance(keyword, str) else repr(keyword),
                error_kind=ErrorKind.INVALID_INPUT,
                reason="empty or invalid input",
            )

        with self._lock:
            cached = self._cache.get(keyword)
            if cached is not None:
                self._stats["hits_by_source"][Source.CACHE.value] += 1
                return cached.copy_with(source=Source.CACHE)

        result = self._resolve_uncached(keyword)

        with self._lock:
            if result.found:
                self._stats["hits_by_source"][result.source.value] += 1
                if result.table in self._stats["hits_by_table"]:
                    self._stats["hits_by_table"][result.table] += 1
                self._store(keyword, result)
            else:
                self._stats["failures"] += 1
        return result

    # 원래 이름 유지
    find_mapping = resolve

    def resolve_batch(self, phrases: List[Any]) -> List[MappingResult]:
        return [self.resolve(p) for p in phrases]

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            stats = {
                "total_queries": self._stats["total_queries"],
                "hits_by_source": dict(self._stats["hits_by_source"]),
                "hits_by_table": dict(self._stats["hits_by_table"]),
                "failures": self._stats["failures"],
                "not_initialized": self._stats["not_initialized"],
                "cache_size": len(self._cache),
                "cache_capacity": self.cache_capacity,
            }
        total = stats["total_queries"]
        stats["cache_hit_rate"] = (stats["hits_by_source"][Source.CACHE.value] / total) if total else 0.0
        stats["table_sizes"] = self.table.sizes() if self.is_initialized else {}
        return stats

    def clear_cache(self) -> None:
        with self._lock:
            size = len(self._cache)
            self._cache.clear()
        log(f"cache cleared ({size} entries)")

    def get_suggestions(self, keyword: str) -> List[Suggestion]:
        """Resolver 수준 제안 (상위 5개)."""
        if not self.is_initialized:
            return []
        return self.suggestions.suggest(keyword)

    def analyze_text(self, text: str) -> Optional[TextAnalysis]:
        return self.analyzer.analyze_text(text) if self.is_initialized else None

    def extract_keywords(self, text: str) -> List[str]:
        return self.analyzer.extract_keywords(text) if self.is_initialized else []

    def render(self, result: MappingResult) -> Optional[str]:
        """
        결과에 코드가 있으면 그대로, 없으면 렌더러로 생성한다.
        매핑 실패나 렌더러 미지정이면 None
        """
        if result.groovy_code:
            return result.groovy_code
        if not result.found or self.renderer is None or not self.is_initialized:
            return None
        decomposed = self.decomposer.decompose(result.keyword)
        metadata = result.details.get("record", {}).get("metadata", {})
        return self.renderer.render(result.action, self._context(decomposed, metadata))

    # -------------------------------------------------------------------------
    # 캐시
    # -------------------------------------------------------------------------
    def _store(self, keyword: str, result: MappingResult) -> None:
        # 호출 측은 Lock을 잡은 상태여야 한다.
        if self.cache_capacity <= 0 or keyword in self._cache:
            return
        while len(self._cache) >= self.cache_capacity:
            self._cache.popitem(last=False)
        self._cache[keyword] = result.copy_with()

    # -------------------------------------------------------------------------
    # 해석 단계
    # -------------------------------------------------------------------------
    def _resolve_uncached(self, keyword: str) -> MappingResult:
        text = keyword.strip()
        negative = self.analyzer.analyze_negative(text)
        particles = self.analyzer.analyze_particles(text)

        for name in TABLE_ORDER:
            match = self.table.find_exact(text, name)
            if match:
                return self._table_result(keyword, match, Source.EXACT_TABLE, EXACT_CONFIDENCE)

        skipped = None
        if negative.is_negative:
            skipped = "negative ending"
        elif any(self._action_for_word(item.word) for item in particles.key_actions()):
            skipped = "method particle key action"
        else:
            match, skipped = self._substring_hit(text)
            if match:
                return self._table_result(keyword, match, Source.SUBSTRING_TABLE, SUBSTRING_CONFIDENCE)

        result, reason = self._combine(keyword, text, negative, particles)
        if result is not None:
            if skipped:
                result.details["substring_skipped"] = skipped
            return result
        return self._not_found(keyword, text, reason)

    def _remainder_is_ending(self, matched: str, text: str) -> bool:
        """키워드를 뺀 나머지가 조사/어미뿐인지. ("오른쪽으로 이동" + "한다")"""
        k, t = normalize(matched), normalize(text)
        if not k or k not in t:
            return False
        rest = t.replace(k, " ", 1).split()
        return bool(rest) and all(self.classifier.is_ending(w) for w in rest)

    def _substring_hit(self, text: str) -> Tuple[Optional[TableMatch], Optional[str]]:
        """
        부분 포함 단계의 채택 히트와 건너뛴 사유.
        - 첫 히트는 포함 비율이 기준 이상이면 채택한다.
        - 그 외에는 나머지가 조사/어미뿐인 첫 히트만 채택한다.
        """
        first = None
        for match in self.table.iter_substring(text):
            if first is None:
                first = match
                if coverage(match.matched_keyword, text) >= self.substring_min_coverage:
                    return match, None
            if self._remainder_is_ending(match.matched_keyword, text):
                return match, None
        if first is None:
            return None, None
        ratio = coverage(first.matched_keyword, text)
        return None, f"low coverage substring hit {first.matched_keyword!r} ({ratio:.2f})"

    def _table_result(self, keyword: str, match: TableMatch, source: Source, confidence: float) -> MappingResult:
        record = match.record
        return MappingResult(
            found=True,
            keyword=keyword,
            source=source,
            action=record.action,
            confidence=confidence,
            table=record.table,
            details={
                "matched_keyword": match.matched_keyword,
                "record": {
                    "keywords": list(record.keywords),
                    "type": record.type,
                    "status": record.status,
                    "metadata": dict(record.metadata),
                },
            },
        )

    def _action_for_word(self, word: str) -> Optional[str]:
        """핵심 액션 단어 -> 액션 (추론 표 -> 어간 추론 -> 테이블 완전 일치)."""
        hit = self.inference.lookup(word)
        if hit is None:
            stem = self.classifier.strip_suffix(word)
            if stem:
                hit = self.inference.lookup(stem)
        if hit is not None:
            return hit.action
        match = self.table.find_exact(word)
        return match.record.action if match else None

    def _combine(
        self,
        keyword: str,
        text: str,
        negative: NegativeAnalysis,
        particles: ParticleAnalysis,
    ) -> Tuple[Optional[MappingResult], str]:
        decomposed = self.decomposer.decompose(text)

        # 부정 표현은 다른 모든 신호보다 우선한다.
        if negative.is_negative:
            return self._combination_result(
                keyword, decomposed, negative.action, NEGATIVE_CONFIDENCE, "negative",
                {"negative": negative.to_dict()},
            ), ""

        for item in particles.key_actions():
            action = self._action_for_word(item.word)
            if action:
                return self._combination_result(
                    keyword, decomposed, action, KEY_ACTION_CONFIDENCE, "key_action",
                    {"key_action": item.to_dict()},
                ), ""

        state = self.analyzer.analyze_state(text)
        if state.is_state:
            action = self.config.state_actions.get(state.state_word)
            if action:
                return self._combination_result(
                    keyword, decomposed, action, STATE_CONFIDENCE, "state",
                    {"state": state.to_dict()},
                ), ""

        if not decomposed.success:
            return None, "decomposition failed: no word found in mapping tables"

        pattern = self.matcher.match(decomposed.roles)
        if pattern is None:
            return None, "pattern unmatched: no actionable words"

        inferred = self.inference.infer(decomposed.words, pattern)
        confidence = min(
            1.0,
            W_KNOWN * decomposed.known_ratio()
            + W_PATTERN * pattern.frequency_weight
            + W_INFERENCE * inferred.confidence,
        )
        details = {"inference": inferred.to_dict()}
        if inferred.defaulted:
            details["inference_defaulted"] = True
        return self._combination_result(
            keyword, decomposed, inferred.action, round(confidence, 3), pattern.id, details,
        ), ""

    def _context(self, decomposed: DecomposedPhrase, metadata: Optional[Dict[str, Any]] = None) -> RenderContext:
        return RenderContext(
            keyword=decomposed.original_text,
            nouns=[w.base for w in decomposed.words_of(Role.NOUN)],
            verbs=[w.base for w in decomposed.words_of(Role.VERB)],
            states=[w.base for w in decomposed.words_of(Role.STATE)],
            metadata=dict(metadata or {}),
        )

    def _combination_result(
        self,
        keyword: str,
        decomposed: DecomposedPhrase,
        action: str,
        confidence: float,
        pattern_id: str,
        details: Dict[str, Any],
    ) -> MappingResult:
        code = None
        if self.renderer is not None:
            code = self.renderer.render(action, self._context(decomposed))
        details["decomposition"] = decomposed.to_dict()
        return MappingResult(
            found=True,
            keyword=keyword,
            source=Source.COMBINATION,
            action=action,
            confidence=confidence,
            groovy_code=code,
            pattern=pattern_id,
            details=details,
        )

    def _not_found(self, keyword: str, text: str, reason: str) -> MappingResult:
        return MappingResult(
            found=False,
            keyword=keyword,
            source=Source.NONE,
            suggestions=self.suggestions.advanced_suggestions(text),
            alternatives=self.suggestions.alternatives(text),
            reason=reason or "no mapping found",
            error_kind=ErrorKind.NOT_FOUND,
        )

# -----------------------------------------------------------------------------
# [Factory]
# -----------------------------------------------------------------------------
def create_resolver(
    data_dir: Optional[str] = None,
    renderer_name: Optional[str] = "katalon",
    cache_capacity: int = CACHE_CAPACITY,
) -> UnifiedResolver:
    """
    설정을 읽어 Resolver를 만든다.
    필수 테이블이 없으면 예외 대신 초기화되지 않은 Resolver를 돌려준다.
    (모든 질의가 not_initialized 결과를 받는다)
    """
    renderer = RendererRegistry.get_instance(renderer_name) if renderer_name else None
    try:
        config = load_config(data_dir)
    except ConfigurationError as e:
        log(f"ERROR: resolver initialization failed: {e}")
        return UnifiedResolver(renderer=renderer, cache_capacity=cache_capacity, missing_tables=e.missing)
    return UnifiedResolver(config=config, renderer=renderer, cache_capacity=cache_capacity)
