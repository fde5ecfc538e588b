# -*- coding: utf-8 -*-
# =============================================================================
# 유사도 기반 제안
#
# - 매핑 실패 시에만 사용한다. (주 선택 경로에는 관여하지 않는다)
# - 유사도 = (max(len1, len2) - 편집거리) / max(len1, len2), 길이 0이면 1.0
# - 제안: 두 테이블 전체 키워드 중 임계값 초과 항목을 유사도 내림차순으로
# - 대안: 동의어 치환(0.7), 조사 추가/제거(0.6), 어미 추가(0.5) 고정 규칙
# =============================================================================

from typing import List, Optional

from Levenshtein import distance as levenshtein_distance

from .config_loader import MappingConfig
from .mapping_table import TABLE_ORDER, MappingTable
from .models import Suggestion
from .settings import (
    ADVANCED_SUGGESTION_LIMIT,
    ALTERNATIVE_LIMIT,
    RESOLVER_SUGGESTION_LIMIT,
    SUGGESTION_THRESHOLD,
    normalize,
)

COMBINATION_SUGGESTION_SIMILARITY = 0.6
COMBINATION_SUGGESTION_LIMIT = 5
GRAMMAR_VARIATION_LIMIT = 6

SYNONYM_CONFIDENCE = 0.7
PARTICLE_CONFIDENCE = 0.6
ENDING_CONFIDENCE = 0.5


def similarity(a: str, b: str) -> float:
    """정규화 편집거리 유사도 (0.0 ~ 1.0). 대칭이다."""
    s1, s2 = normalize(a), normalize(b)
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(s1, s2)) / longest


def _dedupe(items: List[Suggestion]) -> List[Suggestion]:
    seen = set()
    out = []
    for s in items:
        key = (s.keyword, s.kind)
        if key in seen:
            continue
        seen.add(key)
        out.append(s)
    return out


class SuggestionEngine:
    def __init__(self, config: MappingConfig, table: MappingTable, threshold: Optional[float] = None):
        self.config = config
        self.table = table
        self.threshold = SUGGESTION_THRESHOLD if threshold is None else threshold

    def similar_keywords(self, keyword: str, threshold: Optional[float] = None) -> List[Suggestion]:
        threshold = self.threshold if threshold is None else threshold
        found = []
        for kw, action in self.table.keyword_entries():
            score = similarity(keyword, kw)
            if score > threshold:
                found.append(Suggestion(keyword=kw, action=action, similarity=score))
        found.sort(key=lambda s: s.similarity, reverse=True)
        return found

    def suggest(self, keyword: str, limit: int = RESOLVER_SUGGESTION_LIMIT) -> List[Suggestion]:
        return self.similar_keywords(keyword)[:limit]

    def combination_suggestions(self, keyword: str) -> List[Suggestion]:
        """입력 단어를 포함하는 테이블 키워드를 "단어 + 테이블 조합"으로 제안한다."""
        out: List[Suggestion] = []
        for word in (keyword or "").split():
            w = normalize(word)
            for name in TABLE_ORDER:
                label = name.capitalize()
                for record in self.table.records(name):
                    if any(w in normalize(k) for k in record.keywords):
                        out.append(Suggestion(
                            keyword=f"{word} + {label} 조합",
                            action=record.action,
                            similarity=COMBINATION_SUGGESTION_SIMILARITY,
                            kind="combination",
                        ))
                        if len(out) >= COMBINATION_SUGGESTION_LIMIT:
                            return out
        return out

    def advanced_suggestions(self, keyword: str, limit: int = ADVANCED_SUGGESTION_LIMIT) -> List[Suggestion]:
        merged = self.similar_keywords(keyword) + self.combination_suggestions(keyword)
        merged.sort(key=lambda s: s.similarity, reverse=True)
        return _dedupe(merged)[:limit]

    # -------------------------------------------------------------------------
    # 대안 키워드 (고정 치환 규칙)
    # -------------------------------------------------------------------------
    def synonym_alternatives(self, keyword: str) -> List[Suggestion]:
        out = []
        for word, synonyms in self.config.synonyms.items():
            if word in keyword:
                for syn in synonyms:
                    out.append(Suggestion(
                        keyword=keyword.replace(word, syn, 1),
                        action=None,
                        similarity=SYNONYM_CONFIDENCE,
                        kind="synonym",
                    ))
        return out

    def grammar_variations(self, keyword: str) -> List[Suggestion]:
        out = []
        for particle in self.config.variation_particles:
            if keyword.endswith(particle) and len(keyword) > len(particle):
                out.append(Suggestion(keyword[: -len(particle)], None, PARTICLE_CONFIDENCE, "particle"))
        for particle in self.config.variation_particles:
            out.append(Suggestion(keyword + particle, None, PARTICLE_CONFIDENCE, "particle"))
        for ending in self.config.variation_endings:
            if ending not in keyword:
                out.append(Suggestion(f"{keyword} {ending}", None, ENDING_CONFIDENCE, "ending"))
        return out[:GRAMMAR_VARIATION_LIMIT]

    def alternatives(self, keyword: str, limit: int = ALTERNATIVE_LIMIT) -> List[Suggestion]:
        if not normalize(keyword):
            return []
        return _dedupe(self.synonym_alternatives(keyword) + self.grammar_variations(keyword))[:limit]
