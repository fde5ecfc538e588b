# -*- coding: utf-8 -*-
# =============================================================================
# 액션 추론 엔진
#
# 우선순위: 동사 액션 > 상태 액션 > 명사 기본 액션 > 전역 기본 액션
# 신뢰도:   0.9         0.7         0.5               0.3
# =============================================================================

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .config_loader import MappingConfig
from .models import ClassifiedWord, GrammarPattern, Role

SOURCE_CONFIDENCE = {
    "verb": 0.9,
    "state": 0.7,
    "noun": 0.5,
    "default": 0.3,
}


@dataclass
class InferredAction:
    action: str
    confidence: float
    source: str
    word: Optional[str] = None

    @property
    def defaulted(self) -> bool:
        return self.source == "default"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "confidence": self.confidence,
            "source": self.source,
            "word": self.word,
        }


class ActionInferenceEngine:
    def __init__(self, config: MappingConfig):
        self.tables = (
            (Role.VERB, "verb", config.verb_actions),
            (Role.STATE, "state", config.state_actions),
            (Role.NOUN, "noun", config.noun_actions),
        )
        self.default_action = config.default_action

    def lookup(self, word: str) -> Optional[InferredAction]:
        """역할과 무관하게 단어 하나를 동사 -> 상태 -> 명사 표에서 찾는다."""
        for _, source, table in self.tables:
            if word in table:
                return InferredAction(table[word], SOURCE_CONFIDENCE[source], source, word)
        return None

    def infer(self, words: Sequence[ClassifiedWord], pattern: Optional[GrammarPattern] = None) -> InferredAction:
        # pattern은 현재 선택에 관여하지 않는다. (신뢰도 계산은 Resolver 담당)
        for role, source, table in self.tables:
            for w in words:
                if w.role != role:
                    continue
                for candidate in (w.word, w.base):
                    if candidate in table:
                        return InferredAction(table[candidate], SOURCE_CONFIDENCE[source], source, candidate)
        return InferredAction(self.default_action, SOURCE_CONFIDENCE["default"], "default")
