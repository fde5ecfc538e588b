# -*- coding: utf-8 -*-
# =============================================================================
# 구문 분해기
#
# - 공백으로 나눠 2개 이상이면 그대로 단어별 분류
# - 공백이 없는 단일 토큰은 사전 단어 최장 일치 우선으로 탐욕 분절
#   (예: "총개수확인" -> ["총", "개수", "확인"])
# - 분절 결과가 1개 이하이면 원래 토큰 하나로 되돌린다.
# =============================================================================

from typing import List

from .classifier import LexicalClassifier
from .mapping_table import MappingTable
from .models import (
    SEPARATION_GREEDY,
    SEPARATION_WHITESPACE,
    ClassifiedWord,
    DecomposedPhrase,
)
from .settings import normalize


class PhraseDecomposer:
    def __init__(self, classifier: LexicalClassifier, table: MappingTable):
        self.classifier = classifier
        self.table = table
        self._known = classifier.known_words()

    def segment(self, token: str) -> List[str]:
        """최장 일치 탐욕 분절. 맞는 단어가 없으면 앞 글자를 버리고 다시 시도한다."""
        result = []
        remaining = normalize(token)
        while remaining:
            for word in self._known:
                if remaining.startswith(word):
                    result.append(word)
                    remaining = remaining[len(word):]
                    break
            else:
                remaining = remaining[1:]
        return result

    def classify_word(self, word: str) -> ClassifiedWord:
        role, stem = self.classifier.classify_with_stem(word)
        return ClassifiedWord(
            word=word,
            role=role,
            exists_in_table=self.table.contains_word(word),
            priority=self.classifier.priority_of(stem or word),
            stem=stem,
        )

    def decompose(self, phrase: str) -> DecomposedPhrase:
        text = (phrase or "").strip()
        if not text:
            return DecomposedPhrase(original_text=phrase or "", words=[])

        tokens = text.split()
        method = SEPARATION_WHITESPACE
        if len(tokens) == 1:
            segments = self.segment(tokens[0])
            if len(segments) > 1:
                tokens = segments
                method = SEPARATION_GREEDY

        return DecomposedPhrase(
            original_text=text,
            words=[self.classify_word(t) for t in tokens],
            separation_method=method,
        )
