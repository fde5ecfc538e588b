# -*- coding: utf-8 -*-
# =============================================================================
# 한글 어휘 분류기
#
# - 단어 1개를 분류 사전에 대조해 문법 역할(명사/동사/수식어/상태/조사)을 정한다.
# - 분류 순서는 명사 -> 동사 -> 수식어 -> 상태 -> 조사 -> unknown 이다.
#   사전끼리 겹치는 단어는 먼저 나온 역할로 확정한다. (예: "업로드" = 명사)
# - 동사 우선순위는 구체적 동작 > 일반 동작 > 검증 > 의도 순의 고정 가중치다.
# =============================================================================

from typing import Dict, List, Optional

from .config_loader import MappingConfig
from .models import Role
from .settings import normalize

# 분류 사전 카테고리 -> 역할 (검사 순서 그대로)
CATEGORY_ROLES = (
    ("nouns", Role.NOUN),
    ("verbs", Role.VERB),
    ("modifiers", Role.MODIFIER),
    ("states", Role.STATE),
    ("particles", Role.PARTICLE),
)

# 우선순위 뱅크 검사 순서
PRIORITY_BANK_ORDER = ("specific", "general", "verification", "intent")


class LexicalClassifier:
    def __init__(self, config: MappingConfig):
        self.config = config
        self._roles: Dict[str, Role] = {}
        known: List[str] = []

        for category, role in CATEGORY_ROLES:
            for words in config.classification.get(category, {}).values():
                for w in words:
                    key = normalize(w)
                    if not key:
                        continue
                    if key not in self._roles:
                        self._roles[key] = role
                        known.append(key)

        # 탐욕 분절용: 길이 내림차순, 같은 길이는 사전 등장 순서 유지
        self._known_by_length = sorted(known, key=len, reverse=True)

        suffixes = set(config.stem_suffixes)
        for words in config.classification.get("particles", {}).values():
            suffixes.update(words)
        for words in config.particle_markers.values():
            suffixes.update(words)
        self._suffixes = sorted((s for s in suffixes if s), key=len, reverse=True)

    def classify(self, word: str) -> Role:
        return self._roles.get(normalize(word), Role.UNKNOWN)

    def priority_of(self, word: str) -> int:
        """동작 우선순위. 어느 뱅크에도 없으면 0."""
        key = normalize(word)
        if not key:
            return 0
        for bank in PRIORITY_BANK_ORDER:
            weights = self.config.priority_banks.get(bank, {})
            if key in weights:
                return int(weights[key])
        return 0

    def known_words(self) -> List[str]:
        return list(self._known_by_length)

    def is_ending(self, word: str) -> bool:
        """단어 전체가 조사/어미인지. ("한다", "으로")"""
        return normalize(word) in self._suffixes

    def strip_suffix(self, word: str) -> Optional[str]:
        """
        끝의 조사/어미를 떼어 사전에 있는 어간을 찾는다.
        - "버튼을" -> "버튼", "클릭한다" -> "클릭"
        - 떼어낸 결과가 사전에 없으면 None
        """
        key = normalize(word)
        for suffix in self._suffixes:
            if len(key) > len(suffix) and key.endswith(suffix):
                stem = key[: -len(suffix)]
                role = self.classify(stem)
                if role not in (Role.UNKNOWN, Role.PARTICLE):
                    return stem
        return None

    def classify_with_stem(self, word: str):
        """(role, stem) 반환. 사전에 그대로 있으면 stem=None."""
        role = self.classify(word)
        if role != Role.UNKNOWN:
            return role, None
        stem = self.strip_suffix(word)
        if stem is None:
            return Role.UNKNOWN, None
        return self.classify(stem), stem
