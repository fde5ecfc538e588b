# -*- coding: utf-8 -*-
# =============================================================================
# 문법 패턴 매처
#
# - 분해된 단어들의 역할 시퀀스를 2/3/4+ 단어 패턴 카탈로그와 대조한다.
# - 같은 길이 버킷 안에서 카탈로그 순서상 처음 완전히 일치한 패턴이 이긴다.
# - 고정 패턴이 없어도 명사 + (동사|상태)가 있으면 flexible 패턴으로 허용한다.
# =============================================================================

from typing import Optional, Sequence

from .config_loader import MappingConfig
from .models import FLEXIBLE_PATTERN, GrammarPattern, Role


def bucket_for(arity: int) -> Optional[str]:
    if arity == 2:
        return "two_word"
    if arity == 3:
        return "three_word"
    if arity >= 4:
        return "complex"
    return None


class GrammarPatternMatcher:
    def __init__(self, config: MappingConfig):
        self.patterns = config.patterns

    def match(self, roles: Sequence[Role]) -> Optional[GrammarPattern]:
        """일치 패턴, flexible 패턴, 또는 None(동작 단어 없음)."""
        roles = tuple(roles)
        bucket = bucket_for(len(roles))
        if bucket:
            for pattern in self.patterns.get(bucket, ()):
                if pattern.roles == roles:
                    return pattern

        if Role.NOUN in roles and (Role.VERB in roles or Role.STATE in roles):
            return FLEXIBLE_PATTERN
        return None
