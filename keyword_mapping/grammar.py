# -*- coding: utf-8 -*-
# =============================================================================
# 조사 / 어미 분석기
#
# 목적
# - 텍스트에서 조사(방법/목적/위치/주격)가 붙은 단어를 뽑는다.
# - 부정 어미("되지 않아야" 등)와 상태 어미("노출 중" 등)를 감지한다.
#
# 핵심 원칙
# - 방법/수단 조사(로/으로)가 붙은 단어가 실제 테스트 동작이다.
#   해당 단어는 핵심 액션으로 표시하고 우선순위 +100을 준다.
# - 부정 표현은 기대 액션의 극성을 뒤집는다. 통합 분석에서 +1000으로 최상위에 둔다.
# =============================================================================

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .classifier import LexicalClassifier
from .config_loader import MappingConfig

# 조사 처리 순서 (방법 조사를 가장 먼저 떼어낸다)
PARTICLE_ORDER = ("method", "object", "location", "subject")

KEY_ACTION_BONUS = 100
NEGATIVE_PRIORITY = 1000
STATE_PRIORITY = 50

# -----------------------------------------------------------------------------
# [Model] 분석 결과
# -----------------------------------------------------------------------------
@dataclass
class ParticleWord:
    word: str
    particle: Optional[str]
    priority: int
    is_key_action: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "particle": self.particle,
            "priority": self.priority,
            "is_key_action": self.is_key_action,
        }


@dataclass
class ParticleAnalysis:
    method: List[ParticleWord] = field(default_factory=list)
    object: List[ParticleWord] = field(default_factory=list)
    location: List[ParticleWord] = field(default_factory=list)
    subject: List[ParticleWord] = field(default_factory=list)
    general: List[ParticleWord] = field(default_factory=list)

    def key_actions(self) -> List[ParticleWord]:
        """핵심 액션 후보 (우선순위 내림차순, 동률은 등장 순서)."""
        return sorted(self.method, key=lambda w: w.priority, reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {k: [w.to_dict() for w in getattr(self, k)] for k in PARTICLE_ORDER + ("general",)}


@dataclass
class NegativeAnalysis:
    is_negative: bool = False
    negative_type: str = ""
    base_action: str = ""
    converted_action: str = ""
    # 변환 식별자에 대응하는 카탈론 액션 (예: "Verify Element Not Present")
    action: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_negative": self.is_negative,
            "negative_type": self.negative_type,
            "base_action": self.base_action,
            "converted_action": self.converted_action,
            "action": self.action,
        }


@dataclass
class StateAnalysis:
    is_state: bool = False
    state_type: str = ""
    base_word: str = ""

    @property
    def state_word(self) -> str:
        # "노출 중" -> "노출"
        return self.state_type.split()[0] if self.state_type else ""

    def to_dict(self) -> Dict[str, Any]:
        return {"is_state": self.is_state, "state_type": self.state_type, "base_word": self.base_word}


@dataclass
class TextAnalysis:
    original_text: str
    particles: ParticleAnalysis
    negative: NegativeAnalysis
    state: StateAnalysis
    prioritized: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def recommended(self) -> Optional[Dict[str, Any]]:
        return self.prioritized[0] if self.prioritized else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_text": self.original_text,
            "particles": self.particles.to_dict(),
            "negative": self.negative.to_dict(),
            "state": self.state.to_dict(),
            "prioritized": list(self.prioritized),
            "recommended": self.recommended,
        }

# -----------------------------------------------------------------------------
# [Analyzer]
# -----------------------------------------------------------------------------
class ParticleAnalyzer:
    def __init__(self, config: MappingConfig, classifier: LexicalClassifier):
        self.config = config
        self.classifier = classifier
        self._patterns = {}
        for category in PARTICLE_ORDER:
            markers = sorted(config.particle_markers.get(category, []), key=len, reverse=True)
            if not markers:
                continue
            alternation = "|".join(re.escape(m) for m in markers)
            # 토큰 끝에 붙은 조사만 인정한다. ("로그인"의 "로"는 조사가 아니다)
            self._patterns[category] = re.compile(
                rf"(?<!\S)(\S+?)({alternation})(?=[\s.,!?]|$)"
            )

    def analyze_particles(self, text: str) -> ParticleAnalysis:
        result = ParticleAnalysis()
        if not text:
            return result

        working = text
        for category in PARTICLE_ORDER:
            pattern = self._patterns.get(category)
            if pattern is None:
                continue
            items = getattr(result, category)
            for m in pattern.finditer(working):
                word, particle = m.group(1), m.group(2)
                base = self.classifier.priority_of(word)
                if category == "method":
                    items.append(ParticleWord(word, particle, base + KEY_ACTION_BONUS, is_key_action=True))
                else:
                    items.append(ParticleWord(word, particle, base))
            working = pattern.sub(" ", working)

        for word in re.sub(r"[^\w\s]", " ", working).split():
            if len(word) > 1:
                result.general.append(ParticleWord(word, None, self.classifier.priority_of(word)))
        return result

    def convert_negative(self, base_action: str) -> str:
        """기본 동작 -> 부정 액션 식별자. 대응이 없으면 기본 부정 식별자."""
        conversions = self.config.negative_conversions
        if base_action in conversions:
            return conversions[base_action]
        stem = self.classifier.strip_suffix(base_action)
        if stem and stem in conversions:
            return conversions[stem]
        # "파일업로드"처럼 동작어가 붙어 있는 경우
        for word, converted in conversions.items():
            if word in base_action:
                return converted
        return self.config.default_negative

    def negative_action(self, converted: str) -> str:
        actions = self.config.negative_actions
        return actions.get(converted) or actions.get(self.config.default_negative, "Verify Element Not Present")

    def analyze_negative(self, text: str) -> NegativeAnalysis:
        result = NegativeAnalysis()
        if not text:
            return result
        for ending in self.config.endings.get("negative", []):
            if ending in text:
                before = text.split(ending)[0].strip()
                tokens = before.split()
                result.is_negative = True
                result.negative_type = ending
                result.base_action = tokens[-1] if tokens else ""
                result.converted_action = self.convert_negative(result.base_action)
                result.action = self.negative_action(result.converted_action)
                break
        return result

    def analyze_state(self, text: str) -> StateAnalysis:
        result = StateAnalysis()
        if not text:
            return result
        for ending in self.config.endings.get("state", []):
            if ending in text:
                tokens = text.split(ending)[0].strip().split()
                result.is_state = True
                result.state_type = ending
                result.base_word = tokens[-1] if tokens else ""
                break
        return result

    def analyze_text(self, text: str) -> TextAnalysis:
        """조사/부정/상태 분석을 합쳐 우선순위 키워드 목록을 만든다."""
        analysis = TextAnalysis(
            original_text=text or "",
            particles=self.analyze_particles(text),
            negative=self.analyze_negative(text),
            state=self.analyze_state(text),
        )

        words: List[Dict[str, Any]] = []
        if analysis.negative.is_negative:
            words.append({
                "word": analysis.negative.converted_action,
                "priority": NEGATIVE_PRIORITY,
                "source": "negative",
                "is_key_action": True,
            })
        for source in ("method", "object", "general"):
            for item in getattr(analysis.particles, source):
                words.append({
                    "word": item.word,
                    "priority": item.priority,
                    "source": source,
                    "is_key_action": item.is_key_action,
                })
        if analysis.state.is_state:
            words.append({
                "word": analysis.state.state_word,
                "priority": STATE_PRIORITY,
                "source": "state",
                "is_key_action": False,
            })

        # sorted()는 안정 정렬이므로 동률은 등장 순서를 유지한다.
        analysis.prioritized = sorted(words, key=lambda w: w["priority"], reverse=True)
        return analysis

    def extract_keywords(self, text: str) -> List[str]:
        """
        문법 기반 키워드 추출.
        부정 변환 -> 상태 -> 우선순위 양수 단어 -> 나머지 순서로, 중복 없이 돌려준다.
        """
        analysis = self.analyze_text(text)
        ordered: List[str] = []
        if analysis.negative.is_negative:
            ordered.append(analysis.negative.converted_action)
        if analysis.state.is_state:
            ordered.append(analysis.state.state_type)
        rest = [w for w in analysis.prioritized if w["source"] not in ("negative", "state")]
        ordered.extend(w["word"] for w in rest if w["priority"] > 0)
        ordered.extend(w["word"] for w in rest if w["priority"] <= 0)

        seen = set()
        out = []
        for word in ordered:
            if word and word not in seen:
                seen.add(word)
                out.append(word)
        return out
