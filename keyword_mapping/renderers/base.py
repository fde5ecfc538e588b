from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class RenderContext:
    keyword: str
    nouns: List[str] = field(default_factory=list)
    verbs: List[str] = field(default_factory=list)
    states: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)  # 매핑 레코드 부가 필드 (contains, duration_word 등)

    def to_dict(self):
        return {
            "keyword": self.keyword,
            "nouns": self.nouns,
            "verbs": self.verbs,
            "states": self.states,
            "metadata": self.metadata,
        }


class BaseRenderer:
    name = "base"

    def supports(self, action: str) -> bool:
        raise NotImplementedError

    def render(self, action: str, context: RenderContext) -> str:
        raise NotImplementedError
