# -*- coding: utf-8 -*-
# =============================================================================
# 매핑 테이블
#
# 목적
# - observer(1차) / complete(2차) 데이터 세트와 조합 카탈로그 평탄화 레코드를
#   하나의 읽기 전용 테이블로 묶는다.
# - 검색은 항상 2단계다.
#   (a) 대소문자 무시 완전 일치  (b) 양방향 부분 포함
#   각 단계에서 테이블 순서상 첫 레코드를 돌려준다. (iter_substring은 전체 히트)
#
# 주의
# - 부분 포함은 한 글자 키워드("일", "초" 등)와도 일치한다.
#   이 오탐은 테이블 단계에서는 그대로 두고, 채택 여부는 Resolver가 판단한다.
# =============================================================================

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config_loader import MappingConfig
from .models import MappingRecord, TableMatch
from .settings import normalize

TABLE_ORDER = ("observer", "complete")

# 조합 레코드로 옮기지 않는 카탈로그 필드
_COMBINATION_CORE_FIELDS = ("words", "result", "meaning", "action", "type")


def expand_combinations(entries: Iterable[Dict[str, Any]]) -> List[MappingRecord]:
    """
    조합 카탈로그 항목을 매핑 레코드로 평탄화한다.
    keywords = [조합 결과, 의미, ...원래 단어]
    """
    records = []
    for combo in entries:
        keywords: List[str] = []
        for k in [combo["result"], combo.get("meaning", "")] + list(combo["words"]):
            if k and k not in keywords:
                keywords.append(k)

        metadata = {k: v for k, v in combo.items() if k not in _COMBINATION_CORE_FIELDS}
        metadata["original_words"] = list(combo["words"])
        metadata["combined_result"] = combo["result"]
        metadata["meaning"] = combo.get("meaning", "")

        records.append(MappingRecord(
            keywords=tuple(keywords),
            action=combo["action"],
            type=combo.get("type") or "combination",
            status="combination_mapped",
            table="complete",
            metadata=metadata,
        ))
    return records


class MappingTable:
    def __init__(
        self,
        observer: Sequence[MappingRecord],
        complete: Sequence[MappingRecord],
        generated: Sequence[MappingRecord] = (),
    ):
        self._tables: Dict[str, Tuple[MappingRecord, ...]] = {
            "observer": tuple(observer),
            "complete": tuple(complete) + tuple(generated),
        }
        self.generated_count = len(generated)

        # 정규화 키워드 -> 첫 레코드 (테이블별)
        self._exact: Dict[str, Dict[str, Tuple[MappingRecord, str]]] = {}
        for name in TABLE_ORDER:
            index: Dict[str, Tuple[MappingRecord, str]] = {}
            for record in self._tables[name]:
                for kw in record.keywords:
                    index.setdefault(normalize(kw), (record, kw))
            self._exact[name] = index

        self._all_keywords = [
            normalize(kw) for name in TABLE_ORDER for r in self._tables[name] for kw in r.keywords
        ]

    @classmethod
    def from_config(cls, config: MappingConfig) -> "MappingTable":
        return cls(config.observer, config.complete, expand_combinations(config.combinations))

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------
    def _selected(self, table: Optional[str]) -> Tuple[str, ...]:
        if table is None:
            return TABLE_ORDER
        if table not in self._tables:
            raise ValueError(f"Unknown table: {table}. Known: {list(TABLE_ORDER)}")
        return (table,)

    def records(self, table: Optional[str] = None) -> List[MappingRecord]:
        return [r for name in self._selected(table) for r in self._tables[name]]

    def find_exact(self, keyword: str, table: Optional[str] = None) -> Optional[TableMatch]:
        query = normalize(keyword)
        if not query:
            return None
        for name in self._selected(table):
            hit = self._exact[name].get(query)
            if hit:
                return TableMatch(record=hit[0], matched_keyword=hit[1], exact=True)
        return None

    def iter_substring(self, keyword: str, table: Optional[str] = None) -> Iterator[TableMatch]:
        """양방향 부분 포함 히트를 테이블 순서대로 모두 돌려준다."""
        query = normalize(keyword)
        if not query:
            return
        for name in self._selected(table):
            for record in self._tables[name]:
                for kw in record.keywords:
                    k = normalize(kw)
                    if k and (query in k or k in query):
                        yield TableMatch(record=record, matched_keyword=kw, exact=False)

    def find_substring(self, keyword: str, table: Optional[str] = None) -> Optional[TableMatch]:
        return next(self.iter_substring(keyword, table), None)

    def search(self, keyword: str, table: Optional[str] = None) -> Optional[TableMatch]:
        """완전 일치 우선, 없으면 부분 포함. 빈 키워드는 항상 None."""
        return self.find_exact(keyword, table) or self.find_substring(keyword, table)

    def contains_word(self, word: str) -> bool:
        """단어가 어떤 키워드와 양방향 부분 포함 관계인지."""
        w = normalize(word)
        if not w:
            return False
        return any(k and (w in k or k in w) for k in self._all_keywords)

    def keyword_entries(self) -> List[Tuple[str, str]]:
        """(키워드, 액션) 목록. 중복 키워드는 테이블 순서상 첫 항목만 남긴다."""
        seen = set()
        out = []
        for name in TABLE_ORDER:
            for record in self._tables[name]:
                for kw in record.keywords:
                    key = normalize(kw)
                    if key and key not in seen:
                        seen.add(key)
                        out.append((kw, record.action))
        return out

    def sizes(self) -> Dict[str, int]:
        return {
            "observer": len(self._tables["observer"]),
            "complete": len(self._tables["complete"]) - self.generated_count,
            "generated": self.generated_count,
        }

    def __len__(self) -> int:
        return sum(len(v) for v in self._tables.values())
