# -*- coding: utf-8 -*-
# =============================================================================
# 정적 설정 테이블 로더
#
# 목적
# - data/*.json (매핑 테이블, 분류 사전, 문법 규칙, 조합 카탈로그)을 1회 읽는다.
# - 문서 구조는 jsonschema로 검증한다.
# - 필수 테이블이 없으면 ConfigurationError(누락 목록)를 올린다.
# - 매핑 항목 단위의 오류(keywords/action 누락)는 걸러내고 개수만 남긴다.
#
# 반환되는 MappingConfig는 읽기 전용으로 취급한다. (Resolver에 주입)
# =============================================================================

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator, validate
from jsonschema.exceptions import ValidationError

from .models import GrammarPattern, MappingRecord, Role
from .settings import DATA_DIR, log

# -----------------------------------------------------------------------------
# [Files] 필수 테이블 파일
# -----------------------------------------------------------------------------
OBSERVER_FILE = "observer_mappings.json"
COMPLETE_FILE = "complete_mappings.json"
COMBINATION_FILE = "combination_catalog.json"
LEXICON_FILE = "lexicon.json"
GRAMMAR_FILE = "grammar_rules.json"

REQUIRED_FILES = (OBSERVER_FILE, COMPLETE_FILE, COMBINATION_FILE, LEXICON_FILE, GRAMMAR_FILE)

# 파일 내부의 필수 테이블 (파일 -> 최상위 키 목록)
REQUIRED_TABLES = {
    OBSERVER_FILE: ("mappings",),
    COMPLETE_FILE: ("mappings",),
    COMBINATION_FILE: ("groups",),
    LEXICON_FILE: ("classification", "priority_banks", "particle_markers", "endings", "negative_conversions", "negative_actions"),
    GRAMMAR_FILE: ("patterns", "inference"),
}

CLASSIFICATION_CATEGORIES = ("nouns", "verbs", "modifiers", "states", "particles")

# -----------------------------------------------------------------------------
# [Schema] jsonschema 정의
# -----------------------------------------------------------------------------
WORD_LIST_SCHEMA = {"type": "array", "items": {"type": "string"}}

MAPPING_ENTRY_SCHEMA = {
    "type": "object",
    "required": ["keywords", "action"],
    "properties": {
        "keywords": {
            "type": "array",
            "minItems": 1,
            "items": {"type": "string", "minLength": 1},
        },
        "action": {"type": "string", "minLength": 1},
        "type": {"type": "string"},
        "status": {"type": "string"},
        "frequency": {"type": "number"},
    },
}

MAPPING_DOC_SCHEMA = {
    "type": "object",
    "required": ["mappings"],
    "properties": {"mappings": {"type": "array"}},
}

COMBINATION_ENTRY_SCHEMA = {
    "type": "object",
    "required": ["words", "result", "action"],
    "properties": {
        "words": {"type": "array", "minItems": 1, "items": {"type": "string", "minLength": 1}},
        "result": {"type": "string", "minLength": 1},
        "meaning": {"type": "string"},
        "action": {"type": "string", "minLength": 1},
        "duration_word": {"type": "string"},
        "selector_word": {"type": "string"},
    },
}

COMBINATION_DOC_SCHEMA = {
    "type": "object",
    "required": ["groups"],
    "properties": {
        "groups": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["pattern", "combinations"],
                "properties": {
                    "pattern": {"type": "string"},
                    "catalog": {"type": "string"},
                    "combinations": {"type": "array"},
                },
            },
        }
    },
}

LEXICON_SCHEMA = {
    "type": "object",
    "properties": {
        "classification": {
            "type": "object",
            "required": list(CLASSIFICATION_CATEGORIES),
            "additionalProperties": {
                "type": "object",
                "additionalProperties": WORD_LIST_SCHEMA,
            },
        },
        "priority_banks": {
            "type": "object",
            "required": ["specific", "general", "verification", "intent"],
            "additionalProperties": {
                "type": "object",
                "additionalProperties": {"type": "number", "minimum": 0},
            },
        },
        "particle_markers": {
            "type": "object",
            "required": ["method", "object", "location"],
            "additionalProperties": WORD_LIST_SCHEMA,
        },
        "endings": {
            "type": "object",
            "required": ["negative", "state"],
            "additionalProperties": WORD_LIST_SCHEMA,
        },
        "negative_conversions": {"type": "object", "additionalProperties": {"type": "string"}},
        "negative_actions": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["action"],
                "properties": {"action": {"type": "string"}, "description": {"type": "string"}},
            },
        },
        "default_negative": {"type": "string"},
        "synonyms": {"type": "object", "additionalProperties": WORD_LIST_SCHEMA},
        "variation_particles": WORD_LIST_SCHEMA,
        "variation_endings": WORD_LIST_SCHEMA,
        "stem_suffixes": WORD_LIST_SCHEMA,
    },
}

PATTERN_SCHEMA = {
    "type": "object",
    "required": ["id", "roles", "frequency_weight"],
    "properties": {
        "id": {"type": "string"},
        "roles": {
            "type": "array",
            "minItems": 2,
            "items": {"enum": [r.value for r in Role if r != Role.UNKNOWN]},
        },
        "frequency_weight": {"type": "number", "exclusiveMinimum": 0, "maximum": 1},
        "template": {"type": "string"},
        "action_rule": {"type": "string"},
        "examples": WORD_LIST_SCHEMA,
    },
}

GRAMMAR_SCHEMA = {
    "type": "object",
    "properties": {
        "patterns": {
            "type": "object",
            "required": ["two_word", "three_word", "complex"],
            "additionalProperties": {"type": "array", "items": PATTERN_SCHEMA},
        },
        "inference": {
            "type": "object",
            "required": ["verb_actions", "state_actions", "noun_actions"],
            "additionalProperties": {"type": "object", "additionalProperties": {"type": "string"}},
        },
        "default_action": {"type": "string", "minLength": 1},
    },
}

_MAPPING_ENTRY_VALIDATOR = Draft7Validator(MAPPING_ENTRY_SCHEMA)
_COMBINATION_ENTRY_VALIDATOR = Draft7Validator(COMBINATION_ENTRY_SCHEMA)

# -----------------------------------------------------------------------------
# [Error] 설정 오류
# -----------------------------------------------------------------------------
class ConfigurationError(RuntimeError):
    """필수 테이블 누락/구조 오류. missing에 누락된 테이블 이름을 담는다."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])

# -----------------------------------------------------------------------------
# [Model] 로드 결과
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class MappingConfig:
    """
    Resolver가 주입받는 정적 설정 묶음.
    - observer / complete: 1차 / 2차 매핑 데이터 세트
    - combinations: 조합 카탈로그 항목 (pattern/catalog 필드 포함, 평탄화 전)
    - invalid_counts: 파일별로 걸러낸 잘못된 항목 수
    """
    observer: Tuple[MappingRecord, ...]
    complete: Tuple[MappingRecord, ...]
    combinations: Tuple[Dict[str, Any], ...]
    classification: Dict[str, Dict[str, List[str]]]
    priority_banks: Dict[str, Dict[str, int]]
    particle_markers: Dict[str, List[str]]
    endings: Dict[str, List[str]]
    negative_conversions: Dict[str, str]
    negative_actions: Dict[str, str]
    default_negative: str
    synonyms: Dict[str, List[str]]
    variation_particles: Tuple[str, ...]
    variation_endings: Tuple[str, ...]
    stem_suffixes: Tuple[str, ...]
    patterns: Dict[str, Tuple[GrammarPattern, ...]]
    verb_actions: Dict[str, str]
    state_actions: Dict[str, str]
    noun_actions: Dict[str, str]
    default_action: str = "Get Text"
    data_dir: str = ""
    invalid_counts: Dict[str, int] = field(default_factory=dict)

    def summary(self) -> Dict[str, Any]:
        return {
            "observer": len(self.observer),
            "complete": len(self.complete),
            "combinations": len(self.combinations),
            "patterns": sum(len(v) for v in self.patterns.values()),
            "invalid": dict(self.invalid_counts),
        }

# -----------------------------------------------------------------------------
# [Load] 파일 읽기 / 검증
# -----------------------------------------------------------------------------
def _read_documents(data_dir: str) -> Dict[str, Any]:
    docs: Dict[str, Any] = {}
    missing: List[str] = []

    for name in REQUIRED_FILES:
        path = os.path.join(data_dir, name)
        if not os.path.exists(path):
            missing.append(name)
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                docs[name] = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"cannot read {path}: {e}", missing=[name])

    for name, doc in docs.items():
        if not isinstance(doc, dict):
            missing.append(name)
            continue
        for table in REQUIRED_TABLES[name]:
            if table not in doc:
                missing.append(f"{name}:{table}")

    if missing:
        raise ConfigurationError(f"missing tables: {', '.join(missing)}", missing=missing)
    return docs

def _validate(doc: Any, schema: Dict[str, Any], name: str) -> None:
    try:
        validate(instance=doc, schema=schema)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "(root)"
        raise ConfigurationError(f"invalid structure in {name} at {where}: {e.message}", missing=[name])

def _load_mappings(doc: Dict[str, Any], table: str, name: str, invalid: Dict[str, int]) -> Tuple[MappingRecord, ...]:
    records = []
    dropped = 0
    for entry in doc["mappings"]:
        if not _MAPPING_ENTRY_VALIDATOR.is_valid(entry):
            dropped += 1
            continue
        records.append(MappingRecord.from_dict(entry, table=table))
    if dropped:
        invalid[name] = invalid.get(name, 0) + dropped
        log(f"WARN: {name}: {dropped} invalid mapping entries skipped")
    return tuple(records)

def _load_combinations(doc: Dict[str, Any], invalid: Dict[str, int]) -> Tuple[Dict[str, Any], ...]:
    entries = []
    dropped = 0
    for group in doc["groups"]:
        for combo in group["combinations"]:
            if not _COMBINATION_ENTRY_VALIDATOR.is_valid(combo):
                dropped += 1
                continue
            item = dict(combo)
            item["pattern"] = group["pattern"]
            item["catalog"] = group.get("catalog", "combinations")
            entries.append(item)
    if dropped:
        invalid[COMBINATION_FILE] = invalid.get(COMBINATION_FILE, 0) + dropped
        log(f"WARN: {COMBINATION_FILE}: {dropped} invalid combination entries skipped")
    return tuple(entries)

def _load_patterns(grammar: Dict[str, Any]) -> Dict[str, Tuple[GrammarPattern, ...]]:
    buckets = {}
    for bucket, items in grammar["patterns"].items():
        buckets[bucket] = tuple(
            GrammarPattern(
                id=p["id"],
                roles=tuple(Role(r) for r in p["roles"]),
                frequency_weight=float(p["frequency_weight"]),
                template=p.get("template", ""),
                action_rule=p.get("action_rule", ""),
                examples=tuple(p.get("examples", [])),
            )
            for p in items
        )
    return buckets

def load_config(data_dir: Optional[str] = None) -> MappingConfig:
    """
    설정 테이블을 읽어 MappingConfig를 만든다.
    - 필수 파일/테이블 누락, 구조 오류는 ConfigurationError
    - 개별 매핑 항목 오류는 제외 후 계속 진행
    """
    data_dir = data_dir or DATA_DIR
    docs = _read_documents(data_dir)

    _validate(docs[OBSERVER_FILE], MAPPING_DOC_SCHEMA, OBSERVER_FILE)
    _validate(docs[COMPLETE_FILE], MAPPING_DOC_SCHEMA, COMPLETE_FILE)
    _validate(docs[COMBINATION_FILE], COMBINATION_DOC_SCHEMA, COMBINATION_FILE)
    _validate(docs[LEXICON_FILE], LEXICON_SCHEMA, LEXICON_FILE)
    _validate(docs[GRAMMAR_FILE], GRAMMAR_SCHEMA, GRAMMAR_FILE)

    invalid: Dict[str, int] = {}
    lexicon = docs[LEXICON_FILE]
    grammar = docs[GRAMMAR_FILE]
    inference = grammar["inference"]

    config = MappingConfig(
        observer=_load_mappings(docs[OBSERVER_FILE], "observer", OBSERVER_FILE, invalid),
        complete=_load_mappings(docs[COMPLETE_FILE], "complete", COMPLETE_FILE, invalid),
        combinations=_load_combinations(docs[COMBINATION_FILE], invalid),
        classification=lexicon["classification"],
        priority_banks={k: {w: int(v) for w, v in bank.items()} for k, bank in lexicon["priority_banks"].items()},
        particle_markers=lexicon["particle_markers"],
        endings=lexicon["endings"],
        negative_conversions=lexicon["negative_conversions"],
        negative_actions={k: v["action"] for k, v in lexicon["negative_actions"].items()},
        default_negative=lexicon.get("default_negative", "verifyElementNotPresent"),
        synonyms=lexicon.get("synonyms", {}),
        variation_particles=tuple(lexicon.get("variation_particles", [])),
        variation_endings=tuple(lexicon.get("variation_endings", [])),
        stem_suffixes=tuple(lexicon.get("stem_suffixes", [])),
        patterns=_load_patterns(grammar),
        verb_actions=inference["verb_actions"],
        state_actions=inference["state_actions"],
        noun_actions=inference["noun_actions"],
        default_action=grammar.get("default_action", "Get Text"),
        data_dir=data_dir,
        invalid_counts=invalid,
    )

    log(f"config loaded from {data_dir}: {config.summary()}")
    return config
