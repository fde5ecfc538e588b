# -*- coding: utf-8 -*-
# =============================================================================
# keyword_mapping 공용 설정 / 유틸리티
#
# 목적
# - 환경 변수 기반 런타임 설정을 한 곳에 모은다.
# - 콘솔 로그, 타임스탬프, JSON/JSONL 산출물 저장 헬퍼를 제공한다.
#
# 주의
# - 설정값은 import 시점에 1회 읽는다.
# - 매핑 테이블 자체는 여기서 읽지 않는다. (config_loader 담당)
# =============================================================================

import json
import os
import sys
from datetime import datetime
from typing import Any, Dict

# -----------------------------------------------------------------------------
# [Config] 환경 변수 기반 설정
# -----------------------------------------------------------------------------
# 패키지에 동봉된 기본 데이터 디렉터리
BUNDLED_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")

# 매핑 테이블 JSON 디렉터리
# - 미지정 시 패키지 동봉 데이터를 사용한다.
DATA_DIR = os.getenv("KWMAP_DATA_DIR", BUNDLED_DATA_DIR)

# 결과 캐시 용량
# - 용량 초과 시 가장 먼저 들어온 항목부터 제거한다.
CACHE_CAPACITY = int(os.getenv("KWMAP_CACHE_CAPACITY", "1000"))

# 실패 시 제안 목록에 포함할 최소 유사도
SUGGESTION_THRESHOLD = float(os.getenv("KWMAP_SUGGESTION_THRESHOLD", "0.5"))

# 부분 일치(substring) 히트를 채택하기 위한 최소 포함 비율
# - min(len)/max(len) 기준이다.
SUBSTRING_MIN_COVERAGE = float(os.getenv("KWMAP_SUBSTRING_MIN_COVERAGE", "0.5"))

# 콘솔 로그 prefix
LOG_PREFIX = os.getenv("KWMAP_LOG_PREFIX", "KwMap")

# 제안 목록 상한
RESOLVER_SUGGESTION_LIMIT = 5
ADVANCED_SUGGESTION_LIMIT = 10
ALTERNATIVE_LIMIT = 8

# -----------------------------------------------------------------------------
# [Utils] 공용 유틸리티
# -----------------------------------------------------------------------------
def now_iso() -> str:
    """로그 타임스탬프를 ISO 8601로 생성한다."""
    return datetime.now().isoformat(timespec="seconds")

def log(msg: str) -> None:
    """콘솔에 즉시 출력한다."""
    print(f"[{LOG_PREFIX}] {msg}", flush=True)

def ensure_dir(path: str) -> None:
    """출력 디렉터리를 생성한다."""
    try:
        os.makedirs(path, exist_ok=True)
    except Exception as e:
        log(f"CRITICAL: cannot create directory: {path} / error={e}")
        sys.exit(1)

def write_json(path: str, obj: Any) -> None:
    """JSON 파일로 저장한다."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

def append_jsonl(path: str, obj: Dict[str, Any]) -> None:
    """JSONL 로그 파일에 1줄을 추가한다."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(obj, ensure_ascii=False) + "\n")

def normalize(text: str) -> str:
    """비교용 정규화 (소문자 + 양끝 공백 제거)."""
    return (text or "").strip().lower()
