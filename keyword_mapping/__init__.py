# -*- coding: utf-8 -*-
"""한글 테스트케이스 키워드 -> 카탈론 액션 매핑 엔진."""

from .config_loader import ConfigurationError, MappingConfig, load_config
from .models import ErrorKind, MappingResult, Role, Source, Suggestion
from .resolver import UnifiedResolver, create_resolver
from .testcase import analyze_testcase, assemble_script, parse_testcase

__all__ = [
    "ConfigurationError",
    "MappingConfig",
    "load_config",
    "ErrorKind",
    "MappingResult",
    "Role",
    "Source",
    "Suggestion",
    "UnifiedResolver",
    "create_resolver",
    "analyze_testcase",
    "assemble_script",
    "parse_testcase",
]
