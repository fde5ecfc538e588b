import os
import shutil

import pytest

from keyword_mapping.config_loader import load_config
from keyword_mapping.renderers.registry import RendererRegistry
from keyword_mapping.resolver import UnifiedResolver
from keyword_mapping.settings import BUNDLED_DATA_DIR

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))


@pytest.fixture(scope="session")
def config():
    return load_config(BUNDLED_DATA_DIR)


@pytest.fixture
def resolver(config):
    # 캐시/통계가 테스트 간에 섞이지 않도록 매번 새로 만든다.
    return UnifiedResolver(config=config, renderer=RendererRegistry.get_instance("katalon"))


@pytest.fixture
def data_copy(tmp_path):
    """동봉 데이터 복사본 디렉터리 (파일 변조 테스트용)."""
    dst = tmp_path / "data"
    shutil.copytree(BUNDLED_DATA_DIR, dst)
    return dst
