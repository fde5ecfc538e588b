from typing import Dict, Type
from .base import BaseRenderer
from .katalon import KatalonGroovyRenderer

class RendererRegistry:
    _registry: Dict[str, Type[BaseRenderer]] = {}

    @classmethod
    def register(cls, name: str, renderer_cls: Type[BaseRenderer]):
        cls._registry[name] = renderer_cls

    @classmethod
    def get_instance(cls, name: str) -> BaseRenderer:
        renderer_cls = cls._registry.get(name)
        if not renderer_cls:
            raise ValueError(
                f"Unknown renderer: {name}. Registered: {list(cls._registry.keys())}"
            )
        return renderer_cls()

    @classmethod
    def names(cls):
        return list(cls._registry.keys())

# 기본 Katalon Groovy 렌더러 등록
RendererRegistry.register("katalon", KatalonGroovyRenderer)
