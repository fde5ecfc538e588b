from .base import BaseRenderer, RenderContext
from .registry import RendererRegistry

__all__ = ["BaseRenderer", "RenderContext", "RendererRegistry"]
