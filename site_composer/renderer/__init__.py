"""Renderers — description de layout consommée par le canvas et l'aperçu."""
from .layout import LayoutItem, render_block, render_layout
from .base import LayoutRenderer, Renderer

__all__ = ["LayoutItem", "render_block", "render_layout", "LayoutRenderer", "Renderer"]
