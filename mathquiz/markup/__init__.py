"""Markup - Parser de math/markup e adaptador HTML."""

from .html import HtmlRenderer, MathEngine, MathJaxEngine, is_safe_url
from .parser import Node, render

__all__ = ["Node", "render", "HtmlRenderer", "MathEngine", "MathJaxEngine", "is_safe_url"]
