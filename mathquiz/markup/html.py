"""HTML Renderer - Adaptador de apresentação para a árvore de nós.

O parser é puro (texto -> nós); a tipografia matemática fica aqui, atrás
de um `MathEngine`. O engine padrão delega ao MathJax no navegador: emite
a fonte LaTeX entre `\\(...\\)` / `\\[...\\]` e o cliente tipografa quando a
biblioteca terminar de carregar.
"""

import html
import logging
from typing import Iterable, Protocol
from urllib.parse import urlparse

from ..models.enums import NodeKind
from .parser import Node, render

logger = logging.getLogger(__name__)

SAFE_URL_SCHEMES = frozenset({"", "http", "https", "mailto"})


class MathEngine(Protocol):
    def render(self, source: str, display: bool) -> str: ...


class MathJaxEngine:
    """Emite LaTeX escapado com delimitadores MathJax para tipografia no cliente."""

    def render(self, source: str, display: bool) -> str:
        escaped = html.escape(source)
        if display:
            return f'<div class="math-block">\\[{escaped}\\]</div>'
        return f'<span class="math-inline">\\({escaped}\\)</span>'


def is_safe_url(url: str | None) -> bool:
    """Aceita http(s), mailto e URLs relativas."""
    if not url:
        return False
    try:
        scheme = urlparse(url.strip()).scheme.lower()
    except ValueError:
        return False
    return scheme in SAFE_URL_SCHEMES


class HtmlRenderer:
    """Renderiza nós em HTML.

    Falhas do engine de math nunca propagam: o nó cai para a fonte bruta,
    com a mensagem de erro no atributo `title`.

    Example:
        >>> HtmlRenderer().render("**x** = $2$")
        '<strong>x</strong> = <span class="math-inline">\\\\(2\\\\)</span>'
    """

    def __init__(self, math_engine: MathEngine | None = None):
        self.math_engine = math_engine or MathJaxEngine()

    def render(self, text: str | None) -> str:
        return self.render_nodes(render(text))

    def render_nodes(self, nodes: Iterable[Node]) -> str:
        return "".join(self._render_node(node) for node in nodes)

    def _render_node(self, node: Node) -> str:
        if node.kind == NodeKind.TEXT:
            return html.escape(node.payload)

        if node.kind == NodeKind.BOLD:
            return f"<strong>{html.escape(node.payload)}</strong>"

        if node.kind in (NodeKind.BLOCK_MATH, NodeKind.INLINE_MATH):
            return self._render_math(node)

        if node.kind == NodeKind.LINK:
            label = self.render_nodes(node.children) if node.children else html.escape(node.payload)
            if not is_safe_url(node.href):
                return html.escape(f"[{node.payload}]({node.href or ''})")
            href = html.escape(node.href or "", quote=True)
            return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{label}</a>'

        if node.kind == NodeKind.IMAGE:
            if not is_safe_url(node.href):
                return html.escape(f"![{node.payload}]({node.href or ''})")
            src = html.escape(node.href or "", quote=True)
            alt = html.escape(node.payload, quote=True)
            return f'<img src="{src}" alt="{alt}" loading="lazy" />'

        return html.escape(node.payload)

    def _render_math(self, node: Node) -> str:
        display = node.kind == NodeKind.BLOCK_MATH
        try:
            return self.math_engine.render(node.payload, display)
        except Exception as e:
            logger.warning(f"Math engine falhou para '{node.payload[:40]}': {e}")
            delimiter = "$$" if display else "$"
            source = html.escape(f"{delimiter}{node.payload}{delimiter}")
            return f'<span class="math-error" title="{html.escape(str(e), quote=True)}">{source}</span>'
