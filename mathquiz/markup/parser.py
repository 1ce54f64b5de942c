"""Markup Parser - Texto misto (math + markup) para uma sequência de nós.

Precedência (de fora para dentro; cada estágio consome seus pares de
delimitadores antes do próximo):

    1. $$...$$      blockMath   (terminal)
    2. $...$        inlineMath  (terminal)
    3. ![alt](url)  image
    4. [label](url) link        (label só aceita negrito)
    5. **texto**    bold        (conteúdo literal)

Cada estágio é uma função que varre o texto com `str.find` a partir de um
cursor que só avança: tempo linear por estágio, sem backtracking de regex,
termina para qualquer entrada. Um delimitador sem fechamento torna o resto
do texto literal.

Example:
    >>> [n.kind.value for n in render("Solve $$x^2=4$$ then **check**")]
    ['text', 'blockMath', 'text', 'bold']
"""

from dataclasses import dataclass
from typing import Any, Callable

from ..models.enums import NodeKind

BLOCK_MATH_DELIMITER = "$$"
INLINE_MATH_DELIMITER = "$"
BOLD_DELIMITER = "**"
IMAGE_OPENER = "!["
LINK_OPENER = "["


@dataclass(frozen=True)
class Node:
    """Nó renderizável.

    Attributes:
        kind: Tipo do nó
        payload: Texto, conteúdo em negrito, fonte LaTeX, alt da imagem ou label do link
        href: URL de links e imagens
        children: Label do link parseado (texto/negrito)
    """

    kind: NodeKind
    payload: str = ""
    href: str | None = None
    children: tuple["Node", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "payload": self.payload}
        if self.href is not None:
            data["href"] = self.href
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


Stage = Callable[[str], list[Node]]


def _text(segment: str) -> list[Node]:
    return [Node(NodeKind.TEXT, segment)] if segment else []


def _split_paired(text: str, delimiter: str, kind: NodeKind, inner: Stage) -> list[Node]:
    """Separa pares `delimiter ... delimiter`; o resto segue para `inner`."""
    nodes: list[Node] = []
    width = len(delimiter)
    cursor = 0

    while cursor < len(text):
        start = text.find(delimiter, cursor)
        if start == -1:
            nodes.extend(inner(text[cursor:]))
            break

        end = text.find(delimiter, start + width)
        nodes.extend(inner(text[cursor:start]))
        if end == -1:
            # Sem fechamento: resto literal
            nodes.append(Node(NodeKind.TEXT, text[start:]))
            break

        nodes.append(Node(kind, text[start + width : end]))
        cursor = end + width

    return nodes


def _split_bracketed(text: str, opener: str, build: Callable[[str, str], Node], inner: Stage) -> list[Node]:
    """Separa construções `opener label](url)`.

    Um opener sem `](` logo após o label é texto comum; com `](` mas sem `)`
    é um delimitador sem fechamento e o resto vira literal.
    """
    nodes: list[Node] = []
    cursor = 0
    scan = 0

    while True:
        start = text.find(opener, scan)
        if start == -1:
            break

        label_start = start + len(opener)
        label_end = text.find("]", label_start)
        if label_end == -1:
            break
        if not text.startswith("(", label_end + 1):
            # Qualquer opener antes de label_end cairia no mesmo "]"
            scan = label_end + 1
            continue

        url_end = text.find(")", label_end + 2)
        nodes.extend(inner(text[cursor:start]))
        if url_end == -1:
            nodes.append(Node(NodeKind.TEXT, text[start:]))
            return nodes

        label = text[label_start:label_end]
        url = text[label_end + 2 : url_end].strip()
        nodes.append(build(label, url))
        cursor = scan = url_end + 1

    nodes.extend(inner(text[cursor:]))
    return nodes


def _parse_bold(text: str) -> list[Node]:
    return _split_paired(text, BOLD_DELIMITER, NodeKind.BOLD, _text)


def _build_link(label: str, url: str) -> Node:
    return Node(NodeKind.LINK, label, href=url, children=tuple(_merge_text(_parse_bold(label))))


def _build_image(alt: str, url: str) -> Node:
    return Node(NodeKind.IMAGE, alt, href=url)


def _parse_links(text: str) -> list[Node]:
    return _split_bracketed(text, LINK_OPENER, _build_link, _parse_bold)


def _parse_images(text: str) -> list[Node]:
    return _split_bracketed(text, IMAGE_OPENER, _build_image, _parse_links)


def _parse_inline_math(text: str) -> list[Node]:
    return _split_paired(text, INLINE_MATH_DELIMITER, NodeKind.INLINE_MATH, _parse_images)


def _parse_block_math(text: str) -> list[Node]:
    return _split_paired(text, BLOCK_MATH_DELIMITER, NodeKind.BLOCK_MATH, _parse_inline_math)


def _merge_text(nodes: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        if node.kind == NodeKind.TEXT:
            if not node.payload:
                continue
            if merged and merged[-1].kind == NodeKind.TEXT:
                merged[-1] = Node(NodeKind.TEXT, merged[-1].payload + node.payload)
                continue
        merged.append(node)
    return merged


def render(text: Any) -> list[Node]:
    """Converte texto com math/markup em uma sequência ordenada de nós.

    Entrada vazia, None ou não-string retorna lista vazia; nunca levanta.
    """
    if not isinstance(text, str) or not text:
        return []
    return _merge_text(_parse_block_math(text))
