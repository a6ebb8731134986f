"""
Placeholder engine for ODT XML parts.

Handles the ``{{...}}`` token syntax on parsed lxml trees:

- ``{{key}}``: literal substitution, or element injection for renderable values
- ``{{filter:key}}`` / ``{{filter:key|option}}``: filtered substitution
- ``{{nl2br:key}}``: value split into lines joined by ``text:line-break``
- ``{{#if:expr}}`` ... ``{{#endif}}`` and ``{{#foreach:key}}`` ... ``{{#endforeach}}``
  (see :mod:`odtquill.engine.blocks`)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping as MappingABC
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from lxml import etree

from ..config import DEFAULT_CONFIG, EngineConfig
from ..models.base import OdtElement
from ..utils.namespaces import PARAGRAPH_TAGS, is_tag, make_element
from .blocks import MARKER_PATTERN, apply_conditionals, expand_loops, remove_node
from .conditions import condition_key
from .filters import FilterSet, to_text

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\{\{(?:(\w+):)?([\w.\-]+)(?:\|([^}]*))?\}\}")
NL2BR_PATTERN = re.compile(r"\{\{nl2br:([\w.\-]+)\}\}")

BLOCK_TAGS = ("text:p", "text:h", "text:list", "table:table", "text:section")

NodeFactory = Callable[[], List[etree._Element]]


def is_renderable(value: Any) -> bool:
    return isinstance(value, OdtElement)


def is_repeating(value: Any) -> bool:
    """A list (or tuple) whose items are all mappings counts as loop rows, including an empty one."""
    return isinstance(value, (list, tuple)) and all(isinstance(row, MappingABC) for row in value)


def iter_text_owners(root: etree._Element):
    """Yield ``(element, is_tail)`` for every text slot below ``root``."""
    for element in root.iter():
        if isinstance(element.tag, str) and element.text:
            yield element, False
        if element is not root and element.tail:
            yield element, True


def _get_slot(element: etree._Element, is_tail: bool) -> str:
    return (element.tail if is_tail else element.text) or ""


def _set_slot(element: etree._Element, is_tail: bool, text: str) -> None:
    if is_tail:
        element.tail = text
    else:
        element.text = text


def enclosing_paragraph(element: etree._Element, is_tail: bool) -> Optional[etree._Element]:
    """Nearest ``text:p`` / ``text:h`` holding the given text slot."""
    node = element.getparent() if is_tail else element
    while node is not None:
        if is_tag(node, *PARAGRAPH_TAGS):
            return node
        node = node.getparent()
    return None


class PlaceholderEngine:
    """
    Applies bindings to one parsed XML part.

    The engine is stateless apart from its filters and configuration; the
    template keeps the cumulative bindings and calls the engine per part.
    """

    def __init__(self, filters: Optional[FilterSet] = None, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.filters = filters or FilterSet(self.config)

    # ------------------------------------------------------------------
    # Text substitution
    # ------------------------------------------------------------------
    def substitute_text(self, text: str, bindings: Mapping[str, Any]) -> str:
        """Replace bound plain and filtered tokens in one string."""
        if "{{" not in text:
            return text

        def replace(match: re.Match) -> str:
            filter_name, key, option = match.groups()
            if key not in bindings:
                return match.group(0)
            value = bindings[key]
            if filter_name is None:
                if is_renderable(value) or is_repeating(value):
                    return match.group(0)
                return to_text(value)
            if filter_name == "nl2br":
                return match.group(0)
            result = self.filters.apply(filter_name, value, option)
            return match.group(0) if result is None else result

        return TOKEN_PATTERN.sub(replace, text)

    def substitute(self, root: etree._Element, bindings: Mapping[str, Any]) -> int:
        """
        Substitute tokens in every text slot below ``root``.

        Returns:
            Number of text slots changed
        """
        changed = 0
        for element, is_tail in list(iter_text_owners(root)):
            text = _get_slot(element, is_tail)
            new_text = self.substitute_text(text, bindings)
            if new_text != text:
                _set_slot(element, is_tail, new_text)
                changed += 1
        return changed

    # ------------------------------------------------------------------
    # Line breaks
    # ------------------------------------------------------------------
    @staticmethod
    def _split_lines(text: str, bindings: Mapping[str, Any]) -> List[str]:
        pieces = [""]
        position = 0
        for match in NL2BR_PATTERN.finditer(text):
            key = match.group(1)
            pieces[-1] += text[position:match.start()]
            position = match.end()
            if key not in bindings:
                pieces[-1] += match.group(0)
                continue
            value = to_text(bindings[key]).replace("\r\n", "\n").replace("\r", "\n")
            lines = value.split("\n")
            pieces[-1] += lines[0]
            pieces.extend(lines[1:])
        pieces[-1] += text[position:]
        return pieces

    def expand_line_breaks(self, root: etree._Element, bindings: Mapping[str, Any]) -> int:
        """
        Expand ``{{nl2br:key}}`` tokens into text runs separated by
        ``text:line-break`` elements.

        Returns:
            Number of line breaks inserted
        """
        inserted = 0
        for element, is_tail in list(iter_text_owners(root)):
            text = _get_slot(element, is_tail)
            if "{{nl2br:" not in text:
                continue
            pieces = self._split_lines(text, bindings)
            _set_slot(element, is_tail, pieces[0])
            anchor = element if is_tail else None
            for index, piece in enumerate(pieces[1:]):
                line_break = make_element("text:line-break")
                line_break.tail = piece or None
                if anchor is None:
                    element.insert(index, line_break)
                else:
                    anchor.addnext(line_break)
                    anchor = line_break
                inserted += 1
        return inserted

    # ------------------------------------------------------------------
    # Element injection
    # ------------------------------------------------------------------
    def _wrap_inline(self, nodes: Iterable[etree._Element]) -> List[etree._Element]:
        """Block nodes pass through; inline nodes (frames) get their own paragraph."""
        result: List[etree._Element] = []
        for node in nodes:
            if is_tag(node, *BLOCK_TAGS):
                result.append(node)
                continue
            paragraph = make_element("text:p", {"text:style-name": self.config.default_paragraph_style})
            paragraph.append(node)
            result.append(paragraph)
        return result

    def inject(self, root: etree._Element, key: str, render: NodeFactory) -> int:
        """
        Replace each paragraph containing ``{{key}}`` with freshly rendered nodes.

        Args:
            root: Part root to search
            key: Placeholder key
            render: Returns a new list of detached nodes on each call

        Returns:
            Number of paragraphs replaced
        """
        token = "{{" + key + "}}"
        paragraphs: List[etree._Element] = []
        for element, is_tail in iter_text_owners(root):
            if token not in _get_slot(element, is_tail):
                continue
            paragraph = enclosing_paragraph(element, is_tail)
            if paragraph is None:
                logger.warning(f"Placeholder {token} is not inside a paragraph; left in place")
            elif paragraph not in paragraphs:
                paragraphs.append(paragraph)

        for paragraph in paragraphs:
            for node in self._wrap_inline(render()):
                paragraph.addprevious(node)
            remove_node(paragraph)
            logger.debug(f"Injected element for {token}")
        return len(paragraphs)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------
    def _render_row(self, wrapper: etree._Element, row: Mapping[str, Any]) -> None:
        nested = {key: value for key, value in row.items() if is_repeating(value)}
        if nested:
            expand_loops(wrapper, nested, lambda inner, inner_row: self._render_row(inner, {**row, **inner_row}))
        self.expand_line_breaks(wrapper, row)
        self.substitute(wrapper, row)
        apply_conditionals(wrapper, row)

    def expand_loops(self, root: etree._Element, repeating: Mapping[str, Sequence[Mapping[str, Any]]],
                     bindings: Optional[Mapping[str, Any]] = None) -> int:
        """
        Expand repeating blocks below ``root``.

        Each clone sees the global ``bindings`` overlaid with its row.
        """
        scope = dict(bindings or {})
        return expand_loops(root, repeating, lambda wrapper, row: self._render_row(wrapper, {**scope, **row}))

    @staticmethod
    def apply_conditionals(root: etree._Element, bindings: Mapping[str, Any]) -> int:
        return apply_conditionals(root, bindings)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    @staticmethod
    def extract_variables(roots: Iterable[etree._Element]) -> Dict[str, Any]:
        """
        Collect the placeholder names used in the given parts.

        Returns:
            Dict with sorted ``variables``, ``loops``, ``conditions``,
            ``negated_conditions``, ``filters`` and ``filter_options``
            (options keyed by ``filter:key``)
        """
        variables, loops, conditions, negated, filters = set(), set(), set(), set(), set()
        filter_options: Dict[str, set] = {}

        for root in roots:
            paragraphs = [node for node in root.iter() if is_tag(node, *PARAGRAPH_TAGS)]
            for paragraph in paragraphs:
                text = "".join(paragraph.itertext())
                for match in TOKEN_PATTERN.finditer(text):
                    filter_name, key, option = match.groups()
                    variables.add(key)
                    if filter_name:
                        filters.add(filter_name)
                        if option:
                            filter_options.setdefault(f"{filter_name}:{key}", set()).add(option)
                for match in MARKER_PATTERN.finditer(text):
                    kind, argument = match.group(1), match.group(2)
                    if kind == "foreach":
                        loops.add(argument.strip())
                    elif kind in ("if", "elseif"):
                        conditions.add(condition_key(argument))
                    elif kind == "ifnot":
                        negated.add(condition_key(argument))

        return {
            "variables": sorted(variables),
            "loops": sorted(loops),
            "conditions": sorted(conditions),
            "negated_conditions": sorted(negated),
            "filters": sorted(filters),
            "filter_options": {name: sorted(options) for name, options in sorted(filter_options.items())},
        }
