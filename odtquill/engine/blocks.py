"""
Block structure of conditional and repeating sections.

Marker paragraphs (``{{#if:...}}``, ``{{#foreach:...}}`` ...) among the
children of one container are parsed into a small tree before anything is
removed, so the rewrite is a single pass over a fixed structure.

A marker may also be a table row or list item whose only text is the
marker, which repeats or hides whole rows and items.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from lxml import etree

from ..utils.namespaces import element_text, is_tag
from .conditions import evaluate_condition

logger = logging.getLogger(__name__)

MARKER_PATTERN = re.compile(r"\{\{#(if|ifnot|elseif|foreach):([^}]+)\}\}|\{\{#(else|endif|endforeach)\}\}")

MARKER_TAGS = ("text:p", "text:h", "table:table-row", "text:list-item")


@dataclass
class Marker:
    kind: str
    argument: Optional[str]
    node: etree._Element


@dataclass
class Branch:
    kind: str
    expression: Optional[str]
    marker: etree._Element
    items: List["Item"] = field(default_factory=list)


@dataclass
class ConditionalBlock:
    branches: List[Branch]
    end: Optional[etree._Element] = None


@dataclass
class LoopBlock:
    key: str
    start: etree._Element
    items: List["Item"] = field(default_factory=list)
    end: Optional[etree._Element] = None


Item = Union[etree._Element, ConditionalBlock, LoopBlock]


def find_marker(node: Any) -> Optional[Marker]:
    """Return the marker carried by ``node``, if it holds exactly one."""
    if not is_tag(node, *MARKER_TAGS):
        return None
    matches = list(MARKER_PATTERN.finditer(element_text(node)))
    if len(matches) != 1:
        return None
    match = matches[0]
    kind = match.group(1) or match.group(3)
    argument = match.group(2).strip() if match.group(2) else None
    return Marker(kind, argument, node)


def flatten(items: Iterable[Item]) -> List[etree._Element]:
    """All XML nodes of ``items``, markers included, in document order."""
    nodes: List[etree._Element] = []
    for item in items:
        if isinstance(item, ConditionalBlock):
            for branch in item.branches:
                nodes.append(branch.marker)
                nodes.extend(flatten(branch.items))
            if item.end is not None:
                nodes.append(item.end)
        elif isinstance(item, LoopBlock):
            nodes.append(item.start)
            nodes.extend(flatten(item.items))
            if item.end is not None:
                nodes.append(item.end)
        else:
            nodes.append(item)
    return nodes


def _open_items(block: Union[ConditionalBlock, LoopBlock]) -> List[Item]:
    """Items of an unterminated block, with its markers as plain nodes."""
    if isinstance(block, LoopBlock):
        return [block.start] + block.items
    items: List[Item] = []
    for branch in block.branches:
        items.append(branch.marker)
        items.extend(branch.items)
    return items


def parse_blocks(nodes: Sequence[Any]) -> List[Item]:
    """
    Parse sibling nodes into plain nodes and (nested) blocks.

    Unterminated blocks and stray closing markers are kept as plain nodes.
    """
    root: List[Item] = []
    stack: List[Union[ConditionalBlock, LoopBlock]] = []

    def target() -> List[Item]:
        if not stack:
            return root
        top = stack[-1]
        if isinstance(top, ConditionalBlock):
            return top.branches[-1].items
        return top.items

    for node in nodes:
        marker = find_marker(node)
        if marker is None:
            target().append(node)
            continue

        kind = marker.kind
        if kind in ("if", "ifnot"):
            stack.append(ConditionalBlock([Branch(kind, marker.argument, node)]))
        elif kind in ("elseif", "else"):
            if stack and isinstance(stack[-1], ConditionalBlock):
                stack[-1].branches.append(Branch(kind, marker.argument, node))
            else:
                logger.warning(f"Stray {{{{#{kind}}}}} marker left in place")
                target().append(node)
        elif kind == "endif":
            if stack and isinstance(stack[-1], ConditionalBlock):
                block = stack.pop()
                block.end = node
                target().append(block)
            else:
                logger.warning("Stray {{#endif}} marker left in place")
                target().append(node)
        elif kind == "foreach":
            stack.append(LoopBlock(marker.argument, node))
        elif kind == "endforeach":
            if stack and isinstance(stack[-1], LoopBlock):
                block = stack.pop()
                block.end = node
                target().append(block)
            else:
                logger.warning("Stray {{#endforeach}} marker left in place")
                target().append(node)

    while stack:
        block = stack.pop()
        if isinstance(block, LoopBlock):
            logger.warning(f"Unterminated {{{{#foreach:{block.key}}}}} block left unexpanded")
        else:
            logger.warning(f"Unterminated {{{{#{block.branches[0].kind}:{block.branches[0].expression}}}}} block left in place")
        target().extend(_open_items(block))
    return root


def remove_node(node: etree._Element) -> None:
    """Detach ``node``, keeping any non-blank tail text in the document."""
    parent = node.getparent()
    if parent is None:
        return
    if node.tail and node.tail.strip():
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + node.tail
        else:
            parent.text = (parent.text or "") + node.tail
    parent.remove(node)


# ----------------------------------------------------------------------
# Conditionals
# ----------------------------------------------------------------------
def _branch_matches(branch: Branch, bindings: Mapping[str, Any]) -> bool:
    if branch.kind == "else":
        return True
    result = evaluate_condition(branch.expression or "", bindings)
    return not result if branch.kind == "ifnot" else result


def _select(items: List[Item], bindings: Mapping[str, Any], kept: List[etree._Element],
            removed: List[etree._Element], opaque: List[etree._Element]) -> None:
    for item in items:
        if isinstance(item, ConditionalBlock):
            chosen = next((b for b in item.branches if _branch_matches(b, bindings)), None)
            for branch in item.branches:
                removed.append(branch.marker)
                if branch is chosen:
                    _select(branch.items, bindings, kept, removed, opaque)
                else:
                    removed.extend(flatten(branch.items))
            if item.end is not None:
                removed.append(item.end)
        elif isinstance(item, LoopBlock):
            # Loop bodies are resolved per row when the loop expands.
            opaque.extend(flatten([item]))
        else:
            kept.append(item)


def apply_conditionals(container: etree._Element, bindings: Mapping[str, Any]) -> int:
    """
    Resolve every conditional block below ``container``.

    Returns:
        Number of nodes removed
    """
    items = parse_blocks(list(container))
    kept: List[etree._Element] = []
    removed: List[etree._Element] = []
    opaque: List[etree._Element] = []
    _select(items, bindings, kept, removed, opaque)

    for node in removed:
        remove_node(node)
    count = len(removed)
    for node in kept:
        if isinstance(node.tag, str) and len(node):
            count += apply_conditionals(node, bindings)
    return count


# ----------------------------------------------------------------------
# Loops
# ----------------------------------------------------------------------
RowRenderer = Callable[[etree._Element, Mapping[str, Any]], None]


def _expand(items: List[Item], repeating: Mapping[str, Sequence[Mapping[str, Any]]],
            render_row: RowRenderer) -> int:
    expanded = 0
    for item in items:
        if isinstance(item, LoopBlock):
            if item.key in repeating and item.end is not None:
                _expand_block(item, repeating[item.key], render_row)
                expanded += 1
            else:
                expanded += _expand(item.items, repeating, render_row)
        elif isinstance(item, ConditionalBlock):
            for branch in item.branches:
                expanded += _expand(branch.items, repeating, render_row)
        elif isinstance(item.tag, str) and len(item):
            expanded += expand_loops(item, repeating, render_row)
    return expanded


def _expand_block(block: LoopBlock, rows: Sequence[Mapping[str, Any]], render_row: RowRenderer) -> None:
    body = flatten(block.items)
    for row in rows:
        wrapper = etree.Element("loop-row")
        for node in body:
            clone = etree.fromstring(etree.tostring(node, with_tail=False))
            clone.tail = node.tail
            wrapper.append(clone)
        render_row(wrapper, row)
        for clone in list(wrapper):
            block.start.addprevious(clone)
    for node in [block.start] + body + [block.end]:
        remove_node(node)
    logger.debug(f"Expanded loop {block.key!r} with {len(rows)} rows")


def expand_loops(container: etree._Element, repeating: Mapping[str, Sequence[Mapping[str, Any]]],
                 render_row: RowRenderer) -> int:
    """
    Expand ``{{#foreach:key}}`` blocks whose key is in ``repeating``.

    Args:
        container: Element whose descendants are searched
        repeating: Key to list of row bindings
        render_row: Called with a wrapper element holding one fresh copy of
            the loop body and the row bindings; it rewrites the copy in place

    Returns:
        Number of loop blocks expanded
    """
    if not repeating:
        return 0
    return _expand(parse_blocks(list(container)), repeating, render_row)
