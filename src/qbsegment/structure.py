from __future__ import annotations

import logging
import re
from typing import List, Optional

from .config import SegmenterConfig, get_segmenter_config
from .models import (AssertionReason, EnumerateBlock, GroupRole, Layout, SegmentGroup,
                     SegmentedContent)
from .normalizer import prepare
from .tokenizer import tokenize


logger = logging.getLogger(__name__)


_ENUMERATE_RE = re.compile(r'\\begin\{enumerate\}(?:\[[^\]]*\])?(.*?)\\end\{enumerate\}', re.DOTALL)
_ITEM_SPLIT_RE = re.compile(r'\\item(?![a-zA-Z])(?:\[[^\]]*\])?')

# Labels must be whole words: "Assertions" and "Reasoning" are prose.
_ASSERTION_REASON_RE = re.compile(
    r'^(?P<lead>.*?)\bassertion(?![a-z])\s*(?:\(\s*a\s*\))?\s*:?\s*(?P<assertion>.*?)'
    r'\s*\breason(?![a-z])\s*(?:\(\s*r\s*\))?\s*:?\s*(?P<reason>.*)$',
    re.IGNORECASE | re.DOTALL,
)

ASSERTION_LABEL = 'Assertion:'
REASON_LABEL = 'Reason:'


def find_enumerate_block(text: str) -> Optional[EnumerateBlock]:
    match = _ENUMERATE_RE.search(text)
    if not match:
        return None
    items = [part.strip() for part in _ITEM_SPLIT_RE.split(match.group(1))]
    return EnumerateBlock(
        before_text=text[:match.start()].strip(),
        items=[item for item in items if item],
        after_text=text[match.end():].strip(),
    )


def find_assertion_reason(text: str) -> Optional[AssertionReason]:
    match = _ASSERTION_REASON_RE.match(text)
    if not match:
        return None
    assertion = match.group('assertion').strip()
    reason = match.group('reason').strip()
    if not assertion or not reason:
        return None
    return AssertionReason(lead_text=match.group('lead').strip(), assertion_text=assertion, reason_text=reason)


def _as_role(content: SegmentedContent, role: GroupRole, *, label: Optional[str] = None,
             index: Optional[int] = None) -> List[SegmentGroup]:
    groups: List[SegmentGroup] = []
    for group in content.groups:
        if group.role is GroupRole.BODY:
            group.role = role
            group.label = label
        if index is not None:
            group.index = index
        groups.append(group)
    return groups


def _expand_enumerate(block: EnumerateBlock, config: SegmenterConfig) -> SegmentedContent:
    groups: List[SegmentGroup] = []
    if block.before_text:
        groups.extend(_as_role(extract_structure(block.before_text, config), GroupRole.BEFORE))
    for position, item in enumerate(block.items, start=1):
        groups.extend(_as_role(extract_structure(item, config), GroupRole.ITEM, index=position))
    if block.after_text:
        groups.extend(_as_role(extract_structure(block.after_text, config), GroupRole.AFTER))
    return SegmentedContent(layout=Layout.ENUMERATE, groups=groups)


def _expand_assertion_reason(pair: AssertionReason, config: SegmenterConfig) -> SegmentedContent:
    groups: List[SegmentGroup] = []
    if pair.lead_text:
        groups.extend(_as_role(extract_structure(pair.lead_text, config), GroupRole.LEAD))
    groups.extend(_as_role(extract_structure(pair.assertion_text, config), GroupRole.ASSERTION, label=ASSERTION_LABEL))
    groups.extend(_as_role(extract_structure(pair.reason_text, config), GroupRole.REASON, label=REASON_LABEL))
    return SegmentedContent(layout=Layout.ASSERTION_REASON, groups=groups)


def extract_structure(text: Optional[str], config: Optional[SegmenterConfig] = None) -> SegmentedContent:
    """Segment one cell, honouring enumerate blocks and assertion/reason pairs.

    Composite structures are recognised on the whole prepared string before
    tokenization; each of their parts re-enters this function.
    """
    cfg = config or get_segmenter_config()
    prepared = prepare(text, cfg)
    if not prepared.strip():
        return SegmentedContent()

    block = find_enumerate_block(prepared)
    if block is not None:
        logger.debug("Enumerate block with %d item(s)", len(block.items))
        return _expand_enumerate(block, cfg)

    pair = find_assertion_reason(prepared)
    if pair is not None:
        logger.debug("Assertion/reason pair detected")
        return _expand_assertion_reason(pair, cfg)

    return SegmentedContent(
        layout=Layout.PLAIN,
        groups=[SegmentGroup(role=GroupRole.BODY, segments=tokenize(prepared, cfg), source=prepared)],
    )


__all__ = [
    'ASSERTION_LABEL',
    'REASON_LABEL',
    'extract_structure',
    'find_assertion_reason',
    'find_enumerate_block',
]
