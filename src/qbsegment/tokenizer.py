from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from .classifier import canonical_image_url, is_image_reference, is_likely_math
from .config import SegmenterConfig, get_segmenter_config
from .models import Segment


logger = logging.getLogger(__name__)


class Rule(str, Enum):
    IMAGE_DIRECTIVE = 'image_directive'
    IMAGE_URL = 'image_url'
    DOLLAR_MATH = 'dollar_math'
    PAREN_MATH = 'paren_math'
    PIPE = 'pipe'
    BRACED_COMMAND = 'braced_command'
    SCRIPTED_IDENTIFIER = 'scripted_identifier'
    BARE_COMMAND = 'bare_command'


@dataclass(frozen=True)
class Candidate:
    start: int
    end: int
    rule: Rule
    full_text: str
    content: str

    @property
    def length(self) -> int:
        return self.end - self.start


# Balanced brace groups, up to three levels deep.
_BRACE1 = r'\{[^{}]*\}'
_BRACE2 = r'\{(?:[^{}]|' + _BRACE1 + r')*\}'
_BRACE3 = r'\{(?:[^{}]|' + _BRACE2 + r')*\}'
_SCRIPT = r'[_^](?:' + _BRACE3 + r'|[A-Za-z0-9])'

_INCLUDEGRAPHICS_RE = re.compile(r'\\includegraphics\s?(?:\[[^\]]*\])?\s?\{([^{}]+)\}')
_MARKDOWN_IMAGE_RE = re.compile(r'!\[[^\]]*\]\(\s*([^)\s]+)(?:\s+"[^"]*")?\s*\)')
_BARE_URL_RE = re.compile(r'https?://[^\s<>"\'{}|\\^`\[\]$]+')
_URL_TRAILING_PUNCT = '.,;:!?)'
_DOLLAR_RE = re.compile(r'(?<!\\)\$\$(.+?)\$\$|(?<!\\)\$([^$]+?)\$', re.DOTALL)
_PIPE_RE = re.compile(r'\|([^|\n]+)\|')
_BRACED_COMMAND_RE = re.compile(
    r'\\[a-zA-Z]+\*?(?:\[[^\[\]]*\])?(?:\s?(?:' + _BRACE3 + r'|' + _SCRIPT + r'))+'
)
_SCRIPTED_IDENTIFIER_RE = re.compile(r'(?<![\\A-Za-z0-9])[A-Za-z0-9]+(?:[_^]' + _BRACE3 + r')+')
_BARE_COMMAND_RE = re.compile(r'\\[a-zA-Z]+(?![a-zA-Z])(?!\s?\{)')
_WHITESPACE_RE = re.compile(r'\s+')

_MATH_DELIMITERS = (('\\(', '\\)'), ('\\[', '\\]'))


def _find_image_directives(text: str) -> Iterator[Candidate]:
    found = []
    for pattern in (_INCLUDEGRAPHICS_RE, _MARKDOWN_IMAGE_RE):
        for match in pattern.finditer(text):
            found.append(Candidate(match.start(), match.end(), Rule.IMAGE_DIRECTIVE, match.group(0), match.group(1).strip()))
    found.sort(key=lambda cand: cand.start)
    return iter(found)


def _find_image_urls(text: str, config: SegmenterConfig) -> Iterator[Candidate]:
    for match in _BARE_URL_RE.finditer(text):
        url = match.group(0).rstrip(_URL_TRAILING_PUNCT)
        if url and is_image_reference(url, config):
            yield Candidate(match.start(), match.start() + len(url), Rule.IMAGE_URL, url, url)


def _find_dollar_math(text: str) -> Iterator[Candidate]:
    for match in _DOLLAR_RE.finditer(text):
        inner = match.group(1) if match.group(1) is not None else match.group(2)
        yield Candidate(match.start(), match.end(), Rule.DOLLAR_MATH, match.group(0), inner)


def _scan_delimited(text: str, opener: str, closer: str) -> Iterator[Tuple[int, int]]:
    pos = 0
    while True:
        start = text.find(opener, pos)
        if start == -1:
            return
        depth = 1
        idx = start + len(opener)
        end = None
        while idx < len(text):
            if text.startswith(opener, idx):
                depth += 1
                idx += len(opener)
            elif text.startswith(closer, idx):
                depth -= 1
                idx += len(closer)
                if depth == 0:
                    end = idx
                    break
            else:
                idx += 1
        if end is None:
            pos = start + len(opener)
            continue
        yield start, end
        pos = end


def _find_paren_math(text: str) -> Iterator[Candidate]:
    found = []
    for opener, closer in _MATH_DELIMITERS:
        for start, end in _scan_delimited(text, opener, closer):
            full = text[start:end]
            found.append(Candidate(start, end, Rule.PAREN_MATH, full, full[len(opener):-len(closer)]))
    found.sort(key=lambda cand: cand.start)
    return iter(found)


def _regex_finder(pattern: re.Pattern, rule: Rule, group: int = 0) -> Callable[[str], Iterator[Candidate]]:
    def finder(text: str) -> Iterator[Candidate]:
        for match in pattern.finditer(text):
            yield Candidate(match.start(), match.end(), rule, match.group(0), match.group(group))
    return finder


def collect_candidates(text: str, config: Optional[SegmenterConfig] = None) -> List[Candidate]:
    """Run every span rule over ``text`` in priority order and gather matches."""
    cfg = config or get_segmenter_config()
    finders: Iterable[Callable[[str], Iterable[Candidate]]] = (
        _find_image_directives,
        lambda value: _find_image_urls(value, cfg),
        _find_dollar_math,
        _find_paren_math,
        _regex_finder(_PIPE_RE, Rule.PIPE, 1),
        _regex_finder(_BRACED_COMMAND_RE, Rule.BRACED_COMMAND),
        _regex_finder(_SCRIPTED_IDENTIFIER_RE, Rule.SCRIPTED_IDENTIFIER),
        _regex_finder(_BARE_COMMAND_RE, Rule.BARE_COMMAND),
    )
    candidates: List[Candidate] = []
    for finder in finders:
        candidates.extend(finder(text))
    return candidates


def schedule_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Pick non-overlapping candidates, earliest start first.

    The sort is stable, so when two candidates start at the same offset the one
    produced by the higher-priority rule is kept.
    """
    accepted: List[Candidate] = []
    last_end = 0
    for cand in sorted(candidates, key=lambda item: item.start):
        if cand.length <= 0:
            continue
        if cand.start >= last_end:
            accepted.append(cand)
            last_end = cand.end
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("Dropping %s candidate %r at %d (overlaps span ending at %d)", cand.rule.value, cand.full_text, cand.start, last_end)
    return accepted


def _strip_command_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub('', value)


def classify_candidate(cand: Candidate, config: Optional[SegmenterConfig] = None) -> Segment:
    cfg = config or get_segmenter_config()
    if cand.rule is Rule.IMAGE_DIRECTIVE:
        return Segment.image(canonical_image_url(cand.content), cand.start, cand.end, cand.full_text)
    if is_image_reference(cand.content, cfg):
        return Segment.image(canonical_image_url(cand.content), cand.start, cand.end, cand.full_text)
    if cand.rule in (Rule.DOLLAR_MATH, Rule.PAREN_MATH):
        body = cand.content.strip()
        if not body:
            return Segment.text(cand.full_text, cand.start, cand.end)
        return Segment.math(body, cand.start, cand.end, cand.full_text)
    if cand.rule is Rule.PIPE:
        if is_likely_math(cand.content, cfg):
            return Segment.math(cand.content.strip(), cand.start, cand.end, cand.full_text)
        return Segment.text(cand.full_text, cand.start, cand.end)
    return Segment.math(_strip_command_whitespace(cand.full_text), cand.start, cand.end, cand.full_text)


def tokenize(text: Optional[str], config: Optional[SegmenterConfig] = None) -> List[Segment]:
    """Split a normalized string into ordered Text, Image and Math segments."""
    if not text:
        return []
    cfg = config or get_segmenter_config()
    accepted = schedule_candidates(collect_candidates(text, cfg))
    if not accepted:
        return [Segment.text(text, 0, len(text))]

    segments: List[Segment] = []
    cursor = 0
    for cand in accepted:
        if cand.start > cursor:
            gap = text[cursor:cand.start]
            if gap.strip():
                segments.append(Segment.text(gap, cursor, cand.start))
        segments.append(classify_candidate(cand, cfg))
        cursor = cand.end
    if cursor < len(text):
        segments.append(Segment.text(text[cursor:], cursor, len(text)))
    return segments


__all__ = ['Candidate', 'Rule', 'classify_candidate', 'collect_candidates', 'schedule_candidates', 'tokenize']
