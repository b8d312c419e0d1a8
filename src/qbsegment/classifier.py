from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from .config import SegmenterConfig, get_segmenter_config


_ABSOLUTE_URL_RE = re.compile(r'^https?://\S+$', re.IGNORECASE)

_DRIVE_FILE_RE = re.compile(r'/file/d/([A-Za-z0-9_-]+)')
DRIVE_DIRECT_URL = 'https://drive.google.com/uc?export=view&id={file_id}'

_COMMAND_RE = re.compile(r'\\[a-zA-Z]+')
_BRACE_GROUP_RE = re.compile(r'\{[^{}]*\}')
_SCRIPT_GROUP_RE = re.compile(r'[_^]\{[^{}]*\}')
_STRUCTURAL_COMMAND_RE = re.compile(
    r'\\(?:frac|dfrac|tfrac|sqrt|sum|prod|int|oint|lim|log|ln|sin|cos|tan|text|mathrm|mathbf|'
    r'Delta|delta|alpha|beta|gamma|theta|lambda|mu|pi|sigma|omega|times|div|pm|cdot|infty|'
    r'vec|overline|hat|begin|end)(?![a-zA-Z])'
)
_DELIMITER_RE = re.compile(r'\\left|\\right|\\\(|\\\)|\\\[|\\\]|\$')

_PLAIN_SENTENCE_RE = re.compile(r'^[A-Za-z\s.,;:!?\'"()\-]+$')
_PLAIN_EQUALS_RE = re.compile(r'^[A-Za-z\s=]+$')

_BARE_SCRIPT_RE = re.compile(r'[A-Za-z0-9)\]][_^][A-Za-z0-9+\-]')
_SHORT_EQUATION_RE = re.compile(r'(?:^|[\s(])[A-Za-z](?:\s*[+\-*/]\s*[A-Za-z0-9]+)*\s*(?:=|<|>|<=|>=)\s*[-A-Za-z0-9(]')
_ARITHMETIC_RE = re.compile(r'\d\s*[+\-*/×÷]\s*\d')


def canonical_image_url(url: str) -> str:
    """Return the direct-view form of ``url`` for hosts that need one.

    Google Drive share links (``/file/d/<id>/view`` or ``open?id=<id>``) are
    rewritten to the ``uc?export=view`` endpoint. Other URLs are returned as is.
    """
    candidate = (url or '').strip()
    parsed = urlparse(candidate)
    host = (parsed.netloc or '').lower()
    if host.endswith('drive.google.com') or host.endswith('docs.google.com'):
        match = _DRIVE_FILE_RE.search(parsed.path)
        if match:
            return DRIVE_DIRECT_URL.format(file_id=match.group(1))
        ids = parse_qs(parsed.query).get('id')
        if ids and parsed.path.rstrip('/') in {'/open', '/uc'}:
            return DRIVE_DIRECT_URL.format(file_id=ids[0])
    return candidate


def _has_image_extension(parsed, extensions) -> bool:
    path = parsed.path.lower()
    return any(path.endswith('.' + ext) for ext in extensions)


def _is_image_host(host: str, hosts) -> bool:
    host = host.lower()
    return any(host == known or host.endswith('.' + known) for known in hosts)


def is_image_reference(candidate: Optional[str], config: Optional[SegmenterConfig] = None) -> bool:
    if not candidate:
        return False
    value = candidate.strip()
    if not _ABSOLUTE_URL_RE.match(value):
        return False
    cfg = (config or get_segmenter_config()).images
    parsed = urlparse(value)
    if not parsed.netloc:
        return False
    if _has_image_extension(parsed, cfg.extensions):
        return True
    return _is_image_host(parsed.netloc.split(':')[0], cfg.hosts)


def _has_math_signal(text: str) -> bool:
    return bool(
        _COMMAND_RE.search(text)
        or _BRACE_GROUP_RE.search(text)
        or _SCRIPT_GROUP_RE.search(text)
        or _STRUCTURAL_COMMAND_RE.search(text)
        or _DELIMITER_RE.search(text)
    )


def _looks_like_plain_sentence(text: str) -> bool:
    return bool(_PLAIN_SENTENCE_RE.match(text) or _PLAIN_EQUALS_RE.match(text))


def is_likely_math(candidate: Optional[str], config: Optional[SegmenterConfig] = None) -> bool:
    """Decide whether ``candidate`` reads as math markup rather than prose.

    Strong signals (commands, brace groups, braced scripts, delimiters) always
    win. Long strings shaped like ordinary sentences are treated as prose even
    when a weak signal such as ``x = y`` would otherwise match.
    """
    if not candidate or not candidate.strip():
        return False
    text = candidate.strip()
    if _has_math_signal(text):
        return True
    cfg = (config or get_segmenter_config()).classifier
    if len(text) > cfg.plain_text_min_length and _looks_like_plain_sentence(text):
        return False
    return bool(
        _BARE_SCRIPT_RE.search(text)
        or _SHORT_EQUATION_RE.search(text)
        or _ARITHMETIC_RE.search(text)
    )


__all__ = ['DRIVE_DIRECT_URL', 'canonical_image_url', 'is_image_reference', 'is_likely_math']
