"""Canonicalize conversion artifacts in raw question-bank cells.

Cells exported through document converters carry escaped brackets, named
symbol escapes and irregular spacing around LaTeX commands. Each clean-up is a
separate named step so it can be tested on its own; ``normalize`` runs them in
the order of ``NORMALIZATION_STEPS`` (later steps assume earlier ones ran).
"""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from .config import SegmenterConfig, get_segmenter_config


_BRACKET_ARTIFACT_RE = re.compile(r'\{\[\}\s*((?:(?!\{[\[\]]\}).)*?)\s*\{\]\}', re.DOTALL)
_TRAILING_BRACKET_RE = re.compile(r'(\w+)\{\[\]\}')

_SYMBOL_ESCAPES = (
    (re.compile(r'\\textgreater(?:\{\}|(?![a-zA-Z]))'), '>'),
    (re.compile(r'\\textless(?:\{\}|(?![a-zA-Z]))'), '<'),
    (re.compile(r'\\textdegree(?:\{\}|(?![a-zA-Z]))'), '\u00b0'),
)

_THIN_SPACE_RE = re.compile(r'(?:\s*(?<!\\)\\[,;:! ]\s*)+')
_SPACE_BEFORE_COMMAND_RE = re.compile(r'\s+(\\[a-zA-Z]+)')
_SPACE_AFTER_COMMAND_RE = re.compile(r'(\\[a-zA-Z]+)\s+')
_ESCAPED_SPECIAL_RE = re.compile(r'\\([$&%])')

_URL_RE = re.compile(r'https?://[^\s{}()\[\]|$]+')
# Escaped operators such as the \> and \< spacing commands are left alone.
_OPERATOR_RE = re.compile(r'\s*(?<!\\)(->|=>|<=|>=|==|!=|[=<>\u00b1\u221a\u00d7\u00f7])\s*')

_ESCAPED_BLANK_RE = re.compile(r'(?:\\_\s*){2,}\\_')


def collapse_bracket_artifacts(text: str) -> str:
    text = _BRACKET_ARTIFACT_RE.sub(r'[\1]', text)
    return _TRAILING_BRACKET_RE.sub(r'[\1]', text)


def replace_lone_brackets(text: str) -> str:
    return text.replace('{[}', '[').replace('{]}', ']')


def replace_symbol_escapes(text: str) -> str:
    for pattern, replacement in _SYMBOL_ESCAPES:
        text = pattern.sub(replacement, text)
    return text


def collapse_thin_spaces(text: str) -> str:
    return _THIN_SPACE_RE.sub(' ', text)


def normalize_command_spacing(text: str) -> str:
    text = _SPACE_BEFORE_COMMAND_RE.sub(r'\1', text)
    return _SPACE_AFTER_COMMAND_RE.sub(r'\1 ', text)


def unescape_specials(text: str) -> str:
    return _ESCAPED_SPECIAL_RE.sub(r'\1', text)


def space_operators(text: str) -> str:
    # URLs keep their query strings intact.
    pieces: List[str] = []
    last = 0
    for match in _URL_RE.finditer(text):
        pieces.append(_OPERATOR_RE.sub(r' \1 ', text[last:match.start()]))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(_OPERATOR_RE.sub(r' \1 ', text[last:]))
    return ''.join(pieces)


NORMALIZATION_STEPS: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ('collapse_bracket_artifacts', collapse_bracket_artifacts),
    ('replace_lone_brackets', replace_lone_brackets),
    ('replace_symbol_escapes', replace_symbol_escapes),
    ('collapse_thin_spaces', collapse_thin_spaces),
    ('normalize_command_spacing', normalize_command_spacing),
    ('unescape_specials', unescape_specials),
    ('space_operators', space_operators),
)


def normalize(raw: Optional[str]) -> str:
    if not raw:
        return ''
    text = raw
    for _name, step in NORMALIZATION_STEPS:
        text = step(text)
    return text


def collapse_blanks(text: str, marker: Optional[str] = None) -> str:
    """Replace fill-in blanks written as three or more ``\\_`` with one marker."""
    if marker is None:
        marker = get_segmenter_config().blank_marker
    return _ESCAPED_BLANK_RE.sub(lambda _m: marker, text)


def prepare(raw: Optional[str], config: Optional[SegmenterConfig] = None) -> str:
    cfg = config or get_segmenter_config()
    return collapse_blanks(normalize(raw), cfg.blank_marker)


__all__ = [
    'NORMALIZATION_STEPS',
    'collapse_blanks',
    'collapse_bracket_artifacts',
    'collapse_thin_spaces',
    'normalize',
    'normalize_command_spacing',
    'prepare',
    'replace_lone_brackets',
    'replace_symbol_escapes',
    'space_operators',
    'unescape_specials',
]
