from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SegmentKind(str, Enum):
    TEXT = 'text'
    IMAGE = 'image'
    MATH = 'math'


@dataclass(frozen=True)
class Segment:
    """One typed, ordered unit of output.

    ``start``/``end`` are offsets into the normalized string the segment was
    tokenized from and ``raw`` is the text of that span. ``value`` is the
    payload handed to the renderer: the plain text, the (possibly rewritten)
    image URL, or the math body without its delimiters.
    """

    kind: SegmentKind
    value: str
    start: int = 0
    end: int = 0
    raw: str = ''

    @classmethod
    def text(cls, value: str, start: int = 0, end: Optional[int] = None) -> 'Segment':
        return cls(SegmentKind.TEXT, value, start, start + len(value) if end is None else end, value)

    @classmethod
    def image(cls, url: str, start: int = 0, end: int = 0, raw: str = '') -> 'Segment':
        return cls(SegmentKind.IMAGE, url, start, end, raw)

    @classmethod
    def math(cls, body: str, start: int = 0, end: int = 0, raw: str = '') -> 'Segment':
        return cls(SegmentKind.MATH, body, start, end, raw)

    def to_dict(self) -> Dict[str, str]:
        return {'kind': self.kind.value, 'value': self.value}


class GroupRole(str, Enum):
    BODY = 'body'
    BEFORE = 'before'
    ITEM = 'item'
    AFTER = 'after'
    LEAD = 'lead'
    ASSERTION = 'assertion'
    REASON = 'reason'


class Layout(str, Enum):
    PLAIN = 'plain'
    ENUMERATE = 'enumerate'
    ASSERTION_REASON = 'assertion_reason'


@dataclass
class SegmentGroup:
    role: GroupRole
    segments: List[Segment]
    source: str = ''
    label: Optional[str] = None
    index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'role': self.role.value,
            'segments': [segment.to_dict() for segment in self.segments],
        }
        if self.label:
            data['label'] = self.label
        if self.index is not None:
            data['index'] = self.index
        return data


@dataclass
class SegmentedContent:
    layout: Layout = Layout.PLAIN
    groups: List[SegmentGroup] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(group.segments for group in self.groups)

    def segments(self) -> List[Segment]:
        return [segment for group in self.groups for segment in group.segments]

    def to_dict(self) -> Dict[str, Any]:
        return {'layout': self.layout.value, 'groups': [group.to_dict() for group in self.groups]}


@dataclass
class EnumerateBlock:
    before_text: str
    items: List[str]
    after_text: str


@dataclass
class AssertionReason:
    lead_text: str
    assertion_text: str
    reason_text: str


@dataclass
class QuestionRow:
    serial_number: str = ''
    question: str = ''
    option_a: str = ''
    option_b: str = ''
    option_c: str = ''
    option_d: str = ''
    answers: str = ''
    question_type: str = ''
    topic: str = ''
    chapter: str = ''
    subject: str = ''
    exam: str = ''
    metadata: Dict[str, str] = field(default_factory=dict)

    SEGMENTED_FIELDS = ('question', 'option_a', 'option_b', 'option_c', 'option_d', 'answers')


__all__ = [
    'AssertionReason',
    'EnumerateBlock',
    'GroupRole',
    'Layout',
    'QuestionRow',
    'Segment',
    'SegmentGroup',
    'SegmentKind',
    'SegmentedContent',
]
