from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bs4 import BeautifulSoup  # type: ignore[import]

from .config import SegmenterConfig, get_segmenter_config
from .models import QuestionRow, SegmentedContent, SegmentKind
from .structure import extract_structure


logger = logging.getLogger(__name__)


# Spreadsheet headers seen in question-bank exports, matched case-insensitively.
HEADER_ALIASES: Dict[str, List[str]] = {
    'serial_number': ['serial number', 'q.no', 'q no', 'serial'],
    'question': ['question'],
    'option_a': ['option a'],
    'option_b': ['option b'],
    'option_c': ['option c'],
    'option_d': ['option d'],
    'answers': ['answers', 'answer', 'correct option'],
    'question_type': ['question type', 'qntype'],
    'topic': ['topic'],
    'chapter': ['chapter'],
    'subject': ['subject'],
    'exam': ['exam'],
}

UNSPECIFIED_TYPE = 'Not Specified'

_HTML_TAG_RE = re.compile(r'</?(?:br|p|div|span|sup|sub|b|i|u|strong|em|font|table|tr|td|li|ul|ol)\b[^>]*>', re.IGNORECASE)


@dataclass
class SegmentedRow:
    row: QuestionRow
    fields: Dict[str, SegmentedContent] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'serial_number': self.row.serial_number,
            'question_type': self.row.question_type,
            'fields': {name: content.to_dict() for name, content in self.fields.items()},
        }


def _header_key(header: Any) -> str:
    return ' '.join(str(header).strip().lower().split())


def _ensure_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, str):
        text = value
    elif isinstance(value, bool):
        text = str(value)
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, (int, float)):
        text = str(value)
    elif isinstance(value, list):
        parts = [_ensure_text(v) for v in value]
        text = '\n'.join(p for p in parts if p)
    elif isinstance(value, dict):
        text = json.dumps(value, ensure_ascii=False)
    else:
        text = str(value)
    if _HTML_TAG_RE.search(text):
        text = _strip_html(text)
    return text.strip()


def _strip_html(value: str) -> str:
    soup = BeautifulSoup(value, 'lxml')
    for br in soup.find_all('br'):
        br.replace_with('\n')
    return soup.get_text()


def row_from_record(record: Mapping[str, Any]) -> QuestionRow:
    """Map one spreadsheet record onto a ``QuestionRow`` using header aliases."""
    lookup = {_header_key(key): value for key, value in record.items()}
    values: Dict[str, str] = {}
    for attr, aliases in HEADER_ALIASES.items():
        for alias in [attr.replace('_', ' '), *aliases]:
            if alias in lookup and _ensure_text(lookup[alias]):
                values[attr] = _ensure_text(lookup[alias])
                break
    known = {alias for aliases in HEADER_ALIASES.values() for alias in aliases}
    known.update(attr.replace('_', ' ') for attr in HEADER_ALIASES)
    metadata = {str(key): _ensure_text(value) for key, value in record.items() if _header_key(key) not in known}
    return QuestionRow(metadata=metadata, **values)


def count_question_types(rows: Iterable[QuestionRow]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for row in rows:
        key = (row.question_type or '').strip() or UNSPECIFIED_TYPE
        counts[key] = counts.get(key, 0) + 1
    return counts


class SegmentationPipeline:
    def __init__(self, config: Optional[SegmenterConfig] = None):
        self.config = config or get_segmenter_config()

    def segment(self, text: Optional[str]) -> SegmentedContent:
        content = extract_structure(text, self.config)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Segmented %d chars into %d group(s), %d segment(s) [%s]",
                len(text or ''),
                len(content.groups),
                len(content.segments()),
                content.layout.value,
            )
        return content

    def segment_row(self, row: QuestionRow) -> SegmentedRow:
        result = SegmentedRow(row=row)
        for name in QuestionRow.SEGMENTED_FIELDS:
            result.fields[name] = self.segment(getattr(row, name))
        return result

    def process_rows(self, rows: Iterable[QuestionRow]) -> List[SegmentedRow]:
        results = [self.segment_row(row) for row in rows]
        math_fields = sum(
            1 for result in results for content in result.fields.values()
            if any(segment.kind is SegmentKind.MATH for segment in content.segments())
        )
        logger.info("Segmented %d row(s); %d field(s) contain math", len(results), math_fields)
        return results

    def process_records(self, records: Iterable[Mapping[str, Any]]) -> List[SegmentedRow]:
        return self.process_rows(row_from_record(record) for record in records)


def segment_text(text: Optional[str], config: Optional[SegmenterConfig] = None) -> SegmentedContent:
    return SegmentationPipeline(config).segment(text)


__all__ = [
    'HEADER_ALIASES',
    'SegmentationPipeline',
    'SegmentedRow',
    'count_question_types',
    'row_from_record',
    'segment_text',
]
