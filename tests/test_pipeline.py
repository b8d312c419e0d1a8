import json
import logging

import pytest  # type: ignore[import]

from qbsegment.cli import main  # type: ignore[import]
from qbsegment.config import get_segmenter_config  # type: ignore[import]
from qbsegment.models import GroupRole, QuestionRow, SegmentKind  # type: ignore[import]
from qbsegment.pipeline import (SegmentationPipeline, count_question_types, row_from_record,  # type: ignore[import]
                                segment_text)


def test_row_from_record_uses_header_aliases():
    record = {
        'Q.No': 7,
        'Question': 'What is $x$?',
        'Option a': '1',
        'OPTION B': 2.0,
        'Correct option': 'A',
        'Question Type': 'MCQ',
        'Extra': 'foo',
    }
    row = row_from_record(record)
    assert row.serial_number == '7'
    assert row.question == 'What is $x$?'
    assert row.option_a == '1'
    assert row.option_b == '2'
    assert row.option_c == ''
    assert row.answers == 'A'
    assert row.question_type == 'MCQ'
    assert row.metadata == {'Extra': 'foo'}


def test_row_from_record_flattens_html_cells():
    row = row_from_record({'Question': 'Line one<br>Line two'})
    assert row.question == 'Line one\nLine two'


def test_count_question_types():
    rows = [
        QuestionRow(question_type='MCQ'),
        QuestionRow(question_type=' '),
        QuestionRow(question_type='MCQ'),
    ]
    assert count_question_types(rows) == {'MCQ': 2, 'Not Specified': 1}


def test_segment_row_covers_question_options_and_answer():
    pipeline = SegmentationPipeline()
    row = QuestionRow(question=r'Evaluate $\frac{1}{2} + \frac{1}{2}$', option_a='1', option_b=r'\(2\)', answers='A')
    result = pipeline.segment_row(row)
    assert list(result.fields) == list(QuestionRow.SEGMENTED_FIELDS)
    question = result.fields['question'].segments()
    assert [segment.kind for segment in question] == [SegmentKind.TEXT, SegmentKind.MATH]
    assert result.fields['option_b'].segments()[0].value == '2'
    assert result.fields['option_c'].is_empty


def test_process_records_logs_summary(caplog):
    pipeline = SegmentationPipeline()
    with caplog.at_level(logging.INFO, logger='qbsegment.pipeline'):
        results = pipeline.process_records([{'Question': 'Find $y$', 'Option A': 'one'}])
    assert len(results) == 1
    assert 'Segmented 1 row(s); 1 field(s) contain math' in caplog.text


def test_segment_text_to_dict():
    content = segment_text('Assertion: A is true. Reason: B holds.')
    data = content.to_dict()
    assert data['layout'] == 'assertion_reason'
    assert [group['role'] for group in data['groups']] == [GroupRole.ASSERTION.value, GroupRole.REASON.value]
    assert data['groups'][0]['label'] == 'Assertion:'
    assert data['groups'][0]['segments'] == [{'kind': 'text', 'value': 'A is true.'}]


def test_cli_segments_text(capsys):
    assert main(['--text', r'The area is $A = \pi r^2$ square units.']) == 0
    output = json.loads(capsys.readouterr().out)
    segments = output['texts'][0]['groups'][0]['segments']
    assert segments[1] == {'kind': 'math', 'value': r'A = \pi r^2'}


def test_cli_reads_rows_and_writes_summary(tmp_path):
    rows = tmp_path / 'rows.json'
    rows.write_text(json.dumps([
        {'Serial Number': 1, 'Question': 'Pick $x$', 'Question Type': 'MCQ'},
        {'Serial Number': 2, 'Question': 'Explain'},
    ]), encoding='utf-8')
    listing = tmp_path / 'inputs.txt'
    listing.write_text(f'{rows}\n', encoding='utf-8')
    out = tmp_path / 'out.json'
    assert main(['--input', f'@{listing}', '--summary', '--out', str(out)]) == 0
    data = json.loads(out.read_text(encoding='utf-8'))
    assert [row['serial_number'] for row in data['rows']] == ['1', '2']
    assert data['question_types'] == {'MCQ': 1, 'Not Specified': 1}


def test_cli_requires_input():
    with pytest.raises(SystemExit):
        main([])


def test_cli_reports_unreadable_input(tmp_path):
    bad = tmp_path / 'bad.json'
    bad.write_text('{not json', encoding='utf-8')
    with pytest.raises(SystemExit):
        main(['--input', str(bad)])


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv('QBSEG_PLAIN_TEXT_MIN_LENGTH', '12')
    monkeypatch.setenv('QBSEG_IMAGE_EXTENSIONS', 'PNG, tiff')
    config = get_segmenter_config()
    assert config.classifier.plain_text_min_length == 12
    assert config.images.extensions == ('png', 'tiff')


def test_config_falls_back_on_invalid_values(monkeypatch):
    monkeypatch.setenv('QBSEG_PLAIN_TEXT_MIN_LENGTH', 'lots')
    assert get_segmenter_config().classifier.plain_text_min_length == 30
