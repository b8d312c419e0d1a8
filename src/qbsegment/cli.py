import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .pipeline import SegmentationPipeline, count_question_types


def _parse_inputs(values: List[str]) -> List[str]:
    inputs: List[str] = []
    for value in values:
        if value.startswith('@'):
            with open(value[1:], 'r', encoding='utf-8') as fh:
                inputs.extend([line.strip() for line in fh if line.strip()])
        else:
            inputs.append(value)
    return inputs


def _load_records(path: str) -> List[Dict[str, Any]]:
    with open(path, 'r', encoding='utf-8') as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get('data', [data])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of records")
    return [record for record in data if isinstance(record, dict)]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Split question-bank cells into text, math and image segments.')
    parser.add_argument('--text', '-t', nargs='+', help='Raw cell strings to segment.')
    parser.add_argument('--input', '-i', nargs='+', help='JSON files holding a list of row records. Use @file to read a list of paths.')
    parser.add_argument('--out', '-o', help='Write JSON output to this file instead of stdout.')
    parser.add_argument('--summary', action='store_true', help='Include question type counts for row inputs.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable info-level logging output.')
    parser.add_argument('--debug', action='store_true', help='Enable debug-level logging output.')
    args = parser.parse_args(argv)

    if not args.text and not args.input:
        parser.error('Provide --text or --input.')

    log_level = logging.WARNING
    if args.debug:
        log_level = logging.DEBUG
    elif args.verbose:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format='[%(asctime)s] %(levelname)s %(name)s: %(message)s')

    pipeline = SegmentationPipeline()
    output: Dict[str, Any] = {}
    if args.text:
        output['texts'] = [pipeline.segment(text).to_dict() for text in args.text]
    if args.input:
        records: List[Dict[str, Any]] = []
        try:
            for path in _parse_inputs(args.input):
                records.extend(_load_records(path))
        except (OSError, ValueError) as exc:
            parser.error(f'Could not read input: {exc}')
        rows = pipeline.process_records(records)
        output['rows'] = [row.to_dict() for row in rows]
        if args.summary:
            output['question_types'] = count_question_types(row.row for row in rows)

    payload = json.dumps(output, ensure_ascii=False, indent=2)
    if args.out:
        with open(args.out, 'w', encoding='utf-8') as fh:
            fh.write(payload + '\n')
        print(f'Wrote segments: {args.out}')
    else:
        sys.stdout.write(payload + '\n')
    return 0


if __name__ == '__main__':
    sys.exit(main())
