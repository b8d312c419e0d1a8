"""Question-bank cell segmentation package."""

from .models import QuestionRow, Segment, SegmentedContent, SegmentKind
from .pipeline import SegmentationPipeline, segment_text

__all__ = ['QuestionRow', 'Segment', 'SegmentedContent', 'SegmentKind', 'SegmentationPipeline', 'segment_text']
