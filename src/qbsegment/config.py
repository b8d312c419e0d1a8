import logging
import os
from dataclasses import dataclass, field
from typing import Tuple

import importlib


logger = logging.getLogger(__name__)


def _load_dotenv():
    spec = importlib.util.find_spec('dotenv')
    if spec is None:  # pragma: no cover - optional dependency
        return lambda *_args, **_kwargs: False
    module = importlib.import_module('dotenv')
    return getattr(module, 'load_dotenv')


load_dotenv = _load_dotenv()

load_dotenv()


DEFAULT_IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'bmp', 'svg', 'webp')

DEFAULT_IMAGE_HOSTS = (
    'drive.google.com',
    'docs.google.com',
    'lh3.googleusercontent.com',
    'i.imgur.com',
    'res.cloudinary.com',
    'images.unsplash.com',
    'amazonaws.com',
    'dl.dropboxusercontent.com',
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s: %r; using %d", name, raw, default)
        return default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    values = tuple(part.strip().lower() for part in raw.split(',') if part.strip())
    return values or default


@dataclass(frozen=True)
class ClassifierConfig:
    # Strings longer than this that look like plain sentences are never math.
    plain_text_min_length: int = field(default_factory=lambda: _env_int('QBSEG_PLAIN_TEXT_MIN_LENGTH', 30))


@dataclass(frozen=True)
class ImageConfig:
    extensions: Tuple[str, ...] = field(default_factory=lambda: _env_list('QBSEG_IMAGE_EXTENSIONS', DEFAULT_IMAGE_EXTENSIONS))
    hosts: Tuple[str, ...] = field(default_factory=lambda: _env_list('QBSEG_IMAGE_HOSTS', DEFAULT_IMAGE_HOSTS))


@dataclass(frozen=True)
class SegmenterConfig:
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    images: ImageConfig = field(default_factory=ImageConfig)
    blank_marker: str = field(default_factory=lambda: os.getenv('QBSEG_BLANK_MARKER', '__'))


def get_segmenter_config() -> SegmenterConfig:
    return SegmenterConfig()
