import pytest  # type: ignore[import]

from qbsegment.classifier import canonical_image_url, is_image_reference, is_likely_math  # type: ignore[import]
from qbsegment.config import ClassifierConfig, ImageConfig, SegmenterConfig  # type: ignore[import]


@pytest.mark.parametrize('value', [
    'https://example.com/pic.PNG',
    'https://example.com/pic.png?size=2',
    'http://cdn.example.org/a/b/c.webp',
    'https://drive.google.com/file/d/abc/view',
    'https://i.imgur.com/xyz',
])
def test_image_references(value):
    assert is_image_reference(value)


@pytest.mark.parametrize('value', [
    'https://example.com/page.html',
    'example.com/pic.png',
    'pic.png',
    '',
    None,
])
def test_not_image_references(value):
    assert not is_image_reference(value)


def test_image_hosts_are_configurable():
    config = SegmenterConfig(images=ImageConfig(hosts=('media.school.test',)))
    assert is_image_reference('https://media.school.test/q/17', config)
    assert not is_image_reference('https://i.imgur.com/xyz', config)


def test_drive_file_link_is_rewritten():
    url = 'https://drive.google.com/file/d/1AbC_-x/view?usp=sharing'
    assert canonical_image_url(url) == 'https://drive.google.com/uc?export=view&id=1AbC_-x'


def test_drive_open_link_is_rewritten():
    assert canonical_image_url('https://drive.google.com/open?id=XYZ') == 'https://drive.google.com/uc?export=view&id=XYZ'


def test_other_urls_are_kept():
    assert canonical_image_url(' https://example.com/a.png ') == 'https://example.com/a.png'


@pytest.mark.parametrize('value', [
    r'\frac{1}{2}',
    'x^{2}',
    '{a}',
    r'\left( x',
    r'\Delta',
    'x = 3',
    'x^2',
    '2 + 3',
])
def test_likely_math(value):
    assert is_likely_math(value)


@pytest.mark.parametrize('value', [
    'The mitochondria is the powerhouse of the cell and produces energy for the organism.',
    'The total value of x = y when both are equal',
    'the cat',
    '',
    '   ',
    None,
])
def test_likely_prose(value):
    assert not is_likely_math(value)


def test_plain_text_threshold_is_configurable():
    config = SegmenterConfig(classifier=ClassifierConfig(plain_text_min_length=100))
    assert is_likely_math('The total value of x = y when both are equal', config)
