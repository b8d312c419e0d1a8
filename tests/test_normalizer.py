import pytest  # type: ignore[import]

from qbsegment.normalizer import (NORMALIZATION_STEPS, collapse_blanks, collapse_bracket_artifacts,  # type: ignore[import]
                                  collapse_thin_spaces, normalize, normalize_command_spacing, prepare,
                                  replace_lone_brackets, replace_symbol_escapes, space_operators,
                                  unescape_specials)


def test_steps_run_in_documented_order():
    names = [name for name, _step in NORMALIZATION_STEPS]
    assert names == [
        'collapse_bracket_artifacts',
        'replace_lone_brackets',
        'replace_symbol_escapes',
        'collapse_thin_spaces',
        'normalize_command_spacing',
        'unescape_specials',
        'space_operators',
    ]


def test_collapse_bracket_artifacts():
    assert collapse_bracket_artifacts('see {[} 1 {]} and A{[]}') == 'see [1] and [A]'


def test_replace_lone_brackets():
    assert replace_lone_brackets('{[}x and y{]}') == '[x and y]'


def test_replace_symbol_escapes():
    assert replace_symbol_escapes(r'5 \textgreater{} 3 at 90\textdegree{}') == '5 > 3 at 90°'
    assert replace_symbol_escapes(r'\textless 2') == '< 2'


def test_collapse_thin_spaces():
    assert collapse_thin_spaces(r'a\,b \; c') == 'a b c'


def test_collapse_thin_spaces_ignores_line_breaks():
    assert collapse_thin_spaces(r'a \\ b') == r'a \\ b'


def test_normalize_command_spacing():
    assert normalize_command_spacing('x  \\alpha   y') == 'x\\alpha y'


def test_unescape_specials():
    assert unescape_specials(r'\$5 \& 10\%') == '$5 & 10%'


def test_space_operators():
    assert space_operators('x=1') == 'x = 1'
    assert space_operators('a<=b') == 'a <= b'
    assert space_operators('2×3') == '2 × 3'


def test_space_operators_leaves_urls_alone():
    text = 'see https://e.com/a.png?w=2 x=1'
    assert space_operators(text) == 'see https://e.com/a.png?w=2 x = 1'


def test_normalize_empty_input():
    assert normalize(None) == ''
    assert normalize('') == ''


def test_normalize_keeps_spaced_dollar_math():
    text = r'The area is $A = \pi r^2$ square units.'
    assert normalize(text) == text


@pytest.mark.parametrize('raw', [
    r'{[} x {]} \textless{}5 \, \frac {1}{2}=\$3 \_\_\_\_',
    r'The area is $A=\pi r^2$ square units.',
    r'Consider: \begin{enumerate} \item First \item Second\end{enumerate} Done.',
    'x±y and a>=b',
    r'\includegraphics{https://drive.google.com/file/d/abc/view?usp=sharing}',
    'plain words only',
    r'$a\>b$',
    r'x\=y',
    r'a \< b \> c',
])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_escaped_operators_are_not_spaced():
    assert space_operators(r'$a\>b$') == r'$a\>b$'
    assert space_operators(r'x\=y') == r'x\=y'
    assert normalize(r'$a\>b$') == r'$a\>b$'


def test_collapse_blanks():
    assert collapse_blanks(r'Fill \_\_\_\_ here', '__') == 'Fill __ here'
    assert collapse_blanks(r'a\_\_b', '__') == r'a\_\_b'


def test_prepare_uses_configured_blank_marker(monkeypatch):
    monkeypatch.setenv('QBSEG_BLANK_MARKER', '[blank]')
    assert prepare(r'a \_\_\_ b') == 'a [blank] b'
