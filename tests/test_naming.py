import pytest

from quizroom.naming import (
    clean_name, is_valid_classroom_name, is_valid_quiz_name, normalize_name,
)


@pytest.mark.parametrize('raw, cleaned', [
    ('  Intro   to\tTesting \n', 'Intro to Testing'),
    ('Already clean', 'Already clean'),
    ('   ', ''),
    ('', ''),
    (None, ''),
])
def test_clean_name_trims_and_collapses_but_keeps_case(raw, cleaned):
    assert clean_name(raw) == cleaned


@pytest.mark.parametrize('raw', ['  MiXeD   Case  ', 'a\t\tb', 'Ünïcode  Näme', 'x'])
def test_normalize_is_idempotent(raw):
    once = normalize_name(raw)
    assert normalize_name(once) == once


def test_normalize_lowercases_for_comparison():
    assert normalize_name(' Intro  TO testing ') == normalize_name('intro to TESTING')


def test_classroom_name_length_bounds():
    assert not is_valid_classroom_name('a' * 7)
    assert is_valid_classroom_name('a' * 8)
    assert is_valid_classroom_name('a' * 150)
    assert not is_valid_classroom_name('a' * 151)


def test_quiz_name_length_bounds():
    assert not is_valid_quiz_name('abc')
    assert is_valid_quiz_name('abcd')
    assert is_valid_quiz_name('a' * 60)
    assert not is_valid_quiz_name('a' * 61)
