"""
Unit tests for token generation.

Covers:
    - length range [6, 10)
    - alphabet (ASCII letters and digits only)
    - custom ranges and invalid ranges
"""

import pytest

from shortener.manager.tokens import MAX_TOKEN_LENGTH, MIN_TOKEN_LENGTH, TOKEN_ALPHABET, generate_token


def test_token_length_and_alphabet():
    tokens = [generate_token() for _ in range(500)]
    for token in tokens:
        assert MIN_TOKEN_LENGTH <= len(token) < MAX_TOKEN_LENGTH
        assert set(token) <= set(TOKEN_ALPHABET)


def test_alphabet_is_62_alphanumerics():
    assert len(TOKEN_ALPHABET) == 62
    assert TOKEN_ALPHABET.isalnum()


def test_tokens_vary():
    assert len({generate_token() for _ in range(100)}) > 90


def test_custom_range():
    for _ in range(50):
        assert len(generate_token(3, 4)) == 3


@pytest.mark.parametrize("low,high", [(0, 5), (6, 6), (8, 7)])
def test_invalid_range(low, high):
    with pytest.raises(ValueError):
        generate_token(low, high)
