import pytest

from barqvault.tokenizer import tokenize, tokenize_query


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello World", ["hello", "world"]),
        ("This is a test of the system", ["test", "system"]),
        ("Data-driven optimization!", ["data", "driven", "optimization"]),
    ],
)
def test_tokenize_basic(text, expected):
    assert tokenize(text) == expected


def test_tokenize_deduplication():
    assert tokenize("test test test again again") == ["test", "again"]


def test_tokenize_filters_stopwords():
    tokens = tokenize("the quick brown fox")
    assert "the" not in tokens
    assert "quick" in tokens
    assert "brown" in tokens
    assert "fox" in tokens


def test_tokenize_query_preserves_stopwords():
    tokens = tokenize_query("to be or not to be")
    assert tokens == ["to", "be", "or", "not"]


@pytest.mark.parametrize("text", ["", "   ", "!!!"])
def test_tokenize_empty(text):
    assert tokenize(text) == []


def test_tokenize_short_tokens_filtered():
    tokens = tokenize("a ab abc abcd")
    assert "a" not in tokens
    assert "ab" not in tokens
    assert "abc" in tokens
    assert "abcd" in tokens


def test_tokenize_query_drops_single_chars():
    assert tokenize_query("a ab abc") == ["ab", "abc"]