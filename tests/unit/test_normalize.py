"""
Unit tests for tablediff.normalize
"""

from tablediff.normalize import (
    NULL_SENTINEL,
    composite_key,
    key_label,
    normalize,
    row_fingerprint,
)


class TestNormalize:
    """Test normalize()"""

    def test_none_becomes_empty_string(self):
        """Null values normalize to an empty string"""
        assert normalize(None, case_sensitive=True, ignore_whitespace=False) == ""

    def test_case_folding_when_not_case_sensitive(self):
        """Values are lower-cased unless case sensitive"""
        assert normalize("Hello", case_sensitive=False, ignore_whitespace=False) == "hello"
        assert normalize("Hello", case_sensitive=True, ignore_whitespace=False) == "Hello"

    def test_ignore_whitespace_strips_only_edges(self):
        """Only leading and trailing whitespace is removed"""
        result = normalize("  a  b \t", case_sensitive=True, ignore_whitespace=True)
        assert result == "a  b"

    def test_whitespace_kept_by_default(self):
        """Whitespace is significant unless ignored"""
        assert normalize(" a ", case_sensitive=True, ignore_whitespace=False) == " a "

    def test_empty_vs_null_folds_blank_values(self):
        """None, empty, blank and literal null share one normalized form"""
        values = [None, "", "   ", "null", "NULL", " Null "]
        normalized = {
            normalize(v, case_sensitive=True, ignore_whitespace=False, ignore_empty_vs_null=True)
            for v in values
        }
        assert normalized == {NULL_SENTINEL}

    def test_empty_vs_null_distinct_by_default(self):
        """Empty and literal null differ when the policy is off"""
        assert normalize("", True, False) != normalize("null", True, False)

    def test_sentinel_does_not_collide_with_text(self):
        """Ordinary text never normalizes to the null sentinel"""
        assert normalize("nil", False, True, True) != NULL_SENTINEL


class TestRowHelpers:
    """Test fingerprint and composite key helpers"""

    def test_fingerprint_holds_normalized_values(self):
        """Fingerprint is the tuple of normalized values"""
        assert row_fingerprint(["A", " b "], False, True) == ("a", "b")

    def test_fingerprint_keeps_column_boundaries(self):
        """Values containing separators cannot shift across columns"""
        assert row_fingerprint(["x||", "y"], True, False) != row_fingerprint(["x", "||y"], True, False)

    def test_composite_key_replaces_null(self):
        """Null key values become empty strings"""
        assert composite_key(["1", None, "x"]) == ("1", "", "x")

    def test_key_label_joins_with_pipe(self):
        """Key labels join raw values with a single pipe"""
        assert key_label(("us", "42")) == "us|42"

    def test_tuple_keys_do_not_collide_on_separator(self):
        """Values containing the separator stay distinct as tuples"""
        first = composite_key(["a|b", "c"])
        second = composite_key(["a", "b|c"])
        assert first != second
        assert key_label(first) == key_label(second)
