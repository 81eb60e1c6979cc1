"""
Word-level diff between two cell values.

Values are split into alternating whitespace and non-whitespace tokens so the
separators survive into the output. The changed middle section (after the
common prefix and suffix are trimmed) is aligned with
``difflib.SequenceMatcher`` over tokens.
"""

import re
from difflib import SequenceMatcher

from tablediff.models import WordSpan

_TOKEN_RE = re.compile(r"\s+|\S+")


def tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text)


def diff_words(
    old: str,
    new: str,
    case_sensitive: bool = True,
    ignore_whitespace: bool = False,
) -> tuple[WordSpan, ...]:
    """
    Diff ``old`` against ``new`` token by token.

    Unchanged spans carry the old value's literal text; within each changed
    region the removed span precedes the added span.

    Args:
        old: Source-side value
        new: Target-side value
        case_sensitive: Compare tokens as-is when True, lower-cased otherwise
        ignore_whitespace: Trim both values before tokenizing

    Returns:
        Tuple of coalesced ``WordSpan`` objects
    """
    if ignore_whitespace:
        old = old.strip()
        new = new.strip()

    old_tokens = tokenize(old)
    new_tokens = tokenize(new)
    if case_sensitive:
        old_keys, new_keys = old_tokens, new_tokens
    else:
        old_keys = [token.lower() for token in old_tokens]
        new_keys = [token.lower() for token in new_tokens]

    prefix = 0
    limit = min(len(old_keys), len(new_keys))
    while prefix < limit and old_keys[prefix] == new_keys[prefix]:
        prefix += 1

    suffix = 0
    while (
        suffix < limit - prefix
        and old_keys[len(old_keys) - 1 - suffix] == new_keys[len(new_keys) - 1 - suffix]
    ):
        suffix += 1

    builder = _SpanBuilder()
    builder.equal(old_tokens[:prefix])
    _diff_middle(
        old_tokens[prefix:len(old_tokens) - suffix],
        new_tokens[prefix:len(new_tokens) - suffix],
        old_keys[prefix:len(old_keys) - suffix],
        new_keys[prefix:len(new_keys) - suffix],
        builder,
    )
    builder.equal(old_tokens[len(old_tokens) - suffix:])
    return builder.finish()


def _diff_middle(old_tokens, new_tokens, old_keys, new_keys, builder: "_SpanBuilder") -> None:
    if not old_keys or not new_keys:
        builder.removed(old_tokens)
        builder.added(new_tokens)
        return

    # Popular tokens (whitespace runs in long values) are left out of the
    # matcher index by autojunk; equal runs are still extended across them
    matcher = SequenceMatcher(None, old_keys, new_keys)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            builder.equal(old_tokens[i1:i2])
        else:
            builder.removed(old_tokens[i1:i2])
            builder.added(new_tokens[j1:j2])


class _SpanBuilder:
    """Collects tokens into spans, holding each changed region until it closes."""

    def __init__(self):
        self._spans: list[WordSpan] = []
        self._equal: list[str] = []
        self._removed: list[str] = []
        self._added: list[str] = []

    def equal(self, tokens) -> None:
        if not tokens:
            return
        self._flush_changes()
        self._equal.extend(tokens)

    def removed(self, tokens) -> None:
        if tokens:
            self._flush_equal()
            self._removed.extend(tokens)

    def added(self, tokens) -> None:
        if tokens:
            self._flush_equal()
            self._added.extend(tokens)

    def finish(self) -> tuple[WordSpan, ...]:
        self._flush_equal()
        self._flush_changes()
        return tuple(self._spans)

    def _flush_equal(self) -> None:
        if self._equal:
            self._spans.append(WordSpan(value="".join(self._equal)))
            self._equal = []

    def _flush_changes(self) -> None:
        if self._removed:
            self._spans.append(WordSpan(value="".join(self._removed), removed=True))
            self._removed = []
        if self._added:
            self._spans.append(WordSpan(value="".join(self._added), added=True))
            self._added = []


__all__ = ["diff_words", "tokenize"]
