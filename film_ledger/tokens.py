"""
Film Ledger — Token-Set Codec
=============================

What:  Ordered, duplicate-free token sets and their delimited storage form.
How:   TokenSet is the in-memory representation. decode()/encode() convert
       to and from the single space-joined text column used for a user's
       favor tags and liked movie ids.
Who:   PreferenceService (reads, extends and writes back the two columns).

Rules:
    - Tokens compare as exact, case-sensitive strings ("12" != "012").
    - First occurrence wins the position; later duplicates are dropped.
    - Stored text is split on any whitespace, so doubled, leading or
      trailing spaces are tolerated and disappear on the next encode.
    - There are no error conditions.
"""

from typing import Iterable, Iterator, List, Optional

DELIMITER = " "


class TokenSet:
    """
    An insertion-ordered set of string tokens.

    Example:
        >>> tags = TokenSet.from_raw("action drama")
        >>> tags.extend(["drama", "comedy"])
        ['comedy']
        >>> tags.to_raw()
        'action drama comedy'
    """

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Optional[Iterable[str]] = None):
        # dict keeps insertion order and gives O(1) membership
        self._tokens = {}
        if tokens is not None:
            self.extend(tokens)

    @classmethod
    def from_raw(cls, raw: Optional[str]) -> "TokenSet":
        """Build a set from the stored text; None or "" gives an empty set."""
        return cls(raw.split() if raw else ())

    def to_raw(self) -> str:
        return DELIMITER.join(self._tokens)

    def add(self, token: str) -> List[str]:
        """
        Add one token and return the tokens that were actually new.

        A token containing whitespace counts as several tokens; a blank
        token adds nothing.
        """
        added = []
        for piece in str(token).split():
            if piece not in self._tokens:
                self._tokens[piece] = None
                added.append(piece)
        return added

    def extend(self, tokens: Iterable[str]) -> List[str]:
        """Add tokens in order; return the new ones in first-seen order."""
        added = []
        for token in tokens:
            added.extend(self.add(token))
        return added

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TokenSet):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"TokenSet({list(self._tokens)!r})"


# ── Codec functions ───────────────────────────────────────────────────────

def decode(raw: Optional[str]) -> List[str]:
    """Stored text → ordered, duplicate-free token list."""
    return list(TokenSet.from_raw(raw))


def encode(tokens: Iterable[str]) -> str:
    """Token sequence → stored text (deduplicated, single-space joined)."""
    return TokenSet(tokens).to_raw()


def contains(raw: Optional[str], token: str) -> bool:
    """Exact string membership of `token` in the stored text."""
    return token in TokenSet.from_raw(raw)


def append(raw: Optional[str], token: str) -> str:
    """
    Stored text with `token` appended, or `raw` unchanged if already present.

    Numeric ids are passed in their string form by the caller.
    """
    if contains(raw, token):
        return raw
    tokens = TokenSet.from_raw(raw)
    tokens.add(token)
    return tokens.to_raw()
