"""
Argclaim tokens: classification and the claim table.

What this module provides
- Token: one input string with its 0-based position (program name excluded).
- ClaimTable: the index-based view of a run's input
  • keys: option key -> ordered indices of the tokens that supplied it
    (short keys are one-character strings, long keys are their names).
  • others: ascending indices not attributed to any key yet; values and
    positionals are claimed out of it, it never regrows.
- classify(table, terminator): the single forward pass that fills a table by
  token shape alone, before any option is known.
- Run: per-run context shared by every declarer (parser and groups): the
  table, the key registry and the fault accumulator.

Shapes (evaluated per token, in order)
- ""                 → skipped, no index recorded
- terminator         → dropped; every later token becomes an "other" index
- "-abc"             → short cluster, keys "a", "b", "c" supplied by this index
- "--name"           → long flag, key "name" (must not be the last token)
- anything else      → "other" index (including "-" alone)
"""
import bisect
from contextlib import contextmanager
from typing import NamedTuple

from .faults import *
from .registry import KeyRegistry
from .utils import *


class Token(NamedTuple):
    """
    one input token and its 0-based position in the input.
    """
    text: str
    index: int

    def __str__(self):
        return self.text


def _is_short(text):
    return len(text) >= 2 and text[0] == "-" and text[1] != "-"


def _is_long(text):
    return len(text) >= 3 and text.startswith("--")


class ClaimTable:
    """
    Index-based claims over one immutable token sequence.

    Invariants
    - keys only ever grow during classification; afterwards they are read-only.
    - others stays sorted and duplicate-free; claim() is the only removal path.
    - an index is either a key occurrence, in others, or already claimed.
    """

    tokens = mirror("tokens")
    keys = mirror("keys")
    others = mirror("others")

    def __init__(self, tokens, /):
        self._tokens = tuple(tokens)
        self._keys = {}
        self._others = []

    def __len__(self):
        return len(self._tokens)

    def __getitem__(self, index):
        return Token(self._tokens[index], index)

    def supply(self, key, index, /):
        """record that the token at index supplied key."""
        self._keys.setdefault(key, []).append(index)

    def adopt(self, index, /):
        """add index to the unclaimed others (indices arrive in ascending order)."""
        if self._others and self._others[-1] >= index:
            raise ValueError("other indices must be adopted in ascending order")
        self._others.append(index)

    def find(self, key, /):
        """occurrence indices for key, or an empty tuple when it was never supplied."""
        return tuple(self._keys.get(key, ()))

    def after(self, index, /):
        """smallest unclaimed other index strictly greater than index (or None)."""
        position = bisect.bisect_right(self._others, index)
        try:
            return self._others[position]
        except IndexError:
            return None

    def first(self):
        """smallest unclaimed other index (or None)."""
        return self._others[0] if self._others else None

    def claim(self, index, /):
        """remove index from the unclaimed others and return its token."""
        position = bisect.bisect_left(self._others, index)
        if position == len(self._others) or self._others[position] != index:
            raise KeyError(index)
        del self._others[position]
        return self[index]

    def drain(self):
        """claim every remaining other index, ascending."""
        drained, self._others = self._others, []
        return [self[index] for index in drained]

    def unclaimed(self):
        return len(self._others)


def classify(table, terminator, /):
    """
    Fill the claim table by token shape, in one left-to-right pass.

    Parameters
    - table: an empty ClaimTable bound to the input tokens.
    - terminator: the string that ends flag parsing (e.g., "--").

    Raises
    - DanglingSwitchError: a long flag is the last token. The table keeps
      everything classified before it; classification stops there.
    """
    terminated = False

    for index, text in enumerate(table.tokens):
        if not text:
            continue

        if terminated:
            table.adopt(index)
            continue

        if text == terminator:
            terminated = True
            continue

        if _is_short(text):
            for key in text[1:]:
                table.supply(key, index)
            continue

        if _is_long(text):
            key = text[2:]
            if index == len(table) - 1:
                raise DanglingSwitchError(
                    "no argument given to %s" % keyname(Unset, key),
                    title="dangling option",
                    code=FaultCode.DANGLING_SWITCH,
                    hint="the long option %r is the %s and last token; "
                         "pass something after it or move it before other arguments" % (
                        text, ordinal(index + 1)
                    ),
                    key=key,
                    index=index,
                    token=text,
                    docs=getdoc(FaultCode.DANGLING_SWITCH),
                )
            table.supply(key, index)
            continue

        table.adopt(index)

    return table


class Run:
    """
    Mutable state of one resolving run (one input sequence).

    The run is created by Parser.parse() and shared by reference with every
    group of that parser, so keys stay unique across the whole run and claims
    made by one declarer are visible to the next.

    Members
    - table: the ClaimTable of the input.
    - registry: the KeyRegistry of declared keys.
    - faults: every error and warning recorded so far, in order.
    """

    faults = mirror("faults")

    def __init__(self, tokens, terminator, /):
        self.table = ClaimTable(tokens)
        self.registry = KeyRegistry()
        self._faults = []
        try:
            classify(self.table, terminator)
        except DanglingSwitchError as fault:
            self.record(fault)

    def record(self, fault, /):
        if not isinstance(fault, ArgumentException | ArgumentWarning):
            raise TypeError("record() argument must be an argument exception or warning")
        self._faults.append(fault)

    @contextmanager
    def capture(self):
        """
        record any argclaim error raised inside the block instead of propagating it.

        this is what turns a failed declaration into “abort this declaration,
        keep the run going”.
        """
        try:
            yield self
        except ArgumentException as fault:
            self.record(fault)


__all__ = (
    "Token",
    "ClaimTable",
    "classify",
    "Run",
)
