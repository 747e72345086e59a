"""
Argclaim key registry.

Tracks the short and long keys declared during a run so that each key is
declared at most once across the parser and all of its groups. Both checks of
validate() and of register() always run, so a declaration with two bad keys
reports two faults.
"""
from .faults import *
from .utils import *


def _printable(short):
    return len(short) == 1 and "!" <= short <= "~"


class KeyRegistry:
    """
    Short and long keys seen across all declarations of one run.

    validate() and register() never raise for bad keys: they return the list of
    faults found (empty when the keys are acceptable) and leave the decision to
    abort the declaration to the caller.
    """

    shorts = mirror("shorts")
    longs = mirror("longs")

    def __init__(self):
        self._shorts = set()
        self._longs = set()

    def __contains__(self, key):
        return key in self._shorts or key in self._longs

    def validate(self, short, long, /):
        """
        Check key shapes.

        - short, when given, must be one printable non-extended ASCII character.
        - long, when given, must be longer than one character.
        - at least one of them must be given.
        """
        faults = []
        if short and not _printable(short):
            faults.append(InvalidKeyError(
                "short names must be printable character within the non-extended ASCII set",
                title="invalid short key",
                code=FaultCode.INVALID_SHORT_KEY,
                hint="use a single character between '!' and '~' (got %r)" % short,
                key=short,
                docs=getdoc(FaultCode.INVALID_SHORT_KEY),
            ))
        if long and len(long) <= 1:
            faults.append(InvalidKeyError(
                "long names must be more than one character",
                title="invalid long key",
                code=FaultCode.INVALID_LONG_KEY,
                hint="declare %r as a short key instead, or use a longer name" % long,
                key=long,
                docs=getdoc(FaultCode.INVALID_LONG_KEY),
            ))
        if not short and not long:
            faults.append(InvalidKeyError(
                "options need a short or a long name",
                title="missing keys",
                code=FaultCode.MISSING_KEYS,
                hint="give the option a short key (e.g., 'v'), a long key (e.g., 'verbose'), or both",
                docs=getdoc(FaultCode.MISSING_KEYS),
            ))
        return faults

    def register(self, short, long, /):
        """
        Record the keys of a declaration.

        Duplicated short and long keys are reported independently; nothing is
        recorded unless both keys are new.
        """
        faults = []
        if short and short in self._shorts:
            faults.append(DuplicateKeyError(
                "duplicate short code detected: %s" % short,
                title="duplicate short key",
                code=FaultCode.DUPLICATE_SHORT_KEY,
                hint="%r is already declared in this run; keys are unique across all groups" % keyname(short, Unset),
                key=short,
                docs=getdoc(FaultCode.DUPLICATE_SHORT_KEY),
            ))
        if long and long in self._longs:
            faults.append(DuplicateKeyError(
                "duplicate long code detected: %s" % long,
                title="duplicate long key",
                code=FaultCode.DUPLICATE_LONG_KEY,
                hint="%r is already declared in this run; keys are unique across all groups" % keyname(Unset, long),
                key=long,
                docs=getdoc(FaultCode.DUPLICATE_LONG_KEY),
            ))
        if faults:
            return faults
        if short:
            self._shorts.add(short)
        if long:
            self._longs.add(long)
        return faults


__all__ = (
    "KeyRegistry",
)
