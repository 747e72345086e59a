r"""
Argclaim declarations: descriptors and the claim resolver.

Overview
- Kind / Needs
  • Kind.NORMAL, Kind.DEFAULTED, Kind.POSITIONAL: only affect help display
    (DEFAULTED shows the destination's value at declaration time).
  • Needs.REQUIRED, Needs.OPTIONAL: whether a missing key is a fault.

- Descriptor
  • Immutable record of one declaration (keys, description, default display,
    metavar, kind, needs), kept for the help renderer.

- Namespace
  • Default destination object; every declaration binds one attribute on it.

- OptionSet
  • Base of Parser and Group. Each declaration validates and registers its keys,
    records a Descriptor, seeds its destination, then resolves against the
    run's claim table:
      flag   presence toggles a boolean (honoring 'inverted')
      count  number of occurrences of the key ("-vvv" → 3)
      arg    single value; the last occurrence wins, earlier values are consumed
      list   every occurrence's value, in order
  • A failing declaration records its fault(s) in the run and is abandoned;
    the call still returns its receiver so chains keep going.

Keys
- Declarations receive shell-style names: one short "-x" and/or one long "--name".
  Their keys are "x" and "name"; a short key is probed first, then the long one.

Value adjacency
- A value must be the token right after the occurrence that supplied the key and
  must still be unclaimed. A gap is a fault, never a search.

Example
    >>> parser = Parser("demo").parse(["-vv", "-o", "out.bin"])
    >>> parser.count("-v", "--verbose").arg("-o", "--output", default="a.out")
    ... # parser.namespace.verbose == 2, parser.namespace.output == "out.bin"
"""
import builtins
from collections.abc import MutableSequence
from contextlib import contextmanager
from enum import Enum
from types import SimpleNamespace
from typing import NamedTuple

from rich.text import Text

from .decoders import decode, typename
from .faults import *
from .utils import *


class Kind(Enum):
    NORMAL = "normal"
    DEFAULTED = "defaulted"
    POSITIONAL = "positional"


class Needs(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


class Descriptor(NamedTuple):
    """
    Display metadata of one declaration.

    Fields
    - short: short key without its dash (or None).
    - long: long key without its dashes, or the positional's name (or None).
    - descr: human description (or None).
    - default: default value rendered as a string (or None).
    - metavar: value placeholder shown after the keys (or None).
    - kind: Kind of the declaration.
    - needs: Needs of the declaration.
    """
    short: str | None
    long: str | None
    descr: str | Text | None
    default: str | None
    metavar: str | None
    kind: Kind
    needs: Needs

    @property
    def name(self):
        """display name as users type it (positionals use their bare name)."""
        if self.kind is Kind.POSITIONAL:
            return self.long
        return keyname(self.short or Unset, self.long or Unset)


class Namespace(SimpleNamespace):
    """
    Default destination of bound values (attribute access, ``in`` support).
    """

    def __contains__(self, name):
        return name in self.__dict__


def _keys(method, names):
    """
    Split shell-style names into (short, long) keys.

    Raises TypeError/ValueError for API misuse: no names, non-strings, bare
    dashes, names without a dash prefix, or more than one short/long name.
    Key shape itself (printable, length) is checked by the registry.
    """
    if not names:
        raise TypeError(f"{method}() must specify at least one name")

    short = long = Unset
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{method}() names must be strings")
        if name in ("-", "--"):
            raise ValueError(f"{method}() names cannot be bare dashes")
        if name.startswith("--"):
            if long is not Unset:
                raise ValueError(f"{method}() accepts at most one long name")
            long = name[2:]
        elif name.startswith("-"):
            if short is not Unset:
                raise ValueError(f"{method}() accepts at most one short name")
            short = name[1:]
        else:
            raise ValueError(f"{method}() names must start with '-' or '--' (got {name!r})")
    return short, long


def _sanitize(method, *, descr=Unset, dest=Unset, metavar=Unset, type=Unset, kind=Unset, needs=Unset):
    """
    Type-check the keyword arguments shared by every declaration.
    """
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{method}() 'descr' must be a string")
    if not isinstance(dest, str | Unset):
        raise TypeError(f"{method}() 'dest' must be a string")
    elif isinstance(dest, str) and not dest:
        raise ValueError(f"{method}() 'dest' cannot be empty")
    if not isinstance(metavar, str | Unset):
        raise TypeError(f"{method}() 'metavar' must be a string")
    if type is not Unset and not callable(type):
        raise TypeError(f"{method}() 'type' must be callable")
    if kind is not Unset and not isinstance(kind, Kind):
        raise TypeError(f"{method}() 'kind' must be a Kind")
    if needs is not Unset and not isinstance(needs, Needs):
        raise TypeError(f"{method}() 'needs' must be a Needs")


class OptionSet:
    """
    Declaration surface shared by Parser and Group.

    State
    - _run: the Run (claim table, key registry, faults) shared with every
      declarer of the same parser; Unset until the parser has parsed tokens.
    - _namespace: destination object of bound values.
    - _descriptors: Descriptors in declaration order.
    """

    descriptors = mirror("descriptors")

    def __init__(self, run, namespace, /):
        self._run = run
        self._namespace = namespace
        self._descriptors = []

    @property
    def namespace(self):
        """destination object holding every bound value."""
        return self._namespace

    @property
    def faults(self):
        """every fault recorded during the run so far, in order."""
        return self._run.faults if self._run else ()

    @property
    def ok(self):
        """True while no error has been recorded in the run."""
        return not any(isinstance(fault, ArgumentException) for fault in self.faults)

    # ── internals ──────────────────────────────────────────────────────────

    @contextmanager
    def _declaration(self, method):
        if self._run is Unset:
            raise RuntimeError(f"{method}() called before parse(); tokens must be classified before declaring options")
        with self._run.capture() as run:
            yield run

    def _declare(self, short, long, descr, *, default=Unset, metavar=Unset, kind, needs):
        """
        validate, register and describe one declaration.

        returns True when the declaration may proceed; otherwise its faults were
        recorded and the caller must abandon it.
        """
        registry = self._run.registry
        for check in (registry.validate, registry.register):
            if faults := check(short, long):
                for fault in faults:
                    self._run.record(fault)
                return False
        self._descriptors.append(Descriptor(
            coalesce(short),
            coalesce(long),
            coalesce(descr),
            coalesce(default),
            coalesce(metavar),
            kind,
            needs,
        ))
        return True

    def _seed(self, dest, default, empty):
        """
        put the destination in its starting state.

        an explicit default always wins; otherwise a value already present on the
        namespace (pre-seeded by the caller) is kept; otherwise empty() is bound.
        """
        if default is not Unset:
            setattr(self._namespace, dest, default)
        elif not hasattr(self._namespace, dest):
            setattr(self._namespace, dest, empty())

    def _lookup(self, short, long, needs):
        """
        occurrence indices of the option: short key first, then long key.

        an empty tuple means “absent”; for a required option that is a fault.
        """
        table = self._run.table
        if short and (found := table.find(short)):
            return found
        if long and (found := table.find(long)):
            return found
        if needs is Needs.REQUIRED:
            name = keyname(short, long)
            raise RequiredArgumentError(
                "required argument not given: %s" % name,
                title="required argument",
                code=FaultCode.REQUIRED_ARGUMENT,
                hint="add %s to the command line" % " or ".join(
                    spelling for spelling in (short and "-" + short, long and "--" + long) if spelling
                ),
                key=name,
                docs=getdoc(FaultCode.REQUIRED_ARGUMENT),
            )
        return ()

    def _claim_value(self, short, long, occurrence):
        """
        claim the token right after an occurrence as its value.

        the smallest unclaimed index after the occurrence must be exactly the next
        one; anything else means the value is missing or already owned.
        """
        table = self._run.table
        if table.after(occurrence) != occurrence + 1:
            name = keyname(short, long)
            raise MissingValueError(
                "no argument given to %s" % name,
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="put a value right after %r (the %s token)" % (
                    table[occurrence].text, ordinal(occurrence + 1)
                ),
                key=name,
                index=occurrence,
                token=table[occurrence].text,
                docs=getdoc(FaultCode.MISSING_VALUE),
            )
        return table.claim(occurrence + 1)

    def _decode(self, name, type, token):
        """
        decode a claimed token, wrapping decoder failures with the option's name.
        """
        try:
            return decode(type, token.text)
        except ValueError as exception:
            raise MalformedValueError(
                "error while parsing value of %s: %s" % (name, exception),
                title="malformed value",
                code=FaultCode.MALFORMED_VALUE,
                hint="use a valid %s for %s (the %s token is %r)" % (
                    typename(type), name, ordinal(token.index + 1), token.text
                ),
                key=name,
                index=token.index,
                token=token.text,
                exception=exception,
                docs=getdoc(FaultCode.MALFORMED_VALUE),
            ) from exception
        except Exception as exception:
            raise UnhandledValueError(
                "error while handling %s: %s" % (name, exception),
                title="unhandled value",
                code=FaultCode.UNHANDLED_VALUE,
                hint="check the %s token %r given to %s" % (ordinal(token.index + 1), token.text, name),
                key=name,
                index=token.index,
                token=token.text,
                exception=exception,
                docs=getdoc(FaultCode.UNHANDLED_VALUE),
            ) from exception

    # ── declarations ───────────────────────────────────────────────────────

    def flag(self, *names, descr=Unset, dest=Unset, inverted=False, kind=Kind.NORMAL, needs=Needs.OPTIONAL):
        """
        Declare a presence-only boolean.

        The destination starts as ``inverted`` and becomes ``not inverted`` when
        the key appears. No value token is claimed.
        """
        _sanitize("flag", descr=descr, dest=dest, kind=kind, needs=needs)
        short, long = _keys("flag", names)
        dest = coalesce(dest, (long or short).replace("-", "_"))
        inverted = bool(inverted)

        with self._declaration("flag"):
            if not self._declare(short, long, descr, default="true" if inverted else Unset, kind=kind, needs=needs):
                return self
            setattr(self._namespace, dest, inverted)
            if self._lookup(short, long, needs):
                setattr(self._namespace, dest, not inverted)
        return self

    def count(self, *names, descr=Unset, dest=Unset, default=Unset, kind=Kind.NORMAL, needs=Needs.OPTIONAL):
        """
        Declare an occurrence counter.

        On a hit the destination is the number of occurrences of the key, so a
        stacked cluster like "-vvv" counts 3. On a miss it keeps its value.
        """
        _sanitize("count", descr=descr, dest=dest, kind=kind, needs=needs)
        short, long = _keys("count", names)
        dest = coalesce(dest, (long or short).replace("-", "_"))

        with self._declaration("count"):
            if not self._declare(short, long, descr, kind=kind, needs=needs):
                return self
            self._seed(dest, default, int)
            if occurrences := self._lookup(short, long, needs):
                setattr(self._namespace, dest, len(occurrences))
        return self

    def arg(
            self,
            *names,
            descr=Unset,
            dest=Unset,
            type=str,
            default=Unset,
            metavar=Unset,
            kind=Kind.NORMAL,
            needs=Needs.OPTIONAL
    ):
        """
        Declare a single-value option (last occurrence wins).

        Every occurrence must be followed directly by its value; values of all
        but the last occurrence are consumed and discarded so they can never be
        mistaken for positionals. The last value is decoded with ``type``.
        """
        _sanitize("arg", descr=descr, dest=dest, metavar=metavar, type=type, kind=kind, needs=needs)
        short, long = _keys("arg", names)
        dest = coalesce(dest, (long or short).replace("-", "_"))

        with self._declaration("arg"):
            shown = Unset
            if kind is Kind.DEFAULTED:
                start = default if default is not Unset else getattr(self._namespace, dest, None)
                if start is not None:
                    shown = str(start)
            if not self._declare(short, long, descr, default=shown, metavar=metavar, kind=kind, needs=needs):
                return self
            self._seed(dest, default, lambda: None)
            if not (occurrences := self._lookup(short, long, needs)):
                return self
            for occurrence in occurrences[:-1]:
                self._claim_value(short, long, occurrence)
            token = self._claim_value(short, long, occurrences[-1])
            setattr(self._namespace, dest, self._decode(keyname(short, long), type, token))
        return self

    def list(
            self,
            *names,
            descr=Unset,
            dest=Unset,
            type=str,
            default=Unset,
            metavar=Unset,
            kind=Kind.NORMAL,
            needs=Needs.OPTIONAL
    ):
        """
        Declare a repeatable option collecting every occurrence's value.

        Values are decoded and appended in occurrence order to the destination
        sequence. The first missing or undecodable value stops the declaration;
        values appended before it stay.
        """
        _sanitize("list", descr=descr, dest=dest, metavar=metavar, type=type, kind=kind, needs=needs)
        short, long = _keys("list", names)
        dest = coalesce(dest, (long or short).replace("-", "_"))
        if default is not Unset:
            default = builtins.list(default)

        with self._declaration("list"):
            if not self._declare(short, long, descr, metavar=metavar, kind=kind, needs=needs):
                return self
            self._seed(dest, default, builtins.list)
            if not isinstance(values := getattr(self._namespace, dest), MutableSequence):
                raise TypeError(f"list() destination {dest!r} must be a mutable sequence")
            for occurrence in self._lookup(short, long, needs):
                token = self._claim_value(short, long, occurrence)
                values.append(self._decode(keyname(short, long), type, token))
        return self


__all__ = (
    "Kind",
    "Needs",
    "Descriptor",
    "Namespace",
    "OptionSet",
)
