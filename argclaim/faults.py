"""
Argclaim faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain: declaration (registration)
  faults, resolution faults, and warnings.
- ArgumentException / ArgumentWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- RegistrationError / ResolutionError: the two error families. Registration faults
  come from bad or duplicated keys at declaration time; resolution faults come from
  matching declarations against the tokens (missing keys, values, positionals,
  undecodable values).
- ParseExit: an ExceptionGroup bundling every error recorded during a run.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Message wording
- Messages keep a short, stable wording that callers may match on
  (e.g., "no argument given to -o/--output").
- Hints are position-first (“after the third token”) so users learn by trying.

Integration
- Declarers record faults in the run accumulator instead of raising them.
- Parser.finalize() triggers warnings and, when errors exist, a ParseExit.
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the resolver (stable identifiers).

    grouping (by high-level domain)
    - registration (211xx)
      • INVALID_SHORT_KEY, INVALID_LONG_KEY, MISSING_KEYS,
        DUPLICATE_SHORT_KEY, DUPLICATE_LONG_KEY
    - resolution (221xx)
      • DANGLING_SWITCH, REQUIRED_ARGUMENT, MISSING_VALUE,
        MALFORMED_VALUE, UNHANDLED_VALUE, MISSING_POSITIONAL
    - warnings (231xx)
      • UNCLAIMED_TOKENS

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- registration errors (21xxx) ---
    INVALID_SHORT_KEY   = 21101
    INVALID_LONG_KEY    = 21102
    MISSING_KEYS        = 21103
    DUPLICATE_SHORT_KEY = 21111
    DUPLICATE_LONG_KEY  = 21112

    # --- resolution errors (22xxx) ---
    DANGLING_SWITCH     = 22101
    REQUIRED_ARGUMENT   = 22111
    MISSING_VALUE       = 22112
    MALFORMED_VALUE     = 22121
    UNHANDLED_VALUE     = 22122
    MISSING_POSITIONAL  = 22131

    # --- warnings (23xxx) ---
    UNCLAIMED_TOKENS    = 23101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderer(fault, palette):
    """
    build the styler/text helpers shared by every fault renderer.

    palette entries can be overridden with a __styles__ mapping in __main__.
    when the fault is not colorful, styles are dropped and plain text is used.
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    tool = fault.options.get("tool")
    prog = text(getattr(main, "__prog__", getattr(tool, "prog", "argclaim")), styler("prog-name"))
    return styler, text, prog


class ArgumentException(Exception):
    """
    base type of every argclaim error.

    options
    - title, code, hint, docs: presentation of the fault.
    - key, index, token: where the fault was found (when it applies).
    - tool, shell, fancy, colorful: merged in by trigger() before surfacing.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styler, text, prog = _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " - ",
            text(code.normalize() if code else "", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if self.options.get("fancy"):
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RegistrationError(ArgumentException): ...
class InvalidKeyError(RegistrationError): ...
class DuplicateKeyError(RegistrationError): ...

class ResolutionError(ArgumentException): ...
class DanglingSwitchError(ResolutionError): ...
class RequiredArgumentError(ResolutionError): ...
class MissingValueError(ResolutionError): ...
class MalformedValueError(ResolutionError): ...
class UnhandledValueError(ResolutionError): ...
class MissingPositionalError(ResolutionError): ...


class ArgumentWarning(ABC, Warning):
    """
    base type of every argclaim warning (non-fatal, never stops a run).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styler, text, prog = _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " - ",
            text(code.normalize() if code else "", styler("code")),
            " | ",
            text(str(self.options.get("title", "warning")).title(), styler("warning-title")),
            " ]"
        )
        message = text(self.message, styler("warning-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if self.options.get("fancy"):
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnclaimedTokensWarning(ArgumentWarning): ...


class ParseExit(ExceptionGroup[ArgumentException]):
    """
    every error recorded during one run, in the order they were found.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad parse", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad parse", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styler, text, prog = _renderer(self, {
            # header
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Parse)
        })

        header = Text.assemble("[ ", prog, " - ", text(self.message.title(), styler("title")), " ]")

        renders = []
        for exception in self.exceptions:
            renders.append(exception.__replace__(**{**self.options, "ratio": 2 / 3}))

        if self.options.get("fancy"):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted through the warnings module.

    typical options
    - tool, shell, fancy, colorful, and any other context the renderer may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgumentException",
    "RegistrationError",
    "InvalidKeyError",
    "DuplicateKeyError",
    "ResolutionError",
    "DanglingSwitchError",
    "RequiredArgumentError",
    "MissingValueError",
    "MalformedValueError",
    "UnhandledValueError",
    "MissingPositionalError",
    "ArgumentWarning",
    "UnclaimedTokensWarning",
    "ParseExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
