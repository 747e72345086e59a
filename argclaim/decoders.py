"""
Argclaim value decoders.

A decoder turns one raw token into a typed value. decode(type, token) looks the
requested type up in a small closed table of built-in numeric decoders and
falls back to calling the type with the token as its only argument.

Built-ins
- Int8, Int16, Int32, Int64: signed integers of the given width.
- UInt8, UInt16, UInt32, UInt64: unsigned integers of the given width.
- int: unbounded signed integer.
- Float32, Float64 and float: floating-point numbers.

Integers are parsed in base 10 only (surrounding whitespace and a leading sign
are accepted, underscores and prefixes like "0x" are not). Malformed input
raises InvalidFormatError; well-formed numbers that do not fit the width raise
OverflowError.

Floats accept decimal and exponent notation plus the inf, infinity and nan
literals, under the same whitespace and sign rules. A finite literal too large
for the width raises OverflowError instead of decoding to infinity.

Fallback
- Any other callable is constructed from the single string (str, pathlib.Path,
  or a user type with a one-string constructor). Whatever it raises propagates.
"""
import math
import re
import struct

# base-10 only: optional sign, ASCII digits, surrounding blanks tolerated
_DECIMAL = re.compile(r"\s*[+-]?[0-9]+\s*")

# decimal or exponent notation, or an infinity/nan literal; no underscores or hex
_REAL = re.compile(
    r"\s*[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)\s*",
    re.IGNORECASE,
)


class InvalidFormatError(ValueError):
    """
    raised when a token is not a well-formed literal for the requested type.
    """


class Integer:
    """
    Fixed-width base-10 integer decoder.

    Instances are callables, so they can be passed wherever a ``type`` is
    expected and still be recognized by decode() as built-ins.
    """
    __slots__ = ("bits", "signed", "lower", "upper")

    def __init__(self, bits, /, *, signed):
        self.bits = bits
        self.signed = signed
        if signed:
            self.lower, self.upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            self.lower, self.upper = 0, (1 << bits) - 1

    @property
    def __name__(self):
        return ("int" if self.signed else "uint") + str(self.bits)

    def __call__(self, token, /):
        if not _DECIMAL.fullmatch(token):
            raise InvalidFormatError("invalid literal for %s: %r" % (self.__name__, token))
        value = int(token, 10)
        if not self.lower <= value <= self.upper:
            raise OverflowError("%d is out of range for %s [%d, %d]" % (value, self.__name__, self.lower, self.upper))
        return value

    def __repr__(self):
        return self.__name__


class Floating:
    """
    Floating-point decoder for a given storage width (32 or 64 bits).

    Single precision values are rounded through the IEEE-754 binary32 format;
    finite values beyond its range raise OverflowError.
    """
    __slots__ = ("bits",)

    def __init__(self, bits, /):
        if bits not in (32, 64):
            raise ValueError("floating decoders support 32 or 64 bits")
        self.bits = bits

    @property
    def __name__(self):
        return "float" + str(self.bits)

    def __call__(self, token, /):
        value = _real(token, self.__name__)
        if self.bits == 32:
            try:
                value, = struct.unpack("<f", struct.pack("<f", value))
            except OverflowError:
                raise OverflowError("%r is out of range for %s" % (token, self.__name__)) from None
        return value

    def __repr__(self):
        return self.__name__


Int8 = Integer(8, signed=True)
Int16 = Integer(16, signed=True)
Int32 = Integer(32, signed=True)
Int64 = Integer(64, signed=True)

UInt8 = Integer(8, signed=False)
UInt16 = Integer(16, signed=False)
UInt32 = Integer(32, signed=False)
UInt64 = Integer(64, signed=False)

Float32 = Floating(32)
Float64 = Floating(64)


def _integer(token, /):
    if not _DECIMAL.fullmatch(token):
        raise InvalidFormatError("invalid literal for int: %r" % token)
    return int(token, 10)


def _real(token, name, /):
    if not _REAL.fullmatch(token):
        raise InvalidFormatError("invalid literal for %s: %r" % (name, token))
    value = float(token)
    # only an explicit infinity literal may decode to inf
    if math.isinf(value) and "inf" not in token.lower():
        raise OverflowError("%r is out of range for %s" % (token, name))
    return value


def _floating(token, /):
    return _real(token, "float")


_builtins = {
    int: _integer,
    float: _floating,
    Int8: Int8,
    Int16: Int16,
    Int32: Int32,
    Int64: Int64,
    UInt8: UInt8,
    UInt16: UInt16,
    UInt32: UInt32,
    UInt64: UInt64,
    Float32: Float32,
    Float64: Float64,
}


def decode(type, token, /):
    """
    Convert a raw token into a value of the requested type.

    Parameters
    - type: a built-in decoder (see module docs), int, float, or any callable
      accepting a single string.
    - token: the raw token text.

    Raises
    - InvalidFormatError: malformed numeric literal for a built-in decoder.
    - OverflowError: numeric literal out of range for a fixed-width decoder.
    - TypeError: when type is not callable.
    - anything the fallback constructor raises.
    """
    if not isinstance(token, str):
        raise TypeError("decode() second argument must be a string")
    try:
        decoder = _builtins[type]
    except (KeyError, TypeError):
        if not callable(type):
            raise TypeError("decode() first argument must be callable") from None
        decoder = type
    return decoder(token)


def typename(type, /):
    """
    Readable name of a decoder type for hints ("uint8", "float", "Path", ...).
    """
    return getattr(type, "__name__", None) or repr(type)


__all__ = (
    "InvalidFormatError",
    "Integer",
    "Floating",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Float32",
    "Float64",
    "decode",
    "typename",
)
