"""
Raw token to typed value conversion.

Operates on scalars only: the parse orchestrator maps repeated fields element
by element and assembles the list or set itself. Absent values never reach
this module (defaulting is decided before conversion).
"""
import re

from .kinds import Kind, Symbol

_INTEGER = re.compile(r"\s*[+-]?\d+")
_FLOAT = re.compile(r"\s*[+-]?(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?")


def _leading(pattern, raw, /):
    """The numeric prefix of a token, "0" when it has none."""
    if match := pattern.match(raw):
        return match.group()
    return "0"


def convert(raw, type, /, *, lenient=False):
    """
    Convert one raw token according to a FieldType.

    Parameters
    - raw: str, or bool for BOOLEAN fields fed by the flag scanner.
    - type: FieldType (OPTIONAL is unwrapped; REPEATED is rejected).
    - lenient: keyword-only. When True, numbers are read from the leading
      numeric prefix of the token (“12abc” → 12) and a token without one gives
      zero. When False, the whole token must be a number.

    Raises
    - LookupError: ENUM token matching no member; the message quotes the raw
      token (key not found: "seventeen").
    - ValueError: INTEGER / FLOAT token that is not a number (strict mode).
    """
    match type.kind:
        case Kind.OPTIONAL:
            return convert(raw, type.inner, lenient=lenient)
        case Kind.STRING:
            return raw
        case Kind.SYMBOL:
            return Symbol(raw)
        case Kind.INTEGER:
            if lenient:
                return int(_leading(_INTEGER, raw))
            return int(raw)
        case Kind.FLOAT:
            if lenient:
                return float(_leading(_FLOAT, raw))
            return float(raw)
        case Kind.BOOLEAN:
            # flags deliver bools; a positional token is present, hence true
            return raw if isinstance(raw, bool) else True
        case Kind.ENUM:
            for member in type.members:
                if member.value == raw:
                    return member
            raise LookupError(f'key not found: "{raw}"')
        case Kind.REPEATED:
            raise TypeError("convert() expects a scalar type, map repeated values element by element")


__all__ = (
    "convert",
)
