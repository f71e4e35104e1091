"""
Field type taxonomy and validation.

Every declared annotation is resolved once, at declaration time, into a
FieldType: a closed tagged variant over

    STRING | SYMBOL | INTEGER | FLOAT | BOOLEAN | ENUM | OPTIONAL | REPEATED

so that conversion, defaulting and usage rendering can match on `kind`
instead of inspecting Python typing objects again on every parse.

Accepted annotations
- str, Symbol, int, float, bool
- enum.Enum subclasses whose member values are all strings
- T | None, Optional[T]            (T accepted, not optional itself)
- list[T], set[T]                  (T a scalar: no optional or nested repeated)

Anything else (callables, dicts, generic unions, ...) is rejected.
"""
import enum
import typing
from collections import namedtuple
from types import NoneType, UnionType
from typing import final

from .faults import DeclarationError


@final
class Symbol(str):
    """
    Opaque identifier parsed from a raw token.

    A Symbol compares and hashes like the string it wraps, but keeps its own
    type so consumers can tell identifiers apart from free-form text.
    """
    __slots__ = ()

    def __repr__(self):
        return f"Symbol({str(self)!r})"


class Kind(enum.Enum):
    STRING = "string"
    SYMBOL = "symbol"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ENUM = "enum"
    OPTIONAL = "optional"
    REPEATED = "repeated"


_SCALARS = {
    str: Kind.STRING,
    Symbol: Kind.SYMBOL,
    int: Kind.INTEGER,
    float: Kind.FLOAT,
    bool: Kind.BOOLEAN,
}


class FieldType(namedtuple("FieldType", ("kind", "annotation", "inner", "members", "collection"), defaults=(None, None, None))):
    """
    Resolved field type.

    Attributes
    - kind: Kind tag.
    - annotation: the annotation the consumer declared (kept for messages).
    - inner: wrapped FieldType for OPTIONAL / REPEATED.
    - members: the enum class for ENUM.
    - collection: list or set for REPEATED.
    """
    __slots__ = ()

    @property
    def scalar(self):
        """The innermost scalar FieldType (unwraps OPTIONAL and REPEATED)."""
        match self.kind:
            case Kind.OPTIONAL | Kind.REPEATED:
                return self.inner.scalar
            case _:
                return self

    @property
    def choices(self):
        """Serialized member names of an enum (empty for any other kind)."""
        scalar = self.scalar
        if scalar.kind is not Kind.ENUM:
            return ()
        return tuple(member.value for member in scalar.members)

    def empty(self):
        """The value an optional or repeated field takes when nothing was supplied."""
        match self.kind:
            case Kind.REPEATED:
                return self.collection()
            case _:
                return None

    def __repr__(self):
        return typename(self.annotation)


def typename(annotation, /):
    """Readable name of an annotation for error messages."""
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation.__qualname__
    return repr(annotation).removeprefix("typing.")


def _reject(annotation):
    raise DeclarationError(f"`{typename(annotation)}` is not a valid parameter type")


def resolve(annotation, /):
    """
    Resolve an annotation into a FieldType.

    Raises
    - DeclarationError: `<name>` is not a valid parameter type.
    """
    try:
        kind = _SCALARS.get(annotation)
    except TypeError:  # unhashable annotation objects
        kind = None
    if kind is not None:
        return FieldType(kind, annotation)

    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        members = list(annotation)
        if not members or not all(isinstance(member.value, str) for member in members):
            _reject(annotation)
        return FieldType(Kind.ENUM, annotation, members=annotation)

    origin = typing.get_origin(annotation)
    arguments = typing.get_args(annotation)

    if origin is typing.Union or origin is UnionType:
        alternatives = [argument for argument in arguments if argument is not NoneType]
        # only T | None is supported; T | U is a generic union
        if len(alternatives) != 1 or len(alternatives) == len(arguments):
            _reject(annotation)
        inner = resolve(alternatives[0])
        if inner.kind is Kind.OPTIONAL:
            _reject(annotation)
        return FieldType(Kind.OPTIONAL, annotation, inner=inner)

    if origin in (list, set):
        if len(arguments) != 1:
            _reject(annotation)
        try:
            inner = resolve(arguments[0])
        except DeclarationError:
            _reject(annotation)
        if inner.kind in (Kind.OPTIONAL, Kind.REPEATED):
            _reject(annotation)
        return FieldType(Kind.REPEATED, annotation, inner=inner, collection=origin)

    _reject(annotation)


def is_valid(annotation, /):
    """Whether the annotation can be declared as a field type."""
    try:
        resolve(annotation)
    except DeclarationError:
        return False
    return True


__all__ = (
    "Symbol",
    "Kind",
    "FieldType",
    "typename",
    "resolve",
    "is_valid",
)
