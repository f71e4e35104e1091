"""
Declopts utilities (internal helpers shared by the declaration and parse layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, distinct from None (None is a real
    value for optional fields and factories may legitimately return it).

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value passes through.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated accessors and helper callbacks.

- mirror(value)
  • Fresh container copies for values handed out by read accessors, so a parsed
    configuration cannot be mutated through the lists and sets it returns.

- ordinal(number)
  • “first”, “second”, … used by positional fault messages.
"""
import builtins
import functools
from collections.abc import Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "" or [] are preserved; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(object, /):
    """
    Return a detached copy of a parsed value.

    Behavior
    - list / tuple (non-string sequences built by the parser): new list.
    - Set: new set.
    - Mapping: new dict with mirrored values.
    - Anything else (str, int, enum members, None, ...): returned as-is.

    Notes
    - Only the containers are copied; scalars are immutable already.
    """
    if isinstance(object, list | tuple):
        return list(map(mirror, object))
    elif isinstance(object, Set):
        return set(object)
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(mirror, object.values())))
    return object


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    1..10 are spelled out ("first"…"tenth"); anything else uses a numeric suffix.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Used as the default of `factory` (a factory may be any callable, including one
returning None) and for per-call parse state that has not been built yet.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
