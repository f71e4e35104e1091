"""
Field declarations and the ordered field registry.

A descriptor (an Options subclass) declares its fields in order, either in
the class body:

    class Tool(Options):
        input = Field(str, short="i", long="input", placeholder="PATH")
        verbose = Field(bool, short="v", long="verbose")
        first = Field(str)                       # positional

or dynamically with Tool.declare("name", type, ...). Both paths end in
Registry.declare(), which validates each field on its own and against the
fields declared before it. Every failure is a DeclarationError raised while
the descriptor is being built, never while parsing.

Positional ordering rules (checked as each positional field is declared)
- no mandatory positional field after an optional positional field;
- no positional field after a repeated positional field (at most one repeated
  positional, and it is the last one);
- no repeated positional field after an optional positional field.
Tokens are assigned to positional slots left to right, and these rules keep
that assignment unambiguous.
"""
from collections import namedtuple

from .faults import DeclarationError
from .kinds import Kind, resolve
from .utils import Unset, mirror


class FieldSpec(namedtuple("FieldSpec", ("name", "type", "short", "long", "placeholder", "factory", "description"))):
    """
    One declared field.

    Attributes
    - name: identifier of the field (and of its accessor).
    - type: resolved FieldType.
    - short: single-character flag name, or None.
    - long: multi-character flag name, or None.
    - placeholder: display label for the value, or None.
    - factory: zero-argument default producer, or Unset.
    - description: help text, or None.
    """
    __slots__ = ()

    @property
    def optional(self):
        return self.factory is not Unset or self.type.kind is Kind.OPTIONAL

    @property
    def repeated(self):
        return self.type.kind is Kind.REPEATED

    @property
    def positional(self):
        return self.short is None and self.long is None

    @property
    def boolean(self):
        return self.type.scalar.kind is Kind.BOOLEAN

    @property
    def label(self):
        """
        Placeholder shown in usage text.

        Enumerations list their members (<one|two>); otherwise the declared
        placeholder, falling back to the upper-cased name for positional fields
        and VALUE for flags.
        """
        if choices := self.type.choices:
            return "<%s>" % "|".join(choices)
        if self.placeholder is not None:
            return self.placeholder
        return self.name.upper() if self.positional else "VALUE"


class Field:
    """
    Class-body declaration of a field, and its read accessor once parsed.

    On the class, the attribute is this Field (spec holds the FieldSpec once
    declared). On a parsed configuration it reads the field's value; container
    values are returned as copies and assignment is refused.
    """
    __slots__ = ("type", "short", "long", "factory", "placeholder", "description", "name", "spec")

    def __init__(self, type, /, short="", long="", factory=Unset, placeholder="", description=""):
        self.type = type
        self.short = short
        self.long = long
        self.factory = factory
        self.placeholder = placeholder
        self.description = description
        self.name = Unset
        self.spec = Unset

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        # declared on a parent after this configuration's class was created
        if self.name not in instance.__values__:
            raise AttributeError(f"{type(instance).__name__!r} configuration has no field {self.name!r}")
        return mirror(instance.__values__[self.name])

    def __set__(self, instance, value):
        raise AttributeError(f"field {self.name!r} is read-only")

    def __delete__(self, instance):
        raise AttributeError(f"field {self.name!r} is read-only")

    def __repr__(self):
        if self.spec is Unset:
            return f"Field({self.type!r})"
        return f"Field({self.name!r}, {self.spec.type!r})"


def _switches(spec, /):
    """Every command-line spelling a flag-bound field answers to."""
    if spec.short is not None:
        yield "-" + spec.short
    if spec.long is not None:
        yield "--" + spec.long
        if spec.boolean:
            yield "--no-" + spec.long


class Registry:
    """
    Ordered, append-only sequence of FieldSpecs.

    Declaration order is significant: it drives positional assignment, the
    order values are built in and the order of usage lines.
    """

    def __init__(self, fields=(), /, *, reserved=frozenset()):
        self._fields = {}
        self._reserved = frozenset(reserved)
        for spec in fields:
            self._fields[spec.name] = spec

    def copy(self):
        return type(self)(self._fields.values(), reserved=self._reserved)

    def __iter__(self):
        return iter(self._fields.values())

    def __len__(self):
        return len(self._fields)

    def __contains__(self, name):
        return name in self._fields

    def __getitem__(self, name):
        return self._fields[name]

    def __repr__(self):
        return f"Registry({list(self._fields)!r})"

    @property
    def positionals(self):
        return tuple(spec for spec in self if spec.positional)

    @property
    def switches(self):
        return tuple(spec for spec in self if not spec.positional)

    def declare(self, name, type, /, short="", long="", factory=Unset, placeholder="", description=""):
        """
        Validate and append a field.

        Steps (each a DeclarationError on violation)
        1. flag names must not start with '-';
        2. '-h' and '--help' are reserved;
        3. the type must be valid (see kinds.resolve);
        4. empty short/long/placeholder mean “absent”;
        5. the field must fit after the fields already declared.

        Returns
        - the new FieldSpec.
        """
        if not isinstance(name, str) or not name.isidentifier() or name.startswith("_"):
            raise DeclarationError(f"{name!r} is not a valid field name")
        if name in self._fields:
            raise DeclarationError(f"The field `{name}` is already declared")
        if name in self._reserved:
            raise DeclarationError(f"The field name `{name}` is reserved")

        for option, value in (("short", short), ("long", long), ("placeholder", placeholder), ("description", description)):
            if not isinstance(value, str):
                raise DeclarationError(f"`{name}` {option} must be a string")

        if short.startswith("-") or long.startswith("-"):
            raise DeclarationError("Do not start options with -")
        if short == "h" or long == "help":
            raise DeclarationError("The options `-h` and `--help` are reserved")

        type = resolve(type)

        short = short or None
        long = long or None
        placeholder = placeholder or None
        description = description.strip() or None

        if short is not None and len(short) != 1:
            raise DeclarationError(f"`{name}` short option must be a single character")
        if long is not None and (len(long) < 2 or any(char.isspace() or char == "=" for char in long)):
            raise DeclarationError(f"`{name}` long option must be a word of two or more characters")
        if factory is not Unset and not callable(factory):
            raise DeclarationError(f"`{name}` factory must be callable")

        spec = FieldSpec(name, type, short, long, placeholder, factory, description)

        taken = {switch: other.name for other in self.switches for switch in _switches(other)}
        for switch in _switches(spec):
            if switch in taken:
                raise DeclarationError(f"The option `{switch}` of `{name}` is already used by `{taken[switch]}`")

        if spec.positional:
            self._check_positional(spec)

        self._fields[name] = spec
        return spec

    def _check_positional(self, spec):
        positionals = self.positionals
        optionals = [other.name for other in positionals if other.optional]

        for other in positionals:
            if other.repeated:
                raise DeclarationError(
                    f"The positional parameter `{spec.name}` comes after the repeated parameter `{other.name}`"
                )

        if not optionals:
            return

        if spec.repeated:
            raise DeclarationError(
                f"The repeated parameter `{spec.name}` comes after an optional parameter "
                f"({', '.join(f'`{name}`' for name in optionals)})"
            )
        if not spec.optional:
            raise DeclarationError(
                f"`{spec.name}` is a mandatory positional field but it comes after "
                f"the optional field(s) {', '.join(f'`{name}`' for name in optionals)}"
            )


__all__ = (
    "FieldSpec",
    "Field",
    "Registry",
)
