"""
Declopts options layer: declare a configuration, parse argv into it.

What this module provides
- Options: base class of every configuration descriptor. Subclasses declare
  typed fields; the class derives the parser, the usage text and the usage
  errors; parse() returns an immutable instance of the subclass.

Quick start
    from declopts import Options, Field

    class Tool(Options, prog="tool"):
        \"""Copy things around.\"""
        input = Field(str, short="i", long="input", placeholder="PATH", description="Input file")
        verbose = Field(bool, short="v", long="verbose")
        jobs = Field(int, short="j", long="jobs", factory=lambda: 1)
        targets = Field(list[str])

    opts = Tool.parse(["-i", "in.txt", "-v", "a", "b"])
    opts.input, opts.verbose, opts.jobs, opts.targets
    # ('in.txt', True, 1, ['a', 'b'])

Class options (keywords in the class statement, inherited by subclasses)
- prog: program name in usage text (default: __prog__ in __main__, then the
  basename of sys.argv[0]).
- descr: description under the usage banner (default: the class docstring).
- shell: when True (default) usage errors print and exit; when False they are
  raised as ParseError subclasses.
- status: exit status for usage errors in shell mode (default 0, the same
  status --help exits with).
- lenient: read numbers from their leading digits instead of failing
  (“12abc” → 12, “abc” → 0). Default False.
- colorful / fancy: rich styling and panel chrome for faults and usage.

Parse phases
1. start: copy argv, fresh value map, fresh Scanner with -h/--help bound to
   “print usage, exit 0”.
2. scanning flags: every flag-bound field is registered with the scanner;
   repeated fields append, scalar fields keep the last occurrence, booleans
   receive True/False directly.
3. matching positionals: matcher.match() on the remainder, merged in.
4. building: each field in declaration order is converted or defaulted.
5. done: the configuration instance is returned.
"""
import inspect
import os.path
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .convert import convert
from .faults import FaultCode, InvalidValueError, MissingValueError, ParseError, console, trigger
from .fields import Field, Registry
from .kinds import Kind
from .matcher import match
from .scanner import Scanner
from .usage import render
from .utils import Unset, coalesce, mirror, rename

_DEFAULTS = {
    "prog": Unset,
    "descr": Unset,
    "shell": True,
    "status": 0,
    "lenient": False,
    "colorful": True,
    "fancy": False,
}

_CHECKS = {
    "prog": (str, "a string"),
    "descr": (str, "a string"),
    "shell": (bool, "a boolean"),
    "status": (int, "an integer"),
    "lenient": (bool, "a boolean"),
    "colorful": (bool, "a boolean"),
    "fancy": (bool, "a boolean"),
}

# Public API of Options; fields cannot take these names.
_RESERVED = frozenset({"parse", "declare"})


class OptionsType(type):
    """
    Metaclass that turns an Options subclass body into a field registry.

    Responsibilities
    - Copy the parent's registry and class options, then declare every Field
      found in the class body, in the order it was written.
    - Validate and merge class options (prog, descr, shell, status, lenient,
      colorful, fancy).
    - Bind each Field to its FieldSpec so it can act as the value accessor.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(cls, name, bases, namespace)

        parents = [base for base in bases if isinstance(base, cls)]
        if len(parents) > 1:
            raise TypeError(f"{name} can only derive from one options class")

        inherited = parents[0] if parents else None
        settings = dict(inherited.__options__ if inherited else _DEFAULTS)
        for key, value in options.items():
            try:
                kind, article = _CHECKS[key]
            except KeyError:
                raise TypeError(f"{name}() got an unexpected option {key!r}") from None
            if not isinstance(value, kind):
                raise TypeError(f"{name} option {key!r} must be {article}")
            settings[key] = value
        if inherited and "descr" not in options and namespace.get("__doc__"):
            settings["descr"] = inspect.cleandoc(namespace["__doc__"])
        self.__options__ = MappingProxyType(settings)

        registry = inherited.__fields__.copy() if inherited else Registry(reserved=_RESERVED)
        for key, value in namespace.items():
            if isinstance(value, Field):
                value.spec = registry.declare(
                    key,
                    value.type,
                    short=value.short,
                    long=value.long,
                    factory=value.factory,
                    placeholder=value.placeholder,
                    description=value.description,
                )
        self.__fields__ = registry

        return self

    def __init__(self, name, bases, namespace, **options):
        super().__init__(name, bases, namespace)

    @property
    def __prog__(self):
        """Program name shown in usage text."""
        if (prog := self.__options__["prog"]) is not Unset:
            return prog
        main = __import__("__main__")
        if prog := getattr(main, "__prog__", None):
            return prog
        return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else self.__name__.lower()


def _tokens(argv):
    """
    Normalize parse() input into a fresh list of tokens.

    - Unset: sys.argv[1:]
    - str: shell-like string, split with shlex
    - Iterable[str]: copied item by item
    """
    if argv is Unset:
        return list(sys.argv[1:])
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


def _spelling(spec, /):
    """How a value for the field is written on the command line."""
    if spec.positional:
        return spec.label
    if spec.long is not None:
        return "--%s=%s" % (spec.long, spec.label)
    return "-%s%s" % (spec.short, spec.label)


def _resolve(spec, tokens, /, *, lenient):
    """
    Build the final value of one field from its collected tokens.

    Order
    - BOOLEAN: last flag value, else the factory, else False.
    - collected tokens: converted (element by element for repeated fields).
    - factory: its result.
    - OPTIONAL / REPEATED: None / empty list or set.
    - otherwise: MissingValueError.
    """
    if spec.type.kind is Kind.BOOLEAN:
        if tokens:
            return convert(tokens[-1], spec.type)
        return spec.factory() if spec.factory is not Unset else False

    if tokens:
        try:
            if spec.repeated:
                return spec.type.collection(convert(token, spec.type.inner, lenient=lenient) for token in tokens)
            return convert(tokens[-1], spec.type, lenient=lenient)
        except (LookupError, ValueError) as error:
            if choices := spec.type.choices:
                hint = "choose one of %s" % ", ".join(choices)
            else:
                hint = "pass a valid %s for %s" % (spec.type.scalar.kind.value, spec.label)
            raise InvalidValueError(
                "Invalid value for `%s`: %s" % (spec.name, error.args[0] if error.args else error),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                hint=hint,
            ) from error

    if spec.factory is not Unset:
        return spec.factory()

    if spec.type.kind is Kind.OPTIONAL or spec.repeated:
        return spec.type.empty()

    raise MissingValueError(
        "Expected a value for `%s`" % spec.name,
        title="missing value",
        code=FaultCode.MISSING_VALUE,
        hint="pass %s" % _spelling(spec),
    )


class Options(metaclass=OptionsType):
    """
    Base class of configuration descriptors.

    Instances are parsed configurations: one typed value per declared field,
    read through the Field accessors, immutable once built. Two instances are
    equal when they come from the same descriptor and hold equal values.
    """
    __slots__ = ("__values__",)

    def __new__(cls, *args, **kwargs):
        raise TypeError(f"{cls.__name__} instances are created by {cls.__name__}.parse()")

    @classmethod
    def _construct(cls, values, /):
        self = object.__new__(cls)
        object.__setattr__(self, "__values__", MappingProxyType(values))
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__name__} configurations are read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__name__} configurations are read-only")

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return dict(self.__values__) == dict(other.__values__)

    __hash__ = None

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        for name, value in self.__values__.items():
            yield name, mirror(value)

    @classmethod
    def declare(cls, name, type, /, short="", long="", factory=Unset, placeholder="", description=""):
        """
        Declare a field after the class statement.

        Runs the same validation as a Field in the class body and installs the
        accessor on the class. Subclasses created earlier do not see the field.

        Returns
        - the FieldSpec.
        """
        field = Field(type, short=short, long=long, factory=factory, placeholder=placeholder, description=description)
        field.spec = cls.__fields__.declare(
            name,
            type,
            short=short,
            long=long,
            factory=factory,
            placeholder=placeholder,
            description=description,
        )
        field.__set_name__(cls, name)
        setattr(cls, name, field)
        return field.spec

    @classmethod
    def parse(cls, argv=Unset, /):
        """
        Parse an argument vector into a configuration.

        Parameters
        - argv: Unset (sys.argv[1:]), a shell-like string, or an iterable of
          strings. The caller's sequence is never modified.

        Returns
        - an immutable instance of cls.

        Exits / raises
        - -h/--help anywhere before '--': prints usage and exits with status 0.
        - usage errors (unknown option, missing option value, not enough or too
          many arguments, invalid value, missing value): in shell mode prints
          the error and the usage and exits with the configured status; with
          shell=False raises the ParseError.
        """
        settings = cls.__options__
        fields = cls.__fields__
        prog = cls.__prog__

        tokens = _tokens(argv)
        values = {}
        scanner = Scanner()

        def usage():
            return render(prog, fields, scanner, descr=coalesce(settings["descr"]), colorful=settings["colorful"])

        @rename("help")
        def helper():
            console().print(usage())
            sys.stdout.flush()
            sys.exit(0)

        scanner.helper(helper)

        def collector(spec):
            def collect(value):
                if spec.repeated:
                    values.setdefault(spec.name, []).append(value)
                else:
                    values[spec.name] = [value]
            return rename(collect, "collect_%s" % spec.name)

        for spec in fields.switches:
            scanner.on(
                spec.short,
                spec.long,
                negatable=spec.boolean,
                placeholder=spec.label,
                descr=spec.description,
                callback=collector(spec),
            )

        try:
            remainder = scanner.scan(tokens)
            values |= match(fields, remainder)
            resolved = {spec.name: _resolve(spec, values.get(spec.name), lenient=settings["lenient"]) for spec in fields}
        except ParseError as fault:
            trigger(
                fault,
                prog=prog,
                usage=usage,
                shell=settings["shell"],
                status=settings["status"],
                colorful=settings["colorful"],
                fancy=settings["fancy"],
            )
            raise

        return cls._construct(resolved)


__all__ = (
    "Options",
)

del OptionsType
