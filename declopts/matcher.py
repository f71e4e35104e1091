"""
Positional matching: assign the tokens left over after flag scanning to the
positional fields, left to right.
"""
import itertools

from .faults import FaultCode, NotEnoughArgumentsError, TooManyArgumentsError
from .utils import ordinal


def match(fields, leftover, /):
    """
    Map leftover tokens onto positional fields.

    Parameters
    - fields: iterable of FieldSpec in declaration order (flag-bound fields are
      ignored).
    - leftover: sequence of raw tokens not consumed by the flag scanner.

    Returns
    - dict[str, list[str]]: raw tokens per positional field. Scalar fields get
      one token; fields past the supplied tokens are left out so defaulting can
      resolve them; the repeated field (if any) always gets a list, possibly
      empty.

    Raises
    - NotEnoughArgumentsError: fewer tokens than mandatory positional fields.
    - TooManyArgumentsError: surplus tokens and no repeated positional field.
    """
    positionals = [spec for spec in fields if spec.positional]
    slots = [spec for spec in positionals if not spec.repeated]
    repeated = next((spec for spec in positionals if spec.repeated), None)

    total = len(slots)
    required = total - sum(spec.optional for spec in slots)

    if len(leftover) < required:
        missing = slots[len(leftover)]
        raise NotEnoughArgumentsError(
            "Not enough arguments: expected at least %d but got %d" % (required, len(leftover)),
            title="not enough arguments",
            code=FaultCode.NOT_ENOUGH_ARGUMENTS,
            hint="supply %s for the %s positional argument" % (missing.label, ordinal(len(leftover) + 1)),
        )

    if repeated is None and len(leftover) > total:
        raise TooManyArgumentsError(
            "Too many arguments: expected at most %d but got %d" % (total, len(leftover)),
            title="too many arguments",
            code=FaultCode.TOO_MANY_ARGUMENTS,
            hint="unexpected %r from the %s position" % (leftover[total], ordinal(total + 1)),
        )

    values = {spec.name: [token] for spec, token in zip(slots, leftover)}
    if repeated is not None:
        values[repeated.name] = list(itertools.islice(leftover, total, None))
    return values


__all__ = (
    "match",
)
