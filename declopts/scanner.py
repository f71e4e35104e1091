r"""
Token-level flag scanner.

The scanner knows nothing about field types: the parse orchestrator registers
one switch per flag-bound field together with a callback, and the scanner
calls it with the raw string (value-bearing switches) or a bool (negatable
switches) each time the switch appears.

Recognized forms
- short:     -x VALUE, -xVALUE, bundled presence switches (-vq, -vqi VALUE)
- long:      --name VALUE, --name=VALUE
- negatable: --name / --no-name (and -x for the short form)
- '--' ends switch processing; every later token is positional.
- '-' on its own is positional.

Everything else is returned, in order, as the positional remainder.

Faults
- UnknownSwitchError, MissingOptionValueError and FlagAssignmentError are
  collected while scanning and the first one is raised at the end, unless
  '-h'/'--help' appeared anywhere before '--': help always wins and the helper
  callback (a terminal action) runs instead.
"""
import difflib
from collections import deque, namedtuple

from .faults import FaultCode, FlagAssignmentError, MissingOptionValueError, UnknownSwitchError
from .utils import Unset, ordinal

Switch = namedtuple("Switch", ("short", "long", "negatable", "placeholder", "descr", "callback"))

# Column layout of the built-in listing.
INDENT = 4
WIDTH = 32


class Scanner:
    """
    Registry of switches plus the scanning loop over one argument list.

    A Scanner is built per parse call; it is never shared between parses.
    """

    def __init__(self):
        self._switches = []
        self._shorts = {}
        self._longs = {}
        self._helper = Unset

    @property
    def configured(self):
        """Whether the help switch has been registered (usage can be rendered)."""
        return self._helper is not Unset

    def helper(self, callback, /, descr="Prints this help"):
        """
        Register '-h'/'--help' bound to a terminal callback.
        """
        if self._helper is not Unset:
            raise TypeError("helper() can only be registered once")
        self._helper = self.on("h", "help", descr=descr, callback=callback)

    def on(self, short=None, long=None, /, *, negatable=False, placeholder="VALUE", descr=None, callback):
        """
        Register a switch.

        Parameters
        - short: single character or None.
        - long: name without leading dashes or None.
        - negatable: presence switch; the callback receives True, or False for
          '--no-<long>'.
        - placeholder: label of the value in the listing (value-bearing only).
        - descr: help text for the listing.
        - callback: called once per occurrence.
        """
        if short is None and long is None:
            raise TypeError("on() requires a short or a long name")
        switch = Switch(short, long, negatable, placeholder, descr, callback)
        for table, key in ((self._shorts, short), (self._longs, long)):
            if key is None:
                continue
            if key in table:
                raise TypeError(f"switch {key!r} is already registered")
            table[key] = switch
        self._switches.append(switch)
        return switch

    def _lookup(self, name):
        """Return (switch, value) for a long name, resolving '--no-' forms."""
        if (switch := self._longs.get(name)) is not None:
            return switch, True
        if name.startswith("no-") and (switch := self._longs.get(name[3:])) is not None and switch.negatable:
            return switch, False
        return None, None

    def _unknown(self, token, index):
        candidates = ["--" + name for name in self._longs] + ["-" + name for name in self._shorts]
        suggestions = difflib.get_close_matches(token, candidates, 3)
        if suggestions:
            hint = "did you mean %r? run with --help to see all options" % suggestions[0]
        else:
            hint = "run with --help to see all options"
        return UnknownSwitchError(
            "invalid option: %s (%s position)" % (token, ordinal(index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_SWITCH,
            hint=hint,
        )

    def _missing(self, token, index):
        return MissingOptionValueError(
            "missing argument: %s (%s position)" % (token, ordinal(index)),
            title="missing option value",
            code=FaultCode.MISSING_OPTION_VALUE,
            hint="pass a value after %s" % token,
        )

    def scan(self, tokens, /):
        """
        Consume the switches of an argument list.

        Parameters
        - tokens: iterable of str. It is copied; the caller's list is untouched.

        Returns
        - list[str]: the positional remainder, in order.
        """
        tokens = deque(tokens)
        remainder = []
        faults = []
        helped = False
        index = 0

        while tokens:
            token = tokens.popleft()
            index += 1

            if token == "--":
                remainder.extend(tokens)
                break

            if token.startswith("--"):
                name, equals, value = token[2:].partition("=")
                switch, enabled = self._lookup(name)
                if switch is None:
                    faults.append(self._unknown("--" + name, index))
                    continue
                if switch is self._helper:
                    helped = True
                    continue
                if switch.negatable:
                    if equals:
                        faults.append(FlagAssignmentError(
                            "option %s does not take a value (%s position)" % ("--" + name, ordinal(index)),
                            title="flag cannot take a value",
                            code=FaultCode.FLAG_ASSIGNMENT,
                            hint="remove everything from '=' (for example: --%s)" % name,
                        ))
                        continue
                    switch.callback(enabled)
                    continue
                if not equals:
                    if not tokens:
                        faults.append(self._missing(token, index))
                        continue
                    value = tokens.popleft()
                    index += 1
                switch.callback(value)

            elif token.startswith("-") and token != "-":
                letters = token[1:]
                while letters:
                    letter, letters = letters[0], letters[1:]
                    switch = self._shorts.get(letter)
                    if switch is None:
                        faults.append(self._unknown("-" + letter, index))
                        break
                    if switch is self._helper:
                        helped = True
                        continue
                    if switch.negatable:
                        switch.callback(True)
                        continue
                    if letters:
                        value, letters = letters, ""
                    elif tokens:
                        value = tokens.popleft()
                        index += 1
                    else:
                        faults.append(self._missing("-" + letter, index))
                        break
                    switch.callback(value)

            else:
                remainder.append(token)

        if helped:
            self._helper.callback()
        if faults:
            raise faults[0]
        return remainder

    def rows(self):
        """
        Listing rows as (switches, descr) pairs, in registration order.

        Shapes
        - '-i, --input=VALUE', '-iVALUE', '    --input=VALUE'
        - '-v, --[no-]verbose', '-v', '    --[no-]verbose'
        """
        rows = []
        for switch in self._switches:
            if switch is self._helper:
                short, long = "-h", "--help"
            elif switch.negatable:
                short = "-" + switch.short if switch.short is not None else None
                long = "--[no-]" + switch.long if switch.long is not None else None
            elif switch.long is not None:
                short = "-" + switch.short if switch.short is not None else None
                long = "--%s=%s" % (switch.long, switch.placeholder)
            else:
                short, long = "-%s%s" % (switch.short, switch.placeholder), None

            if short is not None and long is not None:
                names = "%s, %s" % (short, long)
            elif short is not None:
                names = short
            else:
                names = " " * INDENT + long
            rows.append((names, switch.descr))
        return rows

    def listing(self):
        """
        Built-in plain-text listing of the registered switches, one line each.
        """
        lines = []
        for names, descr in self.rows():
            line = " " * INDENT + names
            if descr:
                line = line.ljust(INDENT + WIDTH) + " " + descr
            lines.append(line)
        return lines


__all__ = (
    "Switch",
    "Scanner",
)
