"""
Usage text rendering.

Layout
    Usage: <prog> <summary>
    <descriptor description, when present>

        -i, --input=PATH                 Input file
        -v, --[no-]verbose               Talk more
        -h, --help                       Prints this help
        FIRST                            First positional

Summary order
- positional fields: FIRST, optional ones [THIRD], the repeated one [REST...]
- mandatory flag fields: --input=PATH (or -iPATH without a long name)
- optional and repeated flag fields: [--jobs=N], [--tag=VALUE...]
- [OPTS...] when any field is not represented above (boolean flags)

Palette keys (override through a __styles__ mapping in __main__)
- usage-label, program-name, usage-section, description-section
- switch-name, positional-name, argument-description
"""
from collections import defaultdict

from rich.console import Group
from rich.text import Text

from .faults import InternalError
from .scanner import INDENT, WIDTH


def _summary(fields):
    parts = []
    represented = set()

    for spec in fields:
        if not spec.positional:
            continue
        if spec.repeated:
            parts.append("[%s...]" % spec.label)
        elif spec.optional:
            parts.append("[%s]" % spec.label)
        else:
            parts.append(spec.label)
        represented.add(spec.name)

    def switch(spec):
        if spec.long is not None:
            return "--%s=%s" % (spec.long, spec.label)
        return "-%s%s" % (spec.short, spec.label)

    for spec in fields:
        if spec.positional or spec.boolean or spec.optional or spec.repeated:
            continue
        parts.append(switch(spec))
        represented.add(spec.name)

    for spec in fields:
        if spec.positional or spec.boolean or not (spec.optional or spec.repeated):
            continue
        if spec.repeated:
            parts.append("[%s...]" % switch(spec))
        else:
            parts.append("[%s]" % switch(spec))
        represented.add(spec.name)

    if any(spec.name not in represented for spec in fields):
        parts.append("[OPTS...]")

    return " ".join(parts)


def banner(prog, fields, /):
    """The first usage line: 'Usage: <prog> <summary>'."""
    return ("Usage: %s %s" % (prog, _summary(list(fields)))).rstrip()


def render(prog, fields, scanner, /, *, descr=None, colorful=True):
    """
    Build the full usage renderable.

    Parameters
    - prog: program name shown in the banner.
    - fields: FieldSpecs in declaration order.
    - scanner: the Scanner configured for the current parse; its listing
      provides the switch lines.
    - descr: descriptor description shown under the banner.
    - colorful: apply the palette (rich drops styles anyway on plain files).

    Raises
    - InternalError: the scanner has not been configured yet.
    """
    if scanner is None or not getattr(scanner, "configured", False):
        raise InternalError("usage requested before the flag scanner was configured")

    fields = list(fields)
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",
        "switch-name": "bold #00E6FF",
        "positional-name": "bold #FFD600",
        "argument-description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text(banner(prog, fields))
    if colorful:
        header.stylize(styles["usage-label"], 0, len("Usage:"))
        header.stylize(styles["program-name"], len("Usage: "), len("Usage: ") + len(prog))
        header.stylize(styles["usage-section"], len("Usage: ") + len(prog) + 1)
    renders = [header]

    if descr:
        renders.append(text(descr, "description-section"))

    renders.append(Text(""))

    def line(names, descr, style):
        row = Text.assemble(" " * INDENT, text(names, style))
        if descr:
            row.pad_right(max(INDENT + WIDTH - len(row), 0))
            row.append_text(Text.assemble(" ", text(descr, "argument-description")))
        return row

    for names, descr in scanner.rows():
        renders.append(line(names, descr, "switch-name"))

    for spec in fields:
        if spec.positional:
            label = "%s..." % spec.label if spec.repeated else spec.label
            renders.append(line(label, spec.description, "positional-name"))

    return Group(*renders)


__all__ = (
    "banner",
    "render",
)
