"""
Argclaim help dialog.

HelpOptions holds the layout knobs; render(parser) turns a parser's
descriptors into a single rich renderable (a Text, or a Panel when the parser
is fancy).

Layout
    <prog> - <description>

    usage: <prog> [-abc] [--long-only] [-r] [--required] <positionals...>

    <header paragraph>

        -a, --alpha VALUE     description wrapped on the
                              description column
                              [default: 1]
        group:
            -b, --beta        ...
        positionals:
            name              ...

    <footer paragraph>

Every description starts on the same column: the longest names column of the
whole dialog plus five spaces.
"""
from collections import defaultdict

from rich.console import Console
from rich.containers import Lines
from rich.panel import Panel
from rich.text import Text

from .options import Kind, Needs
from .utils import *

# number of spaces between the longest names column and the descriptions
_GUTTER = 5


class HelpOptions:
    """
    Formatting options of the help dialog.

    - width: maximum width of the dialog (characters).
    - indent: indentation of entries and group headings.
    - group_indent: extra indentation of entries inside a group or the
      positionals section.
    - lines_between: empty lines between sections.
    - lines_after_group: empty lines after a group heading.
    - line_after_wrap: add an empty line after a description that wrapped.
    - use_prefix: text shown before the program name on the usage line.
    """

    width = mirror("width")
    indent = mirror("indent")
    group_indent = mirror("group_indent")
    lines_between = mirror("lines_between")
    lines_after_group = mirror("lines_after_group")
    line_after_wrap = mirror("line_after_wrap")
    use_prefix = mirror("use_prefix")

    def __init__(
            self,
            *,
            width=80,
            indent=4,
            group_indent=4,
            lines_between=1,
            lines_after_group=0,
            line_after_wrap=True,
            use_prefix="usage:"
    ):
        if not isinstance(width, int) or isinstance(width, bool):
            raise TypeError("help options 'width' must be an integer")
        elif width < 1:
            raise ValueError("help options 'width' must be a positive integer")

        for name, value in (
            ("indent", indent),
            ("group_indent", group_indent),
            ("lines_between", lines_between),
            ("lines_after_group", lines_after_group),
        ):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"help options {name!r} must be an integer")
            elif value < 0:
                raise ValueError(f"help options {name!r} cannot be negative")

        if not isinstance(line_after_wrap, bool):
            raise TypeError("help options 'line_after_wrap' must be a boolean")
        if not isinstance(use_prefix, str):
            raise TypeError("help options 'use_prefix' must be a string")

        self._width = width
        self._indent = indent
        self._group_indent = group_indent
        self._lines_between = lines_between
        self._lines_after_group = lines_after_group
        self._line_after_wrap = line_after_wrap
        self._use_prefix = use_prefix.strip()

    def __rich_repr__(self):
        yield "width", self._width
        yield "indent", self._indent
        yield "group_indent", self._group_indent
        yield "lines_between", self._lines_between
        yield "lines_after_group", self._lines_after_group
        yield "line_after_wrap", self._line_after_wrap
        yield "use_prefix", self._use_prefix

    def __repr__(self):
        return "HelpOptions(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __eq__(self, other):
        if not isinstance(other, HelpOptions):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    __hash__ = None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**dict(self.__rich_repr__()) | overrides)


def render(parser, /):
    """
    Build the help dialog of a parser.

    Palette keys
    - program-name, description-section, usage-label, usage-section
    - header-section, footer-section, group-label
    - option-name, positional-name, metavar, argument-description, default-value
    - panel-title

    Customization
    - Define a mapping named __styles__ in __main__ to override any palette entry.
    - When the parser is not colorful, styling is suppressed.
    """
    options = parser.help
    colorful = parser.colorful
    styles = defaultdict(str, {
        # === Head sections ===
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "description-section": "italic #A3A3A3",  # Neutral gray
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
        "header-section": "#D1D5DB",
        "footer-section": "#737373",  # Dim footer gray

        # === Groups / arguments ===
        "group-label": "bold #FFFFFF",  # Pure white headers
        "option-name": "bold #00E6FF",  # CYAN for options
        "positional-name": "bold #22C55E",  # GREEN for positionals
        "metavar": "bold #FFD600",  # AMBER for parameters
        "argument-description": "#9CA3AF",  # Muted gray
        "default-value": "italic #FFD600",

        # === Fancy panel ===
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment.copy()
        return Text(str(fragment), style)

    console = Console()
    width = options.width - 4 * parser.fancy  # panel gutters

    def wrap(fragment, column):
        # first line continues at the current column; the rest hang on it
        lines = fragment.wrap(console, max(width - column, 1))
        wrapped = Text()
        for index, line in enumerate(lines):
            line.rstrip()
            if index:
                wrapped.append("\n").append(" " * column)
            wrapped.append(line)
        return wrapped, len(lines)

    sections = list(parser.descriptors)
    groups = [(group.name, group.descriptors) for group in parser.groups]
    positionals = parser.positionals
    nested = options.indent + options.group_indent

    def names(descriptor):
        if descriptor.kind is Kind.POSITIONAL:
            return text(descriptor.long, styler("positional-name"))
        column = Text()
        if descriptor.short:
            column.append(text("-" + descriptor.short, styler("option-name")))
            if descriptor.long:
                column.append(", ")
        else:
            column.append(" " * 4)
        if descriptor.long:
            column.append(text("--" + descriptor.long, styler("option-name")))
        if descriptor.metavar:
            column.append(" ").append(text(descriptor.metavar, styler("metavar")))
        return column

    longest = max(
        [options.indent + len(names(descriptor)) for descriptor in sections] +
        [nested + len(names(descriptor)) for _, descriptors in groups for descriptor in descriptors] +
        [nested + len(names(descriptor)) for descriptor in positionals],
        default=0,
    )
    column = longest + _GUTTER

    def entry(descriptor, depth):
        line = Text(" " * depth).append(names(descriptor))
        count = 0
        if descr := text(descriptor.descr, styler("argument-description")):
            line.append(" " * (column - len(line)))
            body, count = wrap(descr, column)
            line.append(body)
        if descriptor.default is not None:
            line.append("\n").append(" " * column)
            line.append(Text.assemble("[default: ", text(descriptor.default, styler("default-value")), "]"))
        if options.line_after_wrap and count > 1:
            line.append("\n")
        return line

    renders = []

    # Title line
    title = text(parser.prog, styler("program-name"))
    if parser.description:
        title.append(" - ").append(text(parser.description, styler("description-section")))
    renders.append(title)

    # Usage line: optional shorts clustered, optional long-only keys, required keys, positionals
    shorts, longs, required = [], [], []
    for descriptor in sections + [descriptor for _, descriptors in groups for descriptor in descriptors]:
        match descriptor.needs, descriptor.short, descriptor.long:
            case Needs.OPTIONAL, str() as short, _:
                shorts.append(short)
            case Needs.OPTIONAL, None, str() as long:
                longs.append("--" + long)
            case Needs.REQUIRED, str() as short, _:
                required.append("-" + short)
            case Needs.REQUIRED, None, str() as long:
                required.append("--" + long)

    inputs = []
    if shorts:
        inputs.append(Text.assemble("[", text("-" + "".join(shorts), styler("usage-section")), "]"))
    for name in longs + required:
        inputs.append(Text.assemble("[", text(name, styler("usage-section")), "]"))
    for descriptor in positionals:
        inputs.append(text(descriptor.long, styler("usage-section")))

    usage = Text()
    if options.use_prefix:
        usage.append(text(options.use_prefix, styler("usage-label"))).append(" ")
    usage.append(text(parser.prog, styler("program-name")))
    offset = len(usage) + 1  # hanging indent of wrapped usage items

    lines = Lines()
    for input in inputs:
        if lines and len(lines[-1]) + 1 + len(input) <= width - offset:
            lines[-1].append(" ").append(input)
        else:
            lines.append(input.copy())
    for index, line in enumerate(lines):
        if index:
            usage.append("\n").append(" " * offset)
        else:
            usage.append(" ")
        usage.append(line)
    renders.append(usage)

    # Header paragraph
    if parser.header:
        renders.append(wrap(text(parser.header, styler("header-section")), 0)[0])

    # Arguments: top level, then groups, then positionals
    arguments = []
    for descriptor in sections:
        arguments.append(entry(descriptor, options.indent))

    for name, descriptors in groups + [("positionals", positionals)] * bool(positionals):
        heading = Text(" " * options.indent).append(text(name, styler("group-label"))).append(":")
        heading.append("\n" * options.lines_after_group)
        if arguments and options.lines_between:
            arguments.append(Text("\n" * (options.lines_between - 1)))
        arguments.append(heading)
        for descriptor in descriptors:
            arguments.append(entry(descriptor, nested))

    if arguments:
        renders.append(Text("\n").join(arguments))

    # Footer paragraph
    if parser.footer:
        renders.append(wrap(text(parser.footer, styler("footer-section")), 0)[0])

    renderable = Text("\n" * (options.lines_between + 1)).join(renders)

    if parser.fancy:
        return Panel(
            renderable,
            title=Text.assemble("[", " ", f"{parser.prog} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
            width=options.width,
        )

    return renderable


__all__ = (
    "HelpOptions",
    "render",
)
