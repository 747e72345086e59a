r"""
Argclaim parser: run lifecycle, positionals, groups and help.

Overview
- Parser
  • Parser(description, prog, ...) holds the program metadata and the
    top-level declarations; parse() classifies the input once and opens the run.
  • Declarations (flag/count/arg/list, see OptionSet) resolve immediately
    against the run; pos()/gather() then walk what is left, in input order.
  • finalize() surfaces the recorded faults: warnings first, then a single
    ParseExit bundling every error (raised, or printed and exited in shell mode).

- Group
  • Named sub-collection of declarations sharing the parser's run, so keys
    stay unique across the whole command line. Rendered under its own heading.

Typical flow
    >>> parser = Parser("copy files", "cp").parse(["-v", "a.txt", "b.txt"])
    >>> parser.flag("-v", "--verbose", descr="explain what is being done")
    >>> with parser.group("output") as output:
    ...     output.arg("-o", "--output", descr="destination", default="out")
    >>> parser.pos("source").gather("rest")
    >>> namespace = parser.finalize()

Ordering
- Positional declarations must come after every flag-style declaration:
  values are only known once their flag is declared, and pos() takes the
  smallest index still unclaimed.
"""
import os
import shlex
import sys
from collections.abc import Iterable, MutableSequence

from rich.console import Console
from rich.text import Text

from .faults import *
from .help import *
from .options import Descriptor, Kind, Namespace, Needs, OptionSet, _sanitize
from .tokens import Run
from .utils import *


class Group(OptionSet):
    """
    Named collection of declarations sharing its parser's run.

    Supports the context-manager protocol purely for visual grouping:

        with parser.group("network") as network:
            network.arg("-p", "--port", type=UInt16)
    """

    def __init__(self, name, run, namespace, /):
        super().__init__(run, namespace)
        self._name = name

    @property
    def name(self):
        """heading shown in the help dialog."""
        return self._name

    def __enter__(self):
        return self

    def __exit__(self, *exception):
        return None

    def __repr__(self):
        return "Group(%r)" % self._name


class Parser(OptionSet):
    """
    Entry point: program metadata, top-level declarations and the run.

    Parameters
    - description: one-line summary shown next to the program name.
    - prog: program name (defaults to __prog__ in __main__, then the basename
      of sys.argv[0]).
    - namespace: destination object (defaults to a fresh Namespace).
    - terminator: token after which everything is positional ("--").
    - header/footer: paragraphs shown before/after the arguments in help.
    - help: HelpOptions of the help dialog.
    - shell: render faults to stderr and exit instead of raising.
    - fancy/colorful: presentation of faults and help.
    """

    def __init__(
            self,
            description=Unset,
            /,
            prog=Unset,
            *,
            namespace=Unset,
            terminator="--",
            header=Unset,
            footer=Unset,
            help=Unset,
            shell=False,
            fancy=False,
            colorful=False
    ):
        for name, value in (("description", description), ("header", header), ("footer", footer)):
            if not isinstance(value, str | Text | Unset):
                raise TypeError(f"parser {name!r} must be a string")
        if not isinstance(prog, str | Unset):
            raise TypeError("parser 'prog' must be a string")
        elif isinstance(prog, str) and not (prog := prog.strip()):
            raise ValueError("parser 'prog' cannot be empty")
        if not isinstance(terminator, str):
            raise TypeError("parser 'terminator' must be a string")
        elif not terminator:
            raise ValueError("parser 'terminator' cannot be empty")
        if not isinstance(help, HelpOptions | Unset):
            raise TypeError("parser 'help' must be help options")

        super().__init__(Unset, namespace if namespace is not Unset else Namespace())
        self._description = coalesce(description)
        self._prog = prog
        self._terminator = terminator
        self._header = coalesce(header)
        self._footer = coalesce(footer)
        self._help = coalesce(help, HelpOptions())
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._positionals = []
        self._groups = []
        self._finalized = False

    description = mirror("description")
    terminator = mirror("terminator")
    header = mirror("header")
    footer = mirror("footer")
    help = mirror("help")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    positionals = mirror("positionals")
    groups = mirror("groups")

    @property
    def prog(self):
        """program name shown in help and faults."""
        if self._prog is not Unset:
            return self._prog
        return getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) or "argclaim")

    @property
    def parsed(self):
        """True once parse() has opened the run."""
        return self._run is not Unset

    def parse(self, prompt=Unset, /):
        """
        Classify the input tokens and open the run.

        - Unset reads sys.argv[1:].
        - a string is split like a POSIX shell would (shlex.split).
        - any other iterable of strings is used as-is.

        Must be called exactly once, before any declaration. A long flag given
        as the last token is recorded as a fault; the tokens before it stay
        usable.
        """
        if self._run is not Unset:
            raise RuntimeError("parse() can only be called once per parser")

        match prompt:
            case UnsetType():
                tokens = sys.argv[1:]
            case str():
                tokens = shlex.split(prompt)
            case Iterable():
                tokens = [*prompt]
                if not all(isinstance(token, str) for token in tokens):
                    raise TypeError("parse() tokens must be strings")
            case _:
                raise TypeError("parse() argument must be a string or an iterable of strings")

        self._run = Run(tokens, self._terminator)
        return self

    def pos(self, name, descr=Unset, /, *, dest=Unset, type=str, default=Unset, needs=Needs.REQUIRED):
        """
        Bind the smallest unclaimed token to a named positional.

        Repeated calls walk the positionals in input order. A token that fails
        to decode stays unclaimed. An optional positional keeps its default when
        nothing is left.
        """
        if not isinstance(name, str):
            raise TypeError("pos() 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("pos() 'name' cannot be empty")
        _sanitize("pos", descr=descr, dest=dest, type=type, needs=needs)
        dest = coalesce(dest, name.replace("-", "_"))

        with self._declaration("pos") as run:
            self._positionals.append(Descriptor(None, name, coalesce(descr), None, None, Kind.POSITIONAL, needs))
            self._seed(dest, default, lambda: None)
            if (index := run.table.first()) is None:
                if needs is Needs.REQUIRED:
                    raise MissingPositionalError(
                        "expected a positional argument for: %s" % name,
                        title="missing positional",
                        code=FaultCode.MISSING_POSITIONAL,
                        hint="add a value for %r after the options" % name,
                        key=name,
                        docs=getdoc(FaultCode.MISSING_POSITIONAL),
                    )
                return self
            setattr(self._namespace, dest, self._decode(name, type, run.table[index]))
            run.table.claim(index)
        return self

    def gather(self, dest="positionals", /, *, type=str):
        """
        Claim every remaining token, in input order, into a list.

        Values that fail to decode are recorded as faults and skipped; the
        remaining ones are still appended. The unclaimed set ends empty.
        """
        _sanitize("gather", dest=dest, type=type)

        with self._declaration("gather") as run:
            self._seed(dest, Unset, list)
            if not isinstance(values := getattr(self._namespace, dest), MutableSequence):
                raise TypeError(f"gather() destination {dest!r} must be a mutable sequence")
            for token in run.table.drain():
                with run.capture():
                    values.append(self._decode("unnamed positional", type, token))
        return self

    def unclaimed(self):
        """number of tokens not claimed by any declaration so far."""
        if self._run is Unset:
            raise RuntimeError("unclaimed() called before parse()")
        return self._run.table.unclaimed()

    def group(self, name, /):
        """
        Open a named group sharing this parser's run and key registry.
        """
        if not isinstance(name, str):
            raise TypeError("group() argument must be a string")
        elif not (name := name.strip()):
            raise ValueError("group() argument cannot be empty")
        if self._run is Unset:
            raise RuntimeError("group() called before parse(); tokens must be classified before declaring options")
        self._groups.append(group := Group(name, self._run, self._namespace))
        return group

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's presentation settings.
        """
        trigger(fault, **{
            "tool": self,
            "shell": self._shell,
            "fancy": self._fancy,
            "colorful": self._colorful,
        } | options)

    def finalize(self):
        """
        Close the run and surface its faults.

        - tokens nobody claimed become an UnclaimedTokensWarning.
        - warnings are emitted (warnings.warn, or printed in shell mode).
        - errors, if any, are bundled into a ParseExit and triggered: raised, or
          printed followed by sys.exit(1) in shell mode.

        Returns the namespace when no error was recorded.
        """
        if self._run is Unset:
            raise RuntimeError("finalize() called before parse()")
        if self._finalized:
            raise RuntimeError("finalize() can only be called once per parser")
        self._finalized = True

        if count := self._run.table.unclaimed():
            texts = [self._run.table[index].text for index in self._run.table.others]
            self._run.record(UnclaimedTokensWarning(
                "%d unclaimed %s: %s" % (count, "token" if count == 1 else pluralize("token"), ", ".join(texts)),
                title="unclaimed tokens",
                code=FaultCode.UNCLAIMED_TOKENS,
                hint="declare a positional for them, call gather(), or remove them",
                index=self._run.table.others[0],
                token=texts[0],
                docs=getdoc(FaultCode.UNCLAIMED_TOKENS),
            ))

        for warning in filter(lambda x: isinstance(x, ArgumentWarning), self._run.faults):
            self.trigger(warning)

        if errors := [fault for fault in self._run.faults if isinstance(fault, ArgumentException)]:
            self.trigger(ParseExit(errors))

        return self._namespace

    def render(self):
        """help dialog as a rich renderable."""
        return render(self)

    def print_help(self):
        """print the help dialog (to stderr when faults were recorded)."""
        Console(stderr=len(self.faults) > 0).print(self.render())

    def __rich__(self):
        return self.render()

    def __repr__(self):
        return "Parser(%r, %r)" % (self._description, self.prog)


__all__ = (
    "Parser",
    "Group",
)
