from rich.pretty import pprint

from argclaim import *
from argclaim.utils import Unset

__prog__ = "demo"
__styles__ = {"program-name": "bold #22C55E"}


def main(prompt=Unset):
    parser = Parser(
        "claim-based argument demo",
        header="Flags are resolved against the whole command line, whatever order they are declared in.",
        shell=True,
        colorful=True,
    ).parse(prompt)

    parser.flag("-h", "--help", descr="print this dialog")
    parser.count("-v", "--verbose", descr="increase the verbosity")
    parser.arg("-o", "--output", descr="output path", default="a.out", kind=Kind.DEFAULTED, metavar="FILE")
    with parser.group("network") as network:
        network.arg("-p", "--port", descr="port to listen on", type=UInt16, default=8080, metavar="PORT")
        network.list("-H", "--host", descr="allowed host (repeatable)", metavar="HOST")
    parser.pos("command", "what to run", default="serve", needs=Needs.OPTIONAL).gather("rest")

    if parser.namespace.help:
        return parser.print_help()
    pprint(parser.finalize())


if __name__ == '__main__':
    main()
