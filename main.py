from rich.pretty import pprint

from commandparser import *

spec = CommandSpec(
    "archive",
    "pack and unpack archives",
    options=[
        OptionSpec("verbose", "-v", "--verbose", descr="print every member", flag=True),
        OptionSpec("exclude", "-x", "--exclude", descr="skip members matching a pattern", repeatable=True),
    ],
    subcommands=[
        CommandSpec(
            "create",
            options=[OptionSpec("file", "-f", "--file", descr="archive to write", required=True)],
            operands=[OperandSpec(0, "members", required=True, variadic=True)],
        ),
        CommandSpec(
            "extract",
            options=[OptionSpec("file", "-f", "--file", descr="archive to read", required=True)],
            operands=[OperandSpec(0, "directory")],
        ),
    ],
)


if __name__ == '__main__':
    pprint(parseargs(spec, shell=True, fancy=True))
