"""
commandparser faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the
  specification layer and the parser can raise. Codes are grouped by domain so
  logs and searches stay predictable.
- CommandLineError: closed family of exceptions. Each kind carries structured
  fields (option token, command path, operand identity...) so callers can
  re-stringify them, and knows how to render itself with rich.
- trigger(): surface a fault, raising it or printing it in shell mode.
- getdoc(): optional description lookup for a code from the host application.

Command paths
- Parse-time kinds carry a `command` field. When a fault crosses a sub-command
  boundary the parser rebuilds it with copy.replace(fault, command="outer inner"),
  so a failure deep in a tree names the full route ("root mid leaf").

Integration
- The parser raises; hosts that want CLI behaviour call trigger(fault, shell=True)
  (or parseargs(..., shell=True)) to print the fault on stderr and exit with 1.
- Hosts may set __prog__, __styles__, __codes__ and __docs__ in __main__ to
  customise the rendering.
"""
import sys
from collections import defaultdict
from enum import IntEnum

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - specification (2110x)
      • OPTION_ALREADY_DEFINED, OPERAND_ALREADY_DEFINED, COMMAND_ALREADY_DEFINED,
        OPTION_TOKEN_ALREADY_DEFINED
    - routing (2111x)
      • INVALID_COMMAND_SPECS
    - options (2112x)
      • OPTION_NOT_FOUND, MISSING_OPTION_ARGUMENT, OPTION_REPETITION_DENIED,
        MISSING_REQUIRED_OPTION
    - operands (2113x)
      • MISSING_REQUIRED_OPERAND
    """
    # --- specification errors (2110x) ---
    OPTION_ALREADY_DEFINED       = 21101
    OPERAND_ALREADY_DEFINED      = 21102
    COMMAND_ALREADY_DEFINED      = 21103
    OPTION_TOKEN_ALREADY_DEFINED = 21104

    # --- routing errors (2111x) ---
    INVALID_COMMAND_SPECS        = 21111

    # --- option errors (2112x) ---
    OPTION_NOT_FOUND             = 21121
    MISSING_OPTION_ARGUMENT      = 21122
    OPTION_REPETITION_DENIED     = 21123
    MISSING_REQUIRED_OPTION      = 21124

    # --- operand errors (2113x) ---
    MISSING_REQUIRED_OPERAND     = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandLineError(Exception):
    """
    Base of every error raised by commandparser.

    The family is closed: only this module may derive kinds from it, so callers
    can match on the concrete classes exhaustively.

    Protocol
    - __fields__: names of the structured fields, in constructor order.
    - code/title: FaultCode and short human title of the kind.
    - hint: one actionable sentence (or None).
    - __replace__: copy.replace(fault, **fields) rebuilds the same kind with some
      fields overridden (the message is recomputed).
    """
    __fields__ = ()
    code = None
    title = None

    def __init_subclass__(cls, **options):
        if cls.__module__ != __name__:
            raise TypeError("type 'CommandLineError' is not an acceptable base type")
        super().__init_subclass__(**options)

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message

    @property
    def hint(self):
        return None

    @property
    def prog(self):
        """
        program label used in rendered headers (root of the command path).
        """
        command = getattr(self, "command", None) or getattr(self, "parent", None)
        default = str(command).split()[0] if command else "command-parser"
        return getattr(__import__("__main__"), "__prog__", default)

    def render(self, *, colorful=True, fancy=False):
        """
        build a rich renderable: header, message and hint.

        parameters
        - colorful: apply styles (defaults, overridable via __styles__ in __main__).
        - fancy: wrap message and hint in a titled panel.
        """
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(self.prog, "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        if self.hint:
            hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))
        else:
            hint = Text("")

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")
        return Group(header, message, hint)

    def __rich__(self):
        return self.render()

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**{name: getattr(self, name) for name in self.__fields__} | overrides)


class InvalidCommandSpecsError(CommandLineError):
    __fields__ = ("descr",)
    code = FaultCode.INVALID_COMMAND_SPECS
    title = "invalid command specifications"

    def __init__(self, descr=None):
        super().__init__("Invalid command specifications" + ("" if descr is None else f": {descr}"))
        self.descr = descr

    @property
    def hint(self):
        return "the first token must be the name of the command being parsed"


class OptionNotFoundError(CommandLineError):
    __fields__ = ("option", "command", "suggestions")
    code = FaultCode.OPTION_NOT_FOUND
    title = "unknown option"

    def __init__(self, option, command, suggestions=()):
        super().__init__(f"Unknown option '{option}' for command '{command}'")
        self.option = option
        self.command = command
        self.suggestions = tuple(suggestions)

    @property
    def hint(self):
        if self.suggestions:
            return "did you mean %r?" % self.suggestions[0]
        return "check the options declared by '%s'" % self.command


class MissingOptionArgumentError(CommandLineError):
    __fields__ = ("command", "option")
    code = FaultCode.MISSING_OPTION_ARGUMENT
    title = "missing option argument"

    def __init__(self, command, option):
        super().__init__(f"Missing argument for option '{option}' of command '{command}'.")
        self.command = command
        self.option = option

    @property
    def hint(self):
        if self.option.startswith("--"):
            return "pass the value inline (for example: %s=<value>)" % self.option
        return "pass the value right after it (for example: %s<value> or %s <value>)" % (self.option, self.option)


class OptionRepetitionDeniedError(CommandLineError):
    __fields__ = ("command", "option")
    code = FaultCode.OPTION_REPETITION_DENIED
    title = "option repetition denied"

    def __init__(self, command, option):
        super().__init__(f"Option '{option}' cannot be repeated in command '{command}'.")
        self.command = command
        self.option = option

    @property
    def hint(self):
        return "keep a single occurrence of option %r" % self.option


class MissingRequiredOptionError(CommandLineError):
    __fields__ = ("command", "option")
    code = FaultCode.MISSING_REQUIRED_OPTION
    title = "missing required option"

    def __init__(self, command, option):
        super().__init__(f"Missing required option '{option}' for command '{command}'.")
        self.command = command
        self.option = option

    @property
    def hint(self):
        return "add option %r to the '%s' command line" % (self.option, self.command)


class MissingRequiredOperandError(CommandLineError):
    __fields__ = ("command", "operand")
    code = FaultCode.MISSING_REQUIRED_OPERAND
    title = "missing required operand"

    def __init__(self, command, operand):
        super().__init__(f"Missing required operand '{operand}' for command '{command}'.")
        self.command = command
        self.operand = operand

    @property
    def hint(self):
        return "add the missing operand %r after the options of '%s'" % (self.operand, self.command)


class OptionTokenAlreadyDefinedError(CommandLineError):
    __fields__ = ("token", "option", "command")
    code = FaultCode.OPTION_TOKEN_ALREADY_DEFINED
    title = "option token already defined"

    def __init__(self, token, option, command=None):
        message = f"The option token '{token}' is already defined for option '{option}'"
        if command is not None:
            message += f" in command '{command}'"
        super().__init__(message)
        self.token = token
        self.option = option
        self.command = command

    @property
    def hint(self):
        return "declare %r on a single option" % self.token


class CommandAlreadyDefinedError(CommandLineError):
    __fields__ = ("name", "parent")
    code = FaultCode.COMMAND_ALREADY_DEFINED
    title = "command already defined"

    def __init__(self, name, parent=None):
        message = f"The command '{name}' is already defined"
        if parent is not None:
            message += f" in the command '{parent}'"
        super().__init__(message)
        self.name = name
        self.parent = parent

    @property
    def hint(self):
        return "give each sub-command a unique name"


class OperandAlreadyDefinedError(CommandLineError):
    __fields__ = ("operand", "command")
    code = FaultCode.OPERAND_ALREADY_DEFINED
    title = "operand already defined"

    def __init__(self, operand, command):
        super().__init__(f"The operand '{operand}' is already defined in the command '{command}'")
        self.operand = operand
        self.command = command

    @property
    def hint(self):
        return "give each operand a unique index and name"


class OptionAlreadyDefinedError(CommandLineError):
    __fields__ = ("option", "command")
    code = FaultCode.OPTION_ALREADY_DEFINED
    title = "option already defined"

    def __init__(self, option, command):
        super().__init__(f"The option '{option}' is already defined in the command '{command}'")
        self.option = option
        self.command = command

    @property
    def hint(self):
        return "give each option a unique name"


def trigger(fault, /, *, shell=False, fancy=False, colorful=True):
    """
    surface a fault with the given runtime options.

    contract
    - outside shell mode the fault is raised unchanged.
    - in shell mode it is printed on the stderr console and the process exits
      with status 1.
    """
    if not isinstance(fault, CommandLineError):
        raise TypeError("trigger() argument must be a command-line error")
    if not shell:
        raise fault from None
    console.print(fault.render(colorful=colorful, fancy=fancy))
    sys.exit(1)


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances; returns None when not found.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandLineError",
    "InvalidCommandSpecsError",
    "OptionNotFoundError",
    "MissingOptionArgumentError",
    "OptionRepetitionDeniedError",
    "MissingRequiredOptionError",
    "MissingRequiredOperandError",
    "OptionTokenAlreadyDefinedError",
    "CommandAlreadyDefinedError",
    "OperandAlreadyDefinedError",
    "OptionAlreadyDefinedError",
    "trigger",
    "getdoc",
)
