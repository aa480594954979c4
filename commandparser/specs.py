r"""
commandparser specifications: the declarative description of a command.

Overview
- TokenStyle: the two dash styles an option token can be spelled with
  (SHORT "-x", LONG "--name").
- OptionToken: immutable (literal, style) pair; str(token) gives its spelling.
- OptionSpec: named option with one or more tokens and the flag/repeatable/
  required switches.
- OperandSpec: positional operand addressed by index, optionally named,
  optionally required or variadic.
- CommandSpec: a command with its options, operands and sub-commands
  (recursively the same shape).

Immutability and introspection
- SpecType metaclass exposes every field listed in __introspectable__ as a
  read-only property (containers come back frozen) and provides stable
  __repr__/__rich_repr__ implementations.
- Spec classes are sealed against subclassing.

Validation highlights (construction time)
- Names must be non-empty strings; descriptions are trimmed and non-empty.
- Token spellings: "-x" (one character, no '-', '=' or whitespace) and
  "--name" (no leading '-', no '=' or whitespace).
- The same option may not declare a token twice (OptionTokenAlreadyDefinedError).
- Inside a command: option names, operand indices, operand names and
  sub-command names are unique (OptionAlreadyDefinedError,
  OperandAlreadyDefinedError, CommandAlreadyDefinedError).
- A variadic operand must be the last declared operand.

Token collisions across different options of one command are left to the
parser's validate() pass, which runs before any token is consumed.

Quick example:
    >>> spec = CommandSpec(
    ...     "tool",
    ...     options=[
    ...         OptionSpec("verbose", "-v", "--verbose", flag=True),
    ...         OptionSpec("output", "-o", "--output", required=True),
    ...     ],
    ...     operands=[OperandSpec(0, "files", variadic=True)],
    ... )
    >>> spec.getoption(token="o", style=TokenStyle.SHORT).name
    'output'
"""
import functools
import operator
import re
from collections import namedtuple
from collections.abc import Iterable
from enum import Enum

from rich.text import Text

from .faults import CommandAlreadyDefinedError, OperandAlreadyDefinedError, OptionAlreadyDefinedError
from .faults import OptionTokenAlreadyDefinedError
from .utils import *


class TokenStyle(Enum):
    """
    dash style of an option token; the value is the textual prefix.
    """
    SHORT = "-"
    LONG = "--"


_LITERALS = {
    TokenStyle.SHORT: re.compile(r"[^\s=-]"),
    TokenStyle.LONG: re.compile(r"[^\s=-][^\s=]*"),
}


class OptionToken(namedtuple("OptionToken", ("literal", "style"))):
    """
    One spelling of an option: the literal text plus its dash style.

    Tokens compare and hash as (literal, style) pairs, which is the identity the
    duplicate-token checks rely on.
    """
    __slots__ = ()

    def __new__(cls, literal, style, /):
        if not isinstance(literal, str):
            raise TypeError("option-token 'literal' must be a string")
        if not isinstance(style, TokenStyle):
            raise TypeError("option-token 'style' must be a token-style")
        if not _LITERALS[style].fullmatch(literal):
            if style is TokenStyle.SHORT:
                raise ValueError("short option-token literal must be a single character other than '-' or '='")
            raise ValueError("long option-token literal must be non-empty and cannot start with '-' or contain '='")
        return super().__new__(cls, literal, style)

    @classmethod
    def parse(cls, source, /):
        """
        Build a token from its spelling ("-v" or "--verbose").
        """
        if not isinstance(source, str):
            raise TypeError("option-token spelling must be a string")
        if source.startswith(TokenStyle.LONG.value):
            return cls(source[2:], TokenStyle.LONG)
        if source.startswith(TokenStyle.SHORT.value):
            return cls(source[1:], TokenStyle.SHORT)
        raise ValueError("option-token spelling %r must start with '-' or '--'" % source)

    def __str__(self):
        return self.style.value + self.literal


class SpecType(type):
    """
    Metaclass that turns spec classes into sealed, introspectable descriptors.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the "_<name>" backing field.
    - Provide stable __repr__/__rich_repr__ implementations.
    - Seal the resulting class against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in validation messages ("option-spec 'name' must be a string").
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the shared 'name' and 'descr' fields in place.

    - name: required non-empty string (trimmed). OperandSpec allows it to be
      Unset, which becomes None.
    - descr: Unset | str | Text; strings are trimmed and must stay non-empty.
      Unset becomes None.

    Raises
    - TypeError for wrong types (explicit None included), ValueError for empty strings.
    """
    if not isinstance(name := metadata["name"], str | (Unset if issubclass(cls, OperandSpec) else str)):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif isinstance(name, str) and not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = coalesce(name)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_tokens(cls, metadata, /):
    """
    Internal: turn token spellings into OptionToken instances.

    Each entry is either an OptionToken or its spelling ("-v", "--verbose").
    A token declared twice on the same option raises
    OptionTokenAlreadyDefinedError (no command is known yet).
    """
    tokens = []
    for token in metadata["tokens"]:
        if isinstance(token, str):
            token = OptionToken.parse(token)
        elif not isinstance(token, OptionToken):
            raise TypeError(f"{cls.__typename__} tokens must be strings or option-tokens")
        if token in tokens:
            raise OptionTokenAlreadyDefinedError(str(token), metadata["name"])
        tokens.append(token)
    metadata["tokens"] = tuple(tokens)


def _sanitize_index(cls, metadata, /):
    """
    Internal: operand indices are non-negative integers (bool rejected).
    """
    if not isinstance(index := metadata["index"], int) or isinstance(index, bool):
        raise TypeError(f"{cls.__typename__} 'index' must be an integer")
    if index < 0:
        raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")


def _iterable(cls, metadata, name, kind, /):
    """
    Internal: read metadata[name] as a list of `kind` instances.
    """
    if not isinstance(metadata[name], Iterable) or isinstance(metadata[name], str | Text):
        raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of {kind.__typename__}s")
    items = list(metadata[name])
    for item in items:
        if not isinstance(item, kind):
            raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of {kind.__typename__}s")
    return items


def _process_options(cls, metadata, /):
    """
    Index options by name; a repeated name raises OptionAlreadyDefinedError.
    """
    options = {}
    for option in _iterable(cls, metadata, "options", OptionSpec):
        if option.name in options:
            raise OptionAlreadyDefinedError(option.name, metadata["name"])
        options[option.name] = option
    metadata["options"] = options


def _process_operands(cls, metadata, /):
    """
    Check operand indices and names for duplicates, order operands by index and
    require any variadic operand to be the last one.
    """
    operands = []
    for operand in _iterable(cls, metadata, "operands", OperandSpec):
        if any(other.index == operand.index for other in operands):
            raise OperandAlreadyDefinedError(operand.index, metadata["name"])
        if operand.name is not None and any(other.name == operand.name for other in operands):
            raise OperandAlreadyDefinedError(operand.name, metadata["name"])
        operands.append(operand)

    operands.sort(key=operator.attrgetter("index"))

    # a variadic operand absorbs every later positional token
    for operand in operands[:-1]:
        if operand.variadic:
            raise TypeError(f"{cls.__typename__} variadic operand at index {operand.index} must be the last operand")

    metadata["operands"] = operands


def _process_subcommands(cls, metadata, /):
    """
    Index sub-commands by name; a repeated name raises CommandAlreadyDefinedError.
    """
    subcommands = {}
    for subcommand in _iterable(cls, metadata, "subcommands", CommandSpec):
        if subcommand.name.startswith("-"):
            raise ValueError(f"{cls.__typename__} sub-command name {subcommand.name!r} cannot start with '-'")
        if subcommand.name in subcommands:
            raise CommandAlreadyDefinedError(subcommand.name, metadata["name"])
        subcommands[subcommand.name] = subcommand
    metadata["subcommands"] = subcommands


class OptionSpec(metaclass=SpecType):
    """
    Named option specification.

    Highlights
    - name: identity of the option inside its command; parsed results are keyed by it.
    - tokens: the spellings that select the option ("-o", "--output").
    - flag: presence-only, takes no value.
    - repeatable: may appear more than once; values accumulate in order.
    - required: must appear at least once in a parse.
    """

    __introspectable__ = (
        "name",
        "tokens",
        "descr",
        "flag",
        "repeatable",
        "required",
    )

    def __new__(cls, name, /, *tokens, descr=Unset, flag=False, repeatable=False, required=False):
        """
        Construct an OptionSpec.

        Parameters
        - name: str
          Unique identity within the owning command.
        - tokens: str | OptionToken
          Spellings of the option; "-x" for short, "--name" for long tokens.
        - descr: Unset | str
          Short description; None when omitted.
        - flag / repeatable / required: bool
        """
        metadata = {
            "name": name,
            "tokens": tokens,
            "descr": descr,
            "flag": bool(flag),
            "repeatable": bool(repeatable),
            "required": bool(required),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_tokens(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def gettoken(self, literal, style=Unset, /):
        """
        Return the declared token with this literal (and style, when given), or None.
        """
        for token in self._tokens:
            if token.literal == literal and (style is Unset or token.style is style):
                return token
        return None

    def hastoken(self, literal, style=Unset, /):
        return self.gettoken(literal, style) is not None


class OperandSpec(metaclass=SpecType):
    """
    Positional operand specification.

    Highlights
    - index: zero-based position among the operands of the command.
    - name: optional label copied into parsed operands.
    - required: an operand must be present at this index after parsing.
    - variadic: absorbs every remaining positional token into one value; only
      the last declared operand can be variadic.
    """

    __introspectable__ = (
        "index",
        "name",
        "descr",
        "required",
        "variadic",
    )

    def __new__(cls, index, /, name=Unset, descr=Unset, *, required=False, variadic=False):
        metadata = {
            "index": index,
            "name": name,
            "descr": descr,
            "required": bool(required),
            "variadic": bool(variadic),
        }
        _sanitize_index(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class CommandSpec(metaclass=SpecType):
    """
    Command specification: options, operands and sub-commands.

    Lifecycle
    - Built once from plain iterables; options and sub-commands are indexed by
      name, operands are ordered by index.
    - Never mutated afterwards: properties expose read-only views.

    Lookups used by the parser
    - getoption(name) / getoption(token=..., style=...)
    - getoperand(index) / getoperand(name=...)
    - getsubcommand(name), hassubcommand(name)
    """

    __introspectable__ = (
        "name",
        "descr",
        "options",
        "operands",
        "subcommands",
    )

    def __new__(cls, name, /, descr=Unset, options=(), operands=(), subcommands=()):
        """
        Construct a CommandSpec.

        Parameters
        - name: str
          The command name; for a root command it is matched against the first
          token, for a sub-command it is the routing word.
        - descr: Unset | str
        - options: Iterable[OptionSpec]
        - operands: Iterable[OperandSpec]
        - subcommands: Iterable[CommandSpec]

        Raises
        - OptionAlreadyDefinedError, OperandAlreadyDefinedError,
          CommandAlreadyDefinedError on duplicates.
        - TypeError / ValueError on malformed metadata or a misplaced variadic operand.
        """
        metadata = {
            "name": name,
            "descr": descr,
            "options": options,
            "operands": operands,
            "subcommands": subcommands,
        }
        _sanitize_metadata(cls, metadata)
        _process_options(cls, metadata)
        _process_operands(cls, metadata)
        _process_subcommands(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def getoption(self, name=Unset, /, *, token=Unset, style=Unset):
        """
        Find an option by name, or by token literal (optionally restricted to a style).

        Returns None when nothing matches.
        """
        if (name is Unset) == (token is Unset):
            raise TypeError("getoption() requires either a name or a token")
        if name is not Unset:
            return self._options.get(name)
        for option in self._options.values():
            if option.hastoken(token, style):
                return option
        return None

    def getoperand(self, index=Unset, /, *, name=Unset):
        """
        Find an operand by index or by name; None when nothing matches.
        """
        if (index is Unset) == (name is Unset):
            raise TypeError("getoperand() requires either an index or a name")
        for operand in self._operands:
            if operand.index == index if index is not Unset else operand.name == name:
                return operand
        return None

    def getsubcommand(self, name, /):
        return self._subcommands.get(name)

    def hassubcommand(self, name, /):
        return name in self._subcommands


__all__ = (
    "TokenStyle",
    "OptionToken",
    "OptionSpec",
    "OperandSpec",
    "CommandSpec",
)

del SpecType
