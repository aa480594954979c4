"""
commandparser parser: turn argv-like tokens into a validated Command tree.

What this module provides
- parse(tokens, spec): the parsing engine. Returns a results.Command, or None
  for an empty token sequence.
- validate(spec): spec-time check that no two options of a command share a
  token (same literal and dash style).
- verify(command, spec): result-time check that required options and operands
  are present.
- parseargs(spec, prompt): convenience runner reading sys.argv, a shell-like
  string or an iterable of tokens, with optional shell-style fault reporting.

Token classification (per command level, first rule that applies wins)
1. empty token                      → dropped
2. after a '--' terminator           → operand
3. '--'                              → terminator (sticky for this level)
4. an option is waiting for a value  → that option's value
5. '--name' / '--name=value'         → long option
6. '-abc'                            → short option run (bundled flags, inline value)
7. declared sub-command name, before any operand → recursive parse of the rest
8. anything else                     → operand

Sub-commands
- The sub-command name starts the token list handed to the recursive parse, so
  every level follows the same contract ("first token is my name").
- Faults raised below carry the nested path: the dispatching level rebuilds
  them with copy.replace(fault, command="outer inner") and re-raises.

Diagnostics
- Every step is reported to an observer (observers.NullObserver by default).
  Observers never influence the result.
"""
import copy
import difflib
import shlex
import sys
from collections.abc import Iterable

from .faults import *
from .observers import NullObserver
from .results import Option, Operand, Command
from .specs import CommandSpec, TokenStyle
from .utils import *

# faults carrying a command path, rewritten when crossing a sub-command boundary
_ROUTED = (
    OptionNotFoundError,
    MissingOptionArgumentError,
    OptionRepetitionDeniedError,
    MissingRequiredOptionError,
    MissingRequiredOperandError,
    OptionTokenAlreadyDefinedError,
)


class _State:
    """
    scratch state of one command level; discarded when the level returns.

    fields
    - operands_only: set by '--', every later token is an operand.
    - pending / pending_token: short option waiting for the next token as value.
    - options: option name → results.Option, in order of first occurrence.
    - operands: results.Operand list (index-contiguous).
    - subcommands_allowed: cleared by the first operand.
    - subcommands: parsed sub-commands (at most one).
    """
    __slots__ = (
        "operands_only",
        "pending",
        "pending_token",
        "options",
        "operands",
        "subcommands_allowed",
        "subcommands",
    )

    def __init__(self):
        self.operands_only = False
        self.pending = None
        self.pending_token = None
        self.options = {}
        self.operands = []
        self.subcommands_allowed = True
        self.subcommands = []


def _report(observer, unit, fault, /):
    """
    emit a fault on the observer's error channel and hand it back for raising.
    """
    observer.error(unit, lambda: {"fault": type(fault).__name__, "message": fault.message})
    return fault


def _suggest(option, spec, /):
    """
    closest declared spellings for an unknown option token.
    """
    return difflib.get_close_matches(option, [str(token) for each in spec.options.values() for token in each.tokens], 5)


def validate(spec, /, *, observer=Unset):
    """
    check that no two options of `spec` declare the same token.

    only the given level is inspected; sub-command specs are validated when a
    parse reaches them. validating a valid spec never raises.

    raises
    - OptionTokenAlreadyDefinedError(token, owner, command): `owner` is the
      option that declared the token first.
    """
    if not isinstance(spec, CommandSpec):
        raise TypeError("validate() argument must be a command-spec")
    observer = coalesce(observer, NullObserver())
    unit = __name__ + ".validate"

    owners = {}
    for option in spec.options.values():
        for token in option.tokens:
            if (owner := owners.setdefault(token, option)) is not option:
                raise _report(observer, unit, OptionTokenAlreadyDefinedError(str(token), owner.name, spec.name))

    observer.debug(unit, lambda: {"command": spec.name, "tokens": [str(token) for token in owners]})


def verify(command, spec, /, *, observer=Unset):
    """
    check a parsed level against its spec: required options first, then
    required operands, each in declaration order.

    returns the command unchanged when it passes.

    raises
    - MissingRequiredOptionError(command, option_name)
    - MissingRequiredOperandError(command, operand_name_or_index)
    """
    if not isinstance(command, Command):
        raise TypeError("verify() first argument must be a command")
    if not isinstance(spec, CommandSpec):
        raise TypeError("verify() second argument must be a command-spec")
    observer = coalesce(observer, NullObserver())
    unit = __name__ + ".verify"

    for option in spec.options.values():
        if option.required and not command.hasoption(option.name):
            raise _report(observer, unit, MissingRequiredOptionError(command.name, option.name))

    for operand in spec.operands:
        if operand.required and command.getoperand(operand.index) is None:
            raise _report(observer, unit, MissingRequiredOperandError(
                command.name,
                operand.name if operand.name is not None else operand.index
            ))

    observer.debug(unit, lambda: {"command": command.name})
    return command


def _checkrepetition(state, spec, option, observer, /):
    if not option.repeatable and option.name in state.options:
        raise _report(observer, __name__ + "._checkrepetition", OptionRepetitionDeniedError(spec.name, option.name))


def _addflag(state, option, observer, /):
    state.options.setdefault(option.name, Option(option.name))
    observer.debug(__name__ + "._addflag", lambda: {"option": option.name})


def _addvalue(state, option, value, observer, /):
    """
    record one value for an option, appending after earlier occurrences.
    """
    if (existing := state.options.get(option.name)) is None:
        state.options[option.name] = Option(option.name, (value,))
    else:
        state.options[option.name] = Option(option.name, (*existing.values, value))
    observer.debug(__name__ + "._addvalue", lambda: {"option": option.name, "value": value})


def _parseshort(state, spec, token, observer, /):
    """
    walk a '-abc' run letter by letter.

    flags are recorded and scanning continues; the first value-taking option
    takes the rest of the token as its value, or becomes pending when nothing
    is left, and ends the scan either way.
    """
    unit = __name__ + "._parseshort"

    for index, letter in enumerate(token[1:]):
        if (option := spec.getoption(token=letter, style=TokenStyle.SHORT)) is None:
            raise _report(observer, unit, OptionNotFoundError(
                "-" + letter,
                spec.name,
                _suggest("-" + letter, spec)
            ))

        _checkrepetition(state, spec, option, observer)

        if option.flag:
            _addflag(state, option, observer)
            continue

        if value := token[2 + index:]:
            _addvalue(state, option, value, observer)
        else:
            state.pending = option
            state.pending_token = option.gettoken(letter, TokenStyle.SHORT)
            observer.debug(unit, lambda: {"command": spec.name, "pending": str(state.pending_token)})
        return


def _parselong(state, spec, token, observer, /):
    """
    resolve '--name' or '--name=value' (split on the first '=').

    a flag ignores any '=value'; a value-taking option requires one.
    """
    unit = __name__ + "._parselong"
    literal, separator, value = token[2:].partition("=")

    if (option := spec.getoption(token=literal, style=TokenStyle.LONG)) is None:
        raise _report(observer, unit, OptionNotFoundError(
            "--" + literal,
            spec.name,
            _suggest("--" + literal, spec)
        ))

    _checkrepetition(state, spec, option, observer)

    if option.flag:
        if separator:
            observer.warning(unit, lambda: {"command": spec.name, "option": option.name, "discarded": value})
        _addflag(state, option, observer)
        return

    if not separator:
        raise _report(observer, unit, MissingOptionArgumentError(spec.name, "--" + literal))

    _addvalue(state, option, value, observer)


def _parseoperand(state, spec, token, observer, /):
    """
    record a positional token.

    when the previous operand is bound to a variadic spec the token joins its
    value instead of opening a new operand.
    """
    index = len(state.operands)

    if index and (previous := spec.getoperand(index - 1)) is not None and previous.variadic:
        last = state.operands[-1]
        state.operands[-1] = Operand((*last.value, token), last.index, last.name)
    else:
        operand = spec.getoperand(index)
        state.operands.append(Operand(
            (token,) if operand is not None and operand.variadic else token,
            index,
            None if operand is None else operand.name
        ))

    state.subcommands_allowed = False
    observer.debug(__name__ + "._parseoperand", lambda: {"command": spec.name, "operand": state.operands[-1]})


def _dispatch(tokens, spec, subspec, observer, /):
    """
    parse a sub-command and prefix this level's name to the path of its faults.
    """
    observer.info(__name__ + "._dispatch", lambda: {"command": spec.name, "subcommand": subspec.name})
    try:
        return _parse(tokens, subspec, observer)
    except _ROUTED as exception:
        raise copy.replace(exception, command=f"{spec.name} {exception.command}") from None


def _parse(tokens, spec, observer, /):
    unit = __name__ + ".parse"
    observer.debug(unit, lambda tokens=tokens: {"command": spec.name, "tokens": list(tokens)})
    name, *tokens = tokens

    if name != spec.name:
        raise _report(observer, unit, InvalidCommandSpecsError("Invalid command name: %s" % name))

    validate(spec, observer=observer)

    state = _State()
    for index, token in enumerate(tokens):
        observer.debug(unit, lambda token=token: {"command": spec.name, "token": token})

        if not token:
            continue

        if state.operands_only:
            _parseoperand(state, spec, token, observer)
            continue

        if token == "--":
            state.operands_only = True
            continue

        if state.pending is not None:
            _addvalue(state, state.pending, token, observer)
            state.pending = state.pending_token = None
            continue

        if token.startswith("--"):
            _parselong(state, spec, token, observer)
            continue

        # a lone '-' is not an option run
        if token.startswith("-") and token != "-":
            _parseshort(state, spec, token, observer)
            continue

        if state.subcommands_allowed and spec.hassubcommand(token):
            state.subcommands.append(_dispatch(tokens[index:], spec, spec.getsubcommand(token), observer))
            break

        _parseoperand(state, spec, token, observer)

    if state.pending is not None:
        raise _report(observer, unit, MissingOptionArgumentError(spec.name, str(state.pending_token)))

    command = verify(Command(spec.name, state.options.values(), state.operands, state.subcommands), spec, observer=observer)
    observer.info(unit, lambda: {
        "command": command.name,
        "options": list(command.options),
        "operands": len(command.operands),
        "subcommands": [subcommand.name for subcommand in command.subcommands],
    })
    return command


def parse(tokens, spec, /, *, observer=Unset):
    """
    parse argv-like tokens against a command specification.

    parameters
    - tokens: Iterable[str]
      the full token list, starting with the command name.
    - spec: specs.CommandSpec
    - observer: optional diagnostic sink (debug/info/warning/error methods).

    returns
    - results.Command, or None when `tokens` is empty.

    raises
    - InvalidCommandSpecsError when the first token is not spec.name.
    - OptionTokenAlreadyDefinedError, OptionNotFoundError,
      MissingOptionArgumentError, OptionRepetitionDeniedError,
      MissingRequiredOptionError, MissingRequiredOperandError; for faults
      raised inside a sub-command, `command` holds the space-separated path.
    """
    if not isinstance(spec, CommandSpec):
        raise TypeError("parse() second argument must be a command-spec")
    if not isinstance(tokens, Iterable) or isinstance(tokens, str):
        raise TypeError("parse() first argument must be an iterable of strings")
    tokens = list(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("parse() first argument must be an iterable of strings")
    observer = coalesce(observer, NullObserver())

    if not tokens:
        observer.debug(__name__ + ".parse", lambda: {"command": spec.name, "tokens": []})
        return None

    return _parse(tokens, spec, observer)


def parseargs(spec, prompt=Unset, /, *, observer=Unset, shell=False, fancy=False, colorful=True):
    """
    parse a prompt against a spec, surfacing faults through faults.trigger.

    prompt
    - Unset: the process arguments, i.e. [spec.name, *sys.argv[1:]].
    - str: split with shlex.split; the first word is the command name.
    - Iterable[str]: used as-is (empty strings are kept, the parser drops them).

    runtime flags
    - shell: print faults on stderr and exit with status 1 instead of raising.
    - fancy / colorful: rendering options forwarded to trigger().
    """
    if not isinstance(spec, CommandSpec):
        raise TypeError("parseargs() first argument must be a command-spec")

    if prompt is Unset:
        tokens = [spec.name, *sys.argv[1:]]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parseargs() argument must be a string or an iterable of strings")
    else:
        raise TypeError("parseargs() argument must be a string or an iterable of strings")

    try:
        return parse(tokens, spec, observer=observer)
    except CommandLineError as exception:
        trigger(exception, shell=shell, fancy=fancy, colorful=colorful)


__all__ = (
    "parse",
    "validate",
    "verify",
    "parseargs",
)
