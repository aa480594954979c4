"""
commandparser results: the immutable tree produced by a parse.

Overview
- Option: a parsed option (name + values in encounter order; empty for flags).
- Operand: a parsed operand (str value, or a tuple of str for a variadic
  operand), the index it starts at and the declared name, if any.
- Command: name, options keyed by option name, index-contiguous operands, and
  sub-commands (at most one is ever produced by the parser).

Results own no reference to the specification they were parsed against. They
compare structurally, hash consistently and pretty-print with rich, so two
parses of the same input against the same specification are equal.
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping

from .utils import *


def _comparable(object):
    """
    Internal: normalize a field value for equality and hashing.

    Mappings compare as unordered sets of items (option order carries no meaning).
    """
    if isinstance(object, Mapping):
        return frozenset(object.items())
    return object


class ResultType(type):
    """
    Metaclass for result classes.

    Responsibilities
    - Mirror the fields listed in __introspectable__ as read-only properties.
    - Provide __repr__/__rich_repr__ plus structural __eq__/__hash__ over
      those same fields.
    - Seal the resulting class against subclassing.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__eq__")
        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return all(
                _comparable(getattr(self, name)) == _comparable(getattr(other, name))
                for name in type(self).__introspectable__
            )
        self.__eq__ = __eq__

        @rename("__hash__")
        def __hash__(self):
            return hash((type(self).__name__, *(_comparable(getattr(self, name)) for name in type(self).__introspectable__)))
        self.__hash__ = __hash__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _strings(cls, object, field, /):
    """
    Internal: materialize an iterable of strings into a tuple.
    """
    if not isinstance(object, Iterable) or isinstance(object, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
    object = tuple(object)
    if not all(isinstance(item, str) for item in object):
        raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
    return object


class Option(metaclass=ResultType):
    """
    A parsed option.

    - name: matches OptionSpec.name.
    - values: one entry per occurrence that carried a value, in encounter order;
      empty for flags.
    """

    __introspectable__ = (
        "name",
        "values",
    )

    def __new__(cls, name, /, values=()):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        self = super().__new__(cls)
        self._name = name
        self._values = _strings(cls, values, "values")
        return self


class Operand(metaclass=ResultType):
    """
    A parsed operand.

    - value: str, or tuple[str, ...] when bound to a variadic operand spec.
    - index: position at which the operand (or its accumulation) started.
    - name: the declared operand name, or None.
    """

    __introspectable__ = (
        "value",
        "index",
        "name",
    )

    def __new__(cls, value, index, /, name=None):
        if not isinstance(value, str):
            value = _strings(cls, value, "value")
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"{cls.__typename__} 'index' must be an integer")
        if index < 0:
            raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")
        if not isinstance(name, str | None):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        self = super().__new__(cls)
        self._value = value
        self._index = index
        self._name = name
        return self

    @property
    def variadic(self):
        """
        True when the value is an accumulated sequence.
        """
        return isinstance(self._value, tuple)


class Command(metaclass=ResultType):
    """
    A parsed command.

    - name: the command name.
    - options: read-only mapping option name -> Option, ordered by first occurrence.
    - operands: tuple of Operand, operand i has index i.
    - subcommands: tuple of Command.
    """

    __introspectable__ = (
        "name",
        "options",
        "operands",
        "subcommands",
    )

    def __new__(cls, name, /, options=(), operands=(), subcommands=()):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._options = {}
        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")
            if option.name in self._options:
                raise ValueError(f"{cls.__typename__} option {option.name!r} is given more than once")
            self._options[option.name] = option

        self._operands = tuple(operands)
        for index, operand in enumerate(self._operands):
            if not isinstance(operand, Operand):
                raise TypeError(f"{cls.__typename__} 'operands' must be an iterable of operands")
            if operand.index != index:
                raise ValueError(f"{cls.__typename__} operand at position {index} has index {operand.index}")

        self._subcommands = tuple(subcommands)
        if not all(isinstance(subcommand, Command) for subcommand in self._subcommands):
            raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of commands")
        return self

    def getoption(self, name, /):
        """
        Return the parsed option with this name, or None.
        """
        return self._options.get(name)

    def hasoption(self, name, /):
        return name in self._options

    def getoperand(self, index=Unset, /, *, name=Unset):
        """
        Return the operand at an index or with a name, or None.
        """
        if (index is Unset) == (name is Unset):
            raise TypeError("getoperand() requires either an index or a name")
        if index is not Unset:
            return self._operands[index] if 0 <= index < len(self._operands) else None
        for operand in self._operands:
            if operand.name == name:
                return operand
        return None


__all__ = (
    "Option",
    "Operand",
    "Command",
)

del ResultType
