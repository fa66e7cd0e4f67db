"""
Sextant results: what a successful parse hands back.

- ParsedFlag: one matched flag token with its optional positional value.
- ParsedCommand: the matched command, its optional positional value and every
  flag matched for it (global and local flags share the same mapping).

Results are plain values. They are built fresh by each parse, compare by their
fields, and expose read-only properties only. Flag lookups on a result accept
names with or without the "--" marker.
"""
import functools
import operator
import re
from collections.abc import Mapping

from .recipes import normalize
from .utils import *


class ResultType(type):
    """
    Metaclass for result classes: typename, read-only fields, value semantics.

    Beyond the recipe-like __repr__/__rich_repr__, results compare equal when all
    of their __introspectable__ fields are equal.
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

        def fields(self):
            for name in type(self).__introspectable__:
                object = getattr(self, name)
                yield name, dict(object) if isinstance(object, Mapping) else object

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), fields(self)))
            })"
        self.__repr__ = __repr__
        self.__rich_repr__ = rename(fields, "__rich_repr__")

        @rename("__eq__")
        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return dict(fields(self)) == dict(fields(other))
        self.__eq__ = __eq__
        # mutable mappings inside, so no hashing
        self.__hash__ = None

        return self


class ParsedFlag(metaclass=ResultType):
    """A flag token matched against a recipe, with its value when it takes one."""

    __introspectable__ = (
        "name",
        "value",
    )

    def __init__(self, name, value=None, /):
        self._name = name
        self._value = value


class ParsedCommand(metaclass=ResultType):
    """
    The result of a successful parse.

    Properties
    - name: the matched command name.
    - value: its positional value, or None.
    - flags: read-only mapping of flag name -> ParsedFlag.
    """

    __introspectable__ = (
        "name",
        "value",
        "flags",
    )

    def __init__(self, name, value=None, /, flags=()):
        self._name = name
        self._value = value
        self._flags = {}
        for flag in flags.values() if isinstance(flags, Mapping) else flags:
            if not isinstance(flag, ParsedFlag):
                raise TypeError(f"{type(self).__typename__} flags must be parsed flags")
            self._flags[flag.name] = flag

    def flag(self, name, /):
        """Return the ParsedFlag matched under name ("ip" or "--ip"), or None."""
        return self._flags.get(normalize(name))

    def __contains__(self, name):
        return isinstance(name, str) and normalize(name) in self._flags


__all__ = (
    "ParsedFlag",
    "ParsedCommand",
)

del ResultType
