r"""
Sextant recipes: the commands and flags a program accepts.

Overview
- Recipes
  • FlagRecipe: a named flag (always spelled with the "--" marker), optionally
    taking one positional value and optionally required by its command.
  • CommandRecipe: a named command, optionally taking one positional value, with
    its own namespace of local flags.

- Construction
  Recipes are assembled by the calling program before parsing, either with
  keywords or with chained builder calls (both styles produce the same recipe):

    >>> FlagRecipe("ip", positional=True)
    flag-recipe(name='--ip', takes_positional=True, is_required=False)
    >>> CommandRecipe("serve").positional().flag(FlagRecipe("--ip").positional().required())
    command-recipe(name='serve', takes_positional=True, flags={'--ip': ...})

- Introspection & representation
  • RecipeType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ as read-only properties.

Normalization
- normalize(name) prepends the two-character MARKER ("--") unless the name already
  starts with it, so "ip" and "--ip" name the same flag everywhere (registration,
  lookups on results, and the payload of faults).

Contract
- Builder calls return the same recipe for chaining; inserting a flag whose name
  is already present silently replaces the previous entry (last write wins).
- The parser only ever reads recipes. Parsing never mutates them, so one recipe
  may be shared by several commands or parsers.
"""
import functools
import operator
import re
from collections.abc import Mapping

from .utils import *

MARKER = "--"
"""Two-character prefix every flag name is normalized to begin with."""


def normalize(name, /):
    """
    Return the canonical spelling of a flag name.

    The marker is prepended when absent; names already carrying it are returned
    unchanged, so normalize() is idempotent. Any string is accepted.

    Raises
    - TypeError: when name is not a string.
    """
    if not isinstance(name, str):
        raise TypeError("flag name must be a string")
    return name if name.startswith(MARKER) else MARKER + name


class RecipeType(type):
    """
    Metaclass for recipe classes.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens)
      for messages and representations.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide __repr__/__rich_repr__ built from the introspectable fields.
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
                object = getattr(self, name)
                # read-only views print poorly, hand out a plain snapshot
                yield name, dict(object) if isinstance(object, Mapping) else object
        self.__rich_repr__ = __rich_repr__

        return self


class FlagRecipe(metaclass=RecipeType):
    """
    Description of an acceptable flag.

    Properties
    - name: normalized flag name ("--ip").
    - takes_positional: when True the token right after the flag is its value.
    - is_required: when True the command owning this recipe fails to parse
      unless the flag is supplied. Only enforced for command-local flags.
    """

    __introspectable__ = (
        "name",
        "takes_positional",
        "is_required",
    )

    def __init__(self, name, /, *, positional=False, required=False):
        self._name = normalize(name)
        self._takes_positional = bool(positional)
        self._is_required = bool(required)

    def positional(self):
        """Mark the flag as taking a positional value; returns the same recipe."""
        self._takes_positional = True
        return self

    def required(self):
        """Mark the flag as required by its command; returns the same recipe."""
        self._is_required = True
        return self


class CommandRecipe(metaclass=RecipeType):
    """
    Description of an acceptable command.

    Properties
    - name: the command token, matched exactly.
    - takes_positional: when True the token right after the command is its value.
    - flags: read-only mapping of normalized name -> FlagRecipe (local namespace).
    """

    __introspectable__ = (
        "name",
        "takes_positional",
        "flags",
    )

    def __init__(self, name, /, *flags, positional=False):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        self._name = name
        self._takes_positional = bool(positional)
        self._flags = {}
        for flag in flags:
            self.flag(flag)

    def positional(self):
        """Mark the command as taking a positional value; returns the same recipe."""
        self._takes_positional = True
        return self

    def flag(self, recipe, /):
        """
        Add a local flag recipe; returns the same command recipe.

        An existing flag with the same normalized name is replaced.
        """
        if not isinstance(recipe, FlagRecipe):
            raise TypeError(f"{type(self).__typename__} flags must be flag recipes")
        self._flags[recipe.name] = recipe
        return self

    def lookup(self, token, /):
        """Return the local FlagRecipe registered under token, or None."""
        return self._flags.get(token)


__all__ = (
    "MARKER",
    "normalize",
    "FlagRecipe",
    "CommandRecipe",
)

del RecipeType
