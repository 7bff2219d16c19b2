r"""
Parlance argument grammar: primitive validators and AND/OR combinators.

Overview
- Primitives
  • StringArgument: one token, with case forcing, length bounds, whitelist and regex.
  • NumberArgument: one numeric token, with bounds, integer-only and sign forcing.
  • ClientArgument: a client reference (rich-text client link or bare unique id).
  • RestArgument: the whole remaining text, with the same constraints as strings.

- Combinators
  • GroupArgument("and"): every child must match, in declared order.
  • GroupArgument("or"): the first child that matches wins.
  Groups are arguments themselves, so they nest arbitrarily.

- Factories
  • argument(kind): "string" | "number" | "client" | "rest"
  • group(kind): "and" | "or"

Validation contract
- validate(text) -> (value, remainder), or raise ParseError.
- Consumption is greedy by token: a primitive splits the text on the first
  single space, checks the token alone and hands back the rest. The rest
  argument takes everything and leaves "" behind.
- Constraints are set once through chaining builders and evaluated as pure
  predicates at validation time; the first failing check wins.

Usage
    >>> name = argument("string").set_name("name").min(2).max(5)
    >>> name.validate("bob 42")
    ('bob', '42')
    >>> age = argument("number").set_name("age").integer().positive().optional(0)
    >>> age.manual
    '[age=0]'

Public API
- Classes: Argument, StringArgument, NumberArgument, ClientArgument,
  RestArgument, GroupArgument, Combinator
- Factories: argument, group
"""
import functools
import math
import operator
import re
from enum import StrEnum

from .faults import ParseError
from .utils import *


class ArgumentType(type):
    """
    Metaclass giving argument specs their introspection and sealing.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the matching private field (via mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Seal concrete variants (sealed=True) so the set of argument kinds stays
      closed.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages, e.g. "string-argument".
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - string-argument(name='target', display='target', default=Unset, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers such as rich.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_name(cls, name, /):
    """
    Internal: an argument name keys the resolved record, so it must be a
    non-empty identifier made of [A-Za-z0-9_].
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if not name:
        raise ValueError(f"{cls.__typename__} 'name' must be at least 1 char long")
    if not re.fullmatch(r"[A-Za-z0-9_]+", name):
        raise ValueError(f"{cls.__typename__} 'name' should contain only chars A-z, 0-9 and _")
    return name


def _sanitize_bound(cls, label, bound, /, *, length=False):
    """
    Internal: numeric bounds must be real numbers; length bounds must be
    non-negative integers.
    """
    if isinstance(bound, bool) or not isinstance(bound, int | float):
        raise TypeError(f"{cls.__typename__} '{label}' must be a number")
    if length and (not isinstance(bound, int) or bound < 0):
        raise ValueError(f"{cls.__typename__} '{label}' must be a non-negative integer")
    if not math.isfinite(bound):
        raise ValueError(f"{cls.__typename__} '{label}' must be finite")
    return bound


def _format(number, /):
    """
    Internal: render numbers the way users typed them (4 rather than 4.0).
    """
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


class Argument(metaclass=ArgumentType):
    """
    Shared contract of every grammar element.

    Properties
    - name: key of the value in the resolved record ("_" until set_name()).
    - display: label used in manuals (defaults to the name).
    - default: fallback for optional arguments; Unset means "no default".
    - is_optional / has_default: flags derived from optional().
    - manual: usage fragment, "<display>", "[display]" or "[display=default]".

    Subclasses implement validate(text).
    """

    __introspectable__ = (
        "name",
        "display",
        "default",
    )

    def __init__(self, name=Unset, display=Unset, /):
        self._name = "_"
        self._display = "_"
        self._default = Unset
        self._optional = False
        if name is not Unset:
            self.set_name(name, display)

    @property
    def is_optional(self):
        return self._optional

    @property
    def has_default(self):
        return self._default is not Unset

    @property
    def manual(self):
        if not self._optional:
            return f"<{self._display}>"
        if self.has_default:
            return f"[{self._display}={self._default}]"
        return f"[{self._display}]"

    def set_name(self, name, display=Unset, /):
        """
        Name the argument; display defaults to the name.
        """
        self._name = _sanitize_name(type(self), name)
        if not isinstance(display, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'display' must be a string")
        self._display = coalesce(display, None) or name
        return self

    def optional(self, fallback=Unset, /):
        """
        Mark the argument optional, with fallback as its default.

        Unset (the default) records no default at all; any other value,
        None included, becomes the resolved value when the argument fails.
        """
        self._default = fallback
        self._optional = True
        return self

    def validate(self, text, /):
        raise NotImplementedError(f"{type(self).__typename__} cannot validate input")


def _constrain(argument, value, /):
    """
    Internal: the string constraint routine shared by string and rest arguments.

    Order: case forcing, minimum length, maximum length, whitelist, regex.
    Returns the (possibly case-forced) value; raises ParseError on the first
    violated constraint.
    """
    match argument._case:
        case "upper":
            value = value.upper()
        case "lower":
            value = value.lower()
    if argument._minimum is not None and argument._minimum > len(value):
        raise ParseError(
            f"String length not greater or equal! Expected at least {argument._minimum}, but got {len(value)}",
            argument=argument,
        )
    if argument._maximum is not None and argument._maximum < len(value):
        raise ParseError(
            f"String length not less or equal! Maximum {argument._maximum} chars allowed, but got {len(value)}",
            argument=argument,
        )
    if argument._words is not None and value not in argument._words:
        raise ParseError(
            f"Invalid Input for {value}. Allowed words: {', '.join(argument._words)}",
            argument=argument,
        )
    if argument._pattern is not None and not argument._pattern.search(value):
        raise ParseError(
            f"Regex mismatch, the input '{value}' did not match the expression {argument._pattern.pattern}",
            argument=argument,
        )
    return value


class _Textual(Argument):
    """
    Internal: builders shared by string-like arguments.
    """

    __introspectable__ = (
        "name",
        "display",
        "default",
        "minimum",
        "maximum",
        "words",
        "pattern",
        "case",
    )

    def __init__(self, name=Unset, display=Unset, /):
        super().__init__(name, display)
        self._minimum = None
        self._maximum = None
        self._words = None
        self._pattern = None
        self._case = None

    def min(self, length, /):
        self._minimum = _sanitize_bound(type(self), "min", length, length=True)
        return self

    def max(self, length, /):
        self._maximum = _sanitize_bound(type(self), "max", length, length=True)
        return self

    def match(self, pattern, /):
        """
        Require the value to contain a match of pattern (str or compiled).
        """
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        if not isinstance(pattern, re.Pattern):
            raise TypeError(f"{type(self).__typename__} 'pattern' must be a string or a compiled pattern")
        self._pattern = pattern
        return self

    def whitelist(self, words, /):
        """
        Restrict the value to the given words; repeated calls extend the list.
        """
        if isinstance(words, str):
            raise TypeError(f"{type(self).__typename__} 'whitelist' must be an iterable of strings, not a string")
        words = list(words)
        if not all(isinstance(word, str) for word in words):
            raise TypeError(f"{type(self).__typename__} 'whitelist' must contain only strings")
        self._words = (self._words or []) + words
        return self

    def force_upper_case(self):
        self._case = "upper"
        return self

    def force_lower_case(self):
        self._case = "lower"
        return self


class StringArgument(_Textual, sealed=True):
    """
    A single whitespace-free token.

    An empty input yields an empty string; add min(1) when a value is needed.
    """

    def validate(self, text, /):
        token, rest = tokenize(text)
        return _constrain(self, token), rest


class RestArgument(_Textual, sealed=True):
    """
    Everything that is left, spaces included; the remainder becomes "".
    """

    def validate(self, text, /):
        return _constrain(self, text), ""


def _parse_number(token, /):
    """
    Internal: parse an ASCII token as a finite number; integral tokens become
    ints of any size.
    """
    if not token.isascii() or "_" in token:
        raise ValueError(token)
    try:
        return int(token)
    except ValueError:
        pass
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(token)
    return value


class NumberArgument(Argument, sealed=True):
    """
    A single numeric token.

    Check order after parsing: min, max, integer-only, sign. positive() and
    negative() are mutually exclusive; the last call wins.
    """

    __introspectable__ = (
        "name",
        "display",
        "default",
        "minimum",
        "maximum",
        "integral",
        "sign",
    )

    def __init__(self, name=Unset, display=Unset, /):
        super().__init__(name, display)
        self._minimum = None
        self._maximum = None
        self._integral = False
        self._sign = None

    def min(self, bound, /):
        self._minimum = _sanitize_bound(type(self), "min", bound)
        return self

    def max(self, bound, /):
        self._maximum = _sanitize_bound(type(self), "max", bound)
        return self

    def integer(self):
        self._integral = True
        return self

    def positive(self):
        self._sign = "positive"
        return self

    def negative(self):
        self._sign = "negative"
        return self

    def validate(self, text, /):
        token, rest = tokenize(text)
        try:
            number = _parse_number(token)
        except ValueError:
            raise ParseError(f"Searched for number but found \"{token}\"", argument=self) from None
        if self._minimum is not None and self._minimum > number:
            raise ParseError(
                f"Number not greater or equal! Expected at least {_format(self._minimum)}, but got {_format(number)}",
                argument=self,
            )
        if self._maximum is not None and self._maximum < number:
            raise ParseError(
                f"Number not less or equal! Expected at most {_format(self._maximum)}, but got {_format(number)}",
                argument=self,
            )
        if self._integral and number % 1 != 0:
            raise ParseError(f"Given Number is not an Integer! ({_format(number)})", argument=self)
        if self._sign == "positive" and number <= 0:
            raise ParseError(f"Given Number is not Positive! ({_format(number)})", argument=self)
        if self._sign == "negative" and number >= 0:
            raise ParseError(f"Given Number is not Negative! ({_format(number)})", argument=self)
        return number, rest


class ClientArgument(Argument, sealed=True):
    """
    A reference to a client, resolved to its unique identifier.

    Accepted forms (TeamSpeak encoding, host-specific):
    - a rich-text link: [URL=client://<id>/<uid>~<nickname>]<nickname>[/URL]
    - a bare unique id: 27 base64 chars followed by "="

    The pattern captures the remainder itself, so the rest of the line is
    handed back verbatim (only the separating spaces are dropped).
    """

    _PATTERN = re.compile(
        r"(\[URL=client://\d*/(?P<url_uid>[/+a-z0-9]{27}=)~.*\].*\[/URL\]|(?P<uid>[/+a-z0-9]{27}=)) *(?P<rest>(?s:.*))",
        re.IGNORECASE,
    )

    def validate(self, text, /):
        if not (match := self._PATTERN.fullmatch(text)):
            raise ParseError("Client not found!", argument=self)
        return match["url_uid"] or match["uid"], match["rest"]


class Combinator(StrEnum):
    AND = "and"
    OR = "or"


class GroupArgument(Argument, sealed=True):
    """
    Composes child arguments under AND or OR semantics.

    AND
    - Children validate in declared order against the running, stripped
      remainder; each value is stored under the child's name.
    - The first failing child fails the whole group (its error is raised);
      nothing partial reaches the parent.

    OR
    - The first child that validates wins: the group value holds that single
      entry and its remainder is adopted. Later children are not evaluated.
    - When every child fails the error is a generic "No valid match found";
      the individual child errors are discarded.

    Children must be added before use and must never include the group
    itself, directly or transitively.
    """

    __introspectable__ = (
        "name",
        "display",
        "default",
        "kind",
        "arguments",
    )

    def __init__(self, kind, name=Unset, display=Unset, /):
        try:
            self._kind = Combinator(kind)
        except ValueError:
            raise ValueError(
                f"Unexpected group argument type, expected one of [{', '.join(Combinator)}] but got {kind!r}"
            ) from None
        self._arguments = []
        super().__init__(name, display)

    def argument(self, *arguments):
        for argument in arguments:
            if not isinstance(argument, Argument):
                raise TypeError(f"{type(self).__typename__} children must be arguments")
        self._arguments.extend(arguments)
        return self

    def validate(self, text, /):
        if not self._arguments:
            raise ParseError(f"Group {self._display} has no arguments to match", argument=self)
        match self._kind:
            case Combinator.AND:
                return self._validate_and(text)
            case Combinator.OR:
                return self._validate_or(text)

    def _validate_and(self, text):
        resolved = {}
        for argument in self._arguments:
            value, text = argument.validate(text)
            resolved[argument.name] = value
            text = text.strip()
        return resolved, text

    def _validate_or(self, text):
        for argument in self._arguments:
            try:
                value, rest = argument.validate(text)
            except ParseError:
                continue
            return {argument.name: value}, rest.strip()
        raise ParseError("No valid match found", argument=self)


KINDS = {
    "string": StringArgument,
    "number": NumberArgument,
    "client": ClientArgument,
    "rest": RestArgument,
}


def argument(kind, /, *args):
    """
    Create a primitive argument of the given kind (case-insensitive).

    Extra positional arguments are forwarded to the constructor (name, display).
    """
    if not isinstance(kind, str) or kind.lower() not in KINDS:
        raise ValueError(f"Argument type not found! Available Arguments: {', '.join(KINDS)}")
    return KINDS[kind.lower()](*args)


def group(kind, /, *args):
    """
    Create an AND/OR group argument.
    """
    if not isinstance(kind, str):
        raise ValueError(f"Unexpected group argument type, expected one of [{', '.join(Combinator)}] but got {kind!r}")
    return GroupArgument(kind.lower(), *args)


__all__ = (
    # Classes
    "Argument",
    "StringArgument",
    "NumberArgument",
    "ClientArgument",
    "RestArgument",
    "GroupArgument",
    "Combinator",

    # Factories
    "argument",
    "group",

    # Constants
    "KINDS",
)

# Not part of the public API.
del ArgumentType
