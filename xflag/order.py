r"""
Positional order templates: slots, specifications, interleaving and validation.

Template grammar
- Slots are separated by whitespace and consumed in declaration order:
  • name       required, single value
  • [name]     optional, single value
  • name...    required, repeating (absorbs every remaining token)
  • [name...]  optional, repeating
- Brackets are stripped before the trailing ellipsis is checked, so
  "[name...]" is both optional and repeating.

Pipeline
- build(template) -> OrderSpecification
- interleave(tokens, order) -> synthetic "-name value" stream for a FlagSet
- validate(visited, order) raises MissingRequiredError for the first required
  slot (in declaration order) that received no value.

Example
    >>> order = build("src [dst...]")
    >>> interleave(["a", "b", "c"], order)
    ['-src', 'a', '-dst', 'b', '-dst', 'c']
"""
from collections import namedtuple

from .faults import MissingRequiredError


class Slot(namedtuple("Slot", ("name", "optional", "repeating"))):
    """
    One declared positional position.

    Slots are immutable and compare equal when name and markers are equal;
    str(slot) renders the template token back ("[dst...]").
    """
    __slots__ = ()

    @classmethod
    def parse(cls, token, /):
        """
        build a slot from one template token.

        markers
        - optional: the token starts with "[" and ends with "]".
        - repeating: the token, with one leading "[" and one trailing "]"
          removed, ends with "...".
        - name: what remains once a trailing "..." is removed as well.

        raises
        - TypeError when token is not a string.
        - ValueError when the name is empty, starts with "-" or contains "=",
          since no flag could ever be addressed by it.
        """
        if not isinstance(token, str):
            raise TypeError("Slot.parse() argument must be a string")

        optional = token.startswith("[") and token.endswith("]")
        stripped = token.removeprefix("[").removesuffix("]")
        repeating = stripped.endswith("...")
        name = stripped.removesuffix("...")

        if not name:
            raise ValueError(f"positional slot {token!r} has no name")
        if name.startswith("-") or "=" in name:
            raise ValueError(f"positional slot {token!r} is not a valid flag name")
        return cls(name, optional, repeating)

    def __str__(self):
        token = self.name + ("..." if self.repeating else "")
        return "[" + token + "]" if self.optional else token


# Unbounded slot standing for every position past the declared ones.
TAIL = Slot("", True, True)


class OrderSpecification:
    """
    Ordered, immutable sequence of slots.

    Indexing past the declared slots yields TAIL, so trailing tokens beyond the
    declared grammar are absorbed instead of rejected.
    """
    __slots__ = ("_slots",)

    def __init__(self, slots=(), /):
        slots = tuple(slots)
        names = set()
        for slot in slots:
            if not isinstance(slot, Slot):
                raise TypeError("OrderSpecification() items must be slots")
            if slot.name in names:
                raise ValueError(f"positional slot {slot.name!r} is declared twice")
            names.add(slot.name)
        self._slots = slots

    @classmethod
    def parse(cls, template, /):
        """
        build a specification from a whitespace-separated template.
        """
        if not isinstance(template, str):
            raise TypeError("order template must be a string")
        return cls(map(Slot.parse, template.split()))

    @classmethod
    def from_flags(cls, flags, /):
        """
        one required, non-repeating slot per flag, in registration order.

        flags is an iterable of flag records (anything with a .name) or names.
        """
        return cls(Slot(getattr(flag, "name", flag), False, False) for flag in flags)

    @property
    def slots(self):
        return self._slots

    @property
    def required(self):
        """Names of the non-optional slots, in declaration order."""
        return tuple(slot.name for slot in self._slots if not slot.optional)

    def __getitem__(self, index):
        if not isinstance(index, int):
            raise TypeError("order specification indices must be integers")
        if index < 0:
            raise IndexError("order specification indices cannot be negative")
        if index >= len(self._slots):
            return TAIL
        return self._slots[index]

    def __len__(self):
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    def __eq__(self, other):
        if not isinstance(other, OrderSpecification):
            return NotImplemented
        return self._slots == other._slots

    def __hash__(self):
        return hash(self._slots)

    def __str__(self):
        return " ".join(map(str, self._slots))

    def __repr__(self):
        return f"{type(self).__name__}({str(self)!r})"


def build(template, /):
    """
    Build an OrderSpecification from a template such as "src [dst...]".

    Building twice from the same template yields equal specifications; an empty
    template yields an empty one.
    """
    return OrderSpecification.parse(template)


def interleave(tokens, order, /):
    """
    Rewrite bare positional tokens into a "-name value" stream.

    Every token is preceded by the marker of the slot under the cursor. The
    cursor stays on a repeating slot, except after the final token when that
    slot is the last one declared. Tokens met once the cursor went past the
    declared slots are emitted bare.

    Parameters
    - tokens: sequence of raw command-line strings.
    - order: OrderSpecification.

    Returns
    - list[str] suitable for FlagSet parsing.
    """
    tokens = list(tokens)
    stream = []
    index = 0
    for position, token in enumerate(tokens):
        if index < len(order):
            stream.append("-" + order[index].name)
        stream.append(token)
        if position == len(tokens) - 1 and index == len(order) - 1:
            index += 1
        elif not order[index].repeating:
            index += 1
    return stream


def validate(visited, order, /):
    """
    Raise MissingRequiredError for the first required slot absent from visited.

    visited is any container of slot names assigned during the parse. Slots are
    checked in declaration order, so the reported slot is deterministic.
    """
    for name in order.required:
        if name not in visited:
            raise MissingRequiredError(
                "required but not set: %s" % name,
                slot=name,
                hint="pass a value for %r (usage: %s)" % (name, order),
            )


__all__ = (
    "Slot",
    "TAIL",
    "OrderSpecification",
    "build",
    "interleave",
    "validate",
)
