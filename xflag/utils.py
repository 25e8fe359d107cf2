"""
Shared internals for xflag: the Unset sentinel and host configuration lookups.

Host configuration
- The embedding application may define a few dunder attributes in __main__:
  • __prog__: program name used in usage lines and fault headers.
  • __styles__: mapping that overrides entries of the rendering palettes.
  • __codes__: mapping from FaultCode to a custom label.
- Every lookup degrades to a sensible default when the attribute is missing.
"""
import functools
import os.path
import sys
from collections import defaultdict
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type for "not provided" parameters.

    None is a legitimate value for several xflag parameters (a flag default, an
    output stream), so Unset marks the absence of a value instead.

    Characteristics
    - Falsy, singleton per process, repr "Unset", not subclassable.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsy values such as None, 0 or "" are preserved.
    """
    return object if object is not Unset else default


def hostattr(name, default=None, /):
    """
    Read a configuration attribute exposed by the host application in __main__.
    """
    return getattr(sys.modules.get("__main__"), name, default)


def program():
    """
    Name of the running program: __main__.__prog__ or the basename of argv[0].
    """
    if prog := hostattr("__prog__"):
        return str(prog)
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "xflag"


def palette(defaults, /):
    """
    Merge a default palette with the host overrides from __main__.__styles__.

    Unknown keys resolve to an empty style.
    """
    return defaultdict(str, defaults | dict(hostattr("__styles__", {})))


__all__ = (
    # Functions
    "coalesce",
    "hostattr",
    "program",
    "palette",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
