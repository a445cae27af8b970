#! /usr/bin/env python
"""Simple constant classes for enumerated values in CSDL documents"""

import logging


logger = logging.getLogger('csdl2openapi')


class EnumMetaClass(type):

    """Metaclass for :class:`Enumeration`

    Initialises the Enumeration immediately after the class is
    defined."""

    def __init__(self, name, bases, dct):
        super(EnumMetaClass, self).__init__(name, bases, dct)
        # self is a class here!
        self._init_enum()


class Enumeration(object, metaclass=EnumMetaClass):

    """Abstract class for defining enumerations

    The class is not designed to be instantiated but to act as a method
    of defining constants to represent the values of an enumeration and
    for decoding those constants from a CSDL document.

    Derived classes define a single class member called 'decode' which
    is a mapping from canonical strings to simple integers.  Once
    defined, the enumeration strings are added as attributes of the class
    itself::

        class Navigability(Enumeration):
            decode = {
                'Recursive': 1,
                'Single': 2,
                'None': 3}

        Navigability.Single == 2    # True thanks to metaclass

    An optional dictionary called aliases maps additional names onto
    existing canonical strings, the special key None defines the value
    of the DEFAULT attribute."""

    @classmethod
    def _init_enum(cls):
        if 'decode' not in cls.__dict__:
            # Skip initialisation for Enumeration itself
            return
        for k, v in cls.__dict__.get('aliases', {}).items():
            if k is None:
                cls.DEFAULT = cls.decode[v]
            else:
                cls.decode[k] = cls.decode[v]
        for k, v in list(cls.decode.items()):
            if hasattr(cls, k):
                logger.error("Illegal name for Enumeration: %s", repr(k))
            else:
                setattr(cls, k, v)

    DEFAULT = None
    """The DEFAULT value of the enumeration defaults to None"""

    @classmethod
    def from_value(cls, src, default=None):
        """Decodes a value taken from a CSDL document

        src
            Either a string, a CS01 style dictionary with an
            $EnumMember string or None.  Qualified member names, such as
            "Capabilities.NavigationType/Single", are reduced to the
            simple member name.

        If src can't be decoded then *default* is returned."""
        if isinstance(src, dict):
            src = src.get('$EnumMember')
        if not isinstance(src, str):
            return default
        src = src[src.rfind('/') + 1:]
        return cls.decode.get(src.strip(), default)
