#! /usr/bin/env python

import collections
import logging

from .enumeration import Enumeration


logger = logging.getLogger('csdl2openapi')


def is_identifier(name):
    """Returns True if name is an identifier in a CSDL JSON object

    Identifiers name model elements, everything starting with "$" is a
    reserved member and anything containing "@" is an annotation."""
    return not name.startswith('$') and '@' not in name


class QualifiedName(
        collections.namedtuple('QualifiedName', ['qualifier', 'name'])):

    """Represents a qualified name

    This is a Python namedtuple consisting of two strings, a qualifier
    (a namespace or an alias) and a simple name.  No syntax checking is
    done on the values at creation."""

    __slots__ = ()

    @classmethod
    def from_str(cls, src):
        """Splits a QualifiedName at the last dot

        Raises ValueError if src is not a valid QualifiedName."""
        dot = src.rfind('.') if src else -1
        if dot <= 0 or dot == len(src) - 1:
            raise ValueError("Bad qualified name: %s" % src)
        return cls(src[:dot], src[dot + 1:])


def name_parts(src):
    """Lenient version of :meth:`QualifiedName.from_str`

    Invalid qualified names are logged and returned with an empty
    qualifier rather than raising an error."""
    try:
        return QualifiedName.from_str(src)
    except ValueError:
        logger.warning("Invalid qualified name %s", src)
        return QualifiedName('', src or '')


def simple_name(src):
    """Returns the simple name of a possibly qualified name"""
    return src[src.rfind('.') + 1:]


def type_name_to_str(type_name, collection=False):
    """Formats a type name as per the CSDL

    type_name
        The qualified name of a type, as a string.  None is treated as
        the default type Edm.String

    collection
        True if the type is a collection, e.g.::

            type_name_to_str('Schema.Product', True) ==
                'Collection(Schema.Product)'
    """
    if type_name is None:
        type_name = "Edm.String"
    if collection:
        return "Collection(%s)" % type_name
    else:
        return type_name


def navigation_property_path(path):
    """Unpacks a NavigationPropertyPath value

    path
        Either a string or a dictionary using the CS01 style
        $NavigationPropertyPath member."""
    if isinstance(path, dict):
        return path.get('$NavigationPropertyPath')
    return path


def property_path(path):
    """Unpacks a PropertyPath value

    path
        Either a string or a dictionary using the CS01 style
        $PropertyPath member."""
    if isinstance(path, dict):
        return path.get('$PropertyPath')
    return path


def enum_member(member):
    """Unpacks an EnumMember value

    member
        Either a string or a dictionary using the CS01 style
        $EnumMember member.  Anything else returns None."""
    if isinstance(member, str):
        return member
    elif isinstance(member, dict):
        return member.get('$EnumMember')
    return None


class Kind(Enumeration):

    """An enumeration used to represent the kind of a model element

    ::

            Kind.EntityType
            Kind.DEFAULT == Kind.Other

    Action and Function overloads are always grouped into arrays in the
    CSDL, these arrays have kind OverloadSet."""

    decode = {
        'EntityType': 1,
        'ComplexType': 2,
        'EnumType': 3,
        'TypeDefinition': 4,
        'Action': 5,
        'Function': 6,
        'EntityContainer': 7,
        'EntitySet': 8,
        'Singleton': 9,
        'NavigationProperty': 10,
        'Property': 11,
        'Term': 12,
        'ActionImport': 13,
        'FunctionImport': 14,
        'OverloadSet': 15,
        'Other': 16,
    }

    aliases = {
        None: 'Other'
    }


STRUCTURED_KINDS = (Kind.EntityType, Kind.ComplexType)


def kind_of(element):
    """Returns the :class:`Kind` of a model element

    The kind is taken from $Kind where present, otherwise it is
    inferred from the shape of the element using the defaulting rules
    of CSDL JSON: typed members without $Kind are Properties, action
    and function imports are recognised by $Action or $Function."""
    if isinstance(element, list):
        return Kind.OverloadSet
    elif not isinstance(element, dict):
        return Kind.Other
    kind = element.get('$Kind')
    if kind is not None:
        return Kind.from_value(kind, Kind.Other)
    if '$Action' in element:
        return Kind.ActionImport
    elif '$Function' in element:
        return Kind.FunctionImport
    elif '$Type' in element:
        return Kind.Property
    return Kind.Other


def is_structured(element):
    """True if element is an EntityType or ComplexType"""
    return kind_of(element) in STRUCTURED_KINDS
