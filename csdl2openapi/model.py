#! /usr/bin/env python
"""Provides lookup of the elements of a CSDL JSON document"""

import logging

from . import names
from .names import Kind
from .vocab import VocabularyIndex


logger = logging.getLogger('csdl2openapi')


class CSDLModel(object):

    """A CSDL JSON document prepared for lookup

    csdl
        The CSDL document as parsed from JSON, it is modified in place
        (see below) so callers should pass a private copy.

    On construction the document is pre-processed in a single pass.
    Namespaces and aliases are registered, the vocabulary index is
    built, bound overloads are indexed by their binding parameter type,
    derived types are indexed by their base type and all out-of-line
    annotations (in $Annotations) are merged into their targets.  After
    construction the indexes must be treated as read only."""

    def __init__(self, csdl):
        #: the CSDL document
        self.csdl = csdl
        #: binding parameter type names mapped on to lists of
        #: (name, overload) tuples; collection-bound types are suffixed
        #: with "-c"
        self.bound_overloads = {}
        #: qualified base type names mapped on to lists of qualified
        #: names of their directly derived types
        self.derived_types = {}
        #: namespaces or aliases mapped on to the preferred alias
        self.alias = {}
        #: namespaces or aliases mapped on to the namespace
        self.namespace = {'Edm': 'Edm'}
        #: namespaces mapped on to the URL of a referenced document
        self.namespace_url = {}
        #: the :class:`VocabularyIndex` for this document
        self.voc = None
        self._preprocess()

    def schemas(self):
        """Generates (namespace, schema) tuples

        The reserved members of the document are skipped."""
        for name, schema in self.csdl.items():
            if names.is_identifier(name) and isinstance(schema, dict):
                yield name, schema

    def _preprocess(self):
        for url, reference in self.csdl.get('$Reference', {}).items():
            for include in reference.get('$Include', []):
                ns = include['$Namespace']
                qualifier = include.get('$Alias', ns)
                self.alias[ns] = qualifier
                self.namespace[qualifier] = ns
                self.namespace[ns] = ns
                self.namespace_url[ns] = url
        for name, schema in self.schemas():
            qualifier = schema.get('$Alias', name)
            self.alias[name] = qualifier
            self.namespace[qualifier] = name
            self.namespace[name] = name
        self.voc = VocabularyIndex(self.alias)
        for name, schema in self.schemas():
            self._index_schema(name, schema)
        for name, schema in self.schemas():
            for target, annotations in \
                    schema.get('$Annotations', {}).items():
                self.annotate(target, annotations)

    def _index_schema(self, name, schema):
        qualifier = self.alias[name]
        default_namespace = self.voc.get(schema, 'Core', 'DefaultNamespace')
        for iname, element in schema.items():
            if not names.is_identifier(iname):
                continue
            qname = "%s.%s" % (qualifier, iname)
            if isinstance(element, list):
                for overload in element:
                    if not overload.get('$IsBound'):
                        continue
                    binding = overload['$Parameter'][0]
                    type_name = binding.get('$Type', 'Edm.String')
                    if binding.get('$Collection'):
                        type_name += '-c'
                    self.bound_overloads.setdefault(type_name, []).append(
                        (iname if default_namespace else qname, overload))
            elif isinstance(element, dict) and '$BaseType' in element:
                base = self.namespace_qualified_name(element['$BaseType'])
                self.derived_types.setdefault(base, []).append(qname)

    def annotate(self, target, annotations):
        """Merges a block of annotations into their target

        target
            An annotation target path.  The first segment is the
            qualified name of a model element, optionally followed by a
            parenthesized list of parameter types to select an action or
            function overload.  An optional second segment selects a
            child of the element: a parameter or $ReturnType of an
            action or function or a member of any other element.

        annotations
            A dictionary of annotations.

        Invalid targets are logged and the annotations are dropped."""
        segments = target.split('/')
        if len(segments) > 2:
            logger.warning(
                "More than two annotation target path segments: %s", target)
            return
        first = segments[0]
        open = first.find('(')
        if open < 0:
            element = self.model_element(first)
        else:
            element = self.find_overload(
                self.model_element(first[:open]), first[open + 1:-1])
        if not element:
            logger.warning("Invalid annotation target '%s'", target)
            return
        if isinstance(element, list):
            # applies to all overloads
            targets = element
        else:
            targets = [element]
        for element in targets:
            if len(segments) == 1:
                element.update(annotations)
                continue
            child = self._child(element, segments[1])
            if child is None:
                logger.warning("Invalid annotation target '%s'", target)
            else:
                child.update(annotations)

    def _child(self, element, segment):
        if names.kind_of(element) in (Kind.Action, Kind.Function):
            if segment == '$ReturnType':
                return element.get('$ReturnType')
            for p in element.get('$Parameter', []):
                if p.get('$Name') == segment:
                    return p
            return None
        child = element.get(segment)
        if isinstance(child, dict):
            return child
        return None

    def find_overload(self, overloads, args):
        """Selects an overload using a parameter type list

        overloads
            The list of overloads of an action or function, or None

        args
            A comma-separated list of parameter types as it appears in
            the annotation target.  Collections are written
            Collection(Type) and untyped parameters match Edm.String.
            For actions only the binding parameter is listed and an
            empty list selects the unbound overload.

        Returns None if no overload matches."""
        if not isinstance(overloads, list):
            return None
        for overload in overloads:
            parameters = overload.get('$Parameter', [])
            if overload.get('$Kind') == 'Action':
                if not overload.get('$IsBound') and args == "":
                    return overload
                if parameters and args == names.type_name_to_str(
                        parameters[0].get('$Type', ''),
                        parameters[0].get('$Collection')):
                    return overload
            if ','.join(names.type_name_to_str(
                    p.get('$Type'), p.get('$Collection'))
                    for p in parameters) == args:
                return overload
        return None

    def model_element(self, qname):
        """Finds a model element by qualified name

        qname
            A qualified name using a namespace or an alias.

        Returns None if the qualifier does not name a schema in the
        document, or if the schema has no element with this name.  Base
        types are *not* searched."""
        if not qname:
            return None
        q = names.name_parts(qname)
        schema = self.csdl.get(q.qualifier)
        if not isinstance(schema, dict):
            schema = self.csdl.get(self.namespace.get(q.qualifier))
        if not isinstance(schema, dict):
            return None
        return schema.get(q.name)

    def namespace_qualified_name(self, qname):
        """Returns qname qualified with the namespace, not the alias"""
        q = names.name_parts(qname)
        return "%s.%s" % (self.namespace.get(q.qualifier, q.qualifier),
                          q.name)

    def get_key(self, entity_type):
        """Returns the key of an entity type

        The base type chain is followed until a $Key is found.  Returns
        None if there is no key."""
        type_def = entity_type
        while type_def:
            key = type_def.get('$Key')
            if key or '$BaseType' not in type_def:
                return key
            type_def = self.model_element(type_def['$BaseType'])
        return None

    def key_map(self, type_def):
        """Returns a dictionary of the simple key property names

        Keys defined using aliased paths are not included.  Only
        entity types have keys, other types return an empty
        dictionary."""
        result = {}
        if names.kind_of(type_def) == Kind.EntityType:
            for key in self.get_key(type_def) or []:
                if isinstance(key, str):
                    result[key] = True
        return result

    def properties_of_structured_type(self, type_def, _seen=None):
        """Returns all properties of a structured type

        The inheritance hierarchy is walked so that the properties of
        the base type come first and are overridden by properties of
        the same name in the derived type.  The result is a new
        dictionary mapping property names on to property objects."""
        properties = {}
        if not isinstance(type_def, dict):
            return properties
        if '$BaseType' in type_def:
            if _seen is None:
                _seen = set()
            base = self.namespace_qualified_name(type_def['$BaseType'])
            if base in _seen:
                logger.warning("Inheritance cycle detected: %s", base)
            else:
                _seen.add(base)
                properties = self.properties_of_structured_type(
                    self.model_element(base), _seen)
        for name, value in type_def.items():
            if names.is_identifier(name):
                properties[name] = value
        return properties

    def container(self):
        """Returns the entity container or None"""
        qname = self.csdl.get('$EntityContainer')
        if qname:
            return self.model_element(qname)
        return None
