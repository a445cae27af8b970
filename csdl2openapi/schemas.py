#! /usr/bin/env python
"""Generates OpenAPI Schema Objects from CSDL types"""

import json
import logging
import math

from . import extensions
from . import names
from .names import Kind


logger = logging.getLogger('csdl2openapi')


class Suffix(object):

    """The suffixes of the three schema variants of a structured type"""

    read = ""
    create = "-create"
    update = "-update"


TITLE_SUFFIX = {
    Suffix.read: "",
    Suffix.create: " (for create)",
    Suffix.update: " (for update)",
}

ODATA_DOCS = "http://docs.oasis-open.org/odata/odata/v4.01/" \
    "odata-v4.01-part1-protocol.html"

_path_types = ('Edm.AnnotationPath', 'Edm.ModelElementPath',
               'Edm.NavigationPropertyPath', 'Edm.PropertyPath')


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_number_schema(s):
    return isinstance(s, dict) and s.get('type') in ('number', 'integer')


def _wrap(s):
    # a Reference Object can't have sibling keywords
    if '$ref' in s:
        return {'allOf': [s]}
    return s


class SchemaSynthesizer(object):

    """Creates Schema Objects for the types of a CSDL document

    context
        The :class:`context.Compilation` of the document.

    Schema Objects are created lazily: :meth:`ref` records the types it
    is asked to reference and :meth:`get_schemas` then generates the
    schemas for all recorded types, recording any further types that
    those schemas reference until none are left."""

    def __init__(self, context):
        self.context = context
        self.model = context.model
        self.voc = context.voc

    def ref(self, type_name, suffix=Suffix.read):
        """Returns a Reference Object for a type

        type_name
            The qualified name of the referenced type, or the simple name
            of one of the shared schemas like 'count' or 'error'.

        suffix
            The :class:`Suffix` of the schema variant

        Types in the document are recorded as required.  Types defined in
        documents included by reference get an external reference (the
        document's URL with .xml replaced by .openapi3.json) and types
        from unknown namespaces are referenced anyway."""
        name = type_name
        url = ''
        if '.' in type_name:
            q = names.name_parts(type_name)
            namespace = self.model.namespace.get(q.qualifier, q.qualifier)
            name = "%s.%s" % (namespace, q.name)
            url = self.model.namespace_url.get(namespace, '')
            if url == '':
                self.context.require(namespace, q.name, suffix)
            elif url.endswith('.xml'):
                url = url[:-3] + 'openapi3.json'
        return {'$ref': "%s#/components/schemas/%s%s" % (url, name, suffix)}

    def get_schema(self, element, suffix=Suffix.read, for_parameter=False,
                   for_function=False):
        """Returns a Schema Object for a typed model element

        element
            Any element with $Type and related facets: a property,
            parameter, return type, type definition, etc.

        for_parameter
            True if the schema is for a parameter, descriptions are
            omitted as they are added to the Parameter Object.

        for_function
            True if the schema describes a function parameter in a URL
            where string values must be quoted."""
        type_name = element.get('$Type')
        s = self._type_schema(element, type_name, suffix)
        allowed = self.voc.get(element, 'Validation', 'AllowedValues')
        if allowed:
            s = _wrap(s)
            s['enum'] = [record.get('Value') for record in allowed]
        if element.get('$Nullable'):
            s = _wrap(s)
            s['nullable'] = True
        if '$DefaultValue' in element:
            s = _wrap(s)
            s['default'] = element['$DefaultValue']
        example = self.voc.get(element, 'Core', 'Example')
        if example:
            s = _wrap(s)
            s['example'] = example.get('Value') \
                if isinstance(example, dict) else example
        if for_function:
            self._function_parameter(s, element, type_name)
        s = self._bound(s, element, 'Maximum', 'maximum', 'exclusiveMaximum')
        s = self._bound(s, element, 'Minimum', 'minimum', 'exclusiveMinimum')
        if element.get('$Collection'):
            s = {'type': 'array', 'items': s}
        if not for_parameter:
            description = self.voc.get(
                element, 'Core', 'LongDescription') or \
                self.voc.get(element, 'Core', 'Description')
            if description:
                s = _wrap(s)
                s['description'] = description
        oid_reference = element.get('@ODM.oidReference')
        if isinstance(oid_reference, dict) and \
                oid_reference.get('entityName'):
            s = _wrap(s)
            s['x-sap-odm-oid-reference-entity-name'] = \
                oid_reference['entityName']
        if any(element.get(a) for a in extensions.ER_ANNOTATIONS):
            s = _wrap(s)
        extensions.er_extensions(element, s)
        return s

    def _type_schema(self, element, type_name, suffix):
        if type_name in _path_types:
            return {'type': 'string'}
        elif type_name == 'Edm.Binary':
            s = {'type': 'string', 'format': 'base64url'}
            if element.get('$MaxLength'):
                s['maxLength'] = int(
                    math.ceil(4 * element['$MaxLength'] / 3))
            return s
        elif type_name == 'Edm.Boolean':
            return {'type': 'boolean'}
        elif type_name == 'Edm.Byte':
            return {'type': 'integer', 'format': 'uint8'}
        elif type_name == 'Edm.Date':
            return {'type': 'string', 'format': 'date',
                    'example': '2017-04-13'}
        elif type_name in ('Edm.DateTime', 'Edm.DateTimeOffset'):
            precision = element.get('$Precision')
            fraction = '.' + '0' * precision \
                if _is_number(precision) and precision else ''
            return {'type': 'string', 'format': 'date-time',
                    'example': '2017-04-13T15:51:04%sZ' % fraction}
        elif type_name == 'Edm.Decimal':
            return self._decimal_schema(element)
        elif type_name == 'Edm.Double':
            return {'anyOf': [{'type': 'number', 'format': 'double'},
                              {'type': 'string'}],
                    'example': 3.14}
        elif type_name == 'Edm.Duration':
            return {'type': 'string', 'format': 'duration',
                    'example': 'P4DT15H51M04S'}
        elif type_name in ('Edm.GeographyPoint', 'Edm.GeometryPoint'):
            self.context.inline.add('geoPoint')
            return self.ref('geoPoint')
        elif type_name == 'Edm.Guid':
            return {'type': 'string', 'format': 'uuid',
                    'example': '01234567-89ab-cdef-0123-456789abcdef'}
        elif type_name == 'Edm.Int16':
            return {'type': 'integer', 'format': 'int16'}
        elif type_name == 'Edm.Int32':
            return {'type': 'integer', 'format': 'int32'}
        elif type_name == 'Edm.Int64':
            return {'anyOf': [{'type': 'integer', 'format': 'int64'},
                              {'type': 'string'}],
                    'example': "42"}
        elif type_name == 'Edm.PrimitiveType':
            return {'anyOf': [{'type': 'boolean'}, {'type': 'number'},
                              {'type': 'string'}]}
        elif type_name == 'Edm.SByte':
            return {'type': 'integer', 'format': 'int8'}
        elif type_name == 'Edm.Single':
            return {'anyOf': [{'type': 'number', 'format': 'float'},
                              {'type': 'string'}],
                    'example': 3.14}
        elif type_name == 'Edm.Stream':
            json_schema = self.voc.get(element, 'JSON', 'Schema')
            if isinstance(json_schema, str):
                return json.loads(json_schema)
            elif json_schema:
                return dict(json_schema)
            return {'type': 'string', 'format': 'base64url'}
        elif type_name is None or type_name == 'Edm.String':
            s = {'type': 'string'}
            if element.get('$MaxLength'):
                s['maxLength'] = element['$MaxLength']
            pattern = self.voc.get(element, 'Validation', 'Pattern')
            if pattern:
                s['pattern'] = pattern
            return s
        elif type_name == 'Edm.TimeOfDay':
            return {'type': 'string', 'format': 'time',
                    'example': '15:51:04'}
        elif type_name.startswith('Edm.'):
            logger.debug("Unknown type: %s", type_name)
            return {}
        type_def = self.model.model_element(type_name)
        s = self.ref(type_name, suffix if names.is_structured(type_def)
                     else Suffix.read)
        if element.get('$MaxLength'):
            s = {'allOf': [s], 'maxLength': element['$MaxLength']}
        return s

    def _decimal_schema(self, element):
        number = {'type': 'number', 'format': 'decimal'}
        s = {'anyOf': [number, {'type': 'string'}], 'example': 0}
        precision = element.get('$Precision')
        scale = element.get('$Scale')
        if not _is_number(precision):
            precision = None
        if not _is_number(scale):
            # variable or floating
            scale = None
        if precision is not None:
            s['x-sap-precision'] = precision
        if scale is not None:
            s['x-sap-scale'] = scale
            if scale <= 0:
                number['multipleOf'] = 10 ** -scale
            else:
                number['multipleOf'] = 1 / 10 ** scale
        if precision is not None and precision < 16:
            scale = scale or 0
            limit = 10 ** (precision - scale)
            delta = 10 ** -scale
            number['maximum'] = limit - delta
            number['minimum'] = -number['maximum']
        return s

    def _bound(self, s, element, term, keyword, exclusive_keyword):
        value = self.voc.get(element, 'Validation', term)
        if value is None:
            return s
        target = s
        if 'anyOf' in s and _is_number_schema(s['anyOf'][0]):
            target = s['anyOf'][0]
        elif '$ref' in s:
            # a referenced type definition is bound by a wrapper
            target = s = _wrap(s)
        target[keyword] = value
        exclusive = self.voc.key('Validation', 'Exclusive')
        key = self.voc.key('Validation', term)
        if exclusive is not None and element.get(key + exclusive):
            target[exclusive_keyword] = True
        return s

    def _function_parameter(self, s, element, type_name):
        quote = self.context.quote(type_name)
        if isinstance(s.get('example'), str):
            s['example'] = "%s%s%s" % (quote, s['example'], quote)
        if s.get('type') == 'string':
            if s.get('pattern'):
                pattern = s['pattern']
                if pattern.startswith('^'):
                    pattern = "^%s(%s" % (quote, pattern[1:])
                if pattern.endswith('$'):
                    pattern = "%s)%s$" % (pattern[:-1], quote)
                s['pattern'] = pattern
            elif type_name is None or type_name == 'Edm.String':
                s['pattern'] = "^'([^']|'')*'$"
        if element.get('$Nullable'):
            s['default'] = "null"
            if s.get('type') == 'string' and s.get('pattern'):
                pattern = s['pattern']
                if pattern.startswith('^'):
                    pattern = "^(null|" + pattern[1:]
                if pattern.endswith('$'):
                    pattern = pattern[:-1] + ")$"
                s['pattern'] = pattern

    def get_schemas(self):
        """Returns the Schemas of the Components Object

        All required schemas are generated, together with any schemas
        they require, and returned in a new dictionary sorted by
        schema name."""
        schemas = {}
        i = 0
        # the list of required schemas grows as we generate schemas
        while i < len(self.context.required):
            namespace, name, suffix = self.context.required[i]
            i += 1
            type_def = self.model.model_element("%s.%s" % (namespace, name))
            kind = names.kind_of(type_def)
            if kind in names.STRUCTURED_KINDS:
                self.structured_type(schemas, namespace, name, type_def,
                                     suffix)
            elif kind == Kind.EnumType:
                self.enumeration_type(schemas, namespace, name, type_def)
            elif kind == Kind.TypeDefinition:
                self.type_definition(schemas, namespace, name, type_def)
            elif type_def is None:
                logger.debug("Unknown type: %s.%s", namespace, name)
        for namespace, schema in self.model.schemas():
            for name, type_def in schema.items():
                if not names.is_identifier(name) or \
                        not names.is_structured(type_def):
                    continue
                ext = extensions.openapi_extensions(type_def)
                if ext:
                    schemas.setdefault(
                        "%s.%s%s" % (namespace, name, Suffix.read),
                        {}).update(ext)
        if 'geoPoint' in self.context.inline:
            schemas['geoPoint'] = {
                'type': 'object',
                'properties': {
                    'coordinates': self.ref('geoPosition'),
                    'type': {
                        'type': 'string',
                        'enum': ['Point'],
                        'default': 'Point'
                    }
                },
                'required': ['type', 'coordinates']
            }
            schemas['geoPosition'] = {
                'type': 'array',
                'minItems': 2,
                'items': {'type': 'number'}
            }
        if self.model.csdl.get('$EntityContainer'):
            schemas['count'] = self.count()
            schemas['error'] = self.error()
        return dict((k, schemas[k]) for k in sorted(schemas))

    def enumeration_type(self, schemas, namespace, name, type_def):
        """Adds the Schema Object for an enumeration type

        The enumeration contains the member names in declaration
        order."""
        s = {
            'type': 'string',
            'title': name,
            'enum': [m for m in type_def if names.is_identifier(m)]
        }
        description = self.voc.get(type_def, 'Core', 'LongDescription')
        if description:
            s['description'] = description
        schemas["%s.%s" % (namespace, name)] = s

    def type_definition(self, schemas, namespace, name, type_def):
        """Adds the Schema Object for a type definition

        The schema is the schema of the underlying type with the facets
        and annotations of the type definition."""
        element = dict(type_def)
        element['$Type'] = type_def.get('$UnderlyingType')
        s = _wrap(self.get_schema(element))
        s['title'] = name
        description = self.voc.get(type_def, 'Core', 'LongDescription')
        if description:
            s['description'] = description
        schemas["%s.%s" % (namespace, name)] = s

    def _is_countable(self, name):
        # CountRestrictions of an entity set with the type's name
        child = self.context.container.get(name)
        restrictions = self.voc.get(child, 'Capabilities',
                                    'CountRestrictions') or {}
        return restrictions.get('Countable') is not False

    def _is_mandatory(self, element):
        key = self.voc.key('Common', 'FieldControl') or \
            '@Common.FieldControl'
        value = names.enum_member(element.get(key))
        return value is not None and names.simple_name(
            value[value.rfind('/') + 1:]) == 'Mandatory'

    def _is_read_only(self, element):
        permissions = names.enum_member(
            self.voc.get(element, 'Core', 'Permissions'))
        return (permissions is not None and
                permissions[permissions.rfind('/') + 1:] == 'Read') or \
            bool(self.voc.get(element, 'Core', 'Computed'))

    def structured_type(self, schemas, namespace, name, type_def, suffix):
        """Adds the Schema Object for one variant of a structured type

        suffix
            The :class:`Suffix` of the variant.

        The read variant contains all properties, the create variant
        omits computed and read-only properties and the update variant
        also omits key and immutable properties.  Containment and
        cascade-delete navigation properties are included in create
        and update variants (as create variants of the target), other
        collection-valued navigation properties add a count property to
        the read variant.  Types with derived types list the variants of
        the derived types in anyOf."""
        schema_name = "%s.%s%s" % (namespace, name, suffix)
        is_key = self.model.key_map(type_def)
        required = list(is_key)
        properties = {}
        is_count = self._is_countable(name)
        expand_restrictions = self.voc.get(
            type_def, 'Capabilities', 'ExpandRestrictions') or {}
        non_expandable = [
            names.navigation_property_path(p) for p in
            expand_restrictions.get('NonExpandableProperties', [])]
        for pname, p in self.model.properties_of_structured_type(
                type_def).items():
            if pname in non_expandable:
                continue
            if suffix == Suffix.read:
                properties[pname] = self.get_schema(p)
            if self._is_mandatory(p):
                required.append(pname)
            if p.get('$Kind') == 'NavigationProperty':
                if p.get('$Collection') and suffix == Suffix.read and \
                        is_count:
                    properties["%s@%scount" % (
                        pname, 'odata.' if self.context.version == '4.0'
                        else '')] = self.ref('count')
                if not self._is_read_only(p) and (
                        p.get('$ContainsTarget') or
                        p.get('$OnDelete') == 'Cascade'):
                    if suffix == Suffix.create:
                        properties[pname] = self.get_schema(
                            p, Suffix.create)
                    elif suffix == Suffix.update and not self.voc.get(
                            p, 'Core', 'Immutable'):
                        properties[pname] = self.get_schema(
                            p, Suffix.create)
            else:
                if self._is_read_only(p) or \
                        self.voc.get(p, 'Core', 'ComputedDefaultValue'):
                    required = [r for r in required if r != pname]
                if not self._is_read_only(p):
                    if suffix == Suffix.create:
                        properties[pname] = self.get_schema(
                            p, Suffix.create)
                    elif suffix == Suffix.update and \
                            pname not in is_key and \
                            not self.voc.get(p, 'Core', 'Immutable'):
                        properties[pname] = self.get_schema(
                            p, Suffix.update)
        s = {
            'title': (self.voc.get(type_def, 'Core', 'Description') or
                      name) + TITLE_SUFFIX[suffix],
            'type': 'object'
        }
        if properties:
            s['properties'] = properties
        if suffix == Suffix.read and type_def.get('@ODM.root'):
            s['x-sap-root-entity'] = type_def['@ODM.root']
        extensions.odm_extensions(type_def, s)
        extensions.er_extensions(type_def, s)
        if suffix == Suffix.create and required:
            unique = []
            for r in required:
                if r not in unique:
                    unique.append(r)
            s['required'] = unique
        description = self.voc.get(type_def, 'Core', 'LongDescription')
        if description:
            s['description'] = description
        derived = self.model.derived_types.get("%s.%s" % (namespace, name))
        if derived:
            s['anyOf'] = [self.ref(d, suffix) for d in derived]
            if not type_def.get('$Abstract'):
                s['anyOf'].append({})
        schemas[schema_name] = s

    def get_parameters(self):
        """Returns the Parameter Objects for system query options

        These are the type-independent query options $top, $skip,
        $count and, for OData 4.0 and later, $search."""
        prefix = self.context.query_option_prefix
        params = {
            'top': {
                'name': prefix + 'top',
                'in': 'query',
                'description': 'Show only the first n items, see '
                '[Paging - Top](%s#sec_SystemQueryOptiontop)' % ODATA_DOCS,
                'schema': {'type': 'integer', 'minimum': 0},
                'example': 50
            },
            'skip': {
                'name': prefix + 'skip',
                'in': 'query',
                'description': 'Skip the first n items, see '
                '[Paging - Skip](%s#sec_SystemQueryOptionskip)' % ODATA_DOCS,
                'schema': {'type': 'integer', 'minimum': 0}
            },
            'count': {
                'name': prefix + 'count',
                'in': 'query',
                'description': 'Include count of items, see '
                '[Count](%s#sec_SystemQueryOptioncount)' % ODATA_DOCS,
                'schema': {'type': 'boolean'}
            }
        }
        if self.context.version >= '4.0':
            params['search'] = {
                'name': prefix + 'search',
                'in': 'query',
                'description': 'Search items by search phrases, see '
                '[Searching](%s#sec_SystemQueryOptionsearch)' % ODATA_DOCS,
                'schema': {'type': 'string'}
            }
        return dict((k, params[k]) for k in sorted(params))

    def count(self):
        """Returns the Schema Object of a collection count"""
        return {
            'anyOf': [{'type': 'number'}, {'type': 'string'}],
            'description': 'The number of entities in the collection. '
            'Available when using the [$count](%s#sec_SystemQueryOptioncount)'
            ' query option.' % ODATA_DOCS,
        }

    def error(self):
        """Returns the Schema Object of an OData error response

        Versions before 4.0 use a language-tagged message and have no
        target or details."""
        detail = {
            'type': 'object',
            'required': ['code', 'message'],
            'properties': {
                'code': {'type': 'string'},
                'message': {'type': 'string'},
                'target': {'type': 'string'}
            }
        }
        error = {
            'type': 'object',
            'required': ['code', 'message'],
            'properties': {
                'code': {'type': 'string'},
                'message': {'type': 'string'},
                'target': {'type': 'string'},
                'details': {'type': 'array', 'items': detail},
                'innererror': {
                    'type': 'object',
                    'description':
                        'The structure of this object is service-specific'
                }
            }
        }
        if self.context.version < '4.0':
            error['properties']['message'] = {
                'type': 'object',
                'properties': {
                    'lang': {'type': 'string'},
                    'value': {'type': 'string'}
                },
                'required': ['lang', 'value']
            }
            del error['properties']['details']
            del error['properties']['target']
        return {
            'type': 'object',
            'required': ['error'],
            'properties': {'error': error}
        }
