#! /usr/bin/env python
"""Maps vendor annotations on to OpenAPI specification extensions"""


EXTENSIONS_PREFIX = '@OpenAPI.Extensions.'

#: ODM annotations of structured types and their OpenAPI extensions
ODM_ANNOTATIONS = {
    '@ODM.entityName': 'x-sap-odm-entity-name',
    '@ODM.oid': 'x-sap-odm-oid',
}

#: entity relationship annotations and their OpenAPI extensions
ER_ANNOTATIONS = {
    '@EntityRelationship.entityType':
        'x-entity-relationship-entity-type',
    '@EntityRelationship.entityIds':
        'x-entity-relationship-entity-ids',
    '@EntityRelationship.propertyType':
        'x-entity-relationship-property-type',
    '@EntityRelationship.reference':
        'x-entity-relationship-reference',
    '@EntityRelationship.compositeReferences':
        'x-entity-relationship-composite-references',
    '@EntityRelationship.temporalIds':
        'x-entity-relationship-temporal-ids',
    '@EntityRelationship.temporalReferences':
        'x-entity-relationship-temporal-references',
    '@EntityRelationship.referencesWithConstantIds':
        'x-entity-relationship-references-with-constant-ids',
}

#: extensions with enumerated values: (allowed values, default)
EXTENSION_ENUMS = {
    'x-sap-compliance-level': (
        ('sap:base:v1', 'sap:core:v1', 'sap:core:v2'), None),
    'x-sap-api-type': (
        ('ODATA', 'ODATAV4', 'REST', 'SOAP'), None),
    'x-sap-direction': (
        ('inbound', 'outbound', 'mixed'), 'inbound'),
    'x-sap-dpp-entity-semantics': (
        ('sap:DataSubject', 'sap:DataSubjectDetails', 'sap:Other'), None),
    'x-sap-dpp-field-semantics': (
        ('sap:DataSubjectID', 'sap:ConsentID', 'sap:PurposeID',
         'sap:ContractRelatedID', 'sap:LegalEntityID',
         'sap:DataControllerID', 'sap:UserID', 'sap:EndOfBusinessDate',
         'sap:BlockingDate', 'sap:EndOfRetentionDate'), None),
}

#: structured extensions and the fields they may contain
EXTENSION_FIELDS = {
    'x-sap-stateInfo': (
        'state', 'deprecationDate', 'decomissionedDate', 'link'),
    'x-sap-ext-overview': ('name', 'values'),
    'x-sap-deprecated-operation': (
        'deprecationDate', 'successorOperationRef',
        'successorOperationId'),
    'x-sap-odm-semantic-key': ('name', 'values'),
}


def extension_name(name):
    """Returns the OpenAPI extension name for an annotation name

    Names starting "x-sap-" are unchanged, names starting "sap-" are
    prefixed with "x-" and all others with "x-sap-"."""
    if name.startswith('x-sap-'):
        return name
    elif name.startswith('sap-'):
        return 'x-' + name
    else:
        return 'x-sap-' + name


def openapi_extensions(annotated):
    """Collects @OpenAPI.Extensions annotations

    annotated
        A dictionary: a schema, a structured type or an action or
        function overload.

    Returns a (possibly empty) dictionary of OpenAPI specification
    extensions.  Annotations with dotted names, such as
    @OpenAPI.Extensions.stateInfo.state, result in nested objects.
    Values of enumerated extensions that are not allowed are replaced
    by the extension's default or removed, structured extensions are
    reduced to their known fields."""
    result = {}
    if not isinstance(annotated, dict):
        return result
    for key, value in annotated.items():
        if not key.startswith(EXTENSIONS_PREFIX):
            continue
        keys = key[len(EXTENSIONS_PREFIX):].split('.')
        keys[0] = extension_name(keys[0])
        node = result
        for k in keys[:-1]:
            if not isinstance(node.get(k), dict):
                node[k] = {}
            node = node[k]
        node[keys[-1]] = value
    _check_enums(result)
    _check_fields(result)
    return result


def _check_enums(result):
    for key, value in list(result.items()):
        if key not in EXTENSION_ENUMS:
            continue
        allowed, default = EXTENSION_ENUMS[key]
        if isinstance(value, (dict, list)) or value not in allowed:
            if default is not None:
                result[key] = default
            else:
                del result[key]


def _check_fields(result):
    for key, value in list(result.items()):
        if key not in EXTENSION_FIELDS:
            continue
        allowed = EXTENSION_FIELDS[key]
        if isinstance(value, list):
            result[key] = [v for v in value if v in allowed]
        elif isinstance(value, dict):
            for field in list(value.keys()):
                if field not in allowed:
                    del value[field]


def odm_extensions(type_def, schema):
    """Adds ODM extensions of a structured type to its schema"""
    for annotation, extension in ODM_ANNOTATIONS.items():
        if type_def.get(annotation):
            schema[extension] = type_def[annotation]


def er_extensions(element, schema):
    """Adds entity relationship extensions of an element to a schema"""
    for annotation, extension in ER_ANNOTATIONS.items():
        if element.get(annotation):
            schema[extension] = element[annotation]
