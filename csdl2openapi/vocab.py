#! /usr/bin/env python
"""Maps vocabulary terms onto the annotation keys of a CSDL document

Annotations in CSDL JSON are keyed by "@" followed by the *alias* (or
namespace) under which the vocabulary was included, followed by the
term name.  Each document may choose its own aliases so the keys can
only be calculated once the document's references have been read."""

import logging


logger = logging.getLogger('csdl2openapi')


#: vocabulary group names mapped on to their namespaces
VOCABULARIES = {
    'Authorization': 'Org.OData.Authorization.V1',
    'Capabilities': 'Org.OData.Capabilities.V1',
    'Core': 'Org.OData.Core.V1',
    'JSON': 'Org.OData.JSON.V1',
    'Validation': 'Org.OData.Validation.V1',
    'Common': 'com.sap.vocabularies.Common.v1',
}

#: the terms used by the compiler, grouped by vocabulary
TERMS = {
    'Authorization': (
        'Authorizations', 'SecuritySchemes'),
    'Capabilities': (
        'BatchSupport', 'BatchSupported', 'ChangeTracking',
        'CountRestrictions', 'DeleteRestrictions', 'DeepUpdateSupport',
        'ExpandRestrictions', 'FilterRestrictions', 'IndexableByKey',
        'InsertRestrictions', 'KeyAsSegmentSupported',
        'NavigationRestrictions', 'OperationRestrictions',
        'ReadRestrictions', 'SearchRestrictions', 'SelectSupport',
        'SkipSupported', 'SortRestrictions', 'TopSupported',
        'UpdateRestrictions'),
    'Core': (
        'AcceptableMediaTypes', 'Computed', 'ComputedDefaultValue',
        'DefaultNamespace', 'Description', 'Example', 'Immutable',
        'LongDescription', 'OptionalParameter', 'Permissions',
        'SchemaVersion'),
    'JSON': (
        'Schema', ),
    'Validation': (
        'AllowedValues', 'Exclusive', 'Maximum', 'Minimum', 'Pattern'),
    'Common': (
        'Label', 'FieldControl'),
}


class VocabularyIndex(object):

    """An index of the annotation keys used in one CSDL document

    aliases
        A dictionary mapping namespaces (and aliases) on to the alias
        used in the document, built from $Reference/$Include and from
        the schemas defined inline.

    Terms from vocabularies that were never included are omitted from
    the index, looking them up always returns None and, as a result,
    they are never found on any model element."""

    def __init__(self, aliases):
        self.terms = {}
        for group, term_list in TERMS.items():
            self.terms[group] = {}
            alias = aliases.get(VOCABULARIES[group])
            if alias is None:
                logger.debug("Vocabulary %s not included",
                             VOCABULARIES[group])
                continue
            for term in term_list:
                self.terms[group][term] = "@%s.%s" % (alias, term)

    def key(self, group, term):
        """Returns the annotation key for a term

        group
            The name of the vocabulary group, e.g., "Capabilities"

        term
            The simple name of the term, e.g., "InsertRestrictions"

        Returns None if the term's vocabulary is not included in the
        document."""
        return self.terms.get(group, {}).get(term)

    def get(self, element, group, term, default=None):
        """Returns the value of a term annotating an element

        element
            A model element (a dictionary) or None

        If element is None, or is not annotated with the term, then
        *default* is returned."""
        key = self.key(group, term)
        if key is None or not isinstance(element, dict):
            return default
        return element.get(key, default)

    def has(self, element, group, term):
        """True if element is annotated with term"""
        key = self.key(group, term)
        return key is not None and isinstance(element, dict) and \
            key in element
