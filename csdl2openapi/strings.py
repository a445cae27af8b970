#! /usr/bin/env python
"""Utilities for turning model element names into readable text"""

import re


_underscore_re = re.compile(r'_')
_camel_re = re.compile(r'([a-z0-9])([A-Z])')
_acronym_re = re.compile(r'([A-Z])([A-Z])(?=[a-z])')
_capital_word_re = re.compile(r'\b([A-Z])([a-z]+)')
_capital_letter_re = re.compile(r'\b([A-Z])\b')
_tag_camel_re = re.compile(r'([a-z])([A-Z])')


def camel_case_to_words(src):
    """Converts camel-cased name into words

    Acronyms are left untouched, for example::

        foo_bar_baz         ->  foo bar baz
        camelCase           ->  camel case
        HTTPServerForXML    ->  HTTP server for XML"""
    src = _underscore_re.sub(' ', src)
    src = _camel_re.sub(r'\1 \2', src)
    src = _acronym_re.sub(r'\1 \2', src)
    src = _capital_word_re.sub(
        lambda match: match.group(1).lower() + match.group(2), src)
    return _capital_letter_re.sub(lambda match: match.group(1).lower(), src)


def normalise_tag(name):
    """Normalises a tag name

    Underscores become spaces and camelCase becomes "camel Case", the
    case of the letters is not changed."""
    return _tag_camel_re.sub(r'\1 \2', name.replace('_', ' '))


_irregular = {
    'people': 'person',
    'children': 'child',
    'men': 'man',
    'women': 'woman',
    'feet': 'foot',
    'teeth': 'tooth',
    'mice': 'mouse',
    'geese': 'goose',
    'indices': 'index',
    'matrices': 'matrix',
    'vertices': 'vertex',
    'criteria': 'criterion',
    'analyses': 'analysis',
    'statuses': 'status',
    'addresses': 'address',
    'aliases': 'alias',
    'buses': 'bus',
    'movies': 'movie',
    'cookies': 'cookie',
    'ties': 'tie',
    'pies': 'pie',
}

_uncountable = set((
    'data', 'metadata', 'information', 'equipment', 'series', 'species',
    'news', 'sheep', 'fish', 'deer', 'me', 'media', 'software', 'staff',
    'feedback', 'money', 'rice', 'traffic', 'weather', 'music'))

_singular_rules = (
    (re.compile(r'(.)ies$', re.IGNORECASE), r'\1y'),
    (re.compile(r'(ss|sh|ch|x|zz)es$', re.IGNORECASE), r'\1'),
    (re.compile(r'(ss|us|is)$', re.IGNORECASE), r'\1'),
    (re.compile(r'(.)s$', re.IGNORECASE), r'\1'),
    )


def _restore_case(word, token):
    if word == word.upper() and len(word) > 1:
        return token.upper()
    elif word[:1] == word[:1].upper():
        return token[:1].upper() + token[1:]
    return token


def singular(src):
    """Returns the singular form of a (possibly plural) phrase

    Only the last word of the phrase is changed.  A small table of
    irregular nouns is consulted first, otherwise English suffix rules
    are applied, e.g., "sales orders" becomes "sales order",
    "Categories" becomes "Category" and "Boxes" becomes "Box"."""
    space = src.rfind(' ')
    prefix, word = src[:space + 1], src[space + 1:]
    lword = word.lower()
    if not word or lword in _uncountable:
        return src
    if lword in _irregular:
        return prefix + _restore_case(word, _irregular[lword])
    for rule, replacement in _singular_rules:
        if rule.search(word):
            return prefix + rule.sub(replacement, word, count=1)
    return src
