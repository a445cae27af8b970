#! /usr/bin/env python


#: the numeric and temporal types whose values are not quoted in URLs
UNQUOTED_TYPES = (
    'Edm.Int64', 'Edm.Int32', 'Edm.Int16', 'Edm.SByte', 'Edm.Byte',
    'Edm.Double', 'Edm.Single', 'Edm.Date', 'Edm.DateTimeOffset',
    'Edm.Guid')


class Compilation(object):

    """The state of a single compilation

    model
        The :class:`model.CSDLModel` being compiled.

    version
        The OData protocol version as a string.  Versions are compared
        as strings, e.g., '4.01' > '4.0'.

    max_levels
        The maximum number of navigation segments in a path.

    base_path
        The base path of the service, used in examples.

    A Compilation is created for each call to the compiler and is passed
    to the path and schema synthesizers, it accumulates the names of the
    schemas that must be generated and the shared types that need to be
    added to the output."""

    def __init__(self, model, version='4.01', max_levels=5,
                 base_path='/service-root'):
        self.model = model
        self.voc = model.voc
        self.version = version
        self.max_levels = max_levels
        self.base_path = base_path
        #: the prefix for system query options
        self.query_option_prefix = '$' if version <= '4.01' else ''
        #: the name of the annotation containing a collection count
        self.count_annotation = '@count' if version > '4.0' else \
            '@odata.count'
        #: the entity container (an empty dictionary if there is none)
        self.container = model.container() or {}
        #: True if keys are represented as path segments
        self.key_as_segment = bool(self.voc.get(
            self.container, 'Capabilities', 'KeyAsSegmentSupported'))
        #: list of (namespace, name, suffix) tuples of required schemas
        self.required = []
        self._used = set()
        #: names of shared helper schemas that must be emitted
        self.inline = set()

    def require(self, namespace, name, suffix):
        """Records that a schema for type namespace.name is required

        Each (type, suffix) pair is only recorded once, in the order in
        which it is first required."""
        key = "%s.%s%s" % (namespace, name, suffix)
        if key not in self._used:
            self._used.add(key)
            self.required.append((namespace, name, suffix))

    def quote(self, type_name):
        """Returns the quote character for values of type_name in URLs

        Numeric, date, date-time and GUID values are not quoted and no
        values are quoted in key-as-segment style.  Returns an empty
        string or a single quote."""
        if type_name in UNQUOTED_TYPES or self.key_as_segment:
            return ''
        return "'"
