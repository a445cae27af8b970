#! /usr/bin/env python
"""Generates the Paths Object of an OpenAPI document

The URL space of an OData service is generated by walking the entity
container: each entity set and singleton is the root of a tree of paths
built by following its key and its navigation properties, bound actions
and functions add further paths at each node of the tree."""

import logging

from . import names
from . import strings
from .extensions import openapi_extensions
from .schemas import ODATA_DOCS, Suffix


logger = logging.getLogger('csdl2openapi')


#: system query options, function parameters with these names must be
#: prefixed with @ when implicit parameter aliases are used
SYSTEM_QUERY_OPTIONS = (
    'compute', 'expand', 'select', 'filter', 'search', 'count', 'orderby',
    'skip', 'top', 'format', 'index', 'schemaversion', 'skiptoken',
    'apply')

URL_CONVENTIONS = "https://docs.oasis-open.org/odata/odata/v4.01/" \
    "odata-v4.01-part2-url-conventions.html"


def _enum_value(member):
    # an enumeration value without its type qualifier
    value = names.enum_member(member)
    if value is None:
        return None
    return value[value.rfind('/') + 1:]


def _has_operations(path_item):
    for key in path_item:
        if key != 'parameters':
            return True
    return False


class PathSynthesizer(object):

    """Creates the Paths Object for a CSDL document

    context
        The :class:`context.Compilation` of the document

    schemas
        The :class:`schemas.SchemaSynthesizer` used to create (and
        record references to) the Schema Objects used in request and
        response bodies and in parameters."""

    def __init__(self, context, schemas):
        self.context = context
        self.model = context.model
        self.voc = context.voc
        self.schemas = schemas

    def get_paths(self):
        """Returns the Paths Object, sorted by path

        Every entity set and singleton in the entity container is
        marked as a containment target of the service and becomes the
        root of a tree of paths.  Action and function imports add one
        path each, if the container has any children the batch path is
        added too."""
        container = self.context.container
        paths = {}
        resources = [name for name in container if names.is_identifier(name)]
        for name in resources:
            child = container[name]
            kind = names.kind_of(child)
            if '$Type' in child:
                type_def = self.model.model_element(child['$Type'])
                source_name = self.voc.get(
                    type_def, 'Common', 'Label') or name
                child['$ContainsTarget'] = True
                self.path_items(paths, '/' + name, [], child, child,
                                source_name, source_name, child, 0, '')
            elif kind == names.Kind.ActionImport:
                self.path_item_action_import(paths, name, child)
            elif kind == names.Kind.FunctionImport:
                self.path_item_function_import(paths, name, child)
            else:
                logger.debug("Unrecognized entity container child: %s",
                             name)
        if resources:
            self.path_item_batch(paths, container)
        return dict((p, paths[p]) for p in sorted(paths))

    def path_items(self, paths, prefix, prefix_parameters, element, root,
                   source_name, target_name, target, level,
                   navigation_path):
        """Adds the Path Item Object for a navigation segment

        paths
            The Paths Object being built

        prefix
            The path of this segment

        prefix_parameters
            The list of Parameter Objects for the key values in the
            prefix

        element
            The model element of the segment: an entity set, singleton
            or navigation property

        root
            The entity set or singleton at the root of the path

        source_name and target_name
            The names used to tag the operations, taken from the root
            and from the entity set the segment is bound to.

        target
            The entity set in the container that the segment is bound
            to, or None if it is not bound

        level
            The number of navigation segments so far

        navigation_path
            The path of navigation properties from the root, used to
            look up restrictions annotated on the root.

        Path Items with no operations are removed, some of their child
        paths may still have been added."""
        name = prefix[prefix.rfind('/') + 1:]
        type_def = self.model.model_element(element.get('$Type'))
        path_item = {}
        restrictions = self.navigation_property_restrictions(
            root, navigation_path)
        non_expandable = self.non_expandable_properties(
            root, navigation_path)
        auto_exposed = root.get('$cds.autoexpose')
        paths[prefix] = path_item
        if prefix_parameters:
            path_item['parameters'] = list(prefix_parameters)
        self.operation_read(path_item, element, name, source_name,
                            target_name, target, level, restrictions, False,
                            non_expandable)
        if not auto_exposed and element.get('$Collection') and (
                element.get('$ContainsTarget') or
                (level < 2 and target is not None)):
            self.operation_create(path_item, element, name, source_name,
                                  target_name, target, level, restrictions)
        self.path_items_for_bound_operations(
            paths, prefix, prefix_parameters, element, source_name)
        if element.get('$ContainsTarget'):
            if element.get('$Collection'):
                if level < self.context.max_levels:
                    self.path_items_with_key(
                        paths, prefix, prefix_parameters, element, root,
                        source_name, target_name, target, level,
                        navigation_path, restrictions, non_expandable)
            else:
                if not auto_exposed:
                    self.operation_update(path_item, element, name,
                                          source_name, target, level,
                                          restrictions)
                    if element.get('$Nullable'):
                        self.operation_delete(path_item, element, name,
                                              source_name, target, level,
                                              restrictions)
                self.path_items_with_navigation(
                    paths, prefix, prefix_parameters, type_def, root,
                    source_name, level, navigation_path)
        if not _has_operations(path_item):
            del paths[prefix]

    def navigation_property_restrictions(self, root, navigation_path):
        """Returns the restrictions of a navigation path

        The restrictions are the item of the root's
        NavigationRestrictions/RestrictedProperties with a matching
        NavigationProperty, or an empty dictionary."""
        navigation_restrictions = self.voc.get(
            root, 'Capabilities', 'NavigationRestrictions') or {}
        for item in navigation_restrictions.get('RestrictedProperties', []):
            if names.navigation_property_path(
                    item.get('NavigationProperty')) == navigation_path:
                return item
        return {}

    def non_expandable_properties(self, root, navigation_path):
        """Returns the non-expandable paths relative to a navigation path

        The root's ExpandRestrictions/NonExpandableProperties are
        filtered to those within navigation_path and returned with the
        navigation_path prefix removed."""
        expand_restrictions = self.voc.get(
            root, 'Capabilities', 'ExpandRestrictions') or {}
        prefix = navigation_path + '/' if navigation_path else ''
        result = []
        for path in expand_restrictions.get('NonExpandableProperties', []):
            path = names.navigation_property_path(path)
            if path and path.startswith(prefix):
                result.append(path[len(prefix):])
        return result

    def path_items_with_key(self, paths, prefix, prefix_parameters, element,
                            root, source_name, target_name, target, level,
                            navigation_path, restrictions, non_expandable):
        """Adds the Path Item Object for a collection segment with key

        The path is only added if the collection is indexable by key:
        IndexableByKey in the navigation restrictions overrides the
        annotation on the target entity set, which defaults to True."""
        target_indexable = target is None or self.voc.get(
            target, 'Capabilities', 'IndexableByKey') is not False
        indexable = restrictions.get('IndexableByKey')
        if not (indexable is True or
                (indexable is not False and target_indexable)):
            return
        name = prefix[prefix.rfind('/') + 1:]
        type_def = self.model.model_element(element.get('$Type'))
        segment, key_parameters = self.entity_key(type_def, level)
        if not key_parameters:
            return
        path = prefix + segment
        parameters = list(prefix_parameters) + key_parameters
        path_item = {'parameters': parameters}
        paths[path] = path_item
        self.operation_read(path_item, element, name, source_name,
                            target_name, target, level, restrictions, True,
                            non_expandable)
        if not root.get('$cds.autoexpose'):
            self.operation_update(path_item, element, name, source_name,
                                  target, level, restrictions, True)
            self.operation_delete(path_item, element, name, source_name,
                                  target, level, restrictions, True)
        if not _has_operations(path_item):
            del paths[path]
        self.path_items_for_bound_operations(
            paths, path, parameters, element, source_name, True)
        self.path_items_with_navigation(
            paths, path, parameters, type_def, root, source_name, level,
            navigation_path)

    def operation_summary(self, operation, name, source_name, level,
                          collection, by_key):
        """Returns a generated summary for an operation

        For example, "Retrieves a single order item of a sales order."
        """
        lname = strings.camel_case_to_words(name)
        sname = strings.camel_case_to_words(source_name)
        if by_key:
            article = 'a single '
            lname = strings.singular(lname)
        elif collection:
            article = 'a list of '
        else:
            article = ''
        if level == 0:
            of = ''
        elif level == 1 and sname == 'me':
            of = ' of me'
        else:
            of = ' of a ' + strings.singular(sname)
        return "%s %s%s%s." % (operation, article, lname, of)

    def _countable(self, target):
        restrictions = self.voc.get(
            target, 'Capabilities', 'CountRestrictions') or {}
        return restrictions.get('Countable') is not False

    def operation_create(self, path_item, element, name, source_name,
                         target_name, target, level, restrictions):
        insert_restrictions = restrictions.get('InsertRestrictions') or \
            self.voc.get(target, 'Capabilities', 'InsertRestrictions') or {}
        if insert_restrictions.get('Insertable') is False:
            return
        lname = strings.singular(strings.camel_case_to_words(name))
        type_def = self.model.model_element(element.get('$Type'))
        operation = {
            'summary': insert_restrictions.get('Description') or
            self.operation_summary('Creates', name, source_name, level,
                                   True, True),
            'tags': [strings.normalise_tag(source_name)],
            'requestBody': {
                'description': self.voc.get(
                    type_def, 'Core', 'Description') or 'New ' + lname,
                'required': True,
                'content': {
                    'application/json': {
                        'schema': self.schemas.ref(
                            element['$Type'], Suffix.create)
                    }
                }
            },
            'responses': self.response(
                '201', 'Created ' + lname, {'$Type': element['$Type']},
                insert_restrictions.get('ErrorResponses'),
                self._countable(target))
        }
        if insert_restrictions.get('LongDescription'):
            operation['description'] = insert_restrictions['LongDescription']
        if target_name and source_name != target_name:
            operation['tags'].append(strings.normalise_tag(target_name))
        self.custom_parameters(operation, insert_restrictions)
        path_item['post'] = operation

    def operation_read(self, path_item, element, name, source_name,
                       target_name, target, level, restrictions, by_key,
                       non_expandable):
        """Adds the get operation to a Path Item Object

        Readable in the ReadByKeyRestrictions (for by_key) overrides
        Readable in the ReadRestrictions, the navigation restrictions
        override those of the target.  Collections get the paging,
        searching, filtering, counting and sorting query options, all
        reads get the select and expand options."""
        target_restrictions = self.voc.get(
            target, 'Capabilities', 'ReadRestrictions')
        read_restrictions = restrictions.get('ReadRestrictions') or \
            target_restrictions or {}
        read_by_key_restrictions = read_restrictions.get(
            'ReadByKeyRestrictions')
        readable = True
        if by_key and read_by_key_restrictions and \
                'Readable' in read_by_key_restrictions:
            readable = read_by_key_restrictions['Readable']
        elif 'Readable' in read_restrictions:
            readable = read_restrictions['Readable']
        if not readable:
            return
        if level == 0:
            descriptions = target_restrictions or {}
        else:
            descriptions = restrictions.get('ReadRestrictions') or {}
        if by_key:
            descriptions = descriptions.get('ReadByKeyRestrictions') or {}
        lname = strings.camel_case_to_words(name)
        collection = not by_key and bool(element.get('$Collection'))
        if by_key:
            errors = (read_by_key_restrictions or {}).get('ErrorResponses')
        else:
            errors = read_restrictions.get('ErrorResponses')
        operation = {
            'summary': descriptions.get('Description') or
            self.operation_summary('Retrieves', name, source_name, level,
                                   element.get('$Collection'), by_key),
            'tags': [strings.normalise_tag(source_name)],
            'parameters': [],
            'responses': self.response(
                '200', 'Retrieved %s' % (
                    strings.singular(lname) if by_key else lname),
                {'$Type': element.get('$Type'), '$Collection': collection},
                errors, self._countable(target))
        }
        change_tracking = self.voc.get(
            element, 'Capabilities', 'ChangeTracking') or {}
        if collection and change_tracking.get('Supported'):
            schema = operation['responses']['200']['content'][
                'application/json']['schema']
            schema['properties']['@odata.deltaLink'] = {
                'type': 'string',
                'example': "%s/%s?$deltatoken=opaque server-generated token "
                "for fetching the delta" % (self.context.base_path, name)
            }
        if descriptions.get('LongDescription'):
            operation['description'] = descriptions['LongDescription']
        if target is not None and source_name != target_name:
            operation['tags'].append(strings.normalise_tag(target_name))
        self.custom_parameters(
            operation, (read_by_key_restrictions or read_restrictions)
            if by_key else read_restrictions)
        parameters = operation['parameters']
        if collection:
            self.option_top(parameters, target, restrictions)
            self.option_skip(parameters, target, restrictions)
            if self.context.version >= '4.0':
                self.option_search(parameters, target, restrictions)
            self.option_filter(parameters, target, restrictions)
            self.option_count(parameters, target)
            self.option_orderby(parameters, element, target, restrictions)
        self.option_select(parameters, element, target, restrictions)
        self.option_expand(parameters, element, target, non_expandable)
        path_item['get'] = operation

    def custom_parameters(self, operation, restrictions):
        """Adds custom headers and query options to an operation"""
        headers = restrictions.get('CustomHeaders') or []
        query_options = restrictions.get('CustomQueryOptions') or []
        if 'parameters' not in operation and (headers or query_options):
            operation['parameters'] = []
        for custom in headers:
            operation['parameters'].append(
                self.custom_parameter(custom, 'header'))
        for custom in query_options:
            operation['parameters'].append(
                self.custom_parameter(custom, 'query'))

    def custom_parameter(self, custom, location):
        parameter = {
            'name': custom.get('Name'),
            'in': location,
            'required': custom.get('Required') or False,
        }
        if custom.get('Description'):
            parameter['description'] = custom['Description']
        schema = {'type': 'string'}
        if custom.get('DocumentationURL'):
            schema['externalDocs'] = {'url': custom['DocumentationURL']}
        parameter['schema'] = schema
        return parameter

    def option_top(self, parameters, target, restrictions):
        if 'TopSupported' in restrictions:
            supported = restrictions['TopSupported']
        else:
            supported = target is None or self.voc.get(
                target, 'Capabilities', 'TopSupported') is not False
        if supported:
            parameters.append({'$ref': '#/components/parameters/top'})

    def option_skip(self, parameters, target, restrictions):
        if 'SkipSupported' in restrictions:
            supported = restrictions['SkipSupported']
        else:
            supported = target is None or self.voc.get(
                target, 'Capabilities', 'SkipSupported') is not False
        if supported:
            parameters.append({'$ref': '#/components/parameters/skip'})

    def option_search(self, parameters, target, restrictions):
        search_restrictions = restrictions.get('SearchRestrictions')
        if search_restrictions is None:
            search_restrictions = self.voc.get(
                target, 'Capabilities', 'SearchRestrictions') or {}
        if search_restrictions.get('Searchable') is False:
            return
        description = self.voc.get(search_restrictions, 'Core',
                                   'Description')
        if description:
            parameters.append({
                'name': self.context.query_option_prefix + 'search',
                'description': description,
                'in': 'query',
                'schema': {'type': 'string'}
            })
        else:
            parameters.append({'$ref': '#/components/parameters/search'})

    def option_filter(self, parameters, target, restrictions):
        filter_restrictions = restrictions.get('FilterRestrictions') or \
            self.voc.get(target, 'Capabilities', 'FilterRestrictions') or {}
        if filter_restrictions.get('Filterable') is False:
            return
        description = self.voc.get(
            filter_restrictions, 'Core', 'Description') or \
            'Filter items by property values, see [Filtering](%s' \
            '#sec_SystemQueryOptionfilter)' % ODATA_DOCS
        required_properties = filter_restrictions.get('RequiredProperties')
        if required_properties:
            description += '\n\nRequired filter properties:'
            for item in required_properties:
                description += '\n- %s' % names.property_path(item)
        option = {
            'name': self.context.query_option_prefix + 'filter',
            'description': description,
            'in': 'query',
            'schema': {'type': 'string'}
        }
        if filter_restrictions.get('RequiresFilter'):
            option['required'] = True
        parameters.append(option)

    def option_count(self, parameters, target):
        if target is None or self._countable(target):
            parameters.append({'$ref': '#/components/parameters/count'})

    def option_orderby(self, parameters, element, target, restrictions):
        sort_restrictions = restrictions.get('SortRestrictions') or \
            self.voc.get(target, 'Capabilities', 'SortRestrictions') or {}
        if sort_restrictions.get('Sortable') is False:
            return
        non_sortable = set(
            names.property_path(p) for p in
            sort_restrictions.get('NonSortableProperties') or [])
        items = []
        for path in self.primitive_paths(element):
            if path not in non_sortable:
                items.append(path)
                items.append(path + ' desc')
        if items:
            parameters.append({
                'name': self.context.query_option_prefix + 'orderby',
                'description': self.voc.get(
                    sort_restrictions, 'Core', 'Description') or
                'Order items by property values, see [Sorting](%s'
                '#sec_SystemQueryOptionorderby)' % ODATA_DOCS,
                'in': 'query',
                'explode': False,
                'schema': {
                    'type': 'array',
                    'uniqueItems': True,
                    'items': {'type': 'string', 'enum': items}
                }
            })

    def option_select(self, parameters, element, target, restrictions):
        select_support = restrictions.get('SelectSupport')
        if select_support is None:
            select_support = self.voc.get(
                target, 'Capabilities', 'SelectSupport') or {}
        if select_support.get('Supported') is False:
            return
        type_def = self.model.model_element(element.get('$Type')) or {}
        items = [
            name for name, p in
            self.model.properties_of_structured_type(type_def).items()
            if p.get('$Kind') != 'NavigationProperty']
        if items:
            parameters.append({
                'name': self.context.query_option_prefix + 'select',
                'description': 'Select properties to be returned, see '
                '[Select](%s#sec_SystemQueryOptionselect)' % ODATA_DOCS,
                'in': 'query',
                'explode': False,
                'schema': {
                    'type': 'array',
                    'uniqueItems': True,
                    'items': {'type': 'string', 'enum': items}
                }
            })

    def option_expand(self, parameters, element, target, non_expandable):
        target_restrictions = self.voc.get(
            target, 'Capabilities', 'ExpandRestrictions')
        if target_restrictions is not None and \
                target_restrictions.get('Expandable') is False:
            return
        items = ['*'] + [p for p in self.navigation_paths(element)
                         if p not in non_expandable]
        if len(items) > 1:
            parameters.append({
                'name': self.context.query_option_prefix + 'expand',
                'description': self.voc.get(
                    target_restrictions, 'Core', 'Description') or
                'The value of $expand query option is a comma-separated '
                'list of navigation property names, stream property names, '
                'or $value indicating the stream content of a media-entity. '
                'The corresponding related entities and stream values will '
                'be represented inline, see [Expand](%s'
                '#sec_SystemQueryOptionexpand)' % ODATA_DOCS,
                'in': 'query',
                'explode': False,
                'schema': {
                    'type': 'array',
                    'uniqueItems': True,
                    'items': {'type': 'string', 'enum': items}
                }
            })

    def navigation_paths(self, element, prefix='', level=0):
        """Returns the navigation property paths of an element's type

        Structural properties are searched for nested navigation
        properties up to the maximum number of levels."""
        paths = []
        type_def = self.model.model_element(element.get('$Type'))
        for name, p in self.model.properties_of_structured_type(
                type_def).items():
            if p.get('$Kind') == 'NavigationProperty':
                paths.append(prefix + name)
            elif p.get('$Type') and level < self.context.max_levels:
                paths += self.navigation_paths(
                    p, prefix + name + '/', level + 1)
        return paths

    def _structural_entries(self, properties, parent_path, parent_chain):
        entries = []
        for name, p in properties.items():
            if p.get('$Kind') == 'NavigationProperty':
                continue
            type_name = p.get('$Type')
            type_def = self.model.model_element(type_name)
            if type_name and type_def is None and \
                    names.name_parts(type_name).qualifier != 'Edm':
                logger.debug("Unknown type for element: %s", name)
                continue
            if names.kind_of(type_def) == names.Kind.ComplexType:
                entries.append((
                    parent_path + name + '/', parent_chain + [type_name],
                    self.model.properties_of_structured_type(type_def)))
            else:
                entries.append((parent_path + name, None, None))
        return entries

    def primitive_paths(self, element):
        """Returns the primitive property paths of an element's type

        Complex properties are expanded one level at a time, in place,
        so that the paths of a complex property follow its own path.
        Each complex property carries the chain of complex types that
        led to it, a complex type is not expanded again if it already
        appears in the chain, so a full cycle is never shown."""
        type_def = self.model.model_element(element.get('$Type'))
        if type_def is None:
            logger.debug("Unknown type for element: %s",
                         element.get('$Type'))
            return []
        paths = []
        entries = self._structural_entries(
            self.model.properties_of_structured_type(type_def), '', [])
        i = 0
        while i < len(entries):
            path, chain, properties = entries[i]
            i += 1
            if chain is None:
                paths.append(path)
                continue
            if chain.count(chain[-1]) > 1:
                logger.debug("Cycle detected %s", '->'.join(chain))
                continue
            entries[i:i] = self._structural_entries(properties, path, chain)
        return paths

    def operation_update(self, path_item, element, name, source_name,
                         target, level, restrictions, by_key=False):
        """Adds the update operation to a Path Item Object

        The method is PATCH unless UpdateRestrictions/UpdateMethod says
        otherwise."""
        update_restrictions = restrictions.get('UpdateRestrictions') or \
            self.voc.get(target, 'Capabilities', 'UpdateRestrictions') or {}
        if update_restrictions.get('Updatable') is False or \
                self.voc.get(element, 'Core', 'Immutable'):
            return
        type_def = self.model.model_element(element.get('$Type'))
        operation = {
            'summary': update_restrictions.get('Description') or
            self.operation_summary('Changes', name, source_name, level,
                                   element.get('$Collection'), by_key),
            'tags': [strings.normalise_tag(source_name)],
            'requestBody': {
                'description': self.voc.get(
                    type_def, 'Core', 'Description') or
                'New property values',
                'required': True,
                'content': {
                    'application/json': {
                        'schema': self.schemas.ref(
                            element['$Type'], Suffix.update)
                    }
                }
            },
            'responses': self.response(
                '204', 'Success', None,
                update_restrictions.get('ErrorResponses'),
                self._countable(target))
        }
        if update_restrictions.get('LongDescription'):
            operation['description'] = update_restrictions['LongDescription']
        self.custom_parameters(operation, update_restrictions)
        method = _enum_value(update_restrictions.get('UpdateMethod'))
        path_item[method.lower() if method else 'patch'] = operation

    def operation_delete(self, path_item, element, name, source_name,
                         target, level, restrictions, by_key=False):
        delete_restrictions = restrictions.get('DeleteRestrictions') or \
            self.voc.get(target, 'Capabilities', 'DeleteRestrictions') or {}
        if delete_restrictions.get('Deletable') is False:
            return
        operation = {
            'summary': delete_restrictions.get('Description') or
            self.operation_summary('Deletes', name, source_name, level,
                                   element.get('$Collection'), by_key),
            'tags': [strings.normalise_tag(source_name)],
            'responses': self.response(
                '204', 'Success', None,
                delete_restrictions.get('ErrorResponses'),
                self._countable(target))
        }
        if delete_restrictions.get('LongDescription'):
            operation['description'] = delete_restrictions['LongDescription']
        self.custom_parameters(operation, delete_restrictions)
        path_item['delete'] = operation

    def path_items_with_navigation(self, paths, prefix, prefix_parameters,
                                   type_def, root, source_name, level,
                                   navigation_prefix):
        """Adds the paths for the navigation properties of a type

        The Navigability of the root's NavigationRestrictions is the
        default for the first two levels: 'None' stops navigation from
        the root and 'Single' stops navigation beyond the first level.
        Each navigation path may override the default with its own
        restrictions and a navigation path restricted to 'Single'
        navigation is not navigated any further."""
        if type_def is None or level >= self.context.max_levels:
            return
        navigation_restrictions = self.voc.get(
            root, 'Capabilities', 'NavigationRestrictions') or {}
        navigability = _enum_value(
            navigation_restrictions.get('Navigability'))
        root_navigable = (level == 0 and navigability != 'None') or \
            (level == 1 and navigability != 'Single') or level > 1
        parent_restrictions = self.navigation_property_restrictions(
            root, navigation_prefix)
        if _enum_value(parent_restrictions.get('Navigability')) == 'Single':
            return
        bindings = root.get('$NavigationPropertyBinding') or {}
        for name, p in self.navigation_path_map(type_def).items():
            if navigation_prefix:
                navigation_path = navigation_prefix + '/' + name
            else:
                navigation_path = name
            restrictions = self.navigation_property_restrictions(
                root, navigation_path)
            navigability = _enum_value(restrictions.get('Navigability'))
            if navigability in ('Recursive', 'Single') or \
                    (navigability is None and root_navigable):
                target_set_name = bindings.get(navigation_path)
                target = self.context.container.get(target_set_name) \
                    if target_set_name else None
                target_type = self.model.model_element(
                    target.get('$Type')) if target else None
                target_name = self.voc.get(
                    target_type, 'Common', 'Label') or target_set_name
                self.path_items(paths, prefix + '/' + name,
                                prefix_parameters, p, root, source_name,
                                target_name, target, level + 1,
                                navigation_path)

    def navigation_path_map(self, type_def, prefix='', level=0,
                            result=None):
        """Returns a dictionary of navigation paths of a type

        The dictionary maps paths on to navigation properties.
        Single-valued structural properties are searched for nested
        navigation properties up to the maximum number of levels."""
        if result is None:
            result = {}
        for name, p in self.model.properties_of_structured_type(
                type_def).items():
            if p.get('$Kind') == 'NavigationProperty':
                result[prefix + name] = p
            elif p.get('$Type') and not p.get('$Collection') and \
                    level < self.context.max_levels:
                self.navigation_path_map(
                    self.model.model_element(p['$Type']),
                    prefix + name + '/', level + 1, result)
        return result

    def _description(self, element, default=None):
        return self.voc.get(element, 'Core', 'LongDescription') or \
            self.voc.get(element, 'Core', 'Description') or default

    def entity_key(self, entity_type, level):
        """Returns the key segment and key parameters of an entity type

        Returns a tuple of the key segment, to append to the path of
        the collection, and a list of Parameter Objects.  Parameter
        names are suffixed with _level below the first level of
        navigation to keep them unique within the path.  Key aliases
        are followed through complex properties to the key property."""
        keys = self.model.get_key(entity_type) or []
        properties = self.model.properties_of_structured_type(entity_type)
        suffix = "_%i" % level if level > 0 else ''
        key_as_segment = self.context.key_as_segment
        segment = ''
        parameters = []
        for index, key in enumerate(keys):
            if isinstance(key, dict):
                parameter, path = list(key.items())[0]
                path = path.split('/')
                p = properties.get(path[0]) or {}
                for step in path[1:]:
                    p = self.model.properties_of_structured_type(
                        self.model.model_element(p.get('$Type'))).get(
                        step) or {}
            else:
                parameter = key
                p = properties.get(key) or {}
            if key_as_segment:
                segment += '/'
            else:
                if index > 0:
                    segment += ','
                if len(keys) != 1:
                    segment += '%s=' % parameter
            quote = self.context.quote(p.get('$Type'))
            segment += "%s{%s%s}%s" % (quote, parameter, suffix, quote)
            parameters.append({
                'description': self._description(p, 'key: ' + parameter),
                'in': 'path',
                'name': parameter + suffix,
                'required': True,
                'schema': self.schemas.get_schema(p, for_parameter=True)
            })
        if not key_as_segment:
            segment = '(' + segment + ')'
        return segment, parameters

    def path_items_for_bound_operations(self, paths, prefix,
                                        prefix_parameters, element,
                                        source_name, by_key=False):
        """Adds paths for the actions and functions bound to an element

        Operations bound to the collection are used for collections that
        are not accessed by key.  Operations are not added beneath
        navigation properties."""
        if element.get('$Kind') == 'NavigationProperty':
            return
        type_name = element.get('$Type', '')
        if not by_key and element.get('$Collection'):
            type_name += '-c'
        for name, overload in self.model.bound_overloads.get(type_name, []):
            if overload.get('$Kind') == 'Action':
                self.path_item_action(paths, prefix + '/' + name,
                                      prefix_parameters, name, overload,
                                      source_name)
            else:
                self.path_item_function(paths, prefix + '/' + name,
                                        prefix_parameters, name, overload,
                                        source_name)

    def path_item_action_import(self, paths, name, child):
        overload = None
        overloads = self.model.model_element(child['$Action'])
        if isinstance(overloads, list):
            for item in overloads:
                if not item.get('$IsBound'):
                    overload = item
                    break
        if overload is None:
            logger.debug("Unknown action %s in action import %s",
                         child['$Action'], name)
            return
        self.path_item_action(paths, '/' + name, [], child['$Action'],
                              overload, child.get('$EntitySet'), child)

    def _operation_tag(self, overload, source_name):
        return strings.normalise_tag(
            self.voc.get(overload, 'Common', 'Label') or source_name or
            'Service Operations')

    def path_item_action(self, paths, prefix, prefix_parameters,
                         action_name, overload, source_name,
                         action_import=None):
        """Adds the Path Item Object for an action overload

        The action is invoked with POST, its non-binding parameters are
        the properties of the JSON request body."""
        if action_import is None:
            action_import = {}
        name = names.simple_name(action_name)
        operation_restrictions = self.voc.get(
            overload, 'Capabilities', 'OperationRestrictions') or {}
        errors = operation_restrictions.get('ErrorResponses')
        if overload.get('$ReturnType'):
            responses = self.response('200', 'Success',
                                      overload['$ReturnType'], errors)
        else:
            responses = self.response('204', 'Success', None, errors)
        operation = {
            'summary': self.voc.get(action_import, 'Core', 'Description') or
            self.voc.get(overload, 'Core', 'Description') or
            'Invokes action ' + name,
            'tags': [self._operation_tag(overload, source_name)],
            'responses': responses
        }
        operation.update(openapi_extensions(overload))
        description = self.voc.get(
            action_import, 'Core', 'LongDescription') or \
            self.voc.get(overload, 'Core', 'LongDescription')
        if description:
            operation['description'] = description
        if prefix_parameters:
            operation['parameters'] = list(prefix_parameters)
        parameters = overload.get('$Parameter', [])
        if overload.get('$IsBound'):
            parameters = parameters[1:]
        if parameters:
            properties = {}
            for p in parameters:
                properties[p['$Name']] = self.schemas.get_schema(p)
            operation['requestBody'] = {
                'description': 'Action parameters',
                'content': {
                    'application/json': {
                        'schema': {
                            'type': 'object',
                            'properties': properties
                        }
                    }
                }
            }
        else:
            # still needs Content-Type: application/json
            operation['requestBody'] = {
                'required': False,
                'content': {
                    'application/json': {
                        'schema': {'type': 'object'}
                    }
                }
            }
        self.custom_parameters(operation, operation_restrictions)
        paths[prefix] = {'post': operation}

    def path_item_function_import(self, paths, name, child):
        overloads = self.model.model_element(child['$Function'])
        if not isinstance(overloads, list):
            logger.debug("Unknown function %s in function import %s",
                         child['$Function'], name)
            return
        for overload in overloads:
            if not overload.get('$IsBound'):
                self.path_item_function(
                    paths, '/' + name, [], child['$Function'], overload,
                    child.get('$EntitySet'), child)

    def _is_string_parameter(self, p):
        type_name = p.get('$Type')
        if type_name is None or type_name == 'Edm.String':
            return True
        type_def = self.model.model_element(type_name)
        kind = names.kind_of(type_def)
        if kind == names.Kind.EnumType:
            return True
        elif kind == names.Kind.TypeDefinition:
            return type_def.get('$UnderlyingType',
                                'Edm.String') == 'Edm.String'
        return False

    def path_item_function(self, paths, prefix, prefix_parameters,
                           function_name, overload, source_name,
                           function_import=None):
        """Adds the Path Item Object for a function overload

        The function is invoked with GET.  With implicit parameter
        aliases (OData 4.01 and later, or if any parameter is optional)
        all parameters are query options, otherwise primitive parameters
        are part of the path.  Collection, structured and stream valued
        parameters are always passed as URL-encoded JSON in query
        options."""
        if function_import is None:
            function_import = {}
        name = names.simple_name(function_name)
        parameters = overload.get('$Parameter', [])
        if overload.get('$IsBound'):
            parameters = parameters[1:]
        implicit_aliases = self.context.version > '4.0' or any(
            self.voc.get(p, 'Core', 'OptionalParameter') for p in parameters)
        path_segments = []
        params = []
        for p in parameters:
            pname = p['$Name']
            param = {}
            description = self._description(p)
            if description:
                param['description'] = description
            if implicit_aliases:
                param['required'] = not self.voc.get(
                    p, 'Core', 'OptionalParameter')
            else:
                param['required'] = True
            system_name = implicit_aliases and \
                self.context.version != '2.0' and \
                pname.lower() in SYSTEM_QUERY_OPTIONS
            type_name = p.get('$Type', 'Edm.String')
            type_def = self.model.model_element(type_name)
            if p.get('$Collection') or type_name == 'Edm.Stream' or \
                    names.is_structured(type_def) or (
                        isinstance(type_def, dict) and
                        type_def.get('$UnderlyingType') == 'Edm.Stream'):
                param['in'] = 'query'
                if system_name or not implicit_aliases:
                    param['name'] = '@' + pname
                else:
                    param['name'] = pname
                if not implicit_aliases:
                    path_segments.append("%s=@%s" % (pname, pname))
                param['schema'] = {'type': 'string'}
                param['description'] = (
                    param['description'] + '  \n'
                    if 'description' in param else '') + \
                    "This is %sURL-encoded JSON %sof type %s, see " \
                    "[Complex and Collection Literals](%s" \
                    "#sec_ComplexandCollectionLiterals)" % (
                        'a ' if p.get('$Collection') else '',
                        'array with items ' if p.get('$Collection') else '',
                        self.model.namespace_qualified_name(type_name),
                        URL_CONVENTIONS)
                param['example'] = '[]' if p.get('$Collection') else '{}'
            else:
                if implicit_aliases:
                    param['in'] = 'query'
                else:
                    path_segments.append("%s={%s}" % (pname, pname))
                    param['in'] = 'path'
                param['name'] = '@' + pname if system_name else pname
                if self._is_string_parameter(p):
                    param['description'] = (
                        param['description'] + '  \n'
                        if 'description' in param else '') + \
                        "String value needs to be enclosed in single quotes"
                param['schema'] = self.schemas.get_schema(
                    p, for_parameter=True, for_function=True)
            params.append(param)
        operation_restrictions = self.voc.get(
            overload, 'Capabilities', 'OperationRestrictions') or {}
        operation = {
            'summary': self.voc.get(function_import, 'Core', 'Description') or
            self.voc.get(overload, 'Core', 'Description') or
            'Invokes function ' + name,
            'tags': [self._operation_tag(overload, source_name)],
            'parameters': list(prefix_parameters) + params,
            'responses': self.response(
                '200', 'Success', overload.get('$ReturnType'),
                operation_restrictions.get('ErrorResponses'))
        }
        operation.update(openapi_extensions(overload))
        description = self.voc.get(
            function_import, 'Core', 'LongDescription') or \
            self.voc.get(overload, 'Core', 'LongDescription')
        if description:
            operation['description'] = description
        self.custom_parameters(operation, operation_restrictions)
        if not implicit_aliases:
            prefix += '(%s)' % ','.join(path_segments)
        paths[prefix] = {'get': operation}

    def path_item_batch(self, paths, container):
        """Adds the Path Item Object for batch requests

        Batch requests are supported unless BatchSupported or
        BatchSupport/Supported are False."""
        batch_support = self.voc.get(
            container, 'Capabilities', 'BatchSupport') or {}
        if self.voc.get(container, 'Capabilities',
                        'BatchSupported') is False or \
                batch_support.get('Supported') is False:
            return
        first_entity_set = ''
        for name, child in container.items():
            if names.is_identifier(name) and isinstance(child, dict) and \
                    child.get('$Collection'):
                first_entity_set = name
                break
        summary = self.voc.get(batch_support, 'Core', 'Description')
        if summary is None:
            summary = 'Sends a group of requests'
        description = self.voc.get(batch_support, 'Core', 'LongDescription')
        if description is None:
            description = 'Group multiple requests into a single request ' \
                'payload, see [Batch Requests](%s#sec_BatchRequests).' % \
                ODATA_DOCS
        operation = {
            'summary': summary,
            'description': description + '\n\n*Please note that "Try it '
            'out" is not supported for this request.*',
            'tags': [strings.normalise_tag('Batch Requests')],
            'requestBody': {
                'required': True,
                'description': 'Batch request',
                'content': {
                    'multipart/mixed;boundary=request-separator': {
                        'schema': {'type': 'string'},
                        'example': '--request-separator\n'
                        'Content-Type: application/http\n'
                        'Content-Transfer-Encoding: binary\n\n'
                        'GET %s HTTP/1.1\n'
                        'Accept: application/json\n\n'
                        '\n--request-separator--' % first_entity_set
                    }
                }
            },
            'responses': {
                '4XX': {'$ref': '#/components/responses/error'}
            }
        }
        code = '202' if self.context.version < '4.0' else '200'
        operation['responses'][code] = {
            'description': 'Batch response',
            'content': {
                'multipart/mixed': {
                    'schema': {'type': 'string'},
                    'example': '--response-separator\n'
                    'Content-Type: application/http\n\n'
                    'HTTP/1.1 200 OK\n'
                    'Content-Type: application/json\n\n'
                    '{...}'
                    '\n--response-separator--'
                }
            }
        }
        paths['/$batch'] = {'post': operation}

    def response(self, code, description, element, errors, is_count=True):
        """Returns a Responses Object

        code
            The status code of the successful response, as a string

        element
            An element with $Type and $Collection describing the
            response body, ignored for code '204'.

        errors
            A list of ErrorResponses records from the restrictions of
            the operation or None, in which case a single 4XX response
            is added.

        is_count
            False if collection responses must not contain a count."""
        r = {code: {'description': description}}
        if code != '204':
            element = element or {}
            s = self.schemas.get_schema(element)
            type_name = element.get('$Type')
            if element.get('$Collection'):
                properties = {}
                if is_count:
                    properties[self.context.count_annotation] = \
                        self.schemas.ref('count')
                properties['value'] = s
                schema = {
                    'type': 'object',
                    'title': 'Collection of %s' % names.simple_name(
                        type_name or 'Edm.String'),
                    'properties': properties
                }
            elif type_name is None or (
                    type_name.startswith('Edm.') and type_name not in (
                        'Edm.Stream', 'Edm.EntityType', 'Edm.ComplexType')):
                schema = {'type': 'object', 'properties': {'value': s}}
            else:
                schema = s
            r[code]['content'] = {'application/json': {'schema': schema}}
        if errors:
            for e in errors:
                r[str(e.get('StatusCode'))] = {
                    'description': e.get('Description'),
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/error'}
                        }
                    }
                }
        else:
            r['4XX'] = {'$ref': '#/components/responses/error'}
        return r
