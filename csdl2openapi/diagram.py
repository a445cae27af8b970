#! /usr/bin/env python
"""Draws resource diagrams of CSDL documents using https://yuml.me"""

from . import names


COLORS = {
    'resource': '{bg:lawngreen}',
    'EntityType': '{bg:lightslategray}',
    'ComplexType': '',
    'external': '{bg:whitesmoke}'
}

YUML_CLASS = "https://yuml.me/diagram/class/"

YUML_LEGEND = "https://yuml.me/diagram/plain;dir:TB;scale:60/class/" \
    "[External.Type%s],[ComplexType%s],[EntityType%s]," \
    "[EntitySet/Singleton/Operation%s]" % (
        COLORS['external'], COLORS['ComplexType'], COLORS['EntityType'],
        COLORS['resource'])


def cardinality(element):
    """Returns the yuml cardinality of a typed element"""
    if element.get('$Collection'):
        return '*'
    elif element.get('$Nullable'):
        return '0..1'
    else:
        return ''


class Diagram(object):

    """A class diagram of a CSDL document

    model
        The :class:`model.CSDLModel` to draw.

    The diagram shows the entity and complex types of all schemas with
    their base types, structured properties and navigation properties,
    followed by the resources of the entity container."""

    def __init__(self, model):
        self.model = model
        self.parts = []

    def get_resource_diagram(self, container):
        """Returns the diagram as a markdown fragment

        container
            The entity container

        Returns an empty string if there is nothing to draw, otherwise
        two images are returned, the diagram and its legend, under a
        level 2 heading."""
        self.parts = []
        for namespace, schema in self.model.schemas():
            for type_name, type_def in schema.items():
                if names.is_identifier(type_name) and \
                        names.is_structured(type_def):
                    self._type_diagram(type_name, type_def)
        resources = [name for name in container if names.is_identifier(name)]
        for name in reversed(resources):
            self._resource_diagram(name, container[name])
        if not self.parts:
            return ''
        return "\n\n## Entity Data Model\n![ER Diagram](%s%s)\n\n" \
            "### Legend\n![Legend](%s)" % (
                YUML_CLASS, ','.join(self.parts), YUML_LEGEND)

    def _type_diagram(self, type_name, type_def):
        box = ''
        if '$BaseType' in type_def:
            box = '[%s]^' % names.simple_name(type_def['$BaseType'])
        self.parts.append('%s[%s%s]' % (
            box, type_name, COLORS[type_def['$Kind']]))
        for pname, p in type_def.items():
            if not names.is_identifier(pname):
                continue
            target_name = names.name_parts(p.get('$Type', 'Edm.String'))
            navigation = p.get('$Kind') == 'NavigationProperty'
            if not navigation and target_name.qualifier == 'Edm':
                continue
            target = self.model.model_element(p.get('$Type'))
            partner = p.get('$Partner')
            bidirectional = bool(
                partner and isinstance(target, dict) and
                isinstance(target.get(partner), dict) and
                target[partner].get('$Partner') == pname)
            # partners are drawn once, unless they have the same name
            if bidirectional and pname > partner:
                continue
            if not navigation or p.get('$ContainsTarget'):
                source_end = '++'
            elif bidirectional:
                source_end = cardinality(target[partner])
            else:
                source_end = ''
            arrow = '' if not navigation or bidirectional else '>'
            if target is None:
                target_box = p.get('$Type') + COLORS['external']
            else:
                target_box = target_name.name
            self.parts.append('[%s]%s-%s%s[%s]' % (
                type_name, source_end, cardinality(p), arrow, target_box))

    def _resource_diagram(self, name, resource):
        if '$Type' in resource:
            # %20 as entity sets and types may have the same name
            self.parts.append('[%s%%20%s]++-%s>[%s]' % (
                name, COLORS['resource'], cardinality(resource),
                names.simple_name(resource['$Type'])))
        elif '$Action' in resource or '$Function' in resource:
            self.parts.append('[%s%s]' % (name, COLORS['resource']))
            overloads = self.model.model_element(
                resource.get('$Action') or resource.get('$Function'))
            if isinstance(overloads, list):
                for overload in overloads:
                    if not overload.get('$IsBound'):
                        self.parts[-1] += self._overload_diagram(
                            name, overload)
                        break

    def _overload_diagram(self, name, overload):
        result = ''
        return_type = overload.get('$ReturnType')
        if return_type and self.model.model_element(
                return_type.get('$Type')) is not None:
            result += '-%s>[%s]' % (cardinality(return_type),
                                    names.simple_name(return_type['$Type']))
        for p in overload.get('$Parameter', []):
            if self.model.model_element(p.get('$Type')) is not None:
                result += ',[%s%s]in-%s>[%s]' % (
                    name, COLORS['resource'], cardinality(p),
                    names.simple_name(p['$Type']))
        return result
