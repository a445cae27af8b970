#! /usr/bin/env python
"""Assembles OpenAPI documents from CSDL JSON documents"""

import copy
import json
import logging

from . import errors
from . import info
from . import names
from . import strings
from .context import Compilation
from .diagram import Diagram
from .extensions import openapi_extensions
from .model import CSDLModel
from .paths import PathSynthesizer
from .schemas import SchemaSynthesizer


logger = logging.getLogger('csdl2openapi')


DESCRIPTION_PLACEHOLDER = "Use @Core.LongDescription: '...' or " \
    "@Core.Description: '...' on your CDS service to provide a meaningful " \
    "description."

TITLE_PLACEHOLDER = "Use @title: '...' on your CDS service to provide a " \
    "meaningful title."

SHORT_TEXT_PLACEHOLDER = "Use @Core.Description: '...' on your CDS " \
    "service to provide a meaningful short text."

#: Authorization locations mapped on to Security Scheme locations
LOCATIONS = {
    'Header': 'header',
    'QueryOption': 'query',
    'Cookie': 'cookie'
}


def csdl2openapi(csdl, url=None, servers=None, odata_version=None,
                 scheme='https', host='localhost', base_path='/service-root',
                 diagram=False, max_levels=5):
    """Compiles a CSDL JSON document into an OpenAPI document

    csdl
        The CSDL document as parsed from JSON, it is not modified.

    url
        The service root URL, defaults to a URL made from *scheme*,
        *host* and *base_path*.

    servers
        Optional JSON text of an array of Server Objects, replaces the
        default server.  Raises :class:`errors.ServersError` if it is
        not a JSON array.

    odata_version
        The OData version, defaults to '4.01'.

    diagram
        True to add a resource diagram to the description of the API

    max_levels
        The maximum number of navigation segments in generated paths

    Returns the OpenAPI document as a dictionary ready for serialising
    as JSON."""
    csdl = copy.deepcopy(csdl)
    csdl['$Version'] = odata_version if odata_version else '4.01'
    if url is None:
        url = "%s://%s%s" % (scheme, host, base_path)
    model = CSDLModel(csdl)
    context = Compilation(model, version=csdl['$Version'],
                          max_levels=max_levels, base_path=base_path)
    assembler = DocumentAssembler(context, diagram)
    return assembler.get_document(url, servers)


class DocumentAssembler(object):

    """Assembles the parts of an OpenAPI document

    context
        The :class:`context.Compilation` of the document

    diagram
        True if a resource diagram should be included in the description

    The paths are generated before the components, as generating the
    paths records the schemas that the components must contain."""

    def __init__(self, context, diagram=False):
        self.context = context
        self.model = context.model
        self.voc = context.voc
        self.csdl = context.model.csdl
        self.diagram = diagram
        self.schemas = SchemaSynthesizer(context)
        self.paths = PathSynthesizer(context, self.schemas)
        self.container_schema = {}
        if self.csdl.get('$EntityContainer'):
            q = names.name_parts(self.csdl['$EntityContainer'])
            self.container_schema = self.csdl.get(
                self.model.namespace.get(q.qualifier, q.qualifier)) or {}

    def get_document(self, url, servers=None):
        has_container = bool(self.csdl.get('$EntityContainer'))
        container = self.context.container
        if has_container:
            self.mark_auto_exposed()
        document = {
            'openapi': info.openapi_version,
            'info': self.get_info(),
            'x-sap-api-type': 'ODATAV4',
            'x-odata-version': self.csdl['$Version'],
            'x-sap-shortText': self.get_short_text(),
            'servers': self.get_servers(url, servers),
            'tags': self.get_tags(container),
            'paths': self.paths.get_paths(),
            'components': self.get_components()
        }
        external_docs = self.get_external_docs()
        if external_docs:
            document['externalDocs'] = external_docs
        document.update(openapi_extensions(self.container_schema))
        if not has_container:
            del document['servers']
            del document['tags']
        self.security(document)
        return document

    def mark_auto_exposed(self):
        """Marks auto-exposed container children

        An entity set or singleton is auto-exposed if its entity type is
        annotated with @cds.autoexpose (or @cds.autoexposed) and the
        type's name is not also the name of a container child.  No
        modifying operations are generated for auto-exposed resources."""
        container = self.context.container
        for name, child in container.items():
            if not names.is_identifier(name) or '$Type' not in child:
                continue
            type_name = names.simple_name(child['$Type'])
            type_def = self.container_schema.get(type_name)
            if not isinstance(type_def, dict) or type_name in container:
                continue
            if type_def.get('@cds.autoexpose') or \
                    type_def.get('@cds.autoexposed'):
                child['$cds.autoexpose'] = True

    def get_info(self):
        """Returns the Info Object

        The description is taken from the first of Core.LongDescription
        on the container, on its schema, Core.Description on the
        container and on its schema.  A placeholder text is used if none
        of these is present."""
        container = self.context.container
        description = None
        for element, term in ((container, 'LongDescription'),
                              (self.container_schema, 'LongDescription'),
                              (container, 'Description'),
                              (self.container_schema, 'Description')):
            description = self.voc.get(element, 'Core', term)
            if description:
                break
        else:
            description = DESCRIPTION_PLACEHOLDER
        if self.diagram:
            description += Diagram(self.model).get_resource_diagram(
                container)
        title = self.voc.get(container, 'Common', 'Label') or \
            TITLE_PLACEHOLDER
        return {
            'title': title,
            'description': description if self.csdl.get(
                '$EntityContainer') else '',
            'version': self.voc.get(
                self.container_schema, 'Core', 'SchemaVersion') or ''
        }

    def get_short_text(self):
        return self.voc.get(self.context.container, 'Core', 'Description') \
            or self.voc.get(self.container_schema, 'Core', 'Description') \
            or SHORT_TEXT_PLACEHOLDER

    def get_external_docs(self):
        external_docs = {}
        if self.container_schema.get('@OpenAPI.externalDocs.description'):
            external_docs['description'] = \
                self.container_schema['@OpenAPI.externalDocs.description']
        if self.container_schema.get('@OpenAPI.externalDocs.url'):
            external_docs['url'] = \
                self.container_schema['@OpenAPI.externalDocs.url']
        return external_docs

    def get_servers(self, url, servers=None):
        """Returns the list of Server Objects

        servers
            JSON text of a list of Server Objects that replaces the
            default Server Object with *url*."""
        if not servers:
            return [{'url': url}]
        if not isinstance(servers, str):
            raise errors.ServersError(errors.Messages.servers_invalid)
        try:
            result = json.loads(servers)
        except ValueError:
            raise errors.ServersError(errors.Messages.servers_invalid)
        if not isinstance(result, list) or not result:
            raise errors.ServersError(errors.Messages.servers_not_array)
        return result

    def get_tags(self, container):
        """Returns the Tag Objects, one for each entity set or singleton

        Tags are named after the entity type's Common.Label, or the
        name of the container child.  Tags with the same name are
        merged, the result is sorted by name."""
        tags = {}
        for name, child in container.items():
            if not names.is_identifier(name) or '$Type' not in child:
                continue
            type_def = self.model.model_element(child['$Type']) or {}
            tag = {'name': self.voc.get(type_def, 'Common', 'Label') or name}
            description = self.voc.get(child, 'Core', 'Description') or \
                self.voc.get(type_def, 'Core', 'Description')
            if description:
                tag['description'] = description
            tags[tag['name']] = tag
        result = []
        for tag in tags.values():
            tag['name'] = strings.normalise_tag(tag['name'])
            result.append(tag)
        result.sort(key=lambda t: t['name'].lower())
        return result

    def get_components(self):
        components = {'schemas': self.schemas.get_schemas()}
        if self.csdl.get('$EntityContainer'):
            components['parameters'] = self.schemas.get_parameters()
            components['responses'] = {
                'error': {
                    'description': 'Error',
                    'content': {
                        'application/json': {
                            'schema': self.schemas.ref('error')
                        }
                    }
                }
            }
        security_schemes = self.get_security_schemes()
        if security_schemes:
            components['securitySchemes'] = security_schemes
        return components

    def get_security_schemes(self):
        """Returns the Security Scheme Objects of the container

        Each Authorization.Authorizations record of a known type becomes
        a Security Scheme Object named after the record.  Records of
        unknown types are ignored."""
        schemes = {}
        for auth in self.voc.get(self.context.container, 'Authorization',
                                 'Authorizations') or []:
            scheme = self.security_scheme(auth)
            if scheme is not None:
                schemes[auth.get('Name')] = scheme
        return schemes

    def security_scheme(self, auth):
        scheme = {}
        if auth.get('Description'):
            scheme['description'] = auth['Description']
        qualified_type = auth.get('@type') or auth.get('@odata.type') or ''
        auth_type = qualified_type[qualified_type.rfind('.') + 1:]
        flow = {}
        if auth_type == 'ApiKey':
            scheme['type'] = 'apiKey'
            scheme['name'] = auth.get('KeyName')
            scheme['in'] = LOCATIONS.get(auth.get('Location'))
        elif auth_type == 'Http':
            scheme['type'] = 'http'
            scheme['scheme'] = auth.get('Scheme')
            scheme['bearerFormat'] = auth.get('BearerFormat')
        elif auth_type == 'OAuth2AuthCode':
            scheme['type'] = 'oauth2'
            scheme['flows'] = {'authorizationCode': flow}
            flow['authorizationUrl'] = auth.get('AuthorizationUrl')
            flow['tokenUrl'] = auth.get('TokenUrl')
        elif auth_type == 'OAuth2ClientCredentials':
            scheme['type'] = 'oauth2'
            scheme['flows'] = {'clientCredentials': flow}
            flow['tokenUrl'] = auth.get('TokenUrl')
        elif auth_type == 'OAuth2Implicit':
            scheme['type'] = 'oauth2'
            scheme['flows'] = {'implicit': flow}
            flow['authorizationUrl'] = auth.get('AuthorizationUrl')
        elif auth_type == 'OAuth2Password':
            scheme['type'] = 'oauth2'
            scheme['flows'] = {'password': flow}
            flow['tokenUrl'] = auth.get('TokenUrl')
        elif auth_type == 'OpenIDConnect':
            scheme['type'] = 'openIdConnect'
            scheme['openIdConnectUrl'] = auth.get('IssuerUrl')
        else:
            logger.debug("Unknown Authorization type %s", qualified_type)
            return None
        if scheme['type'] == 'oauth2':
            if auth.get('RefreshUrl'):
                flow['refreshUrl'] = auth['RefreshUrl']
            flow['scopes'] = dict(
                (s.get('Scope'), s.get('Description'))
                for s in auth.get('Scopes') or [])
        return scheme

    def security(self, document):
        """Adds the Security Requirement Objects to the document"""
        security_schemes = self.voc.get(
            self.context.container, 'Authorization', 'SecuritySchemes') or []
        if not security_schemes:
            logger.debug("No security schemes defined in the entity "
                         "container")
            return
        document['security'] = [
            {s.get('Authorization'): s.get('RequiredScopes') or []}
            for s in security_schemes]
