#! /usr/bin/env python

import copy
import json
import logging
import os
import unittest

from csdl2openapi import csdl2openapi
from csdl2openapi import document
from csdl2openapi import errors


def suite():
    loader = unittest.TestLoader()
    loader.testMethodPrefix = 'test'
    return unittest.TestSuite((
        loader.loadTestsFromTestCase(DocumentTests),
        loader.loadTestsFromTestCase(InfoTests),
        loader.loadTestsFromTestCase(ServerTests),
        loader.loadTestsFromTestCase(SecurityTests),
    ))


DATA_DIR = os.path.join(
    os.path.split(
        os.path.abspath(__file__))[0],
    'data_csdl')

AUTHORIZATION = {
    "$Include": [
        {"$Namespace": "Org.OData.Authorization.V1",
         "$Alias": "Authorization"}
    ]
}


def load_csdl(name='catalog.json'):
    with open(os.path.join(DATA_DIR, name), 'rb') as f:
        return json.loads(f.read().decode('utf-8'))


class DocumentTests(unittest.TestCase):

    def test_layout(self):
        openapi = csdl2openapi(load_csdl())
        self.assertTrue(list(openapi.keys()) == [
            'openapi', 'info', 'x-sap-api-type', 'x-odata-version',
            'x-sap-shortText', 'servers', 'tags', 'paths', 'components'])
        self.assertTrue(openapi['openapi'] == '3.0.2')
        self.assertTrue(openapi['x-sap-api-type'] == 'ODATAV4')
        self.assertTrue(openapi['x-odata-version'] == '4.01')
        self.assertTrue(list(openapi['components'].keys()) ==
                        ['schemas', 'parameters', 'responses'])
        self.assertTrue(openapi['components']['responses']['error'][
            'content']['application/json']['schema'] ==
            {'$ref': '#/components/schemas/error'})

    def test_paths(self):
        openapi = csdl2openapi(load_csdl())
        self.assertTrue(list(openapi['paths'].keys()) == [
            "/$batch", "/Customers", "/Customers({ID})", "/Items",
            "/Items('{ID}')", "/Orders", "/Orders({ID})",
            "/Orders({ID})/CatalogService.cancel", "/Orders({ID})/customer",
            "/Orders({ID})/items", "/Orders({ID})/items('{ID_1}')",
            "/Orders/CatalogService.totals", "/submit", "/topOrders"])
        openapi = csdl2openapi(load_csdl(), odata_version='4.0')
        self.assertTrue(openapi['x-odata-version'] == '4.0')
        self.assertTrue('/topOrders(count={count},region={region})' in
                        openapi['paths'])

    def test_schemas(self):
        openapi = csdl2openapi(load_csdl())
        schemas = openapi['components']['schemas']
        self.assertTrue(list(schemas.keys()) == [
            'CatalogService.Address', 'CatalogService.Address-create',
            'CatalogService.Address-update', 'CatalogService.Customers',
            'CatalogService.Customers-create',
            'CatalogService.Customers-update',
            'CatalogService.Items', 'CatalogService.Items-create',
            'CatalogService.Items-update', 'CatalogService.Orders',
            'CatalogService.Orders-create', 'CatalogService.Orders-update',
            'count', 'error'], list(schemas.keys()))

    def test_unchanged(self):
        csdl = load_csdl()
        before = copy.deepcopy(csdl)
        csdl2openapi(csdl)
        self.assertTrue(csdl == before)

    def test_deterministic(self):
        first = json.dumps(csdl2openapi(load_csdl()))
        second = json.dumps(csdl2openapi(load_csdl()))
        self.assertTrue(first == second)

    def test_tags(self):
        csdl = load_csdl()
        csdl['CatalogService']['Items']['@Common.Label'] = 'order_items'
        csdl['CatalogService']['EntityContainer']['Orders'][
            '@Core.Description'] = 'All orders'
        openapi = csdl2openapi(csdl)
        self.assertTrue(openapi['tags'] == [
            {'name': 'Customers'},
            {'name': 'order items'},
            {'name': 'Orders', 'description': 'All orders'}])

    def test_no_container(self):
        openapi = csdl2openapi(load_csdl('types.json'))
        self.assertFalse('servers' in openapi)
        self.assertFalse('tags' in openapi)
        self.assertTrue(openapi['paths'] == {})
        self.assertTrue(openapi['components'] == {'schemas': {}})
        self.assertTrue(openapi['info']['description'] == '')

    def test_extensions(self):
        csdl = load_csdl()
        schema = csdl['CatalogService']
        schema['@OpenAPI.Extensions.compliance-level'] = 'sap:core:v1'
        schema['@OpenAPI.externalDocs.url'] = 'https://example.com/docs'
        schema['@OpenAPI.externalDocs.description'] = 'More'
        openapi = csdl2openapi(csdl)
        self.assertTrue(openapi['x-sap-compliance-level'] == 'sap:core:v1')
        self.assertTrue(openapi['externalDocs'] == {
            'description': 'More', 'url': 'https://example.com/docs'})

    def test_auto_exposed(self):
        csdl = load_csdl()
        schema = csdl['CatalogService']
        schema['Country'] = {
            '$Kind': 'EntityType',
            '$Key': ['code'],
            'code': {'$Nullable': False},
            '@cds.autoexpose': True
        }
        schema['EntityContainer']['Countries'] = {
            '$Collection': True, '$Type': 'CatalogService.Country'}
        paths = csdl2openapi(csdl)['paths']
        self.assertTrue(list(paths['/Countries'].keys()) == ['get'])
        self.assertTrue(list(paths["/Countries('{code}')"].keys()) ==
                        ['parameters', 'get'])
        # entity sets named after their type are not auto-exposed
        self.assertTrue('post' in paths['/Orders'])


class InfoTests(unittest.TestCase):

    def test_info(self):
        openapi = csdl2openapi(load_csdl())
        self.assertTrue(openapi['info'] == {
            'title': 'Catalog',
            'description':
                'Orders, their items and the customers who placed them.',
            'version': '1.2.0'})
        self.assertTrue(openapi['x-sap-shortText'] == 'Catalog of orders')

    def test_container_description(self):
        csdl = load_csdl()
        csdl['CatalogService']['EntityContainer'][
            '@Core.Description'] = 'The catalog'
        openapi = csdl2openapi(csdl)
        # the schema's long description comes first
        self.assertTrue(openapi['info']['description'] ==
                        'Orders, their items and the customers who placed '
                        'them.')
        self.assertTrue(openapi['x-sap-shortText'] == 'The catalog')

    def test_placeholders(self):
        csdl = load_csdl()
        schema = csdl['CatalogService']
        del schema['@Core.Description']
        del schema['@Core.LongDescription']
        del schema['@Core.SchemaVersion']
        del schema['EntityContainer']['@Common.Label']
        openapi = csdl2openapi(csdl)
        self.assertTrue(openapi['info'] == {
            'title': document.TITLE_PLACEHOLDER,
            'description': document.DESCRIPTION_PLACEHOLDER,
            'version': ''})
        self.assertTrue(openapi['x-sap-shortText'] ==
                        document.SHORT_TEXT_PLACEHOLDER)

    def test_diagram(self):
        openapi = csdl2openapi(load_csdl(), diagram=True)
        description = openapi['info']['description']
        self.assertTrue(description.startswith(
            'Orders, their items and the customers who placed them.'
            '\n\n## Entity Data Model\n'))


class ServerTests(unittest.TestCase):

    def test_default(self):
        openapi = csdl2openapi(load_csdl())
        self.assertTrue(openapi['servers'] ==
                        [{'url': 'https://localhost/service-root'}])
        openapi = csdl2openapi(load_csdl(), scheme='http',
                               host='example.com:8080', base_path='/odata')
        self.assertTrue(openapi['servers'] ==
                        [{'url': 'http://example.com:8080/odata'}])

    def test_url(self):
        openapi = csdl2openapi(load_csdl(), url='https://example.com/x')
        self.assertTrue(openapi['servers'] ==
                        [{'url': 'https://example.com/x'}])

    def test_servers(self):
        openapi = csdl2openapi(
            load_csdl(), servers='[{"url": "https://a"}, {"url": "/b"}]')
        self.assertTrue(openapi['servers'] ==
                        [{'url': 'https://a'}, {'url': '/b'}])

    def test_invalid(self):
        try:
            csdl2openapi(load_csdl(), servers='[{"url": ')
            self.fail("servers not JSON")
        except errors.ServersError as err:
            self.assertTrue(str(err) == errors.Messages.servers_invalid)
        # the override is JSON text, not a decoded list
        try:
            csdl2openapi(load_csdl(), servers=[{"url": "https://a"}])
            self.fail("servers not text")
        except errors.ServersError as err:
            self.assertTrue(str(err) == errors.Messages.servers_invalid)
        for servers in ('{"url": "https://a"}', '[]', '"https://a"'):
            try:
                csdl2openapi(load_csdl(), servers=servers)
                self.fail("servers not array: %s" % servers)
            except errors.ServersError as err:
                self.assertTrue(str(err) == errors.Messages.servers_not_array)
        self.assertTrue(issubclass(errors.ServersError, errors.CompilerError))


class SecurityTests(unittest.TestCase):

    def setUp(self):        # noqa
        self.csdl = load_csdl()
        self.csdl['$Reference'][
            "https://oasis-tcs.github.io/odata-vocabularies/vocabularies/"
            "Org.OData.Authorization.V1.json"] = AUTHORIZATION
        container = self.csdl['CatalogService']['EntityContainer']
        container['@Authorization.Authorizations'] = [
            {"@type": "https://oasis-tcs.github.io/odata-vocabularies/"
             "vocabularies/Org.OData.Authorization.V1.json"
             "#Org.OData.Authorization.V1.OAuth2ClientCredentials",
             "Name": "oauth",
             "Description": "OAuth client credentials",
             "TokenUrl": "https://example.com/token",
             "Scopes": [{"Scope": "read", "Description": "Read access"}]},
            {"@type": "#Org.OData.Authorization.V1.ApiKey",
             "Name": "key",
             "KeyName": "X-API-Key",
             "Location": "Header"},
            {"@type": "#Org.OData.Authorization.V1.Http",
             "Name": "basic",
             "Scheme": "basic"},
            {"@type": "#Org.OData.Authorization.V1.Unknown",
             "Name": "unknown"}
        ]
        container['@Authorization.SecuritySchemes'] = [
            {"Authorization": "oauth", "RequiredScopes": ["read"]},
            {"Authorization": "key"}
        ]

    def test_schemes(self):
        openapi = csdl2openapi(self.csdl)
        self.assertTrue(openapi['components']['securitySchemes'] == {
            'oauth': {
                'description': 'OAuth client credentials',
                'type': 'oauth2',
                'flows': {
                    'clientCredentials': {
                        'tokenUrl': 'https://example.com/token',
                        'scopes': {'read': 'Read access'}}}},
            'key': {'type': 'apiKey', 'name': 'X-API-Key', 'in': 'header'},
            'basic': {'type': 'http', 'scheme': 'basic',
                      'bearerFormat': None}})

    def test_requirements(self):
        openapi = csdl2openapi(self.csdl)
        self.assertTrue(openapi['security'] == [{'oauth': ['read']},
                                                {'key': []}])

    def test_no_security(self):
        openapi = csdl2openapi(load_csdl())
        self.assertFalse('security' in openapi)
        self.assertFalse('securitySchemes' in openapi['components'])


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG, format="%(levelname)s %(message)s")
    unittest.main()
