#! /usr/bin/env python

import json
import logging
import os
import unittest

from csdl2openapi import extensions
from csdl2openapi.context import Compilation
from csdl2openapi.model import CSDLModel
from csdl2openapi.schemas import SchemaSynthesizer, Suffix


def suite():
    loader = unittest.TestLoader()
    loader.testMethodPrefix = 'test'
    return unittest.TestSuite((
        loader.loadTestsFromTestCase(PrimitiveTests),
        loader.loadTestsFromTestCase(FacetTests),
        loader.loadTestsFromTestCase(TypeTests),
        loader.loadTestsFromTestCase(StructuredTests),
        loader.loadTestsFromTestCase(SharedTests),
        loader.loadTestsFromTestCase(ExtensionTests),
    ))


DATA_DIR = os.path.join(
    os.path.split(
        os.path.abspath(__file__))[0],
    'data_csdl')


def load_csdl(name):
    with open(os.path.join(DATA_DIR, name), 'rb') as f:
        return json.loads(f.read().decode('utf-8'))


def synthesizer(name='catalog.json', version='4.01'):
    model = CSDLModel(load_csdl(name))
    return SchemaSynthesizer(Compilation(model, version))


class PrimitiveTests(unittest.TestCase):

    def setUp(self):        # noqa
        self.s = synthesizer()

    def test_string(self):
        self.assertTrue(self.s.get_schema({}) == {'type': 'string'})
        self.assertTrue(self.s.get_schema(
            {'$Type': 'Edm.String', '$MaxLength': 10}) ==
            {'type': 'string', 'maxLength': 10})

    def test_integers(self):
        self.assertTrue(self.s.get_schema({'$Type': 'Edm.Int32'}) ==
                        {'type': 'integer', 'format': 'int32'})
        self.assertTrue(self.s.get_schema({'$Type': 'Edm.Byte'}) ==
                        {'type': 'integer', 'format': 'uint8'})
        self.assertTrue(self.s.get_schema({'$Type': 'Edm.Int64'}) == {
            'anyOf': [{'type': 'integer', 'format': 'int64'},
                      {'type': 'string'}],
            'example': "42"})

    def test_binary(self):
        self.assertTrue(self.s.get_schema(
            {'$Type': 'Edm.Binary', '$MaxLength': 10}) ==
            {'type': 'string', 'format': 'base64url', 'maxLength': 14})

    def test_decimal(self):
        s = self.s.get_schema(
            {'$Type': 'Edm.Decimal', '$Precision': 5, '$Scale': 0})
        self.assertTrue(s == {
            'anyOf': [{'type': 'number', 'format': 'decimal',
                       'multipleOf': 1, 'maximum': 99999,
                       'minimum': -99999},
                      {'type': 'string'}],
            'example': 0,
            'x-sap-precision': 5,
            'x-sap-scale': 0}, s)
        # no limits for large precision
        s = self.s.get_schema(
            {'$Type': 'Edm.Decimal', '$Precision': 20, '$Scale': 0})
        self.assertFalse('maximum' in s['anyOf'][0])
        # floating scale
        s = self.s.get_schema({'$Type': 'Edm.Decimal', '$Scale': 'floating'})
        self.assertTrue(s == {
            'anyOf': [{'type': 'number', 'format': 'decimal'},
                      {'type': 'string'}],
            'example': 0}, s)

    def test_temporal(self):
        s = self.s.get_schema({'$Type': 'Edm.DateTimeOffset'})
        self.assertTrue(s['example'] == '2017-04-13T15:51:04Z')
        s = self.s.get_schema({'$Type': 'Edm.DateTimeOffset',
                               '$Precision': 3})
        self.assertTrue(s['example'] == '2017-04-13T15:51:04.000Z')
        self.assertTrue(self.s.get_schema({'$Type': 'Edm.Date'}) == {
            'type': 'string', 'format': 'date', 'example': '2017-04-13'})

    def test_unknown(self):
        with self.assertLogs('csdl2openapi', level='DEBUG'):
            s = self.s.get_schema({'$Type': 'Edm.Unknown'})
        self.assertTrue(s == {})

    def test_geo(self):
        s = self.s.get_schema({'$Type': 'Edm.GeographyPoint'})
        self.assertTrue(s == {'$ref': '#/components/schemas/geoPoint'})
        schemas = self.s.get_schemas()
        self.assertTrue(schemas['geoPoint']['required'] ==
                        ['type', 'coordinates'])
        self.assertTrue(schemas['geoPosition']['minItems'] == 2)

    def test_stream(self):
        s = self.s.get_schema({'$Type': 'Edm.Stream'})
        self.assertTrue(s == {'type': 'string', 'format': 'base64url'})


class FacetTests(unittest.TestCase):

    def setUp(self):        # noqa
        self.s = synthesizer()

    def test_nullable(self):
        self.assertTrue(self.s.get_schema(
            {'$Type': 'Edm.Int32', '$Nullable': True}) ==
            {'type': 'integer', 'format': 'int32', 'nullable': True})
        self.assertTrue(self.s.get_schema(
            {'$Type': 'CatalogService.Address', '$Nullable': True}) ==
            {'allOf': [{'$ref': '#/components/schemas/'
                        'CatalogService.Address'}],
             'nullable': True})

    def test_default(self):
        s = self.s.get_schema({'$Type': 'Edm.Boolean',
                               '$DefaultValue': False})
        self.assertTrue(s == {'type': 'boolean', 'default': False})

    def test_collection(self):
        s = self.s.get_schema({'$Type': 'Edm.Int32', '$Collection': True,
                               '@Core.Description': 'Counts'})
        self.assertTrue(s == {
            'type': 'array',
            'items': {'type': 'integer', 'format': 'int32'},
            'description': 'Counts'})

    def test_description(self):
        element = {'@Core.Description': 'Short',
                   '@Core.LongDescription': 'Long'}
        self.assertTrue(self.s.get_schema(element)['description'] == 'Long')
        self.assertFalse('description' in self.s.get_schema(
            element, for_parameter=True))

    def test_allowed_values(self):
        s = self.s.get_schema({'@Validation.AllowedValues': [
            {'Value': 'a'}, {'Value': 'b'}]})
        self.assertTrue(s == {'type': 'string', 'enum': ['a', 'b']})

    def test_ref_keywords(self):
        ref = {'$ref': '#/components/schemas/CatalogService.Address'}
        s = self.s.get_schema({
            '$Type': 'CatalogService.Address',
            '@Validation.AllowedValues': [{'Value': 'a'}]})
        self.assertTrue(s == {'allOf': [ref], 'enum': ['a']}, s)
        s = self.s.get_schema({
            '$Type': 'CatalogService.Address',
            '@ODM.oidReference': {'entityName': 'Address'}})
        self.assertTrue(s == {
            'allOf': [ref],
            'x-sap-odm-oid-reference-entity-name': 'Address'}, s)
        s = self.s.get_schema({
            '$Type': 'CatalogService.Address',
            '@EntityRelationship.reference': 'street'})
        self.assertTrue(s == {
            'allOf': [ref],
            'x-entity-relationship-reference': 'street'}, s)
        self.assertTrue(self.s.get_schema(
            {'$Type': 'CatalogService.Address'}) == ref)

    def test_pattern(self):
        s = self.s.get_schema({'@Validation.Pattern': '^[a-z]+$'})
        self.assertTrue(s == {'type': 'string', 'pattern': '^[a-z]+$'})

    def test_bounds(self):
        s = self.s.get_schema({
            '$Type': 'Edm.Int32',
            '@Validation.Maximum': 10,
            '@Validation.Maximum@Validation.Exclusive': True,
            '@Validation.Minimum': 0})
        self.assertTrue(s == {'type': 'integer', 'format': 'int32',
                              'maximum': 10, 'exclusiveMaximum': True,
                              'minimum': 0}, s)
        s = self.s.get_schema({
            '$Type': 'Edm.Decimal', '@Validation.Minimum': 1})
        self.assertTrue(s['anyOf'][0]['minimum'] == 1)
        self.assertFalse('minimum' in s)

    def test_function_parameter(self):
        s = self.s.get_schema({}, for_parameter=True, for_function=True)
        self.assertTrue(s == {'type': 'string', 'pattern': "^'([^']|'')*'$"})
        s = self.s.get_schema({'$Nullable': True}, for_parameter=True,
                              for_function=True)
        self.assertTrue(s == {'type': 'string', 'nullable': True,
                              'default': 'null',
                              'pattern': "^(null|'([^']|'')*')$"}, s)
        s = self.s.get_schema({'$Type': 'Edm.Duration'},
                              for_parameter=True, for_function=True)
        self.assertTrue(s['example'] == "'P4DT15H51M04S'")
        s = self.s.get_schema({'$Type': 'Edm.Date'},
                              for_parameter=True, for_function=True)
        self.assertTrue(s['example'] == '2017-04-13')
        s = self.s.get_schema({'@Validation.Pattern': '^[a-z]+$'},
                              for_parameter=True, for_function=True)
        self.assertTrue(s['pattern'] == "^'([a-z]+)'$")


class TypeTests(unittest.TestCase):

    def setUp(self):        # noqa
        self.s = synthesizer('types.json')

    def test_ref(self):
        self.assertTrue(self.s.ref('lib.Animal') ==
                        {'$ref': '#/components/schemas/TypeLibrary.Animal'})
        self.assertTrue(self.s.ref('lib.Animal', Suffix.create) ==
                        {'$ref': '#/components/schemas/'
                         'TypeLibrary.Animal-create'})
        self.assertTrue(self.s.context.required == [
            ('TypeLibrary', 'Animal', ''),
            ('TypeLibrary', 'Animal', '-create')])
        # recorded once only
        self.s.ref('TypeLibrary.Animal')
        self.assertTrue(len(self.s.context.required) == 2)

    def test_external_ref(self):
        self.assertTrue(self.s.ref('shared.Person') == {
            '$ref': 'https://example.com/Shared.openapi3.json'
            '#/components/schemas/Shared.Types.Person'})
        self.assertTrue(self.s.context.required == [])

    def test_type_definition(self):
        s = self.s.get_schema({'$Type': 'lib.Name'})
        self.assertTrue(s == {'$ref': '#/components/schemas/TypeLibrary.Name'})
        schemas = self.s.get_schemas()
        self.assertTrue(schemas['TypeLibrary.Name'] == {
            'type': 'string', 'maxLength': 40, 'title': 'Name',
            'description': 'A short name'})

    def test_enumeration(self):
        self.s.ref('lib.Color')
        schemas = self.s.get_schemas()
        self.assertTrue(schemas == {
            'TypeLibrary.Color': {
                'type': 'string',
                'title': 'Color',
                'enum': ['Red', 'Green', 'Blue']}})

    def test_derived(self):
        self.s.ref('lib.Animal')
        schemas = self.s.get_schemas()
        self.assertTrue(list(schemas.keys()) == [
            'TypeLibrary.Animal', 'TypeLibrary.Cat', 'TypeLibrary.Color',
            'TypeLibrary.Dog', 'TypeLibrary.Name'])
        animal = schemas['TypeLibrary.Animal']
        self.assertTrue(animal['anyOf'] == [
            {'$ref': '#/components/schemas/TypeLibrary.Dog'},
            {'$ref': '#/components/schemas/TypeLibrary.Cat'},
            {}])
        self.assertTrue(animal['properties']['owner'] == {
            '$ref': 'https://example.com/Shared.openapi3.json'
            '#/components/schemas/Shared.Types.Person'})
        dog = schemas['TypeLibrary.Dog']
        self.assertTrue(list(dog['properties'].keys()) ==
                        ['ID', 'name', 'color', 'owner', 'barks'])
        self.assertFalse('anyOf' in dog)
        # no container, no shared schemas
        self.assertFalse('count' in schemas)
        self.assertFalse('error' in schemas)

    def test_abstract(self):
        csdl = load_csdl('types.json')
        csdl['TypeLibrary']['Animal']['$Abstract'] = True
        s = SchemaSynthesizer(Compilation(CSDLModel(csdl)))
        s.ref('lib.Animal')
        schemas = s.get_schemas()
        self.assertTrue(len(schemas['TypeLibrary.Animal']['anyOf']) == 2)


class StructuredTests(unittest.TestCase):

    def setUp(self):        # noqa
        self.s = synthesizer()

    def test_read(self):
        self.s.ref('CatalogService.Orders')
        schemas = self.s.get_schemas()
        self.assertTrue(list(schemas.keys()) == [
            'CatalogService.Address', 'CatalogService.Customers',
            'CatalogService.Items', 'CatalogService.Orders',
            'count', 'error'])
        orders = schemas['CatalogService.Orders']
        self.assertTrue(orders['title'] == 'Orders')
        self.assertTrue(list(orders['properties'].keys()) == [
            'ID', 'title', 'createdAt', 'items', 'items@count', 'customer'])
        self.assertTrue(orders['properties']['title'] == {
            'type': 'string', 'maxLength': 100,
            'description': 'Order title'})
        self.assertTrue(orders['properties']['createdAt']['example'] ==
                        '2017-04-13T15:51:04.0000000Z')
        self.assertTrue(orders['properties']['items'] == {
            'type': 'array',
            'items': {'$ref': '#/components/schemas/CatalogService.Items'}})
        self.assertTrue(orders['properties']['items@count'] ==
                        {'$ref': '#/components/schemas/count'})
        self.assertTrue(orders['properties']['customer'] == {
            'allOf': [{'$ref': '#/components/schemas/'
                       'CatalogService.Customers'}],
            'nullable': True})
        self.assertFalse('required' in orders)

    def test_count_4_0(self):
        s = synthesizer(version='4.0')
        s.ref('CatalogService.Orders')
        orders = s.get_schemas()['CatalogService.Orders']
        self.assertTrue('items@odata.count' in orders['properties'])

    def test_not_countable(self):
        csdl = load_csdl('catalog.json')
        csdl['CatalogService']['EntityContainer']['Orders'][
            '@Capabilities.CountRestrictions'] = {'Countable': False}
        s = SchemaSynthesizer(Compilation(CSDLModel(csdl)))
        s.ref('CatalogService.Orders')
        orders = s.get_schemas()['CatalogService.Orders']
        self.assertFalse('items@count' in orders['properties'])

    def test_create(self):
        self.s.ref('CatalogService.Orders', Suffix.create)
        schemas = self.s.get_schemas()
        orders = schemas['CatalogService.Orders-create']
        self.assertTrue(orders['title'] == 'Orders (for create)')
        self.assertTrue(list(orders['properties'].keys()) ==
                        ['ID', 'title', 'items'])
        self.assertTrue(orders['properties']['items'] == {
            'type': 'array',
            'items': {'$ref': '#/components/schemas/'
                      'CatalogService.Items-create'}})
        self.assertTrue(orders['required'] == ['ID', 'title'])
        self.assertTrue('CatalogService.Items-create' in schemas)
        self.assertFalse('CatalogService.Customers-create' in schemas)

    def test_update(self):
        self.s.ref('CatalogService.Orders', Suffix.update)
        schemas = self.s.get_schemas()
        orders = schemas['CatalogService.Orders-update']
        self.assertTrue(orders['title'] == 'Orders (for update)')
        self.assertTrue(list(orders['properties'].keys()) ==
                        ['title', 'items'])
        self.assertFalse('required' in orders)

    def test_read_only(self):
        csdl = load_csdl('catalog.json')
        orders = csdl['CatalogService']['Orders']
        orders['title']['@Core.Permissions'] = {
            '$EnumMember': 'Core.Permission/Read'}
        orders['ID']['@Core.Immutable'] = True
        s = SchemaSynthesizer(Compilation(CSDLModel(csdl)))
        s.ref('CatalogService.Orders', Suffix.create)
        create = s.get_schemas()['CatalogService.Orders-create']
        self.assertTrue(list(create['properties'].keys()) == ['ID', 'items'])
        self.assertTrue(create['required'] == ['ID'])

    def test_mandatory_computed(self):
        csdl = load_csdl('catalog.json')
        csdl['CatalogService']['Orders']['title']['@Core.Computed'] = True
        s = SchemaSynthesizer(Compilation(CSDLModel(csdl)))
        s.ref('CatalogService.Orders', Suffix.create)
        create = s.get_schemas()['CatalogService.Orders-create']
        self.assertFalse('title' in create['properties'])
        self.assertTrue(create['required'] == ['ID'])


class SharedTests(unittest.TestCase):

    def test_parameters(self):
        s = synthesizer()
        params = s.get_parameters()
        self.assertTrue(list(params.keys()) ==
                        ['count', 'search', 'skip', 'top'])
        self.assertTrue(params['top']['name'] == '$top')
        self.assertTrue(params['top']['example'] == 50)
        self.assertTrue(params['skip']['schema'] ==
                        {'type': 'integer', 'minimum': 0})

    def test_error(self):
        s = synthesizer()
        error = s.error()['properties']['error']
        self.assertTrue(error['required'] == ['code', 'message'])
        self.assertTrue(error['properties']['message'] == {'type': 'string'})
        self.assertTrue('details' in error['properties'])
        s = synthesizer(version='2.0')
        error = s.error()['properties']['error']
        self.assertTrue(list(error['properties'].keys()) ==
                        ['code', 'message', 'innererror'])
        self.assertTrue(error['properties']['message']['required'] ==
                        ['lang', 'value'])

    def test_count(self):
        s = synthesizer()
        self.assertTrue(s.count()['anyOf'] ==
                        [{'type': 'number'}, {'type': 'string'}])


class ExtensionTests(unittest.TestCase):

    def test_names(self):
        self.assertTrue(extensions.extension_name('x-sap-foo') == 'x-sap-foo')
        self.assertTrue(extensions.extension_name('sap-foo') == 'x-sap-foo')
        self.assertTrue(extensions.extension_name('foo') == 'x-sap-foo')

    def test_openapi_extensions(self):
        result = extensions.openapi_extensions({
            '@OpenAPI.Extensions.stateInfo.state': 'Active',
            '@OpenAPI.Extensions.stateInfo.color': 'red',
            '@OpenAPI.Extensions.direction': 'sideways',
            '@OpenAPI.Extensions.api-type': 'GRAPHQL',
            '@OpenAPI.Extensions.sap-custom': 1,
            '@Core.Description': 'ignored'})
        self.assertTrue(result == {
            'x-sap-stateInfo': {'state': 'Active'},
            'x-sap-direction': 'inbound',
            'x-sap-custom': 1}, result)
        self.assertTrue(extensions.openapi_extensions(None) == {})

    def test_schema_extensions(self):
        csdl = load_csdl('catalog.json')
        customers = csdl['CatalogService']['Customers']
        customers['@OpenAPI.Extensions.odm-semantic-key'] = {
            'name': 'ID', 'other': 1}
        customers['@ODM.entityName'] = 'Customer'
        s = SchemaSynthesizer(Compilation(CSDLModel(csdl)))
        schemas = s.get_schemas()
        # extensions alone create the schema
        self.assertTrue(schemas['CatalogService.Customers'] == {
            'x-sap-odm-semantic-key': {'name': 'ID'}})
        s.ref('CatalogService.Customers')
        schemas = s.get_schemas()
        customers = schemas['CatalogService.Customers']
        self.assertTrue(customers['x-sap-odm-entity-name'] == 'Customer')
        self.assertTrue(customers['x-sap-odm-semantic-key'] ==
                        {'name': 'ID'})


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG, format="%(levelname)s %(message)s")
    unittest.main()
