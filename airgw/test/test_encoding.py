#!/usr/bin/env python

"""Unit tests for airgw.common.types and airgw.common.encoding modules"""



import datetime
import doctest
import unittest

from xml.etree import ElementTree

from airgw.common import encoding
from airgw.common import errors
from airgw.common import types
from airgw.common.types import (Array, Boolean, DateTime, Double, Integer,
                                Request, Response, String, Struct, wrap)


def load_tests(loader, tests, ignore):
    tests.addTests(doctest.DocTestSuite(types))
    tests.addTests(doctest.DocTestSuite(encoding))
    return tests


def value_element(inner_xml):
    return ElementTree.fromstring('<value>{0}</value>'.format(inner_xml))


def response_xml(inner_xml):
    return ('<?xml version="1.0"?><methodResponse>{0}</methodResponse>'
            .format(inner_xml)).encode('utf-8')



class Test_Value_classes(unittest.TestCase):

    def test_equality_needs_same_variant(self):
        self.assertEqual(Integer(1), Integer(1))
        self.assertNotEqual(Integer(1), Double(1.0))
        self.assertNotEqual(String('1'), Integer(1))
        self.assertNotEqual(Boolean(True), Integer(1))
        self.assertNotEqual(Array([String('a')]), Struct({'a': String('a')}))


    def test_struct_members(self):
        struct = Struct([('b', Integer(1)), ('a', Integer(2)),
                         ('b', Integer(3))])
        self.assertEqual(list(struct), ['b', 'a'])
        self.assertEqual(struct['b'], Integer(3))
        self.assertTrue('a' in struct)
        self.assertEqual(struct.get('c'), None)
        self.assertEqual(len(struct), 2)


    def test_bad_items(self):
        self.assertRaises(TypeError, Array, [1, 2])
        self.assertRaises(TypeError, Struct, {'a': 'plain string'})
        self.assertRaises(TypeError, Struct, [(1, Integer(1))])
        self.assertRaises(TypeError, DateTime, '20110102T15:30:15')
        self.assertRaises(TypeError, Request, 'GetBalanceAndDate', ['x'])


    def test_wrap_and_to_python(self):
        when = datetime.datetime(2011, 1, 2, 15, 30, 15)
        data = {
            'subscriberNumber': '1234567890',
            'flags': 0,
            'rate': 0.5,
            'active': True,
            'expiry': when,
            'offers': [1, 2],
        }
        value = wrap(data)
        self.assertEqual(value['flags'], Integer(0))
        self.assertEqual(value['rate'], Double(0.5))
        self.assertEqual(value['active'], Boolean(True))
        self.assertEqual(value['expiry'], DateTime(when))
        self.assertEqual(value['offers'], Array([Integer(1), Integer(2)]))
        self.assertEqual(value.to_python(), data)
        self.assertRaises(errors.RPCEncodeError, wrap, object())


    def test_response(self):
        success = Response.success(Integer(1))
        fault = Response.fault(102, 'INSUFFICIENT_BALANCE')
        self.assertFalse(success.is_fault)
        self.assertTrue(fault.is_fault)
        self.assertEqual(success.to_python(), {'responseCode': 0, 'data': 1})
        self.assertEqual(fault.to_python(),
                         {'responseCode': 102,
                          'responseMessage': 'INSUFFICIENT_BALANCE'})



class Test_encode_decode_functions(unittest.TestCase):

    def setUp(self):
        self.tree = Struct([
            ('subscriberNumber', String('1234567890')),
            ('balance', Integer(10000)),
            ('rate', Double(0.15)),
            ('big', Integer(0xFFFFFFFF)),
            ('active', Boolean(False)),
            ('padded', String('  spaces kept  ')),
            ('empty', String('')),
            ('expiry', DateTime(datetime.datetime(2011, 1, 2, 15, 30, 15))),
            ('stamp', DateTime(datetime.datetime(
                2011, 1, 2, 15, 30, 15, 30101,
                tzinfo=datetime.timezone.utc))),
            ('offers', Array([
                Struct([('offerId', Integer(1))]),
                Struct([('offerId', Integer(2)), ('offerType', Integer(0))]),
            ])),
            ('nothing', Array()),
            ('nested', Struct()),
        ])


    def test_round_trip(self):
        self.assertEqual(encoding.decode(encoding.encode(self.tree)),
                         self.tree)
        for value in self.tree.value.values():
            self.assertEqual(encoding.decode(encoding.encode(value)), value)


    def test_encoding(self):
        element = encoding.encode(Array([Boolean(True), Integer(-5),
                                         Double(2.5)]))
        self.assertEqual(
            ElementTree.tostring(element, encoding='unicode'),
            '<value><array><data>'
            '<value><boolean>1</boolean></value>'
            '<value><int>-5</int></value>'
            '<value><double>2.5</double></value>'
            '</data></array></value>')


    def test_struct_keeps_member_order(self):
        element = encoding.encode(self.tree)
        names = [name.text for name in element.iter('name')][:3]
        self.assertEqual(names, ['subscriberNumber', 'balance', 'rate'])


    def test_encoding_errors(self):
        self.assertRaises(errors.RPCEncodeError, encoding.encode,
                          Double(float('nan')))
        self.assertRaises(errors.RPCEncodeError, encoding.encode,
                          Double(float('inf')))
        self.assertRaises(errors.RPCEncodeError, encoding.encode, 'plain')
        self.assertRaises(errors.RPCEncodeError, encoding.encode,
                          Array([None]))


    def test_characters_xml_cannot_hold(self):
        for text in ['a\x01b', '\x00', 'tab\x0bbed', '\x1f', '\ud800']:
            self.assertRaises(errors.RPCEncodeError, encoding.encode,
                              String(text))
        self.assertRaises(errors.RPCEncodeError, encoding.encode,
                          Struct({'bad\x0cname': Integer(1)}))
        self.assertRaises(errors.RPCEncodeError, encoding.dumps_call,
                          Request('X', [String('a\x01b')]))
        self.assertRaises(errors.RPCEncodeError, encoding.dumps_call,
                          Request('Get\x02Balance'))
        # tab, newline and non-ASCII text are fine
        request = Request('X', [String('a\tb\nc ż\U0001f600')])
        self.assertEqual(encoding.loads_call(encoding.dumps_call(request)),
                         request)


    def test_early_years(self):
        for year in (1, 999, 1000):
            value = DateTime(datetime.datetime(year, 1, 2, 15, 30, 15))
            self.assertEqual(encoding.decode(encoding.encode(value)), value)
        element = encoding.encode(
            DateTime(datetime.datetime(999, 1, 2, 15, 30, 15)))
        self.assertEqual(element.find('dateTime.iso8601').text,
                         '09990102T15:30:15')


    def test_integer_tag_spellings(self):
        self.assertEqual(encoding.decode(value_element('<int> 42 </int>')),
                         Integer(42))
        self.assertEqual(encoding.decode(value_element('<i4>42</i4>')),
                         Integer(42))


    def test_tag_precedence(self):
        element = value_element('<int>1</int><string>1</string>')
        self.assertEqual(encoding.decode(element), String('1'))


    def test_untagged_value(self):
        self.assertEqual(encoding.decode(value_element('')), None)
        self.assertEqual(encoding.decode(value_element('<nil/>')), None)
        self.assertEqual(encoding.decode(value_element('bare text')), None)


    def test_boolean_spellings(self):
        for text, expected in [('1', True), ('0', False),
                               ('true', True), ('false', False)]:
            element = value_element('<boolean>{0}</boolean>'.format(text))
            self.assertEqual(encoding.decode(element), Boolean(expected))


    def test_datetime_spellings(self):
        utc = datetime.timezone.utc
        cases = [
            ('20110102T15:30:15',
             datetime.datetime(2011, 1, 2, 15, 30, 15)),
            ('20110102T15:30:15+0000',
             datetime.datetime(2011, 1, 2, 15, 30, 15, tzinfo=utc)),
            ('2011-01-02T15:30:15.000Z',
             datetime.datetime(2011, 1, 2, 15, 30, 15, tzinfo=utc)),
        ]
        for text, expected in cases:
            element = value_element(
                '<dateTime.iso8601>{0}</dateTime.iso8601>'.format(text))
            self.assertEqual(encoding.decode(element), DateTime(expected))


    def test_singleton_struct_and_duplicates(self):
        single = value_element('<struct><member><name>a</name>'
                               '<value><int>1</int></value></member></struct>')
        self.assertEqual(encoding.decode(single), Struct({'a': Integer(1)}))

        duplicated = value_element(
            '<struct>'
            '<member><name>a</name><value><int>1</int></value></member>'
            '<member><name>b</name><value><int>2</int></value></member>'
            '<member><name>a</name><value><int>3</int></value></member>'
            '</struct>')
        decoded = encoding.decode(duplicated)
        self.assertEqual(decoded, Struct([('a', Integer(3)),
                                          ('b', Integer(2))]))
        self.assertEqual(list(decoded), ['a', 'b'])


    def test_empty_containers(self):
        self.assertEqual(encoding.decode(value_element('<array/>')), Array())
        self.assertEqual(encoding.decode(value_element('<array><data/></array>')),
                         Array())
        self.assertEqual(encoding.decode(value_element('<struct/>')), Struct())


    def test_decoding_errors(self):
        for inner in ['<int>x</int>', '<double>1,5</double>',
                      '<boolean>yes</boolean>',
                      '<dateTime.iso8601>soon</dateTime.iso8601>',
                      '<struct><member><value><int>1</int></value>'
                      '</member></struct>']:
            with self.assertRaises(errors.RPCProtocolDecodeError) as cm:
                encoding.decode(value_element(inner))
            self.assertTrue(cm.exception.fragment)



class Test_envelope_functions(unittest.TestCase):

    def test_call_round_trip(self):
        request = Request('GetBalanceAndDate', [
            Struct([('subscriberNumber', String('1234567890')),
                    ('requestedInformationFlags', Integer(0))]),
        ])
        body = encoding.dumps_call(request)
        self.assertTrue(body.startswith(b'<?xml'))
        self.assertEqual(encoding.loads_call(body), request)


    def test_success_response(self):
        data = Struct([('subscriberNumber', String('1234567890')),
                       ('balance', Integer(10000))])
        response = encoding.loads_response(encoding.dumps_response(data))
        self.assertEqual(response, Response(0, None, data))

        several = encoding.loads_response(
            encoding.dumps_response(Integer(1), String('two')))
        self.assertEqual(several.data, [Integer(1), String('two')])

        empty = encoding.loads_response(response_xml('<params/>'))
        self.assertEqual(empty, Response(0, None, None))


    def test_fault_response(self):
        response = encoding.loads_response(
            encoding.dumps_fault(102, 'INSUFFICIENT_BALANCE'))
        self.assertEqual(response.response_code, 102)
        self.assertEqual(response.response_message, 'INSUFFICIENT_BALANCE')
        self.assertEqual(response.data, None)
        self.assertTrue(response.is_fault)


    def test_fault_defaults(self):
        response = encoding.loads_response(response_xml(
            '<fault><value><struct/></value></fault>'))
        self.assertEqual(response, Response(-1, 'Unknown fault', None))

        response = encoding.loads_response(response_xml(
            '<fault><value><struct><member><name>faultCode</name>'
            '<value><i4>0</i4></value></member></struct></value></fault>'))
        self.assertEqual(response.response_code, -1)
        self.assertTrue(response.is_fault)


    def test_malformed_responses(self):
        for body in [b'not xml at all',
                     b'<methodCall><methodName>x</methodName></methodCall>',
                     response_xml(''),
                     response_xml('<fault/>'),
                     response_xml('<params><param/></params>')]:
            with self.assertRaises(errors.RPCProtocolDecodeError) as cm:
                encoding.loads_response(body)
            self.assertTrue(cm.exception.fragment)
            self.assertTrue(str(cm.exception))


    def test_malformed_calls(self):
        for body in [b'<methodResponse><params/></methodResponse>',
                     b'<methodCall><params/></methodCall>',
                     b'<methodCall><methodName/></methodCall>']:
            self.assertRaises(errors.RPCProtocolDecodeError,
                              encoding.loads_call, body)


if __name__ == '__main__':
    unittest.main(testRunner=unittest.TextTestRunner(verbosity=2))
