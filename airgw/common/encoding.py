# airgw/common/encoding.py

"""XML-RPC codec: value trees <-> XML elements, plus envelope helpers.

Values (see: airgw.common.types) are encoded into <value> elements:

    >>> from xml.etree import ElementTree
    >>> ElementTree.tostring(encode(Struct({'balance': Integer(10000)})))
    b'<value><struct><member><name>balance</name><value><int>10000</int></value></member></struct></value>'

and decoded back with decode(). Envelopes:

* dumps_call(request) -> bytes, loads_response(body) -> Response
  (used by node clients);

* loads_call(body) -> Request, dumps_response(*values) -> bytes,
  dumps_fault(code, message) -> bytes (used by the lab simulator).

Malformed documents raise RPCProtocolDecodeError (carrying the offending
fragment); a <fault> is *not* an error -- it is decoded into a Response
with non-zero response_code.

"""


import datetime
import math
import re

from xml.etree import ElementTree

from .const import UNKNOWN_FAULT_CODE, UNKNOWN_FAULT_STRING
from .errors import RPCEncodeError, RPCProtocolDecodeError
from .types import (Array, Boolean, DateTime, Double, Integer, Request,
                    Response, String, Struct, Value)


ISO8601_FORMAT = '%Y%m%dT%H:%M:%S'
ISO8601_FORMAT_FRACTION = '%Y%m%dT%H:%M:%S.%f'

ISO8601_FORMATS = (
    ISO8601_FORMAT_FRACTION + '%z',
    ISO8601_FORMAT + '%z',
    ISO8601_FORMAT_FRACTION,
    ISO8601_FORMAT,
)

FRAGMENT_MAX_LENGTH = 512

# characters outside of the XML 1.0 Char production
_XML_INVALID_CHAR = re.compile(
        '[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')



#
# Scalars
#

def format_datetime(dt):

    """Format a datetime in the compact ISO-8601 form used by AIR nodes

    >>> format_datetime(datetime.datetime(2011, 1, 2, 15, 30, 15))
    '20110102T15:30:15'
    >>> format_datetime(datetime.datetime(2011, 1, 2, 15, 30, 15, 30101,
    ...                                   tzinfo=datetime.timezone.utc))
    '20110102T15:30:15.030101+0000'
    >>> format_datetime(datetime.datetime(999, 1, 2, 15, 30, 15))
    '09990102T15:30:15'
    """

    fmt = ISO8601_FORMAT_FRACTION if dt.microsecond else ISO8601_FORMAT
    if dt.utcoffset() is not None:
        fmt += '%z'
    # strftime() does not zero-pad years below 1000 on every platform
    return '{0:04d}'.format(dt.year) + dt.strftime(fmt[len('%Y'):])


def parse_datetime(text):

    """Parse compact or extended ISO-8601 date-time

    >>> parse_datetime('20110102T15:30:15')
    datetime.datetime(2011, 1, 2, 15, 30, 15)
    >>> parse_datetime('2011-01-02T15:30:15.000Z')
    datetime.datetime(2011, 1, 2, 15, 30, 15, tzinfo=datetime.timezone.utc)
    """

    text = text.strip()
    for fmt in ISO8601_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt)
        except ValueError:
            continue
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.datetime.fromisoformat(text)


def parse_boolean(text):
    text = text.strip().lower()
    if text in ('1', 'true'):
        return True
    if text in ('0', 'false'):
        return False
    raise ValueError('invalid boolean: {0!r}'.format(text))



#
# Values
#

def _check_chars(text):
    match = _XML_INVALID_CHAR.search(text)
    if match is not None:
        raise RPCEncodeError('XML cannot represent character {0!r} (in {1!r})'
                             .format(match.group(), text))
    return text

def _encode_string(element, value):
    element.text = _check_chars(value.value)

def _encode_integer(element, value):
    element.text = str(value.value)

def _encode_double(element, value):
    if not math.isfinite(value.value):
        raise RPCEncodeError('XML-RPC cannot represent {0!r}'
                             .format(value.value))
    element.text = repr(value.value)

def _encode_boolean(element, value):
    element.text = '1' if value.value else '0'

def _encode_datetime(element, value):
    element.text = format_datetime(value.value)

def _encode_array(element, value):
    data = ElementTree.SubElement(element, 'data')
    for item in value:
        data.append(encode(item))

def _encode_struct(element, value):
    for name, item in value.items():
        member = ElementTree.SubElement(element, 'member')
        ElementTree.SubElement(member, 'name').text = _check_chars(name)
        member.append(encode(item))


_ENCODERS = {
    String.tag: _encode_string,
    Integer.tag: _encode_integer,
    Double.tag: _encode_double,
    Boolean.tag: _encode_boolean,
    DateTime.tag: _encode_datetime,
    Array.tag: _encode_array,
    Struct.tag: _encode_struct,
}


def encode(value):

    "Encode a Value into a <value> element"

    if not isinstance(value, Value):
        raise RPCEncodeError('Cannot encode {0!r} -- not a Value instance'
                             .format(value))
    element = ElementTree.Element('value')
    _ENCODERS[value.tag](ElementTree.SubElement(element, value.tag), value)
    return element


def _scalar_decoder(value_cls, parse, strip=True):
    def decode_scalar(element):
        text = element.text or ''
        try:
            return value_cls(parse(text.strip() if strip else text))
        except ValueError as exc:
            raise RPCProtocolDecodeError(
                    'Invalid <{0}> content: {1}'.format(element.tag, exc),
                    _fragment(element))
    return decode_scalar


def _decode_array(element):
    data = element.find('data')
    if data is None:
        return Array()
    return Array(decode(item) for item in data.findall('value'))


def _decode_struct(element):
    # findall() always gives a list, also for a single member
    members = []
    for member in element.findall('member'):
        name = member.find('name')
        if name is None or name.text is None:
            raise RPCProtocolDecodeError('Struct member without name',
                                         _fragment(member))
        item = member.find('value')
        members.append((name.text, None if item is None else decode(item)))
    return Struct(members)


_DECODERS = (
    ('string', _scalar_decoder(String, str, strip=False)),
    ('int', _scalar_decoder(Integer, int)),
    ('i4', _scalar_decoder(Integer, int)),
    ('double', _scalar_decoder(Double, float)),
    ('boolean', _scalar_decoder(Boolean, parse_boolean)),
    ('dateTime.iso8601', _scalar_decoder(DateTime, parse_datetime)),
    ('array', _decode_array),
    ('struct', _decode_struct),
)


def decode(element):

    """Decode a <value> element into a Value

    Returns None if the element carries none of the known type tags.

    """

    for tag, decode_tagged in _DECODERS:
        tagged = element.find(tag)
        if tagged is not None:
            return decode_tagged(tagged)
    return None



#
# Envelopes
#

def dumps_call(request):
    "Serialize a Request into a <methodCall> document"
    root = ElementTree.Element('methodCall')
    ElementTree.SubElement(root, 'methodName').text = _check_chars(
            request.method_name)
    _append_params(root, request.params)
    return _dumps(root)


def dumps_response(*values):
    "Serialize a successful <methodResponse> document"
    root = ElementTree.Element('methodResponse')
    _append_params(root, values)
    return _dumps(root)


def dumps_fault(fault_code, fault_string):
    "Serialize a <methodResponse> document containing a <fault>"
    root = ElementTree.Element('methodResponse')
    fault = ElementTree.SubElement(root, 'fault')
    fault.append(encode(Struct([
            ('faultCode', Integer(fault_code)),
            ('faultString', String(fault_string)),
    ])))
    return _dumps(root)


def loads_response(body):

    """Deserialize a <methodResponse> document into a Response.

    A single param gives data being a Value, more params -- a list of
    them, no params -- None.

    """

    root = _parse(body)
    if root.tag != 'methodResponse':
        raise RPCProtocolDecodeError('Expected <methodResponse>, got <{0}>'
                                     .format(root.tag), _fragment(root))

    fault = root.find('fault')
    if fault is not None:
        return _fault_response(decode(_required(fault, 'value')))

    params = root.find('params')
    if params is None:
        raise RPCProtocolDecodeError('<methodResponse> contains neither '
                                     '<params> nor <fault>', _fragment(root))
    data = [decode(_required(param, 'value'))
            for param in params.findall('param')]
    if not data:
        return Response.success(None)
    elif len(data) == 1:
        return Response.success(data[0])
    else:
        return Response.success(data)


def loads_call(body):
    "Deserialize a <methodCall> document into a Request"
    root = _parse(body)
    if root.tag != 'methodCall':
        raise RPCProtocolDecodeError('Expected <methodCall>, got <{0}>'
                                     .format(root.tag), _fragment(root))
    method_name = _required(root, 'methodName').text
    if not method_name:
        raise RPCProtocolDecodeError('Empty <methodName>', _fragment(root))
    params = root.find('params')
    values = []
    if params is not None:
        for param in params.findall('param'):
            value = decode(_required(param, 'value'))
            if value is None:
                raise RPCProtocolDecodeError('Untyped request param',
                                             _fragment(param))
            values.append(value)
    return Request(method_name.strip(), values)


def _fault_response(fault):
    fault_code = fault_string = None
    if isinstance(fault, Struct):
        fault_code = fault.get('faultCode')
        fault_string = fault.get('faultString')
    try:
        response_code = int(fault_code.to_python())
    except (AttributeError, TypeError, ValueError):
        response_code = UNKNOWN_FAULT_CODE
    if response_code == 0:
        # a fault must never look like a success
        response_code = UNKNOWN_FAULT_CODE
    if fault_string is None:
        response_message = UNKNOWN_FAULT_STRING
    else:
        response_message = str(fault_string.to_python())
    return Response.fault(response_code, response_message)


def _append_params(root, values):
    params = ElementTree.SubElement(root, 'params')
    for value in values:
        ElementTree.SubElement(params, 'param').append(encode(value))


def _dumps(root):
    return ElementTree.tostring(root, encoding='utf-8', xml_declaration=True)


def _parse(body):
    try:
        return ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        raise RPCProtocolDecodeError('Malformed XML: {0}'.format(exc),
                                     _truncate(body))


def _required(element, tag):
    child = element.find(tag)
    if child is None:
        raise RPCProtocolDecodeError('<{0}> lacks required <{1}> element'
                                     .format(element.tag, tag),
                                     _fragment(element))
    return child


def _fragment(element):
    return _truncate(ElementTree.tostring(element, encoding='unicode'))


def _truncate(text):
    if isinstance(text, bytes):
        text = text.decode('utf-8', 'replace')
    if len(text) > FRAGMENT_MAX_LENGTH:
        return text[:FRAGMENT_MAX_LENGTH] + '...'
    return text


if __name__ == '__main__':
    import doctest
    doctest.testmod()
