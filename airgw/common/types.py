# airgw/common/types.py

"""AIR gateway data types.

* XML-RPC values -- a tagged union of small classes: String, Integer,
  Double, Boolean, DateTime, Array and Struct (all being subclasses of
  Value); use wrap() to build a value tree from plain Python data and
  Value.to_python() to get plain Python data back;

* Request -- UCIP request: method name + a tuple of values;

* Response -- UCIP response: response code (0 means success),
  response message (set for faults) and data (set for successes);

* NodeDescriptor -- configuration of one AIR node, as supplied by
  a node definitions provider (see: airgw.config).

"""


import datetime

from collections import namedtuple
from collections.abc import Mapping

from .const import RESPONSE_SUCCESS
from .errors import RPCEncodeError



#
# XML-RPC values
#

class Value(object):

    """Base class of XML-RPC value variants.

    Two values are equal only if they are of the same variant and carry
    equal payloads (so Integer(1) != Double(1.0)).

    """

    __slots__ = ('value',)

    tag = None

    def __init__(self, value):
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return type(self) is type(other) and self.value == other.value

    __hash__ = None

    def __repr__(self):
        return '{0}({1!r})'.format(type(self).__name__, self.value)

    def to_python(self):
        return self.value


class String(Value):
    __slots__ = ()
    tag = 'string'

    def __init__(self, value):
        super(String, self).__init__(str(value))


class Integer(Value):
    __slots__ = ()
    tag = 'int'

    def __init__(self, value):
        super(Integer, self).__init__(int(value))


class Double(Value):
    __slots__ = ()
    tag = 'double'

    def __init__(self, value):
        super(Double, self).__init__(float(value))


class Boolean(Value):
    __slots__ = ()
    tag = 'boolean'

    def __init__(self, value):
        super(Boolean, self).__init__(bool(value))


class DateTime(Value):
    __slots__ = ()
    tag = 'dateTime.iso8601'

    def __init__(self, value):
        if not isinstance(value, datetime.datetime):
            raise TypeError('DateTime requires a datetime.datetime '
                            'instance, got {0!r}'.format(value))
        super(DateTime, self).__init__(value)


class Array(Value):

    """Ordered sequence of values"""

    __slots__ = ()
    tag = 'array'

    def __init__(self, items=()):
        items = list(items)
        for item in items:
            _check_item(item)
        super(Array, self).__init__(items)

    def __iter__(self):
        return iter(self.value)

    def __len__(self):
        return len(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def to_python(self):
        return [_to_python(item) for item in self.value]


class Struct(Value):

    """Ordered name -> value mapping (member names are unique).

    Accepts a mapping or an iterable of (name, value) pairs; when a name
    occurs more than once, the last value wins (but the member keeps
    the position of its first occurrence).

    """

    __slots__ = ()
    tag = 'struct'

    def __init__(self, members=()):
        if isinstance(members, Mapping):
            members = members.items()
        value = {}
        for name, item in members:
            if not isinstance(name, str):
                raise TypeError('Struct member name must be a string, '
                                'got {0!r}'.format(name))
            _check_item(item)
            value[name] = item
        super(Struct, self).__init__(value)

    def __iter__(self):
        return iter(self.value)

    def __len__(self):
        return len(self.value)

    def __getitem__(self, name):
        return self.value[name]

    def __contains__(self, name):
        return name in self.value

    def get(self, name, default=None):
        return self.value.get(name, default)

    def items(self):
        return self.value.items()

    def to_python(self):
        return dict((name, _to_python(item))
                    for name, item in self.value.items())


def _check_item(item):
    # None stands for a wire value without any known type tag
    if item is not None and not isinstance(item, Value):
        raise TypeError('Expected a Value instance, got {0!r} -- '
                        'use wrap() for plain Python data'.format(item))


def _to_python(item):
    return None if item is None else item.to_python()


def wrap(obj):

    """Build a value tree from plain Python data.

    >>> wrap({'subscriberNumber': '1234567890', 'flags': 0})
    Struct({'subscriberNumber': String('1234567890'), 'flags': Integer(0)})
    >>> wrap([True, 1.5])
    Array([Boolean(True), Double(1.5)])

    """

    if isinstance(obj, Value):
        return obj
    # (bool is a subclass of int => must be checked first)
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        return Integer(obj)
    if isinstance(obj, float):
        return Double(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, datetime.datetime):
        return DateTime(obj)
    if isinstance(obj, Mapping):
        return Struct((name, wrap(item)) for name, item in obj.items())
    if isinstance(obj, (list, tuple)):
        return Array(wrap(item) for item in obj)
    raise RPCEncodeError('Cannot represent {0!r} (of type {1}) as '
                         'an XML-RPC value'.format(obj, type(obj).__name__))



#
# Messages
#

class Request(namedtuple('Request', 'method_name params')):

    """UCIP request: method name and a tuple of Value instances"""

    __slots__ = ()

    def __new__(cls, method_name, params=()):
        params = tuple(params)
        for param in params:
            if not isinstance(param, Value):
                raise TypeError('Request params must be Value instances, '
                                'got {0!r}'.format(param))
        return super(Request, cls).__new__(cls, method_name, params)


class Response(namedtuple('Response', 'response_code response_message data')):

    """UCIP response.

    Either a success (response_code == 0; data: a Value, a list of them
    or None) or a fault (response_code != 0; response_message set, data
    None) -- never both.

    """

    __slots__ = ()

    @classmethod
    def success(cls, data):
        return cls(RESPONSE_SUCCESS, None, data)

    @classmethod
    def fault(cls, response_code, response_message):
        return cls(response_code, response_message, None)

    @property
    def is_fault(self):
        return self.response_code != RESPONSE_SUCCESS

    def to_python(self):
        if self.is_fault:
            return dict(responseCode=self.response_code,
                        responseMessage=self.response_message)
        if isinstance(self.data, list):
            data = [_to_python(item) for item in self.data]
        else:
            data = _to_python(self.data)
        return dict(responseCode=self.response_code, data=data)


NodeDescriptor = namedtuple('NodeDescriptor',
                            'node_id host port routing_key active environment')
