# airgw/config/loader.py

"""Loader of "props" config files.

A props file is a sequence of logical lines; each of them is either

    dotted.key.path: <JSON value>

or a whole JSON object. A physical line starting with whitespace, '}'
or ']' continues the previous logical line; lines starting with '#' are
comments. Key path elements may be indexed (nodes[0].host) or -- if
they are not plain identifiers -- enclosed in braces, with '\\' escaping
braces inside ({simulator.subscribers}.x). Values of subsequent lines
(and files) are merged recursively: dicts key by key, lists item by
item, anything else is replaced.

    >>> props = load_props([
    ...     'environment: "prod"\\n',
    ...     'nodes[1].host: "10.0.0.2"\\n',
    ...     'nodes[0]: {"node_id": "air1",\\n',
    ...     '           "host": "10.0.0.1"}\\n',
    ... ])
    >>> props['environment']
    'prod'
    >>> props['nodes']
    [{'node_id': 'air1', 'host': '10.0.0.1'}, {'host': '10.0.0.2'}]

"""


import itertools
import json
import re
import string


_PATH_ELEMENT = re.compile(r'''
    (?: \{ (?P<escaped> (?: [^{}\\] | \\. )* ) \}
      | (?P<plain> [A-Za-z0-9_]+ ) )
    (?: \[ (?P<index> [0-9]+ ) \] )?
''', re.VERBOSE)

_UNESCAPE = re.compile(r'\\(.)')

CONTINUATION_CHARS = frozenset(string.whitespace + '}]')


def parse_path(path):

    """Split a key path into (key, index) pairs

    >>> parse_path('air.request_timeout')
    [('air', None), ('request_timeout', None)]
    >>> parse_path('nodes[3].host')
    [('nodes', 3), ('host', None)]
    >>> parse_path('{a.b\\\\{c\\\\}}.d')
    [('a.b{c}', None), ('d', None)]
    >>> parse_path('qx{foo.bar}[2]')
    [('qx', None), ('foo.bar', 2)]
    """

    elements = []
    pos = 0
    while True:
        match = _PATH_ELEMENT.match(path, pos)
        if match is None:
            raise ValueError('Parse error at or near {0!r}'.format(path[pos:]))
        if match.group('plain') is not None:
            key = match.group('plain')
        else:
            key = _UNESCAPE.sub(r'\1', match.group('escaped'))
        index = match.group('index')
        elements.append((key, None if index is None else int(index)))
        pos = match.end()
        if pos == len(path):
            return elements
        if path[pos] == '.':
            pos += 1
        elif path[pos] != '{':
            raise ValueError('Parse error at or near {0!r}: unexpected {1!r}'
                             .format(path[pos:], path[pos]))


def merge(parent, index, key, value):

    """Put `value' into `parent' (a dict, created if None) under `key'
    -- or, if `index' is not None, at parent[key][index]

    >>> merge(None, 1, 'nodes', 'air2')
    {'nodes': [None, 'air2']}
    """

    if parent is None:
        parent = {}
    if index is None:
        parent[key] = value
    else:
        items = parent.setdefault(key, [])
        items.extend([None] * (index + 1 - len(items)))
        items[index] = value
    return parent


def walk(path, value):

    """Build a nested object having `value' at the bottom of `path'

    >>> walk('air.path', '/Air')
    {'air': {'path': '/Air'}}
    >>> walk('nodes[1].port', 10010)
    {'nodes': [None, {'port': 10010}]}
    """

    for key, index in reversed(parse_path(path)):
        value = merge(None, index, key, value)
    return value


def zip_objects(a, b):

    """Recursively merge `b' into `a' (b wins for non-container values)

    >>> zip_objects({'a': 1, 'c': [None, 'cc']}, {'b': 2, 'c': ['c2']})
    {'a': 1, 'c': ['c2', 'cc'], 'b': 2}
    >>> zip_objects({'a': 1}, {'a': 2})
    {'a': 2}
    """

    if a is None:
        return b
    if b is None:
        return a
    if type(a) is not type(b):
        raise TypeError('Cannot zip objects of different types: '
                        '{0!r} and {1!r}'.format(a, b))
    if isinstance(a, list):
        return [zip_objects(x, y) for x, y in itertools.zip_longest(a, b)]
    if isinstance(a, dict):
        keys = list(a) + [key for key in b if key not in a]
        return dict((key, zip_objects(a.get(key), b.get(key)))
                    for key in keys)
    return b


def process_logical_line(props, logical_line):
    if not logical_line.strip():
        return props
    key, _, value = logical_line.partition(':')
    try:
        new_props = walk(key.strip(), json.loads(value))
    except ValueError:
        # maybe the whole line is a JSON document
        try:
            new_props = json.loads(logical_line)
        except ValueError as exc:
            raise ValueError('malformed JSON/Prop: {0}\n{1}'
                             .format(exc, logical_line))
    return zip_objects(props, new_props)


def load_props(lines, props=None):

    "Load props from an iterable of lines (e.g. a file), merging into `props'"

    logical_line = ''
    if props is None:
        props = {}
    for line in lines:
        if not line or line.startswith('#'):
            continue
        elif line[0] in CONTINUATION_CHARS:
            logical_line += line
        else:
            props = process_logical_line(props, logical_line)
            logical_line = line
    return process_logical_line(props, logical_line)


if __name__ == '__main__':
    import doctest
    import sys
    if len(sys.argv) == 1 or '--test' in sys.argv:
        doctest.testmod()
    else:
        with open(sys.argv[1]) as f:
            print(repr(load_props(f)))
