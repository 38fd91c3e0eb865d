# airgw/schema.py

"""JSON schemas derived from example (default) config values.

The config sections of the gateway and of the lab simulator are given as
dicts of default values (see: airgw.config.CONFIG_DEFAULTS); by_example()
turns such a dict into a schema that both checks the types of the loaded
values and -- used with airgw.config.DefaultValidatingDraft4Validator --
completes missing items with the defaults.

"""


# (bool is a subclass of int => must come first)
_SCALAR_TYPES = (
    (bool, 'boolean'),
    (int, 'integer'),
    (float, 'number'),
    (str, 'string'),
)


def by_example(example):

    """Build a schema accepting objects shaped like `example', with
    `example' as the default

    >>> by_example({'port': 10010})['properties']['port']
    {'type': 'integer', 'default': 10010}
    >>> by_example([{'cls': 'StreamHandler'}])['items']['properties']
    {'cls': {'type': 'string', 'default': 'StreamHandler'}}
    >>> by_example(None)
    {}
    """

    if example is None:
        # anything goes
        return {}
    for python_type, json_type in _SCALAR_TYPES:
        if isinstance(example, python_type):
            return {'type': json_type, 'default': example}
    if isinstance(example, dict):
        properties = dict((key, by_example(value))
                          for key, value in example.items())
        return {'type': 'object', 'default': example,
                'properties': properties}
    if isinstance(example, (list, tuple)):
        result = {'type': 'array', 'default': example}
        if example:
            result['items'] = _item_schema(example[0])
        return result
    raise TypeError('Cannot derive a schema from {0!r} (of type {1})'
                    .format(example, type(example).__name__))


def _item_schema(example):
    # list items get no default of their own
    schema = by_example(example)
    schema.pop('default', None)
    return schema
