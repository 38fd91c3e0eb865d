# airgw/config/__init__.py

"""AIR gateway configuration.

------------------------------------------
Configuration file structure and content
------------------------------------------

Config files are "props" files (see: airgw.config.loader), e.g.:

    environment: "prod"
    air.request_timeout: 10000
    air.stats_interval: 60000
    nodes[0]: {"node_id": "air1", "host": "10.0.0.1", "port": 10010,
               "af_type": "AF1", "environment": "prod"}
    nodes[1]: {"node_id": "air2", "host": "10.0.0.2", "port": 10010,
               "af_type": "AF1", "environment": "prod", "active": false}
    logging_settings.level: "debug"

Sections (all optional; missing items are completed with defaults):

* environment (str) -- deployment environment whose nodes are used
  (default: 'lab');

* air -- a dict:

  * path (str) -- XML-RPC endpoint path on nodes (default: '/Air'),
  * request_timeout (int) -- per-call timeout in ms (default: 30000),
  * max_connections (int) -- HTTP connection pool size (default: 200),
  * max_connections_per_route (int) -- pool size per node (default: 20),
  * stats_interval (int) -- statistics logging interval in ms; 0 turns
    the periodic logging off (default: 60000);

* nodes -- a list of dicts: node_id, host, port (obligatory), af_type
  (routing key, default: null), environment (default: 'lab'), active
  (default: true);

* logging_settings -- a dict: logger (name of the logger to configure,
  default: 'airgw'), level, propagate, handlers (a list of dicts: cls,
  kwargs, level, format -- see: airgw.common.const.
  DEFAULT_LOG_HANDLER_SETTINGS);

* simulator -- see: airgw.simulator.

Config sources (arguments of GatewayConfig and of the command line
tools) may be:

* an absolute path or a path relative to the current directory;

* 'package:relative/path' -- a resource file of an installed package;

* 'key.path=value' -- a single item (value is JSON, or a plain string).

"""


import copy
import importlib.resources
import json

from jsonschema import Draft4Validator, validators

from airgw import schema
from airgw.common import utils
from airgw.common.const import *
from airgw.common.types import NodeDescriptor
from airgw.config import loader



CONFIG_DEFAULTS = {
    'environment': DEFAULT_ENVIRONMENT,
    'air': {
        'path': DEFAULT_AIR_PATH,
        'request_timeout': DEFAULT_REQUEST_TIMEOUT,
        'max_connections': DEFAULT_MAX_CONNECTIONS,
        'max_connections_per_route': DEFAULT_MAX_CONNECTIONS_PER_ROUTE,
        'stats_interval': DEFAULT_STATS_INTERVAL,
    },
    'logging_settings': {
        'logger': 'airgw',
        'level': 'info',
        'handlers': [DEFAULT_LOG_HANDLER_SETTINGS],
        'propagate': False,
    },
}

NODE_SCHEMA = {
    'type': 'object',
    'required': ['node_id', 'host', 'port'],
    'properties': {
        'node_id': {'type': 'string'},
        'host': {'type': 'string'},
        'port': {'type': 'integer', 'minimum': 1, 'maximum': 65535},
        'af_type': {'type': ['string', 'null'], 'default': None},
        'environment': {'type': 'string', 'default': DEFAULT_ENVIRONMENT},
        'active': {'type': 'boolean', 'default': True},
    },
}

NODES_SCHEMA = {
    'type': 'object',
    'properties': {
        'nodes': {'type': 'array', 'default': [], 'items': NODE_SCHEMA},
    },
}



def extend_with_default(validator_class):
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        for error in validate_properties(validator, properties, instance, schema):
            yield error

        if not isinstance(instance, dict):
            return
        for prop, subschema in properties.items():
            if "default" in subschema:
                instance.setdefault(prop, copy.deepcopy(subschema["default"]))

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingDraft4Validator = extend_with_default(Draft4Validator)


def read_config(config_path):

    "Get lines of a config source (see the module docs for source kinds)"

    if config_path.startswith('/'):
        with open(config_path) as f:
            return f.readlines()

    if '=' in config_path:
        key, value = config_path.split('=', 1)
        key = key.strip()
        value = value.strip()
        try:
            json.loads(value)
        except ValueError:
            value = json.dumps(value)
        # key=value => key: value
        # (key:value syntax is already taken by the package resources)
        return ['{key}: {value}'.format(key=key, value=value)]

    if ':' in config_path:
        package, relative_path = config_path.split(':', 1)
        resource = importlib.resources.files(package).joinpath(relative_path)
        return resource.read_text().splitlines(True)

    with open(config_path) as f:
        return f.readlines()



class GatewayConfig(object):

    """Loaded, validated and completed configuration.

    Arguments:

    * config_paths -- a sequence of config sources, merged in order;

    * config_dict (dict or None) -- initial content (sources are merged
      into a copy of it);

    * extra_schemas -- additional JSON schemas (e.g. the simulator's)
      to validate with (and complete defaults from).

    """

    CONFIG_SCHEMAS = [schema.by_example(CONFIG_DEFAULTS), NODES_SCHEMA]

    def __init__(self, config_paths=(), config_dict=None, extra_schemas=()):
        config_dict = copy.deepcopy(config_dict) if config_dict else {}
        for p in config_paths:
            config_dict = loader.load_props(read_config(p), config_dict)
        self.config_dict = config_dict
        self.schemas = list(self.CONFIG_SCHEMAS) + list(extra_schemas)
        self._log_handlers = []
        self.validate()

    def __getitem__(self, key):
        return self.config_dict[key]

    def validate(self):
        for config_schema in self.schemas:
            validator = DefaultValidatingDraft4Validator(config_schema)
            validator.validate(self.config_dict)

    def node_definitions(self):
        return StaticNodeDefinitions(self.config_dict['nodes'])

    def configure_logging(self):
        "Configure the logger named in logging_settings; return it"
        log_config = self.config_dict['logging_settings']
        log = utils.get_logger(log_config.get('logger'), 'airgw')
        return utils.configure_logging(log, self._log_handlers, log_config)



class StaticNodeDefinitions(object):

    """Node definitions provider backed by a fixed list of node records.

    Records are NodeDescriptor instances or dicts with keys: node_id,
    host, port, af_type (or routing_key), environment, active. The order
    of records is the configuration order.

    """

    def __init__(self, nodes):
        self._nodes = [self._descriptor(node) for node in nodes]

    @staticmethod
    def _descriptor(node):
        if isinstance(node, NodeDescriptor):
            return node
        routing_key = node.get('af_type') or node.get('routing_key')
        return NodeDescriptor(node_id=node['node_id'],
                              host=node['host'],
                              port=int(node['port']),
                              routing_key=routing_key,
                              active=node.get('active', True),
                              environment=node.get('environment',
                                                   DEFAULT_ENVIRONMENT))

    def get_all_nodes(self):
        return list(self._nodes)

    def get_nodes_by_environment(self, environment):
        return [node for node in self._nodes
                if node.active and node.environment == environment]
