# airgw/gateway.py

"""AIR gateway -- the facade.

A simple example:

    import asyncio

    from airgw.config import StaticNodeDefinitions
    from airgw.gateway import Gateway

    async def main():
        definitions = StaticNodeDefinitions([
            dict(node_id='air1', host='10.0.0.1', port=10010, af_type='AF1'),
            dict(node_id='air2', host='10.0.0.2', port=10010, af_type='AF1'),
        ])
        gateway = Gateway(definitions, environment='lab')
        await gateway.initialize()
        try:
            response = await gateway.get_balance('1234567890',
                                                 routing_key='AF1')
            print(response.to_python())
            print(gateway.get_stats())
        finally:
            await gateway.shutdown()

    asyncio.run(main())

The gateway is an ordinary object: construct one per process and pass it
to whatever needs it (e.g. the HTTP layer).

Public instance methods
^^^^^^^^^^^^^^^^^^^^^^^

* initialize(), reload(), shutdown() -- lifecycle (coroutines);

* execute_request(request, node_id=None, routing_key=None) -- send any
  UCIP request (coroutine);

* get_balance(), refill(), update_balance(), get_account_details()
  -- typed UCIP operations (coroutines; see also the build_*_request()
  module-level functions for their parameter defaults);

* get_stats(), reset_stats(), update_stats() -- transaction statistics.

Errors (see: airgw.common.errors) are never masked nor retried: they
are counted in statistics, logged and re-raised (a call cancelled by its
caller is counted as failed too). Faults returned by AIR nodes are plain
Response objects (response.is_fault is True).

"""


import asyncio
import random
import time

import aiohttp

from .client import AirClient
from .config import StaticNodeDefinitions
from .common import errors
from .common import utils
from .common.const import *
from .common.types import Double, Integer, Request, String, Struct
from .routing import NodeRegistry, RequestRouter
from .stats import StatsReporter, TransactionStats



#
# Request builders
#

def generate_transaction_id():
    "'TXN' + epoch milliseconds + 4 random digits (best-effort uniqueness)"
    return '{0}{1}{2:04d}'.format(TRANSACTION_ID_PREFIX,
                                  int(time.time() * 1000),
                                  random.randrange(10000))


def _amount(value):
    return Double(value) if isinstance(value, float) else Integer(value)


def build_get_balance_request(subscriber_number,
                              requested_information_flags=None):
    if requested_information_flags is None:
        requested_information_flags = DEFAULT_BALANCE_INFORMATION_FLAGS
    return Request(GET_BALANCE_METHOD, [Struct([
            ('subscriberNumber', String(subscriber_number)),
            ('requestedInformationFlags',
             Integer(requested_information_flags)),
    ])])


def build_refill_request(subscriber_number, refill_amount,
                         transaction_id=None, transaction_currency=None,
                         profile_id=None):
    return Request(REFILL_METHOD, [Struct([
            ('subscriberNumber', String(subscriber_number)),
            ('refillAmount', _amount(refill_amount)),
            ('transactionId', String(transaction_id or
                                     generate_transaction_id())),
            ('transactionCurrency', String(transaction_currency or
                                           DEFAULT_TRANSACTION_CURRENCY)),
            ('profileId', String(profile_id or DEFAULT_PROFILE_ID)),
    ])])


def build_update_balance_request(subscriber_number, adjustment_amount,
                                 transaction_id=None, transaction_type=None):
    return Request(UPDATE_BALANCE_METHOD, [Struct([
            ('subscriberNumber', String(subscriber_number)),
            ('adjustmentAmount', _amount(adjustment_amount)),
            ('transactionId', String(transaction_id or
                                     generate_transaction_id())),
            ('transactionType', String(transaction_type or
                                       DEFAULT_TRANSACTION_TYPE)),
    ])])


def build_get_account_details_request(subscriber_number,
                                      requested_information_flags=None):
    if requested_information_flags is None:
        requested_information_flags = DEFAULT_ACCOUNT_INFORMATION_FLAGS
    return Request(GET_ACCOUNT_DETAILS_METHOD, [Struct([
            ('subscriberNumber', String(subscriber_number)),
            ('requestedInformationFlags',
             Integer(requested_information_flags)),
    ])])



#
# The gateway
#

class Gateway(object):

    def __init__(self, definitions, environment=DEFAULT_ENVIRONMENT,
                 path=DEFAULT_AIR_PATH,
                 request_timeout=DEFAULT_REQUEST_TIMEOUT,
                 max_connections=DEFAULT_MAX_CONNECTIONS,
                 max_connections_per_route=DEFAULT_MAX_CONNECTIONS_PER_ROUTE,
                 stats_interval=None, log=None):

        """Gateway initialization (no I/O -- see: initialize()).

        Arguments:

        * definitions -- node definitions provider: an object with
          get_nodes_by_environment(environment) method returning a list
          of NodeDescriptor instances (see: airgw.config);

        * environment (str) -- deployment environment whose nodes are
          used (default: 'lab');

        * path (str) -- XML-RPC endpoint path on nodes (default: '/Air');

        * request_timeout (int) -- per-call timeout in milliseconds;

        * max_connections, max_connections_per_route (int) -- sizing of
          the HTTP connection pool shared by node clients;

        * stats_interval (int or None) -- if set, statistics are logged
          every stats_interval milliseconds while initialized;

        * log (logging.Logger instance or str or None) -- logger object
          or name (default: None => 'airgw.gateway').

        """

        self.definitions = definitions
        self.environment = environment
        self.path = path
        self.request_timeout = request_timeout
        self.max_connections = max_connections
        self.max_connections_per_route = max_connections_per_route
        self.log = utils.get_logger(log, 'airgw.gateway')

        self._stats = TransactionStats()
        if stats_interval:
            self._reporter = StatsReporter(self.get_stats, stats_interval,
                                           self.log)
        else:
            self._reporter = None

        self._router = None
        self._session = None


    @classmethod
    def from_config(cls, config, definitions=None, log=None):

        """Create a gateway from a validated config dict.

        If `definitions' is None, nodes are taken from config['nodes']
        (see: airgw.config.StaticNodeDefinitions).

        """

        if definitions is None:
            definitions = StaticNodeDefinitions(config['nodes'])
        air_config = config['air']
        return cls(definitions,
                   environment=config['environment'],
                   path=air_config['path'],
                   request_timeout=air_config['request_timeout'],
                   max_connections=air_config['max_connections'],
                   max_connections_per_route=(
                       air_config['max_connections_per_route']),
                   stats_interval=air_config['stats_interval'],
                   log=log)


    @property
    def is_initialized(self):
        return self._router is not None


    @property
    def router(self):
        return self._router


    #
    # Lifecycle

    async def initialize(self):

        "Build node clients and routing for the configured environment"

        if self.is_initialized:
            self.log.warning('AIR gateway already initialized')
            return

        self.log.info('Initializing AIR gateway (environment: %s)...',
                      self.environment)
        try:
            session = aiohttp.ClientSession(connector=aiohttp.TCPConnector(
                    limit=self.max_connections,
                    limit_per_host=self.max_connections_per_route))
            try:
                router = self._build_router(session)
            except Exception:
                await session.close()
                raise
        except Exception:
            self.log.error('Error initializing AIR gateway', exc_info=True)
            raise

        self._session = session
        self._router = router
        if self._reporter is not None:
            self._reporter.start()
        self.log.info('AIR gateway initialized successfully (nodes: %s)',
                      ', '.join(router.registry.node_ids()))


    async def reload(self):

        """Rebuild node clients and routing from current definitions.

        The new registry is published at once; calls in flight finish
        using the previous one. If no nodes are configured any more,
        RPCNoNodesConfiguredError is raised and nothing changes.

        """

        if not self.is_initialized:
            raise errors.RPCNotInitializedError('AIR gateway not initialized')
        self.log.info('Reloading AIR node configuration...')
        self._router = self._build_router(self._session)
        self.log.info('AIR node configuration reloaded')


    async def shutdown(self):
        self.log.info('Shutting down AIR gateway...')
        if self._reporter is not None:
            await self._reporter.stop()
        self._router = None
        session, self._session = self._session, None
        if session is not None:
            await session.close()
        self.log.info('AIR gateway shut down')


    def _build_router(self, session):
        descriptors = self.definitions.get_nodes_by_environment(
                self.environment)
        if not descriptors:
            raise errors.RPCNoNodesConfiguredError(
                    'No AIR nodes configured for environment: {0}'
                    .format(self.environment))

        def client_factory(descriptor):
            client = AirClient(descriptor.host, descriptor.port,
                               path=self.path,
                               timeout=self.request_timeout,
                               session=session)
            self.log.info('Created AIR client for node: %s at %s:%s',
                          descriptor.node_id, descriptor.host,
                          descriptor.port)
            return client

        registry = NodeRegistry.build(descriptors, client_factory)
        if not len(registry):
            raise errors.RPCNoNodesConfiguredError(
                    'No active AIR nodes for environment: {0}'
                    .format(self.environment))
        routing_table = registry.routing_table
        for routing_key in routing_table.keys():
            self.log.info('Routing key %s -> %s', routing_key, ', '.join(
                    d.node_id for d in routing_table.destinations(routing_key)))
        return RequestRouter(registry)


    #
    # Requests

    async def execute_request(self, request, node_id=None, routing_key=None):

        "Route and send a UCIP request; return a Response"

        router = self._router
        if router is None:
            raise errors.RPCNotInitializedError('AIR gateway not initialized')

        start_time = time.monotonic()
        self._stats.begin()
        try:
            client = router.select(node_id, routing_key)
            response = await client.call(request)
        except asyncio.CancelledError:
            self.update_stats(False, _elapsed_ms(start_time))
            self.log.warning('UCIP request %s cancelled', request.method_name)
            raise
        except Exception:
            self.update_stats(False, _elapsed_ms(start_time))
            self.log.error('Error executing UCIP request %s',
                           request.method_name, exc_info=True)
            raise
        self.update_stats(True, _elapsed_ms(start_time))
        return response


    async def get_balance(self, subscriber_number,
                          requested_information_flags=None,
                          routing_key=None, node_id=None):
        request = build_get_balance_request(subscriber_number,
                                            requested_information_flags)
        return await self.execute_request(request, node_id, routing_key)


    async def refill(self, subscriber_number, refill_amount,
                     transaction_id=None, transaction_currency=None,
                     profile_id=None, routing_key=None, node_id=None):
        request = build_refill_request(subscriber_number, refill_amount,
                                       transaction_id, transaction_currency,
                                       profile_id)
        return await self.execute_request(request, node_id, routing_key)


    async def update_balance(self, subscriber_number, adjustment_amount,
                             transaction_id=None, transaction_type=None,
                             routing_key=None, node_id=None):
        request = build_update_balance_request(subscriber_number,
                                               adjustment_amount,
                                               transaction_id,
                                               transaction_type)
        return await self.execute_request(request, node_id, routing_key)


    async def get_account_details(self, subscriber_number,
                                  requested_information_flags=None,
                                  routing_key=None, node_id=None):
        request = build_get_account_details_request(
                subscriber_number, requested_information_flags)
        return await self.execute_request(request, node_id, routing_key)


    #
    # Statistics

    def update_stats(self, success, elapsed_ms):
        self._stats.update(success, elapsed_ms)


    def get_stats(self):
        return self._stats.snapshot()


    def reset_stats(self):
        self._stats.reset()
        self.log.info('Transaction statistics reset')



def _elapsed_ms(start_time):
    return (time.monotonic() - start_time) * 1000.0
