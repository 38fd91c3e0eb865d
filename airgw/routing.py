# airgw/routing.py

"""Node registry, routing table and request router.

A NodeRegistry is built once from a snapshot of node descriptors (see:
airgw.common.types.NodeDescriptor) and never changes afterwards; the
gateway publishes a new one (wrapped in a new RequestRouter) to reload
the configuration.

Destination selection -- RequestRouter.select(node_id, routing_key):

1. node_id given => the client of that node (routing_key is ignored);
2. routing_key given => round-robin over the key's destinations, in
   configuration order;
3. neither => the first client in configuration order.

"""


import threading

from .common import errors



class RoutingTable(object):

    """Routing key -> ordered destination list + round-robin cursor.

    The destination lists are fixed when the table is built; only the
    cursors move (always within [0, len(destinations))).

    """

    def __init__(self, destinations=None):
        self._destinations = {}
        self._cursors = {}
        self._lock = threading.Lock()
        for routing_key, descriptors in (destinations or {}).items():
            for descriptor in descriptors:
                self.add(routing_key, descriptor)


    def add(self, routing_key, descriptor):
        with self._lock:
            self._destinations.setdefault(routing_key, []).append(descriptor)
            self._cursors.setdefault(routing_key, 0)


    def keys(self):
        return list(self._destinations)


    def destinations(self, routing_key):
        return list(self._destinations.get(routing_key, ()))


    def cursor(self, routing_key):
        return self._cursors.get(routing_key, 0)


    def next_destination(self, routing_key):

        """Return the destination at the key's cursor and advance it.

        Returns None if the key has no destinations. The read and the
        increment are done under one lock, so concurrent selections
        never get the same cursor value.

        """

        with self._lock:
            destinations = self._destinations.get(routing_key)
            if not destinations:
                return None
            cursor = self._cursors[routing_key]
            self._cursors[routing_key] = (cursor + 1) % len(destinations)
            return destinations[cursor]



class NodeRegistry(object):

    """One client per active node + the routing table"""

    def __init__(self, clients, routing_table):
        self._clients = clients
        self.routing_table = routing_table


    @classmethod
    def build(cls, descriptors, client_factory):

        """Build the registry from node descriptors.

        Arguments:

        * descriptors -- an iterable of NodeDescriptor instances
          (inactive ones are skipped);

        * client_factory -- a callable taking a NodeDescriptor and
          returning a client (an object with async call(request) method).

        """

        clients = {}
        routing_table = RoutingTable()
        for descriptor in descriptors:
            if not descriptor.active:
                continue
            clients[descriptor.node_id] = client_factory(descriptor)
            if descriptor.routing_key:
                routing_table.add(descriptor.routing_key, descriptor)
        return cls(clients, routing_table)


    def __len__(self):
        return len(self._clients)


    def __contains__(self, node_id):
        return node_id in self._clients


    def node_ids(self):
        return list(self._clients)


    def get(self, node_id):
        return self._clients.get(node_id)


    def first(self):
        "The first client in configuration order (or None)"
        return next(iter(self._clients.values()), None)



class RequestRouter(object):

    "Chooses the client that handles a call"

    def __init__(self, registry):
        self.registry = registry


    def select(self, node_id=None, routing_key=None):
        if node_id:
            client = self.registry.get(node_id)
            if client is None:
                raise errors.RPCUnknownNodeError(
                        'No client registered for node: {0}'.format(node_id))
            return client

        if routing_key:
            destination = self.registry.routing_table.next_destination(
                    routing_key)
            if destination is None:
                raise errors.RPCNoDestinationsError(
                        'No destinations for routing key: {0}'
                        .format(routing_key))
            return self.registry.get(destination.node_id)

        client = self.registry.first()
        if client is None:
            raise errors.RPCNoClientsError('No node clients available')
        return client
