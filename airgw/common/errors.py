# airgw/common/errors.py

"""AIR gateway exception classes:

* RPCError -- base exception class;

* RPCProtocolDecodeError, RPCEncodeError -- raised by the XML-RPC codec
  (airgw.common.encoding);

* RPCTransportError, RPCTimeoutError -- raised by node clients
  (airgw.client) when the HTTP exchange fails;

* RPCRoutingError and its subclasses -- raised by the request router
  (airgw.routing) when no eligible destination can be found; no network
  call is attempted then;

* RPCLifecycleError and its subclasses -- raised by the gateway
  (airgw.gateway) when used before initialization or without nodes.

Note that a fault returned by an AIR node is *not* an exception: it is
a regular Response with non-zero response_code.

"""


class RPCError(Exception):
    "Base AIR gateway exception"


#
# Codec exceptions

class RPCProtocolDecodeError(RPCError):

    "Malformed or unrecognized XML-RPC document"

    def __init__(self, message, fragment=None):
        super(RPCProtocolDecodeError, self).__init__(message)
        self.fragment = fragment

    def __str__(self):
        message = super(RPCProtocolDecodeError, self).__str__()
        if self.fragment is None:
            return message
        return '{0} -- in: {1!r}'.format(message, self.fragment)


class RPCEncodeError(RPCError, ValueError):
    "Value that cannot be represented in XML-RPC"


#
# Transport exceptions

class RPCTransportError(RPCError):

    "Non-2xx HTTP status or connection failure"

    def __init__(self, message, status=None, body=None):
        super(RPCTransportError, self).__init__(message)
        self.status = status
        self.body = body


class RPCTimeoutError(RPCError, TimeoutError):
    "No response received within the configured timeout"


#
# Routing exceptions

class RPCRoutingError(RPCError):
    "No eligible destination node"

class RPCUnknownNodeError(RPCRoutingError):
    "No client registered for the requested node id"

class RPCNoDestinationsError(RPCRoutingError):
    "The routing key has no destination nodes"

class RPCNoClientsError(RPCRoutingError):
    "The node registry is empty"


#
# Lifecycle exceptions

class RPCLifecycleError(RPCError):
    "Gateway used in a wrong state"

class RPCNotInitializedError(RPCLifecycleError):
    "Gateway used before initialize() or after shutdown()"

class RPCNoNodesConfiguredError(RPCLifecycleError):
    "No active nodes configured for the deployment environment"
