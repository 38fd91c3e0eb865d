# airgw/client.py

"""AIR gateway -- the node client: XML-RPC over HTTP.

A simple example:

    import asyncio

    from airgw.client import AirClient
    from airgw.common.types import Request, wrap

    async def main():
        async with AirClient('air1.example.net', 10010, timeout=5000) as air:
            response = await air.call(Request('GetBalanceAndDate', [
                    wrap({'subscriberNumber': '1234567890',
                          'requestedInformationFlags': 0}),
            ]))
            print(response.to_python())

    asyncio.run(main())

Within the gateway (see: airgw.gateway) node clients share one
aiohttp.ClientSession (and so one connection pool) owned by the gateway;
a client constructed without a session creates and owns its own one.

Every call issues exactly one POST; nothing is retried here:

* non-2xx status (redirects included) => RPCTransportError;
* connection failure => RPCTransportError (the cause is chained);
* timeout => RPCTimeoutError;
* malformed response document => RPCProtocolDecodeError;
* <fault> in the response => a Response with non-zero response_code.

"""


import asyncio
import time

import aiohttp

from .common import encoding
from .common import errors
from .common import utils
from .common.const import (DEFAULT_AIR_PATH, DEFAULT_REQUEST_TIMEOUT,
                           USER_AGENT, XMLRPC_CONTENT_TYPE)



class AirClient(object):

    """XML-RPC client of one AIR node"""

    def __init__(self, host, port, path=DEFAULT_AIR_PATH,
                 timeout=DEFAULT_REQUEST_TIMEOUT, session=None,
                 user_agent=USER_AGENT, log=None):

        """Client initialization.

        Arguments:

        * host (str), port (int), path (str) -- the node endpoint is
          http://{host}:{port}{path};

        * timeout (int) -- per-call timeout in milliseconds (default --
          see: airgw.common.const.DEFAULT_REQUEST_TIMEOUT);

        * session (aiohttp.ClientSession or None) -- a shared session
          (default: None => the client creates its own one on the first
          call and closes it in close());

        * user_agent (str) -- User-Agent header value;

        * log (logging.Logger instance or str or None) -- logger object
          or name (default: None => 'airgw.client').

        """

        self.host = host
        self.port = int(port)
        self.path = path
        self._timeout = timeout
        self._url = 'http://{0}:{1}{2}'.format(host, self.port, path)
        self._headers = {
            'Content-Type': XMLRPC_CONTENT_TYPE,
            'User-Agent': user_agent,
        }
        self._session = session
        self._owns_session = session is None
        self._log = utils.get_logger(log, 'airgw.client')


    def __repr__(self):
        return '<{0} {1}>'.format(type(self).__name__, self._url)


    @property
    def url(self):
        return self._url


    @property
    def timeout(self):
        "Per-call timeout in milliseconds"
        return self._timeout


    async def __aenter__(self):
        return self


    async def __aexit__(self, exc_type, exc_value, tb):
        await self.close()


    async def close(self):
        "Close the session -- only if the client owns it"
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


    def _get_session(self):
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session


    async def call(self, request):

        "Remotely call a UCIP method; return a Response"

        body = encoding.dumps_call(request)
        self._log.debug('* remote call: %s -> %s', request.method_name,
                        self._url)
        self._log.debug('Request body: %s', body.decode('utf-8', 'replace'))

        start_time = time.monotonic()
        try:
            status, reason, response_body = await self._post(body)
        except asyncio.TimeoutError:
            elapsed = _elapsed_ms(start_time)
            self._log.error('%s call to %s timed out after %dms',
                            request.method_name, self._url, elapsed)
            raise errors.RPCTimeoutError(
                    'No response from {0} within {1}ms'
                    .format(self._url, self._timeout))
        except aiohttp.ClientError as exc:
            elapsed = _elapsed_ms(start_time)
            self._log.error('%s call to %s failed after %dms: %s',
                            request.method_name, self._url, elapsed, exc)
            raise errors.RPCTransportError(
                    'Connection to {0} failed: {1}'.format(self._url, exc)
            ) from exc

        elapsed = _elapsed_ms(start_time)
        self._log.debug('Response received in %dms, status: %s',
                        elapsed, status)

        if not 200 <= status < 300:
            raise errors.RPCTransportError(
                    'HTTP {0}: {1}'.format(status, reason),
                    status=status, body=response_body)

        try:
            response = encoding.loads_response(response_body)
        except errors.RPCProtocolDecodeError:
            self._log.error('Error parsing XML-RPC response from %s',
                            self._url, exc_info=True)
            raise
        self._log.debug('UCIP response code: %s', response.response_code)
        return response


    async def _post(self, body):
        timeout = aiohttp.ClientTimeout(total=self._timeout / 1000.0)
        async with self._get_session().post(self._url,
                                            data=body,
                                            headers=self._headers,
                                            allow_redirects=False,
                                            timeout=timeout) as resp:
            response_body = await resp.read()
            return resp.status, resp.reason, response_body



def _elapsed_ms(start_time):
    return (time.monotonic() - start_time) * 1000.0
