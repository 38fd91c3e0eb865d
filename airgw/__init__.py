"""
=====================================
AIR gateway (airgw) -- UCIP over XML-RPC
=====================================

A gateway translating a small domain API (balance lookup, refill,
balance adjustment, account details) into UCIP calls -- XML-RPC over
HTTP -- against a pool of AIR charging-system nodes, with per-node and
per-AF-type (round-robin) routing and live transaction statistics.

-----------------------------
Requirements and dependencies
-----------------------------

Python 3.9+ and:

* aiohttp -- HTTP client (node calls are asyncio coroutines);

* jsonschema -- config validation and completion with defaults;

* flask + gunicorn -- the lab AIR node simulator.

-----------------------
Public package contents
-----------------------

* airgw.gateway -- the Gateway facade and UCIP request builders;

* airgw.client -- AirClient: XML-RPC client of one AIR node;

* airgw.routing -- NodeRegistry, RoutingTable and RequestRouter;

* airgw.stats -- TransactionStats and the optional StatsReporter;

* airgw.config -- config loading/validation and the static node
  definitions provider; airgw.config.loader -- the "props" format;

* airgw.simulator -- the lab AIR node simulator (Flask app);

* airgw.airgw_request -- the airgw-request command line tool;

* airgw.common.types -- XML-RPC values, Request, Response and
  NodeDescriptor;

* airgw.common.encoding -- the XML-RPC codec;

* airgw.common.const -- common constants and defaults;

* airgw.common.errors -- exception classes;

* airgw.common.utils -- logging utilities;

* airgw.test.test_* -- unit tests.

"""
