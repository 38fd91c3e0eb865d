# airgw/common/const.py

"""AIR gateway common constants:

* UCIP method names used by the typed gateway operations:

  * GET_BALANCE_METHOD, REFILL_METHOD, UPDATE_BALANCE_METHOD,
    GET_ACCOUNT_DETAILS_METHOD;


* UCIP response codes (ones that the gateway and the lab simulator
  know by name; any other code is passed through as-is);


* Various defaults:

  * DEFAULT_AIR_PATH -- path of the XML-RPC endpoint on AIR nodes;

  * DEFAULT_REQUEST_TIMEOUT -- per-call timeout, in milliseconds;

  * DEFAULT_MAX_CONNECTIONS, DEFAULT_MAX_CONNECTIONS_PER_ROUTE -- sizing
    of the HTTP connection pool shared by all node clients;

  * DEFAULT_ENVIRONMENT -- deployment environment whose nodes are used;

  * DEFAULT_LOG_HANDLER_SETTINGS -- default logger handler settings (see:
    airgw.config documentation about configuration file structure and
    content).

"""


# UCIP methods
GET_BALANCE_METHOD = 'GetBalanceAndDate'
REFILL_METHOD = 'Refill'
UPDATE_BALANCE_METHOD = 'UpdateBalanceAndDate'
GET_ACCOUNT_DETAILS_METHOD = 'GetAccountDetails'

# UCIP response codes
RESPONSE_SUCCESS = 0
RESPONSE_SYSTEM_ERROR = 1
RESPONSE_SUBSCRIBER_NOT_FOUND = 100
RESPONSE_INSUFFICIENT_BALANCE = 102
RESPONSE_INVALID_AMOUNT = 103

UNKNOWN_FAULT_CODE = -1
UNKNOWN_FAULT_STRING = 'Unknown fault'

# Request defaults
DEFAULT_BALANCE_INFORMATION_FLAGS = 0
DEFAULT_ACCOUNT_INFORMATION_FLAGS = 0xFFFFFFFF
DEFAULT_TRANSACTION_CURRENCY = 'USD'
DEFAULT_PROFILE_ID = ''
DEFAULT_TRANSACTION_TYPE = 'ADJUSTMENT'
TRANSACTION_ID_PREFIX = 'TXN'

# Transport defaults
XMLRPC_CONTENT_TYPE = 'text/xml'
USER_AGENT = 'airgw/1.0'
DEFAULT_AIR_PATH = '/Air'
DEFAULT_REQUEST_TIMEOUT = 30000
DEFAULT_MAX_CONNECTIONS = 200
DEFAULT_MAX_CONNECTIONS_PER_ROUTE = 20

# Statistics
STATS_SMOOTHING_FACTOR = 0.1
DEFAULT_STATS_INTERVAL = 60000

DEFAULT_ENVIRONMENT = 'lab'
DEFAULT_LOG_HANDLER_SETTINGS = dict(
        cls='StreamHandler',
        kwargs={},
        level='info',
        format='%(asctime)s %(name)s:%(levelname)s @%(threadName)s: %(message)s'
)
