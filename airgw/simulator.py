# airgw/simulator.py

"""Lab AIR node simulator: a Flask application answering UCIP calls.

The simulator keeps subscribers in memory and understands the methods
used by the gateway (GetBalanceAndDate, GetAccountDetails, Refill and
UpdateBalanceAndDate). It is meant for the lab environment, demos and
tests -- not as a charging system.

Config (section `simulator' -- see also: airgw.config):

    simulator.bind: "127.0.0.1:10010"
    simulator.debug: false
    simulator.subscribers: {"1234567890": {"balance": 10000}}

Each subscriber record may contain: balance (int, default: 0), currency
(default: 'USD'), service_class (int, default: 1), language (int,
default: 1).

Run with `airgw-simulator -c my_config' (served by gunicorn, or by the
Flask development server if simulator.debug is true).

"""


import copy
import logging
import os
import sys
import threading

from itertools import chain
from optparse import OptionParser

from flask import Flask, Response, abort, jsonify, request
from gunicorn.app.base import Application
from gunicorn.config import Config

from airgw import schema
from airgw.common import encoding
from airgw.common import errors
from airgw.common.const import *
from airgw.common.types import Integer, String, Struct
from airgw.config import GatewayConfig


SIMULATOR_CONFIG_DEFAULTS = {
    'simulator': {
        'bind': '127.0.0.1:10010',
        'debug': False,
        'subscribers': {},
    }
}

SIMULATOR_CONFIG_SCHEMAS = [schema.by_example(SIMULATOR_CONFIG_DEFAULTS)]

SUBSCRIBER_DEFAULTS = {
    'balance': 0,
    'currency': DEFAULT_TRANSACTION_CURRENCY,
    'service_class': 1,
    'language': 1,
}


class SimulatorFault(Exception):

    "UCIP fault to be returned to the caller"

    def __init__(self, code, message):
        super(SimulatorFault, self).__init__(message)
        self.code = code
        self.message = message



class ConfigurableApplication(Application):
    @staticmethod
    def default_cfg():
        return {
            'worker_class': 'sync',
            # subscribers live in memory => one worker process
            'workers': 1,
            'threads': 4,
            'preload_app': True,
        }

    def __init__(self, app, **config):
        self.app = app
        self._config = config
        super(ConfigurableApplication, self).__init__()

    def load(self):
        return self.app

    def init(self, parser, opts, args):
        self.cfg.set('default_proc_name', 'airgw-simulator')

    def load_config(self):
        self.cfg = Config()
        for k, v in chain(self.default_cfg().items(), self._config.items()):
            self.cfg.set(k.lower(), v)



class AirSimulator(object):

    def __init__(self, subscribers=None, log=None):
        self.subscribers = {}
        for number, record in (subscribers or {}).items():
            self.add_subscriber(number, **record)
        self.lock = threading.Lock()
        self.log = log if log is not None else logging.getLogger('airgw.simulator')
        self.methods = {
            GET_BALANCE_METHOD: self.get_balance,
            GET_ACCOUNT_DETAILS_METHOD: self.get_account_details,
            REFILL_METHOD: self.refill,
            UPDATE_BALANCE_METHOD: self.update_balance,
        }

    def add_subscriber(self, subscriber_number, **record):
        subscriber = copy.deepcopy(SUBSCRIBER_DEFAULTS)
        subscriber.update(record)
        self.subscribers[subscriber_number] = subscriber
        return subscriber

    #
    # UCIP methods (each gets the request params struct as a dict)

    def _subscriber(self, params):
        number = params.get('subscriberNumber')
        try:
            return number, self.subscribers[number]
        except KeyError:
            raise SimulatorFault(RESPONSE_SUBSCRIBER_NOT_FOUND,
                                 'SUBSCRIBER_NOT_FOUND')

    @staticmethod
    def _amount(params, name):
        amount = params.get(name)
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise SimulatorFault(RESPONSE_INVALID_AMOUNT, 'INVALID_AMOUNT')
        return amount

    def get_balance(self, params):
        number, subscriber = self._subscriber(params)
        return Struct([
                ('subscriberNumber', String(number)),
                ('balance', Integer(subscriber['balance'])),
                ('currency', String(subscriber['currency'])),
        ])

    def get_account_details(self, params):
        number, subscriber = self._subscriber(params)
        return Struct([
                ('subscriberNumber', String(number)),
                ('serviceClassCurrent', Integer(subscriber['service_class'])),
                ('languageIDCurrent', Integer(subscriber['language'])),
                ('accountFlags', Integer(params.get(
                    'requestedInformationFlags',
                    DEFAULT_ACCOUNT_INFORMATION_FLAGS))),
                ('balance', Integer(subscriber['balance'])),
        ])

    def refill(self, params):
        number, subscriber = self._subscriber(params)
        amount = self._amount(params, 'refillAmount')
        if amount <= 0:
            raise SimulatorFault(RESPONSE_INVALID_AMOUNT, 'INVALID_AMOUNT')
        with self.lock:
            subscriber['balance'] = int(subscriber['balance'] + amount)
            balance = subscriber['balance']
        return Struct([
                ('subscriberNumber', String(number)),
                ('balance', Integer(balance)),
                ('transactionId', String(params.get('transactionId', ''))),
        ])

    def update_balance(self, params):
        number, subscriber = self._subscriber(params)
        amount = self._amount(params, 'adjustmentAmount')
        with self.lock:
            balance = int(subscriber['balance'] + amount)
            if balance < 0:
                raise SimulatorFault(RESPONSE_INSUFFICIENT_BALANCE,
                                     'INSUFFICIENT_BALANCE')
            subscriber['balance'] = balance
        return Struct([
                ('subscriberNumber', String(number)),
                ('balance', Integer(balance)),
                ('transactionId', String(params.get('transactionId', ''))),
        ])

    #
    # HTTP

    def dispatch(self, body):
        "Handle a <methodCall> document; return a <methodResponse> one"
        ucip_request = encoding.loads_call(body)
        self.log.info('UCIP call: %s', ucip_request.method_name)
        try:
            try:
                method = self.methods[ucip_request.method_name]
            except KeyError:
                raise SimulatorFault(RESPONSE_SYSTEM_ERROR,
                                     'Unknown method: {0}'
                                     .format(ucip_request.method_name))
            if ucip_request.params and isinstance(ucip_request.params[0],
                                                  Struct):
                params = ucip_request.params[0].to_python()
            else:
                params = {}
            result = method(params)
        except SimulatorFault as exc:
            self.log.info('UCIP fault %s: %s', exc.code, exc.message)
            return encoding.dumps_fault(exc.code, exc.message)
        return encoding.dumps_response(result)

    def air_view(self):
        try:
            response_body = self.dispatch(request.get_data())
        except errors.RPCProtocolDecodeError as exc:
            abort(400, str(exc))
        return Response(response_body, content_type=XMLRPC_CONTENT_TYPE)

    def health_view(self):
        return jsonify(status='healthy', mode='simulator')

    def build_wsgi_app(self, path=DEFAULT_AIR_PATH):
        flask_app = Flask(__name__)
        flask_app.route(path, methods=['POST'])(self.air_view)
        flask_app.route('/health', methods=['GET'])(self.health_view)
        return flask_app

    def start(self, bind, path=DEFAULT_AIR_PATH, debug=False):
        flask_app = self.build_wsgi_app(path)
        if debug:
            host, port = bind.rsplit(':', 1)
            flask_app.run(host=host, port=int(port), debug=True)
        else:
            app = ConfigurableApplication(flask_app, bind=bind)
            app.run()



def main():
    parser = OptionParser(usage="usage: %prog [options]")
    parser.add_option('-c', '--config', dest='config_paths', action='append',
                      default=[], help='Config source (may be repeated)',
                      metavar='CONFIG')
    (o, a) = parser.parse_args(sys.argv[1:])

    config = GatewayConfig(o.config_paths,
                           extra_schemas=SIMULATOR_CONFIG_SCHEMAS)
    log = config.configure_logging()
    sim_config = config['simulator']
    simulator = AirSimulator(sim_config['subscribers'], log=log)
    log.info('Starting AIR simulator at %s (pid: %s)',
             sim_config['bind'], os.getpid())
    simulator.start(sim_config['bind'], path=config['air']['path'],
                    debug=sim_config['debug'])


if __name__ == '__main__':
    main()
