#!/usr/bin/env python
# -*- encoding: utf-8 -*-

"""Issue a single UCIP call through the gateway.

    airgw-request -c /etc/airgw.conf get_balance subscriber_number=1234567890
    airgw-request -c /etc/airgw.conf -k AF1 refill \\
            subscriber_number=1234567890 refill_amount=500
    airgw-request -c /etc/airgw.conf -n air1 GetBalanceAndDate \\
            '{"subscriberNumber": "1234567890"}'
    airgw-request -c /etc/airgw.conf -L

The method is either a typed gateway operation (arguments given as
key=value) or a raw UCIP method name (arguments are positional, each
wrapped into an XML-RPC value). Argument values are decoded from JSON
unless -R is given (values that are not valid JSON stay strings).

"""


import asyncio
import json
import logging
import sys
from optparse import OptionParser

from airgw.common import encoding
from airgw.common.types import Request, wrap
from airgw.config import GatewayConfig
from airgw.gateway import Gateway

TYPED_OPERATIONS = ('get_balance', 'refill', 'update_balance',
                    'get_account_details')


def decode_arg(arg):
    try:
        return json.loads(arg)
    except ValueError:
        return arg


def split_args(args, raw=False):
    "Split ['k=v', 'x', ...] into (positional, keyword) arguments"
    vargs = []
    kwargs = {}
    for arg in args:
        key, sep, value = arg.partition('=')
        if sep and key.isidentifier():
            kwargs[key] = value if raw else decode_arg(value)
        else:
            vargs.append(arg if raw else decode_arg(arg))
    return vargs, kwargs


def dump_response(response, as_json=False):
    result = response.to_python()
    if as_json:
        return json.dumps(result, default=_json_default)
    return repr(result)


def dump_nodes(nodes):
    "One line per configured node (inactive ones marked)"
    return ['{0} {1}:{2} af_type={3} environment={4}{5}'.format(
                node.node_id, node.host, node.port, node.routing_key,
                node.environment, '' if node.active else ' (inactive)')
            for node in nodes]


def _json_default(obj):
    # datetimes from dateTime.iso8601 values
    return encoding.format_datetime(obj)


async def run(config, meth, vargs, kwargs, node_id=None, routing_key=None):
    gateway = Gateway.from_config(config, log=logging.getLogger('airgw'))
    await gateway.initialize()
    try:
        if meth in TYPED_OPERATIONS:
            operation = getattr(gateway, meth)
            return await operation(*vargs, node_id=node_id,
                                   routing_key=routing_key, **kwargs)
        request = Request(meth, [wrap(arg) for arg in vargs])
        return await gateway.execute_request(request, node_id, routing_key)
    finally:
        await gateway.shutdown()


def main():
    parser = OptionParser(usage="usage: %prog [options] method args...")
    parser.add_option('-c', '--config', dest='config_paths', action='append', default=[], help='Config source (may be repeated)', metavar='CONFIG')
    parser.add_option('-n', '--node', dest='node_id', default=None, help='Send the call to this node', metavar='NODE')
    parser.add_option('-k', '--routing-key', dest='routing_key', default=None, help='Route the call by this AF type', metavar='KEY')
    parser.add_option('-l', '--loglevel', dest='loglevel', default='WARNING', help='Log level', metavar='LEVEL')
    parser.add_option('-R', '--raw', dest='raw', action='store_true', help="Don't decode JSON in command line params")
    parser.add_option('-j', '--json', dest='json', action='store_true', help="Dump response in JSON format")
    parser.add_option('-L', '--list-nodes', dest='list_nodes', action='store_true', help='List configured nodes and exit')

    (o, a) = parser.parse_args(sys.argv[1:])

    if o.list_nodes:
        config = GatewayConfig(o.config_paths)
        for line in dump_nodes(config.node_definitions().get_all_nodes()):
            print(line)
        sys.exit(0)

    if len(a) == 0:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(format="%(asctime)s %(name)s:%(levelname)s: %(message)s",
                        level=getattr(logging, o.loglevel.upper()))

    meth = a[0]
    if meth in TYPED_OPERATIONS:
        vargs, kwargs = split_args(a[1:], o.raw)
    else:
        vargs, kwargs = [arg if o.raw else decode_arg(arg) for arg in a[1:]], {}

    # no periodic stats logging for a single call
    config = GatewayConfig(o.config_paths + ['air.stats_interval=0'])

    retcode = 0
    try:
        response = asyncio.run(run(config, meth, vargs, kwargs,
                                   o.node_id, o.routing_key))
    except Exception:
        logging.getLogger().error('UCIP call failed', exc_info=True)
        retcode = 1
    else:
        print(dump_response(response, o.json))
        if response.is_fault:
            retcode = 1

    sys.exit(retcode)


if __name__ == '__main__':
    main()
