#!/usr/bin/env python

# Start the lab simulator first:
#     airgw-simulator -c airgw.config:lab.conf

import asyncio

from airgw.config import GatewayConfig
from airgw.gateway import Gateway


async def main():
    config = GatewayConfig(['airgw.config:lab.conf', 'air.stats_interval=0'])
    config.configure_logging()
    gateway = Gateway.from_config(config)

    await gateway.initialize()
    try:
        response = await gateway.get_balance('1234567890', routing_key='AF1')
        print('Balance:', response.to_python())

        response = await gateway.refill('1234567890', 500)
        print('Refill:', response.to_python())

        # -> fault 102 (INSUFFICIENT_BALANCE) -- a response, not an exception
        response = await gateway.update_balance('1234567891', -100)
        print('Update:', response.to_python())

        response = await gateway.get_account_details('1234567890',
                                                     node_id='air1')
        print('Account details:', response.to_python())

        print('\nStats:', gateway.get_stats())
    finally:
        await gateway.shutdown()


asyncio.run(main())
