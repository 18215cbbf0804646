#!/usr/bin/env python
#
# Map a random external port to a local one with asyncio, then remove it.
# Only one port is tried per add_any_port() call, so retrying on a conflict
# is up to us.
#

import asyncio
import sys

import upnpigd

TRIES = 10


async def main(local_ip, local_port):
    gateway = await upnpigd.async_search_gateway(timeout=5)
    protocol = upnpigd.PortMappingProtocol.TCP
    for _ in range(TRIES):
        try:
            ip, port = await gateway.async_get_any_address(
                protocol, (local_ip, local_port), 60, "upnpigd example")
            break
        except upnpigd.AddAnyPortError as exc:
            if exc.kind is not upnpigd.AddAnyPortErrorKind.EXTERNAL_PORT_IN_USE:
                raise
    else:
        sys.exit("No free port found after %d tries" % TRIES)

    print("%s:%d is now forwarded to %s:%d" % (ip, port, local_ip, local_port))
    await gateway.async_remove_port(protocol, port)
    print("Removed mapping of port %d" % port)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1], int(sys.argv[2])))
