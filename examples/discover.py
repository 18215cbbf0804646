#!/usr/bin/env python
#
# Find the gateway of the local network and show its external IP address.
#

import logging

import upnpigd

logging.basicConfig(level=logging.DEBUG)

try:
    gateway = upnpigd.search_gateway(timeout=5)
except upnpigd.SearchError as exc:
    print("No gateway found: %s" % exc)
else:
    print("Gateway at %s" % gateway)
    print("External IP: %s" % gateway.get_external_ip())
