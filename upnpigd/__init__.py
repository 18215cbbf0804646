# Copyright (c) 2012-2016, Ferry Boender <ferry.boender@gmail.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
This module provides a client for the Internet Gateway Device (IGD) protocol
of UPnP routers. It finds the gateway of the local network, and asks it for
its external IP address and to add or remove port mappings.

The usual flow for working with a gateway is:

- Discover the gateway using SSDP.

  An M-SEARCH request for an InternetGatewayDevice is multicast over the
  network and the first reply is used. The reply includes the URL of an XML
  file describing the gateway. That file is streamed to find the control URL
  of its WANIPConnection (or WANPPPConnection) service. `search_gateway()`
  returns a `Gateway` instance holding the gateway's address and that URL.

- Call actions on the gateway using SOAP.

  `Gateway` methods validate their arguments, POST a SOAP request to the
  control URL and decode the result. An UPnP error reported by the gateway is
  raised as the error class of the method, e.g. `AddPortError`, whose `kind`
  tells what went wrong.

Every operation has a coroutine twin prefixed with `async_`, for use with
asyncio.

The following example maps a port on the gateway and removes it again:

------------------------------------------------------------------------------
import upnpigd

gateway = upnpigd.search_gateway(timeout=5)
print("External IP: %s" % gateway.get_external_ip())
while True:
    try:
        port = gateway.add_any_port(
            upnpigd.PortMappingProtocol.TCP, ("192.168.1.10", 8080), 3600, "my server")
        break
    except upnpigd.AddAnyPortError as exc:
        # Only one port is tried per call; draw another one.
        if exc.kind is not upnpigd.AddAnyPortErrorKind.EXTERNAL_PORT_IN_USE:
            raise
gateway.remove_port(upnpigd.PortMappingProtocol.TCP, port)
------------------------------------------------------------------------------

Useful Links:

* http://upnp.org/specs/gw/UPnP-gw-WANIPConnection-v1-Service.pdf
* http://upnp.org/specs/arch/UPnP-arch-DeviceArchitecture-v1.1.pdf
"""
from upnpigd import const, errors, gateway, parsing, soap, ssdp, util  # noqa: F401
from .errors import (
    AddAnyPortError, AddAnyPortErrorKind, AddPortError, AddPortErrorKind, GetExternalIpError,
    GetExternalIpErrorKind, RemovePortError, RemovePortErrorKind, RequestError,
    RequestErrorKind, SearchError, SearchErrorKind, ValidationError)
from .gateway import Gateway, PortMappingProtocol
from .ssdp import async_search_gateway, search_gateway

__all__ = [
    "Gateway", "PortMappingProtocol", "search_gateway", "async_search_gateway",
    "RequestError", "RequestErrorKind", "SearchError", "SearchErrorKind",
    "GetExternalIpError", "GetExternalIpErrorKind", "AddPortError", "AddPortErrorKind",
    "AddAnyPortError", "AddAnyPortErrorKind", "RemovePortError", "RemovePortErrorKind",
    "ValidationError",
]
