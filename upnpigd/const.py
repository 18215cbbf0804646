HTTP_TIMEOUT = 10

DEFAULT_SEARCH_TIMEOUT = 3
DEFAULT_BIND_ADDR = "0.0.0.0"

SSDP_TARGET = ("239.255.255.250", 1900)
SSDP_MAX_DATAGRAM = 1500
SEARCH_REQUEST = (
    "M-SEARCH * HTTP/1.1\r\n"
    "Host:239.255.255.250:1900\r\n"
    "ST:urn:schemas-upnp-org:device:InternetGatewayDevice:1\r\n"
    'Man:"ssdp:discover"\r\n'
    "MX:3\r\n\r\n"
).encode("utf-8")

WANIP_SERVICE_TYPE = "urn:schemas-upnp-org:service:WANIPConnection:1"
WANPPP_SERVICE_TYPE = "urn:schemas-upnp-org:service:WANPPPConnection:1"
WAN_SERVICE_TYPES = (WANIP_SERVICE_TYPE, WANPPP_SERVICE_TYPE)

# Inclusive bounds for the external port drawn by add_any_port.
ANY_PORT_RANGE = (1, 65534)

PORT_RANGE = (0, 65535)
LEASE_DURATION_RANGE = (0, 4294967295)

DESCRIPTION_CHUNK_SIZE = 1024
