import ipaddress
import random
from collections import namedtuple, OrderedDict
from enum import Enum

from . import const
from .errors import (
    AddAnyPortError, AddAnyPortErrorKind, AddPortError, AddPortErrorKind, GetExternalIpError,
    RequestError, ValidationError)
from .parsing import (
    convert_add_any_port_error, convert_add_port_error, convert_get_external_ip_error,
    convert_remove_port_error, external_ip_to_add_any_port_error, parse_add_any_port_response,
    parse_get_external_ip_response)
from .soap import SOAP
from .util import _getLogger

_log = _getLogger("Gateway")


class PortMappingProtocol(Enum):
    """
    Protocols available for port mapping.
    """

    TCP = "TCP"
    UDP = "UDP"

    def __str__(self):
        return self.value


def _in_range(value, bounds):
    low, high = bounds
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


class Gateway(namedtuple("Gateway", ["addr", "control_url"])):
    """
    A gateway found by `search_gateway`. `addr` is the `(ip, port)` the
    gateway listens on and `control_url` the path SOAP requests are posted to.

    Every method opens its own connection, so a `Gateway` can be shared
    freely. The `async_` methods are the coroutine equivalents of the
    blocking ones and raise the same errors.

    Example:

    >>> gateway = search_gateway()
    >>> gateway.get_external_ip()
    IPv4Address('203.0.113.7')
    >>> gateway.add_any_port(PortMappingProtocol.TCP, ("192.168.1.10", 8080), 3600, "web")
    41236
    """

    __slots__ = ()

    # Only equal to other gateways, never to a plain (addr, control_url) tuple.
    def __eq__(self, other):
        return isinstance(other, Gateway) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((Gateway, tuple(self)))

    def __str__(self):
        return self.url

    @property
    def url(self):
        return "http://%s:%d%s" % (self.addr[0], self.addr[1], self.control_url)

    def _soap(self):
        return SOAP(self.url, const.WANIP_SERVICE_TYPE)

    @staticmethod
    def validate_args(protocol=None, external_port=None, local_addr=None,
                      lease_duration=None, description=None):
        """
        Validate port mapping arguments, raising `ValidationError` with the
        reason for every bad one. Arguments left as None aren't checked.
        """
        reasons = {}
        if protocol is not None and not isinstance(protocol, PortMappingProtocol):
            reasons["protocol"] = "must be a PortMappingProtocol"
        if external_port is not None and not _in_range(external_port, const.PORT_RANGE):
            reasons["external_port"] = "must be a number in the range %s to %s" % const.PORT_RANGE
        if local_addr is not None:
            try:
                host, port = local_addr
                ipaddress.IPv4Address(host)
            except (TypeError, ValueError):
                reasons["local_addr"] = "must be an (IPv4 address, port) pair"
            else:
                if not _in_range(port, const.PORT_RANGE):
                    reasons["local_addr"] = (
                        "port must be a number in the range %s to %s" % const.PORT_RANGE)
        if lease_duration is not None and not _in_range(
                lease_duration, const.LEASE_DURATION_RANGE):
            reasons["lease_duration"] = (
                "must be a number in the range %s to %s" % const.LEASE_DURATION_RANGE)
        if description is not None and not isinstance(description, str):
            reasons["description"] = "must be a string"
        if reasons:
            raise ValidationError(reasons)

    @staticmethod
    def _add_port_args(protocol, external_port, local_addr, lease_duration, description):
        # Order as listed in the WANIPConnection SCPD.
        return OrderedDict([
            ("NewRemoteHost", ""),
            ("NewExternalPort", external_port),
            ("NewProtocol", protocol),
            ("NewInternalPort", local_addr[1]),
            ("NewInternalClient", local_addr[0]),
            ("NewEnabled", 1),
            ("NewPortMappingDescription", description),
            ("NewLeaseDuration", lease_duration),
        ])

    def _prepare_add_port(self, protocol, external_port, local_addr, lease_duration, description):
        self.validate_args(protocol=protocol, external_port=external_port,
                           local_addr=local_addr, lease_duration=lease_duration,
                           description=description)
        if local_addr[1] == 0:
            raise AddPortError(AddPortErrorKind.INTERNAL_PORT_ZERO_INVALID)
        if external_port == 0:
            raise AddPortError(AddPortErrorKind.EXTERNAL_PORT_ZERO_INVALID)
        return self._add_port_args(
            protocol, external_port, local_addr, lease_duration, description)

    def _prepare_add_any_port(self, protocol, local_addr, lease_duration, description):
        self.validate_args(protocol=protocol, local_addr=local_addr,
                           lease_duration=lease_duration, description=description)
        if local_addr[1] == 0:
            raise AddAnyPortError(AddAnyPortErrorKind.INTERNAL_PORT_ZERO_INVALID)
        # A single draw: retrying on conflicts is left to the caller.
        external_port = random.randint(*const.ANY_PORT_RANGE)
        _log.debug("Trying external port %d for %s", external_port, local_addr)
        return external_port, self._add_port_args(
            protocol, external_port, local_addr, lease_duration, description)

    def _prepare_remove_port(self, protocol, external_port):
        self.validate_args(protocol=protocol, external_port=external_port)
        return OrderedDict([
            ("NewRemoteHost", ""),
            ("NewExternalPort", external_port),
            ("NewProtocol", protocol),
        ])

    def get_external_ip(self):
        """
        Get the external IP address of the gateway.
        """
        try:
            params_out = self._soap().call("GetExternalIPAddress")
        except RequestError as exc:
            raise convert_get_external_ip_error(exc) from exc
        return parse_get_external_ip_response(params_out)

    async def async_get_external_ip(self):
        try:
            params_out = await self._soap().async_call("GetExternalIPAddress")
        except RequestError as exc:
            raise convert_get_external_ip_error(exc) from exc
        return parse_get_external_ip_response(params_out)

    def add_port(self, protocol, external_port, local_addr, lease_duration, description):
        """
        Map `external_port` on the gateway to `local_addr`. `lease_duration`
        is in seconds, 0 meaning a permanent mapping.
        """
        arg_in = self._prepare_add_port(
            protocol, external_port, local_addr, lease_duration, description)
        try:
            self._soap().call("AddPortMapping", arg_in)
        except RequestError as exc:
            raise convert_add_port_error(exc) from exc

    async def async_add_port(self, protocol, external_port, local_addr, lease_duration,
                             description):
        arg_in = self._prepare_add_port(
            protocol, external_port, local_addr, lease_duration, description)
        try:
            await self._soap().async_call("AddPortMapping", arg_in)
        except RequestError as exc:
            raise convert_add_port_error(exc) from exc

    def add_any_port(self, protocol, local_addr, lease_duration, description):
        """
        Map a random external port to `local_addr` and return it.

        Exactly one port is tried. When it is taken, `AddAnyPortError` with
        kind EXTERNAL_PORT_IN_USE is raised and calling again draws a new one.
        """
        external_port, arg_in = self._prepare_add_any_port(
            protocol, local_addr, lease_duration, description)
        return self._add_any_port(external_port, arg_in)

    def _add_any_port(self, external_port, arg_in):
        try:
            params_out = self._soap().call("AddPortMapping", arg_in)
        except RequestError as exc:
            raise convert_add_any_port_error(exc) from exc
        return parse_add_any_port_response(params_out, external_port)

    async def async_add_any_port(self, protocol, local_addr, lease_duration, description):
        external_port, arg_in = self._prepare_add_any_port(
            protocol, local_addr, lease_duration, description)
        return await self._async_add_any_port(external_port, arg_in)

    async def _async_add_any_port(self, external_port, arg_in):
        try:
            params_out = await self._soap().async_call("AddPortMapping", arg_in)
        except RequestError as exc:
            raise convert_add_any_port_error(exc) from exc
        return parse_add_any_port_response(params_out, external_port)

    def get_any_address(self, protocol, local_addr, lease_duration, description):
        """
        Get an external `(ip, port)` mapped to `local_addr`: `get_external_ip`
        followed by `add_any_port`. Arguments are checked before either
        request is sent. The gateway gives no guarantee that its external IP
        doesn't change between the two calls.
        """
        external_port, arg_in = self._prepare_add_any_port(
            protocol, local_addr, lease_duration, description)
        try:
            ip = self.get_external_ip()
        except GetExternalIpError as exc:
            raise external_ip_to_add_any_port_error(exc) from exc
        return str(ip), self._add_any_port(external_port, arg_in)

    async def async_get_any_address(self, protocol, local_addr, lease_duration, description):
        external_port, arg_in = self._prepare_add_any_port(
            protocol, local_addr, lease_duration, description)
        try:
            ip = await self.async_get_external_ip()
        except GetExternalIpError as exc:
            raise external_ip_to_add_any_port_error(exc) from exc
        return str(ip), await self._async_add_any_port(external_port, arg_in)

    def remove_port(self, protocol, external_port):
        """
        Remove the mapping of `external_port`.
        """
        arg_in = self._prepare_remove_port(protocol, external_port)
        try:
            self._soap().call("DeletePortMapping", arg_in)
        except RequestError as exc:
            raise convert_remove_port_error(exc) from exc

    async def async_remove_port(self, protocol, external_port):
        arg_in = self._prepare_remove_port(protocol, external_port)
        try:
            await self._soap().async_call("DeletePortMapping", arg_in)
        except RequestError as exc:
            raise convert_remove_port_error(exc) from exc
