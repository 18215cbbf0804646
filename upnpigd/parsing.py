"""
Translation of gateway responses into results and per-operation errors.

The gateway reports failures as a UPnP error code. Which codes an operation
knows about differs: a code outside an operation's table is surfaced as that
operation's REQUEST_ERROR variant wrapping the `RequestError` it came from.
"""
import ipaddress

from .errors import (
    AddAnyPortError, AddAnyPortErrorKind, AddPortError, AddPortErrorKind,
    GetExternalIpError, GetExternalIpErrorKind, RemovePortError, RemovePortErrorKind,
    RequestError, RequestErrorKind)

GET_EXTERNAL_IP_ERRORS = {
    401: GetExternalIpErrorKind.ACTION_NOT_AUTHORIZED,
    606: GetExternalIpErrorKind.ACTION_NOT_AUTHORIZED,
}

ADD_PORT_ERRORS = {
    401: AddPortErrorKind.ACTION_NOT_AUTHORIZED,
    606: AddPortErrorKind.ACTION_NOT_AUTHORIZED,
    716: AddPortErrorKind.INTERNAL_PORT_ZERO_INVALID,
    717: AddPortErrorKind.PORT_IN_USE,
    724: AddPortErrorKind.SAME_PORT_VALUES_REQUIRED,
    725: AddPortErrorKind.ONLY_PERMANENT_LEASES_SUPPORTED,
    728: AddPortErrorKind.DESCRIPTION_TOO_LONG,
}

ADD_ANY_PORT_ERRORS = {
    401: AddAnyPortErrorKind.ACTION_NOT_AUTHORIZED,
    606: AddAnyPortErrorKind.ACTION_NOT_AUTHORIZED,
    715: AddAnyPortErrorKind.NO_PORTS_AVAILABLE,
    716: AddAnyPortErrorKind.INTERNAL_PORT_ZERO_INVALID,
    717: AddAnyPortErrorKind.EXTERNAL_PORT_IN_USE,
    724: AddAnyPortErrorKind.EXTERNAL_PORT_IN_USE,
    725: AddAnyPortErrorKind.ONLY_PERMANENT_LEASES_SUPPORTED,
    728: AddAnyPortErrorKind.DESCRIPTION_TOO_LONG,
}

REMOVE_PORT_ERRORS = {
    401: RemovePortErrorKind.ACTION_NOT_AUTHORIZED,
    606: RemovePortErrorKind.ACTION_NOT_AUTHORIZED,
    714: RemovePortErrorKind.NO_SUCH_PORT_MAPPING,
}


def _convert(error_class, known_codes, request_error):
    if request_error.kind is RequestErrorKind.ERROR_CODE:
        kind = known_codes.get(request_error.code)
        if kind is not None:
            return error_class(kind)
    return error_class.from_request_error(request_error)


def convert_get_external_ip_error(request_error):
    return _convert(GetExternalIpError, GET_EXTERNAL_IP_ERRORS, request_error)


def convert_add_port_error(request_error):
    return _convert(AddPortError, ADD_PORT_ERRORS, request_error)


def convert_add_any_port_error(request_error):
    return _convert(AddAnyPortError, ADD_ANY_PORT_ERRORS, request_error)


def convert_remove_port_error(request_error):
    return _convert(RemovePortError, REMOVE_PORT_ERRORS, request_error)


def external_ip_to_add_any_port_error(error):
    """
    Re-express a `GetExternalIpError` raised by `get_any_address`.
    """
    if error.kind is GetExternalIpErrorKind.ACTION_NOT_AUTHORIZED:
        return AddAnyPortError(AddAnyPortErrorKind.ACTION_NOT_AUTHORIZED)
    return AddAnyPortError.from_request_error(error.request_error)


def parse_get_external_ip_response(params_out):
    text = params_out.get("NewExternalIPAddress")
    try:
        return ipaddress.IPv4Address(text)
    except ValueError:
        raise GetExternalIpError.from_request_error(RequestError(
            RequestErrorKind.INVALID_RESPONSE,
            "Invalid NewExternalIPAddress: %r" % text))


def parse_add_any_port_response(params_out, requested_port):
    """
    The allocated port is the gateway's NewReservedPort when it reports one,
    otherwise the port that was requested.
    """
    text = params_out.get("NewReservedPort")
    if text is None:
        return requested_port
    try:
        port = int(text)
    except ValueError:
        port = None
    if port is None or not 0 < port <= 65535:
        raise AddAnyPortError.from_request_error(RequestError(
            RequestErrorKind.INVALID_RESPONSE,
            "Invalid NewReservedPort: %r" % text))
    return port
