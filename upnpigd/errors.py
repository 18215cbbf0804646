from enum import Enum, unique


class ErrorCodeDescriptions(object):
    """
    Standard descriptions of UPnP error codes. Codes without an explicit entry
    are described by the range they fall into, or by `fallback` if given.
    """

    _ranges = (
        (606, 612, "These ErrorCodes are reserved for UPnP DeviceSecurity."),
        (613, 699, "Common action errors. Defined by UPnP Forum Technical Committee."),
        (700, 799, "Action-specific errors defined by UPnP Forum working committee."),
        (800, 899, "Action-specific errors for non-standard actions. Defined by UPnP vendor."),
    )

    def __init__(self, descriptions, fallback=None):
        self._descriptions = descriptions
        self._fallback = fallback

    def __getitem__(self, key):
        if not isinstance(key, int):
            raise KeyError("'key' must be an integer")
        try:
            return self._descriptions[key]
        except KeyError:
            pass
        if self._fallback is not None:
            return self._fallback[key]
        for low, high, description in self._ranges:
            if low <= key <= high:
                return description
        raise KeyError(key)

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default


ERR_CODE_DESCRIPTIONS = ErrorCodeDescriptions({
    401: "No action by that name at this service.",
    402: "Not enough in args, args in the wrong order, one or more in args are of the wrong "
         "data type.",
    403: "The current state of the service prevents invoking that action.",
    501: "May be returned if current state of service prevents invoking that action.",
    600: "The argument value is invalid",
    601: "An argument value is less than the minimum or more than the maximum value of the "
         "allowed value range, or is not in the allowed value list.",
    602: "The requested action is optional and is not implemented by the device.",
    603: "The device does not have sufficient memory available to complete the action.",
    604: "The device has encountered an error condition which it cannot resolve itself and "
         "required human intervention such as a reset or power cycle.",
    605: "A string argument is too long for the device to handle properly.",
})

# Error codes defined by the WANIPConnection/WANPPPConnection services, with
# the names the UPnP Forum gives them. The error kinds of each operation are
# assigned in `parsing` and don't always follow these names: 715, 716 and 728
# are read as NO_PORTS_AVAILABLE, INTERNAL_PORT_ZERO_INVALID and
# DESCRIPTION_TOO_LONG.
WAN_ERR_CODE_DESCRIPTIONS = ErrorCodeDescriptions({
    606: "The action requested REQUIRES authorization and the sender was not authorized.",
    714: "NoSuchEntryInArray: the specified value does not exist in the array.",
    715: "WildCardNotPermittedInSrcIP: the source IP address cannot be wild-carded.",
    716: "WildCardNotPermittedInExtPort: the external port cannot be wild-carded.",
    717: "ConflictInMappingEntry: the port mapping entry specified conflicts with a mapping "
         "assigned previously to another client.",
    718: "ConflictInMappingEntry: the port mapping entry specified conflicts with a mapping "
         "assigned previously to another client.",
    724: "SamePortValuesRequired: internal and external port values must be the same.",
    725: "OnlyPermanentLeasesSupported: the NAT implementation only supports permanent lease "
         "times on port mappings.",
    726: "RemoteHostOnlySupportsWildcard: RemoteHost must be a wildcard and cannot be a "
         "specific IP address or DNS name.",
    727: "ExternalPortOnlySupportsWildcard: ExternalPort must be a wildcard and cannot be a "
         "specific port value.",
    728: "NoPortMapsAvailable: there are not enough free ports available to complete port "
         "mapping.",
}, fallback=ERR_CODE_DESCRIPTIONS)


@unique
class RequestErrorKind(Enum):
    HTTP_ERROR = "HTTP error"
    IO_ERROR = "IO error"
    INVALID_RESPONSE = "Invalid response from gateway"
    ERROR_CODE = "Gateway response error"
    UTF8_ERROR = "UTF-8 error"
    INVALID_URI = "Invalid URI error"


class RequestError(Exception):
    """
    Errors that can occur when sending a request to the gateway.

    `code` and `description` are set for `RequestErrorKind.ERROR_CODE`, which
    carries a UPnP error the gateway reported and that the failing operation
    has no dedicated variant for.
    """

    def __init__(self, kind, detail=None, code=None, description=None):
        super(RequestError, self).__init__(kind, detail, code, description)
        self.kind = kind
        self.detail = detail
        self.code = code
        self.description = description

    def __str__(self):
        if self.kind is RequestErrorKind.ERROR_CODE:
            return "%s %s: %s" % (self.kind.value, self.code, self.description)
        if self.detail is None:
            return self.kind.value
        return "%s: %s" % (self.kind.value, self.detail)


@unique
class SearchErrorKind(Enum):
    HTTP_ERROR = "HTTP error"
    INVALID_URI = "Invalid URI"
    INVALID_RESPONSE = "Invalid response"
    IO_ERROR = "IO error"
    UTF8_ERROR = "UTF-8 error"
    XML_ERROR = "XML error"
    TIMEOUT = "Search timed out"


class SearchError(Exception):
    """
    Errors that can occur while trying to find the gateway.
    """

    def __init__(self, kind, detail=None):
        super(SearchError, self).__init__(kind, detail)
        self.kind = kind
        self.detail = detail

    def __str__(self):
        if self.detail is None:
            return self.kind.value
        return "%s: %s" % (self.kind.value, self.detail)


class _OperationError(Exception):
    """
    Shared plumbing of the per-operation errors. Each subclass declares its own
    `Kind` enumeration; none of them inherits variants from another.
    """

    Kind = None

    def __init__(self, kind, request_error=None):
        super(_OperationError, self).__init__(kind, request_error)
        self.kind = kind
        self.request_error = request_error

    @classmethod
    def from_request_error(cls, request_error):
        return cls(cls.Kind.REQUEST_ERROR, request_error)

    def __str__(self):
        if self.request_error is None:
            return self.kind.value
        return "%s: %s" % (self.kind.value, self.request_error)


@unique
class GetExternalIpErrorKind(Enum):
    ACTION_NOT_AUTHORIZED = "The client is not authorized to get the external IP address."
    REQUEST_ERROR = "Request error"


class GetExternalIpError(_OperationError):
    """
    Errors returned by `Gateway.get_external_ip`.
    """

    Kind = GetExternalIpErrorKind


@unique
class AddPortErrorKind(Enum):
    ACTION_NOT_AUTHORIZED = "The client is not authorized to map this port."
    INTERNAL_PORT_ZERO_INVALID = "Can not add a mapping for local port 0."
    EXTERNAL_PORT_ZERO_INVALID = (
        "External port number 0 (any port) is considered invalid by the gateway.")
    PORT_IN_USE = (
        "The requested mapping conflicts with a mapping assigned to another client.")
    SAME_PORT_VALUES_REQUIRED = (
        "The gateway requires that the requested internal and external ports are the same.")
    ONLY_PERMANENT_LEASES_SUPPORTED = (
        "The gateway only supports permanent leases (ie. a `lease_duration` of 0).")
    DESCRIPTION_TOO_LONG = "The description was too long for the gateway to handle."
    REQUEST_ERROR = "Request error"


class AddPortError(_OperationError):
    """
    Errors returned by `Gateway.add_port`.
    """

    Kind = AddPortErrorKind


@unique
class AddAnyPortErrorKind(Enum):
    ACTION_NOT_AUTHORIZED = "The client is not authorized to map a port."
    INTERNAL_PORT_ZERO_INVALID = "Can not add a mapping for local port 0."
    NO_PORTS_AVAILABLE = "The gateway does not have any free ports."
    EXTERNAL_PORT_IN_USE = (
        "The gateway can only map internal ports to same-numbered external ports and this "
        "external port is in use.")
    ONLY_PERMANENT_LEASES_SUPPORTED = (
        "The gateway only supports permanent leases (ie. a `lease_duration` of 0).")
    DESCRIPTION_TOO_LONG = "The description was too long for the gateway to handle."
    REQUEST_ERROR = "Request error"


class AddAnyPortError(_OperationError):
    """
    Errors returned by `Gateway.add_any_port` and `Gateway.get_any_address`.
    """

    Kind = AddAnyPortErrorKind


@unique
class RemovePortErrorKind(Enum):
    ACTION_NOT_AUTHORIZED = "The client is not authorized to remove the port."
    NO_SUCH_PORT_MAPPING = "The port was not mapped."
    REQUEST_ERROR = "Request error"


class RemovePortError(_OperationError):
    """
    Errors returned by `Gateway.remove_port`.
    """

    Kind = RemovePortErrorKind


class ValidationError(ValueError):
    """
    Given arguments didn't validate. Raised before anything is sent to the
    gateway.
    """

    def __init__(self, reasons):
        super(ValidationError, self).__init__(reasons)
        self.reasons = reasons
