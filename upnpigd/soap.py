from collections import OrderedDict
from textwrap import dedent
from xml.sax.saxutils import escape

import aiohttp
import requests
from lxml import etree

from .const import HTTP_TIMEOUT
from .errors import RequestError, RequestErrorKind, WAN_ERR_CODE_DESCRIPTIONS
from .util import _getLogger

_log = _getLogger("SOAP")


def build_envelope(action_name, service_type, arg_in=None):
    """
    Render the SOAP envelope for `action_name`. Argument values are escaped and
    emitted in the order given.
    """
    if arg_in is None:
        arg_in = OrderedDict()
    arg_values = "".join(
        "<%s>%s</%s>" % (k, escape(str(v)), k) for k, v in arg_in.items())
    return dedent("""\
        <?xml version="1.0"?>
        <s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/" \
s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/">
        <s:Body>
        <u:{action_name} xmlns:u="{service_type}">{arg_values}</u:{action_name}>
        </s:Body>
        </s:Envelope>
        """).format(
            action_name=action_name,
            service_type=service_type,
            arg_values=arg_values,
        )


def _headers(action_header, body):
    return {
        "SOAPAction": action_header,
        "Content-Type": "text/xml",
        "Content-Length": str(len(body.encode("utf-8"))),
    }


def _decode(content):
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RequestError(RequestErrorKind.UTF8_ERROR, exc) from exc


def send(url, action_header, body, timeout=HTTP_TIMEOUT):
    """
    POST a SOAP request and return the response body. The HTTP status is not
    checked: gateways report UPnP errors as a 500 with a fault body.
    """
    try:
        resp = requests.post(
            url,
            data=body.encode("utf-8"),
            headers=_headers(action_header, body),
            timeout=timeout,
        )
    except (requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema) as exc:
        raise RequestError(RequestErrorKind.INVALID_URI, exc) from exc
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as exc:
        raise RequestError(RequestErrorKind.IO_ERROR, exc) from exc
    except requests.exceptions.RequestException as exc:
        raise RequestError(RequestErrorKind.HTTP_ERROR, exc) from exc
    return _decode(resp.content)


async def async_send(url, action_header, body):
    """
    Asynchronous `send`. A new session is opened for every request.
    """
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                data=body.encode("utf-8"),
                headers=_headers(action_header, body),
            ) as resp:
                content = await resp.read()
    except aiohttp.InvalidURL as exc:
        raise RequestError(RequestErrorKind.INVALID_URI, exc) from exc
    except (aiohttp.ClientConnectionError, aiohttp.ServerTimeoutError, OSError) as exc:
        raise RequestError(RequestErrorKind.IO_ERROR, exc) from exc
    except aiohttp.ClientError as exc:
        raise RequestError(RequestErrorKind.HTTP_ERROR, exc) from exc
    return _decode(content)


def _localname(node):
    return etree.QName(node).localname


def _find_local(root, name):
    for node in root.iter(etree.Element):
        if _localname(node) == name:
            return node
    return None


def parse_response(action_name, raw_xml):
    """
    Decode a SOAP response body into a dict of the action's output arguments.
    Raises `RequestError` with the gateway's error code for a UPnP fault.
    """
    try:
        root = etree.fromstring(raw_xml.strip().encode("utf-8"))
    except etree.XMLSyntaxError as exc:
        raise RequestError(RequestErrorKind.INVALID_RESPONSE, exc) from exc

    fault = _find_local(root, "Fault")
    if fault is not None:
        code_node = _find_local(fault, "errorCode")
        try:
            code = int((code_node.text or "").strip())
        except (AttributeError, ValueError):
            raise RequestError(
                RequestErrorKind.INVALID_RESPONSE, "SOAP fault without an error code")
        desc_node = _find_local(fault, "errorDescription")
        if desc_node is not None and desc_node.text:
            description = desc_node.text.strip()
        else:
            description = WAN_ERR_CODE_DESCRIPTIONS.get(code, "")
        raise RequestError(
            RequestErrorKind.ERROR_CODE, code=code, description=description)

    response = _find_local(root, "%sResponse" % action_name)
    if response is None:
        raise RequestError(
            RequestErrorKind.INVALID_RESPONSE,
            "Missing %sResponse element" % action_name)

    params_out = OrderedDict()
    for node in response.iterchildren(etree.Element):
        params_out[_localname(node)] = (node.text or "").strip()
    return params_out


class SOAP(object):
    """SOAP (Simple Object Access Protocol) implementation
    This class defines a simple SOAP client bound to one control URL.
    """

    def __init__(self, url, service_type):
        self.url = url
        self.service_type = service_type

    def _action_header(self, action_name):
        return '"%s#%s"' % (self.service_type, action_name)

    def call(self, action_name, arg_in=None, timeout=HTTP_TIMEOUT):
        body = build_envelope(action_name, self.service_type, arg_in)
        _log.debug(">> %s %s (%s)", self.url, action_name, arg_in)
        raw_xml = send(self.url, self._action_header(action_name), body, timeout=timeout)
        params_out = parse_response(action_name, raw_xml)
        _log.debug("<< %s: %s", action_name, params_out)
        return params_out

    async def async_call(self, action_name, arg_in=None):
        body = build_envelope(action_name, self.service_type, arg_in)
        _log.debug(">> %s %s (%s)", self.url, action_name, arg_in)
        raw_xml = await async_send(self.url, self._action_header(action_name), body)
        params_out = parse_response(action_name, raw_xml)
        _log.debug("<< %s: %s", action_name, params_out)
        return params_out
