import asyncio
import ipaddress
import re
import socket
import time

import aiohttp
import requests
import urllib3
from lxml import etree

from . import const
from .errors import SearchError, SearchErrorKind
from .gateway import Gateway
from .util import _getLogger, _tail_matches

_log = _getLogger("ssdp")

LOCATION_RE = re.compile(r"(?i:Location):\s*http://(\d+\.\d+\.\d+\.\d+):(\d+)(/[^\r]*)")

SERVICE_PATH = ("device", "serviceList", "service")
SERVICE_TYPE_PATH = SERVICE_PATH + ("serviceType",)
CONTROL_URL_PATH = SERVICE_PATH + ("controlURL",)
SERVICE_LIST_PATH = ("device", "serviceList")


def parse_result(text):
    """
    Find the description location in an SSDP search reply. Returns
    `((ip, port), path)` from the first valid `Location` header, or None.
    """
    for line in text.splitlines():
        match = LOCATION_RE.search(line)
        if match is None:
            continue
        ip, port, path = match.groups()
        try:
            ipaddress.IPv4Address(ip)
        except ValueError:
            continue
        port = int(port)
        if port > 65535:
            continue
        return (ip, port), path
    return None


class ControlURLExtractor(object):
    """
    Incrementally scan a device description for the control URL of the WAN
    IP/PPP connection service. Bytes are fed in chunks; elements are dropped
    as soon as they have been handled.
    """

    def __init__(self):
        self._parser = etree.XMLPullParser(events=("start", "end"))
        self.chain = []
        self.service_type = ""
        self.control_url = ""

    def feed(self, data):
        """
        Feed a chunk of the document. Returns the control URL once the first
        matching service has been closed, otherwise None.
        """
        try:
            self._parser.feed(data)
            return self._read_events()
        except etree.XMLSyntaxError as exc:
            raise SearchError(SearchErrorKind.XML_ERROR, exc) from exc

    def close(self):
        """
        Signal the end of the document. Raises `SearchError` as no matching
        service was found.
        """
        try:
            self._parser.close()
            control_url = self._read_events()
        except etree.XMLSyntaxError as exc:
            raise SearchError(SearchErrorKind.XML_ERROR, exc) from exc
        if control_url is not None:
            return control_url
        raise SearchError(SearchErrorKind.INVALID_RESPONSE, "No WAN connection service found")

    def _read_events(self):
        for event, elem in self._parser.read_events():
            if event == "start":
                self._start(etree.QName(elem).localname)
                continue
            control_url = self._end(elem)
            if control_url is not None:
                return control_url
        return None

    def _start(self, name):
        self.chain.append(name)
        if _tail_matches(self.chain, SERVICE_PATH):
            self.service_type = ""
            self.control_url = ""

    def _text(self, text):
        if _tail_matches(self.chain, SERVICE_TYPE_PATH):
            self.service_type += text
        elif _tail_matches(self.chain, CONTROL_URL_PATH):
            self.control_url += text

    def _end(self, elem):
        # Leaf text is complete by the time its end event arrives.
        if elem.text:
            self._text(elem.text)
        top = self.chain.pop()
        elem.clear()
        parent = elem.getparent()
        if parent is not None:
            while elem.getprevious() is not None:
                del parent[0]
        if top != "service" or not _tail_matches(self.chain, SERVICE_LIST_PATH):
            return None
        control_url = self.control_url.strip()
        if self.service_type.strip() in const.WAN_SERVICE_TYPES and control_url:
            return control_url
        return None


def parse_control_url(chunks):
    """
    Run a `ControlURLExtractor` over an iterable of byte chunks.
    """
    extractor = ControlURLExtractor()
    for chunk in chunks:
        control_url = extractor.feed(chunk)
        if control_url is not None:
            return control_url
    return extractor.close()


def _location_url(location):
    (ip, port), path = location
    return "http://%s:%d%s" % (ip, port, path)


def get_control_url(location, timeout=const.HTTP_TIMEOUT):
    """
    Fetch the device description at `location` and extract its control URL.
    """
    url = _location_url(location)
    try:
        with requests.get(url, timeout=timeout, stream=True) as resp:
            control_url = parse_control_url(
                resp.iter_content(chunk_size=const.DESCRIPTION_CHUNK_SIZE))
    except (requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema) as exc:
        raise SearchError(SearchErrorKind.INVALID_URI, exc) from exc
    except requests.exceptions.Timeout as exc:
        raise SearchError(SearchErrorKind.TIMEOUT, exc) from exc
    except requests.exceptions.ConnectionError as exc:
        # A read timeout while streaming the body comes wrapped in a ConnectionError.
        if exc.args and isinstance(exc.args[0], urllib3.exceptions.ReadTimeoutError):
            raise SearchError(SearchErrorKind.TIMEOUT, exc) from exc
        raise SearchError(SearchErrorKind.IO_ERROR, exc) from exc
    except requests.exceptions.RequestException as exc:
        raise SearchError(SearchErrorKind.HTTP_ERROR, exc) from exc
    _log.debug("Control URL of %s: %s", url, control_url)
    return control_url


async def async_get_control_url(location):
    """
    Asynchronously fetch the device description at `location` and extract its
    control URL.
    """
    url = _location_url(location)
    extractor = ControlURLExtractor()
    control_url = None
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as resp:
                async for chunk in resp.content.iter_chunked(const.DESCRIPTION_CHUNK_SIZE):
                    control_url = extractor.feed(chunk)
                    if control_url is not None:
                        break
    except aiohttp.InvalidURL as exc:
        raise SearchError(SearchErrorKind.INVALID_URI, exc) from exc
    except (aiohttp.ClientConnectionError, OSError) as exc:
        raise SearchError(SearchErrorKind.IO_ERROR, exc) from exc
    except aiohttp.ClientError as exc:
        raise SearchError(SearchErrorKind.HTTP_ERROR, exc) from exc
    if control_url is None:
        control_url = extractor.close()
    _log.debug("Control URL of %s: %s", url, control_url)
    return control_url


def _decode_reply(data):
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SearchError(SearchErrorKind.UTF8_ERROR, exc) from exc
    location = parse_result(text)
    if location is None:
        raise SearchError(SearchErrorKind.INVALID_RESPONSE, "No location in search reply")
    _log.debug("Gateway description at %s", _location_url(location))
    return location


def search_gateway(bind_addr=const.DEFAULT_BIND_ADDR, timeout=const.DEFAULT_SEARCH_TIMEOUT):
    """
    Search for a gateway from `bind_addr` and return a `Gateway`. `timeout`
    (in seconds) bounds the whole search, description fetch included.
    """
    stop_wait = time.monotonic() + timeout

    def seconds_left():
        left = stop_wait - time.monotonic()
        if left <= 0:
            raise SearchError(SearchErrorKind.TIMEOUT)
        return left

    _log.debug("Searching for a gateway from %s", bind_addr)
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind((bind_addr, 0))
        sock.sendto(const.SEARCH_REQUEST, const.SSDP_TARGET)
        sock.settimeout(seconds_left())
        data, _ = sock.recvfrom(const.SSDP_MAX_DATAGRAM)
    except socket.timeout as exc:
        raise SearchError(SearchErrorKind.TIMEOUT, exc) from exc
    except OSError as exc:
        raise SearchError(SearchErrorKind.IO_ERROR, exc) from exc
    finally:
        sock.close()

    location = _decode_reply(data)
    try:
        control_url = get_control_url(location, timeout=seconds_left())
    except SearchError as exc:
        # Any failure once the deadline has passed is reported as a timeout.
        if exc.kind is not SearchErrorKind.TIMEOUT and time.monotonic() >= stop_wait:
            raise SearchError(SearchErrorKind.TIMEOUT, exc) from exc
        raise
    seconds_left()
    return Gateway(location[0], control_url)


class _SearchProtocol(asyncio.DatagramProtocol):
    def __init__(self, reply):
        self.reply = reply

    def datagram_received(self, data, addr):
        if not self.reply.done():
            self.reply.set_result(data[:const.SSDP_MAX_DATAGRAM])

    def error_received(self, exc):
        if not self.reply.done():
            self.reply.set_exception(exc)


async def _async_search(bind_addr):
    loop = asyncio.get_running_loop()
    reply = loop.create_future()
    try:
        transport, _ = await loop.create_datagram_endpoint(
            lambda: _SearchProtocol(reply),
            local_addr=(bind_addr, 0),
            family=socket.AF_INET,
        )
    except OSError as exc:
        raise SearchError(SearchErrorKind.IO_ERROR, exc) from exc
    try:
        transport.sendto(const.SEARCH_REQUEST, const.SSDP_TARGET)
        data = await reply
    except OSError as exc:
        raise SearchError(SearchErrorKind.IO_ERROR, exc) from exc
    finally:
        transport.close()

    location = _decode_reply(data)
    control_url = await async_get_control_url(location)
    return Gateway(location[0], control_url)


async def async_search_gateway(bind_addr=const.DEFAULT_BIND_ADDR,
                               timeout=const.DEFAULT_SEARCH_TIMEOUT):
    """
    Asynchronously search for a gateway from `bind_addr`. `timeout` (in
    seconds) bounds the whole search, description fetch included.
    """
    _log.debug("Searching for a gateway from %s", bind_addr)
    try:
        return await asyncio.wait_for(_async_search(bind_addr), timeout)
    except asyncio.TimeoutError as exc:
        raise SearchError(SearchErrorKind.TIMEOUT) from exc
