import asyncio
import socketserver
import threading
from functools import wraps


class SimpleMock(dict):
    """Case insensitive dict to mock HTTP response."""
    def __init__(self, *args, **kwargs):
        super(SimpleMock, self).__init__(*args, **kwargs)
        for k in list(self.keys()):
            v = super(SimpleMock, self).pop(k)
            self.__setitem__(k, v)

    def __setitem__(self, key, value):
        super(SimpleMock, self).__setitem__(str(key).lower(), value)

    def __getitem__(self, key):
        if key.lower() not in self:
            return None
        return super(SimpleMock, self).__getitem__(key.lower())

    def __setattr__(self, key, value):
        self.__setitem__(key, value)

    def __getattr__(self, key):
        return self.__getitem__(key)


class SimpleMockRequest(SimpleMock):
    """Case insensitive dict interface for an aiohttp Request object."""
    async def update(self, request):
        self.clear()
        attributes = [
            "method",
            "host",
            "path",
        ]
        self.headers = SimpleMock(request.headers)
        self.url = str(request.url)  # match requests interface
        for attr in attributes:
            try:
                self[attr] = getattr(request, attr)
            except AttributeError:
                self[attr] = None
        self.body = (await request.read()).decode("utf-8")


def async_test(f):
    """
    Decorator to create asyncio context for asyncio methods or functions.
    """
    @wraps(f)
    def g(*args, **kwargs):
        args[0].loop.run_until_complete(f(*args, **kwargs))
    return g


class SSDPResponder(asyncio.DatagramProtocol):
    """
    Answers every datagram with `reply`, or stays silent if it is None.
    """
    def __init__(self, reply):
        self.reply = reply
        self.requests = []
        self.transport = None

    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data, addr):
        self.requests.append(data)
        if self.reply is not None:
            self.transport.sendto(self.reply, addr)


class _SSDPHandler(socketserver.BaseRequestHandler):
    def handle(self):
        data, sock = self.request
        self.server.requests.append(data)
        if self.server.reply is not None:
            sock.sendto(self.server.reply, self.client_address)


def start_threaded_ssdp_responder(host, reply):
    """
    Start a UDP server in a thread, answering like `SSDPResponder`.
    """
    server = socketserver.UDPServer((host, 0), _SSDPHandler)
    server.reply = reply
    server.requests = []
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    return server
