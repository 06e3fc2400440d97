import asyncio
import logging

from .protocol import PROMPT, DISCARD
from .state import Shutdown, SocketState


log = logging.getLogger(__name__)


class TelnetSession(asyncio.Protocol):
    """
    Persistent connection to the line protocol port of the probe server.

    Replies are framed by the trailing prompt marker. A discard marker drops
    everything received up to and including it. A fresh connection counts
    as connected once the greeting prompt has been seen.
    """
    prompt = PROMPT
    discard = DISCARD

    def __init__(self, queue, host='localhost', port=4444, loop=None,
                 scheduler=None, shutdown=None, backoff=1.0):
        self.queue = queue
        self.host = host
        self.port = port
        self.loop = loop or asyncio.get_running_loop()
        self.scheduler = scheduler or self.loop
        self.shutdown = shutdown if shutdown is not None else Shutdown()
        self.backoff = backoff

        self.state = SocketState.DISCONNECTED
        self.transport = None
        self.buffer = bytearray()
        self._connecting = None
        self._reconnect = None

        queue.attach(self)

    @property
    def connected(self):
        return self.state == SocketState.CONNECTED

    def connect(self):
        self._reconnect = None
        if self.shutdown or self.state != SocketState.DISCONNECTED:
            return
        self.state = SocketState.CONNECTING
        self._connecting = self.loop.create_task(self._connect())

    async def _connect(self):
        try:
            await self.loop.create_connection(lambda: self,
                                              self.host, self.port)
        except OSError as ex:
            log.info('Cannot connect to %s:%d: %s', self.host, self.port, ex)
            self.state = SocketState.DISCONNECTED
            self._schedule_reconnect()

    def _schedule_reconnect(self):
        if self.shutdown or self._reconnect is not None:
            return
        self._reconnect = self.scheduler.call_later(self.backoff,
                                                    self.connect)

    def connection_made(self, transport):
        if self.shutdown:
            transport.close()
            return
        log.info('Connected to %s:%d', self.host, self.port)
        self.transport = transport
        self.buffer.clear()

    def data_received(self, data):
        self.buffer += data
        pos = self.buffer.rfind(self.discard)
        if pos >= 0:
            del self.buffer[:pos + len(self.discard)]
        if not self.buffer.endswith(self.prompt):
            return
        payload = bytes(self.buffer[:-len(self.prompt)])
        self.buffer.clear()
        if self.state == SocketState.CONNECTING:
            self.state = SocketState.CONNECTED
            self.queue.dispatch()
        else:
            self.queue.reply(payload.decode(errors='ignore'))

    def connection_lost(self, exc):
        if exc is not None:
            log.warning('Connection to %s:%d lost: %s',
                        self.host, self.port, exc)
        else:
            log.info('Connection to %s:%d closed', self.host, self.port)
        self.transport = None
        self.buffer.clear()
        self.state = SocketState.DISCONNECTED
        self._schedule_reconnect()

    def send(self, text):
        self.buffer.clear()
        self.transport.write((text + '\n').encode())

    def close(self):
        self.shutdown.request()
        if self._reconnect is not None:
            self._reconnect.cancel()
            self._reconnect = None
        if self._connecting is not None and not self._connecting.done():
            self._connecting.cancel()
        if self.transport is not None:
            self.transport.close()
