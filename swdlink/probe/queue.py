import asyncio
import collections
import logging

from .protocol import CommandTimeout, LinkClosed
from .state import QueueState, unique


log = logging.getLogger(__name__)


class Command():
    unique_number = unique()

    def __init__(self, text, created, timeout, result):
        self.number = next(self.unique_number)
        self.text = text
        self.created = created
        self.timeout = timeout
        self.result = result
        self.timer = None

    def __str__(self):
        return '#%d %r' % (self.number, self.text)


class CommandQueue():
    """
    Serializes commands onto a session that allows a single request in
    flight. Commands are sent in issue order, so replies come back in issue
    order as well.

    The session is expected to provide `connected` and `send(text)`, and to
    call `dispatch()` when it becomes connected and `reply(text)` for every
    framed reply.
    """
    def __init__(self, loop=None, scheduler=None):
        self.loop = loop or asyncio.get_running_loop()
        self.scheduler = scheduler or self.loop
        self.session = None
        self.waiting = collections.deque()
        self.in_flight = None

    @property
    def state(self):
        if self.in_flight is None:
            return QueueState.IDLE
        return QueueState.AWAITING_REPLY

    def attach(self, session):
        self.session = session

    def issue(self, text, timeout):
        cmd = Command(text, self.loop.time(), timeout,
                      self.loop.create_future())
        cmd.timer = self.scheduler.call_later(timeout, self._expire, cmd)
        self.waiting.append(cmd)
        self.dispatch()
        return cmd.result

    def dispatch(self):
        if self.in_flight is not None:
            return
        if self.session is None or not self.session.connected:
            return
        while self.waiting:
            cmd = self.waiting.popleft()
            if cmd.result.done():
                # abandoned by the caller
                cmd.timer.cancel()
                continue
            self.in_flight = cmd
            log.debug('Sending %s', cmd)
            self.session.send(cmd.text)
            return

    def reply(self, text):
        cmd, self.in_flight = self.in_flight, None
        if cmd is None:
            log.debug('Discarding reply with no command in flight: %r', text)
            return
        cmd.timer.cancel()
        if not cmd.result.done():
            cmd.result.set_result(text)
        log.debug('Completed %s in %.3fs', cmd,
                  self.loop.time() - cmd.created)
        self.dispatch()

    def _expire(self, cmd):
        if self.in_flight is cmd:
            self.in_flight = None
        else:
            try:
                self.waiting.remove(cmd)
            except ValueError:
                pass
        log.warning('Command %s timed out after %.3fs', cmd, cmd.timeout)
        if not cmd.result.done():
            cmd.result.set_exception(CommandTimeout(
                'No reply to %r within %.3fs' % (cmd.text, cmd.timeout)))
        self.dispatch()

    def close(self):
        pending = list(self.waiting)
        if self.in_flight is not None:
            pending.insert(0, self.in_flight)
        self.waiting.clear()
        self.in_flight = None
        for cmd in pending:
            cmd.timer.cancel()
            if not cmd.result.done():
                cmd.result.set_exception(LinkClosed('Link closed'))
