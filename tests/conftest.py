import asyncio
import os
import stat

import pytest


class FakeTimer():
    def __init__(self, delay, callback, args):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def pending(self):
        return not (self.cancelled or self.fired)

    def fire(self):
        assert self.pending
        self.fired = True
        self.callback(*self.args)


class FakeScheduler():
    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(delay, callback, args)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if t.pending]


class FakeTransport():
    def __init__(self):
        self.writes = []
        self.closed = False

    def write(self, data):
        self.writes.append(data)

    def close(self):
        self.closed = True


class FakeSession():
    def __init__(self, connected=True):
        self.connected = connected
        self.sent = []

    def send(self, text):
        self.sent.append(text)


async def _wait_until(predicate, timeout=10.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError('condition not met within %.1fs' % timeout)
        await asyncio.sleep(0.01)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def script(tmp_path):
    """Writes an executable shell script and returns its path."""
    def make(name, body):
        path = tmp_path / name
        path.write_text('#!/bin/sh\n' + body + '\n')
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP |
                   stat.S_IXOTH)
        return str(path)
    if os.name != 'posix':
        pytest.skip('needs a POSIX shell')
    return make
