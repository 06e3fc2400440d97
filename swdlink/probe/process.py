import asyncio
import asyncio.subprocess
import io
import logging
import sys

from .protocol import ERROR_MARKER
from .state import ProcessState, Shutdown


log = logging.getLogger(__name__)


class ProbeProcess(asyncio.SubprocessProtocol):
    def __init__(self, supervisor):
        self.supervisor = supervisor
        self.transport = None
        self._partial = {1: '', 2: ''}
        self.failed = False

    def connection_made(self, transport):
        self.transport = transport

    def pipe_data_received(self, fd, data):
        text = self._partial[fd] + data.decode(errors='ignore')
        *lines, self._partial[fd] = text.split('\n')
        if not self.failed:
            # the unterminated tail counts too, it may be the last output
            for line in lines + [self._partial[fd]]:
                if ERROR_MARKER in line:
                    self.failed = True
                    self.supervisor.error(line.strip())
                    break
        self.supervisor.mirror(fd, data)

    def connection_lost(self, exc):
        # the process has exited and its pipes are drained
        self.supervisor.exited(self, self.transport.get_returncode())


class ProcessSupervisor():
    """
    Keeps the debug-probe server running. The child is killed when it
    reports an error and restarted after `backoff` seconds whenever it exits,
    until shutdown is requested.
    """
    def __init__(self, program, args, loop=None, scheduler=None,
                 shutdown=None, backoff=0.5, stdout=None, stderr=None):
        self.program = program
        self.args = list(args)
        self.loop = loop or asyncio.get_running_loop()
        self.scheduler = scheduler or self.loop
        self.shutdown = shutdown if shutdown is not None else Shutdown()
        self.backoff = backoff
        self.streams = {1: stdout, 2: stderr}

        self.state = ProcessState.STOPPED
        self.protocol = None
        self._starting = None
        self._restart = None

    @property
    def pid(self):
        if self.protocol is None or self.protocol.transport is None:
            return None
        return self.protocol.transport.get_pid()

    async def start(self):
        if self.shutdown or self.protocol is not None:
            return
        protocol = self.protocol = ProbeProcess(self)
        try:
            await self.loop.subprocess_exec(
                lambda: protocol, self.program, *self.args,
                stdin=asyncio.subprocess.DEVNULL)
        except OSError as ex:
            log.error('Cannot start %s: %s', self.program, ex)
            self.protocol = None
            self.state = ProcessState.CRASHING
            self._schedule_restart()
            return
        if protocol is not self.protocol:
            # exited before subprocess_exec returned
            return
        if self.shutdown:
            self.kill()
            return
        log.info('Started %s (pid %d)', self.program, self.pid)
        self.state = ProcessState.RUNNING

    def mirror(self, fd, data):
        stream = self.streams[fd]
        if stream is None:
            # looked up per call, prompt_toolkit swaps these while prompting
            stream = sys.stdout if fd == 1 else sys.stderr
        buffer = getattr(stream, 'buffer', None)
        if buffer is not None:
            stream, text = buffer, data
        elif isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
            text = data
        else:
            text = data.decode(errors='replace')
        stream.write(text)
        stream.flush()

    def error(self, line):
        log.warning('%s reported an error, killing it: %s',
                    self.program, line)
        self.kill()

    def exited(self, protocol, code):
        if protocol is not self.protocol:
            return
        log.info('%s exited with code %s', self.program, code)
        protocol.transport.close()
        self.protocol = None
        if self.shutdown:
            self.state = ProcessState.STOPPED
            return
        self.state = ProcessState.CRASHING
        self._schedule_restart()

    def _schedule_restart(self):
        if self.shutdown or self._restart is not None:
            return
        self._restart = self.scheduler.call_later(self.backoff,
                                                  self._restart_now)

    def _restart_now(self):
        self._restart = None
        if self.shutdown:
            return
        log.info('Restarting %s', self.program)
        self._starting = self.loop.create_task(self.start())

    def kill(self):
        if self.protocol is None or self.protocol.transport is None:
            return
        try:
            self.protocol.transport.kill()
        except ProcessLookupError:
            pass

    def close(self):
        self.shutdown.request()
        if self._restart is not None:
            self._restart.cancel()
            self._restart = None
        if self._starting is not None and not self._starting.done():
            self._starting.cancel()
        self.kill()
        if self.protocol is None:
            self.state = ProcessState.STOPPED
