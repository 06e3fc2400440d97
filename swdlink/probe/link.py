import asyncio
import logging

from .memory import MemoryAccess
from .process import ProcessSupervisor
from .protocol import LinkClosed, StartupError, probe_arguments
from .queue import CommandQueue
from .state import Shutdown
from .symbols import SymbolTable
from .telnet import TelnetSession


log = logging.getLogger(__name__)


class SwdLink(MemoryAccess):
    """
    Memory access endpoint for a target behind an OpenOCD server.

    Owns the server process, the line protocol connection to it and the
    command queue between them. Server crashes and disconnects are
    recovered from in the background. Commands caught in such a window
    fail with a timeout.
    """
    def __init__(self, elf, scripts=(), gdb_port=3333, tcl_port=None,
                 telnet_port=4444, host='localhost', timeout=5.0,
                 program='openocd', objdump='objdump', loop=None,
                 scheduler=None, restart_backoff=0.5, reconnect_backoff=1.0):
        if not elf:
            raise StartupError('ELF file not specified')

        super().__init__(self.command, SymbolTable(), image=elf,
                         timeout=timeout)

        self.elf = elf
        self.objdump = objdump
        self.loop = loop or asyncio.get_running_loop()
        self.shutdown = Shutdown()

        self.queue = CommandQueue(self.loop, scheduler)
        self.session = TelnetSession(self.queue, host, telnet_port,
                                     loop=self.loop, scheduler=scheduler,
                                     shutdown=self.shutdown,
                                     backoff=reconnect_backoff)
        args = probe_arguments(scripts, gdb_port, tcl_port, telnet_port)
        self.supervisor = ProcessSupervisor(program, args, loop=self.loop,
                                            scheduler=scheduler,
                                            shutdown=self.shutdown,
                                            backoff=restart_backoff)

    async def start(self):
        self.symbols = await SymbolTable.fromFile(self.elf, self.objdump)
        await self.supervisor.start()
        self.session.connect()
        return self

    async def command(self, text, timeout=None):
        if self.shutdown:
            raise LinkClosed('Link closed')
        return await self.queue.issue(text, timeout or self.timeout)

    def close(self):
        log.info('Closing link to "%s"', self.elf)
        self.shutdown.request()
        self.supervisor.close()
        self.session.close()
        self.queue.close()


async def SwdLinkLaunch(elf, scripts=(), **kwargs):
    link = SwdLink(elf, scripts, **kwargs)
    try:
        return await link.start()
    except BaseException:
        link.close()
        raise
