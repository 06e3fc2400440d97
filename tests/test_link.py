import asyncio

import pytest

from swdlink.probe import (CommandTimeout, LinkClosed, StartupError,
                           SwdLink, SwdLinkLaunch, ToolInvocationError)
from swdlink.probe.state import ProcessState


GREETING = b'Open On-Chip Debugger\r\n\x00> '

REPLIES = {
    'mdw 0x00002000': '0x00002000: deadbeef \r\n',
    'mdb 0x00002000 4': '0x00002000: de ad be ef \r\n',
}


class ProbeServer():
    """Speaks just enough of the OpenOCD telnet protocol."""
    def __init__(self):
        self.commands = []
        self.server = None

    async def handle(self, reader, writer):
        writer.write(GREETING)
        while True:
            line = await reader.readline()
            if not line:
                break
            cmd = line.decode().strip()
            self.commands.append(cmd)
            if cmd == 'drop':
                break
            reply = REPLIES.get(cmd, '')
            writer.write(('%s\r\n%s> ' % (cmd, reply)).encode())
        writer.close()

    async def start(self):
        self.server = await asyncio.start_server(self.handle, '127.0.0.1', 0)
        return self.server.sockets[0].getsockname()[1]

    async def stop(self):
        self.server.close()
        await self.server.wait_closed()


@pytest.fixture
def tools(script):
    objdump = script('objdump', 'echo "00002000 g     O .data\t00000004 led"')
    openocd = script('openocd', 'exec sleep 60')
    return objdump, openocd


def test_missing_binary_is_fatal():
    with pytest.raises(StartupError):
        SwdLink('')
    with pytest.raises(StartupError):
        SwdLink(None, ['board.cfg'])


def test_symbol_tool_failure_is_fatal(script, tools):
    _, openocd = tools
    objdump = script('bad-objdump', 'echo "file format not recognized" >&2\n'
                                    'exit 1')

    async def main():
        with pytest.raises(ToolInvocationError) as excinfo:
            await SwdLinkLaunch('fw.elf', objdump=objdump, program=openocd)
        assert excinfo.value.code == 1

    asyncio.run(main())


def test_memory_access_through_the_whole_stack(tools, wait_until):
    objdump, openocd = tools

    async def main():
        server = ProbeServer()
        port = await server.start()
        link = await SwdLinkLaunch('fw.elf', ['board.cfg'], telnet_port=port,
                                   host='127.0.0.1', objdump=objdump,
                                   program=openocd, timeout=5.0,
                                   reconnect_backoff=0.05)
        try:
            assert dict(link.symbols) == {'led': 0x2000}
            assert link.supervisor.state == ProcessState.RUNNING
            assert link.supervisor.args == [
                '-c', 'gdb_port 3333', '-c', 'tcl_port disabled',
                '-c', 'telnet_port %d' % port, '-f', 'board.cfg']

            assert await link.read32('led') == 0xdeadbeef
            assert await link.read('led', 4) == b'\xde\xad\xbe\xef'

            results = await asyncio.gather(
                *[link.command('cmd %d' % n) for n in range(10)])
            assert results == ['cmd %d\r\n' % n for n in range(10)]
            assert server.commands[-10:] == ['cmd %d' % n for n in range(10)]
        finally:
            link.close()
            await wait_until(
                lambda: link.supervisor.state == ProcessState.STOPPED)
            await server.stop()

    asyncio.run(main())


def test_recovers_from_dropped_connection(tools, wait_until):
    objdump, openocd = tools

    async def main():
        server = ProbeServer()
        port = await server.start()
        link = await SwdLinkLaunch('fw.elf', telnet_port=port,
                                   host='127.0.0.1', objdump=objdump,
                                   program=openocd, reconnect_backoff=0.05)
        try:
            dropped = asyncio.ensure_future(link.command('drop', 0.5))
            queued = [asyncio.ensure_future(link.read32('led'))
                      for _ in range(3)]

            with pytest.raises(CommandTimeout):
                await dropped
            assert await asyncio.gather(*queued) == [0xdeadbeef] * 3
            assert server.commands == ['drop'] + ['mdw 0x00002000'] * 3
        finally:
            link.close()
            await wait_until(
                lambda: link.supervisor.state == ProcessState.STOPPED)
            await server.stop()

    asyncio.run(main())


def test_commands_fail_after_close(tools):
    objdump, openocd = tools

    async def main():
        link = SwdLink('fw.elf', objdump=objdump, program=openocd)
        link.close()
        with pytest.raises(LinkClosed):
            await link.command('reset')

    asyncio.run(main())


def test_uses_the_running_loop(tools):
    objdump, openocd = tools

    async def main():
        link = SwdLink('fw.elf', objdump=objdump, program=openocd)
        assert link.loop is asyncio.get_running_loop()
        assert link.queue.loop is link.loop
        assert link.session.loop is link.loop
        assert link.supervisor.loop is link.loop
        link.close()

    asyncio.run(main())


def test_needs_a_running_loop(tools):
    objdump, openocd = tools
    with pytest.raises(RuntimeError):
        SwdLink('fw.elf', objdump=objdump, program=openocd)
