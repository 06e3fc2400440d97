import logging

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .protocol import SwdLinkError


log = logging.getLogger(__name__)


def print_lines(lines):
    for line in lines:
        print(line)


def hexdump(addr, data, width=16):
    for i in range(0, len(data), width):
        chunk = data[i:i + width]
        text = ''.join(chr(b) if 32 <= b < 127 else '.' for b in chunk)
        yield '%08X %-*s %s' % (addr + i, width * 3, chunk.hex(' '), text)


class Console():
    history = InMemoryHistory()

    def __init__(self, link):
        self.link = link
        self.running = False

    def address_of(self, where):
        try:
            return int(where, 0)
        except ValueError:
            return where

    async def do_read(self, width, where):
        read = getattr(self.link, 'read%d' % width)
        value = await read(self.address_of(where))
        print('%s = 0x%0*X' % (where, width // 4, value))

    async def do_memory_read(self, where, length):
        addr = self.link.address_of(self.address_of(where))
        print_lines(hexdump(addr, await self.link.read(addr, length)))

    async def do_write(self, width, where, value):
        write = getattr(self.link, 'write%d' % width)
        await write(self.address_of(where), value)

    async def do_flash(self):
        print('Flashing "%s"...' % self.link.image)
        await self.link.flash()
        print('Done.')

    async def do_reset(self):
        await self.link.reset()

    def do_symbols(self, name=None):
        symbols = self.link.symbols
        if name is not None:
            print('%s = %08X' % (name, symbols.resolve_address(name)))
            return
        for name, addr in sorted(symbols.items(), key=lambda s: s[1]):
            print('%08X %s' % (addr, name))

    async def do_raw(self, text):
        reply = await self.link.command(text)
        print_lines(line.rstrip() for line in reply.splitlines())

    def do_quit(self):
        self.running = False

    async def do_command(self, cmd):
        fs = cmd.split()
        if not fs:
            return
        op, arg = fs[0], fs[1:]
        if op in ('r8', 'r16', 'r32'):
            await self.do_read(int(op[1:]), arg[0])
        elif op == 'mr':
            await self.do_memory_read(arg[0], int(arg[1], 0))
        elif op in ('w8', 'w16', 'w32'):
            await self.do_write(int(op[1:]), arg[0], int(arg[1], 0))
        elif op == 'flash':
            await self.do_flash()
        elif op == 'reset':
            await self.do_reset()
        elif op == 'sym':
            self.do_symbols(*arg[:1])
        elif op == 'q':
            self.do_quit()
        elif op[0] == ':':
            await self.do_raw(cmd[1:])
        else:
            print('Unknown command')

    async def run(self):
        session = PromptSession(history=self.history)
        self.running = True
        with patch_stdout():
            while self.running:
                try:
                    cmd = await session.prompt_async('(swd) ')
                except EOFError:
                    break
                except KeyboardInterrupt:
                    continue
                try:
                    await self.do_command(cmd.strip())
                except (IndexError, ValueError) as ex:
                    print('Bad arguments: %s' % ex)
                except SwdLinkError as ex:
                    print('Failed: %s' % ex)
                except Exception:
                    log.exception('Console bug!')
