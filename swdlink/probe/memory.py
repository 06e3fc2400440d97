from . import protocol


class MemoryAccess():
    """
    Typed memory access to the target on top of a text command channel.

    `command` is a coroutine function taking the command text and a timeout
    and returning the reply text. Addresses are numbers or names known to
    `symbols`.
    """
    def __init__(self, command, symbols, image=None, timeout=5.0):
        self.command = command
        self.symbols = symbols
        self.image = image
        self.timeout = timeout

    def address_of(self, where):
        return self.symbols.resolve_address(where)

    async def execute(self, text, timeout=None):
        reply = await self.command(text, timeout or self.timeout)
        return protocol.check_reply(reply)

    async def _read_value(self, width, where, timeout):
        addr = self.address_of(where)
        reply = await self.execute(protocol.format_read(width, addr), timeout)
        return protocol.parse_value(reply, addr)

    async def read8(self, where, timeout=None):
        return await self._read_value(8, where, timeout)

    async def read16(self, where, timeout=None):
        return await self._read_value(16, where, timeout)

    async def read32(self, where, timeout=None):
        return await self._read_value(32, where, timeout)

    async def read(self, where, length, timeout=None):
        # 0x20000000: de ad be ef 00 01 02 03 04 05 06 07 08 09 0a 0b
        # 0x20000010: 0c 0d 0e 0f
        addr = self.address_of(where)
        reply = await self.execute(protocol.format_dump(addr, length),
                                   timeout)
        return protocol.parse_dump(reply, addr)

    async def _write_value(self, width, where, value, timeout):
        addr = self.address_of(where)
        await self.execute(protocol.format_write(width, addr, value), timeout)

    async def write8(self, where, value, timeout=None):
        await self._write_value(8, where, value, timeout)

    async def write16(self, where, value, timeout=None):
        await self._write_value(16, where, value, timeout)

    async def write32(self, where, value, timeout=None):
        await self._write_value(32, where, value, timeout)

    async def flash(self, timeout=None):
        """
        Halt the target, program the image and let it run.

        Steps are issued one by one and the first failure aborts the rest,
        so a failed load leaves the target halted.
        """
        if not self.image:
            raise protocol.StartupError('No image to flash')
        await self.execute(protocol.RESET_HALT, timeout)
        await self.execute(protocol.format_load(self.image), timeout)
        await self.execute(protocol.RESUME, timeout)

    async def reset(self, timeout=None):
        await self.execute(protocol.RESET, timeout)
