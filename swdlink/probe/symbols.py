import asyncio
import asyncio.subprocess
import logging
import re
from collections.abc import Mapping

from .protocol import ToolInvocationError, UnknownSymbolError


log = logging.getLogger(__name__)


class SymbolTable(Mapping):
    """
    Read-only mapping of symbol names to addresses taken from the symbol
    table of a compiled binary. When a name appears more than once the
    last occurrence wins.
    """

    # 00002000 g     O .data	00000004 led
    SymbolLine = re.compile(r'^(?P<addr>[0-9a-fA-F]+) .* (?P<name>[\w.$]+)$')

    def __init__(self, symbols=None):
        self._symbols = dict(symbols or {})

    def __getitem__(self, name):
        return self._symbols[name]

    def __iter__(self):
        return iter(self._symbols)

    def __len__(self):
        return len(self._symbols)

    def __repr__(self):
        return 'SymbolTable(%d symbols)' % len(self)

    def resolve_address(self, where):
        if isinstance(where, int):
            return where
        try:
            return self._symbols[where]
        except KeyError:
            raise UnknownSymbolError(where) from None

    def ask_address(self, addr):
        """Names defined at `addr`, sorted."""
        return sorted(n for n, a in self._symbols.items() if a == addr)

    @classmethod
    def fromText(cls, text):
        symbols = {}
        for line in text.splitlines():
            m = cls.SymbolLine.match(line.rstrip())
            if m:
                symbols[m.group('name')] = int(m.group('addr'), 16)
        return cls(symbols)

    @classmethod
    async def fromFile(cls, path, objdump='objdump'):
        try:
            proc = await asyncio.create_subprocess_exec(
                objdump, '-t', path,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE)
        except OSError as ex:
            raise ToolInvocationError('Cannot run %s: %s' % (objdump, ex))
        out, err = await proc.communicate()
        out = out.decode(errors='ignore')
        err = err.decode(errors='ignore')
        if proc.returncode != 0:
            raise ToolInvocationError((err or out).strip(), proc.returncode)
        symbols = cls.fromText(out)
        log.info('Loaded %d symbols from "%s"', len(symbols), path)
        return symbols
