import re


PROMPT = b'> '
DISCARD = b'\x00'
ERROR_MARKER = 'Error: '

WIDTH = {8: 'b', 16: 'h', 32: 'w'}


class SwdLinkError(Exception):
    pass


class StartupError(SwdLinkError):
    pass


class ToolInvocationError(SwdLinkError):
    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self):
        if self.code is None:
            return self.message
        return '%s (exit code %d)' % (self.message, self.code)


class ProtocolParseError(SwdLinkError):
    def __init__(self, text):
        super().__init__('Unexpected reply: %r' % text)
        self.text = text


class UnknownSymbolError(SwdLinkError, LookupError):
    def __init__(self, name):
        super().__init__('Unknown symbol: %s' % name)
        self.name = name


class CommandTimeout(SwdLinkError, TimeoutError):
    pass


class CommandFailed(SwdLinkError):
    def __init__(self, text):
        super().__init__(text)
        self.text = text


class LinkClosed(SwdLinkError):
    pass


def probe_arguments(scripts, gdb_port=3333, tcl_port=None, telnet_port=4444):
    """
    Command line for the debug-probe server.

    Port values may be numbers or anything the server accepts in their
    place ('disabled', 'pipe'). A port of None disables the channel.
    """
    args = []
    for name, port in [('gdb', gdb_port), ('tcl', tcl_port),
                       ('telnet', telnet_port)]:
        if port is None:
            port = 'disabled'
        args.extend(['-c', '%s_port %s' % (name, port)])
    for path in scripts:
        args.extend(['-f', path])
    return args


def _check_width(width):
    if width not in WIDTH:
        raise ValueError('Unsupported access width: %r' % width)


def format_read(width, addr):
    _check_width(width)
    return 'md%s 0x%08x' % (WIDTH[width], addr)


def format_dump(addr, length):
    if length < 1:
        raise ValueError('Length must be positive, got %d' % length)
    return 'mdb 0x%08x %d' % (addr, length)


def format_write(width, addr, value):
    _check_width(width)
    if not 0 <= value < (1 << width):
        raise ValueError('Value 0x%x does not fit in %d bits' % (value, width))
    return 'mw%s 0x%08x 0x%x' % (WIDTH[width], addr, value)


def format_load(image):
    return 'flash write_image erase {%s}' % image


RESET = 'reset'
RESET_HALT = 'reset halt'
RESUME = 'resume'


# 0x20000000: deadbeef
ValueLine = re.compile(
    r'^[ \t]*((?:0x)?[0-9a-fA-F]+):[ \t]+([0-9a-fA-F]+)[ \t\r]*$',
    re.MULTILINE)
# 0x20000000: de ad be ef 00 01 02 03 04 05 06 07 08 09 0a 0b
DumpLine = re.compile(
    r'^[ \t]*((?:0x)?[0-9a-fA-F]+):((?:[ \t]+[0-9a-fA-F]{2})+)[ \t\r]*$',
    re.MULTILINE)
ErrorLine = re.compile(r'^[ \t]*' + re.escape(ERROR_MARKER) + r'.*$',
                       re.MULTILINE)


def check_reply(text):
    m = ErrorLine.search(text)
    if m:
        raise CommandFailed(m.group(0).strip())
    return text


def _check_address(text, found, addr):
    # a reply for some other address belongs to an earlier command
    if addr is not None and int(found, 16) != addr:
        raise ProtocolParseError(text.strip())


def parse_value(text, addr=None):
    m = ValueLine.search(text)
    if not m:
        raise ProtocolParseError(text.strip())
    _check_address(text, m.group(1), addr)
    return int(m.group(2), 16)


def parse_dump(text, addr=None):
    lines = DumpLine.findall(text)
    if not lines:
        raise ProtocolParseError(text.strip())
    _check_address(text, lines[0][0], addr)
    return bytes.fromhex(''.join(hexline for _, hexline in lines))
