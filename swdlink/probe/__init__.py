from .link import SwdLink, SwdLinkLaunch
from .memory import MemoryAccess
from .protocol import (SwdLinkError, StartupError, ToolInvocationError,
                       ProtocolParseError, UnknownSymbolError, CommandTimeout,
                       CommandFailed, LinkClosed)
from .symbols import SymbolTable

__all__ = ['SwdLink', 'SwdLinkLaunch', 'MemoryAccess', 'SymbolTable',
           'SwdLinkError', 'StartupError', 'ToolInvocationError',
           'ProtocolParseError', 'UnknownSymbolError', 'CommandTimeout',
           'CommandFailed', 'LinkClosed']
