import json
import os
from collections import namedtuple


class LinkConfig(namedtuple('LinkConfig', 'elf scripts gdb_port tcl_port '
                                          'telnet_port timeout')):
    """
    Settings for a link, as stored in a JSON file:

      {
        "elf": "build/firmware.elf",
        "tcl": ["interface/stlink.cfg", "target/stm32f0x.cfg"],
        "ports": {"gdb": 3333, "tcl": "disabled", "telnet": 4444},
        "timeout": 5.0
      }
    """
    __slots__ = ()

    def __new__(cls, elf=None, scripts=(), gdb_port=3333, tcl_port=None,
                telnet_port=4444, timeout=5.0):
        return super().__new__(cls, elf, tuple(scripts), gdb_port, tcl_port,
                               telnet_port, timeout)

    @classmethod
    def fromFile(cls, path):
        with open(path) as f:
            data = json.load(f)
        ports = data.get('ports', {})
        base = os.path.dirname(os.path.abspath(path))
        elf = data.get('elf')
        if elf:
            elf = os.path.join(base, elf)
        return cls(elf=elf,
                   scripts=data.get('tcl', ()),
                   gdb_port=ports.get('gdb', 3333),
                   tcl_port=ports.get('tcl'),
                   telnet_port=ports.get('telnet', 4444),
                   timeout=data.get('timeout', 5.0))

    def merge(self, **overrides):
        changes = {k: v for k, v in overrides.items() if v is not None}
        if 'scripts' in changes:
            changes['scripts'] = tuple(changes['scripts'])
        return self._replace(**changes)

    def link_arguments(self):
        return dict(scripts=self.scripts, gdb_port=self.gdb_port,
                    tcl_port=self.tcl_port, telnet_port=self.telnet_port,
                    timeout=self.timeout)
