import json

from swdlink.config import LinkConfig


def test_defaults():
    config = LinkConfig()
    assert config.elf is None
    assert config.scripts == ()
    assert config.link_arguments() == dict(scripts=(), gdb_port=3333,
                                           tcl_port=None, telnet_port=4444,
                                           timeout=5.0)


def test_from_file(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'elf': 'build/firmware.elf',
        'tcl': ['interface/stlink.cfg', 'target/stm32f0x.cfg'],
        'ports': {'telnet': 4445, 'tcl': 6666},
    }))

    config = LinkConfig.fromFile(str(path))
    assert config.elf == str(tmp_path / 'build' / 'firmware.elf')
    assert config.scripts == ('interface/stlink.cfg', 'target/stm32f0x.cfg')
    assert config.gdb_port == 3333
    assert config.tcl_port == 6666
    assert config.telnet_port == 4445
    assert config.timeout == 5.0


def test_from_file_without_elf(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{"tcl": ["board.cfg"]}')
    assert LinkConfig.fromFile(str(path)).elf is None


def test_merge_ignores_unset_values():
    config = LinkConfig(elf='a.elf', scripts=['board.cfg'], timeout=2.0)
    merged = config.merge(elf=None, scripts=['other.cfg'], timeout=None,
                          telnet_port=5555)
    assert merged.elf == 'a.elf'
    assert merged.scripts == ('other.cfg',)
    assert merged.timeout == 2.0
    assert merged.telnet_port == 5555
