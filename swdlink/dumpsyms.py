#!/usr/bin/env python3

import asyncio
import logging
import sys

from swdlink.probe import SymbolTable, ToolInvocationError


def main():
    logging.basicConfig()

    for path in sys.argv[1:]:
        print('Parsing "%s".' % path)
        print('')

        try:
            symbols = asyncio.run(SymbolTable.fromFile(path))
        except ToolInvocationError as ex:
            logging.error('%s', ex)
            continue

        for name, addr in sorted(symbols.items(), key=lambda s: s[1]):
            print('%08X %s' % (addr, name))

        print('')


if __name__ == '__main__':
    main()
