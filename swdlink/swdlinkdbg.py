#!/usr/bin/env python3

import argparse
import asyncio
import logging

from swdlink.config import LinkConfig
from swdlink.probe import SwdLinkError, SwdLinkLaunch
from swdlink.probe.console import Console


async def session(config, program):
    link = await SwdLinkLaunch(config.elf, program=program,
                               **config.link_arguments())
    try:
        await Console(link).run()
    finally:
        link.close()


def main():
    parser = argparse.ArgumentParser(
            description='Access target memory through an OpenOCD server.')
    parser.add_argument('-c', '--config', type=str,
                        help='JSON configuration file.')
    parser.add_argument('-f', '--file', dest='scripts', action='append',
                        help='OpenOCD script to load (may be repeated).')
    parser.add_argument('--gdb-port', type=str,
                        help='GDB remote protocol port (default: 3333).')
    parser.add_argument('--tcl-port', type=str,
                        help='TCL machine command port (default: disabled).')
    parser.add_argument('--telnet-port', type=int,
                        help='Telnet line protocol port (default: 4444).')
    parser.add_argument('-t', '--timeout', type=float,
                        help='Command timeout in seconds (default: 5).')
    parser.add_argument('--openocd', type=str, default='openocd',
                        help='OpenOCD executable.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log protocol traffic.')
    parser.add_argument('elf', type=str, nargs='?',
                        help='Firmware image with symbols.')

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s: %(message)s')

    config = LinkConfig()
    if args.config:
        config = LinkConfig.fromFile(args.config)
    config = config.merge(elf=args.elf, scripts=args.scripts,
                          gdb_port=args.gdb_port, tcl_port=args.tcl_port,
                          telnet_port=args.telnet_port, timeout=args.timeout)

    try:
        asyncio.run(session(config, args.openocd))
    except SwdLinkError as ex:
        parser.exit(1, 'error: %s\n' % ex)


if __name__ == "__main__":
    main()
