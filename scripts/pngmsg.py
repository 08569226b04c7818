#!/usr/bin/env python3
'''
Hide, show and remove messages stored into ancillary chunks of a PNG file.

 $ pngmsg.py encode image.png ruSt 'hello world'
 $ pngmsg.py decode image.png ruSt
 hello world
'''
import logging
import sys
import os

from chunkstruct.exceptions import ChunkstructException
from chunkstruct.png import commands


logging.basicConfig()
logger = logging.getLogger(__name__)
logger.setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)

if 'DEBUG' in os.environ:
    logging.getLogger('chunkstruct').setLevel(logging.DEBUG)


def usage(progname):
    print(f'''usage: {progname} encode <png file path> <chunk type> <message> [<output path>]
       {progname} decode <png file path> <chunk type>
       {progname} remove <png file path> <chunk type>
       {progname} print  <png file path>''')
    sys.exit(1)


def do_encode(in_file, chunk_type, message, out_file=None):
    chunk = commands.encode(in_file, chunk_type, message, out_file=out_file)
    logger.info(f'encoded {chunk}')


def do_decode(in_file, chunk_type):
    print(commands.decode(in_file, chunk_type))


def do_remove(in_file, chunk_type):
    chunk = commands.remove(in_file, chunk_type)
    logger.info(f'removed {chunk}')


def do_print(in_file):
    chunk_types = commands.print_chunks(in_file)

    if not chunk_types:
        print('No chunks found which could possibly contain messages')
        return

    print(f'PNG chunks found in file \'{in_file}\':\n')
    for chunk_type in chunk_types:
        print(chunk_type)


# subcommand -> (callable, min args, max args)
SUBCOMMANDS = {
    'encode': (do_encode, 3, 4),
    'decode': (do_decode, 2, 2),
    'remove': (do_remove, 2, 2),
    'print':  (do_print, 1, 1),
}


if __name__ == '__main__':
    if len(sys.argv) < 2 or sys.argv[1] not in SUBCOMMANDS:
        usage(sys.argv[0])

    command, n_min, n_max = SUBCOMMANDS[sys.argv[1]]
    args = sys.argv[2:]

    if not (n_min <= len(args) <= n_max):
        usage(sys.argv[0])

    try:
        command(*args)
    except (ChunkstructException, OSError) as e:
        logger.error(e)
        sys.exit(1)
