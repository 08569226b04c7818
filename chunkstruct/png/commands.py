'''
Operations to hide messages inside a PNG file.

Only the chunks whose type is modifiable (ancillary, private, safe-to-copy)
can be used as carriers: encoding a message into IHDR or removing IEND
would break the image.
'''
import logging
from typing import List, Union

from chunkstruct.exceptions import (
    ChunkNotFoundException,
    UnmodifiableChunkException,
)
from . import PNGChunk, PNGFile, to_chunk_type
from .chunk_type import ChunkType


logger = logging.getLogger(__name__)


def read_file(path) -> PNGFile:
    with open(path, 'rb') as f:
        data = f.read()

    logger.debug('read %d bytes from \'%s\'', len(data), path)

    return PNGFile.parse(data)


def write_file(path, png: PNGFile) -> None:
    data = png.as_bytes()

    with open(path, 'wb') as f:
        f.write(data)

    logger.debug('written %d bytes to \'%s\'', len(data), path)


def get_modifiable_chunk_type(code: Union[ChunkType, str]) -> ChunkType:
    chunk_type = to_chunk_type(code)

    if not chunk_type.is_modifiable():
        raise UnmodifiableChunkException(msg=f'chunk type {chunk_type} is not safe to modify')

    return chunk_type


def encode(in_file, chunk_type: Union[ChunkType, str], message: str, out_file=None) -> PNGChunk:
    '''Add the message to the file, if out_file is not indicated the input is updated in place.'''
    chunk_type = get_modifiable_chunk_type(chunk_type)
    png = read_file(in_file)

    chunk = png.append(chunk_type, message.encode('utf-8'))

    write_file(out_file if out_file is not None else in_file, png)

    return chunk


def decode(in_file, chunk_type: Union[ChunkType, str]) -> str:
    chunk_type = get_modifiable_chunk_type(chunk_type)
    png = read_file(in_file)

    chunk = png.chunk_by_type(chunk_type)

    if chunk is None:
        raise ChunkNotFoundException(msg=f'chunk of type {chunk_type} not found')

    return chunk.data_as_text()


def remove(in_file, chunk_type: Union[ChunkType, str]) -> PNGChunk:
    '''Remove the message from the file, updating it in place.'''
    chunk_type = get_modifiable_chunk_type(chunk_type)
    png = read_file(in_file)

    chunk = png.remove_chunk(chunk_type)

    write_file(in_file, png)

    return chunk


def print_chunks(in_file) -> List[ChunkType]:
    '''Returns the types of the chunks that could possibly contain messages.'''
    png = read_file(in_file)

    return [chunk.chunk_type for chunk in png.chunks if chunk.chunk_type.is_modifiable()]
