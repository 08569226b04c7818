'''
# Portable Network Graphics

The specification is at <http://www.libpng.org/pub/png/spec/1.2/PNG-Contents.html> and
is available a full test-suite with a lot of PNG images covering all
the possible cases at <http://www.schaik.com/pngsuite/>.

Here we are interested only in the chunk structure of the file: a fixed
signature followed by a sequence of chunks, the last one being IEND. The
content of the chunks is never interpreted, apart from decoding as text
the ones used to carry messages.
'''
import logging
from typing import Optional, Union

from chunkstruct.core import Chunk
from chunkstruct import (
    fields,
)
from chunkstruct.exceptions import (
    ChunkNotFoundException,
    ContainerException,
    DuplicateChunkException,
    EncodingException,
    TerminatorException,
    TooSmallException,
    TrailingDataException,
)
from chunkstruct.properties import Dependency
from chunkstruct.streams import Stream
from chunkstruct.common import crc
from .chunk_type import ChunkType, ChunkTypeField


logger = logging.getLogger(__name__)


SIGNATURE = b'\x89\x50\x4e\x47\x0d\x0a\x1a\x0a'
TERMINATOR = ChunkType(b'IEND')
CHUNK_MIN_SIZE = 12  # length + type + crc with empty data


def to_chunk_type(code: Union[ChunkType, str, bytes]) -> ChunkType:
    if isinstance(code, ChunkType):
        return code

    if isinstance(code, str):
        return ChunkType.from_string(code)

    return ChunkType.from_bytes(code)


class PNGHeader(Chunk):
    magic = fields.StringField(8, default=SIGNATURE, is_magic=True)


class PNGChunk(Chunk):
    '''This is the main data structure of the format: the 4 fields represent
    a chunk into the file. Each field is intended big-endian.

    The crc field is network-byte-order CRC-32 computed over the chunk type and chunk data, but not the length.

    A chunk is sealed as soon as it's built, via new() or by unpacking: its
    fields cannot be changed afterwards.

    # Critical chunks

     1. IHDR: contains image's width, height, bit depth, color type, compression method, filter method and interlace method
     2. PLTE: contains the palette data
     3. IDAT: contains the actual image data (compressed)
     4. IEND: is the terminator chunk
    '''
    length = fields.StructField('I', endianess=fields.Endianess.BIG_ENDIAN)
    type   = ChunkTypeField()
    data   = fields.StringField(Dependency('.length'))
    crc    = crc.CRCField(['type', 'data'], endianess=fields.Endianess.BIG_ENDIAN)  # network byte order

    def __str__(self):
        return '%s (Length: %d, CRC: 0x%08x)' % (self.chunk_type, self.length.value, self.crc.value)

    @classmethod
    def new(cls, chunk_type: Union[ChunkType, str, bytes], data: bytes) -> 'PNGChunk':
        chunk = cls()
        chunk.type = to_chunk_type(chunk_type)
        chunk.data = data
        chunk.crc.update()
        chunk.seal()

        return chunk

    @classmethod
    def decode(cls, data: bytes) -> 'PNGChunk':
        '''Build a chunk from data containing exactly one chunk.'''
        stream = Stream(data)
        chunk = cls(stream)

        if not stream.is_exhausted():
            raise TrailingDataException(offset=stream.tell())

        return chunk

    def unpack(self, stream):
        super().unpack(stream)
        self.seal()

    @property
    def chunk_type(self) -> ChunkType:
        return self.type.value

    def is_critical(self):
        return self.chunk_type.is_critical()

    def as_bytes(self) -> bytes:
        return self.raw

    def data_as_text(self) -> str:
        try:
            return self.data.value.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingException(msg=f'data of chunk {self.chunk_type} is not valid UTF-8') from e


class PNGFile(Chunk):
    '''The whole file: after parsing it's possible to add and remove chunks,
    the modifications happen only before the IEND chunk.

    Any failed modification leaves the file untouched.'''
    header = PNGHeader()
    chunks = fields.ArrayField(PNGChunk)

    @classmethod
    def parse(cls, data: bytes) -> 'PNGFile':
        return cls(data)

    def unpack(self, stream):
        if stream.remaining() < len(SIGNATURE) + CHUNK_MIN_SIZE:
            raise TooSmallException(
                offset=stream.tell(),
                msg=f'invalid PNG file size {stream.remaining()} (expected at least {len(SIGNATURE) + CHUNK_MIN_SIZE})')

        super().unpack(stream)

    def validate(self):
        terminators = [idx for idx, chunk in enumerate(self.chunks) if chunk.chunk_type == TERMINATOR]

        if terminators != [len(self.chunks) - 1]:
            logger.debug('IEND found at positions %s over %d chunks', terminators, len(self.chunks))
            raise TerminatorException(chain=['chunks'])

    def _terminator_index(self) -> int:
        if not len(self.chunks) or self.chunks[-1].chunk_type != TERMINATOR:
            raise TerminatorException(chain=['chunks'])

        return len(self.chunks) - 1

    def _index_by_type(self, code: ChunkType) -> Optional[int]:
        for idx, chunk in enumerate(self.chunks):
            if chunk.chunk_type == code:
                return idx

        return None

    def chunk_by_type(self, code: Union[ChunkType, str]) -> Optional[PNGChunk]:
        '''Return the first chunk with the given type, if any.'''
        idx = self._index_by_type(to_chunk_type(code))

        return self.chunks[idx] if idx is not None else None

    def append_chunk(self, chunk: PNGChunk) -> None:
        '''Insert the chunk just before IEND: at most one chunk for each type can be added.'''
        if self._index_by_type(chunk.chunk_type) is not None:
            raise DuplicateChunkException(msg=f'chunk of type {chunk.chunk_type} already present')

        idx = self._terminator_index()
        logger.debug('appending chunk %s at position %d', chunk.chunk_type, idx)
        self.chunks.insert(idx, chunk)

    def append(self, code: Union[ChunkType, str], data: bytes) -> PNGChunk:
        chunk = PNGChunk.new(to_chunk_type(code), data)
        self.append_chunk(chunk)

        return chunk

    def remove_chunk(self, code: Union[ChunkType, str]) -> PNGChunk:
        '''Remove and return the first chunk with the given type.'''
        code = to_chunk_type(code)
        idx = self._index_by_type(code)

        if idx is None:
            raise ChunkNotFoundException(msg=f'chunk of type {code} not found')

        if code == TERMINATOR:
            raise ContainerException(msg='the IEND chunk cannot be removed')

        logger.debug('removing chunk %s at position %d', code, idx)

        return self.chunks.pop(idx)

    def as_bytes(self) -> bytes:
        return self.pack()
