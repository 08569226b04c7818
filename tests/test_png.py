import struct
from zlib import crc32

import pytest

from chunkstruct.exceptions import (
    ChunkNotFoundException,
    ContainerException,
    CRCMismatchException,
    DuplicateChunkException,
    EncodingException,
    InvalidChunkTypeException,
    MagicException,
    TerminatorException,
    TooSmallException,
    TrailingDataException,
    TruncatedException,
)
from chunkstruct.png import PNGHeader, PNGChunk, PNGFile, SIGNATURE
from chunkstruct.png.chunk_type import ChunkType


MESSAGE = b'This is where your secret message will be!'
MESSAGE_CRC = 2882656334


def build_chunk_data(length, chunk_type, data, crc):
    return struct.pack('>I', length) + chunk_type + data + struct.pack('>I', crc)


@pytest.fixture
def chunk_data():
    return build_chunk_data(42, b'RuSt', MESSAGE, MESSAGE_CRC)


def test_header():
    """Check header is right"""
    png_header = PNGHeader()

    assert png_header.magic.value == b'\x89PNG\x0d\x0a\x1a\x0a'


def test_chunk_from_bytes(chunk_data):
    chunk = PNGChunk.decode(chunk_data)

    assert chunk.length.value == 42
    assert chunk.chunk_type == ChunkType.from_string('RuSt')
    assert str(chunk.chunk_type) == 'RuSt'
    assert chunk.data.value == MESSAGE
    assert chunk.data_as_text() == MESSAGE.decode()
    assert chunk.crc.value == MESSAGE_CRC
    assert chunk.is_critical()
    assert chunk.as_bytes() == chunk_data
    assert str(chunk) == 'RuSt (Length: 42, CRC: 0xabd1d84e)'


def test_chunk_new():
    chunk = PNGChunk.new(ChunkType.from_string('RuSt'), MESSAGE)

    assert chunk.length.value == 42
    assert chunk.crc.value == MESSAGE_CRC
    assert chunk.crc.value == crc32(b'RuSt' + MESSAGE)
    assert chunk.size == 12 + 42

    decoded = PNGChunk.decode(chunk.as_bytes())

    assert decoded.chunk_type == chunk.chunk_type
    assert decoded.data.value == chunk.data.value
    assert decoded.crc.value == chunk.crc.value


def test_chunk_new_empty():
    chunk = PNGChunk.new('IEND', b'')

    assert chunk.as_bytes() == b'\x00\x00\x00\x00IEND\xae\x42\x60\x82'


def test_chunk_wrong_crc():
    with pytest.raises(CRCMismatchException) as excinfo:
        PNGChunk.decode(build_chunk_data(42, b'RuSt', MESSAGE, MESSAGE_CRC - 1))

    assert excinfo.value.path == 'crc'
    assert excinfo.value.offset == 8 + 42


def test_chunk_tampered_data(chunk_data):
    """Flipping any bit of the data is detected."""
    for offset in range(8, 8 + 42):
        for bit in range(8):
            tampered = bytearray(chunk_data)
            tampered[offset] ^= 1 << bit

            with pytest.raises(CRCMismatchException):
                PNGChunk.decode(bytes(tampered))


def test_chunk_tampered_type(chunk_data):
    """Swapping the case of a letter keeps the type valid but breaks the CRC."""
    for offset in range(4, 8):
        tampered = bytearray(chunk_data)
        tampered[offset] ^= 0x20

        with pytest.raises(CRCMismatchException):
            PNGChunk.decode(bytes(tampered))


def test_chunk_invalid_type():
    with pytest.raises(InvalidChunkTypeException) as excinfo:
        PNGChunk.decode(build_chunk_data(0, b'Ru1t', b'', crc32(b'Ru1t')))

    assert excinfo.value.path == 'type'
    assert excinfo.value.offset == 4


@pytest.mark.parametrize('data,path', [
    (b'', 'length'),
    (b'\x00\x00', 'length'),
    (b'\x00\x00\x00\x05RuS', 'type'),
    (b'\x00\x00\x00\x05RuStabc', 'data'),
    (b'\xff\xff\xff\xffRuStabc', 'data'),
    (b'\x00\x00\x00\x03RuStabc\x00\x00', 'crc'),
])
def test_chunk_truncated(data, path):
    with pytest.raises(TruncatedException) as excinfo:
        PNGChunk.decode(data)

    assert excinfo.value.path == path


def test_chunk_trailing_data(chunk_data):
    with pytest.raises(TrailingDataException) as excinfo:
        PNGChunk.decode(chunk_data + b'\x00')

    assert excinfo.value.offset == len(chunk_data)


def test_chunk_sealed(chunk_data):
    for chunk in (PNGChunk.decode(chunk_data), PNGChunk.new('RuSt', MESSAGE)):
        with pytest.raises(AttributeError):
            chunk.data = b'kebab'

        with pytest.raises(AttributeError):
            chunk.length.value = 1

        with pytest.raises(AttributeError):
            chunk.type = 'ruSt'

        assert chunk.as_bytes() == chunk_data


def test_chunk_data_not_text():
    chunk = PNGChunk.new('ruSt', b'\xff\xfe')

    with pytest.raises(EncodingException):
        chunk.data_as_text()


def test_png_file_minimal(minimal_png_data, ihdr_chunk, iend_chunk):
    png = PNGFile.parse(minimal_png_data)

    assert len(png.chunks) == 2
    assert png.chunks[0].chunk_type == ChunkType.from_string('IHDR')
    assert png.chunks[-1].chunk_type == ChunkType.from_string('IEND')
    assert png.chunks[0].data.value == ihdr_chunk.data.value
    assert png.as_bytes() == minimal_png_data

    # the chunks are read-only
    assert isinstance(png.chunks.value, tuple)


def test_png_file_append(minimal_png_data, ihdr_chunk, iend_chunk):
    png = PNGFile.parse(minimal_png_data)

    chunk = png.append('ruSt', b'hello')

    assert [str(_.chunk_type) for _ in png.chunks] == ['IHDR', 'ruSt', 'IEND']
    assert png.chunk_by_type('ruSt') is chunk
    assert png.as_bytes() == (
        SIGNATURE
        + ihdr_chunk.as_bytes()
        + b'\x00\x00\x00\x05ruSthello' + struct.pack('>I', crc32(b'ruSthello'))
        + iend_chunk.as_bytes()
    )

    assert PNGFile.parse(png.as_bytes()).as_bytes() == png.as_bytes()


def test_png_file_append_remove(minimal_png_data):
    png = PNGFile.parse(minimal_png_data)

    png.append(ChunkType.from_string('ruSt'), b'hello')
    removed = png.remove_chunk('ruSt')

    assert removed.data_as_text() == 'hello'
    assert removed.father is None
    assert png.chunk_by_type('ruSt') is None
    assert png.as_bytes() == minimal_png_data


def test_png_file_append_duplicate(minimal_png_data):
    png = PNGFile.parse(minimal_png_data)
    png.append('ruSt', b'hello')
    data = png.as_bytes()

    with pytest.raises(DuplicateChunkException):
        png.append('ruSt', b'world')

    with pytest.raises(DuplicateChunkException):
        png.append_chunk(PNGChunk.new('IEND', b''))

    assert png.as_bytes() == data
    assert png.chunk_by_type('ruSt').data_as_text() == 'hello'


def test_png_file_append_without_terminator():
    png = PNGFile()

    with pytest.raises(TerminatorException):
        png.append('ruSt', b'hello')

    assert len(png.chunks) == 0


def test_png_file_remove_not_found(minimal_png_data):
    png = PNGFile.parse(minimal_png_data)

    with pytest.raises(ChunkNotFoundException):
        png.remove_chunk('ruSt')

    with pytest.raises(ContainerException):
        png.remove_chunk('IEND')

    assert png.as_bytes() == minimal_png_data


def test_png_file_first_match(ihdr_chunk, iend_chunk):
    """The format allows duplicated ancillary chunks, the first one wins."""
    first = PNGChunk.new('tEXt', b'first')
    second = PNGChunk.new('tEXt', b'second')
    data = SIGNATURE + b''.join(_.as_bytes() for _ in (ihdr_chunk, first, second, iend_chunk))

    png = PNGFile.parse(data)

    assert png.chunk_by_type('tEXt').data.value == b'first'
    assert png.remove_chunk('tEXt').data.value == b'first'
    assert [_.data.value for _ in png.chunks] == [ihdr_chunk.data.value, b'second', b'']

    assert png.as_bytes() == SIGNATURE + b''.join(_.as_bytes() for _ in (ihdr_chunk, second, iend_chunk))


@pytest.mark.parametrize('data', [
    b'',
    SIGNATURE,
    SIGNATURE + b'\x00' * 11,
])
def test_png_file_too_small(data):
    with pytest.raises(TooSmallException):
        PNGFile.parse(data)


def test_png_file_wrong_signature(minimal_png_data):
    with pytest.raises(MagicException) as excinfo:
        PNGFile.parse(b'\x88' + minimal_png_data[1:])

    assert excinfo.value.path == 'header.magic'
    assert excinfo.value.offset == 0


def test_png_file_without_terminator(ihdr_chunk, iend_chunk):
    trailer = PNGChunk.new('ruSt', b'hello')

    for chunks in (
        (ihdr_chunk,),
        (ihdr_chunk, iend_chunk, trailer),
        (iend_chunk, iend_chunk),
    ):
        with pytest.raises(TerminatorException):
            PNGFile.parse(SIGNATURE + b''.join(_.as_bytes() for _ in chunks))


def test_png_file_wrong_crc(minimal_png_data):
    # last byte of the CRC of IEND
    data = minimal_png_data[:-1] + bytes([minimal_png_data[-1] ^ 0x01])

    with pytest.raises(CRCMismatchException) as excinfo:
        PNGFile.parse(data)

    assert excinfo.value.path == 'chunks[1].crc'
    assert excinfo.value.offset == len(minimal_png_data) - 4


def test_png_file_truncated(ihdr_chunk):
    # the length declares more data than available
    data = SIGNATURE + ihdr_chunk.as_bytes() + b'\x00\x00\x01\x00IEND' + b'\x00' * 8

    with pytest.raises(TruncatedException) as excinfo:
        PNGFile.parse(data)

    assert excinfo.value.path == 'chunks[1].data'


def test_png_file_real_image(png_path):
    with open(png_path, 'rb') as f:
        data = f.read()

    png = PNGFile.parse(data)

    assert png.chunks[0].chunk_type == ChunkType.from_string('IHDR')
    assert png.chunks[-1].chunk_type == ChunkType.from_string('IEND')
    assert png.chunk_by_type('IDAT') is not None
    assert struct.unpack('>II', png.chunks[0].data.value[:8]) == (5, 5)
    assert png.as_bytes() == data

    for chunk in png.chunks:
        assert chunk.crc.value == chunk.crc.calculate()
        assert str(chunk)

    assert repr(png)
