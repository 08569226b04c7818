import struct

import pytest
from PIL import Image

from chunkstruct.png import PNGChunk, SIGNATURE


@pytest.fixture
def ihdr_chunk():
    # 1x1 grayscale, 8 bits
    return PNGChunk.new('IHDR', struct.pack('>IIBBBBB', 1, 1, 8, 0, 0, 0, 0))


@pytest.fixture
def iend_chunk():
    return PNGChunk.new('IEND', b'')


@pytest.fixture
def minimal_png_data(ihdr_chunk, iend_chunk):
    """signature + IHDR + IEND, nothing else"""
    return SIGNATURE + ihdr_chunk.as_bytes() + iend_chunk.as_bytes()


@pytest.fixture
def png_path(tmp_path):
    """A real PNG file produced by Pillow."""
    path = tmp_path / 'red.png'
    Image.new('RGB', (5, 5), 'red').save(path, 'PNG')

    return path
