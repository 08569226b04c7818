"""
# Chunkstruct: chunk based file formats for humans.

A file format is described declaratively: a Chunk subclass lists its fields
as class attributes, in the order they appear in the binary data, and each
field knows how many bytes it needs (possibly depending on a sibling field,
like the data of a PNG chunk depending on its length).

Two basic main operations are defined for the file format and its sub components:

 1. unpack(): reading the binary data from a stream and build a high-level
    representation of that. Any inconsistency (truncated data, wrong magic,
    checksum not matching) raises an exception deriving from ChunkstructException
    that carries the path of the failing field.

 2. pack(): encode the high-level representation into binary data.

An instance representing a file format can be in one of the following states

 1. INIT
 2. UNPACKING
 3. DONE (sealed, the fields cannot be changed anymore)

The PNG format lives in chunkstruct.png, together with the operations to
store messages into private ancillary chunks.
"""
