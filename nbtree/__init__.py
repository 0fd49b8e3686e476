"""
nbtree is a library for reading and writing Named Binary Tag (NBT) data for Python 3.
It features both DOM and SAX-style parsing and writing of uncompressed NBT, in its named and bare (network) forms.
"""

#NBT Tag Types, Exceptions, Primitive Codec
from nbtree.shared import (
    TagKind,
    TAG_END, TAG_BYTE, TAG_SHORT, TAG_INT, TAG_LONG, TAG_FLOAT, TAG_DOUBLE, TAG_BYTE_ARRAY, TAG_STRING, TAG_LIST, TAG_COMPOUND, TAG_INT_ARRAY,
    TAG_LONG_ARRAY, TAG_COUNT, DEFAULT_MAX_DEPTH,
    NBTFormatError, UnexpectedEOFError, WrongTagError, ConversionError, DuplicateNameError, UnknownTagTypeError, OutOfBoundsError,
    NegativeLengthError, InvalidStringError, StringTooLongError, LengthOverflowError, NestingTooDeepError, TrailingBytesError,
    Cursor, fromId, tagLength, isPrefixed
)

#decode/encode, NBTDocument and TAG_* Classes
from nbtree.tag import (
    decode, read, readNamedTag, encode, write, NamedTag, NBTDocument,
    TAG_Byte, TAG_Short, TAG_Int, TAG_Long, TAG_Float, TAG_Double, TAG_Byte_Array, TAG_String, TAG_List, TAG_Compound, TAG_Int_Array,
    TAG_Long_Array
)

#NBT Parsers + Handlers
from nbtree.parse import parse
from nbtree.handler import NBTHandler

#NBT Writer
from nbtree.writer import NBTWriter


#Export everything we imported above
__all__ = [
    "TagKind",
    "TAG_END", "TAG_BYTE", "TAG_SHORT", "TAG_INT", "TAG_LONG", "TAG_FLOAT", "TAG_DOUBLE", "TAG_BYTE_ARRAY", "TAG_STRING", "TAG_LIST", "TAG_COMPOUND", "TAG_INT_ARRAY",
    "TAG_LONG_ARRAY", "TAG_COUNT", "DEFAULT_MAX_DEPTH",
    "NBTFormatError", "UnexpectedEOFError", "WrongTagError", "ConversionError", "DuplicateNameError", "UnknownTagTypeError", "OutOfBoundsError",
    "NegativeLengthError", "InvalidStringError", "StringTooLongError", "LengthOverflowError", "NestingTooDeepError", "TrailingBytesError",
    "Cursor", "fromId", "tagLength", "isPrefixed",
    "decode", "read", "readNamedTag", "encode", "write", "NamedTag", "NBTDocument",
    "TAG_Byte", "TAG_Short", "TAG_Int", "TAG_Long", "TAG_Float", "TAG_Double", "TAG_Byte_Array", "TAG_String", "TAG_List", "TAG_Compound", "TAG_Int_Array",
    "TAG_Long_Array",
    "parse",
    "NBTHandler",
    "NBTWriter"
]
