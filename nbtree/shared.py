import math
import sys

from array import array
from enum import IntEnum
from struct import Struct

from mutf8.mutf8 import encode_modified_utf8, decode_modified_utf8

class TagKind( IntEnum ):
    """
    The closed set of NBT tag types.
    The value of each member is the numerical ID that identifies the tag on the wire.
    """
    END        = 0  #Nameless, payloadless tag that terminates a TAG_Compound. Also the element type of an empty TAG_List.
    BYTE       = 1  #1-byte signed integer.
    SHORT      = 2  #2-byte big-endian signed integer.
    INT        = 3  #4-byte big-endian signed integer.
    LONG       = 4  #8-byte big-endian signed integer.
    FLOAT      = 5  #Big-endian IEEE 754 binary32.
    DOUBLE     = 6  #Big-endian IEEE 754 binary64.
    BYTE_ARRAY = 7  #4-byte signed length, followed by that many signed bytes.
    STRING     = 8  #2-byte unsigned length, followed by that many bytes of modified UTF-8.
    LIST       = 9  #1-byte element type, 4-byte signed length, then that many nameless payloads of the element type.
    COMPOUND   = 10 #Named tags, terminated by a TAG_End.
    INT_ARRAY  = 11 #4-byte signed length, followed by that many 4-byte big-endian signed integers.
    LONG_ARRAY = 12 #4-byte signed length, followed by that many 8-byte big-endian signed integers.

    @property
    def id( self ):
        """The numerical ID written to the wire for this tag type."""
        return int( self )

    @property
    def length( self ):
        """
        Number of bytes that follow this tag's type (and name, if it has one).
        For prefixed tags this is the size of the prefix, otherwise it is the size of the payload.
        """
        return TAG_LENGTHS[ self ]

    @property
    def isPrefixed( self ):
        """True if the payload of this tag is preceded by a length or type header rather than having a fixed size."""
        return TAG_PREFIXED[ self ]

TAG_END        = TagKind.END
TAG_BYTE       = TagKind.BYTE
TAG_SHORT      = TagKind.SHORT
TAG_INT        = TagKind.INT
TAG_LONG       = TagKind.LONG
TAG_FLOAT      = TagKind.FLOAT
TAG_DOUBLE     = TagKind.DOUBLE
TAG_BYTE_ARRAY = TagKind.BYTE_ARRAY
TAG_STRING     = TagKind.STRING
TAG_LIST       = TagKind.LIST
TAG_COMPOUND   = TagKind.COMPOUND
TAG_INT_ARRAY  = TagKind.INT_ARRAY
TAG_LONG_ARRAY = TagKind.LONG_ARRAY

#Internal names of tags (indexed by tag type) as defined by the NBT specification
TAG_NAMES = (
    "TAG_End",
    "TAG_Byte",
    "TAG_Short",
    "TAG_Int",
    "TAG_Long",
    "TAG_Float",
    "TAG_Double",
    "TAG_Byte_Array",
    "TAG_String",
    "TAG_List",
    "TAG_Compound",
    "TAG_Int_Array",
    "TAG_Long_Array"
)

#Bytes following the type/name header, indexed by tag type.
TAG_LENGTHS = (
    0,      #TAG_End
    1,      #TAG_Byte
    2,      #TAG_Short
    4,      #TAG_Int
    8,      #TAG_Long
    4,      #TAG_Float
    8,      #TAG_Double
    4,      #TAG_Byte_Array (length)
    2,      #TAG_String (length)
    1 + 4,  #TAG_List (element type + length)
    0,      #TAG_Compound
    4,      #TAG_Int_Array (length)
    4       #TAG_Long_Array (length)
)

TAG_PREFIXED = (
    False,  #TAG_End
    False,  #TAG_Byte
    False,  #TAG_Short
    False,  #TAG_Int
    False,  #TAG_Long
    False,  #TAG_Float
    False,  #TAG_Double
    True,   #TAG_Byte_Array
    True,   #TAG_String
    True,   #TAG_List
    True,   #TAG_Compound
    True,   #TAG_Int_Array
    True    #TAG_Long_Array
)

#Total number of tags supported by this version of the library.
TAG_COUNT = len( TAG_NAMES )

#Default limit on how many TAG_Lists / TAG_Compounds may be nested inside each other (the root counts as 1).
DEFAULT_MAX_DEPTH = 512

#Largest length that can be written to a 4-byte signed length prefix.
MAX_LENGTH = 2147483647

#Largest number of bytes a modified UTF-8 string can occupy.
MAX_STRING_LENGTH = 65535

#Array typecodes for signed 1, 4 and 8-byte integers.
#The size of "i" and "l" varies from system to system; pick whichever is 4 bytes here.
if array( "i" ).itemsize == 4:
    SIGNED_INT_TYPE = "i"
elif array( "l" ).itemsize == 4:
    SIGNED_INT_TYPE = "l"
else:
    raise OSError( "No 4-byte datatype available." )
SIGNED_BYTE_TYPE = "b"
SIGNED_LONG_TYPE = "q"

#array typecodes indexed by tag type (array tags only)
ARRAY_TYPES = {
    TAG_BYTE_ARRAY: SIGNED_BYTE_TYPE,
    TAG_INT_ARRAY:  SIGNED_INT_TYPE,
    TAG_LONG_ARRAY: SIGNED_LONG_TYPE
}

#Inclusive ( min, max ) of each integer tag type
INT_RANGES = {
    TAG_BYTE:  (                 -128,                 127 ),
    TAG_SHORT: (               -32768,               32767 ),
    TAG_INT:   (          -2147483648,          2147483647 ),
    TAG_LONG:  ( -9223372036854775808, 9223372036854775807 )
}

#array stores values in native byte order; on little-endian systems they must be swapped to and from big-endian.
_SWAP = sys.byteorder == "little"

#Structs
_TL = Struct( ">Bi" )   #Tag list header
_UB = Struct( ">B"  )   #Unsigned byte (1 byte)
_B  = Struct( ">b"  )   #Signed byte (1 byte)
_S  = Struct( ">h"  )   #Signed big-endian short (2 bytes)
_US = Struct( ">H"  )   #Unsigned big-endian short (2 bytes)
_I  = Struct( ">i"  )   #Signed big-endian int (4 bytes)
_L  = Struct( ">q"  )   #Signed big-endian long (8 bytes)
_F  = Struct( ">f"  )   #Big-endian float (4 bytes)
_D  = Struct( ">d"  )   #Big-endian double (8 bytes)

class NBTFormatError( Exception ):
    """This exception is raised when parsing, writing, or modifying data that violates the NBT specification."""
    pass

class UnexpectedEOFError( NBTFormatError, EOFError ):
    """
    UnexpectedEOFError( offset, needed, available )

    This exception is raised when the data ends in the middle of a field.
    offset is the position where the field starts, needed is the number of bytes the field requires and available is how many were left.
    """
    def __str__( self ):
        return "Unexpected end of data at offset {:d}: needed {:d} byte(s), but only {:d} remain.".format( *self.args )

class WrongTagError( NBTFormatError ):
    """
    WrongTagError( expected, given )

    This exception is raised when the root tag of an NBT document is not a TAG_Compound, or when the wrong type of tag is written to a TAG_List.
    According to the NBT specification, TAG_Lists are only permitted to contain tags of a single type.
    """
    def __str__( self ):
        return "Expected {}, but received {} instead.".format( describeTag( self.args[0] ), describeTag( self.args[1] ) )

class ConversionError( NBTFormatError ):
    """
    ConversionError( value )

    This exception is raised when failing to find a tag class to convert a non-tag value to.
    int and float have no mapping because the conversion would be ambiguous:
        * int could be converted TAG_Byte, TAG_Short, TAG_Int, or TAG_Long.
        * float could be converted TAG_Float or TAG_Double.
    Specify the tag type explicitly instead, e.g.
        doc["myNumber"] = TAG_Int( 5 )
        doc.int( "myNumber", 5 )
        ls = doc.list( "myList", [ 10, 11, 12 ], TAG_Int )
    """
    def __str__( self ):
        return "Unable to convert value of type \"{}\" to a tag.".format( self.args[0].__class__.__name__ )

class DuplicateNameError( NBTFormatError ):
    """
    DuplicateNameError( name )

    This exception is raised when multiple tags with the same name are written to the same TAG_Compound,
    or parsed from the same TAG_Compound when duplicates are disallowed.
    """
    def __str__( self ):
        return "There is already a tag with the name \"{}\" in this TAG_Compound.".format( self.args[0] )

class UnknownTagTypeError( NBTFormatError ):
    """
    UnknownTagTypeError( tagType, offset=None )

    This exception is raised when a tag with an invalid or unrecognized type is parsed or written.
    offset is the position of the offending type byte when parsing, or None.
    """
    def __str__( self ):
        msg = "Unknown or unsupported tag type: {:d}".format( self.args[0] )
        if len( self.args ) > 1 and self.args[1] is not None:
            msg += " (at offset {:d})".format( self.args[1] )
        return msg

class OutOfBoundsError( NBTFormatError ):
    """
    OutOfBoundsError( value, min, max )

    This exception is raised when a value is outside of the valid range for its tag type (e.g. TAG_Byte( 300 )).
    """
    def __str__( self ):
        return "Value {:d} is outside of expected range [{:d},{:d}].".format( *self.args )

class NegativeLengthError( NBTFormatError ):
    """
    NegativeLengthError( tagType, length, offset )

    This exception is raised when a TAG_Byte_Array, TAG_Int_Array or TAG_Long_Array declares a negative length.
    """
    def __str__( self ):
        return "{} at offset {:d} has negative length {:d}.".format( describeTag( self.args[0] ), self.args[2], self.args[1] )

class InvalidStringError( NBTFormatError ):
    """
    InvalidStringError( offset, reason )

    This exception is raised when a string (a TAG_String or a tag name) is not valid modified UTF-8.
    offset is the position of the string's length prefix.
    """
    def __str__( self ):
        offset, reason = self.args
        if offset is None:
            return "Invalid modified UTF-8 string: {}".format( reason )
        return "Invalid modified UTF-8 string at offset {:d}: {}".format( offset, reason )

class StringTooLongError( NBTFormatError ):
    """
    StringTooLongError( length )

    This exception is raised when a string is longer than 65535 bytes once encoded as modified UTF-8.
    """
    def __str__( self ):
        return "String is {:d} bytes long when encoded, but at most {:d} bytes can be written.".format( self.args[0], MAX_STRING_LENGTH )

class LengthOverflowError( NBTFormatError ):
    """
    LengthOverflowError( tagType, length )

    This exception is raised when writing a TAG_List or array tag with more entries than a 4-byte signed length can count.
    """
    def __str__( self ):
        return "{} has {:d} entries, but at most {:d} can be written.".format( describeTag( self.args[0] ), self.args[1], MAX_LENGTH )

class NestingTooDeepError( NBTFormatError ):
    """
    NestingTooDeepError( maxDepth, offset )

    This exception is raised when TAG_Lists and TAG_Compounds are nested more than maxDepth levels deep.
    """
    def __str__( self ):
        return "Tags are nested more than {:d} levels deep (at offset {:d}).".format( *self.args )

class TrailingBytesError( NBTFormatError ):
    """
    TrailingBytesError( offset, remaining )

    This exception is raised when data remains after the root tag and the caller asked for the entire buffer to be consumed.
    """
    def __str__( self ):
        return "{1:d} unread byte(s) remain after the root tag (at offset {0:d}).".format( *self.args )

def describeTag( tagType ):
    """
    Returns a short description of a tag with the given tagType, including the internal name and numeric type (e.g. TAG_Compound (10) ).
    tagType is expected to be a number.
    If tagType does not represent a valid tag, returns "Unknown (<tagType>)".
    """
    if tagType < 0 or tagType >= TAG_COUNT:
        return "Unknown ({:d})".format( tagType )
    return "{} ({:d})".format( TAG_NAMES[tagType], tagType )

#_tns
def tagNameString( name ):
    """Return "" if name is None, otherwise return name surrounded by parentheses and double quotes."""
    return "" if name is None else "(\"{}\")".format( name )

#_tls
def tagListString( length, tagType ):
    """
    Returns a str summarizing the contents of a TAG_List with the given length and tagType.
    Return "0 entries" if length == 0.
    Otherwise, return "<length> <name of tag>(s)".
    """
    if length == 0:
        return "0 entries"
    return "{:d} {:s}{}".format( length, TAG_NAMES[tagType], "s" if length != 1 else "" )

#_avtt
def assertValidTagType( tagType ):
    """Raises UnknownTagTypeError if the given tagType is unrecognized"""
    if tagType < 0 or tagType >= TAG_COUNT:
        raise UnknownTagTypeError( tagType )

def fromId( b, offset=None ):
    """
    Returns the TagKind whose ID is b.
    Raises UnknownTagTypeError (with the given offset) if b is not in the range [0, 12].
    """
    if b < 0 or b >= TAG_COUNT:
        raise UnknownTagTypeError( b, offset )
    return TagKind( b )

def tagLength( tagType ):
    """Returns the number of bytes that follow the header of a tag with the given tagType (see TagKind.length)."""
    return TAG_LENGTHS[ fromId( tagType ) ]

def isPrefixed( tagType ):
    """Returns True if tags with the given tagType are length- or type-prefixed (see TagKind.isPrefixed)."""
    return TAG_PREFIXED[ fromId( tagType ) ]

class Cursor:
    """
    Cursor( data, maxDepth=DEFAULT_MAX_DEPTH, allowDuplicates=True )

    A read position over a buffer of uncompressed NBT data.
    data is copied on construction, so the caller may reuse or release its buffer afterwards.
    maxDepth and allowDuplicates configure the decoders that read from this cursor.
    """
    __slots__ = ( "data", "offset", "maxDepth", "allowDuplicates" )

    def __init__( self, data, maxDepth=DEFAULT_MAX_DEPTH, allowDuplicates=True ):
        self.data            = bytes( data )
        self.offset          = 0
        self.maxDepth        = maxDepth
        self.allowDuplicates = allowDuplicates

    def remaining( self ):
        """Returns the number of unread bytes."""
        return len( self.data ) - self.offset

    def require( self, n ):
        """Raises UnexpectedEOFError if fewer than n bytes remain. Does not consume anything."""
        r = len( self.data ) - self.offset
        if n > r:
            raise UnexpectedEOFError( self.offset, n, r )

    def read( self, n ):
        """
        Reads n bytes and returns them as a bytes object.
        Raises an UnexpectedEOFError if the end of the data is encountered before n bytes can be read.
        """
        o = self.offset
        e = o + n
        if e > len( self.data ):
            raise UnexpectedEOFError( o, n, len( self.data ) - o )
        self.offset = e
        return self.data[o:e]

#_cd
def checkDepth( i, d ):
    """Raises NestingTooDeepError if a TAG_List or TAG_Compound at depth d of i would be too deeply nested."""
    if d > i.maxDepth:
        raise NestingTooDeepError( i.maxDepth, i.offset )

#_rub
def readUnsignedByte( i ):
    """Reads an unsigned byte from i."""
    return i.read( 1 )[0] #note: no struct unpacking necessary; bytes() uses unsigned bytes

#_rtt
def readTagType( i ):
    """
    Reads a tag type byte from i and returns the corresponding TagKind.
    Raises UnknownTagTypeError if the byte is not a known tag type.
    """
    o = i.offset
    return fromId( i.read( 1 )[0], o )

#_rb
def readByte( i ):
    """
    Reads a TAG_Byte payload.
    i is a Cursor to read bytes from.
    """
    return _B.unpack( i.read( 1 ) )[0]
#_air
def assertIntInRange( tagType, v ):
    """Raises OutOfBoundsError if v doesn't fit in a tag of the given integer tagType."""
    lo, hi = INT_RANGES[ tagType ]
    if v < lo or v > hi:
        raise OutOfBoundsError( v, lo, hi )

#_wb
def writeByte( v, o ):
    """Writes a TAG_Byte payload."""
    o.write( _B.pack( v ) )

def readShort( i ):
    """Reads a TAG_Short payload."""
    return _S.unpack( i.read( 2 ) )[0]
#_ws
def writeShort( v, o ):
    """Writes a TAG_Short payload."""
    o.write( _S.pack( v ) )

#_ri
def readInt( i ):
    """Reads a TAG_Int payload."""
    return _I.unpack( i.read( 4 ) )[0]
#_wi
def writeInt( v, o ):
    """Writes a TAG_Int payload."""
    o.write( _I.pack( v ) )

#_rl
def readLong( i ):
    """Reads a TAG_Long payload."""
    return _L.unpack( i.read( 8 ) )[0]
#_wl
def writeLong( v, o ):
    """Writes a TAG_Long payload."""
    o.write( _L.pack( v ) )

#_r32
def roundFloat( v ):
    """
    Returns v rounded to the nearest single-precision float.
    Finite values too large for single precision become +/- infinity.
    """
    v = float( v )
    try:
        return _F.unpack( _F.pack( v ) )[0]
    except OverflowError:
        return math.copysign( math.inf, v )

#_rf
def readFloat( i ):
    """Reads a TAG_Float payload."""
    return _F.unpack( i.read( 4 ) )[0]
#_wf
def writeFloat( v, o ):
    """Writes a TAG_Float payload. v is rounded to single precision first (see roundFloat)."""
    o.write( _F.pack( roundFloat( v ) ) )

#_rd
def readDouble( i ):
    """Reads a TAG_Double payload."""
    return _D.unpack( i.read( 8 ) )[0]
#_wd
def writeDouble( v, o ):
    """Writes a TAG_Double payload."""
    o.write( _D.pack( v ) )

def decodeString( b, offset=None ):
    """
    Decodes b, a bytes object holding modified UTF-8, and returns it as a str.
    Raises InvalidStringError if b is malformed. offset is reported in the error.
    """
    try:
        return decode_modified_utf8( b )
    #mutf8 raises RuntimeError for lead bytes it does not recognize
    except ( UnicodeDecodeError, RuntimeError ) as e:
        raise InvalidStringError( offset, str( e ) ) from e

def encodeString( v ):
    """
    Encodes the str v as modified UTF-8 and returns the bytes.
    Raises StringTooLongError if the result doesn't fit in a 2-byte unsigned length.
    """
    b = encode_modified_utf8( v )
    if len( b ) > MAX_STRING_LENGTH:
        raise StringTooLongError( len( b ) )
    return b

#_rst
def readString( i ):
    """Reads a TAG_String payload."""
    o = i.offset
    l = _US.unpack( i.read( 2 ) )[0]
    return decodeString( i.read( l ), o )

#_wst
def writeString( v, o ):
    """Writes a TAG_String payload."""
    b = encodeString( v )
    o.write( _US.pack( len( b ) ) )
    o.write( b )

#_wtn
def writeTagName( tagType, name, o ):
    """
    Writes a named tag header.
    tagType is the numerical ID of the tag directly following this header.
    name is the name of the tag. If name is None, only the tagType is written (a bare tag).
    """
    o.write( _UB.pack( tagType ) )
    if name is not None:
        writeString( name, o )

#_rah
def readArrayHeader( i, tagType ):
    """
    Reads a TAG_Byte_Array, TAG_Int_Array or TAG_Long_Array header.
    Returns the number of elements in the array.
    If the length is negative, raises a NegativeLengthError.
    """
    o = i.offset
    l = _I.unpack( i.read( 4 ) )[0]
    if l < 0:
        raise NegativeLengthError( tagType, l, o )
    return l

#_rap
def readArrayPayload( a, i, length ):
    """
    Reads length big-endian integers from i into a, an array.
    The width of each integer is a.itemsize.
    """
    if length > 0:
        a.frombytes( i.read( length * a.itemsize ) )
        if _SWAP:
            a.byteswap()
    return a

#_cta
def convertToArray( typecode, v ):
    """Converts v, an iterable of ints or a bytes-like object, to an array with the given typecode if it isn't one already."""
    if isinstance( v, array ) and v.typecode == typecode:
        return v
    if typecode == SIGNED_BYTE_TYPE:
        b = byteView( v )
        if b is not None:
            a = array( typecode )
            a.frombytes( b )
            return a
    return array( typecode, v )

#Returns v as a flat view of unsigned bytes if it supports the buffer protocol, otherwise None.
#arrays are excluded; their items are converted by value rather than reinterpreted.
def byteView( v ):
    if isinstance( v, array ):
        return None
    try:
        return memoryview( v ).cast( "B" )
    except TypeError:
        return None

#_wap
def writeArrayPayload( a, o ):
    """Writes the elements of a, an array, as big-endian integers. a is not modified."""
    if _SWAP and a.itemsize > 1:
        a = array( a.typecode, a )
        a.byteswap()
    o.write( a.tobytes() )

#_wa
def writeArray( tagType, v, o ):
    """
    Writes a TAG_Byte_Array, TAG_Int_Array or TAG_Long_Array payload.
    v can be an array of the right typecode, or any value convertible to one (e.g. bytes for TAG_Byte_Array, a tuple of ints for the others).
    """
    a = convertToArray( ARRAY_TYPES[ tagType ], v )
    l = len( a )
    if l > MAX_LENGTH:
        raise LengthOverflowError( tagType, l )
    o.write( _I.pack( l ) )
    writeArrayPayload( a, o )

def writeByteArray( v, o ):
    """Writes a TAG_Byte_Array payload."""
    writeArray( TAG_BYTE_ARRAY, v, o )

def writeIntArray( v, o ):
    """Writes a TAG_Int_Array payload."""
    writeArray( TAG_INT_ARRAY, v, o )

def writeLongArray( v, o ):
    """Writes a TAG_Long_Array payload."""
    writeArray( TAG_LONG_ARRAY, v, o )

#_rlh
def readTagListHeader( i ):
    """
    Reads a TAG_List header.

    Returns a tuple ( tagType, length ).
    tagType is the TagKind of the tags contained in this list.
    length is how many tags are stored in the list.

    If the stored length is zero or negative the list is empty. Its element type byte may then hold any value,
    so it is not validated and ( TAG_END, 0 ) is returned.
    Otherwise, raises UnknownTagTypeError if tagType is unknown, and NBTFormatError if it is TAG_End.
    """
    o = i.offset
    t, l = _TL.unpack( i.read( 5 ) )
    if l <= 0:
        return ( TAG_END, 0 )
    t = fromId( t, o )
    if t == TAG_END:
        raise NBTFormatError( "TAG_List at offset {:d} declares {:d} TAG_End entries.".format( o, l ) )
    return ( t, l )

#_wlh
def writeTagListHeader( t, l, o ):
    """
    Writes a TAG_List header.
    Empty lists are always written with TAG_End as their element type.
    """
    if l > MAX_LENGTH:
        raise LengthOverflowError( TAG_LIST, l )
    o.write( _TL.pack( t if l > 0 else TAG_END, l ) )

#_wlp
def writeTagList( t, v, o ):
    """
    Writes a TAG_List payload of raw (non-tag) values.
    t must be a tag type with an entry in _WRITERS, i.e. anything but TAG_End, TAG_List and TAG_Compound.
    """
    l = len( v )
    if l == 0:
        writeTagListHeader( TAG_END, 0, o )
        return
    w = _WRITERS[ t ]
    if w is None:
        raise NBTFormatError( "Cannot write a {} of raw values.".format( describeTag( t ) ) )
    writeTagListHeader( t, l, o )
    for x in v:
        w( x, o )

#write* methods indexed by tagType
_WRITERS = (
    None,           #TAG_End
    writeByte,      #TAG_Byte
    writeShort,     #TAG_Short
    writeInt,       #TAG_Int
    writeLong,      #TAG_Long
    writeFloat,     #TAG_Float
    writeDouble,    #TAG_Double
    writeByteArray, #TAG_Byte_Array
    writeString,    #TAG_String
    None,           #TAG_List
    None,           #TAG_Compound
    writeIntArray,  #TAG_Int_Array
    writeLongArray  #TAG_Long_Array
)

def s4array( *args ):
    """
    s4array([initializer]) -> array("i" [, initializer])

    Returns an array.array of signed 4-byte integers, optionally initialized with a given initializer.
    """
    return array( SIGNED_INT_TYPE, *args )

def s8array( *args ):
    """
    s8array([initializer]) -> array("q" [, initializer])

    Returns an array.array of signed 8-byte integers, optionally initialized with a given initializer.
    """
    return array( SIGNED_LONG_TYPE, *args )
