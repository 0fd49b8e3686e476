from collections import deque

from nbtree.shared import (
    NBTFormatError, WrongTagError, DuplicateNameError, OutOfBoundsError, LengthOverflowError,
    TAG_BYTE, TAG_SHORT, TAG_INT, TAG_LONG, TAG_FLOAT, TAG_DOUBLE, TAG_BYTE_ARRAY, TAG_STRING, TAG_LIST, TAG_COMPOUND, TAG_INT_ARRAY,
    TAG_LONG_ARRAY, ARRAY_TYPES, INT_RANGES, MAX_LENGTH,

    writeTagName       as _wtn, writeByte      as _wb,  writeShort    as _ws,
    writeInt           as _wi,  writeLong      as _wl,  writeFloat    as _wf,
    writeDouble        as _wd,  writeArray     as _wa,  writeString   as _wst,
    writeTagListHeader as _wlh, writeTagList   as _wlp, writeArrayPayload as _wap,

    convertToArray     as _cta,  roundFloat     as _r32,
    assertValidTagType as _avtt, assertIntInRange as _air,
)

#Checks the raw values passed to list() before anything is written.
def _avals( tagType, values ):
    if tagType in INT_RANGES:
        for v in values:
            _air( tagType, v )

#Checks a length passed to one of the start*() methods.
def _alen( tagType, length ):
    if length < 0:
        raise OutOfBoundsError( length, 0, MAX_LENGTH )
    if length > MAX_LENGTH:
        raise LengthOverflowError( tagType, length )

class _NBTWriterBase:
    """
    Base class for all other NBTWriter states.
    Implements a context stack and default NBTWriter methods.

    An NBTWriter changes its __class__ as tags are started and ended, so only the methods that are valid in the current context do anything;
    the defaults below raise NBTFormatError.
    """
    def __init__( self, output ):
        """
        Constructor for NBTWriter.
        output is expected to be a writable file-like object (e.g. io.BytesIO, or a file opened with "wb").
        """
        self._o = output
        self._s = deque()
        #A boolean indicating if the root TAG_Compound has been started yet.
        self._r = False

        #For TAG_List and the array tags, the number of tags/elements written so far.
        self._a = None
        #For TAG_List and the array tags, the number of tags/elements expected to be written.
        self._b = None
        #For TAG_List, the tag type of the list.
        #For TAG_Compound, the set of names that have been written so far.
        #For the array tags, the array typecode.
        self._c = None
    def close( self ):
        self._o.close()
    def _pushC( self ):
        """Push a new TAG_Compound context to the stack."""
        self._s.append( ( self.__class__, self._a, self._b, self._c ) )
        self.__class__ = _NBTWriterCompound
        self._c = set()
    def _pushL( self, tagType, length ):
        """Push a new TAG_List context to the stack."""
        self._s.append( ( self.__class__, self._a, self._b, self._c ) )
        self.__class__ = _NBTWriterList
        self._a = 0
        self._b = length
        self._c = tagType
    def _pushA( self, cls, tagType, length ):
        """Push a new TAG_Byte_Array / TAG_Int_Array / TAG_Long_Array context to the stack."""
        self._s.append( ( self.__class__, self._a, self._b, self._c ) )
        self.__class__ = cls
        self._a = 0
        self._b = length
        self._c = ARRAY_TYPES[ tagType ]
    def _pop( self ):
        """Return to the context that was active before the current one."""
        self.__class__, self._a, self._b, self._c = self._s.pop()

    def __enter__( self ):
        return self

    def __exit__( self, exc_type, exc_value, traceback ):
        """Automatically closes the writable file-like object after exiting a with block."""
        self.close()

    #Default implementations for NBTWriter methods.
    #These raise NBTFormatErrors to indicate that calling these methods in the current context is inappropriate.
    #Inside a TAG_Compound every method that writes a tag takes the tag's name as its first argument; inside a TAG_List they don't.
    def start( self, *args, **kwargs ):
        """
        Start the root TAG_Compound, named name ("" by default).
        If name is None, the root header is written without a name (bare NBT, as used by network protocols).

        After calling .start() and writing tags, the .end() method must be called to finish writing the root TAG_Compound.
        """
        raise NBTFormatError( "The root TAG_Compound cannot be created here." )
    def end( self, *args, **kwargs ):
        """Finish writing the root TAG_Compound. This must match a prior call to .start()."""
        raise NBTFormatError( "Attempted to end the root TAG_Compound, but the current tag is not the root TAG_Compound!" )
    def byte( self, *args, **kwargs ):
        """
        Write a TAG_Byte. value is expected to be an int in the range [-128, 127].
        Values outside of that range raise an OutOfBoundsError before anything is written (the same goes for short, int and long).
        """
        raise NBTFormatError( "A TAG_Byte cannot be created here." )
    def short( self, *args, **kwargs ):
        """Write a TAG_Short. value is expected to be an int in the range [-32768, 32767]."""
        raise NBTFormatError( "A TAG_Short cannot be created here." )
    def int( self, *args, **kwargs ):
        """Write a TAG_Int. value is expected to be an int in the range [-2147483648, 2147483647]."""
        raise NBTFormatError( "A TAG_Int cannot be created here." )
    def long( self, *args, **kwargs ):
        """Write a TAG_Long. value is expected to be an int in the range [-9223372036854775808, 9223372036854775807]."""
        raise NBTFormatError( "A TAG_Long cannot be created here." )
    def float( self, *args, **kwargs ):
        """Write a TAG_Float. value is rounded to single precision; values too large for it become +/- infinity."""
        raise NBTFormatError( "A TAG_Float cannot be created here." )
    def double( self, *args, **kwargs ):
        """Write a TAG_Double."""
        raise NBTFormatError( "A TAG_Double cannot be created here." )

    def bytearray( self, *args, **kwargs ):
        """
        Write a TAG_Byte_Array.

        values can be a bytes-like object, or an iterable of ints in the range [-128, 127].
        """
        raise NBTFormatError( "A TAG_Byte_Array cannot be created here." )
    def startByteArray( self, *args, **kwargs ):
        """
        Start writing a TAG_Byte_Array that will contain length bytes.

        After calling .startByteArray(), exactly length bytes must be written through one or more calls to .bytes(),
        followed by a call to .endByteArray().

        Example:
            writer.startByteArray( "mybytes", 16 )
            writer.bytes( b"\\x00\\x01\\x02\\x03\\x04\\x05\\x06\\x07" )
            writer.bytes( b"\\x08\\x09\\x0A\\x0B\\x0C\\x0D\\x0E\\x0F" )
            writer.endByteArray()
        """
        raise NBTFormatError( "A TAG_Byte_Array cannot be created here." )
    def bytes( self, *args, **kwargs ):
        """Write some of the bytes of the current TAG_Byte_Array. Accepts the same values as .bytearray()."""
        raise NBTFormatError( "Attempted to write bytes, but current tag is not a TAG_Byte_Array." )
    def endByteArray( self, *args, **kwargs ):
        """Finish writing a TAG_Byte_Array. This must match a prior call to .startByteArray()."""
        raise NBTFormatError( "Attempted to end a TAG_Byte_Array, but the current tag is not a TAG_Byte_Array." )

    def string( self, *args, **kwargs ):
        """
        Write a TAG_String.

        value is expected to be a str that is at most 65535 bytes long once encoded as modified UTF-8.
        """
        raise NBTFormatError( "A TAG_String cannot be created here." )

    def list( self, *args, **kwargs ):
        """
        Write a TAG_List containing the values stored in values.

        tagType is the numerical tag type (e.g. nbtree.TAG_FLOAT) of the list's elements,
        and values a sequence of plain Python values of the matching type (e.g. floats for nbtree.TAG_FLOAT).
        TAG_List and TAG_Compound elements can't be written this way; use startList()/endList() instead.
        An empty list is always written with an element type of TAG_End.
        """
        raise NBTFormatError( "A TAG_List cannot be created here." )
    def startList( self, *args, **kwargs ):
        """
        Start writing a TAG_List of length tags of the given tagType.

        After calling .startList(), exactly length tags must be written through the methods matching tagType
        (e.g. .float() for nbtree.TAG_FLOAT, .startCompound()/.endCompound() for nbtree.TAG_COMPOUND),
        followed by a call to .endList().

        Example:
            writer.startList( "mobs", nbtree.TAG_COMPOUND, 2 )

            writer.startCompound()
            writer.string( "name", "Sheep" )
            writer.int( "health", 10 )
            writer.endCompound()

            writer.startCompound()
            writer.string( "name", "Zombie" )
            writer.int( "health", 20 )
            writer.endCompound()

            writer.endList()
        """
        raise NBTFormatError( "A TAG_List cannot be created here." )
    def endList( self, *args, **kwargs ):
        """Finish writing a TAG_List. This must match a prior call to .startList()."""
        raise NBTFormatError( "Attempted to end a TAG_List, but the current tag is not a TAG_List." )

    def startCompound( self, *args, **kwargs ):
        """
        Start writing a TAG_Compound.

        After calling .startCompound() and writing tags, the .endCompound() method must be called to finish writing the TAG_Compound.
        """
        raise NBTFormatError( "A TAG_Compound cannot be created here." )
    def endCompound( self, *args, **kwargs ):
        """Finish writing a TAG_Compound. This must match a prior call to .startCompound()."""
        raise NBTFormatError( "Attempted to end a TAG_Compound, but the current tag is not a TAG_Compound." )

    def intarray( self, *args, **kwargs ):
        """Write a TAG_Int_Array. values is expected to be a sequence of ints in the range [-2147483648, 2147483647]."""
        raise NBTFormatError( "A TAG_Int_Array cannot be created here." )
    def startIntArray( self, *args, **kwargs ):
        """
        Start writing a TAG_Int_Array that will contain length ints.

        After calling .startIntArray(), exactly length ints must be written through one or more calls to .ints(),
        followed by a call to .endIntArray().
        """
        raise NBTFormatError( "A TAG_Int_Array cannot be created here." )
    def ints( self, *args, **kwargs ):
        """Write some of the ints of the current TAG_Int_Array."""
        raise NBTFormatError( "Attempted to write ints, but the current tag is not a TAG_Int_Array." )
    def endIntArray( self, *args, **kwargs ):
        """Finish writing a TAG_Int_Array. This must match a prior call to .startIntArray()."""
        raise NBTFormatError( "Attempted to end a TAG_Int_Array, but the current tag is not a TAG_Int_Array." )

    def longarray( self, *args, **kwargs ):
        """Write a TAG_Long_Array. values is expected to be a sequence of ints in the range [-9223372036854775808, 9223372036854775807]."""
        raise NBTFormatError( "A TAG_Long_Array cannot be created here." )
    def startLongArray( self, *args, **kwargs ):
        """
        Start writing a TAG_Long_Array that will contain length longs.

        After calling .startLongArray(), exactly length longs must be written through one or more calls to .longs(),
        followed by a call to .endLongArray().
        """
        raise NBTFormatError( "A TAG_Long_Array cannot be created here." )
    def longs( self, *args, **kwargs ):
        """Write some of the longs of the current TAG_Long_Array."""
        raise NBTFormatError( "Attempted to write longs, but the current tag is not a TAG_Long_Array." )
    def endLongArray( self, *args, **kwargs ):
        """Finish writing a TAG_Long_Array. This must match a prior call to .startLongArray()."""
        raise NBTFormatError( "Attempted to end a TAG_Long_Array, but the current tag is not a TAG_Long_Array." )

class _NBTWriterCompound( _NBTWriterBase ):
    """
    Context while writing a (non-root) TAG_Compound.
    Methods in this class take a name as a first argument.
    """
    def _ac( self, name ):
        """
        Asserts that a tag with this name has not already been written.
        If so, raises a DuplicateNameError.
        Otherwise, adds the name to the set of written names.
        """
        c = self._c
        if name in c:
            raise DuplicateNameError( name )
        c.add( name )
    def _h( self, tagType, name ):
        """Checks name and writes the named tag header."""
        self._ac( name )
        _wtn( tagType, name, self._o )
    def byte( self, name, value ):
        _air( TAG_BYTE, value )
        self._h( TAG_BYTE, name )
        _wb( value, self._o )
    def short( self, name, value ):
        _air( TAG_SHORT, value )
        self._h( TAG_SHORT, name )
        _ws( value, self._o )
    def int( self, name, value ):
        _air( TAG_INT, value )
        self._h( TAG_INT, name )
        _wi( value, self._o )
    def long( self, name, value ):
        _air( TAG_LONG, value )
        self._h( TAG_LONG, name )
        _wl( value, self._o )
    def float( self, name, value ):
        value = _r32( value )
        self._h( TAG_FLOAT, name )
        _wf( value, self._o )
    def double( self, name, value ):
        self._h( TAG_DOUBLE, name )
        _wd( value, self._o )

    def bytearray( self, name, values ):
        self._h( TAG_BYTE_ARRAY, name )
        _wa( TAG_BYTE_ARRAY, values, self._o )
    def startByteArray( self, name, length ):
        _alen( TAG_BYTE_ARRAY, length )
        self._h( TAG_BYTE_ARRAY, name )
        _wi( length, self._o )
        self._pushA( _NBTWriterByteArray, TAG_BYTE_ARRAY, length )

    def string( self, name, value ):
        self._h( TAG_STRING, name )
        _wst( value, self._o )

    def list( self, name, tagType, values ):
        _avtt( tagType )
        _avals( tagType, values )
        self._h( TAG_LIST, name )
        _wlp( tagType, values, self._o )
    def startList( self, name, tagType, length ):
        _alen( TAG_LIST, length )
        _avtt( tagType )
        self._h( TAG_LIST, name )
        _wlh( tagType, length, self._o )
        self._pushL( tagType, length )

    def startCompound( self, name ):
        self._h( TAG_COMPOUND, name )
        self._pushC()
    def endCompound( self ):
        self._o.write( b"\0" )
        self._pop()

    def intarray( self, name, values ):
        self._h( TAG_INT_ARRAY, name )
        _wa( TAG_INT_ARRAY, values, self._o )
    def startIntArray( self, name, length ):
        _alen( TAG_INT_ARRAY, length )
        self._h( TAG_INT_ARRAY, name )
        _wi( length, self._o )
        self._pushA( _NBTWriterIntArray, TAG_INT_ARRAY, length )

    def longarray( self, name, values ):
        self._h( TAG_LONG_ARRAY, name )
        _wa( TAG_LONG_ARRAY, values, self._o )
    def startLongArray( self, name, length ):
        _alen( TAG_LONG_ARRAY, length )
        self._h( TAG_LONG_ARRAY, name )
        _wi( length, self._o )
        self._pushA( _NBTWriterLongArray, TAG_LONG_ARRAY, length )

class _NBTWriterList( _NBTWriterBase ):
    """
    Context while writing a TAG_List.
    Methods in this class do not take names as arguments.
    """
    def _al( self, tagType ):
        """
        Asserts that the tagType of the element matches the list's tagType.
        Adds 1 to the count of tags written so far and asserts that the list length hasn't been exceeded.
        """
        c = self._c
        if tagType != c:
            raise WrongTagError( c, tagType )
        a = self._a + 1
        b = self._b
        if a > b:
            raise NBTFormatError( "More than {:d} tags were written.".format( b ) )
        self._a = a
    def byte( self, value ):
        _air( TAG_BYTE, value )
        self._al( TAG_BYTE )
        _wb( value, self._o )
    def short( self, value ):
        _air( TAG_SHORT, value )
        self._al( TAG_SHORT )
        _ws( value, self._o )
    def int( self, value ):
        _air( TAG_INT, value )
        self._al( TAG_INT )
        _wi( value, self._o )
    def long( self, value ):
        _air( TAG_LONG, value )
        self._al( TAG_LONG )
        _wl( value, self._o )
    def float( self, value ):
        value = _r32( value )
        self._al( TAG_FLOAT )
        _wf( value, self._o )
    def double( self, value ):
        self._al( TAG_DOUBLE )
        _wd( value, self._o )

    def bytearray( self, values ):
        self._al( TAG_BYTE_ARRAY )
        _wa( TAG_BYTE_ARRAY, values, self._o )
    def startByteArray( self, length ):
        _alen( TAG_BYTE_ARRAY, length )
        self._al( TAG_BYTE_ARRAY )
        _wi( length, self._o )
        self._pushA( _NBTWriterByteArray, TAG_BYTE_ARRAY, length )

    def string( self, value ):
        self._al( TAG_STRING )
        _wst( value, self._o )

    def list( self, tagType, values ):
        _avtt( tagType )
        _avals( tagType, values )
        self._al( TAG_LIST )
        _wlp( tagType, values, self._o )
    def startList( self, tagType, length ):
        _alen( TAG_LIST, length )
        _avtt( tagType )
        self._al( TAG_LIST )
        _wlh( tagType, length, self._o )
        self._pushL( tagType, length )
    def endList( self ):
        a = self._a
        b = self._b
        if a != b:
            raise NBTFormatError( "Expected {:d} tags, but only {:d} tags were written.".format( b, a ) )
        self._pop()

    def startCompound( self ):
        self._al( TAG_COMPOUND )
        self._pushC()

    def intarray( self, values ):
        self._al( TAG_INT_ARRAY )
        _wa( TAG_INT_ARRAY, values, self._o )
    def startIntArray( self, length ):
        _alen( TAG_INT_ARRAY, length )
        self._al( TAG_INT_ARRAY )
        _wi( length, self._o )
        self._pushA( _NBTWriterIntArray, TAG_INT_ARRAY, length )

    def longarray( self, values ):
        self._al( TAG_LONG_ARRAY )
        _wa( TAG_LONG_ARRAY, values, self._o )
    def startLongArray( self, length ):
        _alen( TAG_LONG_ARRAY, length )
        self._al( TAG_LONG_ARRAY )
        _wi( length, self._o )
        self._pushA( _NBTWriterLongArray, TAG_LONG_ARRAY, length )

class _NBTWriterArray( _NBTWriterBase ):
    """Shared implementation for the array contexts. self._c holds the array typecode."""
    def _add( self, values, unit ):
        """Converts values to an array, checks the running total against the declared length, then writes it."""
        values = _cta( self._c, values )
        a = self._a + len( values )
        b = self._b
        if a > b:
            raise NBTFormatError( "More than {:d} {}s were written.".format( b, unit ) )
        self._a = a
        _wap( values, self._o )
    def _end( self, unit ):
        a = self._a
        b = self._b
        if a != b:
            raise NBTFormatError( "Expected {:d} {}s, but only {:d} {}s were written.".format( b, unit, a, unit ) )
        self._pop()

class _NBTWriterByteArray( _NBTWriterArray ):
    """Context while writing a TAG_Byte_Array."""
    def bytes( self, values ):
        self._add( values, "byte" )
    def endByteArray( self ):
        self._end( "byte" )

class _NBTWriterIntArray( _NBTWriterArray ):
    """Context while writing a TAG_Int_Array."""
    def ints( self, values ):
        self._add( values, "int" )
    def endIntArray( self ):
        self._end( "int" )

class _NBTWriterLongArray( _NBTWriterArray ):
    """Context while writing a TAG_Long_Array."""
    def longs( self, values ):
        self._add( values, "long" )
    def endLongArray( self ):
        self._end( "long" )

class _NBTWriterRootCompound( _NBTWriterCompound ):
    """Context while writing the root TAG_Compound."""
    def end( self ):
        self._o.write( b"\0" )
        self.__class__ = NBTWriter
    def endCompound( self ):
        raise NBTFormatError( "You must call .end() instead of .endCompound() to end the root TAG_Compound." )

class NBTWriter( _NBTWriterBase ):
    """
    A class for writing NBT data to a writable file-like object without building a tree first.
    Tags are written by calling methods of this class in document order; calls made out of order raise NBTFormatError.
    Example:
        with nbtree.NBTWriter( io.BytesIO() ) as writer:
            writer.start()

            writer.byte( "my_byte", 10 )

            writer.startList( "my_list", nbtree.TAG_STRING, 4 )
            writer.string( "This" )
            writer.string( "is" )
            writer.string( "an" )
            writer.string( "example." )
            writer.endList()

            writer.startCompound( "my_compound" )
            writer.string( "name", "Sheep" )
            writer.long( "id", 1234567890 )
            writer.endCompound()

            writer.end()
    """
    def start( self, name="" ):
        if self._r is True:
            raise NBTFormatError( "The root TAG_Compound has already been created." )
        self._r = True
        _wtn( TAG_COMPOUND, name, self._o )
        self.__class__ = _NBTWriterRootCompound
        self._c = set()
