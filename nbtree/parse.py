from nbtree.shared import (
    WrongTagError, TrailingBytesError, DEFAULT_MAX_DEPTH, Cursor, checkDepth as _checkDepth,
    readString as _rst, readTagListHeader as _rlh, readArrayHeader as _rah, readArrayPayload as _rap, readTagType as _rtt,
    s4array, s8array,
    _B, _S, _I, _L, _F, _D,
    TAG_END, TAG_BYTE_ARRAY, TAG_COMPOUND, TAG_INT_ARRAY, TAG_LONG_ARRAY, TAG_LENGTHS
)

class _StopParsingNBT( Exception ):
    """This is exception is raised when an NBT Handler requests for the parser to stop."""
    pass

def parse( data, handler, named=True, maxDepth=DEFAULT_MAX_DEPTH, strict=True ):
    """
    Provides SAX-like NBT parsing.

    As NBT tags are parsed from data, parse calls the corresponding methods on the given handler (e.g. string(), short()).
    These methods can then react to these tags being read as necessary.

    The advantage of parse() over decode() is that no tree is built: the handler sees each value once and can discard it.
    The disadvantage is that tasks that require data to be accessed out-of-order are harder / more awkward to program.

    data is a bytes-like object containing uncompressed NBT data. Its root must be a TAG_Compound.
    handler is expected to implement the methods defined in NBTHandler.
    named is an optional parameter that determines whether the root's header carries a name. Defaults to True.
        For bare data (named=False), handler.name() receives None as the root's name.
    maxDepth limits how many TAG_Lists / TAG_Compounds can be nested inside each other (the root counts as 1).
    strict is an optional parameter; if True (the default), bytes left over after the root raise TrailingBytesError before handler.end() is called.

    If a handler method raises an exception, the exception will continue to propagate through parse().
    Malformed data raises a subclass of NBTFormatError, possibly after some handler methods have already been called.

    Returns True if the entire document was parsed.
    Returns False if the handler called .stop().
    """
    i = Cursor( data, maxDepth )

    tagType = _rtt( i )
    if tagType != TAG_COMPOUND:
        raise WrongTagError( TAG_COMPOUND, tagType )

    try:
        handler.start()
        handler.name( tagType, _rst( i ) if named else None )
        parseTagCompound( i, handler, 1 )
        r = i.remaining()
        if strict and r > 0:
            raise TrailingBytesError( i.offset, r )
        handler.end()
    except _StopParsingNBT:
        return False
    return True

def parseTagByte( i, handler, d ):
    """
    Reads a TAG_Byte from i as a python int.
    Calls handler.byte() and passes the value as an argument.
    """
    handler.byte( _B.unpack( i.read( 1 ) )[0] )

def parseTagShort( i, handler, d ):
    """Reads a TAG_Short and passes it to handler.short()."""
    handler.short( _S.unpack( i.read( 2 ) )[0] )

def parseTagInt( i, handler, d ):
    """Reads a TAG_Int and passes it to handler.int()."""
    handler.int( _I.unpack( i.read( 4 ) )[0] )

def parseTagLong( i, handler, d ):
    """Reads a TAG_Long and passes it to handler.long()."""
    handler.long( _L.unpack( i.read( 8 ) )[0] )

def parseTagFloat( i, handler, d ):
    """Reads a TAG_Float and passes it to handler.float()."""
    handler.float( _F.unpack( i.read( 4 ) )[0] )

def parseTagDouble( i, handler, d ):
    """Reads a TAG_Double and passes it to handler.double()."""
    handler.double( _D.unpack( i.read( 8 ) )[0] )

def parseTagByteArray( i, handler, d ):
    """
    Reads a TAG_Byte_Array from i.
    Calls handler.startByteArray(), passing the length of the array.
    Repeatedly reads up to 4KB from the array and calls handler.bytes(), passing the bytes that were read as an argument.
    Finally, calls handler.endByteArray().
    """
    length = _rah( i, TAG_BYTE_ARRAY )
    i.require( length )

    handler.startByteArray( length )
    while length > 0:
        n = min( length, 4096 )
        handler.bytes( i.read( n ) )
        length -= n
    handler.endByteArray()

def parseTagString( i, handler, d ):
    """
    Reads a TAG_String from i, decoding it from modified UTF-8.
    Calls handler.string() and passes the value as an argument.
    """
    handler.string( _rst( i ) )

def parseTagList( i, handler, d ):
    """
    Reads a TAG_List from i.
    Calls handler.startList(), passing the tag type and number of items in the list.
    For each entry in the list, calls the appropriate parse*() function (e.g. parseTagInt) to read the payload of the tag.
    Finally, calls handler.endList().

    Lists with a length of zero or less are reported as startList( TAG_END, 0 ), whatever element type they declare.
    """
    _checkDepth( i, d )
    tagType, length = _rlh( i )
    if length > 0:
        i.require( length * ( TAG_LENGTHS[ tagType ] or 1 ) )
    parser = TAG_PARSERS[ tagType ]

    handler.startList( tagType, length )
    d += 1
    for _ in range( length ):
        parser( i, handler, d )
    handler.endList()

def parseTagCompound( i, handler, d ):
    """
    Reads a TAG_Compound from i.
    Calls handler.startCompound().
    For each entry in the TAG_Compound:
        1. Reads the type and name of the entry from i and calls handler.name()
        2. Calls an appropriate parse*() function (e.g. parseTagInt) to read the payload of the tag
    Finally, calls handler.endCompound().
    """
    _checkDepth( i, d )
    handler.startCompound()
    d += 1

    tagType = _rtt( i )
    while tagType != TAG_END:
        handler.name( tagType, _rst( i ) )
        TAG_PARSERS[ tagType ]( i, handler, d )
        tagType = _rtt( i )

    handler.endCompound()

def parseTagIntArray( i, handler, d ):
    """
    Reads a TAG_Int_Array from i.
    Calls handler.startIntArray(), passing the length of the array.
    Repeatedly reads up to 1024 ints (4KB) from i and calls handler.ints(), passing an array of the ints that were read.
    Finally, calls handler.endIntArray().
    """
    #Note: length is the number of integers in the array, NOT the number of bytes.
    length = _rah( i, TAG_INT_ARRAY )
    i.require( length * 4 )

    handler.startIntArray( length )
    while length > 0:
        n = min( length, 1024 )
        handler.ints( _rap( s4array(), i, n ) )
        length -= n
    handler.endIntArray()

def parseTagLongArray( i, handler, d ):
    """
    Reads a TAG_Long_Array from i.
    Calls handler.startLongArray(), passing the length of the array.
    Repeatedly reads up to 512 longs (4KB) from i and calls handler.longs(), passing an array of the longs that were read.
    Finally, calls handler.endLongArray().
    """
    length = _rah( i, TAG_LONG_ARRAY )
    i.require( length * 8 )

    handler.startLongArray( length )
    while length > 0:
        n = min( length, 512 )
        handler.longs( _rap( s8array(), i, n ) )
        length -= n
    handler.endLongArray()

#List of functions (indexed by tag type) that parse the payloads for their respective tags.
TAG_PARSERS = (
    None,               #TAG_END
    parseTagByte,       #TAG_BYTE
    parseTagShort,      #TAG_SHORT
    parseTagInt,        #TAG_INT
    parseTagLong,       #TAG_LONG
    parseTagFloat,      #TAG_FLOAT
    parseTagDouble,     #TAG_DOUBLE
    parseTagByteArray,  #TAG_BYTE_ARRAY
    parseTagString,     #TAG_STRING
    parseTagList,       #TAG_LIST
    parseTagCompound,   #TAG_COMPOUND
    parseTagIntArray,   #TAG_INT_ARRAY
    parseTagLongArray   #TAG_LONG_ARRAY
)
