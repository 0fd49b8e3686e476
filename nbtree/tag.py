"""
nbtree's tag module provides a DOM-style interface for decoding, encoding, building, modifying and inspecting NBT trees.

NBTDocument, NamedTag, the TAG_* classes and the decode(), read(), encode() and write() functions are implemented here.
"""
import itertools
import logging
import math

from array import array
from collections import OrderedDict, namedtuple
from io import BytesIO, StringIO

from nbtree.shared import (
    WrongTagError, ConversionError, DuplicateNameError, OutOfBoundsError,
    TrailingBytesError, LengthOverflowError,
    TAG_END, TAG_BYTE, TAG_SHORT, TAG_INT, TAG_LONG, TAG_FLOAT, TAG_DOUBLE, TAG_BYTE_ARRAY, TAG_STRING, TAG_LIST, TAG_COMPOUND, TAG_INT_ARRAY,
    TAG_LONG_ARRAY, TAG_NAMES, TAG_LENGTHS, ARRAY_TYPES, SIGNED_BYTE_TYPE, SIGNED_LONG_TYPE, DEFAULT_MAX_DEPTH, MAX_LENGTH,
    Cursor, checkDepth as _checkDepth,

    writeTagName        as _wtn,  writeByte         as _wb,   writeShort          as _ws,
    writeInt            as _wi,   writeLong         as _wl,   writeFloat          as _wf,
    writeDouble         as _wd,   writeString       as _wst,  writeTagListHeader  as _wlh,
    writeArrayPayload   as _wap,  encodeString      as _es,

    readByte            as _rb,   readShort         as _rs,   readInt             as _ri,
    readLong            as _rl,   readFloat         as _rf,   readDouble          as _rd,
    readString          as _rst,  readTagListHeader as _rlh, readTagType         as _rtt,
    readArrayHeader     as _rah,  readArrayPayload  as _rap,

    tagListString       as _tls,  tagNameString     as _tns,
    assertValidTagType  as _avtt, roundFloat        as _r32,  byteView            as _bv
)

log = logging.getLogger( __name__ )

#Base class methods called at various locations
_int_repr       = int.__repr__
_float_repr     = float.__repr__
_str_add        = str.__add__
_str_mul        = str.__mul__
_str_repr       = str.__repr__
_array_new      = array.__new__
_list_append    = list.append
_list_clear     = list.clear
_list_insert    = list.insert
_list_pop       = list.pop
_list_remove    = list.remove
_list_init      = list.__init__
_list_new       = list.__new__
_list_setitem   = list.__setitem__
_list_delitem   = list.__delitem__
_list_iadd      = list.__iadd__
_list_imul      = list.__imul__
_list_repr      = list.__repr__
_od_setitem     = OrderedDict.__setitem__

INF = math.inf

#Returns the tag class a non-tag value, v, converts to, or None if there isn't an unambiguous one.
def _tagClassFor( v ):
    if isinstance( v, array ):
        if v.typecode == SIGNED_BYTE_TYPE:
            return TAG_Byte_Array
        if v.typecode == SIGNED_LONG_TYPE:
            return TAG_Long_Array
        return TAG_Int_Array
    return _TAGMAP.get( v.__class__ )

#Converts v to a tag if it isn't one already. Raises ConversionError if the tag class can't be deduced.
def _toTag( v ):
    if hasattr( v, "tagType" ):
        return v
    c = _tagClassFor( v )
    if c is None:
        raise ConversionError( v )
    return c( v )

#Generator that converts values in the given iterable, i, to a deduced tag class if necessary.
#The tag class is deduced by inspecting the first value of the iterable, f, in this order:
#   1. If f is a tag, f's class.
#   2. The tag class mapped to f's Python type.
#If the type cannot be deduced, raises a ConversionError.
#Additionally, the deduced tag class's constructor may also raise exceptions during conversion.
def _TL_init_v2t( i ):
    i = iter( i )
    try:
        f = next( i )
    except StopIteration:
        return

    f = _toTag( f )
    c = f.__class__
    yield f

    #Convert values in i to the chosen tag class.
    yield from _TL_v2t( i, c )

#Generator that converts values in the given iterable, i, to a deduced tag class if necessary.
#This variant involves t, the tagType of elements stored in a TAG_List, in the type deduction process.
#The tag class is deduced by inspecting the first value of the iterable, f, in this order:
#   1. If f is a tag, f's class.
#   2. If the TAG_List is non-empty, the class of tags stored by the list (e.g. TAG_Int).
#   3. The tag class mapped to f's Python type.
def _TL_suggest_v2t( i, t ):
    i = iter( i )
    try:
        f = next( i )
    except StopIteration:
        return

    if hasattr( f, "tagType" ):
        c = f.__class__
        yield f
    elif t != TAG_END:
        c = _TAGCLASS[t]
        yield c( f )
    else:
        f = _toTag( f )
        c = f.__class__
        yield f

    yield from _TL_v2t( i, c )

#Generator that converts values in the given iterable, i, to the given tag class, c, if necessary.
def _TL_v2t( i, c ):
    for v in i:
        yield v if v.__class__ == c else c( v )

#Returns a method that creates tags of the given class and appends them to a TAG_List.
def _makeTagAppender( methodname, tagclass ):
    tt = tagclass.tagType
    def appender( self, *args, **kwargs ):
        l = len( self )
        if l != 0 and tt != self.listTagType:
            raise WrongTagError( self.listTagType, tt )

        #Wait until after we've successfully constructed a tag and added it to the list before we change the list tag type
        t = tagclass( *args, **kwargs )
        _list_append( self, t )
        if l == 0:
            self.listTagType = tt
        return t
    appender.__name__ = methodname
    appender.__doc__ = \
        """
        Appends a new {} to the end of this TAG_List, passing the given arguments to the tag's constructor.
        Returns the new tag.
        """.format( tagclass.__name__ )
    return appender

#Returns a method that creates tags of the given class and inserts them into a TAG_List.
def _makeTagInserter( methodname, tagclass ):
    tt = tagclass.tagType
    def inserter( self, *args, **kwargs ):
        l = len( args )
        if l < 1:
            raise TypeError( "{} takes at least 1 positional argument but {:d} were given".format( methodname, l ) )
        pos, *args = args

        l = len( self )
        if l != 0 and tt != self.listTagType:
            raise WrongTagError( self.listTagType, tt )

        t = tagclass( *args, **kwargs )
        _list_insert( self, pos, t )
        if l == 0:
            self.listTagType = tt
        return t
    inserter.__name__ = methodname
    inserter.__doc__ = \
        """
        {0:}(self, pos, *args, **kwargs) -> {1:}

        Inserts a new {1:} before the given index in this TAG_List, passing the given arguments to the tag's constructor.
        Returns the new tag.
        """.format( methodname, tagclass.__name__ )
    return inserter

#Returns a method that creates tags of the given class and adds or replaces a tag in a TAG_Compound with the given name.
def _makeTagSetter( methodname, tagclass ):
    def setter( self, *args, **kwargs ):
        #name is positional-only so a keyword argument called "name" can still reach the tag's constructor.
        l = len( args )
        if l < 1:
            raise TypeError( "{} takes at least 1 positional argument but {:d} were given".format( methodname, l ) )
        name, *args = args

        if not isinstance( name, str ):
            raise TypeError( "Attempted to set a non-str key on TAG_Compound." )
        t = tagclass( *args, **kwargs )
        _od_setitem( self, name, t )
        return t
    setter.__name__ = methodname
    setter.__doc__ = \
        """
        {0:}(self, name, *args, **kwargs) -> {1:}

        Creates a new {1:}, passing the given arguments to the tag's constructor.
        Sets self[name] to the new tag, then returns the new tag.
        """.format( methodname, tagclass.__name__ )
    return setter

#Returns a TAG_Compound method that functions similarly to setdefault(), but for a specific type of tag.
def _makeTagSetDefault( methodname, tagclass ):
    def setdefault( self, *args, **kwargs ):
        l = len( args )
        if l < 1:
            raise TypeError( "{} takes at least 1 positional argument but {:d} were given".format( methodname, l ) )
        name, *args = args
        t = self.get( name )
        if t is None:
            if not isinstance( name, str ):
                raise TypeError( "Attempted to set a non-str key on TAG_Compound." )
            t = tagclass( *args, **kwargs )
            _od_setitem( self, name, t )
        elif t.tagType != tagclass.tagType:
            raise WrongTagError( tagclass.tagType, t.tagType )
        return t
    setdefault.__name__ = methodname
    setdefault.__doc__ = \
        """
        {0:}(self, name, *args, **kwargs) -> {1:}

        If a tag with the given name exists, returns the existing tag. Raises a WrongTagError if the existing tag isn't a {1:}.
        Otherwise, creates a new {1:}, passing the given arguments to the tag's constructor,
        sets self[name] to the new tag, then returns the new tag.
        """.format( methodname, tagclass.__name__ )
    return setdefault

#Returns an NBT class that stores a primitive like byte, short, int, or long.
def _makeIntPrimitiveClass( classname, tt, vmin, vmax, r, w, **kwargs ):
    class _IntPrimitiveTag( _BaseIntTag ):
        def __init__( self, value=None ):
            #self is already an int here (int.__new__ ran first); value is only accepted so __init__ doesn't raise.
            if self < vmin or self > vmax:
                raise OutOfBoundsError( self, vmin, vmax )
        tagType = tt
        min = vmin
        max = vmax
        _w  = w
    def _r( i, d ):
        return _IntPrimitiveTag( r( i ) )
    _IntPrimitiveTag._r = _r
    for n,v in kwargs.items():
        setattr( _IntPrimitiveTag, n, v )

    _IntPrimitiveTag.__name__ = classname
    _IntPrimitiveTag.__qualname__ = classname
    _IntPrimitiveTag.__doc__ = \
        """
        Represents a {0:}.
        {0:} is an int subclass and generally works the same way and in the same places as an int would.
        Values outside of [{1:d}, {2:d}] raise an OutOfBoundsError.
        """.format( classname, vmin, vmax )
    return _IntPrimitiveTag

#Returns an NBT class that stores an array of signed integers (TAG_Byte_Array, TAG_Int_Array, TAG_Long_Array).
def _makeArrayClass( classname, tt, unit, **kwargs ):
    typecode = ARRAY_TYPES[ tt ]
    class _ArrayTag( array, _BaseTag ):
        tagType    = tt
        isSequence = True

        __slots__ = ()

        #array implements __new__ rather than __init__
        def __new__( cls, *args, **kwargs ):
            if typecode == SIGNED_BYTE_TYPE and len( args ) == 1 and not kwargs:
                b = _bv( args[0] )
                if b is not None:
                    a = _array_new( cls, typecode )
                    a.frombytes( b )
                    return a
            return _array_new( cls, typecode, *args, **kwargs )

        def __repr__( self ):
            if len( self ) > 0:
                return "{}({})".format( classname, self.tolist() )
            return "{}()".format( classname )

        def __reduce__( self ):
            return ( self.__class__, ( self.tolist(), ) )

        rget = _rget_leaf

        def _p( self, name, depth, maxdepth, maxlen, fn ):
            l = len( self )
            fn( "{}{}{}: [{:d} {}{}]".format( "    "*depth, classname, name, l, unit, "s" if l != 1 else "" ) )

        def _w( self, o ):
            l = len( self )
            if l > MAX_LENGTH:
                raise LengthOverflowError( tt, l )
            _wi( l, o )
            _wap( self, o )

    def _r( i, d ):
        return _rap( _ArrayTag(), i, _rah( i, tt ) )
    _ArrayTag._r = _r
    for n,v in kwargs.items():
        setattr( _ArrayTag, n, v )

    _ArrayTag.__name__ = classname
    _ArrayTag.__qualname__ = classname
    return _ArrayTag

#rget() implementation for TAG_String and the array tags.
#If more than 1 positional argument is provided to this function, default is returned.
#This is because these aforementioned tag types contain leaves (non-container values) and indexing a leaf is guaranteed to fail.
def _rget_leaf( self, *args, default=None ):
    l = len( args )
    if l == 0:
        raise TypeError( "rget() takes at least 1 argument but 0 were given." )
    elif l == 1:
        i = args[0]
        if not isinstance( i, int ) or i >= len(self) or i < 0:
            return default
        return self[i]
    else:
        return default

class _BaseTag:
    """Base class for all nbtree tag classes."""
    tagType     = -1

    #Simple means to check if a tag is a specific tagType
    isByte      = False
    isShort     = False
    isInt       = False
    isLong      = False
    isString    = False
    isFloat     = False
    isDouble    = False
    isByteArray = False
    isList      = False
    isCompound  = False
    isIntArray  = False
    isLongArray = False

    #Simple means to check properties of the tag
    isNumeric   = False #True for TAG_Byte, TAG_Short, TAG_Int, TAG_Long, TAG_Float, TAG_Double
    isIntegral  = False #True for TAG_Byte, TAG_Short, TAG_Int, TAG_Long,
    isReal      = False #True for TAG_Float, TAG_Double
    isSequence  = False #True for TAG_String, TAG_Byte_Array, TAG_List, TAG_Int_Array, TAG_Long_Array

    __slots__ = ()

    def print( self, maxdepth=INF, maxlen=INF, fn=print ):
        """
        Recursively pretty-print the tag and its children.
        maxdepth is the maximum recursive depth to pretty-print.
            0 prints only this tag,
            1 prints this tag and its children,
            2 prints this tag, its children, and their children, and so on.
            math.inf is the default and prints the entire tree.
        maxlen is the maximum number of tags per TAG_List / TAG_Compound to print.
            For example, 64 would print only the first 64 entries in a list, and print a single ... for the remaining entries.
            math.inf is the default and prints every tag in a list / compound.
        fn is the callable that will be used to print a line of text, and defaults to the built-in print function.

        Examples:
        >>> ex.print()
        TAG_Compound: 2 entries {
            TAG_String("str"): Example string
            TAG_List("floats"): 2 TAG_Floats [
                TAG_Float(0): 5.0999999046325684
                TAG_Float(1): -1.2000000476837158
            ]
        }

        >>> ex.print( 0 )
        TAG_Compound: 2 entries { ... }
        """
        return self._p( "", 0, maxdepth, maxlen, fn )
    def sprint( self, maxdepth=INF, maxlen=INF ):
        """
        Recursively pretty-print the tag and its children to a string and return it.
        See help( tag.print ) for a description of maxdepth and maxlen.
        """
        with StringIO() as out:
            self.print( maxdepth, maxlen, lambda x: out.write( x + "\n" ) )
            return out.getvalue()

    def rget( self, *args, default=None ):
        """
        Recursive get.

        Gets the tag inside of this tag whose name or index is the first argument.
        If there is no such tag, returns default (which is None by default).
        If there is such a tag and len( args ) > 1, recursively calls rget() on the found tag with the remaining arguments.
        Otherwise, returns the found tag.

        Example:
            #Raises an exception if "Data" is not in doc:
            spawn = doc["Data"]["SpawnX"]

            #Does the same thing, but returns None instead:
            spawn = doc.rget( "Data", "SpawnX" )
        """
        if len( args ) == 0:
            raise TypeError( "rget() takes at least 1 argument but 0 were given." )
        return default

    def _p( self, name, depth, maxdepth, maxlen, fn ):
        """
        Recursive step of print().
        name is a str inserted after the tag type indicating the name/index of that tag within its parent. For example:
            "" for no name
            "(5)" for a TAG_List entry with index 5
            "(\"example\")" for a TAG_Compound entry with name "example"
        depth is the current recursive depth.
        """
        raise NotImplementedError()
    def _w( self, o ):
        """Write this tag's payload to the given writable file-like object, o."""
        raise NotImplementedError()
    def _r( i, d ):
        """Read this tag's payload from the given Cursor, i. d is the nesting depth of the tag."""
        raise NotImplementedError()

class _BaseIntTag( int, _BaseTag ):
    """
    Base class for all primitive integer tags (TAG_Byte, TAG_Short, TAG_Int, TAG_Long).
    Defines two static members min and max that represent the bounds (inclusive) of the range of values that can be represented by that primitive.
    """
    isNumeric  = True
    isIntegral = True

    value = property( int, doc="Read-only property. Converts this tag to an int." )

    __slots__ = ()

    min =  1
    max = -1

    def __repr__( self ):
        return "{}({})".format( self.__class__.__name__, _int_repr( self ) )
    def _p( self, name, depth, maxdepth, maxlen, fn ):
        fn( "{}{}{}: {:d}".format( "    "*depth, self.__class__.__name__, name, self ) )

TAG_Byte  = _makeIntPrimitiveClass( "TAG_Byte",  TAG_BYTE,                  -128,                 127, _rb, _wb, isByte  = True )
TAG_Short = _makeIntPrimitiveClass( "TAG_Short", TAG_SHORT,               -32768,               32767, _rs, _ws, isShort = True )
TAG_Int   = _makeIntPrimitiveClass( "TAG_Int",   TAG_INT,            -2147483648,          2147483647, _ri, _wi, isInt   = True )
TAG_Long  = _makeIntPrimitiveClass( "TAG_Long",  TAG_LONG,  -9223372036854775808, 9223372036854775807, _rl, _wl, isLong  = True )

class TAG_Float( float, _BaseTag ):
    """
    Represents a TAG_Float.
    TAG_Float is a float subclass and generally works the same way and in the same places as a float would.

    Values are rounded to the nearest single-precision float when constructed, so a TAG_Float compares equal to itself after being written and read back.
    Finite values too large for single precision become +/- infinity.
    """
    tagType   = TAG_FLOAT
    isFloat   = True
    isNumeric = True
    isReal    = True

    value = property( float, doc="Read-only property. Converts this tag to a float." )

    __slots__ = ()

    def __new__( cls, value=0.0 ):
        return float.__new__( cls, _r32( value ) )

    def __repr__( self ):
        return "TAG_Float({})".format( _float_repr( self ) )
    def _p( self, name, depth, maxdepth, maxlen, fn ):
        fn( "{}TAG_Float{}: {:.17g}".format( "    "*depth, name, self ) )
    def _r( i, d ):
        return TAG_Float( _rf( i ) )
    _w = _wf

class TAG_Double( float, _BaseTag ):
    """
    Represents a TAG_Double.
    TAG_Double is a float subclass and generally works the same way and in the same places as a float would.
    """
    tagType   = TAG_DOUBLE
    isDouble  = True
    isNumeric = True
    isReal    = True

    value = property( float, doc="Read-only property. Converts this tag to a float." )

    __slots__ = ()

    def __repr__( self ):
        return "TAG_Double({})".format( _float_repr( self ) )
    def _p( self, name, depth, maxdepth, maxlen, fn ):
        fn( "{}TAG_Double{}: {:.17g}".format( "    "*depth, name, self ) )
    def _r( i, d ):
        return TAG_Double( _rd( i ) )
    _w = _wd

TAG_Byte_Array = _makeArrayClass( "TAG_Byte_Array", TAG_BYTE_ARRAY, "byte", isByteArray = True )
TAG_Byte_Array.__doc__ = \
    """
    Represents a TAG_Byte_Array.
    TAG_Byte_Array is an array of signed bytes and generally works the same way and in the same places as any other sequence would.

    It can be initialized with an iterable of ints in the range [-128, 127], or with a bytes-like object whose bytes are reinterpreted as signed:
        TAG_Byte_Array( ( -1, 0, 1 ) ) == TAG_Byte_Array( b"\\xff\\x00\\x01" )
    Use .tobytes() to get the raw bytes back.
    """

TAG_Int_Array = _makeArrayClass( "TAG_Int_Array", TAG_INT_ARRAY, "int", isIntArray = True )
TAG_Int_Array.__doc__ = \
    """
    Represents a TAG_Int_Array.
    TAG_Int_Array is a signed 4-byte int array subclass and generally works the same way and in the same places any other sequence (tuple, list, array etc) would.
    Its values are limited to the range [-2147483648, 2147483647].
    """

TAG_Long_Array = _makeArrayClass( "TAG_Long_Array", TAG_LONG_ARRAY, "long", isLongArray = True )
TAG_Long_Array.__doc__ = \
    """
    Represents a TAG_Long_Array.
    TAG_Long_Array is a signed 8-byte int array subclass and generally works the same way and in the same places any other sequence would.
    Its values are limited to the range [-9223372036854775808, 9223372036854775807].
    """

class TAG_String( str, _BaseTag ):
    """
    Represents a TAG_String.
    TAG_String is a str subclass and generally works the same way and in the same places as a str would.

    A TAG_String can be no longer than 65535 bytes when encoded as modified UTF-8; longer strings raise StringTooLongError.
    Modified UTF-8 encodes "\\0" in two bytes and characters outside the Basic Multilingual Plane in six, so the encoded length can exceed len(s).
    """
    tagType    = TAG_STRING
    isString   = True
    isSequence = True

    value = property( str, doc="Read-only property. Converts this tag to a str." )

    __slots__ = ()

    def __init__( self, *args, **kwargs ):
        #Only strings that might be too long are encoded; each character takes at most 6 bytes.
        if len( self ) > 10922:
            _es( self )

    #Note: TAG_String overrides methods that modify it in place to return TAG_String, but all other methods return str.
    def __iadd__( self, value ):
        return TAG_String( _str_add( self, value ) )

    def __imul__( self, value ):
        return TAG_String( _str_mul( self, value ) )

    def __repr__( self ):
        return "TAG_String({})".format( _str_repr( self ) )

    rget = _rget_leaf

    def _p( self, name, depth, maxdepth, maxlen, fn ):
        fn( "{}TAG_String{}: {:s}".format( "    "*depth, name, self ) )
    def _r( i, d ):
        return TAG_String( _rst( i ) )
    _w = _wst

class TAG_List( list, _BaseTag ):
    """
    Represents a TAG_List.
    TAG_List is a list subclass and generally works the same way and in the same places as a list would.

    All tags in a TAG_List share the same type, listTagType. An empty TAG_List always has a listTagType of TAG_END.
    """
    tagType    = TAG_LIST
    isList     = True
    isSequence = True

    __slots__ = "listTagType"

    def __init__( self, iterable=(), listTagType=None ):
        """
        TAG_List constructor.
        Initializes a new TAG_List, optionally with a given iterable.

        iterable is an optional parameter that determines the initial contents of the list. Defaults to an empty tuple.
            iterable's values can be tags (e.g. TAG_String( "Example" ) ) or non-tag values that can be converted to tags (e.g. "Example").
            All tags in a list must be of the same type. If necessary, iterable's values will be converted to the appropriate type of tag for the list.
        listTagType is an optional parameter specifying the class of tags stored by this list.
            If this is None (the default), the class is deduced by inspecting the first value of the iterable (if any).
            It's needed when making lists of int/float based tags:
                nbtree.TAG_List( range(10), nbtree.TAG_Int )
                nbtree.TAG_List( ( 100.21, 60, -500.852 ), nbtree.TAG_Double )
        """
        if listTagType is None:
            _list_init( self, _TL_init_v2t( iterable ) )
        else:
            _avtt( listTagType.tagType )
            _list_init( self, _TL_v2t( iterable, listTagType ) )

        if len( self ) > 0:
            self.listTagType = self[0].tagType
        else:
            self.listTagType = TAG_END

    byte      = _makeTagAppender( "byte",      TAG_Byte       )
    short     = _makeTagAppender( "short",     TAG_Short      )
    int       = _makeTagAppender( "int",       TAG_Int        )
    long      = _makeTagAppender( "long",      TAG_Long       )
    float     = _makeTagAppender( "float",     TAG_Float      )
    double    = _makeTagAppender( "double",    TAG_Double     )
    bytearray = _makeTagAppender( "bytearray", TAG_Byte_Array )
    string    = _makeTagAppender( "string",    TAG_String     )
    #list     = (outside of class)
    #compound = (outside of class)
    intarray  = _makeTagAppender( "intarray",  TAG_Int_Array  )
    longarray = _makeTagAppender( "longarray", TAG_Long_Array )

    insert_byte      = _makeTagInserter( "insert_byte",      TAG_Byte       )
    insert_short     = _makeTagInserter( "insert_short",     TAG_Short      )
    insert_int       = _makeTagInserter( "insert_int",       TAG_Int        )
    insert_long      = _makeTagInserter( "insert_long",      TAG_Long       )
    insert_float     = _makeTagInserter( "insert_float",     TAG_Float      )
    insert_double    = _makeTagInserter( "insert_double",    TAG_Double     )
    insert_bytearray = _makeTagInserter( "insert_bytearray", TAG_Byte_Array )
    insert_string    = _makeTagInserter( "insert_string",    TAG_String     )
    #insert_list     = (outside of class)
    #insert_compound = (outside of class)
    insert_intarray  = _makeTagInserter( "insert_intarray",  TAG_Int_Array  )
    insert_longarray = _makeTagInserter( "insert_longarray", TAG_Long_Array )

    def __iadd__( self, value ):
        if len( self ) > 0:
            _list_iadd( self, _TL_v2t( value, _TAGCLASS[ self.listTagType ] ) )
        else:
            _list_iadd( self, _TL_init_v2t( value ) )
            if len( self ) > 0:
                self.listTagType = self[0].tagType

        return self

    def __imul__( self, value ):
        _list_imul( self, value )
        if len( self ) == 0:
            self.listTagType = TAG_END
        return self

    def __setitem__( self, key, value ):
        """
        Handle self[key] = value.

        If key is an int, value should be a single value. For example:
            list[0] = nbtree.TAG_String( "Example" )
            list[1] = "Another Example"
        If key is a slice, value should be an iterable (list, tuple, generator, etc) of values. For example:
            list[:]   = ( TAG_Int(5), 6, 7, 8 )
            list[2:4] = ()

        Values are converted to a single tag class if they aren't already:
        If only part of the list is being replaced, to the type of tags currently stored by the list.
        If the entire list is being replaced, to the class of the first value if it is a tag,
        else to the type currently stored by the list, else to the class mapped to the first value's Python type.
        If all of these attempts fail, a ConversionError is raised.
        """
        ml = len( self )
        if isinstance( key, slice ):
            sl = len( range( *key.indices( ml ) ) )

            #Replace the entire list's contents. This may possibly change the list tagType.
            if ml == sl:
                _list_setitem( self, key, _TL_suggest_v2t( value, self.listTagType ) )
                self.listTagType = self[0].tagType if len( self ) > 0 else TAG_END
            #Replace some of the list's contents, values must be converted to existing tagType if different
            else:
                _list_setitem( self, key, _TL_v2t( value, _TAGCLASS[ self.listTagType ] ) )
        elif isinstance( key, int ):
            #Replacing our only tag may change the list tagType.
            if ml == 1:
                t = getattr( value, "tagType", None )
                if t is None:
                    value = _TAGCLASS[self.listTagType]( value )
                else:
                    self.listTagType = t
            elif ml > 0:
                ltt = self.listTagType
                if getattr( value, "tagType", None ) != ltt:
                    value = _TAGCLASS[ ltt ]( value )
            _list_setitem( self, key, value )
        #Invalid key, let list.__setitem__ throw a TypeError
        else:
            _list_setitem( self, key, None )

    def __delitem__( self, key ):
        _list_delitem( self, key )
        if len( self ) == 0:
            self.listTagType = TAG_END

    def __repr__( self ):
        if len( self ) > 0:
            return "TAG_List({})".format( _list_repr( self ) )
        else:
            return "TAG_List()"

    def append( self, value ):
        _list_append( self, self._a( value ) )

    def clear( self ):
        _list_clear( self )
        self.listTagType = TAG_END

    def copy( self ):
        l = _list_new( TAG_List )
        l.listTagType = self.listTagType
        _list_iadd( l, self )
        return l

    def extend( self, iterable ):
        self.__iadd__( iterable )

    def insert( self, index, value ):
        _list_insert( self, index, self._a( value ) )

    def pop( self, *args, **kwargs ):
        v = _list_pop( self, *args, **kwargs )
        if len( self ) == 0:
            self.listTagType = TAG_END
        return v

    def remove( self, value ):
        _list_remove( self, value )
        if len( self ) == 0:
            self.listTagType = TAG_END

    def rget( self, *args, default=None ):
        l = len( args )
        if l == 0:
            raise TypeError( "rget() takes at least 1 argument but 0 were given." )
        else:
            i = args[0]
            if not isinstance( i, int ) or i >= len( self ) or i < 0:
                return default

            if l == 1:
                return self[i]
            else:
                return self[i].rget( *args[1:], default=default )

    #Called by append() and insert().
    #Changes the list tagType and/or converts the value to a TAG_* of the appropriate type if necessary.
    #Returns the (possibly converted) value.
    def _a( self, value ):
        ltt = self.listTagType
        t = getattr( value, "tagType", None )
        #List is empty
        if len( self ) == 0:
            value = _toTag( value )
            self.listTagType = value.tagType
        #List is non-empty, value isn't a tag or is a tag of the wrong type
        elif t != ltt:
            value = _TAGCLASS[ltt]( value )
        return value

    def _p( self, name, depth, maxdepth, maxlen, fn ):
        l = len( self )
        indent = "    "*depth
        line = "{}TAG_List{}: {} [".format( indent, name, _tls( l, self.listTagType ) )

        if l == 0:
            fn( line + "]" )
        elif depth < maxdepth and maxlen != 0:
            fn( line )

            depth = depth + 1
            for i, t in enumerate( itertools.islice( self, maxlen ) if maxlen < l else self ):
                t._p( "({:d})".format( i ), depth, maxdepth, maxlen, fn )
            if maxlen < l:
                fn( indent + "    ..." )

            fn( indent + "]" )
        else:
            fn( line + " ... ]" )

    def _r( i, d ):
        _checkDepth( i, d )
        t, l = _rlh( i )

        tag = TAG_List()
        if l == 0:
            return tag

        #Every element takes at least one byte; refuse counts the remaining data can't possibly hold.
        i.require( l * ( TAG_LENGTHS[ t ] or 1 ) )

        tag.listTagType = t
        r = _TAGCLASS[ t ]._r
        a = _list_append
        d += 1
        for _ in range( l ):
            a( tag, r( i, d ) )

        return tag

    def _w( self, o ):
        _wlh( self.listTagType, len( self ), o )
        for t in self:
            t._w( o )


class TAG_Compound( OrderedDict, _BaseTag ):
    """
    Represents a TAG_Compound.
    TAG_Compound is an OrderedDict subclass and generally works the same way and in the same places any other mapping (dict, etc.) would, with one major exception:
    The keys and values of a TAG_Compound are restricted to str and TAG_* objects (e.g. TAG_Byte, TAG_Compound, etc) respectively.

    Entries keep the order they were inserted (or decoded) in, and are written back out in that order.

    A TAG_Compound can be initialized in the same ways a normal dict / OrderedDict can:
        * TAG_Compound( { k: v, ... } ):  From another mapping (e.g. dict, OrderedDict, etc).
        * TAG_Compound( [ (k,v), ... ] ): With an iterable of pairs
        * TAG_Compound( name=v, ... ):    With keyword arguments. Can be combined with either of the previous two choices.
    """
    tagType = TAG_COMPOUND
    isCompound = True

    __slots__ = ()

    def __setitem__( self, key, value ):
        """
        Handle self[key] = value.

        key must be a str. If it isn't, TypeError is raised.

        value can be a tag or a non-tag.
        If a non-tag is provided, it is converted to a tag according to the following rules:
            If a tag with the given name already exists, value is converted to the existing tag's type.
            If no such tag exists, value is converted to the tag class mapped to the value's Python type.
            If both of these attempts fail, a ConversionError is raised.

        Examples:
            comp["str"]  = nbtree.TAG_String( "Example!" )
            comp["byte"] = nbtree.TAG_Byte( 5 )

            comp["str"] = "Another example!"
            comp["byte"] = -5
        """
        if not isinstance( key, str ):
            raise TypeError( "Attempted to set a non-str key on TAG_Compound." )

        if not hasattr( value, "tagType" ):
            temp = self.get( key )
            if temp is None:
                value = _toTag( value )
            else:
                value = temp.__class__( value )

        _od_setitem( self, key, value )

    byte      = _makeTagSetter( "byte",      TAG_Byte       )
    short     = _makeTagSetter( "short",     TAG_Short      )
    int       = _makeTagSetter( "int",       TAG_Int        )
    long      = _makeTagSetter( "long",      TAG_Long       )
    float     = _makeTagSetter( "float",     TAG_Float      )
    double    = _makeTagSetter( "double",    TAG_Double     )
    bytearray = _makeTagSetter( "bytearray", TAG_Byte_Array )
    string    = _makeTagSetter( "string",    TAG_String     )
    list      = _makeTagSetter( "list",      TAG_List       )
    #compound = (outside of class)
    intarray  = _makeTagSetter( "intarray",  TAG_Int_Array  )
    longarray = _makeTagSetter( "longarray", TAG_Long_Array )

    setdefault_byte      = _makeTagSetDefault( "setdefault_byte",      TAG_Byte       )
    setdefault_short     = _makeTagSetDefault( "setdefault_short",     TAG_Short      )
    setdefault_int       = _makeTagSetDefault( "setdefault_int",       TAG_Int        )
    setdefault_long      = _makeTagSetDefault( "setdefault_long",      TAG_Long       )
    setdefault_float     = _makeTagSetDefault( "setdefault_float",     TAG_Float      )
    setdefault_double    = _makeTagSetDefault( "setdefault_double",    TAG_Double     )
    setdefault_bytearray = _makeTagSetDefault( "setdefault_bytearray", TAG_Byte_Array )
    setdefault_string    = _makeTagSetDefault( "setdefault_string",    TAG_String     )
    setdefault_list      = _makeTagSetDefault( "setdefault_list",      TAG_List       )
    #setdefault_compound = (outside of class)
    setdefault_intarray  = _makeTagSetDefault( "setdefault_intarray",  TAG_Int_Array  )
    setdefault_longarray = _makeTagSetDefault( "setdefault_longarray", TAG_Long_Array )

    def copy( self ):
        return TAG_Compound( self )

    def rget( self, *args, default=None ):
        l = len( args )
        if l == 0:
            raise TypeError( "rget() takes at least 1 argument but 0 were given." )
        elif l == 1:
            return self.get( args[0], default )
        else:
            tag = self.get( args[0] )
            if tag is None:
                return default
            return tag.rget( *args[1:], default=default )

    def _p( self, name, depth, maxdepth, maxlen, fn ):
        l = len( self )
        indent = "    "*depth
        line = "{}TAG_Compound{}: {:d} entr{} {{".format( indent, name, l, "ies" if l != 1 else "y" )
        if l == 0:
            fn( line + "}" )
        elif depth < maxdepth and maxlen != 0:
            fn( line )
            depth = depth + 1
            for n,t in ( itertools.islice( self.items(), maxlen ) if maxlen < l else self.items() ):
                t._p( "(\"{}\")".format( n ), depth, maxdepth, maxlen, fn )
            if maxlen < l:
                fn( indent + "    ..." )
            fn( indent + "}" )
        else:
            fn( line + " ... }" )

    def _r( i, d ):
        _checkDepth( i, d )
        tag = TAG_Compound()
        si = _od_setitem
        dup = i.allowDuplicates
        d += 1

        tt = _rtt( i )
        while tt != TAG_END:
            name = _rst( i )
            #Duplicate names keep their first position but take the last value.
            if not dup and name in tag:
                raise DuplicateNameError( name )

            si( tag, name, _TAGCLASS[tt]._r( i, d ) )
            tt = _rtt( i )

        return tag

    def _w( self, o ):
        for n,t in self.items():
            _wtn( t.tagType, n, o )
            t._w( o )
        o.write( b"\0" )

class NBTDocument( TAG_Compound ):
    """
    Represents an NBT document.

    An NBTDocument is a named TAG_Compound that serves as the root tag of the NBT tree.
    Although NBTDocuments can be named, more often than not the name is simply the empty string, "".
    A name of None marks a bare (unnamed) root, as used by network protocols; its header is written without a name.
    """
    __slots__ = ()

    def __init__( self, *args, **kwargs ):
        """
        NBTDocument()             -> new empty NBTDocument with name ""
        NBTDocument(name)         -> new empty NBTDocument with the given name
        NBTDocument(<init>)       -> new NBTDocument with name "", initialized with the given initializers
        NBTDocument(name, <init>) -> new NBTDocument with the given name, initialized with the given initializers

        name is expected to be a str or None.
        <init> is a single positional argument and/or several named arguments that determine the NBTDocument's initial contents.
        See help( nbtree.TAG_Compound ) for more information on valid initializers.
        """
        l = len( args )
        if l == 0:
            self.name = ""
            super().__init__( **kwargs )
        elif l == 2:
            self.name = args[0]
            super().__init__( args[1], **kwargs )
        elif l == 1:
            arg = args[0]
            if arg is None or isinstance( arg, str ):
                self.name = arg
                super().__init__( **kwargs )
            else:
                self.name = ""
                super().__init__( arg, **kwargs )
        else:
            raise TypeError( "__init__() takes at most 2 positional arguments but {:d} were given".format( l ) )

    def print( self, maxdepth=INF, maxlen=INF, fn=print ):
        self._p( _tns( self.name ), 0, maxdepth, maxlen, fn )

    def write( self, o ):
        """Writes this document, header included, to the given writable file-like object, o."""
        _wtn( TAG_COMPOUND, self.name, o )
        self._w( o )

    def encode( self ):
        """Returns this document encoded as bytes."""
        return encode( self )

    def copy( self ):
        """Returns a shallow copy of this document, name included."""
        return NBTDocument( self.name, self )

    def __eq__( self, other ):
        if isinstance( other, NBTDocument ) and self.name != other.name:
            return False
        return super().__eq__( other )

    #OrderedDict's __ne__ would ignore the name
    def __ne__( self, other ):
        r = self.__eq__( other )
        return r if r is NotImplemented else not r

    def __repr__( self ):
        parts = []
        other = super().__repr__()
        other = other[other.index( "(" ) + 1:-1]
        if self.name:
            parts.append( repr( self.name ) )
        if len( other ) > 0:
            parts.append( other )
        return "NBTDocument({})".format( ", ".join( parts ) )

#Note: Have to set create these methods here because the target classes don't exist until this point:
TAG_List.list                    = _makeTagAppender(   "list",                TAG_List     )
TAG_List.compound                = _makeTagAppender(   "compound",            TAG_Compound )
TAG_List.insert_list             = _makeTagInserter(   "insert_list",         TAG_List     )
TAG_List.insert_compound         = _makeTagInserter(   "insert_compound",     TAG_Compound )
TAG_Compound.compound            = _makeTagSetter(     "compound",            TAG_Compound )
TAG_Compound.setdefault_compound = _makeTagSetDefault( "setdefault_compound", TAG_Compound )

#Tuple of tag classes indexed by tagType.
#Do _TAGCLASS[tagType] to get the class for the tag with that tagType.
_TAGCLASS = (
    None,           #TAG_END
    TAG_Byte,       #TAG_BYTE
    TAG_Short,      #TAG_SHORT
    TAG_Int,        #TAG_INT
    TAG_Long,       #TAG_LONG
    TAG_Float,      #TAG_FLOAT
    TAG_Double,     #TAG_DOUBLE
    TAG_Byte_Array, #TAG_BYTE_ARRAY
    TAG_String,     #TAG_STRING
    TAG_List,       #TAG_LIST
    TAG_Compound,   #TAG_COMPOUND
    TAG_Int_Array,  #TAG_INT_ARRAY
    TAG_Long_Array  #TAG_LONG_ARRAY
)

#Mapping of python types -> tag classes.
#NBT doesn't have a boolean type. Instead, a TAG_Byte with a value of 0 for False and 1 for True is usually used instead.
#Tag type deduction is not possible for the int and float python types because it would be ambiguous.
#array is handled by _tagClassFor() since its tag class depends on the typecode.
_TAGMAP = {
    bool:        TAG_Byte,
    bytes:       TAG_Byte_Array,
    bytearray:   TAG_Byte_Array,
    memoryview:  TAG_Byte_Array,
    str:         TAG_String,
    list:        TAG_List,
    tuple:       TAG_List,
    dict:        TAG_Compound,
    OrderedDict: TAG_Compound
}

class NamedTag( namedtuple( "NamedTag", ( "name", "tag" ) ) ):
    """
    NamedTag( name, tag )

    A root tag paired with its name.
    name is None for a bare root, i.e. one whose header was read or should be written without a name.
    """
    __slots__ = ()

def readNamedTag( i, named=True ):
    """
    Reads a single root tag from i, a Cursor, and returns a NamedTag.
    The cursor is left positioned directly after the tag, so several roots can be read from one buffer in sequence.

    named determines whether the root's header carries a name. If named is False, the returned NamedTag's name is None.
    The root can be a tag of any type except TAG_End, which raises WrongTagError.
    """
    tagType = _rtt( i )
    if tagType == TAG_END:
        raise WrongTagError( TAG_COMPOUND, TAG_END )
    name = _rst( i ) if named else None
    return NamedTag( name, _TAGCLASS[ tagType ]._r( i, 1 ) )

#Implementation of the strict flag of decode() / read()
def _finish( i, strict ):
    r = i.remaining()
    if r > 0:
        if strict:
            raise TrailingBytesError( i.offset, r )
        log.debug( "Ignoring %d trailing byte(s) at offset %d", r, i.offset )

def decode( data, named=True, maxDepth=DEFAULT_MAX_DEPTH, strict=True, allowDuplicates=True ):
    """
    Decodes exactly one root tag from data (a bytes-like object of uncompressed NBT) and returns a NamedTag.

    named is an optional parameter that determines whether the root's header carries a name. Defaults to True.
        Pass False for bare tags (e.g. NBT sent over the network). The returned NamedTag's name is then None.
    maxDepth is the largest number of TAG_Lists / TAG_Compounds that may be nested inside each other, the root included.
        Deeper data raises NestingTooDeepError. Defaults to 512.
    strict is an optional parameter that determines whether data must be consumed entirely. Defaults to True.
        If True, bytes left over after the root raise TrailingBytesError. If False, they are ignored.
    allowDuplicates determines what happens when a TAG_Compound holds two tags with the same name.
        If True (the default), the last one wins. If False, DuplicateNameError is raised.

    Malformed data raises a subclass of NBTFormatError; see nbtree.shared for the full list.
    """
    i = Cursor( data, maxDepth, allowDuplicates )
    root = readNamedTag( i, named )
    _finish( i, strict )
    log.debug( "Decoded %s root (%d bytes)", TAG_NAMES[ root.tag.tagType ], i.offset )
    return root

def read( data, named=True, maxDepth=DEFAULT_MAX_DEPTH, strict=True, allowDuplicates=True ):
    """
    Decodes an NBT document from data (a bytes-like object of uncompressed NBT) and returns an NBTDocument.

    The root must be a TAG_Compound; other root types raise WrongTagError.
    See help( decode ) for a description of the other parameters.
    A bare document (named=False) gets a name of None, and is written back out without one.
    """
    i = Cursor( data, maxDepth, allowDuplicates )
    tagType = _rtt( i )
    if tagType != TAG_COMPOUND:
        raise WrongTagError( TAG_COMPOUND, tagType )
    name = _rst( i ) if named else None
    doc = TAG_Compound._r( i, 1 )
    _finish( i, strict )
    doc.__class__ = NBTDocument
    doc.name = name
    log.debug( "Decoded document \"%s\" (%d bytes)", name, i.offset )
    return doc

def write( tag, o, name=None, named=True ):
    """
    Writes a root tag, header included, to the given writable file-like object, o.

    tag can be any tag, an NBTDocument, a NamedTag, or a Python value that can be converted to a tag (e.g. a dict).
    name is the name to write in the root's header.
        If name is None (the default), the name of the NBTDocument or NamedTag is used, or "" for other tags.
        If the resulting name is None, the root is written bare.
    named is an optional parameter; if False, the root is written bare regardless of name.
    """
    if isinstance( tag, NamedTag ):
        tag, default = tag.tag, tag.name
    else:
        default = tag.name if isinstance( tag, NBTDocument ) else ""
    if name is None:
        name = default
    if not named:
        name = None

    tag = _toTag( tag )
    _wtn( tag.tagType, name, o )
    tag._w( o )

def encode( tag, name=None, named=True ):
    """
    Encodes a root tag and returns the encoded bytes.
    See help( write ) for a description of the parameters.

    Raises StringTooLongError if a name or string is too long, and LengthOverflowError if a list or array has too many entries.
    """
    with BytesIO() as o:
        write( tag, o, name, named )
        return o.getvalue()
