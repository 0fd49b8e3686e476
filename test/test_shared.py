import math
import unittest

from io import BytesIO

import nbtree

from nbtree.shared import (
    TAG_NAMES, TAG_COUNT, Cursor, describeTag,
    readByte, readShort, readInt, readLong, readFloat, readDouble, readString, readTagType,
    readArrayHeader, readArrayPayload, readTagListHeader,
    writeByte, writeShort, writeInt, writeLong, writeFloat, writeDouble, writeString, writeTagName,
    writeArray, writeTagListHeader, writeTagList, decodeString, encodeString, s4array, s8array,
    convertToArray, roundFloat, assertIntInRange, checkDepth
)

def _written( fn, *args ):
    with BytesIO() as o:
        fn( *( args + ( o, ) ) )
        return o.getvalue()

def _skip( data, n ):
    i = Cursor( data )
    i.read( n )
    return i

class TestTagKind( unittest.TestCase ):
    def test_fromId( self ):
        seen = set()
        for b in range( 13 ):
            kind = nbtree.fromId( b )
            self.assertIs( kind, nbtree.TagKind( b ) )
            self.assertEqual( kind.id, b )
            seen.add( kind )
        self.assertEqual( len( seen ), 13 )
        self.assertEqual( TAG_COUNT, 13 )

    def test_fromId_unknown( self ):
        for b in ( 13, 99, 255, -1 ):
            with self.assertRaises( nbtree.UnknownTagTypeError ) as cm:
                nbtree.fromId( b )
            self.assertEqual( cm.exception.args[0], b )

        with self.assertRaises( nbtree.UnknownTagTypeError ) as cm:
            nbtree.fromId( 13, 7 )
        self.assertEqual( cm.exception.args, ( 13, 7 ) )
        self.assertIn( "offset 7", str( cm.exception ) )

    def test_length( self ):
        expected = ( 0, 1, 2, 4, 8, 4, 8, 4, 2, 5, 0, 4, 4 )
        for b, l in enumerate( expected ):
            self.assertEqual( nbtree.fromId( b ).length, l )
            self.assertEqual( nbtree.tagLength( b ), l )

    def test_isPrefixed( self ):
        prefixed = { nbtree.TAG_BYTE_ARRAY, nbtree.TAG_STRING, nbtree.TAG_LIST, nbtree.TAG_COMPOUND, nbtree.TAG_INT_ARRAY, nbtree.TAG_LONG_ARRAY }
        for kind in nbtree.TagKind:
            self.assertEqual( kind.isPrefixed, kind in prefixed )
            self.assertEqual( nbtree.isPrefixed( kind.id ), kind in prefixed )

    def test_constants( self ):
        self.assertEqual( nbtree.TAG_END, 0 )
        self.assertEqual( nbtree.TAG_COMPOUND, 10 )
        self.assertEqual( nbtree.TAG_LONG_ARRAY, 12 )
        self.assertEqual( TAG_NAMES[ nbtree.TAG_INT_ARRAY ], "TAG_Int_Array" )

    def test_describeTag( self ):
        self.assertEqual( describeTag( nbtree.TAG_INT ), "TAG_Int (3)" )
        self.assertEqual( describeTag( nbtree.TAG_END ), "TAG_End (0)" )
        self.assertEqual( describeTag( 13 ), "Unknown (13)" )

class TestCursor( unittest.TestCase ):
    def test_read( self ):
        i = Cursor( bytearray( b"\x01\x02\x03" ) )
        self.assertEqual( i.read( 2 ), b"\x01\x02" )
        self.assertEqual( i.offset, 2 )
        self.assertEqual( i.remaining(), 1 )

        with self.assertRaises( nbtree.UnexpectedEOFError ) as cm:
            i.read( 2 )
        self.assertEqual( cm.exception.args, ( 2, 2, 1 ) )
        self.assertIsInstance( cm.exception, EOFError )
        self.assertEqual( i.offset, 2 )

    def test_require( self ):
        i = Cursor( b"\x00" * 4 )
        i.require( 4 )
        self.assertEqual( i.offset, 0 )
        with self.assertRaises( nbtree.UnexpectedEOFError ):
            i.require( 5 )

    def test_checkDepth( self ):
        i = Cursor( b"\x00" * 4, maxDepth=2 )
        checkDepth( i, 2 )
        i.read( 3 )
        with self.assertRaises( nbtree.NestingTooDeepError ) as cm:
            checkDepth( i, 3 )
        self.assertEqual( cm.exception.args, ( 2, 3 ) )

    def test_copy( self ):
        data = bytearray( b"\x05" )
        i = Cursor( data )
        data[0] = 6
        self.assertEqual( readByte( i ), 5 )

class TestPrimitives( unittest.TestCase ):
    def test_integers( self ):
        self.assertEqual( _written( writeByte, -1 ), b"\xff" )
        self.assertEqual( _written( writeShort, -2 ), b"\xff\xfe" )
        self.assertEqual( _written( writeInt, 20 ), b"\x00\x00\x00\x14" )
        self.assertEqual( _written( writeLong, -9223372036854775808 ), b"\x80" + b"\x00" * 7 )

        self.assertEqual( readByte( Cursor( b"\x80" ) ), -128 )
        self.assertEqual( readShort( Cursor( b"\x7f\xff" ) ), 32767 )
        self.assertEqual( readInt( Cursor( b"\xff\xff\xff\xff" ) ), -1 )
        self.assertEqual( readLong( Cursor( b"\x00" * 7 + b"\x01" ) ), 1 )

    def test_reals( self ):
        self.assertEqual( _written( writeFloat, 1.0 ), b"\x3f\x80\x00\x00" )
        self.assertEqual( _written( writeDouble, -2.0 ), b"\xc0\x00\x00\x00\x00\x00\x00\x00" )
        self.assertEqual( readFloat( Cursor( b"\x3f\x80\x00\x00" ) ), 1.0 )
        self.assertEqual( readDouble( Cursor( b"\xc0" + b"\x00" * 7 ) ), -2.0 )

    def test_roundFloat( self ):
        self.assertEqual( roundFloat( 1 ), 1.0 )
        self.assertNotEqual( roundFloat( 0.1 ), 0.1 )
        self.assertEqual( roundFloat( 0.1 ), readFloat( Cursor( _written( writeFloat, 0.1 ) ) ) )
        self.assertEqual( roundFloat( 1e39 ), math.inf )
        self.assertEqual( roundFloat( -1e39 ), -math.inf )
        self.assertEqual( _written( writeFloat, 1e39 ), b"\x7f\x80\x00\x00" )

    def test_assertIntInRange( self ):
        assertIntInRange( nbtree.TAG_BYTE, -128 )
        assertIntInRange( nbtree.TAG_LONG, 9223372036854775807 )
        with self.assertRaises( nbtree.OutOfBoundsError ) as cm:
            assertIntInRange( nbtree.TAG_SHORT, 32768 )
        self.assertEqual( cm.exception.args, ( 32768, -32768, 32767 ) )
        with self.assertRaises( nbtree.OutOfBoundsError ):
            assertIntInRange( nbtree.TAG_INT, -2147483649 )

    def test_readTagType( self ):
        self.assertIs( readTagType( Cursor( b"\x0a" ) ), nbtree.TAG_COMPOUND )
        with self.assertRaises( nbtree.UnknownTagTypeError ) as cm:
            readTagType( _skip( b"\x00\x0d", 1 ) )
        self.assertEqual( cm.exception.args, ( 13, 1 ) )

    def test_tagName( self ):
        self.assertEqual( _written( writeTagName, nbtree.TAG_INT, "ab" ), b"\x03\x00\x02ab" )
        self.assertEqual( _written( writeTagName, nbtree.TAG_INT, "" ), b"\x03\x00\x00" )
        self.assertEqual( _written( writeTagName, nbtree.TAG_INT, None ), b"\x03" )

class TestModifiedUTF8( unittest.TestCase ):
    def test_encode( self ):
        self.assertEqual( encodeString( "root" ), b"root" )
        self.assertEqual( encodeString( "\x00" ), b"\xc0\x80" )
        self.assertEqual( encodeString( "é" ), b"\xc3\xa9" )
        self.assertEqual( encodeString( "€" ), b"\xe2\x82\xac" )
        #Supplementary characters are written as a surrogate pair, 3 bytes each.
        self.assertEqual( encodeString( "\U0001F600" ), b"\xed\xa0\xbd\xed\xb8\x80" )

    def test_decode( self ):
        self.assertEqual( decodeString( b"\xc0\x80" ), "\x00" )
        self.assertEqual( decodeString( b"\xc3\xa9" ), "é" )
        self.assertEqual( decodeString( b"\xed\xa0\xbd\xed\xb8\x80" ), "\U0001F600" )

    def test_string( self ):
        self.assertEqual( _written( writeString, "a\x00" ), b"\x00\x03a\xc0\x80" )
        self.assertEqual( readString( Cursor( b"\x00\x03a\xc0\x80" ) ), "a\x00" )
        self.assertEqual( readString( Cursor( b"\x00\x00" ) ), "" )

    def test_invalid( self ):
        #A raw NUL byte is not allowed in modified UTF-8.
        with self.assertRaises( nbtree.InvalidStringError ) as cm:
            readString( Cursor( b"\x00\x01\x00" ) )
        self.assertEqual( cm.exception.args[0], 0 )

        #Truncated 2-byte sequence.
        with self.assertRaises( nbtree.InvalidStringError ):
            readString( Cursor( b"\x00\x01\xc3" ) )
        with self.assertRaises( nbtree.InvalidStringError ):
            decodeString( b"\xc3" )

    def test_truncated( self ):
        with self.assertRaises( nbtree.UnexpectedEOFError ):
            readString( Cursor( b"\x00\x05abc" ) )

    def test_too_long( self ):
        self.assertEqual( len( encodeString( "a" * 65535 ) ), 65535 )
        with self.assertRaises( nbtree.StringTooLongError ) as cm:
            encodeString( "a" * 65536 )
        self.assertEqual( cm.exception.args[0], 65536 )
        #Each NUL takes two bytes.
        with self.assertRaises( nbtree.StringTooLongError ):
            _written( writeString, "\x00" * 40000 )

class TestArrays( unittest.TestCase ):
    def test_header( self ):
        self.assertEqual( readArrayHeader( Cursor( b"\x00\x00\x00\x03" ), nbtree.TAG_INT_ARRAY ), 3 )
        with self.assertRaises( nbtree.NegativeLengthError ) as cm:
            readArrayHeader( Cursor( b"\xff\xff\xff\xff" ), nbtree.TAG_BYTE_ARRAY )
        self.assertEqual( cm.exception.args, ( nbtree.TAG_BYTE_ARRAY, -1, 0 ) )

    def test_payload( self ):
        a = readArrayPayload( s4array(), Cursor( b"\x00\x00\x00\x01\xff\xff\xff\xfe" ), 2 )
        self.assertEqual( a.tolist(), [ 1, -2 ] )
        a = readArrayPayload( s8array(), Cursor( b"\xff" * 8 ), 1 )
        self.assertEqual( a.tolist(), [ -1 ] )
        self.assertEqual( readArrayPayload( s4array(), Cursor( b"" ), 0 ).tolist(), [] )

    def test_write( self ):
        self.assertEqual( _written( writeArray, nbtree.TAG_BYTE_ARRAY, b"\xff\x01" ), b"\x00\x00\x00\x02\xff\x01" )
        self.assertEqual( _written( writeArray, nbtree.TAG_BYTE_ARRAY, ( -1, 1 ) ), b"\x00\x00\x00\x02\xff\x01" )
        self.assertEqual(
            _written( writeArray, nbtree.TAG_INT_ARRAY, ( 1, -1 ) ),
            b"\x00\x00\x00\x02\x00\x00\x00\x01\xff\xff\xff\xff"
        )
        self.assertEqual(
            _written( writeArray, nbtree.TAG_LONG_ARRAY, ( 1, ) ),
            b"\x00\x00\x00\x01\x00\x00\x00\x00\x00\x00\x00\x01"
        )

    def test_write_leaves_array_alone( self ):
        a = s4array( ( 1, 2 ) )
        _written( writeArray, nbtree.TAG_INT_ARRAY, a )
        self.assertEqual( a.tolist(), [ 1, 2 ] )

    def test_convertToArray( self ):
        a = s4array( ( 1, ) )
        self.assertIs( convertToArray( a.typecode, a ), a )
        self.assertEqual( convertToArray( "b", memoryview( b"\x80\x7f" ) ).tolist(), [ -128, 127 ] )
        self.assertEqual( convertToArray( "b", b"\xff" ).tolist(), [ -1 ] )
        self.assertEqual( convertToArray( "b", ( -1, 2 ) ).tolist(), [ -1, 2 ] )
        self.assertEqual( _written( writeArray, nbtree.TAG_BYTE_ARRAY, memoryview( b"\xff" ) ), b"\x00\x00\x00\x01\xff" )

class TestListHeader( unittest.TestCase ):
    def test_read( self ):
        self.assertEqual( readTagListHeader( Cursor( b"\x03\x00\x00\x00\x02" ) ), ( nbtree.TAG_INT, 2 ) )

    def test_empty( self ):
        self.assertEqual( readTagListHeader( Cursor( b"\x00\x00\x00\x00\x00" ) ), ( nbtree.TAG_END, 0 ) )
        #Any element type (even an unknown one) is accepted when the list is empty.
        self.assertEqual( readTagListHeader( Cursor( b"\x63\xff\xff\xff\xfb" ) ), ( nbtree.TAG_END, 0 ) )
        self.assertEqual( readTagListHeader( Cursor( b"\x01\x00\x00\x00\x00" ) ), ( nbtree.TAG_END, 0 ) )

    def test_invalid( self ):
        with self.assertRaises( nbtree.NBTFormatError ):
            readTagListHeader( Cursor( b"\x00\x00\x00\x00\x01" ) )
        with self.assertRaises( nbtree.UnknownTagTypeError ) as cm:
            readTagListHeader( Cursor( b"\x0d\x00\x00\x00\x01" ) )
        self.assertEqual( cm.exception.args[0], 13 )

    def test_write( self ):
        self.assertEqual( _written( writeTagListHeader, nbtree.TAG_INT, 2 ), b"\x03\x00\x00\x00\x02" )
        self.assertEqual( _written( writeTagListHeader, nbtree.TAG_INT, 0 ), b"\x00\x00\x00\x00\x00" )
        with self.assertRaises( nbtree.LengthOverflowError ) as cm:
            _written( writeTagListHeader, nbtree.TAG_BYTE, 2147483648 )
        self.assertEqual( cm.exception.args, ( nbtree.TAG_LIST, 2147483648 ) )

    def test_writeTagList( self ):
        self.assertEqual( _written( writeTagList, nbtree.TAG_SHORT, ( 1, -1 ) ), b"\x02\x00\x00\x00\x02\x00\x01\xff\xff" )
        self.assertEqual( _written( writeTagList, nbtree.TAG_STRING, () ), b"\x00\x00\x00\x00\x00" )
        with self.assertRaises( nbtree.NBTFormatError ):
            _written( writeTagList, nbtree.TAG_COMPOUND, ( {}, ) )

if __name__ == "__main__":
    unittest.main()
