import math
import unittest

from io import BytesIO

import nbtree

def example():
    doc = nbtree.NBTDocument( "Example!" )
    doc.byte( "byte", -3 )
    doc.short( "short", -500 )
    doc.int( "int", -1234567 )
    doc.long( "long", -12345678910111213 )
    doc.float( "float", 52.358924865722656 )
    doc.double( "double", 123.456789101112 )
    doc.string( "string", "This is a string! \x00\U0001F600" )
    c = doc.compound( "compound" )
    c.string( "name", "Jeff" )
    c.int( "id", 5 )
    doc.list( "list", ( "Hey!", "Check", "out", "these", "strings!" ) )
    doc.list( "list2", ( 10.2, 15.6, 17.1, -1.12 ), nbtree.TAG_Float )
    doc.list( "empty" )
    l = doc.list( "compounds" )
    l.compound().byte( "a", 1 )
    l.compound()
    doc.list( "lists" ).list( ( 1, 2 ), nbtree.TAG_Long )
    doc.bytearray( "bytearray", b"\x00\x01\x02\x03" )
    doc.bytearray( "bytearray2", b"\x04\x05\x06\x07" )
    doc.intarray( "intarray", ( 5, 6, 7, 8 ) )
    doc.intarray( "intarray2", ( 9, 10, 11, 12 ) )
    doc.longarray( "longarray", ( -1, 2 ) )
    doc.longarray( "longarray2", ( 3, -4 ) )
    return doc

def writeExample( w ):
    w.start( "Example!" )
    w.byte( "byte", -3 )
    w.short( "short", -500 )
    w.int( "int", -1234567 )
    w.long( "long", -12345678910111213 )
    w.float( "float", 52.358924865722656 )
    w.double( "double", 123.456789101112 )
    w.string( "string", "This is a string! \x00\U0001F600" )
    w.startCompound( "compound" )
    w.string( "name", "Jeff" )
    w.int( "id", 5 )
    w.endCompound()
    w.list( "list", nbtree.TAG_STRING, ( "Hey!", "Check", "out", "these", "strings!" ) )
    w.startList( "list2", nbtree.TAG_FLOAT, 4 )
    w.float( 10.2 )
    w.float( 15.6 )
    w.float( 17.1 )
    w.float( -1.12 )
    w.endList()
    w.startList( "empty", nbtree.TAG_INT, 0 )
    w.endList()
    w.startList( "compounds", nbtree.TAG_COMPOUND, 2 )
    w.startCompound()
    w.byte( "a", 1 )
    w.endCompound()
    w.startCompound()
    w.endCompound()
    w.endList()
    w.startList( "lists", nbtree.TAG_LIST, 1 )
    w.list( nbtree.TAG_LONG, ( 1, 2 ) )
    w.endList()
    w.bytearray( "bytearray", b"\x00\x01\x02\x03" )
    w.startByteArray( "bytearray2", 4 )
    w.bytes( b"\x04\x05" )
    w.bytes( b"\x06\x07" )
    w.endByteArray()
    w.intarray( "intarray", ( 5, 6, 7, 8 ) )
    w.startIntArray( "intarray2", 4 )
    w.ints( (  9, 10 ) )
    w.ints( ( 11, 12 ) )
    w.endIntArray()
    w.longarray( "longarray", ( -1, 2 ) )
    w.startLongArray( "longarray2", 2 )
    w.longs( ( 3, ) )
    w.longs( ( -4, ) )
    w.endLongArray()
    w.end()

class TestNBTWriter( unittest.TestCase ):
    def setUp( self ):
        self.o = BytesIO()
        self.w = nbtree.NBTWriter( self.o )

    def test_NBTWriter( self ):
        writeExample( self.w )
        self.assertEqual( self.o.getvalue(), example().encode() )

    def test_bare( self ):
        w = self.w
        w.start( None )
        w.short( "health", 20 )
        w.end()
        self.assertEqual( self.o.getvalue(), b"\x0a\x02\x00\x06health\x00\x14\x00" )

    def test_health( self ):
        w = self.w
        w.start( "root" )
        w.short( "health", 20 )
        w.end()
        self.assertEqual( nbtree.read( self.o.getvalue() ), { "health": 20 } )
        self.assertEqual( self.o.getvalue()[:7], b"\x0a\x00\x04root" )

    def test_empty_lists( self ):
        w = self.w
        w.start()
        w.list( "a", nbtree.TAG_STRING, () )
        w.startList( "b", nbtree.TAG_COMPOUND, 0 )
        w.endList()
        w.end()
        empty = b"\x00\x00\x00\x00\x00"
        self.assertEqual( self.o.getvalue(), b"\x0a\x00\x00" + b"\x09\x00\x01a" + empty + b"\x09\x00\x01b" + empty + b"\x00" )

    def test_context_manager( self ):
        o = BytesIO()
        with nbtree.NBTWriter( o ) as w:
            w.start()
            w.end()
            self.assertEqual( o.getvalue(), b"\x0a\x00\x00\x00" )
        self.assertTrue( o.closed )

    def test_wrong_context( self ):
        w = self.w
        with self.assertRaises( nbtree.NBTFormatError ):
            w.byte( "a", 1 )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.end()

        w.start()
        with self.assertRaises( nbtree.NBTFormatError ):
            w.start()
        with self.assertRaises( nbtree.NBTFormatError ):
            w.endCompound()
        with self.assertRaises( nbtree.NBTFormatError ):
            w.ints( ( 1, ) )

        w.startList( "l", nbtree.TAG_INT, 1 )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.endCompound()
        w.int( 1 )
        w.endList()
        w.end()

        #The root can only be written once.
        with self.assertRaises( nbtree.NBTFormatError ):
            w.start()

    def test_duplicate_name( self ):
        w = self.w
        w.start()
        w.byte( "a", 1 )
        with self.assertRaises( nbtree.DuplicateNameError ) as cm:
            w.short( "a", 1 )
        self.assertEqual( cm.exception.args, ( "a", ) )

        #Names only have to be unique within their own TAG_Compound.
        w.startCompound( "c" )
        w.byte( "a", 1 )
        w.endCompound()

    def test_list_counts( self ):
        w = self.w
        w.start()
        w.startList( "l", nbtree.TAG_SHORT, 2 )
        with self.assertRaises( nbtree.WrongTagError ) as cm:
            w.int( 1 )
        self.assertEqual( cm.exception.args, ( nbtree.TAG_SHORT, nbtree.TAG_INT ) )

        w.short( 1 )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.endList()
        w.short( 2 )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.short( 3 )
        w.endList()

    def test_array_counts( self ):
        w = self.w
        w.start()
        w.startIntArray( "i", 2 )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.ints( ( 1, 2, 3 ) )
        w.ints( ( 1, ) )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.endIntArray()
        w.ints( ( 2, ) )
        w.endIntArray()

        w.startByteArray( "b", 1 )
        with self.assertRaises( nbtree.NBTFormatError ):
            w.endLongArray()
        w.bytes( b"\x01" )
        w.endByteArray()
        w.end()

        doc = nbtree.read( self.o.getvalue() )
        self.assertEqual( doc["i"].tolist(), [ 1, 2 ] )
        self.assertEqual( doc["b"].tolist(), [ 1 ] )

    def test_lengths( self ):
        w = self.w
        w.start()
        with self.assertRaises( nbtree.OutOfBoundsError ):
            w.startByteArray( "b", -1 )
        with self.assertRaises( nbtree.LengthOverflowError ):
            w.startList( "l", nbtree.TAG_BYTE, 2147483648 )
        with self.assertRaises( nbtree.UnknownTagTypeError ):
            w.startList( "l", 13, 1 )

    def test_bounds( self ):
        w = self.w
        w.start()
        with self.assertRaises( nbtree.StringTooLongError ):
            w.string( "s", "a" * 65536 )

    def test_integer_ranges( self ):
        w = self.w
        w.start()
        start = len( self.o.getvalue() )
        with self.assertRaises( nbtree.OutOfBoundsError ) as cm:
            w.byte( "b", 300 )
        self.assertEqual( cm.exception.args, ( 300, -128, 127 ) )
        with self.assertRaises( nbtree.OutOfBoundsError ):
            w.long( "l", 9223372036854775808 )
        with self.assertRaises( nbtree.OutOfBoundsError ):
            w.list( "i", nbtree.TAG_INT, ( 1, 2147483648 ) )
        self.assertEqual( len( self.o.getvalue() ), start )

        #Nothing was written, so the names are still free.
        w.byte( "b", 1 )
        w.long( "l", -1 )
        w.list( "i", nbtree.TAG_INT, ( 1, 2 ) )

        w.startList( "s", nbtree.TAG_SHORT, 1 )
        with self.assertRaises( nbtree.OutOfBoundsError ):
            w.short( 40000 )
        w.short( -40 )
        w.endList()
        w.end()

        doc = nbtree.read( self.o.getvalue() )
        self.assertEqual( doc, { "b": 1, "l": -1, "i": [ 1, 2 ], "s": [ -40 ] } )

    def test_float_rounding( self ):
        w = self.w
        w.start()
        w.float( "f", 1e39 )
        w.float( "g", 0.1 )
        w.startList( "l", nbtree.TAG_FLOAT, 1 )
        w.float( -1e39 )
        w.endList()
        w.end()

        doc = nbtree.NBTDocument()
        doc.float( "f", 1e39 )
        doc.float( "g", 0.1 )
        doc.list( "l", ( -1e39, ), nbtree.TAG_Float )
        self.assertEqual( self.o.getvalue(), doc.encode() )
        self.assertEqual( nbtree.read( self.o.getvalue() )["f"], math.inf )

    def test_memoryview( self ):
        w = self.w
        w.start()
        w.bytearray( "a", memoryview( b"\x80\xff" ) )
        w.startByteArray( "b", 1 )
        w.bytes( memoryview( b"\xfe" ) )
        w.endByteArray()
        w.end()

        doc = nbtree.read( self.o.getvalue() )
        self.assertEqual( doc["a"].tolist(), [ -128, -1 ] )
        self.assertEqual( doc["b"].tolist(), [ -2 ] )

if __name__ == "__main__":
    unittest.main()
