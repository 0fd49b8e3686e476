from nbtree.parse import _StopParsingNBT

class NBTHandler:
    """
    Base NBT Event Handler.
    As NBT data is parsed by nbtree.parse(), methods of the given handler are called.
    This class provides do-nothing implementations of every method; subclasses override the ones they care about.
    """
    def name( self, tagType, name ):
        """
        Called when a named tag header is read.
        tagType is the TagKind of the tag directly following this header.
        name is the name assigned to the tag, or None for the root of bare data.
        """
        pass
    def start( self ):
        """
        Called once, before anything else is parsed.
        The root's name is reported by the name() call that directly follows.
        """
        pass
    def end( self ):
        """
        Called after we have finished parsing the root TAG_Compound.
        This should be the last method to be called on a handler if the entire document was successfully parsed.
        """
        pass
    def byte( self, value ):
        """
        Called when a TAG_Byte is parsed.

        value will be an int in the range [-128, 127].
        """
        pass
    def short( self, value ):
        """
        Called when a TAG_Short is parsed.

        value will be an int in the range [-32768, 32767].
        """
        pass
    def int( self, value ):
        """
        Called when a TAG_Int is parsed.

        value will be an int in the range [-2147483648, 2147483647].
        """
        pass
    def long( self, value ):
        """
        Called when a TAG_Long is parsed.

        value will be an int in the range [-9223372036854775808, 9223372036854775807]
        """
        pass
    def float( self, value ):
        """Called when a TAG_Float is parsed."""
        pass
    def double( self, value ):
        """Called when a TAG_Double is parsed."""
        pass
    def startByteArray( self, length ):
        """
        Called when the start of a TAG_Byte_Array is parsed.

        length is the number of bytes in the array, in the range [0, 2147483647].
        """
        pass
    def bytes( self, values ):
        """
        Called with each chunk (at most 4096 bytes) of the current TAG_Byte_Array.

        values will be a bytes object holding the raw bytes. NBT bytes are signed;
        use array( "b", values ) or nbtree.TAG_Byte_Array( values ) to read them as such.
        """
        pass
    def endByteArray( self ):
        """Called when the end of a TAG_Byte_Array is parsed."""
        pass
    def string( self, value ):
        """
        Called when a TAG_String is parsed.

        value will be a str, decoded from modified UTF-8.
        """
        pass
    def startList( self, tagType, length ):
        """
        Called when the start of a TAG_List is parsed.

        tagType is the TagKind (e.g. nbtree.TAG_FLOAT) of tags stored in this TAG_List.
        length indicates how many tags are stored by this list. It will be an int in the range [0, 2147483647].
        Empty lists are always reported with a tagType of nbtree.TAG_END.
        """
        pass
    def endList( self ):
        """Called when the end of a TAG_List is parsed."""
        pass
    def startCompound( self ):
        """Called when the start of a TAG_Compound is parsed."""
        pass
    def endCompound( self ):
        """Called when the end of a TAG_Compound is parsed."""
        pass
    def startIntArray( self, length ):
        """
        Called when the start of a TAG_Int_Array is parsed.

        length indicates how many integers are stored in the current TAG_Int_Array. It will be an int in the range [0, 2147483647].
        """
        pass
    def ints( self, values ):
        """
        Called with each chunk (at most 1024 integers) of the current TAG_Int_Array.

        values will be an array of signed 4-byte integers.
        """
        pass
    def endIntArray( self ):
        """Called when the end of a TAG_Int_Array is parsed."""
        pass
    def startLongArray( self, length ):
        """
        Called when the start of a TAG_Long_Array is parsed.

        length indicates how many integers are stored in the current TAG_Long_Array. It will be an int in the range [0, 2147483647].
        """
        pass
    def longs( self, values ):
        """
        Called with each chunk (at most 512 integers) of the current TAG_Long_Array.

        values will be an array of signed 8-byte integers.
        """
        pass
    def endLongArray( self ):
        """Called when the end of a TAG_Long_Array is parsed."""
        pass

    def stop( self ):
        """Call this method if you want to stop parsing prematurely."""
        raise _StopParsingNBT()
