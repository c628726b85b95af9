from enum import Enum, Flag


class DBFVersion(Enum):
    DBASE5 = 0x30


class LanguageDriver(Enum):
    '''Code page mark stored in the header, only the one we write is listed.'''
    WINDOWS_ANSI = 0x03


class FieldType(Enum):
    CHARACTER = 'C'
    NUMERIC   = 'N'
    DATE      = 'D'
    LOGICAL   = 'L'
    TIMESTAMP = 'T'

    @property
    def fixed_size(self):
        '''Width of the types that don't depend on the declaration, None otherwise.'''
        return {
            FieldType.DATE: 8,
            FieldType.LOGICAL: 1,
            FieldType.TIMESTAMP: 8,
        }.get(self)


class FieldFlag(Flag):
    NONE      = 0
    NOCPTRANS = 0x04


class Marker(Enum):
    '''Single bytes with a special meaning in the file.'''
    ACTIVE     = b' '
    TERMINATOR = b'\x0d'
    EOF        = b'\x1a'
