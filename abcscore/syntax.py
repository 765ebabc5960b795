# coding:utf-8
"""
This module defines the syntax-tree node classes produced by
:func:`abcscore.parser.parse`.

Every node has an integer `id` unique within one parse, and a source range
given by `start` and `end`, each of which is a (line, char) tuple with
0-based values (`end` is exclusive).
"""
"""
このモジュールには、:func:`abcscore.parser.parse` が生成する構文木の
ノードクラスが定義されています。

すべてのノードは1回の構文解析の中で一意な整数 `id` と、`start` および
`end` で与えられるソース範囲を持ちます。それぞれは 0 から始まる
(行, 文字) のタプルです (`end` は範囲に含まれません)。
"""
# Copyright (C) 2025  Satoshi Nishimura

from typing import List, Optional, Tuple

__all__ = ['Node', 'FileStructure', 'FileHeader', 'Tune', 'TuneHeader',
           'TuneBody', 'MusicLine', 'InfoLine', 'InlineField', 'Directive',
           'Comment', 'LyricLine', 'WordsLine', 'Note', 'Rhythm', 'Rest',
           'MultiMeasureRest', 'Chord', 'BarLine', 'Beam', 'GraceGroup',
           'Tuplet', 'Slur', 'Decoration', 'Annotation', 'VoiceOverlay',
           'LineContinuation', 'SystemBreak', 'ErrorNode']


Position = Tuple[int, int]


class Node(object):
    """
    Base class of the syntax-tree nodes.

    Attributes:
        id(int): identity of the node, used as the key of semantic data
        start(tuple of int): (line, char) of the first character
        end(tuple of int): (line, char) just after the last character
    """
    """
    構文木ノードの基底クラス。

    Attributes:
        id(int): ノードの識別番号で、意味データのキーとして使われます。
        start(tuple of int): 最初の文字の (行, 文字)
        end(tuple of int): 最後の文字の直後の (行, 文字)
    """
    kind = 'node'
    __slots__ = ('id', 'start', 'end')

    def __init__(self, id, start: Position, end: Position):
        self.id = id
        self.start = start
        self.end = end

    def children(self) -> List['Node']:
        return []

    def _fields(self):
        return ''

    def __repr__(self):
        fields = self._fields()
        return "<%s#%d %d:%d-%d:%d%s>" % (
            self.__class__.__name__, self.id, self.start[0], self.start[1],
            self.end[0], self.end[1], ' ' + fields if fields else '')


class FileStructure(Node):
    kind = 'file_structure'
    __slots__ = ('header', 'tunes')

    def __init__(self, id, start, end, header=None, tunes=()):
        super().__init__(id, start, end)
        self.header: Optional[FileHeader] = header
        self.tunes: List[Tune] = list(tunes)

    def children(self):
        return ([self.header] if self.header else []) + self.tunes


class _Container(Node):
    __slots__ = ('items',)

    def __init__(self, id, start, end, items=()):
        super().__init__(id, start, end)
        self.items: List[Node] = list(items)

    def children(self):
        return self.items


class FileHeader(_Container):
    kind = 'file_header'
    __slots__ = ()


class Tune(Node):
    kind = 'tune'
    __slots__ = ('header', 'body')

    def __init__(self, id, start, end, header, body=None):
        super().__init__(id, start, end)
        self.header: TuneHeader = header
        self.body: Optional[TuneBody] = body

    def children(self):
        return [self.header] + ([self.body] if self.body else [])


class TuneHeader(_Container):
    kind = 'tune_header'
    __slots__ = ()


class TuneBody(_Container):
    kind = 'tune_body'
    __slots__ = ()


class MusicLine(_Container):
    kind = 'music_line'
    __slots__ = ()


class InfoLine(Node):
    """
    Information field such as 'K:G' or 'V:1 clef=bass'.

    Attributes:
        key(str): the field letter
        value(str): the text after the colon, with surrounding spaces
            and a trailing comment removed
        value_start(tuple of int): position of the first character of
            `value`
    """
    kind = 'info_line'
    __slots__ = ('key', 'value', 'value_start')

    def __init__(self, id, start, end, key, value, value_start=None):
        super().__init__(id, start, end)
        self.key = key
        self.value = value
        self.value_start = value_start if value_start is not None else start

    def _fields(self):
        return "%s:%s" % (self.key, self.value)


class InlineField(InfoLine):
    """ Information field written inside music as '[K:G]'. """
    kind = 'inline_field'
    __slots__ = ()


class Directive(Node):
    """
    '%%name value' line. For '%%begintext' blocks, `value` holds the
    collected lines joined by newlines.
    """
    kind = 'directive'
    __slots__ = ('name', 'value')

    def __init__(self, id, start, end, name, value=''):
        super().__init__(id, start, end)
        self.name = name
        self.value = value

    def _fields(self):
        return "%%%%%s %s" % (self.name, self.value)


class Comment(Node):
    kind = 'comment'
    __slots__ = ('text',)

    def __init__(self, id, start, end, text):
        super().__init__(id, start, end)
        self.text = text


class LyricLine(Node):
    """
    'w:' line. `tokens` is the list of syllables and dividers ('-', '_',
    '*', '|', '~') in source order.
    """
    kind = 'lyric_line'
    __slots__ = ('text', 'tokens')

    def __init__(self, id, start, end, text, tokens=()):
        super().__init__(id, start, end)
        self.text = text
        self.tokens: List[str] = list(tokens)


class WordsLine(Node):
    kind = 'words_line'
    __slots__ = ('text',)

    def __init__(self, id, start, end, text):
        super().__init__(id, start, end)
        self.text = text


class Rhythm(Node):
    """
    Length suffix of a note or rest such as '3/2', '/', '//', '2' or '>'.

    Attributes:
        numerator(str or None): digits before the slashes
        separator(str or None): the slashes
        denominator(str or None): digits after the slashes
        broken(str or None): broken-rhythm symbol ('>', '<<', etc.)
    """
    kind = 'rhythm'
    __slots__ = ('numerator', 'separator', 'denominator', 'broken')

    def __init__(self, id, start, end, numerator=None, separator=None,
                 denominator=None, broken=None):
        super().__init__(id, start, end)
        self.numerator = numerator
        self.separator = separator
        self.denominator = denominator
        self.broken = broken

    def _fields(self):
        return ''.join(s for s in (self.numerator, self.separator,
                                   self.denominator, self.broken) if s)


class Note(Node):
    kind = 'note'
    __slots__ = ('accidental', 'letter', 'octave', 'rhythm', 'tie')

    def __init__(self, id, start, end, letter, accidental=None, octave=None,
                 rhythm=None, tie=False):
        super().__init__(id, start, end)
        self.letter = letter
        self.accidental: Optional[str] = accidental
        self.octave: Optional[str] = octave
        self.rhythm: Optional[Rhythm] = rhythm
        self.tie = tie

    def _fields(self):
        return (self.accidental or '') + self.letter + (self.octave or '')


class Rest(Node):
    kind = 'rest'
    __slots__ = ('letter', 'rhythm')

    def __init__(self, id, start, end, letter, rhythm=None):
        super().__init__(id, start, end)
        self.letter = letter
        self.rhythm: Optional[Rhythm] = rhythm

    def _fields(self):
        return self.letter


class MultiMeasureRest(Node):
    kind = 'multi_measure_rest'
    __slots__ = ('letter', 'count')

    def __init__(self, id, start, end, letter, count=None):
        super().__init__(id, start, end)
        self.letter = letter
        self.count: Optional[int] = count


class Chord(Node):
    kind = 'chord'
    __slots__ = ('notes', 'rhythm', 'tie')

    def __init__(self, id, start, end, notes, rhythm=None, tie=False):
        super().__init__(id, start, end)
        self.notes: List[Note] = list(notes)
        self.rhythm: Optional[Rhythm] = rhythm
        self.tie = tie


class BarLine(Node):
    kind = 'bar_line'
    __slots__ = ('symbol', 'ending')

    def __init__(self, id, start, end, symbol, ending=None):
        super().__init__(id, start, end)
        self.symbol = symbol
        self.ending: Optional[str] = ending

    def _fields(self):
        return self.symbol + (self.ending or '')


class Beam(_Container):
    """ Notes, chords and rests written without intervening spaces. """
    kind = 'beam'
    __slots__ = ()


class GraceGroup(Node):
    kind = 'grace_group'
    __slots__ = ('notes', 'acciaccatura')

    def __init__(self, id, start, end, notes, acciaccatura=False):
        super().__init__(id, start, end)
        self.notes: List[Note] = list(notes)
        self.acciaccatura = acciaccatura


class Tuplet(Node):
    kind = 'tuplet'
    __slots__ = ('p', 'q', 'r')

    def __init__(self, id, start, end, p, q=None, r=None):
        super().__init__(id, start, end)
        self.p: int = p
        self.q: Optional[int] = q
        self.r: Optional[int] = r


class Slur(Node):
    """ Slur token: '(' (open), '.(' (dotted open) or ')' (close). """
    kind = 'slur'
    __slots__ = ('symbol',)

    def __init__(self, id, start, end, symbol):
        super().__init__(id, start, end)
        self.symbol = symbol


class Decoration(Node):
    kind = 'decoration'
    __slots__ = ('symbol',)

    def __init__(self, id, start, end, symbol):
        super().__init__(id, start, end)
        self.symbol = symbol

    def _fields(self):
        return self.symbol


class Annotation(Node):
    """ Quoted chord symbol or annotation; `text` excludes the quotes. """
    kind = 'annotation'
    __slots__ = ('text',)

    def __init__(self, id, start, end, text):
        super().__init__(id, start, end)
        self.text = text

    def _fields(self):
        return repr(self.text)


class VoiceOverlay(Node):
    kind = 'voice_overlay'
    __slots__ = ()


class LineContinuation(Node):
    kind = 'line_continuation'
    __slots__ = ()


class SystemBreak(Node):
    kind = 'system_break'
    __slots__ = ()


class ErrorNode(Node):
    """ Text that could not be parsed. """
    kind = 'error'
    __slots__ = ('text',)

    def __init__(self, id, start, end, text):
        super().__init__(id, start, end)
        self.text = text

    def _fields(self):
        return repr(self.text)
