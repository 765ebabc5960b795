# coding:utf-8
"""
This module defines the tolerant parser that turns ABC text into the
syntax tree of :mod:`abcscore.syntax`.

The text is first divided into lines, which are classified into info
lines, directives, comments, lyric lines and music lines. Music lines and
the values of info lines are then parsed with PEG grammars.
The parser never fails on malformed ABC: unparsable characters become
:class:`.ErrorNode` instances.
"""
"""
このモジュールには、ABC テキストを :mod:`abcscore.syntax` の構文木へ
変換する寛容な構文解析器が定義されています。

テキストはまず行に分割され、情報行、ディレクティブ、コメント、歌詞行、
音楽行に分類されます。その後、音楽行と情報行の値が PEG 文法によって
解析されます。構文解析器は不正な ABC に対しても失敗することはなく、
解析できない文字は :class:`.ErrorNode` となります。
"""
# Copyright (C) 2025  Satoshi Nishimura

import re
import itertools
from typing import List, NamedTuple, Optional
from arpeggio import ZeroOrMore, OneOrMore, Optional as Opt, RegExMatch, \
                     EOF, ParserPython, NoMatch, NonTerminal
from abcscore.syntax import FileStructure, FileHeader, Tune, TuneHeader, \
    TuneBody, MusicLine, InfoLine, InlineField, Directive, Comment, \
    LyricLine, WordsLine, Note, Rhythm, Rest, MultiMeasureRest, Chord, \
    BarLine, Beam, GraceGroup, Tuplet, Slur, Decoration, Annotation, \
    VoiceOverlay, LineContinuation, SystemBreak, ErrorNode

__all__ = ['parse', 'parse_music_line', 'tokenize_value', 'ValueToken']


# ABC music-line grammar begin
def music_line(): return ZeroOrMore(music_item), EOF
def music_item(): return [whitespace, comment, inline_field, bar_line,
                          nth_repeat, chord, note, rest, multi_measure_rest,
                          grace_group, tuplet, slur, annotation, decoration,
                          broken_rhythm, voice_overlay, line_continuation,
                          system_break, backquote, error_char]
def whitespace(): return RegExMatch(r'[ \t]+')
def comment(): return RegExMatch(r'%.*')
def inline_field(): return RegExMatch(r'\[[A-Za-z]:[^\]]*\]')
def bar_line(): return bar_symbol, Opt(ending)
def bar_symbol(): return RegExMatch(r'::+|:*\[\|\]?|:*\|+\]?:*')
def ending(): return RegExMatch(r'\d+(?:[,-]\d+)*')
def nth_repeat(): return RegExMatch(r'\[\d+(?:[,-]\d+)*')
def chord(): return "[", OneOrMore(note), "]", Opt(note_length), Opt(tie)
def note(): return Opt(accidental), note_letter, Opt(octave), \
                   Opt(note_length), Opt(tie)
def accidental(): return RegExMatch(r'\^\^|\^|__|_|=')
def note_letter(): return RegExMatch(r'[A-Ga-g]')
def octave(): return RegExMatch(r"[,']+")
# matches only when something is written; the default length is implied
def note_length(): return RegExMatch(r'\d+(?:/+\d*)?|/+\d*')
def tie(): return "-"
def rest(): return rest_letter, Opt(note_length)
def rest_letter(): return RegExMatch(r'[zxy]')
def multi_measure_rest(): return RegExMatch(r'[ZX]\d*')
def grace_group(): return ("{", Opt(acciaccatura), ZeroOrMore(grace_item),
                          "}")
def grace_item(): return [note, whitespace]
def acciaccatura(): return "/"
def tuplet(): return RegExMatch(r'\(\d+(?::\d*){0,2}')
def slur(): return RegExMatch(r'\.\(|\(|\)')
def annotation(): return RegExMatch(r'"[^"]*"')
def decoration(): return RegExMatch(r'![^!\s]+!|\+[^+\s]+\+|[.~HJLMOPRSTuv]')
def broken_rhythm(): return RegExMatch(r'<{1,3}|>{1,3}')
def voice_overlay(): return "&"
def line_continuation(): return "\\"
def system_break(): return "$"
def backquote(): return RegExMatch(r'`+')
def error_char(): return RegExMatch(r'.')
# ABC music-line grammar end


# Field value grammar begin
def field_value(): return ZeroOrMore(value_item), EOF
def value_item(): return [keyvalue, quoted_string, punct, word, other_char]
def keyvalue(): return word, "=", kv_value
def kv_value(): return [quoted_string, word]
def quoted_string(): return RegExMatch(r'"[^"]*"')
def punct(): return RegExMatch(r'[()\[\]{}|]')
def word(): return RegExMatch(r'[^\s=()\[\]{}|"]+')
def other_char(): return RegExMatch(r'\S')
# Field value grammar end


music_parser = None
value_parser = None


class ValueToken(NamedTuple):
    """
    Token of an info-line or directive value.

    Attributes:
        kind(str): 'word', 'string' (quotes removed), 'kv' (key=value),
            'punct' (one of ()[]{}|) or 'other'
        text(str): the source text of the token
        key(str or None): the key for 'kv' tokens
        value(str or None): the value for 'kv' tokens (quotes removed),
            or the text without quotes for the others
        position(int): offset of the token in the value string
    """
    kind: str
    text: str
    key: Optional[str]
    value: Optional[str]
    position: int


def _unwrap(node, rule_name):
    """ Returns the alternative matched by the choice rule `rule_name`,
    or `node` itself if it is not a node of that rule. """
    if node.rule_name == rule_name and isinstance(node, NonTerminal):
        return node[0]
    return node


def _unquote(s):
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        return s[1:-1]
    return s


def tokenize_value(text) -> List[ValueToken]:
    """
    Splits the value of an info line or a directive into tokens.
    Tokens are separated by white space, except that 'key=value' pairs
    and quoted strings form single tokens.

    Args:
        text(str): the value string

    Returns:
        list of ValueToken
    """
    """
    情報行またはディレクティブの値をトークンに分割します。
    トークンは空白によって区切られますが、'key=value' の組と
    引用符で囲まれた文字列はそれぞれ1つのトークンになります。

    Args:
        text(str): 値の文字列

    Returns:
        ValueToken のリスト
    """
    global value_parser
    if not value_parser:
        value_parser = ParserPython(field_value)
    tree = value_parser.parse(text)
    tokens = []
    for item in tree:
        node = _unwrap(item, 'value_item')
        rule = node.rule_name
        if rule == 'EOF':
            continue
        if rule == 'keyvalue':
            key = node[0].value
            value = node[2].flat_str()
            tokens.append(ValueToken('kv', text[node.position:
                                                node.position_end],
                                     key, _unquote(value), node.position))
        elif rule == 'quoted_string':
            tokens.append(ValueToken('string', node.value, None,
                                     _unquote(node.value), node.position))
        else:
            kind = rule if rule in ('word', 'punct') else 'other'
            tokens.append(ValueToken(kind, node.value, None, node.value,
                                     node.position))
    return tokens


_NOTE_LENGTH_RE = re.compile(r'(\d*)(/*)(\d*)')
_TUPLET_RE = re.compile(r'\((\d+)(?::(\d*))?(?::(\d*))?')
_INFO_LINE_RE = re.compile(r'([A-Za-z]):(.*)')
_DIRECTIVE_RE = re.compile(r'%%(\S+)[ \t]*(.*)')
_LYRIC_TOKEN_RE = re.compile(r'\\-|[^\s\-_*|~]+|[-_*|~]')
_BEAM_BREAKERS = ('whitespace', 'bar_line', 'nth_repeat', 'inline_field',
                  'comment', 'multi_measure_rest', 'voice_overlay',
                  'line_continuation', 'system_break', 'error_char')


def _strip_comment(value):
    """ Removes a trailing '%' comment ('\\%' is kept). """
    m = re.search(r'(?<!\\)%', value)
    return value[:m.start()] if m else value


class _MusicLineBuilder(object):
    """
    Converts the Arpeggio parse tree of one music line into syntax
    nodes, grouping unspaced notes into beams and attaching
    broken-rhythm symbols to the preceding note.
    """
    def __init__(self, ids, lineno, column=0):
        self.ids = ids
        self.lineno = lineno
        self.column = column
        self.last_notelike = None

    def pos(self, offset):
        return (self.lineno, self.column + offset)

    def build(self, text) -> MusicLine:
        global music_parser
        if not music_parser:
            music_parser = ParserPython(music_line, skipws=False)
        items = []
        try:
            tree = music_parser.parse(text)
        except NoMatch:
            items.append(ErrorNode(next(self.ids), self.pos(0),
                                   self.pos(len(text)), text))
        else:
            run = []
            for item in tree:
                node = _unwrap(item, 'music_item')
                if node.rule_name == 'EOF':
                    continue
                if node.rule_name in _BEAM_BREAKERS:
                    self.flush_run(run, items)
                    run = []
                    converted = self.convert(node)
                    if converted is not None:
                        items.append(converted)
                else:
                    converted = self.convert(node)
                    if converted is not None:
                        run.append(converted)
            self.flush_run(run, items)
        return MusicLine(next(self.ids), self.pos(0), self.pos(len(text)),
                         items)

    def flush_run(self, run, items):
        count = sum(1 for n in run if isinstance(n, (Note, Chord, Rest)))
        if count >= 2:
            items.append(Beam(next(self.ids), run[0].start, run[-1].end,
                              run))
        else:
            items.extend(run)

    def convert(self, node):
        method = getattr(self, 'convert_' + node.rule_name, None)
        if method is None:
            return None
        return method(node)

    def range(self, node):
        return self.pos(node.position), self.pos(node.position_end)

    def convert_comment(self, node):
        return Comment(next(self.ids), *self.range(node), node.value[1:])

    def convert_inline_field(self, node):
        text = node.value
        value = text[3:-1]
        stripped = value.lstrip()
        return InlineField(next(self.ids), *self.range(node), text[1],
                           stripped.rstrip(),
                           self.pos(node.position + 3 +
                                    len(value) - len(stripped)))

    def convert_bar_line(self, node):
        symbol = node[0].value
        ending = node[1].value if len(node) > 1 else None
        self.last_notelike = None
        return BarLine(next(self.ids), *self.range(node), symbol, ending)

    def convert_nth_repeat(self, node):
        self.last_notelike = None
        return BarLine(next(self.ids), *self.range(node), '[',
                       node.value[1:])

    def make_rhythm(self, node):
        m = _NOTE_LENGTH_RE.fullmatch(node.value)
        return Rhythm(next(self.ids), *self.range(node),
                      m.group(1) or None, m.group(2) or None,
                      m.group(3) or None)

    def convert_note(self, node, in_group=False):
        fields = {}
        for child in node:
            fields[child.rule_name or child.value] = child
        rhythm = (self.make_rhythm(fields['note_length'])
                  if 'note_length' in fields else None)
        result = Note(next(self.ids), *self.range(node),
                      fields['note_letter'].value,
                      fields['accidental'].value
                      if 'accidental' in fields else None,
                      fields['octave'].value if 'octave' in fields else None,
                      rhythm, 'tie' in fields)
        if not in_group:
            self.last_notelike = result
        return result

    def convert_chord(self, node):
        notes = []
        rhythm = None
        tie = False
        for child in node:
            if child.rule_name == 'note':
                notes.append(self.convert_note(child, True))
            elif child.rule_name == 'note_length':
                rhythm = self.make_rhythm(child)
            elif child.rule_name == 'tie':
                tie = True
        result = Chord(next(self.ids), *self.range(node), notes, rhythm, tie)
        self.last_notelike = result
        return result

    def convert_rest(self, node):
        rhythm = self.make_rhythm(node[1]) if len(node) > 1 else None
        result = Rest(next(self.ids), *self.range(node), node[0].value,
                      rhythm)
        self.last_notelike = result
        return result

    def convert_multi_measure_rest(self, node):
        self.last_notelike = None
        count = int(node.value[1:]) if len(node.value) > 1 else None
        return MultiMeasureRest(next(self.ids), *self.range(node),
                                node.value[0], count)

    def convert_grace_group(self, node):
        items = [_unwrap(child, 'grace_item') for child in node]
        notes = [self.convert_note(item, True) for item in items
                 if item.rule_name == 'note']
        acciaccatura = any(child.rule_name == 'acciaccatura'
                           for child in node)
        return GraceGroup(next(self.ids), *self.range(node), notes,
                          acciaccatura)

    def convert_tuplet(self, node):
        m = _TUPLET_RE.fullmatch(node.value)
        return Tuplet(next(self.ids), *self.range(node), int(m.group(1)),
                      int(m.group(2)) if m.group(2) else None,
                      int(m.group(3)) if m.group(3) else None)

    def convert_slur(self, node):
        return Slur(next(self.ids), *self.range(node), node.value)

    def convert_annotation(self, node):
        return Annotation(next(self.ids), *self.range(node), node.value[1:-1])

    def convert_decoration(self, node):
        return Decoration(next(self.ids), *self.range(node), node.value)

    def convert_broken_rhythm(self, node):
        target = self.last_notelike
        if target is None:
            return ErrorNode(next(self.ids), *self.range(node), node.value)
        if target.rhythm is None:
            target.rhythm = Rhythm(next(self.ids), *self.range(node))
        target.rhythm.broken = node.value
        target.end = self.pos(node.position_end)
        self.last_notelike = None
        return None

    def convert_voice_overlay(self, node):
        return VoiceOverlay(next(self.ids), *self.range(node))

    def convert_line_continuation(self, node):
        return LineContinuation(next(self.ids), *self.range(node))

    def convert_system_break(self, node):
        return SystemBreak(next(self.ids), *self.range(node))

    def convert_error_char(self, node):
        return ErrorNode(next(self.ids), *self.range(node), node.value)


def parse_music_line(text, lineno=0, ids=None) -> MusicLine:
    """
    Parses one line of ABC music code.

    Args:
        text(str): the line (without the newline)
        lineno(int, optional): line number recorded in node positions
        ids(iterator of int, optional): source of node ids

    Returns:
        MusicLine
    """
    """
    ABC の音楽コード1行を構文解析します。

    Args:
        text(str): 行の文字列 (改行を含まない)
        lineno(int, optional): ノードの位置に記録される行番号
        ids(iterator of int, optional): ノード番号の供給源

    Returns:
        MusicLine
    """
    if ids is None:
        ids = itertools.count()
    return _MusicLineBuilder(ids, lineno).build(text)


class _FileBuilder(object):
    def __init__(self, text):
        self.ids = itertools.count()
        self.lines = [line[:-1] if line.endswith('\r') else line
                      for line in text.split('\n')]

    def sections(self):
        """ Yields lists of line numbers separated by blank lines. A
        %%begintext block never ends a section. """
        section = []
        in_text = False
        for lineno, line in enumerate(self.lines):
            if in_text:
                section.append(lineno)
                if re.match(r'%%endtext\b', line):
                    in_text = False
            elif not line.strip():
                if section:
                    yield section
                section = []
            else:
                section.append(lineno)
                if re.match(r'%%begintext\b', line):
                    in_text = True
        if section:
            yield section

    def build(self) -> FileStructure:
        header = None
        tunes = []
        for section in self.sections():
            start = None
            for i, lineno in enumerate(section):
                if re.match(r'X:', self.lines[lineno]):
                    start = i
                    break
            if start is not None:
                tunes.append(self.build_tune(section[start:]))
            elif header is None and not tunes:
                items = self.build_header_lines(section)
                if any(isinstance(item, (InfoLine, Directive))
                       for item in items):
                    header = FileHeader(next(self.ids), items[0].start,
                                        items[-1].end, items)
        last = len(self.lines) - 1
        return FileStructure(next(self.ids), (0, 0),
                             (last, len(self.lines[last])), header, tunes)

    def line_range(self, lineno):
        return (lineno, 0), (lineno, len(self.lines[lineno]))

    def build_header_lines(self, linenos):
        items = []
        i = 0
        while i < len(linenos):
            item, i = self.build_line(linenos, i, in_body=False)
            if item is not None:
                items.append(item)
        return items

    def build_line(self, linenos, i, in_body):
        """ Builds the node of the line linenos[i]; returns it with the
        index of the next line to be processed. """
        lineno = linenos[i]
        line = self.lines[lineno]
        m = _DIRECTIVE_RE.match(line)
        if m:
            if m.group(1) == 'begintext':
                return self.build_text_block(linenos, i)
            return (Directive(next(self.ids), *self.line_range(lineno),
                              m.group(1), m.group(2).rstrip()), i + 1)
        if line.startswith('%'):
            return (Comment(next(self.ids), *self.line_range(lineno),
                            line[1:]), i + 1)
        if line.startswith('w:'):
            text = _strip_comment(line[2:])
            return (LyricLine(next(self.ids), *self.line_range(lineno),
                              text, _LYRIC_TOKEN_RE.findall(text)), i + 1)
        if line.startswith('W:'):
            return (WordsLine(next(self.ids), *self.line_range(lineno),
                              line[2:].strip()), i + 1)
        m = _INFO_LINE_RE.match(line)
        if m:
            raw = _strip_comment(m.group(2))
            value = raw.strip()
            if m.group(1) == 'I':
                # I:name value is an alternative syntax of %%name value
                name, _, rest = value.partition(' ')
                return (Directive(next(self.ids), *self.line_range(lineno),
                                  name, rest.strip()), i + 1)
            value_col = 2 + len(raw) - len(raw.lstrip())
            return (InfoLine(next(self.ids), *self.line_range(lineno),
                             m.group(1), value, (lineno, value_col)), i + 1)
        if in_body:
            return (_MusicLineBuilder(self.ids, lineno).build(line), i + 1)
        return None, i + 1

    def build_text_block(self, linenos, i):
        first = linenos[i]
        texts = []
        j = i + 1
        while j < len(linenos):
            line = self.lines[linenos[j]]
            if re.match(r'%%endtext\b', line):
                j += 1
                break
            texts.append(line[2:] if line.startswith('%%') else line)
            j += 1
        last = linenos[j - 1]
        return (Directive(next(self.ids), (first, 0),
                          (last, len(self.lines[last])), 'begintext',
                          '\n'.join(texts)), j)

    def build_tune(self, linenos) -> Tune:
        header_items = []
        i = 0
        found_key = False
        while i < len(linenos) and not found_key:
            line = self.lines[linenos[i]]
            if (not _INFO_LINE_RE.match(line) and not line.startswith('%')):
                break
            item, i = self.build_line(linenos, i, in_body=False)
            if item is not None:
                header_items.append(item)
                if isinstance(item, InfoLine) and item.key == 'K':
                    found_key = True
        header = TuneHeader(next(self.ids), header_items[0].start,
                            header_items[-1].end, header_items)
        body = None
        if i < len(linenos):
            body_items = []
            while i < len(linenos):
                item, i = self.build_line(linenos, i, in_body=True)
                body_items.append(item)
            body = TuneBody(next(self.ids), body_items[0].start,
                            body_items[-1].end, body_items)
        end = body.end if body else header.end
        return Tune(next(self.ids), header.start, end, header, body)


def parse(text) -> FileStructure:
    """
    Parses ABC text into a syntax tree. This function never raises an
    exception because of malformed ABC.

    Args:
        text(str): the ABC text

    Returns:
        FileStructure: the root of the syntax tree

    Raises:
        TypeError: if `text` is not a string.
    """
    """
    ABC テキストを構文木へ変換します。この関数は不正な ABC によって
    例外を送出することはありません。

    Args:
        text(str): ABC テキスト

    Returns:
        FileStructure: 構文木の根

    Raises:
        TypeError: `text` が文字列でないとき。
    """
    if not isinstance(text, str):
        raise TypeError("parse() expects a str, not %s"
                        % type(text).__name__)
    return _FileBuilder(text).build()
