# coding:utf-8
"""
This module defines the semantic analyzer, which classifies the info
lines, inline fields and directives of a syntax tree into typed data
keyed by node id.
"""
"""
このモジュールには意味解析器が定義されています。意味解析器は、構文木中の
情報行、インラインフィールド、ディレクティブを分類し、ノード番号を
キーとする型付きのデータを作ります。
"""
# Copyright (C) 2025  Satoshi Nishimura

import re
from typing import Dict, Optional
from abcscore.utils import Rational, SemanticData, ErrorReporter, \
    int_preferred
from abcscore.constants import CLEFS, MODES, MODE_FIFTHS_OFFSET, \
    KEY_ROOT_FIFTHS, SHARP_ORDER, FLAT_ORDER, LETTER_NUMBERS, ACCIDENTALS
from abcscore.parser import tokenize_value
from abcscore.syntax import InfoLine, Directive
from abcscore.directives import analyze_directive

__all__ = ['SemanticAnalyzer', 'analyze', 'clef_info', 'key_accidentals',
           'TEXT_FIELDS']


TEXT_FIELDS = {
    'T': 'title',
    'C': 'composer',
    'O': 'origin',
    'R': 'rhythm',
    'B': 'book',
    'S': 'source',
    'D': 'discography',
    'N': 'notes',
    'Z': 'transcription',
    'H': 'history',
    'A': 'author',
    'P': 'parts',
}
"""
Semantic types of the info fields whose value is free text.
"""
"""
値が自由なテキストである情報フィールドの意味データの種類。
"""

_KEY_ROOT_RE = re.compile(r'([_^=]?)(HP|Hp|[A-Ga-g])([#b]?)(.*)')
_EXPLICIT_ACC_RE = re.compile(r'(\^\^|__|\^|_|=)([A-Ga-g])')
_METER_RE = re.compile(r'(\d+)\s*/\s*(\d+)')
_COMPOUND_METER_RE = re.compile(r'\(?\s*(\d+(?:\s*\+\s*\d+)+)\s*\)?\s*/\s*'
                                r'(\d+)')
_NOTE_LENGTH_RE = re.compile(r'(\d+)(?:\s*/\s*(\d+))?')
_INT_RE = re.compile(r'[-+]?\d+')
_FLOAT_RE = re.compile(r'[-+]?(?:\d+\.?\d*|\.\d+)')
_STEM_DIRECTIONS = ('up', 'down', 'auto', 'none')
_CHORD_PLACEMENTS = ('above', 'below', 'left', 'right', 'default')
_BRACKET_POSITIONS = ('start', 'end', 'continue')


def clef_info(name) -> dict:
    """
    Returns the clef dict {'type', 'verticalPos'} for a clef name.
    Unknown names give the treble clef.
    """
    """
    音部記号名に対する dict {'type', 'verticalPos'} を返します。
    不明な名前に対してはト音記号を返します。
    """
    clef_type, pos = CLEFS.get(name.lower(), CLEFS['treble'])
    return {'type': clef_type, 'verticalPos': pos}


def key_accidentals(root, acc, mode) -> list:
    """
    Computes the accidentals of a key signature from the circle of fifths.

    Args:
        root(str): key root ('C' to 'B', 'HP' or 'Hp')
        acc(str): '', '#' or 'b'
        mode(str): mode code ('', 'm', 'Dor', 'Phr', 'Lyd', 'Mix', 'Loc')

    Returns:
        list of dict {'acc', 'note', 'verticalPos'} in key-signature order
    """
    """
    五度圏から調号の臨時記号を計算します。

    Args:
        root(str): 主音 ('C' から 'B'、'HP' または 'Hp')
        acc(str): ''、'#' または 'b'
        mode(str): 旋法コード ('', 'm', 'Dor', 'Phr', 'Lyd', 'Mix', 'Loc')

    Returns:
        調号の順に並んだ dict {'acc', 'note', 'verticalPos'} のリスト
    """
    if root in ('HP', 'Hp'):
        result = [{'acc': 'sharp', 'note': note, 'verticalPos': pos}
                  for note, pos in SHARP_ORDER[:2]]
        if root == 'Hp':
            result.append({'acc': 'natural', 'note': 'g', 'verticalPos': 11})
        return result
    fifths = KEY_ROOT_FIFTHS[root.upper()] + MODE_FIFTHS_OFFSET[mode]
    if acc == '#':
        fifths += 7
    elif acc == 'b':
        fifths -= 7
    if fifths > 0:
        return [{'acc': 'sharp', 'note': note, 'verticalPos': pos}
                for note, pos in SHARP_ORDER[:min(fifths, 7)]]
    else:
        return [{'acc': 'flat', 'note': note, 'verticalPos': pos}
                for note, pos in FLAT_ORDER[:min(-fifths, 7)]]


def _explicit_accidental(word) -> Optional[dict]:
    m = _EXPLICIT_ACC_RE.fullmatch(word)
    if not m:
        return None
    letter = m.group(2)
    pos = LETTER_NUMBERS[letter.upper()] + (7 if letter.islower() else 0)
    return {'acc': ACCIDENTALS[m.group(1)], 'note': letter.lower(),
            'verticalPos': pos}


class SemanticAnalyzer(object):
    """
    Semantic analyzer of info lines, inline fields and directives.

    Args:
        reporter(ErrorReporter, optional): receiver of diagnostics.
            If omitted, a new one is created.

    Attributes:
        data(dict): mapping from node ids to SemanticData
        reporter(ErrorReporter): the diagnostic collector
    """
    """
    情報行、インラインフィールド、ディレクティブの意味解析器。

    Args:
        reporter(ErrorReporter, optional): 診断メッセージの受け取り手。
            省略すると新たに作られます。

    Attributes:
        data(dict): ノード番号から SemanticData への対応表
        reporter(ErrorReporter): 診断メッセージの収集器
    """
    def __init__(self, reporter=None):
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.data: Dict[int, SemanticData] = {}

    def analyze(self, root) -> Dict[int, SemanticData]:
        """
        Analyzes every info line, inline field and directive under `root`.

        Args:
            root(Node): usually the FileStructure returned by
                :func:`abcscore.parser.parse`

        Returns:
            dict mapping node ids to SemanticData. Nodes whose value is
            malformed have no entry.
        """
        """
        `root` 以下のすべての情報行、インラインフィールド、ディレクティブ
        を解析します。

        Args:
            root(Node): 通常は :func:`abcscore.parser.parse` が返す
                FileStructure

        Returns:
            ノード番号から SemanticData への dict。値が不正なノードは
            含まれません。
        """
        stack = [root]
        while stack:
            node = stack.pop()
            result = None
            if isinstance(node, InfoLine):
                result = self.analyze_info_line(node)
            elif isinstance(node, Directive):
                result = analyze_directive(node, self.reporter)
            if result is not None:
                self.data[node.id] = result
            stack.extend(reversed(node.children()))
        return self.data

    def report(self, message, node):
        self.reporter.report(message, node)

    def analyze_info_line(self, node) -> Optional[SemanticData]:
        key = node.key
        if key in TEXT_FIELDS:
            return SemanticData(TEXT_FIELDS[key], node.value)
        method = getattr(self, 'analyze_' + key, None)
        if method is None:
            self.report("Unknown info line key: %s" % key, node)
            return None
        return method(node)

    def analyze_K(self, node):
        words = node.value.split()
        if not words:
            self.report("Key info line requires a key signature", node)
            return None
        signature = {'root': 'C', 'acc': '', 'mode': '', 'accidentals': []}
        result = {'keySignature': signature}
        if words[0].lower() == 'none':
            return SemanticData('key', result)

        tokens = tokenize_value(node.value)
        i = 0
        if tokens and tokens[0].kind == 'word':
            word = tokens[0].text
            m = _KEY_ROOT_RE.fullmatch(word)
            if word.lower() in CLEFS:
                result['clef'] = clef_info(word)
                i = 1
            elif m:
                root = m.group(2)
                signature['root'] = root if len(root) == 2 else root.upper()
                if m.group(1) == '^' or m.group(3) == '#':
                    signature['acc'] = '#'
                elif m.group(1) == '_' or m.group(3) == 'b':
                    signature['acc'] = 'b'
                rest = m.group(4)
                if rest:
                    if rest.lower() not in MODES:
                        self.report("Unknown key mode: %s" % rest, node)
                    else:
                        signature['mode'] = MODES[rest.lower()]
                elif (len(tokens) > 1 and tokens[1].kind == 'word' and
                      tokens[1].text.lower() in MODES):
                    signature['mode'] = MODES[tokens[1].text.lower()]
                    i = 1
                i += 1
        explicit = []
        for token in tokens[i:]:
            if token.kind == 'kv':
                self.apply_key_modifier(token.key.lower(), token.value,
                                        result, node)
            elif token.kind == 'word' and token.text.lower() in CLEFS:
                result['clef'] = clef_info(token.text)
            elif (token.kind == 'word' and
                  _explicit_accidental(token.text) is not None):
                explicit.append(_explicit_accidental(token.text))
            else:
                self.report("Unexpected token in key signature: %s"
                            % token.text, node)
        signature['accidentals'] = key_accidentals(
            signature['root'], signature['acc'], signature['mode']) + \
            explicit
        return SemanticData('key', result)

    def apply_key_modifier(self, key, value, result, node):
        if key == 'clef':
            clef = clef_info(value)
            if 'clef' in result:
                clef.update((k, v) for k, v in result['clef'].items()
                            if k not in ('type', 'verticalPos'))
            result['clef'] = clef
            return
        clef = result.setdefault('clef', clef_info('treble'))
        if key in ('middle', 'm'):
            clef['middle'] = value
        elif key in ('transpose', 'stafflines', 'octave'):
            if _INT_RE.fullmatch(value):
                clef[key] = int(value)
            else:
                self.report("Invalid %s value: %s" % (key, value), node)
        elif key == 'staffscale':
            if _FLOAT_RE.fullmatch(value):
                clef[key] = int_preferred(float(value))
            else:
                self.report("Invalid %s value: %s" % (key, value), node)
        elif key == 'style':
            clef['style'] = value.lower()
        else:
            self.report("Unknown key property: %s" % key, node)

    def analyze_M(self, node):
        value = node.value.strip()
        if not value:
            self.report("Meter info line requires a value", node)
            return None
        if value == 'C':
            return SemanticData('meter', {'type': 'common_time',
                                          'value': [Rational(4, 4)]})
        if value == 'C|':
            return SemanticData('meter', {'type': 'cut_time',
                                          'value': [Rational(2, 2)]})
        if value.lower() == 'none':
            return SemanticData('meter', {'type': 'none', 'value': []})
        m = _METER_RE.fullmatch(value)
        if m and int(m.group(2)) != 0:
            return SemanticData('meter', {
                'type': 'specified',
                'value': [Rational(int(m.group(1)), int(m.group(2)))]})
        m = _COMPOUND_METER_RE.fullmatch(value)
        if m and int(m.group(2)) != 0:
            total = sum(int(n) for n in m.group(1).split('+'))
            return SemanticData('meter', {
                'type': 'specified',
                'value': [Rational(total, int(m.group(2)))]})
        self.report("Invalid meter format", node)
        return None

    def analyze_L(self, node):
        value = node.value.strip()
        if not value:
            self.report("Note length info line requires a value", node)
            return None
        m = _NOTE_LENGTH_RE.fullmatch(value)
        if not m or (m.group(2) and int(m.group(2)) == 0):
            self.report("Invalid note length format", node)
            return None
        return SemanticData('note_length',
                            Rational(int(m.group(1)),
                                     int(m.group(2) or 1)))

    def analyze_Q(self, node):
        tokens = tokenize_value(node.value)
        if not tokens:
            self.report("Tempo info line requires a value", node)
            return None
        tempo = {}
        i = 0
        if tokens[i].kind == 'string':
            tempo['preString'] = tokens[i].value
            i += 1
        if i < len(tokens):
            token = tokens[i]
            if token.kind == 'kv':
                m = _METER_RE.fullmatch(token.key)
                if m:
                    tempo['duration'] = [int(m.group(1)), int(m.group(2))]
                if _INT_RE.fullmatch(token.value):
                    tempo['bpm'] = int(token.value)
                i += 1
            elif token.kind == 'word' and _INT_RE.fullmatch(token.text):
                tempo['bpm'] = int(token.text)
                i += 1
        if i < len(tokens) and tokens[i].kind == 'string':
            tempo['postString'] = tokens[i].value
            i += 1
        if i < len(tokens):
            self.report("Unexpected token in tempo: %s" % tokens[i].text,
                        node)
        return SemanticData('tempo', tempo)

    def analyze_V(self, node):
        tokens = tokenize_value(node.value)
        if not tokens or tokens[0].kind != 'word':
            self.report("Voice info line requires a voice ID", node)
            return None
        properties = {}
        for token in tokens[1:]:
            if token.kind == 'kv':
                self.apply_voice_property(properties, token.key.lower(),
                                          token.value, node)
            elif token.kind == 'word' and token.text.lower() in CLEFS:
                properties['clef'] = clef_info(token.text)
            else:
                self.report("Unexpected token in voice definition: %s"
                            % token.text, node)
        return SemanticData('voice', {'id': tokens[0].text,
                                      'properties': properties})

    def apply_voice_property(self, properties, key, value, node):
        if key in ('name', 'nm'):
            properties['name'] = value
        elif key in ('subname', 'sname', 'snm'):
            properties['subname'] = value
        elif key == 'clef':
            properties['clef'] = clef_info(value)
        elif key in ('transpose', 'octave', 'stafflines', 'instrument'):
            if _INT_RE.fullmatch(value):
                properties[key] = int(value)
        elif key in ('middle', 'm'):
            properties['middle'] = value
        elif key in ('staffscale', 'space', 'spc'):
            if _FLOAT_RE.fullmatch(value):
                properties['space' if key == 'spc' else key] = \
                    int_preferred(float(value))
        elif key in ('perc', 'merge'):
            properties[key] = value.lower() == 'true' or value == '1'
        elif key in ('stems', 'stem'):
            if value in _STEM_DIRECTIONS:
                properties['stems'] = value
        elif key == 'gchord':
            if value in _CHORD_PLACEMENTS:
                properties['gchord'] = value
        elif key in ('bracket', 'brk'):
            if value in _BRACKET_POSITIONS:
                properties['bracket'] = value
        elif key in ('brace', 'brc'):
            if value in _BRACKET_POSITIONS:
                properties['brace'] = value
        else:
            self.report("Unknown voice property: %s" % key, node)

    def analyze_X(self, node):
        words = node.value.split()
        if not words:
            self.report("Reference number (X:) requires a number", node)
            return None
        if not re.fullmatch(r'\d+', words[0]):
            self.report("Invalid reference number: %s" % words[0], node)
            return None
        return SemanticData('reference_number', int(words[0]))


def analyze(root, reporter=None) -> Dict[int, SemanticData]:
    """
    Shortcut of `SemanticAnalyzer(reporter).analyze(root)`.
    """
    """
    `SemanticAnalyzer(reporter).analyze(root)` の省略形です。
    """
    return SemanticAnalyzer(reporter).analyze(root)
