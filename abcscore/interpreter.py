# coding:utf-8
"""
This module defines the tune interpreter, which walks the syntax tree
together with the semantic data and builds the output score.
"""
"""
このモジュールには曲のインタープリターが定義されています。構文木を
意味データとともにたどり、出力スコアを組み立てます。
"""
# Copyright (C) 2025  Satoshi Nishimura

from typing import Dict, List, NamedTuple, Optional
from abcscore.config import AbcConfig
from abcscore.constants import LETTER_NUMBERS, OCTAVE_STEP, ACCIDENTALS, \
    BAR_TYPES, REST_TYPES, DECORATIONS, TUPLET_Q, CHORD_POSITIONS
from abcscore.utils import Rational, ErrorReporter, Diagnostic, \
    LineOffsets, SemanticData
from abcscore.score import Tune, TextSystem, note_element, rest_element, \
    bar_element, key_element, meter_element
from abcscore.state import FileDefaults, InterpreterState, default_meter
from abcscore.text import split_font_segments
from abcscore.parser import parse
from abcscore.analyzer import SemanticAnalyzer

__all__ = ['ParseResult', 'TuneInterpreter', 'interpret', 'interpret_abc',
           'rhythm_fraction', 'broken_rhythm_multipliers']


class ParseResult(NamedTuple):
    """ The tunes interpreted from an ABC file with the diagnostics
    collected on the way. """
    tunes: List[Tune]
    diagnostics: List[Diagnostic]


_META_TYPES = ('composer', 'origin', 'rhythm', 'book', 'source',
               'discography', 'notes', 'transcription', 'history',
               'author', 'parts')

_META_DIRECTIVES = ('abc-copyright', 'abc-creator', 'abc-edited-by')

# directives which only make sense inside a tune
_TUNE_ONLY_DIRECTIVES = ('bagpipes', 'flatbeams', 'jazzchords',
                         'accentAbove', 'germanAlphabet', 'titleleft',
                         'measurebox', 'nobarcheck', 'score', 'staves')

_PARSER_CONFIG_FLAGS = ('landscape', 'titlecaps', 'continueall')

_TEXT_SYSTEM_DIRECTIVES = ('text', 'center', 'begintext')


def rhythm_fraction(rhythm) -> Rational:
    """
    Returns the length multiplier written by a rhythm suffix, ignoring
    the broken-rhythm symbol.

    Args:
        rhythm(Rhythm or None): the rhythm node

    Returns:
        Rational: '3/2' gives 3/2, '/' gives 1/2, '//' gives 1/4, and no
        suffix gives 1/1.
    """
    """
    リズム接尾辞が表す長さの倍率を返します。ブロークンリズムの記号は
    無視されます。

    Args:
        rhythm(Rhythm or None): リズムのノード

    Returns:
        Rational: '3/2' は 3/2、'/' は 1/2、'//' は 1/4、接尾辞なしは
        1/1 となります。
    """
    if rhythm is None:
        return Rational(1, 1)
    num = int(rhythm.numerator) if rhythm.numerator else 1
    if num == 0:
        num = 1
    sep = rhythm.separator
    if not sep:
        return Rational(num, 1)
    if len(sep) == 1:
        den = int(rhythm.denominator) if rhythm.denominator else 2
        if den == 0:
            den = 2
    else:
        den = 2 ** len(sep)
    return Rational(num, den)


def broken_rhythm_multipliers(symbol):
    """
    Returns the multipliers for the note before and the note after a
    broken-rhythm symbol: '>' gives (3/2, 1/2), '>>' gives (7/4, 1/4),
    '>>>' gives (15/8, 1/8), and the '<' forms give them swapped.
    """
    """
    ブロークンリズム記号の前後の音符に対する倍率を返します。'>' は
    (3/2, 1/2)、'>>' は (7/4, 1/4)、'>>>' は (15/8, 1/8) を与え、'<'
    の形ではこれらが入れ替わります。
    """
    den = 2 ** len(symbol)
    longer = Rational(2 * den - 1, den)
    shorter = Rational(1, den)
    if symbol[0] == '>':
        return longer, shorter
    else:
        return shorter, longer


class HeaderContext(object):
    """
    Target of the info lines and directives of a header: the file
    defaults while processing the file header, or the tune under
    construction while processing a tune.
    """
    """
    ヘッダーの情報行とディレクティブの適用先。ファイルヘッダーの処理中
    はファイルの既定値、曲の処理中は作成中の曲です。
    """
    def __init__(self, kind, file_defaults, state=None):
        self.kind = kind
        self.file_defaults = file_defaults
        self.state: Optional[InterpreterState] = state

    def is_file_header(self) -> bool:
        return self.kind == 'file_header'

    @property
    def meta_text(self):
        return (self.file_defaults.meta_text if self.is_file_header()
                else self.state.tune.meta_text)

    @property
    def formatting(self):
        return (self.file_defaults.formatting if self.is_file_header()
                else self.state.tune.formatting)

    @property
    def parser_config(self):
        return (self.file_defaults.parser_config if self.is_file_header()
                else self.state.parser_config)

    @property
    def fonts(self):
        return (self.file_defaults.fonts if self.is_file_header()
                else self.state.fonts)


class TuneInterpreter(object):
    """
    Interpreter turning a syntax tree and its semantic data into tunes.

    Args:
        data(dict): mapping from node ids to SemanticData, as returned
            by :meth:`.SemanticAnalyzer.analyze`
        reporter(ErrorReporter, optional): receiver of diagnostics
        source(str, optional): source text, used for the absolute
            character offsets of the elements

    Attributes:
        states(list of InterpreterState): the states of the tunes
            interpreted so far
    """
    """
    構文木とその意味データを曲へ変換するインタープリター。

    Args:
        data(dict): ノード番号から SemanticData への対応表
            (:meth:`.SemanticAnalyzer.analyze` の返り値)
        reporter(ErrorReporter, optional): 診断メッセージの受け取り手
        source(str, optional): ソーステキスト。要素の絶対文字オフセット
            の計算に使われます。

    Attributes:
        states(list of InterpreterState): これまでに解釈された曲の状態
    """
    def __init__(self, data: Dict[int, SemanticData], reporter=None,
                 source=None):
        self.data = data
        self.reporter = reporter if reporter is not None else \
            ErrorReporter(source)
        self.line_offsets = LineOffsets(source)
        self.file_defaults = FileDefaults()
        self.processing_context = 'file_header'
        self.state: Optional[InterpreterState] = None
        self.states: List[InterpreterState] = []
        self.tunes: List[Tune] = []
        self.line_elements: List[dict] = []
        self.line_continued = False

    def interpret_file(self, file) -> List[Tune]:
        """ Interprets a FileStructure and returns the list of tunes. """
        self.visit(file)
        return self.tunes

    def report(self, message, node):
        self.reporter.report(message, node)

    def offset(self, pos) -> int:
        return self.line_offsets.to_absolute(*pos)

    def context(self) -> HeaderContext:
        if self.processing_context == 'file_header':
            return HeaderContext('file_header', self.file_defaults)
        return HeaderContext('tune_header', self.file_defaults, self.state)

    def visit(self, node):
        method = getattr(self, 'visit_' + node.kind, None)
        if method is not None:
            method(node)
        else:
            for child in node.children():
                self.visit(child)

    # ---- structure

    def visit_file_structure(self, node):
        self.processing_context = 'file_header'
        if node.header is not None:
            self.visit(node.header)
        for tune in node.tunes:
            self.visit(tune)

    def visit_tune(self, node):
        state = InterpreterState(self.data, self.file_defaults)
        self.state = state
        self.line_elements = []
        self.processing_context = 'tune_header'
        self.visit(node.header)
        if not state.voices:
            # registered on first use, so that a body starting with V:
            # does not leave an empty voice behind
            state.current_voice = 'default'
        for voice in state.voices.values():
            voice.reset_context(state.tune_defaults)
        state.needs_switch = True
        self.processing_context = 'tune_body'
        if node.body is not None:
            self.visit(node.body)
        self.tunes.append(state.finalize())
        self.states.append(state)
        self.state = None
        self.processing_context = 'file_header'

    def visit_comment(self, node):
        pass

    def visit_words_line(self, node):
        pass

    def visit_error(self, node):
        pass

    # ---- info lines

    def visit_info_line(self, node):
        sd = self.data.get(node.id)
        if sd is None:
            return
        if self.processing_context == 'tune_body':
            self.apply_body_info_line(sd, node)
            return
        ctx = self.context()
        if sd.type == 'voice':
            if ctx.is_file_header():
                self.report("Info line voice: is not allowed in file header",
                            node)
            else:
                self.state.register_voice(sd.data['id'],
                                          sd.data['properties'])
                if not self.state.current_voice:
                    self.state.current_voice = sd.data['id']
            return
        message = self.apply_info_line(sd, ctx)
        if message:
            self.report(message, node)

    visit_inline_field = visit_info_line

    def apply_info_line(self, sd, ctx) -> Optional[str]:
        if sd.type == 'title':
            title = sd.data
            if ctx.parser_config.get('titlecaps'):
                title = title.upper()
            if not ctx.is_file_header() and ctx.state.tune_title_set:
                ctx.meta_text['title'] += '\n' + title
            else:
                ctx.meta_text['title'] = title
                if not ctx.is_file_header():
                    ctx.state.tune_title_set = True
        elif sd.type in _META_TYPES:
            ctx.meta_text[sd.type] = sd.data
        elif sd.type == 'tempo':
            ctx.meta_text['tempo'] = sd.data
            if not ctx.is_file_header():
                ctx.state.tune_defaults.tempo = sd.data
        elif sd.type == 'note_length':
            if ctx.is_file_header():
                self.file_defaults.note_length = sd.data
            else:
                ctx.state.tune_defaults.note_length = sd.data
        elif sd.type == 'reference_number':
            pass
        elif ctx.is_file_header():
            return "Info line %s: is not allowed in file header" % sd.type
        elif sd.type == 'key':
            defaults = ctx.state.tune_defaults
            defaults.key = sd.data['keySignature']
            if sd.data.get('clef'):
                defaults.clef = sd.data['clef']
        elif sd.type == 'meter':
            ctx.state.tune_defaults.meter = sd.data
        return None

    def apply_body_info_line(self, sd, node):
        state = self.state
        if sd.type == 'voice':
            state.register_voice(sd.data['id'], sd.data['properties'])
            state.set_current_voice(sd.data['id'])
        elif sd.type == 'key':
            key = sd.data['keySignature']
            clef = sd.data.get('clef')
            voice = state.voice()
            voice.current_key = key
            if clef:
                voice.current_clef = clef
                state.tune_defaults.clef = clef
            state.tune_defaults.key = key
            state.push_element(key_element(self.offset(node.start),
                                           self.offset(node.end), key, clef))
        elif sd.type == 'meter':
            state.voice().current_meter = sd.data
            state.tune_defaults.meter = sd.data
            state.push_element(meter_element(self.offset(node.start),
                                             self.offset(node.end), sd.data))
        elif sd.type == 'note_length':
            state.tune_defaults.note_length = sd.data
        elif sd.type == 'tempo':
            state.tune_defaults.tempo = sd.data
        elif sd.type == 'title':
            state.tune.systems.append(
                TextSystem('subtitle', [{'text': sd.data}]))
            state.needs_switch = True
        elif sd.type in _META_TYPES:
            state.tune.meta_text[sd.type] = sd.data

    # ---- directives

    def visit_directive(self, node):
        sd = self.data.get(node.id)
        if sd is None:
            return
        message = self.apply_directive(sd, self.context())
        if message:
            self.report(message, node)

    def apply_directive(self, sd, ctx) -> Optional[str]:
        name = sd.type
        if name == 'abc-version':
            if ctx.is_file_header():
                self.file_defaults.version = sd.data
            else:
                ctx.state.tune.version = sd.data
        elif name in _META_DIRECTIVES:
            old = ctx.meta_text.get(name)
            ctx.meta_text[name] = sd.data if old is None else \
                old + '\n' + sd.data
        elif ctx.is_file_header() and name in _TUNE_ONLY_DIRECTIVES:
            return ("Directive %%%%%s is not allowed in file header "
                    "(requires tune context)" % name)
        elif name in _PARSER_CONFIG_FLAGS:
            ctx.parser_config[name] = bool(sd.data)
        elif name == 'papersize':
            ctx.parser_config[name] = str(sd.data)
        elif name == 'font':
            pass
        elif name == 'setfont':
            ctx.fonts[sd.data['number']] = sd.data['font']
        elif name in ('score', 'staves'):
            ctx.state.apply_score_layout(sd.data['staves'],
                                         sd.data['voiceAssignments'])
        elif name in _TEXT_SYSTEM_DIRECTIVES and not ctx.is_file_header():
            self.add_text_systems(name, sd.data)
        else:
            ctx.formatting[name] = sd.data
        return None

    def add_text_systems(self, name, text):
        state = self.state
        kind = 'center' if name == 'center' else 'text'
        lines = text.split('\n') if name == 'begintext' else [text]
        for line in lines:
            state.tune.systems.append(
                TextSystem(kind, split_font_segments(line, state.fonts)))
        state.needs_switch = True

    # ---- music lines

    def visit_music_line(self, node):
        self.line_elements = []
        self.line_continued = False
        for item in node.items:
            self.visit(item)
            if item.kind in ('note', 'chord', 'rest'):
                # notes separated by spaces are never beamed together
                self.state.voice().end_beam_group()
        voice = self.state.voice()
        voice.end_beam_group()
        voice.next_note_duration_multiplier = None
        if not (self.line_continued or
                self.state.parser_config.get('continueall')):
            self.state.needs_switch = True

    def visit_beam(self, node):
        for item in node.items:
            self.visit(item)
        self.state.voice().end_beam_group()

    def visit_line_continuation(self, node):
        self.line_continued = True

    def visit_system_break(self, node):
        pass

    def visit_voice_overlay(self, node):
        pass

    def emit(self, element):
        self.state.push_element(element)
        voice = self.state.voice()
        voice.last_lane = self.state.current_lane()
        self.line_elements.append(element)

    def pitch_of(self, note) -> dict:
        letter = note.letter
        pitch = LETTER_NUMBERS[letter.upper()]
        if letter.islower():
            pitch += OCTAVE_STEP
        if note.octave:
            pitch += OCTAVE_STEP * (note.octave.count("'") -
                                    note.octave.count(','))
        result = {'pitch': pitch, 'name': (note.accidental or '') + letter,
                  'verticalPos': pitch}
        if note.accidental:
            result['accidental'] = ACCIDENTALS[note.accidental]
        return result

    def compute_duration(self, rhythm, voice) -> Rational:
        duration = self.state.tune_defaults.note_length * \
            rhythm_fraction(rhythm)
        if voice.next_note_duration_multiplier is not None:
            duration = duration * voice.next_note_duration_multiplier
            voice.next_note_duration_multiplier = None
        if rhythm is not None and rhythm.broken:
            current, following = broken_rhythm_multipliers(rhythm.broken)
            duration = duration * current
            voice.next_note_duration_multiplier = following
        return duration

    def visit_note(self, node):
        self.emit_note(node, [self.pitch_of(node)], node.rhythm,
                       [node.tie])

    def visit_chord(self, node):
        if not node.notes:
            return
        pitches = [self.pitch_of(n) for n in node.notes]
        rhythm = node.rhythm
        if rhythm is None:
            rhythm = node.notes[0].rhythm
        ties = [node.tie or n.tie for n in node.notes]
        self.emit_note(node, pitches, rhythm, ties)

    def emit_note(self, node, pitches, rhythm, ties):
        voice = self.state.voice()
        duration = self.compute_duration(rhythm, voice)
        element = note_element(self.offset(node.start), self.offset(node.end),
                               float(duration), pitches)
        self.emit(element)
        voice.has_notes = True
        self.apply_pending(element, voice)
        self.apply_tuplet(element, voice)
        self.process_beaming(element, duration, voice, False)
        if voice.pending_start_slurs:
            pitches[0]['startSlur'] = voice.pending_start_slurs
            voice.open_slurs.extend(s['label']
                                    for s in voice.pending_start_slurs)
            voice.pending_start_slurs = []
        self.process_tie_end(pitches, voice)
        for pitch, tie in zip(pitches, ties):
            if tie:
                pitch['startTie'] = {}
                voice.pending_ties[pitch['pitch']] = pitch['startTie']

    def apply_pending(self, element, voice):
        if voice.pending_chord_symbols:
            element['chord'] = voice.pending_chord_symbols
            voice.pending_chord_symbols = []
        if voice.pending_grace_notes and 'pitches' in element:
            element['gracenotes'] = voice.pending_grace_notes
            voice.pending_grace_notes = []
        if voice.pending_decorations:
            element['decoration'] = voice.pending_decorations
            voice.pending_decorations = []

    def apply_tuplet(self, element, voice):
        if voice.tuplet_notes_left <= 0:
            return
        if voice.tuplet_notes_left == voice.tuplet_r:
            element['startTriplet'] = voice.tuplet_p
            element['tripletMultiplier'] = voice.tuplet_q / voice.tuplet_p
            element['tripletR'] = voice.tuplet_r
        voice.tuplet_notes_left -= 1
        if voice.tuplet_notes_left == 0:
            element['endTriplet'] = True

    def process_beaming(self, element, duration, voice, is_rest):
        if is_rest or duration >= Rational(1, 4):
            voice.end_beam_group()
        elif voice.potential_start_beam is None:
            voice.potential_start_beam = element
        else:
            voice.potential_end_beam = element

    def process_tie_end(self, pitches, voice):
        if not voice.pending_ties:
            return
        for pitch in pitches:
            if pitch['pitch'] in voice.pending_ties:
                pitch['endTie'] = True
                del voice.pending_ties[pitch['pitch']]
        if voice.pending_ties:
            # a tie to a different pitch still ends at this note
            pitches[0]['endTie'] = True
            voice.pending_ties.clear()

    def visit_rest(self, node):
        voice = self.state.voice()
        duration = self.compute_duration(node.rhythm, voice)
        rest_type = REST_TYPES.get(node.letter, 'rest')
        if node.letter == 'z' and self.is_whole_measure(duration, voice):
            rest_type = 'whole'
        element = rest_element(self.offset(node.start), self.offset(node.end),
                               float(duration), rest_type)
        self.emit(element)
        self.apply_pending(element, voice)
        self.apply_tuplet(element, voice)
        self.process_beaming(element, duration, voice, True)

    def is_whole_measure(self, duration, voice) -> bool:
        meter = voice.current_meter or self.state.tune_defaults.meter or \
            default_meter()
        total = Rational(0, 1)
        for value in meter['value']:
            total = total + value
        if not meter['value']:
            total = Rational(1, 1)
        if AbcConfig.exact_whole_rest:
            return duration == 1 and total <= 1
        else:
            return float(duration) == 1.0 and float(total) <= 1.0

    def visit_multi_measure_rest(self, node):
        voice = self.state.voice()
        count = node.count if node.count is not None else 1
        duration = self.state.tune_defaults.note_length * count
        element = rest_element(self.offset(node.start), self.offset(node.end),
                               float(duration), REST_TYPES[node.letter])
        element['rest']['text'] = count
        self.emit(element)
        voice.end_beam_group()

    def visit_bar_line(self, node):
        state = self.state
        voice = state.voice()
        if node.symbol == '[':
            lane = voice.last_lane
            last = lane.last_element() if lane is not None else None
            if last is not None and last['el_type'] == 'bar':
                last['startEnding'] = node.ending
            else:
                self.emit(bar_element(self.offset(node.start),
                                      self.offset(node.end), 'bar_invisible',
                                      node.ending))
            return
        element = bar_element(self.offset(node.start), self.offset(node.end),
                              BAR_TYPES.get(node.symbol, 'bar_thin'),
                              node.ending)
        self.emit(element)
        voice.end_beam_group()
        voice.next_note_duration_multiplier = None
        state.next_measure()

    # ---- items attached to the next note

    def visit_grace_group(self, node):
        voice = self.state.voice()
        graces = []
        for i, note in enumerate(node.notes):
            pitch = self.pitch_of(note)
            grace = {'pitch': pitch['pitch'], 'name': pitch['name'],
                     'duration': AbcConfig.grace_note_duration,
                     'verticalPos': pitch['verticalPos']}
            if 'accidental' in pitch:
                grace['accidental'] = pitch['accidental']
            if i == 0 and node.acciaccatura:
                grace['acciaccatura'] = True
            graces.append(grace)
        voice.pending_grace_notes = graces

    def visit_decoration(self, node):
        symbol = node.symbol
        if len(symbol) >= 2 and symbol[0] in '!+' and symbol[-1] == symbol[0]:
            name = symbol[1:-1]
            if name[:1] in ('^', '_'):
                name = name[1:]
        else:
            name = DECORATIONS.get(symbol)
        if name:
            self.state.voice().pending_decorations.append(name)

    def visit_annotation(self, node):
        text = node.text
        if text[:1] in CHORD_POSITIONS:
            position = CHORD_POSITIONS[text[0]]
            text = text[1:]
        else:
            position = 'default'
        self.state.voice().pending_chord_symbols.append(
            {'name': text, 'position': position})

    def visit_tuplet(self, node):
        voice = self.state.voice()
        p = node.p
        if p == 0:
            return
        q = node.q if node.q else TUPLET_Q.get(p, 2)
        r = node.r if node.r else p
        voice.tuplet_p = p
        voice.tuplet_q = q
        voice.tuplet_r = r
        voice.tuplet_notes_left = r

    def visit_slur(self, node):
        voice = self.state.voice()
        if node.symbol == ')':
            lane = voice.last_lane
            last = lane.last_element() if lane is not None else None
            if voice.has_notes and voice.open_slurs:
                label = voice.open_slurs.pop()
                if last is not None and last.get('pitches'):
                    last['pitches'][0].setdefault('endSlur', []).append(
                        label)
            elif voice.pending_start_slurs:
                voice.pending_start_slurs.pop()
            return
        slur = {'label': voice.new_slur_label()}
        if node.symbol == '.(':
            slur['style'] = 'dotted'
        voice.pending_start_slurs.append(slur)

    # ---- lyrics

    def visit_lyric_line(self, node):
        if self.state is None:
            return
        notes = [el for el in self.line_elements if el.get('pitches')]
        i = 0
        last = None
        for token in node.tokens:
            if token in ('-', '_'):
                if last is not None:
                    last['divider'] = token
            elif token == '*':
                i += 1
                last = None
            elif token in ('|', '~', '\\-'):
                pass
            else:
                if i >= len(notes):
                    break
                last = {'syllable': token, 'divider': ' '}
                notes[i].setdefault('lyric', []).append(last)
                i += 1


def interpret(file, data, source=None, reporter=None) -> ParseResult:
    """
    Interprets a syntax tree with its semantic data.

    Args:
        file(FileStructure): the syntax tree returned by
            :func:`abcscore.parser.parse`
        data(dict): semantic data returned by :func:`abcscore.analyze`
        source(str, optional): source text, used for absolute character
            offsets
        reporter(ErrorReporter, optional): receiver of diagnostics

    Returns:
        ParseResult
    """
    """
    構文木をその意味データとともに解釈します。

    Args:
        file(FileStructure): :func:`abcscore.parser.parse` が返す構文木
        data(dict): :func:`abcscore.analyze` が返す意味データ
        source(str, optional): 絶対文字オフセットの計算に使われる
            ソーステキスト
        reporter(ErrorReporter, optional): 診断メッセージの受け取り手

    Returns:
        ParseResult
    """
    reporter = reporter if reporter is not None else ErrorReporter(source)
    interpreter = TuneInterpreter(data, reporter, source)
    tunes = interpreter.interpret_file(file)
    return ParseResult(tunes, reporter.diagnostics)


def interpret_abc(text) -> ParseResult:
    """
    Parses, analyzes and interprets ABC text.

    Args:
        text(str): ABC text

    Returns:
        ParseResult

    Examples:
        >>> result = interpret_abc('X:1\\nT:Scale\\nK:C\\nCDEF|\\n')
        >>> result.tunes[0].meta_text['title']
        'Scale'
    """
    """
    ABC テキストを構文解析、意味解析、解釈します。

    Args:
        text(str): ABC テキスト

    Returns:
        ParseResult
    """
    reporter = ErrorReporter(text)
    file = parse(text)
    data = SemanticAnalyzer(reporter).analyze(file)
    return interpret(file, data, text, reporter)
