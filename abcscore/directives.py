# coding:utf-8
"""
This module defines the semantic analysis of '%%' directives (and the
equivalent 'I:' fields): fonts, formatting flags, numbers, measurements,
text blocks, staff layouts, MIDI commands and metadata.
"""
"""
このモジュールには、'%%' ディレクティブ (および同等な 'I:' フィールド)
の意味解析が定義されています。対象はフォント、書式フラグ、数値、寸法、
テキストブロック、譜表レイアウト、MIDI コマンド、メタデータです。
"""
# Copyright (C) 2025  Satoshi Nishimura

import re
from typing import Callable, Dict, List, Optional
from abcscore.utils import Rational, SemanticData, int_preferred, \
    strip_quotes
from abcscore.parser import tokenize_value, ValueToken
from abcscore.gm.drums import drum_number

__all__ = ['analyze_directive', 'parse_font', 'parse_staff_layout',
           'FONTS_WITH_BOX', 'FONTS_WITHOUT_BOX', 'FLAG_DIRECTIVES']


FONTS_WITH_BOX = ('titlefont', 'gchordfont', 'composerfont', 'subtitlefont',
                  'voicefont', 'partsfont', 'textfont', 'annotationfont',
                  'historyfont', 'infofont', 'measurefont', 'barlabelfont',
                  'barnumberfont', 'barnumfont')
FONTS_WITHOUT_BOX = ('tempofont', 'footerfont', 'headerfont', 'tripletfont',
                     'vocalfont', 'repeatfont', 'wordsfont', 'tablabelfont',
                     'tabnumberfont', 'tabgracefont')
FLAG_DIRECTIVES = ('bagpipes', 'flatbeams', 'jazzchords', 'accentAbove',
                   'germanAlphabet', 'landscape', 'titlecaps', 'titleleft',
                   'measurebox', 'continueall', 'endtext', 'beginps',
                   'endps', 'font', 'nobarcheck')
_IDENTIFIER_DIRECTIVES = ('papersize', 'map', 'playtempo', 'auquality',
                          'continuous', 'voicecolor')
_BOOLEAN_DIRECTIVES = ('graceslurs', 'staffnonote', 'printtempo',
                       'partsbox', 'freegchord')
_NUMBER_DIRECTIVES = ('lineThickness', 'voicescale', 'scale',
                      'fontboxpadding')
_POSITION_DIRECTIVES = ('vocal', 'dynamic', 'gchord', 'ornament', 'volume')
_MEASUREMENT_DIRECTIVES = (
    'botmargin', 'botspace', 'composerspace', 'indent', 'leftmargin',
    'linesep', 'musicspace', 'partsspace', 'pageheight', 'pagewidth',
    'rightmargin', 'stafftopmargin', 'staffsep', 'staffwidth',
    'subtitlespace', 'sysstaffsep', 'systemsep', 'textspace', 'titlespace',
    'topmargin', 'topspace', 'vocalspace', 'wordsspace', 'vskip')
_TEXT_DIRECTIVES = ('text', 'center', 'abc-copyright', 'abc-creator',
                    'abc-edited-by', 'abc-version', 'abc-charset')
_POSITIONS = ('auto', 'above', 'below', 'hidden')
_FONT_MODIFIERS = ('bold', 'italic', 'underline')
_UTF8_MARKERS = ('utf', 'utf8', 'utf-8')

_NUMBER_RE = re.compile(r'[-+]?(?:\d+\.?\d*|\.\d+)')
_MEASUREMENT_RE = re.compile(r'([-+]?(?:\d+\.?\d*|\.\d+))(pt|in|cm|mm)')

Report = Callable[[str], object]


def _is_number(token) -> bool:
    return token.kind == 'word' and bool(_NUMBER_RE.fullmatch(token.text))


def _is_identifier(token) -> bool:
    return token.kind == 'word' and not _is_number(token)


def _number(text):
    return int_preferred(float(text))


def _warn_extra(name, tokens, report, limit=1):
    if len(tokens) > limit:
        report('Directive "%s" expects only one parameter, '
               'ignoring extra parameters' % name)


def parse_font(name, tokens, report, supports_box=True) -> Optional[dict]:
    """
    Parses the parameters of a font directive. Three forms are accepted:
    '* size [box]' and 'size [box]' (changing only the size), and
    'face... [utf8] [size] [bold] [italic] [underline] [box]'.

    Args:
        name(str): directive name (used in messages)
        tokens(list of ValueToken): the parameters
        report(function): called with a message for each problem
        supports_box(bool, optional): whether 'box' is allowed

    Returns:
        A dict with some of the keys 'face', 'size', 'weight', 'style',
        'decoration' and 'box', or None on error.
    """
    """
    フォントディレクティブのパラメータを解析します。受け付ける形式は
    '* サイズ [box]'、'サイズ [box]' (サイズのみを変更)、および
    '書体名... [utf8] [サイズ] [bold] [italic] [underline] [box]'
    の3つです。

    Args:
        name(str): ディレクティブ名 (メッセージ中で使用)
        tokens(list of ValueToken): パラメータ
        report(function): 問題ごとにメッセージを引数として呼ばれる関数
        supports_box(bool, optional): 'box' が許されるかどうか

    Returns:
        'face', 'size', 'weight', 'style', 'decoration', 'box' のうち
        いくつかのキーを持つ dict。エラーのときは None。
    """
    if not tokens:
        report('Directive "%s" requires font parameters' % name)
        return None
    if tokens[0].kind == 'word' and tokens[0].text == '*':
        if len(tokens) < 2:
            report("Expected font size number after *")
            return None
        return _parse_size_only(name, tokens[1:], report, supports_box)
    if _is_number(tokens[0]):
        if not (len(tokens) > 1 and
                tokens[1].text.lower() in _FONT_MODIFIERS):
            return _parse_size_only(name, tokens, report, supports_box)
    return _parse_full_font(name, tokens, report, supports_box)


def _parse_size_only(name, tokens, report, supports_box):
    if not _is_number(tokens[0]):
        report("Expected number for font size")
        return None
    result = {'size': _number(tokens[0].text)}
    if len(tokens) > 1:
        if tokens[1].text.lower() == 'box':
            if supports_box:
                result['box'] = True
            else:
                report('Font type "%s" does not support "box" parameter'
                       % name)
        if len(tokens) > 2:
            report("Extra parameters in font definition")
    return result


def _parse_full_font(name, tokens, report, supports_box):
    face = []
    size = None
    weight, style, decoration = 'normal', 'normal', 'none'
    box = False
    i = 0
    while i < len(tokens):
        word = tokens[i].text.lower()
        if (word in _UTF8_MARKERS or word in _FONT_MODIFIERS or
                word == 'box' or _is_number(tokens[i])):
            break
        face.append(tokens[i].value)
        i += 1
    if i < len(tokens) and tokens[i].text.lower() in _UTF8_MARKERS:
        i += 1
    if i < len(tokens) and _is_number(tokens[i]):
        size = _number(tokens[i].text)
        i += 1
    while i < len(tokens) and tokens[i].text.lower() in _FONT_MODIFIERS:
        word = tokens[i].text.lower()
        if word == 'bold':
            weight = 'bold'
        elif word == 'italic':
            style = 'italic'
        else:
            decoration = 'underline'
        i += 1
    if i < len(tokens) and tokens[i].text.lower() == 'box':
        if supports_box:
            box = True
        else:
            report('Font type "%s" does not support "box" parameter' % name)
        i += 1
    if i < len(tokens):
        report("Extra tokens")

    result = {'weight': weight, 'style': style, 'decoration': decoration}
    face = strip_quotes(' '.join(face))
    if face:
        result['face'] = face
    if size is not None:
        result['size'] = size
    if box:
        result['box'] = True
    if (not face and not size and weight == 'normal' and
            style == 'normal' and decoration == 'none' and not box):
        report("Font directive has no meaningful parameters")
        return None
    return result


def _font(name, tokens, report):
    font = parse_font(name, tokens, report, name in FONTS_WITH_BOX)
    return None if font is None else SemanticData(name, font)


def _setfont(name, tokens, report):
    m = re.fullmatch(r'setfont-([1-9])', name, re.IGNORECASE)
    if not m:
        report('Invalid setfont directive format. Expected %%%%setfont-N '
               'where N is 1-9, got "%s"' % name)
        return None
    if not tokens:
        report('Directive "%s" requires font parameters' % name)
        return None
    font = _parse_full_font(name, tokens, report, False)
    if font is None:
        return None
    return SemanticData('setfont', {'number': int(m.group(1)), 'font': font})


def _flag(name, tokens, report):
    if tokens:
        report('Directive "%s" expects no parameters, but got %d'
               % (name, len(tokens)))
    return SemanticData(name, True)


def _identifier(name, tokens, report):
    if not tokens:
        report('Directive "%s" expects an identifier parameter' % name)
        return None
    if not _is_identifier(tokens[0]):
        report('Directive "%s" expects an identifier' % name)
        return None
    _warn_extra(name, tokens, report)
    return SemanticData(name, tokens[0].text)


def _boolean(name, tokens, report):
    if not tokens:
        report('Directive "%s" expects a boolean parameter' % name)
        return None
    token = tokens[0]
    if _is_identifier(token):
        word = token.text.lower()
        if word not in ('true', 'false'):
            report('Directive "%s" expects true/false or 0/1, got "%s"'
                   % (name, token.text))
            return None
        value = word == 'true'
    elif _is_number(token):
        num = _number(token.text)
        if num not in (0, 1):
            report('Directive "%s" expects 0 or 1, got %s' % (name, num))
            return None
        value = num == 1
    else:
        report('Directive "%s" expects a boolean (true/false or 0/1)' % name)
        return None
    _warn_extra(name, tokens, report)
    return SemanticData(name, value)


def _number_directive(name, tokens, report, minimum=None, maximum=None):
    if not tokens:
        report('Directive "%s" expects a number parameter' % name)
        return None
    if not _is_number(tokens[0]):
        report('Directive "%s" expects a number' % name)
        return None
    num = _number(tokens[0].text)
    if minimum is not None and num < minimum:
        report("Number %s is below minimum %s" % (num, minimum))
        return None
    if maximum is not None and num > maximum:
        report("Number %s is above maximum %s" % (num, maximum))
        return None
    _warn_extra(name, tokens, report)
    return SemanticData(name, num)


def _stretchlast(name, tokens, report):
    if not tokens:
        return SemanticData(name, 1)
    text = tokens[0].text
    if text == 'false':
        return SemanticData(name, 0)
    if text == 'true':
        return SemanticData(name, 1)
    if _is_number(tokens[0]):
        num = _number(text)
        if not 0 <= num <= 1:
            report("stretchlast value must be between 0 and 1 (received %s)"
                   % num)
            return None
        return SemanticData(name, num)
    report('Directive "%s" expects false, true, or a number between 0 '
           'and 1 (received %s)' % (name, text))
    return None


def _position(name, tokens, report):
    if not tokens:
        report('Directive "%s" expects a position parameter '
               '(auto, above, below, hidden)' % name)
        return None
    if not _is_identifier(tokens[0]):
        report('Directive "%s" expects a position identifier' % name)
        return None
    word = tokens[0].text.lower()
    if word not in _POSITIONS:
        report('Invalid position "%s", expected one of: %s'
               % (tokens[0].text, ', '.join(_POSITIONS)))
        return None
    _warn_extra(name, tokens, report)
    return SemanticData(name, word)


def _measurement(name, tokens, report):
    if not tokens:
        report('Directive "%s" expects a measurement parameter' % name)
        return None
    m = _MEASUREMENT_RE.fullmatch(tokens[0].text)
    if m:
        data = {'value': _number(m.group(1)), 'unit': m.group(2)}
    elif _is_number(tokens[0]):
        data = {'value': _number(tokens[0].text)}
    else:
        report('Directive "%s" expects a measurement (number with optional '
               'unit)' % name)
        return None
    _warn_extra(name, tokens, report)
    return SemanticData(name, data)


def _sep(name, tokens, report):
    result = {}
    for key, token in zip(('above', 'below', 'length'), tokens):
        if not _is_number(token):
            report('Directive "sep" expects number parameters')
            continue
        result[key] = _number(token.text)
    if len(tokens) > 3:
        report('Directive "sep" expects at most 3 parameters, '
               'ignoring extra parameters')
    return SemanticData(name, result)


def _newpage(name, tokens, report):
    if not tokens:
        return SemanticData(name, None)
    if not _is_number(tokens[0]):
        report('Directive "%s" expects an optional number parameter' % name)
        return None
    _warn_extra(name, tokens, report)
    return SemanticData(name, _number(tokens[0].text))


class _StaffLayoutBuilder(object):
    """ Accumulates the staves of a %%score or %%staves directive. """
    def __init__(self):
        self.staves: List[dict] = []
        self.voices: Dict[str, dict] = {}
        self.continue_bar = False
        self.last_voice = None

    def last_staff(self):
        if self.last_voice is None:
            return None
        return self.staves[self.voices[self.last_voice]['staffNum']]

    def add_voice(self, voice_id, new_staff, bracket, brace):
        if new_staff or not self.staves:
            self.staves.append({'index': len(self.staves), 'numVoices': 0})
        staff = self.staves[-1]
        if bracket is not None and 'bracket' not in staff:
            staff['bracket'] = bracket
        if brace is not None and 'brace' not in staff:
            staff['brace'] = brace
        if self.continue_bar:
            staff['connectBarLines'] = 'end'
        if voice_id not in self.voices:
            self.voices[voice_id] = {'staffNum': staff['index'],
                                     'index': staff['numVoices']}
            staff['numVoices'] += 1

    def add_continue_bar(self):
        self.continue_bar = True
        staff = self.last_staff()
        if staff is not None:
            kind = 'start'
            if staff['index'] > 0:
                prev = self.staves[staff['index'] - 1]
                if prev.get('connectBarLines') in ('start', 'continue'):
                    kind = 'continue'
            staff['connectBarLines'] = kind


def parse_staff_layout(tokens, report, auto_connect_bars) -> dict:
    """
    Parses the voice grouping of a %%score or %%staves directive.
    Parentheses put voices on the same staff, brackets and braces group
    staves, and '|' connects bar lines between adjacent staves.

    Args:
        tokens(list of ValueToken): the parameters
        report(function): called with a message for each problem
        auto_connect_bars(bool): if True (%%staves), bar lines are
            connected across all the staves

    Returns:
        A dict {'staves': list of staff dicts, 'voiceAssignments': dict
        mapping voice IDs to {'staffNum', 'index'}}.
    """
    """
    %%score または %%staves ディレクティブの声部のまとめ方を解析します。
    丸括弧は声部を同じ譜表に置き、角括弧と波括弧は譜表をまとめ、'|' は
    隣り合う譜表の間で小節線をつなげます。

    Args:
        tokens(list of ValueToken): パラメータ
        report(function): 問題ごとにメッセージを引数として呼ばれる関数
        auto_connect_bars(bool): True (%%staves) ならば、すべての譜表に
            わたって小節線をつなげます。

    Returns:
        dict {'staves': 譜表の dict のリスト, 'voiceAssignments': 声部 ID
        から {'staffNum', 'index'} への dict}
    """
    builder = _StaffLayoutBuilder()
    # open and just-opened flags for '(', '[' and '{'
    opened = {'(': False, '[': False, '{': False}
    just = {'(': False, '[': False, '{': False}
    names = {'(': 'parenthes', '[': 'bracket', '{': 'brace'}
    closers = {')': '(', ']': '[', '}': '{'}
    for token in tokens:
        text = token.text
        if token.kind == 'punct' and text in opened:
            if opened[text]:
                report("Cannot nest %ss in score/staves directive"
                       % ('parenthese' if text == '(' else names[text]))
            opened[text] = just[text] = True
        elif token.kind == 'punct' and text in closers:
            opener = closers[text]
            if not opened[opener] or just[opener]:
                report("Unexpected close %s in score/staves directive"
                       % ('parenthesis' if text == ')' else names[opener]))
            opened[opener] = False
            staff = builder.last_staff()
            if staff is not None and text == ']':
                staff['bracket'] = 'end'
            elif staff is not None and text == '}':
                staff['brace'] = 'end'
        elif token.kind == 'punct' and text == '|':
            builder.add_continue_bar()
        elif token.kind == 'word':
            new_staff = not opened['('] or just['(']
            bracket = ('start' if just['['] else
                       'continue' if opened['['] else None)
            brace = ('start' if just['{'] else
                     'continue' if opened['{'] else None)
            builder.add_voice(text, new_staff, bracket, brace)
            just = dict.fromkeys(just, False)
            builder.continue_bar = False
            builder.last_voice = text
            if auto_connect_bars:
                builder.add_continue_bar()
        else:
            report("Score/staves directive should only contain voice IDs "
                   "and grouping symbols")
    if opened['(']:
        report("Unclosed parenthesis in score/staves directive")
    if opened['[']:
        report("Unclosed bracket in score/staves directive")
    if opened['{']:
        report("Unclosed brace in score/staves directive")
    return {'staves': builder.staves, 'voiceAssignments': builder.voices}


def _staves(name, tokens, report):
    return SemanticData(name, parse_staff_layout(tokens, report,
                                                 name == 'staves'))


def _header_footer(name, value, report):
    text = strip_quotes(value.strip())
    if not text:
        report('Directive "%s" expects a text parameter' % name)
        return None
    parts = text.split('\t')
    if len(parts) > 3:
        report("Too many tabs in %s: %d sections found (expected 1-3)"
               % (name, len(parts)))
    if len(parts) == 1:
        data = {'left': '', 'center': parts[0], 'right': ''}
    elif len(parts) == 2:
        data = {'left': parts[0], 'center': parts[1], 'right': ''}
    else:
        data = {'left': parts[0], 'center': parts[1], 'right': parts[2]}
    return SemanticData(name, data)


_MIDI_SIGNATURES = {}
for _cmd in ('nobarlines', 'barlines', 'beataccents', 'nobeataccents',
             'droneon', 'droneoff', 'drumon', 'drumoff', 'fermatafixed',
             'fermataproportional', 'gchordon', 'gchordoff', 'controlcombo',
             'temperamentnormal', 'noportamento'):
    _MIDI_SIGNATURES[_cmd] = ''
for _cmd in ('gchord', 'ptstress', 'beatstring'):
    _MIDI_SIGNATURES[_cmd] = 's'
for _cmd in ('bassvol', 'chordvol', 'c', 'channel', 'beatmod',
             'deltaloudness', 'drumbars', 'gracedivider',
             'makechordchannels', 'randomchordattack', 'chordattack',
             'stressmodel', 'transpose', 'rtranspose', 'vol', 'volinc',
             'gchordbars'):
    _MIDI_SIGNATURES[_cmd] = 'i'
for _cmd in ('ratio', 'snt', 'bendvelocity', 'pitchbend', 'control',
             'temperamentlinear'):
    _MIDI_SIGNATURES[_cmd] = 'ii'
_MIDI_SIGNATURES.update({'beat': 'iiii', 'drone': 'iiiii',
                         'portamento': 'onoff', 'program': 'program',
                         'expand': 'fraction', 'grace': 'fraction',
                         'trim': 'fraction', 'bassprog': 'prog',
                         'chordprog': 'prog', 'drum': 'strings',
                         'chordname': 'strings', 'drummap': 'drummap'})
_COUNT_WORDS = {2: 'two', 4: 'four', 5: 'five'}


def _is_int(token) -> bool:
    return token.kind == 'word' and bool(re.fullmatch(r'-?\d+', token.text))


def _midi(name, tokens, report):
    if not tokens:
        report("MIDI directive requires a command")
        return None
    if not _is_identifier(tokens[0]):
        report("MIDI directive requires a command name")
        return None
    command = tokens[0].text.lower()
    args = tokens[1:]
    signature = _MIDI_SIGNATURES.get(command)
    if signature is None:
        report("Unknown MIDI command: %s" % command)
        return None
    prefix = "MIDI command '%s' expects" % command
    params = []
    if signature == '':
        if args:
            report("%s no parameters" % prefix)
            return None
    elif signature == 's':
        if len(args) != 1:
            report("%s one string parameter" % prefix)
            return None
        params.append(args[0].value)
    elif signature == 'i':
        if len(args) != 1:
            report("%s one integer parameter" % prefix)
            return None
        if not _is_int(args[0]):
            report("%s integer parameter" % prefix)
            return None
        params.append(int(args[0].text))
    elif signature in ('ii', 'iiii', 'iiiii'):
        count = _COUNT_WORDS[len(signature)]
        if len(args) != len(signature):
            report("%s %s parameters" % (prefix, count))
            return None
        if not all(_is_int(t) for t in args):
            report("%s %s integer parameters" % (prefix, count))
            return None
        params.extend(int(t.text) for t in args)
    elif signature == 'onoff':
        if len(args) != 2:
            report("%s two parameters" % prefix)
            return None
        if args[0].text not in ('on', 'off'):
            report("%s 'on' or 'off' as first parameter" % prefix)
            return None
        if not _is_int(args[1]):
            report("%s one string and one integer parameter" % prefix)
            return None
        params.extend([args[0].text, int(args[1].text)])
    elif signature == 'program':
        if not 1 <= len(args) <= 2:
            report("%s one or two parameters" % prefix)
            return None
        if not all(_is_int(t) for t in args):
            report("%s integer parameter" % prefix)
            return None
        params.extend(int(t.text) for t in args)
    elif signature == 'fraction':
        if len(args) != 1:
            report("%s fraction parameter (e.g., 3/4)" % prefix)
            return None
        try:
            params.append(Rational.from_string(args[0].text))
        except ValueError:
            report("%s fraction parameter (e.g., 3/4)" % prefix)
            return None
    elif signature == 'prog':
        if not 1 <= len(args) <= 2:
            report("%s one or two parameters" % prefix)
            return None
        if not _is_int(args[0]):
            report("%s integer program number" % prefix)
            return None
        params.append(int(args[0].text))
        if len(args) == 2:
            arg = args[1]
            if (arg.kind != 'kv' or arg.key != 'octave' or
                    not re.fullmatch(r'-?\d+', arg.value)):
                report("%s octave=N format" % prefix)
                return None
            octave = int(arg.value)
            if octave < -1:
                report("Octave value must be between -1 and 3 "
                       "(got %d, clamping to -1)" % octave)
                octave = -1
            elif octave > 3:
                report("Octave value must be between -1 and 3 "
                       "(got %d, clamping to 3)" % octave)
                octave = 3
            params.append(octave)
    elif signature == 'strings':
        if len(args) < 2:
            report("%s string parameter and at least one integer "
                   "parameter" % prefix)
            return None
        if args[0].kind not in ('word', 'string'):
            report("%s string parameter" % prefix)
            return None
        if not all(_is_int(t) for t in args[1:]):
            report("%s integer parameters after string" % prefix)
            return None
        params.append(args[0].value)
        params.extend(int(t.text) for t in args[1:])
    else:
        if not 2 <= len(args) <= 3 or not _is_int(args[-1]):
            report("MIDI drummap expects note name and MIDI number")
            return None
        params.append(''.join(t.text for t in args[:-1]))
        params.append(int(args[-1].text))
    return SemanticData(name, {'command': command, 'params': params})


def _percmap(name, tokens, report):
    if not 2 <= len(tokens) <= 3:
        report("percmap directive expects 2 or 3 parameters: abc-note, "
               "drum-sound, [note-head]")
        return None
    note, sound_token = tokens[0].text, tokens[1]
    if _is_int(sound_token):
        sound = int(sound_token.text)
        if not 35 <= sound <= 81:
            report("MIDI percussion sound must be between 35 and 81 "
                   "(got %d)" % sound)
            return None
    else:
        sound = drum_number(sound_token.text)
        if sound is None:
            report("Unknown drum sound name: %s" % sound_token.text)
            return None
    data = {'note': note, 'sound': sound}
    if len(tokens) == 3:
        data['noteHead'] = tokens[2].text
    return SemanticData(name, data)


def _deco(name, tokens, report):
    if not tokens:
        report("deco directive requires a decoration name")
        return None
    if not _is_identifier(tokens[0]):
        report("deco directive expects decoration name as first parameter")
        return None
    data = {'name': tokens[0].text}
    if len(tokens) > 1:
        data['definition'] = ' '.join(t.value for t in tokens[1:])
    report("Decoration redefinition is parsed but not fully implemented")
    return SemanticData(name, data)


_HANDLERS = {}
for _name in FONTS_WITH_BOX + FONTS_WITHOUT_BOX:
    _HANDLERS[_name] = _font
for _name in FLAG_DIRECTIVES:
    _HANDLERS[_name] = _flag
for _name in _IDENTIFIER_DIRECTIVES:
    _HANDLERS[_name] = _identifier
for _name in _BOOLEAN_DIRECTIVES:
    _HANDLERS[_name] = _boolean
for _name in _NUMBER_DIRECTIVES:
    _HANDLERS[_name] = _number_directive
for _name in _POSITION_DIRECTIVES:
    _HANDLERS[_name] = _position
for _name in _MEASUREMENT_DIRECTIVES:
    _HANDLERS[_name] = _measurement
_HANDLERS.update({
    'stretchlast': _stretchlast,
    'barsperstaff': lambda n, t, r: _number_directive(n, t, r, minimum=1),
    'measurenb': lambda n, t, r: _number_directive(n, t, r, minimum=0),
    'barnumbers': lambda n, t, r: _number_directive(n, t, r, minimum=0),
    'setbarnb': lambda n, t, r: _number_directive(n, t, r, minimum=1),
    'sep': _sep,
    'newpage': _newpage,
    'staves': _staves,
    'score': _staves,
    'midi': _midi,
    'percmap': _percmap,
    'deco': _deco,
})


def analyze_directive(node, reporter) -> Optional[SemanticData]:
    """
    Classifies a directive node.

    Args:
        node(Directive): the directive
        reporter(ErrorReporter): receiver of diagnostics

    Returns:
        SemanticData, or None if the directive is unknown or its value is
        malformed (a diagnostic has been reported in that case).
    """
    """
    ディレクティブのノードを分類します。

    Args:
        node(Directive): ディレクティブ
        reporter(ErrorReporter): 診断メッセージの受け取り手

    Returns:
        SemanticData。ディレクティブが不明であるか値が不正であるときは
        None (その場合は診断メッセージが報告されています)。
    """
    name = node.name

    def report(message):
        reporter.report(message, node)

    if re.fullmatch(r'setfont-\d+', name, re.IGNORECASE):
        return _setfont(name, tokenize_value(node.value), report)
    if name in _TEXT_DIRECTIVES or name == 'begintext':
        if not node.value.strip() and name != 'begintext':
            report('Directive "%s" expects a text parameter' % name)
            return None
        return SemanticData(name, node.value)
    if name in ('header', 'footer'):
        return _header_footer(name, node.value, report)
    handler = _HANDLERS.get(name)
    if handler is None:
        report("Unknown directive: %s" % name)
        return None
    tokens: List[ValueToken] = tokenize_value(node.value)
    return handler(name, tokens, report)
