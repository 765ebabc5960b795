# coding:utf-8
"""
This module defines the lookup tables of ABC notation used by the
analyzer and the interpreter.
"""
"""
このモジュールには、アナライザーとインタープリターが用いる ABC 記譜法の
参照テーブルが定義されています。
"""
# Copyright (C) 2025  Satoshi Nishimura

__all__ = ['LETTER_NUMBERS', 'OCTAVE_STEP', 'ACCIDENTALS', 'BAR_TYPES',
           'REST_TYPES', 'DECORATIONS', 'TUPLET_Q', 'CLEFS', 'MODES',
           'MODE_FIFTHS_OFFSET', 'SHARP_ORDER', 'FLAT_ORDER',
           'KEY_ROOT_FIFTHS', 'CHORD_POSITIONS']


LETTER_NUMBERS = {'C': 0, 'D': 1, 'E': 2, 'F': 3, 'G': 4, 'A': 5, 'B': 6}
"""
Diatonic staff-position numbers of the upper-case note letters.
Lower-case letters are one octave (OCTAVE_STEP) higher.
"""
"""
大文字の音名の全音階的な譜表位置番号。
小文字はオクターブ (OCTAVE_STEP) だけ高くなります。
"""

OCTAVE_STEP = 7
""

ACCIDENTALS = {
    '^': 'sharp',
    '_': 'flat',
    '=': 'natural',
    '^^': 'dblsharp',
    '__': 'dblflat',
}
""

BAR_TYPES = {
    '|': 'bar_thin',
    '||': 'bar_thin_thin',
    '|:': 'bar_left_repeat',
    ':|': 'bar_right_repeat',
    '::': 'bar_dbl_repeat',
    ':|:': 'bar_dbl_repeat',
    ':||:': 'bar_dbl_repeat',
    '[|': 'bar_thick_thin',
    '|]': 'bar_thin_thick',
}
"""
Bar types by the exact bar-line symbol. Any other symbol is a thin bar.
"""
"""
小節線記号に対応する小節線の種類。それ以外の記号は細い小節線になります。
"""

REST_TYPES = {
    'z': 'rest',
    'x': 'invisible',
    'y': 'spacer',
    'Z': 'multimeasure',
    'X': 'invisible-multimeasure',
}
""

DECORATIONS = {
    '.': 'staccato',
    'u': 'upbow',
    'v': 'downbow',
    '~': 'irishroll',
    'H': 'fermata',
    'J': 'slide',
    'L': 'accent',
    'M': 'mordent',
    'O': 'coda',
    'P': 'pralltriller',
    'R': 'roll',
    'S': 'segno',
    'T': 'trill',
}
"""
Decorations written as a single character in front of a note.
"""
"""
音符の前に1文字で書かれる装飾記号。
"""

TUPLET_Q = {2: 3, 3: 2, 4: 3, 5: 2, 6: 2, 7: 2, 8: 3, 9: 2}
"""
Default 'q' of a tuplet '(p:q:r' for each 'p' (2 for the others).
"""
"""
連符 '(p:q:r' の 'p' ごとの 'q' の既定値 (それ以外は 2)。
"""

CLEFS = {
    'treble': ('treble', 0),
    'treble+8': ('treble+8', 0),
    'treble-8': ('treble-8', 0),
    'bass': ('bass', -12),
    'bass+8': ('bass+8', -12),
    'bass-8': ('bass-8', -12),
    'alto': ('alto', -6),
    'alto+8': ('alto+8', -6),
    'alto-8': ('alto-8', -6),
    'tenor': ('tenor', -8),
    'tenor+8': ('tenor+8', -8),
    'tenor-8': ('tenor-8', -8),
    'perc': ('perc', 0),
    'none': ('none', 0),
}
"""
Clef type and vertical position for each clef name.
"""
"""
音部記号名ごとの種類と垂直位置。
"""

MODES = {
    'major': '', 'maj': '', 'ionian': '', 'ion': '',
    'minor': 'm', 'min': 'm', 'm': 'm', 'aeolian': 'm', 'aeo': 'm',
    'dorian': 'Dor', 'dor': 'Dor',
    'phrygian': 'Phr', 'phr': 'Phr',
    'lydian': 'Lyd', 'lyd': 'Lyd',
    'mixolydian': 'Mix', 'mix': 'Mix',
    'locrian': 'Loc', 'loc': 'Loc',
}
"""
Mode codes for the mode names accepted in K: fields (lower-cased).
"""
"""
K: フィールドで受け付ける旋法名 (小文字化したもの) に対応する旋法コード。
"""

MODE_FIFTHS_OFFSET = {'': 0, 'm': -3, 'Dor': -2, 'Phr': -4, 'Lyd': 1,
                      'Mix': -1, 'Loc': -5}
"""
Offset on the circle of fifths of each mode relative to major.
"""
"""
長調に対する各旋法の五度圏上のずれ。
"""

KEY_ROOT_FIFTHS = {'C': 0, 'G': 1, 'D': 2, 'A': 3, 'E': 4, 'B': 5,
                   'F': -1}
""

SHARP_ORDER = (('f', 10), ('c', 7), ('g', 11), ('d', 8), ('a', 5),
               ('e', 9), ('b', 6))
"""
Order of sharps in key signatures with their treble-staff positions.
"""
"""
調号におけるシャープの順序と、ト音譜表での位置。
"""

FLAT_ORDER = (('b', 6), ('e', 9), ('a', 5), ('d', 8), ('g', 4),
              ('c', 7), ('f', 3))
""

CHORD_POSITIONS = {'^': 'above', '_': 'below', '<': 'left', '>': 'right',
                   '@': 'default'}
"""
Positions of annotations selected by their leading character.
"""
"""
先頭の文字によって選ばれる注釈文字列の位置。
"""
