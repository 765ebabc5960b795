# coding:utf-8
"""
This module defines the percussion sound names accepted by the
``%%percmap`` directive and the General MIDI note numbers assigned to them.

    - ``DRUMS``: A map (dict) from note numbers (int) to sound names (str)
      in the hyphenated lower-case spelling used in ABC files.
    - ``ALIASES``: A list of 2-tuples consisting of an alias (str) and
      the original sound name (str).

Examples:
    >>> gm.drums.DRUMS[36]
    'bass-drum-1'
    >>> gm.drums.drum_number('acoustic-snare')
    38
    >>> gm.drums.drum_number('SD')
    38
"""
"""
このモジュールには、``%%percmap`` ディレクティブで受け付けられる打楽器音の
名前と、それらに割り当てられた General MIDI のノート番号が定義されて
います。

    - ``DRUMS``: ノート番号 (int) から ABC ファイルで使われるハイフン区切り
      小文字表記の音名 (str) への写像 (dict)
    - ``ALIASES``: 別名 (str) と元の音名 (str) から成る2要素タプルのリスト
"""
# Copyright (C) 2025  Satoshi Nishimura

from typing import Optional

__all__ = ['DRUMS', 'ALIASES', 'drum_number']

#
# Definitions for note numbers of drum sets
#

DRUMS = {
    35: 'acoustic-bass-drum',
    36: 'bass-drum-1',
    37: 'side-stick',
    38: 'acoustic-snare',
    39: 'hand-clap',
    40: 'electric-snare',
    41: 'low-floor-tom',
    42: 'closed-hi-hat',
    43: 'high-floor-tom',
    44: 'pedal-hi-hat',
    45: 'low-tom',
    46: 'open-hi-hat',
    47: 'low-mid-tom',
    48: 'hi-mid-tom',
    49: 'crash-cymbal-1',
    50: 'high-tom',
    51: 'ride-cymbal-1',
    52: 'chinese-cymbal',
    53: 'ride-bell',
    54: 'tambourine',
    55: 'splash-cymbal',
    56: 'cowbell',
    57: 'crash-cymbal-2',
    58: 'vibraslap',
    59: 'ride-cymbal-2',
    60: 'hi-bongo',
    61: 'low-bongo',
    62: 'mute-hi-conga',
    63: 'open-hi-conga',
    64: 'low-conga',
    65: 'high-timbale',
    66: 'low-timbale',
    67: 'high-agogo',
    68: 'low-agogo',
    69: 'cabasa',
    70: 'maracas',
    71: 'short-whistle',
    72: 'long-whistle',
    73: 'short-guiro',
    74: 'long-guiro',
    75: 'claves',
    76: 'hi-wood-block',
    77: 'low-wood-block',
    78: 'mute-cuica',
    79: 'open-cuica',
    80: 'mute-triangle',
    81: 'open-triangle',
}

ALIASES = [
    ('bd', 'bass-drum-1'),
    ('bd2', 'acoustic-bass-drum'),
    ('rimshot', 'side-stick'),
    ('sd', 'acoustic-snare'),
    ('sd2', 'electric-snare'),
    ('hh', 'closed-hi-hat'),
    ('pedalhh', 'pedal-hi-hat'),
    ('openhh', 'open-hi-hat'),
    ('crashcy', 'crash-cymbal-1'),
    ('ridecy', 'ride-cymbal-1'),
    ('high-mid-tom', 'hi-mid-tom'),
    ('high-conga', 'open-hi-conga'),
    ('high-wood-block', 'hi-wood-block'),
    ('cuica', 'open-cuica'),
    ('triangle', 'open-triangle')]


_NUMBERS = {name: num for num, name in DRUMS.items()}
for _alias, _inst in ALIASES:
    _NUMBERS[_alias] = _NUMBERS[_inst]


def drum_number(name) -> Optional[int]:
    """
    Returns the note number of the percussion sound `name`
    (case-insensitive), or None if the name is unknown.
    """
    """
    打楽器音 `name` (大文字小文字を区別しない) のノート番号を返します。
    名前が不明のときは None を返します。
    """
    return _NUMBERS.get(name.lower())
