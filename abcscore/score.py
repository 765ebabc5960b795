# coding:utf-8
"""
This module defines the output model of the interpreter: tunes made of
systems, which are either music systems (staffs holding voice lanes of
elements) or text systems.

Elements are plain dicts tagged by the 'el_type' key ('note', 'bar',
'key' or 'meter'), so that they can be written to JSON as they are.
"""
"""
このモジュールにはインタープリターの出力モデルが定義されています。
曲はシステムの並びからなり、各システムは音楽システム (要素の並びである
声部レーンを持つ譜表の集まり) またはテキストシステムのいずれかです。

要素は 'el_type' キー ('note', 'bar', 'key', 'meter') で区別される
通常の dict であり、そのまま JSON へ書き出すことができます。
"""
# Copyright (C) 2025  Satoshi Nishimura

from typing import List, Optional
from abcscore.utils import Rational

__all__ = ['Tune', 'StaffSystem', 'Staff', 'VoiceLane', 'TextSystem',
           'note_element', 'rest_element', 'bar_element', 'key_element',
           'meter_element', 'to_plain']


def to_plain(obj):
    """
    Converts `obj` recursively into a structure made only of dicts, lists,
    strings, numbers, booleans and None. Rational values become
    {'numerator', 'denominator'} dicts, and objects having a `to_dict`
    method are converted with it.
    """
    """
    `obj` を dict、リスト、文字列、数値、真理値、None だけからなる構造へ
    再帰的に変換します。Rational の値は {'numerator', 'denominator'} の
    dict となり、`to_dict` メソッドを持つオブジェクトはそれによって変換
    されます。
    """
    if isinstance(obj, Rational):
        return obj.to_dict()
    elif hasattr(obj, 'to_dict'):
        return obj.to_dict()
    elif isinstance(obj, dict):
        return {k: to_plain(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_plain(o) for o in obj]
    else:
        return obj


def note_element(start_char, end_char, duration, pitches) -> dict:
    return {'el_type': 'note', 'startChar': start_char, 'endChar': end_char,
            'duration': duration, 'pitches': pitches}


def rest_element(start_char, end_char, duration, rest_type) -> dict:
    return {'el_type': 'note', 'startChar': start_char, 'endChar': end_char,
            'duration': duration, 'rest': {'type': rest_type}}


def bar_element(start_char, end_char, bar_type, ending=None) -> dict:
    element = {'el_type': 'bar', 'startChar': start_char,
               'endChar': end_char, 'type': bar_type}
    if ending is not None:
        element['startEnding'] = ending
    return element


def key_element(start_char, end_char, key, clef=None) -> dict:
    element = {'el_type': 'key', 'startChar': start_char,
               'endChar': end_char, **key}
    if clef is not None:
        element['clef'] = clef
    return element


def meter_element(start_char, end_char, meter) -> dict:
    return {'el_type': 'meter', 'startChar': start_char,
            'endChar': end_char, **meter}


class VoiceLane(list):
    """
    Sequence of the elements written by one voice in one staff of a
    system. The last element may be patched in place through
    :meth:`last_element`.
    """
    """
    1つのシステムの1つの譜表において、1つの声部が書き込んだ要素の並び。
    最後の要素は :meth:`last_element` を通してその場で変更できます。
    """
    def last_element(self) -> Optional[dict]:
        return self[-1] if self else None

    def note_elements(self) -> List[dict]:
        return [el for el in self if el.get('pitches')]

    def to_dict(self):
        return [to_plain(el) for el in self]


class Staff(object):
    """
    A staff of a music system.

    Attributes:
        clef(dict): clef in effect at the start of the staff
        key(dict): key signature in effect at the start of the staff
        meter(dict or None): meter in effect at the start of the staff
        voices(list of VoiceLane): the voice lanes
        bracket(str or None): 'start', 'continue' or 'end'
        brace(str or None): 'start', 'continue' or 'end'
        connect_bar_lines(str or None): 'start', 'continue' or 'end'
            for bar lines connected across staves
    """
    """
    音楽システムの譜表。

    Attributes:
        clef(dict): 譜表の先頭で有効な音部記号
        key(dict): 譜表の先頭で有効な調号
        meter(dict or None): 譜表の先頭で有効な拍子
        voices(list of VoiceLane): 声部レーン
        bracket(str or None): 'start', 'continue', 'end' のいずれか
        brace(str or None): 'start', 'continue', 'end' のいずれか
        connect_bar_lines(str or None): 譜表をまたいでつながる小節線の
            'start', 'continue', 'end' のいずれか
    """
    def __init__(self, clef, key, meter=None, num_voices=0):
        self.clef = clef
        self.key = key
        self.meter = meter
        self.voices: List[VoiceLane] = [VoiceLane()
                                        for _ in range(num_voices)]
        self.bracket = None
        self.brace = None
        self.connect_bar_lines = None

    def lane(self, index) -> VoiceLane:
        while len(self.voices) <= index:
            self.voices.append(VoiceLane())
        return self.voices[index]

    def to_dict(self):
        result = {'clef': to_plain(self.clef), 'key': to_plain(self.key)}
        if self.meter is not None:
            result['meter'] = to_plain(self.meter)
        result['workingClef'] = to_plain(self.clef)
        if self.bracket is not None:
            result['bracket'] = self.bracket
        if self.brace is not None:
            result['brace'] = self.brace
        if self.connect_bar_lines is not None:
            result['connectBarLines'] = self.connect_bar_lines
        result['voices'] = [lane.to_dict() for lane in self.voices]
        return result


class StaffSystem(object):
    """ A system of music made of staffs. """
    """ 譜表からなる音楽システム。 """
    is_music = True

    def __init__(self):
        self.staffs: List[Staff] = []

    def to_dict(self):
        return {'staff': [staff.to_dict() for staff in self.staffs]}


class TextSystem(object):
    """
    A system holding a line of text instead of music.

    Args:
        kind(str): 'text', 'center' or 'subtitle'
        segments(list of dict): text segments, each of which is a dict
            {'text': str} optionally with a 'font' dict
    """
    """
    音楽の代わりにテキストの行を持つシステム。

    Args:
        kind(str): 'text', 'center', 'subtitle' のいずれか
        segments(list of dict): テキストセグメント。それぞれは
            {'text': 文字列} の dict で、'font' の dict を持つことも
            あります。
    """
    is_music = False

    def __init__(self, kind, segments):
        self.kind = kind
        self.segments = list(segments)

    def plain_text(self) -> str:
        return ''.join(seg['text'] for seg in self.segments)

    def to_dict(self):
        if self.kind == 'subtitle':
            return {'subtitle': {'text': self.plain_text()}}
        result = {'text': to_plain(self.segments)}
        if self.kind == 'center':
            result['center'] = True
        return result


class Tune(object):
    """
    The result of interpreting one tune.

    Attributes:
        version(str): ABC standard version
        meta_text(dict): title, composer, tempo and other metadata
        formatting(dict): formatting directives in effect, keyed by the
            directive name
        systems(list of StaffSystem or TextSystem): the systems in order
        staff_num(int): maximum number of staffs of the music systems
        voice_num(int): number of voices
        line_num(int): number of systems
    """
    """
    1曲を解釈した結果。

    Attributes:
        version(str): ABC 規格のバージョン
        meta_text(dict): タイトル、作曲者、テンポその他のメタデータ
        formatting(dict): 有効な書式ディレクティブ (ディレクティブ名がキー)
        systems(list of StaffSystem or TextSystem): システムの並び
        staff_num(int): 音楽システムの譜表数の最大値
        voice_num(int): 声部数
        line_num(int): システム数
    """
    def __init__(self):
        self.version = '2.2'
        self.media = 'screen'
        self.meta_text = {}
        self.formatting = {}
        self.systems: List = []
        self.staff_num = 0
        self.voice_num = 0
        self.line_num = 0

    def music_systems(self) -> List[StaffSystem]:
        return [system for system in self.systems if system.is_music]

    def finalize(self, voice_count) -> None:
        """ Computes the summary counts from the assembled systems. """
        self.staff_num = max((len(system.staffs)
                              for system in self.music_systems()),
                             default=0)
        self.voice_num = voice_count
        self.line_num = len(self.systems)

    def to_dict(self) -> dict:
        return {'version': self.version,
                'media': self.media,
                'metaText': to_plain(self.meta_text),
                'formatting': to_plain(self.formatting),
                'lines': [system.to_dict() for system in self.systems],
                'staffNum': self.staff_num,
                'voiceNum': self.voice_num,
                'lineNum': self.line_num}

    def __repr__(self):
        return "<Tune %r: %d systems, %d staffs, %d voices>" % (
            self.meta_text.get('title', ''), self.line_num, self.staff_num,
            self.voice_num)
