# coding:utf-8
"""
This module defines functions for text: splitting text lines at font
switches, writing interpretation results in JSON, and showing their
summaries.
"""
"""
このモジュールにはテキストに関する関数が定義されています。フォント切り替え
によるテキスト行の分割、解釈結果の JSON 形式での書き出し、そのサマリーの
表示です。
"""
# Copyright (C) 2025  Satoshi Nishimura

import re
import sys
import json
from typing import Dict, List, Optional
from abcscore.config import AbcConfig
from abcscore.utils import Rational, Diagnostic
from abcscore.score import Tune, to_plain

__all__ = ['split_font_segments', 'writejson', 'showsummary']


_FONT_SWITCH_RE = re.compile(r'\$(\$|\d)')


def split_font_segments(text, fonts: Optional[Dict[int, dict]] = None) \
        -> List[dict]:
    """
    Splits a line of text into segments at the font-switch escapes.
    '$N' (N = 1 to 9) switches to the font registered with %%setfont-N,
    '$0' reverts to the default font, and '$$' stands for a dollar sign.
    '$N' for an unregistered font is kept as literal text.

    Args:
        text(str): the text
        fonts(dict, optional): registered fonts keyed by number

    Returns:
        list of dict {'text': str, 'font': dict}, where 'font' is omitted
        for the default font. Empty segments are not produced.

    Examples:
        >>> split_font_segments('Normal $1bold$0 normal', {1: {'size': 18}})
        [{'text': 'Normal '}, {'text': 'bold', 'font': {'size': 18}}, \
{'text': ' normal'}]
    """
    """
    テキスト行をフォント切り替えのエスケープで分割します。
    '$N' (N は 1 から 9) は %%setfont-N で登録されたフォントへ切り替え、
    '$0' は既定のフォントへ戻し、'$$' はドル記号を表します。
    登録されていないフォントに対する '$N' は文字通りのテキストとして
    残されます。

    Args:
        text(str): テキスト
        fonts(dict, optional): 番号をキーとする登録済みフォント

    Returns:
        dict {'text': 文字列, 'font': dict} のリスト。既定のフォントの
        場合 'font' は省略されます。空のセグメントは作られません。
    """
    fonts = fonts or {}
    segments = []
    buf = []
    font = None

    def flush():
        s = ''.join(buf)
        buf.clear()
        if s:
            segment = {'text': s}
            if font is not None:
                segment['font'] = dict(font)
            segments.append(segment)

    pos = 0
    for m in _FONT_SWITCH_RE.finditer(text):
        buf.append(text[pos:m.start()])
        pos = m.end()
        code = m.group(1)
        if code == '$':
            buf.append('$')
        elif code == '0':
            flush()
            font = None
        elif int(code) in fonts:
            flush()
            font = fonts[int(code)]
        else:
            buf.append(m.group(0))
    buf.append(text[pos:])
    flush()
    return segments


def writejson(result, filename='-', **kwargs) -> None:
    """
    Writes tunes or an interpretation result to a file in JSON format.

    Args:
        result(ParseResult, Tune, or list of Tune): object to be written.
            For a ParseResult, the diagnostics are written as well.
        filename(str, optional): output file name ('-' for standard
            output)
        kwargs: other arguments passed to json.dump
    """
    """
    曲または解釈結果を JSON 形式でファイルに書き出します。

    Args:
        result(ParseResult, Tune, or list of Tune): 書き出すオブジェクト。
            ParseResult の場合は診断メッセージも書き出されます。
        filename(str, optional): 出力ファイル名 ('-' なら標準出力)
        kwargs: json.dump へ渡されるその他の引数
    """
    def pre_encode(obj):
        if isinstance(obj, Tune):
            return obj.to_dict()
        elif isinstance(obj, Diagnostic):
            return obj.to_dict()
        elif isinstance(obj, Rational):
            return obj.to_dict()
        elif hasattr(obj, 'tunes') and hasattr(obj, 'diagnostics'):
            return {'tunes': [pre_encode(t) for t in obj.tunes],
                    'diagnostics': [pre_encode(d) for d in obj.diagnostics]}
        elif isinstance(obj, (list, tuple)):
            return [pre_encode(o) for o in obj]
        else:
            return to_plain(obj)

    result = pre_encode(result)
    if filename == '-':
        json.dump(result, sys.stdout, **kwargs)
        sys.stdout.write('\n')
    else:
        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(result, f, **kwargs)


def _count_elements(tune):
    notes = rests = bars = 0
    for system in tune.music_systems():
        for staff in system.staffs:
            for lane in staff.voices:
                for el in lane:
                    if el['el_type'] == 'bar':
                        bars += 1
                    elif 'rest' in el:
                        rests += 1
                    elif el['el_type'] == 'note':
                        notes += 1
    return notes, rests, bars


def showsummary(tunes, file=None) -> None:
    """
    Displays one line of summary information for each tune: title,
    tempo, numbers of systems, staffs and voices, and numbers of notes,
    rests and bar lines.

    Args:
        tunes(list of Tune): the tunes
        file(file object, optional): output destination (standard output
            by default)
    """
    """
    各曲について1行のサマリー情報を表示します。タイトル、テンポ、
    システム数、譜表数、声部数、および音符、休符、小節線の個数です。

    Args:
        tunes(list of Tune): 曲のリスト
        file(file object, optional): 出力先 (既定値は標準出力)
    """
    file = file or sys.stdout
    for i, tune in enumerate(tunes):
        notes, rests, bars = _count_elements(tune)
        tempo = tune.meta_text.get('tempo') or {}
        print("%d: %s  BPM: %s  Systems: %d  Staffs: %d  Voices: %d  "
              "Notes: %d  Rests: %d  Bars: %d" %
              (i, tune.meta_text.get('title', '(untitled)'),
               tempo.get('bpm', AbcConfig.default_bpm), tune.line_num,
               tune.staff_num, tune.voice_num, notes, rests, bars),
              file=file)
