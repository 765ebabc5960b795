# coding:utf-8
"""
This module defines the mutable state of the interpreter: file-level and
tune-level defaults, per-voice musical context, and the assignment of
voices to staffs and systems of the output score.
"""
"""
このモジュールにはインタープリターの可変状態が定義されています。
ファイル単位および曲単位の既定値、声部ごとの音楽的文脈、そして出力
スコアの譜表とシステムへの声部の割り当てです。
"""
# Copyright (C) 2025  Satoshi Nishimura

import copy
from typing import Dict, List, Optional
from abcscore.config import AbcConfig
from abcscore.utils import Rational, AbcError
from abcscore.score import Tune, StaffSystem, Staff, VoiceLane

__all__ = ['FileDefaults', 'TuneDefaults', 'VoiceState', 'InterpreterState',
           'default_key', 'default_clef', 'default_meter']


def default_key() -> dict:
    return {'root': 'C', 'acc': '', 'mode': '', 'accidentals': []}


def default_clef() -> dict:
    return {'type': 'treble', 'verticalPos': 0, 'clefPos': 0}


def default_meter() -> dict:
    num, den = AbcConfig.default_meter
    return {'type': 'common_time' if (num, den) == (4, 4) else 'specified',
            'value': [Rational(num, den)]}


class FileDefaults(object):
    """
    Settings given in the file header, copied into every tune.

    Attributes:
        note_length(Rational or None): default note length (L:)
        formatting(dict): formatting directives
        parser_config(dict): settings not exposed in the output
            (landscape, titlecaps, continueall, papersize)
        version(str or None): value of %%abc-version
        meta_text(dict): metadata such as composer or book
        fonts(dict): fonts registered with %%setfont-N, keyed by N
    """
    """
    ファイルヘッダーで与えられ、各曲へコピーされる設定。

    Attributes:
        note_length(Rational or None): 既定の音符の長さ (L:)
        formatting(dict): 書式ディレクティブ
        parser_config(dict): 出力には現れない設定 (landscape, titlecaps,
            continueall, papersize)
        version(str or None): %%abc-version の値
        meta_text(dict): 作曲者や曲集などのメタデータ
        fonts(dict): %%setfont-N で登録されたフォント (N がキー)
    """
    def __init__(self):
        self.note_length: Optional[Rational] = None
        self.formatting = {}
        self.parser_config = {}
        self.version: Optional[str] = None
        self.meta_text = {}
        self.fonts: Dict[int, dict] = {}


class TuneDefaults(object):
    """ Key, meter, clef, note length and tempo in effect for voices not
    yet declared. """
    def __init__(self, file_defaults):
        self.key = default_key()
        self.meter = default_meter()
        self.tempo: Optional[dict] = \
            copy.deepcopy(file_defaults.meta_text.get('tempo'))
        self.note_length = file_defaults.note_length or \
            Rational(*AbcConfig.default_note_length)
        self.clef = default_clef()


class VoiceState(object):
    """
    Musical context of one voice during interpretation.
    """
    """
    解釈中の1つの声部の音楽的文脈。
    """
    def __init__(self, id, properties, tune_defaults):
        self.id = id
        self.properties = dict(properties)
        self.current_key = tune_defaults.key
        self.current_clef = properties.get('clef') or tune_defaults.clef
        self.current_meter = tune_defaults.meter

        self.potential_start_beam: Optional[dict] = None
        self.potential_end_beam: Optional[dict] = None

        # pitch number -> tie marker
        self.pending_ties: Dict[int, dict] = {}

        # slurs waiting for the next note, and slurs started but not closed
        self.pending_start_slurs: List[dict] = []
        self.open_slurs: List[int] = []
        self.next_slur_label = AbcConfig.first_slur_label

        self.tuplet_p = 0
        self.tuplet_q = 0
        self.tuplet_r = 0
        self.tuplet_notes_left = 0

        self.pending_decorations: List[str] = []
        self.pending_grace_notes: List[dict] = []
        self.pending_chord_symbols: List[dict] = []
        self.next_note_duration_multiplier: Optional[Rational] = None
        self.has_notes = False
        self.last_lane = None

    def reset_context(self, tune_defaults):
        """ Takes the key, meter and clef completed by the tune header
        unless the voice declares its own clef. """
        self.current_key = tune_defaults.key
        self.current_meter = tune_defaults.meter
        self.current_clef = self.properties.get('clef') or tune_defaults.clef

    def update_properties(self, properties):
        if properties.get('clef'):
            self.current_clef = properties['clef']
        self.properties.update(properties)

    def end_beam_group(self):
        if self.potential_start_beam and self.potential_end_beam:
            self.potential_start_beam['startBeam'] = True
            self.potential_end_beam['endBeam'] = True
        self.potential_start_beam = None
        self.potential_end_beam = None

    def new_slur_label(self) -> int:
        label = self.next_slur_label
        self.next_slur_label += 1
        return label

    def __repr__(self):
        return "<VoiceState %r>" % self.id


class InterpreterState(object):
    """
    The per-tune mutable state of the interpreter, including the output
    tune under construction and the voice-to-staff layout.

    Args:
        semantic_data(dict): mapping from node ids to SemanticData
        file_defaults(FileDefaults): settings of the file header, which are
            deep-copied and never modified

    Attributes:
        staves(list of dict): staff layout entries {'index', 'numVoices',
            'bracket'?, 'brace'?, 'connectBarLines'?}
        vx(dict): mapping from voice IDs to {'staffNum', 'index'}
        current_system_num(int or None): system index of the write cache
        current_staff_num(int or None): staff index of the write cache
        current_voice_index(int or None): lane index of the write cache
        needs_switch(bool): if True, the write location is resolved again
            before the next element is appended
    """
    """
    インタープリターの曲ごとの可変状態。作成中の出力曲と、声部から譜表
    へのレイアウトを含みます。

    Args:
        semantic_data(dict): ノード番号から SemanticData への対応表
        file_defaults(FileDefaults): ファイルヘッダーの設定。ディープ
            コピーされ、変更されることはありません。

    Attributes:
        staves(list of dict): 譜表レイアウトのエントリー {'index',
            'numVoices', 'bracket'?, 'brace'?, 'connectBarLines'?}
        vx(dict): 声部 ID から {'staffNum', 'index'} への対応表
        current_system_num(int or None): 書き込み位置のシステム番号
        current_staff_num(int or None): 書き込み位置の譜表番号
        current_voice_index(int or None): 書き込み位置のレーン番号
        needs_switch(bool): True ならば、次の要素を追加する前に書き込み
            位置を解決し直します。
    """
    def __init__(self, semantic_data, file_defaults):
        self.semantic_data = semantic_data
        self.file_defaults = file_defaults
        self.tune_defaults = TuneDefaults(file_defaults)
        self.parser_config = copy.deepcopy(file_defaults.parser_config)
        self.fonts = copy.deepcopy(file_defaults.fonts)
        self.current_voice = ''
        self.measure_number = 1
        self.voices: Dict[str, VoiceState] = {}

        self.staves: List[dict] = []
        self.vx: Dict[str, dict] = {}
        self.voice_current_system: Dict[str, int] = {}
        # systems before this index are never written again
        self.system_floor = 0
        self.tune_title_set = False

        self.current_system_num: Optional[int] = None
        self.current_staff_num: Optional[int] = None
        self.current_voice_index: Optional[int] = None
        self.needs_switch = True

        self.tune = Tune()
        self.tune.meta_text = copy.deepcopy(file_defaults.meta_text)
        self.tune.formatting = copy.deepcopy(file_defaults.formatting)
        if file_defaults.version:
            self.tune.version = file_defaults.version

    def voice(self) -> VoiceState:
        """ Returns the state of the current voice, registering it with
        default settings if it has not been declared. """
        voice = self.voices.get(self.current_voice)
        if voice is None:
            voice = self.register_voice(self.current_voice)
        return voice

    def register_voice(self, voice_id, properties=None) -> VoiceState:
        """
        Creates the state of a voice seeded from the tune defaults, or
        merges `properties` into an existing one (the last declaration
        wins, and the accumulated musical context is kept).
        """
        properties = properties or {}
        voice = self.voices.get(voice_id)
        if voice is None:
            voice = VoiceState(voice_id, properties, self.tune_defaults)
            self.voices[voice_id] = voice
        else:
            voice.update_properties(properties)
        return voice

    def set_current_voice(self, voice_id) -> None:
        """ Makes `voice_id` current and requests re-resolution of the
        write location before the next element. """
        if voice_id not in self.voices:
            self.register_voice(voice_id)
        self.current_voice = voice_id
        self.needs_switch = True

    def init_vx_nomenclature(self, voice_id, properties=None) -> dict:
        """ Assigns a voice to a staff: a new staff after all the others,
        or the last staff for voices with the 'merge' property. """
        if self.staves and properties and properties.get('merge'):
            last = self.staves[-1]
            self.vx[voice_id] = {'staffNum': last['index'],
                                 'index': last['numVoices']}
            last['numVoices'] += 1
        else:
            self.staves.append({'index': len(self.staves), 'numVoices': 1})
            self.vx[voice_id] = {'staffNum': len(self.staves) - 1,
                                 'index': 0}
        return self.vx[voice_id]

    def apply_score_layout(self, staves, voice_assignments) -> None:
        """
        Replaces the staff layout and the voice-to-staff assignment with
        those of a %%score or %%staves directive. Elements already written
        stay where they are; the next element resolves its location again.
        """
        self.staves = copy.deepcopy(staves)
        self.vx = copy.deepcopy(voice_assignments)
        self.voice_current_system = {}
        self.system_floor = len(self.tune.systems)
        self.invalidate_location()

    def invalidate_location(self) -> None:
        self.current_system_num = None
        self.current_staff_num = None
        self.current_voice_index = None
        self.needs_switch = True

    def get_system_idx(self, voice_id) -> int:
        """ Returns the index of the first music system, starting from
        the one this voice last wrote to, whose slot for the voice is
        empty; or the number of systems if there is none. """
        vx = self.vx.get(voice_id)
        if vx is None:
            raise AbcError("Voice %s is not assigned to a staff" % voice_id)
        systems = self.tune.systems
        start = max(self.voice_current_system.get(voice_id, 0),
                    self.system_floor)
        for i in range(start, len(systems)):
            system = systems[i]
            if not system.is_music:
                continue
            if vx['staffNum'] >= len(system.staffs):
                return i
            staff = system.staffs[vx['staffNum']]
            if (vx['index'] >= len(staff.voices) or
                    not staff.voices[vx['index']]):
                return i
        return len(systems)

    def new_staff(self, staff_num) -> Staff:
        entry = self.staves[staff_num]
        owner = None
        for voice_id, vx in self.vx.items():
            if vx['staffNum'] == staff_num and voice_id in self.voices:
                owner = self.voices[voice_id]
                break
        if owner is not None:
            staff = Staff(owner.current_clef, owner.current_key,
                          owner.current_meter, entry['numVoices'])
        else:
            staff = Staff(self.tune_defaults.clef, self.tune_defaults.key,
                          self.tune_defaults.meter, entry['numVoices'])
        staff.bracket = entry.get('bracket')
        staff.brace = entry.get('brace')
        staff.connect_bar_lines = entry.get('connectBarLines')
        return staff

    def init_vx_slot(self, system_idx, voice_id) -> VoiceLane:
        """ Makes sure that the system, the staff and the lane for the
        voice exist, and returns the lane. """
        vx = self.vx[voice_id]
        systems = self.tune.systems
        while len(systems) <= system_idx:
            system = StaffSystem()
            systems.append(system)
            for i in range(len(self.staves)):
                system.staffs.append(self.new_staff(i))
        system = systems[system_idx]
        while len(system.staffs) <= vx['staffNum']:
            system.staffs.append(self.new_staff(len(system.staffs)))
        staff = system.staffs[vx['staffNum']]
        if not any(staff.voices):
            # the staff takes the context of the voice that writes first
            voice = self.voices[voice_id]
            staff.clef = voice.current_clef
            staff.key = voice.current_key
            staff.meter = voice.current_meter
        return staff.lane(vx['index'])

    def switch_to_voice(self, voice_id) -> None:
        """
        Resolves the (system, staff, lane) location where the elements of
        `voice_id` are written, growing the score as needed, and caches
        it for subsequent appends.
        """
        if voice_id not in self.voices:
            self.register_voice(voice_id)
        if voice_id not in self.vx:
            self.init_vx_nomenclature(voice_id,
                                      self.voices[voice_id].properties)
        system_idx = self.get_system_idx(voice_id)
        self.init_vx_slot(system_idx, voice_id)
        vx = self.vx[voice_id]
        self.current_system_num = system_idx
        self.current_staff_num = vx['staffNum']
        self.current_voice_index = vx['index']
        self.current_voice = voice_id
        self.voice_current_system[voice_id] = system_idx
        self.needs_switch = False

    def current_lane(self) -> Optional[VoiceLane]:
        """ Returns the lane of the write cache, or None if unset. """
        if self.current_system_num is None:
            return None
        system = self.tune.systems[self.current_system_num]
        return system.staffs[self.current_staff_num].voices[
            self.current_voice_index]

    def push_element(self, element) -> None:
        """ Appends an element to the current voice, resolving the write
        location first if it is unset or a re-switch is pending. """
        if self.needs_switch or self.current_system_num is None:
            self.switch_to_voice(self.current_voice)
        self.current_lane().append(element)

    def next_measure(self) -> None:
        self.measure_number += 1

    def finalize(self) -> Tune:
        if self.tune_defaults.tempo is not None:
            self.tune.meta_text.setdefault('tempo', self.tune_defaults.tempo)
        self.tune.finalize(len(self.voices))
        return self.tune
