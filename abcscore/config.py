# coding:utf-8
"""
This module defines the configuration class shared by the parser, the
semantic analyzer and the interpreter.
"""
# Copyright (C) 2025  Satoshi Nishimura

from typing import Tuple

__all__ = ['AbcConfig']


class AbcConfig(object):
    """
    Class-level configuration of abcscore. Attributes are read at the time
    they are needed, so assigning them takes effect for subsequent calls.

    Attributes:
        default_note_length(tuple of int): unit note length used when
            neither the file nor the tune has an L: field.
        default_meter(tuple of int): meter assumed by the whole-measure
            rest test when no M: field is in effect (common time).
        default_bpm(int): tempo reported by :func:`.showsummary` when the
            tune has no Q: field.
        first_slur_label(int): label of the first slur in each voice.
        grace_note_duration(float): duration stored in grace notes.
        exact_whole_rest(bool): if True, a 'z' rest is turned into a
            whole-measure rest by exact rational comparison; otherwise by
            floating-point comparison.
        emit_warnings(bool): if True, each diagnostic is also issued
            through :func:`warnings.warn` as an :class:`.AbcWarning`.
    """
    default_note_length: Tuple[int, int] = (1, 8)
    default_meter: Tuple[int, int] = (4, 4)
    default_bpm: int = 120
    first_slur_label: int = 101
    grace_note_duration: float = 0.125
    exact_whole_rest: bool = True
    emit_warnings: bool = True

    @staticmethod
    def show_config():
        print("default_note_length=%r" % (AbcConfig.default_note_length,))
        print("default_meter=%r" % (AbcConfig.default_meter,))
        print("default_bpm=%r" % AbcConfig.default_bpm)
        print("first_slur_label=%r" % AbcConfig.first_slur_label)
        print("grace_note_duration=%r" % AbcConfig.grace_note_duration)
        print("exact_whole_rest=%r" % AbcConfig.exact_whole_rest)
        print("emit_warnings=%r" % AbcConfig.emit_warnings)
