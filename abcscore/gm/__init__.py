# coding:utf-8
"""
General MIDI tables used by the directive analyzer.
"""
# Copyright (C) 2025  Satoshi Nishimura

from abcscore.gm.drums import DRUMS, ALIASES, drum_number  # noqa: F401
