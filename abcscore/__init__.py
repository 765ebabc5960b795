# coding:utf-8
"""
abcscore: a parser and score interpreter for ABC music notation.

The syntax-tree node classes are found in :mod:`abcscore.syntax`.
"""
# Copyright (C) 2025  Satoshi Nishimura

from abcscore._version import __version__  # noqa: F401
from abcscore.config import *  # noqa: F401,F403
from abcscore.utils import *  # noqa: F401,F403
from abcscore.constants import *  # noqa: F401,F403
from abcscore.parser import *  # noqa: F401,F403
from abcscore.analyzer import *  # noqa: F401,F403
from abcscore.directives import *  # noqa: F401,F403
from abcscore.score import *  # noqa: F401,F403
from abcscore.state import *  # noqa: F401,F403
from abcscore.text import *  # noqa: F401,F403
from abcscore.interpreter import *  # noqa: F401,F403
from abcscore import syntax  # noqa: F401
