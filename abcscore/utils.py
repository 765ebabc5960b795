# coding:utf-8
"""
This module defines the exact fraction type used for durations and
meters, the warning and exception classes, and the diagnostic reporter.
"""
"""
このモジュールには、音価や拍子に用いる厳密な分数型、警告および例外の
クラス、そして診断メッセージの収集器が定義されています。
"""
# Copyright (C) 2025  Satoshi Nishimura

import re
import warnings
from fractions import Fraction
from typing import Any, List, NamedTuple, Optional, Union
from abcscore.config import AbcConfig

__all__ = ['Rational', 'AbcWarning', 'AbcError', 'Diagnostic',
           'ErrorReporter', 'LineOffsets', 'SemanticData', 'strip_quotes',
           'int_preferred', 'Fraction']


class Rational(object):
    """
    Exact fraction whose numerator and denominator are kept as given
    (no automatic reduction). Comparison and hashing are performed on the
    mathematical value, so that Rational(2, 4) == Rational(1, 2).

    Args:
        numerator(int): numerator
        denominator(int, optional): denominator (must not be zero)

    Raises:
        ValueError: if `denominator` is zero.
    """
    """
    分子・分母を与えられたままに保持する (自動的に約分しない) 厳密な分数
    です。比較とハッシュは数学的な値に基づくため、
    Rational(2, 4) == Rational(1, 2) となります。

    Args:
        numerator(int): 分子
        denominator(int, optional): 分母 (0 であってはなりません)

    Raises:
        ValueError: `denominator` が 0 のとき。
    """
    __slots__ = ('numerator', 'denominator')

    def __init__(self, numerator=0, denominator=1):
        if denominator == 0:
            raise ValueError("Rational denominator must not be zero")
        self.numerator = int(numerator)
        self.denominator = int(denominator)

    @staticmethod
    def from_value(value) -> 'Rational':
        """ Converts an int, a Fraction, a (num, den) tuple or a Rational
        into a Rational. """
        if isinstance(value, Rational):
            return value
        elif isinstance(value, tuple):
            return Rational(*value)
        elif isinstance(value, Fraction):
            return Rational(value.numerator, value.denominator)
        elif isinstance(value, int):
            return Rational(value, 1)
        raise TypeError("Cannot convert %r to Rational" % (value,))

    @staticmethod
    def from_string(s) -> 'Rational':
        """
        Parses a string of the form 'n/d', 'n' or '/d'.

        Raises:
            ValueError: if `s` is not such a string or the denominator
                is zero.
        """
        m = re.fullmatch(r'\s*(\d*)\s*(?:/\s*(\d+))?\s*', s)
        if not m or (not m.group(1) and not m.group(2)):
            raise ValueError("Invalid fraction: %r" % s)
        num = int(m.group(1)) if m.group(1) else 1
        den = int(m.group(2)) if m.group(2) else 1
        return Rational(num, den)

    def to_fraction(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def reduced(self) -> 'Rational':
        f = self.to_fraction()
        return Rational(f.numerator, f.denominator)

    def to_dict(self) -> dict:
        return {'numerator': self.numerator, 'denominator': self.denominator}

    def __mul__(self, other):
        if isinstance(other, int):
            other = Rational(other)
        elif not isinstance(other, Rational):
            return NotImplemented
        return Rational(self.numerator * other.numerator,
                        self.denominator * other.denominator)

    __rmul__ = __mul__

    def __add__(self, other):
        if isinstance(other, int):
            other = Rational(other)
        elif not isinstance(other, Rational):
            return NotImplemented
        if self.denominator == other.denominator:
            return Rational(self.numerator + other.numerator,
                            self.denominator)
        return Rational(self.numerator * other.denominator +
                        other.numerator * self.denominator,
                        self.denominator * other.denominator)

    __radd__ = __add__

    def _cmpvalue(self, other):
        if isinstance(other, Rational):
            return other.to_fraction()
        elif isinstance(other, (int, Fraction)):
            return Fraction(other)
        return None

    def __eq__(self, other):
        value = self._cmpvalue(other)
        if value is None:
            return NotImplemented
        return self.to_fraction() == value

    def __lt__(self, other):
        value = self._cmpvalue(other)
        if value is None:
            return NotImplemented
        return self.to_fraction() < value

    def __le__(self, other):
        value = self._cmpvalue(other)
        if value is None:
            return NotImplemented
        return self.to_fraction() <= value

    def __gt__(self, other):
        value = self._cmpvalue(other)
        if value is None:
            return NotImplemented
        return self.to_fraction() > value

    def __ge__(self, other):
        value = self._cmpvalue(other)
        if value is None:
            return NotImplemented
        return self.to_fraction() >= value

    def __hash__(self):
        return hash(self.to_fraction())

    def __float__(self):
        return self.numerator / self.denominator

    def __repr__(self):
        return "Rational(%d, %d)" % (self.numerator, self.denominator)

    def __str__(self):
        return "%d/%d" % (self.numerator, self.denominator)


class AbcWarning(UserWarning):
    pass


class AbcError(Exception):
    def __init__(self, message, source=None):
        super().__init__(message)
        self.source = source

    def __str__(self):
        if self.source is None:
            return self.args[0]
        return "%s: %s" % (self.source, self.args[0])


def int_preferred(x) -> Union[int, float]:
    """
    If `x` has an integer value, convert it to the 'int' type, otherwise
    return it as it is.

    Args:
        x(int or float): original value

    Returns:
        Resulting value
    """
    """
    `x` が整数値を持つ場合はint型に変換して、そうでなければ元のまま返します。

    Args:
        x(int or float): 元の値

    Returns:
        結果の値
    """
    try:
        return int(x) if int(x) == x else x
    except (OverflowError, ValueError):
        return x


def strip_quotes(s) -> str:
    """ Removes a pair of surrounding double quotes, if any. """
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        return s[1:-1]
    return s


class LineOffsets(object):
    """
    Table of the absolute offsets of line beginnings in a source text,
    used for converting (line, char) positions to absolute offsets.
    If no source text is given, positions degrade to the character
    offset within the line.
    """
    """
    ソーステキストにおける各行の先頭の絶対オフセットの表で、(行, 文字)
    の位置を絶対オフセットへ変換するのに使われます。ソーステキストが
    与えられないときは、行内の文字位置がそのまま返されます。
    """
    def __init__(self, source: Optional[str] = None):
        self.offsets = [0]
        if source is not None:
            for i, c in enumerate(source):
                if c == '\n':
                    self.offsets.append(i + 1)
        else:
            self.offsets = []

    def __len__(self):
        return len(self.offsets)

    def to_absolute(self, line, char) -> int:
        if 0 <= line < len(self.offsets):
            return self.offsets[line] + char
        return char


class Diagnostic(object):
    """
    A non-fatal problem found while analyzing or interpreting ABC text.

    Attributes:
        message(str): human-readable message
        node(Node or None): the offending syntax node
        line(int): 0-based line number (-1 if unknown)
        char(int): 0-based character position in the line
        offset(int or None): absolute offset in the source text
    """
    """
    ABC テキストの解析・解釈中に見つかった致命的でない問題。

    Attributes:
        message(str): メッセージ
        node(Node or None): 問題のある構文ノード
        line(int): 0 から始まる行番号 (不明なら -1)
        char(int): 行内の 0 から始まる文字位置
        offset(int or None): ソーステキスト内での絶対オフセット
    """
    __slots__ = ('message', 'node', 'line', 'char', 'offset')

    def __init__(self, message, node=None, offset=None):
        self.message = message
        self.node = node
        if node is not None:
            self.line, self.char = node.start
        else:
            self.line, self.char = -1, 0
        self.offset = offset

    def __repr__(self):
        return "<Diagnostic %d:%d %r>" % (self.line, self.char, self.message)

    def __str__(self):
        if self.line < 0:
            return self.message
        return "%d:%d: %s" % (self.line + 1, self.char + 1, self.message)

    def to_dict(self) -> dict:
        return {'message': self.message, 'line': self.line,
                'char': self.char, 'offset': self.offset}


class ErrorReporter(object):
    """
    Collector of diagnostics shared by the analyzer and the interpreter.
    Each report is also issued as an :class:`AbcWarning` unless
    `AbcConfig.emit_warnings` is False.

    Args:
        source(str, optional): source text, used for absolute offsets
    """
    """
    アナライザーとインタープリターで共有される診断メッセージの収集器。
    `AbcConfig.emit_warnings` が False でない限り、各報告は
    :class:`AbcWarning` としても発行されます。

    Args:
        source(str, optional): 絶対オフセットの計算に使われるソーステキスト
    """
    def __init__(self, source: Optional[str] = None):
        self.diagnostics: List[Diagnostic] = []
        self.line_offsets = LineOffsets(source)

    def report(self, message, node=None) -> Diagnostic:
        offset = None
        if node is not None and len(self.line_offsets):
            offset = self.line_offsets.to_absolute(*node.start)
        diag = Diagnostic(message, node, offset)
        self.diagnostics.append(diag)
        if AbcConfig.emit_warnings:
            warnings.warn(str(diag), AbcWarning, stacklevel=3)
        return diag

    def __len__(self):
        return len(self.diagnostics)

    def messages(self) -> List[str]:
        return [d.message for d in self.diagnostics]


class SemanticData(NamedTuple):
    """
    Classification of an info line or a directive.

    Attributes:
        type(str): kind of the data such as 'key', 'meter', 'voice',
            'setfont' or the directive name
        data: the classified value (dict, str, number, bool, list, or None)
    """
    type: str
    data: Any
