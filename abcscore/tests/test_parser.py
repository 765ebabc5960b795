import pytest
from abcscore import *
from abcscore.syntax import FileStructure, Beam, Note, Chord, Rest, BarLine, \
    Tuplet, GraceGroup, ErrorNode, InlineField, MultiMeasureRest, Slur, \
    Decoration, Annotation, Directive, LyricLine, InfoLine, Comment


def all_nodes(node):
    result = [node]
    for child in node.children():
        result.extend(all_nodes(child))
    return result


def test_parse_minimal_tune():
    f = parse("X:1\nT:Test\nK:C\nCDEF|\n")
    assert isinstance(f, FileStructure)
    assert f.header is None
    assert len(f.tunes) == 1
    tune = f.tunes[0]
    assert [item.key for item in tune.header.items] == ['X', 'T', 'K']
    assert tune.header.items[1].value == 'Test'
    line = tune.body.items[0]
    assert line.kind == 'music_line'
    assert isinstance(line.items[0], Beam)
    assert [n.letter for n in line.items[0].items] == ['C', 'D', 'E', 'F']
    assert isinstance(line.items[1], BarLine)
    assert line.items[1].symbol == '|'


def test_node_ids_and_positions():
    f = parse("X:1\nK:C\nCD EF|\n")
    ids = [node.id for node in all_nodes(f)]
    assert len(ids) == len(set(ids))
    line = f.tunes[0].body.items[0]
    first = line.items[0].items[0]
    assert first.start == (2, 0) and first.end == (2, 1)
    assert line.items[1].items[0].start == (2, 3)


def test_parse_note_fields():
    line = parse_music_line("^c'2>d")
    beam = line.items[0]
    note = beam.items[0]
    assert isinstance(note, Note)
    assert note.accidental == '^'
    assert note.letter == 'c'
    assert note.octave == "'"
    assert note.rhythm.numerator == '2'
    assert note.rhythm.broken == '>'
    assert beam.items[1].letter == 'd'


def test_parse_rhythms():
    line = parse_music_line("A3/2 B/ C// D/4")
    rhythms = [item.rhythm for item in line.items]
    assert (rhythms[0].numerator, rhythms[0].separator,
            rhythms[0].denominator) == ('3', '/', '2')
    assert rhythms[1].separator == '/' and rhythms[1].denominator is None
    assert rhythms[2].separator == '//'
    assert rhythms[3].denominator == '4'


def test_parse_chord_and_tie():
    line = parse_music_line("[CEG]2- C-C")
    chord = line.items[0]
    assert isinstance(chord, Chord)
    assert [n.letter for n in chord.notes] == ['C', 'E', 'G']
    assert chord.rhythm.numerator == '2'
    assert chord.tie
    beam = line.items[1]
    assert beam.items[0].tie and not beam.items[1].tie


def test_parse_rests():
    line = parse_music_line("z2 x Z4 X")
    assert isinstance(line.items[0], Rest)
    assert line.items[0].letter == 'z'
    assert line.items[0].rhythm.numerator == '2'
    assert line.items[1].letter == 'x'
    assert isinstance(line.items[2], MultiMeasureRest)
    assert line.items[2].count == 4
    assert line.items[3].count is None


def test_parse_ornaments():
    line = parse_music_line('(3:2:3abc {/gf}A !trill!B "^Allegro"C .(D)')
    tuplet = line.items[0].items[0]
    assert isinstance(tuplet, Tuplet)
    assert (tuplet.p, tuplet.q, tuplet.r) == (3, 2, 3)
    grace = line.items[1].items[0] if isinstance(line.items[1], Beam) \
        else line.items[1]
    assert isinstance(grace, GraceGroup)
    assert grace.acciaccatura
    assert [n.letter for n in grace.notes] == ['g', 'f']
    kinds = [item.kind for item in line.items]
    assert 'decoration' in kinds and 'annotation' in kinds
    deco = [item for item in line.items if isinstance(item, Decoration)][0]
    assert deco.symbol == '!trill!'
    annot = [item for item in line.items if isinstance(item, Annotation)][0]
    assert annot.text == '^Allegro'
    slurs = [item for item in line.items if isinstance(item, Slur)]
    assert [s.symbol for s in slurs] == ['.(', ')']


def test_parse_bar_lines():
    line = parse_music_line("|: C :|2 D [1 E || F |]")
    bars = [item for item in line.items if isinstance(item, BarLine)]
    assert [b.symbol for b in bars] == ['|:', ':|', '[', '||', '|]']
    assert bars[1].ending == '2'
    assert bars[2].ending == '1'


def test_parse_inline_field():
    line = parse_music_line("C[K:G]D")
    field = line.items[1]
    assert isinstance(field, InlineField)
    assert field.key == 'K' and field.value == 'G'


def test_parse_error_chars():
    line = parse_music_line("C#D")
    assert isinstance(line.items[0], Note)
    assert isinstance(line.items[1], ErrorNode)
    assert line.items[1].text == '#'
    assert isinstance(line.items[2], Note)


def test_parse_file_header_and_tunes():
    f = parse("T:Collection\n%%titlecaps\n\nX:1\nK:C\nC\n\nX:2\nK:G\nD\n")
    assert f.header is not None
    assert isinstance(f.header.items[0], InfoLine)
    assert isinstance(f.header.items[1], Directive)
    assert f.header.items[1].name == 'titlecaps'
    assert len(f.tunes) == 2
    assert f.tunes[1].header.items[1].value == 'G'


def test_parse_line_kinds():
    f = parse("X:1\nK:C\n% a comment\nCDE\nw:la-la\nI:titlecaps\n")
    items = f.tunes[0].body.items
    assert isinstance(items[0], Comment)
    assert items[1].kind == 'music_line'
    assert isinstance(items[2], LyricLine)
    assert items[2].tokens == ['la', '-', 'la']
    assert isinstance(items[3], Directive)
    assert items[3].name == 'titlecaps'


def test_parse_begintext():
    f = parse("X:1\nK:C\n%%begintext\nline one\n\n%%line two\n%%endtext\n"
              "C\n")
    items = f.tunes[0].body.items
    assert items[0].name == 'begintext'
    assert items[0].value == 'line one\n\nline two'
    assert items[1].kind == 'music_line'


def test_parse_header_without_key():
    f = parse("X:1\nT:No key\nCDE\n")
    tune = f.tunes[0]
    assert [item.key for item in tune.header.items] == ['X', 'T']
    assert tune.body.items[0].kind == 'music_line'


def test_parse_type_error():
    with pytest.raises(TypeError):
        parse(b"X:1\nK:C\n")


def test_tokenize_value():
    tokens = tokenize_value('clef=bass name="Piano RH" treble')
    assert [t.kind for t in tokens] == ['kv', 'kv', 'word']
    assert (tokens[0].key, tokens[0].value) == ('clef', 'bass')
    assert (tokens[1].key, tokens[1].value) == ('name', 'Piano RH')
    assert tokens[2].text == 'treble'
    tokens = tokenize_value('(1 2) | 3')
    assert [t.text for t in tokens] == ['(', '1', '2', ')', '|', '3']
    assert tokens[0].kind == 'punct'
