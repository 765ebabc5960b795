import pytest
from abcscore import *


def run(text):
    f = parse(text)
    reporter = ErrorReporter(text)
    data = SemanticAnalyzer(reporter).analyze(f)
    interp = TuneInterpreter(data, reporter, text)
    interp.interpret_file(f)
    return interp


def lane(tune, system=0, staff=0, voice=0):
    return tune.systems[system].staffs[staff].voices[voice]


def notes(elements):
    return [el for el in elements if el['el_type'] == 'note']


def test_minimal_tune():
    result = interpret_abc("X:1\nK:C\nCDEF|\n")
    assert len(result.tunes) == 1
    assert result.diagnostics == []
    tune = result.tunes[0]
    assert len(tune.systems) == 1
    assert len(tune.systems[0].staffs) == 1
    elements = lane(tune)
    assert [el['el_type'] for el in elements] == ['note'] * 4 + ['bar']
    assert [el['pitches'][0]['pitch'] for el in elements[:4]] == [0, 1, 2, 3]
    assert elements[0]['startChar'] == 8
    assert elements[0]['endChar'] == 9
    assert elements[4]['type'] == 'bar_thin'
    assert elements[0]['duration'] == 0.125
    assert elements[0].get('startBeam') and elements[3].get('endBeam')
    assert 'startBeam' not in elements[1] and 'endBeam' not in elements[2]
    staff = tune.systems[0].staffs[0]
    assert staff.key == {'root': 'C', 'acc': '', 'mode': '',
                         'accidentals': []}
    assert staff.meter == {'type': 'common_time',
                           'value': [Rational(4, 4)]}
    assert (tune.staff_num, tune.voice_num, tune.line_num) == (1, 1, 1)


def test_offsets_without_source():
    text = "X:1\nK:C\nCD|\n"
    f = parse(text)
    result = interpret(f, analyze(f))
    elements = lane(result.tunes[0])
    assert elements[0]['startChar'] == 0
    assert elements[1]['startChar'] == 1


def test_broken_rhythm():
    tune = interpret_abc("X:1\nK:C\nA>B c<d|\n").tunes[0]
    durations = [el['duration'] for el in notes(lane(tune))]
    assert durations == [0.1875, 0.0625, 0.0625, 0.1875]


def test_broken_rhythm_does_not_cross_bar():
    tune = interpret_abc("X:1\nK:C\nA>|B\n").tunes[0]
    durations = [el['duration'] for el in notes(lane(tune))]
    assert durations == [0.1875, 0.125]


def test_note_lengths():
    tune = interpret_abc("X:1\nL:1/4\nK:C\nC2 D/ E3/2 F//\n").tunes[0]
    durations = [el['duration'] for el in notes(lane(tune))]
    assert durations == [0.5, 0.125, 0.375, 0.0625]


def test_tie_same_pitch():
    tune = interpret_abc("X:1\nK:C\nC-C D\n").tunes[0]
    first, second, third = notes(lane(tune))
    assert first['pitches'][0]['startTie'] == {}
    assert second['pitches'][0]['endTie'] is True
    assert 'endTie' not in third['pitches'][0]


def test_tie_different_pitch():
    tune = interpret_abc("X:1\nK:C\nC-[EG]\n").tunes[0]
    first, second = notes(lane(tune))
    assert 'startTie' in first['pitches'][0]
    assert second['pitches'][0]['endTie'] is True
    assert 'endTie' not in second['pitches'][1]


def test_tie_chords():
    tune = interpret_abc("X:1\nK:C\n[CE]-[EC]\n").tunes[0]
    first, second = notes(lane(tune))
    assert all('startTie' in p for p in first['pitches'])
    assert all(p.get('endTie') for p in second['pitches'])
    tune = interpret_abc("X:1\nK:C\n[C-E][CE]\n").tunes[0]
    first, second = notes(lane(tune))
    assert 'startTie' in first['pitches'][0]
    assert 'startTie' not in first['pitches'][1]
    assert second['pitches'][0]['endTie'] is True
    assert 'endTie' not in second['pitches'][1]


def test_slurs():
    tune = interpret_abc("X:1\nK:C\n(CD) .(EF)\n").tunes[0]
    c, d, e, f = notes(lane(tune))
    assert c['pitches'][0]['startSlur'] == [{'label': 101}]
    assert d['pitches'][0]['endSlur'] == [101]
    assert e['pitches'][0]['startSlur'] == [{'label': 102,
                                             'style': 'dotted'}]
    assert f['pitches'][0]['endSlur'] == [102]


def test_nested_slurs():
    tune = interpret_abc("X:1\nK:C\n((CD)E)\n").tunes[0]
    c, d, e = notes(lane(tune))
    assert c['pitches'][0]['startSlur'] == [{'label': 101}, {'label': 102}]
    assert d['pitches'][0]['endSlur'] == [102]
    assert e['pitches'][0]['endSlur'] == [101]


def test_unmatched_slur_close():
    result = interpret_abc("X:1\nK:C\nC) D\n")
    c, d = notes(lane(result.tunes[0]))
    assert 'endSlur' not in c['pitches'][0]
    assert 'endSlur' not in d['pitches'][0]
    assert result.diagnostics == []


def test_slur_closed_on_rest():
    tune = interpret_abc("X:1\nK:C\n((C z) D E)\n").tunes[0]
    c, d, e = lane(tune).note_elements()
    assert [s['label'] for s in c['pitches'][0]['startSlur']] == [101, 102]
    assert 'endSlur' not in d['pitches'][0]
    assert e['pitches'][0]['endSlur'] == [101]


def test_beaming():
    tune = interpret_abc("X:1\nK:C\nCDz EF G2A B\n").tunes[0]
    elements = lane(tune)
    c, d, z, e, f, g, a, b = elements
    assert c.get('startBeam') and d.get('endBeam')
    assert 'startBeam' not in z and 'endBeam' not in z
    assert e.get('startBeam') and f.get('endBeam')
    for el in (g, a, b):
        assert 'startBeam' not in el and 'endBeam' not in el


def test_beaming_broken_by_bar():
    tune = interpret_abc("X:1\nK:C\nCD|EF\n").tunes[0]
    c, d, bar, e, f = lane(tune)
    assert c.get('startBeam') and d.get('endBeam')
    assert e.get('startBeam') and f.get('endBeam')


def test_tuplet():
    tune = interpret_abc("X:1\nK:C\n(3CDE F\n").tunes[0]
    c, d, e, f = notes(lane(tune))
    assert c['startTriplet'] == 3
    assert c['tripletMultiplier'] == pytest.approx(2 / 3)
    assert c['tripletR'] == 3
    assert e['endTriplet'] is True
    assert 'startTriplet' not in d and 'endTriplet' not in d
    assert 'startTriplet' not in f and 'endTriplet' not in f


def test_tuplet_with_explicit_ratio():
    tune = interpret_abc("X:1\nK:C\n(2:3:2CD\n").tunes[0]
    c, d = notes(lane(tune))
    assert c['startTriplet'] == 2
    assert c['tripletMultiplier'] == 1.5
    assert d['endTriplet'] is True


def test_zero_lengths_fall_back():
    tune = interpret_abc("X:1\nK:C\nC0 (3:0DEF (0G\n").tunes[0]
    c, d, e, f, g = notes(lane(tune))
    assert c['duration'] == 0.125
    assert d['tripletMultiplier'] == pytest.approx(2 / 3)
    assert 'startTriplet' not in g


def test_measure_counting():
    interp = run("X:1\nK:C\nC|D|E|F\n")
    assert interp.states[0].measure_number == 4


def test_whole_measure_rest():
    tune = interpret_abc("X:1\nL:1/4\nK:C\nz4|\n").tunes[0]
    assert lane(tune)[0]['rest'] == {'type': 'whole'}
    tune = interpret_abc("X:1\nM:6/8\nK:C\nz2|\n").tunes[0]
    assert lane(tune)[0]['rest'] == {'type': 'rest'}
    tune = interpret_abc("X:1\nM:3/2\nK:C\nz8|\n").tunes[0]
    assert lane(tune)[0]['rest'] == {'type': 'rest'}


def test_whole_measure_rest_float_mode(monkeypatch):
    monkeypatch.setattr(AbcConfig, 'exact_whole_rest', False)
    tune = interpret_abc("X:1\nK:C\nz8|\n").tunes[0]
    assert lane(tune)[0]['rest'] == {'type': 'whole'}


def test_rest_types():
    tune = interpret_abc("X:1\nK:C\nz x y\n").tunes[0]
    assert [el['rest']['type'] for el in lane(tune)] == \
        ['rest', 'invisible', 'spacer']


def test_multimeasure_rest():
    tune = interpret_abc("X:1\nK:C\nZ4|X\n").tunes[0]
    z, bar, x = lane(tune)
    assert z['rest'] == {'type': 'multimeasure', 'text': 4}
    assert z['duration'] == 0.5
    assert x['rest'] == {'type': 'invisible-multimeasure', 'text': 1}


def test_voice_round_trip():
    tune = interpret_abc("X:1\nK:C\nV:1\nC|\nV:2\nD|\nV:1\nE|\n").tunes[0]
    assert tune.line_num == 2
    assert tune.voice_num == 2
    assert tune.staff_num == 2
    voice1 = notes(lane(tune, 0, 0)) + notes(lane(tune, 1, 0))
    voice2 = notes(lane(tune, 0, 1)) + notes(lane(tune, 1, 1))
    assert [el['pitches'][0]['pitch'] for el in voice1] == [0, 2]
    assert [el['pitches'][0]['pitch'] for el in voice2] == [1]


def test_voices_declared_in_header():
    tune = interpret_abc("X:1\nV:1\nV:2 clef=bass\nK:G\nC|\nV:2\nC,|\n"
                         ).tunes[0]
    assert tune.voice_num == 2
    system = tune.systems[0]
    assert len(system.staffs) == 2
    assert notes(system.staffs[0].voices[0])[0]['pitches'][0]['pitch'] == 0
    assert notes(system.staffs[1].voices[0])[0]['pitches'][0]['pitch'] == -7
    assert system.staffs[0].key['root'] == 'G'
    assert system.staffs[1].clef['type'] == 'bass'


def test_explicit_score_layout():
    tune = interpret_abc("X:1\n%%score (1 2)\nK:C\nV:1\nC|\nV:2\nE|\n"
                         ).tunes[0]
    assert tune.line_num == 1
    staffs = tune.systems[0].staffs
    assert len(staffs) == 1
    assert len(staffs[0].voices) == 2
    assert notes(staffs[0].voices[0])[0]['pitches'][0]['pitch'] == 0
    assert notes(staffs[0].voices[1])[0]['pitches'][0]['pitch'] == 2


def test_score_layout_voice_not_listed():
    tune = interpret_abc("X:1\n%%score 1\nK:C\nV:1\nC|\nV:2\nE|\n").tunes[0]
    staffs = tune.systems[0].staffs
    assert len(staffs) == 2
    assert notes(staffs[1].voices[0])[0]['pitches'][0]['pitch'] == 2


def test_merge_voice():
    tune = interpret_abc("X:1\nK:C\nV:1\nC|\nV:2 merge=true\nD|\n").tunes[0]
    assert tune.staff_num == 1
    staff = tune.systems[0].staffs[0]
    assert len(staff.voices) == 2
    assert notes(staff.voices[1])[0]['pitches'][0]['pitch'] == 1


def test_lines_make_systems():
    tune = interpret_abc("X:1\nK:C\nC|\nD|\n").tunes[0]
    assert tune.line_num == 2
    tune = interpret_abc("X:1\nK:C\nC|\\\nD|\n").tunes[0]
    assert tune.line_num == 1
    assert len(lane(tune)) == 4
    tune = interpret_abc("X:1\n%%continueall\nK:C\nC|\nD|\n").tunes[0]
    assert tune.line_num == 1


def test_lyrics():
    tune = interpret_abc("X:1\nK:C\nCDE F|\nw:la-la * hey\n").tunes[0]
    c, d, e, f = notes(lane(tune))
    assert c['lyric'] == [{'syllable': 'la', 'divider': '-'}]
    assert d['lyric'] == [{'syllable': 'la', 'divider': ' '}]
    assert 'lyric' not in e
    assert f['lyric'] == [{'syllable': 'hey', 'divider': ' '}]


def test_lyrics_more_syllables_than_notes():
    tune = interpret_abc("X:1\nK:C\nC\nw:one two three\n").tunes[0]
    (c,) = notes(lane(tune))
    assert c['lyric'] == [{'syllable': 'one', 'divider': ' '}]


def test_setfont_and_text():
    tune = interpret_abc("X:1\n%%setfont-1 Times 18 bold\n"
                         "%%text Normal $1bold$0 normal\nK:C\nC\n").tunes[0]
    assert tune.line_num == 2
    text = tune.systems[0]
    assert not text.is_music
    assert text.segments == [
        {'text': 'Normal '},
        {'text': 'bold', 'font': {'face': 'Times', 'size': 18,
                                  'weight': 'bold', 'style': 'normal',
                                  'decoration': 'none'}},
        {'text': ' normal'}]
    assert tune.systems[1].is_music


def test_center_and_begintext():
    tune = interpret_abc("X:1\nK:C\nC\n%%center Middle\n%%begintext\n"
                         "first\nsecond\n%%endtext\nD\n").tunes[0]
    kinds = [s.kind if not s.is_music else 'music' for s in tune.systems]
    assert kinds == ['music', 'center', 'text', 'text', 'music']
    assert tune.systems[1].to_dict() == {'text': [{'text': 'Middle'}],
                                         'center': True}
    assert tune.systems[3].plain_text() == 'second'


def test_subtitle():
    tune = interpret_abc("X:1\nT:Main\nK:C\nC|\nT:Second\nD|\n").tunes[0]
    assert tune.meta_text['title'] == 'Main'
    assert tune.line_num == 3
    assert tune.systems[1].to_dict() == {'subtitle': {'text': 'Second'}}
    assert notes(lane(tune, 2))[0]['pitches'][0]['pitch'] == 1


def test_titles_and_metadata():
    tune = interpret_abc("X:1\nT:One\nT:Two\nC:Someone\nR:reel\n"
                         "Q:1/4=96\nK:C\nC\n").tunes[0]
    assert tune.meta_text['title'] == 'One\nTwo'
    assert tune.meta_text['composer'] == 'Someone'
    assert tune.meta_text['rhythm'] == 'reel'
    assert tune.meta_text['tempo'] == {'duration': [1, 4], 'bpm': 96}


def test_tempo_defaults():
    tune = interpret_abc("X:1\nK:C\nC\nQ:100\nD\n").tunes[0]
    assert tune.meta_text['tempo'] == {'bpm': 100}
    interp = run("Q:80\n\nX:1\nQ:90\nK:C\nC\nQ:100\nD\n\nX:2\nK:C\nE\n")
    assert interp.states[0].tune_defaults.tempo == {'bpm': 100}
    assert interp.states[0].tune.meta_text['tempo'] == {'bpm': 90}
    assert interp.states[1].tune_defaults.tempo == {'bpm': 80}


def test_body_key_clef_updates_defaults():
    interp = run("X:1\nK:C\nC|\nK:G clef=bass\nD|\nV:2\nE|\n")
    state = interp.states[0]
    assert state.tune_defaults.clef['type'] == 'bass'
    assert state.voices['2'].current_clef['type'] == 'bass'


def test_titlecaps():
    tune = interpret_abc("%%titlecaps\n\nX:1\nT:Hello\nK:C\nC\n").tunes[0]
    assert tune.meta_text['title'] == 'HELLO'


def test_unknown_info_line_key():
    with pytest.warns(AbcWarning):
        result = interpret_abc("X:1\nK:C\nY:whatever\nCD|\n")
    assert len(result.diagnostics) == 1
    assert "Unknown info line key" in result.diagnostics[0].message
    assert len(notes(lane(result.tunes[0]))) == 2


def test_file_header_misuse():
    with pytest.warns(AbcWarning):
        result = interpret_abc("K:G\n%%score 1 2\n\nX:1\nK:C\nC\n")
    messages = [d.message for d in result.diagnostics]
    assert messages == [
        "Info line key: is not allowed in file header",
        "Directive %%score is not allowed in file header "
        "(requires tune context)"]
    assert len(result.tunes) == 1


def test_file_header_voice():
    with pytest.warns(AbcWarning):
        result = interpret_abc("V:1\n\nX:1\nK:C\nC\n")
    assert [d.message for d in result.diagnostics] == [
        "Info line voice: is not allowed in file header"]


def test_file_header_defaults():
    result = interpret_abc("L:1/4\nC:Anon\n%%abc-version 2.1\n%%scale 0.8\n"
                           "\nX:1\nK:C\nC\n")
    tune = result.tunes[0]
    assert notes(lane(tune))[0]['duration'] == 0.25
    assert tune.meta_text['composer'] == 'Anon'
    assert tune.version == '2.1'
    assert tune.formatting['scale'] == 0.8


def test_tunes_are_independent():
    text = ("C:Anon\n\n"
            "X:1\nT:One\nC:Other\nL:1/4\n%%setfont-1 Courier 10\nK:G\nC\n\n"
            "X:2\nT:Two\nK:C\n%%text $1x\nD\n")
    tunes = interpret_abc(text).tunes
    assert len(tunes) == 2
    assert tunes[0].meta_text == {'title': 'One', 'composer': 'Other'}
    assert tunes[1].meta_text == {'title': 'Two', 'composer': 'Anon'}
    assert notes(lane(tunes[0]))[0]['duration'] == 0.25
    assert tunes[1].systems[0].segments == [{'text': '$1x'}]
    assert notes(lane(tunes[1], 1))[0]['duration'] == 0.125
    assert tunes[1].systems[1].staffs[0].key['root'] == 'C'


def test_inline_fields():
    tune = interpret_abc("X:1\nK:C\nC[K:G]D[M:3/4]E|\n").tunes[0]
    types = [el['el_type'] for el in lane(tune)]
    assert types == ['note', 'key', 'note', 'meter', 'note', 'bar']
    key = lane(tune)[1]
    assert key['root'] == 'G'
    assert key['accidentals'] == [{'acc': 'sharp', 'note': 'f',
                                   'verticalPos': 10}]
    meter = lane(tune)[3]
    assert meter['type'] == 'specified'
    assert meter['value'] == [Rational(3, 4)]


def test_inline_note_length():
    tune = interpret_abc("X:1\nK:C\nC[L:1/4]D\n").tunes[0]
    durations = [el['duration'] for el in notes(lane(tune))]
    assert durations == [0.125, 0.25]


def test_pitches_and_accidentals():
    tune = interpret_abc("X:1\nK:C\n^C _d' =E, ^^F __G\n").tunes[0]
    pitches = [el['pitches'][0] for el in notes(lane(tune))]
    assert [p['pitch'] for p in pitches] == [0, 15, -5, 3, 4]
    assert [p['accidental'] for p in pitches] == \
        ['sharp', 'flat', 'natural', 'dblsharp', 'dblflat']
    assert pitches[0]['name'] == '^C'


def test_grace_notes():
    tune = interpret_abc("X:1\nK:C\n{/gf}A B\n").tunes[0]
    a, b = notes(lane(tune))
    assert a['gracenotes'] == [
        {'pitch': 11, 'name': 'g', 'duration': 0.125, 'verticalPos': 11,
         'acciaccatura': True},
        {'pitch': 10, 'name': 'f', 'duration': 0.125, 'verticalPos': 10}]
    assert 'gracenotes' not in b


def test_decorations():
    tune = interpret_abc("X:1\nK:C\n!trill!A .B !^fermata!c TD E\n").tunes[0]
    a, b, c, d, e = notes(lane(tune))
    assert a['decoration'] == ['trill']
    assert b['decoration'] == ['staccato']
    assert c['decoration'] == ['fermata']
    assert d['decoration'] == ['trill']
    assert 'decoration' not in e


def test_annotations():
    tune = interpret_abc('X:1\nK:C\n"^Allegro"C "Am"D "_x"z\n').tunes[0]
    c, d, z = lane(tune)
    assert c['chord'] == [{'name': 'Allegro', 'position': 'above'}]
    assert d['chord'] == [{'name': 'Am', 'position': 'default'}]
    assert z['chord'] == [{'name': 'x', 'position': 'below'}]


def test_endings():
    tune = interpret_abc("X:1\nK:C\n|1 C :|2 D|\n").tunes[0]
    bars = [el for el in lane(tune) if el['el_type'] == 'bar']
    assert bars[0]['startEnding'] == '1'
    assert bars[1]['type'] == 'bar_right_repeat'
    assert bars[1]['startEnding'] == '2'
    tune = interpret_abc("X:1\nK:C\nC|[1 D\n").tunes[0]
    c, bar, d = lane(tune)
    assert bar['startEnding'] == '1'
    tune = interpret_abc("X:1\nK:C\n[2 D\n").tunes[0]
    bar, d = lane(tune)
    assert bar['type'] == 'bar_invisible'
    assert bar['startEnding'] == '2'


def test_bar_types():
    tune = interpret_abc("X:1\nK:C\n|: C :: D :| E || F |]\n").tunes[0]
    bars = [el['type'] for el in lane(tune) if el['el_type'] == 'bar']
    assert bars == ['bar_left_repeat', 'bar_dbl_repeat', 'bar_right_repeat',
                    'bar_thin_thin', 'bar_thin_thick']


def test_error_nodes_skipped():
    result = interpret_abc("X:1\nK:C\nC#D|\n")
    assert len(notes(lane(result.tunes[0]))) == 2
    assert result.diagnostics == []


def test_tune_without_body():
    tune = interpret_abc("X:1\nT:Empty\nK:C\n").tunes[0]
    assert tune.systems == []
    assert (tune.staff_num, tune.voice_num, tune.line_num) == (0, 0, 0)


def test_to_dict():
    tune = interpret_abc("X:1\nT:Dict\nM:3/4\nK:D\nA2 B|\n").tunes[0]
    d = tune.to_dict()
    assert d['metaText'] == {'title': 'Dict'}
    assert (d['staffNum'], d['voiceNum'], d['lineNum']) == (1, 1, 1)
    staff = d['lines'][0]['staff'][0]
    assert staff['meter'] == {'type': 'specified',
                              'value': [{'numerator': 3, 'denominator': 4}]}
    assert staff['key']['root'] == 'D'
    assert [el['el_type'] for el in staff['voices'][0]] == \
        ['note', 'note', 'bar']
