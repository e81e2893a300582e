import pytest

from kotoba_dict.entry import EntryEnglish, EntrySource, Link
from kotoba_dict.errors import InvalidResponse
from kotoba_dict.sources.japanese_pod import (
    JapanesePodEntry,
    audio_keys,
    entries_from_japanese_pod,
    entry_from_japanese_pod,
    rows_with_order,
)
from kotoba_dict.sources.jisho import (
    JishoEntry,
    JishoJapanese,
    JishoLink,
    JishoSense,
    attach_audio,
    entries_from_jisho,
    entry_from_jisho,
    find_audio,
    parse_jisho_response,
)


def jisho_row(order=0, **kwargs):
    values = dict(
        slug="家",
        is_common=True,
        japanese=[
            JishoJapanese(word="家", reading="いえ"),
            JishoJapanese(word="家", reading="うち"),
            JishoJapanese(word="宅", reading="たく"),
        ],
        senses=[
            JishoSense(
                english_definitions=["house", "residence"],
                tags=["Usually written using kana alone"],
                parts_of_speech=["Noun"],
                see_also=["家屋"],
                info=["from 〜のうち"],
                links=[JishoLink(text="House on Wikipedia", url="https://en.wikipedia.org/wiki/House")],
            ),
            JishoSense(english_definitions=["family"], parts_of_speech=["Noun", "Suffix"]),
        ],
        jlpt=["jlpt-n5"],
        tags=["wanikani8"],
        order=order,
    )
    values.update(kwargs)
    return JishoEntry(**values)


# ============================================================================
# jisho.org
# ============================================================================

def test_entry_from_jisho():
    entry = entry_from_jisho(jisho_row())

    assert entry.source is EntrySource.JISHO
    assert entry.origin == ""
    assert entry.expression == "家"
    assert entry.reading == "いえ"
    assert entry.extra_forms == ("家", "宅")
    assert entry.extra_readings == ("うち", "たく")
    assert entry.tags == ("jlpt-n5", "wanikani8", "P")
    assert entry.score == 0
    assert entry.english == (
        EntryEnglish(
            glossary=["house", "residence"],
            tags=["Noun", "Usually written using kana alone"],
            info=["from 〜のうち"],
            links=[
                Link(uri="see://家屋", text="家屋"),
                Link(uri="https://en.wikipedia.org/wiki/House", text="House on Wikipedia"),
            ],
        ),
        EntryEnglish(glossary=["family"], tags=["Noun", "Suffix"]),
    )


def test_entry_from_jisho_not_common():
    entry = entry_from_jisho(jisho_row(is_common=False, jlpt=[], tags=[]))
    assert entry.tags == ()


def test_entry_from_jisho_does_not_dedup_tags():
    entry = entry_from_jisho(jisho_row(jlpt=["P"], tags=["P"]))
    assert entry.tags == ("P", "P", "P")


@pytest.mark.parametrize("count", [1, 2, 5])
def test_jisho_extra_forms_match_readings(count):
    forms = [JishoJapanese(word=f"w{i}", reading=f"r{i}") for i in range(count)]
    entry = entry_from_jisho(jisho_row(japanese=forms))
    assert len(entry.extra_forms) == len(entry.extra_readings) == count - 1


def test_jisho_score_follows_order():
    entries = entries_from_jisho([jisho_row(order=i) for i in range(3)])
    assert [e.score for e in entries] == [0, -1, -2]
    ranked = sorted(reversed(entries), key=lambda e: e.score, reverse=True)
    assert ranked == entries


def jisho_body():
    return {
        "meta": {"status": 200},
        "data": [
            {
                "slug": "家",
                "is_common": True,
                "japanese": [{"word": "家", "reading": "いえ"}, {"reading": "うち"}],
                "senses": [{
                    "english_definitions": ["house"],
                    "parts_of_speech": ["Noun"],
                    "links": [{"text": "Wiki", "url": "https://example.org"}],
                    "tags": [],
                    "restrictions": [],
                    "see_also": [],
                    "antonyms": [],
                    "source": [],
                    "info": [],
                }],
                "tags": [],
                "jlpt": ["jlpt-n5"],
                "attribution": {"jmdict": True},
            },
            {
                "slug": "いえ",
                "japanese": [{"reading": "いえ"}],
                "senses": [{"english_definitions": ["no"]}],
            },
        ],
    }


def test_parse_jisho_response():
    rows = parse_jisho_response(jisho_body())
    assert [row.order for row in rows] == [0, 1]
    assert rows[0].japanese[1] == JishoJapanese(word="うち", reading="うち", audio=[])
    assert rows[0].senses[0].links == [JishoLink(text="Wiki", url="https://example.org")]
    assert rows[1].is_common is False

    entries = entries_from_jisho(rows)
    assert entries[1].expression == "いえ"
    assert entries[1].score == -1


@pytest.mark.parametrize("body", [
    None,
    [],
    {"data": []},
    {"meta": {"status": 500}, "data": []},
    {"meta": {"status": 200}, "data": {"not": "a list"}},
    {"meta": {"status": 200}, "data": [{"slug": "x", "japanese": [], "senses": []}]},
    {"meta": {"status": 200}, "data": [{"slug": "x", "japanese": [{}], "senses": []}]},
    {"meta": {"status": 200}, "data": [{"slug": "x", "japanese": [{"word": "x"}], "senses": ["bad"]}]},
    {"meta": {"status": 200}, "data": [{"slug": "x", "is_common": "false", "japanese": [{"word": "x"}], "senses": []}]},
])
def test_parse_jisho_response_invalid(body):
    with pytest.raises(InvalidResponse):
        parse_jisho_response(body)


def test_attach_audio():
    rows = parse_jisho_response(jisho_body())
    with_audio = attach_audio(rows, "家", "いえ", ["https://a/ie.mp3"])

    assert with_audio[0].japanese[0].audio == ["https://a/ie.mp3"]
    assert with_audio[0].japanese[1].audio == []
    assert with_audio[1].japanese[0].audio == []
    assert rows[0].japanese[0].audio == []
    assert find_audio(with_audio, "家") == ["https://a/ie.mp3"]
    assert find_audio(with_audio, "家", "うち") == []


# ============================================================================
# japanesepod101.com
# ============================================================================

def test_entry_from_japanese_pod():
    row = JapanesePodEntry(
        term="家",
        kana="いえ",
        audio=["https://a/ie.mp3"],
        english="house",
        english_info=["(n)"],
        order=2,
    )
    entry = entry_from_japanese_pod(row)

    assert entry.source is EntrySource.JAPANESE_POD
    assert entry.origin == ""
    assert entry.expression == "家"
    assert entry.reading == "いえ"
    assert entry.extra_forms == ()
    assert entry.extra_readings == ()
    assert entry.english == (EntryEnglish(glossary=["house"], tags=[], info=["(n)"], links=[]),)
    assert entry.tags == ()
    assert entry.score == -2


def test_japanese_pod_score_follows_order():
    rows = [JapanesePodEntry(term="家", kana="いえ", english="house", order=i) for i in range(3)]
    assert [e.score for e in entries_from_japanese_pod(rows)] == [0, -1, -2]


def test_rows_with_order():
    rows = rows_with_order([
        {"term": " 家 ", "kana": "いえ", "audio": ["u1"], "english": "house", "english_info": []},
        {"term": "", "kana": "", "audio": [], "english": "nothing", "english_info": []},
        {"term": "", "kana": "うち", "audio": [], "english": "home", "english_info": ["(n)"]},
    ])
    assert [(r.term, r.kana, r.order) for r in rows] == [("家", "いえ", 0), ("うち", "うち", 1)]
    assert rows[1].english_info == ["(n)"]


def test_rows_with_order_missing_key():
    with pytest.raises(InvalidResponse):
        rows_with_order([{"term": "家"}])


def test_audio_keys():
    rows = [
        JapanesePodEntry(term="家", kana="いえ", audio=["u1", "u2"], order=0),
        JapanesePodEntry(term="家", kana="いえ", audio=["u2", "u3"], order=1),
        JapanesePodEntry(term="家", kana="うち", audio=[], order=2),
    ]
    assert audio_keys(rows) == {("家", "いえ"): ["u1", "u2", "u3"], ("家", "うち"): []}
