import json
import zipfile

import pytest

from kotoba_dict.entry import Entry, EntryEnglish, EntrySource, Link

MANIFEST = {"title": "Test Dict", "format": 3, "revision": "rev1", "sequenced": True}

TERMS = [
    ["家", "いえ", "n", "", 100, ["house"], 42, "P n"],
    ["食べる", "たべる", "v1 vt", "v1", 50, ["to eat"], 7, "P"],
    ["犬", "いぬ", "n", "", 10, ["dog"], 13, ""],
]

TAGS = [
    ["n", "partOfSpeech", -3, "noun (common)", 0],
    ["P", "popular", -10, "popular term", 10],
]

KANJI = [
    ["家", "カ ケ", "いえ や うち", "jouyou", ["house", "home"], {"grade": "2", "strokes": "10"}],
]


def _write_files(directory, files):
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        text = content if isinstance(content, str) else json.dumps(content, ensure_ascii=False)
        (directory / name).write_text(text, encoding="utf-8")
    return directory


@pytest.fixture
def make_dict(tmp_path):
    """Factory writing a dictionary export directory from {name: content}."""
    counter = {"n": 0}

    def make(files, name=None):
        counter["n"] += 1
        return _write_files(tmp_path / (name or f"dict{counter['n']}"), files)

    return make


@pytest.fixture
def make_zip(tmp_path):
    """Factory writing a dictionary export archive from {name: content}."""

    def make(files, name="dict.zip", folder=""):
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for member, content in files.items():
                text = content if isinstance(content, str) else json.dumps(content, ensure_ascii=False)
                zf.writestr(folder + member, text)
        return path

    return make


@pytest.fixture
def sample_files():
    return {
        "index.json": MANIFEST,
        "term_bank_1.json": TERMS[:2],
        "term_bank_2.json": TERMS[2:],
        "tag_bank_1.json": TAGS,
        "kanji_bank_1.json": KANJI,
        "term_meta_bank_1.json": [["家", "freq", 120]],
        "kanji_meta_bank_1.json": [["家", "freq", 33]],
    }


@pytest.fixture
def sample_entries():
    """Entries from all three sources."""
    return [
        Entry(
            source=EntrySource.IMPORT,
            origin="JMdict",
            expression="家",
            reading="いえ",
            english=[EntryEnglish(glossary=["house"], tags=["n"])],
            tags=["P", "n"],
            score=100,
        ),
        Entry(
            source=EntrySource.JISHO,
            origin="",
            expression="家",
            reading="うち",
            extra_forms=["内"],
            extra_readings=["うち"],
            english=[
                EntryEnglish(
                    glossary=["house", "home"],
                    tags=["Noun", "Usually written using kana alone"],
                    info=["from 〜のうち"],
                    links=[Link.see_also("家"), Link(uri="https://en.wikipedia.org/wiki/House", text="House")],
                ),
                EntryEnglish(glossary=["one's family"], tags=["Noun"]),
            ],
            tags=["jlpt-n5", "P"],
            score=0,
        ),
        Entry(
            source=EntrySource.JAPANESE_POD,
            origin="",
            expression="いえ",
            reading="いえ",
            english=[EntryEnglish(glossary=["house"], info=["(n)"])],
            score=-1,
        ),
        Entry(source=EntrySource.JISHO, origin="", expression="ない"),
    ]
