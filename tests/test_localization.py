from enum import IntEnum

import pytest

from arcdps_ext.localization import Language, Localization
from arcdps_ext.singleton import singleton_manager


class Texts(IntEnum):
    HELLO = 0
    BYE = 1


@pytest.fixture(autouse=True)
def clean_manager():
    singleton_manager.shutdown()
    yield
    singleton_manager.shutdown()


@pytest.fixture
def loc():
    loc = Localization()
    loc.load(Language.ENGLISH, ["Hello", "Bye"])
    loc.load(Language.GERMAN, ["Hallo", "Tschüss"])
    loc.load(Language.FRENCH, ["Bonjour", "Au revoir"])
    loc.load(Language.SPANISH, ["Hola", "Adiós"])
    return loc


def test_default_language_is_english(loc):
    assert loc.translate(0) == "Hello"
    assert loc.current_language == Language.ENGLISH


def test_translate_with_enum(loc):
    assert loc.translate(Texts.BYE) == "Bye"


def test_change_language(loc):
    loc.change_language(Language.GERMAN)
    assert loc.translate(Texts.HELLO) == "Hallo"
    assert loc.translate(1) == "Tschüss"
    loc.change_language(Language.SPANISH)
    assert loc.translate(Texts.BYE) == "Adiós"


def test_missing_id_raises(loc):
    with pytest.raises(IndexError):
        loc.translate(2)
    with pytest.raises(IndexError):
        loc.translate(-1)


def test_empty_language_table_raises(loc):
    loc.change_language(Language.CHINESE)
    with pytest.raises(IndexError):
        loc.translate(0)


def test_unknown_language_raises(loc):
    with pytest.raises(IndexError):
        loc.change_language(6)
    assert loc.current_language == Language.ENGLISH


def test_add_translation_accepts_utf8_bytes():
    loc = Localization()
    loc.add_translation(Language.ENGLISH, "Straße".encode("utf-8"))
    assert loc.translate(0) == "Straße"


def test_add_translation_appends_in_order():
    loc = Localization()
    texts = ["one", "two", "three"]
    for text in texts:
        loc.add_translation(Language.ENGLISH, text)
    assert [loc.translate(i) for i in range(len(texts))] == texts


def test_override_translation(loc):
    loc.override_translation(Language.FRENCH, Texts.HELLO, "Salut")
    loc.change_language(Language.FRENCH)
    assert loc.translate(Texts.HELLO) == "Salut"
    loc.change_language(Language.ENGLISH)
    assert loc.translate(Texts.HELLO) == "Hello"


def test_override_missing_translation_raises(loc):
    with pytest.raises(IndexError):
        loc.override_translation(Language.ENGLISH, 10, "x")


def test_shared_instance_helpers():
    shared = Localization.instance()
    shared.load(Language.ENGLISH, ["Apply"])
    shared.load(Language.GERMAN, ["Anwenden"])
    assert Localization.s_translate(0) == "Apply"
    Localization.s_change_language(Language.GERMAN)
    assert Localization.s_translate(0) == "Anwenden"
    assert Localization.instance() is shared


def test_shared_instance_is_fresh_after_shutdown():
    Localization.instance().load(Language.ENGLISH, ["Apply"])
    singleton_manager.shutdown()
    with pytest.raises(IndexError):
        Localization.s_translate(0)