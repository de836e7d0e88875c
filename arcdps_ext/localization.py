"""Per-language string tables with a switchable current language."""

from __future__ import annotations

import operator
from enum import Enum, IntEnum
from typing import Iterable

from .singleton import Singleton

_LANGUAGE_SLOTS = 6


class Language(IntEnum):
    """Game client languages."""

    ENGLISH = 0
    FRENCH = 2
    GERMAN = 3
    SPANISH = 4
    CHINESE = 5


def _as_index(value: object) -> int:
    if isinstance(value, Enum):
        value = value.value
    return operator.index(value)


class Localization(Singleton):
    """Holds translation tables and resolves ids in the current language.

    Texts are appended per language, so ids are positions in each table;
    every language should receive the same number of texts.
    """

    def __init__(self) -> None:
        self._translations: list[list[str]] = [[] for _ in range(_LANGUAGE_SLOTS)]
        self._current_language: int = Language.ENGLISH

    def _table(self, lang: object) -> list[str]:
        index = _as_index(lang)
        if not 0 <= index < _LANGUAGE_SLOTS:
            raise IndexError(f"unknown language {lang!r}")
        return self._translations[index]

    @staticmethod
    def _position(table: list[str], id: object) -> int:
        index = _as_index(id)
        if not 0 <= index < len(table):
            raise IndexError(f"no translation with id {id!r}")
        return index

    @property
    def current_language(self) -> int:
        return self._current_language

    def translate(self, id: object) -> str:
        """Return the text for ``id`` in the current language."""
        table = self._table(self._current_language)
        return table[self._position(table, id)]

    @classmethod
    def s_translate(cls, id: object) -> str:
        """Translate with the shared instance."""
        return cls.instance().translate(id)

    def add_translation(self, lang: object, text: str | bytes) -> None:
        """Append a text to the table of ``lang``."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8")
        self._table(lang).append(text)

    def load(self, lang: object, texts: Iterable[str | bytes]) -> None:
        """Append every text to the table of ``lang``."""
        for text in texts:
            self.add_translation(lang, text)

    def change_language(self, lang: object) -> None:
        """Make ``lang`` the language used by ``translate``."""
        self._table(lang)
        self._current_language = _as_index(lang)

    @classmethod
    def s_change_language(cls, lang: object) -> None:
        """Change the language of the shared instance."""
        cls.instance().change_language(lang)

    def override_translation(self, language: object, translation: object, text: str) -> None:
        """Replace an existing text of ``language``."""
        table = self._table(language)
        table[self._position(table, translation)] = text