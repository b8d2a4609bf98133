"""Languages shipped with Inno Setup 6."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Optional, Tuple

from innoBundler.validation import ValidationResult


class Language(Enum):
    """Installer language with its Inno Setup message file.

    Parameters:
        locale: Identifier used in the ``Name:`` parameter.
        messages_file: Message file reference relative to the compiler.
    """

    ENGLISH = ("english", "compiler:Default.isl")
    ARMENIAN = ("armenian", "compiler:Languages\\Armenian.isl")
    BRAZILIAN_PORTUGUESE = ("brazilianportuguese", "compiler:Languages\\BrazilianPortuguese.isl")
    BULGARIAN = ("bulgarian", "compiler:Languages\\Bulgarian.isl")
    CATALAN = ("catalan", "compiler:Languages\\Catalan.isl")
    CORSICAN = ("corsican", "compiler:Languages\\Corsican.isl")
    CZECH = ("czech", "compiler:Languages\\Czech.isl")
    DANISH = ("danish", "compiler:Languages\\Danish.isl")
    DUTCH = ("dutch", "compiler:Languages\\Dutch.isl")
    FINNISH = ("finnish", "compiler:Languages\\Finnish.isl")
    FRENCH = ("french", "compiler:Languages\\French.isl")
    GERMAN = ("german", "compiler:Languages\\German.isl")
    HEBREW = ("hebrew", "compiler:Languages\\Hebrew.isl")
    HUNGARIAN = ("hungarian", "compiler:Languages\\Hungarian.isl")
    ICELANDIC = ("icelandic", "compiler:Languages\\Icelandic.isl")
    ITALIAN = ("italian", "compiler:Languages\\Italian.isl")
    JAPANESE = ("japanese", "compiler:Languages\\Japanese.isl")
    NORWEGIAN = ("norwegian", "compiler:Languages\\Norwegian.isl")
    POLISH = ("polish", "compiler:Languages\\Polish.isl")
    PORTUGUESE = ("portuguese", "compiler:Languages\\Portuguese.isl")
    RUSSIAN = ("russian", "compiler:Languages\\Russian.isl")
    SLOVAK = ("slovak", "compiler:Languages\\Slovak.isl")
    SLOVENIAN = ("slovenian", "compiler:Languages\\Slovenian.isl")
    SPANISH = ("spanish", "compiler:Languages\\Spanish.isl")
    TURKISH = ("turkish", "compiler:Languages\\Turkish.isl")
    UKRAINIAN = ("ukrainian", "compiler:Languages\\Ukrainian.isl")

    def __init__(self, locale: str, messages_file: str) -> None:
        self.locale = locale
        self.messages_file = messages_file

    def inno_entry(self) -> str:
        """Return the ``[Languages]`` line for this language.

        Returns:
            Inno Setup language entry.
        """

        return f'Name: "{self.locale}"; MessagesFile: "{self.messages_file}"'

    @classmethod
    def from_name(cls, name: Any) -> Optional["Language"]:
        """Look up a language by its locale identifier.

        Parameters:
            name: Language name, case-insensitive.

        Returns:
            Matching Language or None.
        """

        if not isinstance(name, str):
            return None
        wanted = name.strip().lower()
        for member in cls:
            if member.locale == wanted:
                return member
        return None

    @classmethod
    def parse_list(cls, names: Optional[Iterable[Any]]) -> ValidationResult[Tuple["Language", ...]]:
        """Parse the ``languages`` option.

        Order is preserved and repeated names are kept once. An absent or
        empty selection means every language.

        Parameters:
            names: Requested language names.

        Returns:
            ValidationResult with the languages or an error message.
        """

        if not names:
            return ValidationResult.ok(tuple(cls))
        resolved: list[Language] = []
        for name in names:
            language = cls.from_name(name)
            if language is None:
                return ValidationResult.fail(
                    f"inno_bundle.languages is invalid: language {name!r} is not supported."
                )
            if language not in resolved:
                resolved.append(language)
        return ValidationResult.ok(tuple(resolved))
