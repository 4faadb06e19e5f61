"""Token stream types: tags, exclusion ranges and validator stack entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field

# Elements whose markup grammar forbids a separate closing tag.
VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
        # HTML4 leftovers
        "command",
        "keygen",
        "menuitem",
    }
)

# Elements whose body is opaque to tag scanning.
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})


class TokenKind(StrEnum):
    OPEN = "OPEN"
    CLOSE = "CLOSE"


class TokenizerMode(StrEnum):
    HTML = "html"
    XML = "xml"


class Language(StrEnum):
    HTML = "html"
    XML = "xml"
    VUE = "vue"
    JSX = "jsx"

    @property
    def tokenizer_mode(self) -> TokenizerMode:
        """Vue templates and JSX are tokenized permissively, like HTML."""
        if self is Language.XML:
            return TokenizerMode.XML
        return TokenizerMode.HTML


class Token(BaseModel):
    """A single OPEN or CLOSE tag at a 1-based source position."""

    kind: TokenKind
    name: str
    line: int
    column: int
    offset: int = 0
    attributes: dict[str, str | None] | None = None
    is_self_closing: bool = Field(False, alias="isSelfClosing")
    synthetic: bool = False

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def position(self) -> tuple[int, int]:
        return (self.line, self.column)


@dataclass(frozen=True)
class ExclusionRange:
    """Inclusive ``[start, end]`` character span never scanned for closing tags."""

    start: int
    end: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end


@dataclass(frozen=True)
class StackEntry:
    """An open, non-void element waiting for its closing tag."""

    name: str
    line: int
    column: int
