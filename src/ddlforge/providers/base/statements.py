"""
Statement Buffer

Ordered, append-only list of script fragments. A generator composes the
migration script here; fragment order is the literal script order.

Two-phase protocol:
- prolog statements are held back and flushed right before the first real
  statement; once a real statement exists no prolog statement may be added
- a scratch accumulator collects multi-line statement text until it is
  committed as a single STATEMENT fragment followed by a SEPARATOR fragment
"""

from collections.abc import Callable, Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from ddlforge.exceptions import MigrationError


class FragmentKind(StrEnum):
    """Kind of a script fragment"""

    COMMENT = "comment"
    STATEMENT = "statement"
    SEPARATOR = "separator"


class SqlStatement(BaseModel):
    """One tagged piece of the generated script"""

    model_config = ConfigDict(frozen=True)

    kind: FragmentKind
    text: str


SerializationCallback = Callable[[tuple[SqlStatement, ...]], None]


class StatementBuffer:
    """Run-local accumulation state for a generated script"""

    def __init__(self, separator: str = ";"):
        """
        Args:
            separator: Statement terminator written after every committed statement
        """
        self.separator = separator
        self._fragments: list[SqlStatement] = []
        self._prolog: list[str] = []
        self._scratch: list[str] = []

    @property
    def fragments(self) -> tuple[SqlStatement, ...]:
        """Fragments in emission order"""
        return tuple(self._fragments)

    @property
    def pending_prolog(self) -> tuple[str, ...]:
        return tuple(self._prolog)

    @property
    def scratch(self) -> str:
        return "".join(self._scratch)

    @property
    def has_statements(self) -> bool:
        """Whether a STATEMENT fragment was committed to the body"""
        return any(item.kind == FragmentKind.STATEMENT for item in self._fragments)

    def add_comment(self, comment: str) -> None:
        self._fragments.append(SqlStatement(kind=FragmentKind.COMMENT, text=comment + "\n"))

    def add_blank_line(self) -> None:
        self._fragments.append(SqlStatement(kind=FragmentKind.SEPARATOR, text="\n"))

    def add_raw(self, kind: FragmentKind, text: str) -> None:
        """Append a fragment verbatim (no prolog flush, no separator)"""
        self._fragments.append(SqlStatement(kind=kind, text=text))

    def add_prolog_statement(self, statement: str) -> None:
        """
        Queue a statement that must run before every body statement

        Raises:
            MigrationError: If a body statement was already committed
        """
        if self.has_statements:
            raise MigrationError("Prolog must precede statements")
        self._prolog.append(statement)

    def push(self, text: str) -> None:
        """Append one line to the scratch accumulator without committing"""
        self._scratch.append(text)
        self._scratch.append("\n")

    def commit_statement(
        self, statement: str = "", kind: FragmentKind = FragmentKind.STATEMENT
    ) -> None:
        """
        Commit scratch text plus ``statement`` as one fragment and add a separator

        Pending prolog statements are flushed first when ``kind`` is STATEMENT.
        """
        if kind == FragmentKind.STATEMENT and self._prolog:
            for prolog_statement in self._prolog:
                self._append_with_separator(FragmentKind.STATEMENT, prolog_statement)
            self._prolog.clear()

        self._scratch.append(statement)
        self._append_with_separator(kind, "".join(self._scratch))
        self._scratch.clear()

    def _append_with_separator(self, kind: FragmentKind, text: str) -> None:
        self._fragments.append(SqlStatement(kind=kind, text=text))
        self._fragments.append(
            SqlStatement(kind=FragmentKind.SEPARATOR, text=self.separator + "\n")
        )


def render_script(fragments: Iterable[SqlStatement]) -> str:
    """Join fragments into script text"""
    return "".join(fragment.text for fragment in fragments)


def statement_texts(fragments: Iterable[SqlStatement]) -> list[str]:
    """Return the text of STATEMENT fragments only, stripped"""
    return [
        fragment.text.strip() for fragment in fragments if fragment.kind == FragmentKind.STATEMENT
    ]

