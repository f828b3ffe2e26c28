"""
Serialization callbacks

A migration run hands its finished fragments to exactly one callback. These
are the callbacks ddlforge ships; callers can pass any callable with the same
signature.
"""

import logging
from pathlib import Path

from ddlforge.providers.base.statements import SqlStatement, render_script

logger = logging.getLogger(__name__)


class ScriptCollector:
    """Keeps the fragments it receives"""

    def __init__(self) -> None:
        self.fragments: tuple[SqlStatement, ...] | None = None
        self.calls = 0

    def __call__(self, fragments: tuple[SqlStatement, ...]) -> None:
        self.calls += 1
        self.fragments = fragments

    @property
    def script(self) -> str:
        return render_script(self.fragments or ())


class ScriptFileWriter:
    """Renders the fragments into a SQL file"""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def __call__(self, fragments: tuple[SqlStatement, ...]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(render_script(fragments))
        logger.info("Wrote migration script to %s", self.path)
