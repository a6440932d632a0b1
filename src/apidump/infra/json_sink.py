"""JSON implementation of :class:`~apidump.core.protocols.DocumentSink`.

The document is written whole with :func:`json.dump`; its content is
never inspected.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TextIO

from apidump.core.models import Formatting, JsonOptions

INDENT: int = 2
COMPACT_SEPARATORS: tuple[str, str] = (",", ":")
UTF8_NAMES: frozenset[str] = frozenset({"utf-8", "utf8"})


class JsonDocumentSink:
    """Writes documents to a file or to standard output."""

    @contextmanager
    def open(self, output_path: Path | None) -> Iterator[TextIO]:
        """Yield a writable text stream; flush and release it on exit.

        A file is created (or truncated); its parent directory must
        exist.  Standard output is switched to UTF-8 when it uses another
        encoding, then flushed but left open.
        """
        if output_path is None:
            stream = sys.stdout
            encoding = (getattr(stream, "encoding", None) or "").lower().replace("_", "-")
            if encoding not in UTF8_NAMES and hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding="utf-8")
            try:
                yield stream
            finally:
                stream.flush()
            return

        with open(output_path, "w", encoding="utf-8", newline="\n") as stream:
            yield stream

    def serialize(
        self,
        document: Mapping[str, Any],
        stream: TextIO,
        options: JsonOptions,
    ) -> None:
        if options.formatting is Formatting.INDENTED:
            layout: dict[str, Any] = {"indent": INDENT}
        else:
            layout = {"separators": COMPACT_SEPARATORS}
        json.dump(
            document,
            stream,
            ensure_ascii=options.ensure_ascii,
            sort_keys=options.sort_keys,
            **layout,
        )
        stream.write("\n")
