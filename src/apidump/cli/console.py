"""CLI console helpers with optional Rich support.

Everything human-readable goes to **stderr**: standard output is
reserved for the API description itself.  The Rich import stays lazy
because the relaunched child runs with the target application's
``sys.path`` in front, where Rich may be missing or a different version.
"""

from __future__ import annotations

import re
import sys
from typing import Any

_MARKUP_TAG = re.compile(r"(?<!\\)\[/?[a-z][a-z ]*\]")


def _load_rich_console_class() -> type[Any] | None:
	"""Return ``rich.console.Console`` or ``None`` when Rich is unavailable."""
	try:
		from rich.console import Console
	except ModuleNotFoundError:
		return None
	return Console


def get_rich_console() -> Any | None:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	if console_class is None:
		return None
	return console_class(stderr=True, highlight=False, soft_wrap=True)


def escape(text: str) -> str:
	"""Escape Rich markup in user-controlled *text*."""
	try:
		from rich.markup import escape as rich_escape
	except ModuleNotFoundError:
		return text.replace("[", "\\[")
	return rich_escape(text)


def _strip_markup(obj: object) -> object:
	"""Drop simple style tags for the plain-text fallback."""
	if not isinstance(obj, str):
		return obj
	return _MARKUP_TAG.sub("", obj).replace("\\[", "[")


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		rich_console = get_rich_console()
		if rich_console is None:
			print(*(_strip_markup(obj) for obj in objects), file=sys.stderr)
			return
		rich_console.print(*objects)


console = _ConsoleProxy()
