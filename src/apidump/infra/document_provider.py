"""Infrastructure: find the composed app's document provider and JSON options.

Resolution order for the provider:

1. ``app.document_provider`` when it has a callable ``get_document``.
2. The app itself when it has a callable ``get_document``.
3. Apps exposing ``openapi()`` (FastAPI and friends), wrapped in
   :class:`OpenApiAppProvider`.

The JSON options come from ``app.json_options`` — a
:class:`~apidump.core.models.JsonOptions` or a plain mapping — and fall
back to compact output.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any

from apidump.core.models import Formatting, JsonOptions, parse_formatting
from apidump.core.protocols import DocumentProvider
from apidump.exceptions import DocumentNotFoundError, ProviderNotFoundError

DEFAULT_DOCUMENT_NAME: str = "v1"


class OpenApiAppProvider:
    """Adapts an app with an ``openapi()`` method to :class:`DocumentProvider`.

    Such apps describe exactly one document.  Its name is the app's
    ``openapi_document_name`` attribute, or ``"v1"``.
    """

    def __init__(self, app: Any) -> None:
        self._app = app
        self.document_name: str = str(
            getattr(app, "openapi_document_name", None) or DEFAULT_DOCUMENT_NAME
        )

    def get_document(
        self,
        document_name: str,
        host: str | None = None,
        base_path: str | None = None,
        schemes: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        if document_name != self.document_name:
            raise DocumentNotFoundError(
                f"Unknown document '{document_name}'.",
                hint=f"This application only provides '{self.document_name}'.",
            )

        # openapi() may hand back its cached schema; never mutate it.
        document: dict[str, Any] = copy.deepcopy(dict(self._app.openapi()))
        if host is None and base_path is None:
            return document

        if "swagger" in document:
            if host is not None:
                document["host"] = host
            if base_path is not None:
                document["basePath"] = base_path
        else:
            url = (f"//{host}" if host is not None else "") + (base_path or "")
            document["servers"] = [{"url": url}]
        return document


def _has_get_document(obj: Any) -> bool:
    return callable(getattr(obj, "get_document", None))


def resolve_provider(app: Any) -> DocumentProvider:
    """Return the :class:`DocumentProvider` for *app*.

    Raises
    ------
    ProviderNotFoundError
        When *app* offers no way to produce a document.
    """
    explicit = getattr(app, "document_provider", None)
    if explicit is not None and _has_get_document(explicit):
        return explicit
    if _has_get_document(app):
        return app
    if callable(getattr(app, "openapi", None)):
        return OpenApiAppProvider(app)
    raise ProviderNotFoundError(
        f"{type(app).__name__} does not provide an API description.",
        hint="Expose get_document(), a document_provider attribute, or openapi().",
    )


def resolve_json_options(app: Any) -> JsonOptions:
    """Return the target's serializer preferences, defaulting to compact."""
    raw = getattr(app, "json_options", None)
    if isinstance(raw, JsonOptions):
        return raw
    if not isinstance(raw, Mapping):
        return JsonOptions()

    formatting = raw.get("formatting", Formatting.NONE)
    if not isinstance(formatting, Formatting):
        formatting = parse_formatting(str(formatting))
    return JsonOptions(
        formatting=formatting,
        sort_keys=bool(raw.get("sort_keys", False)),
        ensure_ascii=bool(raw.get("ensure_ascii", False)),
    )
