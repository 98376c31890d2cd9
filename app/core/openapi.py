"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with tags metadata
and the shared error envelope, keeping documentation concerns out of the
app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.schemas.contact import ErrorResponse

TAGS_METADATA = [
    {
        "name": "Contact",
        "description": "Contact form submission, rate limited per client address.",
    },
    {
        "name": "Health",
        "description": "Liveness check with uptime and memory figures.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and the error schema."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        components = schema.setdefault("components", {})
        component_schemas = components.setdefault("schemas", {})
        component_schemas.setdefault("ErrorResponse", ErrorResponse.model_json_schema())

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
