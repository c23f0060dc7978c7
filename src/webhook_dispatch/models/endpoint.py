"""
Module: endpoint.py
Description: Endpoint model for webhook delivery targets.

An endpoint is one HTTP destination: a URL plus the headers configured
for it. Headers are normalized to a flat string map when the model is
built, whichever of the two accepted shapes they arrive in.

Key Components:
- Endpoint: Immutable delivery target
- Validation: Pydantic v2 with header coercion before validation

Dependencies: pydantic, typing
Author: Webhook Dispatch Team
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webhook_dispatch.utils.headers import coerce_headers


class Endpoint(BaseModel):
    """
    Endpoint model representing one webhook destination.

    Attributes:
        url: Destination URL receiving the POST
        headers: Canonical header map configured for this endpoint

    Example:
        >>> Endpoint(url="https://example.com/hook",
        ...          headers=[{"key": "Authorization", "value": "Bearer abc"}])
        Endpoint(url='https://example.com/hook', headers={'Authorization': 'Bearer abc'})
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    url: str = Field(..., min_length=1, description="Destination URL")
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Endpoint headers in canonical map form"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate url is an HTTP/HTTPS URL."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError("url must be a valid HTTP/HTTPS URL")
        return v

    @field_validator('headers', mode='before')
    @classmethod
    def normalize_headers(cls, v: Any) -> Dict[str, str]:
        """Accept map or list-of-pairs headers and reduce them to a map."""
        return coerce_headers(v)
