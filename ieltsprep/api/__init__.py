"""HTTP access to the practice backend."""

from .client import ApiClient, build_form_data

__all__ = [
    "ApiClient",
    "build_form_data",
]
