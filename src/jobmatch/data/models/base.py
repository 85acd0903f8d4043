"""
Base model classes for JobMatch data models.

Provides common configuration shared across all models.
"""

from pydantic import BaseModel, ConfigDict


class EmbeddedModel(BaseModel):
    """
    Base model for value objects passed between components.

    Fields may be populated by name or by their camelCase alias, so
    payloads coming from the web tier validate unchanged.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=False,
    )
