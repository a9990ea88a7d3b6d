"""
Base models for KNX binding configuration.

Provides the shared model configuration for every binding model. All
parse results are frozen: an ``ItemBinding`` is built once per parse and
replaced wholesale when the configuration line is parsed again, so the
models can be shared between threads and used as set members or dict keys.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class KnxBaseModel(BaseModel):
    """Base model with shared configuration for all binding models.

    Provides camelCase aliasing, immutability, and allows field
    population by either alias or Python name.
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class StrictModel(KnxBaseModel):
    """Frozen base model that forbids unknown fields.

    Use for models built from user supplied data, where extra fields
    likely indicate typos.
    """

    model_config = {
        **KnxBaseModel.model_config,
        "extra": "forbid",
    }
