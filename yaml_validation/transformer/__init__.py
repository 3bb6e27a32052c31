"""Schema transformers applied before structural validation."""

from .base import Schema, SchemaTransformer, apply_transformers, transform_schema
from .additional_properties import AdditionalPropertiesTransformer
