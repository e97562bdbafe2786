from .release_schema import (
    FeatureItemSchema, FeatureSchema, ReleaseCreateSchema, ReleaseUpdateSchema,
    VERSION_PATTERN, load_or_raise,
)

__all__ = [
    'FeatureItemSchema', 'FeatureSchema', 'ReleaseCreateSchema', 'ReleaseUpdateSchema',
    'VERSION_PATTERN', 'load_or_raise',
]
