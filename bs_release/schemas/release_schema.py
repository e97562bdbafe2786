from typing import Any, Dict, Optional

from marshmallow import EXCLUDE, Schema, fields, validate, validates
from marshmallow import ValidationError as SchemaValidationError

from bs_release.exceptions import ValidationError

VERSION_PATTERN = r'\A[0-9]+\.[0-9]+\.[0-9]+\Z'
VERSION_MAX_LENGTH = 32  # releases.version String(32)
TITLE_MAX_LENGTH = 255
SLUG_PATTERN = r'^[a-z0-9][a-z0-9-]*$'


class FeatureItemSchema(Schema):
    """
    Feature dentro do corpo de criação/atualização de release.
    Entradas sem título são aceitas aqui e descartadas pelo serviço.
    """
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(allow_none=True, load_default='', validate=validate.Length(max=TITLE_MAX_LENGTH))
    content = fields.Str(allow_none=True, load_default=None)


class ReleaseCreateSchema(Schema):
    """
    Schema para validação de criação de release (POST /releases).
    """
    class Meta:
        unknown = EXCLUDE

    product = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, max=64),
            validate.Regexp(SLUG_PATTERN, error="Invalid product slug."),
        ],
    )
    version = fields.Str(
        required=True,
        validate=[
            validate.Length(max=VERSION_MAX_LENGTH),
            validate.Regexp(VERSION_PATTERN, error="Version must match X.Y.Z (e.g. 2.1.0)."),
        ],
    )
    release_date = fields.Date(required=True, data_key='date', format='iso')
    features = fields.List(fields.Nested(FeatureItemSchema), load_default=list)


class ReleaseUpdateSchema(Schema):
    """
    Schema para atualização completa (PUT): data + conjunto de features.
    """
    class Meta:
        unknown = EXCLUDE

    release_date = fields.Date(required=True, data_key='date', format='iso')
    features = fields.List(fields.Nested(FeatureItemSchema), load_default=list)


class FeatureSchema(Schema):
    """
    Schema para criação/edição de uma feature individual.
    """
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=validate.Length(max=TITLE_MAX_LENGTH))
    content = fields.Str(allow_none=True, load_default=None)

    @validates('title')
    def _check_title(self, value, **kwargs):
        if not value or not value.strip():
            raise SchemaValidationError("Title is required.")


def load_or_raise(schema: Schema, data: Optional[Any]) -> Dict[str, Any]:
    """Valida o corpo com o schema; erros viram ValidationError (HTTP 400)."""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.load(data)
    except SchemaValidationError as err:
        raise ValidationError('Validation failed', errors=err.messages) from err
