"""Testes dos schemas de entrada (marshmallow)."""

from datetime import date

import pytest

from bs_release.exceptions import ValidationError
from bs_release.schemas import FeatureSchema, ReleaseCreateSchema, ReleaseUpdateSchema, load_or_raise


@pytest.mark.parametrize('version', ['0.0.1', '2.1.0', '10.20.30'])
def test_valid_versions(version):
    data = load_or_raise(ReleaseCreateSchema(), {'product': 'marcom', 'version': version, 'date': '2024-03-15'})
    assert data['version'] == version
    assert data['release_date'] == date(2024, 3, 15)
    assert data['features'] == []


@pytest.mark.parametrize('version', [
    '1.0', '1', 'v1.0.0', '1.0.0-beta', '1.0.0.0', '',
    '1.0.0\n', '\u0661.0.0', '1' * 40 + '.0.0',
])
def test_invalid_versions(version):
    with pytest.raises(ValidationError) as exc:
        load_or_raise(ReleaseCreateSchema(), {'product': 'marcom', 'version': version, 'date': '2024-03-15'})
    assert 'version' in exc.value.errors


def test_invalid_date():
    with pytest.raises(ValidationError) as exc:
        load_or_raise(ReleaseUpdateSchema(), {'date': '2024-02-30'})
    assert 'date' in exc.value.errors


def test_unknown_fields_are_ignored():
    data = load_or_raise(ReleaseUpdateSchema(), {'date': '2024-01-01', 'id': 7, 'features': [{'title': 'A', 'x': 1}]})
    assert data == {'release_date': date(2024, 1, 1), 'features': [{'title': 'A', 'content': None}]}


def test_feature_items_may_omit_title():
    data = load_or_raise(ReleaseUpdateSchema(), {'date': '2024-01-01', 'features': [{'content': '<p>x</p>'}]})
    assert data['features'] == [{'title': '', 'content': '<p>x</p>'}]


@pytest.mark.parametrize('payload', [{}, {'title': ''}, {'title': '   '}, {'title': 'x' * 256}])
def test_feature_schema_requires_title(payload):
    with pytest.raises(ValidationError) as exc:
        load_or_raise(FeatureSchema(), payload)
    assert 'title' in exc.value.errors


def test_body_must_be_object():
    with pytest.raises(ValidationError):
        load_or_raise(FeatureSchema(), None)


def test_feature_items_reject_long_titles():
    with pytest.raises(ValidationError) as exc:
        load_or_raise(ReleaseUpdateSchema(), {'date': '2024-01-01', 'features': [{'title': 'x' * 256}]})
    assert exc.value.errors['features'][0]['title']
