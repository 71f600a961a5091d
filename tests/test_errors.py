from __future__ import annotations

import json

from bugdesk.errors import (
    ConfigError,
    NotFoundError,
    PersistenceReadError,
    PersistenceWriteError,
    StoreNotReadyError,
    ValidationError,
    classify_error,
)


def test_validation_error_carries_field_messages():
    exc = ValidationError({'title': 'Title is required', 'description': 'Description is required'})
    info = classify_error(exc)
    assert info.category == 'validation'
    assert info.details == exc.errors
    assert 'Title is required' in info.message


def test_classify_not_found():
    info = classify_error(NotFoundError('abc'))
    assert info.category == 'not_found'
    assert info.details == {'bug_id': 'abc'}
    assert info.message == 'Bug not found: abc'


def test_classify_persistence():
    assert classify_error(PersistenceReadError('bad')).category == 'persistence.read'
    try:
        json.loads('{')
    except json.JSONDecodeError as exc:
        assert classify_error(exc).category == 'persistence.read'
    write = classify_error(PersistenceWriteError('disk full'))
    assert write.category == 'persistence.write'
    assert write.transient is True
    assert classify_error(OSError('nope')).category == 'persistence.write'


def test_classify_loading_and_config():
    assert classify_error(StoreNotReadyError()).category == 'store.loading'
    assert classify_error(ConfigError('missing')).category == 'config'


def test_classify_generic():
    info = classify_error(RuntimeError('something else'))
    assert info.category == 'generic'
    assert info.original_type == 'RuntimeError'
    assert info.transient is False
