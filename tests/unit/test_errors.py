from crud_lib.errors import (
    BackendFailure,
    CrudError,
    DuplicateKeyError,
    KeyMismatchError,
    MissingKeyError,
    NotFoundError,
    NullArgumentError,
    OperationCancelled,
)


def test_domain_errors_share_a_base_and_code():
    errors = [
        NullArgumentError('key'),
        MissingKeyError(),
        KeyMismatchError('a', 'b'),
        DuplicateKeyError('a'),
        NotFoundError('a'),
        BackendFailure('disk on fire'),
    ]
    assert all(isinstance(e, CrudError) for e in errors)
    assert [e.code for e in errors] == [
        'null_argument', 'missing_key', 'key_mismatch', 'duplicate_key', 'not_found', 'backend_failure',
    ]


def test_cancellation_is_not_a_domain_error():
    e = OperationCancelled('read', 'k')
    assert not isinstance(e, CrudError)
    assert e.operation == 'read'
    assert e.key == 'k'
    assert str(e) == "read of 'k' cancelled"


def test_not_found_is_a_key_error_with_readable_message():
    e = NotFoundError('s-1')
    assert isinstance(e, KeyError)
    assert e.key == 's-1'
    assert str(e) == "No object with key 's-1'"


def test_null_argument_names_parameter():
    e = NullArgumentError('object')
    assert e.param_name == 'object'
    assert 'object' in str(e)
