"""Tests for model-level validation."""
import threading

import pytest
import numpy as np
from validation import (
    Validator,
    ValidatorState,
    TypeRegistry,
    ConstraintError,
    TypeMismatchError
)


@pytest.fixture
def registry():
    return TypeRegistry.with_builtins()


def run(validator, values, present_only=False):
    """Validate and capture every callback invocation."""
    calls = []
    returned = validator.validate(values, present_only, calls.append)
    assert len(calls) == 1
    assert calls[0] == returned
    return returned


def wire(result):
    return {
        attr: [error.to_dict() for error in errors]
        for attr, errors in result['ValidationError'].items()
    }


class TestInitialize:
    """Tests for building the attribute validation map."""

    def test_strips_schema_only_keys(self, registry):
        """Test storage keys are removed and enum becomes in."""
        validator = Validator(types=registry)
        validator.initialize({
            'id': {'type': 'integer', 'primaryKey': True, 'autoIncrement': True, 'unique': True},
            'role': {'type': 'string', 'enum': ['admin', 'user'], 'defaultsTo': 'user',
                     'index': True, 'columnName': 'user_role'},
        })
        assert validator.validations == {
            'id': {'type': 'integer'},
            'role': {'type': 'string', 'in': ['admin', 'user']},
        }
        assert validator.state == ValidatorState.BUILT

    def test_shorthand_definition(self, registry):
        """Test a bare type name is accepted as a definition."""
        validator = Validator(types=registry)
        validator.initialize({'name': 'string'})
        assert validator.validations == {'name': {'type': 'string'}}

    def test_custom_types_are_merged(self, registry):
        """Test custom types land in the validator's registry."""
        validator = Validator(types=registry)
        validator.initialize({'code': {'type': 'zipcode'}}, {'zipcode': lambda v: len(v) == 5})
        assert 'zipcode' in registry
        assert run(validator, {'code': '12345'}) is None
        assert wire(run(validator, {'code': '123'})) == {'code': [{'rule': 'type', 'value': '123'}]}


class TestValidate:
    """Tests for validating a bag of values."""

    ATTRS = {
        'name': {'type': 'string', 'required': True},
        'age': {'type': 'integer', 'min': 0},
    }

    def test_end_to_end_failure(self, registry):
        """Test the aggregated error map."""
        validator = Validator(types=registry)
        validator.initialize(self.ATTRS)
        result = run(validator, {'name': 'Ann', 'age': -1})
        assert wire(result) == {'age': [{'rule': 'min', 'value': -1}]}
        assert validator.state == ValidatorState.COMPLETED

    def test_end_to_end_success(self, registry):
        """Test success delivers None."""
        validator = Validator(types=registry)
        validator.initialize(self.ATTRS)
        assert run(validator, {'name': 'Ann', 'age': 5}) is None

    def test_optional_absent(self, registry):
        """Test an optional attribute may be missing or empty."""
        validator = Validator(types=registry)
        validator.initialize({'age': {'type': 'integer'}})
        assert run(validator, {}) is None
        assert run(validator, {'age': ''}) is None

    def test_required_absent(self, registry):
        """Test a missing required attribute fails type and required."""
        validator = Validator(types=registry)
        validator.initialize(self.ATTRS)
        result = run(validator, {})
        assert result['ValidationError']['name'] == [
            TypeMismatchError(rule='type', value=None),
            ConstraintError(rule='required', value=None),
        ]
        assert 'age' not in result['ValidationError']

    def test_present_only(self, registry):
        """Test only present attributes are checked."""
        validator = Validator(types=registry)
        validator.initialize({
            'name': {'type': 'string', 'required': True},
            'email': {'type': 'string', 'required': True},
        })
        assert run(validator, {'name': 'x'}, present_only=True) is None
        assert list(run(validator, {'name': 'x'})['ValidationError']) == ['email']

    def test_text_is_not_checked(self, registry):
        """Test the text type is opaque."""
        validator = Validator(types=registry)
        validator.initialize({'body': {'type': 'text', 'required': True, 'maxLength': 1}})
        assert run(validator, {'body': 12345}) is None

    @pytest.mark.parametrize('value', ['true', 'false', True, False])
    def test_required_boolean_accepts_strings(self, registry, value):
        """Test string-encoded booleans pass a required boolean."""
        validator = Validator(types=registry)
        validator.initialize({'active': {'type': 'boolean', 'required': True}})
        assert run(validator, {'active': value}) is None

    def test_required_boolean_rejects_other_strings(self, registry):
        """Test anything else falls through to the matcher."""
        validator = Validator(types=registry)
        validator.initialize({'active': {'type': 'boolean', 'required': True}})
        result = run(validator, {'active': 'maybe'})
        assert result['ValidationError'] == {'active': [TypeMismatchError(rule='type', value='maybe')]}

    def test_enum(self, registry):
        """Test enum values through the in rule."""
        validator = Validator(types=registry)
        validator.initialize({'role': {'type': 'string', 'enum': ['a', 'b']}})
        assert run(validator, {'role': 'a'}) is None
        assert wire(run(validator, {'role': 'c'})) == {'role': [{'rule': 'in', 'value': 'c'}]}

    def test_nested_attribute(self, registry):
        """Test nested object attributes report paths."""
        validator = Validator(types=registry)
        validator.initialize({'tags': {'type': ['string'], 'required': True}})
        assert wire(run(validator, {'tags': ['a', 1]})) == {
            'tags': [{'rule': 'type', 'value': 1, 'path': [1]}]
        }

    def test_no_short_circuit(self, registry):
        """Test every attribute is checked and keys follow declaration order."""
        attrs = {name: {'type': 'integer'} for name in 'abcdefgh'}
        validator = Validator(types=registry, max_workers=3)
        validator.initialize(attrs)
        result = run(validator, {name: 'x' for name in 'abcdefgh'})
        assert list(result['ValidationError']) == list('abcdefgh')

    def test_checks_run_on_worker_threads(self, registry):
        """Test attributes are fanned out to a thread pool."""
        seen = set()

        def record(value):
            seen.add(threading.get_ident())
            return True

        registry.define('recorded', record)
        validator = Validator(types=registry)
        validator.initialize({'a': {'type': 'recorded', 'required': True}})
        assert run(validator, {'a': 1}) is None
        assert seen and threading.get_ident() not in seen

    def test_no_callback(self, registry):
        """Test the result is also returned."""
        validator = Validator(types=registry)
        validator.initialize(self.ATTRS)
        assert validator.validate({'name': 'Ann'}) is None

    def test_empty_map(self, registry):
        """Test a validator with nothing declared succeeds."""
        validator = Validator(types=registry)
        assert validator.state == ValidatorState.IDLE
        assert run(validator, {'anything': 1}) is None

    def test_strict_and_depth_options(self, registry):
        """Test matcher options pass through."""
        validator = Validator(types=registry, strict=True, max_depth=1)
        validator.initialize({'profile': {'type': {'name': 'string'}, 'required': True}})
        assert wire(run(validator, {'profile': {'name': 'a', 'x': 1}})) == {
            'profile': [{'rule': 'undeclared', 'value': 1, 'path': ['x']}]
        }

    def test_zero_dimensional_array_reaches_callback(self, registry):
        """Test a 0-d numpy array is reported through the callback."""
        validator = Validator(types=registry)
        validator.initialize({'xs': {'type': ['integer'], 'required': True}})
        result = run(validator, {'xs': np.array(5)})
        errors = result['ValidationError']['xs']
        assert len(errors) == 1
        assert isinstance(errors[0], TypeMismatchError)
        assert errors[0].rule == 'type'

    def test_concurrent_calls_share_state(self, registry):
        """Test state stays RUNNING until the last concurrent call finishes."""
        first_inside = threading.Event()
        release = threading.Event()
        states = []

        def gate(value):
            if value == 'slow':
                first_inside.set()
                release.wait(5)
            return True

        registry.define('gated', gate)
        validator = Validator(types=registry)
        validator.initialize({'a': {'type': 'gated', 'required': True}})

        slow = threading.Thread(target=validator.validate, args=({'a': 'slow'},))
        slow.start()
        assert first_inside.wait(5)
        assert validator.validate({'a': 'fast'}) is None
        states.append(validator.state)
        release.set()
        slow.join(5)
        states.append(validator.state)

        assert states == [ValidatorState.RUNNING, ValidatorState.COMPLETED]
