"""
Unit tests for BaseModel declaration, reference resolution and extraction.
"""
import pytest

from payloadmapper.mapping.base import BaseModel
from payloadmapper.mapping.exceptions import ConfigurationError
from payloadmapper.mapping.issues import (
    ConditionFailureIssue,
    EmptyFieldSpecIssue,
    MalformedProcessorSpecIssue,
    MappingWarning,
    MissingReferenceIssue,
    ProcessorFailureIssue,
    UnregisteredProcessorIssue,
    UnresolvedProcessorIssue,
)
from payloadmapper.mapping.paths import UNDEFINED
from payloadmapper.processors import DEFAULT_MODIFIERS


class FormModel(BaseModel):
    """Model exposing state to '&' guards and references."""

    def __init__(self, parent=None, active=True):
        super().__init__(parent)
        self.active = active
        self.settings = {'lang': 'en'}
        self.add_modifiers_bulk(DEFAULT_MODIFIERS)

    @property
    def isActive(self):
        return self.active


@pytest.fixture
def model():
    return FormModel(parent={'form': {'name': 'Karen', 'age': '41'}, 'enabled': True})


def test_own_fields_with_processors(model):
    model.add_container('user', {'name': 'string', 'age': 'int'}, {'name': 'Bob', 'age': '33'})

    assert model.get_fields('user') == {'name': 'Bob', 'age': 33}


def test_fields_follow_declaration_order(model):
    model.add_container('user', {'b': 'string', 'a': 'string', 'c': 'string'}, {'a': 1, 'b': 2, 'c': 3})

    assert list(model.get_fields('user')) == ['b', 'a', 'c']


def test_alias_only_emits_alias(model):
    model.add_container('user', {'name as full_name': 'string'}, {'name': 'Karen'})

    assert model.get_fields('user') == {'full_name': 'Karen'}


def test_guard_true_and_false():
    active = FormModel(active=True).add_container('c', {'flag if(&.isActive == true)': 'bool'}, {'flag': 1})
    inactive = FormModel(active=False).add_container('c', {'flag if(&.isActive == true)': 'bool'}, {'flag': 1})

    assert active.get_fields('c') == {'flag': True}
    assert 'flag' not in inactive.get_fields('c')


def test_guard_on_parent(model):
    model.add_container('c', {'a if(^.enabled)': 'string', 'b if(^.enabled == false)': 'string'}, {'a': 'x', 'b': 'y'})

    assert model.get_fields('c') == {'a': 'x'}


def test_parent_self_and_container_references(model):
    model.add_container('profile', {'email': 'string'}, {'contact': {'email': 'k@example.com'}})
    model.add_container('user', {
        '^.form.name': 'string',
        '^.form.age as age': 'int',
        '&.settings.lang': 'upper',
        '@profile.contact.email as email': 'string',
    })

    assert model.get_fields('user') == {'name': 'Karen', 'age': 41, 'lang': 'EN', 'email': 'k@example.com'}


def test_missing_own_property_is_undefined(model):
    model.add_container('user', {'name': 'string', 'age': 'int', 'raw': ''}, {})
    result = model.extract('user')

    assert result.fields == {'name': '', 'age': 0, 'raw': UNDEFINED}
    assert result.payload == {'name': '', 'age': 0}
    assert not result.has_issues


def test_present_none_is_passed_to_processors(model):
    model.add_container('user', {'note': 'skip:[null].string'}, {'note': None})

    assert model.get_fields('user') == {'note': None}


def test_missing_root_records_issue():
    model = BaseModel()
    model.add_container('user', {'^.form.name': 'string', 'ok': 'string'}, {'ok': 'yes'})
    result = model.extract('user')

    assert result.fields == {'name': '', 'ok': 'yes'}
    assert len(result.issues_of(MissingReferenceIssue)) == 1
    assert result.issues[0].field_key == '^.form.name'


def test_missing_nested_path_records_issue(model):
    model.add_container('user', {'^.form.address.city': 'string'})
    result = model.extract('user')

    assert result.issues_of(MissingReferenceIssue)
    assert "address" in result.issues[0].message


def test_unknown_container_reference(model):
    model.add_container('user', {'@ghost.name': 'string'})
    result = model.extract('user')

    assert "Container 'ghost' not found" in result.issues[0].message


def test_empty_container_is_reported(model):
    model.add_container('empty', {})
    result = model.extract('empty')

    assert result.fields == {}
    assert isinstance(result.issues[0], EmptyFieldSpecIssue)


def test_processor_exception_is_isolated(model):
    def explode(value):
        raise ValueError("boom")

    model.add_field_processor('explode', explode)
    model.add_container('user', {'a': 'explode', 'b': 'string'}, {'a': 1, 'b': 2})
    result = model.extract('user')

    assert result.fields == {'a': UNDEFINED, 'b': '2'}
    assert isinstance(result.issues[0], ProcessorFailureIssue)
    assert result.issues[0].message == "boom"


def test_unregistered_processor_is_reported(model):
    model.add_container('user', {'a': 'nope.string'}, {'a': 1})
    result = model.extract('user')

    assert result.fields == {'a': ''}
    assert result.issues[0].names == ['nope']
    assert isinstance(result.issues[0], UnregisteredProcessorIssue)


def test_malformed_guard_omits_field(model):
    model.add_container('user', {'a if(&.isActive ==)': 'string', 'b': 'string'}, {'a': 1, 'b': 2})
    result = model.extract('user')

    assert result.fields == {'b': '2'}
    assert isinstance(result.issues[0], ConditionFailureIssue)


def test_malformed_modifier_params(model):
    model.add_container('user', {'a': 'strip:{'}, {'a': 'x'})
    result = model.extract('user')

    assert result.fields == {'a': UNDEFINED}
    assert isinstance(result.issues[0], MalformedProcessorSpecIssue)


def test_indirect_processor(model):
    model.add_container('other', {'field': 'int'})
    model.add_container('user', {'field': '@other.field', 'copy': '@user.field'}, {'field': '7', 'copy': '8'})

    assert model.get_processor('@other.field') == 'int'
    assert model.get_fields('user') == {'field': 7, 'copy': 8}


def test_indirect_processor_cycle_is_reported(model):
    model.add_container('a', {'x': '@b.y'})
    model.add_container('b', {'y': '@a.x'}, {'y': 1})
    result = model.extract('b')

    assert result.fields == {'y': UNDEFINED}
    assert isinstance(result.issues[0], UnresolvedProcessorIssue)
    assert "cycle" in result.issues[0].message


def test_get_fields_warns(model):
    model.add_container('user', {'a': 'nope'}, {'a': 1})

    with pytest.warns(MappingWarning, match="Unregistered processor"):
        fields = model.get_fields('user')
    assert fields == {'a': UNDEFINED}


def test_set_source_switches_data(model):
    model.add_container('user', {'name': 'string'}, {'name': 'first'})
    model.set_source('user', {'name': 'second'})

    assert model.get_fields('user') == {'name': 'second'}
    assert model.get_data('user') == {'name': 'second'}


def test_inherited_container(model):
    model.describe_container('flow', {'^.form.name as author': 'string', 'status': 'int'})
    model.add_container('user extends flow', {'status': 'string'}, {'status': 2})

    assert model.get_fields('user') == {'author': 'Karen', 'status': '2'}
    assert model.get_container('user').fields['status'] == 'string'


def test_add_containers_from_list_and_mapping(model):
    model.add_containers([{'name': 'a', 'fields': {'x': 'int'}, 'source': {'x': '1'}}])
    model.add_containers({'b': {'fields': {'y': 'string'}}})

    assert model.get_fields('a') == {'x': 1}
    assert model.get_fields('b') == {'y': ''}
    assert [row['name'] for row in model.summary()] == ['a', 'b']


def test_configuration_errors(model):
    with pytest.raises(ConfigurationError):
        model.add_container('', {'x': 'int'})
    with pytest.raises(ConfigurationError, match="Template 'missing'"):
        model.add_container('user extends missing', {})
    with pytest.raises(ConfigurationError, match="Container 'ghost' not found"):
        model.extract('ghost')
    with pytest.raises(ConfigurationError):
        model.set_source('ghost', {})


def test_registration_returns_model(model):
    assert model.add_field_processor('twice', lambda v: v * 2) is model
    assert model.add_modifier('keep', lambda v, p: None) is model

    model.add_container('c', {'n': 'int.twice.keep:1'}, {'n': '4'})
    assert model.get_fields('c') == {'n': 8}


def test_objects_as_data_source(model):
    class Account:
        balance = 12

    model.add_container('acc', {'balance': 'usd'}, Account())
    assert model.get_fields('acc') == {'balance': '12$'}


class PostModel(BaseModel):
    """isMine reads container data directly and raises when the key is absent."""

    @property
    def isMine(self):
        return self.get_data('post')['is_mine']

    @property
    def owner(self):
        raise RuntimeError("owner not loaded")


def test_raising_guard_property_only_drops_its_field():
    model = PostModel().add_container('post', {'ok': 'string', 'flag if(&.isMine == true)': 'bool'}, {'ok': 'x'})
    result = model.extract('post')

    assert result.fields == {'ok': 'x'}
    assert isinstance(result.issues[0], ConditionFailureIssue)
    assert "is_mine" in result.issues[0].message


def test_raising_source_property_only_undefines_its_field():
    model = PostModel().add_container('post', {'&.owner': 'string', '&.isMine as mine': '', 'ok': 'string'}, {'ok': 'x'})
    result = model.extract('post')

    assert result.fields == {'owner': '', 'mine': UNDEFINED, 'ok': 'x'}
    assert len(result.issues_of(MissingReferenceIssue)) == 2
    assert result.issues[0].message == "owner not loaded"


def test_container_reference_in_guard():
    model = BaseModel()
    model.add_container('profile', {'role': 'string'}, {'role': 'admin', 'level': 2})
    model.add_container('post', {
        'x if(@profile.role == "admin")': 'string',
        'y if(@profile.role != "admin")': 'string',
        'z if(@profile.level >= 2 && @profile.role)': 'int',
    }, {'x': 'a', 'y': 'b', 'z': '3'})

    assert model.get_fields('post') == {'x': 'a', 'z': 3}
