# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""High-level tests demonstrating how to construct the API model and its symbol table."""

import pytest

from apimodel.model import (
    API,
    APIState,
    Enum,
    EnumValue,
    Field,
    Message,
    Method,
    PaginationInfo,
    Service,
    SymbolTableFrozenError,
    Typez,
)


def _secret_message() -> Message:
    return Message(
        name="Secret",
        id=".google.cloud.secretmanager.v1.Secret",
        package="google.cloud.secretmanager.v1",
        fields=[Field(name="name", id=".google.cloud.secretmanager.v1.Secret.name", typez=Typez.STRING)],
    )


def test_message_field_lookup() -> None:
    """Fields are found by name; missing names return None."""
    message = _secret_message()
    assert message.field_by_name("name") is not None
    assert message.field_by_name("missing") is None


def test_pageable_response_property() -> None:
    """A message is a pageable response once pagination info is attached."""
    token = Field(name="next_page_token", id=".p.R.next_page_token", typez=Typez.STRING)
    items = Field(name="items", id=".p.R.items", typez=Typez.MESSAGE, typez_id=".p.Item", repeated=True)
    response = Message(name="R", id=".p.R", fields=[token, items])
    assert not response.is_pageable_response
    response.pagination = PaginationInfo(next_page_token=token, pageable_item=items)
    assert response.is_pageable_response


def test_enum_unique_number_values_collapses_aliases() -> None:
    """Aliased enum values are collapsed; the first value per number wins."""
    enum = Enum(
        name="State",
        id=".p.State",
        values=[
            EnumValue(name="STATE_UNSPECIFIED", id=".p.State.STATE_UNSPECIFIED", number=0),
            EnumValue(name="ENABLED", id=".p.State.ENABLED", number=1),
            EnumValue(name="ON", id=".p.State.ON", number=1),
        ],
    )
    assert [v.name for v in enum.unique_number_values] == ["STATE_UNSPECIFIED", "ENABLED"]


def test_service_method_lookup() -> None:
    """Methods are found by their simple name."""
    method = Method(name="GetSecret", id=".p.S.GetSecret", input_type_id=".p.Req", output_type_id=".p.Secret")
    service = Service(name="S", id=".p.S", methods=[method])
    assert service.method_by_name("GetSecret") is method
    assert service.method_by_name("DeleteSecret") is None


def test_api_dump_excludes_symbol_table() -> None:
    """The symbol table is not part of the serialized model."""
    api = API(name="secretmanager", messages=[_secret_message()])
    dumped = api.model_dump()
    assert "state" not in dumped
    assert dumped["messages"][0]["id"] == ".google.cloud.secretmanager.v1.Secret"


def test_deep_copy_does_not_share_fields() -> None:
    """Copies of a message can be modified independently."""
    original = _secret_message()
    copy = original.model_copy(deep=True)
    copy.fields[0].documentation = "changed"
    assert original.fields[0].documentation == ""


class TestAPIState:
    def test_registered_entities_are_found_by_id(self) -> None:
        state = APIState()
        message = _secret_message()
        state.register_message(message)
        assert state.message_by_id[message.id] is message
        assert ".missing" not in state.message_by_id

    def test_lookups_are_read_only_views(self) -> None:
        state = APIState()
        with pytest.raises(TypeError):
            state.message_by_id[".p.X"] = _secret_message()  # type: ignore[index]

    def test_register_after_freeze_raises(self) -> None:
        state = APIState()
        state.register_message(_secret_message())
        state.freeze()
        assert state.frozen
        with pytest.raises(SymbolTableFrozenError, match=".p.S"):
            state.register_service(Service(name="S", id=".p.S"))
        assert len(state.message_by_id) == 1

    def test_each_api_owns_its_table(self) -> None:
        first = API()
        second = API()
        first.state.register_message(_secret_message())
        assert len(second.state.message_by_id) == 0

    def test_repr_reports_counts(self) -> None:
        state = APIState()
        state.register_message(_secret_message())
        assert "messages=1" in repr(state)
        assert "frozen=False" in repr(state)
