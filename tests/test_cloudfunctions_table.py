"""Tests for the gcp_cloudfunctions_function table definition."""

import pytest
from pydantic import ValidationError

from gcptables.errors import NotFoundError, TransientError
from gcptables.models import CloudFunction, Policy
from gcptables.table import ColumnType
from gcptables.tables import CLOUDFUNCTIONS_FUNCTION_DESC, get_table, list_tables
from gcptables.tables.cloudfunctions_function import (
    get_cloud_function,
    get_cloud_function_iam_policy,
    list_cloud_functions,
)

from conftest import FakeClient, function_name, make_function


def test_registry_lookup():
    assert get_table("gcp_cloudfunctions_function") is CLOUDFUNCTIONS_FUNCTION_DESC
    assert list_tables() == [CLOUDFUNCTIONS_FUNCTION_DESC]
    with pytest.raises(KeyError):
        get_table("gcp_storage_bucket")


def test_key_column_is_name():
    assert CLOUDFUNCTIONS_FUNCTION_DESC.key_column == "name"
    assert CLOUDFUNCTIONS_FUNCTION_DESC.column("name").nullable is False


def test_column_types():
    table = CLOUDFUNCTIONS_FUNCTION_DESC
    assert table.column("available_memory_mb").type is ColumnType.INT
    assert table.column("version_id").type is ColumnType.INT
    assert table.column("update_time").type is ColumnType.TIMESTAMP
    assert table.column("iam_policy").type is ColumnType.JSON
    assert table.column("akas").type is ColumnType.JSON
    assert table.column("location").type is ColumnType.STRING


def test_only_iam_policy_is_hydrated():
    table = CLOUDFUNCTIONS_FUNCTION_DESC
    hydrated = [c.name for c in table.columns if c.hydrate is not None]
    assert hydrated == ["iam_policy"]
    assert table.hydrators_for(table.columns) == [get_cloud_function_iam_policy]


def test_standard_columns_present():
    names = CLOUDFUNCTIONS_FUNCTION_DESC.column_names()
    for column in ("title", "tags", "akas", "project", "location"):
        assert column in names


def test_lister_scopes_to_all_locations(context):
    seen = {}

    class RecordingClient(FakeClient):
        def list_functions(self, parent, ctx):
            seen["parent"] = parent
            return super().list_functions(parent, ctx)

    client = RecordingClient([[make_function("a")]])
    assert [f.name for f in list_cloud_functions(context, client)] == [function_name("a")]
    assert seen["parent"] == "projects/p1/locations/-"


def test_getter_returns_one_record(context):
    client = FakeClient([[make_function("a"), make_function("b")]])
    assert get_cloud_function(context, client, function_name("b")).name == function_name("b")


def test_getter_not_found(context):
    with pytest.raises(NotFoundError):
        get_cloud_function(context, FakeClient([]), function_name("missing"))


def test_iam_hydrator_substitutes_empty_policy(context):
    function = make_function("a")
    policy = get_cloud_function_iam_policy(context, FakeClient([]), function)

    assert isinstance(policy, Policy)
    assert policy.is_empty


def test_iam_hydrator_returns_configured_policy(context):
    function = make_function("a")
    configured = Policy.model_validate({"bindings": [{"role": "roles/viewer", "members": ["user:x@y.z"]}]})
    client = FakeClient([], policies={function.name: configured})

    assert get_cloud_function_iam_policy(context, client, function) is configured


def test_iam_hydrator_propagates_errors(context):
    function = make_function("a")
    client = FakeClient([], policy_errors={function.name: TransientError("denied")})
    with pytest.raises(TransientError):
        get_cloud_function_iam_policy(context, client, function)


def test_record_decodes_camel_case_and_keeps_unknown_fields():
    function = make_function("a", minInstances=1, dockerRegistry="ARTIFACT_REGISTRY")
    assert function.entry_point == "handler"
    assert function.version_id == 3
    assert function.update_time.microsecond == 123456
    assert function.model_extra["dockerRegistry"] == "ARTIFACT_REGISTRY"


def test_record_is_frozen():
    function = make_function("a")
    with pytest.raises(ValidationError):
        function.runtime = "nodejs20"


def test_record_requires_name():
    with pytest.raises(ValidationError):
        CloudFunction.model_validate({"runtime": "go121"})
