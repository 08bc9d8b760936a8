"""Tests for the pure column transforms."""

import pytest

from gcptables.errors import FormatError
from gcptables.table import (
    QueryContext,
    TransformInput,
    as_list,
    from_constant,
    from_context,
    from_field,
    from_hydrate,
    from_value,
    split_segment,
    with_prefix,
)
from gcptables.tables.cloudfunctions_function import function_akas, location_from_function_name

from conftest import make_function


def _run_step(step, value, column="location"):
    return step(TransformInput(item=None, value=value, column=column))


@pytest.mark.parametrize(
    "name, expected",
    [
        ("projects/p1/locations/us-central1/functions/hello-world", "us-central1"),
        ("projects/p1/locations/europe-west1/functions/f", "europe-west1"),
        ("a/b/c/d/e/f", "d"),
        ("projects//locations//functions/", ""),
    ],
)
def test_location_is_fourth_of_six_segments(name, expected):
    assert _run_step(location_from_function_name, name) == expected


@pytest.mark.parametrize(
    "name",
    [
        "bad-name",
        "",
        "projects/p1/locations/us-central1/functions",
        "projects/p1/locations/us-central1/functions/f/extra",
    ],
)
def test_location_rejects_wrong_segment_count(name):
    with pytest.raises(FormatError) as exc_info:
        _run_step(location_from_function_name, name)

    assert name in str(exc_info.value)
    assert exc_info.value.value == name


def test_location_error_names_bad_value():
    with pytest.raises(FormatError, match="bad-name"):
        _run_step(location_from_function_name, "bad-name")


def test_format_error_is_a_value_error():
    with pytest.raises(ValueError):
        _run_step(split_segment("/", 2, 0), "no-separator")


def test_split_segment_rejects_out_of_range_index():
    with pytest.raises(ValueError):
        split_segment("/", 6, 6)


def test_function_akas_scenario():
    function = make_function("hello-world")
    assert function_akas(TransformInput(item=function)) == [
        "gcp://cloudfunctions.googleapis.com/projects/p1/locations/us-central1/functions/hello-world"
    ]


def test_akas_distinct_for_distinct_names():
    names = [
        "projects/p1/locations/us-central1/functions/a",
        "projects/p1/locations/us-central1/functions/b",
        "projects/p2/locations/us-central1/functions/a",
        "projects/p1/locations/us-east1/functions/a",
    ]
    akas = {function_akas(TransformInput(item=make_function("x", name=name)))[0] for name in names}
    assert len(akas) == len(names)


def test_with_prefix_tolerates_missing_value():
    assert _run_step(with_prefix("gcp://x/"), None) == "gcp://x/"
    assert _run_step(with_prefix("gcp://x/"), "") == "gcp://x/"


def test_from_field_projects_record_verbatim():
    function = make_function("f1")
    transform = from_field(lambda f: f.labels)
    assert transform(TransformInput(item=function)) == {"team": "data"}


def test_from_value_and_from_hydrate_read_hydrate_item():
    data = TransformInput(item=None, hydrate_item={"etag": "abc"})
    assert from_value()(data) == {"etag": "abc"}
    assert from_hydrate(lambda h: h["etag"])(data) == "abc"


def test_from_constant_ignores_row():
    transform = from_constant("fixed")
    assert transform(TransformInput(item=make_function("a"))) == "fixed"
    assert transform(TransformInput(item=None)) == "fixed"


def test_from_context_reads_query_scope():
    transform = from_context(lambda context: context.project)
    assert transform(TransformInput(item=None, context=QueryContext(project="p9"))) == "p9"


def test_from_context_without_context_raises():
    with pytest.raises(ValueError):
        from_context(lambda context: context.project)(TransformInput(item=None, column="project"))


def test_then_returns_new_chain():
    base = from_field(lambda f: f.name)
    chained = base.then(as_list())

    function = make_function("f1")
    assert base(TransformInput(item=function)) == function.name
    assert chained(TransformInput(item=function)) == [function.name]
    assert len(base.steps) == 1
    assert len(chained.steps) == 2
