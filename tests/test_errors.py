import pytest

from core.errors import (
    AppErrorException,
    Err,
    ErrorCode,
    Ok,
    course_misconfigured,
    not_found,
    out_of_range,
    raise_result,
    schedule_misconfigured,
    sequence_results,
    state_conflict,
)


def test_builders_map_to_http_status() -> None:
    assert schedule_misconfigured("order", "bad").unwrap_err().code.http_status == 400
    assert course_misconfigured("no packs").unwrap_err().code.http_status == 400
    assert out_of_range("index", 0, min_val=1).unwrap_err().code.http_status == 400
    assert not_found("Course", "x").unwrap_err().code.http_status == 404
    assert state_conflict("day", "completed", "complete").unwrap_err().code.http_status == 409


def test_error_serialisation_includes_metadata() -> None:
    error = course_misconfigured("no packs", origin="course", course_id="c1").unwrap_err()
    body = error.to_dict()["error"]

    assert body["code"] == ErrorCode.E2031_COURSE_MISCONFIGURED.name
    assert body["category"] == "validation"
    assert body["metadata"]["course_id"] == "c1"


def test_result_chaining_short_circuits() -> None:
    calls = []

    def step(value):
        calls.append(value)
        return Ok(value + 1)

    assert Ok(1).and_then(step).map(lambda v: v * 10).unwrap() == 20
    failed = not_found("Pack", "EN/x")
    assert failed.and_then(step) is failed
    assert calls == [1]
    assert failed.unwrap_or(0) == 0


def test_sequence_results_fails_fast() -> None:
    assert sequence_results([Ok(1), Ok(2)]).unwrap() == [1, 2]
    error = not_found("Language", "FR")
    assert sequence_results([Ok(1), error, Ok(3)]).unwrap_err() is error.unwrap_err()


def test_raise_result() -> None:
    raise_result(Ok(None))
    with pytest.raises(AppErrorException) as exc:
        raise_result(Err(out_of_range("starting_sentence", 0, min_val=1).unwrap_err()))
    assert exc.value.error.code == ErrorCode.E2003_OUT_OF_RANGE
