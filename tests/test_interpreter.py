"""Tests for the interpreter base class and registry."""

import pytest

import nbinterp.interpreters  # noqa: F401
from nbinterp.engine.interpreter import (
    Code,
    Interpreter,
    InterpreterResult,
    PropertySpec,
    ResultType,
    get_interpreter,
    list_interpreters,
)
from nbinterp.interpreters import (
    PostgreSqlInterpreter,
    SpringXdJobInterpreter,
    SpringXdStreamInterpreter,
)


def test_builtin_interpreters_registered():
    names = [info["name"] for info in list_interpreters()]
    assert {"psql", "xd.stream", "xd.job"} <= set(names)


def test_get_interpreter():
    assert isinstance(get_interpreter("psql"), PostgreSqlInterpreter)
    assert isinstance(get_interpreter("xd.stream"), SpringXdStreamInterpreter)
    assert isinstance(get_interpreter("xd.job", {"springxd.url": "http://x:1"}), SpringXdJobInterpreter)


def test_get_unknown_interpreter():
    with pytest.raises(ValueError, match="Unknown interpreter"):
        get_interpreter("nope")


def test_list_interpreters_properties():
    info = {i["name"]: i for i in list_interpreters()}
    psql_props = {p["name"]: p["default"] for p in info["psql"]["properties"]}
    assert psql_props["postgresql.max.result"] == 1000
    assert psql_props["postgresql.user"] == "postgres"
    assert info["xd.stream"]["group"] == "xd"
    assert info["psql"]["group"] == "postgresql"


class _Echo(Interpreter):
    name = "echo-test"
    properties = [PropertySpec("echo.prefix", ">", "Prefix")]


def test_get_property_falls_back_to_default():
    assert _Echo().get_property("echo.prefix") == ">"
    assert _Echo({"echo.prefix": "$"}).get_property("echo.prefix") == "$"
    assert _Echo({"echo.prefix": None}).get_property("echo.prefix") == ">"
    assert _Echo().get_property("unknown") is None


def test_default_completion_and_progress():
    assert _Echo().completion("abc", 3) is None
    assert _Echo().get_progress(None) == 0


def test_result_to_dict():
    assert InterpreterResult.error("boom").to_dict() == {"code": "ERROR", "type": "TEXT", "message": "boom"}
    result = InterpreterResult(Code.SUCCESS, "a\n", ResultType.TABLE)
    assert result.to_dict()["type"] == "TABLE"
