"""
Tests for command-line parameter compilation.
"""

import shlex
import warnings

import pytest

from taskscheduler.parameters import compile_parameters


def test_unnamed_parameters_are_space_joined():
    assert compile_parameters(["a", "b"]) == "a b"


def test_named_parameters_emit_name_then_value():
    result = compile_parameters([("--flag", "value"), "bare"])
    assert result == "--flag value bare"
    assert shlex.split(result) == ["--flag", "value", "bare"]


def test_mapping_with_numeric_keys_is_positional():
    assert compile_parameters({"--flag": "value", 0: "bare"}) == "--flag value bare"
    assert compile_parameters({"1": "x", "--name": "y"}) == "x --name y"


def test_tokens_are_quoted():
    result = compile_parameters([("--message", "hello world"), "it's", ""])
    assert result == "--message 'hello world' 'it'\"'\"'s' ''"
    assert shlex.split(result) == ["--message", "hello world", "it's", ""]


def test_metacharacters_cannot_split_tokens():
    result = compile_parameters(["a; rm -rf /", "$(whoami)"])
    assert shlex.split(result) == ["a; rm -rf /", "$(whoami)"]


def test_booleans_are_normalized_with_deprecation():
    with pytest.warns(DeprecationWarning, match="non-string parameters"):
        assert compile_parameters([True, False]) == "1 0"


def test_numbers_are_normalized_with_deprecation():
    with pytest.warns(DeprecationWarning):
        assert compile_parameters([("--retries", 3), 2.5]) == "--retries 3 2.5"


def test_string_parameters_do_not_warn():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert compile_parameters([("--name", "nightly")]) == "--name nightly"


def test_unsupported_value_type_is_rejected():
    with pytest.warns(DeprecationWarning), pytest.raises(TypeError):
        compile_parameters(["ok", None])


def test_malformed_named_parameter_is_rejected():
    with pytest.raises(TypeError):
        compile_parameters([("--a", "b", "c")])


def test_empty_parameters():
    assert compile_parameters([]) == ""


@pytest.mark.parametrize("parameters", ["hello", b"hello"])
def test_plain_string_parameters_are_rejected(parameters):
    with pytest.raises(TypeError):
        compile_parameters(parameters)
