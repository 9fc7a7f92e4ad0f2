from __future__ import annotations

import json
import shlex
from pathlib import Path

import numpy as np
from behave import given, then, when

from features.environment import run_malletbridge
from malletbridge.matrices import LabeledMatrix, LabeledSparseMatrix


def _workdir_path(context, name: str) -> Path:
    return (context.workdir / name).resolve()


def _require_output(context) -> dict[str, object]:
    output = getattr(context, "last_output", None)
    if output is None:
        result = getattr(context, "last_result", None)
        stderr = getattr(result, "stderr", "") if result is not None else ""
        raise AssertionError(f"Command output missing. stderr: {stderr}")
    return output


def _unescape(text: str) -> str:
    return text.replace("\\t", "\t").replace("\\n", "\n")


@given('a file "{name}" containing')
def step_write_file(context, name: str) -> None:
    path = _workdir_path(context, name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_unescape(context.text) + "\n", encoding="utf-8")


@given('a partition bundle "{name}" with partitions')
def step_write_bundle(context, name: str) -> None:
    lines = []
    for row in context.table:
        lines.append(
            json.dumps({"name": row["name"], "p_attributes": {"word": row["words"].split()}})
        )
    _workdir_path(context, name).write_text("\n".join(lines) + "\n", encoding="utf-8")


@when('I run malletbridge "{arguments}"')
def step_run(context, arguments: str) -> None:
    result = run_malletbridge(context, shlex.split(arguments))
    context.last_output = None
    if result.returncode == 0 and result.stdout.strip():
        context.last_output = json.loads(result.stdout)


@then("the command succeeds")
def step_command_succeeds(context) -> None:
    result = context.last_result
    assert result.returncode == 0, result.stderr


@then("the command fails with exit code {code:d}")
def step_command_fails(context, code: int) -> None:
    assert context.last_result.returncode == code


@then('standard error mentions "{text}"')
def step_stderr_mentions(context, text: str) -> None:
    assert text in context.last_result.stderr, context.last_result.stderr


@then('the output field "{field}" is {value:d}')
def step_output_field_int(context, field: str, value: int) -> None:
    assert _require_output(context)[field] == value


@then('the printed command contains "{option}" followed by "{value}"')
def step_command_option(context, option: str, value: str) -> None:
    command = _require_output(context)["command"]
    assert option in command, command
    assert command[command.index(option) + 1] == value


@then('the printed command does not contain "{option}"')
def step_command_lacks_option(context, option: str) -> None:
    assert option not in _require_output(context)["command"]


@then('the file "{name}" contains')
def step_file_contains(context, name: str) -> None:
    text = _workdir_path(context, name).read_text(encoding="utf-8")
    assert text == _unescape(context.text) + "\n", repr(text)


@then('the file "{name}" holds exactly')
def step_file_holds_exactly(context, name: str) -> None:
    text = _workdir_path(context, name).read_text(encoding="utf-8")
    assert text == _unescape(context.text), repr(text)


@then('the sparse matrix "{name}" has rows "{rows}" and columns "{columns}"')
def step_sparse_matrix_names(context, name: str, rows: str, columns: str) -> None:
    matrix = LabeledSparseMatrix.load(_workdir_path(context, name))
    assert matrix.row_names == rows.split(","), matrix.row_names
    assert matrix.column_names == columns.split(","), matrix.column_names


@then('the sparse matrix "{name}" has value {value:g} at row "{row}" and column "{column}"')
def step_sparse_matrix_value(context, name: str, value: float, row: str, column: str) -> None:
    matrix = LabeledSparseMatrix.load(_workdir_path(context, name))
    cell = matrix.matrix[matrix.row_names.index(row), matrix.column_names.index(column)]
    assert np.isclose(cell, value), cell


@then('the matrix "{name}" row "{row}" is "{values}"')
def step_dense_matrix_row(context, name: str, row: str, values: str) -> None:
    matrix = LabeledMatrix.load(_workdir_path(context, name))
    expected = [float(value) for value in values.split(",")]
    assert np.allclose(matrix.row(row), expected), matrix.row(row)


@then('the file "{name}" exists')
def step_file_exists(context, name: str) -> None:
    path = _workdir_path(context, name)
    assert path.is_file(), path
