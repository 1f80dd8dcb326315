import json
import sys

import pytest

from dedupe import load_json_text, main, prompt_for_key, run


def answers(*values):
    it = iter(values)

    def input_fn(prompt):
        return next(it)

    return input_fn


def test_load_json_text_keeps_line_endings(tmp_path):
    path = tmp_path / "items.json"
    path.write_bytes(b'[\r\n  {\r\n    "id": 1\r\n  }\r\n]\r\n')

    assert load_json_text(str(path)) == '[\r\n  {\r\n    "id": 1\r\n  }\r\n]\r\n'


def test_load_json_text_file_not_found():
    with pytest.raises(FileNotFoundError, match="File not found"):
        load_json_text("/nonexistent/items.json")


def test_main_rewrites_file_in_place(json_file, people):
    result = main([str(json_file), "id"])

    assert result.strategy == "preserved"
    assert json_file.read_text(encoding="utf-8") == (
        json.dumps([people[0], people[1], people[3]], indent=4) + "\n"
    )


def test_main_writes_output_file(tmp_path, json_file, people_text):
    output = tmp_path / "out.json"

    result = main([str(json_file), "team", str(output)])

    assert result.removed_indices == [2, 3, 4]
    assert json.loads(output.read_text(encoding="utf-8")) == json.loads(result.text)
    assert json_file.read_text(encoding="utf-8") == people_text


def test_main_leaves_file_untouched_without_duplicates(json_file, people_text):
    result = main([str(json_file), "name"])

    assert not result.changed
    assert json_file.read_text(encoding="utf-8") == people_text


def test_main_respects_preserve_formatting_setting(monkeypatch, json_file):
    monkeypatch.setenv("DEDUPE_PRESERVE_FORMATTING", "false")

    result = main([str(json_file), "id"])

    assert result.strategy == "reserialized"


def test_main_accepts_other_extensions_when_configured(monkeypatch, tmp_path):
    path = tmp_path / "items.txt"
    path.write_text('[{"id": 1}, {"id": 1}]', encoding="utf-8")
    monkeypatch.setenv("DEDUPE_REQUIRE_JSON_EXTENSION", "0")

    result = main([str(path), "id"])

    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": 1}]
    assert result.removed_count == 1


def test_main_prompts_for_key(json_file, capsys):
    result = main([str(json_file)], input_fn=answers("2"))

    assert result.key == "name"
    assert "1. id" in capsys.readouterr().out


def test_main_cancelled_prompt_changes_nothing(json_file, people_text):
    assert main([str(json_file)], input_fn=answers("")) is None
    assert json_file.read_text(encoding="utf-8") == people_text


def test_main_rejects_malformed_document(tmp_path):
    path = tmp_path / "items.json"
    path.write_text('{"id": 1}', encoding="utf-8")

    with pytest.raises(ValueError, match="array of objects"):
        main([str(path), "id"])


def test_prompt_for_key_accepts_name_after_bad_answer(capsys):
    key = prompt_for_key(["id", "name"], input_fn=answers("7", "name"))

    assert key == "name"
    assert "'7' is not one of the listed properties" in capsys.readouterr().out


def test_prompt_for_key_eof_cancels():
    def input_fn(prompt):
        raise EOFError

    assert prompt_for_key(["id"], input_fn=input_fn) is None


def test_run_exits_on_bad_arguments(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["dedupe.py", "/nonexistent/items.json", "id"])

    with pytest.raises(SystemExit) as excinfo:
        run()

    assert excinfo.value.code == 1


def test_main_rewrites_file_with_byte_order_mark(tmp_path):
    path = tmp_path / "items.json"
    path.write_bytes(b'\xef\xbb\xbf[\n  {\n    "id": 1\n  },\n  {\n    "id": 1\n  }\n]\n')

    result = main([str(path), "id"])

    assert result.removed_count == 1
    assert path.read_bytes() == b'\xef\xbb\xbf[\n  {\n    "id": 1\n  }\n]\n'


def test_prompt_for_key_asks_again_after_non_decimal_digit(capsys):
    key = prompt_for_key(["id", "name"], input_fn=answers("²", "1"))

    assert key == "id"
    assert "'²' is not one of the listed properties" in capsys.readouterr().out


def test_run_exits_when_output_cannot_be_written(monkeypatch, json_file):
    def deny(path, text):
        raise PermissionError(f"Permission denied: {path}")

    monkeypatch.setattr("dedupe.write_text", deny)
    monkeypatch.setattr(sys, "argv", ["dedupe.py", str(json_file), "id"])

    with pytest.raises(SystemExit) as excinfo:
        run()

    assert excinfo.value.code == 1
