"""Tests for list option normalization, test-file discovery and repo expansion."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from labconf.config.defaults import LIST_OPTIONS, presets
from labconf.config.loader import file_list, normalize_options, normalize_tags, parse_git_repos
from labconf.config.validation import ConfigError, ErrorKind


def _touch(path: Path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("# test\n", encoding="utf-8")
    return str(path)


def test_file_list_sorts_shallow_files_first(tmp_path: Path) -> None:
    nested = _touch(tmp_path / "a" / "b.rb")
    top = _touch(tmp_path / "c.rb")
    _touch(tmp_path / "a" / "notes.txt")

    assert file_list([str(tmp_path)]) == [top, nested]


def test_file_list_keeps_plain_files_in_given_order(tmp_path: Path) -> None:
    second = _touch(tmp_path / "z.rb")
    first = _touch(tmp_path / "setup.sh")

    assert file_list([second, first]) == [second, first]


def test_file_list_rejects_directory_without_rb_files(tmp_path: Path) -> None:
    _touch(tmp_path / "readme.md")

    with pytest.raises(ConfigError, match="empty directory used as an option") as excinfo:
        file_list([str(tmp_path)])
    assert excinfo.value.kind is ErrorKind.RESOURCE_ABSENCE


def test_file_list_rejects_missing_path(tmp_path: Path) -> None:
    missing = str(tmp_path / "missing")

    with pytest.raises(ConfigError, match="is not a file or directory"):
        file_list([missing])


def test_file_list_rejects_empty_input() -> None:
    with pytest.raises(ConfigError, match="no .rb files found"):
        file_list([])


def test_parse_git_repos_expands_keywords() -> None:
    assert parse_git_repos(["PUPPET/3.1"]) == ["git://github.com/puppetlabs/puppet.git#3.1"]
    assert parse_git_repos(["FACTER/1.7.0", "HIERA/1.2", "HIERA-PUPPET/origin/master"]) == [
        "git://github.com/puppetlabs/facter.git#1.7.0",
        "git://github.com/puppetlabs/hiera.git#1.2",
        "git://github.com/puppetlabs/hiera-puppet.git#origin/master",
    ]


def test_parse_git_repos_passes_other_entries_through() -> None:
    entries = ["https://example.com/repo.git#main", "puppet/3.1", "PUPPETDB/1.0"]
    assert parse_git_repos(entries) == entries


def test_parse_git_repos_accepts_custom_base() -> None:
    assert parse_git_repos(["FACTER/2.0"], repo="https://git.example.com") == [
        "https://git.example.com/facter.git#2.0"
    ]


def test_normalize_options_initializes_missing_list_options() -> None:
    normalized = normalize_options(presets())

    for key in LIST_OPTIONS:
        assert normalized[key] == []


def test_normalize_options_splits_and_expands(tmp_path: Path) -> None:
    test_file = _touch(tmp_path / "tests" / "smoke.rb")
    options = presets()
    options.update(
        {
            "helper": "helpers/a.rb,helpers/b.rb",
            "modules": "stdlib",
            "tests": str(tmp_path / "tests"),
            "install": "PUPPET/3.1,https://example.com/x.git",
        }
    )

    normalized = normalize_options(options)

    assert normalized["helper"] == ["helpers/a.rb", "helpers/b.rb"]
    assert normalized["modules"] == ["stdlib"]
    assert normalized["tests"] == [test_file]
    assert normalized["install"] == [
        "git://github.com/puppetlabs/puppet.git#3.1",
        "https://example.com/x.git",
    ]
    assert options["helper"] == "helpers/a.rb,helpers/b.rb"


def test_normalize_options_applies_keyfile_to_ssh_keys() -> None:
    options = presets()
    options["keyfile"] = "/keys/ci_rsa"

    normalized = normalize_options(options)

    assert normalized["ssh"]["keys"] == ["/keys/ci_rsa"]
    assert normalized["ssh"]["port"] == 22
    assert options["ssh"]["keys"] == ["~/.ssh/id_rsa"]


@pytest.mark.parametrize("key, value", [("fail_mode", "sometimes"), ("preserve_hosts", "forever")])
def test_normalize_options_rejects_unknown_modes(key: str, value: str) -> None:
    options = presets()
    options[key] = value

    with pytest.raises(ConfigError, match=value) as excinfo:
        normalize_options(options)
    assert excinfo.value.kind is ErrorKind.INVARIANT_VIOLATION


def test_normalize_options_rejects_list_fail_mode() -> None:
    options = presets()
    options["fail_mode"] = ["fast"]

    with pytest.raises(ConfigError, match="fail_mode") as excinfo:
        normalize_options(options)
    assert excinfo.value.kind is ErrorKind.MALFORMED_INPUT


def test_normalize_tags_lowercases_and_defaults() -> None:
    normalized = normalize_tags({"tag_includes": "Smoke,API"})

    assert normalized["tag_includes"] == ["smoke", "api"]
    assert normalized["tag_excludes"] == []


def test_normalize_tags_rejects_overlap() -> None:
    with pytest.raises(ConfigError, match="'slow' cannot be in both"):
        normalize_tags({"tag_includes": "fast,SLOW", "tag_excludes": ["slow"]})


def test_normalize_tags_keeps_inner_empty_fragments() -> None:
    normalized = normalize_tags({"tag_includes": "a,,B,,", "tag_excludes": ",c"})

    assert normalized["tag_includes"] == ["a", "", "b"]
    assert normalized["tag_excludes"] == ["", "c"]


@pytest.mark.parametrize("key", ["tag_includes", "tag_excludes"])
def test_normalize_tags_rejects_non_list_values(key: str) -> None:
    with pytest.raises(ConfigError, match=key) as excinfo:
        normalize_tags({key: 5})
    assert excinfo.value.kind is ErrorKind.MALFORMED_INPUT
    assert excinfo.value.subject == key


def test_normalize_options_rejects_non_mapping_ssh_with_keyfile() -> None:
    options = presets()
    options["ssh"] = "nope"
    options["keyfile"] = "/keys/ci_rsa"

    with pytest.raises(ConfigError, match="`ssh` is malformed") as excinfo:
        normalize_options(options)
    assert excinfo.value.kind is ErrorKind.MALFORMED_INPUT
    assert excinfo.value.subject == "ssh"


def test_file_list_output_uses_given_root(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _touch(tmp_path / "suite" / "one.rb")

    assert file_list(["suite"]) == [os.path.join("suite", "one.rb")]
