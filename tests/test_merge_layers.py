"""Tests for option layer precedence."""

from __future__ import annotations

from copy import deepcopy

import pytest

from labconf.config.defaults import presets
from labconf.config.loader import merge_layers, resolve_options
from labconf.config.validation import ConfigError, ErrorKind
from labconf.utils.merge import merge_options


def test_command_line_beats_options_file_and_presets() -> None:
    merged = merge_layers(
        {"fail_mode": "slow"},
        {"fail_mode": "stop"},
        {},
        {"fail_mode": "fast"},
        {},
    )
    assert merged["fail_mode"] == "fast"


def test_options_file_beats_presets() -> None:
    merged = merge_layers({"fail_mode": "slow"}, {"fail_mode": "stop"}, {}, {}, {})
    assert merged["fail_mode"] == "stop"


def test_hosts_file_config_beats_options_file_but_not_command_line() -> None:
    merged = merge_layers(
        {"type": "pe", "timeout": 300},
        {"type": "foss", "timeout": 100},
        {"type": "aio", "timeout": 50, "HOSTS": {}},
        {"type": "git"},
        {},
    )
    assert merged["type"] == "git"
    assert merged["timeout"] == 50


def test_environment_beats_every_other_layer() -> None:
    merged = merge_layers(
        {"pe_ver": "1"},
        {"pe_ver": "2"},
        {"pe_ver": "3"},
        {"pe_ver": "4"},
        {"pe_ver": "5"},
    )
    assert merged["pe_ver"] == "5"


def test_nested_values_are_replaced_not_merged() -> None:
    merged = merge_layers(
        {"ssh": {"port": 22, "keys": ["~/.ssh/id_rsa"]}},
        {"ssh": {"port": 2222}},
        {},
        {},
        {},
    )
    assert merged["ssh"] == {"port": 2222}


def test_hosts_are_folded_by_host_name() -> None:
    merged = merge_layers(
        {"HOSTS": {}},
        {"HOSTS": {"old": {"platform": "el-6-x86_64"}, "shared": {"platform": "el-5-i386"}}},
        {"HOSTS": {"shared": {"platform": "ubuntu-1204-amd64", "roles": ["agent"]}}},
        {},
        {},
    )
    assert merged["HOSTS"] == {
        "old": {"platform": "el-6-x86_64"},
        "shared": {"platform": "ubuntu-1204-amd64", "roles": ["agent"]},
    }


def test_command_line_string_is_injected_and_never_overridden() -> None:
    merged = merge_layers(
        {"command_line": "preset"},
        {},
        {"command_line": "hosts"},
        {"command_line": "flag"},
        {"command_line": "env"},
        command_line="labconf resolve --hosts hosts.yml",
    )
    assert merged["command_line"] == "labconf resolve --hosts hosts.yml"


def test_layers_are_not_mutated() -> None:
    presets_layer = {"fail_mode": "slow", "HOSTS": {"a": {"platform": "el-6-x86_64"}}}
    hosts_layer = {"HOSTS": {"b": {"platform": "el-7-x86_64"}}}
    snapshot = deepcopy((presets_layer, hosts_layer))

    merge_layers(presets_layer, {}, hosts_layer, {"fail_mode": "fast"}, {}, command_line="labconf")

    assert (presets_layer, hosts_layer) == snapshot


def test_merge_options_rejects_non_mapping_hosts() -> None:
    with pytest.raises(TypeError, match="HOSTS"):
        merge_options({"HOSTS": {}}, {"HOSTS": ["a", "b"]})


@pytest.mark.parametrize("layer_index", [1, 3, 4])
def test_non_mapping_hosts_in_any_layer_is_malformed_input(layer_index: int) -> None:
    layers = [presets(), {}, {"HOSTS": {"box": {"platform": "el-6-x86_64"}}}, {}, {}]
    layers[layer_index] = {"HOSTS": ["box"]}

    with pytest.raises(ConfigError, match="'HOSTS' must be a mapping") as excinfo:
        resolve_options(*layers)
    assert excinfo.value.kind is ErrorKind.MALFORMED_INPUT
    assert excinfo.value.subject == "HOSTS"
