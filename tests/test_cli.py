from __future__ import annotations

import json


def test_cli_modules_lists_bundled_modules(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["modules"])
    assert result.exit_code == 0
    for module in ("wallet", "smart-contract", "crosschain"):
        assert module in result.output


def test_cli_adapters_filters_by_module(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["adapters", "wallet"])
    assert result.exit_code == 0
    assert "memory" in result.output
    assert "server,browser" in result.output
    assert "template" not in result.output

    empty = cli_runner.invoke(cli_app, ["adapters", "storage"])
    assert empty.exit_code == 0
    assert "No adapters match the requested filters." in empty.output


def test_cli_describe_reports_interface_coverage(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["describe", "wallet", "memory"])
    assert result.exit_code == 0
    assert "Adapter: memory@1.0.0" in result.output
    assert "Requirement: options.seed (string, required)" in result.output
    assert "Interface IBasicWallet: satisfied" in result.output
    assert "Interface IEVMWallet: missing ITypedDataSigner, IGasEstimation, ITokenOperations" in result.output
    assert "ICrossChain" not in result.output


def test_cli_describe_json(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["describe", "smart-contract", "template", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["name"] == "template"
    assert payload["interface_shapes"]["IContractGenerator"] == {"satisfied": True, "missing": []}
    assert payload["interface_shapes"]["IContractHandler"]["missing"] == ["IContractCompiler"]


def test_cli_describe_unknown_adapter(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["describe", "wallet", "ghost"])
    assert result.exit_code == 1
    assert "ADAPTER_NOT_FOUND" in result.output


def test_cli_compat_respects_environment(cli_runner, cli_app):
    args = ["compat", "wallet", "memory", "1.0.0", "crosschain", "memory", "1.0.0"]

    result = cli_runner.invoke(cli_app, ["-e", "server", *args])
    assert result.exit_code == 0
    assert result.output.strip() == "compatible"

    browser = cli_runner.invoke(cli_app, ["-e", "browser", *args])
    assert browser.exit_code == 1
    assert "incompatible" in browser.output


def test_cli_compat_report(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["-e", "browser", "compat", "wallet", "memory", "1.0.0", "crosschain", "memory", "1.0.0", "--report"])
    assert result.exit_code == 1
    assert "Compatible: no" in result.output
    assert "Conflict [environment/error]: Environment incompatibility: memory@1.0.0 requires server" in result.output

    as_json = cli_runner.invoke(cli_app, ["-e", "server", "compat", "wallet", "memory", "1.0.0", "smart-contract", "template", "1.0.0", "--json"])
    assert as_json.exit_code == 0
    payload = json.loads(as_json.output)
    assert payload["compatible"] is True
    assert payload["supported_versions"] == ["1.0.0", "1.0.0"]


def test_cli_compatible_lists_other_modules(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["-e", "server", "compatible", "wallet", "memory", "1.0.0"])
    assert result.exit_code == 0
    assert "smart-contract" in result.output
    assert "crosschain" in result.output


def test_cli_env_json(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["-e", "browser", "env", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["environments"] == ["browser"]
    assert payload["settings"] is None
    assert "wallet/memory@1.0.0" in payload["runnable_adapters"]
    assert "crosschain/memory@1.0.0" not in payload["runnable_adapters"]


def test_cli_probe_reports_gated_methods(cli_runner, cli_app):
    result = cli_runner.invoke(
        cli_app,
        ["-e", "server", "probe", "wallet", "memory", "-o", "seed=alpha", "-o", "initial_balance=10", "--interface", "IBasicWallet"],
    )
    assert result.exit_code == 0
    assert "Created wallet/memory@1.0.0" in result.output
    assert "Interface IBasicWallet: satisfied" in result.output
    assert "Gated methods: sign_typed_data, estimate_gas, call_contract" in result.output


def test_cli_probe_failure_prints_code(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["probe", "wallet", "memory"])
    assert result.exit_code == 1
    assert "Adapter error:" in result.output
    assert "MISSING_ADAPTER_REQUIREMENT" in result.output


def test_cli_probe_rejects_malformed_option(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["probe", "wallet", "memory", "-o", "seed"])
    assert result.exit_code == 2


def test_cli_invalid_environment(cli_runner, cli_app):
    result = cli_runner.invoke(cli_app, ["-e", "desktop", "modules"])
    assert result.exit_code == 1
    assert "Failed to initialise registry" in result.output
