"""
Primary Typer application wiring for the adapter registry CLI.

Commands inspect the bundled registry (modules, adapters, interface shapes),
explain cross-module compatibility and construct adapters through the same
factories applications use, so operators can check a configuration before
wiring it into a service.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import anyio
import typer
import yaml

from ..adapters import AdapterError
from ..config import SettingsError
from ..core import METHOD_CAPABILITIES, AdapterMetadata, Capability, ExecutionContext, RegistryError, RegistryLoadError, configure_logging
from ..services import AdapterServices

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Runtime adapter registry CLI.\n\n"
        "Inspect registered modules and adapters, check cross-module compatibility,\n"
        "and probe adapter construction through the module factories."
    ),
)

# every module's adapters share these, so they say nothing about shape fit
_COMMON_CAPABILITIES = frozenset({Capability.ADAPTER_IDENTITY, Capability.ADAPTER_LIFECYCLE})


def _parse_options(values: Optional[List[str]]) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if not values:
        return options
    for entry in values:
        if "=" not in entry:
            raise typer.BadParameter(f"Option '{entry}' must use key=value format.")
        key, raw = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Option '{entry}' is missing a key.")
        try:
            options[key] = yaml.safe_load(raw) if raw else raw
        except yaml.YAMLError:
            options[key] = raw
    return options


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    environment: Optional[List[str]] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Override the detected runtime environment (server, browser). Can be repeated.",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level for registry and factory output."),
) -> None:
    """
    Configure the global execution context.

    The callback stores the service façade in Typer's state so child commands
    can retrieve it via :class:`typer.Context`.
    """

    if log_level:
        configure_logging(log_level, force=True)
    try:
        context = ExecutionContext.build_default(environments=environment)
        context.active_environments()
        services = AdapterServices.build_default(context)
    except (SettingsError, RegistryLoadError, RegistryError, ValueError) as exc:
        typer.echo(f"Failed to initialise registry: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    state = ctx.ensure_object(dict)
    state["services"] = services


def _require_services(ctx: typer.Context) -> AdapterServices:
    state = ctx.ensure_object(dict)
    services = state.get("services")
    if not isinstance(services, AdapterServices):
        raise typer.Exit(code=2)
    return services


def _environment_label(metadata: AdapterMetadata) -> str:
    if metadata.environment is None or not metadata.environment.supported_environments:
        return "any"
    return ",".join(environment.value for environment in metadata.environment.supported_environments)


def _shape_coverage(services: AdapterServices, capabilities: Sequence[Capability]) -> Dict[str, List[Capability]]:
    """Map each interface shape overlapping ``capabilities`` to the capabilities it still lacks."""

    declared = set(capabilities)
    specific = declared - _COMMON_CAPABILITIES
    coverage: Dict[str, List[Capability]] = {}
    for shape, members in sorted(services.registry.list_interface_shapes().items()):
        if specific.intersection(members):
            coverage[shape] = [capability for capability in members if capability not in declared]
    return coverage


@app.command("modules")
def modules_list(ctx: typer.Context) -> None:
    """List registered modules."""

    services = _require_services(ctx)
    header = f"{'Module':<16} {'Version':<9} Adapters"
    typer.echo(header)
    typer.echo("-" * len(header))
    for module in services.registry.list_modules():
        count = len(services.registry.get_module_adapters(module.name))
        typer.echo(f"{module.name:<16} {module.version:<9} {count}")


@app.command("adapters")
def adapters_list(
    ctx: typer.Context,
    module_name: Optional[str] = typer.Argument(None, help="Limit output to one module."),
) -> None:
    """List registered adapters with their environments and capability counts."""

    services = _require_services(ctx)
    entries = services.list_adapters(module_name)
    if not entries:
        typer.echo("No adapters match the requested filters.")
        raise typer.Exit(code=0)

    header = f"{'Module':<16} {'Adapter':<14} {'Version':<9} {'Type':<11} {'Env':<15} Capabilities"
    typer.echo(header)
    typer.echo("-" * len(header))
    for metadata in entries:
        typer.echo(f"{metadata.module:<16} {metadata.name:<14} {metadata.version:<9} {metadata.adapter_type:<11} {_environment_label(metadata):<15} {len(metadata.capabilities)}")


@app.command("describe")
def adapters_describe(
    ctx: typer.Context,
    module_name: str = typer.Argument(..., help="Module name, e.g. wallet."),
    name: str = typer.Argument(..., help="Adapter name."),
    version: Optional[str] = typer.Option(None, "--version", "-v", help="Adapter version. Defaults to the latest."),
    output_json: bool = typer.Option(False, "--json", help="Emit metadata in JSON format."),
) -> None:
    """Show metadata, requirements and interface-shape coverage for an adapter."""

    services = _require_services(ctx)
    try:
        metadata = services.resolve_adapter(module_name, name, version)
    except AdapterError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    shapes = {shape: [capability.value for capability in missing] for shape, missing in _shape_coverage(services, metadata.capabilities).items()}

    if output_json:
        payload = metadata.to_dict()
        payload["interface_shapes"] = {shape: {"satisfied": not missing, "missing": missing} for shape, missing in shapes.items()}
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    typer.echo(f"Adapter: {metadata.key}")
    typer.echo(f"Module: {metadata.module}")
    typer.echo(f"Type: {metadata.adapter_type}")
    if metadata.description:
        typer.echo(f"Description: {metadata.description}")
    typer.echo(f"Environments: {_environment_label(metadata)}")
    typer.echo(f"Capabilities: {', '.join(capability.value for capability in metadata.capabilities) or 'N/A'}")
    for requirement in metadata.requirements:
        marker = "optional" if requirement.allow_undefined else "required"
        typer.echo(f"Requirement: {requirement.path} ({requirement.type}, {marker})")
    for shape, missing in shapes.items():
        status = "satisfied" if not missing else f"missing {', '.join(missing)}"
        typer.echo(f"Interface {shape}: {status}")
    if metadata.environment:
        for note in metadata.environment.security_notes:
            typer.echo(f"Security: {note}")


@app.command("compat")
def compat_check(
    ctx: typer.Context,
    source_module: str = typer.Argument(..., help="Source module."),
    source_adapter: str = typer.Argument(..., help="Source adapter name."),
    source_version: str = typer.Argument(..., help="Source adapter version."),
    target_module: str = typer.Argument(..., help="Target module."),
    target_adapter: str = typer.Argument(..., help="Target adapter name."),
    target_version: str = typer.Argument(..., help="Target adapter version."),
    report: bool = typer.Option(False, "--report", help="Print conflicts, recommendations and alternatives."),
    output_json: bool = typer.Option(False, "--json", help="Emit the report in JSON format."),
) -> None:
    """Check whether two adapters from different modules can be used together."""

    services = _require_services(ctx)
    source = (source_module, source_adapter, source_version)
    target = (target_module, target_adapter, target_version)

    if not (report or output_json):
        compatible = services.is_compatible(source, target)
        typer.echo("compatible" if compatible else "incompatible")
        if not compatible:
            raise typer.Exit(code=1)
        return

    outcome = services.compatibility_report(source, target)
    if output_json:
        typer.echo(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))
    else:
        typer.echo(f"Compatible: {'yes' if outcome.compatible else 'no'}")
        for conflict in outcome.conflicts:
            typer.echo(f"Conflict [{conflict.type}/{conflict.severity}]: {conflict.description}")
        for recommendation in outcome.recommendations:
            typer.echo(f"Recommendation: {recommendation}")
        if outcome.alternatives:
            typer.echo(f"Alternatives: {', '.join(outcome.alternatives)}")
    if not outcome.compatible:
        raise typer.Exit(code=1)


@app.command("compatible")
def compatible_list(
    ctx: typer.Context,
    module_name: str = typer.Argument(..., help="Source module."),
    name: str = typer.Argument(..., help="Source adapter name."),
    version: str = typer.Argument(..., help="Source adapter version."),
) -> None:
    """List adapters in other modules compatible with the given adapter."""

    services = _require_services(ctx)
    matches = services.compatible_adapters(module_name, name, version)
    if not matches:
        typer.echo("No compatible adapters found.")
        raise typer.Exit(code=0)

    header = f"{'Module':<16} {'Adapter':<14} {'Version':<9} Score"
    typer.echo(header)
    typer.echo("-" * len(header))
    for match in matches:
        typer.echo(f"{match.module:<16} {match.adapter:<14} {match.version:<9} {match.score:.2f}")


@app.command("env")
def env_show(
    ctx: typer.Context,
    output_json: bool = typer.Option(False, "--json", help="Emit environment information in JSON format."),
) -> None:
    """Show the active runtime environments and which adapters can run in them."""

    services = _require_services(ctx)
    active = services.context.active_environments()
    runnable = [
        f"{metadata.module}/{metadata.key}"
        for metadata in services.list_adapters()
        if metadata.environment is None or active.intersection(metadata.environment.supported_environments)
    ]
    settings_path = services.context.settings.source_path
    if output_json:
        payload = {
            "environments": sorted(environment.value for environment in active),
            "settings": str(settings_path) if settings_path else None,
            "runnable_adapters": runnable,
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    typer.echo(f"Environments: {', '.join(sorted(environment.value for environment in active))}")
    typer.echo(f"Settings: {settings_path or 'defaults'}")
    typer.echo(f"Runnable adapters: {', '.join(runnable) or 'none'}")


@app.command("probe")
def probe_adapter(
    ctx: typer.Context,
    module_name: str = typer.Argument(..., help="Module name, e.g. wallet."),
    name: str = typer.Argument(..., help="Adapter name."),
    version: Optional[str] = typer.Option(None, "--version", "-v", help="Adapter version. Defaults to the latest."),
    option: Optional[List[str]] = typer.Option(
        None,
        "--option",
        "-o",
        help="Construction option in the form key=value. Values are parsed as YAML scalars. Can be repeated.",
    ),
    interface: Optional[str] = typer.Option(None, "--interface", help="Interface shape the adapter must implement."),
) -> None:
    """
    Construct an adapter through its module factory and report the outcome.

    Exits with code 1 and prints the normalized error code when validation or
    construction fails.
    """

    services = _require_services(ctx)
    options = _parse_options(option)
    try:
        adapter = anyio.run(services.create_adapter, module_name, name, version, options, interface)
    except AdapterError as exc:
        typer.echo(f"Adapter error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    metadata = services.resolve_adapter(module_name, name, version)
    typer.echo(f"Created {module_name}/{metadata.key}")
    typer.echo(f"Capabilities: {', '.join(capability.value for capability in adapter.declared_capabilities)}")
    if interface:
        typer.echo(f"Interface {interface}: satisfied")

    missing = {capability for gaps in _shape_coverage(services, adapter.declared_capabilities).values() for capability in gaps}
    gated = [method for method, capability in METHOD_CAPABILITIES.items() if capability in missing]
    typer.echo(f"Gated methods: {', '.join(gated) or 'none'}")


__all__ = ["app"]
