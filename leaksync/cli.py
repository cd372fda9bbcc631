"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging

import typer

from leaksync.api import Client
from leaksync.core.errors import LeaksyncError, SettingValidationError
from leaksync.core.model import Event, Fingerprint
from leaksync.core.scheduler import ManualScheduler
from leaksync.core.storage import state_to_dict
from leaksync.transports.console import ConsoleTransport

app = typer.Typer(help="Wake-cycle driver for Z-Wave water leak sensors, hosted from the shell")

# Long enough for the post-install sync, short enough to leave logsOff pending.
SCHEDULER_HORIZON_S = 60.0


class EchoEventSink:
    def emit(self, event: Event) -> None:
        unit = event.unit or ""
        suffix = f" ({event.description})" if event.description else ""
        typer.echo(f"event {event.name}={event.value}{unit}{suffix}")


def _build_client() -> Client:
    client = Client(
        transport=ConsoleTransport(typer.echo),
        scheduler=ManualScheduler(),
        events=EchoEventSink(),
    )
    for warning in getattr(client, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return client


def _run_scheduled(client: Client) -> None:
    scheduler = client.scheduler
    if isinstance(scheduler, ManualScheduler):
        scheduler.run_pending(horizon_s=SCHEDULER_HORIZON_S)


def _parse_fingerprint(text: str) -> Fingerprint:
    parts = text.split(":")
    try:
        mfr, prod, device_id = (int(part, 16) for part in parts)
    except ValueError:
        raise SettingValidationError(f"Fingerprint '{text}' must look like 027A:7000:E002") from None
    return Fingerprint(manufacturer_id=mfr, product_type_id=prod, product_id=device_id)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("profiles")
def list_profiles() -> None:
    """List available device profiles and their parameters."""
    try:
        client = _build_client()
        profiles = client.list_profiles()
        if not profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for profile in profiles:
            fingerprints = ", ".join(str(fp) for fp in profile.fingerprints)
            typer.echo(f"{profile.id}: {profile.name} [{fingerprints}]")
            for descriptor in sorted(profile.parameters, key=lambda d: d.id):
                typer.echo(f"  {descriptor.id} {descriptor.name}")
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("params")
def list_params(
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Show parameter sizes, ranges, and defaults for a profile."""
    try:
        client = _build_client()
        resolved = client.get_profile(profile)
        typer.echo(f"Profile: {resolved.id} ({resolved.name})")
        for descriptor in sorted(resolved.parameters, key=lambda d: d.id):
            low, high = descriptor.valid_range
            if descriptor.kind == "enum":
                allowed = ", ".join(f"{k}={v}" for k, v in sorted(descriptor.options.items()))
            else:
                allowed = f"{low}..{high}"
            typer.echo(
                f"  {descriptor.id} {descriptor.name}: {allowed} "
                f"default={descriptor.default_value} size={descriptor.wire_size}"
            )
        wake_up = resolved.wake_up
        typer.echo(
            f"  wakeUpInterval: {wake_up.min_hours}..{wake_up.max_hours} hours "
            f"default={wake_up.default_hours}"
        )
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("install")
def install(
    device: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Initialise a device and run its first sync."""
    try:
        client = _build_client()
        client.open_device(device, profile_id=profile).driver.installed()
        _run_scheduled(client)
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("configure")
def configure(
    device: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Resync every parameter on the next wake-up."""
    try:
        client = _build_client()
        client.open_device(device, profile_id=profile).driver.configure()
        typer.echo(f"{device}: configuration will resync when the device wakes up")
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("refresh")
def refresh(
    device: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Query battery and water state on the next wake-up."""
    try:
        client = _build_client()
        client.open_device(device, profile_id=profile).driver.refresh()
        typer.echo(f"{device}: data will refresh when the device wakes up")
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("set")
def set_setting(
    device: str,
    name: str,
    value: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Change a parameter or wakeUpInterval; applied on the next wake-up."""
    try:
        client = _build_client()
        for warning in client.set_setting(device, name, value, profile_id=profile):
            typer.echo(f"Warning: {warning}", err=True)
        typer.echo(f"{device}: {name} will be synced when the device wakes up")
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("logging")
def set_logging(
    device: str,
    debug: bool | None = typer.Option(None, "--debug/--no-debug", help="Driver debug logging"),
    text: bool | None = typer.Option(None, "--text/--no-text", help="Description text logging"),
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Toggle per-device logging."""
    try:
        client = _build_client()
        client.set_logging(device, debug=debug, description_text=text, profile_id=profile)
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("parse")
def parse_frame(
    device: str,
    frame: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Feed one inbound command frame (hex) to the driver.

    A wake-up notification runs the resulting sync immediately.
    """
    try:
        client = _build_client()
        result = client.open_device(device, profile_id=profile).driver.parse(frame)
        if result is None:
            typer.echo(f"Error: could not decode frame '{frame}'", err=True)
            raise typer.Exit(code=1)
        _run_scheduled(client)
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("plan")
def preview_plan(
    device: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Show the batch the next wake-up would send, without sending it."""
    try:
        client = _build_client()
        result = client.open_device(device, profile_id=profile).driver.preview_sync()
        typer.echo(f"resync={result.resync} refresh={result.refresh}")
        for command in result.batch:
            typer.echo(f"  {type(command).__name__}: {command.hex()}")
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("state")
def show_state(
    device: str,
    profile: str | None = typer.Option(None, "--profile", help="Profile ID"),
) -> None:
    """Print the persisted state for a device as JSON."""
    try:
        client = _build_client()
        state = client.open_device(device, profile_id=profile).driver.state
        typer.echo(json.dumps(state_to_dict(state), indent=2, sort_keys=True))
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("match")
def match_fingerprint(fingerprint: str) -> None:
    """Find the profile for a manufacturer:product type:product id triple."""
    try:
        client = _build_client()
        profile = client.match_profile(_parse_fingerprint(fingerprint))
        typer.echo(f"{fingerprint} -> {profile.id if profile else '<no-match>'}")
    except LeaksyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
