"""Command line interface for the Archivist project."""

from __future__ import annotations

import difflib
import logging
import mimetypes
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from archivist.catalog import (
    ArchiveImage,
    ArchiveObject,
    CatalogError,
    ObjectNotFoundError,
    facet_values,
    filter_objects,
    related_objects,
    remove_image,
    set_primary,
)
from archivist.config import ArchivistConfig, ConfigError, ConfigManager, resolve_with_precedence
from archivist.images import ImageDecodeError
from archivist.service import ArchiveService, LoadResult
from archivist.storage import StorageError

console = Console()
err_console = Console(stderr=True)

_PROTECTED_FIELDS = {"id", "images", "created_at", "updated_at"}
_UNSAVED_WARNING = (
    "No remote endpoint is configured, so this change only lives in the local cache "
    "and the next refresh replaces it with the bundled samples. Set remote.endpoint_url, "
    "or remote.sheet_path for a local sheet file, to keep it."
)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _configure_logging(level: str) -> None:
    """Route log records through Rich on stderr at ``level``."""
    handler = RichHandler(console=err_console, show_path=False, markup=False)
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def _load_config() -> ArchivistConfig:
    manager = ConfigManager()
    manager.ensure_exists()
    config = manager.load()
    _configure_logging(config.logging.level)
    return config


def _output_modes(
    ctx: click.Context,
    config: ArchivistConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    """Resolve quiet/summary flags against configured defaults.

    Returns:
        tuple[bool, bool]: Effective quiet and summary-only flags.

    Raises:
        click.ClickException: If the flags conflict.
    """

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Args:
        target: Mapping to mutate in-place.
        path: Sequence of keys representing the nested location.
        value: Value to assign at the nested location.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _field_name(key: str) -> str:
    """Map a CLI field key (attribute name or column alias) to the model attribute.

    Raises:
        click.BadParameter: If the key names no editable field.
    """
    normalized = key.strip().replace("-", "_")
    for name, info in ArchiveObject.model_fields.items():
        if normalized == name or key.strip() == info.alias:
            if name in _PROTECTED_FIELDS:
                raise click.BadParameter(f"'{key}' cannot be set directly.")
            return name
    raise click.BadParameter(f"Unknown field '{key}'.")


def _parse_fields(pairs: Iterable[str]) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{pair}'.")
        name = _field_name(key)
        if name in ("keywords", "parts"):
            updates[name] = [part.strip() for part in value.split(",") if part.strip()]
        else:
            updates[name] = value
    return updates


def _read_image(path: Path) -> tuple[bytes, Optional[str]]:
    mime_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), mime_type


def _objects_table(objects: Iterable[ArchiveObject]) -> Table:
    table = Table(title="Archive objects", expand=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Collection")
    table.add_column("Images", justify="right")
    for obj in objects:
        pending = len(obj.local_images)
        images = f"{len(obj.images)}" + (f" ({pending} local)" if pending else "")
        table.add_row(obj.id, obj.title, obj.object_type, obj.collection, images)
    return table


def _detail_table(obj: ArchiveObject) -> Table:
    table = Table(title=obj.title, show_header=False, expand=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    payload = obj.to_payload()
    for key, value in payload.items():
        if key in {"title", "images"} or value in ("", [], None):
            continue
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value)
        table.add_row(key, str(value))
    return table


def _describe_image(position: int, image: Any) -> str:
    marker = "*" if image.is_primary else " "
    where = "local" if image.is_local else image.url
    caption = f" {image.caption}" if image.caption else ""
    return f"{marker} [{position}]{caption} ({where})"


def _source_label(result: LoadResult) -> str:
    if not result.from_cache:
        return "remote"
    return "cache" if result.fresh else "stale cache"


def _emit_warnings(warnings: Iterable[str], *, quiet: bool, summary_only: bool) -> None:
    for warning in warnings:
        _emit_message(
            f"[yellow]{warning}[/yellow]", mode="warning", quiet=quiet, summary_only=summary_only
        )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="archivist")
def cli() -> None:
    """Archivist catalogues museum archive objects backed by a spreadsheet endpoint.

    Returns:
        None: This function is invoked for its side effects.
    """


@cli.command("list")
@click.option("--search", "query", type=str, help="Free-text search query.")
@click.option("--type", "object_type", type=str, help="Only show objects of this type.")
@click.option("--collection", type=str, help="Only show objects in this collection.")
@click.option("--keyword", type=str, help="Only show objects tagged with this keyword.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the objects.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def list_objects(
    ctx: click.Context,
    query: str | None,
    object_type: str | None,
    collection: str | None,
    keyword: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """List archive objects, optionally filtered by search text and facets.

    Cached objects are shown immediately; the remote store is refreshed in the
    background before the command exits.

    Args:
        ctx: Click context used for parameter source inspection.
        query: Case-insensitive free-text search.
        object_type: Object type filter.
        collection: Collection filter.
        keyword: Keyword filter.
        json_output: If True, emit JSON instead of a table.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
    """

    try:
        config = _load_config()
        quiet_enabled, summary_only = _output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        with ArchiveService.from_config(config) as service:
            result = service.load()
            matches = filter_objects(
                result.objects,
                query=query,
                object_type=object_type,
                collection=collection,
                keyword=keyword,
            )
            facets = facet_values(result.objects)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except StorageError as exc:
        _handle_cli_error(str(exc), code="storage_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "source": _source_label(result),
                "objects": [obj.to_payload() for obj in matches],
                "facets": {
                    "objectTypes": facets.object_types,
                    "collections": facets.collections,
                    "keywords": facets.keywords,
                },
            }
        )
        return

    if matches:
        _emit_message(
            _objects_table(matches), mode="detail", quiet=quiet_enabled, summary_only=summary_only
        )
    _emit_message(
        f"[green]{len(matches)} of {len(result.objects)} objects "
        f"(from {_source_label(result)}).[/green]",
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("object_id")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the object.")
def show(object_id: str, json_output: bool) -> None:
    """Show OBJECT_ID with its images and related objects.

    Args:
        object_id: Identifier of the object to display.
        json_output: If True, emit JSON instead of tables.
    """

    try:
        config = _load_config()
        with ArchiveService.from_config(config) as service:
            result = service.load()
            obj = service.get(object_id)
            related = related_objects(obj, result.objects)
    except ObjectNotFoundError as exc:
        _handle_cli_error(str(exc), code="not_found", json_output=json_output, original=exc)
        return
    except (ConfigError, StorageError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "object": obj.to_payload(),
                "related": [{"id": other.id, "title": other.title} for other in related],
            }
        )
        return

    console.print(_detail_table(obj))
    if obj.about_text:
        console.print(obj.about_text)
    if obj.images:
        console.print("[bold]Images[/bold]")
        for position, image in enumerate(obj.images):
            console.print(_describe_image(position, image), markup=False)
    if related:
        console.print("[bold]Related objects[/bold]")
        for other in related:
            console.print(f"  {other.id}  {other.title}", markup=False)


@cli.command()
@click.argument("title")
@click.option("--field", "fields", multiple=True, help="Set a field as KEY=VALUE (repeatable).")
@click.option("--keyword", "keywords", multiple=True, help="Keyword to attach (repeatable).")
@click.option(
    "--image",
    "images",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Image file to attach (repeatable).",
)
@click.option("--caption", type=str, default="", help="Caption applied to attached images.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the saved object.")
def add(
    title: str,
    fields: tuple[str, ...],
    keywords: tuple[str, ...],
    images: tuple[Path, ...],
    caption: str,
    json_output: bool,
) -> None:
    """Create a new archive object titled TITLE.

    Args:
        title: Title of the new object.
        fields: ``KEY=VALUE`` assignments for other fields.
        keywords: Keywords to attach.
        images: Image files to run through the ingestion pipeline.
        caption: Caption applied to each attached image.
        json_output: If True, emit JSON describing the saved object.
    """

    try:
        config = _load_config()
        updates = _parse_fields(fields)
        updates["title"] = title
        if keywords:
            updates["keywords"] = list(keywords)
        with ArchiveService.from_config(config) as service:
            service.load(background=False)
            obj = ArchiveObject(**updates)
            for path in images:
                data, mime_type = _read_image(path)
                obj = service.attach_image(
                    obj, data, path.name, caption=caption, mime_type=mime_type
                )
            result = service.save(obj, is_new=True)
            remote_configured = service.remote.configured
    except click.BadParameter as exc:
        _handle_cli_error(exc.format_message(), code="invalid_field", json_output=json_output)
        return
    except (CatalogError, ImageDecodeError, StorageError, ConfigError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    _report_save(
        result.object,
        result.warnings,
        json_output=json_output,
        verb="Created",
        remote_configured=remote_configured,
    )


@cli.command()
@click.argument("object_id")
@click.option("--title", type=str, help="Replace the title.")
@click.option("--field", "fields", multiple=True, help="Set a field as KEY=VALUE (repeatable).")
@click.option("--keyword", "keywords", multiple=True, help="Replace keywords (repeatable).")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the saved object.")
def edit(
    object_id: str,
    title: str | None,
    fields: tuple[str, ...],
    keywords: tuple[str, ...],
    json_output: bool,
) -> None:
    """Update fields of OBJECT_ID.

    Args:
        object_id: Identifier of the object to update.
        title: Replacement title.
        fields: ``KEY=VALUE`` assignments.
        keywords: Replacement keyword list.
        json_output: If True, emit JSON describing the saved object.
    """

    try:
        config = _load_config()
        updates = _parse_fields(fields)
        if title is not None:
            updates["title"] = title
        if keywords:
            updates["keywords"] = list(keywords)
        with ArchiveService.from_config(config) as service:
            service.load(background=False)
            current = service.get(object_id)
            obj = current.model_copy(update=updates)
            result = service.save(obj, is_new=False)
            remote_configured = service.remote.configured
    except click.BadParameter as exc:
        _handle_cli_error(exc.format_message(), code="invalid_field", json_output=json_output)
        return
    except (CatalogError, StorageError, ConfigError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    _report_save(
        result.object,
        result.warnings,
        json_output=json_output,
        verb="Updated",
        remote_configured=remote_configured,
    )


@cli.command("add-image")
@click.argument("object_id")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--caption", type=str, default="", help="Caption for the image.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the saved object.")
def add_image(object_id: str, path: Path, caption: str, json_output: bool) -> None:
    """Attach the image at PATH to OBJECT_ID.

    Args:
        object_id: Identifier of the object receiving the image.
        path: Image file to ingest.
        caption: Caption for the image.
        json_output: If True, emit JSON describing the saved object.
    """

    try:
        config = _load_config()
        with ArchiveService.from_config(config) as service:
            service.load(background=False)
            current = service.get(object_id)
            data, mime_type = _read_image(path)
            obj = service.attach_image(
                current, data, path.name, caption=caption, mime_type=mime_type
            )
            result = service.save(obj, is_new=False)
            remote_configured = service.remote.configured
    except (CatalogError, ImageDecodeError, StorageError, ConfigError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    _report_save(
        result.object,
        result.warnings,
        json_output=json_output,
        verb="Updated",
        remote_configured=remote_configured,
    )


def _change_images(
    object_id: str,
    index: int,
    change: Callable[[list[ArchiveImage], int], list[ArchiveImage]],
    *,
    json_output: bool,
) -> None:
    try:
        config = _load_config()
        with ArchiveService.from_config(config) as service:
            service.load(background=False)
            current = service.get(object_id)
            images = change(list(current.images), index)
            result = service.save(current.model_copy(update={"images": images}), is_new=False)
            remote_configured = service.remote.configured
    except IndexError as exc:
        _handle_cli_error(str(exc), code="invalid_index", json_output=json_output)
        return
    except (CatalogError, StorageError, ConfigError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    _report_save(
        result.object,
        result.warnings,
        json_output=json_output,
        verb="Updated",
        remote_configured=remote_configured,
    )


@cli.command("remove-image")
@click.argument("object_id")
@click.argument("index", type=int)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the saved object.")
def remove_image_command(object_id: str, index: int, json_output: bool) -> None:
    """Remove image INDEX, as numbered by `show`, from OBJECT_ID.

    The first remaining image becomes primary when the primary one is removed.
    """

    _change_images(object_id, index, remove_image, json_output=json_output)


@cli.command("set-primary")
@click.argument("object_id")
@click.argument("index", type=int)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the saved object.")
def set_primary_command(object_id: str, index: int, json_output: bool) -> None:
    """Make image INDEX, as numbered by `show`, the primary image of OBJECT_ID."""

    _change_images(object_id, index, set_primary, json_output=json_output)


@cli.command()
@click.argument("object_id")
@click.option("--yes", "assume_yes", is_flag=True, help="Delete without asking for confirmation.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the outcome.")
def delete(object_id: str, assume_yes: bool, json_output: bool) -> None:
    """Delete OBJECT_ID after confirmation.

    The object is removed locally even when the remote store does not confirm
    the removal.

    Args:
        object_id: Identifier of the object to delete.
        assume_yes: Skip the confirmation prompt.
        json_output: If True, emit JSON describing the outcome.
    """

    def _confirm(target: str) -> bool:
        if assume_yes:
            return True
        return click.confirm(f"Delete object {target}?", default=False)

    try:
        config = _load_config()
        with ArchiveService.from_config(config) as service:
            service.load(background=False)
            result = service.delete(object_id, _confirm)
            remote_configured = service.remote.configured
    except (StorageError, ConfigError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "id": result.object_id,
                "confirmed": result.confirmed,
                "removed": result.removed,
                "remoteDeleted": result.remote_deleted,
            }
        )
        return

    if not result.confirmed:
        console.print("[yellow]Delete cancelled; no changes applied.[/yellow]")
        return
    if remote_configured and not result.remote_deleted:
        console.print(
            "[yellow]The remote store did not confirm the delete; "
            "the object was removed locally.[/yellow]"
        )
    if result.removed:
        console.print(f"[green]Deleted {object_id}.[/green]")
    else:
        console.print(f"[yellow]No local object with id {object_id}.[/yellow]")


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the refresh.")
def sync(json_output: bool) -> None:
    """Fetch every object from the remote store and overwrite the local cache.

    Args:
        json_output: If True, emit JSON describing the refresh.
    """

    try:
        config = _load_config()
        with ArchiveService.from_config(config) as service:
            objects = service.refresh()
            remote_configured = service.remote.configured
    except (StorageError, ConfigError) as exc:
        _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)
        return

    pending = sum(len(obj.local_images) for obj in objects)
    if json_output:
        console.print_json(
            data={"objects": len(objects), "pendingImages": pending, "remote": remote_configured}
        )
        return

    if not remote_configured:
        console.print("[yellow]No remote endpoint configured; cached sample objects.[/yellow]")
    console.print(
        f"[green]Synced {len(objects)} objects ({pending} images pending upload).[/green]"
    )


@cli.group()
def config() -> None:
    """Manage Archivist configuration files and overrides.

    Returns:
        None: This function is invoked for its side effects.
    """


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = _config_lines(manager)
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'remote.endpoint_url'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=ArchivistConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = _config_lines(manager)

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )

    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=ArchivistConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def _config_lines(manager: ConfigManager) -> list[str]:
    # Header comments carry a timestamp that changes on every save.
    return [line for line in manager.read_text().splitlines() if not line.startswith("#")]


def _error_code(exc: Exception) -> str:
    if isinstance(exc, ObjectNotFoundError):
        return "not_found"
    if isinstance(exc, CatalogError):
        return "invalid_object"
    if isinstance(exc, ImageDecodeError):
        return "image_error"
    if isinstance(exc, StorageError):
        return "storage_error"
    if isinstance(exc, ConfigError):
        return "config_error"
    return "internal_error"


def _report_save(
    obj: ArchiveObject,
    warnings: list[str],
    *,
    json_output: bool,
    verb: str,
    remote_configured: bool,
) -> None:
    if not remote_configured:
        warnings = [*warnings, _UNSAVED_WARNING]
    if json_output:
        console.print_json(data={"object": obj.to_payload(), "warnings": warnings})
        return
    _emit_warnings(warnings, quiet=False, summary_only=False)
    pending = len(obj.local_images)
    suffix = f"; {pending} image(s) pending upload" if pending else ""
    console.print(f"[green]{verb} {obj.id} ({obj.title}){suffix}.[/green]", highlight=False)


def main() -> None:
    """Invoke the Click CLI as the console script entry point.

    Returns:
        None: This function is invoked for its side effects.
    """
    cli()


if __name__ == "__main__":
    main()
