"""Click CLI interface definitions.

Defines the command-line interface and routes commands to the runner.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from NdlSearch.cli.runner import CommandRunner
from NdlSearch.config import load_config_with_defaults
from NdlSearch.config.app import DEFAULT_CONFIG_PATH
from NdlSearch.core.params import DateRange, ExcludeParams, SimpleSearchParams
from NdlSearch.services import default_search_options
from NdlSearch.services.refine import ItemFilter, SortSpec


@click.group(help="ndl-search: query the National Diet Library search APIs.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file (merged over the defaults).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env before reading the config.
    """
    load_dotenv()
    try:
        cfg = load_config_with_defaults(config_path)
    except (OSError, TypeError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint="--config") from e
    ctx.obj = CommandRunner(cfg)


def _paging_options(func):
    func = click.option("--max-records", type=int, default=None, help="Page size (1-500).")(func)
    func = click.option("--start", "start_record", type=int, default=None, help="1-based start record.")(func)
    func = click.option("--schema", "record_schema", default=None, help="Record schema (e.g. dcndl).")(func)
    func = click.option("--server-sort", default=None, help="SRU sortBy passed to the service.")(func)
    func = click.option("--lang", type=click.Choice(["ja", "en"]), default=None)(func)
    func = click.option(
        "--sort",
        "sort_field",
        type=click.Choice(["title", "creator", "date"]),
        default=None,
        help="Client-side sort of the fetched page.",
    )(func)
    func = click.option("--order", type=click.Choice(["asc", "desc"]), default="asc", show_default=True)(func)
    func = click.option("--only-language", multiple=True, help="Keep items in these languages.")(func)
    func = click.option("--only-creator", default=None, help="Keep items whose creator contains this text.")(func)
    func = click.option("--only-from", default=None, help="Keep items published in or after this year.")(func)
    func = click.option("--only-to", default=None, help="Keep items published in or before this year.")(func)
    func = click.option("--raw-xml", is_flag=True, default=False, help="Keep the response XML in JSON output.")(func)
    return func


def _build_options(runner: CommandRunner, kwargs: dict):
    item_filter = None
    if kwargs["only_language"] or kwargs["only_creator"] or kwargs["only_from"] or kwargs["only_to"]:
        item_filter = ItemFilter(
            language=tuple(kwargs["only_language"]) or None,
            date_from=kwargs["only_from"],
            date_to=kwargs["only_to"],
            creator=kwargs["only_creator"],
        )
    sort = SortSpec(field=kwargs["sort_field"], order=kwargs["order"]) if kwargs["sort_field"] else None
    return default_search_options(
        runner.config,
        maximum_records=kwargs["max_records"],
        start_record=kwargs["start_record"],
        record_schema=kwargs["record_schema"],
        server_sort=kwargs["server_sort"],
        lang=kwargs["lang"],
        sort=sort,
        filter=item_filter,
        include_raw_xml=kwargs["raw_xml"] or None,
    )


@cli.command("search")
@click.option("--title", default=None)
@click.option("--creator", default=None)
@click.option("--subject", default=None)
@click.option("--publisher", default=None)
@click.option("--isbn", default=None)
@click.option("--issn", default=None)
@click.option("--language", multiple=True, help="Language code (repeatable, OR-combined).")
@click.option("--date-from", default=None, help="YYYY or YYYY-MM-DD.")
@click.option("--date-to", default=None, help="YYYY or YYYY-MM-DD.")
@click.option("--type", "material_type", default=None, help="Material type (e.g. Book).")
@click.option("--anywhere", default=None, help="Free text across all indexes.")
@click.option("--description", default=None)
@click.option("--exclude-title", default=None)
@click.option("--exclude-creator", default=None)
@click.option("--exclude-subject", default=None)
@click.option("--exclude-language", multiple=True)
@click.option("--exclude-type", default=None)
@_paging_options
@click.pass_obj
def search_cmd(runner: CommandRunner, **kwargs) -> None:
    """Search the SRU API with named parameters."""
    exclude = ExcludeParams(
        title=kwargs["exclude_title"],
        creator=kwargs["exclude_creator"],
        subject=kwargs["exclude_subject"],
        language=tuple(kwargs["exclude_language"]) or None,
        type=kwargs["exclude_type"],
    )
    date_range = None
    if kwargs["date_from"] or kwargs["date_to"]:
        date_range = DateRange(date_from=kwargs["date_from"], date_to=kwargs["date_to"])
    params = SimpleSearchParams(
        title=kwargs["title"],
        creator=kwargs["creator"],
        subject=kwargs["subject"],
        publisher=kwargs["publisher"],
        isbn=kwargs["isbn"],
        issn=kwargs["issn"],
        language=tuple(kwargs["language"]) or None,
        date_range=date_range,
        type=kwargs["material_type"],
        anywhere=kwargs["anywhere"],
        description=kwargs["description"],
        exclude=exclude,
    )
    runner.run_search("search", options=_build_options(runner, kwargs), params=params)


@cli.command("cql")
@click.argument("query")
@_paging_options
@click.pass_obj
def cql_cmd(runner: CommandRunner, query: str, **kwargs) -> None:
    """Search the SRU API with a raw CQL QUERY."""
    runner.run_search("cql", options=_build_options(runner, kwargs), cql=query)


@cli.command("explain")
@click.option("--version", "sru_version", type=click.Choice(["1.1", "1.2"]), default=None)
@click.pass_obj
def explain_cmd(runner: CommandRunner, sru_version: str | None) -> None:
    """Show the SRU service description (indexes and schemas)."""
    runner.run_explain("explain", version=sru_version)


@cli.command("opensearch")
@click.argument("q")
@click.option("--count", type=int, default=None, help="Page size (1-500).")
@click.option("--start", type=int, default=0, show_default=True, help="0-based offset.")
@click.option("--hl", type=click.Choice(["ja", "en"]), default=None)
@click.pass_obj
def opensearch_cmd(runner: CommandRunner, q: str, count: int | None, start: int, hl: str | None) -> None:
    """Search the OpenSearch feed with free text Q."""
    runner.run_opensearch("opensearch", q=q, count=count, start=start, hl=hl)


@cli.command("validate")
@click.argument("query")
@click.pass_obj
def validate_cmd(runner: CommandRunner, query: str) -> None:
    """Check a CQL QUERY locally without contacting the service."""
    runner.run_validate("validate", query=query)
