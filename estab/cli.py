"""estab command line interface: export search index fields as delimited text."""

import json
import logging
import sys

import click
from elasticsearch import Elasticsearch

from estab import __version__
from estab.config import RunConfig
from estab.constants import (
    DELIMITER,
    HOST,
    JSONL_PAGE_SIZE,
    MATCH_ALL_QUERY,
    NULL_VALUE,
    PORT,
    PRECISION,
    SCROLL_SIZE,
    SCROLL_TIMEOUT,
    SECONDARY_SEPARATOR,
    SEPARATOR,
)
from estab.cursor import ElasticsearchCursor, JsonLinesCursor
from estab.errors import ConfigError, EstabError
from estab.pipeline import export

logger = logging.getLogger(__name__)


def _parse_query(query: str) -> dict:
    try:
        body = json.loads(query)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {str(e)}", param_hint="--query")
    if not isinstance(body, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--query")
    return body.get("query", body)


def _open_elasticsearch(host: str, port: str) -> Elasticsearch:
    url = f"{host}:{port}" if port else host
    logger.debug(f"Connecting to {url}")
    return Elasticsearch(url)


@click.command(name="estab")
@click.option("--host", default=HOST, show_default=True, help="Elasticsearch host")
@click.option("--port", default=PORT, show_default=True, help="Elasticsearch port")
@click.option("--indices", default="", help="Comma separated indices to search (default: all)")
@click.option("-f", "--fields", "fields_string", required=True, help="Field or fields, space separated")
@click.option("--size", default=SCROLL_SIZE, show_default=True, type=click.IntRange(min=1), help="Scroll batch size")
@click.option("--scroll", default=SCROLL_TIMEOUT, show_default=True, help="Scroll context keep-alive")
@click.option("--null", "null_value", default=NULL_VALUE, show_default=True, help="Value for empty fields")
@click.option("--separator", default=SEPARATOR, show_default=True, help="Separator for multiple field values")
@click.option(
    "--secondary-separator",
    default=SECONDARY_SEPARATOR,
    show_default=True,
    help="Separator for the outer level of lists of lists",
)
@click.option("--delimiter", default=DELIMITER, help="Column delimiter (default: tab)")
@click.option("--query", default=MATCH_ALL_QUERY, show_default=True, help="Query to run, as a JSON search body")
@click.option("--raw", is_flag=True, help="Stream out the raw JSON records")
@click.option("--header", is_flag=True, help="Output header row with field names")
@click.option("-1", "--single-value", is_flag=True, help="One value per line (single field only)")
@click.option("--zero-as-null", is_flag=True, help="Treat zero length strings as null values")
@click.option("--skip-empty", is_flag=True, help="Do not write documents without a value for any field")
@click.option("--precision", default=PRECISION, show_default=True, type=click.IntRange(min=0), help="Precision for numeric output")
@click.option("--out", "output", type=click.File("w", encoding="utf-8"), default="-", help="Output file path (default: stdout)")
@click.option(
    "--input",
    "input_file",
    type=click.File("r", encoding="utf-8"),
    help="Read documents from a JSON Lines file instead of Elasticsearch",
)
@click.option("--verbose", is_flag=True, help="Log progress to stderr")
@click.version_option(__version__, "--version", prog_name="estab")
def main(
    host,
    port,
    indices,
    fields_string,
    size,
    scroll,
    null_value,
    separator,
    secondary_separator,
    delimiter,
    query,
    raw,
    header,
    single_value,
    zero_as_null,
    skip_empty,
    precision,
    output,
    input_file,
    verbose,
):
    """
    Export Elasticsearch fields as tab separated values.

    Fields are dotted paths into each document, e.g. "user.address.city".
    Multiple values of a field are joined with --separator; lists of lists
    use --secondary-separator for the outer level.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = RunConfig.from_field_string(
            fields_string,
            null_value=null_value,
            separator=separator,
            secondary_separator=secondary_separator,
            delimiter=delimiter,
            precision=precision,
            zero_as_null=zero_as_null,
            skip_empty=skip_empty,
            header=header,
            raw=raw,
            single_value=single_value,
        )
    except ConfigError as e:
        raise click.UsageError(str(e))

    if input_file is not None:
        cursor = JsonLinesCursor(input_file, page_size=min(size, JSONL_PAGE_SIZE))
    else:
        query_clause = _parse_query(query)
        cursor = ElasticsearchCursor(
            _open_elasticsearch(host, port),
            index=indices,
            query=query_clause,
            fields=config.fields,
            size=size,
            scroll=scroll,
        )

    try:
        stats = export(cursor, config, output)
    except EstabError as e:
        raise click.ClickException(str(e))
    finally:
        close = getattr(cursor, "close", None)
        if close is not None:
            close()

    logger.info(f"Done: {stats.rows} rows written, {stats.skipped} skipped")


if __name__ == "__main__":
    main()
