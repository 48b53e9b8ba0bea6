from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .errors import TVDBError
from .models import Episode, Image, SearchResult, SeriesInfo, SortOrder
from .provider import TheTVDBProvider
from .version import __version__

LOGGER = logging.getLogger(__name__)

DIM_COLOR = "dim"
SPECIAL_COLOR = "yellow"

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_API_ERROR = 2


def _text(value: object) -> str:
    if value is None:
        return f"[{DIM_COLOR}]-[/{DIM_COLOR}]"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or f"[{DIM_COLOR}]-[/{DIM_COLOR}]"
    return str(value)


def render_search_results(console: Console, results: Sequence[SearchResult], title: str) -> None:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Aliases", style=DIM_COLOR)
    for result in results:
        table.add_row(str(result.id), _text(result.name), _text(result.alias_names))
    console.print(table)


def render_series_info(console: Console, info: SeriesInfo) -> None:
    table = Table(title=f"{info.name} [{info.id}]", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Aliases", _text(info.alias_names))
    table.add_row("Network", _text(info.network))
    table.add_row("Status", _text(info.status))
    table.add_row("Certification", _text(info.certification))
    table.add_row("Rating", _text(info.rating))
    table.add_row("Votes", _text(info.rating_count))
    table.add_row("Runtime", _text(info.runtime))
    table.add_row("Genres", _text(info.genres))
    table.add_row("First aired", _text(info.start_date))
    table.add_row("Order", _text(info.order.name if info.order else None))
    console.print(table)


def render_episodes(console: Console, episodes: Sequence[Episode], title: str) -> None:
    table = Table(title=title)
    table.add_column("Season", justify="right")
    table.add_column("Episode", justify="right")
    table.add_column("Absolute", justify="right", style=DIM_COLOR)
    table.add_column("Title")
    table.add_column("Aired")
    for episode in episodes:
        if episode.is_special:
            season = f"[{SPECIAL_COLOR}]S[/{SPECIAL_COLOR}]"
            number = f"[{SPECIAL_COLOR}]{episode.special}[/{SPECIAL_COLOR}]"
        else:
            season = _text(episode.season)
            number = _text(episode.episode)
        table.add_row(season, number, _text(episode.absolute), _text(episode.title), _text(episode.airdate))
    console.print(table)


def render_images(console: Console, images: Sequence[Image], title: str) -> None:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Sub key")
    table.add_column("Resolution")
    table.add_column("Rating", justify="right")
    table.add_column("File")
    for image in images:
        rating = f"{image.rating:.2f}" if image.rating is not None else None
        table.add_row(
            _text(image.id),
            _text(image.sub_key),
            _text(image.resolution),
            _text(rating),
            _text(image.file_name),
        )
    console.print(table)


def _cmd_search(provider: TheTVDBProvider, args: argparse.Namespace, console: Console) -> int:
    results = provider.fetch_search_result(args.query, args.language)
    render_search_results(console, results, f"Search results for {args.query!r}")
    return EXIT_OK


def _cmd_lookup(provider: TheTVDBProvider, args: argparse.Namespace, console: Console) -> int:
    result = provider.lookup_by_id(args.series_id, args.language)
    render_series_info(console, provider.get_series_info(result, args.language))
    console.print(provider.get_episode_list_link(result), style=DIM_COLOR)
    return EXIT_OK


def _cmd_imdb(provider: TheTVDBProvider, args: argparse.Namespace, console: Console) -> int:
    result = provider.lookup_by_imdb_id(args.imdb_id, args.language)
    if result is None:
        console.print(f"No series found for IMDb ID {args.imdb_id}", style=SPECIAL_COLOR)
        return EXIT_OK
    render_search_results(console, [result], f"IMDb ID {args.imdb_id}")
    return EXIT_OK


def _cmd_episodes(provider: TheTVDBProvider, args: argparse.Namespace, console: Console) -> int:
    info, episodes = provider.get_series_data(args.series_id, args.order, args.language)
    render_episodes(console, episodes, f"{info.name} ({args.order.name.lower()} order)")
    return EXIT_OK


def _cmd_images(provider: TheTVDBProvider, args: argparse.Namespace, console: Console) -> int:
    images = provider.get_images(args.series_id, args.key_type)
    render_images(console, images, f"{args.key_type} images for series {args.series_id}")
    return EXIT_OK


def _cmd_languages(provider: TheTVDBProvider, args: argparse.Namespace, console: Console) -> int:
    console.print(" ".join(provider.languages()))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tvdbkit", description="Query TheTVDB for series, episodes and artwork.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML config file")
    parser.add_argument("--language", default=None, help="Response language, e.g. 'en' or 'de'")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search series by name")
    search.add_argument("query")
    search.set_defaults(handler=_cmd_search)

    lookup = subparsers.add_parser("lookup", help="Show series details by TheTVDB id")
    lookup.add_argument("series_id", type=int)
    lookup.set_defaults(handler=_cmd_lookup)

    imdb = subparsers.add_parser("imdb", help="Find a series by IMDb id (e.g. tt0944947)")
    imdb.add_argument("imdb_id")
    imdb.set_defaults(handler=_cmd_imdb)

    episodes = subparsers.add_parser("episodes", help="List all episodes of a series")
    episodes.add_argument("series_id", type=int)
    episodes.add_argument(
        "--order",
        type=SortOrder.parse,
        default=SortOrder.AIRED,
        help="Episode numbering: aired (default), dvd or absolute",
    )
    episodes.set_defaults(handler=_cmd_episodes)

    images = subparsers.add_parser("images", help="List artwork of a series")
    images.add_argument("series_id", type=int)
    images.add_argument("key_type", help="Artwork type, e.g. poster, fanart, series, season")
    images.set_defaults(handler=_cmd_images)

    languages = subparsers.add_parser("languages", help="List supported languages")
    languages.set_defaults(handler=_cmd_languages)

    return parser


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s\n%(message)s\n",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Keep request lines out of the output unless debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    provider_factory: Callable[[Settings], TheTVDBProvider] = TheTVDBProvider.from_settings,
) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    console = console or Console()

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed to load settings: %s", exc)
        return EXIT_CONFIG_ERROR

    if args.language is None:
        args.language = settings.language

    try:
        with provider_factory(settings) as provider:
            return args.handler(provider, args, console)
    except TVDBError as exc:
        LOGGER.error("TheTVDB request failed: %s", exc)
        return EXIT_API_ERROR


if __name__ == "__main__":
    sys.exit(main())
