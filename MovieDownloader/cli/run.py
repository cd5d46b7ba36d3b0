# 17.10.26

import os
import sys
import logging
import argparse
from typing import List, Optional


# External library
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table
from rich.progress import Progress, BarColumn, TextColumn, TimeElapsedColumn


# Internal utilities
from MovieDownloader import __title__, __version__
from MovieDownloader.client import CatalogClient
from MovieDownloader.exceptions import MovieDownloaderError
from MovieDownloader.services._base import CatalogEntry
from MovieDownloader.utils import Logger, config_manager, os_manager, internet_manager


# Config
console = Console()
msg = Prompt()
logger = logging.getLogger(__name__)


def header() -> None:
    console.print(f"[bold white on red]  Movie Downloader  [/][bold white on blue]  {__title__} v{__version__}  [/]")
    console.rule()


def retrieve_query(search_terms: Optional[str] = None) -> str:
    query = (search_terms or "").strip()
    while not query:
        query = msg.ask("[purple]Search for").strip()
    return query


def choose_entry(entries: List[CatalogEntry]) -> CatalogEntry:
    table = Table(show_header=True, header_style="cyan")
    table.add_column("Index", style="red")
    table.add_column("Name", style="magenta")
    table.add_column("Type", style="yellow")
    table.add_column("Match", style="green")

    for index, entry in enumerate(entries):
        table.add_row(str(index), entry.friendly_name, str(entry.type), str(entry.match or "-"))

    console.print(table)
    choices = [str(i) for i in range(len(entries))]
    return entries[int(msg.ask("[cyan]Choose one of below", choices=choices, default="0"))]


def choose_episode(entry: CatalogEntry):
    """Ask for season and episode by their declared numbers. Returns (season_number, episode_number)."""
    season_numbers = [str(season.number) for season in entry.seasons]
    season_number = int(msg.ask("[cyan]Select a season", choices=season_numbers, default=season_numbers[0]))

    season = entry.seasons.get_season_by_number(season_number)
    episode_numbers = [str(episode.number) for episode in season.episodes]
    episode_number = int(msg.ask("[cyan]Select an episode", choices=episode_numbers, default=episode_numbers[0]))

    return season_number, episode_number


def retrieve_outputdir(output_dir: Optional[str] = None) -> str:
    while not output_dir or not os_manager.check_access(output_dir):
        if output_dir:
            console.print(f"[red]Directory not accessible: {output_dir}")
        output_dir = msg.ask("[purple]Provide the output directory", default=os.getcwd())
    return output_dir


def run(client: CatalogClient, search_terms: Optional[str] = None, output_dir: Optional[str] = None) -> int:
    query = retrieve_query(search_terms)

    with console.status("Searching..."):
        entries = client.search(query)

    if not entries:
        console.print("[red]No results")
        return 1

    console.print(f"[green]{len(entries)} found")
    entry = choose_entry(entries)

    season_number, episode_number = None, None
    if entry.is_series:
        season_number, episode_number = choose_episode(entry)

    target = client.resolve(entry, season_number, episode_number)

    with console.status("Retrieving watch playlist"):
        manifest = client.get_playlist(target, language=entry.provider_language)

    output_dir = retrieve_outputdir(output_dir)
    name = entry.name if not entry.is_series else f"{entry.name} S{season_number:02d}E{episode_number:02d}"
    extension = config_manager.get("DOWNLOAD", "extension", "mp4")
    output = os_manager.get_sanitize_path(os.path.join(output_dir, f"{name}.{extension}"))

    with Progress(
        TextColumn("[yellow]Downloading"),
        BarColumn(),
        TextColumn("[green]{task.completed}/{task.total}"),
        TextColumn("[cyan]{task.fields[speed]}"),
        TimeElapsedColumn(),
        console=console
    ) as progress:
        task = progress.add_task("download", total=len(manifest.segments), speed="-- B/s")

        def on_progress(tracker):
            progress.update(task, completed=tracker.completed_segments, speed=internet_manager.format_transfer_speed(tracker.speed))

        result = client.download(manifest, output, on_progress=on_progress)

    result.raise_for_error()
    console.print("\n[green]Output:")
    console.print(f"  [cyan]Path: [red]{os.path.abspath(result.path)}")
    console.print(f"  [cyan]Size: [red]{internet_manager.format_file_size(result.size)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="movie-downloader", description="Search, pick and download a title from the catalog.")
    parser.add_argument("-s", "--search", default=None, help="Search terms, asked interactively when missing")
    parser.add_argument("-o", "--output", default=None, help="Output directory, asked interactively when missing")
    args = parser.parse_args(argv)

    Logger()
    header()

    try:
        with CatalogClient() as client:
            return run(client, args.search, args.output)

    except MovieDownloaderError as e:
        logger.debug("Pipeline error", exc_info=True)
        console.print(f"[red]{e.kind}: {e}")
        return 1

    except KeyboardInterrupt:
        console.print("\n[red]Cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
