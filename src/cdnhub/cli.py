"""CLI for the cdnhub content store."""

import asyncio
import json
import logging
from pathlib import Path

import click
import httpx
from dotenv import load_dotenv

from .box import Box
from .config import BRANCH_ENV, REPO_ENV
from .errors import CdnHubError
from .models import FileEntry

logger = logging.getLogger(__name__)


def setup_logging(verbose: int) -> None:
    """Setup logging."""
    level = logging.DEBUG if verbose >= 2 else logging.INFO if verbose == 1 else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def run(coro):
    """Run a store coroutine, turning failures into CLI errors."""
    try:
        return asyncio.run(coro)
    except CdnHubError as e:
        raise click.ClickException(str(e)) from e
    except httpx.HTTPStatusError as e:
        logger.debug("Remote response: %s", e.response.text)
        raise click.ClickException(f"GitHub API error {e.response.status_code}: {e}") from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"Request failed: {e}") from e


def format_tree(entries: list[FileEntry], depth: int = 0) -> list[str]:
    """Render tree entries as indented lines."""
    lines = []
    for entry in entries:
        indent = "  " * depth
        if entry.is_dir:
            lines.append(f"{indent}{entry.name}/")
            lines.extend(format_tree(entry.content or [], depth + 1))
        else:
            lines.append(f"{indent}{entry.name} ({entry.size} bytes)")
    return lines


def dump_entries(entries: list[FileEntry]) -> str:
    return json.dumps([e.model_dump(exclude_none=True) for e in entries], ensure_ascii=False, indent=2)


# ============ CLI Group ============

@click.group()
@click.option("--repo", envvar=REPO_ENV, help=f"Repository as owner/repo [env: {REPO_ENV}]")
@click.option("--branch", "-b", envvar=BRANCH_ENV, default="main", show_default=True, help="Target branch")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--use-gh-cli", is_flag=True, help="Use gh cli credentials")
@click.option("--retries", "-r", type=int, default=1, show_default=True, help="Attempts on connection errors")
@click.option("-v", "--verbose", count=True, help="Verbosity (-v, -vv)")
@click.pass_context
def cli(
    ctx: click.Context,
    repo: str | None,
    branch: str,
    token: str | None,
    use_gh_cli: bool,
    retries: int,
    verbose: int,
) -> None:
    """Use a GitHub repository as a simple file store."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = {
        "repo": repo,
        "branch": branch,
        "token": token,
        "use_gh_cli": use_gh_cli,
        "max_retries": retries,
    }


def get_box(ctx: click.Context) -> Box:
    """Build the store from the group options on first use."""
    obj = ctx.find_root().obj
    if "box" not in obj:
        settings = obj["settings"]
        if not settings["repo"]:
            raise click.UsageError(f"Missing option '--repo' (or set {REPO_ENV}).", ctx=ctx)
        try:
            obj["box"] = Box(
                settings["repo"],
                branch=settings["branch"],
                token=settings["token"],
                use_gh_cli=settings["use_gh_cli"],
                max_retries=settings["max_retries"],
            )
        except CdnHubError as e:
            raise click.BadParameter(str(e), ctx=ctx, param_hint="--repo") from e
    return obj["box"]


# ============ Commands ============

@cli.command()
@click.argument("path")
@click.argument("source", type=click.File("rb"), default="-")
@click.option("-m", "--message", help="Commit message")
@click.pass_context
def put(ctx, path, source, message):
    """Upload SOURCE (default: stdin) to PATH."""
    box = get_box(ctx)
    data = source.read()
    run(box.put(path, data, message))
    click.echo(f"Stored {path} ({len(data)} bytes)")


@cli.command()
@click.argument("path")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write to file")
@click.pass_context
def get(ctx, path, output):
    """Print or save the file at PATH."""
    box = get_box(ctx)
    data = run(box.get(path))
    if output:
        output.write_bytes(data)
        click.echo(f"Saved {path} to {output}")
    else:
        stdout = click.get_binary_stream("stdout")
        stdout.write(data)
        stdout.flush()


@cli.command()
@click.argument("path")
@click.option("-m", "--message", help="Commit message")
@click.pass_context
def drop(ctx, path, message):
    """Delete the file at PATH."""
    box = get_box(ctx)
    run(box.drop(path, message))
    click.echo(f"Deleted {path}")


@cli.command(name="ls")
@click.argument("path", default="")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def ls(ctx, path, as_json):
    """List a directory (default: repository root)."""
    box = get_box(ctx)
    entries = run(box.contents(path))
    if as_json:
        click.echo(dump_entries(entries))
        return
    for entry in entries:
        if entry.is_dir:
            click.echo(f"dir   {'-':>10}  {entry.path}/")
        else:
            click.echo(f"file  {entry.size:>10}  {entry.path}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def tree(ctx, as_json):
    """Show the full repository tree."""
    box = get_box(ctx)
    entries = run(box.tree())
    if as_json:
        click.echo(dump_entries(entries))
        return
    for line in format_tree(entries):
        click.echo(line)


def main() -> None:
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
