from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from portfolio_site.commits import process_commits
from portfolio_site.config import SiteConfig, default_config_path, load_config, write_default_config
from portfolio_site.errors import ConfigError, PortfolioError
from portfolio_site.loader import load_rows
from portfolio_site.navigation import LOCAL_BASE_PATH
from portfolio_site.site import build_site
from portfolio_site.stats import compute_stats, display_values


def _print_err(msg: str) -> None:
    print(msg, file=sys.stderr)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _config_path(args: argparse.Namespace) -> Path:
    return Path(args.config).expanduser() if args.config else default_config_path()


def _load(args: argparse.Namespace) -> SiteConfig | None:
    config_path = _config_path(args)
    if not config_path.exists():
        _print_err(f"Missing config: {config_path} (run `portfolio-site init`)")
        return None
    try:
        return load_config(config_path)
    except ConfigError as e:
        _print_err(f"Invalid config {config_path}: {e}")
        return None


def cmd_init(args: argparse.Namespace) -> int:
    config_path = _config_path(args)
    if config_path.exists() and not args.force:
        _print_err(f"Config already exists: {config_path} (use --force to overwrite)")
        return 2
    if not args.github_url.startswith("http"):
        _print_err(f"--github-url must be an http(s) URL: {args.github_url}")
        return 2
    write_default_config(config_path, github_url=args.github_url, repo_url=args.repo_url)
    print(f"Wrote config: {config_path}")
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    cfg = _load(args)
    if cfg is None:
        return 2
    result = build_site(cfg, base_path=LOCAL_BASE_PATH if args.local else None)

    print(f"output_dir={result['output_dir']}")
    for key in ("home_page", "projects_page", "meta_page", "commits_json", "summary_md"):
        if result.get(key):
            print(f"{key}={result[key]}")
    for key in ("projects", "commits", "lines"):
        if key in result:
            print(f"{key}={result[key]}")
    for err in result["errors"]:
        _print_err(f"error={err}")
    return 1 if result["errors"] else 0


def cmd_stats(args: argparse.Namespace) -> int:
    cfg = _load(args)
    if cfg is None:
        return 2
    try:
        rows = load_rows(cfg.loc_source)
    except PortfolioError as e:
        _print_err(str(e))
        return 1
    commits = process_commits(rows, repo_url=cfg.repo_url)
    for key, value in display_values(compute_stats(rows, commits)).items():
        print(f"{key}={value}")
    return 0


def cmd_explore(args: argparse.Namespace) -> int:
    cfg = _load(args)
    if cfg is None:
        return 2
    try:
        rows = load_rows(cfg.loc_source)
    except PortfolioError as e:
        _print_err(str(e))
        return 1
    commits = process_commits(rows, repo_url=cfg.repo_url)
    if not commits:
        _print_err(f"No commits in {cfg.loc_source}")
        return 1

    from portfolio_site.explorer import launch

    launch(rows, commits, layout=cfg.chart)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="portfolio-site", add_help=True)
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create a config file")
    p_init.add_argument("--github-url", required=True, help="Your GitHub profile URL")
    p_init.add_argument("--repo-url", help="Site repository URL (default: <github-url>/portfolio)")
    p_init.add_argument("--config", help="Config path (default: ./site.toml)")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing config")
    p_init.set_defaults(func=cmd_init)

    p_build = sub.add_parser("build", help="Write the site into the output directory")
    p_build.add_argument("--config", help="Config path (default: ./site.toml)")
    p_build.add_argument("--local", action="store_true", help="Link pages from / for a local preview")
    p_build.set_defaults(func=cmd_build)

    p_stats = sub.add_parser("stats", help="Print summary statistics of the commit log")
    p_stats.add_argument("--config", help="Config path (default: ./site.toml)")
    p_stats.set_defaults(func=cmd_stats)

    p_explore = sub.add_parser("explore", help="Open the interactive commit explorer")
    p_explore.add_argument("--config", help="Config path (default: ./site.toml)")
    p_explore.set_defaults(func=cmd_explore)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    rc = int(args.func(args))
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
