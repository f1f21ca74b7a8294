"""
link-verifier: check that links from a remote site resolve on a local copy.

    # crawl the production site once
    link-verifier --walk -r https://example.com -a https://www.example.com -i docs/old -f links.txt

    # check every link against the dev site, skipping links already broken upstream
    link-verifier -r https://example.com -l http://localhost:8080 -f links.txt --verify
"""

import argparse
import sys
from pathlib import Path

import yaml
from tqdm import tqdm

from linkcheck.config import (
    CONNECT_TIMEOUT,
    DEFAULT_CRAWLERS,
    DEFAULT_LINK_FILE,
    DEFAULT_STORAGE_DIR,
    READ_TIMEOUT,
    ConfigurationError,
    CrawlSettings,
    ProbeSettings,
    SiteConfig,
    resolve_site_config,
)
from linkcheck.linkfile import InvalidLinkFileError, MissingLinkFileError, read_link_file
from linkcheck.prober import Prober, TransportError

from .config import apply_run_config, load_run_config, provided_flag_names
from .discovery import run_discovery
from .presenter import ConsoleReporter, build_report_data, print_summary, write_report_json
from .verification import verify_links


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="link-verifier",
        description="Validates that links generated on a remote site are resolvable on the local dev site.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("-w", "--walk", action="store_true",
                        help="Walk the remote site. Once the site is walked, --link-file can be used "
                             "to avoid excessive traffic.")
    parser.add_argument("-r", "--remote", help="The remote site to crawl")
    parser.add_argument("-l", "--local", help="The local site to check")
    parser.add_argument("-a", "--alias", action="append", default=[],
                        help="An alias the site may use (e.g., https://www.example.com -> https://example.com). "
                             "Can be repeated.")
    parser.add_argument("-i", "--ignore", action="append", default=[],
                        help="Paths to ignore, relative to the remote site. Can be repeated.")
    parser.add_argument("-f", "--link-file",
                        help=f"A file containing links to check (walk output defaults to {DEFAULT_LINK_FILE})")
    parser.add_argument("-c", "--check", "--verify", dest="verify", action="store_true",
                        help="Verify a link on the remote site before verifying locally. This avoids "
                             "false positives from broken links on the remote site.")

    crawl = parser.add_argument_group("crawl")
    crawl.add_argument("--strict-suffix", action="store_true",
                       help="Only accept links ending in .html or / and reject media files")
    crawl.add_argument("--crawlers", type=int, default=DEFAULT_CRAWLERS, help="Number of crawl workers")
    crawl.add_argument("--storage-dir", default=str(DEFAULT_STORAGE_DIR), help="Crawl scratch directory")
    crawl.add_argument("--politeness-delay", type=int, default=5,
                       help="Milliseconds between requests to the same host")
    crawl.add_argument("--max-depth", type=int, default=-1, help="Max crawl depth (-1 = unlimited)")
    crawl.add_argument("--max-pages", type=int, default=-1, help="Max pages to fetch (-1 = unlimited)")
    crawl.add_argument("--ignore-robots", action="store_true", help="Do not honour robots.txt")
    crawl.add_argument("--monitor-interval", type=float, default=5.0,
                       help="Seconds between crawl status snapshots")
    crawl.add_argument("--cleanup-delay", type=float, default=5.0,
                       help="Seconds an idle frontier is given before the crawl stops")

    check = parser.add_argument_group("verification")
    check.add_argument("-j", "--jobs", type=int, default=1, help="Links verified in parallel")
    check.add_argument("--connect-timeout", type=float, default=CONNECT_TIMEOUT,
                       help="Connect timeout per request in seconds")
    check.add_argument("--read-timeout", type=float, default=READ_TIMEOUT,
                       help="Read timeout per request in seconds (0 = none)")
    check.add_argument("--count-malformed", action="store_true",
                       help="Count links that cannot be rewritten as invalid instead of skipping them")
    check.add_argument("--abort-on-error", action="store_true",
                       help="Abort the run when a request cannot be completed")
    check.add_argument("--report", help="Write a JSON report to this path")
    check.add_argument("--progress", action="store_true", help="Show a progress bar")

    parser.add_argument("--run-config", help="Path to JSON/YAML run config (CLI flags take precedence)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print every crawled page and checked link")
    return parser


def _crawl_settings(args: argparse.Namespace) -> CrawlSettings:
    return CrawlSettings(
        workers=max(1, args.crawlers),
        storage_dir=Path(args.storage_dir),
        politeness_delay=args.politeness_delay,
        cleanup_delay=args.cleanup_delay,
        monitor_interval=args.monitor_interval,
        max_depth=args.max_depth,
        max_pages=args.max_pages,
        respect_robots=not args.ignore_robots,
        verbose=args.verbose,
    )


def _probe_settings(args: argparse.Namespace) -> ProbeSettings:
    return ProbeSettings(
        connect_timeout=args.connect_timeout,
        read_timeout=args.read_timeout or None,
        pool_size=max(10, args.jobs),
    )


def check_links(args: argparse.Namespace, site: SiteConfig) -> int:
    try:
        links = read_link_file(args.link_file)
    except (MissingLinkFileError, InvalidLinkFileError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    mode = "remote first" if args.verify else "local only"
    print(f"[verify] {len(links)} links, {site.remote} -> {site.local} ({mode}, jobs={args.jobs})")

    progress = tqdm(total=len(links), desc="Links", unit="link") if args.progress else None
    try:
        with Prober(_probe_settings(args)) as prober:
            report = verify_links(
                links,
                site,
                prober,
                verify_remote=args.verify,
                workers=args.jobs,
                malformed_policy="count" if args.count_malformed else "skip",
                transport_policy="abort" if args.abort_on_error else "count",
                on_result=ConsoleReporter(progress, verbose=args.verbose),
            )
    except TransportError as exc:
        print(f"Error: request failed, aborting: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        if progress is not None:
            progress.close()

    print_summary(report)

    if args.report:
        report_path = write_report_json(build_report_data(report, site, args.link_file), args.report)
        print(f"[verify] report written to {report_path}")

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.run_config:
        try:
            cfg = load_run_config(args.run_config)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            print(f"Error: could not load run config: {exc}", file=sys.stderr)
            return EXIT_FAILURE
        args = apply_run_config(args, cfg, provided_flag_names(argv, parser))

    # A walk with --link-file but no --local only names the crawl output
    verify_requested = args.link_file is not None and bool(args.local or not args.walk)
    try:
        site = resolve_site_config(
            args.remote,
            args.local,
            aliases=args.alias,
            ignore=args.ignore,
            require_local=verify_requested,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if not args.walk and not verify_requested:
        print("Nothing to do: pass --walk to crawl and/or --link-file to verify", file=sys.stderr)
        return EXIT_OK

    if args.walk:
        run_discovery(
            site,
            args.link_file or DEFAULT_LINK_FILE,
            _crawl_settings(args),
            strict_suffix=args.strict_suffix,
        )

    if verify_requested:
        return check_links(args, site)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
