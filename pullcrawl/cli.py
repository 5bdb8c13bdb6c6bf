"""
Command-line entry point: crawl from seed URLs and write one JSON line per
visited page.
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from . import __version__
from .crawler import CrawlOptions, CrawlerError, crawl
from .crawler.transforms import compose, resolve_links, select_html
from .utils.config import Config, load_config
from .utils.logger import get_crawler_logger, log_system_info, setup_logging
from .utils.monitoring import MetricsCollector


class CrawlerApp:
    """Runs one crawl described by a Config."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = get_crawler_logger(__name__)
        self.metrics = MetricsCollector(
            enable_prometheus=config.monitoring.metrics_enabled,
            prometheus_port=config.monitoring.prometheus_port
        )

    def build_options(self) -> CrawlOptions:
        crawler_config = self.config.crawler
        transforms = []
        if crawler_config.select:
            transforms.append(select_html(crawler_config.select))
        if crawler_config.resolve_links:
            transforms.append(resolve_links)

        return CrawlOptions(
            transport=self.config.transport_options(),
            transform_html=compose(*transforms) if transforms else None
        )

    async def run(self, output: TextIO) -> int:
        """Pull results until the frontier is empty or `max_pages` is reached."""
        crawler_config = self.config.crawler
        max_pages = crawler_config.max_pages

        self.logger.info(f"Seed URLs: {crawler_config.seed_urls}")
        self.metrics.start_server()

        try:
            crawler = crawl(list(crawler_config.seed_urls), self.build_options(),
                            order=crawler_config.frontier_order)
            async with crawler:
                async for result in crawler:
                    self.metrics.record_result(result)
                    output.write(json.dumps(result.to_dict(), ensure_ascii=False) + '\n')
                    output.flush()

                    if result.is_error:
                        level, outcome = logging.WARNING, result.code
                    else:
                        level, outcome = logging.INFO, result.status_code
                    self.logger.log_url_event(
                        level, result.url,
                        f"{outcome} {result.url} ({len(result.hrefs)} links)",
                        status_code=result.status_code
                    )

                    if max_pages and self.metrics.stats.urls_crawled >= max_pages:
                        self.logger.info(f"Reached max pages limit: {max_pages}")
                        break
        except CrawlerError as e:
            self.logger.error(f"Crawl aborted: {e}")
            return 1
        finally:
            self.metrics.log_summary()

        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pullcrawl',
        description="Pull-based web crawler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pullcrawl https://example.com                 # Crawl until no links remain
  pullcrawl https://example.com --max-pages 50  # Stop after 50 results
  pullcrawl --config config.yaml --order fifo   # Seeds from config, breadth-first
  pullcrawl https://example.com --select main   # Only follow links inside <main>
        """
    )

    parser.add_argument('urls', nargs='*', help='Seed URLs (override seed_urls from the config)')
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--max-pages', type=int, help='Stop after this many results')
    parser.add_argument('--order', choices=['lifo', 'fifo'], help='Frontier order (default: lifo)')
    parser.add_argument('--select', help='CSS selector limiting where links are discovered')
    parser.add_argument('--resolve-links', action=argparse.BooleanOptionalAction, default=None,
                        help='Resolve hrefs against the page URL before pushing them (default: on)')
    parser.add_argument('--output', default='-', help="Output file, or '-' for stdout (default)")
    parser.add_argument('--json-logs', action='store_true', help='Emit logs as JSON')
    parser.add_argument('--verbose', action='store_true', help='Debug logging and system info')
    parser.add_argument('--dry-run', action='store_true', help='Validate configuration and exit')
    parser.add_argument('--version', action='version', version=f'pullcrawl {__version__}')
    return parser


def apply_arguments(config: Config, args: argparse.Namespace) -> Config:
    """Let command-line arguments override the configuration file."""
    if args.urls:
        config.crawler.seed_urls = list(args.urls)
    if args.max_pages is not None:
        config.crawler.max_pages = args.max_pages
    if args.order:
        config.crawler.frontier_order = args.order
    if args.select:
        config.crawler.select = args.select
    if args.resolve_links is not None:
        config.crawler.resolve_links = args.resolve_links
    if args.verbose:
        config.logging.level = 'DEBUG'
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = apply_arguments(load_config(args.config, require_seeds=False), args)
        if not config.crawler.seed_urls:
            raise ValueError("At least one seed URL must be provided")
        if config.crawler.max_pages is not None and config.crawler.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging, enable_json=args.json_logs)
    if args.verbose:
        log_system_info()

    if args.dry_run:
        logging.getLogger(__name__).info("Configuration OK, dry run requested")
        return 0

    app = CrawlerApp(config)
    try:
        if args.output == '-':
            return asyncio.run(app.run(sys.stdout))

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as output:
            return asyncio.run(app.run(output))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1
    except Exception as e:
        logging.getLogger(__name__).error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
