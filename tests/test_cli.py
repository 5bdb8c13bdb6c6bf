"""Tests for the command-line interface."""

import io
import json

import pytest
import yaml

from pullcrawl import cli
from pullcrawl.crawler import MissingQueueCapabilityError, crawl
from pullcrawl.utils.config import load_config
from tests.conftest import FakeFetcher, html_page


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, 'setup_logging', lambda *args, **kwargs: None)


@pytest.fixture
def site(monkeypatch):
    fetcher = FakeFetcher({
        'http://a.com/': html_page(body='<a href="/b">b</a><a href="http://down.com/">down</a>'),
        'http://a.com/b': html_page(body='<main><a href="/c">c</a></main><a href="/d">d</a>'),
        'http://a.com/c': html_page(body='plain', content_type='text/plain'),
        'http://a.com/d': html_page(body='plain', content_type='text/plain'),
    })

    def fake_crawl(urls, options=None, **kwargs):
        return crawl(urls, options, fetcher=fetcher, **kwargs)

    monkeypatch.setattr(cli, 'crawl', fake_crawl)
    return fetcher


def make_config(*argv):
    args = cli.build_parser().parse_args(list(argv))
    return cli.apply_arguments(load_config(None, require_seeds=False), args)


def test_arguments_override_config():
    config = make_config('http://a.com/', '--max-pages', '3', '--order', 'fifo',
                         '--select', 'main', '--no-resolve-links', '--verbose')

    assert config.crawler.seed_urls == ['http://a.com/']
    assert config.crawler.max_pages == 3
    assert config.crawler.frontier_order == 'fifo'
    assert config.crawler.select == 'main'
    assert config.crawler.resolve_links is False
    assert config.logging.level == 'DEBUG'


def test_resolve_links_flag(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({'crawler': {'resolve_links': False}}))
    parser = cli.build_parser()

    assert make_config().crawler.resolve_links is True
    assert cli.apply_arguments(load_config(str(path), require_seeds=False),
                               parser.parse_args([])).crawler.resolve_links is False
    assert cli.apply_arguments(load_config(str(path), require_seeds=False),
                               parser.parse_args(['--resolve-links'])).crawler.resolve_links is True


async def test_run_writes_json_lines(site):
    output = io.StringIO()
    app = cli.CrawlerApp(make_config('http://a.com/', '--order', 'fifo'))

    assert await app.run(output) == 0

    lines = [json.loads(line) for line in output.getvalue().splitlines()]
    assert [line['url'] for line in lines] == [
        'http://a.com/', 'http://a.com/b', 'http://down.com/', 'http://a.com/c', 'http://a.com/d'
    ]
    assert lines[2]['code'] == 'ECONNREFUSED'
    assert app.metrics.stats.transport_errors == 1


async def test_run_honours_select_and_max_pages(site):
    output = io.StringIO()
    app = cli.CrawlerApp(make_config('http://a.com/b', '--select', 'main', '--max-pages', '1'))

    assert await app.run(output) == 0

    [line] = [json.loads(line) for line in output.getvalue().splitlines()]
    assert line['hrefs'] == ['http://a.com/c']
    assert site.requested == ['http://a.com/b']


async def test_run_reports_invalid_frontier(monkeypatch):
    app = cli.CrawlerApp(make_config('http://a.com/'))
    monkeypatch.setattr(cli, 'crawl', lambda *args, **kwargs: crawl([{'bad': True}], fetcher=FakeFetcher()))

    assert await app.run(io.StringIO()) == 1


async def test_run_reports_crawl_construction_error(monkeypatch):
    app = cli.CrawlerApp(make_config('http://a.com/'))
    summaries = []
    monkeypatch.setattr(app.metrics, 'log_summary', lambda: summaries.append(True))

    def failing_crawl(*args, **kwargs):
        raise MissingQueueCapabilityError()

    monkeypatch.setattr(cli, 'crawl', failing_crawl)

    assert await app.run(io.StringIO()) == 1
    assert summaries == [True]


def test_main_requires_seed_urls(capsys):
    assert cli.main([]) == 1
    assert 'seed URL' in capsys.readouterr().err


def test_main_dry_run(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({'crawler': {'seed_urls': ['http://a.com/']}}))

    assert cli.main(['--config', str(path), '--dry-run']) == 0


def test_main_writes_output_file(site, tmp_path):
    output = tmp_path / 'out' / 'results.jsonl'

    assert cli.main(['http://a.com/c', '--output', str(output)]) == 0

    [line] = output.read_text().splitlines()
    assert json.loads(line)['url'] == 'http://a.com/c'
