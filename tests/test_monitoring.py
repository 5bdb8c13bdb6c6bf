"""Tests for crawl statistics and metrics."""

from pullcrawl.crawler.errors import TransportError
from pullcrawl.crawler.results import CrawlResult, ErrorResult
from pullcrawl.utils.monitoring import MetricsCollector, result_kind


def make_results():
    ok = CrawlResult('http://a.com', 200, 'OK', 'héllo', {}, hrefs=('x', 'y'))
    missing = CrawlResult('http://b.com', 404, 'Not Found', 'nope', {})
    refused = ErrorResult.from_error('http://c.com', TransportError('http://c.com', 'refused', code='ECONNREFUSED'))
    return ok, missing, refused


def test_result_kind():
    ok, missing, refused = make_results()
    assert result_kind(ok) == 'ok'
    assert result_kind(missing) == 'http_error'
    assert result_kind(refused) == 'transport_error'


def test_collector_counts_results():
    metrics = MetricsCollector()
    for result in make_results():
        metrics.record_result(result)

    stats = metrics.stats.to_dict()
    assert stats['urls_crawled'] == 3
    assert stats['http_errors'] == 1
    assert stats['transport_errors'] == 1
    assert stats['hrefs_discovered'] == 2
    assert stats['total_bytes_downloaded'] == len('héllo'.encode('utf-8')) + 4

    assert metrics.get_metric('pullcrawl_results_total', {'kind': 'ok'}) == 1
    assert metrics.get_metric('pullcrawl_results_total', {'kind': 'transport_error'}) == 1
    assert metrics.get_metric('pullcrawl_hrefs_discovered_total') == 2


def test_collectors_do_not_share_registries():
    first, second = MetricsCollector(), MetricsCollector()
    first.record_result(make_results()[0])
    assert second.get_metric('pullcrawl_results_total', {'kind': 'ok'}) is None
