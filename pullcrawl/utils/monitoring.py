"""
Crawl statistics and Prometheus metrics.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from prometheus_client import CollectorRegistry, Counter, start_http_server

from ..crawler.results import CrawlResult


@dataclass
class CrawlStats:
    """Counters for one crawl."""
    start_time: float = field(default_factory=time.time)
    urls_crawled: int = 0
    http_errors: int = 0
    transport_errors: int = 0
    hrefs_discovered: int = 0
    total_bytes_downloaded: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    @property
    def pages_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.urls_crawled / elapsed_minutes if elapsed_minutes > 0 else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'urls_crawled': self.urls_crawled,
            'http_errors': self.http_errors,
            'transport_errors': self.transport_errors,
            'hrefs_discovered': self.hrefs_discovered,
            'total_bytes_downloaded': self.total_bytes_downloaded,
            'elapsed_time': round(self.elapsed_time, 3),
            'pages_per_minute': round(self.pages_per_minute, 1)
        }


def result_kind(result: CrawlResult) -> str:
    """Classify a result as 'ok', 'http_error' or 'transport_error'."""
    if result.is_error:
        return 'transport_error'
    if result.status_code is None or not 200 <= result.status_code < 300:
        return 'http_error'
    return 'ok'


class MetricsCollector:
    """Records consumed crawl results into CrawlStats and Prometheus counters."""

    def __init__(self, enable_prometheus: bool = False, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.stats = CrawlStats()
        self.enable_prometheus = enable_prometheus
        self.prometheus_port = prometheus_port

        self.registry = CollectorRegistry()
        self.results_total = Counter(
            'pullcrawl_results_total',
            'Crawl results emitted, by kind',
            ['kind'],
            registry=self.registry
        )
        self.hrefs_total = Counter(
            'pullcrawl_hrefs_discovered_total',
            'Links discovered and pushed to the frontier',
            registry=self.registry
        )
        self.body_bytes_total = Counter(
            'pullcrawl_body_bytes_total',
            'Bytes of response bodies received',
            registry=self.registry
        )

    def start_server(self):
        """Expose the metrics over HTTP when enabled."""
        if self.enable_prometheus:
            start_http_server(self.prometheus_port, registry=self.registry)
            self.logger.info(f"Prometheus metrics served on port {self.prometheus_port}")

    def record_result(self, result: CrawlResult):
        kind = result_kind(result)
        body_bytes = len(result.body.encode('utf-8')) if result.body else 0

        self.stats.urls_crawled += 1
        self.stats.hrefs_discovered += len(result.hrefs)
        self.stats.total_bytes_downloaded += body_bytes
        if kind == 'http_error':
            self.stats.http_errors += 1
        elif kind == 'transport_error':
            self.stats.transport_errors += 1

        self.results_total.labels(kind=kind).inc()
        self.hrefs_total.inc(len(result.hrefs))
        self.body_bytes_total.inc(body_bytes)

    def get_metric(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a sample value from the private registry."""
        return self.registry.get_sample_value(name, labels or {})

    def log_summary(self):
        """Log final crawl statistics."""
        self.logger.info("=== CRAWL COMPLETED ===")
        for name, value in self.stats.to_dict().items():
            self.logger.info(f"{name}: {value}")
