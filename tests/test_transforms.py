"""Tests for the bundled HTML transforms."""

import asyncio

from pullcrawl.crawler.parser import extract_links
from pullcrawl.crawler.transforms import compose, identity, resolve_links, select_html

PAGE = '''
<html>
    <body>
        <main><a href="/inside">in</a></main>
        <aside><a href="/outside">out</a></aside>
    </body>
</html>
'''


def test_identity():
    assert identity('<p>x</p>', 'http://a.com', None) == '<p>x</p>'


def test_select_html_keeps_first_match():
    html = select_html('main')(PAGE, 'http://a.com', None)
    assert extract_links(html) == ['/inside']


def test_select_html_without_match_keeps_body():
    assert select_html('article')(PAGE, 'http://a.com', None) == PAGE


def test_resolve_links_against_page_url():
    html = '<a href="/a">a</a><a href="b#frag">b</a><a href="#top">top</a><a href="https://x.com/">x</a>'
    resolved = resolve_links(html, 'http://site.com/dir/page.html')
    assert extract_links(resolved) == [
        'http://site.com/a',
        'http://site.com/dir/b',
        'https://x.com/',
    ]


def test_resolve_links_honours_base_element():
    html = '<html><head><base href="http://cdn.com/root/"></head><body><a href="x">x</a></body></html>'
    resolved = resolve_links(html, 'http://site.com/')
    assert extract_links(resolved) == ['http://cdn.com/root/x']


async def test_compose_mixes_sync_and_async():
    async def shout(body, url, response):
        await asyncio.sleep(0)
        return body.replace('/inside', '/INSIDE')

    transform = compose(select_html('main'), None, shout, resolve_links)
    html = await transform(PAGE, 'http://a.com/', None)

    assert extract_links(html) == ['http://a.com/INSIDE']


async def test_compose_stops_on_empty_result():
    calls = []

    def empty(body, url, response):
        return ''

    def record(body, url, response):
        calls.append(body)
        return body

    assert await compose(empty, record)(PAGE, 'http://a.com/', None) == ''
    assert calls == []
