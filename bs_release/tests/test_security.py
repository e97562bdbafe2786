"""Testes de utilitários de segurança: rate limiter, sanitização e logs."""

import json
import logging
from datetime import datetime, timedelta, timezone

from bs_release.utils.html_sanitizer import sanitize_html
from bs_release.utils.logging_config import StructuredFormatter
from bs_release.utils.security import RateLimiter, get_client_ip, sanitize_input


class TestRateLimiter:

    def test_blocks_after_max_attempts(self):
        limiter = RateLimiter()
        key = 'login:10.0.0.1'
        for _ in range(3):
            assert not limiter.is_rate_limited(key, max_attempts=3, window_minutes=15)
            limiter.record_attempt(key)

        assert limiter.is_rate_limited(key, max_attempts=3, window_minutes=15)
        # Outro IP não é afetado
        assert not limiter.is_rate_limited('login:10.0.0.2', max_attempts=3, window_minutes=15)

    def test_clear_attempts_unblocks(self):
        limiter = RateLimiter()
        key = 'api:127.0.0.1'
        limiter.record_attempt(key)
        limiter.record_attempt(key)
        assert limiter.is_rate_limited(key, max_attempts=2)

        limiter.clear_attempts(key)
        assert limiter.attempts_count(key) == 0
        assert not limiter.is_rate_limited(key, max_attempts=2)

    def test_old_attempts_expire(self):
        limiter = RateLimiter()
        key = 'api:127.0.0.1'
        limiter.record_attempt(key)
        # janela de zero minutos: tudo que já passou expirou
        assert not limiter.is_rate_limited(key, max_attempts=1, window_minutes=0)
        assert limiter.attempts_count(key) == 0

    def test_idle_keys_of_same_scope_are_dropped(self):
        limiter = RateLimiter()
        for key in ('login:10.0.0.1', 'login:10.0.0.2', 'api:10.0.0.3'):
            limiter.record_attempt(key)
        limiter.blocked['login:10.0.0.4'] = datetime.now(timezone.utc) - timedelta(minutes=1)

        assert not limiter.is_rate_limited('login:10.0.0.9', max_attempts=1, window_minutes=0)
        # só a chave do outro escopo sobra
        assert limiter.tracked_keys() == 1
        assert limiter.attempts_count('api:10.0.0.3') == 1

    def test_reset(self):
        limiter = RateLimiter()
        limiter.record_attempt('a')
        limiter.reset()
        assert limiter.attempts_count('a') == 0


class TestSanitizeInput:

    def test_strips_control_characters_and_whitespace(self):
        assert sanitize_input('  Title\x00\x07 ') == 'Title'

    def test_truncates(self):
        assert sanitize_input('x' * 300) == 'x' * 255
        assert sanitize_input('abcdef', max_length=3) == 'abc'

    def test_non_string_becomes_empty(self):
        assert sanitize_input(None) == ''
        assert sanitize_input(42) == ''


class TestSanitizeHtml:

    def test_none_stays_none(self):
        assert sanitize_html(None) is None

    def test_allowed_markup_is_kept(self):
        html = '<p><strong>Bold</strong> and <em>italic</em></p><ul><li>one</li></ul>'
        assert sanitize_html(html) == html

    def test_script_is_removed_with_its_body(self):
        assert sanitize_html('<p>ok</p><script>alert("x")</script>') == '<p>ok</p>'

    def test_event_handlers_are_dropped(self):
        cleaned = sanitize_html('<img src="https://cdn.example.com/a.png" onerror="steal()">')
        assert 'onerror' not in cleaned
        assert 'src="https://cdn.example.com/a.png"' in cleaned

    def test_javascript_urls_are_dropped(self):
        cleaned = sanitize_html('<a href="javascript:alert(1)">click</a>')
        assert 'javascript' not in cleaned
        assert 'click' in cleaned

    def test_disallowed_tags_are_stripped(self):
        assert sanitize_html('<iframe src="https://x"></iframe><p>text</p>') == '<p>text</p>'

    def test_links_keep_href_and_target(self):
        html = '<a href="https://example.com" target="_blank">docs</a>'
        assert sanitize_html(html) == html


def test_structured_formatter_includes_security_fields():
    record = logging.LogRecord('bs_release.test', logging.WARNING, __file__, 10,
                               'Security Event: %s', ('login_failed',), None)
    record.security = {'event_type': 'login_failed', 'client_ip': '127.0.0.1'}

    entry = json.loads(StructuredFormatter().format(record))
    assert entry['level'] == 'WARNING'
    assert entry['message'] == 'Security Event: login_failed'
    assert entry['security']['client_ip'] == '127.0.0.1'
    assert 'audit' not in entry


def test_client_ip_ignores_forwarded_headers(app):
    with app.test_request_context(environ_base={'REMOTE_ADDR': '10.0.0.1'},
                                  headers={'X-Forwarded-For': '203.0.113.7', 'X-Real-IP': '203.0.113.8'}):
        assert get_client_ip() == '10.0.0.1'
