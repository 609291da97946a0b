from __future__ import annotations

import requests

from issuewindow.errors import classify_error, redact
from issuewindow.graphql import GitHubAPIError
from issuewindow.paginator import PaginationError


def test_classify_rate_limit():
    info = classify_error(RuntimeError('API Rate Limit Exceeded'))
    assert info.category == 'github.rate_limit'
    assert info.transient is True


def test_classify_github_rate_limit_from_response_body():
    exc = GitHubAPIError("failed with 403", status=403, response_text="API rate limit exceeded")
    info = classify_error(exc)
    assert info.category == 'github.rate_limit'
    assert info.details == {"status": 403}


def test_classify_github_auth():
    info = classify_error(GitHubAPIError("failed with 401", status=401, response_text="Bad credentials"))
    assert info.category == 'github.auth'
    assert info.transient is False


def test_classify_github_api():
    info = classify_error(GitHubAPIError("GraphQL query failed: [...]"))
    assert info.category == 'github.api'
    assert info.original_type == 'GitHubAPIError'


def test_classify_network():
    assert classify_error(requests.ConnectionError("boom")).category == 'network'
    info = classify_error(RuntimeError('Connection reset by peer'))
    assert info.category == 'network'
    assert info.transient is True


def test_classify_pagination():
    assert classify_error(PaginationError("did not advance")).category == 'pagination'


def test_classify_parse():
    info = classify_error(RuntimeError('YAML ScannerError near line 3'))
    assert info.category == 'parse'
    assert info.transient is False


def test_classify_generic():
    info = classify_error(ValueError('Some other problem'))
    assert info.category == 'generic'


def test_redact_tokens():
    sample = (
        "Token ghp_ABCDEFGHIJKLMNOPQRSTUVWX plus github_pat_1234567890abcdefghijkl "
        "and header Authorization: Bearer abcdef123456789"
    )
    out = redact(sample)
    assert 'ghp_' not in out
    assert 'github_pat_' not in out
    assert 'abcdef123456789' not in out
    assert 'Bearer <redacted>' in out


def test_redact_empty():
    assert redact("") == ""
