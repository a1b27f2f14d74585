import pytest, requests
from pagesentiment.client import (SubmissionFlow, FormState, ResultView, INVALID_URL_MESSAGE, FAILURE_MESSAGE,
                                  RETRY_HINT)
from pagesentiment.timed_http import RequestAborted
from tests.fakes import FakeResponse

CANNED_ANALYSIS = {
    'polarity': 'positive',
    'agreement': 'agreement',
    'subjectivity': 'objective',
    'confidence': 42,
    'irony': 'ironic',
    'snippet': 'What do you get if you multiply six by nine?',
}

class Page:
    """Records what the flow does to the UI."""
    def __init__(self):
        self.alerts = []
        self.results = []
        self.busy = []

    def flow(self, post):
        return SubmissionFlow('http://localhost:3000/analyze-sentiment', alert=self.alerts.append,
                              render=self.results.append, set_busy=self.busy.append, post=post)

def respond(status=200, body=None, exc=None, calls=None):
    def post(url, data, timeout_ms=None):
        if calls is not None:
            calls.append((url, data, timeout_ms))
        if exc is not None:
            raise exc
        return FakeResponse(status, body), body
    return post

def test_invalid_url_alerts_without_network_call():
    page, calls = Page(), []
    flow = page.flow(respond(200, CANNED_ANALYSIS, calls=calls))
    assert flow.submit('example.com') == FormState.INVALID
    assert page.alerts == [INVALID_URL_MESSAGE]
    assert calls == []
    assert page.busy == []

def test_valid_url_renders_all_fields():
    page, calls = Page(), []
    flow = page.flow(respond(200, CANNED_ANALYSIS, calls=calls))
    assert flow.submit('https://example.com/news') == FormState.SUCCEEDED
    assert page.alerts == []
    assert calls == [('http://localhost:3000/analyze-sentiment', {'url': 'https://example.com/news'}, 10_000)]
    view = page.results[0]
    assert view == ResultView(
        snippet='What do you get if you multiply six by nine?',
        polarity='positive',
        agreement='agreement',
        subjectivity='objective',
        confidence='42%',
        irony='ironic',
    )
    assert page.busy == [True, False]
    assert not flow.busy

@pytest.mark.parametrize('status,expected', [
    (503, f'{FAILURE_MESSAGE} {RETRY_HINT}'),
    (500, FAILURE_MESSAGE),
    (400, FAILURE_MESSAGE),
])
def test_error_status_alerts(status, expected):
    page = Page()
    flow = page.flow(respond(status, {'message': 'nope'}))
    assert flow.submit('https://example.com/') == FormState.FAILED
    assert page.alerts == [expected]
    assert page.results == []
    assert page.busy == [True, False]

def test_timeout_alerts_with_retry_hint():
    page = Page()
    flow = page.flow(respond(exc=RequestAborted('slow')))
    assert flow.submit('https://example.com/') == FormState.FAILED
    assert page.alerts == [f'{FAILURE_MESSAGE} {RETRY_HINT}']

def test_transport_error_alerts():
    page = Page()
    flow = page.flow(respond(exc=requests.ConnectionError('network is down')))
    assert flow.submit('https://example.com/') == FormState.FAILED
    assert page.alerts == [FAILURE_MESSAGE]
    assert page.busy == [True, False]

def test_unparseable_success_body_fails():
    page = Page()
    flow = page.flow(respond(200, None))
    assert flow.submit('https://example.com/') == FormState.FAILED
    assert page.alerts == [FAILURE_MESSAGE]

def test_submission_ignored_while_in_flight():
    page, calls = Page(), []
    def post(url, data, timeout_ms=None):
        calls.append(data)
        # A second submit from inside the request must be a no-op.
        assert flow.submit('https://example.org/') == FormState.SUBMITTING
        return FakeResponse(200, CANNED_ANALYSIS), CANNED_ANALYSIS
    flow = page.flow(post)
    assert flow.submit('https://example.com/') == FormState.SUCCEEDED
    assert calls == [{'url': 'https://example.com/'}]

def test_next_submission_starts_over_after_failure():
    page = Page()
    outcomes = iter([respond(500, None), respond(200, CANNED_ANALYSIS)])
    flow = page.flow(lambda url, data, timeout_ms=None: next(outcomes)(url, data, timeout_ms))
    assert flow.submit('https://example.com/') == FormState.FAILED
    assert flow.submit('https://example.com/') == FormState.SUCCEEDED
    assert len(page.results) == 1
