"""Client side of the form: validate the URL, POST it, render or alert.

The UI toolkit is kept out of here; `SubmissionFlow` talks to it through
three callbacks (`alert`, `render`, `set_busy`).
"""
from dataclasses import dataclass
from enum import Enum
from pydantic import ValidationError
from pagesentiment.schemas import SentimentAnalysis
from pagesentiment.timed_http import RequestAborted, post_data
from pagesentiment.urls import is_valid_url
from pagesentiment.obs import log

DEFAULT_TIMEOUT_MS = 10_000

INVALID_URL_MESSAGE = 'Please, enter a valid URL and try again.'
FAILURE_MESSAGE = 'Sorry, the page could not be analyzed.'
RETRY_HINT = 'Please, try again later.'


class FormState(str, Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    INVALID = 'invalid'
    SUBMITTING = 'submitting'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass(frozen=True)
class ResultView:
    snippet: str
    polarity: str
    agreement: str
    subjectivity: str
    confidence: str
    irony: str

    @classmethod
    def from_analysis(cls, analysis: SentimentAnalysis) -> 'ResultView':
        return cls(
            snippet=analysis.snippet,
            polarity=analysis.polarity,
            agreement=analysis.agreement,
            subjectivity=analysis.subjectivity,
            confidence=f'{analysis.confidence}%',
            irony=analysis.irony,
        )

    def rows(self) -> list[tuple[str, str]]:
        return [
            ('Polarity', self.polarity),
            ('Agreement', self.agreement),
            ('Subjectivity', self.subjectivity),
            ('Confidence', self.confidence),
            ('Irony', self.irony),
        ]


def failure_message(status: int | None = None, timed_out: bool = False) -> str:
    if status == 503 or timed_out:
        return f'{FAILURE_MESSAGE} {RETRY_HINT}'
    return FAILURE_MESSAGE


class SubmissionFlow:
    """One form, at most one request in flight."""

    def __init__(self, endpoint: str, alert, render, set_busy=None,
                 timeout_ms: int = DEFAULT_TIMEOUT_MS, post=None):
        self.endpoint = endpoint
        self.alert = alert
        self.render = render
        self.set_busy = set_busy or (lambda busy: None)
        self.timeout_ms = timeout_ms
        self.post = post or post_data
        self.state = FormState.IDLE

    @property
    def busy(self) -> bool:
        return self.state == FormState.SUBMITTING

    def submit(self, target_url: str) -> FormState:
        if self.busy:
            log.info('submit_ignored', reason='busy')
            return self.state

        self.state = FormState.VALIDATING
        if not is_valid_url(target_url):
            self.state = FormState.INVALID
            self.alert(INVALID_URL_MESSAGE)
            return self.state

        self.state = FormState.SUBMITTING
        self.set_busy(True)
        try:
            self.state = self._send(target_url.strip())
        finally:
            self.set_busy(False)
        return self.state

    def _send(self, target_url: str) -> FormState:
        try:
            resp, data = self.post(self.endpoint, {'url': target_url}, timeout_ms=self.timeout_ms)
        except RequestAborted as e:
            log.info('submit_failed', error=str(e))
            self.alert(failure_message(timed_out=True))
            return FormState.FAILED
        except Exception as e:
            log.info('submit_failed', error=str(e))
            self.alert(failure_message())
            return FormState.FAILED

        status = resp.status_code
        if not 200 <= status < 300 or data is None:
            log.info('submit_failed', status=status, body=data)
            self.alert(failure_message(status))
            return FormState.FAILED
        try:
            analysis = SentimentAnalysis.model_validate(data)
        except ValidationError as e:
            log.info('submit_failed', status=status, errors=e.error_count())
            self.alert(failure_message(status))
            return FormState.FAILED

        self.render(ResultView.from_analysis(analysis))
        return FormState.SUCCEEDED
