"""MeaningCloud Sentiment Analysis (v2.1) integration.

See https://learn.meaningcloud.com/developer/sentiment-analysis/2.1/doc and
https://www.meaningcloud.com/developer/documentation/error-codes.
"""
import time
from enum import Enum
from pydantic import ValidationError as PayloadError
from pagesentiment.config import Settings, SNIPPET_CHARS
from pagesentiment.errors import (SentimentError, ValidationError, UpstreamTimeout, UpstreamUnavailable,
                                  UpstreamTransportError, UpstreamProtocolError)
from pagesentiment.obs import log, redact_key
from pagesentiment.schemas import SentimentAnalysis, SentimentApiPayload, ApiSentence
from pagesentiment.timed_http import RequestAborted, get_data


class ScoreTag(str, Enum):
    VERY_POSITIVE = 'P+'
    POSITIVE = 'P'
    NEUTRAL = 'NEU'
    NEGATIVE = 'N'
    VERY_NEGATIVE = 'N+'
    NONE = 'NONE'

POLARITY_BY_SCORE_TAG = {
    ScoreTag.VERY_POSITIVE: 'very positive',
    ScoreTag.POSITIVE: 'positive',
    ScoreTag.NEUTRAL: 'neutral',
    ScoreTag.NEGATIVE: 'negative',
    ScoreTag.VERY_NEGATIVE: 'very negative',
    ScoreTag.NONE: 'without polarity',
}
UNKNOWN_POLARITY = 'n/a'


class ApiCode(str, Enum):
    OK = '0'
    OPERATION_DENIED = '100'
    LICENSE_EXPIRED = '101'
    CREDITS_EXCEEDED = '102'
    REQUEST_TOO_LARGE = '103'
    RATE_LIMIT_EXCEEDED = '104'
    RESOURCE_ACCESS_DENIED = '105'
    MISSING_PARAMETERS = '200'
    RESOURCE_NOT_SUPPORTED = '201'
    ENGINE_INTERNAL_ERROR = '202'
    CANNOT_CONNECT = '203'
    NO_CONTENT = '212'

TOO_LARGE_HINT = 'Hint: The page is probably too large.'
NO_CONTENT_HINT = 'Hint: Make sure that the URL is valid and that the page is public.'

# Codes not listed here (and codes unknown to ApiCode) are protocol errors.
API_CODE_ERRORS = {
    ApiCode.REQUEST_TOO_LARGE: (ValidationError, TOO_LARGE_HINT),
    ApiCode.ENGINE_INTERNAL_ERROR: (UpstreamUnavailable, None),
    ApiCode.CANNOT_CONNECT: (UpstreamUnavailable, None),
    ApiCode.NO_CONTENT: (ValidationError, NO_CONTENT_HINT),
}


def polarity_for(score_tag) -> str:
    try:
        return POLARITY_BY_SCORE_TAG[ScoreTag(score_tag)]
    except ValueError:
        return UNKNOWN_POLARITY

def build_request_params(url: str, api_key: str) -> dict:
    return {
        'key': api_key,
        'lang': 'auto',  # detect the page language
        'ilang': 'en',   # answer in English
        'url': url,
    }

def build_snippet(sentences: list[ApiSentence], stop_length: int = SNIPPET_CHARS, separator: str = ' ') -> str:
    """Joins trimmed sentences, in order, until their cumulated length reaches `stop_length`."""
    buffer, cum_len = [], 0
    for sentence in sentences:
        text = (sentence.text or '').strip()
        if not text:
            continue
        buffer.append(text)
        cum_len += len(text)
        if cum_len >= stop_length:
            break
    return separator.join(buffer)

def error_message(url: str) -> str:
    return f"Failed to analyze page at URL='{url}'."

def build_analysis(payload: SentimentApiPayload, err_msg: str, snippet_length: int = SNIPPET_CHARS) -> SentimentAnalysis:
    missing = [f for f in ('agreement', 'subjectivity', 'confidence', 'irony') if getattr(payload, f) is None]
    if missing:
        raise UpstreamProtocolError(err_msg)
    return SentimentAnalysis(
        polarity=polarity_for(payload.score_tag),
        agreement=payload.agreement.lower(),
        subjectivity=payload.subjectivity.lower(),
        confidence=payload.confidence,
        irony=payload.irony.lower(),
        snippet=build_snippet(payload.sentence_list, snippet_length),
    )

def check_payload(data, err_msg: str, snippet_length: int = SNIPPET_CHARS) -> SentimentAnalysis:
    """Turns a deserialized upstream body into a result, or raises the matching error kind."""
    if data is None:
        raise UpstreamProtocolError(err_msg)
    try:
        payload = SentimentApiPayload.model_validate(data)
    except PayloadError as e:
        log.info('sentiment_payload_invalid', errors=e.error_count())
        raise UpstreamProtocolError(err_msg) from e

    code = payload.api_code
    if code == ApiCode.OK.value:
        return build_analysis(payload, err_msg, snippet_length)
    try:
        kind, hint = API_CODE_ERRORS[ApiCode(code)]
    except (ValueError, KeyError):
        kind, hint = UpstreamProtocolError, None
    log.info('sentiment_api_error', api_code=code, api_msg=payload.status.msg if payload.status else None)
    raise kind(err_msg, hint=hint)

def normalize_response(resp, data, err_msg: str, snippet_length: int = SNIPPET_CHARS) -> tuple[int, dict]:
    """Maps an upstream (response, body) pair to an outbound (status, body) pair."""
    try:
        if not 200 <= resp.status_code < 300:
            if resp.status_code == 503:
                raise UpstreamUnavailable(err_msg)
            raise UpstreamProtocolError(err_msg)
        analysis = check_payload(data, err_msg, snippet_length)
    except SentimentError as e:
        return e.status_code, e.to_body()
    return 200, analysis.model_dump()

def analyze_url(url: str, settings: Settings, fetch=None) -> tuple[int, dict]:
    """Runs sentiment analysis on the page at `url`. Never raises."""
    fetch = fetch or get_data
    err_msg = error_message(url)
    params = build_request_params(url, settings.api_key)
    log.info('sentiment_request', api_url=settings.api_url, params=redact_key(params))
    start = time.time()
    try:
        resp, data = fetch(settings.api_url, params=params, timeout_ms=settings.upstream_timeout_ms)
    except RequestAborted as e:
        err = UpstreamTimeout(err_msg)
        log.info('sentiment_error', kind=type(err).__name__, error=str(e))
        return err.status_code, err.to_body()
    except Exception as e:
        err = UpstreamTransportError(err_msg)
        log.info('sentiment_error', kind=type(err).__name__, error=str(e))
        return err.status_code, err.to_body()

    try:
        status, body = normalize_response(resp, data, err_msg, settings.snippet_length)
    except Exception:
        log.exception('sentiment_normalize_failed')
        err = UpstreamProtocolError(err_msg)
        status, body = err.status_code, err.to_body()
    log.info('sentiment_response',
             upstream_status=getattr(resp, 'status_code', None),
             status=status,
             ms=int((time.time() - start) * 1000))
    return status, body
