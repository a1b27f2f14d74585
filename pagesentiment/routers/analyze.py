import time
from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from pagesentiment.config import Settings, get_settings
from pagesentiment.schemas import AnalyzeRequest, SentimentAnalysis
from pagesentiment.obs import log, should_sample
from pagesentiment.metrics import record_analyze
from pagesentiment import sentiment

FORM_TYPES = ('application/x-www-form-urlencoded', 'multipart/form-data')

CANNED_ANALYSIS = SentimentAnalysis(
    polarity='positive',
    agreement='agreement',
    subjectivity='objective',
    confidence=42,
    irony='ironic',
    snippet='What do you get if you multiply six by nine?',
)

router = APIRouter(tags=['analyze'])
test_router = APIRouter(prefix='/test', tags=['test'])

async def analyze_request(request: Request) -> AnalyzeRequest:
    """Reads `{url}` from a JSON or form body and validates it before any handler runs."""
    ctype = (request.headers.get('content-type') or '').lower()
    if any(t in ctype for t in FORM_TYPES):
        try:
            form = await request.form()
        except (HTTPException, MultiPartException, ValueError) as e:
            msg = getattr(e, 'detail', None) or getattr(e, 'message', None) or str(e)
            raise RequestValidationError([{'loc': ('body',), 'msg': str(msg), 'type': 'form_error'}])
        raw = dict(form)
    else:
        try:
            raw = await request.json()
        except ValueError:
            raw = {}
    if not isinstance(raw, dict):
        raw = {}
    try:
        return AnalyzeRequest.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

@router.post('/analyze-sentiment')
def analyze_sentiment(request: Request, req: AnalyzeRequest = Depends(analyze_request),
                      settings: Settings = Depends(get_settings)):
    start = time.time()
    status, body = sentiment.analyze_url(req.url, settings)
    dt = int((time.time() - start) * 1000)
    record_analyze(status, dt)
    if should_sample():
        log.info('analyze',
                 rid=getattr(request.state, 'request_id', None),
                 url=req.url,
                 status=status,
                 latency_ms=dt)
    return JSONResponse(status_code=status, content=body)

@test_router.post('/analyze-sentiment', response_model=SentimentAnalysis)
def analyze_sentiment_canned(req: AnalyzeRequest = Depends(analyze_request)):
    log.info('analyze_canned', url=req.url)
    return CANNED_ANALYSIS
