import logging, time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pagesentiment.config import get_settings
from pagesentiment.routers.analyze import router as analyze_router, test_router
from pagesentiment.routers.ops import router as ops_router
from pagesentiment.obs import log, new_request_id, should_sample
from pagesentiment.metrics import observe_ms


logging.basicConfig(level=logging.INFO)

INVALID_ARGS_MESSAGE = 'Invalid argument(s).'
INTERNAL_ERROR_MESSAGE = 'Internal server error.'

settings = get_settings()

app = FastAPI(title='Page Sentiment')

app.add_middleware(CORSMiddleware, allow_origins=['*'], allow_methods=['*'], allow_headers=['*'])

@app.on_event('startup')
def check_config():
    if not get_settings().api_key:
        log.error('startup_config_error', reason="Environment variable 'MEANING_CLOUD_API_KEY' is not set or empty.")
        raise RuntimeError('MEANING_CLOUD_API_KEY is not set or empty')
    log.info('startup_complete', test_routes=settings.enable_test_routes)

@app.middleware('http')
async def add_request_context(request: Request, call_next):
    rid = new_request_id()
    request.state.request_id = rid
    start = time.time()
    try:
        response = await call_next(request)
        return response
    finally:
        dt = int((time.time() - start) * 1000)
        observe_ms('http_request_ms', dt)
        if should_sample():
            log.info('http_request', rid=rid, path=request.url.path, ms=dt, method=request.method)

@app.middleware('http')
async def security_headers(request: Request, call_next):
    resp = await call_next(request)
    resp.headers['X-Frame-Options'] = 'DENY'
    return resp

@app.exception_handler(RequestValidationError)
async def validation_errors(request: Request, exc: RequestValidationError):
    errors = [
        {'loc': [str(p) for p in e.get('loc', ())], 'msg': e.get('msg', ''), 'type': e.get('type', '')}
        for e in exc.errors()
    ]
    log.info('validation_error', path=request.url.path, errors=errors)
    return JSONResponse(status_code=400, content={'message': INVALID_ARGS_MESSAGE, 'errors': errors})

@app.exception_handler(Exception)
async def all_errors(request: Request, exc: Exception):
    log.error('unhandled_error', path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={'message': INTERNAL_ERROR_MESSAGE})

app.include_router(analyze_router)
if settings.enable_test_routes:
    app.include_router(test_router)
app.include_router(ops_router)
