from fastapi import APIRouter, Depends, Response
from pagesentiment.config import Settings, get_settings
from pagesentiment.metrics import snapshot_metrics, prometheus_payload

router = APIRouter(tags=['ops'])

@router.get('/health')
def health(settings: Settings = Depends(get_settings)):
    # Never expose the key itself, only whether one is configured.
    return {
        'status': 'ok',
        'api_key_configured': bool(settings.api_key),
        'test_routes': settings.enable_test_routes,
    }

@router.get('/metrics')
def metrics():
    return snapshot_metrics()

@router.get('/metrics.prom')
def metrics_prom():
    payload, content_type = prometheus_payload()
    return Response(payload, media_type=content_type)
