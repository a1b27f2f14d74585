import logging, os, uuid
import structlog
from pagesentiment.config import get_settings

SETTINGS = get_settings()
LOG_LEVEL = SETTINGS.log_level
SAMPLE_RATE = SETTINGS.sample_rate

def setup_logging():
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, LOG_LEVEL, logging.INFO)),
    )
    return structlog.get_logger()

log = setup_logging()

def new_request_id() -> str:
    return uuid.uuid4().hex

def should_sample() -> bool:
    return SAMPLE_RATE >= 1.0 or (os.urandom(1)[0] / 255.0 < SAMPLE_RATE)

def redact_key(params: dict) -> dict:
    """Copy of outbound query params that is safe to log."""
    return {k: ('***' if k == 'key' and v else v) for k, v in params.items()}
