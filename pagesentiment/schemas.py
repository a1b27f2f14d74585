from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from pagesentiment.urls import is_valid_url

class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(extra='ignore')
    url: str

    @field_validator('url', mode='before')
    @classmethod
    def check_url(cls, v):
        if not isinstance(v, str) or not is_valid_url(v):
            raise ValueError('must be a valid URL')
        return v.strip()

class SentimentAnalysis(BaseModel):
    polarity: str
    agreement: str
    subjectivity: str
    confidence: int
    irony: str
    snippet: str

class ErrorBody(BaseModel):
    message: str
    errors: Optional[list[dict]] = None

# Upstream (MeaningCloud sentiment-2.1) payload. Everything is optional here;
# the normalizer decides what a usable answer is.

class ApiStatus(BaseModel):
    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)
    code: Optional[str] = None
    msg: Optional[str] = None
    credits: Optional[str] = None
    remaining_credits: Optional[str] = None

class ApiSentence(BaseModel):
    model_config = ConfigDict(extra='ignore')
    text: Optional[str] = None

class SentimentApiPayload(BaseModel):
    model_config = ConfigDict(extra='ignore')
    status: Optional[ApiStatus] = None
    score_tag: Optional[str] = None
    agreement: Optional[str] = None
    subjectivity: Optional[str] = None
    confidence: Optional[int] = None
    irony: Optional[str] = None
    sentence_list: list[ApiSentence] = Field(default_factory=list)

    @field_validator('confidence', mode='before')
    @classmethod
    def parse_confidence(cls, v):
        # Upstream sends a numeric string, e.g. "86".
        if v is None or isinstance(v, int):
            return v
        return int(float(str(v).strip()))

    @field_validator('sentence_list', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def api_code(self) -> str:
        return (self.status.code if self.status and self.status.code else '') or ''
