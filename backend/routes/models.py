"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel

from skit_studio.llm import ProviderFormat
from skit_studio.models import Language


class UpdateSession(BaseModel):
    topic: str | None = None
    language: Language | None = None


class GenerateBody(BaseModel):
    topic: str | None = None
    wait: bool = True


class TranslateBody(BaseModel):
    language: Language
    wait: bool = True


class CheckConnectionBody(BaseModel):
    provider_url: str
    api_key: str = ""
    provider_format: ProviderFormat = "koboldcpp"
