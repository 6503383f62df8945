"""
Pydantic schemas for the JSON API.
"""

from typing import List

from pydantic import BaseModel, RootModel


class ShortenRequest(BaseModel):
    """Payload of `POST /api/shorten`."""
    url: str


class ShortenResponse(BaseModel):
    result: str


class BatchRequestItem(BaseModel):
    correlation_id: str
    original_url: str


class BatchResponseItem(BaseModel):
    correlation_id: str
    short_url: str


class UserURL(BaseModel):
    """One entry of `GET /api/user/urls`."""
    short_url: str
    original_url: str


class DeleteRequest(RootModel[List[str]]):
    """Body of `DELETE /api/user/urls`: a JSON array of tokens."""
