"""Schemas for the AI writing assistant."""

from pydantic import BaseModel, Field


class GenerateBlogRequest(BaseModel):
    title: str = Field(..., max_length=200)
    tone: str = Field("professional", max_length=50)


class GenerateBlogResponse(BaseModel):
    content: str


class GenerateTagsRequest(BaseModel):
    title: str = Field("", max_length=200)
    body: str = ""


class GenerateTagsResponse(BaseModel):
    tags: list[str]


class GenerateTitleRequest(BaseModel):
    body: str
    tone: str = Field("engaging", max_length=50)


class GenerateTitleResponse(BaseModel):
    titles: list[str]
