"""Pydantic models for decoded job results.

A results payload is decoded into exactly one of three entry shapes, picked
once per response from the ``parse`` and custom parsing instruction flags:

- ``RawResult``: ``content`` is the page body as a string.
- ``ParsedResult``: ``content`` follows the provider's fixed parsed schema.
- ``CustomParsedResult``: ``content`` is whatever the caller's parsing
  instructions produced, kept as a plain mapping.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scrape_jobs.schemas.base import ZeroValueModel
from scrape_jobs.schemas.job import Job


class ResultShape(str, Enum):
    RAW = "raw"
    PARSED = "parsed"
    CUSTOM_PARSED = "custom_parsed"

    @classmethod
    def from_flags(cls, parse: bool, custom_parse_instructions: bool) -> "ResultShape":
        if not parse:
            return cls.RAW
        if custom_parse_instructions:
            return cls.CUSTOM_PARSED
        return cls.PARSED


class _ContentModel(ZeroValueModel):
    # Parsed content varies by source; fields outside the typed schema are kept.
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)


class Sitelink(_ContentModel):
    url: str = ""
    desc: str = ""
    title: str = ""


class Sitelinks(_ContentModel):
    expanded: List[Sitelink] = Field(default_factory=list)
    inline: List[Sitelink] = Field(default_factory=list)


class OrganicItem(_ContentModel):
    pos: int = 0
    url: str = ""
    desc: str = ""
    title: str = ""
    images: List[str] = Field(default_factory=list)
    sitelinks: Optional[Sitelinks] = None
    url_shown: str = ""
    pos_overall: int = 0


class PaidItem(_ContentModel):
    pos: int = 0
    url: str = ""
    desc: str = ""
    title: str = ""
    data_rw: str = ""
    data_pcu: List[str] = Field(default_factory=list)
    sitelinks: Optional[Sitelinks] = None
    url_shown: str = ""
    pos_overall: int = 0


class FeaturedSnippet(_ContentModel):
    url: str = ""
    desc: str = ""
    title: str = ""
    url_shown: str = ""
    pos_overall: int = 0


class ImageItem(_ContentModel):
    alt: str = ""
    pos: int = 0
    url: str = ""


class Images(_ContentModel):
    items: List[ImageItem] = Field(default_factory=list)
    pos_overall: int = 0


class RelatedSearches(_ContentModel):
    related_searches: List[str] = Field(default_factory=list)
    pos_overall: int = 0


class QuestionSource(_ContentModel):
    url: str = ""
    title: str = ""
    url_shown: str = ""


class RelatedQuestionItem(_ContentModel):
    pos: int = 0
    answer: str = ""
    source: Optional[QuestionSource] = None
    question: str = ""


class RelatedQuestions(_ContentModel):
    items: List[RelatedQuestionItem] = Field(default_factory=list)
    pos_overall: int = 0


class SearchInformation(_ContentModel):
    query: str = ""
    showing_results_for: str = ""
    total_results_count: int = 0


class SerpResults(_ContentModel):
    paid: List[PaidItem] = Field(default_factory=list)
    organic: List[OrganicItem] = Field(default_factory=list)
    featured_snippet: List[FeaturedSnippet] = Field(default_factory=list)
    images: Optional[Images] = None
    related_searches: Optional[RelatedSearches] = None
    related_questions: Optional[RelatedQuestions] = None
    search_information: Optional[SearchInformation] = None
    total_results_count: int = 0


class ParsedContent(_ContentModel):
    url: str = ""
    page: int = 0
    results: SerpResults = Field(default_factory=SerpResults)
    last_visible_page: int = 0
    parse_status_code: int = 0
    warnings: List[Any] = Field(default_factory=list, alias="_warnings")
    errors: Any = Field(None, alias="_errors")


class _ResultBase(ZeroValueModel):
    """Fields shared by every result entry shape."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    created_at: str = ""
    updated_at: str = ""
    page: int = 0
    url: str = ""
    job_id: str = ""
    status_code: int = 0
    parser_type: str = ""


class RawResult(_ResultBase):
    content: str = ""


class ParsedResult(_ResultBase):
    content: ParsedContent = Field(default_factory=ParsedContent)


class CustomParsedResult(_ResultBase):
    content: Dict[str, Any] = Field(default_factory=dict)


ResultEntry = Union[RawResult, ParsedResult, CustomParsedResult]

RESULT_MODELS: Dict[ResultShape, Type[_ResultBase]] = {
    ResultShape.RAW: RawResult,
    ResultShape.PARSED: ParsedResult,
    ResultShape.CUSTOM_PARSED: CustomParsedResult,
}


class DecodedResponse(BaseModel):
    """Decoded results of one finished job."""

    model_config = ConfigDict(frozen=True)

    shape: ResultShape
    results: Tuple[ResultEntry, ...] = ()
    job: Job = Field(default_factory=Job)
    status_code: int = 0
    status: str = ""

    @model_validator(mode="after")
    def _single_shape(self) -> "DecodedResponse":
        expected = RESULT_MODELS[self.shape]
        for idx, entry in enumerate(self.results):
            if type(entry) is not expected:
                raise ValueError(
                    f"results[{idx}] is {type(entry).__name__}, expected {expected.__name__} for shape {self.shape.value}"
                )
        return self
