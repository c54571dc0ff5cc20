# ABOUTME: Domain models for extracted articles, inbound requests and batch outcomes
# ABOUTME: ArticleRecord is the immutable output unit handed to callers and the packaging layer

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wechat2md.errors import ExtractionError, RequestValidationError

ARTICLE_HOST = "mp.weixin.qq.com"
ALBUM_MARKER = "appmsgalbum"
UNKNOWN_TITLE = "未知标题"


class ExtractionMode(str, Enum):
    """How album links are discovered."""

    BROWSER = "browser"
    STATIC = "static"


class ArticleRecord(BaseModel):
    """A single extracted article, ready for packaging."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(default=UNKNOWN_TITLE, description="Article title or the unknown-title sentinel")
    content: str = Field(description="Markdown document: heading, optional metadata block, body")
    author: str | None = Field(default=None)
    publish_time: str | None = Field(default=None, alias="publishTime")
    url: str = Field(description="Canonical source URL")
    images: tuple[str, ...] = Field(default=(), description="Deduplicated HTTPS image URLs in document order")

    @field_validator("title")
    @classmethod
    def _title_or_sentinel(cls, value: str) -> str:
        return value.strip() or UNKNOWN_TITLE

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the camelCase field names used at the boundary."""
        payload = self.model_dump(by_alias=True)
        payload["images"] = list(self.images)
        return payload


class ParsedArticle(BaseModel):
    """Raw fields pulled out of one article document before conversion."""

    title: str
    body_markup: str
    author: str | None = None
    publish_time: str | None = None
    images: list[str] = Field(default_factory=list)

    @property
    def has_body(self) -> bool:
        return bool(self.body_markup.strip())


class ExtractionRequest(BaseModel):
    """Caller-supplied extraction request, validated at the boundary."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    max_count: int | None = Field(default=None, ge=1, alias="maxCount")
    mode: ExtractionMode = ExtractionMode.BROWSER

    @field_validator("url")
    @classmethod
    def _platform_url(cls, value: str) -> str:
        value = value.strip()
        if ARTICLE_HOST not in value:
            raise ValueError(f"URL must point at {ARTICLE_HOST}")
        return value

    @property
    def is_album(self) -> bool:
        return ALBUM_MARKER in self.url

    @classmethod
    def from_payload(cls, payload: dict[str, Any], max_count_ceiling: int | None = None) -> "ExtractionRequest":
        """Build a request from an untrusted payload.

        Raises:
            RequestValidationError: If the payload is missing fields or has the wrong shape
        """
        if not isinstance(payload, dict) or not payload.get("url"):
            raise RequestValidationError("A platform article or album URL is required")
        try:
            request = cls.model_validate(payload)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            problems = "; ".join(error["msg"] for error in errors)
            raise RequestValidationError(f"Invalid request: {problems}", details={"errors": errors}) from e

        if max_count_ceiling is not None and request.max_count is not None and request.max_count > max_count_ceiling:
            raise RequestValidationError(
                f"maxCount must be between 1 and {max_count_ceiling}", details={"maxCount": request.max_count}
            )
        return request


class SkipReason(BaseModel):
    """Why a single link was excluded from the results."""

    kind: str
    message: str
    retryable: bool = False
    attempts: int = 1

    @classmethod
    def from_error(cls, error: Exception, attempts: int = 1) -> "SkipReason":
        if isinstance(error, ExtractionError):
            return cls(kind=error.kind, message=error.message, retryable=error.retryable, attempts=attempts)
        return cls(kind="unexpected_error", message=f"{type(error).__name__}: {error}", attempts=attempts)


class UnitOutcome(BaseModel):
    """Result of one fetch-parse-convert unit: a record or a skip."""

    url: str
    record: ArticleRecord | None = None
    skip: SkipReason | None = None

    @property
    def succeeded(self) -> bool:
        return self.record is not None


class BatchReport(BaseModel):
    """Every unit outcome of a batch run, in input order."""

    outcomes: list[UnitOutcome] = Field(default_factory=list)

    @property
    def articles(self) -> list[ArticleRecord]:
        return [outcome.record for outcome in self.outcomes if outcome.record is not None]

    @property
    def skipped(self) -> list[UnitOutcome]:
        return [outcome for outcome in self.outcomes if outcome.record is None]
