"""
Pydantic Models and Schemas
===========================

Core data models for conversion requests, render options, assembled documents,
readiness reports and conversion results.
"""

from typing import Optional, List, Dict, Any, Union
from enum import Enum
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from md2pdf_mcp.config.settings import Settings, get_settings

_LENGTH_PATTERN = re.compile(r"^\d+(\.\d+)?(px|in|cm|mm)?$")


# Enums
class PageFormat(str, Enum):
    """Supported PDF page formats."""

    A4 = "A4"
    A3 = "A3"
    A5 = "A5"
    LETTER = "Letter"
    LEGAL = "Legal"
    TABLOID = "Tabloid"


class PlaceholderKind(str, Enum):
    """Kinds of content rendered client-side after load."""

    DIAGRAM = "diagram"
    CHART = "chart"


def _validate_length(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not _LENGTH_PATTERN.match(value):
        raise ValueError(f"Invalid length '{value}': expected a number with px, in, cm or mm")
    return value


# Rendering Models
class MarginOverrides(BaseModel):
    """Caller supplied margins; omitted sides fall back to defaults."""

    top: Optional[str] = Field(None, description="Top margin (e.g. '0.5in', '20mm')")
    right: Optional[str] = Field(None, description="Right margin")
    bottom: Optional[str] = Field(None, description="Bottom margin")
    left: Optional[str] = Field(None, description="Left margin")

    model_config = ConfigDict(frozen=True)

    @field_validator("top", "right", "bottom", "left")
    @classmethod
    def validate_length(cls, v: Optional[str]) -> Optional[str]:
        """Validate CSS length strings."""
        return _validate_length(v)


class Margin(BaseModel):
    """Fully specified page margins."""

    top: str
    right: str
    bottom: str
    left: str

    model_config = ConfigDict(frozen=True)

    @field_validator("top", "right", "bottom", "left")
    @classmethod
    def validate_length(cls, v: str) -> str:
        """Validate CSS length strings."""
        return _validate_length(v)  # type: ignore[return-value]

    @classmethod
    def uniform(cls, value: str) -> "Margin":
        return cls(top=value, right=value, bottom=value, left=value)

    def merged(self, overrides: Optional[MarginOverrides]) -> "Margin":
        """Return a copy with every side supplied by ``overrides`` replaced."""
        if overrides is None:
            return self
        return self.model_copy(update=overrides.model_dump(exclude_none=True))


class RenderOptions(BaseModel):
    """Options for printing a settled page to PDF."""

    format: PageFormat = Field(PageFormat.A4, description="PDF page format")
    margin: Margin = Field(default_factory=lambda: Margin.uniform("0.5in"))
    display_header_footer: bool = Field(False, description="Print header and footer")
    print_background: bool = Field(True, description="Print background graphics")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def defaults(cls, settings: Optional[Settings] = None) -> "RenderOptions":
        """Build the documented default options from settings."""
        settings = settings or get_settings()
        return cls(
            format=PageFormat(settings.default_page_format),
            margin=Margin.uniform(settings.default_margin),
            display_header_footer=settings.display_header_footer,
            print_background=settings.print_background,
        )

    def merged(
        self,
        format: Optional[Union[PageFormat, str]] = None,
        margin: Optional[Union[MarginOverrides, Dict[str, Any]]] = None,
    ) -> "RenderOptions":
        """Merge caller overrides over these options. Caller values always win."""
        if isinstance(margin, dict):
            margin = MarginOverrides(**margin)
        update: Dict[str, Any] = {"margin": self.margin.merged(margin)}
        if format is not None:
            update["format"] = PageFormat(format)
        return self.model_copy(update=update)


class Placeholder(BaseModel):
    """A markup element awaiting client-side rendering."""

    kind: PlaceholderKind
    index: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def placeholder_id(self) -> str:
        return f"{self.kind.value}-{self.index}"


class AssembledDocument(BaseModel):
    """Self-contained HTML document plus its placeholder manifest."""

    html: str = Field(..., description="Complete HTML document")
    title: str = Field("Document", description="Document title")
    placeholders: List[Placeholder] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def diagram_count(self) -> int:
        return sum(1 for p in self.placeholders if p.kind is PlaceholderKind.DIAGRAM)

    @property
    def chart_count(self) -> int:
        return sum(1 for p in self.placeholders if p.kind is PlaceholderKind.CHART)


class ReadinessReport(BaseModel):
    """Outcome of the readiness gate for one conversion."""

    fonts_ready: bool = False
    diagrams_ready: bool = False
    charts_ready: bool = False
    warnings: List[str] = Field(default_factory=list)
    elapsed: float = Field(0.0, description="Seconds spent waiting")

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


# Conversion Models
class ConversionRequest(BaseModel):
    """A single conversion request. Exactly one of locator or content is set."""

    locator: Optional[str] = Field(None, description="Path, URL or object storage URI")
    content: Optional[str] = Field(None, description="Inline Markdown content")
    output_path: str = Field(..., min_length=1, description="Where the PDF is written")
    title: Optional[str] = Field(None, description="Title override")
    format: Optional[PageFormat] = Field(None, description="Page format override")
    margin: Optional[MarginOverrides] = Field(None, description="Margin overrides")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_source(self) -> "ConversionRequest":
        """Ensure exactly one content source is provided."""
        if (self.locator is None) == (self.content is None):
            raise ValueError("Exactly one of locator or content must be provided")
        return self


class ConversionResult(BaseModel):
    """Structured outcome of a conversion; never raised, always returned."""

    success: bool = Field(..., description="Whether conversion succeeded")
    output_path: Optional[str] = Field(None, description="Resolved output location")
    file_size: int = Field(0, ge=0, description="PDF size in bytes")
    warnings: List[str] = Field(default_factory=list, description="Degradation warnings")
    error: Optional[str] = Field(None, description="Error message if failed")
    processing_time: float = Field(0.0, description="Total processing time in seconds")


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""

    status: str = Field(..., description="Overall status")
    version: str = Field(..., description="Application version")
    active_sessions: int = Field(0, ge=0, description="Registered MCP sessions")
    runtimes_acquired: int = Field(0, ge=0, description="Browser runtimes acquired")
    runtimes_released: int = Field(0, ge=0, description="Browser runtimes released")
