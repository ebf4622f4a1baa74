from pydantic import BaseModel, ConfigDict, Field


class DocumentContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    html: str = ""
    text: str = ""


class ElementCoordinates(BaseModel):
    x: float
    y: float
    width: float
    height: float


class DocumentElement(BaseModel):
    model_config = ConfigDict(extra="allow")

    category: str = ""
    content: DocumentContent = Field(default_factory=DocumentContent)
    coordinates: ElementCoordinates | list[dict[str, float]] | None = None
    base64: str | None = None


class DocumentUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    pages: int = 0


class DocumentParseResult(BaseModel):
    """Response of the document parse endpoint"""
    model_config = ConfigDict(extra="allow")

    content: DocumentContent | None = None
    elements: list[DocumentElement] = Field(default_factory=list)
    model: str = ""
    usage: DocumentUsage = Field(default_factory=DocumentUsage)


class OcrWord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    text: str = ""
    bounding_box: list[float] | dict | None = Field(None, alias="boundingBox")


class OcrPage(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str = ""
    words: list[OcrWord] = Field(default_factory=list)


class OcrResult(BaseModel):
    """Response of the OCR endpoint"""
    model_config = ConfigDict(extra="allow")

    text: str = ""
    pages: list[OcrPage] = Field(default_factory=list)
    model: str = ""
    usage: DocumentUsage = Field(default_factory=DocumentUsage)
