import json

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.responses import JSONResponse
from openai import APIStatusError

from app.api.dependencies import DocumentServiceDep, LLMServiceDep, SettingsDep
from app.api.uploads import UnsupportedFileTypeError, UploadTooLargeError, read_upload
from app.models.document.models import UploadedFile
from app.services.document_service import UpstageApiError

router = APIRouter(
    prefix="/api",
    tags=["documents"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_document(document: UploadFile | None, max_size_bytes: int) -> UploadedFile | JSONResponse:
    if document is None:
        return _error(status.HTTP_400_BAD_REQUEST, "No file uploaded")
    try:
        return await read_upload(document, max_size_bytes)
    except UploadTooLargeError as e:
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(e))
    except UnsupportedFileTypeError as e:
        return _error(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(e))


@router.post("/document-parse")
async def document_parse(
    document_service: DocumentServiceDep,
    app_settings: SettingsDep,
    document: UploadFile | None = File(None),
):
    """Parse a document into text and HTML"""
    file = await _read_document(document, app_settings.max_upload_size_bytes)
    if isinstance(file, JSONResponse):
        return file

    try:
        result = await document_service.parse_document(file)
    except UpstageApiError as e:
        return JSONResponse(status_code=e.status_code, content=e.payload)
    except Exception as e:
        print(f"Document parse error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to parse document")

    return result.model_dump(by_alias=True)


@router.post("/ocr")
async def ocr(
    document_service: DocumentServiceDep,
    app_settings: SettingsDep,
    document: UploadFile | None = File(None),
):
    """Run OCR on a document or image"""
    file = await _read_document(document, app_settings.max_upload_size_bytes)
    if isinstance(file, JSONResponse):
        return file

    try:
        result = await document_service.perform_ocr(file)
    except UpstageApiError as e:
        return JSONResponse(status_code=e.status_code, content=e.payload)
    except Exception as e:
        print(f"OCR error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to perform OCR")

    return result.model_dump(by_alias=True)


@router.post("/information-extract")
async def information_extract(
    llm_service: LLMServiceDep,
    app_settings: SettingsDep,
    document: UploadFile | None = File(None),
    schema_json: str | None = Form(None, alias="schema"),
):
    """Extract the fields described by a JSON schema from a document image"""
    file = await _read_document(document, app_settings.max_upload_size_bytes)
    if isinstance(file, JSONResponse):
        return file

    if not schema_json:
        return _error(status.HTTP_400_BAD_REQUEST, "No schema provided")

    try:
        parsed_schema = json.loads(schema_json)
    except json.JSONDecodeError:
        return _error(status.HTTP_400_BAD_REQUEST, "Schema is not valid JSON")

    try:
        return await llm_service.extract_information(file, parsed_schema)
    except APIStatusError as e:
        return JSONResponse(status_code=e.status_code, content=e.body or {"error": e.message})
    except Exception as e:
        print(f"Information extraction error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to extract information")
