import json
from typing import Any

from app.models.extraction.models import ExtractionSchema, FieldDefinition


# Korean and English keywords for each field. Matching is plain substring
# containment on the lower-cased query, so "id" also matches "said".
FIELD_DEFINITIONS: list[FieldDefinition] = [
    FieldDefinition("bank_name", ["은행", "bank"], "string", "The name of bank"),
    FieldDefinition("account_number", ["계좌", "account"], "string", "Account number"),
    FieldDefinition("balance", ["잔액", "balance", "잔고"], "string", "Account balance"),
    FieldDefinition("name", ["이름", "성명", "name", "명의"], "string", "Name of person or entity"),
    FieldDefinition("date", ["날짜", "일자", "date", "일시"], "string", "Date information"),
    FieldDefinition("amount", ["금액", "가격", "비용", "amount", "price"], "string", "Amount or price"),
    FieldDefinition("total", ["총", "합계", "total", "총액", "총합"], "string", "Total amount"),
    FieldDefinition("address", ["주소", "address", "소재지"], "string", "Address"),
    FieldDefinition("phone", ["전화", "연락처", "phone", "휴대폰"], "string", "Phone number"),
    FieldDefinition("email", ["이메일", "email", "메일"], "string", "Email address"),
    FieldDefinition("company", ["회사", "업체", "상호", "company", "기업"], "string", "Company name"),
    FieldDefinition("transaction", ["거래", "transaction", "내역"], "string", "Transaction details"),
    FieldDefinition("item", ["품목", "항목", "상품", "item", "제품"], "string", "Item or product"),
    FieldDefinition("quantity", ["수량", "quantity", "개수"], "string", "Quantity"),
    FieldDefinition("id_number", ["번호", "id", "식별", "주민"], "string", "ID or reference number"),
]

# Used when the query names none of the known fields
FALLBACK_PROPERTIES: dict[str, dict[str, str]] = {
    "title": {"type": "string", "description": "Document title or main heading"},
    "main_content": {"type": "string", "description": "Main content or key information"},
    "summary": {"type": "string", "description": "Brief summary of the document"},
}

EXTRACTED_DATA_HEADER = "📋 **추출된 정보:**"

FIELD_LABELS: dict[str, str] = {
    "bank_name": "🏦 은행명",
    "account_number": "💳 계좌번호",
    "balance": "💰 잔액",
    "name": "👤 이름",
    "date": "📅 날짜",
    "amount": "💵 금액",
    "total": "📊 총액",
    "address": "📍 주소",
    "phone": "📞 전화번호",
    "email": "✉️ 이메일",
    "company": "🏢 회사명",
    "transaction": "📝 거래내역",
    "item": "📦 품목",
    "quantity": "🔢 수량",
    "id_number": "🔖 번호",
    "title": "📑 제목",
    "main_content": "📄 주요 내용",
    "summary": "📝 요약",
}


def generate_schema_from_query(query: str) -> ExtractionSchema:
    """
    Build the extraction schema for a free-text query.
    Every field whose keywords occur in the query is included; fields are independent of each other.
    When nothing matches, a generic title / main_content / summary schema is returned.
    """
    lower_query = query.lower()

    properties: dict[str, dict[str, str]] = {}
    for definition in FIELD_DEFINITIONS:
        if any(keyword in lower_query for keyword in definition.keywords):
            properties[definition.name] = definition.to_property()

    if not properties:
        properties = {name: dict(prop) for name, prop in FALLBACK_PROPERTIES.items()}

    return {
        "type": "object",
        "properties": properties,
    }


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def format_extracted_data(data: dict[str, Any]) -> str:
    """Render extracted fields as labeled lines, skipping None and empty-string values"""
    lines = [EXTRACTED_DATA_HEADER, ""]

    for key, value in data.items():
        if value is None or value == "":
            continue
        label = FIELD_LABELS.get(key, key)
        lines.append(f"{label}: {_format_value(value)}")

    return "\n".join(lines)


def parse_extraction_result(result: dict[str, Any]) -> dict[str, Any] | None:
    """
    Decode the JSON object carried in the first choice of an extraction response.
    Returns None when the content is missing or is not a JSON object.
    """
    try:
        content = result["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None

    if not content:
        return None

    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return None

    if not isinstance(data, dict):
        return None

    return data
