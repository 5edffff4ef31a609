"""
Business Lookup Client
======================
Asks Gemini (with the Google Maps grounding tool) for local businesses of a
sector in a city, and turns the free-text reply into BusinessRecords.

The model is told to answer with a bare JSON array but is not guaranteed to,
so the array is cut out of the reply between the first '[' and the last ']'.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from google import genai
from google.genai import types

from extratorzap.config.settings import Settings
from extratorzap.errors import BusinessLookupError, ConfigurationError
from extratorzap.utils.helpers import setup_logger, clean_text

STATUS_NO_WEBSITE = "Não Tem Site"
STATUS_BAD_WEBSITE = "Site Ruim"

LOOKUP_FAILED_MESSAGE = "Failed to fetch businesses. Check your API key and connection."
FORMAT_UNRECOGNIZED_MESSAGE = "Response format unrecognized. The API response may have changed format."
PARSE_FAILED_MESSAGE = "Could not process the received data."
NOT_AN_ARRAY_MESSAGE = "Extracted data is not an array."


@dataclass(frozen=True)
class SearchCriteria:
    country: str
    region: str
    city: str
    sector: str


@dataclass(frozen=True)
class BusinessRecord:
    name: str
    contact_number: str = ""
    website_status: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "contactNumber": self.contact_number,
            "websiteStatus": self.website_status,
        }


class BusinessLookup:
    """Finds businesses matching a SearchCriteria"""

    def lookup(self, criteria: SearchCriteria) -> List[BusinessRecord]:
        raise NotImplementedError


def build_prompt(criteria: SearchCriteria) -> str:
    """Prompt sent as the entire request content"""
    return f"""
Com base no Google Maps, encontre aproximadamente 50 empresas do setor '{criteria.sector}' na cidade de '{criteria.city}', estado de '{criteria.region}', '{criteria.country}'.

Sua tarefa é focar em contatos que seriam úteis para uma agência de marketing digital. Portanto, dê preferência para:
1. Pequenas empresas e negócios locais.
2. Empresas com poucas avaliações no Google Meu Negócio.
3. Empresas que parecem ter uma presença digital fraca.

Para cada empresa, extraia as seguintes informações:
- nome: O nome completo da empresa.
- whatsapp: O número de telefone de contato, priorizando números de WhatsApp ou celular. Se não houver, pode deixar em branco.
- websiteStatus: Analise se a empresa possui um site.
    - Se encontrar um site, avalie-o brevemente. Se parecer amador, desatualizado, quebrado ou não for responsivo (não funciona bem em celulares), classifique como "{STATUS_BAD_WEBSITE}".
    - Se não encontrar um site listado no Google Maps, classifique como "{STATUS_NO_WEBSITE}".

Retorne os resultados em um formato de array JSON. O JSON deve ser a única coisa na sua resposta. Não adicione nenhum texto de introdução ou conclusão.

Exemplo de formato de resposta:
[
  {{
    "nome": "Restaurante Sabor Caseiro",
    "whatsapp": "+55 11 91234-5678",
    "websiteStatus": "{STATUS_NO_WEBSITE}"
  }},
  {{
    "nome": "Pet Shop Cão Feliz",
    "whatsapp": "+55 11 98765-4321",
    "websiteStatus": "{STATUS_BAD_WEBSITE}"
  }}
]
""".strip()


def _text_field(item: Dict[str, Any], *keys: str) -> str:
    """First non-empty string among keys; other JSON types do not count"""
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _contact_field(item: Dict[str, Any], *keys: str) -> str:
    # Phone numbers sometimes come back as bare JSON numbers
    for key in keys:
        value = item.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str) and value:
            return value
    return ""


def _to_record(item: Any) -> Optional[BusinessRecord]:
    if not isinstance(item, dict):
        return None

    name = _text_field(item, "nome", "name")
    website_status = _text_field(item, "websiteStatus")
    if not name or not website_status:
        return None

    return BusinessRecord(
        name=name,
        contact_number=_contact_field(item, "whatsapp", "contactNumber"),
        website_status=website_status,
    )


def parse_business_response(text: Optional[str], logger=None) -> List[BusinessRecord]:
    """
    Extract and validate the JSON array of businesses from a model reply.

    Surrounding prose is tolerated. Entries without a name or website
    status are dropped; duplicates and order are kept as-is.
    """
    logger = logger or setup_logger(__name__)
    raw_text = (text or "").strip()

    start = raw_text.find("[")
    end = raw_text.rfind("]")
    if start == -1 or end == -1:
        logger.error(f"API response does not contain a JSON array: {clean_text(raw_text)[:300]}")
        raise BusinessLookupError(FORMAT_UNRECOGNIZED_MESSAGE)

    json_string = raw_text[start:end + 1]
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        logger.error(f"Could not parse JSON from API response: {e} - {clean_text(json_string)[:300]}")
        raise BusinessLookupError(PARSE_FAILED_MESSAGE) from e

    if not isinstance(data, list):
        logger.error(f"Extracted JSON is a {type(data).__name__}, not an array")
        raise BusinessLookupError(NOT_AN_ARRAY_MESSAGE)

    records = [record for record in (_to_record(item) for item in data) if record is not None]

    dropped = len(data) - len(records)
    if dropped:
        logger.info(f"Dropped {dropped} incomplete entries from API response")

    return records


class GeminiBusinessLookup(BusinessLookup):
    """
    Lookup backed by Gemini with Google Maps grounding.

    The client is injected so tests can pass a fake exposing
    ``models.generate_content``.
    """

    def __init__(self, client, model: str = "gemini-2.5-flash"):
        self.logger = setup_logger(__name__)
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiBusinessLookup":
        client = genai.Client(
            api_key=settings.GEMINI_API_KEY,
            http_options=types.HttpOptions(timeout=settings.LOOKUP_TIMEOUT_SECONDS * 1000),
        )
        return cls(client, model=settings.GEMINI_MODEL)

    def lookup(self, criteria: SearchCriteria) -> List[BusinessRecord]:
        self.logger.info(
            f"Looking up '{criteria.sector}' businesses in "
            f"{criteria.city}, {criteria.region}, {criteria.country}"
        )
        prompt = build_prompt(criteria)

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_maps=types.GoogleMaps())],
                ),
            )
        except Exception as e:
            self.logger.error(f"Gemini API call failed: {e}")
            raise BusinessLookupError(LOOKUP_FAILED_MESSAGE) from e

        records = parse_business_response(response.text, self.logger)
        self.logger.info(f"Lookup returned {len(records)} businesses")
        return records


class UnconfiguredLookup(BusinessLookup):
    """Stands in for the Gemini lookup when no API key is configured"""

    def __init__(self, error: ConfigurationError):
        self.error = error

    def lookup(self, criteria: SearchCriteria) -> List[BusinessRecord]:
        raise BusinessLookupError(LOOKUP_FAILED_MESSAGE) from self.error


def create_business_lookup(settings: Settings) -> Tuple[BusinessLookup, Optional[ConfigurationError]]:
    """
    Build the lookup client from settings.

    A missing API key does not raise: the error is returned next to an
    UnconfiguredLookup, which fails on first use.
    """
    if not settings.GEMINI_API_KEY:
        error = ConfigurationError("GEMINI_API_KEY is not set. Please set the GEMINI_API_KEY environment variable.")
        return UnconfiguredLookup(error), error

    return GeminiBusinessLookup.from_settings(settings), None
