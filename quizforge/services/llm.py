import asyncio, itertools, json
from typing import Any, Callable, List, Optional
from openai import OpenAI
from ..settings import settings

_client: Optional[OpenAI] = None
_mock_ids = itertools.count(1)

MOCK_QUIZ = {
    "quiz_title": "Networking Basics",
    "quiz_type": "mixed",
    "question_count": 4,
    "source_summary": "MOCK quiz; no model was called.",
    "questions": [
        {"id": "q1", "type": "mcq", "prompt": "Which layer handles routing on the Internet?",
         "choices": ["Physical", "Data Link", "Network", "Transport"], "answer_index": 2,
         "explanation": "IP routing occurs at Layer 3."},
        {"id": "q2", "type": "fill_blank", "prompt": "The TCP handshake ends with ____.",
         "answers": ["ACK"], "explanation": "SYN, SYN-ACK, ACK."},
        {"id": "q3", "type": "identification", "prompt": "Protocol that maps names to IP addresses.",
         "answers": ["DNS", "Domain Name System"], "explanation": "DNS resolves hostnames."},
        {"id": "q4", "type": "matching", "pairs": [
            {"left": "HTTP", "right": "80"}, {"left": "HTTPS", "right": "443"}, {"left": "SSH", "right": "22"}],
         "explanation": "Well-known ports."},
    ],
}


def client() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(
            api_key=settings.XAI_API_KEY,
            base_url=settings.XAI_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
        )
    return _client


def _upload_sync(path: str, filename: str) -> str:
    if settings.MOCK_MODE:
        return f"mock-file-{next(_mock_ids)}"
    with open(path, "rb") as fh:
        uploaded = client().files.create(file=(filename, fh), purpose="user_data")
    return uploaded.id


def _respond_sync(messages: List[dict]) -> Any:
    if settings.MOCK_MODE:
        return {"output_text": json.dumps(MOCK_QUIZ)}
    return client().responses.create(model=settings.XAI_MODEL, input=messages)


async def upload_file(path: str, filename: str) -> str:
    """Register a file with the provider and return its file id."""
    return await asyncio.to_thread(_upload_sync, path, filename)


async def create_response(messages: List[dict]) -> Any:
    return await asyncio.to_thread(_respond_sync, messages)


# ---------- output text ----------

def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _message_content(response: Any) -> Optional[str]:
    choices = _field(response, "choices") or []
    if not choices:
        return None
    return _text(_field(_field(choices[0], "message"), "content"))


def _flat_output_text(response: Any) -> Optional[str]:
    return _text(_field(response, "output_text"))


def _nested_parts(response: Any) -> Optional[str]:
    parts = []
    for item in _field(response, "output") or []:
        for part in _field(item, "content") or []:
            text = _field(part, "text")
            if isinstance(text, str) and text:
                parts.append(text)
    return _text("\n".join(parts))


# TODO: confirm this order against recorded xAI Responses payloads; it was
# never checked against the live wire format.
OUTPUT_STRATEGIES: List[Callable[[Any], Optional[str]]] = [
    _message_content,
    _flat_output_text,
    _nested_parts,
]


def extract_output_text(response: Any) -> str:
    """First non-empty text from the known response shapes, trimmed."""
    for strategy in OUTPUT_STRATEGIES:
        text = strategy(response)
        if text:
            return text.strip()
    return ""
