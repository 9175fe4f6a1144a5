"""
Profile Parser - Turns a resume document into a candidate Profile.

Extraction is delegated to Claude: the document is sent as a base64
document block and the reply is expected to be a JSON object.
"""

from pathlib import Path
from typing import Optional
import base64
import json
import logging
import mimetypes
import re

import anthropic

from .models import Profile
from job_hunter.exceptions import ProfileParseError


EXTRACTION_PROMPT = """Parse this resume and extract the following information in JSON format only (no markdown, no preamble):
{
  "name": "full name",
  "email": "email address",
  "phone": "phone number",
  "location": "current location",
  "summary": "professional summary",
  "skills": ["skill1", "skill2", ...],
  "experience": [
    {
      "company": "company name",
      "title": "job title",
      "duration": "time period",
      "description": "key achievements"
    }
  ],
  "education": [
    {
      "institution": "school name",
      "degree": "degree type",
      "field": "field of study",
      "year": "graduation year"
    }
  ]
}"""

_FENCE_RE = re.compile(r"```(?:json)?")


class ProfileParser:
    """Parses resumes into Profile objects."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 1000

    def __init__(
        self,
        ai_api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        client=None,
    ):
        if client is None and ai_api_key:
            client = anthropic.Anthropic(api_key=ai_api_key)
        self.client = client
        self.model = model
        self.logger = logging.getLogger(self.__class__.__name__)

    def parse_file(self, file_path: str) -> Profile:
        """
        Parse a profile from a file.

        JSON files are loaded directly; anything else is sent to the
        resume extraction service.
        """
        path = Path(file_path)
        if not path.exists():
            raise ProfileParseError(f"File not found: {file_path}")

        if path.suffix.lower() == ".json":
            return self.load_json(path)

        mime_type = mimetypes.guess_type(path.name)[0] or "application/pdf"
        return self.parse_document(path.read_bytes(), mime_type)

    def load_json(self, path: Path) -> Profile:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ProfileParseError(f"Cannot read profile {path}: {e}") from e
        if not isinstance(data, dict):
            raise ProfileParseError(f"Profile {path} must hold a JSON object")
        return Profile.from_dict(data)

    def parse_document(self, data: bytes, mime_type: str) -> Profile:
        """
        Extract a profile from resume bytes.

        Raises:
            ProfileParseError: No AI client is configured, the service
                failed, or the reply was not a JSON object
        """
        if self.client is None:
            raise ProfileParseError("Resume parsing requires an Anthropic API key")

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                messages=[{
                    "role": "user",
                    "content": [
                        {
                            "type": "document",
                            "source": {
                                "type": "base64",
                                "media_type": mime_type,
                                "data": base64.b64encode(data).decode("ascii"),
                            },
                        },
                        {"type": "text", "text": EXTRACTION_PROMPT},
                    ],
                }],
            )
        except anthropic.APIError as e:
            self.logger.error(f"Resume parsing error: {e}")
            raise ProfileParseError(f"Resume parsing failed: {e}") from e

        text = next(
            (getattr(b, "text", "") for b in response.content if getattr(b, "type", None) == "text"),
            "",
        )
        return self.parse_reply(text)

    @staticmethod
    def parse_reply(text: str) -> Profile:
        """Turn the model's JSON reply into a Profile."""
        cleaned = _FENCE_RE.sub("", text or "").strip() or "{}"
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ProfileParseError(f"Resume parser returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ProfileParseError("Resume parser did not return a JSON object")
        return Profile.from_dict(data)
