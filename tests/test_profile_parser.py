"""Tests for resume parsing."""

import base64
import json

import anthropic
import httpx
import pytest

from job_hunter.core.profile_parser import ProfileParser
from job_hunter.exceptions import ProfileParseError

from conftest import FakeAnthropic

REPLY = {
    "name": "Alex Doe",
    "email": "alex@example.com",
    "location": "Stockholm",
    "skills": ["Python", "SQL"],
    "experience": [{"company": "Initech", "title": "Developer", "duration": "2019-2023"}],
    "education": [],
}


class TestParseReply:
    def test_plain_json(self):
        profile = ProfileParser.parse_reply(json.dumps(REPLY))
        assert profile.name == "Alex Doe"
        assert profile.positions[0].duration == "2019-2023"

    def test_strips_code_fences(self):
        profile = ProfileParser.parse_reply(f"```json\n{json.dumps(REPLY)}\n```")
        assert profile.skills == ["Python", "SQL"]

    def test_invalid_json(self):
        with pytest.raises(ProfileParseError):
            ProfileParser.parse_reply("Sorry, I cannot read this resume.")

    def test_non_object(self):
        with pytest.raises(ProfileParseError):
            ProfileParser.parse_reply("[1, 2]")


class TestParseDocument:
    def test_sends_document_block(self):
        client = FakeAnthropic(reply=json.dumps(REPLY))
        parser = ProfileParser(client=client)

        profile = parser.parse_document(b"%PDF-1.4", "application/pdf")

        assert profile.email == "alex@example.com"
        document = client.calls[0]["messages"][0]["content"][0]
        assert document["type"] == "document"
        assert document["source"]["media_type"] == "application/pdf"
        assert base64.b64decode(document["source"]["data"]) == b"%PDF-1.4"

    def test_requires_client(self):
        with pytest.raises(ProfileParseError):
            ProfileParser().parse_document(b"data", "application/pdf")

    def test_service_error(self):
        error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
        parser = ProfileParser(client=FakeAnthropic(error=error))
        with pytest.raises(ProfileParseError):
            parser.parse_document(b"data", "application/pdf")


class TestParseFile:
    def test_json_profile_is_loaded_directly(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps(REPLY))
        client = FakeAnthropic()

        profile = ProfileParser(client=client).parse_file(str(path))

        assert profile.location == "Stockholm"
        assert client.calls == []

    def test_documents_go_to_the_service(self, tmp_path):
        path = tmp_path / "resume.pdf"
        path.write_bytes(b"%PDF")
        client = FakeAnthropic(reply=json.dumps(REPLY))

        ProfileParser(client=client).parse_file(str(path))

        assert client.calls[0]["messages"][0]["content"][0]["source"]["media_type"] == "application/pdf"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProfileParseError):
            ProfileParser().parse_file(str(tmp_path / "nope.pdf"))
