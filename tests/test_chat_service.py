"""Tests for the retrieval + generation pipeline."""
from __future__ import annotations

import pytest

from app.core.assistant_profile import AssistantProfile
from app.retrieval.context import UNAVAILABLE_CONTEXT
from app.retrieval.dataset_cache import DatasetCache
from app.retrieval.export import ExportWriter
from app.retrieval.topics import Topic
from app.services.chat_service import FALLBACK_REPLY, ChatService

SOURCES = {"personnel": "https://example.test/hr.csv", "company": "https://example.test/company.csv"}


class StubFetch:
    def __init__(self, rows_by_url, fail: bool = False) -> None:
        self.rows_by_url = rows_by_url
        self.fail = fail
        self.calls: list[str] = []

    async def __call__(self, url: str):
        self.calls.append(url)
        if self.fail:
            raise ConnectionError("unreachable")
        return list(self.rows_by_url.get(url, []))


class StubGate:
    def __init__(self, reply: str = "Dạ, em gửi Anh/Chị thông tin.") -> None:
        self.reply = reply
        self.calls: list[dict] = []

    async def complete(self, instructions, user_content, *, model=None, temperature=0.2, max_tokens=800):
        self.calls.append(
            {
                "instructions": instructions,
                "user_content": user_content,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        return self.reply


class BrokenWriter:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def write(self, rows, *, prefix="export"):
        raise self.error


def _service(tmp_path, personnel_rows, company_rows, *, fail=False, gate=None, writer=None):
    fetch = StubFetch({SOURCES["personnel"]: personnel_rows, SOURCES["company"]: company_rows}, fail=fail)
    service = ChatService(
        dataset_cache=DatasetCache(fetch, SOURCES, clock=lambda: 0.0),
        completion_gate=gate or StubGate(),
        export_writer=writer or ExportWriter(tmp_path),
        profile=AssistantProfile(model="gpt-test", temperature=0.3, max_output_tokens=321),
    )
    return service, fetch


@pytest.mark.asyncio
async def test_department_question_uses_only_matching_rows(tmp_path, personnel_rows, company_rows):
    gate = StubGate()
    service, fetch = _service(tmp_path, personnel_rows, company_rows, gate=gate)

    result = await service.answer("Cho tôi danh sách nhân viên phòng kinh doanh", device_id="dev-1")

    assert result.topic is Topic.PERSONNEL
    assert [row["Mã NV"] for row in result.rows_used] == ["NV001", "NV003"]
    assert result.device_id == "dev-1"
    assert result.model == "gpt-test"
    assert fetch.calls == [SOURCES["personnel"]]

    call = gate.calls[0]
    assert call["model"] == "gpt-test"
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 321
    assert "NV001" in call["user_content"] and "NV003" in call["user_content"]
    assert "NV002" not in call["user_content"]
    assert "Chủ đề: Nhân sự" in call["user_content"]
    assert SOURCES["personnel"] in call["user_content"]

    # filtered list: only the matching rows are exported
    assert result.download_url is not None
    exported = (tmp_path / result.download_url.rsplit("/", 1)[-1]).read_text(encoding="utf-8-sig")
    assert "NV001" in exported and "NV003" in exported
    assert "NV002" not in exported


@pytest.mark.asyncio
async def test_full_list_request_exports_every_row(tmp_path, personnel_rows, company_rows):
    service, _ = _service(tmp_path, personnel_rows, company_rows)

    result = await service.answer("Xuất tất cả nhân viên ra file")

    assert result.download_url is not None
    exported = (tmp_path / result.download_url.rsplit("/", 1)[-1]).read_text(encoding="utf-8-sig")
    for row in personnel_rows:
        assert row["Mã NV"] in exported


@pytest.mark.asyncio
async def test_plain_question_has_no_download(tmp_path, personnel_rows, company_rows):
    gate = StubGate()
    service, fetch = _service(tmp_path, personnel_rows, company_rows, gate=gate)

    result = await service.answer("Giới thiệu về công ty Intimex")

    assert result.topic is Topic.OVERVIEW
    assert result.download_url is None
    assert fetch.calls == [SOURCES["company"]]
    assert "Intimex Đắk Mil" in gate.calls[0]["user_content"]
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_unavailable_dataset_is_stated_in_prompt(tmp_path, personnel_rows, company_rows):
    gate = StubGate()
    service, _ = _service(tmp_path, personnel_rows, company_rows, fail=True, gate=gate)

    result = await service.answer("Danh sách nhân viên phòng kế toán")

    assert result.rows_used == []
    assert result.download_url is None
    assert UNAVAILABLE_CONTEXT in gate.calls[0]["user_content"]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [OSError("disk full"), KeyError("Mã NV"), RuntimeError("pandas blew up")])
async def test_export_failure_does_not_fail_the_answer(tmp_path, personnel_rows, company_rows, caplog, error):
    service, _ = _service(tmp_path, personnel_rows, company_rows, writer=BrokenWriter(error))

    result = await service.answer("Danh sách nhân viên phòng kinh doanh")

    assert result.download_url is None
    assert result.reply
    assert "Export of" in caplog.text


@pytest.mark.asyncio
async def test_empty_model_reply_uses_fallback(tmp_path, personnel_rows, company_rows):
    service, _ = _service(tmp_path, personnel_rows, company_rows, gate=StubGate(reply=""))

    result = await service.answer("Quy trình xin nghỉ phép như thế nào?")

    assert result.topic is Topic.PROCEDURES
    assert result.reply == FALLBACK_REPLY
