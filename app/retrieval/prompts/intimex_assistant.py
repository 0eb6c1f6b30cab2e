"""Prompts for the Intimex Đắk Mil assistant."""
from __future__ import annotations

from typing import Tuple

from app.retrieval.topics import Topic

DATA_INSTRUCTIONS = "\n".join(
    [
        "Bạn được cung cấp một phần dữ liệu nội bộ (dạng JSON rút gọn, đã lọc theo câu hỏi).",
        "- Nếu câu hỏi liên quan đến dữ liệu (họ tên, mã nhân viên, phòng ban, chức vụ, số điện thoại, "
        "tình trạng làm việc, thông tin công ty, quy trình, số liệu) thì hãy tra cứu TRONG dữ liệu này.",
        '- Nếu KHÔNG tìm thấy thông tin tương ứng, hãy trả lời rõ: "Không thấy dữ liệu tương ứng trong bảng." '
        "và KHÔNG được bịa.",
        "- Nếu dữ liệu được đánh dấu KHÔNG TẢI ĐƯỢC, hãy nói rằng hệ thống tạm thời chưa đọc được dữ liệu, "
        "không được khẳng định là thông tin không tồn tại.",
        "- Nếu câu hỏi không liên quan đến dữ liệu, có thể bỏ qua phần JSON và trả lời như một trợ lý bình thường.",
        '- Luôn trả lời bằng tiếng Việt, lịch sự, dễ hiểu. Xưng "Em" và gọi người dùng là "Anh/Chị".',
    ]
)

STALE_NOTE = "Lưu ý: không làm mới được dữ liệu, đây là bản lưu gần nhất và có thể đã cũ."
DOWNLOAD_NOTE = "Hệ thống đã tạo file tải về cho danh sách này; hãy nhắc người dùng bấm vào liên kết tải file."


def build_chat_prompt(
    *,
    base_prompt: str,
    question: str,
    topic: Topic,
    source_url: str,
    context: str,
    stale: bool = False,
    has_download: bool = False,
) -> Tuple[str, str]:
    """Return (instructions, user_content) for the completion call."""

    notes = [base_prompt.strip(), "", DATA_INSTRUCTIONS]
    if stale:
        notes.extend(["", STALE_NOTE])
    if has_download:
        notes.extend(["", DOWNLOAD_NOTE])
    instructions = "\n".join(notes)

    user = "\n".join(
        [
            "Câu hỏi của người dùng:",
            "",
            f'"{question}"',
            "",
            f"Chủ đề: {topic.label}",
            "",
            f"Dữ liệu (JSON rút gọn, đã lọc theo câu hỏi, lấy từ {source_url}):",
            "",
            context,
        ]
    )
    return instructions, user
