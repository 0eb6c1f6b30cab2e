"""Shared fixtures: a small personnel table shaped like the exported sheet."""
from __future__ import annotations

import pytest


def _person(code: str, name: str, department: str, title: str, status: str = "Đang làm") -> dict[str, str]:
    return {
        "Mã NV": code,
        "Họ và tên": name,
        "Phòng ban": department,
        "Chức vụ": title,
        "Số điện thoại": f"0905{code[-3:]}000",
        "Tình trạng": status,
    }


@pytest.fixture
def personnel_rows() -> list[dict[str, str]]:
    return [
        _person("NV001", "Nguyễn Văn An", "Phòng Kinh doanh", "Trưởng phòng"),
        _person("NV002", "Trần Thị Bình", "Phòng Kế toán", "Kế toán viên"),
        _person("NV003", "Lê Văn Cường", "Phòng Kinh doanh", "Nhân viên kinh doanh"),
        _person("NV004", "Phạm Thị Dung", "Ban Giám đốc", "Giám đốc"),
        _person("NV005", "Hoàng Văn Em", "Phòng Kỹ thuật", "Phó phòng", status="Đã nghỉ việc"),
    ]


@pytest.fixture
def company_rows() -> list[dict[str, str]]:
    return [
        {"Mục": "Tên công ty", "Nội dung": "Công ty TNHH Intimex Đắk Mil"},
        {"Mục": "Lĩnh vực", "Nội dung": "Thu mua, chế biến và xuất khẩu cà phê"},
        {"Mục": "Địa chỉ", "Nội dung": "Thị trấn Đắk Mil, tỉnh Đắk Nông"},
    ]
