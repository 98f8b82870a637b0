"""User-facing messages for declined operations, keyed by issue code.

Authored bilingually; ``message_for`` returns the Korean half.
"""

from __future__ import annotations

from trip_expenses.shared.text import format_bilingual_text

MESSAGES: dict[str, str] = {
    "missing_location": "출발지와 도착지를 모두 입력해주세요 (Please enter both departure and destination)",
    "same_location": "출발지와 도착지가 같습니다 (Departure and destination are the same)",
    "credentials_missing": (
        "Naver Map API 인증 정보가 설정되지 않아 예시 경로를 표시합니다. "
        "(Naver Map API credentials are not configured; showing sample routes.)"
    ),
    "no_route": "경로를 찾을 수 없습니다. 위치를 확인해주세요. (No routes found. Please check your locations.)",
    "zero_total": "총액이 0원인 항목은 저장할 수 없습니다 (An entry with a zero total cannot be saved)",
    "missing_author": "작성자를 입력해주세요. (Please enter author name)",
    "missing_dates": "기간을 선택해주세요. (Please select date range)",
    "invalid_range": "시작일이 종료일보다 늦을 수 없습니다. (Start date cannot be later than end date)",
    "invalid_date": "날짜는 YYYY-MM-DD 형식이어야 합니다 (Dates must be YYYY-MM-DD)",
    "not_found": "항목을 찾을 수 없습니다 (Entry not found)",
}


def message_for(code: str) -> str:
    return format_bilingual_text(MESSAGES.get(code, code))
