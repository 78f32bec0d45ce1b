"""
Query builder for the NEIS meal service
Turns a selected date into the API date token and the proxied request URL
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Union
from urllib.parse import quote, urlencode

from menu_calendar.errors import DateValidationError


NEIS_API_URL = "https://open.neis.go.kr/hub/mealServiceDietInfo"
PROXY_BASE = "https://api.allorigins.win/raw"

ATPT_OFCDC_SC_CODE = 'J10'  # Gyeonggi-do Office of Education
SD_SCHUL_CODE = '7530079'  # Sanbon High School

DATE_REQUIRED_MESSAGE = '날짜를 선택해주세요.'

WEEKDAY_NAMES = ['월요일', '화요일', '수요일', '목요일', '금요일', '토요일', '일요일']

# Same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class QueryDate:
    """A selected calendar day in its input and API forms"""
    day: date

    @property
    def iso(self) -> str:
        return self.day.isoformat()

    @property
    def token(self) -> str:
        return build_date_token(self.day)

    @property
    def long_label(self) -> str:
        return format_long_date(self.day)


def parse_query_date(value: Union[str, date, None]) -> QueryDate:
    """
    Read a date picker value

    Args:
        value: 'YYYY-MM-DD' string or a date

    Returns:
        QueryDate for the selected day

    Raises:
        DateValidationError: If nothing is selected or the value is not a date
    """
    if isinstance(value, datetime):
        return QueryDate(value.date())
    if isinstance(value, date):
        return QueryDate(value)

    if value is None or not value.strip():
        raise DateValidationError(DATE_REQUIRED_MESSAGE)

    try:
        return QueryDate(datetime.strptime(value.strip(), '%Y-%m-%d').date())
    except ValueError:
        raise DateValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_date_token(value: Union[str, date]) -> str:
    """Strip the separators from an ISO date: 2024-03-15 -> 20240315"""
    text = value.isoformat() if isinstance(value, date) else value
    return re.sub(r'[^0-9A-Za-z]', '', text)


def format_long_date(day: date) -> str:
    """Korean long date with weekday, e.g. 2024년 3월 15일 금요일"""
    return f"{day.year}년 {day.month}월 {day.day}일 {WEEKDAY_NAMES[day.weekday()]}"


def build_api_url(date_token: str,
                  office_code: str = ATPT_OFCDC_SC_CODE,
                  school_code: str = SD_SCHUL_CODE) -> str:
    """
    Build the upstream meal service URL

    Args:
        date_token: Compact YYYYMMDD date
        office_code: Provincial office of education code
        school_code: Standard school code

    Returns:
        NEIS API URL for that school and day
    """
    params = urlencode({
        'ATPT_OFCDC_SC_CODE': office_code,
        'SD_SCHUL_CODE': school_code,
        'MLSV_YMD': date_token,
    })
    return f"{NEIS_API_URL}?{params}"


def build_proxy_url(api_url: str, proxy_base: str = PROXY_BASE) -> str:
    """Wrap the upstream URL in the CORS relay"""
    return f"{proxy_base}?url={quote(api_url, safe=_URI_COMPONENT_SAFE)}"


def build_meal_query(value: Union[str, date, None], proxy_base: str = PROXY_BASE) -> Dict:
    """
    Build everything needed to request one day's menu

    Returns:
        Dict with 'date' (QueryDate), 'api_url' and 'proxy_url'
    """
    query_date = parse_query_date(value)
    api_url = build_api_url(query_date.token)
    return {
        'date': query_date,
        'api_url': api_url,
        'proxy_url': build_proxy_url(api_url, proxy_base),
    }
