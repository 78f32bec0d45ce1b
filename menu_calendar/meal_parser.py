"""
NEIS meal response parser
Turns the mealServiceDietInfo XML payload into meal entries
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Tuple

from menu_calendar.errors import MealApiError, MealResponseError


SUCCESS_CODE = 'INFO-000'
DISH_SEPARATOR = '<br/>'


@dataclass(frozen=True)
class MealEntry:
    """One meal (breakfast, lunch, dinner) as served on the selected day"""
    meal_type: str
    dishes: Tuple[str, ...]
    calories: str = ''
    nutrition: str = ''


def _child_text(element: ET.Element, tag: str) -> str:
    """Text of the first descendant with this tag, or '' when absent"""
    child = element.find(f'.//{tag}')
    if child is None:
        return ''
    return child.text or ''


def split_dishes(dish_field: str) -> Tuple[str, ...]:
    """
    Split the DDISH_NM field into raw dish strings

    Allergen codes are left attached; fragments that are blank after
    trimming are dropped.
    """
    return tuple(dish for dish in dish_field.split(DISH_SEPARATOR) if dish.strip())


def check_result_code(root: ET.Element):
    """
    Raise unless the document carries the success result code

    Raises:
        MealResponseError: If there is no RESULT/CODE node
        MealApiError: If the code is not INFO-000
    """
    # root.iter includes the root itself; error-only responses use RESULT as root
    for result in root.iter('RESULT'):
        code = result.find('CODE')
        if code is not None:
            code_value = (code.text or '').strip()
            if code_value != SUCCESS_CODE:
                raise MealApiError(code_value, (result.findtext('MESSAGE') or '').strip())
            return

    raise MealResponseError("Response has no RESULT/CODE status")


def parse_meal_response(xml_text: str) -> List[MealEntry]:
    """
    Parse a meal service response

    Args:
        xml_text: Raw XML returned through the proxy

    Returns:
        Meal entries in the order the API returned them (empty when the
        API reports success without rows)

    Raises:
        MealResponseError: Malformed XML or missing status node
        MealApiError: API reported an error or no-data code
    """
    try:
        root = ET.fromstring(xml_text.lstrip('\ufeff \t\r\n'))
    except ET.ParseError as e:
        raise MealResponseError(f"Malformed XML response: {e}")

    check_result_code(root)

    entries = []
    for row in root.iter('row'):
        dish_field = _child_text(row, 'DDISH_NM')
        if not dish_field:
            continue

        entries.append(MealEntry(
            meal_type=_child_text(row, 'MMEAL_SC_NM'),
            dishes=split_dishes(dish_field),
            calories=_child_text(row, 'CAL_INFO'),
            nutrition=_child_text(row, 'NTR_INFO'),
        ))

    return entries
