"""
Meal menu view renderer
Shapes parsed meal entries into a view model and renders it as text or HTML
"""

import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from menu_calendar.meal_parser import MealEntry
from menu_calendar.query import QueryDate


TEMPLATE_DIR = Path(__file__).parent / 'templates'

NO_DATA_HEADING = '급식정보 없음'
NO_DATA_NOTE = ('선택하신 날짜에는 급식정보가 없습니다.', '주말이나 공휴일, 방학 기간일 수 있습니다.')
LOADING_MESSAGE = '급식정보를 불러오는 중...'
ERROR_MESSAGE = '급식정보를 불러오지 못했습니다. 잠시 후 다시 시도해주세요.'
CALORIE_LABEL = '칼로리'

# Allergen codes are appended to dish names as "<number>." markers
ALLERGEN_MARKER = re.compile(r'\d+\.')

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(['html']),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class MealSection:
    heading: str
    dishes: Tuple[str, ...]
    calories_line: str = ''


@dataclass(frozen=True)
class MenuView:
    """Everything a display needs to show one day's menu"""
    date_label: str
    sections: Tuple[MealSection, ...] = ()

    @property
    def has_data(self) -> bool:
        return bool(self.sections)


def clean_dish_name(raw: str) -> str:
    """Remove allergen markers: '12.Kimchi' -> 'Kimchi'"""
    return ALLERGEN_MARKER.sub('', raw).strip()


def build_section(entry: MealEntry) -> MealSection:
    dishes = tuple(name for name in (clean_dish_name(d) for d in entry.dishes) if name)
    calories_line = f"{CALORIE_LABEL}: {entry.calories}" if entry.calories else ''
    return MealSection(heading=entry.meal_type, dishes=dishes, calories_line=calories_line)


def build_menu_view(entries: Sequence[MealEntry], query_date: QueryDate) -> MenuView:
    """
    Build the view model for one day

    Args:
        entries: Parsed meal entries, in API order
        query_date: Day the entries were requested for

    Returns:
        MenuView with one section per entry; no sections means no data
    """
    return MenuView(
        date_label=query_date.long_label,
        sections=tuple(build_section(entry) for entry in entries),
    )


def render_text(view: MenuView) -> str:
    """Render a view for the terminal"""
    lines = [view.date_label, '=' * 40]

    if not view.has_data:
        lines.append(NO_DATA_HEADING)
        lines.extend(NO_DATA_NOTE)
        return '\n'.join(lines) + '\n'

    for section in view.sections:
        lines.append('')
        lines.append(f"[{section.heading}]")
        lines.extend(f"  - {dish}" for dish in section.dishes)
        if section.calories_line:
            lines.append(f"  {section.calories_line}")

    return '\n'.join(lines) + '\n'


def render_html(view: MenuView) -> str:
    """Render a view as the meal card HTML fragment"""
    template = _env.get_template('meal_card.html')
    return template.render(
        view=view,
        no_data_heading=NO_DATA_HEADING,
        no_data_note=NO_DATA_NOTE,
    )


def render_page(content_html: str, loading_visible: bool, content_visible: bool,
                error_visible: bool, date_value: str = '') -> str:
    """Render the full page shell around the meal card"""
    template = _env.get_template('page.html')
    return template.render(
        content_html=content_html,
        loading_visible=loading_visible,
        content_visible=content_visible,
        error_visible=error_visible,
        date_value=date_value,
        loading_message=LOADING_MESSAGE,
        error_message=ERROR_MESSAGE,
    )


class DisplayPort(ABC):
    """Where the pipeline puts its output and UI state"""

    @abstractmethod
    def show(self, view: MenuView):
        """Replace the content region with this view and make it visible"""

    @abstractmethod
    def show_loading(self):
        """Show the loading indicator and hide the content region"""

    @abstractmethod
    def show_error(self):
        """Show the error region; content is hidden and emptied"""

    @abstractmethod
    def clear(self):
        """Empty the content region and hide the error region"""

    def alert(self, message: str):
        """Blocking prompt for validation failures"""
        print(message)


class MemoryDisplay(DisplayPort):
    """
    Display that only tracks state

    Attributes mirror the page regions: the current view plus the
    visibility of the content, loading and error regions.
    """

    def __init__(self):
        self.content: Optional[MenuView] = None
        self.loading_visible = False
        self.content_visible = True
        self.error_visible = False
        self.alerts: List[str] = []

    def show(self, view: MenuView):
        self.content = view
        self.loading_visible = False
        self.content_visible = True
        self._changed()

    def show_loading(self):
        self.loading_visible = True
        self.content_visible = False
        self._changed()

    def show_error(self):
        self.content = None
        self.loading_visible = False
        self.content_visible = False
        self.error_visible = True
        self._changed()

    def clear(self):
        self.content = None
        self.error_visible = False
        self._changed()

    def alert(self, message: str):
        self.alerts.append(message)

    def _changed(self):
        """Hook for subclasses that mirror state somewhere visible"""


class TerminalDisplay(MemoryDisplay):
    """Prints the menu and status messages to a stream"""

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__()
        self.stream = stream or sys.stdout

    def show(self, view: MenuView):
        super().show(view)
        self.stream.write(render_text(view))

    def show_loading(self):
        super().show_loading()
        print(LOADING_MESSAGE, file=self.stream)

    def show_error(self):
        super().show_error()
        print(ERROR_MESSAGE, file=self.stream)

    def alert(self, message: str):
        super().alert(message)
        print(message, file=self.stream)


class HtmlPageDisplay(MemoryDisplay):
    """Keeps an HTML page on disk in sync with the display state"""

    def __init__(self, output_file: Path, date_value: str = ''):
        super().__init__()
        self.output_file = Path(output_file)
        self.date_value = date_value

    def render(self) -> str:
        content_html = render_html(self.content) if self.content is not None else ''
        return render_page(
            content_html,
            loading_visible=self.loading_visible,
            content_visible=self.content_visible,
            error_visible=self.error_visible,
            date_value=self.date_value,
        )

    def _changed(self):
        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_file, 'w', encoding='utf-8') as f:
            f.write(self.render())


class CompositeDisplay(DisplayPort):
    """Forwards every call to several displays"""

    def __init__(self, *displays: DisplayPort):
        self.displays = displays

    def show(self, view: MenuView):
        for display in self.displays:
            display.show(view)

    def show_loading(self):
        for display in self.displays:
            display.show_loading()

    def show_error(self):
        for display in self.displays:
            display.show_error()

    def clear(self):
        for display in self.displays:
            display.clear()

    def alert(self, message: str):
        for display in self.displays:
            display.alert(message)
