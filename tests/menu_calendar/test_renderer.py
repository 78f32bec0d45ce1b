"""
Tests for menu_calendar.renderer module
"""

import io

import pytest
from bs4 import BeautifulSoup

from menu_calendar.meal_parser import MealEntry
from menu_calendar.query import parse_query_date
from menu_calendar.renderer import (
    ERROR_MESSAGE,
    NO_DATA_HEADING,
    CompositeDisplay,
    HtmlPageDisplay,
    MealSection,
    MemoryDisplay,
    TerminalDisplay,
    build_menu_view,
    clean_dish_name,
    render_html,
    render_text,
)


QUERY_DATE = parse_query_date('2024-03-15')

ENTRIES = [
    MealEntry('조식', ('1.Rice', '  ', '2.Soup'), calories='', nutrition=''),
    MealEntry('중식', ('기장밥', '쇠고기미역국5.6.9.13.16.', '12.'), calories='812.3 Kcal'),
]


class TestCleanDishName:
    """Tests for allergen marker removal"""

    def test_leading_code(self):
        assert clean_dish_name('12.Kimchi') == 'Kimchi'

    def test_trailing_codes(self):
        assert clean_dish_name('쇠고기미역국5.6.9.13.16.') == '쇠고기미역국'

    @pytest.mark.parametrize('raw', ['  ', '12.', ' 1.2. '])
    def test_empty_after_cleaning(self, raw):
        assert clean_dish_name(raw) == ''


class TestBuildMenuView:
    """Tests for shaping entries into the view model"""

    def test_sections_in_order(self):
        view = build_menu_view(ENTRIES, QUERY_DATE)

        assert view.date_label == '2024년 3월 15일 금요일'
        assert view.has_data
        assert view.sections == (
            MealSection('조식', ('Rice', 'Soup'), ''),
            MealSection('중식', ('기장밥', '쇠고기미역국'), '칼로리: 812.3 Kcal'),
        )

    def test_no_entries(self):
        view = build_menu_view([], QUERY_DATE)

        assert not view.has_data
        assert view.sections == ()


class TestRenderHtml:
    """Tests for the meal card HTML"""

    def test_meal_sections(self):
        soup = BeautifulSoup(render_html(build_menu_view(ENTRIES, QUERY_DATE)), 'html.parser')

        assert soup.find('div', class_='date-info').get_text() == '2024년 3월 15일 금요일'
        assert [h.get_text() for h in soup.find_all('h3')] == ['조식', '중식']

        lists = soup.find_all('ul', class_='meal-list')
        assert [li.get_text() for li in lists[0].find_all('li')] == ['Rice', 'Soup']
        assert [li.get_text() for li in lists[1].find_all('li')] == ['기장밥', '쇠고기미역국']

        calories = soup.find_all('p', class_='calories')
        assert [p.get_text() for p in calories] == ['칼로리: 812.3 Kcal']

    def test_no_data_message(self):
        html = render_html(build_menu_view([], QUERY_DATE))
        soup = BeautifulSoup(html, 'html.parser')

        assert '2024년 3월 15일 금요일' in soup.get_text()
        assert soup.find('h2').get_text() == NO_DATA_HEADING
        assert '주말이나 공휴일, 방학 기간일 수 있습니다.' in soup.find('p', class_='instruction').get_text()
        assert soup.find('h3') is None
        assert soup.find('div', class_='meal-section') is None

    def test_dish_names_escaped(self):
        view = build_menu_view([MealEntry('중식', ('<b>밥</b>',))], QUERY_DATE)
        html = render_html(view)

        assert '<b>' not in html
        assert '&lt;b&gt;밥&lt;/b&gt;' in html

    def test_rendering_is_deterministic(self):
        first = render_html(build_menu_view(ENTRIES, QUERY_DATE))
        second = render_html(build_menu_view(list(ENTRIES), parse_query_date('2024-03-15')))

        assert first == second


class TestRenderText:
    """Tests for terminal output"""

    def test_meal_sections(self):
        text = render_text(build_menu_view(ENTRIES, QUERY_DATE))

        assert text.startswith('2024년 3월 15일 금요일\n')
        assert '[조식]\n  - Rice\n  - Soup\n' in text
        assert '  칼로리: 812.3 Kcal' in text

    def test_no_data(self):
        text = render_text(build_menu_view([], QUERY_DATE))

        assert NO_DATA_HEADING in text
        assert '[' not in text


class TestDisplayState:
    """Tests for loading/content/error visibility"""

    def test_loading_hides_content(self):
        display = MemoryDisplay()
        display.show_loading()

        assert display.loading_visible
        assert not display.content_visible

    def test_show_reveals_content(self):
        display = MemoryDisplay()
        view = build_menu_view(ENTRIES, QUERY_DATE)
        display.show_loading()
        display.show(view)

        assert display.content == view
        assert display.content_visible
        assert not display.loading_visible

    def test_error_drops_content(self):
        display = MemoryDisplay()
        display.show(build_menu_view(ENTRIES, QUERY_DATE))
        display.show_loading()
        display.show_error()

        assert display.error_visible
        assert not display.content_visible
        assert not display.loading_visible
        assert display.content is None

    def test_clear_hides_error(self):
        display = MemoryDisplay()
        display.show_error()
        display.clear()

        assert not display.error_visible
        assert display.content is None

    def test_terminal_display_prints(self):
        stream = io.StringIO()
        display = TerminalDisplay(stream)
        display.show(build_menu_view(ENTRIES, QUERY_DATE))
        display.show_error()
        display.alert('날짜를 선택해주세요.')

        output = stream.getvalue()
        assert '[중식]' in output
        assert ERROR_MESSAGE in output
        assert display.alerts == ['날짜를 선택해주세요.']

    def test_composite_forwards(self):
        first, second = MemoryDisplay(), MemoryDisplay()
        display = CompositeDisplay(first, second)
        display.show_loading()

        assert first.loading_visible and second.loading_visible


class TestHtmlPageDisplay:
    """Tests for the HTML page written to disk"""

    def test_content_page(self, tmp_path):
        output_file = tmp_path / 'out' / 'meal.html'
        display = HtmlPageDisplay(output_file, date_value='2024-03-15')
        display.show_loading()
        display.show(build_menu_view(ENTRIES, QUERY_DATE))

        soup = BeautifulSoup(output_file.read_text(encoding='utf-8'), 'html.parser')
        assert 'hidden' in soup.find(id='loading')['class']
        assert 'hidden' in soup.find(id='errorMessage')['class']
        assert 'hidden' not in soup.find(id='mealInfo')['class']
        assert soup.find(id='mealDate').get_text() == '2024-03-15'
        assert soup.find('input') is None
        assert soup.find('button') is None
        assert len(soup.find(id='mealInfo').find_all('h3')) == 2

    def test_error_page(self, tmp_path):
        output_file = tmp_path / 'meal.html'
        display = HtmlPageDisplay(output_file)
        display.show(build_menu_view(ENTRIES, QUERY_DATE))
        display.show_loading()
        display.show_error()

        soup = BeautifulSoup(output_file.read_text(encoding='utf-8'), 'html.parser')
        assert 'hidden' not in soup.find(id='errorMessage')['class']
        assert 'hidden' in soup.find(id='mealInfo')['class']
        assert soup.find(id='mealInfo').find('div', class_='meal-card') is None
