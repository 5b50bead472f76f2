from openpyxl import load_workbook

from irlbrowse.export import export_results_to_xlsx
from irlbrowse.pagination import Paginator
from irlbrowse.render import (
    format_cards,
    format_page_bar,
    format_summary,
    human_from_row,
    plain_text,
    task_from_row,
)


def test_plain_text_strips_markup_and_truncates():
    assert plain_text("<p>Walk my <b>dog</b></p>\n<p>twice</p>") == "Walk my dog twice"
    assert plain_text(None) == ""

    long_text = plain_text("<div>" + "word " * 100 + "</div>", limit=20)
    assert len(long_text) <= 20
    assert long_text.endswith("…")


def test_task_from_row_handles_cents_and_remote():
    task = task_from_row({
        "id": 7,
        "title": " Pick up groceries ",
        "budget_cents": 2500,
        "is_remote": True,
        "description": "<p>Two bags</p>",
        "distance_km": "3.25",
    })

    assert task.task_id == "7"
    assert task.title == "Pick up groceries"
    assert task.budget == 25.0
    assert task.description == "Two bags"
    assert task.distance_km == 3.25

    line = format_cards([{"id": 7, "title": "Pick up groceries", "budget": 25, "is_remote": True}],
                        "tasks")[0]
    assert "Remote" in line
    assert "$25.00" in line


def test_human_from_row_defaults_rate():
    human = human_from_row({"id": "h1", "name": "Lan", "skills": ["Errands"], "city": "Hue"})

    assert human.hourly_rate == 25.0
    assert human.rating == 0.0
    line = format_cards([{"id": "h1", "name": "Lan", "skills": ["Errands"], "city": "Hue"}],
                        "humans")[0]
    assert line.startswith("Lan | Hue | $25/hr")


def test_page_bar_and_summary():
    paginator = Paginator(items_per_page=16)
    paginator.update_total(160)
    paginator.go_to_page(5)

    assert format_page_bar(paginator) == "1 … 4 [5] 6 … 10"
    assert format_summary(paginator, "tasks") == "Showing 65-80 of 160 tasks"
    assert format_summary(paginator, "tasks", shown=16) == "Showing 65-80 of 160 tasks"
    assert (format_summary(paginator, "humans", shown=3)
            == "Showing 3 matching humans from items 65-80 of 160")


def test_export_results_to_xlsx(tmp_path):
    rows = [
        {"id": "h1", "name": "Lan", "skills": ["Errands", "Photography"], "city": "Hue",
         "country": "Vietnam", "hourly_rate": 18, "rating": 4.8},
    ]

    export_path = export_results_to_xlsx(rows, tmp_path / "out" / "humans.xlsx", "humans")

    assert export_path.exists()
    worksheet = load_workbook(export_path).active
    headers = [cell.value for cell in next(worksheet.iter_rows(min_row=1, max_row=1))]
    assert headers[:3] == ["id", "name", "skills"]
    data_row = [cell.value for cell in next(worksheet.iter_rows(min_row=2, max_row=2))]
    assert data_row[0] == "h1"
    assert data_row[2] == "Errands, Photography"
    assert data_row[5] == 18
