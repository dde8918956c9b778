"""
Tests for the CLI, run against the bundled mock data.
"""

from typer.testing import CliRunner

from venueslots.cli.app import app

runner = CliRunner()


def _mock_args(tmp_path):
    return ["--mock", "--config", str(tmp_path / "absent.yaml")]


def test_gaps_command(tmp_path):
    result = runner.invoke(app, ["gaps", "room-a", "--date", "2025-03-03", *_mock_args(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "08:00 – 09:00" in result.output
    assert "11:00 – 15:00" in result.output
    assert "16:00 – 17:00" in result.output


def test_gaps_by_place_name(tmp_path):
    result = runner.invoke(app, ["gaps", "Main Hall", "--date", "2025-03-05", *_mock_args(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "09:00 – 12:00" in result.output
    assert "14:00 – 21:00" in result.output


def test_gaps_unknown_place(tmp_path):
    result = runner.invoke(app, ["gaps", "attic", "--date", "2025-03-03", *_mock_args(tmp_path)])

    assert result.exit_code == 1
    assert "Unknown place" in result.output


def test_places_command(tmp_path):
    result = runner.invoke(app, ["places", "--date", "2025-03-03", *_mock_args(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "room-a" in result.output
    assert "hall-1" in result.output
    assert "studio" not in result.output


def test_slots_command(tmp_path):
    result = runner.invoke(
        app, ["slots", "room-a", "16:00 - 17:00", "--date", "2025-03-03", *_mock_args(tmp_path)]
    )

    assert result.exit_code == 0, result.output
    assert "16:00, 16:30" in result.output


def test_slots_end_times(tmp_path):
    result = runner.invoke(
        app,
        ["slots", "room-a", "16:00 - 17:00", "--start", "16:00", "--date", "2025-03-03", *_mock_args(tmp_path)],
    )

    assert result.exit_code == 0, result.output
    assert "16:30, 17:00" in result.output


def test_serving_command():
    result = runner.invoke(app, ["serving", "10:00", "11:00"])

    assert result.exit_code == 0, result.output
    assert "10:00, 10:15, 10:30, 10:45" in result.output


def test_book_conflict(tmp_path):
    result = runner.invoke(
        app,
        [
            "book", "room-a",
            "--date", "2025-03-03",
            "--start", "10:30",
            "--end", "11:30",
            "--title", "Clash",
            *_mock_args(tmp_path),
        ],
    )

    assert result.exit_code == 1
    assert "no longer available" in result.output


def test_book_free_slot(tmp_path):
    result = runner.invoke(
        app,
        [
            "book", "room-a",
            "--date", "2025-03-03",
            "--start", "11:00",
            "--end", "12:00",
            "--title", "Sync",
            "--participant", "a@example.com",
            *_mock_args(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "mock-1" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "venueslots" in result.output
