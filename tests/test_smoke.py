"""Smoke tests for the roster PDF and the command line."""

from datetime import date

import pytest

from storeshift.cli import build_parser, main
from storeshift.output.pdf_generator import PDFGenerator
from storeshift.persistence.repository import ScheduleRepository
from storeshift.persistence.tables import create_db_engine, create_session_factory, init_database
from storeshift.service.requests import AutoAssignRequest


class TestPDFGenerator:
    """End-to-end rendering of a scheduled week."""

    def test_roster_buffer_is_pdf(self, service, store):
        service.auto_assign(AutoAssignRequest(store, date(2024, 6, 3), date(2024, 6, 9)))
        service.mark_unavailable(store, "m2", date(2024, 6, 4))
        service.mark_unavailable(store, "m3", date(2024, 6, 6), start_time="08:00", end_time="12:00")
        snapshot = service.week_snapshot(store, date(2024, 6, 5))

        buffer = PDFGenerator().generate_to_buffer(snapshot, date(2024, 6, 5))

        assert buffer.read(4) == b"%PDF"

    def test_empty_week_renders(self, service, store, tmp_path):
        output = tmp_path / "empty.pdf"
        PDFGenerator().generate(service.week_snapshot(store, "2024-06-03"), date(2024, 6, 3), output)
        assert output.read_bytes().startswith(b"%PDF")


class TestCLI:
    """Tests for the storeshift command line."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "storeshift" in capsys.readouterr().out

    def test_parser_requires_store(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["auto-assign", "--from", "2024-06-03", "--to", "2024-06-09"])

    def test_demo_with_pdf(self, tmp_path, capsys):
        output = tmp_path / "roster.pdf"
        code = main(
            ["--database-url", f"sqlite:///{tmp_path / 'demo.db'}", "demo", "--count", "4", "--output", str(output)]
        )

        assert code == 0
        out = capsys.readouterr().out
        assert "Assignments created: 14" in out
        assert output.read_bytes().startswith(b"%PDF")

    def test_unknown_store_reports_error(self, tmp_path, capsys):
        code = main(
            [
                "--database-url", f"sqlite:///{tmp_path / 'cli.db'}",
                "copy-week", "--store", "nope", "--source", "2024-06-03", "--target", "2024-06-10",
            ]
        )
        assert code == 1
        assert "not found" in capsys.readouterr().err

    def test_bad_date_reports_error(self, tmp_path, capsys):
        code = main(
            [
                "--database-url", f"sqlite:///{tmp_path / 'cli.db'}",
                "auto-assign", "--store", "s1", "--from", "June 3", "--to", "2024-06-09",
            ]
        )
        assert code == 1
        assert "date_from" in capsys.readouterr().err

    def test_unavailable_window_and_listing(self, tmp_path, capsys):
        url = f"sqlite:///{tmp_path / 'avail.db'}"
        engine = create_db_engine(url)
        init_database(engine)
        with create_session_factory(engine).begin() as session:
            repo = ScheduleRepository(session)
            repo.add_store("Kiosk", store_id="k1")
            repo.add_member("k1", "Dana", member_id="d1")
        engine.dispose()

        base = ["--database-url", url]
        assert main(base + [
            "unavailable", "--store", "k1", "--member", "d1", "--date", "2024-06-04",
            "--start", "10:00", "--end", "14:00", "--reason", "class",
        ]) == 0
        assert main(base + ["list-unavailable", "--store", "k1", "--from", "2024-06-03", "--to", "2024-06-09"]) == 0

        out = capsys.readouterr().out
        assert "marked unavailable on 2024-06-04 (10:00-14:00)" in out
        assert "2024-06-04  d1  10:00-14:00  class" in out
        assert "1 record(s)" in out

    def test_unavailable_half_window_reports_error(self, tmp_path, capsys):
        url = f"sqlite:///{tmp_path / 'avail.db'}"
        code = main(
            ["--database-url", url, "unavailable", "--store", "k1", "--member", "d1", "--date", "2024-06-04", "--start", "10:00"]
        )
        assert code == 1
        assert "start_time and end_time" in capsys.readouterr().err
