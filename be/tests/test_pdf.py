from datetime import date, datetime, timezone
from types import SimpleNamespace

from Planning.export import ExportSummary, PlanningRow, ProjectExport
from Planning.pdf_report import (
    DARK_STYLE, WRAP_WIDTH, build_report_lines, render_project_pdf, resolve_pdf_style, wrap_lines,
)


def sample_export(planning=None, long_title=False):
    project = SimpleNamespace(
        name="Portal Acme",
        objective="Novo portal " * (20 if long_title else 1),
        project_type_name="Website",
        project_category_name="Software",
        lifecycle_type="recorrente",
        active=True,
        start_date=date(2024, 1, 2),
        end_date=date(2024, 1, 25),
        has_monthly_maintenance=True,
        clients=[],
        revenues=[],
        monthly_charges=[
            SimpleNamespace(title="Hospedagem", amount=150.5, due_day=10, starts_on=None, ends_on=None, active=True),
        ],
    )
    summary = ExportSummary(project_percent=50, total_phases=1, total_tasks=2,
                            total_tracked_tasks=2, total_completed_tasks=1)
    return ProjectExport(project=project, summary=summary, planning=planning or [],
                         generated_at=datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc))


def row(row_id, level, kind, status="planejada"):
    return PlanningRow(id=row_id, parent_id="", level=level, kind=kind, phase_id="p1", title=row_id.upper(),
                       description="", starts_on=date(2024, 1, 2), ends_on=None, status=status,
                       progress_percent=50, position=0)


class TestPdfStyle:
    def test_defaults_and_whitelist(self):
        style = resolve_pdf_style(None, "comic-sans")
        assert style.theme == "light"
        assert style.font == "quicksand"

        dark = resolve_pdf_style(" DARK ", "Arima")
        assert dark.background == DARK_STYLE.background
        assert dark.font == "arima"


class TestReportLines:
    def test_sections_and_rows(self):
        export = sample_export([row("p1", 0, "phase", "iniciada"), row("s1", 1, "subphase"), row("t1", 2, "task")])
        lines = build_report_lines(export, resolve_pdf_style("dark", "ubuntu-sans"))

        assert lines[0] == "RELATORIO DO PROJETO"
        assert lines[2] == "Estilo do sistema: tema Escuro | fonte Ubuntu Sans"
        assert "Ciclo: Recorrente" in lines
        assert "Percentual concluido: 50%" in lines
        assert "Nenhum cliente vinculado." in lines
        assert "Nenhuma receita cadastrada." in lines
        assert any(line.startswith("- Hospedagem | valor: 150.50 | vencimento: dia 10") for line in lines)
        assert any(line.startswith("[F] P1 (FASE) | status: Iniciada | concluido: 50%") for line in lines)
        assert any(line.startswith("    [S] S1 (SUB-FASE)") for line in lines)
        assert any(line.startswith("        [T] T1 (TAREFA) | status: Planejada") for line in lines)

    def test_empty_planning(self):
        lines = build_report_lines(sample_export(), resolve_pdf_style())
        assert "Nenhuma fase/tarefa cadastrada." in lines

    def test_long_lines_are_wrapped(self):
        lines = build_report_lines(sample_export(long_title=True), resolve_pdf_style())
        assert all(len(line) <= WRAP_WIDTH for line in lines)

    def test_wrap_keeps_indentation(self):
        wrapped = wrap_lines(["    " + "palavra " * 30], 40)
        assert len(wrapped) > 1
        assert all(line.startswith("    ") for line in wrapped)


class TestRenderPdf:
    def test_renders_pdf_document(self):
        content = render_project_pdf(sample_export([row("p1", 0, "phase")] * 200), theme="dark")
        assert content.startswith(b"%PDF")
        assert content.rstrip().endswith(b"%%EOF")
