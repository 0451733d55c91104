"""
Project PDF report.

Renders the planning export as a text-only A4 report with reportlab: project
fields, summary, clients, revenues, monthly charges and the planning rows
indented by level. Two themes (light, dark) are supported; the font choice
is recorded in the report header and rendered with Helvetica.
"""

import io
import textwrap
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from Planning.export import ProjectExport

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_X = 36.0
MARGIN_TOP = 40.0
LINE_HEIGHT = 13.0
FONT_SIZE = 10.0
WRAP_WIDTH = 108

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

REPORT_TITLE = "RELATORIO DO PROJETO"
SECTION_HEADINGS = (
    "RESUMO",
    "CLIENTES",
    "RECEITAS",
    "COBRANCAS MENSAIS",
    "PLANEJAMENTO (FASES, SUB-FASES E TAREFAS)",
)

DEFAULT_FONT = "quicksand"
FONT_LABELS = {
    "quicksand": "Quicksand",
    "metrophobic": "Metrophobic",
    "parkinsans": "Parkinsans",
    "antic": "Antic",
    "ubuntu-sans": "Ubuntu Sans",
    "anaheim": "Anaheim",
    "arima": "Arima",
    "bellota": "Bellota",
}

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class PdfStyle:
    theme: str
    font: str
    background: Color
    heading: Color
    body: Color
    muted: Color


LIGHT_STYLE = PdfStyle("light", DEFAULT_FONT, (1.0, 1.0, 1.0), (0.129, 0.306, 0.569),
                       (0.122, 0.176, 0.255), (0.318, 0.396, 0.478))
DARK_STYLE = PdfStyle("dark", DEFAULT_FONT, (0.071, 0.094, 0.133), (0.608, 0.741, 0.949),
                      (0.925, 0.941, 0.965), (0.745, 0.788, 0.839))

TASK_STATUS_LABELS = {
    "concluida": "Concluida",
    "iniciada": "Iniciada",
    "cancelada": "Cancelada",
    "planejada": "Planejada",
}
REVENUE_STATUS_LABELS = {"recebido": "Recebido", "cancelado": "Cancelado"}
KIND_LABELS = {"phase": ("F", "FASE"), "subphase": ("S", "SUB-FASE"), "task": ("T", "TAREFA")}


def resolve_pdf_style(theme=None, font=None) -> PdfStyle:
    base = DARK_STYLE if (theme or "").strip().lower() == "dark" else LIGHT_STYLE
    font = (font or "").strip().lower()
    if font not in FONT_LABELS:
        font = DEFAULT_FONT
    return PdfStyle(base.theme, font, base.background, base.heading, base.body, base.muted)


def _text(value) -> str:
    return str(value).strip() if value is not None and str(value).strip() else "-"


def _date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"


def _active(value) -> str:
    return "Ativo" if value else "Inativo"


def build_report_lines(export: ProjectExport, style: PdfStyle) -> List[str]:
    project = export.project
    summary = export.summary
    generated_at = export.generated_at or datetime.now(timezone.utc)

    lines = [
        REPORT_TITLE,
        f"Gerado em: {generated_at.astimezone().strftime('%d/%m/%Y %H:%M:%S')}",
        f"Estilo do sistema: tema {'Escuro' if style.theme == 'dark' else 'Claro'} | fonte {FONT_LABELS[style.font]}",
        "",
        f"Projeto: {_text(project.name)}",
        f"Objetivo: {_text(project.objective)}",
        f"Tipo: {_text(project.project_type_name)} ({_text(project.project_category_name)})",
        f"Ciclo: {'Recorrente' if project.lifecycle_type == 'recorrente' else 'Temporario'}",
        f"Status: {_active(project.active)}",
        f"Periodo: {_date(project.start_date)} ate {_date(project.end_date)}",
        f"Manutencao mensal: {'Sim' if project.has_monthly_maintenance else 'Nao'}",
        "",
        "RESUMO",
        f"Percentual concluido: {summary.project_percent}%",
        f"Fases: {summary.total_phases} | Tarefas: {summary.total_tasks} | "
        f"Tarefas rastreadas: {summary.total_tracked_tasks} | Concluidas: {summary.total_completed_tasks}",
        "",
        "CLIENTES",
    ]

    if not project.clients:
        lines.append("Nenhum cliente vinculado.")
    for client in project.clients:
        lines.append(f"- {_text(client.name)} | {_text(client.email)} | {_text(client.login)} | papel: {_text(client.role)}")

    lines += ["", "RECEITAS"]
    if not project.revenues:
        lines.append("Nenhuma receita cadastrada.")
    for revenue in project.revenues:
        lines.append(
            f"- {_text(revenue.title)} | valor: {revenue.amount:.2f} | "
            f"status: {REVENUE_STATUS_LABELS.get(revenue.status, 'Pendente')} | "
            f"prevista: {_date(revenue.expected_on)} | recebida: {_date(revenue.received_on)}"
        )
        if not revenue.receipts:
            lines.append("  comprovantes: nenhum")
        for receipt in revenue.receipts:
            lines.append(f"  comprovante: {_text(receipt.file_name)} | {_text(receipt.content_type)} | "
                         f"{_date(receipt.issued_on)}")

    lines += ["", "COBRANCAS MENSAIS"]
    if not project.monthly_charges:
        lines.append("Nenhuma cobranca mensal cadastrada.")
    for charge in project.monthly_charges:
        lines.append(
            f"- {_text(charge.title)} | valor: {charge.amount:.2f} | vencimento: dia {charge.due_day} | "
            f"inicio: {_date(charge.starts_on)} | fim: {_date(charge.ends_on)} | status: {_active(charge.active)}"
        )

    lines += ["", "PLANEJAMENTO (FASES, SUB-FASES E TAREFAS)"]
    if not export.planning:
        lines.append("Nenhuma fase/tarefa cadastrada.")
    for row in export.planning:
        indent = "    " * max(row.level, 0)
        icon, kind = KIND_LABELS.get(row.kind, KIND_LABELS["task"])
        lines.append(
            f"{indent}[{icon}] {_text(row.title)} ({kind}) | "
            f"status: {TASK_STATUS_LABELS.get(row.status, 'Planejada')} | concluido: {row.progress_percent}% | "
            f"inicio: {_date(row.starts_on)} | fim: {_date(row.ends_on)}"
        )
        for attachment in row.files:
            lines.append(f"{indent}    - arquivo: {_text(attachment.file_name)} | chave: {_text(attachment.file_key)}")

    return wrap_lines(lines, WRAP_WIDTH)


def wrap_lines(lines: List[str], width: int) -> List[str]:
    wrapped = []
    for line in lines:
        if len(line) <= width or not line.strip():
            wrapped.append(line)
            continue
        indent = line[:len(line) - len(line.lstrip(" "))]
        wrapped += textwrap.wrap(line.strip(), width=width, initial_indent=indent, subsequent_indent=indent,
                                 break_long_words=False, break_on_hyphens=False)
    return wrapped


def _line_style(index: int, line: str, style: PdfStyle):
    if index == 0:
        return BOLD_FONT, 16.0, style.heading
    if line.strip().upper() in SECTION_HEADINGS:
        return BOLD_FONT, 11.0, style.heading
    lowered = line.lower()
    if lowered.startswith("gerado em:") or lowered.startswith("estilo do sistema:"):
        return REGULAR_FONT, 9.0, style.muted
    return REGULAR_FONT, FONT_SIZE, style.body


def render_project_pdf(export: ProjectExport, theme=None, font=None) -> bytes:
    style = resolve_pdf_style(theme, font)
    lines = build_report_lines(export, style) or ["Relatorio vazio."]
    lines_per_page = max(1, int((PAGE_HEIGHT - MARGIN_TOP - MARGIN_X) // LINE_HEIGHT))

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"{export.project.name} - planejamento")

    for start in range(0, len(lines), lines_per_page):
        pdf.setFillColorRGB(*style.background)
        pdf.rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT, stroke=0, fill=1)
        y = PAGE_HEIGHT - MARGIN_TOP
        for offset, line in enumerate(lines[start:start + lines_per_page]):
            font_name, font_size, color = _line_style(start + offset, line, style)
            pdf.setFont(font_name, font_size)
            pdf.setFillColorRGB(*color)
            pdf.drawString(MARGIN_X, y, line)
            y -= LINE_HEIGHT
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()
