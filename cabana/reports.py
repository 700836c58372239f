import io
from decimal import Decimal
from xml.sax.saxutils import escape

from django.db.models import Sum
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .models import CustoFesta, CustoGeral, Orcamento

ZERO = Decimal('0.00')


def financial_summary():
    receitas = CustoGeral.objects.filter(tipo=CustoGeral.TIPO_RECEITA).aggregate(total=Sum('valor')).get('total') or ZERO
    despesas = CustoGeral.objects.filter(tipo=CustoGeral.TIPO_DESPESA).aggregate(total=Sum('valor')).get('total') or ZERO
    custos_festas = CustoFesta.objects.aggregate(total=Sum('valor')).get('total') or ZERO
    return {
        'receitas': receitas,
        'despesas': despesas,
        'custos_festas': custos_festas,
        'saldo': receitas - despesas - custos_festas,
    }


def _table_style(font_size=9):
    return TableStyle(
        [
            ('GRID', (0, 0), (-1, -1), 0.35, colors.lightgrey),
            ('BACKGROUND', (0, 0), (-1, 0), colors.whitesmoke),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), font_size),
        ]
    )


def build_financial_report_pdf():
    """Render the ledger summary, ledger entries and scheduled parties as an A4 PDF."""
    summary = financial_summary()
    lancamentos = CustoGeral.objects.all().order_by('-data')
    festas = Orcamento.objects.exclude(status_agenda__isnull=True).order_by('data_festa')

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=1.2 * cm,
        leftMargin=1.2 * cm,
        topMargin=1.2 * cm,
        bottomMargin=1.2 * cm,
    )
    styles = getSampleStyleSheet()
    elements = [
        Paragraph('Relatorio Financeiro - Cabana de Brincar', styles['Title']),
        Paragraph(f'Gerado em: {timezone.localtime(timezone.now()).strftime("%d/%m/%Y %H:%M")}', styles['Normal']),
        Spacer(1, 10),
    ]

    summary_table = Table(
        [
            ['Receitas', f'R$ {summary["receitas"]:.2f}', 'Despesas', f'R$ {summary["despesas"]:.2f}'],
            ['Custos das festas', f'R$ {summary["custos_festas"]:.2f}', 'Saldo', f'R$ {summary["saldo"]:.2f}'],
        ],
        colWidths=[4.2 * cm, 4.2 * cm, 4.2 * cm, 4.2 * cm],
    )
    summary_table.setStyle(_table_style(font_size=10))
    elements.extend([summary_table, Spacer(1, 14)])

    elements.append(Paragraph('Lancamentos', styles['Heading2']))
    if not lancamentos.exists():
        elements.append(Paragraph('Nenhum lancamento cadastrado.', styles['Normal']))
    else:
        rows = [['Data', 'Tipo', 'Descricao', 'Categoria', 'Valor']]
        for lancamento in lancamentos:
            rows.append(
                [
                    timezone.localtime(lancamento.data).strftime('%d/%m/%Y'),
                    lancamento.get_tipo_display(),
                    Paragraph(escape(lancamento.descricao), styles['BodyText']),
                    lancamento.categoria or '-',
                    f'R$ {lancamento.valor:.2f}',
                ]
            )
        table = Table(rows, repeatRows=1, colWidths=[2.4 * cm, 2.2 * cm, 7.6 * cm, 2.8 * cm, 2.6 * cm])
        table.setStyle(_table_style())
        elements.append(table)

    elements.extend([Spacer(1, 14), Paragraph('Festas agendadas e concluidas', styles['Heading2'])])
    if not festas.exists():
        elements.append(Paragraph('Nenhuma festa agendada.', styles['Normal']))
    else:
        rows = [['Pedido', 'Cliente', 'Data', 'Agenda', 'Pagamento', 'Total']]
        for order in festas:
            rows.append(
                [
                    f'#{order.id}',
                    order.nome,
                    order.data_festa.strftime('%d/%m/%Y') if order.data_festa else '-',
                    order.get_status_agenda_display(),
                    order.get_status_pagamento_display(),
                    f'R$ {order.total_a_pagar:.2f}',
                ]
            )
        table = Table(rows, repeatRows=1, colWidths=[1.8 * cm, 5.4 * cm, 2.4 * cm, 2.6 * cm, 2.8 * cm, 2.6 * cm])
        table.setStyle(_table_style())
        elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
