"""
Reporting and Export Module for Shift Form Workflow

Exports the shift store to PDF, Excel and CSV, with a per-role and
per-status summary.
"""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
import logging

from .data_manager import DataManager, ROLE_OPTIONS, STATUS_OPTIONS

logger = logging.getLogger(__name__)

SHIFT_COLUMNS = ['Date', 'Employee', 'Role', 'Time', 'Start', 'End', 'Status']

# Tailwind color token -> report color
ROLE_REPORT_COLORS = {
    "bg-blue-500": colors.HexColor("#3B82F6"),
    "bg-purple-500": colors.HexColor("#A855F7"),
    "bg-yellow-500": colors.HexColor("#EAB308"),
    "bg-red-500": colors.HexColor("#EF4444"),
}


class ReportGenerator:
    """Builds shift reports from the data manager"""

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        self.styles = getSampleStyleSheet()
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=18,
            spaceAfter=20,
            alignment=1  # Center alignment
        ))

    def _create_shift_dataframe(self, date_str: Optional[str] = None) -> pd.DataFrame:
        shifts = sorted(self.data_manager.get_shifts(date_str), key=lambda s: (s.date, s.start_time))
        rows = [{
            'Date': s.date,
            'Employee': s.employee_name,
            'Role': s.role,
            'Time': s.time_range,
            'Start': s.start_time,
            'End': s.end_time,
            'Status': s.status,
        } for s in shifts]
        return pd.DataFrame(rows, columns=SHIFT_COLUMNS)

    def _create_summary_dataframe(self, shift_df: pd.DataFrame) -> pd.DataFrame:
        """Shift counts per role, one column per status"""
        summary = pd.crosstab(shift_df['Role'], shift_df['Status']) if not shift_df.empty else pd.DataFrame()
        summary = summary.reindex(index=list(ROLE_OPTIONS), columns=STATUS_OPTIONS, fill_value=0)
        summary['Total'] = summary.sum(axis=1)
        return summary.rename_axis(index='Role', columns=None).reset_index()

    def export_shifts_pdf(self, output_path: str, date_str: Optional[str] = None) -> bool:
        try:
            doc = SimpleDocTemplate(
                output_path,
                pagesize=landscape(A4),
                rightMargin=0.5*inch,
                leftMargin=0.5*inch,
                topMargin=0.5*inch,
                bottomMargin=0.5*inch
            )

            title_text = f"Shift Schedule - {date_str}" if date_str else "Shift Schedule"
            story = [Paragraph(title_text, self.styles['CustomTitle']), Spacer(1, 12)]

            shift_df = self._create_shift_dataframe(date_str)
            story.append(self._create_shift_table(shift_df, date_str))
            story.append(Spacer(1, 20))

            summary_df = self._create_summary_dataframe(shift_df)
            story.append(self._create_plain_table(summary_df))

            doc.build(story)
            return True

        except Exception as e:
            logger.error(f"Error creating PDF: {e}", exc_info=True)
            return False

    def _create_shift_table(self, shift_df: pd.DataFrame, date_str: Optional[str]) -> Table:
        columns = ['Employee', 'Role', 'Time', 'Status'] if date_str else ['Date', 'Employee', 'Role', 'Time', 'Status']
        data = [columns] + shift_df[columns].values.tolist()
        if len(data) == 1:
            data.append(['No shifts'] + [''] * (len(columns) - 1))

        table = Table(data, repeatRows=1)
        style = [
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#366092")),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
        ]

        # Tint the role cell with the role color
        role_col = columns.index('Role')
        for row, role in enumerate(shift_df['Role'].tolist(), start=1):
            color = ROLE_REPORT_COLORS.get(ROLE_OPTIONS.get(role, ""))
            if color is not None:
                style.append(('BACKGROUND', (role_col, row), (role_col, row), color))

        table.setStyle(TableStyle(style))
        return table

    def _create_plain_table(self, df: pd.DataFrame) -> Table:
        data = [list(df.columns)] + df.values.tolist()
        table = Table(data)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
        ]))
        return table

    def export_shifts_excel(self, output_path: str, date_str: Optional[str] = None) -> bool:
        try:
            shift_df = self._create_shift_dataframe(date_str)
            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                shift_df.to_excel(writer, sheet_name='Shifts', index=False)
                self._create_summary_dataframe(shift_df).to_excel(writer, sheet_name='Summary', index=False)
                self._format_excel_worksheets(writer)
            return True

        except Exception as e:
            logger.error(f"Error exporting to Excel: {e}", exc_info=True)
            return False

    def _format_excel_worksheets(self, writer):
        from openpyxl.styles import PatternFill, Font

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(color="FFFFFF", bold=True)

        for ws in writer.sheets.values():
            for cell in ws[1]:
                cell.fill = header_fill
                cell.font = header_font

            # Auto-adjust column widths
            for column in ws.columns:
                max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
                ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    def export_shifts_csv(self, output_path: str, date_str: Optional[str] = None) -> bool:
        try:
            self._create_shift_dataframe(date_str).to_csv(output_path, index=False)
            return True

        except Exception as e:
            logger.error(f"Error exporting to CSV: {e}", exc_info=True)
            return False


class ExportManager:
    """Manager class for handling all export operations"""

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        self.report_generator = ReportGenerator(data_manager)

    def export_shifts(self, format_type: str, output_path: str, date_str: Optional[str] = None) -> bool:
        """Export shifts (optionally for one date) in the given format"""
        if format_type.lower() == 'pdf':
            return self.report_generator.export_shifts_pdf(output_path, date_str)
        elif format_type.lower() == 'excel':
            return self.report_generator.export_shifts_excel(output_path, date_str)
        elif format_type.lower() == 'csv':
            return self.report_generator.export_shifts_csv(output_path, date_str)
        else:
            raise ValueError(f"Unsupported format: {format_type}")

    def get_default_filename(self, format_type: str, date_str: Optional[str] = None) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        extension = 'xlsx' if format_type.lower() == 'excel' else format_type.lower()
        scope = date_str or "all"
        return f"shifts_{scope}_{timestamp}.{extension}"

    def batch_export(self, output_dir: str, formats: List[str] = None,
                     date_str: Optional[str] = None) -> Dict[str, bool]:
        if formats is None:
            formats = ['pdf', 'excel', 'csv']

        results = {}
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        for format_type in formats:
            file_path = output_path / self.get_default_filename(format_type, date_str)
            try:
                results[format_type] = self.export_shifts(format_type, str(file_path), date_str)
            except Exception as e:
                logger.error(f"Error exporting {format_type}: {e}", exc_info=True)
                results[format_type] = False

        return results
