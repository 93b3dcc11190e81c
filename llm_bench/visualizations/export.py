"""Export benchmark records as JSON, CSV and Excel downloads.

CSV layout (one section per block, blocks separated by an empty line)::

    LLM Benchmark Results
    Benchmark ID,<id>
    Date,<createdAt ISO 8601>

    Test Configuration
    Parameter,Value
    Model / URL / Concurrent Users / Spawn Rate / Duration (seconds) /
    Tokenizer / Dataset / Status / Notes / Favorite      (one row each)

    <Metric title> (<unit>)        for each of time_to_first_token,
    Average,Median,Min,Max         end_to_end_latency, inter_token_latency,
    <avg>,<median>,<min>,<max>     token_speed, in that order

    Throughput (tokens/s)
    Input,Output
    <input>,<output>

The layout depends only on the record, so exporting the same record twice
yields identical text.
"""

import csv
import io
import json
import logging
from pathlib import Path
from typing import List, Union

from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference
from openpyxl.styles import Alignment, Font, PatternFill

from ..core.schema import FOUR_STAT_METRICS, BenchmarkRecord, validate_record
from .charts import FOUR_STAT_LABELS, METRIC_KINDS, chart_series, performance_scores

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Not specified"


def _configuration_rows(record: BenchmarkRecord) -> List[List[object]]:
    return [
        ["Model", record.model or NOT_SPECIFIED],
        ["URL", record.url],
        ["Concurrent Users", record.user],
        ["Spawn Rate", record.spawnrate],
        ["Duration (seconds)", record.duration],
        ["Tokenizer", record.tokenizer or NOT_SPECIFIED],
        ["Dataset", record.dataset],
        ["Status", record.status],
        ["Notes", record.notes or ""],
        ["Favorite", "yes" if record.favorite else "no"],
    ]


def to_csv(record: BenchmarkRecord) -> str:
    """Render a record as the flat CSV report described in the module docstring."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["LLM Benchmark Results"])
    writer.writerow(["Benchmark ID", record.id])
    writer.writerow(["Date", record.created_at.isoformat()])
    writer.writerow([])

    writer.writerow(["Test Configuration"])
    writer.writerow(["Parameter", "Value"])
    writer.writerows(_configuration_rows(record))

    metrics = record.results.metrics
    for key in FOUR_STAT_METRICS:
        info = METRIC_KINDS[key]
        stat = getattr(metrics, key)
        writer.writerow([])
        writer.writerow([f"{info.title} ({info.unit})"])
        writer.writerow(FOUR_STAT_LABELS)
        writer.writerow([stat.average, stat.median, stat.minimum, stat.maximum])

    writer.writerow([])
    writer.writerow(["Throughput (tokens/s)"])
    writer.writerow(["Input", "Output"])
    writer.writerow(
        [
            metrics.throughput.input_tokens_per_second,
            metrics.throughput.output_tokens_per_second,
        ]
    )
    return buffer.getvalue()


def to_json(record: BenchmarkRecord) -> str:
    """Pretty-printed, lossless JSON for a record (``createdAt`` naming)."""
    return record.model_dump_json(by_alias=True, indent=2)


def parse_json(text: Union[str, bytes]) -> BenchmarkRecord:
    """Inverse of :func:`to_json`."""
    return BenchmarkRecord.model_validate_json(text)


def load_record(path: Union[str, Path]) -> BenchmarkRecord:
    """Read a previously exported JSON record from disk."""
    content = Path(path).read_text(encoding="utf-8")
    return validate_record(json.loads(content))


class ExcelReportExporter:
    """
    Exports a benchmark record to an Excel workbook.

    Creates a workbook with:
    - A summary sheet with the run configuration and performance scores
    - A metrics sheet with one row per statistic and a bar chart per metric
    """

    HEADER_FONT = Font(bold=True, color="FFFFFF")
    HEADER_FILL = PatternFill(start_color="2E86AB", end_color="2E86AB", fill_type="solid")
    HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")

    def __init__(self):
        self.workbook = None

    def create_report(self, record: BenchmarkRecord, filename: Union[str, Path]) -> str:
        """
        Write the workbook for ``record`` to ``filename``.

        Returns:
            Path to created Excel file
        """
        self.workbook = self.build_workbook(record)
        filepath = Path(filename)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(filepath)
        logger.info(f"Excel report for benchmark {record.id} written to {filepath}")
        return str(filepath)

    def to_bytes(self, record: BenchmarkRecord) -> bytes:
        buffer = io.BytesIO()
        self.build_workbook(record).save(buffer)
        return buffer.getvalue()

    def build_workbook(self, record: BenchmarkRecord) -> Workbook:
        workbook = Workbook()
        workbook.remove(workbook.active)
        self._create_summary_sheet(workbook, record)
        self._create_metrics_sheet(workbook, record)
        return workbook

    def _style_header(self, cell) -> None:
        cell.font = self.HEADER_FONT
        cell.fill = self.HEADER_FILL
        cell.alignment = self.HEADER_ALIGNMENT

    def _create_summary_sheet(self, workbook: Workbook, record: BenchmarkRecord) -> None:
        ws = workbook.create_sheet("Summary", 0)

        ws["A1"] = f"Benchmark Report: {record.model or NOT_SPECIFIED}"
        ws["A1"].font = Font(size=16, bold=True, color="2E86AB")
        ws.merge_cells("A1:D1")

        row = 3
        for label, value in [["Benchmark ID", record.id], ["Date", record.created_at.isoformat()]]:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=2, value=value)
            row += 1

        row += 1
        for col, header in enumerate(["Parameter", "Value"], 1):
            self._style_header(ws.cell(row=row, column=col, value=header))
        row += 1
        for label, value in _configuration_rows(record):
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=2, value=value)
            row += 1

        row += 1
        for col, header in enumerate(["Score", "Value (0-100)"], 1):
            self._style_header(ws.cell(row=row, column=col, value=header))
        row += 1
        for name, score in performance_scores(record.results).items():
            ws.cell(row=row, column=1, value=name.replace("_", " ").title())
            cell = ws.cell(row=row, column=2, value=round(score, 1))
            cell.number_format = "0.0"
            row += 1

        ws.column_dimensions["A"].width = 22
        ws.column_dimensions["B"].width = 48

    def _create_metrics_sheet(self, workbook: Workbook, record: BenchmarkRecord) -> None:
        ws = workbook.create_sheet("Metrics")
        row = 1
        chart_anchor_row = 1

        for key, info in METRIC_KINDS.items():
            series = chart_series(record.results, key)
            ws.cell(row=row, column=1, value=f"{info.title} ({info.unit})").font = Font(
                size=12, bold=True, color=info.color
            )
            header_row = row + 1
            for col, label in enumerate(series.labels, 1):
                self._style_header(ws.cell(row=header_row, column=col, value=label))
            for col, value in enumerate(series.data, 1):
                ws.cell(row=header_row + 1, column=col, value=value).number_format = "0.000"

            chart = BarChart()
            chart.title = info.title
            chart.y_axis.title = info.unit
            data_ref = Reference(
                ws, min_col=1, max_col=len(series.data), min_row=header_row, max_row=header_row + 1
            )
            chart.add_data(data_ref, titles_from_data=True)
            chart.height = 6
            chart.width = 12
            ws.add_chart(chart, f"G{chart_anchor_row}")

            row = header_row + 3
            chart_anchor_row += 13
