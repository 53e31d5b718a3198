from typing import Dict, List
from fastapi.responses import StreamingResponse
from io import BytesIO, StringIO
import pandas as pd

from shared.core.schemas import ExportResponse

EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _build_frame(data: List[Dict], column_map: Dict[str, str] | None = None) -> pd.DataFrame:
    rows = [dict(row) for row in data] or [{}]

    # Fill missing keys to avoid KeyError
    if column_map:
        for row in rows:
            for key in column_map.keys():
                row.setdefault(key, None)

    df = pd.DataFrame(rows)

    if column_map:
        df = df.rename(columns=column_map)
        existing_columns = [
            col for col in column_map.values() if col in df.columns]
        df = df[existing_columns]

    return df


def export_to_excel(
    data: List[Dict],
    filename: str = "export.xlsx",
    column_map: Dict[str, str] | None = None,
) -> ExportResponse:
    """
    Shape rows for a client-side download with friendly headers.

    Args:
        data: List of dictionaries (each dict = row)
        filename: Name the client should save the file as
        column_map: Mapping of data keys -> friendly column names
    """
    df = _build_frame(data, column_map)
    records = df.astype(object).where(pd.notnull(df), None).to_dict(orient="records")
    if not data:
        records = []
    return ExportResponse(filename=filename, data=records)


def dataframe_bytes(df: pd.DataFrame, file_format: str) -> bytes:
    if file_format == "csv":
        return df.to_csv(index=False).encode("utf-8")

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Data")
    return output.getvalue()


def export_file_response(
    data: List[Dict],
    filename: str,
    file_format: str = "xlsx",
    column_map: Dict[str, str] | None = None,
) -> StreamingResponse:
    """Render rows as a CSV or Excel attachment."""
    df = _build_frame(data, column_map)
    if not data:
        df = df.iloc[0:0]

    media_type = "text/csv" if file_format == "csv" else EXCEL_MEDIA_TYPE
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"'
    }
    return StreamingResponse(
        BytesIO(dataframe_bytes(df, file_format)),
        media_type=media_type,
        headers=headers,
    )


def read_csv_rows(content: bytes | str, header_map: Dict[str, str] | None = None) -> List[Dict[str, str]]:
    """
    Parse CSV text into row dicts keyed by normalized header.

    Headers found in ``header_map`` are renamed; any other header is
    lower-cased with whitespace collapsed to underscores. Every cell is
    read as text, blank cells become "".
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig")

    df = pd.read_csv(StringIO(content), dtype=str,
                     keep_default_na=False, skip_blank_lines=True)

    header_map = header_map or {}

    def normalize(header: str) -> str:
        header = str(header).strip()
        return header_map.get(header) or "_".join(header.lower().split())

    df = df.rename(columns=normalize)
    return df.to_dict(orient="records")
