"""
CSV download responses
"""
import urllib.parse

from fastapi.responses import StreamingResponse


def csv_response(content: str, filename: str) -> StreamingResponse:
    # BOM so spreadsheet apps pick up UTF-8
    response = StreamingResponse(
        iter(["\ufeff" + content]),
        media_type="text/csv; charset=utf-8"
    )
    encoded_filename = urllib.parse.quote(filename)
    response.headers["Content-Disposition"] = f"attachment; filename*=UTF-8''{encoded_filename}"
    return response
