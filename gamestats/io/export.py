import logging
from io import BytesIO

import pandas as pd

logger = logging.getLogger(__name__)


def export_csv(text):
    # Codec output already carries the BOM.
    return text.encode("utf-8")


def export_to_excel(df, sheet_name="Data"):
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    logger.info("Exported %d row(s) to Excel sheet %r", len(df), sheet_name)
    return buffer.getvalue()
