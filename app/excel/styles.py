"""
Colors, fonts, fills and borders for the exported class workbook.
"""
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

NAVY = "1F2A44"
MUTED = "666666"
GRID = "CCCCCC"
TOTAL_EDGE = "999999"


def _font(size: int, color: str = "000000", **kw) -> Font:
    return Font(name="Calibri", size=size, color=color, **kw)


def _solid(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _box(color: str, top: str = "thin", bottom: str = "thin") -> Border:
    edge = Side(style="thin", color=color)
    return Border(left=edge, right=edge, top=Side(style=top, color=color), bottom=Side(style=bottom, color=color))


# Fonts
TITLE_FONT = _font(24, NAVY, bold=True)
SUBTITLE_FONT = _font(12, MUTED, italic=True)
SECTION_FONT = _font(14, NAVY, bold=True)
HEADER_FONT = _font(11, "FFFFFF", bold=True)
CELL_FONT = _font(10)
TOTAL_FONT = _font(10, bold=True)
KPI_VALUE_FONT = _font(28, NAVY, bold=True)
KPI_LABEL_FONT = _font(10, MUTED)

# Fills
HEADER_FILL = _solid(NAVY)
STRIPE_FILL = _solid("F5F5F5")
TOTAL_FILL = _solid("E3F2FD")

# Borders
CELL_BORDER = _box(GRID)
HEADER_BORDER = _box(NAVY, bottom="medium")
TOTAL_BORDER = _box(TOTAL_EDGE, top="medium", bottom="medium")

# Alignments
CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")

# Row shading by fill rate (percent of capacity)
FILL_RATE_BANDS = (
    (80.0, _solid("E8F5E9")),   # busy
    (50.0, _solid("FFF3E0")),   # half full
)
