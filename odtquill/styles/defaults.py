"""Default styles every generated document can rely on."""

HEADING_STYLE_TEMPLATE = "Heading_20_{level}"

HEADING_PROPERTIES = {
    "fo:font-weight": "bold",
    "fo:margin-top": "0.5cm",
    "fo:margin-bottom": "0.3cm",
}

BULLET_LIST_STYLE = "Bullet_20_Symbol"
NUMBER_LIST_STYLE = "Numbering_20_Symbol"

ALIGN_PARAGRAPH_STYLES = {
    "left": "LeftPara",
    "center": "CenterPara",
    "right": "RightPara",
    "justify": "JustifyPara",
}

# name -> (display name, mapped paragraph properties)
DEFAULT_PARAGRAPH_STYLES = {
    "LeftPara": ("Left Paragraph", {"fo:text-align": "start"}),
    "CenterPara": ("Center Paragraph", {"fo:text-align": "center"}),
    "RightPara": ("Right Paragraph", {"fo:text-align": "end"}),
    "JustifyPara": ("Justify Paragraph", {"fo:text-align": "justify"}),
    "Quote": (
        "Quote",
        {
            "fo:margin-left": "1cm",
            "fo:margin-right": "1cm",
            "fo:margin-bottom": "0.25cm",
            "fo:font-style": "italic",
        },
    ),
}


def heading_style_name(level: int) -> str:
    """Paragraph style used for heading ``level`` (clamped to 1..6)."""
    level = min(max(int(level), 1), 6)
    return HEADING_STYLE_TEMPLATE.format(level=level)


def align_paragraph_style(align: str) -> str:
    return ALIGN_PARAGRAPH_STYLES.get(str(align).strip().lower(), "LeftPara")
