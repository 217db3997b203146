"""Images de remplacement (SVG) quand aucune image réelle n'est disponible."""

from __future__ import annotations

import base64

MAX_LABEL_LENGTH = 30


def create_placeholder(asset_type: str, description: str, width: int = 400, height: int = 600) -> str:
    """
    Construit une image SVG de remplacement encodée en data URI.

    Args:
        asset_type: Type affiché en majuscules
        description: Description, tronquée au-delà de 30 caractères
        width: Largeur en pixels
        height: Hauteur en pixels

    Returns:
        "data:image/svg+xml;base64,..."
    """
    label = description if len(description) <= MAX_LABEL_LENGTH else description[:MAX_LABEL_LENGTH] + "..."
    label = label.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    kind = str(getattr(asset_type, "value", asset_type)).upper()

    svg = f"""<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="grad" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" style="stop-color:#f8fafc;stop-opacity:1" />
      <stop offset="100%" style="stop-color:#e2e8f0;stop-opacity:1" />
    </linearGradient>
  </defs>
  <rect width="100%" height="100%" fill="url(#grad)"/>
  <circle cx="{width // 2}" cy="{height // 2 - 50}" r="40" fill="#cbd5e1"/>
  <rect x="{width // 2 - 60}" y="{height // 2 + 10}" width="120" height="80" rx="10" fill="#cbd5e1"/>
  <text x="50%" y="{height - 80}" font-family="Arial, sans-serif" font-size="16" fill="#475569" text-anchor="middle" font-weight="bold">{kind}</text>
  <text x="50%" y="{height - 50}" font-family="Arial, sans-serif" font-size="12" fill="#64748b" text-anchor="middle">{label}</text>
</svg>"""

    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
