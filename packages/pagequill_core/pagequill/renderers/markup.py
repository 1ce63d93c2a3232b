"""
Self-contained HTML documents for the remote rendering service.

The service renders in its own headless browser, so everything the content
needs (utility CSS, KaTeX stylesheet) is referenced from public CDNs.
"""

from html import escape

TAILWIND_CDN = "https://cdn.tailwindcss.com"
KATEX_CSS_CDN = "https://cdn.jsdelivr.net/npm/katex@0.16.9/dist/katex.min.css"
KATEX_CSS_INTEGRITY = "sha384-n8MVd4RsNIU0tAv4ct0nTaAbDJwPJzDEaqSD1odI+WdtXRGWt2kTvGFasHpSy3SV"

BASE_STYLES = """
    body {
      font-family: sans-serif;
      background-color: #ffffff !important;
      -webkit-print-color-adjust: exact;
      print-color-adjust: exact;
    }
    .katex-display { font-size: 1.05em; }
"""

# Units are laid out one per printed page by the service
SLIDE_STYLES = """
    .grid { display: block !important; }
    .slide-card {
      width: 600px !important;
      page-break-after: always;
      border: 1px solid #e2e8f0;
      box-shadow: 0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1);
      border-radius: 0.5rem;
      background-color: #ffffff;
      padding: 1.5rem;
      margin-bottom: 2rem;
    }
"""


def build_html_document(content_html: str, title: str, custom_styles: str = "") -> str:
    """
    Wrap a content snapshot in a complete HTML document.

    Args:
        content_html: Inner or outer HTML of the rendered content
        title: Document title
        custom_styles: Extra CSS appended after the base styles

    Returns:
        HTML string
    """
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>{escape(title)}</title>
  <script src="{TAILWIND_CDN}"></script>
  <link rel="stylesheet" href="{KATEX_CSS_CDN}" integrity="{KATEX_CSS_INTEGRITY}" crossorigin="anonymous">
  <style>{BASE_STYLES}{custom_styles}
  </style>
</head>
<body class="bg-white p-8">
{content_html}
</body>
</html>
"""
