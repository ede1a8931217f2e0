"""Preview pages served to link-unfurling crawlers

Crawlers (Facebook, Twitter, Slack, ...) often don't follow HTTP redirects when
building link previews. They get a small HTML document instead, which carries
Open Graph tags for the target URL and redirects regular browsers client-side.
"""

import html

from edgeshortener.constants import CRAWLER_SIGNATURES


PREVIEW_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <meta property="og:url" content="{url}" />
    <meta property="og:type" content="website" />
    <meta name="robots" content="noindex, nofollow" />
    <script>
      window.location.replace('{url}');
    </script>
    <noscript>
      <meta http-equiv="refresh" content="0;url={url}" />
    </noscript>
  </head>
  <body>
    <p>Redirecting to <a href="{url}">{url}</a>...</p>
  </body>
</html>"""


def is_crawler(user_agent: str | None) -> bool:
    """Return True if the user agent matches a known link-unfurling crawler (case-insensitive)."""
    if not user_agent:
        return False
    ua = user_agent.lower()
    return any(signature in ua for signature in CRAWLER_SIGNATURES)


def render_preview(target_url: str, title: str = 'edgeshortener') -> str:
    """Render the preview document for `target_url`

    The URL is HTML-escaped (quotes included), so it is safe inside both
    attribute values and the inline script's single-quoted string.
    """
    return PREVIEW_TEMPLATE.format(url=html.escape(target_url, quote=True), title=html.escape(title))
