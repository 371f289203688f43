from __future__ import annotations

from html import escape

NEWS_SUMMARY_EMAIL_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<body style="margin:0;padding:0;background:#050505;font-family:Arial,Helvetica,sans-serif;color:#CCDADC;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
    <tr><td align="center" style="padding:32px 16px;">
      <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background:#141414;border-radius:8px;">
        <tr><td style="padding:32px;">
          <h1 style="color:#FDD458;font-size:22px;margin:0 0 8px;">Market News Summary Today</h1>
          <p style="color:#9095A1;font-size:14px;margin:0 0 24px;">{{date}}</p>
          <div style="font-size:15px;line-height:1.6;">{{newsContent}}</div>
          <p style="color:#6B7280;font-size:12px;margin-top:32px;">
            You are receiving this email because you subscribed to FinFlow daily news.
          </p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>
"""

WELCOME_EMAIL_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<body style="margin:0;padding:0;background:#050505;font-family:Arial,Helvetica,sans-serif;color:#CCDADC;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
    <tr><td align="center" style="padding:32px 16px;">
      <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background:#141414;border-radius:8px;">
        <tr><td style="padding:32px;">
          <h1 style="color:#FDD458;font-size:22px;margin:0 0 16px;">Welcome aboard, {{name}}</h1>
          <p style="font-size:15px;line-height:1.6;">{{intro}}</p>
          <p style="font-size:15px;line-height:1.6;">
            Add a few tickers to your watchlist and your daily digest will follow them.
          </p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>
"""


def render_news_summary_email(news_content: str, date: str) -> str:
    # news_content is model-generated HTML and is embedded as-is
    return NEWS_SUMMARY_EMAIL_TEMPLATE.replace("{{date}}", escape(date)).replace("{{newsContent}}", news_content)


def render_welcome_email(name: str, intro: str) -> str:
    return WELCOME_EMAIL_TEMPLATE.replace("{{name}}", escape(name)).replace("{{intro}}", escape(intro))
