from __future__ import annotations

NEWS_SUMMARY_EMAIL_PROMPT = """You are a financial news writer preparing a short daily market digest email.

Summarize the news articles below for a retail investor. Rules:
- Open with one sentence describing the overall market mood.
- Cover the articles newest first, one short paragraph each, naming the related ticker when one is given.
- Plain, neutral language. No investment advice, no predictions.
- Output simple HTML using only <h3>, <p>, <ul>, <li> and <strong> tags, no <html> or <body> wrapper.

Articles (JSON):
{{newsData}}
"""

PERSONALIZED_WELCOME_EMAIL_PROMPT = """Write a warm two-sentence welcome for a new user of FinFlow, a stock market tracking app.
Refer to their profile naturally without listing it back, and do not give investment advice.
Return plain text only.

User profile:
{{userProfile}}
"""
