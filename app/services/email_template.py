"""Rendering of the notification email sent for each contact submission."""

from __future__ import annotations

from datetime import datetime
from html import escape

from app.services.submission_gate import SanitizedSubmission

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <style>
      body {{ font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; }}
      .header {{ color: #2563eb; border-bottom: 2px solid #2563eb; padding-bottom: 10px; }}
      .content {{ background: #f8fafc; padding: 20px; border-radius: 10px; margin: 20px 0; }}
      .field {{ margin: 10px 0; }}
      .label {{ font-weight: bold; color: #374151; }}
      .message-box {{ background: white; padding: 15px; border-radius: 5px; margin-top: 5px; white-space: pre-wrap; }}
    </style>
  </head>
  <body>
    <div class="header">
      <h2>New Contact Form Submission</h2>
    </div>
    <div class="content">
      <div class="field"><span class="label">Name:</span> {name}</div>
      <div class="field"><span class="label">Email:</span> <a href="mailto:{email}">{email}</a></div>
      <div class="field"><span class="label">Phone:</span> {phone}</div>
      <div class="field"><span class="label">Package:</span> {package}</div>
      <div class="field"><span class="label">Message:</span></div>
      <div class="message-box">{message}</div>
      <div class="field" style="margin-top: 15px; padding-top: 15px; border-top: 1px solid #e5e7eb;">
        <span class="label">Time:</span> {submitted_at}<br>
        <span class="label">IP:</span> {client_id}
      </div>
    </div>
    <p style="color: #64748b; text-align: center; margin-top: 20px;">
      <em>Sent via {brand} Website</em>
    </p>
  </body>
</html>
"""


def format_submitted_at(moment: datetime) -> str:
    """Format like the en-GB locale: ``18/10/2026, 14:05:09``."""
    return moment.strftime("%d/%m/%Y, %H:%M:%S")


def build_subject(submission: SanitizedSubmission) -> str:
    return f"New Contact: {submission.name} - {submission.package}"


def render_html(
    submission: SanitizedSubmission,
    *,
    client_id: str,
    submitted_at: datetime,
    brand: str,
) -> str:
    """Render the HTML body.

    User-supplied values are HTML-escaped; the message box keeps the
    original whitespace via ``white-space: pre-wrap``.
    """
    return _HTML_TEMPLATE.format(
        name=escape(submission.name),
        email=escape(submission.email),
        phone=escape(submission.phone),
        package=escape(submission.package),
        message=escape(submission.message),
        submitted_at=format_submitted_at(submitted_at),
        client_id=escape(client_id),
        brand=escape(brand),
    )
