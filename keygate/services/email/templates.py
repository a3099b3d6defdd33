"""HTML email templates."""

from __future__ import annotations

from html import escape

_CONFIRMATION_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Confirm Your Email</title>
</head>
<body style="margin:0;padding:0;font-family:Arial,sans-serif;background-color:#f4f4f4;">
  <table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 0;">
    <tr><td align="center">
      <table width="600" cellpadding="0" cellspacing="0" style="background-color:#ffffff;border-radius:8px;">
        <tr><td style="padding:40px;">
          <h2 style="color:#333333;">Welcome, {name}!</h2>
          <p style="color:#666666;font-size:16px;">
            Please verify your email address to finish setting up your World Cup API account.
          </p>
          <p style="text-align:center;margin:30px 0;">
            <a href="{link}" style="padding:14px 40px;background:#667eea;color:#ffffff;text-decoration:none;border-radius:6px;">
              Verify Email Address
            </a>
          </p>
          <p style="color:#666666;font-size:14px;">If the button doesn't work, copy this link into your browser:</p>
          <p style="color:#667eea;font-size:14px;word-break:break-all;">{link}</p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>
"""


def email_confirmation(user_name: str, confirmation_link: str) -> str:
    """Render the email confirmation message."""
    return _CONFIRMATION_TEMPLATE.format(
        name=escape(user_name or "there"),
        link=escape(confirmation_link, quote=True),
    )
