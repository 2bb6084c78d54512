"""
HTML templates for transactional emails.

Placeholders use ``{{name}}`` (dotted paths allowed), with
``{{#if flag}}...{{/if}}`` and ``{{#each items}}...{{/each}}`` blocks.
Substituted values are HTML-escaped; unknown placeholders render empty.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from html import escape
from typing import Any

_EACH_BLOCK = re.compile(r"{{#each\s+([\w.]+)}}(.*?){{/each}}", re.DOTALL)
_IF_BLOCK = re.compile(r"{{#if\s+([\w.]+)}}(.*?){{/if}}", re.DOTALL)
_PLACEHOLDER = re.compile(r"{{\s*([\w.]+)\s*}}")

BASE_STYLES = """
<style>
  body { font-family: 'Helvetica Neue', Arial, sans-serif; line-height: 1.6; color: #333;
         margin: 0; padding: 0; background-color: #f4f4f4; }
  .container { max-width: 600px; margin: 0 auto; background: #ffffff; }
  .header { background: #1f2937; color: #ffffff; padding: 30px 20px; text-align: center; }
  .content { padding: 30px 20px; }
  .highlight { background: #f8f9fa; border-left: 4px solid #2563eb; padding: 15px; margin: 20px 0; }
  .btn { display: inline-block; padding: 12px 24px; background: #2563eb; color: #ffffff;
         text-decoration: none; border-radius: 6px; }
  .otp { font-size: 32px; letter-spacing: 8px; font-weight: bold; text-align: center; }
  .footer { padding: 20px; text-align: center; color: #6c757d; font-size: 14px; }
  .footer a { margin: 0 10px; color: #6c757d; text-decoration: none; }
</style>
"""

_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  {styles}
</head>
<body>
  <div class="container">
{body}
    <div class="footer">
      <p>Best regards,<br><strong>The MotorTrace Team</strong></p>
      <a href="{{{{support_link}}}}">Support</a>
      <a href="{{{{website_link}}}}">Website</a>
    </div>
  </div>
</body>
</html>
"""


def _layout(title: str, body: str) -> str:
    return _LAYOUT.format(title=title, styles=BASE_STYLES, body=body)


TEMPLATES: dict[str, str] = {
    "welcome": _layout(
        "Welcome to MotorTrace",
        """
    <div class="header"><h1>Welcome to MotorTrace!</h1></div>
    <div class="content">
      <h2>Hello {{name}}!</h2>
      <p>We're thrilled to have you join our community.</p>
      <div class="highlight">
        <p><strong>What's next?</strong></p>
        <p>Complete your profile setup, then explore the dashboard.</p>
      </div>
      <a href="{{onboarding_link}}" class="btn">Get Started</a>
      <p>Questions? Reply to this email or write to {{support_email}}.</p>
    </div>""",
    ),
    "login": _layout(
        "Login Alert - MotorTrace",
        """
    <div class="header"><h1>New sign-in to your account</h1></div>
    <div class="content">
      <p>Hello {{name}},</p>
      <p>We noticed a new sign-in to your MotorTrace account.</p>
      <div class="highlight">
        <p><strong>Time:</strong> {{timestamp}}<br>
        <strong>Location:</strong> {{location}}<br>
        <strong>Device:</strong> {{device}}<br>
        <strong>IP address:</strong> {{ip}}</p>
      </div>
      <p>If this wasn't you, reset your password right away and contact {{support_email}}.</p>
    </div>""",
    ),
    "notification": _layout(
        "{{title}}",
        """
    <div class="header"><h1>{{title}}</h1></div>
    <div class="content">
      {{#if subtitle}}<h2>{{subtitle}}</h2>{{/if}}
      <p>{{message}}</p>
      {{#if action_link}}<a href="{{action_link}}" class="btn">{{action_text}}</a>{{/if}}
      {{#if items}}<ul>{{#each items}}<li>{{label}}: {{value}}</li>{{/each}}</ul>{{/if}}
      <p>{{signature}}</p>
    </div>""",
    ),
    "reset": _layout(
        "Password Reset Request",
        """
    <div class="header"><h1>Password reset</h1></div>
    <div class="content">
      <p>Use this one-time code to reset your password:</p>
      <p class="otp">{{otp}}</p>
      <div class="highlight">
        <p>The code expires in {{expiry_minutes}} minutes. If you didn't request a reset,
        you can safely ignore this email.</p>
      </div>
    </div>""",
    ),
}


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _substitute(template: str, data: Mapping[str, Any]) -> str:
    def replace(match: re.Match[str]) -> str:
        value = _lookup(data, match.group(1))
        return "" if value is None else escape(str(value))

    return _PLACEHOLDER.sub(replace, template)


def render_string(template: str, data: Mapping[str, Any]) -> str:
    """Render an arbitrary template string against ``data``."""

    def render_each(match: re.Match[str]) -> str:
        items = _lookup(data, match.group(1))
        if not isinstance(items, list):
            return ""
        parts = []
        for item in items:
            scope = {**data, **item} if isinstance(item, Mapping) else {**data, "this": item}
            parts.append(_substitute(match.group(2), scope))
        return "".join(parts)

    def render_if(match: re.Match[str]) -> str:
        return match.group(2) if _lookup(data, match.group(1)) else ""

    rendered = _EACH_BLOCK.sub(render_each, template)
    rendered = _IF_BLOCK.sub(render_if, rendered)
    return _substitute(rendered, data)


def render_template(name: str, data: Mapping[str, Any]) -> str:
    """Render one of the named ``TEMPLATES``."""
    try:
        template = TEMPLATES[name]
    except KeyError as exc:
        raise KeyError(f"Unknown email template: {name}") from exc
    return render_string(template, data)
