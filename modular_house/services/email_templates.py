from jinja2 import Environment, select_autoescape

# Autoescape everything rendered as HTML, enquiry fields are untrusted input
_html = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
_text = Environment(autoescape=False)

INTERNAL_SUBJECT = "New enquiry from {{ first_name }} {{ last_name or '' }}"

INTERNAL_TEXT = """\
New enquiry received{% if quote_number %} (quote {{ quote_number }}){% endif %}.

Name: {{ first_name }} {{ last_name or '' }}
Email: {{ email }}
Phone: {{ phone }}
Address: {{ address or '-' }}
Eircode: {{ eircode or '-' }}
Product: {{ preferred_product or '-' }}
Source page: {{ source_page_slug }}
Submission ID: {{ submission_id }}

Message:
{{ message or '(no message)' }}
"""

INTERNAL_HTML = """\
<h2>New enquiry{% if quote_number %} &ndash; {{ quote_number }}{% endif %}</h2>
<table>
  <tr><th align="left">Name</th><td>{{ first_name }} {{ last_name or '' }}</td></tr>
  <tr><th align="left">Email</th><td>{{ email }}</td></tr>
  <tr><th align="left">Phone</th><td>{{ phone }}</td></tr>
  <tr><th align="left">Address</th><td>{{ address or '-' }}</td></tr>
  <tr><th align="left">Eircode</th><td>{{ eircode or '-' }}</td></tr>
  <tr><th align="left">Product</th><td>{{ preferred_product or '-' }}</td></tr>
  <tr><th align="left">Source page</th><td>{{ source_page_slug }}</td></tr>
</table>
<p>{{ message or '(no message)' }}</p>
<p style="color:#888">Submission {{ submission_id }}</p>
"""

CUSTOMER_SUBJECT = "Thank you for your enquiry"

CUSTOMER_TEXT = """\
Hi {{ first_name }},

Thank you for contacting Modular House. We have received your enquiry{% if preferred_product %} about our {{ preferred_product }}{% endif %} and a member of our team will be in touch shortly.
{% if quote_number %}
Your reference number is {{ quote_number }}.
{% endif %}
Kind regards,
The Modular House team
"""

CUSTOMER_HTML = """\
<p>Hi {{ first_name }},</p>
<p>Thank you for contacting Modular House. We have received your enquiry{% if preferred_product %} about our {{ preferred_product }}{% endif %} and a member of our team will be in touch shortly.</p>
{% if quote_number %}<p>Your reference number is <strong>{{ quote_number }}</strong>.</p>{% endif %}
<p>Kind regards,<br>The Modular House team</p>
"""


def render(template: str, html: bool = False, **variables) -> str:
    env = _html if html else _text
    return env.from_string(template).render(**variables)


def render_internal(variables: dict) -> tuple:
    return (
        render(INTERNAL_SUBJECT, **variables).strip(),
        render(INTERNAL_TEXT, **variables),
        render(INTERNAL_HTML, html=True, **variables),
    )


def render_customer(variables: dict) -> tuple:
    return (
        render(CUSTOMER_SUBJECT, **variables),
        render(CUSTOMER_TEXT, **variables),
        render(CUSTOMER_HTML, html=True, **variables),
    )
