import importlib
from pathlib import Path
from typing import Any, Literal, TypedDict

from jinja2 import Environment, FileSystemLoader, select_autoescape

TemplateType = Literal["verification_code"]
LocaleType = Literal["en", "zh"]

DEFAULT_LOCALE: LocaleType = "zh"


class EmailData(TypedDict):
    html: str
    subject: str


TEMPLATE_DIR = Path(__file__).parent / "template"

jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_email(
    template_name: TemplateType,
    locale: str = DEFAULT_LOCALE,
    **context: Any,
) -> EmailData:
    """Render ``template/<name>/<name>.html`` with the locale's copy."""
    translations_module = importlib.import_module(
        f"src.emails.template.{template_name}.translations"
    )
    default_translations = translations_module.DEFAULT_TRANSLATIONS

    translations = default_translations.get(
        locale, default_translations[DEFAULT_LOCALE]
    )

    template = jinja_env.get_template(f"{template_name}/{template_name}.html")

    html_content = template.render(translations=translations, **context)

    return EmailData(html=html_content, subject=translations["subject"])
