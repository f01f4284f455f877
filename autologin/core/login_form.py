"""
Login Form Extraction

Parses a login page into the form's action, method and the field values a
browser would submit alongside the credentials.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..config import ClientConfig

logger = logging.getLogger(__name__)


FieldValue = Union[str, int, float, bool]

BUTTON_TYPES = ('submit', 'button')


@dataclass
class LoginForm:
    """Structured view of a login form"""
    action: Optional[str] = None
    method: str = "get"
    fields: Dict[str, FieldValue] = field(default_factory=dict)


def _is_button(element: Tag) -> bool:
    if element.name == 'button':
        # <button> without a type submits the form
        return (element.get('type') or 'submit').lower() in BUTTON_TYPES
    return (element.get('type') or '').lower() in BUTTON_TYPES


def _element_value(element: Tag) -> str:
    if element.name == 'textarea':
        return element.get_text()
    if element.name == 'select':
        option = element.find('option', selected=True) or element.find('option')
        if option is None:
            return ''
        return option.get('value', option.get_text(strip=True))
    return element.get('value', '')


class LoginFormExtractor:
    """
    Extracts a LoginForm using CSS selectors.

    Submit/button controls are only kept when they are the sole such control
    or their name mentions "login", so a secondary button (e.g. "clear") is
    not posted with the credentials. Controls are counted over the whole
    form element. Forms with several same-named buttons and no "login" in
    any name lose all of them.
    """

    def __init__(self, form_selector: str = "form", input_selector: Optional[str] = None):
        self.form_selector = form_selector
        self.input_selector = input_selector or f"{form_selector} input"

    @classmethod
    def from_config(cls, config: ClientConfig) -> "LoginFormExtractor":
        return cls(config.login_form_selector, config.login_form_input_selector)

    def extract(self, html: str) -> LoginForm:
        soup = BeautifulSoup(html, 'html.parser')

        form = soup.select_one(self.form_selector)
        if form is None:
            logger.warning(f"No element matches login form selector {self.form_selector!r}")
            action = None
            method = None
        else:
            action = form.get('action')
            method = form.get('method')

        elements: List[Tag] = soup.select(self.input_selector)
        # Buttons are counted over the whole form, not just the matched inputs
        controls = form.select('input, button') if form is not None else elements
        button_count = sum(1 for el in controls if _is_button(el))

        fields: Dict[str, FieldValue] = {}
        for element in elements:
            name = element.get('name')
            if not name:
                continue
            if _is_button(element) and button_count > 1 and 'login' not in name.lower():
                logger.debug(f"Skipping secondary form button {name!r}")
                continue
            fields[name] = _element_value(element)

        return LoginForm(
            action=action or None,
            method=(method or "get").lower(),
            fields=fields,
        )
